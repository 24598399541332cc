"""Constrained placement of îlots.

For each size category (band 1 -> 4) the engine draws candidate units of
random area and aspect ratio and looks for a free position: first by
random sampling, then by a systematic grid scan. Every placed unit is
registered as an obstacle, so earlier categories constrain later ones.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Hashable, List, Optional, Protocol, Sequence, Tuple

import numpy as np

from ..geometry import BoundingBox, Point2D
from .obstacles import Obstacle, ObstacleSet
from .types import CategoryReport, Ilot, LayoutConfiguration, SizeCategory

logger = logging.getLogger(__name__)


# Share of the bounding box assumed usable for units (fixed design parameter)
USABLE_AREA_RATIO = 0.6
# Attempt cap per category, as a multiple of its target count
ATTEMPTS_PER_TARGET = 50
# Random positions tried before falling back to the grid scan
RANDOM_POSITION_SAMPLES = 100
# Distance kept free along the bounding box edges
BOUNDARY_MARGIN = 2.0
# Aspect ratio (height / width) range of candidate units
ASPECT_RATIO_RANGE = (0.6, 1.4)
# Grid step is min(width, height) / GRID_STEP_DIVISOR, never below MIN_GRID_STEP
GRID_STEP_DIVISOR = 8.0
MIN_GRID_STEP = 1.0

_EPSILON = 1e-9


class FreeSpace(Protocol):
    """Answers which candidate rectangles overlap no obstacle."""

    version: int

    def is_free(self, rect: BoundingBox) -> bool:
        ...

    def free_mask(
        self,
        min_x: np.ndarray,
        min_y: np.ndarray,
        max_x: np.ndarray,
        max_y: np.ndarray,
        region: Optional[BoundingBox] = None,
    ) -> np.ndarray:
        ...

    def known_unplaceable(self, key: Hashable, width: float, height: float) -> bool:
        ...

    def mark_unplaceable(self, key: Hashable, width: float, height: float) -> None:
        ...


class PositionStrategy(Protocol):
    """One phase of the position search."""

    def find(
        self,
        domain: BoundingBox,
        width: float,
        height: float,
        space: FreeSpace,
        rng: np.random.Generator,
    ) -> Optional[Point2D]:
        ...


def _origin_span(domain: BoundingBox, width: float, height: float) -> Optional[Tuple[float, float]]:
    """Free span of the unit origin inside the domain, None if the unit does not fit."""
    x_span = domain.width - width
    y_span = domain.height - height
    if x_span < 0 or y_span < 0:
        return None
    return (x_span, y_span)


class RandomSampleStrategy:
    """Tries uniformly random origins.

    All samples are drawn up front, so every call consumes the same
    amount of randomness whether or not a position is found. The first
    free sample in draw order wins.
    """

    def __init__(self, samples: int = RANDOM_POSITION_SAMPLES):
        self.samples = samples

    def find(
        self,
        domain: BoundingBox,
        width: float,
        height: float,
        space: FreeSpace,
        rng: np.random.Generator,
    ) -> Optional[Point2D]:
        span = _origin_span(domain, width, height)
        if span is None:
            return None

        draws = rng.random((self.samples, 2))
        xs = domain.min_x + draws[:, 0] * span[0]
        ys = domain.min_y + draws[:, 1] * span[1]
        free = np.flatnonzero(space.free_mask(xs, ys, xs + width, ys + height))
        if free.size == 0:
            return None
        first = free[0]
        return (float(xs[first]), float(ys[first]))


class GridScanStrategy:
    """Scans origins row by row on a regular lattice.

    The first free lattice point in row-major order (bottom row first) is
    returned. A failed scan is remembered by the obstacle set: until the
    next obstacle is added, a unit at least as wide and as tall on the
    same lattice cannot fit either, so its scan is skipped.
    """

    def __init__(self, divisor: float = GRID_STEP_DIVISOR, min_step: float = MIN_GRID_STEP):
        self.divisor = divisor
        self.min_step = min_step

    def step_for(self, width: float, height: float) -> float:
        return max(self.min_step, min(width, height) / self.divisor)

    def find(
        self,
        domain: BoundingBox,
        width: float,
        height: float,
        space: FreeSpace,
        rng: np.random.Generator,
    ) -> Optional[Point2D]:
        span = _origin_span(domain, width, height)
        if span is None:
            return None

        step = self.step_for(width, height)
        lattice = ("grid", domain.as_tuple(), step)
        if space.known_unplaceable(lattice, width, height):
            return None

        columns = int(math.floor(span[0] / step + _EPSILON))
        rows = int(math.floor(span[1] / step + _EPSILON))
        xs = domain.min_x + np.arange(columns + 1) * step

        for row in range(rows + 1):
            y = domain.min_y + row * step
            ys = np.full_like(xs, y)
            row_region = BoundingBox(xs[0], y, xs[-1] + width, y + height)
            free = np.flatnonzero(space.free_mask(xs, ys, xs + width, ys + height, region=row_region))
            if free.size:
                return (float(xs[free[0]]), y)

        space.mark_unplaceable(lattice, width, height)
        return None


class PositionFinder:
    """Runs position strategies in order until one finds a free origin."""

    def __init__(self, strategies: Sequence[PositionStrategy]):
        self.strategies = list(strategies)

    @classmethod
    def default(cls, grid_scan: bool = True) -> "PositionFinder":
        strategies: List[PositionStrategy] = [RandomSampleStrategy()]
        if grid_scan:
            strategies.append(GridScanStrategy())
        return cls(strategies)

    def find(
        self,
        domain: BoundingBox,
        width: float,
        height: float,
        space: FreeSpace,
        rng: np.random.Generator,
    ) -> Optional[Point2D]:
        for strategy in self.strategies:
            position = strategy.find(domain, width, height, space, rng)
            if position is not None:
                return position
        return None


def draw_dimensions(category: SizeCategory, rng: np.random.Generator) -> Tuple[float, float, float]:
    """Random (width, height, area) for a unit of the category."""
    area = rng.uniform(category.min_area, category.max_area)
    aspect_ratio = rng.uniform(*ASPECT_RATIO_RANGE)
    width = math.sqrt(area / aspect_ratio)
    height = area / width
    return width, height, area


def target_area_for(category: SizeCategory, bounds: BoundingBox) -> float:
    usable_area = bounds.area * USABLE_AREA_RATIO
    return usable_area * (category.target_percentage / 100.0)


def target_count_for(category: SizeCategory, bounds: BoundingBox) -> int:
    if category.average_area <= 0:
        return 0
    return max(0, int(math.floor(target_area_for(category, bounds) / category.average_area)))


@dataclass
class PlacementResult:
    """Units placed in one run, with a report per category."""

    ilots: List[Ilot] = field(default_factory=list)
    reports: List[CategoryReport] = field(default_factory=list)


class PlacementEngine:
    """Places îlots for every size category of a configuration."""

    def __init__(
        self,
        config: LayoutConfiguration,
        rng: Optional[np.random.Generator] = None,
        finder: Optional[PositionFinder] = None,
    ):
        """
        Initialize the placement engine.

        Args:
            config: Layout configuration of the run
            rng: Run-local random generator (seeded from config.seed if omitted)
            finder: Position search (random sampling then grid scan if omitted)
        """
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        self.finder = finder or PositionFinder.default(grid_scan=config.space_optimization)

    def place(self, bounds: BoundingBox, obstacle_set: ObstacleSet) -> PlacementResult:
        """
        Place units for all categories in band order.

        Args:
            bounds: Global bounding box of the plan
            obstacle_set: Obstacles of the run; placed units are appended to it

        Returns:
            PlacementResult with all units and per-category reports
        """
        result = PlacementResult()
        domain = bounds.shrink(BOUNDARY_MARGIN)
        if domain is None:
            logger.warning(f"Placement domain is empty for bounds {bounds.as_tuple()}")

        for category in self.config.size_categories():
            report = self._place_category(category, bounds, domain, obstacle_set, result.ilots)
            result.reports.append(report)

        logger.info(f"Placed {len(result.ilots)} ilots in {len(result.reports)} categories")
        return result

    def _place_category(
        self,
        category: SizeCategory,
        bounds: BoundingBox,
        domain: Optional[BoundingBox],
        obstacle_set: ObstacleSet,
        ilots: List[Ilot],
    ) -> CategoryReport:
        report = CategoryReport(
            category=category,
            target_area=target_area_for(category, bounds),
            target_count=target_count_for(category, bounds),
        )
        if domain is None or report.target_count == 0:
            return report

        max_attempts = report.target_count * ATTEMPTS_PER_TARGET
        failure_limit = self.config.max_consecutive_failures
        consecutive_failures = 0

        while report.placed_count < report.target_count and report.attempts < max_attempts:
            report.attempts += 1
            width, height, area = draw_dimensions(category, self.rng)
            position = self.finder.find(domain, width, height, obstacle_set, self.rng)

            if position is None:
                consecutive_failures += 1
                if failure_limit and consecutive_failures >= failure_limit:
                    report.stopped_early = True
                    break
                continue

            consecutive_failures = 0
            ilot = Ilot(
                id=len(ilots) + 1,
                x=position[0],
                y=position[1],
                width=width,
                height=height,
                area=area,
                category=category.label,
            )
            ilots.append(ilot)
            report.placed_count += 1
            report.placed_area += area

            if self.config.avoid_overlaps:
                obstacle_set.obstacles.add(
                    Obstacle(ilot.bounds, self.config.min_clearance, source=f"ilot:{ilot.id}")
                )

        if report.shortfall:
            logger.info(
                f"Category {category.label}: placed {report.placed_count}/{report.target_count} "
                f"after {report.attempts} attempts"
                + (" (stopped after consecutive failures)" if report.stopped_early else "")
            )
        else:
            logger.info(f"Category {category.label}: placed {report.placed_count} ilots")
        return report
