"""Obstacle model for constrained placement.

Zones become obstacles with a clearance margin by kind. Placed units are
appended as they are created, so every later placement respects them.
Uses an R-tree for candidate lookups and numpy to test many candidate
rectangles at once.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from rtree import index

from ..dxf_parser.elements import Zone, ZoneKind
from ..geometry import BoundingBox, rectangles_overlap, segment_boxes

logger = logging.getLogger(__name__)


WALL_CLEARANCE = 0.0  # units may touch walls
RESTRICTED_CLEARANCE = 0.5
ENTRANCE_CLEARANCE = 2.0


@dataclass(frozen=True)
class Obstacle:
    """A box that placements must keep ``clearance`` away from."""

    bounds: BoundingBox
    clearance: float = 0.0
    source: str = ""

    @property
    def expanded(self) -> BoundingBox:
        return self.bounds.expand(self.clearance)


def overlap_free_mask(
    min_x: np.ndarray,
    min_y: np.ndarray,
    max_x: np.ndarray,
    max_y: np.ndarray,
    boxes: np.ndarray,
) -> np.ndarray:
    """True for each rectangle that strictly overlaps none of ``boxes`` (n x 4)."""
    if len(boxes) == 0:
        return np.ones(len(min_x), dtype=bool)
    separated = (
        (max_x[:, None] <= boxes[None, :, 0])
        | (boxes[None, :, 2] <= min_x[:, None])
        | (max_y[:, None] <= boxes[None, :, 1])
        | (boxes[None, :, 3] <= min_y[:, None])
    )
    return separated.all(axis=1)


class ObstacleArena:
    """Append-only obstacle collection owned by one run."""

    def __init__(self, name: str = "obstacles"):
        self.name = name
        self._obstacles: List[Obstacle] = []
        self._expanded: List[BoundingBox] = []
        self._index = index.Index()
        self._array: Optional[np.ndarray] = None

    def add(self, obstacle: Obstacle) -> None:
        expanded = obstacle.expanded
        self._index.insert(len(self._obstacles), expanded.as_tuple())
        self._obstacles.append(obstacle)
        self._expanded.append(expanded)
        self._array = None

    def extend(self, obstacles: Sequence[Obstacle]) -> None:
        for obstacle in obstacles:
            self.add(obstacle)

    def blockers(self, rect: BoundingBox) -> List[BoundingBox]:
        """Expanded boxes that strictly overlap ``rect``.

        The R-tree also reports boxes that merely touch, so every hit is
        re-checked with the strict test.
        """
        if not self._obstacles:
            return []
        hits = []
        for i in self._index.intersection(rect.as_tuple()):
            expanded = self._expanded[i]
            if rectangles_overlap(rect, expanded):
                hits.append(expanded)
        return hits

    def blocks(self, rect: BoundingBox) -> bool:
        return bool(self.blockers(rect))

    def boxes(self, region: Optional[BoundingBox] = None) -> np.ndarray:
        """Expanded boxes as an (n, 4) array, optionally only those near ``region``."""
        if self._array is None:
            self._array = np.array(
                [box.as_tuple() for box in self._expanded], dtype=float
            ).reshape(-1, 4)
        if region is None or not self._obstacles:
            return self._array
        ids = np.fromiter(self._index.intersection(region.as_tuple()), dtype=np.intp)
        return self._array[ids]

    def __len__(self) -> int:
        return len(self._obstacles)

    def __iter__(self) -> Iterator[Obstacle]:
        return iter(self._obstacles)


@dataclass
class ObstacleSet:
    """Obstacles and entrance clearance zones of one run.

    Both are checked with the same overlap test but are kept apart so
    entrance exclusion can be tuned independently. Against clearance
    zones a candidate is tested grown by ``unit_clearance``, so a unit's
    own clearance margin stays out of entrance areas too.
    """

    obstacles: ObstacleArena = field(default_factory=lambda: ObstacleArena("obstacles"))
    clearance_zones: ObstacleArena = field(default_factory=lambda: ObstacleArena("clearance_zones"))
    unit_clearance: float = 0.0
    _failed_scans: Dict[Hashable, List[Tuple[float, float]]] = field(default_factory=dict, repr=False)
    _failed_scans_version: int = field(default=-1, repr=False)

    @property
    def version(self) -> int:
        """Grows with every added obstacle; arenas are append-only."""
        return len(self.obstacles) + len(self.clearance_zones)

    def is_free(self, rect: BoundingBox) -> bool:
        if self.obstacles.blocks(rect):
            return False
        return not self.clearance_zones.blocks(rect.expand(self.unit_clearance))

    def free_mask(
        self,
        min_x: np.ndarray,
        min_y: np.ndarray,
        max_x: np.ndarray,
        max_y: np.ndarray,
        region: Optional[BoundingBox] = None,
    ) -> np.ndarray:
        """Vectorized ``is_free`` over candidate rectangles.

        Args:
            min_x, min_y, max_x, max_y: Candidate rectangle coordinates
            region: Box covering all candidates, used to narrow the obstacles

        Returns:
            Boolean array, True where the candidate is free
        """
        free = overlap_free_mask(min_x, min_y, max_x, max_y, self.obstacles.boxes(region))
        if len(self.clearance_zones):
            c = self.unit_clearance
            zone_region = region.expand(c) if region is not None else None
            free &= overlap_free_mask(
                min_x - c, min_y - c, max_x + c, max_y + c, self.clearance_zones.boxes(zone_region)
            )
        return free

    def known_unplaceable(self, key: Hashable, width: float, height: float) -> bool:
        """True if a scan under ``key`` already failed for a unit no larger than this one.

        Recorded failures are dropped as soon as an obstacle is added.
        """
        if self._failed_scans_version != self.version:
            return False
        return any(
            width >= failed_w and height >= failed_h
            for failed_w, failed_h in self._failed_scans.get(key, ())
        )

    def mark_unplaceable(self, key: Hashable, width: float, height: float) -> None:
        if self._failed_scans_version != self.version:
            self._failed_scans = {}
            self._failed_scans_version = self.version
        self._failed_scans.setdefault(key, []).append((width, height))


def zone_obstacles(zone: Zone) -> List[Obstacle]:
    """Obstacles contributed by a wall or restricted zone.

    Walls block segment by segment with no margin. Restricted zones block
    their whole box plus ``RESTRICTED_CLEARANCE``. Entrances contribute
    no obstacle; see ``entrance_clearance_zone``.
    """
    if zone.kind is ZoneKind.WALL:
        return [
            Obstacle(box, WALL_CLEARANCE, source=f"wall:{zone.id}")
            for box in segment_boxes(zone.points)
        ]
    if zone.kind is ZoneKind.RESTRICTED:
        return [Obstacle(zone.bounds, RESTRICTED_CLEARANCE, source=f"restricted:{zone.id}")]
    return []


def entrance_clearance_zone(zone: Zone) -> Obstacle:
    return Obstacle(zone.bounds, ENTRANCE_CLEARANCE, source=f"entrance:{zone.id}")


def build_obstacles(
    zones: Sequence[Zone],
    respect_constraints: bool = True,
    unit_clearance: float = 0.0,
) -> ObstacleSet:
    """Build the obstacle set for a run.

    Args:
        zones: Classified zones
        respect_constraints: When False only synthetic boundary walls block placement
        unit_clearance: Clearance of placed units, kept out of entrance zones

    Returns:
        ObstacleSet with wall/restricted obstacles and entrance clearance zones
    """
    obstacle_set = ObstacleSet(unit_clearance=unit_clearance)

    for zone in zones:
        if not respect_constraints and not zone.synthetic:
            continue
        if zone.kind is ZoneKind.ENTRANCE:
            obstacle_set.clearance_zones.add(entrance_clearance_zone(zone))
        else:
            obstacle_set.obstacles.extend(zone_obstacles(zone))

    logger.info(
        f"Built {len(obstacle_set.obstacles)} obstacles and "
        f"{len(obstacle_set.clearance_zones)} clearance zones"
    )
    return obstacle_set
