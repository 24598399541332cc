"""Data types for the layout engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..dxf_parser.elements import Zone, ZoneKind
from ..geometry import BoundingBox, Point2D


# Distribution keys of the four size bands, band 1 -> 4
DISTRIBUTION_KEYS = ("size0to1", "size1to3", "size3to5", "size5to10")
DEFAULT_DISTRIBUTION = (10.0, 25.0, 30.0, 35.0)

# (min_area, max_area, label) per band, in square drawing units
DEFAULT_SIZE_BANDS = (
    (6.0, 12.0, "6-12"),
    (12.0, 25.0, "12-25"),
    (25.0, 40.0, "25-40"),
    (40.0, 80.0, "40-80"),
)

DEFAULT_CORRIDOR_WIDTH = 1.5
DEFAULT_MIN_CLEARANCE = 0.5

_TRUE_STRINGS = frozenset(["true", "1", "yes", "on"])
_FALSE_STRINGS = frozenset(["false", "0", "no", "off", ""])


@dataclass(frozen=True)
class SizeCategory:
    """An area band and its share of the usable floor area."""

    min_area: float
    max_area: float
    target_percentage: float
    label: str
    key: str = ""

    @property
    def average_area(self) -> float:
        return (self.min_area + self.max_area) / 2.0

    def contains_area(self, area: float, tolerance: float = 1e-9) -> bool:
        return self.min_area - tolerance <= area <= self.max_area + tolerance

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "label": self.label,
            "minArea": self.min_area,
            "maxArea": self.max_area,
            "targetPercentage": self.target_percentage,
        }


@dataclass(frozen=True)
class Ilot:
    """A placed rectangular unit."""

    id: int
    x: float
    y: float
    width: float
    height: float
    area: float
    category: str

    @property
    def bounds(self) -> BoundingBox:
        return BoundingBox.from_rect(self.x, self.y, self.width, self.height)

    @property
    def center(self) -> Point2D:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "area": self.area,
            "type": self.category,
        }


class CorridorKind(Enum):
    """Corridor origin."""
    HORIZONTAL = "horizontal"  # between neighbours in a row
    VERTICAL = "vertical"  # between adjacent rows
    FALLBACK = "fallback"  # cross pattern when nothing else qualifies


@dataclass(frozen=True)
class Corridor:
    """A rectangular circulation path."""

    id: int
    x: float
    y: float
    width: float
    height: float
    kind: CorridorKind

    @property
    def bounds(self) -> BoundingBox:
        return BoundingBox.from_rect(self.x, self.y, self.width, self.height)

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "type": self.kind.value,
        }


def _pick(data: Mapping[str, Any], default: Any, *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _parse_flag(value: Any, name: str) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError(f"Invalid value for {name}: {value!r}")
    return bool(value)


@dataclass(frozen=True)
class LayoutConfiguration:
    """Layout parameters for one analysis run."""

    distribution: Tuple[float, ...] = DEFAULT_DISTRIBUTION
    corridor_width: float = DEFAULT_CORRIDOR_WIDTH
    min_clearance: float = DEFAULT_MIN_CLEARANCE
    auto_generate_corridors: bool = True
    space_optimization: bool = True  # grid scan after random sampling
    avoid_overlaps: bool = True  # placed units become obstacles
    respect_constraints: bool = True  # zones become obstacles
    seed: Optional[int] = None
    # Stall limit: None leaves it to the engine settings, 0 disables it
    max_consecutive_failures: Optional[int] = None
    size_bands: Tuple[Tuple[float, float, str], ...] = DEFAULT_SIZE_BANDS

    def __post_init__(self) -> None:
        if len(self.distribution) != len(self.size_bands):
            raise ValueError(
                f"Distribution has {len(self.distribution)} entries, "
                f"expected {len(self.size_bands)}"
            )
        if self.corridor_width <= 0:
            raise ValueError(f"Corridor width must be positive, got {self.corridor_width}")
        if self.min_clearance < 0:
            raise ValueError(f"Minimum clearance must not be negative, got {self.min_clearance}")
        if self.max_consecutive_failures is not None and self.max_consecutive_failures < 0:
            raise ValueError(
                f"Consecutive failure limit must not be negative, got {self.max_consecutive_failures}"
            )

    def size_categories(self) -> List[SizeCategory]:
        """Size categories in processing order (band 1 -> 4)."""
        categories = []
        for i, ((min_area, max_area, label), percentage) in enumerate(
            zip(self.size_bands, self.distribution)
        ):
            key = DISTRIBUTION_KEYS[i] if i < len(DISTRIBUTION_KEYS) else f"band{i + 1}"
            categories.append(
                SizeCategory(
                    min_area=min_area,
                    max_area=max_area,
                    target_percentage=percentage,
                    label=label,
                    key=key,
                )
            )
        return categories

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "ilotDistribution": dict(zip(DISTRIBUTION_KEYS, self.distribution)),
            "corridorWidth": self.corridor_width,
            "minClearance": self.min_clearance,
            "autoGenerateCorridors": self.auto_generate_corridors,
            "spaceOptimization": self.space_optimization,
            "avoidOverlaps": self.avoid_overlaps,
            "respectConstraints": self.respect_constraints,
            "seed": self.seed,
            "maxConsecutiveFailures": self.max_consecutive_failures,
            "sizeBands": [list(band) for band in self.size_bands],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LayoutConfiguration":
        """Create a configuration from a stored record.

        Accepts the camelCase keys of the configuration store as well as
        snake_case. The distribution may be a mapping keyed by
        ``size0to1`` .. ``size5to10`` or a sequence of four percentages.
        Missing keys fall back to the defaults.
        """
        size_bands = _pick(data, DEFAULT_SIZE_BANDS, "sizeBands", "size_bands")
        size_bands = tuple((float(lo), float(hi), str(label)) for lo, hi, label in size_bands)

        raw_distribution = _pick(data, None, "ilotDistribution", "distribution", "ilot_distribution")
        distribution = _parse_distribution(raw_distribution, len(size_bands))

        seed = _pick(data, None, "seed")
        max_failures = _pick(data, None, "maxConsecutiveFailures", "max_consecutive_failures")
        if max_failures is not None:
            max_failures = max(0, int(max_failures))

        flags = {}
        for name, keys in (
            ("auto_generate_corridors", ("autoGenerateCorridors", "auto_generate_corridors")),
            ("space_optimization", ("spaceOptimization", "space_optimization")),
            ("avoid_overlaps", ("avoidOverlaps", "avoid_overlaps")),
            ("respect_constraints", ("respectConstraints", "respect_constraints")),
        ):
            flags[name] = _parse_flag(_pick(data, True, *keys), keys[0])

        return cls(
            distribution=distribution,
            corridor_width=float(_pick(data, DEFAULT_CORRIDOR_WIDTH, "corridorWidth", "corridor_width")),
            min_clearance=float(_pick(data, DEFAULT_MIN_CLEARANCE, "minClearance", "min_clearance")),
            seed=int(seed) if seed is not None else None,
            max_consecutive_failures=max_failures,
            size_bands=size_bands,
            **flags,
        )


def _default_distribution(band_count: int) -> Tuple[float, ...]:
    if band_count == len(DEFAULT_DISTRIBUTION):
        return DEFAULT_DISTRIBUTION
    return tuple(100.0 / band_count for _ in range(band_count))


def _parse_distribution(raw: Any, band_count: int) -> Tuple[float, ...]:
    defaults = _default_distribution(band_count)
    if raw is None:
        return defaults

    if isinstance(raw, Mapping):
        # Missing keys take their default share; an explicit 0 stays 0
        keys = list(DISTRIBUTION_KEYS[:band_count])
        keys += [f"band{i + 1}" for i in range(len(keys), band_count)]
        return tuple(
            float(raw[key]) if raw.get(key) is not None else default
            for key, default in zip(keys, defaults)
        )

    values = tuple(float(value) for value in raw)
    if len(values) != band_count:
        raise ValueError(f"Distribution has {len(values)} entries, expected {band_count}")
    return values


@dataclass
class CategoryReport:
    """Placement outcome for one size category."""

    category: SizeCategory
    target_area: float
    target_count: int
    placed_count: int = 0
    placed_area: float = 0.0
    attempts: int = 0
    stopped_early: bool = False  # consecutive-failure limit reached

    @property
    def shortfall(self) -> int:
        return max(0, self.target_count - self.placed_count)

    def to_dict(self) -> dict:
        return {
            "category": self.category.to_dict(),
            "targetArea": round(self.target_area, 2),
            "targetCount": self.target_count,
            "placedCount": self.placed_count,
            "placedArea": round(self.placed_area, 2),
            "attempts": self.attempts,
            "shortfall": self.shortfall,
            "stoppedEarly": self.stopped_early,
        }


@dataclass
class LayoutResult:
    """Complete output of one analysis run."""

    zones: List[Zone] = field(default_factory=list)
    ilots: List[Ilot] = field(default_factory=list)
    corridors: List[Corridor] = field(default_factory=list)
    bounds: Optional[BoundingBox] = None
    coverage: float = 0.0
    default_boundary: bool = False
    category_reports: List[CategoryReport] = field(default_factory=list)

    @property
    def total_ilots(self) -> int:
        return len(self.ilots)

    def zones_of_kind(self, kind: ZoneKind) -> List[Zone]:
        return [zone for zone in self.zones if zone.kind is kind]

    def to_dict(self) -> dict:
        return {
            "zonesDetected": {
                "walls": [z.to_dict() for z in self.zones_of_kind(ZoneKind.WALL)],
                "restricted": [z.to_dict() for z in self.zones_of_kind(ZoneKind.RESTRICTED)],
                "entrances": [z.to_dict() for z in self.zones_of_kind(ZoneKind.ENTRANCE)],
            },
            "ilotsPlaced": [i.to_dict() for i in self.ilots],
            "corridorsGenerated": [c.to_dict() for c in self.corridors],
            "totalIlots": self.total_ilots,
            "coverage": self.coverage,
            "bounds": self.bounds.to_dict() if self.bounds else None,
            "defaultBoundary": self.default_boundary,
            "categoryReports": [r.to_dict() for r in self.category_reports],
        }


def total_area(items: Sequence[Ilot]) -> float:
    return sum(item.area for item in items)
