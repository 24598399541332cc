"""Points, bounding boxes and the strict rectangle overlap test."""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple


Point2D = Tuple[float, float]


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box with min_x <= max_x and min_y <= max_y."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self) -> None:
        if self.min_x > self.max_x or self.min_y > self.max_y:
            raise ValueError(
                f"Inverted bounding box: ({self.min_x}, {self.min_y}, {self.max_x}, {self.max_y})"
            )

    @classmethod
    def from_points(cls, points: Iterable[Point2D]) -> Optional["BoundingBox"]:
        """Smallest box containing the points, or None for an empty iterable."""
        accumulator = BoundsAccumulator()
        for point in points:
            accumulator.extend(point)
        return accumulator.bounds

    @classmethod
    def from_rect(cls, x: float, y: float, width: float, height: float) -> "BoundingBox":
        return cls(x, y, x + width, y + height)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Point2D:
        return ((self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0)

    def expand(self, margin: float) -> "BoundingBox":
        """Grow the box by ``margin`` on every side."""
        if margin == 0:
            return self
        return BoundingBox(
            self.min_x - margin,
            self.min_y - margin,
            self.max_x + margin,
            self.max_y + margin,
        )

    def shrink(self, margin: float) -> Optional["BoundingBox"]:
        """Shrink the box by ``margin`` on every side.

        Returns None when nothing is left of the box.
        """
        min_x = self.min_x + margin
        min_y = self.min_y + margin
        max_x = self.max_x - margin
        max_y = self.max_y - margin
        if min_x > max_x or min_y > max_y:
            return None
        return BoundingBox(min_x, min_y, max_x, max_y)

    def overlaps(self, other: "BoundingBox") -> bool:
        return rectangles_overlap(self, other)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)

    def to_dict(self) -> dict:
        return {
            "minX": self.min_x,
            "minY": self.min_y,
            "maxX": self.max_x,
            "maxY": self.max_y,
        }


# Domain used when a drawing yields no usable coordinates
FALLBACK_BOUNDS = BoundingBox(0.0, 0.0, 100.0, 100.0)


def rectangles_overlap(a: BoundingBox, b: BoundingBox) -> bool:
    """Strict overlap: boxes that only share an edge or corner do not overlap."""
    return not (
        a.max_x <= b.min_x
        or b.max_x <= a.min_x
        or a.max_y <= b.min_y
        or b.max_y <= a.min_y
    )


class BoundsAccumulator:
    """Running bounding box over a stream of points."""

    def __init__(self) -> None:
        self._min_x = float("inf")
        self._min_y = float("inf")
        self._max_x = float("-inf")
        self._max_y = float("-inf")
        self.point_count = 0

    def extend(self, point: Point2D) -> None:
        x, y = point
        self._min_x = min(self._min_x, x)
        self._min_y = min(self._min_y, y)
        self._max_x = max(self._max_x, x)
        self._max_y = max(self._max_y, y)
        self.point_count += 1

    def extend_all(self, points: Iterable[Point2D]) -> None:
        for point in points:
            self.extend(point)

    @property
    def bounds(self) -> Optional[BoundingBox]:
        if self.point_count == 0:
            return None
        return BoundingBox(self._min_x, self._min_y, self._max_x, self._max_y)

    def bounds_or_fallback(self, fallback: BoundingBox = FALLBACK_BOUNDS) -> BoundingBox:
        return self.bounds or fallback
