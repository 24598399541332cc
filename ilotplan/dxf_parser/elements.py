"""Drawing entity and zone data classes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple
import uuid

from ..geometry import BoundingBox, Point2D, polyline_bounds, polyline_length


# AutoCAD color index meaning "inherit from layer", used when no hint is given
BYLAYER = 256


class EntityKind(Enum):
    """Raw drawing entity type."""
    LINE = "line"
    POLYLINE = "polyline"


class ZoneKind(Enum):
    """Functional zone classification."""
    WALL = "wall"
    RESTRICTED = "restricted"
    ENTRANCE = "entrance"


@dataclass(frozen=True)
class Entity:
    """A normalized drawing polyline with its layer and color hint."""

    points: Tuple[Point2D, ...]
    layer: str = ""
    color: int = BYLAYER
    kind: EntityKind = EntityKind.POLYLINE

    @property
    def length(self) -> float:
        """Calculate total polyline length."""
        return polyline_length(self.points)

    @property
    def bounds(self) -> BoundingBox:
        return polyline_bounds(self.points)

    def to_dict(self) -> dict:
        return {
            "type": self.kind.value,
            "layer": self.layer,
            "color": self.color,
            "coordinates": [list(p) for p in self.points],
        }


@dataclass(frozen=True)
class Zone:
    """A classified region of the drawing."""

    kind: ZoneKind
    points: Tuple[Point2D, ...]
    layer: str = ""
    color: int = BYLAYER
    rule: str = ""
    synthetic: bool = False  # generated boundary, not read from the drawing
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])

    @classmethod
    def from_entity(cls, entity: Entity, kind: ZoneKind, rule: str = "") -> "Zone":
        return cls(
            kind=kind,
            points=entity.points,
            layer=entity.layer,
            color=entity.color,
            rule=rule,
        )

    @property
    def bounds(self) -> BoundingBox:
        return polyline_bounds(self.points)

    @property
    def length(self) -> float:
        return polyline_length(self.points)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.kind.value,
            "coordinates": [list(p) for p in self.points],
            "layer": self.layer,
            "color": self.color,
            "rule": self.rule,
            "synthetic": self.synthetic,
            "bounds": self.bounds.to_dict(),
        }
