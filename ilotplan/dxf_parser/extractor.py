"""Entity extraction from raw drawing records.

Turns the raw entity list handed over by the parsing layer into
immutable ``Entity`` objects and computes the global bounding box.
Malformed records are dropped, never fatal.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional

from ..geometry import FALLBACK_BOUNDS, BoundingBox, BoundsAccumulator, Point2D
from .elements import BYLAYER, Entity, EntityKind

logger = logging.getLogger(__name__)


# Raw type tags accepted for each entity kind (compared lower-cased)
KIND_ALIASES = {
    "line": EntityKind.LINE,
    "polyline": EntityKind.POLYLINE,
    "lwpolyline": EntityKind.POLYLINE,
}


@dataclass
class ExtractionResult:
    """Entities extracted from one drawing."""

    entities: List[Entity] = field(default_factory=list)
    bounds: BoundingBox = FALLBACK_BOUNDS
    dropped: int = 0
    used_fallback_bounds: bool = True


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _as_number(value: Any) -> Optional[float]:
    """Finite float, or None for anything else (bools included)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return number


def _parse_vertex(vertex: Any) -> Optional[Point2D]:
    if isinstance(vertex, Mapping):
        x, y = vertex.get("x"), vertex.get("y")
    elif isinstance(vertex, (list, tuple)) and len(vertex) >= 2:
        x, y = vertex[0], vertex[1]
    else:
        return None

    x, y = _as_number(x), _as_number(y)
    if x is None or y is None:
        return None
    return (x, y)


class EntityExtractor:
    """Extracts normalized polylines from raw entity records.

    A raw record looks like::

        {"kind": "Polyline", "layerLabel": "A-WALL", "styleHint": 7,
         "vertices": [{"x": 0, "y": 0}, {"x": 10, "y": 0}]}

    ``type``/``layer``/``color``/``coordinates`` are accepted as aliases,
    and vertices may also be ``[x, y]`` pairs.
    """

    def __init__(self, fallback_bounds: BoundingBox = FALLBACK_BOUNDS):
        self.fallback_bounds = fallback_bounds

    def extract_coordinates(self, raw: Mapping[str, Any]) -> List[Point2D]:
        """Coordinate sequence of a raw entity.

        Returns:
            Two or more points, or an empty list if the entity is malformed
        """
        if not isinstance(raw, Mapping):
            return []

        kind = self._parse_kind(raw)
        if kind is None:
            return []

        vertices = _first_present(raw, "vertices", "coordinates", "points")
        if not isinstance(vertices, (list, tuple)):
            return []

        points: List[Point2D] = []
        for vertex in vertices:
            point = _parse_vertex(vertex)
            if point is None:
                return []
            points.append(point)

        if kind is EntityKind.LINE:
            points = points[:2]

        if len(points) < 2:
            return []
        return points

    def extract_entity(self, raw: Mapping[str, Any]) -> Optional[Entity]:
        """Build an Entity from a raw record, or None if it is malformed."""
        points = self.extract_coordinates(raw)
        if not points:
            return None

        layer = _first_present(raw, "layerLabel", "layer")
        color = _as_number(_first_present(raw, "styleHint", "color"))

        return Entity(
            points=tuple(points),
            layer=str(layer) if layer is not None else "",
            color=int(color) if color is not None else BYLAYER,
            kind=self._parse_kind(raw),
        )

    def extract(self, raw_entities: Optional[Iterable[Mapping[str, Any]]]) -> ExtractionResult:
        """Extract all valid entities and the global bounding box.

        Args:
            raw_entities: Raw entity records (None is treated as empty)

        Returns:
            ExtractionResult with entities, bounds and the dropped count
        """
        result = ExtractionResult(bounds=self.fallback_bounds)
        accumulator = BoundsAccumulator()

        for raw in raw_entities or []:
            entity = self.extract_entity(raw)
            if entity is None:
                result.dropped += 1
                logger.debug(f"Dropped malformed entity: {raw!r}")
                continue
            accumulator.extend_all(entity.points)
            result.entities.append(entity)

        if accumulator.bounds is not None:
            result.bounds = accumulator.bounds
            result.used_fallback_bounds = False
        else:
            logger.info("No valid coordinates in drawing, using fallback bounds")

        logger.info(
            f"Extracted {len(result.entities)} entities "
            f"({result.dropped} dropped)"
        )
        return result

    @staticmethod
    def _parse_kind(raw: Mapping[str, Any]) -> Optional[EntityKind]:
        tag = _first_present(raw, "kind", "type")
        if not isinstance(tag, str):
            return None
        return KIND_ALIASES.get(tag.strip().lower())
