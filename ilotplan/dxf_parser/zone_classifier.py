"""Zone classification of drawing entities.

Assigns every extracted entity to one of wall, restricted or entrance
using an ordered table of rules:
1. Entrance vocabulary or warning colors
2. Restricted vocabulary or info colors
3. Wall vocabulary, neutral colors or the default layer
4. Any remaining long entity is treated as structural wall
Entities matching no rule are discarded.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from ..geometry import BoundingBox
from .elements import Entity, Zone, ZoneKind

logger = logging.getLogger(__name__)


# Layer name vocabulary (matched as lower-case substrings)
ENTRANCE_LAYER_PATTERNS = [
    "door", "entry", "entrance", "exit", "opening",
    "porte", "entree", "sortie", "ouverture",
]
RESTRICTED_LAYER_PATTERNS = [
    "stair", "elevator", "lift", "toilet", "wc", "restroom", "service",
    "restricted", "shaft", "escalier", "ascenseur", "sanitaire",
]
WALL_LAYER_PATTERNS = [
    "wall", "outline", "perimeter", "boundary", "mur", "cloison", "contour",
]

# Default layer names that carry no meaning of their own
DEFAULT_LAYERS = frozenset(["", "0", "default"])

# AutoCAD color index sets used as style hints
WARNING_COLORS = frozenset([1, 10, 240])  # reds
INFO_COLORS = frozenset([4, 5, 150])  # cyans and blues
NEUTRAL_COLORS = frozenset([7, 8, 9, 250, 251, 252, 253, 254, 255])  # white/greys

# Unlabelled entities longer than this are kept as structural walls
MIN_STRUCTURAL_LENGTH = 5.0

# Default boundary walls sit this fraction of the larger plan side outside the box
BOUNDARY_MARGIN_RATIO = 0.02


def _layer_matches(patterns: Sequence[str]) -> Callable[[Entity], bool]:
    def predicate(entity: Entity) -> bool:
        layer_lower = entity.layer.strip().lower()
        return any(pattern in layer_lower for pattern in patterns)
    return predicate


def _color_in(colors: frozenset) -> Callable[[Entity], bool]:
    def predicate(entity: Entity) -> bool:
        return entity.color in colors
    return predicate


def _default_layer(entity: Entity) -> bool:
    return entity.layer.strip().lower() in DEFAULT_LAYERS


@dataclass(frozen=True)
class ClassificationRule:
    """A named predicate that maps matching entities to a zone kind."""

    name: str
    kind: ZoneKind
    predicate: Callable[[Entity], bool]

    def matches(self, entity: Entity) -> bool:
        return self.predicate(entity)


DEFAULT_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule("entrance_layer", ZoneKind.ENTRANCE, _layer_matches(ENTRANCE_LAYER_PATTERNS)),
    ClassificationRule("entrance_color", ZoneKind.ENTRANCE, _color_in(WARNING_COLORS)),
    ClassificationRule("restricted_layer", ZoneKind.RESTRICTED, _layer_matches(RESTRICTED_LAYER_PATTERNS)),
    ClassificationRule("restricted_color", ZoneKind.RESTRICTED, _color_in(INFO_COLORS)),
    ClassificationRule("wall_layer", ZoneKind.WALL, _layer_matches(WALL_LAYER_PATTERNS)),
    ClassificationRule("wall_color", ZoneKind.WALL, _color_in(NEUTRAL_COLORS)),
    ClassificationRule("wall_default_layer", ZoneKind.WALL, _default_layer),
)


@dataclass
class ZoneClassification:
    """Result of classifying one entity.

    Attributes:
        kind: The assigned zone kind
        rule: Name of the rule that matched
    """

    kind: ZoneKind
    rule: str


@dataclass
class ZoningResult:
    """All zones of one drawing."""

    zones: List[Zone] = field(default_factory=list)
    default_boundary: bool = False
    discarded: int = 0

    def of_kind(self, kind: ZoneKind) -> List[Zone]:
        return [zone for zone in self.zones if zone.kind is kind]


def default_boundary(bounds: BoundingBox, margin: float = 0.0) -> List[Zone]:
    """Four synthetic walls forming a rectangle around ``bounds``.

    Args:
        bounds: Box to enclose
        margin: Distance between the box and the walls

    Returns:
        Bottom, right, top and left walls in that order
    """
    box = bounds.expand(margin)
    corners = [
        (box.min_x, box.min_y),
        (box.max_x, box.min_y),
        (box.max_x, box.max_y),
        (box.min_x, box.max_y),
    ]
    return [
        Zone(
            kind=ZoneKind.WALL,
            points=(corners[i], corners[(i + 1) % 4]),
            rule="default_boundary",
            synthetic=True,
        )
        for i in range(4)
    ]


class ZoneClassifier:
    """Classifies drawing entities into walls, restricted areas and entrances.

    Rules are evaluated in order and the first match wins. Entities that
    match no rule fall back to wall when they are longer than
    ``min_structural_length`` and are discarded otherwise.
    """

    def __init__(
        self,
        rules: Sequence[ClassificationRule] = DEFAULT_RULES,
        min_structural_length: float = MIN_STRUCTURAL_LENGTH,
        boundary_margin_ratio: float = BOUNDARY_MARGIN_RATIO,
    ):
        """
        Initialize the classifier.

        Args:
            rules: Ordered classification rules
            min_structural_length: Length above which unmatched entities become walls
            boundary_margin_ratio: Default boundary margin as a fraction of the larger plan side
        """
        self.rules = tuple(rules)
        self.min_structural_length = min_structural_length
        self.boundary_margin_ratio = boundary_margin_ratio

    def classify(self, entity: Entity) -> Optional[ZoneClassification]:
        """Classify a single entity.

        Args:
            entity: Extracted entity

        Returns:
            ZoneClassification, or None if the entity is discarded
        """
        for rule in self.rules:
            if rule.matches(entity):
                return ZoneClassification(kind=rule.kind, rule=rule.name)

        if entity.length > self.min_structural_length:
            return ZoneClassification(kind=ZoneKind.WALL, rule="structural_length")

        return None

    def classify_batch(self, entities: Sequence[Entity]) -> List[Optional[ZoneClassification]]:
        return [self.classify(entity) for entity in entities]

    def classify_all(
        self,
        entities: Sequence[Entity],
        bounds: BoundingBox,
        bounds_are_fallback: bool = False,
    ) -> ZoningResult:
        """Classify all entities, synthesizing a boundary if nothing is recognised.

        Args:
            entities: Extracted entities
            bounds: Global bounding box of the drawing
            bounds_are_fallback: True when the drawing had no coordinates;
                the boundary then sits exactly on the fallback box

        Returns:
            ZoningResult with the zones in entity order
        """
        result = ZoningResult()

        for entity in entities:
            classification = self.classify(entity)
            if classification is None:
                result.discarded += 1
                continue
            result.zones.append(Zone.from_entity(entity, classification.kind, classification.rule))

        if not result.zones:
            margin = 0.0 if bounds_are_fallback else self._boundary_margin(bounds)
            logger.warning(
                f"No zones detected in {len(entities)} entities, "
                f"using default boundary around {bounds.as_tuple()}"
            )
            result.zones = default_boundary(bounds, margin)
            result.default_boundary = True

        logger.info(
            f"Classified {len(result.zones)} zones: "
            f"{len(result.of_kind(ZoneKind.WALL))} walls, "
            f"{len(result.of_kind(ZoneKind.RESTRICTED))} restricted, "
            f"{len(result.of_kind(ZoneKind.ENTRANCE))} entrances "
            f"({result.discarded} discarded)"
        )
        return result

    def _boundary_margin(self, bounds: BoundingBox) -> float:
        return max(bounds.width, bounds.height) * self.boundary_margin_ratio
