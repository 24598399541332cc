"""Drawing Parser Module

This module reads DXF drawings, extracts their line geometry and
classifies it into walls, restricted areas and entrances.
"""

from .elements import BYLAYER, Entity, EntityKind, Zone, ZoneKind
from .extractor import EntityExtractor, ExtractionResult
from .reader import DXFReader, read_drawing_entities
from .zone_classifier import (
    DEFAULT_RULES,
    ClassificationRule,
    ZoneClassification,
    ZoneClassifier,
    ZoningResult,
    default_boundary,
)

__all__ = [
    "BYLAYER",
    "Entity",
    "EntityKind",
    "Zone",
    "ZoneKind",
    "EntityExtractor",
    "ExtractionResult",
    "DXFReader",
    "read_drawing_entities",
    "ClassificationRule",
    "DEFAULT_RULES",
    "ZoneClassification",
    "ZoneClassifier",
    "ZoningResult",
    "default_boundary",
]
