"""Layout engine: one analysis run from raw entities to LayoutResult."""

import logging
from typing import Any, Iterable, Mapping, Optional

import numpy as np

from ..dxf_parser.extractor import EntityExtractor
from ..dxf_parser.zone_classifier import ZoneClassifier
from .assembler import assemble_result
from .corridors import CorridorSynthesizer
from .obstacles import build_obstacles
from .placement import PlacementEngine
from .types import LayoutConfiguration, LayoutResult

logger = logging.getLogger(__name__)


class LayoutEngine:
    """Runs extraction, classification, placement and corridor synthesis.

    Each call to ``run`` owns its obstacle set, units and corridors, so
    one engine can serve several runs. The random generator is created
    per run from the configuration seed unless one is passed in.
    """

    def __init__(
        self,
        extractor: Optional[EntityExtractor] = None,
        classifier: Optional[ZoneClassifier] = None,
    ):
        self.extractor = extractor or EntityExtractor()
        self.classifier = classifier or ZoneClassifier()

    def run(
        self,
        raw_entities: Optional[Iterable[Mapping[str, Any]]],
        config: LayoutConfiguration,
        rng: Optional[np.random.Generator] = None,
    ) -> LayoutResult:
        """
        Analyze a drawing and lay out îlots and corridors.

        Args:
            raw_entities: Raw entity records of the drawing
            config: Layout configuration
            rng: Optional random generator (defaults to one seeded with config.seed)

        Returns:
            LayoutResult with zones, îlots, corridors and coverage
        """
        extraction = self.extractor.extract(raw_entities)
        zoning = self.classifier.classify_all(
            extraction.entities,
            extraction.bounds,
            bounds_are_fallback=extraction.used_fallback_bounds,
        )

        obstacle_set = build_obstacles(
            zoning.zones,
            respect_constraints=config.respect_constraints,
            unit_clearance=config.min_clearance,
        )
        placement = PlacementEngine(config, rng=rng).place(extraction.bounds, obstacle_set)

        corridors = []
        if config.auto_generate_corridors:
            corridors = CorridorSynthesizer(config.corridor_width).synthesize(placement.ilots)

        result = assemble_result(
            zones=zoning.zones,
            ilots=placement.ilots,
            corridors=corridors,
            bounds=extraction.bounds,
            default_boundary=zoning.default_boundary,
            category_reports=placement.reports,
        )
        logger.info(
            f"Layout complete: {result.total_ilots} ilots, "
            f"{len(result.corridors)} corridors, coverage {result.coverage:.1%}"
        )
        return result


def run_layout(
    raw_entities: Optional[Iterable[Mapping[str, Any]]],
    config: Optional[LayoutConfiguration] = None,
) -> LayoutResult:
    """Run the layout engine with default components."""
    return LayoutEngine().run(raw_entities, config or LayoutConfiguration())
