"""Layout engine for îlot placement and corridor synthesis.

This module provides:
- LayoutEngine: Full run from raw entities to LayoutResult
- PlacementEngine: Random-then-grid placement per size category
- CorridorSynthesizer: Row-based corridors with a fallback cross
- build_obstacles: Zone to obstacle / clearance zone mapping

Example usage:
    from ilotplan.layout import LayoutConfiguration, LayoutEngine

    config = LayoutConfiguration.from_dict({"corridorWidth": 2.0, "seed": 7})
    result = LayoutEngine().run(raw_entities, config)
    print(f"{result.total_ilots} ilots, coverage {result.coverage:.0%}")
"""

from .assembler import assemble_result, compute_coverage
from .corridors import CorridorSynthesizer
from .engine import LayoutEngine, run_layout
from .obstacles import Obstacle, ObstacleArena, ObstacleSet, build_obstacles
from .placement import (
    GridScanStrategy,
    PlacementEngine,
    PlacementResult,
    PositionFinder,
    RandomSampleStrategy,
)
from .types import (
    CategoryReport,
    Corridor,
    CorridorKind,
    Ilot,
    LayoutConfiguration,
    LayoutResult,
    SizeCategory,
)

__all__ = [
    # Types
    "SizeCategory",
    "Ilot",
    "Corridor",
    "CorridorKind",
    "LayoutConfiguration",
    "LayoutResult",
    "CategoryReport",
    # Stages
    "Obstacle",
    "ObstacleArena",
    "ObstacleSet",
    "build_obstacles",
    "PlacementEngine",
    "PlacementResult",
    "PositionFinder",
    "RandomSampleStrategy",
    "GridScanStrategy",
    "CorridorSynthesizer",
    "assemble_result",
    "compute_coverage",
    # Engine
    "LayoutEngine",
    "run_layout",
]
