"""Aggregation of a run's outputs into a LayoutResult."""

from typing import Sequence

from ..dxf_parser.elements import Zone
from ..geometry import BoundingBox
from .types import CategoryReport, Corridor, Ilot, LayoutResult, total_area


def compute_coverage(ilots: Sequence[Ilot], bounds: BoundingBox) -> float:
    """Placed unit area over bounding box area, clamped to [0, 1]."""
    if bounds.area <= 0:
        return 0.0
    return min(1.0, max(0.0, total_area(ilots) / bounds.area))


def assemble_result(
    zones: Sequence[Zone],
    ilots: Sequence[Ilot],
    corridors: Sequence[Corridor],
    bounds: BoundingBox,
    default_boundary: bool = False,
    category_reports: Sequence[CategoryReport] = (),
) -> LayoutResult:
    return LayoutResult(
        zones=list(zones),
        ilots=list(ilots),
        corridors=list(corridors),
        bounds=bounds,
        coverage=compute_coverage(ilots, bounds),
        default_boundary=default_boundary,
        category_reports=list(category_reports),
    )
