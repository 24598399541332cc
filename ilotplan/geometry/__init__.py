"""Geometry primitives shared by the extraction and layout stages."""

from .primitives import (
    FALLBACK_BOUNDS,
    BoundingBox,
    BoundsAccumulator,
    Point2D,
    rectangles_overlap,
)
from .spatial_utils import distance, polyline_bounds, polyline_length, segment_boxes

__all__ = [
    "Point2D",
    "BoundingBox",
    "BoundsAccumulator",
    "FALLBACK_BOUNDS",
    "rectangles_overlap",
    "distance",
    "polyline_length",
    "polyline_bounds",
    "segment_boxes",
]
