"""Spatial utility functions for polyline geometry.

Uses Shapely for length and bounds of drawing polylines.
"""

from typing import List, Sequence

from shapely.geometry import LineString

from .primitives import BoundingBox, Point2D


def distance(p1: Point2D, p2: Point2D) -> float:
    """Calculate Euclidean distance between two points."""
    return ((p2[0] - p1[0]) ** 2 + (p2[1] - p1[1]) ** 2) ** 0.5


def polyline_length(points: Sequence[Point2D]) -> float:
    """Sum of consecutive segment lengths.

    Args:
        points: Ordered polyline vertices

    Returns:
        Length in drawing units (0.0 for fewer than two points)
    """
    if len(points) < 2:
        return 0.0
    return LineString(points).length


def polyline_bounds(points: Sequence[Point2D]) -> BoundingBox:
    """Bounding box of a polyline with at least one vertex."""
    if not points:
        raise ValueError("Cannot compute bounds of an empty polyline")
    if len(points) == 1:
        x, y = points[0]
        return BoundingBox(x, y, x, y)
    return BoundingBox(*LineString(points).bounds)


def segment_boxes(points: Sequence[Point2D]) -> List[BoundingBox]:
    """One bounding box per polyline segment.

    A closed outline covers the whole plan with its overall box, so
    walls are blocked segment by segment.
    """
    boxes = []
    for start, end in zip(points, points[1:]):
        boxes.append(
            BoundingBox(
                min(start[0], end[0]),
                min(start[1], end[1]),
                max(start[0], end[0]),
                max(start[1], end[1]),
            )
        )
    return boxes
