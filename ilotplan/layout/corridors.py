"""Corridor synthesis between placed îlots.

Units are grouped into rows by the vertical position of their centres.
Horizontal corridors fill wide enough gaps between neighbours in a row,
vertical corridors fill wide enough gaps between adjacent rows. When
nothing qualifies a cross-shaped pair of corridors is laid over the
units instead.

Corridors are derived from unit positions only and are not checked
against zones.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..geometry import BoundingBox
from .types import Corridor, CorridorKind, Ilot

logger = logging.getLogger(__name__)


# Row membership tolerance on centre y, as a multiple of the corridor width
ROW_TOLERANCE_FACTOR = 3.0
# Minimum gap that receives a corridor, as a multiple of the corridor width
GAP_FACTOR = 1.2

_EPSILON = 1e-9


@dataclass
class Row:
    """Units sharing a row, sorted by x."""

    ilots: List[Ilot]

    @property
    def extent(self) -> BoundingBox:
        return BoundingBox(
            min(i.x for i in self.ilots),
            min(i.y for i in self.ilots),
            max(i.right for i in self.ilots),
            max(i.top for i in self.ilots),
        )


class CorridorSynthesizer:
    """Builds corridors connecting placed units."""

    def __init__(self, corridor_width: float):
        self.corridor_width = corridor_width
        self.row_tolerance = corridor_width * ROW_TOLERANCE_FACTOR
        self.min_gap = corridor_width * GAP_FACTOR
        self._next_id = 1

    def group_rows(self, ilots: Sequence[Ilot]) -> List[Row]:
        """Group units into rows by centre y.

        Units are visited in order of centre y; a unit joins the current
        row when its centre is within the tolerance of the row's first
        unit, otherwise it starts a new row. Rows come out bottom to top.
        """
        rows: List[List[Ilot]] = []
        for ilot in sorted(ilots, key=lambda i: (i.center[1], i.x)):
            if rows and abs(ilot.center[1] - rows[-1][0].center[1]) <= self.row_tolerance:
                rows[-1].append(ilot)
            else:
                rows.append([ilot])
        return [Row(sorted(row, key=lambda i: i.x)) for row in rows]

    def horizontal_corridors(self, row: Row) -> List[Corridor]:
        """Corridors across the gaps between neighbours of a row."""
        corridors = []
        for left, right in zip(row.ilots, row.ilots[1:]):
            gap = right.x - left.right
            if gap + _EPSILON < self.min_gap:
                continue
            bottom = min(left.y, right.y)
            top = max(left.top, right.top)
            corridors.append(self._corridor(left.right, bottom, gap, top - bottom, CorridorKind.HORIZONTAL))
        return corridors

    def vertical_corridor(self, lower: Row, upper: Row) -> Optional[Corridor]:
        """Corridor across the gap between two adjacent rows.

        Spans the overlap of the rows' x extents; None when the gap is too
        narrow or the rows do not overlap horizontally.
        """
        lower_extent = lower.extent
        upper_extent = upper.extent
        gap = upper_extent.min_y - lower_extent.max_y
        if gap + _EPSILON < self.min_gap:
            return None

        overlap_start = max(lower_extent.min_x, upper_extent.min_x)
        overlap_end = min(lower_extent.max_x, upper_extent.max_x)
        if overlap_end <= overlap_start:
            return None

        return self._corridor(
            overlap_start,
            lower_extent.max_y,
            overlap_end - overlap_start,
            gap,
            CorridorKind.VERTICAL,
        )

    def fallback_corridors(self, ilots: Sequence[Ilot]) -> List[Corridor]:
        """Cross of two corridors through the centre of the units' extent."""
        if not ilots:
            return []
        extent = BoundingBox(
            min(i.x for i in ilots),
            min(i.y for i in ilots),
            max(i.right for i in ilots),
            max(i.top for i in ilots),
        )
        center_x, center_y = extent.center
        half = self.corridor_width / 2.0
        return [
            self._corridor(center_x - half, extent.min_y, self.corridor_width, extent.height, CorridorKind.FALLBACK),
            self._corridor(extent.min_x, center_y - half, extent.width, self.corridor_width, CorridorKind.FALLBACK),
        ]

    def synthesize(self, ilots: Sequence[Ilot]) -> List[Corridor]:
        """
        Build all corridors for the placed units.

        Args:
            ilots: Final unit positions

        Returns:
            Horizontal and vertical corridors, or the fallback cross when
            none qualifies and at least one unit exists
        """
        self._next_id = 1
        rows = self.group_rows(ilots)
        corridors: List[Corridor] = []

        for row in rows:
            corridors.extend(self.horizontal_corridors(row))

        for lower, upper in zip(rows, rows[1:]):
            corridor = self.vertical_corridor(lower, upper)
            if corridor is not None:
                corridors.append(corridor)

        if not corridors and ilots:
            logger.info("No row corridors qualified, using fallback circulation")
            corridors = self.fallback_corridors(ilots)

        logger.info(f"Generated {len(corridors)} corridors over {len(rows)} rows")
        return corridors

    def _corridor(self, x: float, y: float, width: float, height: float, kind: CorridorKind) -> Corridor:
        corridor = Corridor(id=self._next_id, x=x, y=y, width=width, height=height, kind=kind)
        self._next_id += 1
        return corridor
