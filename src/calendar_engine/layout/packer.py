"""
Column Packer - Assigns horizontal positions inside an overlap cluster

Uses a column-based algorithm similar to Outlook:
1. Place each event in the leftmost column with no overlapping occupant,
   opening a new column when none fits
2. Widen each event rightward across columns holding nothing that overlaps it
3. Convert column index and span into left/width percentages
"""

import logging
from typing import Dict, List, Sequence

from ..config import FULL_WIDTH
from ..models import CalendarEvent, EventLayout, FULL_WIDTH_LAYOUT
from .grouper import Span, event_span, sort_spans

logger = logging.getLogger(__name__)


def assign_columns(spans: Sequence[Span]) -> List[List[Span]]:
    """
    Greedy leftmost-fit placement.

    Args:
        spans: Spans in the order they should be placed

    Returns:
        Columns (or rows, for the all-day lane), each holding mutually
        non-overlapping spans
    """
    columns: List[List[Span]] = []

    for span in spans:
        for column in columns:
            if not any(span.overlaps(occupant) for occupant in column):
                column.append(span)
                break
        else:
            columns.append([span])

    return columns


class ColumnPacker:
    """Computes EventLayout values for the events of one cluster."""

    def pack(self, cluster: Sequence[CalendarEvent]) -> Dict[str, EventLayout]:
        """
        Lay out one overlap cluster.

        Args:
            cluster: Events of a single cluster (see OverlapGrouper)

        Returns:
            Mapping of event id to its layout
        """
        return self.pack_spans([event_span(event) for event in cluster])

    def pack_spans(self, spans: Sequence[Span]) -> Dict[str, EventLayout]:
        if not spans:
            return {}

        if len(spans) == 1:
            return {spans[0].key: FULL_WIDTH_LAYOUT}

        columns = assign_columns(sort_spans(spans))
        column_count = len(columns)
        unit = FULL_WIDTH / column_count

        layouts: Dict[str, EventLayout] = {}
        for index, column in enumerate(columns):
            for span in column:
                column_span = self._column_span(span, index, columns)
                left = unit * index
                # Float drift must not push the box past the right edge.
                width = min(unit * column_span, FULL_WIDTH - left)
                layouts[span.key] = EventLayout(
                    column=index,
                    column_count=column_count,
                    width=width,
                    left=left,
                )

        logger.debug(f"Packed {len(spans)} events into {column_count} columns")
        return layouts

    @staticmethod
    def _column_span(span: Span, column_index: int, columns: List[List[Span]]) -> int:
        """Number of contiguous columns, starting at its own, the span can cover."""
        column_span = 1
        for column in columns[column_index + 1:]:
            if any(span.overlaps(occupant) for occupant in column):
                break
            column_span += 1
        return column_span
