"""
All-Day Lane - Stacks all-day events into rows across the visible dates

The same packing problem as the time grid at day granularity: every event
is a span of visible day indices and rows are filled leftmost-fit, exactly
like columns in a cluster.
"""

from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Union

from ..models import AllDayPlacement, CalendarEvent
from .grouper import Span, sort_spans
from .packer import assign_columns


def last_day(event: CalendarEvent) -> date:
    """
    Last calendar day an all-day event covers.

    An end exactly at midnight is exclusive, so an event stored as
    Mon 00:00 - Wed 00:00 covers Monday and Tuesday.
    """
    if event.end <= event.start:
        return event.start.date()
    if event.end.timetz().replace(tzinfo=None) == time.min:
        return event.end.date() - timedelta(days=1)
    return event.end.date()


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def _visible_range(event: CalendarEvent, visible: List[date]) -> Optional[Span]:
    first = event.start.date()
    last = last_day(event)

    start_index = next((i for i, day in enumerate(visible) if day >= first), None)
    end_index = next((i for i in range(len(visible) - 1, -1, -1) if visible[i] <= last), None)

    if start_index is None or end_index is None or end_index < start_index:
        return None
    return Span(key=event.id, start=start_index, end=end_index + 1)


def pack_all_day(
    events: Iterable[CalendarEvent],
    dates: Sequence[Union[date, datetime]]
) -> Dict[str, AllDayPlacement]:
    """
    Assign rows to the all-day events of a view.

    Args:
        events: Expanded events for the view; timed events are ignored
        dates: Visible dates in ascending order

    Returns:
        Mapping of event id to AllDayPlacement for events touching a visible date
    """
    visible = [_as_date(day) for day in dates]
    if not visible:
        return {}

    spans = []
    for event in events:
        if not event.is_all_day:
            continue
        span = _visible_range(event, visible)
        if span is not None:
            spans.append(span)

    placements: Dict[str, AllDayPlacement] = {}
    for row_index, row in enumerate(assign_columns(sort_spans(spans))):
        for span in row:
            placements[span.key] = AllDayPlacement(
                row=row_index,
                start_index=span.start,
                end_index=span.end - 1,
            )
    return placements


def lane_count(placements: Dict[str, AllDayPlacement]) -> int:
    """Number of rows the all-day lane needs."""
    if not placements:
        return 0
    return max(placement.row for placement in placements.values()) + 1
