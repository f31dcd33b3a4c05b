"""
Layout Resolver - Day layout for timed events

Combines the overlap grouper and the column packer:

    layouts = layout_day(events_for_day(occurrences, day))
    layout = get_event_layout(event.id, layouts)
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional

from ..models import CalendarEvent, EventLayout, FULL_WIDTH_LAYOUT, ZERO_WIDTH_LAYOUT
from .grouper import OverlapGrouper
from .packer import ColumnPacker

logger = logging.getLogger(__name__)


class LayoutResolver:
    """Computes horizontal layouts for the timed events of one day."""

    def __init__(self, grouper: Optional[OverlapGrouper] = None, packer: Optional[ColumnPacker] = None):
        self.grouper = grouper or OverlapGrouper()
        self.packer = packer or ColumnPacker()

    def layout_day(self, events: Iterable[CalendarEvent]) -> Dict[str, EventLayout]:
        """
        Lay out one day's events.

        Events whose end is not after their start cannot be packed; they get
        a zero-width layout instead of failing the whole day.

        Args:
            events: Events already filtered to the rendered day

        Returns:
            Mapping of event id to EventLayout
        """
        layouts: Dict[str, EventLayout] = {}
        packable: List[CalendarEvent] = []

        for event in events:
            if event.end <= event.start:
                logger.warning(f"Event {event.id} ends at or before its start, giving it zero width")
                layouts[event.id] = ZERO_WIDTH_LAYOUT
            else:
                packable.append(event)

        for cluster in self.grouper.group(packable):
            layouts.update(self.packer.pack(cluster))

        return layouts


def layout_day(events: Iterable[CalendarEvent]) -> Dict[str, EventLayout]:
    """Lay out one day's timed events. See LayoutResolver.layout_day."""
    return LayoutResolver().layout_day(events)


def events_for_day(events: Iterable[CalendarEvent], day: date) -> List[CalendarEvent]:
    """
    Select the timed events drawn in a day column.

    All-day events are left to the all-day lane. An event belongs to the day
    when its time range intersects [day 00:00, next day 00:00), evaluated in
    the event's own timezone.

    Args:
        events: Expanded events for the view
        day: Calendar day being rendered

    Returns:
        Matching events, in input order
    """
    selected = []
    for event in events:
        if event.is_all_day:
            continue
        day_start = datetime.combine(day, time.min, tzinfo=event.start.tzinfo)
        day_end = day_start + timedelta(days=1)
        if event.start < day_end and (event.end > day_start or event.start >= day_start):
            selected.append(event)
    return selected


def get_event_layout(event_id: str, layouts: Dict[str, EventLayout]) -> EventLayout:
    """Layout for an event, falling back to full width when it was not laid out."""
    return layouts.get(event_id, FULL_WIDTH_LAYOUT)
