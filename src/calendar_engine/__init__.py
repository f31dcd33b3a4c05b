"""
Calendar Engine Library

Pure, deterministic calendar computations for rendering views.

Main exports:
- expand_recurrence / RecurrenceExpander: Occurrences of a series in a view window
- expand_events: Flatten persisted events (series and one-offs) for a view
- describe_recurrence / parse_recurrence: Rule <-> human-readable text
- layout_day / LayoutResolver: Non-colliding column layout for one day
- pack_all_day: Row placement for the all-day lane
- EventFormatter: Agenda text for expanded events
"""

from .exceptions import ValidationError
from .models import (
    AllDayPlacement,
    CalendarEvent,
    EventLayout,
    Frequency,
    RecurrenceRule,
    occurrence_id,
)
from .recurrence import (
    RecurrenceExpander,
    expand_recurrence,
    expand_events,
    validate_rule,
    rule_error,
    describe_recurrence,
    parse_recurrence,
)
from .layout import (
    OverlapGrouper,
    ColumnPacker,
    LayoutResolver,
    layout_day,
    events_for_day,
    get_event_layout,
    pack_all_day,
    lane_count,
)
from .formatter import EventFormatter

__version__ = "0.1.0"

__all__ = [
    'ValidationError',
    'AllDayPlacement',
    'CalendarEvent',
    'EventLayout',
    'Frequency',
    'RecurrenceRule',
    'occurrence_id',
    'RecurrenceExpander',
    'expand_recurrence',
    'expand_events',
    'validate_rule',
    'rule_error',
    'describe_recurrence',
    'parse_recurrence',
    'OverlapGrouper',
    'ColumnPacker',
    'LayoutResolver',
    'layout_day',
    'events_for_day',
    'get_event_layout',
    'pack_all_day',
    'lane_count',
    'EventFormatter',
]
