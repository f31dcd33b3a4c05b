"""
Calendar Data Models

Immutable records shared by the recurrence expander and the layout engine:
- CalendarEvent: a persisted event, or a transient occurrence of a series
- RecurrenceRule: how a base event repeats
- EventLayout: horizontal placement of a timed event within its day
- AllDayPlacement: row placement of an all-day event across visible dates

Payloads use the camelCase JSON shape the calendar UI exchanges
(startTime, endTime, memberId, isAllDay, ...).
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from dateutil.parser import isoparse

from .exceptions import ValidationError


class Frequency(str, Enum):
    DAILY = 'daily'
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'
    YEARLY = 'yearly'


@dataclass(frozen=True)
class RecurrenceRule:
    """
    Repetition rule for a base event.

    Weekdays use 0 = Sunday through 6 = Saturday. ``end_date`` and ``count``
    are mutually exclusive; with neither set the series is open-ended.
    """

    frequency: Frequency
    interval: int = 1
    days_of_week: Optional[Tuple[int, ...]] = None
    day_of_month: Optional[int] = None
    end_date: Optional[Union[date, datetime]] = None
    count: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RecurrenceRule":
        """
        Build a rule from its JSON shape.

        Args:
            payload: Dictionary with 'frequency' and optional 'interval',
                'daysOfWeek' (or 'byWeekDay'), 'dayOfMonth' (or 'byMonthDay'),
                'endDate', 'count'

        Returns:
            RecurrenceRule (not yet validated, see validate_rule)

        Raises:
            ValidationError: If the payload cannot be read at all
        """
        if not isinstance(payload, dict):
            raise ValidationError('Recurrence rule must be an object')

        try:
            frequency = Frequency(str(payload.get('frequency', '')).lower())
        except ValueError:
            raise ValidationError(f"Unknown frequency: {payload.get('frequency')!r}")

        days = payload.get('daysOfWeek', payload.get('byWeekDay'))
        day_of_month = payload.get('dayOfMonth')
        if day_of_month is None and payload.get('byMonthDay'):
            day_of_month = payload['byMonthDay'][0]

        try:
            return cls(
                frequency=frequency,
                interval=int(payload.get('interval', 1)),
                days_of_week=tuple(int(d) for d in days) if days is not None else None,
                day_of_month=int(day_of_month) if day_of_month is not None else None,
                end_date=parse_date_value(payload['endDate']) if payload.get('endDate') else None,
                count=int(payload['count']) if payload.get('count') is not None else None,
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f'Invalid recurrence rule: {e}')

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'frequency': self.frequency.value,
            'interval': self.interval,
        }
        if self.days_of_week is not None:
            data['daysOfWeek'] = list(self.days_of_week)
        if self.day_of_month is not None:
            data['dayOfMonth'] = self.day_of_month
        if self.end_date is not None:
            data['endDate'] = self.end_date.isoformat()
        if self.count is not None:
            data['count'] = self.count
        return data


@dataclass(frozen=True)
class CalendarEvent:
    """
    A calendar event.

    End must be after start; callers reject malformed events before layout.
    Events with ``recurring_event_id`` set are instances of that series,
    either materialized by the app or generated by expansion.
    """

    id: str
    title: str
    start: datetime
    end: datetime
    category: str = 'personal'
    priority: str = 'medium'
    member_id: str = ''
    is_all_day: bool = False
    recurrence: Optional[RecurrenceRule] = None
    recurring_event_id: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    emoji: Optional[str] = None
    color: Optional[str] = None

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def with_times(self, start: datetime, end: datetime, **changes) -> "CalendarEvent":
        """Return a copy moved to a new time range."""
        return replace(self, start=start, end=end, **changes)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CalendarEvent":
        """
        Build an event from its JSON shape.

        Args:
            payload: Dictionary with 'id', 'title', 'startTime', 'endTime'
                (ISO-8601) and the optional event fields

        Returns:
            CalendarEvent

        Raises:
            ValidationError: If required keys are missing or timestamps
                cannot be parsed
        """
        if not isinstance(payload, dict):
            raise ValidationError('Event must be an object')

        missing = [key for key in ('id', 'startTime', 'endTime') if key not in payload]
        if missing:
            raise ValidationError(f"Event is missing required fields: {', '.join(missing)}")

        recurrence = payload.get('recurrence')
        return cls(
            id=str(payload['id']),
            title=payload.get('title', 'Untitled Event'),
            start=parse_datetime_value(payload['startTime']),
            end=parse_datetime_value(payload['endTime']),
            category=payload.get('category', 'personal'),
            priority=payload.get('priority', 'medium'),
            member_id=payload.get('memberId', ''),
            is_all_day=bool(payload.get('isAllDay', False)),
            recurrence=RecurrenceRule.from_dict(recurrence) if recurrence else None,
            recurring_event_id=payload.get('recurringEventId'),
            description=payload.get('description'),
            location=payload.get('location'),
            emoji=payload.get('emoji'),
            color=payload.get('color'),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'id': self.id,
            'title': self.title,
            'startTime': self.start.isoformat(),
            'endTime': self.end.isoformat(),
            'category': self.category,
            'priority': self.priority,
            'memberId': self.member_id,
            'isAllDay': self.is_all_day,
        }
        if self.recurrence is not None:
            data['recurrence'] = self.recurrence.to_dict()
        if self.recurring_event_id is not None:
            data['recurringEventId'] = self.recurring_event_id
        for key in ('description', 'location', 'emoji', 'color'):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass(frozen=True)
class EventLayout:
    """Horizontal placement of one event inside its overlap cluster (percent units)."""

    column: int
    column_count: int
    width: float
    left: float

    @property
    def right(self) -> float:
        return self.left + self.width

    def to_dict(self) -> Dict[str, Any]:
        return {
            'column': self.column,
            'columnCount': self.column_count,
            'width': self.width,
            'left': self.left,
        }


FULL_WIDTH_LAYOUT = EventLayout(column=0, column_count=1, width=100.0, left=0.0)
ZERO_WIDTH_LAYOUT = EventLayout(column=0, column_count=1, width=0.0, left=0.0)


@dataclass(frozen=True)
class AllDayPlacement:
    """Row of an all-day event and the visible date indices it covers (inclusive)."""

    row: int
    start_index: int
    end_index: int
    span: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, 'span', self.end_index - self.start_index + 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'row': self.row,
            'startIndex': self.start_index,
            'endIndex': self.end_index,
            'span': self.span,
        }


def occurrence_id(series_id: str, start: datetime) -> str:
    """Identity of a generated occurrence: its series plus its start instant."""
    return f"{series_id}@{start.isoformat()}"


def parse_datetime_value(value: Union[str, datetime, date]) -> datetime:
    """
    Parse an ISO-8601 timestamp (or pass a datetime through).

    Bare dates become midnight of that day.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return isoparse(str(value))
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f'Invalid timestamp: {value!r}')


def parse_date_value(value: Union[str, datetime, date]) -> Union[date, datetime]:
    """Parse a rule end date, keeping bare 'YYYY-MM-DD' values as dates."""
    if isinstance(value, (date, datetime)):
        return value
    text = str(value)
    if len(text) == 10 and text.count('-') == 2:
        try:
            return date.fromisoformat(text)
        except ValueError:
            raise ValidationError(f'Invalid end date: {value!r}')
    return parse_datetime_value(text)
