"""
Recurrence Expander - Turns a base event plus a rule into concrete occurrences

Candidates are evaluated one calendar day at a time from the base date
forward, and every match becomes a transient occurrence that keeps the base
event's wall-clock start time and duration. Only occurrences starting inside
the half-open view window [window_start, window_end) are returned.
"""

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable, List, Optional, Set, Tuple

from dateutil.relativedelta import relativedelta

from ..config import DEFAULT_MAX_OCCURRENCES, DEFAULT_OPEN_ENDED_YEARS
from ..exceptions import ValidationError
from ..models import CalendarEvent, Frequency, RecurrenceRule, occurrence_id
from .validation import validate_rule

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def js_weekday(day: date) -> int:
    """Weekday number with 0 = Sunday ... 6 = Saturday."""
    return day.isoweekday() % 7


def _is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


def _local_date(value: datetime, zone: Optional[tzinfo]) -> date:
    """Calendar date of ``value`` as seen in the base event's timezone."""
    if zone is not None and _is_aware(value):
        return value.astimezone(zone).date()
    return value.date()


class RecurrenceExpander:
    """
    Expands recurring events for a view window.

    Usage:
        expander = RecurrenceExpander(max_occurrences=500)
        occurrences = expander.expand(event, event.recurrence, week_start, week_end)
    """

    def __init__(
        self,
        max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
        open_ended_years: int = DEFAULT_OPEN_ENDED_YEARS
    ):
        """
        Initialize the expander.

        Args:
            max_occurrences: Safety ceiling on occurrences returned by one
                expansion. Hitting it truncates the result, it is not an error.
            open_ended_years: How far past the base start an open-ended rule
                (no endDate, no count) is expanded
        """
        if max_occurrences < 1:
            raise ValidationError('max_occurrences must be at least 1')
        self.max_occurrences = max_occurrences
        self.open_ended_years = open_ended_years

    def expand(
        self,
        base_event: CalendarEvent,
        rule: RecurrenceRule,
        window_start: datetime,
        window_end: datetime
    ) -> List[CalendarEvent]:
        """
        Generate the occurrences of a series visible in a window.

        Args:
            base_event: The persisted event that starts the series
            rule: How the event repeats
            window_start: Inclusive start of the view window
            window_end: Exclusive end of the view window

        Returns:
            Occurrences ordered by start time

        Raises:
            ValidationError: If the rule or the window is invalid. Raised
                before any occurrence is generated.
        """
        validate_rule(rule)
        self._check_window(base_event, window_start, window_end)

        base_start = base_event.start
        base_date = base_start.date()
        zone = base_start.tzinfo
        duration = base_event.duration
        termination, inclusive = self._termination(base_start, rule)

        # Matching is pure arithmetic relative to the base date, so without a
        # count nothing before the window has to be visited.
        if rule.count is None:
            current = max(base_date, _local_date(window_start, zone))
        else:
            current = base_date
        last_date = _local_date(window_end, zone)
        if termination is not None:
            last_date = min(last_date, _local_date(termination, zone))

        occurrences: List[CalendarEvent] = []
        generated = 0

        while current <= last_date:
            if self._matches(current, rule, base_date):
                start = datetime.combine(current, base_start.timetz())
                if termination is not None and (
                    start > termination or (start == termination and not inclusive)
                ):
                    break
                if rule.count is not None and generated >= rule.count:
                    break
                if start >= window_end:
                    break
                generated += 1

                if start >= window_start:
                    occurrences.append(base_event.with_times(
                        start,
                        start + duration,
                        id=occurrence_id(base_event.id, start),
                        recurrence=None,
                        recurring_event_id=base_event.id,
                    ))
                    if len(occurrences) >= self.max_occurrences:
                        logger.warning(
                            f"Series {base_event.id} reached {self.max_occurrences} occurrences, "
                            f"truncating expansion at {start.isoformat()}"
                        )
                        break

            current += ONE_DAY

        return occurrences

    def expand_events(
        self,
        events: Iterable[CalendarEvent],
        window_start: datetime,
        window_end: datetime,
        member_ids: Optional[Iterable[str]] = None
    ) -> List[CalendarEvent]:
        """
        Flatten persisted events into what a view should draw.

        Recurring base events are expanded, plain events are kept when they
        intersect the window. A materialized instance (recurring_event_id set)
        replaces the generated occurrence with the same series and start.

        Args:
            events: Persisted events
            window_start: Inclusive start of the view window
            window_end: Exclusive end of the view window
            member_ids: Only keep events owned by these members (optional)

        Returns:
            Events and occurrences sorted by (start, id)
        """
        events = list(events)
        members = set(member_ids) if member_ids is not None else None

        materialized: Set[Tuple[str, datetime]] = {
            (event.recurring_event_id, event.start)
            for event in events
            if event.recurring_event_id and event.recurrence is None
        }

        flattened: List[CalendarEvent] = []
        for event in events:
            if members is not None and event.member_id not in members:
                continue

            if event.recurrence is not None:
                for occurrence in self.expand(event, event.recurrence, window_start, window_end):
                    if (event.id, occurrence.start) in materialized:
                        continue
                    flattened.append(occurrence)
            elif _intersects(event, window_start, window_end):
                flattened.append(event)

        flattened.sort(key=lambda e: (e.start, e.id))
        logger.debug(f"Expanded {len(events)} events into {len(flattened)} for window "
                     f"{window_start.isoformat()} - {window_end.isoformat()}")
        return flattened

    def _termination(self, base_start: datetime, rule: RecurrenceRule) -> Tuple[Optional[datetime], bool]:
        """
        Latest start an occurrence may have.

        Returns:
            (bound, inclusive) where inclusive says whether an occurrence
            starting exactly at the bound is allowed. bound is None when it
            lies past the last representable datetime, leaving the window
            as the only limit.
        """
        if rule.end_date is not None:
            end = rule.end_date
            if isinstance(end, datetime):
                if _is_aware(end) and not _is_aware(base_start):
                    raise ValidationError('End date has a timezone but the event does not')
                if not _is_aware(end) and _is_aware(base_start):
                    end = end.replace(tzinfo=base_start.tzinfo)
                return end, True
            # A bare end date includes the whole day.
            if end >= date.max:
                return None, False
            return datetime.combine(end + ONE_DAY, time.min, tzinfo=base_start.tzinfo), False

        if rule.count is not None:
            periods = rule.count * rule.interval
            step = {
                Frequency.DAILY: relativedelta(days=periods),
                Frequency.WEEKLY: relativedelta(weeks=periods),
                Frequency.MONTHLY: relativedelta(months=periods),
                Frequency.YEARLY: relativedelta(years=periods),
            }[rule.frequency]
        else:
            step = relativedelta(years=self.open_ended_years)

        try:
            return base_start + step, False
        except (OverflowError, ValueError):
            logger.debug(f"Termination of {rule.frequency.value} rule lies past year 9999, "
                         f"bounding by the window only")
            return None, False

    @staticmethod
    def _matches(candidate: date, rule: RecurrenceRule, base_date: date) -> bool:
        """Check whether a calendar day carries an occurrence of the rule."""
        if rule.frequency == Frequency.DAILY:
            return (candidate - base_date).days % rule.interval == 0

        if rule.frequency == Frequency.WEEKLY:
            if rule.days_of_week:
                if js_weekday(candidate) not in rule.days_of_week:
                    return False
            elif js_weekday(candidate) != js_weekday(base_date):
                return False
            weeks = (candidate - base_date).days // 7
            return weeks % rule.interval == 0

        if rule.frequency == Frequency.MONTHLY:
            # Months without the target day are skipped, never clamped.
            target_day = rule.day_of_month or base_date.day
            if candidate.day != target_day:
                return False
            months = (candidate.year - base_date.year) * 12 + (candidate.month - base_date.month)
            return months % rule.interval == 0

        if rule.frequency == Frequency.YEARLY:
            if (candidate.month, candidate.day) != (base_date.month, base_date.day):
                return False
            return (candidate.year - base_date.year) % rule.interval == 0

        return False

    @staticmethod
    def _check_window(base_event: CalendarEvent, window_start: datetime, window_end: datetime):
        if _is_aware(window_start) != _is_aware(window_end):
            raise ValidationError('Window bounds must both be timezone-aware or both naive')
        if _is_aware(window_start) != _is_aware(base_event.start):
            raise ValidationError('Window and event must both be timezone-aware or both naive')
        if window_end < window_start:
            raise ValidationError('Window end must not be before window start')


def _intersects(event: CalendarEvent, window_start: datetime, window_end: datetime) -> bool:
    if event.start >= window_end:
        return False
    return event.end > window_start or event.start >= window_start


def expand_recurrence(
    base_event: CalendarEvent,
    rule: RecurrenceRule,
    window_start: datetime,
    window_end: datetime,
    max_occurrences: Optional[int] = None
) -> List[CalendarEvent]:
    """Expand one series for a window. See RecurrenceExpander.expand."""
    if max_occurrences is None:
        max_occurrences = DEFAULT_MAX_OCCURRENCES
    expander = RecurrenceExpander(max_occurrences=max_occurrences)
    return expander.expand(base_event, rule, window_start, window_end)


def expand_events(
    events: Iterable[CalendarEvent],
    window_start: datetime,
    window_end: datetime,
    member_ids: Optional[Iterable[str]] = None,
    max_occurrences: Optional[int] = None
) -> List[CalendarEvent]:
    """Flatten persisted events for a window. See RecurrenceExpander.expand_events."""
    if max_occurrences is None:
        max_occurrences = DEFAULT_MAX_OCCURRENCES
    expander = RecurrenceExpander(max_occurrences=max_occurrences)
    return expander.expand_events(events, window_start, window_end, member_ids=member_ids)
