"""
Event Formatter - Formats expanded calendar events for display

Provides human-readable agenda text with support for:
- Different time contexts (today, tomorrow, this week, ...)
- Time zones
- All-day events
- Recurring occurrences (described from their series rule)
- HTML cleanup in descriptions
"""

import re
from html import unescape
from typing import Dict, List, Optional, Sequence
from datetime import datetime
from zoneinfo import ZoneInfo

from .config import DEFAULT_TIMEZONE
from .models import CalendarEvent, RecurrenceRule
from .recurrence.description import describe_recurrence


class EventFormatter:
    """Formats calendar events into human-readable text."""

    def __init__(self, timezone: str = DEFAULT_TIMEZONE):
        """
        Initialize the formatter.

        Args:
            timezone: IANA timezone name for displaying times
        """
        self.timezone = timezone
        self.local_tz = ZoneInfo(timezone)

    def format_events(
        self,
        events: Sequence[CalendarEvent],
        timeframe: str,
        series_rules: Optional[Dict[str, RecurrenceRule]] = None
    ) -> str:
        """
        Format a list of events into a readable agenda.

        Args:
            events: Expanded events, already sorted by start
            timeframe: Description of timeframe (e.g., "today", "this week")
            series_rules: Recurrence rules keyed by series id, used to
                describe occurrences

        Returns:
            Formatted string suitable for display or TTS
        """
        if not events:
            return self._format_no_events(timeframe)

        count = len(events)
        plural = 's' if count != 1 else ''
        if timeframe in ('today', 'tomorrow'):
            header = f"You have {count} event{plural} {timeframe}:"
        elif 'week' in timeframe:
            header = f"You have {count} event{plural} {timeframe}:"
        else:
            header = f"You have {count} event{plural} in the {timeframe}:"

        lines = [header, ""]
        show_dates = timeframe not in ('today', 'tomorrow')

        for event in events:
            lines.extend(self.format_event(event, show_dates, series_rules))
            lines.append("")

        return "\n".join(lines)

    def format_event(
        self,
        event: CalendarEvent,
        show_date: bool = True,
        series_rules: Optional[Dict[str, RecurrenceRule]] = None
    ) -> List[str]:
        """Format a single event as a list of lines."""
        title = f"{event.emoji} {event.title}" if event.emoji else event.title
        lines = [f"**{title}**"]

        start = self._to_local(event.start)
        end = self._to_local(event.end)

        if show_date:
            # All-day dates are calendar dates, not instants to convert.
            day = event.start if event.is_all_day else start
            lines.append(f"  📅 {day.strftime('%A, %b %-d')}")

        if event.is_all_day:
            lines.append("  🕒 All day")
        else:
            lines.append(f"  🕒 {start.strftime('%-I:%M %p')} - {end.strftime('%-I:%M %p %Z')}")

        recurrence = self._recurrence_text(event, series_rules or {})
        if recurrence:
            lines.append(f"  🔁 {recurrence}")

        if event.location:
            lines.append(f"  📍 {event.location}")

        if event.description:
            clean_desc = self._clean_description(event.description)
            if clean_desc:
                desc = clean_desc[:200] + "..." if len(clean_desc) > 200 else clean_desc
                lines.append(f"  ℹ️ {desc}")

        return lines

    def _format_no_events(self, timeframe: str) -> str:
        """Format message when no events are found."""
        if timeframe in ('today', 'tomorrow'):
            return f"You have no events scheduled for {timeframe}."
        elif 'week' in timeframe:
            return f"You have no events scheduled for the {timeframe}."
        else:
            return f"You have no events in the {timeframe}."

    def _recurrence_text(self, event: CalendarEvent, series_rules: Dict[str, RecurrenceRule]) -> Optional[str]:
        if event.recurrence is not None:
            return describe_recurrence(event.recurrence)
        if event.recurring_event_id:
            rule = series_rules.get(event.recurring_event_id)
            if rule is not None:
                return describe_recurrence(rule)
            return "Recurring event"
        return None

    def _to_local(self, value: datetime) -> datetime:
        # Naive times are already local wall-clock times.
        if value.tzinfo is None:
            return value.replace(tzinfo=self.local_tz)
        return value.astimezone(self.local_tz)

    def _clean_description(self, description: str) -> str:
        """Remove HTML and clean up description text."""
        clean = re.sub(r'<[^>]+>', '', description)
        clean = unescape(clean)
        clean = re.sub(r'\s+', ' ', clean).strip()
        return clean
