from datetime import datetime

import pytest

from calendar_engine.models import CalendarEvent


def at(day, hhmm="09:00", tzinfo=None):
    """datetime for 'YYYY-MM-DD' plus 'HH:MM'."""
    value = datetime.strptime(f"{day} {hhmm}", "%Y-%m-%d %H:%M")
    return value.replace(tzinfo=tzinfo) if tzinfo else value


@pytest.fixture
def make_event():
    def _make(event_id, start, end, **fields):
        return CalendarEvent(id=event_id, title=fields.pop('title', event_id), start=start, end=end, **fields)
    return _make
