"""
Calendar API Routes

JSON endpoints exposing the engine to a rendering client. Every endpoint
is a pure computation over the posted payload; nothing is stored.
"""

import logging
from datetime import date
from typing import Any, Dict, List
from zoneinfo import ZoneInfoNotFoundError

from flask import Blueprint, current_app, jsonify, request

from ..config import EngineSettings
from ..exceptions import ValidationError
from ..formatter import EventFormatter
from ..layout import events_for_day, lane_count, layout_day, pack_all_day
from ..models import CalendarEvent, RecurrenceRule, parse_datetime_value
from ..recurrence import RecurrenceExpander, describe_recurrence, parse_recurrence

logger = logging.getLogger(__name__)

calendar_bp = Blueprint('calendar', __name__, url_prefix='/calendar')


def _settings() -> EngineSettings:
    return current_app.config.get('ENGINE_SETTINGS') or EngineSettings()


def _payload() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('No JSON data provided')
    return data


def _require(data: Dict[str, Any], key: str) -> Any:
    if data.get(key) is None:
        raise ValidationError(f'Missing {key}')
    return data[key]


def _events(data: Dict[str, Any]) -> List[CalendarEvent]:
    raw_events = _require(data, 'events')
    if not isinstance(raw_events, list):
        raise ValidationError('events must be a list')
    return [CalendarEvent.from_dict(item) for item in raw_events]


def _expander(data: Dict[str, Any]) -> RecurrenceExpander:
    settings = _settings()
    max_occurrences = data.get('maxOccurrences')
    if max_occurrences is None:
        max_occurrences = settings.max_occurrences
    try:
        max_occurrences = int(max_occurrences)
    except (TypeError, ValueError):
        raise ValidationError('maxOccurrences must be an integer')
    if max_occurrences < 1:
        raise ValidationError('maxOccurrences must be at least 1')
    return RecurrenceExpander(max_occurrences=max_occurrences, open_ended_years=settings.open_ended_years)


def _bad_request(e: ValidationError):
    logger.info(f"Rejected calendar request to {request.path}: {e}")
    return jsonify({"error": str(e)}), 400


def _server_error(e: Exception):
    logger.error(f"Calendar request to {request.path} failed: {e}", exc_info=True)
    return jsonify({"error": str(e)}), 500


@calendar_bp.route("/expand", methods=["POST"])
def expand():
    """Expand one recurring event: {event, rule?, windowStart, windowEnd, maxOccurrences?}."""
    try:
        data = _payload()
        event = CalendarEvent.from_dict(_require(data, 'event'))
        rule = RecurrenceRule.from_dict(data['rule']) if data.get('rule') else event.recurrence
        if rule is None:
            raise ValidationError('Missing rule')

        occurrences = _expander(data).expand(
            event,
            rule,
            parse_datetime_value(_require(data, 'windowStart')),
            parse_datetime_value(_require(data, 'windowEnd')),
        )
        return jsonify({"occurrences": [occ.to_dict() for occ in occurrences]})
    except ValidationError as e:
        return _bad_request(e)
    except Exception as e:
        return _server_error(e)


@calendar_bp.route("/expand-all", methods=["POST"])
def expand_all():
    """Flatten a view's events: {events, windowStart, windowEnd, memberIds?}."""
    try:
        data = _payload()
        flattened = _expander(data).expand_events(
            _events(data),
            parse_datetime_value(_require(data, 'windowStart')),
            parse_datetime_value(_require(data, 'windowEnd')),
            member_ids=data.get('memberIds'),
        )
        return jsonify({"events": [event.to_dict() for event in flattened]})
    except ValidationError as e:
        return _bad_request(e)
    except Exception as e:
        return _server_error(e)


@calendar_bp.route("/layout", methods=["POST"])
def layout():
    """Lay out one day: {events, day?}. Without a day the events are taken as already filtered."""
    try:
        data = _payload()
        events = _events(data)
        if data.get('day'):
            try:
                day = date.fromisoformat(str(data['day']))
            except ValueError:
                raise ValidationError(f"Invalid day: {data['day']!r}")
            events = events_for_day(events, day)

        layouts = layout_day(events)
        return jsonify({"layouts": {event_id: item.to_dict() for event_id, item in layouts.items()}})
    except ValidationError as e:
        return _bad_request(e)
    except Exception as e:
        return _server_error(e)


@calendar_bp.route("/all-day", methods=["POST"])
def all_day():
    """Stack all-day events: {events, dates}."""
    try:
        data = _payload()
        try:
            dates = [date.fromisoformat(str(value)) for value in _require(data, 'dates')]
        except ValueError as e:
            raise ValidationError(f'Invalid dates: {e}')

        placements = pack_all_day(_events(data), dates)
        return jsonify({
            "placements": {event_id: item.to_dict() for event_id, item in placements.items()},
            "rows": lane_count(placements),
        })
    except ValidationError as e:
        return _bad_request(e)
    except Exception as e:
        return _server_error(e)


@calendar_bp.route("/describe", methods=["POST"])
def describe():
    """Describe a rule ({rule}) or read one back from text ({text})."""
    try:
        data = _payload()
        if data.get('rule'):
            return jsonify({"description": describe_recurrence(RecurrenceRule.from_dict(data['rule']))})
        if data.get('text'):
            return jsonify({"rule": parse_recurrence(str(data['text'])).to_dict()})
        raise ValidationError('Provide either rule or text')
    except ValidationError as e:
        return _bad_request(e)
    except Exception as e:
        return _server_error(e)


@calendar_bp.route("/agenda", methods=["POST"])
def agenda():
    """Agenda text for a window: {events, windowStart, windowEnd, timeframe?, timezone?}."""
    try:
        data = _payload()
        events = _events(data)
        flattened = _expander(data).expand_events(
            events,
            parse_datetime_value(_require(data, 'windowStart')),
            parse_datetime_value(_require(data, 'windowEnd')),
            member_ids=data.get('memberIds'),
        )
        timezone = data.get('timezone') or _settings().timezone
        try:
            formatter = EventFormatter(timezone=timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationError(f"Unknown timezone: {timezone!r}")
        series_rules = {event.id: event.recurrence for event in events if event.recurrence}
        formatted_text = formatter.format_events(
            flattened,
            timeframe=data.get('timeframe', 'upcoming days'),
            series_rules=series_rules,
        )
        return jsonify({"formatted_text": formatted_text, "event_count": len(flattened)})
    except ValidationError as e:
        return _bad_request(e)
    except Exception as e:
        return _server_error(e)


@calendar_bp.route("/health", methods=["GET"])
def health():
    settings = _settings()
    return jsonify({
        "status": "healthy",
        "max_occurrences": settings.max_occurrences,
        "timezone": settings.timezone,
    })
