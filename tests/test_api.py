import pytest

from calendar_engine.api import create_app
from calendar_engine.config import EngineSettings


@pytest.fixture
def client():
    app = create_app(EngineSettings(max_occurrences=50, timezone="America/Denver"))
    app.config['TESTING'] = True
    return app.test_client()


def event(event_id, start, end, **fields):
    return {"id": event_id, "title": event_id, "startTime": start, "endTime": end, **fields}


def test_health(client):
    response = client.get("/calendar/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "healthy", "max_occurrences": 50, "timezone": "America/Denver"}


def test_expand_weekly(client):
    response = client.post("/calendar/expand", json={
        "event": event("gym", "2024-01-01T09:00:00", "2024-01-01T10:00:00"),
        "rule": {"frequency": "weekly", "interval": 1, "daysOfWeek": [1, 3]},
        "windowStart": "2024-01-01T00:00:00",
        "windowEnd": "2024-01-15T00:00:00",
    })

    assert response.status_code == 200
    occurrences = response.get_json()["occurrences"]
    assert [occ["startTime"] for occ in occurrences] == [
        "2024-01-01T09:00:00", "2024-01-03T09:00:00", "2024-01-08T09:00:00", "2024-01-10T09:00:00",
    ]
    assert all(occ["recurringEventId"] == "gym" for occ in occurrences)


def test_expand_uses_configured_ceiling(client):
    response = client.post("/calendar/expand", json={
        "event": event("daily", "2024-01-01T09:00:00", "2024-01-01T10:00:00",
                       recurrence={"frequency": "daily"}),
        "windowStart": "2024-01-01T00:00:00",
        "windowEnd": "2025-01-01T00:00:00",
    })

    assert len(response.get_json()["occurrences"]) == 50


def test_expand_rejects_invalid_rule(client):
    response = client.post("/calendar/expand", json={
        "event": event("bad", "2024-01-01T09:00:00", "2024-01-01T10:00:00"),
        "rule": {"frequency": "daily", "interval": 1, "endDate": "2024-02-01", "count": 3},
        "windowStart": "2024-01-01T00:00:00",
        "windowEnd": "2024-02-01T00:00:00",
    })

    assert response.status_code == 400
    assert response.get_json() == {"error": "Cannot specify both endDate and count"}


def test_expand_requires_json(client):
    response = client.post("/calendar/expand", data="nope")

    assert response.status_code == 400


def test_expand_all_with_member_filter(client):
    response = client.post("/calendar/expand-all", json={
        "events": [
            event("piano", "2024-01-02T16:00:00", "2024-01-02T17:00:00", memberId="kid",
                  recurrence={"frequency": "weekly"}),
            event("standup", "2024-01-02T09:00:00", "2024-01-02T09:15:00", memberId="mom"),
        ],
        "windowStart": "2024-01-01T00:00:00",
        "windowEnd": "2024-01-15T00:00:00",
        "memberIds": ["kid"],
    })

    assert [item["startTime"] for item in response.get_json()["events"]] == [
        "2024-01-02T16:00:00", "2024-01-09T16:00:00",
    ]


def test_layout_for_day(client):
    response = client.post("/calendar/layout", json={
        "day": "2024-01-01",
        "events": [
            event("A", "2024-01-01T09:00:00", "2024-01-01T10:00:00"),
            event("B", "2024-01-01T09:30:00", "2024-01-01T10:30:00"),
            event("C", "2024-01-01T10:15:00", "2024-01-01T11:00:00"),
            event("other-day", "2024-01-02T09:00:00", "2024-01-02T10:00:00"),
        ],
    })

    layouts = response.get_json()["layouts"]
    assert set(layouts) == {"A", "B", "C"}
    assert layouts["B"] == {"column": 1, "columnCount": 2, "width": 50.0, "left": 50.0}
    assert layouts["C"]["left"] == 0


def test_layout_rejects_bad_day(client):
    response = client.post("/calendar/layout", json={"day": "someday", "events": []})

    assert response.status_code == 400


def test_all_day_rows(client):
    response = client.post("/calendar/all-day", json={
        "dates": ["2024-01-01", "2024-01-02", "2024-01-03"],
        "events": [
            event("trip", "2024-01-01T00:00:00", "2024-01-03T00:00:00", isAllDay=True),
            event("party", "2024-01-02T00:00:00", "2024-01-03T00:00:00", isAllDay=True),
        ],
    })

    body = response.get_json()
    assert body["rows"] == 2
    assert body["placements"]["trip"] == {"row": 0, "startIndex": 0, "endIndex": 1, "span": 2}
    assert body["placements"]["party"]["row"] == 1


def test_describe_both_ways(client):
    described = client.post("/calendar/describe", json={"rule": {"frequency": "monthly", "dayOfMonth": 31}})
    parsed = client.post("/calendar/describe", json={"text": "Every 2 weeks on Mon, Wed"})

    assert described.get_json() == {"description": "Monthly on day 31"}
    assert parsed.get_json() == {"rule": {"frequency": "weekly", "interval": 2, "daysOfWeek": [1, 3]}}


def test_describe_needs_input(client):
    assert client.post("/calendar/describe", json={}).status_code == 400


def test_agenda(client):
    response = client.post("/calendar/agenda", json={
        "events": [event("gym", "2024-01-01T18:00:00", "2024-01-01T19:00:00",
                         recurrence={"frequency": "daily", "count": 2})],
        "windowStart": "2024-01-01T00:00:00",
        "windowEnd": "2024-01-08T00:00:00",
        "timeframe": "this week",
    })

    body = response.get_json()
    assert body["event_count"] == 2
    assert "Daily for 2 occurrences" in body["formatted_text"]


def test_agenda_rejects_unknown_timezone(client):
    response = client.post("/calendar/agenda", json={
        "events": [],
        "windowStart": "2024-01-01T00:00:00",
        "windowEnd": "2024-01-08T00:00:00",
        "timezone": "Mars/Olympus",
    })

    assert response.status_code == 400


def test_expand_rejects_zero_ceiling(client):
    response = client.post("/calendar/expand", json={
        "event": event("daily", "2024-01-01T09:00:00", "2024-01-01T10:00:00",
                       recurrence={"frequency": "daily"}),
        "windowStart": "2024-01-01T00:00:00",
        "windowEnd": "2024-01-03T00:00:00",
        "maxOccurrences": 0,
    })

    assert response.status_code == 400
    assert response.get_json() == {"error": "maxOccurrences must be at least 1"}


def test_expand_far_count_stays_within_window(client):
    response = client.post("/calendar/expand", json={
        "event": event("yearly", "2024-01-01T09:00:00", "2024-01-01T10:00:00"),
        "rule": {"frequency": "yearly", "count": 10000},
        "windowStart": "2024-01-01T00:00:00",
        "windowEnd": "2024-01-03T00:00:00",
    })

    assert response.status_code == 200
    assert [occ["startTime"] for occ in response.get_json()["occurrences"]] == ["2024-01-01T09:00:00"]


def test_describe_invalid_rule_is_bad_request(client):
    response = client.post("/calendar/describe", json={"rule": {"frequency": "weekly", "daysOfWeek": [9]}})

    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid day of week (must be 0-6)"}
