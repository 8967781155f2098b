from datetime import datetime
from decimal import Decimal

import pytest

from src.class_payroll.class_payroll.core.enums import EventType
from src.class_payroll.class_payroll.core.exceptions import ValidationError
from src.class_payroll.class_payroll.events.mapping import event_from_row, event_to_dict, event_to_row, normalize_event_payload


def test_aliases_are_renamed_and_generated_fields_dropped():
    fields = normalize_event_payload(
        {
            "id": 55,
            "created_at": "2026-01-01T00:00:00",
            "total_amount": "999",
            "title": " Lab ",
            "type": "CLASS",
            "event_date": "2026-03-01T08:00:00",
            "end": "2026-03-01T09:00:00",
            "allDay": "false",
            "teacherId": "7",
            "paymentAmount": "12.5",
            "unknown": "x",
        }
    )

    assert fields == {
        "title": "Lab",
        "event_type": EventType.CLASS,
        "start_time": datetime(2026, 3, 1, 8, 0),
        "end_time": datetime(2026, 3, 1, 9, 0),
        "all_day": False,
        "teacher_id": 7,
        "payment_amount": Decimal("12.50"),
    }


def test_missing_required_fields_on_create():
    with pytest.raises(ValidationError) as exc:
        normalize_event_payload({"title": "x", "type": "class"})
    assert "start_time" in str(exc.value)


def test_partial_payload_allows_missing_fields():
    assert normalize_event_payload({"color": "#fff"}, partial=True) == {"color": "#fff"}


def test_bad_datetime():
    with pytest.raises(ValidationError):
        normalize_event_payload({"start": "yesterday"}, partial=True)


def test_row_round_trip_maps_columns():
    row = {
        "id": 3,
        "title": "Lab",
        "description": None,
        "event_type": "class",
        "start_time": datetime(2026, 3, 1, 8, 0),
        "end_time": datetime(2026, 3, 1, 9, 0),
        "all_day": 0,
        "course_id": 2,
        "teacher_id": 7,
    }
    event = event_from_row(row)

    assert event.is_class and event.duration_minutes == 60
    assert event_to_dict(event)["start_time"] == "2026-03-01T08:00:00"
    assert event_to_row({"event_type": EventType.EXAM, "all_day": True}) == {"event_type": "exam", "all_day": 1}
