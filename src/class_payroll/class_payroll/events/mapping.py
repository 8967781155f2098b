"""Explicit field mapping between request payloads, store rows and events.

Clients and older tables name the same fields differently (`start` vs
`start_time`, `type` vs `event_type`, ...). Names are translated here and
never left for the store to coerce.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..common.datetime_utils import iso, parse_iso_datetime
from ..common.validators import require_amount, require_int, require_non_empty
from ..core.constants import GENERATED_EVENT_FIELDS
from ..core.enums import EventType
from ..core.exceptions import ValidationError
from .model import CalendarEvent

logger = logging.getLogger(__name__)

EVENT_COLUMNS = (
    "title",
    "description",
    "event_type",
    "start_time",
    "end_time",
    "all_day",
    "color",
    "location",
    "course_id",
    "teacher_id",
    "payment_amount",
    "created_by",
)

PAYLOAD_ALIASES = {
    "start": "start_time",
    "end": "end_time",
    "event_date": "start_time",
    "type": "event_type",
    "allDay": "all_day",
    "teacherId": "teacher_id",
    "courseId": "course_id",
    "paymentAmount": "payment_amount",
}

REQUIRED_ON_CREATE = ("title", "event_type", "start_time", "end_time")


def _optional_id(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_int(value, field_name, minimum=1)


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def parse_event_type(value: Any) -> EventType:
    try:
        return EventType(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in EventType)
        raise ValidationError(f"Invalid event_type. Must be one of: {allowed}")


def normalize_event_payload(payload: dict, *, partial: bool = False) -> dict:
    """Translate a client payload into validated column values.

    Generated fields are dropped, aliases are renamed, unknown keys are
    ignored. With `partial=False` every required column must be present.
    """

    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    renamed: dict[str, Any] = {}
    for key, value in payload.items():
        if key in GENERATED_EVENT_FIELDS:
            continue
        column = PAYLOAD_ALIASES.get(key, key)
        if column not in EVENT_COLUMNS:
            logger.debug("Ignoring unknown event field %r", key)
            continue
        renamed[column] = value

    if not partial:
        missing = [c for c in REQUIRED_ON_CREATE if renamed.get(c) in (None, "")]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    fields: dict[str, Any] = {}
    for column, value in renamed.items():
        if column == "title":
            fields[column] = require_non_empty(value, "title")
        elif column == "event_type":
            fields[column] = parse_event_type(value)
        elif column in ("start_time", "end_time"):
            fields[column] = parse_iso_datetime(value, column)
        elif column == "all_day":
            fields[column] = _as_bool(value)
        elif column in ("course_id", "teacher_id", "created_by"):
            fields[column] = _optional_id(value, column)
        elif column == "payment_amount":
            fields[column] = None if value in (None, "") else require_amount(value, "payment_amount")
        else:
            fields[column] = _optional_text(value)

    return fields


def event_from_row(r: dict) -> CalendarEvent:
    payment = r.get("payment_amount")
    return CalendarEvent(
        event_id=int(r["id"]),
        title=r["title"],
        event_type=EventType(r["event_type"]),
        start_time=r["start_time"],
        end_time=r["end_time"],
        description=r.get("description"),
        all_day=bool(r.get("all_day") or False),
        color=r.get("color"),
        location=r.get("location"),
        course_id=int(r["course_id"]) if r.get("course_id") is not None else None,
        teacher_id=int(r["teacher_id"]) if r.get("teacher_id") is not None else None,
        payment_amount=payment,
        created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def event_to_row(fields: dict) -> dict:
    """Column values ready for a parameterised INSERT/UPDATE."""

    row = {}
    for column, value in fields.items():
        if isinstance(value, EventType):
            value = value.value
        elif column == "all_day":
            value = 1 if value else 0
        row[column] = value
    return row


def event_to_dict(event: CalendarEvent) -> dict:
    return {
        "id": event.event_id,
        "title": event.title,
        "description": event.description,
        "event_type": event.event_type.value,
        "start_time": iso(event.start_time),
        "end_time": iso(event.end_time),
        "all_day": event.all_day,
        "color": event.color,
        "location": event.location,
        "course_id": event.course_id,
        "teacher_id": event.teacher_id,
        "payment_amount": str(event.payment_amount) if event.payment_amount is not None else None,
        "created_at": iso(event.created_at),
        "updated_at": iso(event.updated_at),
    }
