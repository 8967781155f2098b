from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import require_int
from ..core.enums import AttendanceStatus, EventType
from ..core.exceptions import EventLocked, EventNotFound, ValidationError
from ..core.permissions import Action, Actor, require
from ..lectures.repository import LectureRepository
from .mapping import normalize_event_payload, parse_event_type
from .model import CalendarEvent
from .repository import EventRepository

logger = logging.getLogger(__name__)


class EventService:
    """Calendar event CRUD.

    Creating a class event with a teacher also projects a lecture and a
    `scheduled` attendance record. Projections are generated one way only:
    later edits to the event are not pushed to them.
    """

    def __init__(
        self,
        events: EventRepository,
        lectures: LectureRepository,
        attendance: AttendanceRepository,
        attendance_service: AttendanceService,
    ):
        self._events = events
        self._lectures = lectures
        self._attendance = attendance
        self._attendance_service = attendance_service

    @staticmethod
    def _check_times(start: Optional[datetime], end: Optional[datetime]) -> None:
        if start is not None and end is not None and end < start:
            raise ValidationError("end_time must not be before start_time")

    def get(self, event_id: int) -> CalendarEvent:
        event = self._events.get_by_id(int(event_id))
        if not event:
            raise EventNotFound(int(event_id))
        return event

    def list_events(
        self,
        *,
        teacher_id: Any = None,
        event_type: Any = None,
        start: Any = None,
        end: Any = None,
    ) -> list[CalendarEvent]:
        return list(
            self._events.list_events(
                teacher_id=require_int(teacher_id, "teacher_id") if teacher_id not in (None, "") else None,
                event_type=parse_event_type(event_type) if event_type not in (None, "") else None,
                start=parse_iso_datetime(start, "start") if start else None,
                end=parse_iso_datetime(end, "end") if end else None,
            )
        )

    def sync_projections(self, event: CalendarEvent) -> None:
        """(Re)generate the lecture and scheduled attendance of a class event."""

        if not event.is_class or event.teacher_id is None:
            return
        self._lectures.upsert_for_event(event)
        self._attendance_service.ensure_scheduled(event)

    def create(self, *, actor: Actor, payload: dict) -> CalendarEvent:
        require(actor, Action.MANAGE_EVENTS)

        fields = normalize_event_payload(payload)
        self._check_times(fields["start_time"], fields["end_time"])
        fields["created_by"] = actor.user_id

        base_amount = None
        if fields["event_type"] == EventType.CLASS:
            if fields.get("teacher_id"):
                base_amount = self._attendance_service.base_amount_for(
                    teacher_id=fields["teacher_id"], course_id=fields.get("course_id")
                )
            else:
                logger.warning("Class event '%s' created without a teacher; nobody can complete it", fields["title"])

        # The event and its projections are written together.
        event_id = self._events.create(fields, base_amount=base_amount)
        event = self.get(event_id)

        logger.info("Event %s created (%s)", event.event_id, event.event_type.value)
        return event

    def update(self, *, actor: Actor, event_id: int, payload: dict) -> CalendarEvent:
        require(actor, Action.MANAGE_EVENTS)

        current = self.get(event_id)
        fields = normalize_event_payload(payload, partial=True)
        fields.pop("created_by", None)
        self._check_times(fields.get("start_time", current.start_time), fields.get("end_time", current.end_time))

        settled = [r for r in self._attendance.list_for_event(current.event_id) if r.status != AttendanceStatus.SCHEDULED]
        if settled and fields:
            logger.warning(
                "Event %s edited after %d attendance record(s) were completed; payroll keeps the original completion",
                current.event_id,
                len(settled),
            )

        if not self._events.update(current.event_id, fields):
            raise EventNotFound(current.event_id)
        return self.get(current.event_id)

    def delete(self, *, actor: Actor, event_id: int) -> None:
        require(actor, Action.MANAGE_EVENTS)

        event = self.get(event_id)
        if any(r.status != AttendanceStatus.SCHEDULED for r in self._attendance.list_for_event(event.event_id)):
            raise EventLocked(event.event_id)

        # Re-checked under lock by the repository, together with the
        # scheduled attendance and lecture deletes.
        if not self._events.delete(event.event_id):
            raise EventNotFound(event.event_id)
        logger.info("Event %s deleted", event.event_id)
