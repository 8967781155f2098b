from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import EventInFuture, EventNotClassType, EventNotFound, TeacherMismatch
from ..core.permissions import Action, Actor, require, require_self_or_admin
from ..courses.repository import CourseRepository
from ..events.model import CalendarEvent
from ..events.repository import EventRepository
from ..rates.service import RateService
from .model import AttendanceRecord, AttendanceView, CompletionResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Turns a finished class event into the teacher's attendance record."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        events: EventRepository,
        courses: CourseRepository,
        rates: RateService,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._attendance = attendance
        self._events = events
        self._courses = courses
        self._rates = rates
        self._history_limit = int(history_limit)

    def _load_class_event(self, *, teacher_id: int, event_id: int, now: datetime) -> CalendarEvent:
        event = self._events.get_by_id(event_id)
        if not event:
            raise EventNotFound(event_id)
        if not event.is_class:
            raise EventNotClassType(event_id, event.event_type.value)
        if event.teacher_id is None or int(event.teacher_id) != int(teacher_id):
            raise TeacherMismatch(event_id, teacher_id)
        if event.start_time > now:
            raise EventInFuture(event_id)
        return event

    def view_for(self, record: AttendanceRecord, event: Optional[CalendarEvent] = None) -> AttendanceView:
        """Attach event and course display fields to a record."""

        event = event or self._events.get_by_id(record.event_id)
        if event is None:
            return AttendanceView(record=record)

        course_title = self._courses.get_title(event.course_id) if event.course_id else None
        return AttendanceView(
            record=record,
            event_title=event.title,
            event_start=event.start_time,
            event_end=event.end_time,
            course_id=event.course_id,
            course_title=course_title,
        )

    def mark_complete(
        self,
        *,
        actor: Actor,
        teacher_id: int,
        event_id: int,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CompletionResult:
        require(actor, Action.COMPLETE_CLASS)
        require_self_or_admin(actor, teacher_id)

        now = now or now_local()
        event = self._load_class_event(teacher_id=int(teacher_id), event_id=int(event_id), now=now)

        base_amount = self._rates.resolve_base_amount(teacher_id=event.teacher_id, course_id=event.course_id)
        record, changed = self._attendance.upsert_completed(
            teacher_id=int(teacher_id),
            event_id=event.event_id,
            completed_at=now,
            base_amount=base_amount,
            notes=(notes or "").strip() or None,
        )

        if changed:
            logger.info("Attendance %s completed (teacher=%s event=%s)", record.attendance_id, teacher_id, event_id)
        else:
            logger.debug(
                "Attendance %s already %s, mark-complete is a no-op", record.attendance_id, record.status.value
            )

        already = not changed and record.status != AttendanceStatus.SCHEDULED
        return CompletionResult(view=self.view_for(record, event), already_completed=already)

    def base_amount_for(self, *, teacher_id: int, course_id: Optional[int]) -> Decimal:
        return self._rates.resolve_base_amount(teacher_id=int(teacher_id), course_id=course_id)

    def ensure_scheduled(self, event: CalendarEvent) -> bool:
        """Create the `scheduled` record a class event implies. Idempotent."""

        if not event.is_class or event.teacher_id is None:
            return False
        base_amount = self.base_amount_for(teacher_id=event.teacher_id, course_id=event.course_id)
        return self._attendance.ensure_scheduled(
            teacher_id=int(event.teacher_id),
            event_id=event.event_id,
            base_amount=base_amount,
        )

    def get_history(self, teacher_id: int, *, limit: Optional[int] = None) -> list[AttendanceView]:
        return list(self._attendance.list_history(int(teacher_id), limit=limit or self._history_limit))
