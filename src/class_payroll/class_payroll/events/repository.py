from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import EventType
from .model import CalendarEvent


class EventRepository(Protocol):
    def get_by_id(self, event_id: int) -> Optional[CalendarEvent]:
        raise NotImplementedError

    def list_events(
        self,
        *,
        teacher_id: Optional[int] = None,
        event_type: Optional[EventType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[CalendarEvent]:
        """Events ordered by start_time ascending."""

        raise NotImplementedError

    def create(self, fields: dict, *, base_amount: Optional[Decimal] = None) -> int:
        """Insert an event. With `base_amount`, the lecture and the
        `scheduled` attendance of its teacher are written in the same
        transaction."""

        raise NotImplementedError

    def update(self, event_id: int, fields: dict) -> bool:
        raise NotImplementedError

    def delete(self, event_id: int) -> bool:
        """Delete an event with its lecture and scheduled attendance.

        Raises EventLocked when any attendance record has moved past
        `scheduled`. False when the event does not exist.
        """

        raise NotImplementedError

    def upsert_course_slot(self, *, course_id: int, start_time: datetime, fields: dict) -> tuple[int, bool]:
        """Create or refresh the event for one course slot.

        Keyed by (course_id, start_time). Returns (event_id, created).
        """

        raise NotImplementedError
