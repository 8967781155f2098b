from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceView, MonthlyTotal


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_teacher_and_event(self, teacher_id: int, event_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_event(self, event_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def ensure_scheduled(self, *, teacher_id: int, event_id: int, base_amount: Decimal) -> bool:
        """Insert a `scheduled` record unless one exists. Returns True if inserted."""

        raise NotImplementedError

    def upsert_completed(
        self,
        *,
        teacher_id: int,
        event_id: int,
        completed_at: datetime,
        base_amount: Decimal,
        notes: Optional[str] = None,
    ) -> tuple[AttendanceRecord, bool]:
        """Atomically insert a `completed` record or advance a `scheduled` one.

        Rows in any other status are left untouched. Returns the stored
        record and whether this call changed it.
        """

        raise NotImplementedError

    def approve(
        self,
        *,
        attendance_id: int,
        approved_at: datetime,
        approved_by: int,
        bonus_amount: Decimal,
    ) -> bool:
        """completed -> approved; False when the record is not `completed`."""

        raise NotImplementedError

    def reject(self, *, attendance_id: int, decided_by: int, reason: str) -> bool:
        """completed -> rejected; False when the record is not `completed`."""

        raise NotImplementedError

    def mark_paid(self, *, attendance_id: int, paid_at: datetime) -> bool:
        """approved -> paid; False when the record is not `approved`."""

        raise NotImplementedError

    def list_history(self, teacher_id: int, *, limit: int) -> Sequence[AttendanceView]:
        """Teacher's records joined with event/course, newest class first."""

        raise NotImplementedError

    def list_by_status(self, status: AttendanceStatus, *, limit: int) -> Sequence[AttendanceView]:
        """Records in `status` joined with event/course/teacher, oldest class first."""

        raise NotImplementedError

    def monthly_total(self, *, teacher_id: int, month: int, year: int) -> MonthlyTotal:
        """Totals over approved (or since paid) records with approved_at in that month."""

        raise NotImplementedError

    def teachers_with_approvals(self, *, month: int, year: int) -> Sequence[int]:
        raise NotImplementedError
