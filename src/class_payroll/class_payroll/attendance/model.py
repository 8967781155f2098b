from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import iso
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: a teacher's completion of one class event.

    At most one record exists per (teacher_id, event_id).
    """

    attendance_id: int
    teacher_id: int
    event_id: int
    status: AttendanceStatus
    base_amount: Decimal
    bonus_amount: Decimal = Decimal("0.00")
    total_amount: Optional[Decimal] = None
    completed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[int] = None
    paid_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceView:
    """Read-model: the record plus looked-up display fields (not stored)."""

    record: AttendanceRecord
    event_title: Optional[str] = None
    event_start: Optional[datetime] = None
    event_end: Optional[datetime] = None
    course_id: Optional[int] = None
    course_title: Optional[str] = None
    teacher_name: Optional[str] = None

    def to_dict(self) -> dict:
        r = self.record
        return {
            "id": r.attendance_id,
            "teacher_id": r.teacher_id,
            "event_id": r.event_id,
            "status": r.status.value,
            "base_amount": str(r.base_amount),
            "bonus_amount": str(r.bonus_amount),
            "total_amount": str(r.total_amount) if r.total_amount is not None else None,
            "completed_at": iso(r.completed_at),
            "approved_at": iso(r.approved_at),
            "approved_by": r.approved_by,
            "paid_at": iso(r.paid_at),
            "rejection_reason": r.rejection_reason,
            "notes": r.notes,
            "event_title": self.event_title,
            "event_start": iso(self.event_start),
            "event_end": iso(self.event_end),
            "course_id": self.course_id,
            "course_title": self.course_title,
            "teacher_name": self.teacher_name,
        }


@dataclass(frozen=True)
class MonthlyTotal:
    """Aggregate of the classes approved for one teacher in one month.

    `paid_*` is the part of the total that has already been disbursed.
    """

    teacher_id: int
    month: int
    year: int
    count: int = 0
    total: Decimal = Decimal("0.00")
    base_total: Decimal = Decimal("0.00")
    bonus_total: Decimal = Decimal("0.00")
    paid_count: int = 0
    paid_total: Decimal = Decimal("0.00")

    @property
    def outstanding(self) -> Decimal:
        return self.total - self.paid_total

    def to_dict(self) -> dict:
        return {
            "teacher_id": self.teacher_id,
            "month": self.month,
            "year": self.year,
            "count": self.count,
            "total": str(self.total),
            "base_total": str(self.base_total),
            "bonus_total": str(self.bonus_total),
            "paid_count": self.paid_count,
            "paid_total": str(self.paid_total),
            "outstanding": str(self.outstanding),
        }


@dataclass(frozen=True)
class CompletionResult:
    view: AttendanceView
    already_completed: bool = False
