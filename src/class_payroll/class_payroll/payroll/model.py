from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..attendance.model import AttendanceView, MonthlyTotal
from ..common.datetime_utils import iso
from ..core.enums import SalarySource, SalaryStatus


@dataclass(frozen=True)
class MonthlySalaryRecord:
    """Ledger row: one per (teacher_id, month, year).

    `final_amount` is generated by the store as total_amount + bonus_amount.
    """

    salary_id: int
    teacher_id: int
    month: int
    year: int
    total_classes: int
    total_amount: Decimal
    bonus_amount: Decimal
    final_amount: Decimal
    status: SalaryStatus
    source: SalarySource = SalarySource.MANUAL
    payment_date: Optional[datetime] = None
    created_by: Optional[int] = None
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.salary_id,
            "teacher_id": self.teacher_id,
            "month": self.month,
            "year": self.year,
            "total_classes": self.total_classes,
            "total_amount": str(self.total_amount),
            "bonus_amount": str(self.bonus_amount),
            "final_amount": str(self.final_amount),
            "status": self.status.value,
            "source": self.source.value,
            "payment_date": iso(self.payment_date),
            "created_by": self.created_by,
            "admin_notes": self.admin_notes,
            "created_at": iso(self.created_at),
        }


@dataclass(frozen=True)
class EarningsBreakdown:
    """Current-month figure and the parts it was built from."""

    teacher_id: int
    month: int
    year: int
    pay_model: str
    ledger_amount: Decimal
    attendance: MonthlyTotal
    ledger: Optional[MonthlySalaryRecord] = None

    @property
    def total(self) -> Decimal:
        return self.ledger_amount + self.attendance.total

    def to_dict(self) -> dict:
        return {
            "teacher_id": self.teacher_id,
            "month": self.month,
            "year": self.year,
            "pay_model": self.pay_model,
            "total": str(self.total),
            "ledger_amount": str(self.ledger_amount),
            "attendance_amount": str(self.attendance.total),
            "attendance_count": self.attendance.count,
            "ledger": self.ledger.to_dict() if self.ledger else None,
        }


@dataclass(frozen=True)
class SalaryOverview:
    earnings: EarningsBreakdown
    attendance_history: list[AttendanceView] = field(default_factory=list)
    salary_history: list[MonthlySalaryRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "current_month_earnings": str(self.earnings.total),
            "breakdown": self.earnings.to_dict(),
            "attendance": [v.to_dict() for v in self.attendance_history],
            "salaries": [s.to_dict() for s in self.salary_history],
        }


@dataclass(frozen=True)
class ReconciliationReport:
    teacher_id: int
    month: int
    year: int
    ledger_amount: Optional[Decimal]
    attendance_amount: Decimal
    ledger_source: Optional[SalarySource] = None

    @property
    def difference(self) -> Decimal:
        return (self.ledger_amount or Decimal("0.00")) - self.attendance_amount

    @property
    def diverged(self) -> bool:
        # Only a snapshot is expected to equal the attendance total.
        return self.ledger_source == SalarySource.ATTENDANCE and self.difference != 0

    def to_dict(self) -> dict:
        return {
            "teacher_id": self.teacher_id,
            "month": self.month,
            "year": self.year,
            "ledger_amount": str(self.ledger_amount) if self.ledger_amount is not None else None,
            "ledger_source": self.ledger_source.value if self.ledger_source else None,
            "attendance_amount": str(self.attendance_amount),
            "difference": str(self.difference),
            "diverged": self.diverged,
        }


@dataclass(frozen=True)
class PayrollReportRow:
    teacher_id: int
    teacher_name: Optional[str]
    classes: int
    attendance_amount: Decimal
    paid_amount: Decimal
    ledger_amount: Optional[Decimal]
    ledger_status: Optional[SalaryStatus]
    ledger_source: Optional[SalarySource]

    def to_dict(self) -> dict:
        return {
            "teacher_id": self.teacher_id,
            "teacher_name": self.teacher_name or "-",
            "classes": self.classes,
            "attendance_amount": str(self.attendance_amount),
            "paid_amount": str(self.paid_amount),
            "ledger_amount": str(self.ledger_amount) if self.ledger_amount is not None else "",
            "ledger_status": self.ledger_status.value if self.ledger_status else "",
            "ledger_source": self.ledger_source.value if self.ledger_source else "",
        }
