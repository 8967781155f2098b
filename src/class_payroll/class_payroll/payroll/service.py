from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from ..attendance.model import MonthlyTotal
from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..common.datetime_utils import now_local
from ..common.validators import require_amount, require_int, require_month
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import SalarySource, SalaryStatus
from ..core.exceptions import (
    InvalidTransition,
    SalaryRecordLocked,
    SalaryRecordNotFound,
    ValidationError,
)
from ..core.permissions import Action, Actor, require, require_self_or_admin
from .calculator.base import EarningsCalculator
from .calculator.standard_calculator import RetainerPlusPerClassCalculator
from .model import (
    EarningsBreakdown,
    MonthlySalaryRecord,
    PayrollReportRow,
    ReconciliationReport,
    SalaryOverview,
)
from .repository import SalaryRepository

logger = logging.getLogger(__name__)

SALARY_TRANSITIONS: dict[SalaryStatus, frozenset[SalaryStatus]] = {
    SalaryStatus.PENDING: frozenset({SalaryStatus.PROCESSING, SalaryStatus.PAID, SalaryStatus.CANCELLED}),
    SalaryStatus.PROCESSING: frozenset({SalaryStatus.PENDING, SalaryStatus.PAID, SalaryStatus.CANCELLED}),
    SalaryStatus.PAID: frozenset(),
    SalaryStatus.CANCELLED: frozenset(),
}


def parse_salary_status(value: Any) -> SalaryStatus:
    try:
        return SalaryStatus(str(value or "").strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in SalaryStatus)
        raise ValidationError(f"status must be one of: {allowed}")


class PayrollService:
    """Monthly aggregation of approved classes and the salary ledger."""

    def __init__(
        self,
        salaries: SalaryRepository,
        attendance: AttendanceRepository,
        attendance_service: AttendanceService,
        *,
        calculator: Optional[EarningsCalculator] = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._salaries = salaries
        self._attendance = attendance
        self._attendance_service = attendance_service
        self._calculator = calculator or RetainerPlusPerClassCalculator()
        self._history_limit = int(history_limit)

    def _get(self, salary_id: Any) -> MonthlySalaryRecord:
        record = self._salaries.get_by_id(require_int(salary_id, "salary_id"))
        if not record:
            raise SalaryRecordNotFound(int(salary_id))
        return record

    # Aggregation

    def compute_monthly_total(self, *, teacher_id: Any, month: Any, year: Any) -> MonthlyTotal:
        teacher_id = require_int(teacher_id, "teacher_id")
        month, year = require_month(month, year)
        return self._attendance.monthly_total(teacher_id=teacher_id, month=month, year=year)

    def current_month_earnings(self, teacher_id: int, *, today: Optional[date] = None) -> EarningsBreakdown:
        today = today or now_local().date()
        attendance = self.compute_monthly_total(teacher_id=teacher_id, month=today.month, year=today.year)
        ledger = self._salaries.get_for_month(teacher_id=int(teacher_id), month=today.month, year=today.year)

        return EarningsBreakdown(
            teacher_id=int(teacher_id),
            month=today.month,
            year=today.year,
            pay_model=self._calculator.pay_model.value,
            ledger_amount=self._calculator.ledger_contribution(ledger),
            attendance=attendance,
            ledger=ledger,
        )

    def teacher_salary_overview(
        self,
        *,
        actor: Actor,
        teacher_id: Any,
        today: Optional[date] = None,
    ) -> SalaryOverview:
        require(actor, Action.VIEW_OWN_SALARY)
        teacher_id = require_int(teacher_id, "teacher_id")
        require_self_or_admin(actor, teacher_id)

        return SalaryOverview(
            earnings=self.current_month_earnings(teacher_id, today=today),
            attendance_history=self._attendance_service.get_history(teacher_id),
            salary_history=list(self._salaries.list_for_teacher(teacher_id, limit=self._history_limit)),
        )

    def salary_history(self, *, actor: Actor, teacher_id: Any) -> list[MonthlySalaryRecord]:
        require(actor, Action.MANAGE_SALARY)
        return list(self._salaries.list_for_teacher(require_int(teacher_id, "teacher_id"), limit=self._history_limit))

    # Ledger

    def create_salary_record(self, *, actor: Actor, payload: dict) -> MonthlySalaryRecord:
        require(actor, Action.MANAGE_SALARY)

        teacher_id = require_int(payload.get("teacher_id"), "teacher_id", minimum=1)
        month, year = require_month(payload.get("month"), payload.get("year"))
        total_classes = require_int(payload.get("total_classes", 0), "total_classes", minimum=0)
        total_amount = require_amount(payload.get("total_amount"), "total_amount")
        bonus_amount = require_amount(payload.get("bonus_amount"), "bonus_amount", default=Decimal("0.00"))
        notes = (payload.get("admin_notes") or "").strip() or None

        salary_id = self._salaries.create(
            teacher_id=teacher_id,
            month=month,
            year=year,
            total_classes=total_classes,
            total_amount=total_amount,
            bonus_amount=bonus_amount,
            source=SalarySource.MANUAL,
            created_by=int(actor.user_id),
            admin_notes=notes,
        )
        logger.info("Salary record %s created for teacher %s (%02d/%d)", salary_id, teacher_id, month, year)
        return self._get(salary_id)

    def update_salary_status(
        self,
        *,
        actor: Actor,
        salary_id: Any,
        status: Any,
        now: Optional[datetime] = None,
    ) -> MonthlySalaryRecord:
        require(actor, Action.MANAGE_SALARY)

        target = parse_salary_status(status)
        record = self._get(salary_id)
        if target not in SALARY_TRANSITIONS[record.status]:
            raise InvalidTransition(record.status.value, target.value)

        # Paying always goes through settle_month so a snapshot pays its classes with it.
        if target == SalaryStatus.PAID:
            return self.settle_month(actor=actor, salary_id=record.salary_id, now=now)

        if not self._salaries.update_status(record.salary_id, expected=record.status, status=target):
            raise InvalidTransition(self._get(record.salary_id).status.value, target.value)

        logger.info("Salary record %s: %s -> %s", record.salary_id, record.status.value, target.value)
        return self._get(record.salary_id)

    def delete_salary_record(self, *, actor: Actor, salary_id: Any) -> None:
        require(actor, Action.MANAGE_SALARY)

        record = self._get(salary_id)
        if record.status == SalaryStatus.PAID:
            raise SalaryRecordLocked(f"Salary record {record.salary_id} is paid and cannot be deleted")
        if not self._salaries.delete(record.salary_id):
            current = self._salaries.get_by_id(record.salary_id)
            if current is None:
                raise SalaryRecordNotFound(record.salary_id)
            raise SalaryRecordLocked(f"Salary record {record.salary_id} is {current.status.value} and cannot be deleted")
        logger.info("Salary record %s deleted", record.salary_id)

    # Month close

    def close_month(self, *, actor: Actor, teacher_id: Any, month: Any, year: Any) -> MonthlySalaryRecord:
        """Write or refresh the attendance snapshot row for one teacher and month."""

        require(actor, Action.MANAGE_SALARY)
        teacher_id = require_int(teacher_id, "teacher_id", minimum=1)
        month, year = require_month(month, year)

        total = self._attendance.monthly_total(teacher_id=teacher_id, month=month, year=year)
        existing = self._salaries.get_for_month(teacher_id=teacher_id, month=month, year=year)

        if existing is None:
            salary_id = self._salaries.create(
                teacher_id=teacher_id,
                month=month,
                year=year,
                total_classes=total.count,
                total_amount=total.base_total,
                bonus_amount=total.bonus_total,
                source=SalarySource.ATTENDANCE,
                created_by=int(actor.user_id),
            )
            logger.info("Closed %02d/%d for teacher %s: %d classes, %s", month, year, teacher_id, total.count, total.total)
            return self._get(salary_id)

        if existing.source == SalarySource.MANUAL:
            raise SalaryRecordLocked(
                f"Teacher {teacher_id} already has a manual salary record for {month:02d}/{year}"
            )
        if not self._salaries.refresh_snapshot(
            existing.salary_id,
            total_classes=total.count,
            total_amount=total.base_total,
            bonus_amount=total.bonus_total,
        ):
            raise SalaryRecordLocked(f"Salary record {existing.salary_id} is {existing.status.value} and cannot be refreshed")

        logger.info("Refreshed snapshot %s: %d classes, %s", existing.salary_id, total.count, total.total)
        return self._get(existing.salary_id)

    def close_month_for_all(self, *, actor: Actor, month: Any, year: Any) -> tuple[list[MonthlySalaryRecord], list[str]]:
        """Close the month for every teacher with approved classes.

        Returns the written rows and one message per teacher that was skipped.
        """

        require(actor, Action.MANAGE_SALARY)
        month, year = require_month(month, year)

        closed: list[MonthlySalaryRecord] = []
        skipped: list[str] = []
        for teacher_id in self._attendance.teachers_with_approvals(month=month, year=year):
            try:
                closed.append(self.close_month(actor=actor, teacher_id=teacher_id, month=month, year=year))
            except SalaryRecordLocked as e:
                logger.info("Skipping teacher %s: %s", teacher_id, e)
                skipped.append(str(e))
        return closed, skipped

    def settle_month(self, *, actor: Actor, salary_id: Any, now: Optional[datetime] = None) -> MonthlySalaryRecord:
        require(actor, Action.MANAGE_SALARY)

        record = self._get(salary_id)
        if SalaryStatus.PAID not in SALARY_TRANSITIONS[record.status]:
            raise InvalidTransition(record.status.value, SalaryStatus.PAID.value)

        moved = self._salaries.settle_month(record.salary_id, paid_at=now or now_local())
        if moved is None:
            raise InvalidTransition(self._get(record.salary_id).status.value, SalaryStatus.PAID.value)

        logger.info(
            "Settled salary %s (teacher %s, %02d/%d): %d attendance record(s) paid",
            record.salary_id,
            record.teacher_id,
            record.month,
            record.year,
            moved,
        )
        return self._get(record.salary_id)

    # Reporting

    def reconcile(self, *, actor: Actor, teacher_id: Any, month: Any, year: Any) -> ReconciliationReport:
        require(actor, Action.MANAGE_SALARY)
        teacher_id = require_int(teacher_id, "teacher_id")
        month, year = require_month(month, year)

        total = self._attendance.monthly_total(teacher_id=teacher_id, month=month, year=year)
        ledger = self._salaries.get_for_month(teacher_id=teacher_id, month=month, year=year)
        report = ReconciliationReport(
            teacher_id=teacher_id,
            month=month,
            year=year,
            ledger_amount=ledger.final_amount if ledger else None,
            attendance_amount=total.total,
            ledger_source=ledger.source if ledger else None,
        )
        if report.diverged:
            logger.warning(
                "Ledger %s for teacher %s (%02d/%d) is %s but approved attendance totals %s",
                ledger.salary_id,
                teacher_id,
                month,
                year,
                report.ledger_amount,
                report.attendance_amount,
            )
        return report

    def monthly_report(self, *, actor: Actor, month: Any, year: Any) -> list[PayrollReportRow]:
        require(actor, Action.MANAGE_SALARY)
        month, year = require_month(month, year)

        ledgers = {s.teacher_id: s for s in self._salaries.list_for_month(month=month, year=year)}
        teacher_ids = sorted(set(ledgers) | set(self._attendance.teachers_with_approvals(month=month, year=year)))
        names = self._salaries.teacher_names(teacher_ids)

        rows: list[PayrollReportRow] = []
        for teacher_id in teacher_ids:
            total = self._attendance.monthly_total(teacher_id=teacher_id, month=month, year=year)
            ledger = ledgers.get(teacher_id)
            rows.append(
                PayrollReportRow(
                    teacher_id=teacher_id,
                    teacher_name=names.get(teacher_id),
                    classes=total.count,
                    attendance_amount=total.total,
                    paid_amount=total.paid_total,
                    ledger_amount=ledger.final_amount if ledger else None,
                    ledger_status=ledger.status if ledger else None,
                    ledger_source=ledger.source if ledger else None,
                )
            )
        return rows
