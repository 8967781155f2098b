from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import SalarySource, SalaryStatus
from .model import MonthlySalaryRecord


class SalaryRepository(Protocol):
    def get_by_id(self, salary_id: int) -> Optional[MonthlySalaryRecord]:
        raise NotImplementedError

    def get_for_month(self, *, teacher_id: int, month: int, year: int) -> Optional[MonthlySalaryRecord]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int, *, limit: int) -> Sequence[MonthlySalaryRecord]:
        """Newest month first."""

        raise NotImplementedError

    def list_for_month(self, *, month: int, year: int) -> Sequence[MonthlySalaryRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        teacher_id: int,
        month: int,
        year: int,
        total_classes: int,
        total_amount: Decimal,
        bonus_amount: Decimal,
        source: SalarySource,
        status: SalaryStatus = SalaryStatus.PENDING,
        created_by: Optional[int] = None,
        admin_notes: Optional[str] = None,
    ) -> int:
        """Insert a ledger row; raises DuplicateSalaryRecord if the month is taken."""

        raise NotImplementedError

    def refresh_snapshot(
        self,
        salary_id: int,
        *,
        total_classes: int,
        total_amount: Decimal,
        bonus_amount: Decimal,
    ) -> bool:
        """Overwrite the figures of an unpaid `attendance` row. False if it is not one."""

        raise NotImplementedError

    def update_status(
        self,
        salary_id: int,
        *,
        expected: SalaryStatus,
        status: SalaryStatus,
        payment_date: Optional[datetime] = None,
    ) -> bool:
        """Conditional status change; False when the row is no longer `expected`."""

        raise NotImplementedError

    def delete(self, salary_id: int) -> bool:
        """Delete unless paid. False when nothing was deleted."""

        raise NotImplementedError

    def settle_month(self, salary_id: int, *, paid_at: datetime) -> Optional[int]:
        """Mark the ledger row paid, in one transaction with its month's attendance.

        An `attendance` snapshot must still match the month's approved
        classes (else SalaryRecordLocked); those move to `paid`. A `manual`
        row is paid alone. Returns the number of attendance records moved,
        or None when the ledger row was not in a payable status.
        """

        raise NotImplementedError

    def teacher_names(self, teacher_ids: Iterable[int]) -> dict[int, str]:
        raise NotImplementedError
