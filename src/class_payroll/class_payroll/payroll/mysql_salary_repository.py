from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..common.datetime_utils import month_bounds
from ..common.validators import money
from ..core.enums import SalarySource, SalaryStatus
from ..core.exceptions import DuplicateSalaryRecord, SalaryRecordLocked
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import MonthlySalaryRecord
from .repository import SalaryRepository

_SELECT = """
    SELECT id, teacher_id, month, year, total_classes, total_amount, bonus_amount, final_amount,
           status, source, payment_date, created_by, admin_notes, created_at
    FROM salary_payments
"""


def _salary_from_row(r: dict) -> MonthlySalaryRecord:
    return MonthlySalaryRecord(
        salary_id=int(r["id"]),
        teacher_id=int(r["teacher_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        total_classes=int(r.get("total_classes") or 0),
        total_amount=money(r.get("total_amount")),
        bonus_amount=money(r.get("bonus_amount")),
        final_amount=money(r.get("final_amount")),
        status=SalaryStatus(r["status"]),
        source=SalarySource(r.get("source") or SalarySource.MANUAL.value),
        payment_date=r.get("payment_date"),
        created_by=r.get("created_by"),
        admin_notes=r.get("admin_notes"),
        created_at=r.get("created_at"),
    )


class MySQLSalaryRepository(SalaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, salary_id: int) -> Optional[MonthlySalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE id=%s", (int(salary_id),))
            r = fetchone(cur)
            return _salary_from_row(r) if r else None

    def get_for_month(self, *, teacher_id: int, month: int, year: int) -> Optional[MonthlySalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE teacher_id=%s AND month=%s AND year=%s",
                (int(teacher_id), int(month), int(year)),
            )
            r = fetchone(cur)
            return _salary_from_row(r) if r else None

    def list_for_teacher(self, teacher_id: int, *, limit: int) -> Sequence[MonthlySalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE teacher_id=%s ORDER BY year DESC, month DESC LIMIT %s",
                (int(teacher_id), int(limit)),
            )
            return [_salary_from_row(r) for r in fetchall(cur)]

    def list_for_month(self, *, month: int, year: int) -> Sequence[MonthlySalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE month=%s AND year=%s ORDER BY teacher_id",
                (int(month), int(year)),
            )
            return [_salary_from_row(r) for r in fetchall(cur)]

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO salary_payments(
                        teacher_id, month, year, total_classes, total_amount, bonus_amount,
                        status, source, created_by, admin_notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(teacher_id),
                        int(month),
                        int(year),
                        int(total_classes),
                        total_amount,
                        bonus_amount,
                        status.value,
                        source.value,
                        created_by,
                        admin_notes,
                    ),
                )
                return int(cur.lastrowid)
        except mysql_errors.IntegrityError as exc:
            # 1062 = duplicate entry on uq_salary_teacher_month
            if getattr(exc, "errno", None) == 1062:
                raise DuplicateSalaryRecord(int(teacher_id), int(month), int(year)) from exc
            raise

    def refresh_snapshot(
        self,
        salary_id: int,
        *,
        total_classes: int,
        total_amount: Decimal,
        bonus_amount: Decimal,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE salary_payments
                SET total_classes=%s, total_amount=%s, bonus_amount=%s
                WHERE id=%s AND source='attendance' AND status IN ('pending','processing')
                """,
                (int(total_classes), total_amount, bonus_amount, int(salary_id)),
            )
            if cur.rowcount > 0:
                return True
            # Unchanged figures report 0 affected rows as well.
            cur.execute(
                """
                SELECT id FROM salary_payments
                WHERE id=%s AND source='attendance' AND status IN ('pending','processing')
                """,
                (int(salary_id),),
            )
            return fetchone(cur) is not None

    def update_status(
        self,
        salary_id: int,
        *,
        expected: SalaryStatus,
        status: SalaryStatus,
        payment_date: Optional[datetime] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE salary_payments
                SET status=%s, payment_date=COALESCE(%s, payment_date)
                WHERE id=%s AND status=%s
                """,
                (status.value, payment_date, int(salary_id), expected.value),
            )
            return cur.rowcount > 0

    def delete(self, salary_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM salary_payments WHERE id=%s AND status<>'paid'", (int(salary_id),))
            return cur.rowcount > 0

    def settle_month(self, salary_id: int, *, paid_at: datetime) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE id=%s AND status IN ('pending','processing') FOR UPDATE",
                (int(salary_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            ledger = _salary_from_row(row)

            cur.execute(
                "UPDATE salary_payments SET status='paid', payment_date=%s WHERE id=%s",
                (paid_at, ledger.salary_id),
            )
            # A manual row pays a retainer, not the classes of the month.
            if ledger.source == SalarySource.MANUAL:
                return 0

            start, end = month_bounds(ledger.month, ledger.year)
            cur.execute(
                """
                SELECT status, base_amount, bonus_amount
                FROM teacher_class_attendance
                WHERE teacher_id=%s AND status IN ('approved','paid')
                  AND approved_at >= %s AND approved_at < %s
                FOR UPDATE
                """,
                (ledger.teacher_id, start, end),
            )
            rows = fetchall(cur)
            base_total = sum((money(r["base_amount"]) for r in rows), Decimal("0.00"))
            bonus_total = sum((money(r["bonus_amount"]) for r in rows), Decimal("0.00"))
            if (len(rows), base_total, bonus_total) != (ledger.total_classes, ledger.total_amount, ledger.bonus_amount):
                raise SalaryRecordLocked(
                    f"Salary record {ledger.salary_id} no longer matches the approved classes of "
                    f"{ledger.month:02d}/{ledger.year}; close the month again before settling"
                )

            cur.execute(
                """
                UPDATE teacher_class_attendance
                SET status='paid', paid_at=%s
                WHERE teacher_id=%s AND status='approved'
                  AND approved_at >= %s AND approved_at < %s
                """,
                (paid_at, ledger.teacher_id, start, end),
            )
            return int(cur.rowcount)

    def teacher_names(self, teacher_ids: Iterable[int]) -> dict[int, str]:
        ids = sorted({int(t) for t in teacher_ids})
        if not ids:
            return {}
        placeholders = ", ".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, full_name FROM profiles WHERE id IN ({placeholders})", tuple(ids))
            return {int(r["id"]): r["full_name"] for r in fetchall(cur)}
