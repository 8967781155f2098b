from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import month_bounds
from ..common.validators import money
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, AttendanceView, MonthlyTotal
from .repository import AttendanceRepository

_COLUMNS = """
    a.id, a.teacher_id, a.calendar_event_id, a.status, a.base_amount, a.bonus_amount, a.total_amount,
    a.completed_at, a.approved_at, a.approved_by, a.paid_at, a.rejection_reason, a.notes, a.created_at
"""

_VIEW_SELECT = f"""
    SELECT {_COLUMNS},
           e.title AS event_title, e.start_time AS event_start, e.end_time AS event_end,
           e.course_id, c.title AS course_title, p.full_name AS teacher_name
    FROM teacher_class_attendance a
    JOIN calendar_events e ON e.id = a.calendar_event_id
    LEFT JOIN courses c ON c.id = e.course_id
    LEFT JOIN profiles p ON p.id = a.teacher_id
"""


INSERT_SCHEDULED_SQL = """
    INSERT IGNORE INTO teacher_class_attendance(teacher_id, calendar_event_id, status, base_amount)
    VALUES(%s,%s,'scheduled',%s)
"""

def _record_from_row(r: dict) -> AttendanceRecord:
    # The table names the event column calendar_event_id; the domain calls it event_id.
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        teacher_id=int(r["teacher_id"]),
        event_id=int(r["calendar_event_id"]),
        status=AttendanceStatus(r["status"]),
        base_amount=money(r["base_amount"]),
        bonus_amount=money(r.get("bonus_amount")),
        total_amount=money(r["total_amount"]) if r.get("total_amount") is not None else None,
        completed_at=r.get("completed_at"),
        approved_at=r.get("approved_at"),
        approved_by=r.get("approved_by"),
        paid_at=r.get("paid_at"),
        rejection_reason=r.get("rejection_reason"),
        notes=r.get("notes"),
        created_at=r.get("created_at"),
    )


def _view_from_row(r: dict) -> AttendanceView:
    return AttendanceView(
        record=_record_from_row(r),
        event_title=r.get("event_title"),
        event_start=r.get("event_start"),
        event_end=r.get("event_end"),
        course_id=r.get("course_id"),
        course_title=r.get("course_title"),
        teacher_name=r.get("teacher_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teacher_class_attendance a WHERE a.id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _record_from_row(r) if r else None

    def get_for_teacher_and_event(self, teacher_id: int, event_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM teacher_class_attendance a
                WHERE a.teacher_id=%s AND a.calendar_event_id=%s
                """,
                (int(teacher_id), int(event_id)),
            )
            r = fetchone(cur)
            return _record_from_row(r) if r else None

    def list_for_event(self, event_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM teacher_class_attendance a WHERE a.calendar_event_id=%s ORDER BY a.id",
                (int(event_id),),
            )
            return [_record_from_row(r) for r in fetchall(cur)]

    def ensure_scheduled(self, *, teacher_id: int, event_id: int, base_amount: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(INSERT_SCHEDULED_SQL, (int(teacher_id), int(event_id), base_amount))
            return cur.rowcount == 1

    def upsert_completed(
        self,
        *,
        teacher_id: int,
        event_id: int,
        completed_at: datetime,
        base_amount: Decimal,
        notes: Optional[str] = None,
    ) -> tuple[AttendanceRecord, bool]:
        # Assignments run left to right, so `status` must be the last one:
        # the guards above it still see the old value.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teacher_class_attendance(teacher_id, calendar_event_id, status, completed_at, base_amount, notes)
                VALUES(%s,%s,'completed',%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    completed_at = IF(status='scheduled', VALUES(completed_at), completed_at),
                    notes = IF(status='scheduled', COALESCE(VALUES(notes), notes), notes),
                    status = IF(status='scheduled', 'completed', status)
                """,
                (int(teacher_id), int(event_id), completed_at, base_amount, notes),
            )
            # 1 = inserted, 2 = scheduled row advanced, 0 = left as it was.
            changed = cur.rowcount in (1, 2)

            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM teacher_class_attendance a
                WHERE a.teacher_id=%s AND a.calendar_event_id=%s
                """,
                (int(teacher_id), int(event_id)),
            )
            return _record_from_row(fetchone(cur)), changed

    def approve(
        self,
        *,
        attendance_id: int,
        approved_at: datetime,
        approved_by: int,
        bonus_amount: Decimal,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE teacher_class_attendance
                SET status='approved', approved_at=%s, approved_by=%s,
                    bonus_amount=%s, total_amount=base_amount + %s
                WHERE id=%s AND status='completed'
                """,
                (approved_at, int(approved_by), bonus_amount, bonus_amount, int(attendance_id)),
            )
            return cur.rowcount > 0

    def reject(self, *, attendance_id: int, decided_by: int, reason: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE teacher_class_attendance
                SET status='rejected', approved_by=%s, rejection_reason=%s
                WHERE id=%s AND status='completed'
                """,
                (int(decided_by), reason, int(attendance_id)),
            )
            return cur.rowcount > 0

    def mark_paid(self, *, attendance_id: int, paid_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE teacher_class_attendance
                SET status='paid', paid_at=%s
                WHERE id=%s AND status='approved'
                """,
                (paid_at, int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_history(self, teacher_id: int, *, limit: int) -> Sequence[AttendanceView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _VIEW_SELECT + " WHERE a.teacher_id=%s ORDER BY e.start_time DESC, a.id DESC LIMIT %s",
                (int(teacher_id), int(limit)),
            )
            return [_view_from_row(r) for r in fetchall(cur)]

    def list_by_status(self, status: AttendanceStatus, *, limit: int) -> Sequence[AttendanceView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _VIEW_SELECT + " WHERE a.status=%s ORDER BY e.start_time ASC, a.id ASC LIMIT %s",
                (status.value, int(limit)),
            )
            return [_view_from_row(r) for r in fetchall(cur)]

    def monthly_total(self, *, teacher_id: int, month: int, year: int) -> MonthlyTotal:
        start, end = month_bounds(month, year)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    COUNT(*) AS cnt,
                    COALESCE(SUM(total_amount), 0) AS total,
                    COALESCE(SUM(base_amount), 0) AS base_total,
                    COALESCE(SUM(bonus_amount), 0) AS bonus_total,
                    COALESCE(SUM(status='paid'), 0) AS paid_count,
                    COALESCE(SUM(CASE WHEN status='paid' THEN total_amount ELSE 0 END), 0) AS paid_total
                FROM teacher_class_attendance
                WHERE teacher_id=%s
                  AND status IN ('approved','paid')
                  AND approved_at >= %s AND approved_at < %s
                """,
                (int(teacher_id), start, end),
            )
            r = fetchone(cur) or {}
            return MonthlyTotal(
                teacher_id=int(teacher_id),
                month=int(month),
                year=int(year),
                count=int(r.get("cnt") or 0),
                total=money(r.get("total")),
                base_total=money(r.get("base_total")),
                bonus_total=money(r.get("bonus_total")),
                paid_count=int(r.get("paid_count") or 0),
                paid_total=money(r.get("paid_total")),
            )

    def teachers_with_approvals(self, *, month: int, year: int) -> Sequence[int]:
        start, end = month_bounds(month, year)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT teacher_id
                FROM teacher_class_attendance
                WHERE status IN ('approved','paid') AND approved_at >= %s AND approved_at < %s
                ORDER BY teacher_id
                """,
                (start, end),
            )
            return [int(r["teacher_id"]) for r in fetchall(cur)]
