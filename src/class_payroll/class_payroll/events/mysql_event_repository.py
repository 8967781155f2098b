from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..attendance.mysql_attendance_repository import INSERT_SCHEDULED_SQL
from ..core.enums import AttendanceStatus, EventType
from ..core.exceptions import EventLocked
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from ..lectures.mysql_lecture_repository import UPSERT_LECTURE_SQL, lecture_params
from .mapping import event_from_row, event_to_row
from .model import CalendarEvent
from .repository import EventRepository

_SELECT = """
    SELECT id, title, description, event_type, start_time, end_time, all_day, color, location,
           course_id, teacher_id, payment_amount, created_by, created_at, updated_at
    FROM calendar_events
"""


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: int) -> Optional[CalendarEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE id=%s", (int(event_id),))
            r = fetchone(cur)
            return event_from_row(r) if r else None

    def list_events(
        self,
        *,
        teacher_id: Optional[int] = None,
        event_type: Optional[EventType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[CalendarEvent]:
        clauses: list[str] = []
        params: list[object] = []

        if teacher_id is not None:
            clauses.append("teacher_id=%s")
            params.append(int(teacher_id))
        if event_type is not None:
            clauses.append("event_type=%s")
            params.append(event_type.value)
        if start is not None:
            clauses.append("start_time >= %s")
            params.append(start)
        if end is not None:
            clauses.append("start_time < %s")
            params.append(end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {build_where(clauses)} ORDER BY start_time ASC, id ASC",
                tuple(params),
            )
            return [event_from_row(r) for r in fetchall(cur)]

    def create(self, fields: dict, *, base_amount: Optional[Decimal] = None) -> int:
        row = event_to_row(fields)
        columns = ", ".join(row)
        placeholders = ", ".join(["%s"] * len(row))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO calendar_events({columns}) VALUES({placeholders})",
                tuple(row.values()),
            )
            event_id = int(cur.lastrowid)

            if base_amount is not None:
                cur.execute(_SELECT + " WHERE id=%s", (event_id,))
                event = event_from_row(fetchone(cur))
                cur.execute(UPSERT_LECTURE_SQL, lecture_params(event))
                cur.execute(INSERT_SCHEDULED_SQL, (int(event.teacher_id), event_id, base_amount))
            return event_id

    def update(self, event_id: int, fields: dict) -> bool:
        row = event_to_row(fields)
        if not row:
            return self.get_by_id(event_id) is not None

        assignments = ", ".join(f"{column}=%s" for column in row)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE calendar_events SET {assignments} WHERE id=%s",
                (*row.values(), int(event_id)),
            )
            if cur.rowcount > 0:
                return True
            # MySQL reports 0 affected rows when nothing changed.
            cur.execute("SELECT id FROM calendar_events WHERE id=%s", (int(event_id),))
            return fetchone(cur) is not None

    def delete(self, event_id: int) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                # Locking the event row blocks new attendance rows referencing it.
                cur.execute("SELECT id FROM calendar_events WHERE id=%s FOR UPDATE", (int(event_id),))
                if not fetchone(cur):
                    return False

                cur.execute(
                    "SELECT status FROM teacher_class_attendance WHERE calendar_event_id=%s FOR UPDATE",
                    (int(event_id),),
                )
                if any(r["status"] != AttendanceStatus.SCHEDULED.value for r in fetchall(cur)):
                    raise EventLocked(int(event_id))

                cur.execute(
                    "DELETE FROM teacher_class_attendance WHERE calendar_event_id=%s AND status='scheduled'",
                    (int(event_id),),
                )
                cur.execute("DELETE FROM lectures WHERE event_id=%s", (int(event_id),))
                cur.execute("DELETE FROM calendar_events WHERE id=%s", (int(event_id),))
                return cur.rowcount > 0
        except mysql_errors.IntegrityError as exc:
            # 1451 = row still referenced (fk_attendance_event)
            if getattr(exc, "errno", None) == 1451:
                raise EventLocked(int(event_id)) from exc
            raise

    def upsert_course_slot(self, *, course_id: int, start_time: datetime, fields: dict) -> tuple[int, bool]:
        row = event_to_row({**fields, "course_id": int(course_id), "start_time": start_time})
        columns = ", ".join(row)
        placeholders = ", ".join(["%s"] * len(row))
        refresh = ", ".join(
            f"{column}=VALUES({column})" for column in row if column not in ("course_id", "start_time", "created_by")
        )

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO calendar_events({columns}) VALUES({placeholders})
                ON DUPLICATE KEY UPDATE {refresh}
                """,
                tuple(row.values()),
            )
            created = cur.rowcount == 1

            # If it was an update, lastrowid can be 0; fetch id.
            cur.execute(
                "SELECT id FROM calendar_events WHERE course_id=%s AND start_time=%s",
                (int(course_id), start_time),
            )
            r = fetchone(cur)
            return int(r["id"]), created
