from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from ..events.model import CalendarEvent
from .model import Lecture
from .repository import LectureRepository

# Event start_time is stored as the lecture's lecture_date.
UPSERT_LECTURE_SQL = """
    INSERT INTO lectures(event_id, teacher_id, course_id, title, description, lecture_date, duration_minutes)
    VALUES(%s,%s,%s,%s,%s,%s,%s)
    ON DUPLICATE KEY UPDATE
        teacher_id=VALUES(teacher_id), course_id=VALUES(course_id), title=VALUES(title),
        description=VALUES(description), lecture_date=VALUES(lecture_date),
        duration_minutes=VALUES(duration_minutes)
"""


def lecture_params(event: CalendarEvent) -> tuple:
    return (
        event.event_id,
        event.teacher_id,
        event.course_id,
        event.title,
        event.description,
        event.start_time,
        event.duration_minutes,
    )


class MySQLLectureRepository(LectureRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_event(self, event_id: int) -> Optional[Lecture]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, event_id, teacher_id, course_id, title, description, lecture_date, duration_minutes
                FROM lectures
                WHERE event_id=%s
                """,
                (int(event_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Lecture(
                lecture_id=int(r["id"]),
                event_id=int(r["event_id"]),
                title=r["title"],
                lecture_date=r["lecture_date"],
                duration_minutes=int(r["duration_minutes"] or 0),
                teacher_id=r.get("teacher_id"),
                course_id=r.get("course_id"),
                description=r.get("description"),
            )

    def upsert_for_event(self, event: CalendarEvent) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(UPSERT_LECTURE_SQL, lecture_params(event))
            cur.execute("SELECT id FROM lectures WHERE event_id=%s", (event.event_id,))
            r = fetchone(cur)
            return int(r["id"]) if r else 0
