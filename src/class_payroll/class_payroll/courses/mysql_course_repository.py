from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Course
from .repository import CourseRepository


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, course_id: int) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, title, description, teacher_id, scheduled_time, duration_minutes, session_count
                FROM courses
                WHERE id=%s
                """,
                (int(course_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Course(
                course_id=int(r["id"]),
                title=r["title"],
                teacher_id=r.get("teacher_id"),
                description=r.get("description"),
                scheduled_time=r.get("scheduled_time"),
                duration_minutes=int(r.get("duration_minutes") or 0),
                session_count=int(r.get("session_count") or 0),
            )

    def get_title(self, course_id: int) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT title FROM courses WHERE id=%s", (int(course_id),))
            r = fetchone(cur)
            return r["title"] if r else None
