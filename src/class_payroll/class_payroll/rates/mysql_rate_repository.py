from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PayRate
from .repository import RateRepository


class MySQLRateRepository(RateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_candidates(self, *, teacher_id: Optional[int], course_id: Optional[int]) -> Sequence[PayRate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, teacher_id, course_id, amount
                FROM pay_rates
                WHERE (teacher_id=%s AND course_id=%s)
                   OR (teacher_id IS NULL AND course_id=%s)
                   OR (teacher_id=%s AND course_id IS NULL)
                """,
                (teacher_id, course_id, course_id, teacher_id),
            )
            return [
                PayRate(
                    rate_id=int(r["id"]),
                    amount=r["amount"],
                    teacher_id=r.get("teacher_id"),
                    course_id=r.get("course_id"),
                )
                for r in fetchall(cur)
            ]

    def set_rate(self, *, teacher_id: Optional[int], course_id: Optional[int], amount: Decimal) -> int:
        # NULLs never collide in a UNIQUE key, so look the scope up explicitly.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id FROM pay_rates
                WHERE teacher_id <=> %s AND course_id <=> %s
                FOR UPDATE
                """,
                (teacher_id, course_id),
            )
            existing = fetchone(cur)
            if existing:
                cur.execute("UPDATE pay_rates SET amount=%s WHERE id=%s", (amount, int(existing["id"])))
                return int(existing["id"])

            cur.execute(
                "INSERT INTO pay_rates(teacher_id, course_id, amount) VALUES(%s,%s,%s)",
                (teacher_id, course_id, amount),
            )
            return int(cur.lastrowid)
