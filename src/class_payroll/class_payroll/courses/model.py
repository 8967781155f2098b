from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class Course:
    """Read-only view of a course owned by the course/enrollment service."""

    course_id: int
    title: str
    teacher_id: Optional[int] = None
    description: Optional[str] = None
    scheduled_time: Optional[datetime] = None
    duration_minutes: int = 60
    session_count: int = 0

    def session_slots(self) -> list[tuple[datetime, datetime]]:
        """Weekly (start, end) slots starting at `scheduled_time`."""

        if self.scheduled_time is None or self.session_count <= 0:
            return []
        length = timedelta(minutes=max(int(self.duration_minutes), 0))
        return [
            (self.scheduled_time + timedelta(weeks=i), self.scheduled_time + timedelta(weeks=i) + length)
            for i in range(int(self.session_count))
        ]
