from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Lecture:
    """Projection of a class event used by lecture/attendance lookups."""

    lecture_id: int
    event_id: int
    title: str
    lecture_date: datetime
    duration_minutes: int
    teacher_id: Optional[int] = None
    course_id: Optional[int] = None
    description: Optional[str] = None
