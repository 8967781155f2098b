from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import EventType


@dataclass(frozen=True)
class CalendarEvent:
    """Domain entity: a calendar entry (class, exam, holiday, ...).

    A `class` event with a teacher is the unit of attendance.
    """

    event_id: int
    title: str
    event_type: EventType
    start_time: datetime
    end_time: datetime
    description: Optional[str] = None
    all_day: bool = False
    color: Optional[str] = None
    location: Optional[str] = None
    course_id: Optional[int] = None
    teacher_id: Optional[int] = None
    payment_amount: Optional[Decimal] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_class(self) -> bool:
        return self.event_type == EventType.CLASS

    @property
    def duration_minutes(self) -> int:
        return max(int((self.end_time - self.start_time).total_seconds() // 60), 0)
