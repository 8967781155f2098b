from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class PayRate:
    """Per-class base amount for a teacher, a course, or both."""

    rate_id: int
    amount: Decimal
    teacher_id: Optional[int] = None
    course_id: Optional[int] = None

    @property
    def specificity(self) -> int:
        # teacher+course > course > teacher
        return (2 if self.course_id is not None else 0) + (1 if self.teacher_id is not None else 0)
