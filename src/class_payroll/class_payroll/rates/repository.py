from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import PayRate


class RateRepository(Protocol):
    def find_candidates(self, *, teacher_id: Optional[int], course_id: Optional[int]) -> Sequence[PayRate]:
        """Rates scoped to this teacher, this course, or both."""

        raise NotImplementedError

    def set_rate(self, *, teacher_id: Optional[int], course_id: Optional[int], amount: Decimal) -> int:
        raise NotImplementedError
