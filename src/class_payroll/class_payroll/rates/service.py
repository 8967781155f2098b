from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional

from ..common.validators import money, require_amount, require_int
from ..core.constants import DEFAULT_BASE_AMOUNT
from ..core.exceptions import ValidationError
from ..core.permissions import Action, Actor, require
from .repository import RateRepository

logger = logging.getLogger(__name__)


class RateService:
    """Resolves the per-class base amount paid for a completed class."""

    def __init__(self, rates: RateRepository, *, default_amount: Decimal = DEFAULT_BASE_AMOUNT):
        self._rates = rates
        self._default = money(default_amount)

    @property
    def default_amount(self) -> Decimal:
        return self._default

    def resolve_base_amount(self, *, teacher_id: Optional[int], course_id: Optional[int]) -> Decimal:
        if teacher_id is None and course_id is None:
            return self._default

        candidates = self._rates.find_candidates(teacher_id=teacher_id, course_id=course_id)
        if not candidates:
            return self._default

        best = max(candidates, key=lambda r: r.specificity)
        return money(best.amount)

    def set_rate(self, *, actor: Actor, teacher_id: Any, course_id: Any, amount: Any) -> int:
        require(actor, Action.MANAGE_RATES)

        teacher = None if teacher_id in (None, "") else require_int(teacher_id, "teacher_id", minimum=1)
        course = None if course_id in (None, "") else require_int(course_id, "course_id", minimum=1)
        if teacher is None and course is None:
            raise ValidationError("A rate needs a teacher_id, a course_id, or both")

        value = require_amount(amount, "amount")
        rate_id = self._rates.set_rate(teacher_id=teacher, course_id=course, amount=value)
        logger.info("Pay rate %s set to %s (teacher=%s course=%s)", rate_id, value, teacher, course)
        return rate_id
