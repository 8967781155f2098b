from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from ..attendance.model import AttendanceRecord, AttendanceView
from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..attendance.state import ensure_transition
from ..common.datetime_utils import now_local
from ..common.validators import require_amount, require_non_empty
from ..core.constants import DEFAULT_PENDING_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import AttendanceNotFound, InvalidTransition
from ..core.permissions import Action, Actor, require

logger = logging.getLogger(__name__)


class ApprovalService:
    """Admin review of completed classes: approve, reject, mark paid.

    Each transition is checked against the state machine first and then
    written with a conditional update, so two admins racing on the same
    record cannot both win.
    """

    def __init__(self, attendance: AttendanceRepository, attendance_service: AttendanceService):
        self._attendance = attendance
        self._attendance_service = attendance_service

    def _get(self, attendance_id: Any) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise AttendanceNotFound(int(attendance_id))
        return record

    def _lost_race(self, attendance_id: int, target: AttendanceStatus) -> InvalidTransition:
        current = self._get(attendance_id)
        logger.warning(
            "Attendance %s changed to '%s' concurrently; '%s' refused",
            attendance_id,
            current.status.value,
            target.value,
        )
        return InvalidTransition(current.status.value, target.value)

    def list_pending(self, *, actor: Actor, limit: Optional[int] = None) -> list[AttendanceView]:
        require(actor, Action.REVIEW_ATTENDANCE)
        return list(self._attendance.list_by_status(AttendanceStatus.COMPLETED, limit=limit or DEFAULT_PENDING_LIMIT))

    def approve(
        self,
        *,
        actor: Actor,
        attendance_id: Any,
        bonus_amount: Any = None,
        now: Optional[datetime] = None,
    ) -> AttendanceView:
        require(actor, Action.REVIEW_ATTENDANCE)

        record = self._get(attendance_id)
        ensure_transition(record.status, AttendanceStatus.APPROVED)
        bonus = require_amount(bonus_amount, "bonus_amount", default=Decimal("0.00"))

        if not self._attendance.approve(
            attendance_id=record.attendance_id,
            approved_at=now or now_local(),
            approved_by=int(actor.user_id),
            bonus_amount=bonus,
        ):
            raise self._lost_race(record.attendance_id, AttendanceStatus.APPROVED)

        logger.info("Attendance %s approved by %s (bonus=%s)", record.attendance_id, actor.user_id, bonus)
        return self._attendance_service.view_for(self._get(record.attendance_id))

    def reject(self, *, actor: Actor, attendance_id: Any, reason: Optional[str]) -> AttendanceView:
        require(actor, Action.REVIEW_ATTENDANCE)

        reason = require_non_empty(reason, "reason")
        record = self._get(attendance_id)
        ensure_transition(record.status, AttendanceStatus.REJECTED)

        if not self._attendance.reject(
            attendance_id=record.attendance_id,
            decided_by=int(actor.user_id),
            reason=reason,
        ):
            raise self._lost_race(record.attendance_id, AttendanceStatus.REJECTED)

        logger.info("Attendance %s rejected by %s", record.attendance_id, actor.user_id)
        return self._attendance_service.view_for(self._get(record.attendance_id))

    def mark_paid(self, *, actor: Actor, attendance_id: Any, now: Optional[datetime] = None) -> AttendanceView:
        require(actor, Action.PAY_ATTENDANCE)

        record = self._get(attendance_id)
        ensure_transition(record.status, AttendanceStatus.PAID)

        if not self._attendance.mark_paid(attendance_id=record.attendance_id, paid_at=now or now_local()):
            raise self._lost_race(record.attendance_id, AttendanceStatus.PAID)

        logger.info("Attendance %s marked paid", record.attendance_id)
        return self._attendance_service.view_for(self._get(record.attendance_id))
