"""Attendance status state machine.

scheduled -> completed -> approved | rejected; approved -> paid.
Nothing moves backwards; rejected and paid are terminal.
"""

from __future__ import annotations

from ..core.enums import AttendanceStatus
from ..core.exceptions import InvalidTransition

ALLOWED_TRANSITIONS: dict[AttendanceStatus, frozenset[AttendanceStatus]] = {
    AttendanceStatus.SCHEDULED: frozenset({AttendanceStatus.COMPLETED}),
    AttendanceStatus.COMPLETED: frozenset({AttendanceStatus.APPROVED, AttendanceStatus.REJECTED}),
    AttendanceStatus.APPROVED: frozenset({AttendanceStatus.PAID}),
    AttendanceStatus.REJECTED: frozenset(),
    AttendanceStatus.PAID: frozenset(),
}

TERMINAL = frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if not targets)


def can_transition(current: AttendanceStatus, target: AttendanceStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(current: AttendanceStatus, target: AttendanceStatus) -> None:
    if not can_transition(current, target):
        raise InvalidTransition(current.value, target.value)
