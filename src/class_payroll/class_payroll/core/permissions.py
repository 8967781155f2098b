"""Role based capability checks.

Every mutating service operation calls `require(actor, action)` before it
touches the store, so the role rules live in one table instead of being
repeated per endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .enums import Role
from .exceptions import AuthorizationError


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Action(str, Enum):
    MANAGE_EVENTS = "events.manage"
    GENERATE_COURSE_EVENTS = "courses.generate_events"
    COMPLETE_CLASS = "attendance.complete"
    REVIEW_ATTENDANCE = "attendance.review"
    PAY_ATTENDANCE = "attendance.pay"
    MANAGE_SALARY = "salary.manage"
    MANAGE_RATES = "rates.manage"
    VIEW_OWN_SALARY = "salary.view_own"


_CAPABILITIES: dict[Role, frozenset[Action]] = {
    Role.ADMIN: frozenset(Action),
    Role.TEACHER: frozenset({Action.COMPLETE_CLASS, Action.VIEW_OWN_SALARY}),
    Role.STUDENT: frozenset(),
}


def can(actor: Actor, action: Action) -> bool:
    return action in _CAPABILITIES.get(actor.role, frozenset())


def require(actor: Actor, action: Action) -> None:
    if not can(actor, action):
        raise AuthorizationError(f"Role '{actor.role.value}' may not perform '{action.value}'")


def require_self_or_admin(actor: Actor, user_id: int) -> None:
    """Teachers act only on their own records, admins on anyone's."""

    if actor.is_admin:
        return
    if int(actor.user_id) != int(user_id):
        raise AuthorizationError("You can only act on your own records")
