import pytest

from src.class_payroll.class_payroll.attendance.state import TERMINAL, can_transition, ensure_transition
from src.class_payroll.class_payroll.core.enums import AttendanceStatus as S
from src.class_payroll.class_payroll.core.exceptions import InvalidTransition


@pytest.mark.parametrize(
    "current,target",
    [
        (S.SCHEDULED, S.COMPLETED),
        (S.COMPLETED, S.APPROVED),
        (S.COMPLETED, S.REJECTED),
        (S.APPROVED, S.PAID),
    ],
)
def test_forward_transitions_are_allowed(current, target):
    assert can_transition(current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        (S.COMPLETED, S.SCHEDULED),
        (S.APPROVED, S.COMPLETED),
        (S.APPROVED, S.REJECTED),
        (S.REJECTED, S.APPROVED),
        (S.PAID, S.APPROVED),
        (S.SCHEDULED, S.APPROVED),
        (S.APPROVED, S.APPROVED),
    ],
)
def test_other_transitions_raise(current, target):
    with pytest.raises(InvalidTransition) as exc:
        ensure_transition(current, target)
    assert exc.value.current == current.value
    assert exc.value.requested == target.value


def test_terminal_states():
    assert TERMINAL == {S.REJECTED, S.PAID}
