from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest

from src.class_payroll.class_payroll.core.enums import AttendanceStatus, EventType
from src.class_payroll.class_payroll.core.exceptions import (
    AuthorizationError,
    EventInFuture,
    EventNotClassType,
    EventNotFound,
    TeacherMismatch,
)


def test_mark_complete_creates_completed_record(store, container, teacher, fixed_now):
    event = store.add_class_event(teacher_id=teacher.user_id, start=fixed_now - timedelta(hours=2))

    result = container.attendance_service.mark_complete(
        actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, notes="  covered ch. 3 ", now=fixed_now
    )

    record = result.view.record
    assert result.already_completed is False
    assert record.status == AttendanceStatus.COMPLETED
    assert record.completed_at == fixed_now
    assert record.base_amount == Decimal("150.00")
    assert record.total_amount is None
    assert record.notes == "covered ch. 3"
    assert result.view.event_title == "Algebra"


def test_mark_complete_twice_keeps_one_record(store, container, teacher, fixed_now):
    event = store.add_class_event(teacher_id=teacher.user_id, start=fixed_now - timedelta(hours=2))
    svc = container.attendance_service

    first = svc.mark_complete(actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, now=fixed_now)
    second = svc.mark_complete(
        actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, now=fixed_now + timedelta(minutes=5)
    )

    assert len(store.attendance.records) == 1
    assert second.already_completed is True
    assert second.view.record.attendance_id == first.view.record.attendance_id
    assert second.view.record.completed_at == fixed_now


def test_mark_complete_advances_scheduled_record(store, container, teacher, fixed_now):
    event = store.add_class_event(teacher_id=teacher.user_id, start=fixed_now - timedelta(days=1))
    store.attendance.ensure_scheduled(teacher_id=teacher.user_id, event_id=event.event_id, base_amount=Decimal("150.00"))

    result = container.attendance_service.mark_complete(
        actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, now=fixed_now
    )

    assert result.already_completed is False
    assert result.view.record.status == AttendanceStatus.COMPLETED
    assert len(store.attendance.records) == 1


def test_mark_complete_does_not_touch_approved_record(store, container, admin, teacher, fixed_now):
    event = store.add_class_event(teacher_id=teacher.user_id, start=fixed_now - timedelta(days=1))
    svc = container.attendance_service
    done = svc.mark_complete(actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, now=fixed_now)
    container.approval_service.approve(actor=admin, attendance_id=done.view.record.attendance_id, now=fixed_now)

    again = svc.mark_complete(actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, now=fixed_now)

    assert again.already_completed is True
    assert again.view.record.status == AttendanceStatus.APPROVED


def test_mark_complete_future_event_is_refused(store, container, teacher, fixed_now):
    event = store.add_class_event(teacher_id=teacher.user_id, start=fixed_now + timedelta(minutes=1))

    with pytest.raises(EventInFuture):
        container.attendance_service.mark_complete(
            actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, now=fixed_now
        )
    assert store.attendance.records == {}


def test_mark_complete_event_starting_now_is_allowed(store, container, teacher, fixed_now):
    event = store.add_class_event(teacher_id=teacher.user_id, start=fixed_now)

    result = container.attendance_service.mark_complete(
        actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, now=fixed_now
    )
    assert result.view.record.status == AttendanceStatus.COMPLETED


def test_mark_complete_other_teachers_event(store, container, admin, teacher, fixed_now):
    event = store.add_class_event(teacher_id=99, start=fixed_now - timedelta(hours=1))

    with pytest.raises(TeacherMismatch):
        container.attendance_service.mark_complete(
            actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, now=fixed_now
        )


def test_mark_complete_event_without_teacher(store, container, teacher, fixed_now):
    event = store.add_class_event(teacher_id=None, start=fixed_now - timedelta(hours=1))

    with pytest.raises(TeacherMismatch):
        container.attendance_service.mark_complete(
            actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, now=fixed_now
        )


def test_mark_complete_non_class_event(store, container, teacher, fixed_now):
    event = store.add_class_event(teacher_id=teacher.user_id, start=fixed_now - timedelta(hours=1), event_type=EventType.EXAM)

    with pytest.raises(EventNotClassType) as exc:
        container.attendance_service.mark_complete(
            actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, now=fixed_now
        )
    assert exc.value.code == "event_not_class"


def test_mark_complete_unknown_event(container, teacher, fixed_now):
    with pytest.raises(EventNotFound):
        container.attendance_service.mark_complete(actor=teacher, teacher_id=teacher.user_id, event_id=404, now=fixed_now)


def test_teacher_cannot_complete_for_someone_else(store, container, teacher, other_teacher, fixed_now):
    event = store.add_class_event(teacher_id=other_teacher.user_id, start=fixed_now - timedelta(hours=1))

    with pytest.raises(AuthorizationError):
        container.attendance_service.mark_complete(
            actor=teacher, teacher_id=other_teacher.user_id, event_id=event.event_id, now=fixed_now
        )


def test_mark_complete_uses_resolved_rate(store, container, teacher, fixed_now):
    store.rates.set_rate(teacher_id=None, course_id=3, amount=Decimal("200.00"))
    event = store.add_class_event(teacher_id=teacher.user_id, start=fixed_now - timedelta(hours=1), course_id=3)

    result = container.attendance_service.mark_complete(
        actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, now=fixed_now
    )
    assert result.view.record.base_amount == Decimal("200.00")


def test_history_is_newest_first(store, container, teacher, fixed_now):
    svc = container.attendance_service
    older = store.add_class_event(teacher_id=teacher.user_id, start=fixed_now - timedelta(days=3))
    newer = store.add_class_event(teacher_id=teacher.user_id, start=fixed_now - timedelta(days=1))
    for event in (older, newer):
        svc.mark_complete(actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, now=fixed_now)

    history = svc.get_history(teacher.user_id)
    assert [v.record.event_id for v in history] == [newer.event_id, older.event_id]
