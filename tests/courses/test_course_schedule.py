from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.class_payroll.class_payroll.core.exceptions import AuthorizationError, CourseNotFound, ValidationError
from src.class_payroll.class_payroll.courses.model import Course


@pytest.fixture
def course(store):
    course = Course(
        course_id=3,
        title="Chemistry",
        teacher_id=7,
        scheduled_time=datetime(2026, 3, 2, 14, 0),
        duration_minutes=45,
        session_count=4,
    )
    store.courses.courses[course.course_id] = course
    return course


def test_generates_weekly_class_events(store, container, admin, course):
    events, created = container.course_schedule_service.generate_events(actor=admin, course_id=course.course_id)

    assert created == 4
    assert [e.start_time for e in events] == [course.scheduled_time + timedelta(weeks=i) for i in range(4)]
    assert all(e.duration_minutes == 45 and e.teacher_id == 7 and e.is_class for e in events)
    assert events[0].title == "Chemistry - Session 1"
    assert len(store.lectures.lectures) == 4
    assert len(store.attendance.records) == 4


def test_generate_twice_is_idempotent(store, container, admin, course):
    svc = container.course_schedule_service
    first, _ = svc.generate_events(actor=admin, course_id=course.course_id)
    second, created = svc.generate_events(actor=admin, course_id=course.course_id)

    assert created == 0
    assert [e.event_id for e in second] == [e.event_id for e in first]
    assert len(store.events.events) == 4
    assert len(store.attendance.records) == 4


def test_unknown_course(container, admin):
    with pytest.raises(CourseNotFound):
        container.course_schedule_service.generate_events(actor=admin, course_id=42)


def test_course_without_schedule(store, container, admin):
    store.courses.courses[5] = Course(course_id=5, title="Draft")
    with pytest.raises(ValidationError):
        container.course_schedule_service.generate_events(actor=admin, course_id=5)


def test_teacher_cannot_generate(container, teacher, course):
    with pytest.raises(AuthorizationError):
        container.course_schedule_service.generate_events(actor=teacher, course_id=course.course_id)
