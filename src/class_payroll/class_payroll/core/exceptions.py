from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    `code` is a stable machine-readable reason the UI can switch on,
    `http_status` is what the JSON error handler answers with.
    """

    code = "domain_error"
    http_status = 400

    def __init__(self, message: str = "", *, code: Optional[str] = None):
        super().__init__(message or self.__class__.__doc__ or self.code)
        if code:
            self.code = code

    def to_dict(self) -> dict:
        return {"success": False, "error": self.code, "message": str(self)}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class AuthenticationError(DomainError):
    """Raised when no authenticated user is attached to the request."""

    code = "unauthenticated"
    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"
    http_status = 403


# Not found

class NotFoundError(DomainError):
    code = "not_found"
    http_status = 404


class EventNotFound(NotFoundError):
    code = "event_not_found"

    def __init__(self, event_id: int):
        super().__init__(f"Calendar event {event_id} not found")
        self.event_id = event_id


class AttendanceNotFound(NotFoundError):
    code = "attendance_not_found"

    def __init__(self, attendance_id: int):
        super().__init__(f"Attendance record {attendance_id} not found")
        self.attendance_id = attendance_id


class SalaryRecordNotFound(NotFoundError):
    code = "salary_not_found"

    def __init__(self, salary_id: int):
        super().__init__(f"Salary record {salary_id} not found")
        self.salary_id = salary_id


class CourseNotFound(NotFoundError):
    code = "course_not_found"

    def __init__(self, course_id: int):
        super().__init__(f"Course {course_id} not found")
        self.course_id = course_id


# State

class StateError(DomainError):
    code = "state_error"
    http_status = 409


class EventNotClassType(StateError):
    code = "event_not_class"

    def __init__(self, event_id: int, event_type: str):
        super().__init__(f"Event {event_id} is of type '{event_type}', only class events can be completed")
        self.event_id = event_id
        self.event_type = event_type


class EventInFuture(StateError):
    code = "event_in_future"

    def __init__(self, event_id: int):
        super().__init__(f"Event {event_id} has not started yet")
        self.event_id = event_id


class TeacherMismatch(StateError):
    code = "teacher_mismatch"

    def __init__(self, event_id: int, teacher_id: int):
        super().__init__(f"Teacher {teacher_id} is not assigned to event {event_id}")
        self.event_id = event_id
        self.teacher_id = teacher_id


class InvalidTransition(StateError):
    code = "invalid_transition"

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot move attendance from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class EventLocked(StateError):
    code = "event_locked"

    def __init__(self, event_id: int):
        super().__init__(f"Event {event_id} already has completed attendance and cannot be deleted")
        self.event_id = event_id


class DuplicateSalaryRecord(StateError):
    code = "duplicate_salary_record"

    def __init__(self, teacher_id: int, month: int, year: int):
        super().__init__(f"Salary record already exists for teacher {teacher_id} in {month:02d}/{year}")
        self.teacher_id = teacher_id
        self.month = month
        self.year = year


class SalaryRecordLocked(StateError):
    code = "salary_locked"
