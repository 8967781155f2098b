from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role carried in the session by the identity provider."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class EventType(str, Enum):
    CLASS = "class"
    ASSIGNMENT = "assignment"
    EXAM = "exam"
    PAYMENT = "payment"
    HOLIDAY = "holiday"
    OTHER = "other"


class AttendanceStatus(str, Enum):
    """Lifecycle of a teacher's class attendance record."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class SalaryStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    PAID = "paid"
    CANCELLED = "cancelled"


class SalarySource(str, Enum):
    """Where a monthly salary ledger row came from.

    MANUAL rows are entered by an admin (retainer, adjustment).
    ATTENDANCE rows are snapshots written by the monthly close.
    """

    MANUAL = "manual"
    ATTENDANCE = "attendance"


class PayModel(str, Enum):
    RETAINER_PLUS_PER_CLASS = "retainer_plus_per_class"
    PER_CLASS_ONLY = "per_class_only"
