from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .approvals.service import ApprovalService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_BASE_AMOUNT, DEFAULT_HISTORY_LIMIT
from .core.enums import PayModel
from .courses.mysql_course_repository import MySQLCourseRepository
from .courses.repository import CourseRepository
from .courses.service import CourseScheduleService
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .lectures.mysql_lecture_repository import MySQLLectureRepository
from .lectures.repository import LectureRepository
from .payroll.calculator.standard_calculator import calculator_for
from .payroll.mysql_salary_repository import MySQLSalaryRepository
from .payroll.repository import SalaryRepository
from .payroll.service import PayrollService
from .rates.mysql_rate_repository import MySQLRateRepository
from .rates.repository import RateRepository
from .rates.service import RateService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    events_repo: EventRepository
    lectures_repo: LectureRepository
    courses_repo: CourseRepository
    rates_repo: RateRepository
    attendance_repo: AttendanceRepository
    salaries_repo: SalaryRepository

    rate_service: RateService
    attendance_service: AttendanceService
    event_service: EventService
    course_schedule_service: CourseScheduleService
    approval_service: ApprovalService
    payroll_service: PayrollService


def wire_container(
    *,
    events_repo: EventRepository,
    lectures_repo: LectureRepository,
    courses_repo: CourseRepository,
    rates_repo: RateRepository,
    attendance_repo: AttendanceRepository,
    salaries_repo: SalaryRepository,
    conn: Optional[DatabaseConnection] = None,
    default_base_amount: Decimal = DEFAULT_BASE_AMOUNT,
    pay_model: str = PayModel.RETAINER_PLUS_PER_CLASS.value,
    history_limit: int = DEFAULT_HISTORY_LIMIT,
) -> Container:
    """Build the services on top of any set of repositories."""

    rate_service = RateService(rates_repo, default_amount=default_base_amount)
    attendance_service = AttendanceService(
        attendance_repo,
        events_repo,
        courses_repo,
        rate_service,
        history_limit=history_limit,
    )
    event_service = EventService(events_repo, lectures_repo, attendance_repo, attendance_service)
    course_schedule_service = CourseScheduleService(courses_repo, events_repo, event_service)
    approval_service = ApprovalService(attendance_repo, attendance_service)
    payroll_service = PayrollService(
        salaries_repo,
        attendance_repo,
        attendance_service,
        calculator=calculator_for(pay_model),
        history_limit=history_limit,
    )

    return Container(
        conn=conn,
        events_repo=events_repo,
        lectures_repo=lectures_repo,
        courses_repo=courses_repo,
        rates_repo=rates_repo,
        attendance_repo=attendance_repo,
        salaries_repo=salaries_repo,
        rate_service=rate_service,
        attendance_service=attendance_service,
        event_service=event_service,
        course_schedule_service=course_schedule_service,
        approval_service=approval_service,
        payroll_service=payroll_service,
    )


def build_container(
    *,
    db_config: dict,
    default_base_amount: Decimal = DEFAULT_BASE_AMOUNT,
    pay_model: str = PayModel.RETAINER_PLUS_PER_CLASS.value,
    history_limit: int = DEFAULT_HISTORY_LIMIT,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        conn=conn,
        events_repo=MySQLEventRepository(conn),
        lectures_repo=MySQLLectureRepository(conn),
        courses_repo=MySQLCourseRepository(conn),
        rates_repo=MySQLRateRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        salaries_repo=MySQLSalaryRepository(conn),
        default_base_amount=default_base_amount,
        pay_model=pay_model,
        history_limit=history_limit,
    )
