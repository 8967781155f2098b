from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from src.class_payroll.class_payroll.core.enums import AttendanceStatus, SalarySource, SalaryStatus
from src.class_payroll.class_payroll.core.exceptions import (
    AuthorizationError,
    DuplicateSalaryRecord,
    InvalidTransition,
    SalaryRecordLocked,
    SalaryRecordNotFound,
    ValidationError,
)


def _complete(store, container, teacher, now, *, days_ago: int):
    event = store.add_class_event(teacher_id=teacher.user_id, start=now - timedelta(days=days_ago))
    result = container.attendance_service.mark_complete(
        actor=teacher, teacher_id=teacher.user_id, event_id=event.event_id, now=now
    )
    return result.view.record.attendance_id


@pytest.fixture
def march(store, container, admin, teacher, fixed_now):
    """Five classes in March 2026: three approved (one with a 20.00 bonus), one rejected, one pending."""

    ids = [_complete(store, container, teacher, fixed_now, days_ago=d) for d in (1, 2, 3, 4, 5)]
    approvals = container.approval_service
    approvals.approve(actor=admin, attendance_id=ids[0], now=fixed_now)
    approvals.approve(actor=admin, attendance_id=ids[1], bonus_amount=20, now=fixed_now)
    approvals.approve(actor=admin, attendance_id=ids[2], now=fixed_now)
    approvals.reject(actor=admin, attendance_id=ids[3], reason="Duplicate entry")
    return ids


def test_monthly_total_counts_only_approved(container, teacher, march):
    total = container.payroll_service.compute_monthly_total(teacher_id=teacher.user_id, month=3, year=2026)

    assert total.count == 3
    assert total.total == Decimal("470.00")
    assert total.base_total == Decimal("450.00")
    assert total.bonus_total == Decimal("20.00")
    assert total.paid_count == 0


def test_monthly_total_uses_approval_month(store, container, admin, teacher, fixed_now):
    attendance_id = _complete(store, container, teacher, fixed_now, days_ago=1)
    container.approval_service.approve(actor=admin, attendance_id=attendance_id, now=datetime(2026, 4, 1, 9, 0))

    payroll = container.payroll_service
    assert payroll.compute_monthly_total(teacher_id=teacher.user_id, month=3, year=2026).count == 0
    assert payroll.compute_monthly_total(teacher_id=teacher.user_id, month=4, year=2026).count == 1


def test_monthly_total_rejects_bad_month(container, teacher):
    with pytest.raises(ValidationError):
        container.payroll_service.compute_monthly_total(teacher_id=teacher.user_id, month=13, year=2026)


def test_earnings_add_manual_ledger_to_attendance(container, admin, teacher, march, fixed_now):
    payroll = container.payroll_service
    payroll.create_salary_record(
        actor=admin,
        payload={"teacher_id": teacher.user_id, "month": 3, "year": 2026, "total_amount": "1000", "bonus_amount": "100"},
    )

    earnings = payroll.current_month_earnings(teacher.user_id, today=fixed_now.date())

    assert earnings.ledger_amount == Decimal("1100.00")
    assert earnings.attendance.total == Decimal("470.00")
    assert earnings.total == Decimal("1570.00")


def test_earnings_per_class_only_ignore_ledger(store, admin, teacher, march, fixed_now):
    payroll = store.container(pay_model="per_class_only").payroll_service
    payroll.create_salary_record(
        actor=admin,
        payload={"teacher_id": teacher.user_id, "month": 3, "year": 2026, "total_amount": "1000"},
    )

    earnings = payroll.current_month_earnings(teacher.user_id, today=fixed_now.date())
    assert earnings.total == Decimal("470.00")
    assert earnings.pay_model == "per_class_only"


def test_snapshot_is_not_counted_twice(container, admin, teacher, march, fixed_now):
    payroll = container.payroll_service
    snapshot = payroll.close_month(actor=admin, teacher_id=teacher.user_id, month=3, year=2026)

    earnings = payroll.current_month_earnings(teacher.user_id, today=fixed_now.date())

    assert snapshot.source == SalarySource.ATTENDANCE
    assert snapshot.final_amount == Decimal("470.00")
    assert earnings.total == Decimal("470.00")


def test_cancelled_manual_row_adds_nothing(container, admin, teacher, march, fixed_now):
    payroll = container.payroll_service
    record = payroll.create_salary_record(
        actor=admin,
        payload={"teacher_id": teacher.user_id, "month": 3, "year": 2026, "total_amount": "1000"},
    )
    payroll.update_salary_status(actor=admin, salary_id=record.salary_id, status="cancelled")

    assert payroll.current_month_earnings(teacher.user_id, today=fixed_now.date()).total == Decimal("470.00")


def test_duplicate_salary_record(container, admin, teacher):
    payroll = container.payroll_service
    payload = {"teacher_id": teacher.user_id, "month": 3, "year": 2026, "total_amount": "500"}
    payroll.create_salary_record(actor=admin, payload=payload)

    with pytest.raises(DuplicateSalaryRecord):
        payroll.create_salary_record(actor=admin, payload=payload)


@pytest.mark.parametrize(
    "payload",
    [
        {"month": 3, "year": 2026, "total_amount": "1"},
        {"teacher_id": 7, "month": 0, "year": 2026, "total_amount": "1"},
        {"teacher_id": 7, "month": 3, "year": 2026, "total_amount": "-5"},
        {"teacher_id": 7, "month": 3, "year": 2026, "total_amount": "1", "total_classes": -1},
    ],
)
def test_create_salary_record_validation(container, admin, payload):
    with pytest.raises(ValidationError):
        container.payroll_service.create_salary_record(actor=admin, payload=payload)


def test_close_month_refuses_manual_month(container, admin, teacher, march):
    payroll = container.payroll_service
    payroll.create_salary_record(
        actor=admin,
        payload={"teacher_id": teacher.user_id, "month": 3, "year": 2026, "total_amount": "1000"},
    )

    with pytest.raises(SalaryRecordLocked):
        payroll.close_month(actor=admin, teacher_id=teacher.user_id, month=3, year=2026)


def test_close_month_refreshes_snapshot(store, container, admin, teacher, march, fixed_now):
    payroll = container.payroll_service
    first = payroll.close_month(actor=admin, teacher_id=teacher.user_id, month=3, year=2026)

    container.approval_service.approve(actor=admin, attendance_id=march[4], now=fixed_now)
    second = payroll.close_month(actor=admin, teacher_id=teacher.user_id, month=3, year=2026)

    assert second.salary_id == first.salary_id
    assert second.total_classes == 4
    assert second.final_amount == Decimal("620.00")
    assert len(store.salaries.rows) == 1


def test_settle_month_pays_attendance_and_keeps_total(store, container, admin, teacher, march, fixed_now):
    payroll = container.payroll_service
    snapshot = payroll.close_month(actor=admin, teacher_id=teacher.user_id, month=3, year=2026)
    paid_at = fixed_now + timedelta(days=20)

    settled = payroll.settle_month(actor=admin, salary_id=snapshot.salary_id, now=paid_at)

    assert settled.status == SalaryStatus.PAID
    assert settled.payment_date == paid_at
    statuses = sorted(r.status.value for r in store.attendance.records.values())
    assert statuses == ["completed", "paid", "paid", "paid", "rejected"]

    total = payroll.compute_monthly_total(teacher_id=teacher.user_id, month=3, year=2026)
    assert total.count == 3
    assert total.total == Decimal("470.00")
    assert total.paid_count == 3
    assert total.outstanding == Decimal("0.00")


def test_paid_snapshot_cannot_be_refreshed_or_deleted(container, admin, teacher, march, fixed_now):
    payroll = container.payroll_service
    snapshot = payroll.close_month(actor=admin, teacher_id=teacher.user_id, month=3, year=2026)
    payroll.settle_month(actor=admin, salary_id=snapshot.salary_id, now=fixed_now)

    with pytest.raises(SalaryRecordLocked):
        payroll.close_month(actor=admin, teacher_id=teacher.user_id, month=3, year=2026)
    with pytest.raises(SalaryRecordLocked):
        payroll.delete_salary_record(actor=admin, salary_id=snapshot.salary_id)
    with pytest.raises(InvalidTransition):
        payroll.settle_month(actor=admin, salary_id=snapshot.salary_id, now=fixed_now)


def test_status_updates(store, container, admin, teacher, march, fixed_now):
    payroll = container.payroll_service
    record = payroll.create_salary_record(
        actor=admin,
        payload={"teacher_id": teacher.user_id, "month": 3, "year": 2026, "total_amount": "1000"},
    )

    processing = payroll.update_salary_status(actor=admin, salary_id=record.salary_id, status="processing")
    assert processing.status == SalaryStatus.PROCESSING
    assert processing.payment_date is None

    paid = payroll.update_salary_status(actor=admin, salary_id=record.salary_id, status="paid", now=fixed_now)
    assert paid.status == SalaryStatus.PAID
    assert paid.payment_date == fixed_now
    assert store.attendance.get_by_id(march[0]).status == AttendanceStatus.APPROVED

    with pytest.raises(InvalidTransition):
        payroll.update_salary_status(actor=admin, salary_id=record.salary_id, status="pending")


def test_paying_manual_row_leaves_classes_unpaid(container, admin, teacher, march, fixed_now):
    payroll = container.payroll_service
    record = payroll.create_salary_record(
        actor=admin,
        payload={"teacher_id": teacher.user_id, "month": 3, "year": 2026, "total_amount": "1000"},
    )

    payroll.settle_month(actor=admin, salary_id=record.salary_id, now=fixed_now)

    total = payroll.compute_monthly_total(teacher_id=teacher.user_id, month=3, year=2026)
    assert total.paid_count == 0
    assert total.paid_total == Decimal("0.00")


def test_settle_refuses_stale_snapshot(store, container, admin, teacher, march, fixed_now):
    payroll = container.payroll_service
    snapshot = payroll.close_month(actor=admin, teacher_id=teacher.user_id, month=3, year=2026)
    container.approval_service.approve(actor=admin, attendance_id=march[4], now=fixed_now)

    with pytest.raises(SalaryRecordLocked):
        payroll.settle_month(actor=admin, salary_id=snapshot.salary_id, now=fixed_now)

    assert store.salaries.get_by_id(snapshot.salary_id).status == SalaryStatus.PENDING
    assert payroll.compute_monthly_total(teacher_id=teacher.user_id, month=3, year=2026).paid_count == 0

    refreshed = payroll.close_month(actor=admin, teacher_id=teacher.user_id, month=3, year=2026)
    settled = payroll.settle_month(actor=admin, salary_id=refreshed.salary_id, now=fixed_now)

    assert settled.final_amount == Decimal("620.00")
    assert payroll.compute_monthly_total(teacher_id=teacher.user_id, month=3, year=2026).paid_total == Decimal("620.00")
    assert payroll.reconcile(actor=admin, teacher_id=teacher.user_id, month=3, year=2026).diverged is False


def test_unknown_status_is_validation_error(container, admin, teacher):
    payroll = container.payroll_service
    record = payroll.create_salary_record(
        actor=admin,
        payload={"teacher_id": teacher.user_id, "month": 3, "year": 2026, "total_amount": "10"},
    )
    with pytest.raises(ValidationError):
        payroll.update_salary_status(actor=admin, salary_id=record.salary_id, status="refunded")


def test_delete_pending_record(store, container, admin, teacher):
    payroll = container.payroll_service
    record = payroll.create_salary_record(
        actor=admin,
        payload={"teacher_id": teacher.user_id, "month": 3, "year": 2026, "total_amount": "10"},
    )
    payroll.delete_salary_record(actor=admin, salary_id=record.salary_id)
    assert store.salaries.rows == {}


def test_delete_of_vanished_record_is_not_found(store, container, admin, teacher, monkeypatch):
    payroll = container.payroll_service
    record = payroll.create_salary_record(
        actor=admin,
        payload={"teacher_id": teacher.user_id, "month": 3, "year": 2026, "total_amount": "10"},
    )

    def delete_elsewhere(salary_id):
        store.salaries.rows.pop(int(salary_id))
        return False

    monkeypatch.setattr(store.salaries, "delete", delete_elsewhere)

    with pytest.raises(SalaryRecordNotFound):
        payroll.delete_salary_record(actor=admin, salary_id=record.salary_id)


def test_reconcile_flags_stale_snapshot(container, admin, teacher, march, fixed_now):
    payroll = container.payroll_service
    payroll.close_month(actor=admin, teacher_id=teacher.user_id, month=3, year=2026)
    assert payroll.reconcile(actor=admin, teacher_id=teacher.user_id, month=3, year=2026).diverged is False

    container.approval_service.approve(actor=admin, attendance_id=march[4], now=fixed_now)
    report = payroll.reconcile(actor=admin, teacher_id=teacher.user_id, month=3, year=2026)

    assert report.diverged is True
    assert report.ledger_amount == Decimal("470.00")
    assert report.attendance_amount == Decimal("620.00")
    assert report.difference == Decimal("-150.00")


def test_reconcile_manual_ledger_is_not_divergence(container, admin, teacher, march):
    payroll = container.payroll_service
    payroll.create_salary_record(
        actor=admin,
        payload={"teacher_id": teacher.user_id, "month": 3, "year": 2026, "total_amount": "1000"},
    )
    report = payroll.reconcile(actor=admin, teacher_id=teacher.user_id, month=3, year=2026)

    assert report.ledger_source == SalarySource.MANUAL
    assert report.diverged is False


def test_close_month_for_all_skips_manual_months(container, admin, teacher, other_teacher, march, store, fixed_now):
    attendance_id = _complete(store, container, other_teacher, fixed_now, days_ago=1)
    container.approval_service.approve(actor=admin, attendance_id=attendance_id, now=fixed_now)
    payroll = container.payroll_service
    payroll.create_salary_record(
        actor=admin,
        payload={"teacher_id": other_teacher.user_id, "month": 3, "year": 2026, "total_amount": "800"},
    )

    closed, skipped = payroll.close_month_for_all(actor=admin, month=3, year=2026)

    assert [r.teacher_id for r in closed] == [teacher.user_id]
    assert len(skipped) == 1


def test_monthly_report_rows(container, admin, teacher, other_teacher, march):
    payroll = container.payroll_service
    payroll.create_salary_record(
        actor=admin,
        payload={"teacher_id": other_teacher.user_id, "month": 3, "year": 2026, "total_amount": "800"},
    )

    rows = payroll.monthly_report(actor=admin, month=3, year=2026)

    assert [r.teacher_id for r in rows] == [teacher.user_id, other_teacher.user_id]
    assert rows[0].teacher_name == "Ana Teacher"
    assert rows[0].classes == 3
    assert rows[0].ledger_amount is None
    assert rows[1].classes == 0
    assert rows[1].ledger_amount == Decimal("800.00")


def test_salary_overview_is_own_only(container, teacher, other_teacher, march, fixed_now):
    payroll = container.payroll_service
    overview = payroll.teacher_salary_overview(actor=teacher, teacher_id=teacher.user_id, today=fixed_now.date())

    assert overview.earnings.total == Decimal("470.00")
    assert len(overview.attendance_history) == 5

    with pytest.raises(AuthorizationError):
        payroll.teacher_salary_overview(actor=other_teacher, teacher_id=teacher.user_id, today=fixed_now.date())


def test_teacher_cannot_manage_ledger(container, teacher):
    with pytest.raises(AuthorizationError):
        container.payroll_service.create_salary_record(
            actor=teacher,
            payload={"teacher_id": teacher.user_id, "month": 3, "year": 2026, "total_amount": "99999"},
        )
