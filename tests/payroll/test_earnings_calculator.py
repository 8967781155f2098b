from decimal import Decimal

import pytest

from src.class_payroll.class_payroll.core.enums import PayModel, SalarySource, SalaryStatus
from src.class_payroll.class_payroll.core.exceptions import ValidationError
from src.class_payroll.class_payroll.payroll.calculator.standard_calculator import (
    PerClassOnlyCalculator,
    RetainerPlusPerClassCalculator,
    calculator_for,
)
from src.class_payroll.class_payroll.payroll.model import MonthlySalaryRecord


def _ledger(source: SalarySource, status: SalaryStatus = SalaryStatus.PENDING) -> MonthlySalaryRecord:
    return MonthlySalaryRecord(
        salary_id=1,
        teacher_id=7,
        month=3,
        year=2026,
        total_classes=0,
        total_amount=Decimal("1000.00"),
        bonus_amount=Decimal("50.00"),
        final_amount=Decimal("1050.00"),
        status=status,
        source=source,
    )


def test_retainer_adds_manual_final_amount():
    calc = RetainerPlusPerClassCalculator()
    assert calc.ledger_contribution(_ledger(SalarySource.MANUAL)) == Decimal("1050.00")


def test_retainer_ignores_snapshot_and_missing_rows():
    calc = RetainerPlusPerClassCalculator()
    assert calc.ledger_contribution(_ledger(SalarySource.ATTENDANCE)) == Decimal("0.00")
    assert calc.ledger_contribution(None) == Decimal("0.00")


def test_per_class_only_never_adds_ledger():
    assert PerClassOnlyCalculator().ledger_contribution(_ledger(SalarySource.MANUAL)) == Decimal("0.00")


def test_calculator_factory():
    assert isinstance(calculator_for("per_class_only"), PerClassOnlyCalculator)
    assert calculator_for(PayModel.RETAINER_PLUS_PER_CLASS).pay_model == PayModel.RETAINER_PLUS_PER_CLASS
    with pytest.raises(ValidationError):
        calculator_for("hourly")
