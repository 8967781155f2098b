from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ...core.enums import PayModel, SalarySource, SalaryStatus
from ...core.exceptions import ValidationError
from ..model import MonthlySalaryRecord
from .base import EarningsCalculator

ZERO = Decimal("0.00")


class RetainerPlusPerClassCalculator(EarningsCalculator):
    """Manual ledger amount (retainer) plus approved classes.

    A snapshot row written by the monthly close is a rollup of the same
    classes, so it contributes nothing. Cancelled rows contribute nothing.
    """

    pay_model = PayModel.RETAINER_PLUS_PER_CLASS

    def ledger_contribution(self, ledger: Optional[MonthlySalaryRecord]) -> Decimal:
        if ledger is None or ledger.source != SalarySource.MANUAL:
            return ZERO
        if ledger.status == SalaryStatus.CANCELLED:
            return ZERO
        return ledger.final_amount


class PerClassOnlyCalculator(EarningsCalculator):
    """Approved classes only; the ledger is informational."""

    pay_model = PayModel.PER_CLASS_ONLY

    def ledger_contribution(self, ledger: Optional[MonthlySalaryRecord]) -> Decimal:
        return ZERO


_CALCULATORS = {
    PayModel.RETAINER_PLUS_PER_CLASS: RetainerPlusPerClassCalculator,
    PayModel.PER_CLASS_ONLY: PerClassOnlyCalculator,
}


def calculator_for(pay_model) -> EarningsCalculator:
    try:
        return _CALCULATORS[PayModel(pay_model)]()
    except ValueError:
        raise ValidationError(f"Unknown PAY_MODEL '{pay_model}'")
