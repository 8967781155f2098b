from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from ...core.enums import PayModel
from ..model import MonthlySalaryRecord


class EarningsCalculator(ABC):
    """Calculator interface (Strategy Pattern for monthly earnings).

    Decides how much of the month's ledger row is added on top of the
    approved attendance total.
    """

    pay_model: PayModel

    @abstractmethod
    def ledger_contribution(self, ledger: Optional[MonthlySalaryRecord]) -> Decimal:
        raise NotImplementedError
