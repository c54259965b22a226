"""Schedule aggregation: totals of a generated schedule and the preview projection."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

from .calculator import Installment, Period, PlanInput, amortization_periods
from .config import CENT, ZERO


@dataclass(frozen=True)
class ScheduleSummary:
    total_principal: Decimal
    total_interest: Decimal
    total_payable: Decimal  # total_principal + total_interest

    def rounded(self) -> ScheduleSummary:
        return dataclasses.replace(
            self,
            total_principal=self.total_principal.quantize(CENT, rounding=ROUND_HALF_UP),
            total_interest=self.total_interest.quantize(CENT, rounding=ROUND_HALF_UP),
            total_payable=self.total_payable.quantize(CENT, rounding=ROUND_HALF_UP),
        )


def _totals(rows: Iterable[Union[Installment, Period]]) -> ScheduleSummary:
    total_principal = ZERO
    total_interest = ZERO
    for row in rows:
        total_principal += row.principal_portion
        total_interest += row.interest_portion
    return ScheduleSummary(
        total_principal=total_principal,
        total_interest=total_interest,
        total_payable=total_principal + total_interest,
    )


def summarize(schedule: Iterable[Installment]) -> ScheduleSummary:
    """Sum a schedule's portions. An empty schedule yields all-zero totals."""
    return _totals(schedule)


def project_total_payable(plan: PlanInput) -> Decimal:
    """Total cost (price + interest) of *plan* without materializing a schedule.

    Runs the same fold as ``generate`` and sums it the same way, so the result
    equals ``summarize(generate(plan, d)).total_payable`` for any date ``d``.
    Raises InvalidInput like ``generate``.
    """
    return _totals(amortization_periods(plan)).total_payable
