"""Core payment-schedule calculation.

All monetary values use decimal.Decimal — float is forbidden.
Rounding: ROUND_HALF_UP to 2 decimal places only at output boundaries
(``rounded()``, rendering, quotations); full precision for every
intermediate step so rounding error never compounds across installments.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator, NamedTuple

from .classifier import PlanKind
from .config import CENT, MONTHS_PER_YEAR, PERCENT, PERIOD_LENGTH_DAYS, ZERO

logger = logging.getLogger(__name__)


def _round(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class InvalidInput(ValueError):
    """Raised when a PlanInput violates a precondition.

    ``field`` names the offending PlanInput attribute so callers can map the
    error to a form field or message without parsing text.
    """

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} ({value}): {reason}")


@dataclass(frozen=True)
class PlanInput:
    principal: Decimal             # property base price
    down_payment: Decimal          # paid upfront as installment 0
    installment_count: int         # periodic installments after the down payment
    annual_interest_rate: Decimal  # nominal percentage, e.g. 12.5 for 12.5 %
    plan_kind: PlanKind = PlanKind.INSTALLMENT
    period_length_days: int = PERIOD_LENGTH_DAYS

    @property
    def financed_principal(self) -> Decimal:
        return self.principal - self.down_payment


@dataclass(frozen=True)
class Installment:
    number: int
    due_date: date
    opening_balance: Decimal
    principal_portion: Decimal
    interest_portion: Decimal
    total_amount: Decimal
    period_days: int

    @property
    def closing_balance(self) -> Decimal:
        return self.opening_balance - self.principal_portion

    def rounded(self) -> Installment:
        """Copy with every money field rounded to cents, for display or storage."""
        return dataclasses.replace(
            self,
            opening_balance=_round(self.opening_balance),
            principal_portion=_round(self.principal_portion),
            interest_portion=_round(self.interest_portion),
            total_amount=_round(self.total_amount),
        )


class Period(NamedTuple):
    """Per-period figures of the amortization fold, without a due date."""
    number: int
    opening_balance: Decimal
    principal_portion: Decimal
    interest_portion: Decimal
    total_amount: Decimal
    period_days: int


def validate(plan: PlanInput) -> None:
    """Raise InvalidInput on the first violated precondition."""
    for field in ("principal", "down_payment", "annual_interest_rate"):
        value = getattr(plan, field)
        if not value.is_finite():
            raise InvalidInput(field, value, "must be a finite number")
    if plan.principal < ZERO:
        raise InvalidInput("principal", plan.principal, "must be >= 0")
    if plan.down_payment < ZERO:
        raise InvalidInput("down_payment", plan.down_payment, "must be >= 0")
    if plan.down_payment > plan.principal:
        raise InvalidInput(
            "down_payment", plan.down_payment, f"cannot exceed principal ({plan.principal})"
        )
    if plan.installment_count < 1:
        raise InvalidInput("installment_count", plan.installment_count, "must be >= 1")
    if plan.annual_interest_rate < ZERO:
        raise InvalidInput("annual_interest_rate", plan.annual_interest_rate, "must be >= 0")


def monthly_rate(annual_interest_rate: Decimal) -> Decimal:
    """TEM: nominal annual percentage -> monthly fraction (12 -> 0.01)."""
    return annual_interest_rate / MONTHS_PER_YEAR / PERCENT


def compute_periodic_payment(
    financed_principal: Decimal,
    tem: Decimal,
    installment_count: int,
) -> Decimal:
    """Return the constant installment that amortizes *financed_principal*.

    Uses the annuity formula:
        payment = P * tem * (1 + tem)^n / ((1 + tem)^n - 1)

    Special case: if tem == 0 the formula is undefined, so the principal is
    split evenly (payment = P / n).
    """
    if installment_count < 1:
        raise InvalidInput("installment_count", installment_count, "must be >= 1")

    if tem == ZERO:
        logger.debug("Zero interest rate, using straight-line amortization")
        return financed_principal / Decimal(installment_count)

    factor = (1 + tem) ** installment_count
    return financed_principal * (tem * factor) / (factor - 1)


def _fold(plan: PlanInput) -> Iterator[Period]:
    if plan.plan_kind is PlanKind.CASH:
        yield Period(0, plan.principal, plan.principal, ZERO, plan.principal, 0)
        return

    yield Period(0, plan.principal, plan.down_payment, ZERO, plan.down_payment, 0)

    financed = plan.financed_principal
    if financed <= ZERO:
        return

    tem = monthly_rate(plan.annual_interest_rate)
    payment = compute_periodic_payment(financed, tem, plan.installment_count)

    balance = financed
    for number in range(1, plan.installment_count + 1):
        interest = balance * tem
        principal_portion = payment - interest
        total = principal_portion + interest
        yield Period(number, balance, principal_portion, interest, total, plan.period_length_days)
        balance -= principal_portion


def amortization_periods(plan: PlanInput) -> Iterator[Period]:
    """Validate *plan* eagerly, then return the lazy per-period fold.

    Both the schedule and the total-payable projection consume this one
    fold, so their figures agree exactly.
    """
    validate(plan)
    return _fold(plan)


def generate(plan: PlanInput, reference_date: date) -> list[Installment]:
    """Build the full installment schedule; installment 0 is due on *reference_date*."""
    schedule = [
        Installment(
            number=period.number,
            due_date=reference_date + timedelta(days=period.number * plan.period_length_days),
            opening_balance=period.opening_balance,
            principal_portion=period.principal_portion,
            interest_portion=period.interest_portion,
            total_amount=period.total_amount,
            period_days=period.period_days,
        )
        for period in amortization_periods(plan)
    ]
    logger.debug(
        "Generated %s schedule with %d installments from %s",
        plan.plan_kind.value, len(schedule), reference_date.isoformat(),
    )
    return schedule
