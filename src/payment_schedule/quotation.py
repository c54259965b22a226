"""Payment plans, quotations and reservations.

A PaymentPlan is the configuration record a sales agent picks for a
property ("Al Contado", "Financiado 24 meses", ...). Turning it into engine
input:
1. classify the plan from its label and installment count.
2. cash plans pay the full price at once, so the down payment is dropped.
3. installment plans pay the plan's minimum down payment as installment 0.

Quotations only need the projected total, so no schedule is materialized
until a reservation is confirmed.
"""
from __future__ import annotations

import dataclasses
import logging
import random
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .calculator import Installment, PlanInput, generate, validate
from .classifier import PlanKind, classify
from .config import (
    CENT, CONTRACT_CODE_PREFIX, CONTRACT_CODE_SUFFIX_DIGITS,
    RESERVATION_VALIDITY_DAYS, ZERO,
)
from .summary import ScheduleSummary, project_total_payable, summarize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentPlan:
    label: str
    installment_count: int
    annual_interest_rate: Decimal = ZERO   # percentage, e.g. 12 for 12 %
    minimum_down_payment: Decimal = ZERO


@dataclass(frozen=True)
class Quotation:
    contract_code: str
    plan: PaymentPlan
    base_price: Decimal
    final_price: Decimal   # projected total payable, rounded to cents
    issued_on: date

    @property
    def total_interest(self) -> Decimal:
        return self.final_price - self.base_price


@dataclass(frozen=True)
class Reservation:
    confirmed_on: date
    expires_on: date
    schedule: tuple[Installment, ...]
    summary: ScheduleSummary


def build_plan_input(plan: PaymentPlan, price: Decimal) -> PlanInput:
    """Classify *plan* and return the engine input for a property at *price*.

    The plan's down payment is validated against *price* even for cash plans,
    which then drop it. Raises InvalidInput.
    """
    kind = classify(plan.label, plan.installment_count)
    plan_input = PlanInput(
        principal=price,
        down_payment=plan.minimum_down_payment,
        installment_count=plan.installment_count,
        annual_interest_rate=plan.annual_interest_rate,
        plan_kind=kind,
    )
    validate(plan_input)
    if kind is PlanKind.CASH:
        return dataclasses.replace(plan_input, down_payment=ZERO)
    return plan_input


def generate_contract_code(issued_on: date, rng: Optional[random.Random] = None) -> str:
    """Return a code like ``PROP202401150042``: prefix, issue date, random suffix."""
    source = rng if rng is not None else random
    suffix = source.randrange(10 ** CONTRACT_CODE_SUFFIX_DIGITS)
    return (
        f"{CONTRACT_CODE_PREFIX}{issued_on:%Y%m%d}"
        f"{suffix:0{CONTRACT_CODE_SUFFIX_DIGITS}d}"
    )


def reservation_expiry(confirmed_on: date) -> date:
    return confirmed_on + timedelta(days=RESERVATION_VALIDITY_DAYS)


def quote(
    plan: PaymentPlan,
    price: Decimal,
    issued_on: date,
    *,
    rng: Optional[random.Random] = None,
) -> Quotation:
    """Price *plan* for a property. Raises InvalidInput on inconsistent figures."""
    projected = project_total_payable(build_plan_input(plan, price))
    quotation = Quotation(
        contract_code=generate_contract_code(issued_on, rng),
        plan=plan,
        base_price=price,
        final_price=projected.quantize(CENT, rounding=ROUND_HALF_UP),
        issued_on=issued_on,
    )
    logger.info(
        "Quotation %s: plan %r, base %s, final %s",
        quotation.contract_code, plan.label, price, quotation.final_price,
    )
    return quotation


def confirm_reservation(plan: PaymentPlan, price: Decimal, confirmed_on: date) -> Reservation:
    """Materialize the schedule for a confirmed reservation, due dates counted from *confirmed_on*."""
    schedule = generate(build_plan_input(plan, price), confirmed_on)
    return Reservation(
        confirmed_on=confirmed_on,
        expires_on=reservation_expiry(confirmed_on),
        schedule=tuple(schedule),
        summary=summarize(schedule),
    )
