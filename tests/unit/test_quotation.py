"""Unit tests for quotation.py — plan building, quotations, reservations."""
import random
from datetime import date
from decimal import Decimal

import pytest

from payment_schedule.calculator import InvalidInput
from payment_schedule.classifier import PlanKind
from payment_schedule.quotation import (
    PaymentPlan,
    build_plan_input,
    confirm_reservation,
    generate_contract_code,
    quote,
    reservation_expiry,
)
from payment_schedule.summary import project_total_payable

ZERO = Decimal("0")

FINANCED = PaymentPlan("Financiado 12 meses", 12, Decimal("12"), Decimal("20000"))
CASH = PaymentPlan("Al Contado", 1, ZERO, Decimal("5000"))


class _FixedRng:
    def __init__(self, value: int) -> None:
        self.value = value

    def randrange(self, stop: int) -> int:
        assert stop == 10000
        return self.value


class TestBuildPlanInput:
    def test_installment_plan(self):
        plan = build_plan_input(FINANCED, Decimal("100000"))
        assert plan.plan_kind is PlanKind.INSTALLMENT
        assert plan.principal == Decimal("100000")
        assert plan.down_payment == Decimal("20000")
        assert plan.installment_count == 12
        assert plan.annual_interest_rate == Decimal("12")
        assert plan.period_length_days == 30

    def test_cash_plan_drops_down_payment(self):
        plan = build_plan_input(CASH, Decimal("50000"))
        assert plan.plan_kind is PlanKind.CASH
        assert plan.down_payment == ZERO

    @pytest.mark.parametrize("plan", [
        PaymentPlan("Al Contado", 1, ZERO, Decimal("15000")),
        PaymentPlan("", 1, ZERO, Decimal("15000")),
        PaymentPlan("Pago al contado", 6, ZERO, Decimal("-1")),
    ])
    def test_cash_plan_still_validates_down_payment(self, plan):
        with pytest.raises(InvalidInput) as excinfo:
            build_plan_input(plan, Decimal("10000"))
        assert excinfo.value.field == "down_payment"

    def test_non_finite_price(self):
        with pytest.raises(InvalidInput, match="finite"):
            build_plan_input(CASH, Decimal("NaN"))

    def test_cash_label_with_many_installments(self):
        plan = build_plan_input(PaymentPlan("Pago al contado", 6), Decimal("50000"))
        assert plan.plan_kind is PlanKind.CASH


class TestContractCode:
    def test_format(self):
        assert generate_contract_code(date(2024, 1, 15), _FixedRng(42)) == "PROP202401150042"

    def test_random_suffix(self):
        code = generate_contract_code(date(2024, 1, 15), random.Random(7))
        assert code.startswith("PROP20240115")
        assert len(code) == 16
        assert code[-4:].isdigit()


class TestReservationExpiry:
    @pytest.mark.parametrize("confirmed,expected", [
        (date(2024, 1, 1), date(2024, 1, 31)),
        (date(2024, 1, 31), date(2024, 3, 1)),
        (date(2023, 12, 15), date(2024, 1, 14)),
    ])
    def test_thirty_days(self, confirmed, expected):
        assert reservation_expiry(confirmed) == expected


class TestQuote:
    def test_financed_plan(self):
        quotation = quote(FINANCED, Decimal("100000"), date(2024, 1, 15), rng=_FixedRng(1))
        assert quotation.contract_code == "PROP202401150001"
        assert quotation.final_price == Decimal("105294.84")
        assert quotation.total_interest == Decimal("5294.84")
        assert quotation.issued_on == date(2024, 1, 15)
        assert quotation.plan is FINANCED

    def test_cash_plan_has_no_interest(self):
        quotation = quote(CASH, Decimal("50000"), date(2024, 1, 15))
        assert quotation.final_price == Decimal("50000.00")
        assert quotation.total_interest == ZERO

    def test_zero_interest_plan(self):
        plan = PaymentPlan("Sin intereses", 5)
        quotation = quote(plan, Decimal("10000"), date(2024, 1, 15))
        assert quotation.final_price == Decimal("10000.00")

    def test_cash_plan_down_payment_above_price(self):
        with pytest.raises(InvalidInput, match="cannot exceed principal"):
            quote(PaymentPlan("Al Contado", 1, ZERO, Decimal("15000")), Decimal("10000"), date(2024, 1, 15))

    def test_invalid_down_payment(self):
        plan = PaymentPlan("Financiado", 12, Decimal("10"), Decimal("150000"))
        with pytest.raises(InvalidInput, match="down_payment"):
            quote(plan, Decimal("100000"), date(2024, 1, 15))


class TestConfirmReservation:
    def test_schedule_starts_on_confirmation(self):
        reservation = confirm_reservation(FINANCED, Decimal("100000"), date(2024, 2, 1))
        assert reservation.confirmed_on == date(2024, 2, 1)
        assert reservation.expires_on == date(2024, 3, 2)
        assert reservation.schedule[0].due_date == date(2024, 2, 1)
        assert reservation.schedule[1].due_date == date(2024, 3, 2)
        assert len(reservation.schedule) == 13

    def test_summary_matches_quotation(self):
        price = Decimal("100000")
        reservation = confirm_reservation(FINANCED, price, date(2024, 2, 1))
        assert reservation.summary.total_payable == project_total_payable(build_plan_input(FINANCED, price))
