"""Command-line front end — click entry point + rich rendering.

Commands:
  schedule  Print the installment schedule and its totals for a plan.
  quote     Price a plan for a property (projected total, no schedule) and,
            with --reserve-on, confirm a reservation and print its schedule.

All figures are computed at full precision and rounded to cents only here,
when they are rendered.
"""
from __future__ import annotations

import logging
import sys
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .calculator import Installment, InvalidInput, generate, monthly_rate
from .classifier import PlanKind
from .config import PERCENT
from .quotation import PaymentPlan, Quotation, Reservation, build_plan_input, confirm_reservation, quote
from .summary import ScheduleSummary, summarize

console = Console()
err_console = Console(stderr=True, style="bold red")

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s"


def configure_logging(level: int = logging.DEBUG) -> None:
    """Attach a single stderr handler to the package logger."""
    package_logger = logging.getLogger("payment_schedule")
    package_logger.setLevel(level)
    package_logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%H:%M:%S"))
    package_logger.addHandler(handler)


# ──────────────────────────────────────────────────────────────────────────────
# Formatting helpers
# ──────────────────────────────────────────────────────────────────────────────

def _fmt_amount(value: Decimal) -> str:
    return f"{value:,.2f}"


def _fmt_money(value: Decimal, currency: str) -> str:
    return f"{_fmt_amount(value)} {currency}"


def _fmt_rate(value: Decimal) -> str:
    return f"{value:.4f}%"


# ──────────────────────────────────────────────────────────────────────────────
# Display
# ──────────────────────────────────────────────────────────────────────────────

def display_plan_header(plan: PaymentPlan, price: Decimal, kind: PlanKind, currency: str) -> None:
    t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("Field", style="cyan")
    t.add_column("Value", justify="right")

    t.add_row("Plan", plan.label or "-")
    t.add_row("Plan type", kind.value)
    t.add_row("Base price", _fmt_money(price, currency))
    if kind is PlanKind.INSTALLMENT:
        t.add_row("Down payment", _fmt_money(plan.minimum_down_payment, currency))
        t.add_row("Installments", str(plan.installment_count))
        t.add_row("Annual interest", _fmt_rate(plan.annual_interest_rate))
        t.add_row("TEM (monthly)", _fmt_rate(monthly_rate(plan.annual_interest_rate) * PERCENT))
    console.print(t)


def display_schedule(schedule: list[Installment], currency: str) -> None:
    t = Table(title=f"Payment Schedule ({currency})", box=box.MINIMAL_HEAVY_HEAD)
    for col in ("N°", "Due date", "Opening bal.", "Principal", "Interest", "Installment", "Days"):
        t.add_column(col, justify="right")

    for row in (installment.rounded() for installment in schedule):
        t.add_row(
            f"{row.number:03d}",
            row.due_date.isoformat(),
            _fmt_amount(row.opening_balance),
            _fmt_amount(row.principal_portion),
            _fmt_amount(row.interest_portion),
            _fmt_amount(row.total_amount),
            str(row.period_days),
        )
    console.print(t)


def display_summary(summary: ScheduleSummary, currency: str) -> None:
    totals = summary.rounded()
    t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("Total", style="cyan")
    t.add_column("Value", justify="right")
    t.add_row("Total principal", _fmt_money(totals.total_principal, currency))
    t.add_row("Total interest", _fmt_money(totals.total_interest, currency))
    t.add_row("Total payable", _fmt_money(totals.total_payable, currency))
    console.print(t)


def display_quotation(quotation: Quotation, currency: str) -> None:
    console.print(Panel(
        f"[bold green]Quotation[/bold green] {quotation.contract_code}",
        expand=False,
    ))
    t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("Field", style="cyan")
    t.add_column("Value", justify="right")
    t.add_row("Issued on", quotation.issued_on.isoformat())
    t.add_row("Plan", quotation.plan.label or "-")
    t.add_row("Base price", _fmt_money(quotation.base_price, currency))
    t.add_row("Total interest", _fmt_money(quotation.total_interest, currency))
    t.add_row("Final price", _fmt_money(quotation.final_price, currency))
    console.print(t)


def display_reservation(reservation: Reservation, currency: str) -> None:
    console.print(Panel(
        f"[bold green]Reservation confirmed[/bold green] on {reservation.confirmed_on.isoformat()}, "
        f"valid until {reservation.expires_on.isoformat()}",
        expand=False,
    ))
    display_schedule(list(reservation.schedule), currency)
    display_summary(reservation.summary, currency)


# ──────────────────────────────────────────────────────────────────────────────
# Input helpers
# ──────────────────────────────────────────────────────────────────────────────

def _parse_decimal(raw: str, name: str) -> Decimal:
    try:
        return Decimal(raw.replace(",", ".").replace(" ", ""))
    except InvalidOperation:
        err_console.print(f"Invalid value for --{name}: '{raw}'")
        sys.exit(1)


def _as_date(value: Optional[datetime]) -> date:
    return value.date() if value is not None else date.today()


def _build_plan(
    price: str, down_payment: str, installments: int, rate: str, label: Optional[str]
) -> tuple[PaymentPlan, Decimal]:
    plan = PaymentPlan(
        label=label or "",
        installment_count=installments,
        annual_interest_rate=_parse_decimal(rate, "rate"),
        minimum_down_payment=_parse_decimal(down_payment, "down-payment"),
    )
    return plan, _parse_decimal(price, "price")


def plan_options(func):
    """Shared plan options for every command."""
    options = [
        click.option("--price", type=str, required=True,
                     help="Property base price; a comma is the decimal mark (100,50 = 100.50)"),
        click.option("--down-payment", type=str, default="0", show_default=True,
                     help="Initial installment paid upfront"),
        click.option("--installments", type=int, default=1, show_default=True,
                     help="Number of periodic installments after the down payment"),
        click.option("--rate", type=str, default="0", show_default=True,
                     help="Annual nominal interest rate in percent (e.g. 12.5)"),
        click.option("--label", type=str, default=None,
                     help="Plan label, e.g. 'Al Contado' or 'Financiado 12 meses'"),
        click.option("--currency", type=str, default="PEN", show_default=True,
                     help="Currency code shown next to amounts"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


# ──────────────────────────────────────────────────────────────────────────────
# Click entry point
# ──────────────────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log calculation steps to stderr")
def main(verbose: bool) -> None:
    """Payment schedule calculator for property sales."""
    if verbose:
        configure_logging(logging.DEBUG)


@main.command()
@plan_options
@click.option("--date", "reference_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Reference date of installment 0 (default: today)")
def schedule(
    price: str,
    down_payment: str,
    installments: int,
    rate: str,
    label: Optional[str],
    currency: str,
    reference_date: Optional[datetime],
) -> None:
    """Print the installment schedule for a plan."""
    plan, base_price = _build_plan(price, down_payment, installments, rate, label)
    try:
        plan_input = build_plan_input(plan, base_price)
        rows = generate(plan_input, _as_date(reference_date))
    except InvalidInput as exc:
        err_console.print(f"Error: {exc}")
        sys.exit(1)

    display_plan_header(plan, base_price, plan_input.plan_kind, currency)
    display_schedule(rows, currency)
    display_summary(summarize(rows), currency)


@main.command(name="quote")
@plan_options
@click.option("--issued-on", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Quotation date (default: today)")
@click.option("--reserve-on", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Confirm a reservation on this date and print its schedule")
def quote_command(
    price: str,
    down_payment: str,
    installments: int,
    rate: str,
    label: Optional[str],
    currency: str,
    issued_on: Optional[datetime],
    reserve_on: Optional[datetime],
) -> None:
    """Price a plan for a property and optionally confirm a reservation."""
    plan, base_price = _build_plan(price, down_payment, installments, rate, label)
    try:
        quotation = quote(plan, base_price, _as_date(issued_on))
        reservation = (
            confirm_reservation(plan, base_price, reserve_on.date())
            if reserve_on is not None
            else None
        )
    except InvalidInput as exc:
        err_console.print(f"Error: {exc}")
        sys.exit(1)

    display_quotation(quotation, currency)
    if reservation is not None:
        display_reservation(reservation, currency)
