"""Plan classification: lump-sum ("cash") vs. amortized ("installment").

Plans are identified upstream by a free-text label such as "Al Contado" or
"Financiado 24 meses". The fuzzy matching happens here only, so the numeric
core always receives a clean two-value PlanKind.
"""
from __future__ import annotations

import enum
import logging
from typing import Optional

from .config import CASH_LABEL_TOKENS

logger = logging.getLogger(__name__)


class PlanKind(enum.Enum):
    CASH = "cash"
    INSTALLMENT = "installment"


def is_cash_label(plan_label: Optional[str]) -> bool:
    """True if *plan_label* contains one of the lump-sum tokens (case-insensitive)."""
    if not plan_label:
        return False
    lowered = plan_label.casefold()
    return any(token in lowered for token in CASH_LABEL_TOKENS)


def classify(plan_label: Optional[str], installment_count: int) -> PlanKind:
    """Return PlanKind.CASH for a single payment or a cash-labelled plan.

    Never raises: an unknown or missing label falls back to INSTALLMENT.
    """
    if installment_count == 1 or is_cash_label(plan_label):
        kind = PlanKind.CASH
    else:
        kind = PlanKind.INSTALLMENT
    logger.debug("Classified plan %r (%d installments) as %s", plan_label, installment_count, kind.value)
    return kind
