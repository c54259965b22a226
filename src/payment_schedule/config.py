"""Application-wide constants and configuration defaults.

All tuneable defaults live here so there is a single place to adjust them.
"""
from __future__ import annotations

from decimal import Decimal

# ── Schedule shape ────────────────────────────────────────────────────────────

PERIOD_LENGTH_DAYS: int = 30   # uniform 30-day months, not calendar months
MONTHS_PER_YEAR = Decimal(12)
PERCENT = Decimal(100)

# ── Plan classification ───────────────────────────────────────────────────────

# Lowercase substrings that mark a plan label as a lump-sum payment ("Al Contado").
CASH_LABEL_TOKENS: tuple[str, ...] = ("contado", "cash")

# ── Quotations & reservations ─────────────────────────────────────────────────

RESERVATION_VALIDITY_DAYS: int = 30
CONTRACT_CODE_PREFIX: str = "PROP"
CONTRACT_CODE_SUFFIX_DIGITS: int = 4

# ── Numeric convenience ───────────────────────────────────────────────────────

ZERO = Decimal("0")
CENT = Decimal("0.01")
