"""Risk and eligibility classification of an obligation record."""
from __future__ import annotations

from .models import Classification, PositionRecord


def is_bad_debt(record: PositionRecord) -> bool:
    """Debt outstanding with nothing left to seize."""
    return bool(record.debts) and not record.collaterals


def classify(record: PositionRecord) -> Classification:
    """Place a record in exactly one of liquidatable, bad debt or neither.

    Bad debt is never liquidatable: ordinary liquidation pays out collateral,
    and there is none.
    """
    bad_debt = is_bad_debt(record)
    return Classification(
        is_liquidatable=record.is_liquidatable and not bad_debt,
        is_bad_debt=bad_debt,
    )
