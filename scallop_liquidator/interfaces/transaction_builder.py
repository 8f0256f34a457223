"""Transaction builder protocol: builds, signs and submits liquidations."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class TransactionRequest:
    action: str  # "liquidate" or "repay"
    obligation_id: str
    debt_coin_name: str
    raw_amount: int
    wallet_address: str
    collateral_coin_name: str | None = None


class TransactionBuilder(Protocol):
    """Refreshes oracle prices, selects coins, calls the protocol and submits.

    Returns the transaction digest. Failures are raised as-is; the caller
    classifies them.
    """

    async def submit(self, request: TransactionRequest) -> str: ...
