"""Exception hierarchy for obligation queries and plan execution."""
from __future__ import annotations


class LiquidatorError(Exception):
    """Base class for every error raised by the liquidator."""


class NotFoundError(LiquidatorError):
    """The obligation (or one of its objects) does not exist on chain."""


class DecodeError(LiquidatorError):
    """An on-chain or API structure did not match the expected shape."""


class SourceError(LiquidatorError):
    """The structured obligation source failed (not the same as "no data")."""


class RpcError(LiquidatorError):
    """Every configured Sui RPC endpoint failed."""


# ---------------------------------------------------------------------------
# Transaction builder failures
# ---------------------------------------------------------------------------


class BuilderError(LiquidatorError):
    """A failure raised by the transaction builder, classified after the fact."""

    kind = "unclassified"
    hint = ""

    def __init__(self, message: str, raw_message: str = "") -> None:
        super().__init__(message)
        self.raw_message = raw_message or message


class PositionLockedError(BuilderError):
    kind = "locked"
    hint = (
        "The obligation is staked in an incentive program. "
        "Its owner must unstake it before it can be liquidated or repaid."
    )


class ZeroAmountError(BuilderError):
    kind = "zero_amount"
    hint = "The remaining debt is smaller than one base unit of the asset."


class InsufficientBalanceError(BuilderError):
    kind = "insufficient_balance"
    hint = "Top up the wallet with the debt asset and try again."


class UnsupportedAssetError(BuilderError):
    kind = "unsupported_asset"
    hint = "The transaction builder does not recognise this coin name."


class UnclassifiedBuilderError(BuilderError):
    kind = "unclassified"
