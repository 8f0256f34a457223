"""Hand plans to the transaction builder and classify what goes wrong."""
from __future__ import annotations

import logging
import re

from .errors import (
    BuilderError,
    InsufficientBalanceError,
    PositionLockedError,
    UnclassifiedBuilderError,
    UnsupportedAssetError,
    ZeroAmountError,
)
from .interfaces.transaction_builder import TransactionBuilder, TransactionRequest
from .models import ExecutionResult, Plan, PlanKind

logger = logging.getLogger(__name__)

# Ordered (pattern, error class) rules matched against builder error messages.
# These depend on the wording of upstream errors and will break silently if it
# changes; tests pin them to known literal messages. First match wins.
BUILDER_ERROR_RULES: tuple[tuple[re.Pattern[str], type[BuilderError]], ...] = (
    (re.compile(r"obligation[_ ]?locked|\blocked\b", re.IGNORECASE), PositionLockedError),
    (
        re.compile(
            r"zero[_ ]?amount|amount (?:must be|should be) (?:greater than|positive)"
            r"|amount (?:is|rounds to) zero",
            re.IGNORECASE,
        ),
        ZeroAmountError,
    ),
    (
        re.compile(
            r"insufficient|not enough (?:balance|coins?)|no valid coins", re.IGNORECASE
        ),
        InsufficientBalanceError,
    ),
    (
        re.compile(
            r"unsupported|not supported|unknown (?:coin|asset|pool)|invalid coin",
            re.IGNORECASE,
        ),
        UnsupportedAssetError,
    ),
)


def _describe(error_cls: type[BuilderError], plan: Plan) -> str:
    symbol = plan.debt.symbol
    amount = f"{plan.repay_amount.amount:,.{plan.repay_amount.decimals}f} {symbol}"

    if error_cls is PositionLockedError:
        return f"Obligation {plan.obligation_id} is locked; cannot repay {amount}"
    if error_cls is ZeroAmountError:
        return f"Repay amount rounds to zero ({amount})"
    if error_cls is InsufficientBalanceError:
        return f"Insufficient {symbol} balance: {amount} required"
    if error_cls is UnsupportedAssetError:
        return (
            f"Asset {symbol} ({plan.debt.coin_name}) is not supported by the builder; "
            f"cannot repay {amount}"
        )
    return f"Transaction builder failed to repay {amount}"


def translate_builder_error(error: Exception, plan: Plan) -> BuilderError:
    """Classify a raw builder failure and restate it in terms of the plan."""
    raw_message = str(error) or type(error).__name__

    for pattern, error_cls in BUILDER_ERROR_RULES:
        if pattern.search(raw_message):
            message = f"{_describe(error_cls, plan)}. {error_cls.hint}"
            return error_cls(message, raw_message=raw_message)

    return UnclassifiedBuilderError(raw_message, raw_message=raw_message)


def build_request(plan: Plan, wallet_address: str) -> TransactionRequest:
    return TransactionRequest(
        action="liquidate" if plan.kind is PlanKind.LIQUIDATE else "repay",
        obligation_id=plan.obligation_id,
        debt_coin_name=plan.debt_coin_name,
        raw_amount=plan.raw_repay_amount,
        wallet_address=wallet_address,
        collateral_coin_name=plan.collateral_coin_name,
    )


async def execute_plan(
    plan: Plan, builder: TransactionBuilder, wallet_address: str
) -> ExecutionResult:
    """Submit a plan; builder failures come back as a failed result, not raised."""
    request = build_request(plan, wallet_address)

    try:
        digest = await builder.submit(request)
    except Exception as e:
        failure = translate_builder_error(e, plan)
        logger.error("%s failed: %s", request.action, failure)
        logger.debug("Raw builder error: %s", failure.raw_message)
        return ExecutionResult(success=False, error=str(failure), error_kind=failure.kind)

    logger.info("%s submitted: %s", request.action, digest)
    return ExecutionResult(success=True, tx_digest=digest, repaid_amount=plan.raw_repay_amount)
