"""Liquidation and bad-debt repayment planning."""
from __future__ import annotations

import math
from fractions import Fraction

from .evaluator import classify
from .models import AssetAmount, Plan, PlanKind, PositionRecord, ProfitEstimate

# Share of a debt repaid by one ordinary liquidation.
REPAY_FRACTION = Fraction(1, 2)
DEFAULT_LIQUIDATION_BONUS = 0.05
# Estimated profit must exceed this to count as worth the gas.
MIN_PROFIT_USD = 0.10


def estimate_liquidation_profit(
    record: PositionRecord,
    debt_coin_name: str,
    collateral_coin_name: str,
    liquidation_bonus: float = DEFAULT_LIQUIDATION_BONUS,
) -> ProfitEstimate:
    """Rough upper bound on the bonus earned by liquidating one pair.

    profit = min(debt_usd * 0.5, collateral_usd) * bonus

    Gas and slippage are not modelled.
    """
    debt = next(
        (d for d in record.debts if d.asset.coin_name.lower() == debt_coin_name.lower()),
        None,
    )
    collateral = next(
        (
            c for c in record.collaterals
            if c.asset.coin_name.lower() == collateral_coin_name.lower()
        ),
        None,
    )
    if debt is None or collateral is None:
        return ProfitEstimate(profitable=False, estimated_profit_usd=0.0)

    max_liquidatable_usd = min(debt.value_usd * float(REPAY_FRACTION), collateral.value_usd)
    estimated = max_liquidatable_usd * liquidation_bonus
    return ProfitEstimate(profitable=estimated > MIN_PROFIT_USD, estimated_profit_usd=estimated)


def plan_ordinary_liquidation(
    record: PositionRecord,
    liquidation_bonus: float = DEFAULT_LIQUIDATION_BONUS,
) -> Plan | None:
    """Repay half of the first debt and seize the first collateral.

    Pair selection follows list order; pre-sort the record to prefer another
    pair. Returns ``None`` unless the record is liquidatable.
    """
    if not classify(record).is_liquidatable:
        return None
    if not record.debts or not record.collaterals:
        return None

    debt = record.debts[0]
    collateral = record.collaterals[0]
    repay_raw = math.floor(debt.amount.raw * REPAY_FRACTION)

    return Plan(
        kind=PlanKind.LIQUIDATE,
        obligation_id=record.obligation_id,
        debt=debt.asset,
        collateral=collateral.asset,
        repay_amount=AssetAmount(repay_raw, debt.amount.decimals),
        estimate=estimate_liquidation_profit(
            record, debt.asset.coin_name, collateral.asset.coin_name, liquidation_bonus
        ),
    )


def plan_bad_debt_repayment(record: PositionRecord) -> Plan | None:
    """Repay the whole first debt of a bad-debt obligation.

    Nothing is received in return and no profit check applies: this is a
    write-off the caller has to ask for explicitly.
    """
    if not classify(record).is_bad_debt:
        return None

    debt = record.debts[0]
    return Plan(
        kind=PlanKind.REPAY_BAD_DEBT,
        obligation_id=record.obligation_id,
        debt=debt.asset,
        repay_amount=debt.amount,
    )
