"""Check / execute / force workflow for a single obligation."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ..chains.sui import SuiClient
from ..config import AppConfig
from ..evaluator import classify
from ..executor import execute_plan
from ..interfaces.transaction_builder import TransactionBuilder
from ..models import (
    Classification,
    ExecutionResult,
    Plan,
    PositionRecord,
    PositionStatus,
    RiskBasis,
)
from ..planner import (
    DEFAULT_LIQUIDATION_BONUS,
    plan_bad_debt_repayment,
    plan_ordinary_liquidation,
)
from ..protocols.scallop import RawObligationReader, RelayTransactionBuilder, ScallopApiSource
from ..registry import DEFAULT_COINS, CoinRegistry
from .position_service import PositionQueryService

logger = logging.getLogger(__name__)


class Mode(Enum):
    CHECK = "check"
    EXECUTE = "execute"
    FORCE = "force"


@dataclass(frozen=True)
class RunOutcome:
    record: PositionRecord
    classification: Classification
    plan: Plan | None = None
    result: ExecutionResult | None = None

    @property
    def failed(self) -> bool:
        return self.result is not None and not self.result.success


def _format_risk(record: PositionRecord) -> str:
    if record.risk_basis is RiskBasis.NO_COLLATERAL:
        return "n/a (debt with no collateral)"
    if record.risk_basis is RiskBasis.ASSUMED_AT_THRESHOLD:
        return "unknown without prices (assumed 100.00%)"
    suffix = " (estimated)" if record.risk_basis is RiskBasis.ESTIMATED else ""
    return f"{record.risk_level * 100:.2f}%{suffix}"


class Liquidator:
    """Evaluate one obligation and, if asked, act on it."""

    def __init__(
        self,
        query_service: PositionQueryService,
        builder: TransactionBuilder | None = None,
        wallet_address: str = "",
        liquidation_bonus: float = DEFAULT_LIQUIDATION_BONUS,
    ) -> None:
        self._query = query_service
        self._builder = builder
        self._wallet_address = wallet_address
        self._liquidation_bonus = liquidation_bonus

    @classmethod
    def from_config(cls, config: AppConfig) -> Liquidator:
        registry = CoinRegistry(config.coins or DEFAULT_COINS)
        chain_client = SuiClient(config.chain)
        source = ScallopApiSource(config.scallop) if config.scallop.obligation_url else None
        query_service = PositionQueryService(
            source, RawObligationReader(chain_client, registry), registry
        )
        return cls(
            query_service,
            builder=RelayTransactionBuilder(config.scallop),
            wallet_address=config.scallop.wallet_address,
            liquidation_bonus=config.liquidation.liquidation_bonus,
        )

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    @staticmethod
    def _log_summary(record: PositionRecord, classification: Classification) -> None:
        logger.info("=" * 60)
        logger.info("OBLIGATION STATUS (%s)", record.source.value)
        logger.info("=" * 60)
        logger.info("  ID:           %s", record.obligation_id)
        logger.info("  Risk Level:   %s", _format_risk(record))
        logger.info("  Liquidatable: %s", "YES" if classification.is_liquidatable else "No")
        logger.info("  Bad Debt:     %s", "YES" if classification.is_bad_debt else "No")
        logger.info("  Collaterals:")
        if not record.collaterals:
            logger.info("    (none)")
        for c in record.collaterals:
            logger.info(
                "    - %s: %.6f (~$%.2f)", c.asset.symbol, c.amount.amount, c.value_usd
            )
        logger.info("  Debts:")
        if not record.debts:
            logger.info("    (none)")
        for d in record.debts:
            logger.info(
                "    - %s: %.6f (~$%.2f)", d.asset.symbol, d.amount.amount, d.value_usd
            )
        logger.info("=" * 60)

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    async def evaluate(self, obligation_id: str) -> tuple[PositionRecord, Classification]:
        record = await self._query.query_position(obligation_id)
        classification = classify(record)
        self._log_summary(record, classification)
        return record, classification

    async def _execute(self, plan: Plan) -> ExecutionResult:
        if self._builder is None:
            return ExecutionResult(
                success=False, error="No transaction builder configured", error_kind="config"
            )
        return await execute_plan(plan, self._builder, self._wallet_address)

    async def _run_bad_debt(
        self, record: PositionRecord, classification: Classification, mode: Mode
    ) -> RunOutcome:
        plan = plan_bad_debt_repayment(record)
        logger.warning(
            "Obligation %s is BAD DEBT: debt remains but no collateral is left to seize",
            record.obligation_id,
        )
        if mode is not Mode.FORCE or plan is None:
            logger.info("Ordinary liquidation is impossible. Use force mode to repay it.")
            return RunOutcome(record, classification, plan)

        logger.warning("!" * 60)
        logger.warning(
            "  FORCE: repaying %.6f %s (100%% of the debt)",
            plan.repay_amount.amount, plan.debt.symbol,
        )
        logger.warning("  YOU WILL RECEIVE NO COLLATERAL IN RETURN.")
        logger.warning("!" * 60)
        return RunOutcome(record, classification, plan, await self._execute(plan))

    async def run(self, obligation_id: str, mode: Mode = Mode.CHECK) -> RunOutcome:
        record, classification = await self.evaluate(obligation_id)
        status = classification.status

        if status is PositionStatus.BAD_DEBT:
            return await self._run_bad_debt(record, classification, mode)

        if status is PositionStatus.HEALTHY:
            logger.info("Obligation is not liquidatable (risk level below 100%)")
            return RunOutcome(record, classification)

        plan = plan_ordinary_liquidation(record, self._liquidation_bonus)
        if plan is None:
            logger.warning("Obligation is liquidatable but has no debt/collateral pair")
            return RunOutcome(record, classification)

        estimate = plan.estimate
        logger.info("Liquidation opportunity:")
        logger.info(
            "  Repay:            %.6f %s", plan.repay_amount.amount, plan.debt.symbol
        )
        logger.info("  Receive:          %s", plan.collateral.symbol if plan.collateral else "-")
        logger.info("  Estimated profit: ~$%.2f", estimate.estimated_profit_usd if estimate else 0.0)
        logger.info(
            "  Profitable:       %s", "YES" if estimate and estimate.profitable else "Marginal"
        )

        if mode is Mode.CHECK:
            return RunOutcome(record, classification, plan)

        if mode is Mode.EXECUTE and not (estimate and estimate.profitable):
            logger.warning("Liquidation not profitable. Use force mode to bypass this check.")
            return RunOutcome(record, classification, plan)

        if mode is Mode.FORCE:
            logger.warning("Force mode: bypassing profit check")
        return RunOutcome(record, classification, plan, await self._execute(plan))
