"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal
from enum import Enum

# Risk level at or above which an obligation may be liquidated.
LIQUIDATION_THRESHOLD = 1.0


@dataclass(frozen=True)
class AssetAmount:
    """Raw integer units of one asset plus the precision used to read them."""

    raw: int
    decimals: int

    @property
    def amount(self) -> Decimal:
        """Human-readable quantity, exact for the full u64 range."""
        return Decimal(self.raw).scaleb(-self.decimals)


def to_raw(amount: Decimal | float | str, decimals: int) -> int:
    """Convert a human-readable quantity back to raw integer units.

    Floats go through their shortest repr, so ``to_raw(1.1, 6)`` is 1100000.
    """
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return int(amount.scaleb(decimals).to_integral_value(rounding=ROUND_HALF_EVEN))


@dataclass(frozen=True)
class AssetIdentity:
    """One coin as seen by the protocol.

    ``coin_name`` is the lowercase short name Scallop uses in its pools and is
    what gets passed to price updates and transaction calls.
    """

    coin_type: str
    coin_name: str
    symbol: str


@dataclass(frozen=True)
class DebtEntry:
    asset: AssetIdentity
    amount: AssetAmount
    value_usd: float = 0.0


@dataclass(frozen=True)
class CollateralEntry:
    asset: AssetIdentity
    amount: AssetAmount
    value_usd: float = 0.0


class RiskBasis(Enum):
    """How the risk level of a record was obtained."""

    REPORTED = "reported"
    ESTIMATED = "estimated"
    ASSUMED_AT_THRESHOLD = "assumed_at_threshold"
    NO_COLLATERAL = "no_collateral"
    NO_DEBT = "no_debt"


class RecordSource(Enum):
    STRUCTURED = "structured"
    RAW_OBJECT = "raw_object"


@dataclass(frozen=True)
class PositionRecord:
    """Canonical view of one obligation, built fresh for each query.

    ``risk_level`` is weighted borrow value over weighted collateral value.
    It is ``None`` when the raw object shows debt without collateral: that
    state has no meaningful ratio and is carried by ``risk_basis`` instead.
    """

    obligation_id: str
    debts: tuple[DebtEntry, ...]
    collaterals: tuple[CollateralEntry, ...]
    risk_level: float | None
    risk_basis: RiskBasis
    source: RecordSource
    weighted_borrow_value: float | None = None
    required_collateral_value: float | None = None

    @property
    def is_liquidatable(self) -> bool:
        if not self.debts or self.risk_level is None:
            return False
        return self.risk_level >= LIQUIDATION_THRESHOLD

    @property
    def total_debt_usd(self) -> float:
        return sum(d.value_usd for d in self.debts)

    @property
    def total_collateral_usd(self) -> float:
        return sum(c.value_usd for c in self.collaterals)


class PositionStatus(Enum):
    LIQUIDATABLE = "liquidatable"
    BAD_DEBT = "bad_debt"
    HEALTHY = "healthy"


@dataclass(frozen=True)
class Classification:
    is_liquidatable: bool
    is_bad_debt: bool

    @property
    def status(self) -> PositionStatus:
        if self.is_bad_debt:
            return PositionStatus.BAD_DEBT
        if self.is_liquidatable:
            return PositionStatus.LIQUIDATABLE
        return PositionStatus.HEALTHY


@dataclass(frozen=True)
class ProfitEstimate:
    profitable: bool
    estimated_profit_usd: float


class PlanKind(Enum):
    LIQUIDATE = "liquidate"
    REPAY_BAD_DEBT = "repay_bad_debt"


@dataclass(frozen=True)
class Plan:
    """What to repay on an obligation and what (if anything) comes back."""

    kind: PlanKind
    obligation_id: str
    debt: AssetIdentity
    repay_amount: AssetAmount
    collateral: AssetIdentity | None = None
    estimate: ProfitEstimate | None = None

    @property
    def debt_coin_name(self) -> str:
        return self.debt.coin_name

    @property
    def collateral_coin_name(self) -> str | None:
        return self.collateral.coin_name if self.collateral else None

    @property
    def raw_repay_amount(self) -> int:
        return self.repay_amount.raw

    @property
    def receives_collateral(self) -> bool:
        return self.kind is PlanKind.LIQUIDATE


@dataclass(frozen=True)
class ExecutionResult:
    success: bool
    tx_digest: str = ""
    repaid_amount: int = 0
    error: str = ""
    error_kind: str = ""
