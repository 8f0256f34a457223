"""Pure parsing functions for Scallop obligation data: no I/O.

Two shapes arrive here: the raw ``Obligation`` Move object as returned by
``sui_getObject`` (debts and collaterals live in dynamic-field tables), and
the obligation account served by the structured source (maps keyed by coin
name). Both are validated strictly: anything that does not look like an
amount raises ``DecodeError`` rather than being read as zero.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...errors import DecodeError
from ...models import (
    LIQUIDATION_THRESHOLD,
    AssetAmount,
    CollateralEntry,
    DebtEntry,
    PositionRecord,
    RecordSource,
    RiskBasis,
)
from ...registry import COLLATERAL_DEFAULT_DECIMALS, DEBT_DEFAULT_DECIMALS, CoinRegistry

# Average collateral factor assumed when a structured record has no risk level.
ESTIMATED_COLLATERAL_FACTOR = 0.75


@dataclass(frozen=True)
class TableRef:
    """A Move ``Table`` (or ``WitTable``) embedded in an object."""

    table_id: str
    size: int


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def parse_raw_amount(value: Any, where: str) -> int:
    """Parse a non-negative integer amount (u64 values arrive as strings)."""
    if isinstance(value, bool):
        raise DecodeError(f"{where}: expected an integer amount, got {value!r}")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        # isdigit alone admits non-ASCII digits such as superscripts.
        amount = int(value.strip())
    elif isinstance(value, float) and value.is_integer():
        amount = int(value)
    else:
        raise DecodeError(f"{where}: expected an integer amount, got {value!r}")

    if amount < 0:
        raise DecodeError(f"{where}: negative amount {amount}")
    return amount


def parse_usd_value(value: Any, where: str) -> float:
    """Parse an optional USD value; absent means no oracle was consulted."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise DecodeError(f"{where}: expected a USD value, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"{where}: expected a USD value, got {value!r}") from e


# ---------------------------------------------------------------------------
# Raw Move objects
# ---------------------------------------------------------------------------


def object_fields(obj: dict[str, Any]) -> dict[str, Any] | None:
    """Return ``data.content.fields`` of a ``sui_getObject`` result, if any."""
    if not isinstance(obj, dict) or obj.get("error"):
        return None
    content = (obj.get("data") or {}).get("content") or {}
    fields = content.get("fields")
    if not isinstance(fields, dict) or not fields:
        return None
    return fields


def parse_table_ref(fields: dict[str, Any], name: str) -> TableRef:
    """Locate the table stored under ``fields[name]``.

    Scallop wraps its tables in a ``WitTable``, whose ``table`` field holds the
    actual ``0x2::table::Table``; a bare ``Table`` is accepted too.
    """
    wrapper = fields.get(name)
    if not isinstance(wrapper, dict):
        raise DecodeError(f"Obligation has no '{name}' table")

    inner = wrapper.get("fields")
    if isinstance(inner, dict) and isinstance(inner.get("table"), dict):
        inner = inner["table"].get("fields")
    if not isinstance(inner, dict):
        raise DecodeError(f"'{name}' is not a table: {wrapper!r}")

    id_field = inner.get("id")
    table_id = id_field.get("id") if isinstance(id_field, dict) else None
    if not table_id:
        raise DecodeError(f"'{name}' table has no id")

    size = parse_raw_amount(inner.get("size"), f"'{name}' table size")
    return TableRef(table_id=table_id, size=size)


def _type_name(name: Any, where: str) -> str:
    """Decode a ``0x1::type_name::TypeName`` dynamic-field key."""
    if isinstance(name, dict):
        name = (name.get("fields") or {}).get("name")
    if not isinstance(name, str) or not name:
        raise DecodeError(f"{where}: missing coin type in field name")
    return name


def parse_table_entry(child: dict[str, Any], where: str) -> tuple[str, int]:
    """Extract ``(coin_type, raw_amount)`` from a table's dynamic-field object."""
    fields = object_fields(child)
    if fields is None:
        raise DecodeError(f"{where}: dynamic field has no content")

    coin_type = _type_name(fields.get("name"), where)

    value = fields.get("value")
    if not isinstance(value, dict) or not isinstance(value.get("fields"), dict):
        raise DecodeError(f"{where}: dynamic field value is not a struct")

    raw_amount = parse_raw_amount(value["fields"].get("amount"), f"{where} ({coin_type})")
    return coin_type, raw_amount


def build_debt_entry(registry: CoinRegistry, coin_type: str, raw_amount: int) -> DebtEntry:
    asset = registry.resolve(coin_type)
    decimals = registry.precision_of(asset.coin_name, DEBT_DEFAULT_DECIMALS)
    return DebtEntry(asset=asset, amount=AssetAmount(raw_amount, decimals))


def build_collateral_entry(
    registry: CoinRegistry, coin_type: str, raw_amount: int
) -> CollateralEntry:
    asset = registry.resolve(coin_type)
    decimals = registry.precision_of(asset.coin_name, COLLATERAL_DEFAULT_DECIMALS)
    return CollateralEntry(asset=asset, amount=AssetAmount(raw_amount, decimals))


def classify_raw(debt_count: int, collateral_count: int) -> tuple[float | None, RiskBasis]:
    """Coarse risk for a record decoded without prices.

    Debt without collateral has no ratio at all. Debt with collateral is put
    exactly at the threshold: liquidation is assumed possible and the caller
    has to check the economics.
    """
    if debt_count == 0:
        return 0.0, RiskBasis.NO_DEBT
    if collateral_count == 0:
        return None, RiskBasis.NO_COLLATERAL
    return LIQUIDATION_THRESHOLD, RiskBasis.ASSUMED_AT_THRESHOLD


# ---------------------------------------------------------------------------
# Structured obligation accounts
# ---------------------------------------------------------------------------

_AMOUNT_KEYS = {
    "debts": ("amount", "borrowedAmount"),
    "collaterals": ("amount", "depositedAmount"),
}
_VALUE_KEYS = {
    "debts": ("valueUsd", "borrowedValue"),
    "collaterals": ("valueUsd", "depositedValue"),
}


def _first_present(entry: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return None


def _parse_structured_side(
    payload: dict[str, Any], side: str, registry: CoinRegistry
) -> list[tuple[Any, AssetAmount, float]]:
    entries = payload.get(side) or {}
    if not isinstance(entries, dict):
        raise DecodeError(f"'{side}' must be a map keyed by coin name, got {type(entries).__name__}")

    default_decimals = DEBT_DEFAULT_DECIMALS if side == "debts" else COLLATERAL_DEFAULT_DECIMALS
    parsed = []
    for coin_name, entry in entries.items():
        where = f"{side}.{coin_name}"
        if not isinstance(entry, dict):
            raise DecodeError(f"{where}: expected an object, got {entry!r}")

        asset = registry.identity_for(str(coin_name), entry.get("coinType") or "")

        raw_amount = _first_present(entry, _AMOUNT_KEYS[side])
        if raw_amount is None:
            raise DecodeError(f"{where}: no amount")
        raw = parse_raw_amount(raw_amount, where)

        decimals_raw = entry.get("coinDecimal")
        if decimals_raw is None:
            decimals = registry.precision_of(asset.coin_name, default_decimals)
        else:
            decimals = parse_raw_amount(decimals_raw, f"{where}.coinDecimal")

        value_usd = parse_usd_value(_first_present(entry, _VALUE_KEYS[side]), where)
        parsed.append((asset, AssetAmount(raw, decimals), value_usd))
    return parsed


def estimate_risk_level(total_debt_usd: float, total_collateral_usd: float) -> float:
    """Debt over an assumed borrow limit, used when no risk level is reported."""
    borrow_limit = total_collateral_usd * ESTIMATED_COLLATERAL_FACTOR
    if borrow_limit <= 0:
        return 0.0
    return total_debt_usd / borrow_limit


def parse_structured_record(
    obligation_id: str, payload: dict[str, Any], registry: CoinRegistry
) -> PositionRecord:
    """Normalize a structured obligation account into a ``PositionRecord``.

    Debts and collaterals keep the order of the source maps. A reported
    ``riskLevel`` is authoritative; otherwise one is estimated from USD values.
    """
    if not isinstance(payload, dict):
        raise DecodeError(f"Obligation account must be an object, got {payload!r}")

    debts = tuple(
        DebtEntry(asset=a, amount=amt, value_usd=usd)
        for a, amt, usd in _parse_structured_side(payload, "debts", registry)
    )
    collaterals = tuple(
        CollateralEntry(asset=a, amount=amt, value_usd=usd)
        for a, amt, usd in _parse_structured_side(payload, "collaterals", registry)
    )

    if payload.get("riskLevel") is not None:
        risk_level = parse_usd_value(payload["riskLevel"], "riskLevel")
        basis = RiskBasis.REPORTED
    else:
        risk_level = estimate_risk_level(
            sum(d.value_usd for d in debts), sum(c.value_usd for c in collaterals)
        )
        basis = RiskBasis.ESTIMATED

    weighted = payload.get("totalBorrowedValueWithWeight")
    required = payload.get("totalRequiredCollateralValue")

    return PositionRecord(
        obligation_id=obligation_id,
        debts=debts,
        collaterals=collaterals,
        risk_level=risk_level,
        risk_basis=basis,
        source=RecordSource.STRUCTURED,
        weighted_borrow_value=(
            None if weighted is None
            else parse_usd_value(weighted, "totalBorrowedValueWithWeight")
        ),
        required_collateral_value=(
            None if required is None
            else parse_usd_value(required, "totalRequiredCollateralValue")
        ),
    )
