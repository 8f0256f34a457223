"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

import pytest

from scallop_liquidator.config import (
    AppConfig,
    ChainConfig,
    LiquidationConfig,
    ScallopConfig,
)
from scallop_liquidator.models import (
    AssetAmount,
    AssetIdentity,
    CollateralEntry,
    DebtEntry,
    PositionRecord,
    RecordSource,
    RiskBasis,
)
from scallop_liquidator.registry import CoinRegistry

OBLIGATION_ID = "0x" + "ab" * 32

SUI_TYPE = "0x2::sui::SUI"
USDC_TYPE = "0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC"
# Wormhole USDC as it appears in an on-chain TypeName (no 0x prefix).
WUSDC_TYPE_NAME = "5d4b302506645c37ff133b98c4b50a5ae14841659738d6d733d59d0d217a93bf::coin::COIN"

USDC = AssetIdentity(USDC_TYPE, "usdc", "USDC")
SUI = AssetIdentity(SUI_TYPE, "sui", "SUI")
WUSDC = AssetIdentity(
    "0x5d4b302506645c37ff133b98c4b50a5ae14841659738d6d733d59d0d217a93bf::coin::COIN",
    "wusdc",
    "wUSDC",
)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def registry() -> CoinRegistry:
    return CoinRegistry()


@pytest.fixture()
def sample_chain_config() -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=10,
    )


@pytest.fixture()
def sample_scallop_config() -> ScallopConfig:
    return ScallopConfig(
        obligation_url="https://api.example.com/obligations/{obligation_id}",
        relay_url="https://relay.example.com/submit",
        wallet_address="0xWALLET",
        request_timeout=5,
    )


@pytest.fixture()
def sample_app_config(
    sample_chain_config: ChainConfig, sample_scallop_config: ScallopConfig
) -> AppConfig:
    return AppConfig(
        chain=sample_chain_config,
        scallop=sample_scallop_config,
        liquidation=LiquidationConfig(liquidation_bonus=0.05),
    )


SAMPLE_YAML = textwrap.dedent("""\
    chain:
      rpc_endpoints: ["https://rpc.example.com"]
      rpc_timeout: 10
    scallop:
      obligation_url: "https://api.example.com/obligations/{obligation_id}"
      relay_url: "https://relay.example.com/submit"
      wallet_address: "0xWALLET"
    liquidation:
      liquidation_bonus: 0.07
    coins:
      usdc:
        coin_type: "0xabc::usdc::USDC"
        symbol: USDC
        decimals: 6
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Record fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def liquidatable_record() -> PositionRecord:
    """Priced obligation slightly over the liquidation threshold."""
    return PositionRecord(
        obligation_id=OBLIGATION_ID,
        debts=(DebtEntry(USDC, AssetAmount(120_000_000, 6), 120.00),),
        collaterals=(CollateralEntry(SUI, AssetAmount(100_500_000_000, 9), 150.75),),
        risk_level=1.0523,
        risk_basis=RiskBasis.REPORTED,
        source=RecordSource.STRUCTURED,
    )


@pytest.fixture()
def bad_debt_record() -> PositionRecord:
    """Raw-decoded obligation with debt and no collateral."""
    return PositionRecord(
        obligation_id=OBLIGATION_ID,
        debts=(DebtEntry(WUSDC, AssetAmount(10_591_093, 6), 0.0),),
        collaterals=(),
        risk_level=None,
        risk_basis=RiskBasis.NO_COLLATERAL,
        source=RecordSource.RAW_OBJECT,
    )


@pytest.fixture()
def healthy_record() -> PositionRecord:
    return PositionRecord(
        obligation_id=OBLIGATION_ID,
        debts=(DebtEntry(USDC, AssetAmount(50_000_000, 6), 50.0),),
        collaterals=(CollateralEntry(SUI, AssetAmount(100_000_000_000, 9), 150.0),),
        risk_level=0.45,
        risk_basis=RiskBasis.REPORTED,
        source=RecordSource.STRUCTURED,
    )


# ---------------------------------------------------------------------------
# Sample on-chain data
# ---------------------------------------------------------------------------


def make_obligation_object(
    debts_table: str = "0xDEBTS",
    debts_size: int = 0,
    collaterals_table: str = "0xCOLLS",
    collaterals_size: int = 0,
) -> dict[str, Any]:
    """sui_getObject result for a Scallop Obligation."""

    def wit_table(table_id: str, size: int) -> dict[str, Any]:
        return {
            "type": "0xefe8::wit_table::WitTable<...>",
            "fields": {
                "id": {"id": table_id + "WRAP"},
                "keys": {"type": "0x2::vec_set::VecSet<...>", "fields": {"contents": []}},
                "table": {
                    "type": "0x2::table::Table<...>",
                    "fields": {"id": {"id": table_id}, "size": str(size)},
                },
                "with_keys": True,
            },
        }

    return {
        "data": {
            "objectId": OBLIGATION_ID,
            "type": "0xefe8::obligation::Obligation",
            "content": {
                "dataType": "moveObject",
                "type": "0xefe8::obligation::Obligation",
                "fields": {
                    "id": {"id": OBLIGATION_ID},
                    "debts": wit_table(debts_table, debts_size),
                    "collaterals": wit_table(collaterals_table, collaterals_size),
                    "lock_key": None,
                },
            },
        }
    }


def make_table_child(object_id: str, coin_type: str, amount: str) -> dict[str, Any]:
    """sui_getObject result for one dynamic field of a debt/collateral table."""
    return {
        "data": {
            "objectId": object_id,
            "content": {
                "dataType": "moveObject",
                "fields": {
                    "id": {"id": object_id},
                    "name": {
                        "type": "0x1::type_name::TypeName",
                        "fields": {"name": coin_type},
                    },
                    "value": {
                        "type": "0xefe8::obligation_debts::Debt",
                        "fields": {"amount": amount, "borrow_index": "1050000000"},
                    },
                },
            },
        }
    }


@pytest.fixture()
def structured_account() -> dict[str, Any]:
    """Obligation account as served by the structured source."""
    return {
        "obligationId": OBLIGATION_ID,
        "debts": {
            "usdc": {
                "coinType": USDC_TYPE,
                "coinDecimal": 6,
                "borrowedAmount": 120_000_000,
                "borrowedValue": 120.0,
            }
        },
        "collaterals": {
            "sui": {
                "coinType": SUI_TYPE,
                "coinDecimal": 9,
                "depositedAmount": "100500000000",
                "depositedValue": 150.75,
            }
        },
        "riskLevel": 1.0523,
        "totalBorrowedValueWithWeight": 120.0,
        "totalRequiredCollateralValue": 114.03,
    }


@pytest.fixture()
def obligation_id() -> str:
    return OBLIGATION_ID


@pytest.fixture()
def obligation_object_factory():
    return make_obligation_object


@pytest.fixture()
def table_child_factory():
    return make_table_child
