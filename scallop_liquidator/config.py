"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    rpc_endpoints: tuple[str, ...] = ("https://fullnode.mainnet.sui.io:443",)
    rpc_timeout: int = 30


@dataclass(frozen=True)
class ScallopConfig:
    # Structured obligation endpoint; ``{obligation_id}`` is substituted.
    # Empty means "always decode the raw object".
    obligation_url: str = ""
    # Signing relay that builds and submits liquidate / repay transactions.
    relay_url: str = ""
    wallet_address: str = ""
    request_timeout: int = 30


@dataclass(frozen=True)
class LiquidationConfig:
    liquidation_bonus: float = 0.05


@dataclass(frozen=True)
class CoinConfig:
    coin_name: str
    coin_type: str
    symbol: str
    decimals: int


@dataclass(frozen=True)
class AppConfig:
    chain: ChainConfig = field(default_factory=ChainConfig)
    scallop: ScallopConfig = field(default_factory=ScallopConfig)
    liquidation: LiquidationConfig = field(default_factory=LiquidationConfig)
    # Empty means "use the built-in Scallop coin table".
    coins: tuple[CoinConfig, ...] = ()


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_chain(raw: dict[str, Any]) -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=tuple(
            raw.get("rpc_endpoints", ChainConfig.rpc_endpoints)
        ),
        rpc_timeout=int(raw.get("rpc_timeout", 30)),
    )


def _build_scallop(raw: dict[str, Any]) -> ScallopConfig:
    return ScallopConfig(
        obligation_url=raw.get("obligation_url", "") or "",
        relay_url=raw.get("relay_url", "") or "",
        wallet_address=raw.get("wallet_address", "") or "",
        request_timeout=int(raw.get("request_timeout", 30)),
    )


def _build_liquidation(raw: dict[str, Any]) -> LiquidationConfig:
    return LiquidationConfig(
        liquidation_bonus=float(raw.get("liquidation_bonus", 0.05)),
    )


def _build_coins(raw: dict[str, Any]) -> tuple[CoinConfig, ...]:
    coins: list[CoinConfig] = []
    for name, cfg in raw.items():
        coins.append(
            CoinConfig(
                coin_name=str(name).lower(),
                coin_type=cfg.get("coin_type", ""),
                symbol=cfg.get("symbol", str(name).upper()),
                decimals=int(cfg.get("decimals", -1)),
            )
        )
    return tuple(coins)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from the package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        chain=_build_chain(raw.get("chain", {})),
        scallop=_build_scallop(raw.get("scallop", {})),
        liquidation=_build_liquidation(raw.get("liquidation", {})),
        coins=_build_coins(raw.get("coins", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.chain.rpc_endpoints:
        raise ValueError("At least one Sui RPC endpoint must be configured")

    bonus = cfg.liquidation.liquidation_bonus
    if not 0 <= bonus < 1:
        raise ValueError(f"liquidation_bonus must be in [0, 1), got {bonus}")

    if cfg.scallop.obligation_url and "{obligation_id}" not in cfg.scallop.obligation_url:
        raise ValueError("scallop.obligation_url must contain '{obligation_id}'")

    for coin in cfg.coins:
        if not coin.coin_type:
            raise ValueError(f"Coin '{coin.coin_name}' has no coin_type")
        if coin.decimals < 0:
            raise ValueError(f"Coin '{coin.coin_name}' has no valid decimals")
