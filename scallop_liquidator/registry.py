"""Coin registry: maps Sui coin types to Scallop coin names and precision.

Lookups never fail. Identifiers that are not in the table are decomposed
structurally, which yields a usable but possibly low-fidelity identity, and
their precision falls back to a fixed default. Those defaults (6 for debts,
9 for collaterals) are an approximation, not a guarantee: an unknown coin
with a different precision will have its human-readable amount misstated.
"""
from __future__ import annotations

from collections.abc import Iterable

from .config import CoinConfig
from .models import AssetIdentity

DEBT_DEFAULT_DECIMALS = 6
COLLATERAL_DEFAULT_DECIMALS = 9

# Module names that wrap many unrelated coins (e.g. Wormhole ``coin::COIN``).
GENERIC_MODULES = frozenset({"coin"})

DEFAULT_COINS: tuple[CoinConfig, ...] = (
    CoinConfig("sui", "0x2::sui::SUI", "SUI", 9),
    CoinConfig(
        "usdc",
        "0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC",
        "USDC",
        6,
    ),
    CoinConfig(
        "wusdc",
        "0x5d4b302506645c37ff133b98c4b50a5ae14841659738d6d733d59d0d217a93bf::coin::COIN",
        "wUSDC",
        6,
    ),
    CoinConfig(
        "wusdt",
        "0xc060006111016b8a020ad5b33834984a437aaa7d3c74c18e09a95d48aceab08c::coin::COIN",
        "wUSDT",
        6,
    ),
    CoinConfig(
        "weth",
        "0xaf8cd5edc19c4512f4259f0bee101a40d41ebed738ade5874359610ef8eeced5::coin::COIN",
        "wETH",
        8,
    ),
    CoinConfig(
        "sbeth",
        "0xd0e89b2af5e4910726fbcd8b8dd37bb79b29e5f83f7491bca830e94f7f226d29::eth::ETH",
        "sbETH",
        8,
    ),
    CoinConfig(
        "wsol",
        "0xb7844e289a8410e50fb3ca48d69eb9cf29e27d223ef90353fe1bd8e27ff8f3f8::coin::COIN",
        "wSOL",
        8,
    ),
    CoinConfig(
        "afsui",
        "0xf325ce1300e8dac124071d3152c5c5ee6174914f8bc2161e88329cf579246efc::afsui::AFSUI",
        "afSUI",
        9,
    ),
    CoinConfig(
        "hasui",
        "0xbde4ba4c2e274a60ce15c1cfff9e5c42e41654ac8b6d906a57efa4bd3c29f47d::hasui::HASUI",
        "haSUI",
        9,
    ),
    CoinConfig(
        "vsui",
        "0x549e8b69270defbfafd4f94e17ec44cdbdd99820b33bda2278dea3b9a32d3f55::cert::CERT",
        "vSUI",
        9,
    ),
    CoinConfig(
        "cetus",
        "0x06864a6f921804860930db6ddbe2e16acdf8504495ea7481637a1c8b9a8fe54b::cetus::CETUS",
        "CETUS",
        9,
    ),
    CoinConfig(
        "sca",
        "0x7016aae72cfc67f2fadf55769c0a7dd54291a583b63051a5ed71081cce836ac6::sca::SCA",
        "SCA",
        9,
    ),
    CoinConfig(
        "deep",
        "0xdeeb7a4662eec9f2f3def03fb937a663dddaa2e215b8078a284d026b7946c270::deep::DEEP",
        "DEEP",
        6,
    ),
    CoinConfig(
        "fdusd",
        "0xf16e6b723f242ec745dfd7634ad072c42d5c1d9ac9d62a39c381303eaa57693a::fdusd::FDUSD",
        "FDUSD",
        6,
    ),
    CoinConfig(
        "ns",
        "0x5145494a5f5100e645e4b0aa950fa6b68f614e8c59e17bc5ded3495123a79178::ns::NS",
        "NS",
        6,
    ),
)


def normalize_coin_type(coin_type: str) -> str:
    """Canonical form of a coin type: 0x-prefixed, 64-digit lowercase address.

    On-chain ``TypeName`` values omit the ``0x`` prefix and pad the address,
    while SDKs write short addresses such as ``0x2``; both map to one key.
    """
    coin_type = coin_type.strip()
    if "::" not in coin_type:
        return coin_type
    address, rest = coin_type.split("::", 1)
    address = address.lower()
    if address.startswith("0x"):
        address = address[2:]
    return f"0x{address.zfill(64)}::{rest}"


def _fallback_identity(coin_type: str) -> AssetIdentity:
    """Best-effort identity derived from the type string's segments."""
    base = coin_type.split("<", 1)[0]
    segments = [s for s in base.split("::") if s]

    if len(segments) >= 3:
        module, struct = segments[1], segments[2]
        if module.lower() in GENERIC_MODULES:
            return AssetIdentity(coin_type, struct.lower(), struct)
        return AssetIdentity(coin_type, module.lower(), struct)

    name = segments[-1] if segments else "unknown"
    return AssetIdentity(coin_type, name.lower(), name.upper())


class CoinRegistry:
    """Resolve coin types and names against an injected coin table."""

    def __init__(self, coins: Iterable[CoinConfig] = DEFAULT_COINS) -> None:
        self._by_type: dict[str, AssetIdentity] = {}
        self._by_name: dict[str, AssetIdentity] = {}
        self._decimals: dict[str, int] = {}

        for coin in coins:
            identity = AssetIdentity(
                coin_type=coin.coin_type,
                coin_name=coin.coin_name.lower(),
                symbol=coin.symbol,
            )
            self._by_type[normalize_coin_type(coin.coin_type)] = identity
            self._by_name[identity.coin_name] = identity
            self._decimals[identity.coin_name] = coin.decimals

    def resolve(self, coin_type: str) -> AssetIdentity:
        """Identity for a coin type; unknown types are decomposed structurally."""
        known = self._by_type.get(normalize_coin_type(coin_type))
        if known is not None:
            return known
        return _fallback_identity(coin_type)

    def identity_for(self, coin_name: str, coin_type: str = "") -> AssetIdentity:
        """Identity for a Scallop coin name, as used by structured sources."""
        known = self._by_name.get(coin_name.lower())
        if known is not None:
            return known
        if coin_type:
            resolved = self.resolve(coin_type)
            return AssetIdentity(resolved.coin_type, coin_name.lower(), resolved.symbol)
        name = coin_name.lower() or "unknown"
        return AssetIdentity(coin_type, name, name.upper())

    def precision_of(self, coin_name: str, default: int = DEBT_DEFAULT_DECIMALS) -> int:
        """Decimal precision for a coin name, ``default`` when unknown."""
        return self._decimals.get(coin_name.lower(), default)

    def is_known(self, coin_name: str) -> bool:
        return coin_name.lower() in self._decimals
