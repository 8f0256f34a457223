"""Decode a Scallop obligation straight from its on-chain object."""
from __future__ import annotations

import logging

from ...errors import DecodeError, NotFoundError
from ...interfaces.chain import ChainClient
from ...models import PositionRecord, RecordSource
from ...registry import CoinRegistry
from . import parser

logger = logging.getLogger(__name__)


class RawObligationReader:
    """Build a ``PositionRecord`` from the raw ``Obligation`` object.

    Used when the structured source returns nothing, which is what happens
    for bad-debt obligations. No oracle is consulted, so every USD value is 0
    and the risk level is only a coarse classification.
    """

    def __init__(self, chain_client: ChainClient, registry: CoinRegistry) -> None:
        self._client = chain_client
        self._registry = registry

    async def _read_table(self, table: parser.TableRef, label: str) -> list[tuple[str, int]]:
        """Fetch every ``(coin_type, raw_amount)`` entry of a table, in RPC order."""
        if table.size == 0:
            return []

        children = await self._client.get_dynamic_fields(table.table_id)
        if len(children) != table.size:
            raise DecodeError(
                f"{label} table {table.table_id} declares {table.size} entries "
                f"but lists {len(children)}"
            )

        entries: list[tuple[str, int]] = []
        for child in children:
            child_id = child.get("objectId")
            if not child_id:
                raise DecodeError(f"{label} table entry has no objectId: {child!r}")

            # Sequential, in RPC order.
            child_obj = await self._client.get_object(child_id)
            entries.append(parser.parse_table_entry(child_obj, f"{label} entry {child_id}"))
        return entries

    async def parse_from_raw_object(self, obligation_id: str) -> PositionRecord:
        """Decode debts and collaterals of an obligation without prices."""
        logger.info("Decoding raw obligation object %s", obligation_id)

        obj = await self._client.get_object(obligation_id)
        fields = parser.object_fields(obj)
        if fields is None:
            raise NotFoundError(f"Obligation not found: {obligation_id}")

        try:
            debts_table = parser.parse_table_ref(fields, "debts")
            collaterals_table = parser.parse_table_ref(fields, "collaterals")

            debts = tuple(
                parser.build_debt_entry(self._registry, coin_type, raw)
                for coin_type, raw in await self._read_table(debts_table, "debts")
            )
            collaterals = tuple(
                parser.build_collateral_entry(self._registry, coin_type, raw)
                for coin_type, raw in await self._read_table(collaterals_table, "collaterals")
            )
        except DecodeError as e:
            raise DecodeError(f"Obligation {obligation_id}: {e}") from e

        for entry in (*debts, *collaterals):
            if not self._registry.is_known(entry.asset.coin_name):
                logger.warning(
                    "Unknown coin %s (%s); amount assumes %d decimals",
                    entry.asset.coin_type, entry.asset.coin_name, entry.amount.decimals,
                )

        risk_level, basis = parser.classify_raw(len(debts), len(collaterals))
        logger.debug(
            "Raw obligation %s: %d debts, %d collaterals, risk basis %s",
            obligation_id, len(debts), len(collaterals), basis.value,
        )

        return PositionRecord(
            obligation_id=obligation_id,
            debts=debts,
            collaterals=collaterals,
            risk_level=risk_level,
            risk_basis=basis,
            source=RecordSource.RAW_OBJECT,
        )

