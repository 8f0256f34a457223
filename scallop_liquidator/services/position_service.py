"""Obligation lookup: structured source first, raw object as fallback."""
from __future__ import annotations

import logging

from ..interfaces.position_source import StructuredPositionSource
from ..models import PositionRecord
from ..protocols.scallop import parser
from ..protocols.scallop.reader import RawObligationReader
from ..registry import CoinRegistry

logger = logging.getLogger(__name__)


class PositionQueryService:
    """Produce one canonical ``PositionRecord`` per obligation id.

    Callers cannot tell which tier answered except through the record itself
    (``source``, zero USD values, ``risk_basis``).
    """

    def __init__(
        self,
        source: StructuredPositionSource | None,
        reader: RawObligationReader,
        registry: CoinRegistry,
    ) -> None:
        self._source = source
        self._reader = reader
        self._registry = registry

    async def _from_structured(self, obligation_id: str) -> PositionRecord | None:
        if self._source is None:
            return None
        payload = await self._source.get_position(obligation_id)
        if payload is None:
            return None
        return parser.parse_structured_record(obligation_id, payload, self._registry)

    async def query_position(self, obligation_id: str) -> PositionRecord:
        record = await self._from_structured(obligation_id)
        if record is not None:
            return record

        logger.info(
            "No structured account for %s; decoding the raw object (no USD values)",
            obligation_id,
        )
        return await self._reader.parse_from_raw_object(obligation_id)
