"""Transaction builder that delegates to a signing relay over HTTP."""
from __future__ import annotations

import logging
import ssl
from dataclasses import asdict

import aiohttp
import certifi

from ...config import ScallopConfig
from ...interfaces.transaction_builder import TransactionRequest

logger = logging.getLogger(__name__)


class RelayTransactionBuilder:
    """Post liquidate / repay requests to a relay holding the wallet key.

    The relay refreshes oracle prices for the coins involved, selects coins,
    calls the protocol, transfers residuals back to the wallet, then signs and
    submits. It answers ``{"digest": ...}`` or ``{"error": ...}``.
    """

    def __init__(self, config: ScallopConfig) -> None:
        self.relay_url = config.relay_url
        self.timeout = config.request_timeout

    async def submit(self, request: TransactionRequest) -> str:
        if not self.relay_url:
            raise RuntimeError("No transaction relay configured (scallop.relay_url)")

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        logger.info(
            "Submitting %s of %d %s on %s",
            request.action, request.raw_amount, request.debt_coin_name, request.obligation_id,
        )
        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.post(
                self.relay_url,
                json=asdict(request),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                data = await response.json(content_type=None)

        if not isinstance(data, dict):
            raise RuntimeError(f"Relay returned an unexpected response: {data!r}")
        if data.get("error"):
            raise RuntimeError(str(data["error"]))
        digest = data.get("digest")
        if not digest:
            raise RuntimeError(f"Relay response has no digest (HTTP {response.status})")
        return digest
