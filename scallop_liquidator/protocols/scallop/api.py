"""Structured obligation source backed by an HTTP obligation-account API."""
from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ...config import ScallopConfig
from ...errors import SourceError

logger = logging.getLogger(__name__)


class ScallopApiSource:
    """Fetch pre-computed obligation accounts (debts, collaterals, risk level).

    The API answers 404 or ``null`` for obligations it does not serve, which
    includes bad-debt obligations; both are returned as ``None``.
    """

    def __init__(self, config: ScallopConfig) -> None:
        self.url_template = config.obligation_url
        self.timeout = config.request_timeout

    async def get_position(self, obligation_id: str) -> dict[str, Any] | None:
        url = self.url_template.format(obligation_id=obligation_id)

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status == 404:
                        logger.info("Obligation API has no account for %s", obligation_id)
                        return None
                    if response.status != 200:
                        raise SourceError(
                            f"Obligation API returned HTTP {response.status} for {obligation_id}"
                        )
                    data = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SourceError(f"Obligation API request failed: {e}") from e

        if data is None:
            logger.info("Obligation API returned null for %s", obligation_id)
            return None
        if not isinstance(data, dict):
            raise SourceError(f"Obligation API returned {type(data).__name__}, expected object")

        # Some deployments wrap the account in {"data": ...}.
        if "data" in data and "debts" not in data:
            return data["data"]
        return data
