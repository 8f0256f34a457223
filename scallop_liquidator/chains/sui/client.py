"""SUI RPC client with fallback support."""
from __future__ import annotations

import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ...config import ChainConfig
from ...errors import RpcError

logger = logging.getLogger(__name__)

# Page size for suix_getDynamicFields.
DYNAMIC_FIELDS_PAGE_SIZE = 50


class SuiClient:
    """SUI blockchain RPC client with automatic endpoint fallback.

    Unlike a monitoring client, failures are not turned into empty results:
    an empty debt table and an unreachable node must never look the same.
    """

    def __init__(self, config: ChainConfig) -> None:
        self.endpoints = list(config.rpc_endpoints)
        self.timeout = config.rpc_timeout
        self.current_rpc_index = 0

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make RPC call with fallback to alternative endpoints."""
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        rpc_url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        result = await response.json()
                        if "error" in result:
                            raise RuntimeError(f"RPC Error: {result['error']}")

                        if rpc_index != self.current_rpc_index:
                            logger.info("Switched to RPC endpoint: %s", rpc_url)
                            self.current_rpc_index = rpc_index

                        return result.get("result", {})
            except Exception as e:
                last_error = e
                logger.warning("RPC endpoint %s failed on %s: %s", rpc_url, method, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

        raise RpcError(f"All RPC endpoints failed. Last error: {last_error}")

    async def get_object(self, object_id: str) -> dict[str, Any]:
        """Fetch an object with its type and content.

        A missing object is not an RPC error: the node answers with an
        ``error`` entry inside the result, which is returned unchanged.
        """
        logger.debug("sui_getObject %s", object_id)
        return await self.rpc_call(
            "sui_getObject",
            [object_id, {"showType": True, "showContent": True, "showOwner": True}],
        )

    async def get_dynamic_fields(self, parent_id: str) -> list[dict[str, Any]]:
        """List all dynamic fields of an object (paginated)."""
        fields: list[dict[str, Any]] = []
        cursor = None

        while True:
            result = await self.rpc_call(
                "suix_getDynamicFields",
                [parent_id, cursor, DYNAMIC_FIELDS_PAGE_SIZE],
            )
            fields.extend(result.get("data", []))

            cursor = result.get("nextCursor")
            if not result.get("hasNextPage", False) or not cursor:
                break

        logger.debug("Found %d dynamic fields under %s", len(fields), parent_id)
        return fields
