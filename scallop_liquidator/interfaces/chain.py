"""Chain client protocol: blockchain RPC abstraction."""
from typing import Any, Protocol


class ChainClient(Protocol):
    """Abstract interface for the raw object reads the liquidator needs."""

    async def get_object(self, object_id: str) -> dict[str, Any]: ...

    async def get_dynamic_fields(self, parent_id: str) -> list[dict[str, Any]]: ...
