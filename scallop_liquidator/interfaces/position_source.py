"""Structured position source: pre-computed obligation accounts."""
from typing import Any, Protocol


class StructuredPositionSource(Protocol):
    """Returns an obligation account, or ``None`` when it has nothing to say.

    ``None`` is a normal outcome (bad-debt obligations are not served by the
    structured source) and tells the caller to decode the raw object instead.
    """

    async def get_position(self, obligation_id: str) -> dict[str, Any] | None: ...
