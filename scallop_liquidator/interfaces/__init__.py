"""Protocol interfaces for the collaborators the liquidator talks to."""
from .chain import ChainClient
from .position_source import StructuredPositionSource
from .transaction_builder import TransactionBuilder, TransactionRequest

__all__ = [
    "ChainClient",
    "StructuredPositionSource",
    "TransactionBuilder",
    "TransactionRequest",
]
