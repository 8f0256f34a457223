"""Scallop lending protocol on SUI."""
from .api import ScallopApiSource
from .reader import RawObligationReader
from .relay import RelayTransactionBuilder

__all__ = ["RawObligationReader", "RelayTransactionBuilder", "ScallopApiSource"]
