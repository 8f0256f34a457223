"""SUI chain client."""
from .client import SuiClient

__all__ = ["SuiClient"]
