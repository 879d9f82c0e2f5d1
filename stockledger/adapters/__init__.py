"""
StockLedger Adapters.

Implementations of the StockGateway protocol.
"""

from stockledger.adapters.loader import get_gateway, reset_gateway
from stockledger.adapters.memory import MemoryGateway

__all__ = [
    "MemoryGateway",
    "get_gateway",
    "reset_gateway",
]
