"""
StockLedger Protocols.

Defines interfaces for external system integration.
"""

from stockledger.protocols.gateway import StockGateway

__all__ = [
    "StockGateway",
]
