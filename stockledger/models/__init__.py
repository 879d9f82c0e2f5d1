"""
StockLedger Models.

- InventoryItem: stored stock document per SKU (counters, thresholds,
  embedded movements and alerts)
"""

from stockledger.models.enums import AlertSeverity, AlertType, MovementType, RecordStatus
from stockledger.models.item import InventoryItem

__all__ = [
    'MovementType',
    'AlertType',
    'AlertSeverity',
    'RecordStatus',
    'InventoryItem',
]
