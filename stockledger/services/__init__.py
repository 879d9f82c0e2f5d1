"""
Stock services — modular organization of stock operations.

    from stockledger.services import apply_movement, evaluate, check_alerts
"""

from stockledger.services.alerts import check_alerts, evaluate, open_alerts, resolve
from stockledger.services.movements import apply_movement, replay
from stockledger.services.queries import list_records, low_stock_records, reorder_suggestions

__all__ = [
    'apply_movement',
    'replay',
    'evaluate',
    'open_alerts',
    'resolve',
    'check_alerts',
    'list_records',
    'low_stock_records',
    'reorder_suggestions',
]
