"""
Django StockLedger — Per-SKU stock ledger with movement history and alerts.

Uso:
    from stockledger import inventory, StockError

    inventory.register('TSHIRT-RED-M', current_stock=40)
    inventory.move('TSHIRT-RED-M', {'type': 'reserved', 'quantity': 5,
                                    'reason': 'Pedido #1042', 'performed_by': 'ana'})
    inventory.get('TSHIRT-RED-M').available_stock  # 35
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'inventory':
        from stockledger.service import Inventory
        return Inventory()
    elif name == 'Inventory':
        from stockledger.service import Inventory
        return Inventory
    elif name == 'StockError':
        from stockledger.exceptions import StockError
        return StockError
    elif name == 'InvalidMovement':
        from stockledger.exceptions import InvalidMovement
        return InvalidMovement
    elif name == 'StorageError':
        from stockledger.exceptions import StorageError
        return StorageError
    elif name == 'NotFound':
        from stockledger.exceptions import NotFound
        return NotFound
    elif name == 'Movement':
        from stockledger.records import Movement
        return Movement
    elif name == 'StockRecord':
        from stockledger.records import StockRecord
        return StockRecord
    elif name == 'MovementType':
        from stockledger.models.enums import MovementType
        return MovementType
    elif name == 'AlertType':
        from stockledger.models.enums import AlertType
        return AlertType
    elif name == 'InventoryItem':
        from stockledger.models.item import InventoryItem
        return InventoryItem
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'inventory',
    'Inventory',
    'StockError',
    'InvalidMovement',
    'StorageError',
    'NotFound',
    'Movement',
    'StockRecord',
    'MovementType',
    'AlertType',
    'InventoryItem',
]

__version__ = '0.1.0'
