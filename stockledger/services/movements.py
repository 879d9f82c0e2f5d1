"""
Stock movements — apply one movement to a StockRecord.

Pure in-memory operation: persistence is the caller's job (see
stockledger.service.Inventory, which loads, applies and stores).
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from django.utils import timezone

from stockledger.models.enums import MovementType
from stockledger.records import Movement, MovementRecord, StockRecord

logger = logging.getLogger('stockledger')


def apply_movement(record: StockRecord, movement: Movement | Mapping[str, Any]) -> MovementRecord:
    """
    Apply a movement and append it to the record's history.

    Effects by type:
        in:         current += quantity
        out:        current = max(0, current - quantity)
        reserved:   reserved += quantity
        unreserved: reserved = max(0, reserved - quantity)

    Excess `out`/`unreserved` quantities are clamped at zero, not rejected.
    available_stock is recomputed afterwards.

    Raises:
        InvalidMovement: Before any mutation, so a rejected movement
            leaves the record untouched.
    """
    movement = Movement.parse(movement)
    now = timezone.now()
    current, reserved = _step(record.current_stock, record.reserved_stock, movement.type, movement.quantity)

    entry = MovementRecord.from_movement(movement, timestamp=now)
    record.current_stock = current
    record.reserved_stock = reserved
    record.recompute_available()

    if movement.type == MovementType.IN:
        record.last_restocked = now
    elif movement.type == MovementType.OUT:
        record.last_sold = now

    record.movements.append(entry)
    record.updated_at = now

    logger.info(
        "stock.movement",
        extra={
            "sku": record.sku,
            "type": movement.type.value,
            "qty": movement.quantity,
            "reason": movement.reason,
            "performed_by": movement.performed_by,
            "current": record.current_stock,
            "reserved": record.reserved_stock,
        },
    )
    return entry


def replay(movements: Iterable[MovementRecord]) -> tuple[int, int]:
    """
    Rebuild (current_stock, reserved_stock) from a movement history.

    Use for:
    - Integrity audit
    - Correction after detected inconsistency
    """
    current = reserved = 0
    for entry in movements:
        current, reserved = _step(current, reserved, entry.type, entry.quantity)
    return current, reserved


def _step(current: int, reserved: int, kind: MovementType, quantity: int) -> tuple[int, int]:
    if kind == MovementType.IN:
        return current + quantity, reserved
    if kind == MovementType.OUT:
        return max(0, current - quantity), reserved
    if kind == MovementType.RESERVED:
        return current, reserved + quantity
    return current, max(0, reserved - quantity)
