"""
Inventory Service — The single public interface for stock operations.

Usage:
    from stockledger import inventory, StockError

    inventory.register('TSHIRT-RED-M', current_stock=40, reorder_point=20)
    inventory.move('TSHIRT-RED-M', {
        'type': 'out', 'quantity': 25,
        'reason': 'Pedido #1042', 'performed_by': 'ana',
    })
    inventory.get('TSHIRT-RED-M').alerts   # [low_stock (high)]
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from django.utils import timezone

from stockledger.adapters.loader import get_gateway
from stockledger.conf import stockledger_settings
from stockledger.exceptions import NotFound, StockError
from stockledger.models.enums import MovementType, RecordStatus
from stockledger.records import Movement, StockRecord, as_decimal
from stockledger.services.alerts import evaluate, open_alerts, resolve
from stockledger.services.movements import apply_movement, replay
from stockledger.services.queries import list_records, low_stock_records, reorder_suggestions

logger = logging.getLogger('stockledger')

THRESHOLD_FIELDS = ('min_stock_level', 'max_stock_level', 'reorder_point', 'reorder_quantity')

# Counters, sku and history only change through movements
EDITABLE_FIELDS = frozenset(THRESHOLD_FIELDS + (
    'cost',
    'selling_price',
    'supplier',
    'location',
    'status',
    'product_id',
    'variant_id',
))


class Inventory:
    """
    Single interface for all stock operations.

    Every state-changing method follows the same cycle:
    load → mutate in memory → evaluate alerts → store.
    Validation happens before mutation, so a rejected call stores nothing.

    Concurrency:
        No locks are held between load and store. The gateway rejects a
        store whose version is stale with StockError('CONCURRENT_MODIFICATION');
        the caller decides whether to reload and retry.
    """

    def __init__(self, gateway=None):
        self.gateway = gateway if gateway is not None else get_gateway()

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    def get(self, key: Any) -> StockRecord:
        """
        Load a record by SKU or storage id.

        Strings are always SKUs, so a numeric SKU such as a barcode never
        resolves to another record's id. Integers are storage ids.

        Raises:
            NotFound: If no record matches
        """
        if isinstance(key, int) and not isinstance(key, bool):
            record = self.gateway.load_by_id(key)
        else:
            record = self.gateway.load(str(key))
        if record is None:
            raise NotFound(key=str(key))
        return record

    def list(self, status=None, supplier_id=None, low_stock: bool = False,
             out_of_stock: bool = False, search: str | None = None) -> list[StockRecord]:
        """List records with filters. See services.queries.list_records."""
        return list_records(
            self.gateway,
            status=status,
            supplier_id=supplier_id,
            low_stock=low_stock,
            out_of_stock=out_of_stock,
            search=search,
        )

    def low_stock(self) -> list[StockRecord]:
        """Active records out of stock or at/below reorder point."""
        return low_stock_records(self.gateway)

    def reorder_suggestions(self) -> list[dict[str, Any]]:
        """Purchase suggestions for low-stock records, most urgent first."""
        return reorder_suggestions(self.gateway)

    def audit(self, key: Any) -> dict[str, Any]:
        """
        Compare stored counters with a replay of the movement history.

        Returns:
            Dict with stored and expected counters plus `consistent` flag
        """
        record = self.get(key)
        expected_current, expected_reserved = replay(record.movements)
        consistent = (
            expected_current == record.current_stock
            and expected_reserved == record.reserved_stock
        )
        if not consistent:
            logger.warning(
                "stock.audit.mismatch",
                extra={
                    "sku": record.sku,
                    "current": record.current_stock,
                    "expected_current": expected_current,
                    "reserved": record.reserved_stock,
                    "expected_reserved": expected_reserved,
                },
            )
        return {
            'sku': record.sku,
            'current_stock': record.current_stock,
            'reserved_stock': record.reserved_stock,
            'expected_current_stock': expected_current,
            'expected_reserved_stock': expected_reserved,
            'consistent': consistent,
        }

    # ══════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ══════════════════════════════════════════════════════════════

    def register(self, sku: str, current_stock: int = 0,
                 performed_by: str = 'system', **fields) -> StockRecord:
        """
        Register a new SKU.

        Thresholds not given fall back to STOCKLEDGER defaults. Initial stock
        is booked as an `in` movement so the history always replays to the
        stored counters.

        Raises:
            StockError('DUPLICATE_SKU'): If the SKU is already registered
            StockError('INVALID_FIELD'): Unknown or malformed field
            StockError('INVALID_THRESHOLDS'): Inconsistent thresholds
                (only with ENFORCE_THRESHOLD_ORDER)
        """
        if not sku or not isinstance(sku, str):
            raise StockError('INVALID_FIELD', field='sku', value=sku)
        if self.gateway.load(sku) is not None:
            raise StockError('DUPLICATE_SKU', sku=sku)

        values = {
            'min_stock_level': stockledger_settings.DEFAULT_MIN_STOCK_LEVEL,
            'max_stock_level': stockledger_settings.DEFAULT_MAX_STOCK_LEVEL,
            'reorder_point': stockledger_settings.DEFAULT_REORDER_POINT,
            'reorder_quantity': stockledger_settings.DEFAULT_REORDER_QUANTITY,
        }
        values.update(_clean_fields(fields))
        if not values.get('location'):
            values['location'] = {'warehouse': stockledger_settings.DEFAULT_WAREHOUSE}

        record = StockRecord(sku=sku, **values)
        _check_thresholds(record)

        if current_stock:
            apply_movement(record, Movement(
                type=MovementType.IN,
                quantity=current_stock,
                reason='Estoque inicial',
                performed_by=performed_by,
            ))
        evaluate(record)
        self.gateway.store(record)

        logger.info(
            "stock.register",
            extra={"sku": sku, "current": record.current_stock, "record_id": record.id},
        )
        return record

    def update(self, key: Any, **fields) -> StockRecord:
        """
        Change thresholds, pricing, supplier, location or status.

        Alerts are re-evaluated against the new thresholds.

        Raises:
            NotFound: If no record matches
            StockError('INVALID_FIELD'): Counter, sku, history or unknown field
        """
        values = _clean_fields(fields)
        record = self.get(key)
        for name, value in values.items():
            setattr(record, name, value)
        _check_thresholds(record)

        record.updated_at = timezone.now()
        evaluate(record)
        self.gateway.store(record)

        logger.info(
            "stock.update",
            extra={"sku": record.sku, "fields": sorted(values)},
        )
        return record

    def bulk_update(self, updates: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """
        Apply update() per item, never aborting on a single failure.

        Args:
            updates: Items shaped like {'id': key, 'data': {field: value}}

        Returns:
            One {'id', 'success', 'error'?, 'code'?} dict per item
        """
        results = []
        for entry in updates:
            key = entry.get('id')
            try:
                self.update(key, **dict(entry.get('data') or {}))
            except StockError as e:
                results.append({'id': key, 'success': False, 'code': e.code, 'error': e.message})
            else:
                results.append({'id': key, 'success': True})
        return results

    def discontinue(self, key: Any) -> StockRecord:
        """Soft delete. Records are never removed from storage."""
        return self.update(key, status=RecordStatus.DISCONTINUED)

    # ══════════════════════════════════════════════════════════════
    # MOVEMENTS & ALERTS
    # ══════════════════════════════════════════════════════════════

    def move(self, key: Any, movement: Movement | Mapping[str, Any]) -> StockRecord:
        """
        Apply a stock movement and re-evaluate alerts.

        Args:
            key: SKU or storage id
            movement: Movement or payload with type, quantity, reason,
                performed_by and optional reference/notes

        Returns:
            The updated, stored record

        Raises:
            NotFound: If no record matches
            InvalidMovement: Malformed movement (nothing is stored)
            StorageError: Gateway failure (propagated unchanged)
        """
        record = self.get(key)
        apply_movement(record, movement)
        evaluate(record)
        self.gateway.store(record)
        return record

    def bulk_move(self, adjustments: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """
        Apply move() per item, never aborting on a single failure.

        Args:
            adjustments: Items shaped like {'id': key, 'movement': {...}}

        Returns:
            One {'id', 'success', 'current_stock'} dict per applied item,
            {'id', 'success', 'code', 'error'} per rejected one
        """
        results = []
        for entry in adjustments:
            key = entry.get('id')
            try:
                record = self.move(key, entry.get('movement') or {})
            except StockError as e:
                results.append({'id': key, 'success': False, 'code': e.code, 'error': e.message})
            else:
                results.append({'id': key, 'success': True, 'current_stock': record.current_stock})

        failed = sum(1 for result in results if not result['success'])
        if failed:
            logger.warning("stock.bulk_move.partial", extra={"total": len(results), "failed": failed})
        return results

    def resolve_alert(self, key: Any, alert_type: str) -> StockRecord:
        """
        Mark the open alert of a type as resolved.

        Raises:
            StockError('ALERT_NOT_FOUND'): No open alert of that type
        """
        record = self.get(key)
        resolve(record, alert_type)
        self.gateway.store(record)
        return record

    def resolve_open_alerts(self, key: Any) -> int:
        """
        Resolve every open alert of a record in one store.

        Returns:
            Number of alerts resolved (0 stores nothing)
        """
        record = self.get(key)
        pending_types = sorted({alert.type for alert in open_alerts(record)})
        if not pending_types:
            return 0

        count = sum(resolve(record, alert_type) for alert_type in pending_types)
        self.gateway.store(record)
        return count


# ══════════════════════════════════════════════════════════════
# HELPERS
# ══════════════════════════════════════════════════════════════

def _clean_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Validate and coerce editable fields."""
    cleaned = {}
    for name, value in fields.items():
        if name not in EDITABLE_FIELDS:
            raise StockError('INVALID_FIELD', field=name)

        if name in THRESHOLD_FIELDS:
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise StockError('INVALID_FIELD', field=name, value=value)
        elif name in ('cost', 'selling_price'):
            value = as_decimal(value, name)
        elif name in ('supplier', 'location'):
            if value is None:
                value = {}
            elif not isinstance(value, Mapping):
                raise StockError('INVALID_FIELD', field=name, value=value)
            value = dict(value)
        elif name == 'status':
            try:
                value = RecordStatus(value)
            except ValueError:
                raise StockError('INVALID_FIELD', field=name, value=value) from None
        elif value is not None:
            value = str(value)

        cleaned[name] = value
    return cleaned


def _check_thresholds(record: StockRecord) -> None:
    if not stockledger_settings.ENFORCE_THRESHOLD_ORDER:
        return
    if not record.min_stock_level <= record.reorder_point <= record.max_stock_level:
        raise StockError(
            'INVALID_THRESHOLDS',
            min_stock_level=record.min_stock_level,
            reorder_point=record.reorder_point,
            max_stock_level=record.max_stock_level,
        )
