"""
Django ORM Gateway — StockRecords stored as InventoryItem rows.

Default gateway. Movement history and alerts are embedded JSON documents,
so one load/store round-trip moves the whole record.

Concurrency:
    - store() runs under transaction.atomic()
    - Updates are conditional on the stored version
      (UPDATE ... WHERE id = %s AND version = %s); a concurrent writer
      that got there first makes the update match zero rows
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F

from stockledger.exceptions import StockError, StorageError
from stockledger.models.item import InventoryItem
from stockledger.records import StockRecord

logger = logging.getLogger(__name__)


def _to_record(item: InventoryItem) -> StockRecord:
    return StockRecord.from_dict({
        'id': item.pk,
        'sku': item.sku,
        'product_id': item.product_id or None,
        'variant_id': item.variant_id or None,
        'current_stock': item.current_stock,
        'reserved_stock': item.reserved_stock,
        'min_stock_level': item.min_stock_level,
        'max_stock_level': item.max_stock_level,
        'reorder_point': item.reorder_point,
        'reorder_quantity': item.reorder_quantity,
        'cost': item.cost,
        'selling_price': item.selling_price,
        'supplier': item.supplier,
        'location': item.location,
        'status': item.status,
        'last_restocked': item.last_restocked,
        'last_sold': item.last_sold,
        'movements': item.movements,
        'alerts': item.alerts,
        'created_at': item.created_at,
        'updated_at': item.updated_at,
        'version': item.version,
    })


def _to_fields(record: StockRecord) -> dict[str, Any]:
    document = record.to_dict()
    return {
        'product_id': record.product_id or '',
        'variant_id': record.variant_id or '',
        'current_stock': record.current_stock,
        'reserved_stock': record.reserved_stock,
        'available_stock': record.available_stock,
        'min_stock_level': record.min_stock_level,
        'max_stock_level': record.max_stock_level,
        'reorder_point': record.reorder_point,
        'reorder_quantity': record.reorder_quantity,
        'cost': record.cost,
        'selling_price': record.selling_price,
        'supplier': document['supplier'],
        'location': document['location'],
        'status': record.status.value,
        'movements': document['movements'],
        'alerts': document['alerts'],
        'last_restocked': record.last_restocked,
        'last_sold': record.last_sold,
        'created_at': record.created_at,
        'updated_at': record.updated_at,
    }


class DjangoGateway:
    """StockGateway backed by the InventoryItem model."""

    def _first(self, key: Any, **lookup) -> StockRecord | None:
        try:
            item = InventoryItem.objects.filter(**lookup).first()
        except DatabaseError as exc:
            raise StorageError(key=str(key), error=str(exc)) from exc
        return _to_record(item) if item is not None else None

    def load(self, sku: str) -> StockRecord | None:
        return self._first(sku, sku=str(sku))

    def load_by_id(self, record_id: Any) -> StockRecord | None:
        try:
            pk = int(record_id)
        except (TypeError, ValueError):
            return None
        return self._first(record_id, pk=pk)

    def store(self, record: StockRecord) -> StockRecord:
        fields = _to_fields(record)
        try:
            with transaction.atomic():
                if record.id is None:
                    item = InventoryItem.objects.create(sku=record.sku, version=1, **fields)
                    record.id = item.pk
                else:
                    updated = InventoryItem.objects.filter(
                        pk=record.id, version=record.version,
                    ).update(version=F('version') + 1, **fields)
                    if not updated:
                        raise StockError(
                            'CONCURRENT_MODIFICATION', sku=record.sku, version=record.version,
                        )
        except IntegrityError as exc:
            raise StockError('DUPLICATE_SKU', sku=record.sku) from exc
        except DatabaseError as exc:
            raise StorageError(sku=record.sku, error=str(exc)) from exc

        record.version += 1
        logger.debug("stored %s (version %s)", record.sku, record.version)
        return record

    def list(self, status=None, supplier_id=None, low_stock=False, out_of_stock=False) -> list[StockRecord]:
        qs = InventoryItem.objects.all()
        if status:
            qs = qs.filter(status=status)
        if supplier_id is not None:
            qs = qs.for_supplier(supplier_id)
        if low_stock:
            qs = qs.low_stock()
        if out_of_stock:
            qs = qs.out_of_stock()

        try:
            return [_to_record(item) for item in qs.order_by('-updated_at', '-pk')]
        except DatabaseError as exc:
            raise StorageError(error=str(exc)) from exc
