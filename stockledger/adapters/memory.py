"""
Memory Gateway — process-local stock store for development and testing.

Usage in settings.py:
    STOCKLEDGER = {
        "GATEWAY": "stockledger.adapters.memory.MemoryGateway",
    }

Documents are kept as to_dict() snapshots, so records handed out by
load()/list() never alias stored state. Same versioning rules as the
ORM gateway.

WARNING: Do NOT use in production. Data lives only as long as the process.
"""

from __future__ import annotations

import copy
import itertools
import threading
from typing import Any

from stockledger.exceptions import StockError
from stockledger.records import StockRecord


class MemoryGateway:
    """In-memory StockGateway implementation."""

    def __init__(self):
        self._documents: dict[int, dict[str, Any]] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _find(self, sku: str) -> dict[str, Any] | None:
        for document in self._documents.values():
            if document['sku'] == sku:
                return document
        return None

    def _thaw(self, document: dict[str, Any] | None) -> StockRecord | None:
        if document is None:
            return None
        return StockRecord.from_dict(copy.deepcopy(document))

    def load(self, sku: str) -> StockRecord | None:
        with self._lock:
            return self._thaw(self._find(str(sku)))

    def load_by_id(self, record_id: Any) -> StockRecord | None:
        with self._lock:
            return self._thaw(self._documents.get(record_id))

    def store(self, record: StockRecord) -> StockRecord:
        with self._lock:
            if record.id is None:
                if self._find(record.sku) is not None:
                    raise StockError('DUPLICATE_SKU', sku=record.sku)
                record.id = next(self._ids)
            else:
                stored = self._documents.get(record.id)
                if stored is None or stored['version'] != record.version:
                    raise StockError(
                        'CONCURRENT_MODIFICATION', sku=record.sku, version=record.version,
                    )

            record.version += 1
            self._documents[record.id] = copy.deepcopy(record.to_dict())
        return record

    def list(self, status=None, supplier_id=None, low_stock=False, out_of_stock=False) -> list[StockRecord]:
        with self._lock:
            records = [StockRecord.from_dict(copy.deepcopy(d)) for d in self._documents.values()]

        if status:
            records = [r for r in records if r.status == status]
        if supplier_id is not None:
            records = [r for r in records if r.supplier.get('id') == supplier_id]
        if low_stock:
            records = [r for r in records if r.is_low_stock]
        if out_of_stock:
            records = [r for r in records if r.is_out_of_stock]

        return sorted(records, key=lambda r: (r.updated_at, r.id), reverse=True)

    def clear(self) -> None:
        """Drop every stored document."""
        with self._lock:
            self._documents.clear()
