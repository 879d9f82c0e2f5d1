"""
Persistence Gateway Protocol — where StockRecords live.

StockLedger defines this protocol; stockledger.adapters ships an ORM-backed
implementation (DjangoGateway) and an in-process one (MemoryGateway).
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from stockledger.records import StockRecord


@runtime_checkable
class StockGateway(Protocol):
    """
    Protocol for stock record persistence.

    Implementations must:
    - Return independent copies from load()/list() (callers mutate them)
    - Bump record.version on every successful store()
    - Reject a store() whose version is stale with
      StockError('CONCURRENT_MODIFICATION')
    - Wrap backend failures in StorageError
    """

    def load(self, sku: str) -> StockRecord | None:
        """
        Load a record by SKU.

        Numeric SKUs (barcodes) are SKUs, never storage ids.

        Returns:
            StockRecord or None if not found
        """
        ...

    def load_by_id(self, record_id: Any) -> StockRecord | None:
        """
        Load a record by storage id (the id assigned on first store).

        Returns:
            StockRecord or None if not found
        """
        ...

    def store(self, record: StockRecord) -> StockRecord:
        """
        Insert (id is None) or update a record.

        Returns:
            The same record with id and version updated

        Raises:
            StockError('DUPLICATE_SKU'): Insert with an existing SKU
            StockError('CONCURRENT_MODIFICATION'): Stale version
            StorageError: Backend failure
        """
        ...

    def list(
        self,
        status: str | None = None,
        supplier_id: Any = None,
        low_stock: bool = False,
        out_of_stock: bool = False,
    ) -> list[StockRecord]:
        """
        List records, most recently updated first.

        Args:
            status: Only records with this status
            supplier_id: Only records whose supplier['id'] matches
            low_stock: Only records at or below reorder point
            out_of_stock: Only records with current_stock == 0
        """
        ...
