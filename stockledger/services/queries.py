"""
Stock queries — read-only operations over a gateway.
"""

from typing import Any

from stockledger.conf import stockledger_settings
from stockledger.models.enums import RecordStatus
from stockledger.records import StockRecord


def list_records(gateway, status=None, supplier_id=None, low_stock: bool = False,
                 out_of_stock: bool = False, search: str | None = None) -> list[StockRecord]:
    """
    Records matching the filters, most recently updated first.

    Args:
        gateway: StockGateway to read from
        status: Only this status (None = any)
        supplier_id: Only records supplied by this supplier id
        low_stock: Only records at or below reorder point
        out_of_stock: Only records with no physical stock
        search: Case-insensitive substring of SKU, product or variant id
    """
    records = gateway.list(
        status=status,
        supplier_id=supplier_id,
        low_stock=low_stock,
        out_of_stock=out_of_stock,
    )
    if search:
        term = search.lower()
        records = [
            record for record in records
            if any(term in (value or '').lower()
                   for value in (record.sku, record.product_id, record.variant_id))
        ]
    return records


def low_stock_records(gateway) -> list[StockRecord]:
    """Active records that are out of stock or at/below their reorder point."""
    return gateway.list(status=RecordStatus.ACTIVE, low_stock=True)


URGENCY_RANK = {'critical': 0, 'high': 1, 'medium': 2}


def reorder_suggestions(gateway) -> list[dict[str, Any]]:
    """
    Purchase suggestions for every low-stock record, most urgent first.

    suggested_quantity is the larger of reorder_quantity and the gap up to
    reorder_point plus REORDER_BUFFER. Urgency is `critical` when empty,
    `high` at or below min_stock_level, `medium` otherwise.
    estimated_cost is None for records without a cost.
    """
    buffer = stockledger_settings.REORDER_BUFFER
    lead_time = stockledger_settings.DEFAULT_LEAD_TIME_DAYS
    suggestions = []
    for record in low_stock_records(gateway):
        quantity = max(record.reorder_quantity, record.reorder_point - record.current_stock + buffer)
        if record.current_stock == 0:
            urgency = 'critical'
        elif record.current_stock <= record.min_stock_level:
            urgency = 'high'
        else:
            urgency = 'medium'

        suggestions.append({
            'id': record.id,
            'sku': record.sku,
            'product_id': record.product_id,
            'current_stock': record.current_stock,
            'reorder_point': record.reorder_point,
            'suggested_quantity': quantity,
            'urgency': urgency,
            'estimated_cost': record.cost * quantity if record.cost is not None else None,
            'supplier': dict(record.supplier),
            'lead_time_days': record.supplier.get('lead_time_days', lead_time),
        })

    return sorted(suggestions, key=lambda s: URGENCY_RANK[s['urgency']])
