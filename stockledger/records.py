"""
Stock documents — the in-memory state the ledger and alert evaluator work on.

StockRecord is loaded from and stored through a gateway
(see stockledger.protocols.gateway); nothing here touches the database.

    record = StockRecord(sku='TSHIRT-RED-M', reorder_point=20)
    record.to_dict()          # JSON-ready document
    StockRecord.from_dict(d)  # and back
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from stockledger.exceptions import InvalidMovement, StockError
from stockledger.models.enums import AlertSeverity, AlertType, MovementType, RecordStatus


def _as_datetime(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    parsed = parse_datetime(value)
    if parsed is None:
        raise StockError('INVALID_FIELD', value=value)
    return parsed


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def as_decimal(value, field_name: str = '') -> Decimal | None:
    """Coerce money input (str, int, float, Decimal) to Decimal, keeping None."""
    if value is None or isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise StockError('INVALID_FIELD', field=field_name, value=value) from None


def _as_quantity(value) -> int:
    """Positive integer quantity. Numeric strings are accepted ("5")."""
    if isinstance(value, bool):
        raise InvalidMovement('INVALID_QUANTITY', quantity=value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise InvalidMovement('INVALID_QUANTITY', quantity=value) from None
    if not isinstance(value, int) or value <= 0:
        raise InvalidMovement('INVALID_QUANTITY', quantity=value)
    return value


# ══════════════════════════════════════════════════════════════
# MOVEMENTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Movement:
    """
    Requested stock movement, validated on construction.

    Raises:
        InvalidMovement: unknown type, non-positive quantity,
            missing reason or performer.
    """

    type: MovementType
    quantity: int
    reason: str
    performed_by: str
    reference: str | None = None
    notes: str | None = None

    def __post_init__(self):
        try:
            kind = MovementType(self.type)
        except ValueError:
            raise InvalidMovement('INVALID_TYPE', type=self.type) from None
        object.__setattr__(self, 'type', kind)
        object.__setattr__(self, 'quantity', _as_quantity(self.quantity))
        if not self.reason:
            raise InvalidMovement('REASON_REQUIRED')
        if not self.performed_by:
            raise InvalidMovement('PERFORMER_REQUIRED')

    @classmethod
    def parse(cls, data: Movement | Mapping[str, Any]) -> Movement:
        """
        Build a Movement from a request payload.

        Accepts both snake_case and camelCase performer keys
        (`performed_by` / `performedBy`).
        """
        if isinstance(data, cls):
            return data
        if not isinstance(data, Mapping):
            raise InvalidMovement('INVALID_MOVEMENT', value=repr(data))

        missing = [name for name in ('type', 'quantity') if data.get(name) in (None, '')]
        if missing:
            raise InvalidMovement('INVALID_MOVEMENT', missing=missing)

        return cls(
            type=data['type'],
            quantity=data['quantity'],
            reason=data.get('reason') or '',
            performed_by=data.get('performed_by') or data.get('performedBy') or '',
            reference=data.get('reference'),
            notes=data.get('notes'),
        )


@dataclass(frozen=True)
class MovementRecord:
    """Immutable ledger entry. Timestamp is assigned when the movement is applied."""

    type: MovementType
    quantity: int
    reason: str
    performed_by: str
    timestamp: datetime
    reference: str | None = None
    notes: str | None = None

    @classmethod
    def from_movement(cls, movement: Movement, timestamp: datetime) -> MovementRecord:
        return cls(
            type=movement.type,
            quantity=movement.quantity,
            reason=movement.reason,
            performed_by=movement.performed_by,
            timestamp=timestamp,
            reference=movement.reference,
            notes=movement.notes,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            'type': self.type.value,
            'quantity': self.quantity,
            'reason': self.reason,
            'reference': self.reference,
            'performed_by': self.performed_by,
            'notes': self.notes,
            'timestamp': _isoformat(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MovementRecord:
        return cls(
            type=MovementType(data['type']),
            quantity=int(data['quantity']),
            reason=data.get('reason', ''),
            performed_by=data.get('performed_by', ''),
            timestamp=_as_datetime(data['timestamp']),
            reference=data.get('reference'),
            notes=data.get('notes'),
        )


# ══════════════════════════════════════════════════════════════
# ALERTS
# ══════════════════════════════════════════════════════════════

@dataclass
class AlertRecord:
    """Alert raised by the evaluator. Only `resolved`/`resolved_at` ever change."""

    type: AlertType
    severity: AlertSeverity
    message: str
    triggered_at: datetime
    resolved: bool = False
    resolved_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'type': self.type.value,
            'severity': self.severity.value,
            'message': self.message,
            'triggered_at': _isoformat(self.triggered_at),
            'resolved': self.resolved,
            'resolved_at': _isoformat(self.resolved_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AlertRecord:
        return cls(
            type=AlertType(data['type']),
            severity=AlertSeverity(data['severity']),
            message=data.get('message', ''),
            triggered_at=_as_datetime(data['triggered_at']),
            resolved=bool(data.get('resolved', False)),
            resolved_at=_as_datetime(data.get('resolved_at')),
        )


# ══════════════════════════════════════════════════════════════
# STOCK RECORD
# ══════════════════════════════════════════════════════════════

@dataclass
class StockRecord:
    """
    Stock state of one SKU.

    Counters:
    - current_stock: physical units on hand
    - reserved_stock: units allocated to pending orders
    - available_stock: max(0, current - reserved), derived, never set directly

    History:
    - movements: append-only, chronological
    - alerts: at most one unresolved alert per AlertType

    `id` and `version` belong to the gateway: id is the opaque storage
    identifier (None until first store) and version guards against lost
    updates between concurrent writers.
    """

    sku: str
    current_stock: int = 0
    reserved_stock: int = 0
    available_stock: int = field(init=False, default=0)

    min_stock_level: int = 10
    max_stock_level: int = 1000
    reorder_point: int = 20
    reorder_quantity: int = 50

    movements: list[MovementRecord] = field(default_factory=list)
    alerts: list[AlertRecord] = field(default_factory=list)

    status: RecordStatus = RecordStatus.ACTIVE
    product_id: str | None = None
    variant_id: str | None = None
    cost: Decimal | None = None
    selling_price: Decimal | None = None
    supplier: dict = field(default_factory=dict)
    location: dict = field(default_factory=dict)

    last_restocked: datetime | None = None
    last_sold: datetime | None = None
    created_at: datetime = field(default_factory=timezone.now)
    updated_at: datetime = field(default_factory=timezone.now)

    id: Any = None
    version: int = 0

    def __post_init__(self):
        self.status = RecordStatus(self.status)
        self.cost = as_decimal(self.cost, 'cost')
        self.selling_price = as_decimal(self.selling_price, 'selling_price')
        self.recompute_available()

    # ══════════════════════════════════════════════════════════════
    # DERIVED
    # ══════════════════════════════════════════════════════════════

    def recompute_available(self) -> int:
        self.available_stock = max(0, self.current_stock - self.reserved_stock)
        return self.available_stock

    @property
    def margin(self) -> Decimal | None:
        if self.cost is None or self.selling_price is None:
            return None
        return self.selling_price - self.cost

    @property
    def is_out_of_stock(self) -> bool:
        return self.current_stock == 0

    @property
    def is_low_stock(self) -> bool:
        """At or below reorder point (includes out of stock)."""
        return self.current_stock == 0 or self.current_stock <= self.reorder_point

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    # ══════════════════════════════════════════════════════════════
    # SERIALIZATION
    # ══════════════════════════════════════════════════════════════

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready document (datetimes ISO-8601, money as strings)."""
        margin = self.margin
        return {
            'id': self.id,
            'sku': self.sku,
            'product_id': self.product_id,
            'variant_id': self.variant_id,
            'current_stock': self.current_stock,
            'reserved_stock': self.reserved_stock,
            'available_stock': self.available_stock,
            'min_stock_level': self.min_stock_level,
            'max_stock_level': self.max_stock_level,
            'reorder_point': self.reorder_point,
            'reorder_quantity': self.reorder_quantity,
            'cost': str(self.cost) if self.cost is not None else None,
            'selling_price': str(self.selling_price) if self.selling_price is not None else None,
            'margin': str(margin) if margin is not None else None,
            'supplier': dict(self.supplier),
            'location': dict(self.location),
            'status': self.status.value,
            'last_restocked': _isoformat(self.last_restocked),
            'last_sold': _isoformat(self.last_sold),
            'movements': [m.to_dict() for m in self.movements],
            'alerts': [a.to_dict() for a in self.alerts],
            'created_at': _isoformat(self.created_at),
            'updated_at': _isoformat(self.updated_at),
            'version': self.version,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StockRecord:
        """Inverse of to_dict(). Derived keys (available_stock, margin) are ignored."""
        now = timezone.now()
        return cls(
            id=data.get('id'),
            sku=data['sku'],
            product_id=data.get('product_id'),
            variant_id=data.get('variant_id'),
            current_stock=int(data.get('current_stock', 0)),
            reserved_stock=int(data.get('reserved_stock', 0)),
            min_stock_level=int(data.get('min_stock_level', 10)),
            max_stock_level=int(data.get('max_stock_level', 1000)),
            reorder_point=int(data.get('reorder_point', 20)),
            reorder_quantity=int(data.get('reorder_quantity', 50)),
            cost=data.get('cost'),
            selling_price=data.get('selling_price'),
            supplier=dict(data.get('supplier') or {}),
            location=dict(data.get('location') or {}),
            status=data.get('status', RecordStatus.ACTIVE),
            last_restocked=_as_datetime(data.get('last_restocked')),
            last_sold=_as_datetime(data.get('last_sold')),
            movements=[MovementRecord.from_dict(m) for m in data.get('movements', [])],
            alerts=[AlertRecord.from_dict(a) for a in data.get('alerts', [])],
            created_at=_as_datetime(data.get('created_at')) or now,
            updated_at=_as_datetime(data.get('updated_at')) or now,
            version=int(data.get('version', 0)),
        )

    def __str__(self) -> str:
        return f"{self.sku}: {self.current_stock} ({self.available_stock} disponível)"
