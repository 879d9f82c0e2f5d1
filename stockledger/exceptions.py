"""
Exceptions for StockLedger.

All errors are StockError with a structured code for programmatic handling.
The subclasses pin the three failure families callers branch on:
InvalidMovement, StorageError and NotFound.
"""

from decimal import Decimal
from typing import Any


class BaseError(Exception):
    """
    Error carrying a machine-readable code plus context data.

    Subclasses declare `_default_messages` keyed by code; an explicit
    message passed at raise time wins over the default.
    """

    _default_messages: dict[str, str] = {}
    default_code = 'ERROR'

    def __init__(self, code: str | None = None, message: str | None = None, **data: Any):
        self.code = code or self.default_code
        self.message = message or self._default_messages.get(self.code, self.code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class StockError(BaseError):
    """
    Structured exception for stock operations.

    Usage:
        try:
            inventory.move('TSHIRT-RED-M', {'type': 'out', 'quantity': 2, ...})
        except StockError as e:
            if e.code == 'RECORD_NOT_FOUND':
                print(f"SKU {e.data['key']} não cadastrado")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages = {
        'INVALID_MOVEMENT': 'Movimento inválido',
        'INVALID_QUANTITY': 'Quantidade inválida (deve ser um inteiro positivo)',
        'INVALID_TYPE': 'Tipo de movimento desconhecido',
        'REASON_REQUIRED': 'Motivo é obrigatório',
        'PERFORMER_REQUIRED': 'Responsável pelo movimento é obrigatório',
        'RECORD_NOT_FOUND': 'Item de estoque não encontrado',
        'STORAGE_ERROR': 'Falha no armazenamento',
        'DUPLICATE_SKU': 'SKU já cadastrado',
        'INVALID_THRESHOLDS': 'Limites inconsistentes (mínimo ≤ ponto de pedido ≤ máximo)',
        'INVALID_FIELD': 'Campo inválido ou não editável',
        'ALERT_NOT_FOUND': 'Nenhum alerta aberto deste tipo',
        'CONCURRENT_MODIFICATION': 'Modificação concorrente detectada',
    }
    default_code = 'STOCK_ERROR'

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class InvalidMovement(StockError):
    """Malformed movement input. Raised before any mutation happens."""

    default_code = 'INVALID_MOVEMENT'


class StorageError(StockError):
    """Gateway failure on load or store. Never retried by the core."""

    default_code = 'STORAGE_ERROR'


class NotFound(StockError):
    """Requested stock record does not exist."""

    default_code = 'RECORD_NOT_FOUND'
