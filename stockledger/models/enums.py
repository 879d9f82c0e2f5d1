"""
Enums for StockLedger models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class MovementType(models.TextChoices):
    """
    Kind of stock movement.

    IN / OUT change physical stock (current_stock).
    RESERVED / UNRESERVED change allocated stock (reserved_stock).
    """
    IN = 'in', _('Entrada')
    OUT = 'out', _('Saída')
    RESERVED = 'reserved', _('Reserva')
    UNRESERVED = 'unreserved', _('Liberação de reserva')


class AlertType(models.TextChoices):
    """Stock condition that raised an alert."""
    LOW_STOCK = 'low_stock', _('Estoque baixo')
    OUT_OF_STOCK = 'out_of_stock', _('Sem estoque')
    OVERSTOCK = 'overstock', _('Excesso de estoque')


class AlertSeverity(models.TextChoices):
    CRITICAL = 'critical', _('Crítico')
    HIGH = 'high', _('Alto')
    MEDIUM = 'medium', _('Médio')


class RecordStatus(models.TextChoices):
    """Item lifecycle. Items are never hard-deleted, only discontinued."""
    ACTIVE = 'active', _('Ativo')
    INACTIVE = 'inactive', _('Inativo')
    DISCONTINUED = 'discontinued', _('Descontinuado')
