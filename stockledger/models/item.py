"""
InventoryItem model — stored document for one SKU.
"""

from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import RecordStatus


class InventoryItemQuerySet(models.QuerySet):
    """QuerySet with helper filters for InventoryItem."""

    def active(self):
        return self.filter(status=RecordStatus.ACTIVE)

    def low_stock(self):
        """At or below reorder point, or empty."""
        return self.filter(Q(current_stock=0) | Q(current_stock__lte=F('reorder_point')))

    def out_of_stock(self):
        return self.filter(current_stock=0)

    def for_supplier(self, supplier_id):
        return self.filter(supplier__id=supplier_id)


class InventoryItem(models.Model):
    """
    Stock document of one SKU.

    Counters and policy thresholds are columns so they can be filtered;
    movement history and alerts are embedded JSON lists, read and written
    as a whole through stockledger.adapters.orm.DjangoGateway.

    Rules:
    - Never write counters directly; go through the Inventory service
    - version is bumped on every store (optimistic concurrency)
    """

    sku = models.CharField(
        max_length=64,
        unique=True,
        verbose_name=_('SKU'),
        help_text=_('Identificador único, imutável após o cadastro'),
    )
    product_id = models.CharField(max_length=64, blank=True, default='', verbose_name=_('ID do Produto'))
    variant_id = models.CharField(max_length=64, blank=True, default='', verbose_name=_('ID da Variante'))

    # Counters
    current_stock = models.PositiveIntegerField(default=0, verbose_name=_('Estoque atual'))
    reserved_stock = models.PositiveIntegerField(default=0, verbose_name=_('Reservado'))
    available_stock = models.PositiveIntegerField(default=0, verbose_name=_('Disponível'))

    # Policy thresholds
    min_stock_level = models.PositiveIntegerField(default=10, verbose_name=_('Estoque mínimo'))
    max_stock_level = models.PositiveIntegerField(default=1000, verbose_name=_('Estoque máximo'))
    reorder_point = models.PositiveIntegerField(default=20, verbose_name=_('Ponto de pedido'))
    reorder_quantity = models.PositiveIntegerField(default=50, verbose_name=_('Quantidade de reposição'))

    # Pricing
    cost = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, verbose_name=_('Custo'),
    )
    selling_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, verbose_name=_('Preço de venda'),
    )

    supplier = models.JSONField(default=dict, blank=True, verbose_name=_('Fornecedor'))
    location = models.JSONField(default=dict, blank=True, verbose_name=_('Localização'))
    status = models.CharField(
        max_length=20,
        choices=RecordStatus.choices,
        default=RecordStatus.ACTIVE,
        db_index=True,
        verbose_name=_('Status'),
    )

    # Embedded history
    movements = models.JSONField(default=list, blank=True, verbose_name=_('Movimentos'))
    alerts = models.JSONField(default=list, blank=True, verbose_name=_('Alertas'))

    last_restocked = models.DateTimeField(null=True, blank=True, verbose_name=_('Última reposição'))
    last_sold = models.DateTimeField(null=True, blank=True, verbose_name=_('Última venda'))

    version = models.PositiveIntegerField(default=0, verbose_name=_('Versão'))
    created_at = models.DateTimeField(default=timezone.now, verbose_name=_('Criado em'))
    updated_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Atualizado em'))

    objects = InventoryItemQuerySet.as_manager()

    class Meta:
        verbose_name = _('Item de Estoque')
        verbose_name_plural = _('Itens de Estoque')
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=['status', 'current_stock'], name='stockledger_status_stock_idx'),
        ]

    @property
    def open_alert_count(self) -> int:
        return sum(1 for alert in self.alerts if not alert.get('resolved'))

    def __str__(self) -> str:
        return f"{self.sku}: {self.current_stock}"
