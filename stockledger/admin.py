"""
StockLedger Admin.

Read-only views for production debugging:
- InventoryItem: counters, thresholds, embedded movements and alerts,
  with a "resolve open alerts" action

Counters and history only change through stockledger.service.Inventory.
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from stockledger.exceptions import StockError
from stockledger.models import InventoryItem

logger = logging.getLogger(__name__)


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    """InventoryItem admin, read-only with resolve action."""

    list_display = ['sku', 'status', 'current_stock', 'reserved_stock', 'available_stock',
                    'reorder_point', 'open_alerts_display', 'updated_at']
    list_filter = ['status']
    search_fields = ['sku', 'product_id', 'variant_id']
    readonly_fields = [f.name for f in InventoryItem._meta.fields]
    date_hierarchy = 'updated_at'
    actions = ['resolve_open_alerts']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description=_('Alertas abertos'))
    def open_alerts_display(self, obj):
        return obj.open_alert_count

    @admin.action(description=_('Resolver alertas abertos'))
    def resolve_open_alerts(self, request, queryset):
        from stockledger.adapters.orm import DjangoGateway
        from stockledger.service import Inventory

        service = Inventory(DjangoGateway())
        count = 0
        for item in queryset:
            try:
                count += service.resolve_open_alerts(item.sku)
            except StockError as exc:
                logger.warning("resolve_open_alerts: failed for %s: %s", item.sku, exc)

        self.message_user(request, _('{count} alerta(s) resolvido(s).').format(count=count))
