"""
StockLedger configuration.

Usage in settings.py:
    STOCKLEDGER = {
        "GATEWAY": "stockledger.adapters.orm.DjangoGateway",
        "DEFAULT_REORDER_POINT": 20,
        "REORDER_BUFFER": 10,
        "ENFORCE_THRESHOLD_ORDER": False,
    }

Unknown keys are ignored. Threshold defaults and reorder settings must be
non-negative integers; anything else raises ImproperlyConfigured on first
access.
"""

from dataclasses import dataclass, fields
from typing import Any

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


@dataclass
class StockLedgerSettings:
    """StockLedger configuration settings."""

    # Persistence gateway (dotted path to a class implementing StockGateway)
    GATEWAY: str = "stockledger.adapters.orm.DjangoGateway"

    # Threshold defaults for newly registered SKUs
    DEFAULT_MIN_STOCK_LEVEL: int = 10
    DEFAULT_MAX_STOCK_LEVEL: int = 1000
    DEFAULT_REORDER_POINT: int = 20
    DEFAULT_REORDER_QUANTITY: int = 50

    # Location assigned when none is given on register
    DEFAULT_WAREHOUSE: str = "main"

    # Units added on top of the gap to reorder_point in reorder suggestions
    REORDER_BUFFER: int = 10

    # Lead time reported for suppliers without supplier['lead_time_days']
    DEFAULT_LEAD_TIME_DAYS: int = 7

    # Reject min > reorder_point or reorder_point > max on register/update
    ENFORCE_THRESHOLD_ORDER: bool = False

    def __post_init__(self):
        for field in fields(self):
            if field.type is not int and field.type != "int":
                continue
            value = getattr(self, field.name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ImproperlyConfigured(
                    f"STOCKLEDGER['{field.name}'] must be a non-negative integer, got {value!r}"
                )


def get_stockledger_settings() -> StockLedgerSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOCKLEDGER", {})
    if not isinstance(user_settings, dict):
        raise ImproperlyConfigured("STOCKLEDGER must be a dict")
    return StockLedgerSettings(**{
        k: v for k, v in user_settings.items()
        if k in StockLedgerSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_stockledger_settings(), name)


stockledger_settings = _LazySettings()
