"""
Gateway loader — resolves the configured StockGateway.

Usage:
    from stockledger.adapters import get_gateway

    gateway = get_gateway()
    record = gateway.load("TSHIRT-RED-M")

Settings:
    STOCKLEDGER = {
        "GATEWAY": "stockledger.adapters.memory.MemoryGateway",
    }

Defaults to stockledger.adapters.orm.DjangoGateway.
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from stockledger.conf import stockledger_settings
from stockledger.protocols.gateway import StockGateway

logger = logging.getLogger(__name__)


# Cached gateway instance
_lock = threading.Lock()
_gateway: StockGateway | None = None


def get_gateway() -> StockGateway:
    """
    Return the configured gateway.

    Raises:
        ImproperlyConfigured: If GATEWAY is empty or import fails
    """
    global _gateway

    if _gateway is None:
        with _lock:
            if _gateway is None:  # double-checked
                gateway_path = stockledger_settings.GATEWAY

                if not gateway_path:
                    raise ImproperlyConfigured(
                        "STOCKLEDGER['GATEWAY'] must be configured. "
                        "Example: 'stockledger.adapters.orm.DjangoGateway'"
                    )

                try:
                    gateway_class = import_string(gateway_path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import gateway '{gateway_path}': {e}"
                    ) from e

                _gateway = gateway_class()
                logger.debug("Loaded stock gateway: %s", gateway_path)

    return _gateway


def reset_gateway() -> None:
    """Reset the cached gateway. Useful for testing."""
    global _gateway
    _gateway = None
