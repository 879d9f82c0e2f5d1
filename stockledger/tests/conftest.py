"""
Pytest fixtures for StockLedger tests.
"""

import pytest

from stockledger.adapters import MemoryGateway, reset_gateway
from stockledger.adapters.orm import DjangoGateway
from stockledger.records import StockRecord
from stockledger.service import Inventory


@pytest.fixture(autouse=True)
def fresh_gateway():
    """Drop the cached configured gateway around every test."""
    reset_gateway()
    yield
    reset_gateway()


@pytest.fixture
def record():
    """In-memory record: min 10, reorder at 20, max 100, 50 on hand."""
    return StockRecord(
        sku='TSHIRT-RED-M',
        current_stock=50,
        min_stock_level=10,
        reorder_point=20,
        max_stock_level=100,
    )


@pytest.fixture
def movement():
    """Factory for movement payloads."""
    def make(type_, quantity, **extra):
        payload = {
            'type': type_,
            'quantity': quantity,
            'reason': 'Teste',
            'performed_by': 'ana',
        }
        payload.update(extra)
        return payload
    return make


@pytest.fixture(params=['memory', 'orm'])
def gateway(request):
    """Each gateway implementation in turn."""
    if request.param == 'orm':
        request.getfixturevalue('db')
        return DjangoGateway()
    return MemoryGateway()


@pytest.fixture
def inventory(gateway):
    """Inventory service bound to the parametrized gateway."""
    return Inventory(gateway)


@pytest.fixture
def tshirt(inventory):
    """Registered SKU with 50 units and reorder point 20."""
    return inventory.register(
        'TSHIRT-RED-M',
        current_stock=50,
        min_stock_level=10,
        reorder_point=20,
        max_stock_level=100,
        cost='12.50',
        selling_price='29.90',
        supplier={'id': 'sup-1', 'name': 'Malharia Sul'},
    )
