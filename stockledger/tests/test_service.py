"""
Tests for the Inventory service API.
"""

from decimal import Decimal

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError

from stockledger import InvalidMovement, NotFound, StockError, StorageError
from stockledger.adapters import MemoryGateway
from stockledger.adapters.orm import DjangoGateway
from stockledger.models import AlertType, InventoryItem, MovementType, RecordStatus
from stockledger.models.item import InventoryItemQuerySet
from stockledger.records import Movement
from stockledger.service import Inventory


class TestRegister:
    """Tests for inventory.register()."""

    def test_register_applies_settings_defaults(self, inventory):
        record = inventory.register('CAP-BLUE', current_stock=300)

        assert record.id is not None
        assert record.min_stock_level == 10
        assert record.max_stock_level == 1000
        assert record.reorder_point == 20
        assert record.reorder_quantity == 50
        assert record.location == {'warehouse': 'main'}
        assert record.status == RecordStatus.ACTIVE

    def test_register_with_custom_defaults(self, inventory, settings):
        settings.STOCKLEDGER = {'DEFAULT_REORDER_POINT': 5, 'DEFAULT_WAREHOUSE': 'sp-01'}

        record = inventory.register('CAP-BLUE', current_stock=300)

        assert record.reorder_point == 5
        assert record.location == {'warehouse': 'sp-01'}

    @pytest.mark.parametrize('value', [-1, '20', True])
    def test_misconfigured_default(self, inventory, settings, value):
        settings.STOCKLEDGER = {'DEFAULT_REORDER_POINT': value}

        with pytest.raises(ImproperlyConfigured):
            inventory.register('CAP-BLUE')

    def test_initial_stock_is_a_movement(self, tshirt):
        """Initial stock is booked so history replays to the counters."""
        assert tshirt.current_stock == 50
        assert len(tshirt.movements) == 1
        assert tshirt.movements[0].type == MovementType.IN
        assert tshirt.movements[0].quantity == 50
        assert tshirt.movements[0].performed_by == 'system'

    def test_register_empty_raises_out_of_stock(self, inventory):
        record = inventory.register('CAP-BLUE')

        assert record.movements == []
        assert [a.type for a in record.alerts] == [AlertType.OUT_OF_STOCK]

    def test_register_pricing(self, tshirt):
        assert tshirt.cost == Decimal('12.50')
        assert tshirt.margin == Decimal('17.40')

    def test_duplicate_sku(self, inventory, tshirt):
        with pytest.raises(StockError) as exc:
            inventory.register('TSHIRT-RED-M')

        assert exc.value.code == 'DUPLICATE_SKU'

    def test_register_numeric_sku_next_to_matching_id(self, inventory, tshirt):
        """Barcode SKUs are checked as SKUs only, never against storage ids."""
        barcode = str(tshirt.id)

        record = inventory.register(barcode, current_stock=3)

        assert record.sku == barcode
        assert inventory.get(barcode).current_stock == 3
        assert inventory.get(tshirt.id).sku == 'TSHIRT-RED-M'

    @pytest.mark.parametrize('fields', [
        {'current_stock_typo': 1},
        {'reorder_point': -1},
        {'reorder_point': '20'},
        {'supplier': 'Malharia Sul'},
        {'status': 'archived'},
        {'cost': 'free'},
    ])
    def test_register_rejects_bad_fields(self, inventory, fields):
        with pytest.raises(StockError) as exc:
            inventory.register('CAP-BLUE', **fields)

        assert exc.value.code == 'INVALID_FIELD'
        assert inventory.gateway.load('CAP-BLUE') is None

    def test_register_negative_stock(self, inventory):
        with pytest.raises(InvalidMovement):
            inventory.register('CAP-BLUE', current_stock=-5)

    def test_thresholds_not_enforced_by_default(self, inventory):
        record = inventory.register('CAP-BLUE', min_stock_level=50, reorder_point=10)

        assert record.min_stock_level > record.reorder_point

    def test_thresholds_enforced_when_configured(self, inventory, settings):
        settings.STOCKLEDGER = {'ENFORCE_THRESHOLD_ORDER': True}

        with pytest.raises(StockError) as exc:
            inventory.register('CAP-BLUE', min_stock_level=50, reorder_point=10)

        assert exc.value.code == 'INVALID_THRESHOLDS'
        assert inventory.gateway.load('CAP-BLUE') is None


class TestMove:
    """Tests for inventory.move()."""

    def test_move_out_persists(self, inventory, tshirt, movement):
        inventory.move('TSHIRT-RED-M', movement('out', 8, reference='Pedido #1042'))

        stored = inventory.get('TSHIRT-RED-M')
        assert stored.current_stock == 42
        assert stored.last_sold is not None
        assert stored.movements[-1].reference == 'Pedido #1042'

    def test_move_by_id(self, inventory, tshirt, movement):
        record = inventory.move(tshirt.id, movement('in', 5))

        assert record.current_stock == 55

    def test_move_accepts_movement_object(self, inventory, tshirt):
        m = Movement(type='reserved', quantity=4, reason='Pedido #7', performed_by='ana')
        record = inventory.move('TSHIRT-RED-M', m)

        assert record.reserved_stock == 4
        assert record.available_stock == 46

    def test_move_triggers_alert(self, inventory, tshirt, movement):
        record = inventory.move('TSHIRT-RED-M', movement('out', 35))

        assert [a.type for a in record.alerts] == [AlertType.LOW_STOCK]
        assert inventory.get('TSHIRT-RED-M').alerts[0].severity == 'high'

    def test_move_to_zero(self, inventory, tshirt, movement):
        inventory.move('TSHIRT-RED-M', movement('out', 45))
        record = inventory.move('TSHIRT-RED-M', movement('out', 100))

        assert record.current_stock == 0
        assert [a.type for a in record.alerts] == [AlertType.LOW_STOCK, AlertType.OUT_OF_STOCK]

    def test_repeated_moves_do_not_duplicate_alerts(self, inventory, tshirt, movement):
        inventory.move('TSHIRT-RED-M', movement('out', 35))
        record = inventory.move('TSHIRT-RED-M', movement('reserved', 1))

        assert len(record.alerts) == 1

    def test_invalid_movement_stores_nothing(self, inventory, tshirt, movement):
        with pytest.raises(InvalidMovement):
            inventory.move('TSHIRT-RED-M', movement('bogus', 3))

        stored = inventory.get('TSHIRT-RED-M')
        assert len(stored.movements) == 1
        assert stored.version == tshirt.version

    def test_move_unknown_sku(self, inventory, movement):
        with pytest.raises(NotFound) as exc:
            inventory.move('NOPE', movement('in', 1))

        assert exc.value.code == 'RECORD_NOT_FOUND'
        assert exc.value.as_dict()['data'] == {'key': 'NOPE'}

    def test_lost_update_detected(self, inventory, tshirt, movement):
        """A stale copy cannot overwrite a newer movement."""
        stale = inventory.get('TSHIRT-RED-M')
        inventory.move('TSHIRT-RED-M', movement('out', 10))

        stale.reorder_point = 1
        with pytest.raises(StockError) as exc:
            inventory.gateway.store(stale)

        assert exc.value.code == 'CONCURRENT_MODIFICATION'
        assert inventory.get('TSHIRT-RED-M').current_stock == 40

    def test_move_unregistered_numeric_sku(self, inventory, tshirt, movement):
        """A numeric SKU with no record is NotFound, even if it equals an id."""
        with pytest.raises(NotFound) as exc:
            inventory.move(str(tshirt.id), movement('out', 2))

        assert exc.value.data == {'key': str(tshirt.id)}
        stored = inventory.get('TSHIRT-RED-M')
        assert stored.current_stock == 50
        assert stored.version == tshirt.version

    def test_bulk_move(self, inventory, tshirt, movement):
        inventory.register('CAP-BLUE', current_stock=10)

        results = inventory.bulk_move([
            {'id': 'TSHIRT-RED-M', 'movement': movement('out', 5)},
            {'id': 'NOPE', 'movement': movement('in', 1)},
            {'id': 'CAP-BLUE', 'movement': movement('in', 0)},
            {'id': 'CAP-BLUE', 'movement': movement('in', 4)},
        ])

        assert results[0] == {'id': 'TSHIRT-RED-M', 'success': True, 'current_stock': 45}
        assert results[1]['success'] is False
        assert results[1]['code'] == 'RECORD_NOT_FOUND'
        assert results[2]['code'] == 'INVALID_QUANTITY'
        assert results[3] == {'id': 'CAP-BLUE', 'success': True, 'current_stock': 14}
        assert inventory.get('CAP-BLUE').movements[-1].quantity == 4

    def test_bulk_move_missing_movement(self, inventory, tshirt):
        results = inventory.bulk_move([{'id': 'TSHIRT-RED-M'}])

        assert results[0]['code'] == 'INVALID_MOVEMENT'
        assert len(inventory.get('TSHIRT-RED-M').movements) == 1


class TestUpdate:
    """Tests for inventory.update(), bulk_update() and discontinue()."""

    def test_update_thresholds_reevaluates(self, inventory, tshirt):
        record = inventory.update('TSHIRT-RED-M', reorder_point=60)

        assert record.reorder_point == 60
        assert [a.type for a in inventory.get('TSHIRT-RED-M').alerts] == [AlertType.LOW_STOCK]

    def test_update_supplier_and_price(self, inventory, tshirt):
        inventory.update('TSHIRT-RED-M', supplier={'id': 'sup-9'}, selling_price=Decimal('35.00'))

        stored = inventory.get('TSHIRT-RED-M')
        assert stored.supplier == {'id': 'sup-9'}
        assert stored.margin == Decimal('22.50')

    @pytest.mark.parametrize('field', ['current_stock', 'reserved_stock', 'sku', 'movements', 'alerts'])
    def test_counters_and_history_not_editable(self, inventory, tshirt, field):
        with pytest.raises(StockError) as exc:
            inventory.update('TSHIRT-RED-M', **{field: 0})

        assert exc.value.code == 'INVALID_FIELD'
        assert exc.value.data['field'] == field

    def test_update_unknown_sku(self, inventory):
        with pytest.raises(NotFound):
            inventory.update('NOPE', reorder_point=1)

    def test_bulk_update(self, inventory, tshirt):
        inventory.register('CAP-BLUE', current_stock=10)

        results = inventory.bulk_update([
            {'id': 'TSHIRT-RED-M', 'data': {'reorder_point': 5}},
            {'id': 'NOPE', 'data': {'reorder_point': 5}},
            {'id': 'CAP-BLUE', 'data': {'current_stock': 99}},
        ])

        assert results[0] == {'id': 'TSHIRT-RED-M', 'success': True}
        assert results[1]['success'] is False
        assert results[1]['code'] == 'RECORD_NOT_FOUND'
        assert results[2]['code'] == 'INVALID_FIELD'
        assert inventory.get('TSHIRT-RED-M').reorder_point == 5

    def test_discontinue_is_soft(self, inventory, tshirt):
        record = inventory.discontinue('TSHIRT-RED-M')

        assert record.status == RecordStatus.DISCONTINUED
        assert inventory.get('TSHIRT-RED-M').movements == record.movements


class TestAlertsAndQueries:
    """Tests for resolve_alert(), list(), low_stock() and audit()."""

    def test_resolve_alert_persists(self, inventory, tshirt, movement):
        inventory.move('TSHIRT-RED-M', movement('out', 35))

        inventory.resolve_alert('TSHIRT-RED-M', 'low_stock')

        stored = inventory.get('TSHIRT-RED-M')
        assert stored.alerts[0].resolved is True

    def test_resolve_alert_missing(self, inventory, tshirt):
        with pytest.raises(StockError) as exc:
            inventory.resolve_alert('TSHIRT-RED-M', 'overstock')

        assert exc.value.code == 'ALERT_NOT_FOUND'

    def test_list_filters(self, inventory, tshirt):
        inventory.register('CAP-BLUE', supplier={'id': 'sup-2'})
        inventory.register('MUG-WHITE', current_stock=5, product_id='prod-mug')
        inventory.discontinue('MUG-WHITE')

        assert {r.sku for r in inventory.list()} == {'TSHIRT-RED-M', 'CAP-BLUE', 'MUG-WHITE'}
        assert {r.sku for r in inventory.list(status='active')} == {'TSHIRT-RED-M', 'CAP-BLUE'}
        assert [r.sku for r in inventory.list(supplier_id='sup-2')] == ['CAP-BLUE']
        assert [r.sku for r in inventory.list(out_of_stock=True)] == ['CAP-BLUE']
        assert [r.sku for r in inventory.list(search='tshirt')] == ['TSHIRT-RED-M']
        assert [r.sku for r in inventory.list(search='PROD-MUG')] == ['MUG-WHITE']

    def test_low_stock_skips_inactive(self, inventory, tshirt):
        inventory.register('CAP-BLUE')
        inventory.register('MUG-WHITE', current_stock=5)
        inventory.discontinue('MUG-WHITE')

        assert [r.sku for r in inventory.low_stock()] == ['CAP-BLUE']

    def test_resolve_open_alerts_counts_alerts(self, inventory, tshirt, movement):
        inventory.move('TSHIRT-RED-M', movement('out', 35))
        inventory.move('TSHIRT-RED-M', movement('out', 15))

        assert inventory.resolve_open_alerts('TSHIRT-RED-M') == 2
        assert inventory.resolve_open_alerts('TSHIRT-RED-M') == 0
        assert all(alert.resolved for alert in inventory.get('TSHIRT-RED-M').alerts)

    def test_reorder_suggestions(self, inventory, tshirt, movement):
        inventory.update('TSHIRT-RED-M', reorder_quantity=5)
        inventory.move('TSHIRT-RED-M', movement('out', 35))
        inventory.register('CAP-BLUE')
        inventory.register('MUG-WHITE', current_stock=5, supplier={'id': 'sup-3', 'lead_time_days': 3})
        inventory.register('SOCKS-GREY', current_stock=300)

        suggestions = inventory.reorder_suggestions()

        assert [(s['sku'], s['urgency']) for s in suggestions] == [
            ('CAP-BLUE', 'critical'),
            ('MUG-WHITE', 'high'),
            ('TSHIRT-RED-M', 'medium'),
        ]
        cap, mug, tshirt_suggestion = suggestions
        assert cap['suggested_quantity'] == 50
        assert cap['estimated_cost'] is None
        assert mug['lead_time_days'] == 3
        assert tshirt_suggestion['suggested_quantity'] == 15
        assert tshirt_suggestion['estimated_cost'] == Decimal('187.50')
        assert tshirt_suggestion['lead_time_days'] == 7

    def test_reorder_buffer_setting(self, inventory, tshirt, movement, settings):
        settings.STOCKLEDGER = {'REORDER_BUFFER': 40}
        inventory.update('TSHIRT-RED-M', reorder_quantity=5)
        inventory.move('TSHIRT-RED-M', movement('out', 35))

        [suggestion] = inventory.reorder_suggestions()

        assert suggestion['suggested_quantity'] == 45

    def test_reorder_suggestions_skip_inactive(self, inventory):
        inventory.register('CAP-BLUE')
        inventory.discontinue('CAP-BLUE')

        assert inventory.reorder_suggestions() == []

    def test_audit_consistent(self, inventory, tshirt, movement):
        inventory.move('TSHIRT-RED-M', movement('out', 70))
        inventory.move('TSHIRT-RED-M', movement('reserved', 3))

        report = inventory.audit('TSHIRT-RED-M')

        assert report['consistent'] is True
        assert report['expected_current_stock'] == 0
        assert report['expected_reserved_stock'] == 3

    def test_audit_detects_drift(self, inventory, tshirt):
        record = inventory.get('TSHIRT-RED-M')
        record.current_stock = 99
        inventory.gateway.store(record)

        report = inventory.audit('TSHIRT-RED-M')

        assert report['consistent'] is False
        assert report['current_stock'] == 99
        assert report['expected_current_stock'] == 50


class TestStorageFailures:
    """Gateway failures reach the caller unchanged and leave storage intact."""

    pytestmark = pytest.mark.django_db

    @pytest.fixture
    def orm_inventory(self):
        return Inventory(DjangoGateway())

    @pytest.fixture
    def locked_database(self, monkeypatch):
        def boom(*args, **kwargs):
            raise DatabaseError('database is locked')

        def lock():
            monkeypatch.setattr(InventoryItemQuerySet, 'update', boom)
            monkeypatch.setattr(InventoryItemQuerySet, 'create', boom)
        return lock

    def test_move_storage_error(self, orm_inventory, locked_database, movement):
        orm_inventory.register('TSHIRT-RED-M', current_stock=50)
        locked_database()

        with pytest.raises(StorageError) as exc:
            orm_inventory.move('TSHIRT-RED-M', movement('out', 45))

        assert exc.value.code == 'STORAGE_ERROR'
        item = InventoryItem.objects.get(sku='TSHIRT-RED-M')
        assert item.current_stock == 50
        assert item.version == 1
        assert len(item.movements) == 1
        assert item.alerts == []

    def test_register_storage_error(self, orm_inventory, locked_database):
        locked_database()

        with pytest.raises(StorageError):
            orm_inventory.register('CAP-BLUE', current_stock=3)

        assert not InventoryItem.objects.filter(sku='CAP-BLUE').exists()

    def test_gateway_error_is_not_wrapped(self, movement):
        """The service re-raises the gateway's own exception object."""
        error = StorageError(error='replica unavailable')

        class UnavailableGateway(MemoryGateway):
            fail = False

            def store(self, record):
                if self.fail:
                    raise error
                return super().store(record)

        gateway = UnavailableGateway()
        service = Inventory(gateway)
        service.register('TSHIRT-RED-M', current_stock=50)
        gateway.fail = True

        with pytest.raises(StorageError) as exc:
            service.move('TSHIRT-RED-M', movement('out', 5))

        assert exc.value is error
        assert gateway.load('TSHIRT-RED-M').current_stock == 50


class TestModuleShortcut:
    """Tests for the lazy `stockledger.inventory` shortcut."""

    def test_uses_configured_gateway(self, settings):
        settings.STOCKLEDGER = {'GATEWAY': 'stockledger.adapters.memory.MemoryGateway'}
        import stockledger
        from stockledger.adapters import MemoryGateway

        service = stockledger.inventory
        service.register('CAP-BLUE', current_stock=3)

        assert isinstance(service.gateway, MemoryGateway)
        assert stockledger.inventory.get('CAP-BLUE').current_stock == 3

    def test_unknown_attribute(self):
        import stockledger

        with pytest.raises(AttributeError):
            stockledger.nothing_here
