"""
Tests for ATK items, spareparts and manual stock movements
"""
import io

import pytest
from werkzeug.datastructures import FileStorage

from helpdesk.business.atk.item_manager import ItemManager, low_stock_items
from helpdesk.business.atk.request_manager import RequestLine, RequestManager
from helpdesk.business.atk.stock_manager import StockManager
from helpdesk.business.core.errors import InsufficientStockError, ValidationError
from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.atk.atk_stock_history import AtkStockHistory


def test_create_item_with_initial_stock_writes_ledger(db, admin):
    result = ItemManager(admin.id).create_item({
        'name': 'Pulpen Hitam', 'unit': 'box', 'price': 25000, 'min_stock': 3, 'stock_quantity': 12,
    })
    assert result.success, result.error

    item = db.session.get(AtkItem, result.id)
    assert item.stock_quantity == 12
    assert item.type == AtkItem.TYPE_ATK
    history = AtkStockHistory.query.filter_by(item_id=item.id).all()
    assert [(row.type, row.quantity, row.notes) for row in history] == [('in', 12, 'Initial stock')]


def test_create_item_defaults_and_validation(db, admin):
    manager = ItemManager(admin.id)
    item = db.session.get(AtkItem, manager.create_item({'name': 'Toner', 'type': 'sparepart'}).id)
    assert item.unit == 'pcs'
    assert item.min_stock == AtkItem.DEFAULT_MIN_STOCK
    assert item.stock_quantity == 0
    assert AtkStockHistory.query.filter_by(item_id=item.id).count() == 0

    assert not manager.create_item({'name': ''}).success
    assert not manager.create_item({'name': 'X', 'type': 'furniture'}).success
    assert not manager.create_item({'name': 'X', 'price': -1}).success
    assert item.lead_time_days == AtkItem.DEFAULT_LEAD_TIME_DAYS

    imported = db.session.get(AtkItem, manager.create_item({'name': 'Toner impor', 'lead_time_days': 21}).id)
    assert imported.lead_time_days == 21
    assert not manager.create_item({'name': 'X', 'lead_time_days': -3}).success


def test_update_item_leaves_stock_alone(db, admin, make_item):
    item = make_item(stock=7)
    result = ItemManager(admin.id).update_item(item.id, {'name': 'Kertas F4', 'stock_quantity': 100})
    assert result.success
    db.session.refresh(item)
    assert item.name == 'Kertas F4'
    assert item.stock_quantity == 7


def test_stock_in_and_out(db, admin, make_item):
    item = make_item(stock=5)
    manager = ItemManager(admin.id)

    assert manager.stock_in(item.id, 10, 'Pembelian langsung').success
    assert manager.stock_out(item.id, 4).success
    db.session.refresh(item)
    assert item.stock_quantity == 11

    result = manager.stock_out(item.id, 50)
    assert not result.success
    assert 'Insufficient stock' in result.error
    db.session.refresh(item)
    assert item.stock_quantity == 11

    assert not manager.stock_in(item.id, 0).success
    types = [row.type for row in AtkStockHistory.query.filter_by(item_id=item.id).order_by(AtkStockHistory.id)]
    assert types == ['in', 'out']


def test_issue_floor_at_zero_records_requested_quantity(db, admin, make_item):
    item = make_item(stock=2)
    row = StockManager(admin.id).issue(item_id=item.id, quantity=5, floor_at_zero=True)
    db.session.commit()

    assert item.stock_quantity == 0
    assert row.quantity == 5

    with pytest.raises(InsufficientStockError):
        StockManager(admin.id).issue(item_id=item.id, quantity=1)


def test_set_quantity_books_difference(db, admin, make_item):
    item = make_item(stock=10)
    stock = StockManager(admin.id)

    row = stock.set_quantity(item_id=item.id, quantity=6)
    assert (row.type, row.quantity) == ('out', 4)
    assert stock.set_quantity(item_id=item.id, quantity=6) is None
    with pytest.raises(ValidationError):
        stock.set_quantity(item_id=item.id, quantity=-1)


def test_low_stock_items(make_item):
    make_item('Kertas A4', stock=20, min_stock=5)
    make_item('Tinta Printer', stock=2, min_stock=5)
    make_item('Staples', stock=0, min_stock=3)
    make_item('Map Plastik', stock=5, min_stock=5)

    assert [item.name for item in low_stock_items()] == ['Staples', 'Tinta Printer', 'Map Plastik']


def test_item_image_upload_and_delete(db, admin):
    manager = ItemManager(admin.id)
    upload = manager.upload_item_image(FileStorage(stream=io.BytesIO(b'png bytes'), filename='pulpen.png'))
    assert upload.success, upload.error
    assert upload.url.startswith('/uploads/items/')

    item_id = manager.create_item({'name': 'Pulpen', 'image_url': upload.url}).id
    assert manager.delete_item(item_id).success
    assert db.session.get(AtkItem, item_id) is None

def test_item_with_history_cannot_be_deleted(db, admin, regular_user, make_item):
    manager = ItemManager(admin.id)
    stocked_id = manager.create_item({'name': 'Map Snelhecter', 'stock_quantity': 4}).id
    result = manager.delete_item(stocked_id)
    assert not result.success
    assert 'still used by 1 stock movements' in result.error

    requested = make_item('Amplop Coklat', stock=0)
    RequestManager(regular_user.id).create_request([RequestLine(requested.id, 2)])
    result = manager.delete_item(requested.id)
    assert not result.success
    assert 'request lines' in result.error
    assert db.session.get(AtkItem, requested.id) is not None



def test_item_upload_rejects_non_images(admin):
    result = ItemManager(admin.id).upload_item_image(
        FileStorage(stream=io.BytesIO(b'MZ'), filename='setup.exe'))
    assert not result.success
    assert 'image' in result.error


def test_stock_routes(db, authenticated_client, make_item):
    item = make_item(stock=3)
    response = authenticated_client.post('/atk/stock-in', data={
        'item_id': item.id, 'quantity': '7', 'notes': 'Restock',
    }, follow_redirects=True)
    assert response.status_code == 200
    db.session.refresh(item)
    assert item.stock_quantity == 10

    assert authenticated_client.get('/atk/stock-out').status_code == 200
    assert authenticated_client.get('/atk/low-stock').status_code == 200
