"""
Tests for ATK purchase requests: draft -> process -> success
"""
from helpdesk.business.atk.purchase_manager import PurchaseLine, PurchaseManager
from helpdesk.data.atk.atk_purchase import AtkPurchaseRequest
from helpdesk.data.atk.atk_stock_history import AtkStockHistory
from helpdesk.test.conftest import PNG_DATA_URL


def test_create_purchase_computes_totals(db, admin, make_item):
    paper = make_item('Kertas A4', stock=0, price=50000)
    ink = make_item('Tinta Epson', stock=0, price=90000)

    result = PurchaseManager(admin.id).create_purchase_request(
        'Belanja ATK Mei', [PurchaseLine(paper.id, 10, 48000), PurchaseLine(ink.id, 2, 95000.5)])
    assert result.success, result.error

    purchase = db.session.get(AtkPurchaseRequest, result.id)
    assert purchase.status == 'draft'
    assert [line.subtotal for line in purchase.items] == [480000, 190001]
    assert purchase.total_amount == 670001


def test_purchase_validation(admin, make_item):
    item = make_item()
    manager = PurchaseManager(admin.id)

    assert not manager.create_purchase_request('', [PurchaseLine(item.id, 1, 1000)]).success
    assert not manager.create_purchase_request('Kosong', []).success
    assert not manager.create_purchase_request('Nol', [PurchaseLine(item.id, 0, 1000)]).success
    assert not manager.create_purchase_request('Minus', [PurchaseLine(item.id, 1, -5)]).success
    assert not manager.create_purchase_request('Hilang', [PurchaseLine(424242, 1, 1000)]).success


def test_update_replaces_lines_while_draft(db, admin, make_item):
    paper = make_item('Kertas A4')
    pens = make_item('Pulpen')
    manager = PurchaseManager(admin.id)
    purchase_id = manager.create_purchase_request('Belanja', [PurchaseLine(paper.id, 1, 1000)]).id

    assert manager.update_purchase_request(purchase_id, 'Belanja revisi',
                                           [PurchaseLine(pens.id, 3, 2000)]).success
    purchase = db.session.get(AtkPurchaseRequest, purchase_id)
    assert purchase.title == 'Belanja revisi'
    assert [(line.item_id, line.quantity) for line in purchase.items] == [(pens.id, 3)]
    assert purchase.total_amount == 6000

    assert manager.submit_purchase_request(purchase_id).success
    result = manager.update_purchase_request(purchase_id, 'Terlambat', [PurchaseLine(pens.id, 1, 1)])
    assert not result.success
    assert 'draft' in result.error
    assert not manager.delete_purchase_request(purchase_id).success


def test_success_adds_stock_and_stores_photo(app, db, admin, make_item):
    paper = make_item('Kertas A4', stock=4)
    manager = PurchaseManager(admin.id)
    purchase_id = manager.create_purchase_request('Restock', [PurchaseLine(paper.id, 6, 45000)]).id

    # Must be submitted first
    assert not manager.mark_purchase_success(purchase_id, PNG_DATA_URL).success
    manager.submit_purchase_request(purchase_id)

    result = manager.mark_purchase_success(purchase_id, PNG_DATA_URL)
    assert result.success, result.error
    assert result.url.startswith('/uploads/purchase_photos/')

    purchase = db.session.get(AtkPurchaseRequest, purchase_id)
    db.session.refresh(paper)
    assert purchase.status == 'success'
    assert purchase.receipt_photo_url == result.url
    assert purchase.approved_by_id == admin.id
    assert paper.stock_quantity == 10

    ledger = AtkStockHistory.query.filter_by(item_id=paper.id, reference_id=purchase_id).one()
    assert (ledger.type, ledger.quantity) == ('in', 6)


def test_success_requires_image_data(db, admin, make_item):
    paper = make_item(stock=1)
    manager = PurchaseManager(admin.id)
    purchase_id = manager.create_purchase_request('Restock', [PurchaseLine(paper.id, 2, 1000)]).id
    manager.submit_purchase_request(purchase_id)

    result = manager.mark_purchase_success(purchase_id, 'not-a-data-url')
    assert not result.success
    db.session.refresh(paper)
    assert paper.stock_quantity == 1
    assert db.session.get(AtkPurchaseRequest, purchase_id).status == 'process'


def test_purchase_routes(db, authenticated_client, make_item):
    item = make_item()
    response = authenticated_client.post('/atk/purchase/create', data={
        'title': 'Belanja bulanan',
        'item_id': [str(item.id)],
        'quantity': ['5'],
        'unit_price': ['12000'],
    }, follow_redirects=True)
    assert response.status_code == 200

    purchase = AtkPurchaseRequest.query.filter_by(title='Belanja bulanan').one()
    assert purchase.total_amount == 60000
    assert authenticated_client.get(f'/atk/purchase/{purchase.id}').status_code == 200
    assert authenticated_client.get('/atk/purchase').status_code == 200
