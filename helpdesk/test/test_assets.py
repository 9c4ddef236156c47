"""
Tests for asset records, automatic asset codes and the maintenance log
"""
from datetime import date

from helpdesk.business.assets.asset_manager import AssetManager, generate_asset_code
from helpdesk.business.assets.borrowing_manager import BorrowingInput, BorrowingManager
from helpdesk.business.assets.distribution_manager import DistributionLine, DistributionManager
from helpdesk.business.assets.maintenance_manager import MaintenanceManager
from helpdesk.business.tickets.ticket_manager import TicketInput, TicketManager
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_maintenance import AssetMaintenance
from helpdesk.services.assets.asset_service import AssetService


def test_generate_asset_code_continues_the_year(make_asset):
    year = date.today().year
    assert generate_asset_code('LPT') == f"LPT-{year}-0001"

    make_asset(asset_code=f"LPT-{year}-0007")
    make_asset(asset_code=f"LPT-{year - 1}-0099")
    assert generate_asset_code('lpt') == f"LPT-{year}-0008"


def test_create_asset_assigns_code_and_defaults(db, admin, laptop_category, locations):
    result = AssetManager(admin.id).create_asset({
        'name': 'ThinkPad T14', 'category_id': laptop_category.id, 'location_id': locations[1].id,
    })
    assert result.success, result.error

    asset = db.session.get(Asset, result.id)
    assert asset.asset_code == f"LPT-{date.today().year}-0001"
    assert (asset.status, asset.condition) == ('active', 'good')
    assert asset.useful_life_years == Asset.DEFAULT_USEFUL_LIFE_YEARS
    assert asset.purchase_price == 0
    assert not asset.is_borrowable


def test_create_asset_validation(admin, laptop_category, make_asset):
    manager = AssetManager(admin.id)
    assert not manager.create_asset({'name': 'Tanpa kategori'}).success
    assert not manager.create_asset({'name': '', 'category_id': laptop_category.id}).success
    assert not manager.create_asset({'name': 'X', 'category_id': laptop_category.id, 'status': 'lost'}).success
    assert not manager.create_asset({'name': 'X', 'category_id': laptop_category.id,
                                     'purchase_price': -100}).success

    existing = make_asset()
    result = manager.create_asset({'name': 'Kembar', 'asset_code': existing.asset_code})
    assert not result.success
    assert 'already used' in result.error


def test_update_keeps_code_when_blank(db, admin, make_asset):
    asset = make_asset()
    result = AssetManager(admin.id).update_asset(asset.id, {'name': 'Laptop Rusak', 'status': 'damage'})
    assert result.success, result.error

    db.session.refresh(asset)
    assert asset.asset_code.startswith('TST-')
    assert (asset.name, asset.status) == ('Laptop Rusak', 'damage')


def test_detail_data_includes_depreciation(make_asset):
    asset = make_asset(purchase_price=10_000_000, purchase_date=date(2000, 1, 1), useful_life_years=4)
    data = AssetService.get_detail_data(asset.id)
    assert data['asset'].id == asset.id
    assert data['depreciation'].current_value == 0
    assert data['active_borrowing'] is None


def test_maintenance_log(db, admin, make_asset):
    asset = make_asset()
    manager = MaintenanceManager(admin.id)

    result = manager.create_maintenance({'asset_id': asset.id, 'type': 'cleaning', 'cost': 150000,
                                         'performed_by_id': admin.id})
    assert result.success, result.error
    record = db.session.get(AssetMaintenance, result.id)
    assert record.performed_at is not None

    assert not manager.create_maintenance({'asset_id': asset.id, 'type': 'painting'}).success
    assert not manager.create_maintenance({'asset_id': asset.id, 'cost': -1}).success
    assert not manager.create_maintenance({'asset_id': 4242}).success

    assert manager.delete_maintenance(record.id).success
    assert AssetMaintenance.query.count() == 0

def test_delete_asset_without_history(db, admin, make_asset):
    asset = make_asset()
    assert AssetManager(admin.id).delete_asset(asset.id).success
    assert db.session.get(Asset, asset.id) is None


def test_borrowed_asset_cannot_be_deleted(db, admin, regular_user, make_asset, locations):
    asset = make_asset()
    borrowing_manager = BorrowingManager(admin.id)
    borrowing_id = BorrowingManager(regular_user.id).create_borrowing_request(BorrowingInput(
        asset_id=asset.id, borrower_location_id=locations[0].id,
        borrow_date=date.today(), purpose='Rapat direksi')).id
    borrowing_manager.approve_borrowing(borrowing_id)
    borrowing_manager.confirm_borrowed(borrowing_id)

    result = AssetManager(admin.id).delete_asset(asset.id)
    assert not result.success
    assert 'still used by 1 borrowings' in result.error
    assert db.session.get(Asset, asset.id) is not None

    assert borrowing_manager.return_asset(borrowing_id).success
    db.session.refresh(asset)
    assert asset.location_id == locations[1].id


def test_asset_in_draft_distribution_cannot_be_deleted(db, admin, regular_user, make_asset, locations):
    asset = make_asset()
    distribution_id = DistributionManager(admin.id).create_distribution(
        locations[0].id, regular_user.id, [DistributionLine(asset.id, 'Baru')]).id

    result = AssetManager(admin.id).delete_asset(asset.id)
    assert not result.success
    assert 'distribution lines' in result.error

    assert DistributionManager(admin.id).confirm_distribution(distribution_id, '/uploads/signatures/ttd.png').success
    db.session.refresh(asset)
    assert asset.location_id == locations[0].id


def test_asset_with_maintenance_or_ticket_cannot_be_deleted(admin, regular_user, make_asset):
    serviced = make_asset()
    MaintenanceManager(admin.id).create_maintenance({'asset_id': serviced.id, 'type': 'cleaning'})
    assert 'maintenance records' in AssetManager(admin.id).delete_asset(serviced.id).error

    reported = make_asset(name='Printer Epson L3110')
    TicketManager(regular_user.id).create_ticket(TicketInput(
        title='Printer bergaris', category='hardware', priority='low', asset_id=reported.id))
    assert 'tickets' in AssetManager(admin.id).delete_asset(reported.id).error


def test_asset_routes(db, authenticated_client, user_client, laptop_category, locations):
    response = authenticated_client.post('/assets/create', data={
        'name': 'HP ProBook 440', 'category_id': str(laptop_category.id),
        'location_id': str(locations[0].id), 'purchase_price': '9,500,000', 'is_borrowable': 'on',
    })
    assert response.status_code == 302
    asset = Asset.query.filter_by(name='HP ProBook 440').one()
    assert asset.purchase_price == 9_500_000
    assert asset.is_borrowable

    preview = authenticated_client.get(f'/assets/next-code?category_id={laptop_category.id}')
    assert preview.get_json() == {'asset_code': f"LPT-{date.today().year}-0002"}
    assert authenticated_client.get('/assets/next-code?category_id=999').status_code == 404

    assert user_client.get(f'/assets/{asset.id}').status_code == 200
    assert user_client.post('/assets/create', data={'name': 'X'}).status_code == 403


def test_public_asset_page_needs_no_login(client, make_asset, regular_user):
    asset = make_asset(name='Proyektor Epson', serial_number='SN-PRIVATE-123', notes='Kunci lemari di IT',
                       assigned_to_id=regular_user.id)

    response = client.get(f'/public/assets/{asset.id}')
    assert response.status_code == 200
    assert asset.asset_code.encode() in response.data
    assert b'Proyektor Epson' in response.data
    assert b'Gudang IT' in response.data
    assert b'Budi Santoso' in response.data
    assert b'SN-PRIVATE-123' not in response.data
    assert b'Kunci lemari' not in response.data
    assert b'12,000,000' not in response.data

    assert client.get('/public/assets/9999').status_code == 404
