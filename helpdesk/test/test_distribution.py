"""
Tests for asset distributions (SBBK handover documents)
"""
import io
import re
from datetime import date

from werkzeug.datastructures import FileStorage

from helpdesk.business.assets.distribution_manager import DistributionLine, DistributionManager
from helpdesk.data.assets.asset_distribution import AssetDistribution


def _signature_upload():
    return FileStorage(stream=io.BytesIO(b'\x89PNG fake signature'), filename='signature.png',
                       content_type='image/png')


def test_create_distribution_keeps_assets_in_place(db, admin, regular_user, make_asset, locations):
    head_office, warehouse = locations
    laptop = make_asset(location=warehouse)
    monitor = make_asset(name='Monitor LG 24"', location=warehouse)

    result = DistributionManager(admin.id).create_distribution(
        head_office.id, regular_user.id,
        [DistributionLine(laptop.id, 'Baru'), DistributionLine(monitor.id, 'Bekas')],
        notes='Onboarding karyawan baru',
    )
    assert result.success, result.error

    distribution = db.session.get(AssetDistribution, result.id)
    assert distribution.status == 'draft'
    assert distribution.document_number is None
    assert [line.condition for line in distribution.items] == ['Baru', 'Bekas']
    db.session.refresh(laptop)
    assert laptop.location_id == warehouse.id, "Assets only move when the handover is confirmed"


def test_create_distribution_validation(admin, make_asset, locations):
    manager = DistributionManager(admin.id)
    asset = make_asset()

    assert not manager.create_distribution(locations[0].id, None, []).success
    result = manager.create_distribution(locations[0].id, None, [DistributionLine(asset.id, 'Rusak')])
    assert not result.success
    assert 'condition' in result.error


def test_failed_lines_leave_no_draft_behind(admin, make_asset, locations):
    asset = make_asset()
    result = DistributionManager(admin.id).create_distribution(
        locations[0].id, None, [DistributionLine(asset.id), DistributionLine(99999)])

    assert not result.success
    assert AssetDistribution.query.count() == 0


def test_confirm_moves_assets_to_destination(db, admin, regular_user, make_asset, locations):
    head_office, warehouse = locations
    asset = make_asset(location=warehouse)
    manager = DistributionManager(admin.id)
    distribution_id = manager.create_distribution(head_office.id, regular_user.id,
                                                  [DistributionLine(asset.id)]).id

    uploaded = manager.upload_distribution_signature(distribution_id, _signature_upload())
    assert uploaded.success, uploaded.error
    assert uploaded.url.startswith('/uploads/signatures/')

    assert manager.confirm_distribution(distribution_id, uploaded.url).success
    distribution = db.session.get(AssetDistribution, distribution_id)
    db.session.refresh(asset)
    assert distribution.status == 'completed'
    assert distribution.receiver_signature_url == uploaded.url
    assert distribution.distributed_at is not None
    assert asset.location_id == head_office.id
    assert asset.assigned_to_id == regular_user.id

    # Completed distributions are final
    assert not manager.confirm_distribution(distribution_id, uploaded.url).success
    result = manager.delete_distribution(distribution_id)
    assert not result.success
    assert 'completed' in result.error


def test_confirm_requires_signature(admin, make_asset, locations):
    asset = make_asset()
    manager = DistributionManager(admin.id)
    distribution_id = manager.create_distribution(locations[0].id, None, [DistributionLine(asset.id)]).id

    result = manager.confirm_distribution(distribution_id, '')
    assert not result.success
    assert 'signature' in result.error


def test_document_number_assigned_once_and_sequential(db, admin, make_asset, locations):
    manager = DistributionManager(admin.id)
    first = manager.create_distribution(locations[0].id, None, [DistributionLine(make_asset().id)]).id
    second = manager.create_distribution(locations[0].id, None, [DistributionLine(make_asset().id)]).id

    number = manager.generate_document_number_for_print(first).data['document_number']
    prefix = f"SBBK-{date.today().strftime('%Y%m')}-"
    assert number == f"{prefix}001"
    assert manager.generate_document_number_for_print(first).data['document_number'] == number
    assert manager.generate_document_number_for_print(second).data['document_number'] == f"{prefix}002"


def test_draft_can_be_deleted(admin, make_asset, locations):
    manager = DistributionManager(admin.id)
    distribution_id = manager.create_distribution(locations[0].id, None, [DistributionLine(make_asset().id)]).id
    assert manager.delete_distribution(distribution_id).success
    assert AssetDistribution.query.count() == 0


def test_document_page_prints_number(authenticated_client, admin, make_asset, locations):
    distribution_id = DistributionManager(admin.id).create_distribution(
        locations[0].id, None, [DistributionLine(make_asset().id)]).id

    response = authenticated_client.get(f'/assets/distribution/{distribution_id}/document')
    assert response.status_code == 200
    assert re.search(rb'SBBK-\d{6}-001', response.data)


def test_distribution_pages_are_staff_only(user_client):
    assert user_client.get('/assets/distribution').status_code == 403
