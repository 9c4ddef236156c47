"""
Tests for departments, locations and asset categories
"""
from helpdesk.business.core.master_manager import CategoryManager, DepartmentManager, LocationManager
from helpdesk.data.assets.asset_category import AssetCategory
from helpdesk.data.core.department import Department
from helpdesk.data.core.location import Location


def test_create_and_update_department(db, admin):
    manager = DepartmentManager(admin.id)
    result = manager.create({'name': ' Keuangan ', 'description': 'Finance'})
    assert result.success, result.error

    department = db.session.get(Department, result.id)
    assert department.name == 'Keuangan'
    assert department.created_by_id == admin.id

    assert manager.update(department.id, {'name': 'Keuangan & Pajak'}).success
    db.session.refresh(department)
    assert department.name == 'Keuangan & Pajak'
    assert department.description is None


def test_names_are_unique_ignoring_case(admin):
    manager = LocationManager(admin.id)
    result = manager.create({'name': 'head office'})
    assert not result.success
    assert 'already exists' in result.error
    assert not manager.create({'name': '   '}).success


def test_category_prefix_is_required_and_alphanumeric(db, admin):
    manager = CategoryManager(admin.id)
    assert not manager.create({'name': 'Proyektor Mini'}).success
    assert not manager.create({'name': 'Server', 'prefix': 'SV-R'}).success

    result = manager.create({'name': 'Server', 'prefix': 'srv'})
    assert result.success, result.error
    assert db.session.get(AssetCategory, result.id).prefix == 'SRV'


def test_delete_blocked_while_referenced(db, admin, locations, make_asset, department, regular_user):
    head_office, warehouse = locations
    make_asset(location=warehouse)

    result = LocationManager(admin.id).delete(warehouse.id)
    assert not result.success
    assert 'still used by 1 assets' in result.error
    assert LocationManager(admin.id).delete(head_office.id).success
    assert db.session.get(Location, head_office.id) is None

    result = DepartmentManager(admin.id).delete(department.id)
    assert not result.success
    assert 'users' in result.error


def test_master_routes(db, authenticated_client, user_client):
    response = authenticated_client.post('/master/departments/create', data={'name': 'Marketing'},
                                         follow_redirects=True)
    assert response.status_code == 200
    assert Department.query.filter_by(name='Marketing').count() == 1

    authenticated_client.post('/assets/categories/create', data={'name': 'Scanner', 'prefix': 'scn'})
    assert AssetCategory.query.filter_by(prefix='SCN').count() == 1

    assert authenticated_client.get('/master/locations').status_code == 200
    assert user_client.post('/master/locations/create', data={'name': 'Lantai 3'}).status_code == 403
