"""
Pytest configuration and fixtures for the helpdesk tests

Every test gets a fresh in-memory database with the critical data (system
user, admin, default departments, locations and categories) and a fake
WhatsApp client that records outgoing messages instead of calling Fonnte.
"""
from datetime import date

import pytest
from flask import g
from flask.testing import FlaskClient

from helpdesk import create_app
from helpdesk import db as _db
from helpdesk.build import insert_critical_data
from helpdesk.business.notifications.conversation import conversation_store
from helpdesk.business.notifications.notifier import Notifier
from helpdesk.business.notifications.whatsapp_client import SendResult
from helpdesk.data.assets.asset import Asset
from helpdesk.data.assets.asset_category import AssetCategory
from helpdesk.data.atk.atk_item import AtkItem
from helpdesk.data.core.department import Department
from helpdesk.data.core.location import Location
from helpdesk.data.core.user_info.user import User

ADMIN_PASSWORD = 'admin123456789'
USER_PASSWORD = 'user123456'


class FakeWhatsAppClient:
    """Stands in for WhatsAppClient; every send succeeds and is recorded"""

    def __init__(self, country_code='62'):
        self.country_code = country_code
        self.sent = []

    def send_message(self, target, message, country_code=None):
        self.sent.append((target, message))
        return SendResult(status=True, detail='sent', id=str(len(self.sent)))

    def messages_to(self, target):
        return [message for sent_to, message in self.sent if sent_to == target]


class IsolatedLoginClient(FlaskClient):
    """Test client that drops Flask-Login's per-context user cache before each request

    The app fixture keeps one app context pushed for the whole test, so every
    request shares its ``g``; without this, the user loaded by one client
    would leak into requests made by another client.
    """

    def open(self, *args, **kwargs):
        g.pop('_login_user', None)
        return super().open(*args, **kwargs)


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create Flask application for testing"""
    app = create_app({
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'TESTING': True,
        'WTF_CSRF_ENABLED': False,
        'RATELIMIT_ENABLED': False,
        'SESSION_COOKIE_SECURE': False,
        'REMEMBER_COOKIE_SECURE': False,
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'NOTIFICATIONS_ENABLED': True,
        'INTERNAL_API_KEY': None,
    })
    app.test_client_class = IsolatedLoginClient
    app.extensions['helpdesk_notifier'] = Notifier(FakeWhatsAppClient(), enabled=True)

    with app.app_context():
        _db.create_all()
        insert_critical_data(admin_password=ADMIN_PASSWORD)
        conversation_store.clear_all()
        yield app
        _db.session.remove()
        _db.drop_all()
        conversation_store.clear_all()


@pytest.fixture(scope='function')
def db(app):
    return _db


@pytest.fixture(scope='function')
def whatsapp(app):
    """The fake client behind the app's notifier"""
    return app.extensions['helpdesk_notifier'].client


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


def login_user(client, username='admin', password=ADMIN_PASSWORD):
    """Helper function to login a user"""
    return client.post('/login', data={
        'username': username,
        'password': password
    }, follow_redirects=True)


@pytest.fixture(scope='function')
def authenticated_client(client):
    """Test client logged in as the admin"""
    login_user(client)
    return client


@pytest.fixture(scope='function')
def admin(app):
    return User.query.filter_by(username='admin').first()


@pytest.fixture(scope='function')
def department(app):
    return Department.query.filter_by(name='IT').first()


@pytest.fixture(scope='function')
def make_user(app, department):
    """Factory for extra users: make_user('budi', role='staff_it', whatsapp_phone='0812...')"""
    def factory(username, role=User.ROLE_USER, whatsapp_phone=None, is_active=True, department_id=None):
        user = User(
            username=username,
            email=f"{username}@example.com",
            full_name=username.replace('.', ' ').title(),
            role=role,
            whatsapp_phone=whatsapp_phone,
            is_active=is_active,
            department_id=department_id if department_id is not None else department.id,
        )
        user.set_password(USER_PASSWORD)
        _db.session.add(user)
        _db.session.commit()
        return user
    return factory


@pytest.fixture(scope='function')
def regular_user(make_user):
    return make_user('budi.santoso', whatsapp_phone='081234567890')


@pytest.fixture(scope='function')
def user_client(app, regular_user):
    """A second test client logged in as a non-staff user"""
    client = app.test_client()
    login_user(client, regular_user.username, USER_PASSWORD)
    return client


@pytest.fixture(scope='function')
def locations(app):
    head_office = Location.query.filter_by(name='Head Office').first()
    warehouse = Location.query.filter_by(name='Gudang IT').first()
    return head_office, warehouse


@pytest.fixture(scope='function')
def laptop_category(app):
    return AssetCategory.query.filter_by(prefix='LPT').first()


@pytest.fixture(scope='function')
def make_asset(app, admin, laptop_category, locations):
    counter = {'n': 0}

    def factory(name='Laptop Dell Latitude', is_borrowable=True, location=None, **values):
        counter['n'] += 1
        asset = Asset(
            asset_code=values.pop('asset_code', f"TST-{date.today().year}-{counter['n']:04d}"),
            name=name,
            category_id=laptop_category.id,
            location_id=(location or locations[1]).id,
            is_borrowable=is_borrowable,
            status=values.pop('status', Asset.STATUS_ACTIVE),
            condition='good',
            purchase_price=values.pop('purchase_price', 12000000),
            created_by_id=admin.id,
            **values,
        )
        _db.session.add(asset)
        _db.session.commit()
        return asset
    return factory


@pytest.fixture(scope='function')
def make_item(app, admin):
    def factory(name='Kertas A4', stock=10, price=50000, item_type=AtkItem.TYPE_ATK, min_stock=5, unit='rim'):
        item = AtkItem(
            name=name,
            type=item_type,
            unit=unit,
            price=price,
            stock_quantity=stock,
            min_stock=min_stock,
            created_by_id=admin.id,
        )
        _db.session.add(item)
        _db.session.commit()
        return item
    return factory


# 1x1 transparent PNG, the shape a signature pad posts
PNG_DATA_URL = (
    'data:image/png;base64,'
    'iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII='
)
