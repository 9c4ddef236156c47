"""
Tests for the WhatsApp webhook chat flows and the internal send endpoint
"""
from helpdesk.business.notifications.conversation import (
    ConversationStore,
    STEP_SELECT_CATEGORY,
    WebhookPayload,
    find_profile_by_phone,
)
from helpdesk.data.assets.asset_borrowing import AssetBorrowing
from helpdesk.data.tickets.ticket import Ticket

SENDER = '6281234567890'


def _chat(client, message, sender=SENDER):
    response = client.post('/api/whatsapp/webhook', json={'sender': sender, 'message': message, 'device': '62811'})
    assert response.status_code == 200
    return response.get_json()


def test_webhook_status(client):
    assert client.get('/api/whatsapp/webhook').get_json() == {'status': 'Webhook active'}


def test_invalid_payload(client):
    response = client.post('/api/whatsapp/webhook', json={'message': 'halo'})
    assert response.status_code == 400
    assert response.get_json() == {'error': 'Invalid payload'}
    assert client.post('/api/whatsapp/webhook', data='not json').status_code == 400


def test_webhook_payload_parse():
    payload = WebhookPayload.parse({'sender': '62812', 'message': 'Halo', 'member': None})
    assert (payload.sender, payload.message, payload.member) == ('62812', 'Halo', '')
    assert WebhookPayload.parse(['sender']) is None
    assert WebhookPayload.parse({'sender': 62812, 'message': 'Halo'}) is None


def test_unregistered_sender(client, whatsapp):
    assert _chat(client, 'halo', sender='6289999999999') == {'status': 'unregistered'}
    assert whatsapp.messages_to('6289999999999')


def test_find_profile_by_phone(db, regular_user, make_user):
    assert find_profile_by_phone('+62 812-3456-7890', '62').id == regular_user.id
    assert find_profile_by_phone('081234567890', '62').id == regular_user.id

    suffix_user = make_user('rudi', whatsapp_phone='+62 85512345678')
    assert find_profile_by_phone('6285512345678', '62').id == suffix_user.id

    make_user('nonaktif', whatsapp_phone='087700001111', is_active=False)
    assert find_profile_by_phone('6287700001111', '62') is None


def test_find_profile_by_phone_ignores_ambiguous_suffixes(db, regular_user, make_user):
    make_user('andi', whatsapp_phone='6281111111162')
    make_user('budi', whatsapp_phone='6289999999962')
    assert find_profile_by_phone('62', '62') is None, "Too short for a suffix match"

    make_user('citra', whatsapp_phone='+62 81234567891')
    make_user('dodi', whatsapp_phone='+1 99234567891')
    assert find_profile_by_phone('085234567891', '62') is None


def test_ticket_flow(db, client, regular_user, whatsapp):

    assert _chat(client, 'menu') == {'status': 'menu_sent'}
    assert _chat(client, '1') == {'status': 'category_menu'}
    assert _chat(client, '9') == {'status': 'invalid_category'}
    assert _chat(client, '3') == {'status': 'priority_menu'}
    assert _chat(client, 'x') == {'status': 'invalid_priority'}
    assert _chat(client, '4') == {'status': 'description_prompt'}

    result = _chat(client, 'Data Penjualan Hilang dari folder bersama')
    assert result['status'] == 'ticket_created'

    ticket = db.session.get(Ticket, result['ticketId'])
    assert ticket.title == '[WA] Data Penjualan Hilang dari folder bersama...'
    assert ticket.description == 'Data Penjualan Hilang dari folder bersama'
    assert (ticket.category, ticket.priority) == ('data', 'urgent')
    assert ticket.created_by_id == regular_user.id
    assert ticket.assigned_to_id is not None
    assert ticket.status == 'in_progress'

    assert _chat(client, 'status') == {'status': 'status_sent'}
    assert 'Data Penjualan' in whatsapp.messages_to(SENDER)[-1]


def test_cancel_clears_the_conversation(client, regular_user):
    _chat(client, 'ticket')
    assert _chat(client, 'BATAL') == {'status': 'cancelled'}
    assert _chat(client, 'help') == {'status': 'help_sent'}


def test_status_without_tickets(client, regular_user, whatsapp):
    assert _chat(client, '/status') == {'status': 'status_sent'}
    assert 'belum memiliki ticket' in whatsapp.messages_to(SENDER)[-1]


def test_borrowing_flow(db, client, admin, regular_user, make_asset, whatsapp):
    make_asset(name='Proyektor Epson EB-X51')
    make_asset(name='Proyektor Rusak', status='damage')
    make_asset(name='Proyektor Kantor', is_borrowable=False)

    assert _chat(client, 'pinjam') == {'status': 'borrowing_search_prompt'}
    assert _chat(client, 'kamera') == {'status': 'no_assets_found'}
    assert _chat(client, '%') == {'status': 'no_assets_found'}, "Wildcards are matched literally"
    assert _chat(client, 'proyektor') == {'status': 'borrowing_assets_listed'}
    listing = whatsapp.messages_to(SENDER)[-1]
    assert 'Proyektor Epson EB-X51' in listing
    assert 'Proyektor Rusak' not in listing and 'Proyektor Kantor' not in listing

    assert _chat(client, '2') == {'status': 'invalid_asset_selection'}
    assert _chat(client, '1') == {'status': 'borrowing_purpose_prompt'}
    assert _chat(client, '   ') == {'status': 'empty_purpose'}

    result = _chat(client, 'Presentasi klien')
    assert result['status'] == 'borrowing_created'
    borrowing = db.session.get(AssetBorrowing, result['borrowingId'])
    assert (borrowing.status, borrowing.purpose) == ('pending', 'Presentasi klien')
    assert borrowing.borrower_id == regular_user.id

    # The asset is now taken by a pending borrowing
    _chat(client, 'pinjam')
    assert _chat(client, 'proyektor') == {'status': 'no_assets_found'}


def test_conversation_store_expires_states():
    now = [1000.0]
    store = ConversationStore(ttl_seconds=300, clock=lambda: now[0])
    store.set('628123', STEP_SELECT_CATEGORY, {'a': 1})

    now[0] += 300
    store.cleanup()
    assert store.get('628123').data == {'a': 1}

    now[0] += 1
    store.cleanup()
    assert store.get('628123') is None


def test_send_endpoint(app, client, whatsapp):
    response = client.post('/api/whatsapp/send', json={'phone': '0812 1111 2222', 'message': 'Server down'})
    assert response.status_code == 200
    assert response.get_json()['status'] is True
    assert whatsapp.sent[-1] == ('6281211112222', 'Server down')

    assert client.post('/api/whatsapp/send', json={'phone': '0812'}).status_code == 400


def test_send_endpoint_requires_key_when_configured(app, client):
    app.config['INTERNAL_API_KEY'] = 'rahasia'
    body = {'phone': '0812 1111 2222', 'message': 'Server down'}

    assert client.post('/api/whatsapp/send', json=body).status_code == 401
    assert client.post('/api/whatsapp/send', json=body,
                       headers={'Authorization': 'Bearer salah'}).status_code == 401
    assert client.post('/api/whatsapp/send', json=body,
                       headers={'Authorization': 'Bearer rahasia'}).status_code == 200
