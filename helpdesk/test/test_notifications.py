"""
Tests for phone normalisation, the Fonnte client and the notifier
"""
import pytest
import requests

from helpdesk.business.notifications import messages
from helpdesk.business.notifications.notifier import Notifier
from helpdesk.business.notifications.phone import format_phone_number, phone_variants
from helpdesk.business.notifications.whatsapp_client import SendResult, WhatsAppClient
from helpdesk.test.conftest import FakeWhatsAppClient


@pytest.mark.parametrize("raw, expected", [
    ('0812-3456-789', '628123456789'),
    ('8123456789', '628123456789'),
    ('+62 812 3456 789', '628123456789'),
    ('628123456789', '628123456789'),
])
def test_format_phone_number(raw, expected):
    assert format_phone_number(raw) == expected


def test_phone_variants():
    assert phone_variants('+62 812-3456-789') == [
        '628123456789', '08123456789', '8123456789', '+62 812-3456-789']
    assert phone_variants('628123456789') == ['628123456789', '08123456789', '8123456789']


class FakeResponse:

    def __init__(self, status_code, payload=None, text=''):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


def test_send_message_posts_to_fonnte(monkeypatch):
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append((url, json, headers, timeout))
        return FakeResponse(200, {'status': True, 'detail': 'success! message in queue', 'id': [80367170]})

    monkeypatch.setattr(requests, 'post', fake_post)
    client = WhatsAppClient('secret-key', base_url='https://api.fonnte.com/', timeout=5)
    result = client.send_message('628123456789', 'Halo')

    assert result.status
    assert result.detail == 'success! message in queue'
    url, payload, headers, timeout = calls[0]
    assert url == 'https://api.fonnte.com/send'
    assert payload == {'target': '628123456789', 'message': 'Halo', 'countryCode': '62'}
    assert headers['Authorization'] == 'secret-key'
    assert timeout == 5


def test_send_message_without_api_key(monkeypatch):
    def fail_post(*args, **kwargs):
        raise AssertionError("No request expected without an API key")

    monkeypatch.setattr(requests, 'post', fail_post)
    result = WhatsAppClient(None).send_message('628123456789', 'Halo')
    assert result == SendResult(status=False, detail='API key not configured')


def test_send_message_reports_http_errors(monkeypatch):
    monkeypatch.setattr(requests, 'post', lambda *args, **kwargs: FakeResponse(500, text='Bad gateway'))
    result = WhatsAppClient('key').send_message('628123456789', 'Halo')
    assert not result.status
    assert result.detail == 'Bad gateway'

    monkeypatch.setattr(requests, 'post',
                        lambda *args, **kwargs: FakeResponse(200, {'status': False, 'reason': 'invalid token'}))
    result = WhatsAppClient('key').send_message('628123456789', 'Halo')
    assert (result.status, result.detail) == (False, 'invalid token')


def test_send_message_reports_connection_errors(monkeypatch):
    def refuse(*args, **kwargs):
        raise requests.exceptions.ConnectionError("Connection refused")

    monkeypatch.setattr(requests, 'post', refuse)
    result = WhatsAppClient('key').send_message('628123456789', 'Halo')
    assert not result.status
    assert 'Connection refused' in result.detail


def test_notifier_normalises_and_skips():
    client = FakeWhatsAppClient()
    notifier = Notifier(client)

    assert notifier.send('0812 3456 789', 'Tes').status
    assert client.sent == [('628123456789', 'Tes')]
    assert notifier.send(None, 'Tes') is None

    Notifier(client, enabled=False).send('0812 3456 789', 'Tidak terkirim')
    assert len(client.sent) == 1


def test_notifier_survives_client_errors():
    class ExplodingClient(FakeWhatsAppClient):
        def send_message(self, target, message, country_code=None):
            raise RuntimeError("boom")

    assert Notifier(ExplodingClient()).send('08123', 'Tes') is None


def test_message_templates():
    text = messages.ticket_assigned('Printer macet', 'hardware', 'high', 'Budi')
    assert '*Prioritas:* HIGH' in text
    assert 'Budi' in text
    assert 'Stok habis' in messages.atk_request_rejected('Budi', 'Stok habis')
