"""
Test the logging sanitizer utility.
Verifies passwords, API keys and inline image data are kept out of logs.
"""

from werkzeug.datastructures import ImmutableMultiDict

from helpdesk.utils.logging_sanitizer import (
    SENSITIVE_FIELDS,
    sanitize_dict,
    sanitize_exception_message,
    sanitize_form_data,
)


def test_sanitize_dict():
    """Test dictionary sanitization"""
    test_data = {
        'username': 'admin',
        'password': 'secret123',
        'email': 'admin@example.com'
    }
    result = sanitize_dict(test_data)
    assert result['username'] == 'admin', "Username should not be redacted"
    assert result['password'] == '[REDACTED]', "Password should be redacted"
    assert result['email'] == 'admin@example.com', "Email should not be redacted"

    # Case insensitivity
    result = sanitize_dict({'Password': 'a', 'FONNTE_API_KEY': 'b', 'Authorization': 'Bearer c'})
    assert set(result.values()) == {'[REDACTED]'}, "Sensitive keys match regardless of case"

    # Nested dictionaries
    result = sanitize_dict({'user': {'username': 'admin', 'password': 'secret123'}})
    assert result['user'] == {'username': 'admin', 'password': '[REDACTED]'}

    assert sanitize_dict({}) == {}
    assert sanitize_dict(None) is None


def test_binary_fields_are_summarised():
    """Signature and photo data URLs are logged as their length only"""
    data_url = 'data:image/png;base64,' + 'A' * 100
    result = sanitize_dict({'signature_data': data_url, 'notes': 'ok'})
    assert result['signature_data'] == f'[{len(data_url)} chars]'
    assert result['notes'] == 'ok'


def test_sanitize_form_data():
    """Test Flask form data sanitization"""
    form_data = ImmutableMultiDict([
        ('username', 'admin'),
        ('password', 'secret123'),
        ('csrf_token', 'abc'),
    ])
    result = sanitize_form_data(form_data)
    assert result == {'username': 'admin', 'password': '[REDACTED]', 'csrf_token': '[REDACTED]'}


def test_sanitize_exception_message():
    assert sanitize_exception_message(ValueError("Item not found")) == "Item not found"
    assert sanitize_exception_message(ValueError("bad password for admin")) == \
        "ValueError: [Message contains sensitive data]"


def test_sensitive_fields_cover_integration_keys():
    for field in ('password', 'fonnte_api_key', 'internal_api_key', 'authorization'):
        assert field in SENSITIVE_FIELDS, f"{field} should be redacted"
