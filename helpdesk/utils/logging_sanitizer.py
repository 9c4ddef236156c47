"""
Logging Sanitizer Utility

Keeps passwords, API keys and inline image payloads (signatures, receipt
photos) out of the logs when routes log submitted forms or webhook bodies.
"""

from typing import Dict, Any
from werkzeug.datastructures import ImmutableMultiDict


# Fields that should never be logged
SENSITIVE_FIELDS = {
    'password',
    'confirm_password',
    'current_password',
    'new_password',
    'secret',
    'token',
    'api_key',
    'apikey',
    'access_token',
    'csrf_token',
    'fonnte_api_key',
    'internal_api_key',
    'authorization',
}

# Fields carrying base64 data URLs; logged only as their size
BINARY_FIELDS = {
    'signature_data',
    'photo_data',
    'receiver_signature',
    'approval_signature',
}


def sanitize_dict(data: Dict[str, Any], redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """
    Sanitize a dictionary by replacing sensitive field values with redaction text.

    Example:
        >>> sanitize_dict({'username': 'admin', 'password': 'secret123'})
        {'username': 'admin', 'password': '[REDACTED]'}
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        lowered = str(key).lower()
        if lowered in SENSITIVE_FIELDS:
            sanitized[key] = redact_text
        elif lowered in BINARY_FIELDS and isinstance(value, str):
            sanitized[key] = f'[{len(value)} chars]'
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, redact_text)
        else:
            sanitized[key] = value

    return sanitized


def sanitize_form_data(form_data: ImmutableMultiDict, redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """Sanitize Flask request.form data for safe logging"""
    return sanitize_dict(dict(form_data), redact_text)


def sanitize_exception_message(exception: Exception) -> str:
    """Hide exception messages that mention a sensitive field"""
    message = str(exception)

    if any(field in message.lower() for field in SENSITIVE_FIELDS):
        return f"{type(exception).__name__}: [Message contains sensitive data]"

    return message
