"""
Logging Sanitizer Utility

Provides utilities to sanitize sensitive data before logging.
Prevents accidental logging of passwords, bearer tokens and other sensitive
information, including the backend's Portuguese field names.
"""

from typing import Dict, Any
from werkzeug.datastructures import ImmutableMultiDict


# Fields that should never be logged
SENSITIVE_FIELDS = {
    'password',
    'password_confirm',
    'confirm_password',
    'current_password',
    'new_password',
    'senha',
    'senhaatual',
    'novasenha',
    'confirmarnovasenha',
    'senhaadminconfirmacao',
    'admin_password',
    'secret',
    'token',
    'api_token',
    'access_token',
    'authorization',
    'csrf_token',
}


def sanitize_dict(data: Dict[str, Any], redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """
    Sanitize a dictionary by replacing sensitive field values with redaction text.

    Args:
        data: Dictionary to sanitize
        redact_text: Text to use for redacted values (default: '[REDACTED]')

    Returns:
        Sanitized dictionary with sensitive values replaced

    Example:
        >>> sanitize_dict({'login': 'admin', 'senha': 'secret123'})
        {'login': 'admin', 'senha': '[REDACTED]'}
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if key.lower() in SENSITIVE_FIELDS:
            sanitized[key] = redact_text
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, redact_text)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_dict(entry, redact_text) if isinstance(entry, dict) else entry
                for entry in value
            ]
        else:
            sanitized[key] = value

    return sanitized


def sanitize_form_data(form_data: ImmutableMultiDict, redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """
    Sanitize Flask request.form data for safe logging.

    Args:
        form_data: Flask request.form (ImmutableMultiDict)
        redact_text: Text to use for redacted values (default: '[REDACTED]')

    Returns:
        Sanitized dictionary safe for logging
    """
    return sanitize_dict(dict(form_data), redact_text)


def sanitize_exception_message(exception: Exception) -> str:
    """
    Sanitize exception messages to ensure they don't contain sensitive data.

    Args:
        exception: Exception to sanitize

    Returns:
        Sanitized exception message
    """
    message = str(exception)

    if any(field in message.lower() for field in SENSITIVE_FIELDS):
        return f"{type(exception).__name__}: [Message contains sensitive data]"

    return message
