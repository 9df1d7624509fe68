"""
Request payload parsing.

Each ``parse_*`` function takes the raw JSON body (anything ``get_json``
may return) and either returns a validated, normalized record or raises
ValidationError. Nothing past the route layer sees unvalidated input.
"""

from dataclasses import dataclass
from typing import Optional

from buskcats.core.errors import ValidationError

MAX_EMAIL_LENGTH = 255


def normalize_email(value) -> str:
    return value.strip().lower() if isinstance(value, str) else ''


def normalize_list(value) -> str:
    return value.strip() if isinstance(value, str) else ''


def validate_email(email: str) -> bool:
    """Minimal syntax check: non-empty local and domain parts around one '@'"""
    if not email or len(email) > MAX_EMAIL_LENGTH:
        return False
    if any(ch.isspace() for ch in email):
        return False
    local, sep, domain = email.partition('@')
    return bool(sep and local and domain and '@' not in domain)


def _require_object(data) -> dict:
    if not isinstance(data, dict):
        raise ValidationError('Invalid JSON body')
    return data


@dataclass(frozen=True)
class SubscriptionRequest:
    email: str
    list: str


@dataclass(frozen=True)
class SendRequest:
    subject: str
    html: str
    list: str


@dataclass(frozen=True)
class DeleteRequest:
    email: str
    list: Optional[str] = None


def parse_subscription(data) -> SubscriptionRequest:
    """Body of /subscribe and /admin/add"""
    data = _require_object(data)
    email = normalize_email(data.get('email'))
    list_name = normalize_list(data.get('list'))
    if not validate_email(email):
        raise ValidationError('Invalid email')
    if not list_name:
        raise ValidationError('Missing list')
    return SubscriptionRequest(email=email, list=list_name)


def parse_send(data) -> SendRequest:
    """Body of /send"""
    data = _require_object(data)
    subject = data.get('subject')
    html = data.get('html')
    list_name = normalize_list(data.get('list'))
    if not isinstance(subject, str) or not subject.strip() \
            or not isinstance(html, str) or not html.strip() or not list_name:
        raise ValidationError('Missing subject, html, or list')
    return SendRequest(subject=subject, html=html, list=list_name)


def parse_delete(data) -> DeleteRequest:
    """Body of /admin/delete; a blank list means every list"""
    data = _require_object(data)
    email = normalize_email(data.get('email'))
    if not email:
        raise ValidationError('Missing email')
    list_name = data.get('list')
    if list_name is not None and not isinstance(list_name, str):
        raise ValidationError('Invalid list')
    return DeleteRequest(email=email, list=normalize_list(list_name) or None)
