import os
from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from dotenv import load_dotenv

load_dotenv()


class Config:
    """
    Environment defaults for busk-cats.
    Anything set on the Flask app config before BuskCats.init_app() wins.
    """
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))
    SUBSCRIBERS_DB = os.getenv('SUBSCRIBERS_DB', os.path.join(DB_DIR, 'subscribers.db'))

    # Single shared operator credential for /send and /admin/*
    ADMIN_SECRET = os.getenv('ADMIN_SECRET', '')

    # Comma-separated, compared exactly against the Origin header
    ALLOWED_ORIGINS = os.getenv('ALLOWED_ORIGINS', '')

    # Base URL confirm/unsubscribe links point at
    PUBLIC_URL = os.getenv('PUBLIC_URL', 'http://localhost:5000')

    # Email settings
    EMAIL_PROVIDER = os.getenv('EMAIL_PROVIDER', 'resend')
    EMAIL_ADDRESS = os.getenv('EMAIL_ADDRESS', 'onboarding@resend.dev')
    RESEND_API_KEY = os.getenv('RESEND_API_KEY') or os.getenv('RESEND', '')
    EMAIL_HOST = os.getenv('EMAIL_HOST', 'smtp.gmail.com')
    EMAIL_PORT = int(os.getenv('EMAIL_PORT', '587'))
    EMAIL_PASSWORD = os.getenv('EMAIL_PASSWORD', '')

    # Pause between broadcast sends (Resend free tier caps requests per second)
    BROADCAST_SEND_INTERVAL = float(os.getenv('BROADCAST_SEND_INTERVAL', '0'))


def parse_origins(value) -> Tuple[str, ...]:
    """Accept a comma-separated string or an iterable of origins."""
    if not value:
        return ()
    if isinstance(value, str):
        value = value.split(',')
    return tuple(o.strip() for o in value if o and o.strip())


@dataclass(frozen=True)
class Settings:
    """Immutable snapshot of the configuration, built once per app."""

    db_path: str
    admin_secret: str
    allowed_origins: Tuple[str, ...]
    public_url: str
    email_provider: str = 'resend'
    sender_email: str = 'onboarding@resend.dev'
    resend_api_key: str = ''
    smtp_host: str = 'smtp.gmail.com'
    smtp_port: int = 587
    smtp_password: str = ''
    send_interval: float = 0.0

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> 'Settings':
        def get(key):
            value = config.get(key)
            return getattr(Config, key) if value is None else value

        db_path = config.get('SUBSCRIBERS_DB')
        if not db_path:
            db_dir = config.get('DB_DIR')
            db_path = os.path.join(db_dir, 'subscribers.db') if db_dir else Config.SUBSCRIBERS_DB

        return cls(
            db_path=db_path,
            admin_secret=get('ADMIN_SECRET') or '',
            allowed_origins=parse_origins(get('ALLOWED_ORIGINS')),
            public_url=(get('PUBLIC_URL') or '').rstrip('/'),
            email_provider=(get('EMAIL_PROVIDER') or 'resend').lower(),
            sender_email=get('EMAIL_ADDRESS') or '',
            resend_api_key=get('RESEND_API_KEY') or '',
            smtp_host=get('EMAIL_HOST'),
            smtp_port=int(get('EMAIL_PORT')),
            smtp_password=get('EMAIL_PASSWORD') or '',
            send_interval=float(get('BROADCAST_SEND_INTERVAL') or 0),
        )
