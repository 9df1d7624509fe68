"""
Shared fixtures: a fully initialised app on a throwaway SQLite file, with
the outbound Resend HTTP call patched out.
"""

import os
import re
import shutil
import tempfile
from unittest.mock import MagicMock, patch

import pytest

from buskcats import create_app

ADMIN_SECRET = "test-secret"
ALLOWED_ORIGINS = "https://ethanswan.com, http://localhost:1313"
PUBLIC_URL = "https://subs.test"


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="buskcats-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def app_config(tmp_db_dir):
    return {
        "TESTING": True,
        "SUBSCRIBERS_DB": os.path.join(tmp_db_dir, "subscribers.db"),
        "ADMIN_SECRET": ADMIN_SECRET,
        "ALLOWED_ORIGINS": ALLOWED_ORIGINS,
        "PUBLIC_URL": PUBLIC_URL,
        "EMAIL_PROVIDER": "resend",
        "EMAIL_ADDRESS": "news@subs.test",
        "RESEND_API_KEY": "re_test_fake",
        "BROADCAST_SEND_INTERVAL": 0,
    }


@pytest.fixture
def app(app_config):
    return create_app(app_config)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions["buskcats"].store


def _resend_response(status_code=200, payload=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    resp.json.return_value = payload if payload is not None else {"id": "mock-email-id"}
    resp.text = "" if resp.ok else "provider rejected"
    return resp


@pytest.fixture
def resend():
    """Patch the Resend API call; every send succeeds unless reconfigured."""
    with patch("buskcats.modules.email.email_service.requests.post") as post:
        post.return_value = _resend_response()
        yield post


@pytest.fixture
def resend_response():
    return _resend_response


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_SECRET}"}


def sent_messages(resend_mock):
    """JSON payloads posted to Resend, in send order"""
    return [c.kwargs["json"] for c in resend_mock.call_args_list]


def token_from_link(html_body, path):
    match = re.search(re.escape(f"{PUBLIC_URL}{path}?token=") + r"([A-Za-z0-9_\-]+)", html_body)
    assert match, f"no {path} link in: {html_body}"
    return match.group(1)
