"""Shared test fixtures."""

import logging
from datetime import datetime, timezone

import pytest

from smtp_mailer.app import create_app
from smtp_mailer.config import TransportConfig, load_settings
from smtp_mailer.dispatcher import MessageDispatcher
from smtp_mailer.transports.mock import MockTransport

FIXED_TIME = datetime(2024, 5, 17, 14, 30, 0, tzinfo=timezone.utc)
FIXED_DATE = "05/17/2024, 02:30:00 PM"

ENV_VARS = [
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_USER",
    "SMTP_PASS",
    "FROM_EMAIL",
    "FROM_NAME",
    "SMTP_CONNECT_TIMEOUT",
    "SMTP_SOCKET_TIMEOUT",
    "MAILER_HOST",
    "MAILER_PORT",
    "MAILER_DEBUG",
    "MAILER_LOG_LEVEL",
    "MAILER_LOG_FILE_PATH",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep the developer's SMTP settings and .env file out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


@pytest.fixture
def sent_at():
    """The timestamp interpolated into rendered templates."""
    return FIXED_TIME


@pytest.fixture
def sent_at_text():
    """How the fixed timestamp appears in rendered templates."""
    return FIXED_DATE


@pytest.fixture
def transport_config():
    """A fully configured transport."""
    return TransportConfig(
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="mailer",
        smtp_pass="secret",
        from_email="noreply@example.com",
    )


@pytest.fixture
def unconfigured_config():
    """A transport with most required settings absent."""
    return TransportConfig(smtp_host="smtp.example.com")


@pytest.fixture
def mock_transport():
    """A transport that records instead of sending."""
    return MockTransport()


@pytest.fixture
def dispatcher(transport_config, mock_transport):
    """Dispatcher wired to the mock transport with a fixed clock."""
    return MessageDispatcher(
        transport_config, transport=mock_transport, clock=lambda: FIXED_TIME
    )


@pytest.fixture
def valid_payload():
    """A minimal valid send request."""
    return {
        "to": "a@b.com",
        "subject": "Hi",
        "name": "Ann",
        "template": "welcome",
    }


@pytest.fixture
def client(dispatcher):
    """Flask test client backed by the mock dispatcher."""
    app = create_app(dispatcher=dispatcher)
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest left it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
