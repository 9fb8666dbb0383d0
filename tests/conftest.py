"""
Shared fixtures: an in-memory motor-compatible store, an application
container wired to it, and HTTP clients with and without a staff session.
"""

import os
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from config.container import AppContainer
from config.database import Database
from config.settings import Settings
from main import create_app

STAFF_EMAIL = "staff@example.com"
STAFF_PASSWORD = "calm-hands-42"


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Keep real credentials out of the tests; every optional integration is off."""
    test_env = {
        'GEMINI_API_KEY': '',
        'TWILIO_ACCOUNT_SID': '',
        'TWILIO_AUTH_TOKEN': '',
        'TWILIO_WHATSAPP_NUMBER': '',
        'ADMIN_WHATSAPP_NUMBER': '',
        'REALTIME_ENABLED': 'false',
        'SESSION_TTL_MINUTES': '60',
    }
    with patch.dict(os.environ, test_env):
        yield


@pytest.fixture
def db():
    return Database(name="clinic_test", client=AsyncMongoMockClient())


@pytest.fixture
def container(db):
    return AppContainer(Settings(), db=db, realtime=False)


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client


@pytest.fixture
def staff_client(client, container):
    """HTTP client holding a signed-in staff session cookie."""
    client.portal.call(container.auth.create_staff_user, STAFF_EMAIL, STAFF_PASSWORD)
    response = client.post(
        "/admin/login",
        json={"email": STAFF_EMAIL, "password": STAFF_PASSWORD},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client


@pytest.fixture
def booking_payload():
    return {
        "fullName": "Ann Lee",
        "email": "ann@example.com",
        "whatsapp": "+1 415 555 0100",
        "serviceType": "swedish",
        "date": "2026-10-21",
        "time": "14:30",
        "notes": "Tight shoulders after a long week at the desk.",
    }
