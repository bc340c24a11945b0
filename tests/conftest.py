"""
Pytest Configuration and Fixtures

Shared fixtures: an application container wired to in-memory fakes, a
TestClient over it, and helpers to sign users in.
"""

import pytest
from fastapi.testclient import TestClient

from supportdesk.config.settings import Settings
from supportdesk.container import wire_container
from supportdesk.domain.enums import Role
from supportdesk.main import create_app

from .fakes import (
    FakeMessageRepository, FakeProfileRepository, FakeTicketRepository,
    InMemoryChangeFeed, RecordingModel, make_profile
)


@pytest.fixture
def settings():
    return Settings(
        session_secret="test-secret",
        llm_provider="none",
        environment="test",
        debug=False,
    )


@pytest.fixture
def feed():
    return InMemoryChangeFeed()


@pytest.fixture
def tickets(feed):
    return FakeTicketRepository(feed)


@pytest.fixture
def messages():
    return FakeMessageRepository()


@pytest.fixture
def profiles():
    return FakeProfileRepository()


@pytest.fixture
def model():
    return RecordingModel(["Customer could not print; support replaced the fuser."])


@pytest.fixture
def container(settings, tickets, messages, profiles, feed, model):
    return wire_container(settings, tickets, messages, profiles, feed, model=model)


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client


@pytest.fixture
def customer(profiles):
    return profiles.put(make_profile(Role.CUSTOMER, email="customer@example.com", full_name="Casey Customer"))


@pytest.fixture
def other_customer(profiles):
    return profiles.put(make_profile(Role.CUSTOMER, email="other@example.com"))


@pytest.fixture
def support(profiles):
    return profiles.put(make_profile(Role.SUPPORT, email="support@example.com", full_name="Sam Support"))


@pytest.fixture
def admin(profiles):
    return profiles.put(make_profile(Role.ADMIN, email="admin@example.com", full_name="Alex Admin"))


@pytest.fixture
def auth_headers(container):
    """Build an Authorization header for a profile"""
    def _headers(profile):
        return {"Authorization": f"Bearer {container.codec.issue(profile.user_id, profile.email)}"}
    return _headers


@pytest.fixture
def sign_in(client, container, settings):
    """Put a session cookie for a profile on the test client"""
    def _sign_in(profile):
        client.cookies.set(settings.session_cookie_name, container.codec.issue(profile.user_id, profile.email))
        return client
    return _sign_in
