"""Shared fixtures for workspace tests."""

import httpx
import pytest

from pws.api.client import HttpWorkspaceRepository
from pws.collab.roles import UserRole, WorkspaceSession
from pws.collab.workspace import WorkspaceStateManager

from .fakes import API_URL, JOB_ID, FakeWorkspaceApi, make_item, make_section


@pytest.fixture
def fake_api() -> FakeWorkspaceApi:
    return FakeWorkspaceApi(
        sections=[
            make_section("sec-a", "Kitchen", [make_item("item-1"), make_item("item-2")]),
            make_section("sec-b", "Bathroom", [make_item("item-3")]),
        ]
    )


@pytest.fixture
def repository(fake_api: FakeWorkspaceApi) -> HttpWorkspaceRepository:
    return HttpWorkspaceRepository(
        base_url=API_URL,
        token="secret-token",
        timeout=5.0,
        transport=httpx.MockTransport(fake_api.handler),
    )


@pytest.fixture
def client_session() -> WorkspaceSession:
    return WorkspaceSession(role=UserRole.CLIENT, user_id="user-client", user_name="Nino")


@pytest.fixture
def pro_session() -> WorkspaceSession:
    return WorkspaceSession(role=UserRole.PROFESSIONAL, user_id="user-pro", user_name="Giorgi")


@pytest.fixture
def pro_manager(repository, pro_session) -> WorkspaceStateManager:
    return WorkspaceStateManager(JOB_ID, pro_session, repository)


@pytest.fixture
def client_manager(repository, client_session) -> WorkspaceStateManager:
    return WorkspaceStateManager(JOB_ID, client_session, repository)
