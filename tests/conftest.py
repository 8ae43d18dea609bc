"""Pytest configuration and fixtures for coder_client tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from coder_client.facade import ApiResponse
from coder_client.session import Authenticated, CoderSession
from coder_client.settings import TransportConfig

BASE_URL = "https://coder.example.com"

USER_ID = "6f2a2c1e-8a55-4d36-9a57-8c3d3f4f0b11"
TEMPLATE_ID = "0c3e8c8e-1c7b-4f0e-9d7e-6b1a9a2f3c44"
ACTIVE_VERSION_ID = "a1b2c3d4-0000-4000-8000-000000000001"
OLD_VERSION_ID = "a1b2c3d4-0000-4000-8000-000000000002"


def user_json(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": USER_ID,
        "username": "alice",
        "email": "alice@example.com",
        "created_at": "2023-04-01T09:15:30.123456Z",
        "status": "active",
        "organization_ids": ["11111111-2222-4333-8444-555555555555"],
        "roles": [{"name": "owner", "display_name": "Owner"}],
    }
    data.update(overrides)
    return data


def agent_json(agent_id: str, name: str = "main", **overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": agent_id,
        "name": name,
        "status": "connected",
        "lifecycle_state": "ready",
        "operating_system": "linux",
        "architecture": "amd64",
        "directory": "/home/coder",
        "created_at": "2023-04-02T10:00:00Z",
    }
    data.update(overrides)
    return data


def resource_json(
    resource_id: str, agents: list[dict[str, Any]] | None = None
) -> dict[str, Any]:
    return {
        "id": resource_id,
        "name": "dev",
        "type": "docker_container",
        "workspace_transition": "start",
        "created_at": "2023-04-02T10:00:00Z",
        "agents": agents,
    }


def build_json(
    workspace_id: str,
    *,
    transition: str = "start",
    status: str = "running",
    template_version_id: str = OLD_VERSION_ID,
    resources: list[dict[str, Any]] | None = None,
    build_number: int = 3,
) -> dict[str, Any]:
    return {
        "id": "9d9d9d9d-1111-4222-8333-444444444444",
        "created_at": "2023-04-02T10:00:00.5Z",
        "updated_at": "2023-04-02T10:00:05+02:00",
        "workspace_id": workspace_id,
        "workspace_name": "dev",
        "template_version_id": template_version_id,
        "build_number": build_number,
        "transition": transition,
        "status": status,
        "initiator_id": USER_ID,
        "initiator_name": "alice",
        "reason": "initiator",
        "job": {
            "id": "7e7e7e7e-1111-4222-8333-444444444444",
            "created_at": "2023-04-02T10:00:00Z",
            "status": "pending",
        },
        "resources": resources or [],
        "deadline": None,
        "daily_cost": 0,
    }


def workspace_json(
    workspace_id: str,
    name: str,
    *,
    status: str = "running",
    transition: str = "start",
    template_version_id: str = OLD_VERSION_ID,
    resources: list[dict[str, Any]] | None = None,
    outdated: bool = False,
) -> dict[str, Any]:
    return {
        "id": workspace_id,
        "name": name,
        "created_at": "2023-04-01T12:00:00Z",
        "updated_at": "2023-04-02T10:00:05Z",
        "owner_id": USER_ID,
        "owner_name": "alice",
        "template_id": TEMPLATE_ID,
        "template_name": "docker",
        "template_display_name": "Docker",
        "template_icon": "/icon/docker.png",
        "latest_build": build_json(
            workspace_id,
            transition=transition,
            status=status,
            template_version_id=template_version_id,
            resources=resources,
        ),
        "outdated": outdated,
        "last_used_at": "2023-04-02T11:30:00.25Z",
    }


def template_json(active_version_id: str = ACTIVE_VERSION_ID) -> dict[str, Any]:
    return {
        "id": TEMPLATE_ID,
        "name": "docker",
        "display_name": "Docker",
        "active_version_id": active_version_id,
        "created_at": "2023-01-01T00:00:00Z",
        "updated_at": "2023-03-01T00:00:00Z",
        "organization_id": "11111111-2222-4333-8444-555555555555",
        "provisioner": "terraform",
    }


def api_response(status: int = 200, body: Any = None, reason: str = "OK") -> ApiResponse[Any]:
    """Create a facade response as the facade would return it."""
    return ApiResponse(status=status, reason=reason, body=body)


@pytest.fixture
def mock_facade() -> MagicMock:
    """Create a mock CoderV2Facade with coroutine endpoints."""
    facade = MagicMock()
    facade.url = BASE_URL
    facade.me = AsyncMock()
    facade.build_info = AsyncMock()
    facade.workspaces = AsyncMock()
    facade.template_version_resources = AsyncMock()
    facade.template = AsyncMock()
    facade.create_workspace_build = AsyncMock()
    facade.transport.close = AsyncMock()
    return facade


@pytest.fixture
def authenticated_session(mock_facade: MagicMock) -> CoderSession:
    """Create a session already latched to Authenticated over mock_facade."""
    from coder_client.models import User

    session = CoderSession(TransportConfig(), plugin_version="2.4.0")
    session._state = Authenticated(
        identity=User.from_dict(user_json()),
        build_version="v2.1.0",
        facade=mock_facade,
    )
    return session


def create_mock_response(
    status: int = 200,
    json_data: Any = None,
    reason: str = "OK",
) -> AsyncMock:
    """Create a configured mock aiohttp response.

    Args:
        status: HTTP status code
        json_data: Data to return from json() call
        reason: HTTP reason phrase

    Returns:
        Configured AsyncMock response
    """
    response = AsyncMock()
    response.status = status
    response.reason = reason

    if json_data is not None:
        response.json.return_value = json_data

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)
