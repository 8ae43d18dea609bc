"""Test the typed endpoint bindings."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock
from uuid import UUID

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from coder_client.errors import (
    CoderConnectionError,
    CoderDecodeError,
    CoderErrorKind,
    CoderTimeout,
)
from coder_client.facade import CoderV2Facade
from coder_client.models import CreateWorkspaceBuildRequest, WorkspaceTransition
from coder_client.settings import TransportConfig
from coder_client.transport import CoderTransport, build_transport

from .conftest import (
    ACTIVE_VERSION_ID,
    BASE_URL,
    OLD_VERSION_ID,
    TEMPLATE_ID,
    build_json,
    create_mock_response,
    resource_json,
    template_json,
    user_json,
    workspace_json,
)

WORKSPACE_ID = "3f3f3f3f-1111-4222-8333-444444444444"


@pytest.fixture
def recorded() -> dict[str, Any]:
    return {}


@pytest.fixture
def coder_app(recorded: dict[str, Any]) -> web.Application:
    """A minimal Coder v2 API."""

    async def me(request: web.Request) -> web.Response:
        return web.json_response(user_json())

    async def workspaces(request: web.Request) -> web.Response:
        recorded["q"] = request.query.get("q")
        return web.json_response(
            {"workspaces": [workspace_json(WORKSPACE_ID, "dev")], "count": 1}
        )

    async def resources(request: web.Request) -> web.Response:
        recorded["version"] = request.match_info["version_id"]
        return web.json_response(
            [resource_json("5a5a5a5a-1111-4222-8333-444444444444", agents=None)]
        )

    async def template(request: web.Request) -> web.Response:
        return web.json_response(template_json())

    async def create_build(request: web.Request) -> web.Response:
        recorded["body"] = await request.json()
        return web.json_response(build_json(WORKSPACE_ID, transition="stop"), status=201)

    async def missing(request: web.Request) -> web.Response:
        return web.json_response({"message": "not found"}, status=404)

    app = web.Application()
    app.router.add_get("/api/v2/users/me", me)
    app.router.add_get("/api/v2/buildinfo", missing)
    app.router.add_get("/api/v2/workspaces", workspaces)
    app.router.add_get("/api/v2/templateversions/{version_id}/resources", resources)
    app.router.add_get("/api/v2/templates/{template_id}", template)
    app.router.add_post("/api/v2/workspaces/{workspace_id}/builds", create_build)
    return app


class TestEndpoints:
    async def test_endpoints_decode_typed_bodies(
        self, coder_app: web.Application, recorded: dict[str, Any]
    ) -> None:
        async with TestServer(coder_app) as server:
            async with build_transport(
                str(server.make_url("/")), "token", TransportConfig(), plugin_version="2.4.0"
            ) as transport:
                facade = CoderV2Facade(transport)

                me = await facade.me()
                assert me.is_successful
                assert me.body is not None and me.body.username == "alice"

                listing = await facade.workspaces("owner:me")
                assert recorded["q"] == "owner:me"
                assert listing.body is not None
                assert [w.name for w in listing.body] == ["dev"]

                resources = await facade.template_version_resources(UUID(OLD_VERSION_ID))
                assert recorded["version"] == OLD_VERSION_ID
                assert resources.body is not None and resources.body[0].agents is None

                template = await facade.template(UUID(TEMPLATE_ID))
                assert template.body is not None
                assert template.body.active_version_id == UUID(ACTIVE_VERSION_ID)

                build = await facade.create_workspace_build(
                    UUID(WORKSPACE_ID),
                    CreateWorkspaceBuildRequest(transition=WorkspaceTransition.STOP),
                )
                assert build.status == 201
                assert build.body is not None
                assert build.body.transition is WorkspaceTransition.STOP
                assert recorded["body"] == {"transition": "stop"}

    async def test_non_success_leaves_body_empty(self, coder_app: web.Application) -> None:
        async with TestServer(coder_app) as server:
            async with build_transport(
                str(server.make_url("/")), "token", TransportConfig(), plugin_version="2.4.0"
            ) as transport:
                response = await CoderV2Facade(transport).build_info()

        assert response.status == 404
        assert response.reason == "Not Found"
        assert not response.is_successful
        assert response.body is None

    async def test_incomplete_body_raises_decode_error(self) -> None:
        async def me(request: web.Request) -> web.Response:
            return web.json_response({"username": "alice"})

        app = web.Application()
        app.router.add_get("/api/v2/users/me", me)

        async with TestServer(app) as server:
            async with build_transport(
                str(server.make_url("/")), "token", TransportConfig(), plugin_version="2.4.0"
            ) as transport:
                with pytest.raises(CoderDecodeError, match="Current user response") as exc_info:
                    await CoderV2Facade(transport).me()

        assert exc_info.value.kind is CoderErrorKind.FATAL
        assert isinstance(exc_info.value.__cause__, KeyError)


class TestTransportFailures:
    def _facade(self, session: MagicMock) -> CoderV2Facade:
        return CoderV2Facade(
            CoderTransport(session, BASE_URL, "token", TransportConfig(), agent="ua")
        )

    async def test_request_path_under_api_v2(self, mock_session: MagicMock) -> None:
        mock_session.request.return_value = create_mock_response(
            status=200, json_data={"version": "v2.1.0", "external_url": BASE_URL}
        )

        response = await self._facade(mock_session).build_info()

        assert response.body is not None and response.body.version == "v2.1.0"
        assert mock_session.request.call_args.args == ("GET", f"{BASE_URL}/api/v2/buildinfo")

    async def test_client_error_raises_connection_error(
        self, mock_session: MagicMock
    ) -> None:
        mock_session.request.side_effect = aiohttp.ClientError("Connection refused")

        with pytest.raises(CoderConnectionError, match="Current user request failed") as exc_info:
            await self._facade(mock_session).me()
        assert exc_info.value.kind is CoderErrorKind.CONNECTION

    async def test_timeout_raises_coder_timeout(self, mock_session: MagicMock) -> None:
        mock_session.request.side_effect = TimeoutError("Request timed out")

        with pytest.raises(CoderTimeout, match="Template request timed out"):
            await self._facade(mock_session).template(UUID(TEMPLATE_ID))

    async def test_malformed_identifier_raises_decode_error(
        self, mock_session: MagicMock
    ) -> None:
        mock_session.request.return_value = create_mock_response(
            status=200, json_data=template_json(active_version_id="not-a-uuid")
        )

        with pytest.raises(CoderDecodeError, match="Template response could not be decoded"):
            await self._facade(mock_session).template(UUID(TEMPLATE_ID))
