"""Typed bindings for the Coder v2 REST endpoints.

Pure marshaling: no retries, no caching, no status interpretation. Callers
decide what a given status means.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar
from uuid import UUID

import aiohttp

from .errors import CoderConnectionError, CoderDecodeError, CoderTimeout
from .models import (
    BuildInfo,
    CreateWorkspaceBuildRequest,
    Template,
    User,
    Workspace,
    WorkspaceBuild,
    WorkspaceResource,
)
from .transport import CoderTransport

T = TypeVar("T")

API_PREFIX = "api/v2"


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """Status line plus decoded body; ``body`` is None unless the call was 2xx."""

    status: int
    reason: str
    body: T | None = None

    @property
    def is_successful(self) -> bool:
        return 200 <= self.status < 300


def _workspaces(data: dict[str, Any]) -> list[Workspace]:
    return [Workspace.from_dict(w) for w in data.get("workspaces") or []]


def _resources(data: list[dict[str, Any]] | None) -> list[WorkspaceResource]:
    return [WorkspaceResource.from_dict(r) for r in data or []]


class CoderV2Facade:
    """One coroutine per Coder v2 endpoint."""

    def __init__(self, transport: CoderTransport) -> None:
        self._transport = transport

    @property
    def transport(self) -> CoderTransport:
        return self._transport

    @property
    def url(self) -> str:
        return self._transport.url

    async def _call(
        self,
        method: str,
        path: str,
        decode: Callable[[Any], T],
        *,
        description: str,
        **kwargs: Any,
    ) -> ApiResponse[T]:
        try:
            async with self._transport.request(
                method, f"{API_PREFIX}/{path}", **kwargs
            ) as resp:
                body: T | None = None
                if 200 <= resp.status < 300:
                    try:
                        body = decode(await resp.json())
                    except (KeyError, TypeError, ValueError) as err:
                        raise CoderDecodeError(
                            f"{description} response could not be decoded: {err!r}"
                        ) from err
                return ApiResponse(status=resp.status, reason=resp.reason or "", body=body)
        except TimeoutError as err:
            raise CoderTimeout(f"{description} request timed out") from err
        except aiohttp.ClientError as err:
            raise CoderConnectionError(f"{description} request failed: {err}") from err

    async def me(self) -> ApiResponse[User]:
        return await self._call("GET", "users/me", User.from_dict, description="Current user")

    async def build_info(self) -> ApiResponse[BuildInfo]:
        return await self._call(
            "GET", "buildinfo", BuildInfo.from_dict, description="Build info"
        )

    async def workspaces(self, query: str) -> ApiResponse[list[Workspace]]:
        """List workspaces matching a search query such as ``owner:me``."""
        return await self._call(
            "GET",
            "workspaces",
            _workspaces,
            description="Workspace list",
            params={"q": query},
        )

    async def template_version_resources(
        self, template_version_id: UUID
    ) -> ApiResponse[list[WorkspaceResource]]:
        return await self._call(
            "GET",
            f"templateversions/{template_version_id}/resources",
            _resources,
            description="Template version resources",
        )

    async def template(self, template_id: UUID) -> ApiResponse[Template]:
        return await self._call(
            "GET", f"templates/{template_id}", Template.from_dict, description="Template"
        )

    async def create_workspace_build(
        self, workspace_id: UUID, request: CreateWorkspaceBuildRequest
    ) -> ApiResponse[WorkspaceBuild]:
        return await self._call(
            "POST",
            f"workspaces/{workspace_id}/builds",
            WorkspaceBuild.from_dict,
            description="Workspace build",
            json=request.to_dict(),
        )
