"""Authenticated session with a Coder deployment.

A session starts ``Unauthenticated``. ``authenticate`` binds it to one URL
and token, fetches the current user and the server build version, and
latches to ``Authenticated``. Workspace and agent operations take the
session and call ``require()`` before touching the network.

Usage:
    session = CoderSession(TransportConfig(), plugin_version="2.4.0")
    me = await session.authenticate("https://coder.example.com", token)
    workspaces = await WorkspaceLifecycle(session).list_workspaces()
    await session.close()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from .errors import (
    AuthenticationResponseError,
    BuildInfoError,
    NotAuthenticatedError,
    SessionStateError,
    reason_or,
)
from .facade import CoderV2Facade
from .models import User
from .settings import TransportConfig
from .transport import CoderTransport, build_transport

_LOGGER = logging.getLogger(__name__)

TransportFactory = Callable[..., CoderTransport]


@dataclass(frozen=True)
class Unauthenticated:
    """No successful handshake yet."""


@dataclass(frozen=True)
class Authenticated:
    """Handshake completed; fixed for the rest of the session's life."""

    identity: User
    build_version: str
    facade: CoderV2Facade

    @property
    def url(self) -> str:
        return self.facade.url


SessionState = Unauthenticated | Authenticated


class CoderSession:
    """Session manager for one Coder deployment."""

    def __init__(
        self,
        config: TransportConfig,
        *,
        plugin_version: str,
        transport_factory: TransportFactory = build_transport,
    ) -> None:
        """Initialize session.

        Args:
            config: TLS, proxy and header settings for the transport.
            plugin_version: Version reported in the User-Agent.
            transport_factory: Builds the transport; replaced in tests.
        """
        self._config = config
        self._plugin_version = plugin_version
        self._transport_factory = transport_factory
        self._state: SessionState = Unauthenticated()
        self._auth_lock = asyncio.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return isinstance(self._state, Authenticated)

    @property
    def me(self) -> User:
        return self.require().identity

    @property
    def build_version(self) -> str:
        return self.require().build_version

    def require(self) -> Authenticated:
        """Return the authenticated state.

        Raises:
            NotAuthenticatedError: If ``authenticate`` has not succeeded.
        """
        if not isinstance(self._state, Authenticated):
            raise NotAuthenticatedError("Session has not been authenticated")
        return self._state

    async def authenticate(self, url: str, token: str) -> User:
        """Authenticate and load the current user and server build version.

        This must be called before anything else. It is not retried here.
        Concurrent callers are serialized, so at most one transport is left open.

        Raises:
            AuthenticationResponseError: If the current-user call fails.
            BuildInfoError: If the build-info call fails.
            SessionStateError: If the session is already authenticated.
        """
        async with self._auth_lock:
            return await self._handshake(url, token)

    async def _handshake(self, url: str, token: str) -> User:
        if isinstance(self._state, Authenticated):
            raise SessionStateError(
                f"Session is already authenticated to {self._state.url}"
            )

        transport = self._transport_factory(
            url, token, self._config, plugin_version=self._plugin_version
        )
        facade = CoderV2Facade(transport)
        try:
            user_response = await facade.me()
            if not user_response.is_successful or user_response.body is None:
                reason = reason_or(user_response.reason, "has your token expired?")
                raise AuthenticationResponseError(
                    user_response.status,
                    f"Unable to authenticate to {facade.url}: "
                    f"code {user_response.status}, {reason}",
                    url=facade.url,
                    reason=reason,
                )

            info_response = await facade.build_info()
            if not info_response.is_successful or info_response.body is None:
                reason = reason_or(info_response.reason)
                raise BuildInfoError(
                    info_response.status,
                    f"Unable to retrieve build information for {facade.url}, "
                    f"code: {info_response.status}, reason: {reason}",
                    url=facade.url,
                    reason=reason,
                )
        except BaseException:
            await facade.transport.close()
            raise

        self._state = Authenticated(
            identity=user_response.body,
            build_version=info_response.body.version,
            facade=facade,
        )
        _LOGGER.info(
            "Authenticated to %s as %s (server %s)",
            facade.url,
            user_response.body.username,
            info_response.body.version,
        )
        return user_response.body

    async def close(self) -> None:
        """Release the transport; the session stays authenticated but unusable."""
        if isinstance(self._state, Authenticated):
            await self._state.facade.transport.close()
