"""HTTP transport for a Coder deployment.

``build_transport`` assembles one reusable ``aiohttp.ClientSession`` per
(URL, token, config). Construction order is fixed:

1. TLS context and hostname override
2. Proxy selection and proxy credentials
3. Client middlewares: session token, user agent, custom headers, logging

Logging is the innermost middleware so it observes every header the
earlier stages add.
"""

from __future__ import annotations

import logging
import platform
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import aiohttp

from .headers import get_headers
from .settings import TransportConfig
from .tls import coder_ssl_context, server_hostname

if TYPE_CHECKING:
    from aiohttp import ClientRequest, ClientResponse
    from aiohttp.client import _RequestContextManager

_LOGGER = logging.getLogger(__name__)

PRODUCT_NAME = "Coder Gateway"
SESSION_TOKEN_HEADER = "Coder-Session-Token"

Handler = Callable[["ClientRequest"], Awaitable["ClientResponse"]]
Middleware = Callable[["ClientRequest", Handler], Awaitable["ClientResponse"]]


def user_agent(
    plugin_version: str,
    *,
    os_name: str | None = None,
    os_version: str | None = None,
    arch: str | None = None,
) -> str:
    """Compose the User-Agent sent with every request.

    OS fields default to the running platform.
    """
    os_name = os_name if os_name is not None else platform.system()
    os_version = os_version if os_version is not None else platform.release()
    arch = arch if arch is not None else platform.machine()
    return f"{PRODUCT_NAME}/{plugin_version} ({os_name} {os_version}; {arch})"


def session_token_middleware(token: str) -> Middleware:
    async def middleware(req: ClientRequest, handler: Handler) -> ClientResponse:
        req.headers[SESSION_TOKEN_HEADER] = token
        return await handler(req)

    return middleware


def user_agent_middleware(agent: str) -> Middleware:
    async def middleware(req: ClientRequest, handler: Handler) -> ClientResponse:
        req.headers["User-Agent"] = agent
        return await handler(req)

    return middleware


def header_command_middleware(url: str, command: str | None) -> Middleware:
    """Attach headers printed by ``command``; it runs once per request."""

    async def middleware(req: ClientRequest, handler: Handler) -> ClientResponse:
        for key, value in (await get_headers(url, command)).items():
            req.headers.add(key, value)
        return await handler(req)

    return middleware


async def logging_middleware(req: ClientRequest, handler: Handler) -> ClientResponse:
    """Log the request and response lines; never headers or bodies."""
    _LOGGER.debug("--> %s %s", req.method, req.url)
    start = time.monotonic()
    try:
        resp = await handler(req)
    except (aiohttp.ClientError, TimeoutError) as err:
        _LOGGER.debug("<-- HTTP FAILED: %s %s: %s", req.method, req.url, err)
        raise
    elapsed_ms = int((time.monotonic() - start) * 1000)
    _LOGGER.debug(
        "<-- %d %s %s (%dms)", resp.status, resp.reason or "", req.url, elapsed_ms
    )
    return resp


class CoderTransport:
    """Shared HTTP client bound to one deployment URL, token and config."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        url: str,
        token: str,
        config: TransportConfig,
        *,
        agent: str,
    ) -> None:
        self._session = session
        self._url = url.rstrip("/")
        self._token = token
        self._config = config
        self._agent = agent
        self._server_hostname = server_hostname(config.settings.tls)

    @property
    def url(self) -> str:
        return self._url

    @property
    def token(self) -> str:
        return self._token

    @property
    def config(self) -> TransportConfig:
        return self._config

    @property
    def user_agent(self) -> str:
        return self._agent

    @property
    def closed(self) -> bool:
        return self._session.closed

    def url_for(self, path: str) -> str:
        return f"{self._url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, **kwargs: Any) -> _RequestContextManager:
        """Start a request against ``path``; use as an async context manager."""
        target = self.url_for(path)

        proxy = self._config.proxy
        if proxy is not None:
            proxy_url = proxy.selector(target)
            if proxy_url:
                kwargs["proxy"] = proxy_url
                if proxy.has_credentials():
                    kwargs["proxy_auth"] = aiohttp.BasicAuth(
                        proxy.username or "", proxy.password or ""
                    )

        if self._server_hostname:
            kwargs["server_hostname"] = self._server_hostname

        return self._session.request(method, target, **kwargs)

    async def close(self) -> None:
        await self._session.close()

    async def __aenter__(self) -> CoderTransport:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


def build_transport(
    url: str,
    token: str,
    config: TransportConfig,
    *,
    plugin_version: str,
) -> CoderTransport:
    """Build the transport for one deployment.

    Must be called from a coroutine; no network I/O happens here.

    Raises:
        TLSConfigurationError: If TLS material cannot be loaded.
    """
    ssl_context = coder_ssl_context(config.settings.tls)

    if config.proxy is not None:
        _LOGGER.debug(
            "Proxy selector installed (credentials %s)",
            "enabled" if config.proxy.has_credentials() else "disabled",
        )

    agent = user_agent(plugin_version)
    middlewares: tuple[Middleware, ...] = (
        session_token_middleware(token),
        user_agent_middleware(agent),
        header_command_middleware(url, config.settings.header_command),
        # Must stay last to log what the earlier middlewares added.
        logging_middleware,
    )

    session = aiohttp.ClientSession(
        connector=aiohttp.TCPConnector(ssl=ssl_context),
        middlewares=middlewares,
    )
    return CoderTransport(session, url, token, config, agent=agent)
