"""Client error types for Coder deployment interactions.

Every error carries a ``kind`` so callers can branch on what failed
without matching on the class hierarchy.
"""

from __future__ import annotations

from enum import Enum


class CoderErrorKind(Enum):
    """Category of a client failure."""

    AUTHENTICATION = "authentication"
    WORKSPACE = "workspace"
    TEMPLATE = "template"
    FATAL = "fatal"
    NOT_AUTHENTICATED = "not_authenticated"
    CONNECTION = "connection"
    TIMEOUT = "timeout"
    CONFIGURATION = "configuration"


NO_REASON = "no reason provided"


class CoderClientError(Exception):
    """Base error for Coder client failures."""

    kind: CoderErrorKind = CoderErrorKind.FATAL


class CoderTimeout(CoderClientError):
    """Timeout while communicating with the deployment."""

    kind = CoderErrorKind.TIMEOUT


class CoderConnectionError(CoderClientError):
    """Network connection to the deployment failed."""

    kind = CoderErrorKind.CONNECTION


class TLSConfigurationError(CoderClientError):
    """TLS material could not be loaded into a context."""

    kind = CoderErrorKind.CONFIGURATION


class HeaderCommandError(CoderClientError):
    """The custom header command failed or printed malformed output."""

    kind = CoderErrorKind.CONFIGURATION


class NotAuthenticatedError(CoderClientError):
    """An operation was attempted before the session authenticated."""

    kind = CoderErrorKind.NOT_AUTHENTICATED


class SessionStateError(CoderClientError):
    """The session was asked to authenticate a second time."""


class CoderDecodeError(CoderClientError):
    """A successful response carried a body the client could not decode."""


class CoderResponseError(CoderClientError):
    """HTTP response error from the deployment."""

    def __init__(self, status: int, message: str, *, url: str, reason: str) -> None:
        super().__init__(message)
        self.status = status
        self.url = url
        self.reason = reason


class AuthenticationResponseError(CoderResponseError):
    """Fetching the current user failed."""

    kind = CoderErrorKind.AUTHENTICATION


class WorkspaceResponseError(CoderResponseError):
    """Listing, resolving agents for, or building a workspace failed."""

    kind = CoderErrorKind.WORKSPACE


class TemplateResponseError(CoderResponseError):
    """Template lookup failed."""

    kind = CoderErrorKind.TEMPLATE


class BuildInfoError(CoderResponseError):
    """Build information could not be retrieved; not recoverable here."""

    kind = CoderErrorKind.FATAL


def reason_or(reason: str | None, fallback: str = NO_REASON) -> str:
    """Return the server-supplied reason, or ``fallback`` when it is blank."""
    if reason is None or not reason.strip():
        return fallback
    return reason
