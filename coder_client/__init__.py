"""Control-plane client for Coder deployments."""

__version__ = "0.1.0"

from .agents import AgentResolver, WorkspaceAgentModel, to_agent_models
from .errors import (
    AuthenticationResponseError,
    BuildInfoError,
    CoderClientError,
    CoderConnectionError,
    CoderDecodeError,
    CoderErrorKind,
    CoderResponseError,
    CoderTimeout,
    HeaderCommandError,
    NotAuthenticatedError,
    SessionStateError,
    TemplateResponseError,
    TLSConfigurationError,
    WorkspaceResponseError,
)
from .facade import ApiResponse, CoderV2Facade
from .lifecycle import WorkspaceLifecycle
from .models import (
    BuildInfo,
    CreateWorkspaceBuildRequest,
    Template,
    User,
    Workspace,
    WorkspaceAgent,
    WorkspaceBuild,
    WorkspaceResource,
    WorkspaceStatus,
    WorkspaceTransition,
)
from .session import Authenticated, CoderSession, Unauthenticated
from .settings import (
    CoderSettings,
    ProxyValues,
    SettingsLoadError,
    TLSSettings,
    TransportConfig,
    load_settings,
    static_proxy_selector,
)
from .status import WorkspaceAndAgentStatus, WorkspaceVersionStatus
from .transport import CoderTransport, build_transport, user_agent

__all__ = [
    "AgentResolver",
    "ApiResponse",
    "Authenticated",
    "AuthenticationResponseError",
    "BuildInfo",
    "BuildInfoError",
    "CoderClientError",
    "CoderConnectionError",
    "CoderDecodeError",
    "CoderErrorKind",
    "CoderResponseError",
    "CoderSession",
    "CoderSettings",
    "CoderTimeout",
    "CoderTransport",
    "CoderV2Facade",
    "CreateWorkspaceBuildRequest",
    "HeaderCommandError",
    "NotAuthenticatedError",
    "ProxyValues",
    "SessionStateError",
    "SettingsLoadError",
    "TLSConfigurationError",
    "TLSSettings",
    "Template",
    "TemplateResponseError",
    "TransportConfig",
    "Unauthenticated",
    "User",
    "Workspace",
    "WorkspaceAgent",
    "WorkspaceAgentModel",
    "WorkspaceAndAgentStatus",
    "WorkspaceBuild",
    "WorkspaceLifecycle",
    "WorkspaceResource",
    "WorkspaceResponseError",
    "WorkspaceStatus",
    "WorkspaceTransition",
    "WorkspaceVersionStatus",
    "__version__",
    "build_transport",
    "load_settings",
    "static_proxy_selector",
    "to_agent_models",
    "user_agent",
]
