"""Client-side statuses derived from workspace builds and agents."""

from __future__ import annotations

from enum import Enum

from .models import (
    Workspace,
    WorkspaceAgent,
    WorkspaceAgentLifecycleState,
    WorkspaceAgentStatus,
    WorkspaceStatus,
)


class WorkspaceVersionStatus(Enum):
    """Whether a workspace runs its template's active version."""

    UPDATED = "updated"
    OUTDATED = "outdated"

    @classmethod
    def from_workspace(cls, workspace: Workspace) -> WorkspaceVersionStatus:
        return cls.OUTDATED if workspace.outdated else cls.UPDATED


class WorkspaceAndAgentStatus(Enum):
    """Combined status of a workspace build and one of its agents."""

    QUEUED = "queued"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    FAILED = "failed"
    CANCELING = "canceling"
    CANCELED = "canceled"
    DELETING = "deleting"
    DELETED = "deleted"

    # Agent connection
    CONNECTING = "connecting"
    DISCONNECTED = "disconnected"
    TIMEOUT = "timeout"

    # Agent lifecycle, once connected
    CREATED = "created"
    AGENT_STARTING = "agent_starting"
    START_TIMEOUT = "start_timeout"
    START_ERROR = "start_error"
    READY = "ready"
    SHUTTING_DOWN = "shutting_down"
    SHUTDOWN_TIMEOUT = "shutdown_timeout"
    SHUTDOWN_ERROR = "shutdown_error"
    OFF = "off"

    @classmethod
    def from_workspace(
        cls, workspace: Workspace, agent: WorkspaceAgent | None = None
    ) -> WorkspaceAndAgentStatus:
        """Derive the status shown for ``agent`` in ``workspace``.

        The build status wins unless the build is running, in which case
        the agent's connection and lifecycle refine it.
        """
        status = workspace.latest_build.status
        if status is WorkspaceStatus.PENDING:
            return cls.QUEUED
        if status is not WorkspaceStatus.RUNNING:
            return cls(status.value)
        if agent is None:
            return cls.RUNNING

        if agent.status is WorkspaceAgentStatus.CONNECTED:
            return _LIFECYCLE_STATUS.get(agent.lifecycle_state, cls.READY)
        if agent.status is WorkspaceAgentStatus.CONNECTING:
            return cls.CONNECTING
        if agent.status is WorkspaceAgentStatus.TIMEOUT:
            return cls.TIMEOUT
        return cls.DISCONNECTED

    def ready(self) -> bool:
        """Return True when a client can connect to the agent."""
        return self in _READY

    def pending(self) -> bool:
        """Return True while the status is expected to change on its own."""
        return self in _PENDING


_LIFECYCLE_STATUS: dict[WorkspaceAgentLifecycleState | None, WorkspaceAndAgentStatus] = {
    WorkspaceAgentLifecycleState.CREATED: WorkspaceAndAgentStatus.CREATED,
    WorkspaceAgentLifecycleState.STARTING: WorkspaceAndAgentStatus.AGENT_STARTING,
    WorkspaceAgentLifecycleState.START_TIMEOUT: WorkspaceAndAgentStatus.START_TIMEOUT,
    WorkspaceAgentLifecycleState.START_ERROR: WorkspaceAndAgentStatus.START_ERROR,
    WorkspaceAgentLifecycleState.READY: WorkspaceAndAgentStatus.READY,
    WorkspaceAgentLifecycleState.SHUTTING_DOWN: WorkspaceAndAgentStatus.SHUTTING_DOWN,
    WorkspaceAgentLifecycleState.SHUTDOWN_TIMEOUT: WorkspaceAndAgentStatus.SHUTDOWN_TIMEOUT,
    WorkspaceAgentLifecycleState.SHUTDOWN_ERROR: WorkspaceAndAgentStatus.SHUTDOWN_ERROR,
    WorkspaceAgentLifecycleState.OFF: WorkspaceAndAgentStatus.OFF,
}

_READY = frozenset(
    {
        WorkspaceAndAgentStatus.READY,
        WorkspaceAndAgentStatus.START_TIMEOUT,
        WorkspaceAndAgentStatus.START_ERROR,
    }
)

_PENDING = frozenset(
    {
        WorkspaceAndAgentStatus.QUEUED,
        WorkspaceAndAgentStatus.STARTING,
        WorkspaceAndAgentStatus.STOPPING,
        WorkspaceAndAgentStatus.CANCELING,
        WorkspaceAndAgentStatus.DELETING,
        WorkspaceAndAgentStatus.CONNECTING,
        WorkspaceAndAgentStatus.CREATED,
        WorkspaceAndAgentStatus.AGENT_STARTING,
        WorkspaceAndAgentStatus.SHUTTING_DOWN,
    }
)
