"""Typed bindings for Coder v2 API payloads.

Each model decodes from and encodes to the server's snake_case JSON.
Models are value snapshots: the client never merges successive reads.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from .convert import (
    format_instant,
    optional_instant,
    optional_instant_str,
    optional_uuid,
    parse_instant,
)


class WorkspaceTransition(Enum):
    """Direction of a workspace build."""

    START = "start"
    STOP = "stop"
    DELETE = "delete"


class WorkspaceStatus(Enum):
    """Status of a workspace's latest build."""

    PENDING = "pending"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    FAILED = "failed"
    CANCELING = "canceling"
    CANCELED = "canceled"
    DELETING = "deleting"
    DELETED = "deleted"


class ProvisionerJobStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    CANCELING = "canceling"
    CANCELED = "canceled"
    FAILED = "failed"


class WorkspaceAgentStatus(Enum):
    """Connection status of an agent as seen by the server."""

    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    TIMEOUT = "timeout"


class WorkspaceAgentLifecycleState(Enum):
    """Startup/shutdown lifecycle reported by the agent itself."""

    CREATED = "created"
    STARTING = "starting"
    START_TIMEOUT = "start_timeout"
    START_ERROR = "start_error"
    READY = "ready"
    SHUTTING_DOWN = "shutting_down"
    SHUTDOWN_TIMEOUT = "shutdown_timeout"
    SHUTDOWN_ERROR = "shutdown_error"
    OFF = "off"


@dataclass(frozen=True)
class Role:
    name: str
    display_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Role:
        return cls(name=data["name"], display_name=data.get("display_name", ""))

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "display_name": self.display_name}


@dataclass(frozen=True)
class User:
    """The authenticated user.

    Attributes:
        id: User UUID.
        username: Login name.
        email: Email address.
        created_at: Account creation instant.
        status: Account status (e.g., "active").
        organization_ids: Organizations the user belongs to.
        roles: Site-wide roles.
    """

    id: UUID
    username: str
    email: str
    created_at: datetime
    status: str
    organization_ids: tuple[UUID, ...] = ()
    roles: tuple[Role, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        return cls(
            id=UUID(data["id"]),
            username=data["username"],
            email=data.get("email", ""),
            created_at=parse_instant(data["created_at"]),
            status=data.get("status", ""),
            organization_ids=tuple(UUID(o) for o in data.get("organization_ids") or []),
            roles=tuple(Role.from_dict(r) for r in data.get("roles") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "username": self.username,
            "email": self.email,
            "created_at": format_instant(self.created_at),
            "status": self.status,
            "organization_ids": [str(o) for o in self.organization_ids],
            "roles": [r.to_dict() for r in self.roles],
        }


@dataclass(frozen=True)
class BuildInfo:
    external_url: str
    version: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BuildInfo:
        return cls(external_url=data.get("external_url", ""), version=data["version"])


@dataclass(frozen=True)
class ProvisionerJob:
    """Server-side job executing a build."""

    id: UUID
    created_at: datetime
    status: ProvisionerJobStatus
    started_at: datetime | None = None
    completed_at: datetime | None = None
    canceled_at: datetime | None = None
    error: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProvisionerJob:
        return cls(
            id=UUID(data["id"]),
            created_at=parse_instant(data["created_at"]),
            status=ProvisionerJobStatus(data["status"]),
            started_at=optional_instant(data.get("started_at")),
            completed_at=optional_instant(data.get("completed_at")),
            canceled_at=optional_instant(data.get("canceled_at")),
            error=data.get("error") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "created_at": format_instant(self.created_at),
            "status": self.status.value,
            "started_at": optional_instant_str(self.started_at),
            "completed_at": optional_instant_str(self.completed_at),
            "canceled_at": optional_instant_str(self.canceled_at),
            "error": self.error,
        }


@dataclass(frozen=True)
class WorkspaceAgent:
    """An agent process inside a workspace resource."""

    id: UUID
    name: str
    status: WorkspaceAgentStatus
    resource_id: UUID | None = None
    created_at: datetime | None = None
    lifecycle_state: WorkspaceAgentLifecycleState | None = None
    operating_system: str | None = None
    architecture: str | None = None
    directory: str | None = None
    expanded_directory: str | None = None
    version: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkspaceAgent:
        lifecycle = data.get("lifecycle_state")
        return cls(
            id=UUID(data["id"]),
            name=data["name"],
            status=WorkspaceAgentStatus(data["status"]),
            resource_id=optional_uuid(data.get("resource_id")),
            created_at=optional_instant(data.get("created_at")),
            lifecycle_state=WorkspaceAgentLifecycleState(lifecycle) if lifecycle else None,
            operating_system=data.get("operating_system"),
            architecture=data.get("architecture"),
            directory=data.get("directory") or None,
            expanded_directory=data.get("expanded_directory") or None,
            version=data.get("version", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "status": self.status.value,
            "resource_id": str(self.resource_id) if self.resource_id else None,
            "created_at": optional_instant_str(self.created_at),
            "lifecycle_state": self.lifecycle_state.value if self.lifecycle_state else None,
            "operating_system": self.operating_system,
            "architecture": self.architecture,
            "directory": self.directory,
            "expanded_directory": self.expanded_directory,
            "version": self.version,
        }


@dataclass(frozen=True)
class WorkspaceResource:
    """A provisioned resource; compute resources carry agents."""

    id: UUID
    name: str
    type: str
    workspace_transition: WorkspaceTransition
    created_at: datetime | None = None
    job_id: UUID | None = None
    hide: bool = False
    icon: str = ""
    agents: tuple[WorkspaceAgent, ...] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkspaceResource:
        agents = data.get("agents")
        return cls(
            id=UUID(data["id"]),
            name=data["name"],
            type=data["type"],
            workspace_transition=WorkspaceTransition(data["workspace_transition"]),
            created_at=optional_instant(data.get("created_at")),
            job_id=optional_uuid(data.get("job_id")),
            hide=data.get("hide", False),
            icon=data.get("icon", ""),
            agents=(
                tuple(WorkspaceAgent.from_dict(a) for a in agents)
                if agents is not None
                else None
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "type": self.type,
            "workspace_transition": self.workspace_transition.value,
            "created_at": optional_instant_str(self.created_at),
            "job_id": str(self.job_id) if self.job_id else None,
            "hide": self.hide,
            "icon": self.icon,
            "agents": (
                [a.to_dict() for a in self.agents] if self.agents is not None else None
            ),
        }


@dataclass(frozen=True)
class WorkspaceBuild:
    """Record produced by a transition request.

    Attributes:
        id: Build UUID.
        workspace_id: Workspace the build belongs to.
        template_version_id: Template version the build runs.
        build_number: Monotonic per-workspace build counter.
        transition: Direction of the build.
        status: Workspace status derived from the build job.
        job: Provisioner job executing the build.
        resources: Resources the build produced (may omit agents when off).
    """

    id: UUID
    created_at: datetime
    updated_at: datetime
    workspace_id: UUID
    workspace_name: str
    template_version_id: UUID
    build_number: int
    transition: WorkspaceTransition
    status: WorkspaceStatus
    job: ProvisionerJob
    initiator_id: UUID | None = None
    initiator_name: str = ""
    reason: str = ""
    resources: tuple[WorkspaceResource, ...] = ()
    deadline: datetime | None = None
    daily_cost: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkspaceBuild:
        return cls(
            id=UUID(data["id"]),
            created_at=parse_instant(data["created_at"]),
            updated_at=parse_instant(data["updated_at"]),
            workspace_id=UUID(data["workspace_id"]),
            workspace_name=data.get("workspace_name", ""),
            template_version_id=UUID(data["template_version_id"]),
            build_number=data.get("build_number", 0),
            transition=WorkspaceTransition(data["transition"]),
            status=WorkspaceStatus(data["status"]),
            job=ProvisionerJob.from_dict(data["job"]),
            initiator_id=optional_uuid(data.get("initiator_id")),
            initiator_name=data.get("initiator_name", ""),
            reason=data.get("reason", ""),
            resources=tuple(
                WorkspaceResource.from_dict(r) for r in data.get("resources") or []
            ),
            deadline=optional_instant(data.get("deadline")),
            daily_cost=data.get("daily_cost", 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "created_at": format_instant(self.created_at),
            "updated_at": format_instant(self.updated_at),
            "workspace_id": str(self.workspace_id),
            "workspace_name": self.workspace_name,
            "template_version_id": str(self.template_version_id),
            "build_number": self.build_number,
            "transition": self.transition.value,
            "status": self.status.value,
            "job": self.job.to_dict(),
            "initiator_id": str(self.initiator_id) if self.initiator_id else None,
            "initiator_name": self.initiator_name,
            "reason": self.reason,
            "resources": [r.to_dict() for r in self.resources],
            "deadline": optional_instant_str(self.deadline),
            "daily_cost": self.daily_cost,
        }


@dataclass(frozen=True)
class Workspace:
    """A workspace owned by the authenticated user."""

    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime
    owner_id: UUID
    owner_name: str
    template_id: UUID
    template_name: str
    latest_build: WorkspaceBuild
    template_display_name: str = ""
    template_icon: str = ""
    outdated: bool = False
    last_used_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Workspace:
        return cls(
            id=UUID(data["id"]),
            name=data["name"],
            created_at=parse_instant(data["created_at"]),
            updated_at=parse_instant(data["updated_at"]),
            owner_id=UUID(data["owner_id"]),
            owner_name=data.get("owner_name", ""),
            template_id=UUID(data["template_id"]),
            template_name=data.get("template_name", ""),
            latest_build=WorkspaceBuild.from_dict(data["latest_build"]),
            template_display_name=data.get("template_display_name", ""),
            template_icon=data.get("template_icon", ""),
            outdated=data.get("outdated", False),
            last_used_at=optional_instant(data.get("last_used_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "created_at": format_instant(self.created_at),
            "updated_at": format_instant(self.updated_at),
            "owner_id": str(self.owner_id),
            "owner_name": self.owner_name,
            "template_id": str(self.template_id),
            "template_name": self.template_name,
            "latest_build": self.latest_build.to_dict(),
            "template_display_name": self.template_display_name,
            "template_icon": self.template_icon,
            "outdated": self.outdated,
            "last_used_at": optional_instant_str(self.last_used_at),
        }


@dataclass(frozen=True)
class Template:
    """A template and its currently active version."""

    id: UUID
    name: str
    active_version_id: UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None
    organization_id: UUID | None = None
    display_name: str = ""
    provisioner: str = ""
    description: str = ""
    icon: str = ""
    created_by_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Template:
        return cls(
            id=UUID(data["id"]),
            name=data["name"],
            active_version_id=UUID(data["active_version_id"]),
            created_at=optional_instant(data.get("created_at")),
            updated_at=optional_instant(data.get("updated_at")),
            organization_id=optional_uuid(data.get("organization_id")),
            display_name=data.get("display_name", ""),
            provisioner=data.get("provisioner", ""),
            description=data.get("description", ""),
            icon=data.get("icon", ""),
            created_by_name=data.get("created_by_name", ""),
        )


@dataclass(frozen=True)
class CreateWorkspaceBuildRequest:
    """Body of a build-creation request.

    Only ``transition`` and, for updates, ``template_version_id`` vary in
    practice; unset optional fields are left out of the payload.
    """

    transition: WorkspaceTransition
    template_version_id: UUID | None = None
    dry_run: bool | None = None
    provisioner_state: str | None = None
    orphan: bool | None = None
    rich_parameter_values: list[dict[str, str]] | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"transition": self.transition.value}
        if self.template_version_id is not None:
            payload["template_version_id"] = str(self.template_version_id)
        if self.dry_run is not None:
            payload["dry_run"] = self.dry_run
        if self.provisioner_state is not None:
            payload["state"] = self.provisioner_state
        if self.orphan is not None:
            payload["orphan"] = self.orphan
        if self.rich_parameter_values is not None:
            payload["rich_parameter_values"] = self.rich_parameter_values
        return payload
