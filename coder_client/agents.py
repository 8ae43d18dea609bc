"""Agent resolution across workspaces.

The workspace listing leaves agents out when a workspace is off, so each
workspace's template version resources are fetched separately, the same
way ``coder config-ssh`` does. Otherwise hosts kept in an SSH config
would disappear whenever their workspace stopped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

from .errors import WorkspaceResponseError, reason_or
from .facade import CoderV2Facade
from .models import Workspace, WorkspaceResource, WorkspaceStatus, WorkspaceTransition
from .session import CoderSession
from .status import WorkspaceAndAgentStatus, WorkspaceVersionStatus

_LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


@dataclass(frozen=True)
class WorkspaceAgentModel:
    """A connectable (workspace, agent) pair.

    ``agent_id`` is None for a workspace whose resources declare no
    agents; ``name`` is then the workspace name instead of
    ``<workspace>.<agent>``.
    """

    agent_id: UUID | None
    workspace_id: UUID
    workspace_name: str
    name: str
    template_id: UUID
    template_name: str
    template_icon: str
    version_status: WorkspaceVersionStatus
    workspace_status: WorkspaceStatus
    agent_status: WorkspaceAndAgentStatus
    last_build_transition: WorkspaceTransition
    agent_os: str | None = None
    agent_arch: str | None = None
    home_directory: str | None = None


def to_agent_models(
    workspace: Workspace, resources: Sequence[WorkspaceResource] | None = None
) -> list[WorkspaceAgentModel]:
    """Combine a workspace with its resources into agent models.

    Args:
        workspace: Workspace snapshot from the listing.
        resources: Template version resources; defaults to the resources
            embedded in the latest build.
    """
    if resources is None:
        resources = workspace.latest_build.resources
    build = workspace.latest_build
    version_status = WorkspaceVersionStatus.from_workspace(workspace)

    models = [
        WorkspaceAgentModel(
            agent_id=agent.id,
            workspace_id=workspace.id,
            workspace_name=workspace.name,
            name=f"{workspace.name}.{agent.name}",
            template_id=workspace.template_id,
            template_name=workspace.template_name,
            template_icon=workspace.template_icon,
            version_status=version_status,
            workspace_status=build.status,
            agent_status=WorkspaceAndAgentStatus.from_workspace(workspace, agent),
            last_build_transition=build.transition,
            agent_os=agent.operating_system,
            agent_arch=agent.architecture,
            home_directory=agent.directory or agent.expanded_directory,
        )
        for resource in resources
        for agent in resource.agents or ()
    ]
    if models:
        return list(dict.fromkeys(models))

    return [
        WorkspaceAgentModel(
            agent_id=None,
            workspace_id=workspace.id,
            workspace_name=workspace.name,
            name=workspace.name,
            template_id=workspace.template_id,
            template_name=workspace.template_name,
            template_icon=workspace.template_icon,
            version_status=version_status,
            workspace_status=build.status,
            agent_status=WorkspaceAndAgentStatus.from_workspace(workspace),
            last_build_transition=build.transition,
        )
    ]


class AgentResolver:
    """Resolves agents for many workspaces with bounded concurrency.

    Any single failure cancels the outstanding lookups and is raised; a
    partial list is never returned.
    """

    def __init__(self, session: CoderSession, *, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._session = session
        self._max_workers = max_workers

    async def _agents_for(
        self,
        facade: CoderV2Facade,
        workspace: Workspace,
        semaphore: asyncio.Semaphore,
    ) -> list[WorkspaceAgentModel]:
        async with semaphore:
            response = await facade.template_version_resources(
                workspace.latest_build.template_version_id
            )
        if not response.is_successful or response.body is None:
            reason = reason_or(response.reason)
            raise WorkspaceResponseError(
                response.status,
                f"Unable to retrieve template resources for {workspace.name} "
                f"from {facade.url}: code {response.status}, reason: {reason}",
                url=facade.url,
                reason=reason,
            )
        return to_agent_models(workspace, response.body)

    async def resolve_agents(
        self, workspaces: Sequence[Workspace]
    ) -> list[WorkspaceAgentModel]:
        """Fetch resources once per workspace and derive agent models.

        Results follow the order of ``workspaces``.

        Raises:
            WorkspaceResponseError: If any workspace's resources could not
                be retrieved.
        """
        facade = self._session.require().facade
        if not workspaces:
            return []

        semaphore = asyncio.Semaphore(self._max_workers)
        tasks = [
            asyncio.create_task(self._agents_for(facade, workspace, semaphore))
            for workspace in workspaces
        ]
        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        for task in tasks:
            if not task.cancelled() and (err := task.exception()) is not None:
                raise err

        models = [model for task in tasks for model in task.result()]
        _LOGGER.debug(
            "Resolved %d agents across %d workspaces", len(models), len(workspaces)
        )
        return models
