"""Workspace enumeration and build transitions."""

from __future__ import annotations

import logging
from http import HTTPStatus
from uuid import UUID

from .errors import TemplateResponseError, WorkspaceResponseError, reason_or
from .models import (
    CreateWorkspaceBuildRequest,
    Template,
    Workspace,
    WorkspaceBuild,
    WorkspaceTransition,
)
from .session import CoderSession

_LOGGER = logging.getLogger(__name__)

OWNER_ME_QUERY = "owner:me"


class WorkspaceLifecycle:
    """Lists the caller's workspaces and starts, stops or updates them.

    A build result is returned as soon as the server accepts it; waiting
    for the build to finish is left to the caller.
    """

    def __init__(self, session: CoderSession) -> None:
        self._session = session

    async def list_workspaces(self) -> list[Workspace]:
        """Retrieve the workspaces owned by the authenticated user.

        Raises:
            WorkspaceResponseError: If workspaces could not be retrieved.
        """
        facade = self._session.require().facade
        response = await facade.workspaces(OWNER_ME_QUERY)
        if not response.is_successful or response.body is None:
            reason = reason_or(response.reason)
            raise WorkspaceResponseError(
                response.status,
                f"Unable to retrieve workspaces from {facade.url}: "
                f"code {response.status}, reason: {reason}",
                url=facade.url,
                reason=reason,
            )
        return response.body

    async def template(self, template_id: UUID) -> Template:
        """Retrieve a template to learn its active version.

        Raises:
            TemplateResponseError: If the template could not be retrieved.
        """
        facade = self._session.require().facade
        response = await facade.template(template_id)
        if not response.is_successful or response.body is None:
            reason = reason_or(response.reason)
            raise TemplateResponseError(
                response.status,
                f"Unable to retrieve template with ID {template_id} from {facade.url}, "
                f"code: {response.status}, reason: {reason}",
                url=facade.url,
                reason=reason,
            )
        return response.body

    async def transition(
        self,
        workspace_id: UUID,
        workspace_name: str,
        kind: WorkspaceTransition,
        template_version_id: UUID | None = None,
        *,
        action: str = "build",
    ) -> WorkspaceBuild:
        """Request a build moving the workspace in direction ``kind``.

        Only 201 Created counts as success; any other status, other 2xx
        codes included, is a failure.

        Raises:
            WorkspaceResponseError: If the build was not created.
        """
        facade = self._session.require().facade
        request = CreateWorkspaceBuildRequest(
            transition=kind, template_version_id=template_version_id
        )
        response = await facade.create_workspace_build(workspace_id, request)
        if response.status != HTTPStatus.CREATED or response.body is None:
            reason = reason_or(response.reason)
            raise WorkspaceResponseError(
                response.status,
                f"Unable to {action} workspace {workspace_name} on {facade.url}, "
                f"code: {response.status}, reason: {reason}",
                url=facade.url,
                reason=reason,
            )

        _LOGGER.info(
            "Created %s build #%d for workspace %s",
            kind.value,
            response.body.build_number,
            workspace_name,
        )
        return response.body

    async def start_workspace(self, workspace_id: UUID, workspace_name: str) -> WorkspaceBuild:
        return await self.transition(
            workspace_id, workspace_name, WorkspaceTransition.START, action="build"
        )

    async def stop_workspace(self, workspace_id: UUID, workspace_name: str) -> WorkspaceBuild:
        return await self.transition(
            workspace_id, workspace_name, WorkspaceTransition.STOP, action="stop"
        )

    async def update_workspace(
        self,
        workspace_id: UUID,
        workspace_name: str,
        last_transition: WorkspaceTransition,
        template_id: UUID,
    ) -> WorkspaceBuild:
        """Rebuild the workspace on its template's active version.

        The build keeps ``last_transition`` as its direction, so a stopped
        workspace is updated without being started.

        Raises:
            TemplateResponseError: If the template lookup fails.
            WorkspaceResponseError: If the build was not created.
        """
        template = await self.template(template_id)
        return await self.transition(
            workspace_id,
            workspace_name,
            last_transition,
            template.active_version_id,
            action="update",
        )
