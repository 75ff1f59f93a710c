"""HTTP client for the project access evaluator."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from issue_gateway.core.config import settings
from issue_gateway.core.exceptions import InsufficientPermissionsError, ProjectCompletedError
from issue_gateway.integrations.base import CallContext, ServiceClient


def _allowed(payload: Any) -> bool:
    return isinstance(payload, dict) and payload.get("allowed") is True


class ProjectAccessClient(ServiceClient):
    service_name = "access-service"

    def __init__(self, context: CallContext | None = None, **kwargs: Any) -> None:
        super().__init__(settings.ACCESS_SERVICE_URL, context, **kwargs)

    def can_modify_project(self, project_id: UUID) -> bool:
        return _allowed(self._request("GET", f"/access/projects/{project_id}/modify"))

    def check_project_access_or_throw(self, project_id: str | None) -> None:
        if not project_id or not _allowed(self._request("GET", f"/access/projects/{project_id}")):
            raise InsufficientPermissionsError("project_access_denied", details={"project_id": project_id})

    def deny_if_project_completed_by_issue_id(self, issue_id: UUID) -> None:
        # The evaluator resolves the issue's current project server side.
        payload = self._request("GET", f"/access/issues/{issue_id}/project")
        state = payload if isinstance(payload, dict) else {}
        if state.get("completed"):
            project_id = state.get("projectId")
            raise ProjectCompletedError(issue_id=str(issue_id), project_id=str(project_id) if project_id else None)
