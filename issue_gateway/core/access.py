"""Authorization guards evaluated before any state-changing delegation."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from issue_gateway.core.config import settings
from issue_gateway.core.exceptions import InsufficientPermissionsError, MissingHeaderError
from issue_gateway.services.collaborators import ProjectAccessEvaluator


def project_id_of(issue: dict[str, Any]) -> str | None:
    value = issue.get("projectId")
    if value is None and isinstance(issue.get("project"), dict):
        value = issue["project"].get("id")
    return str(value) if value else None


def require_project_id(issue: dict[str, Any], issue_id: UUID | str) -> str:
    """Return the issue's current project, denying when it cannot be resolved."""
    project_id = project_id_of(issue)
    if project_id is None:
        raise InsufficientPermissionsError("project_unresolved", details={"issue_id": str(issue_id)})
    return project_id


def _as_uuid(value: UUID | str) -> UUID | str:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(value)
    except ValueError:
        return value


def ensure_can_modify_project(evaluator: ProjectAccessEvaluator, project_id: UUID | str) -> None:
    if not evaluator.can_modify_project(_as_uuid(project_id)):
        raise InsufficientPermissionsError("project_modification_denied", details={"project_id": str(project_id)})


def ensure_can_modify_issue(
    evaluator: ProjectAccessEvaluator,
    issue_id: UUID,
    current_issue: dict[str, Any],
    target_project_id: UUID,
) -> None:
    """Check the project the issue lives in now and, when it moves, the target."""
    current_project_id = require_project_id(current_issue, issue_id)
    ensure_can_modify_project(evaluator, current_project_id)
    if str(_as_uuid(current_project_id)) != str(target_project_id):
        ensure_can_modify_project(evaluator, target_project_id)


def ensure_project_access(evaluator: ProjectAccessEvaluator, project_header: str | None) -> None:
    project_id = (project_header or "").strip()
    if not project_id:
        raise MissingHeaderError(settings.PROJECT_ID_HEADER)
    evaluator.check_project_access_or_throw(project_id)


def ensure_issue_project_open(evaluator: ProjectAccessEvaluator, issue_id: UUID) -> None:
    evaluator.deny_if_project_completed_by_issue_id(issue_id)
