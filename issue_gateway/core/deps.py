"""Common FastAPI dependencies for authentication and collaborator wiring."""

from __future__ import annotations

from fastapi import BackgroundTasks, Depends, Request

from issue_gateway.core.config import settings
from issue_gateway.core.exceptions import AuthenticationException, ExpiredTokenError
from issue_gateway.core.security import ACCESS_TOKEN_TYPE, Principal, decode_token, principal_from_claims
from issue_gateway.integrations.access import ProjectAccessClient
from issue_gateway.integrations.activity_log import ActivityLogClient
from issue_gateway.integrations.base import CallContext
from issue_gateway.integrations.email_ingestion import EmailIngestionClient
from issue_gateway.integrations.file_storage import FileStorageClient
from issue_gateway.integrations.issue_service import IssueServiceClient
from issue_gateway.services.audit import ActivityAuditEmitter
from issue_gateway.services.collaborators import (
    ActivityLogger,
    EmailIngestion,
    FileStorage,
    IssueService,
    ProjectAccessEvaluator,
)


def _extract_bearer_token(request: Request) -> str | None:
    authorization = request.headers.get("Authorization", "")
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    cleaned = token.strip()
    return cleaned or None


def _invalid_token() -> AuthenticationException:
    return AuthenticationException("invalid_token", error_code="INVALID_TOKEN", status_code=401)


def get_current_principal(request: Request) -> Principal:
    """Resolve the caller from the bearer token; every issue route depends on this."""
    token = _extract_bearer_token(request)
    if not token:
        raise AuthenticationException("not_authenticated", error_code="NOT_AUTHENTICATED", status_code=401)

    try:
        claims = decode_token(token)
    except ValueError as exc:
        if str(exc) == "expired_token":
            raise ExpiredTokenError("access_token_expired") from exc
        raise _invalid_token() from exc
    if claims.get("type") not in (None, ACCESS_TOKEN_TYPE):
        raise _invalid_token()
    principal = principal_from_claims(token, claims)
    if not principal.subject:
        raise _invalid_token()
    return principal


def get_call_context(request: Request, principal: Principal = Depends(get_current_principal)) -> CallContext:
    tenant_id = (request.headers.get(settings.TENANT_ID_HEADER) or "").strip() or None
    project_id = (request.headers.get(settings.PROJECT_ID_HEADER) or "").strip() or None
    return CallContext(token=principal.token, tenant_id=tenant_id, project_id=project_id)


def get_issue_service(context: CallContext = Depends(get_call_context)) -> IssueService:
    return IssueServiceClient(context)


def get_access_evaluator(context: CallContext = Depends(get_call_context)) -> ProjectAccessEvaluator:
    return ProjectAccessClient(context)


def get_activity_logger(context: CallContext = Depends(get_call_context)) -> ActivityLogger:
    return ActivityLogClient(context)


def get_file_storage(context: CallContext = Depends(get_call_context)) -> FileStorage:
    return FileStorageClient(context)


def get_email_ingestion(context: CallContext = Depends(get_call_context)) -> EmailIngestion:
    return EmailIngestionClient(context)


def get_audit_emitter(
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(get_current_principal),
    activity_logger: ActivityLogger = Depends(get_activity_logger),
) -> ActivityAuditEmitter:
    return ActivityAuditEmitter(
        activity_logger,
        principal,
        background_tasks=background_tasks if settings.ACTIVITY_LOG_IN_BACKGROUND else None,
    )
