"""Issue and comment endpoints.

Endpoints are plain functions registered through ``ROUTES``; static paths
are listed before ``/{id}`` so they are matched first. Every mutating
endpoint runs the same sequence: validate the payload, run the access guard,
delegate to the issue service, then emit the activity entry.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Callable, NamedTuple, Sequence
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Body, Depends, File, Header, Path, Query, Response, UploadFile, status
from fastapi.params import Depends as DependsParam

from issue_gateway.core.access import (
    ensure_can_modify_issue,
    ensure_can_modify_project,
    ensure_issue_project_open,
    ensure_project_access,
    require_project_id,
)
from issue_gateway.core.config import settings
from issue_gateway.core.deps import (
    get_access_evaluator,
    get_audit_emitter,
    get_current_principal,
    get_email_ingestion,
    get_file_storage,
    get_issue_service,
)
from issue_gateway.core.exceptions import BadRequestError, MissingHeaderError, PayloadValidationError
from issue_gateway.core.pagination import (
    DEFAULT_SORT_FIELD,
    Sort,
    SortDirection,
    build_page_request,
    build_sort,
    clamp_page_size,
    normalize_status_pages,
    parse_sort_param,
)
from issue_gateway.core.rate_limit import rate_limit
from issue_gateway.core.sanitize import clean_optional, split_csv
from issue_gateway.core.security import Principal
from issue_gateway.core.validation import validate_payload
from issue_gateway.schemas.comment import CommentRequest, describe_deleted_comment
from issue_gateway.schemas.common import ok
from issue_gateway.schemas.email_config import EmailConfigurationRequest
from issue_gateway.schemas.filters import IssueFilters
from issue_gateway.schemas.issue import IssueRequest, QuickIssueRequest, StatusUpdateRequest
from issue_gateway.services.audit import ActivityAuditEmitter
from issue_gateway.services.collaborators import EmailIngestion, FileStorage, IssueService, ProjectAccessEvaluator

Envelope = dict[str, Any]


def _uuid_list(values: list[str] | None, field: str) -> tuple[UUID, ...]:
    items = split_csv(values) or []
    parsed: list[UUID] = []
    violations = []
    for item in items:
        try:
            parsed.append(UUID(item))
        except ValueError:
            violations.append({"field": field, "message": f"'{item}' is not a valid UUID", "type": "uuid_parsing"})
    if violations:
        raise PayloadValidationError(violations)
    return tuple(parsed)


def _issue_filters(
    status_ids: list[str] | None = Query(default=None, alias="statusIds"),
    priority_ids: list[str] | None = Query(default=None, alias="priorityIds"),
    work_type_ids: list[str] | None = Query(default=None, alias="workTypeIds"),
    reporters: list[str] | None = Query(default=None),
    assigned_to: str | None = Query(default=None, alias="assignedTo"),
    project_id: UUID | None = Query(default=None, alias="projectId"),
    sprint_id: str | None = Query(default=None, alias="sprintId"),
    search_text: str | None = Query(default=None, alias="searchText"),
) -> IssueFilters:
    return IssueFilters(
        status_ids=tuple(split_csv(status_ids) or ()),
        priority_ids=_uuid_list(priority_ids, "priorityIds"),
        work_type_ids=tuple(split_csv(work_type_ids) or ()),
        reporters=tuple(split_csv(reporters) or ()),
        assigned_to=clean_optional(assigned_to),
        project_id=project_id,
        sprint_id=clean_optional(sprint_id),
        search_text=clean_optional(search_text),
    )


# ----- creation -----


def create_issue(
    payload: Any = Body(...),
    issues: IssueService = Depends(get_issue_service),
    access: ProjectAccessEvaluator = Depends(get_access_evaluator),
    audit: ActivityAuditEmitter = Depends(get_audit_emitter),
) -> Envelope:
    request = validate_payload(IssueRequest, payload)
    ensure_can_modify_project(access, request.project_id)
    issue = issues.create_issue(request)
    audit.created(IssueRequest.entity_kind, issue)
    return ok("Issue created successfully")


def create_quick_issue(
    payload: Any = Body(...),
    issues: IssueService = Depends(get_issue_service),
    access: ProjectAccessEvaluator = Depends(get_access_evaluator),
    audit: ActivityAuditEmitter = Depends(get_audit_emitter),
) -> Envelope:
    request = validate_payload(QuickIssueRequest, payload)
    ensure_can_modify_project(access, request.project_id)
    issue = issues.create_quick_issue(request)
    audit.created(QuickIssueRequest.entity_kind, issue)
    return ok("Issue created successfully")


# ----- listings -----


def list_issues(
    filters: IssueFilters = Depends(_issue_filters),
    page: int = Query(default=0),
    size: int = Query(default=settings.DEFAULT_PAGE_SIZE),
    sort_by: str = Query(default=DEFAULT_SORT_FIELD, alias="sortBy"),
    direction: str = Query(default="asc"),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    page_request = build_page_request(page, size, sort_by, direction)
    return ok("Issues fetched successfully", issues.list_issues(filters, page_request))


def list_issues_grouped_by_status(
    filters: IssueFilters = Depends(_issue_filters),
    per_status_limit: int = Query(default=settings.DEFAULT_PER_STATUS_LIMIT, alias="perStatusLimit"),
    sort_by: str = Query(default=DEFAULT_SORT_FIELD, alias="sortBy"),
    direction: str = Query(default="asc"),
    status_page_map: dict[str, Any] | None = Body(default=None),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    if per_status_limit < 1:
        raise PayloadValidationError(
            [{"field": "perStatusLimit", "message": "Per status limit must be at least one", "type": "greater_than_equal"}]
        )
    grouped = issues.grouped_issues_by_status(
        filters,
        per_status_limit=clamp_page_size(per_status_limit),
        status_pages=normalize_status_pages(status_page_map),
        sort=build_sort(sort_by, direction),
    )
    return ok("Issues fetched successfully", grouped)


def get_user_issues(
    user_id: str = Path(..., min_length=1),
    project_id: UUID = Path(...),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    return ok("Issues fetched successfully", issues.user_issues(user_id, project_id))


def get_issue_by_key(
    key: int = Query(...),
    project_id: UUID = Query(..., alias="projectId"),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    return ok("Issue fetched by key successfully", issues.issue_by_key(key, project_id))


def get_issues_by_reporter(
    reporter: str = Query(..., min_length=1),
    project_id: UUID = Query(..., alias="projectId"),
    page: int = Query(default=0),
    size: int = Query(default=settings.DEFAULT_PAGE_SIZE),
    sort_by: str = Query(default=DEFAULT_SORT_FIELD, alias="sortBy"),
    direction: str = Query(default="asc"),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    page_request = build_page_request(page, size, sort_by, direction)
    return ok("All issues fetched by Reporter", issues.issues_by_reporter(reporter.strip(), project_id, page_request))


def search_issues(
    query: str = Query(...),
    page: int = Query(default=0),
    size: int = Query(default=settings.DEFAULT_PAGE_SIZE),
    sort_by: str = Query(default="title", alias="sortBy"),
    sort_dir: str = Query(default="asc", alias="sortDir"),
    project_id: UUID | None = Query(default=None, alias="projectId"),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    page_request = build_page_request(page, size, sort_by, sort_dir)
    return ok("Issues retrieved successfully", issues.search(query.strip(), page_request, project_id))


def get_counts(
    tenant: str | None = Header(default=None, alias=settings.TENANT_ID_HEADER),
    from_date: dt.date | None = Query(default=None, alias="fromDate"),
    to_date: dt.date | None = Query(default=None, alias="toDate"),
    project_id: UUID | None = Query(default=None, alias="projectId"),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    tenant = (tenant or "").strip()
    if not tenant:
        raise MissingHeaderError(settings.TENANT_ID_HEADER)
    if from_date and to_date and from_date > to_date:
        raise BadRequestError("invalid_date_range", details={"fromDate": from_date.isoformat(), "toDate": to_date.isoformat()})
    counts = issues.counts(tenant=tenant, from_date=from_date, to_date=to_date, project_id=project_id)
    return ok("Successfully retrieved counts", counts)


def get_child_issues(
    issue_id: UUID = Path(...),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    return ok("All the child issues fetched successfully", issues.child_issues(issue_id))


def get_issues_by_priority(
    priority_id: UUID = Path(...),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    return ok("Get the priority", issues.issues_by_priority(priority_id))


def get_issues_by_status(
    status_id: str = Path(..., min_length=1),
    project_id: UUID = Path(...),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    return ok("All issues fetched successfully", issues.issues_by_status(status_id, project_id))


def get_project_issues(
    project_id: UUID = Path(...),
    parent_only: bool = Query(default=False, alias="parentOnly"),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    return ok("Issues fetched successfully", issues.project_issues(project_id, parent_only=parent_only))


def get_project_status_board(
    project_id: UUID = Path(...),
    status_id: str | None = Query(default=None, alias="statusId"),
    page: int = Query(default=0),
    size: int = Query(default=settings.DEFAULT_PAGE_SIZE),
    sort_by: str = Query(default=DEFAULT_SORT_FIELD, alias="sortBy"),
    direction: str = Query(default="asc"),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    page_request = build_page_request(page, size, sort_by, direction)
    board = issues.status_board(project_id, clean_optional(status_id), page_request)
    return ok("Issues fetched successfully", board)


def get_issues_by_user(
    user_id: str = Path(..., min_length=1),
    project_id: UUID = Path(...),
    page: int = Query(default=0),
    size: int = Query(default=settings.DEFAULT_PAGE_SIZE),
    sort: str | None = Query(default=None),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    default_sort = Sort(field=DEFAULT_SORT_FIELD, direction=SortDirection.desc)
    page_request = build_page_request(page, size, sort=parse_sort_param(sort, default=default_sort))
    return ok("Issues fetched successfully", issues.issues_by_user(user_id, project_id, page_request))


def get_issue(
    issue_id: UUID = Path(...),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    return ok("Issue fetched successfully", issues.get_issue(issue_id))


# ----- issue mutations -----


def update_issue(
    issue_id: UUID = Path(...),
    payload: Any = Body(...),
    issues: IssueService = Depends(get_issue_service),
    access: ProjectAccessEvaluator = Depends(get_access_evaluator),
    audit: ActivityAuditEmitter = Depends(get_audit_emitter),
) -> Envelope:
    request = validate_payload(IssueRequest, payload)
    ensure_can_modify_issue(access, issue_id, issues.get_issue(issue_id), request.project_id)
    result = issues.update_issue(issue_id, request)
    audit.updated(IssueRequest.entity_kind, result)
    return ok("Issue updated successfully")


def delete_issue(
    issue_id: UUID = Path(...),
    project_header: str | None = Header(default=None, alias=settings.PROJECT_ID_HEADER),
    issues: IssueService = Depends(get_issue_service),
    access: ProjectAccessEvaluator = Depends(get_access_evaluator),
    audit: ActivityAuditEmitter = Depends(get_audit_emitter),
) -> Envelope:
    ensure_project_access(access, project_header)
    issue = issues.delete_issue(issue_id)
    audit.deleted(IssueRequest.entity_kind, issue)
    return ok("Issue deleted successfully")


def update_issue_status(
    payload: Any = Body(...),
    issues: IssueService = Depends(get_issue_service),
    access: ProjectAccessEvaluator = Depends(get_access_evaluator),
    audit: ActivityAuditEmitter = Depends(get_audit_emitter),
) -> Envelope:
    request = validate_payload(StatusUpdateRequest, payload)
    ensure_issue_project_open(access, request.issue_id)
    current_project_id = require_project_id(issues.get_issue(request.issue_id), request.issue_id)
    ensure_can_modify_project(access, current_project_id)
    result = issues.update_status(request)
    audit.updated(StatusUpdateRequest.entity_kind, result)
    return ok("Issue status updated successfully")


# ----- comments -----


def add_comment(
    issue_id: UUID = Path(...),
    payload: Any = Body(...),
    project_header: str | None = Header(default=None, alias=settings.PROJECT_ID_HEADER),
    issues: IssueService = Depends(get_issue_service),
    access: ProjectAccessEvaluator = Depends(get_access_evaluator),
    audit: ActivityAuditEmitter = Depends(get_audit_emitter),
) -> Envelope:
    request = validate_payload(CommentRequest, payload)
    ensure_project_access(access, project_header)
    comment = issues.add_comment(issue_id, request)
    audit.created(CommentRequest.entity_kind, comment)
    return ok("Comment added successfully", comment)


def update_comment(
    comment_id: UUID = Path(...),
    payload: Any = Body(...),
    project_header: str | None = Header(default=None, alias=settings.PROJECT_ID_HEADER),
    issues: IssueService = Depends(get_issue_service),
    access: ProjectAccessEvaluator = Depends(get_access_evaluator),
    audit: ActivityAuditEmitter = Depends(get_audit_emitter),
) -> Envelope:
    request = validate_payload(CommentRequest, payload)
    ensure_project_access(access, project_header)
    result = issues.update_comment(comment_id, request)
    audit.updated(CommentRequest.entity_kind, result)
    return ok("Comment updated successfully", result)


def delete_comment(
    comment_id: UUID = Path(...),
    project_header: str | None = Header(default=None, alias=settings.PROJECT_ID_HEADER),
    issues: IssueService = Depends(get_issue_service),
    access: ProjectAccessEvaluator = Depends(get_access_evaluator),
    audit: ActivityAuditEmitter = Depends(get_audit_emitter),
    principal: Principal = Depends(get_current_principal),
) -> Envelope:
    ensure_project_access(access, project_header)
    comment = issues.delete_comment(comment_id)
    audit.deleted(CommentRequest.entity_kind, describe_deleted_comment(principal.username, comment))
    return ok("Comment deleted successfully")


def list_comments(
    issue_id: UUID = Path(...),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    return ok("Comments fetched successfully", issues.comments(issue_id))


# ----- attachments -----


def upload_attachments(
    attachments: list[UploadFile] | None = File(default=None),
    storage: FileStorage = Depends(get_file_storage),
) -> Envelope:
    if not attachments:
        raise BadRequestError("attachments_required")
    if len(attachments) > settings.MAX_UPLOAD_FILES:
        raise PayloadValidationError(
            [
                {
                    "field": "attachments",
                    "message": f"At most {settings.MAX_UPLOAD_FILES} files can be uploaded at once",
                    "type": "too_long",
                }
            ]
        )
    files: list[tuple[str, bytes, str]] = []
    violations = []
    for index, upload in enumerate(attachments):
        # One byte past the limit is enough to reject the file.
        content = upload.file.read(settings.MAX_UPLOAD_BYTES + 1)
        name = (upload.filename or "").strip() or f"attachment-{index + 1}"
        if len(content) > settings.MAX_UPLOAD_BYTES:
            violations.append(
                {
                    "field": f"attachments.{index}",
                    "message": f"{name} exceeds the {settings.MAX_UPLOAD_BYTES} byte upload limit",
                    "type": "too_long",
                }
            )
            continue
        files.append((name, content, upload.content_type or "application/octet-stream"))
    if violations:
        raise PayloadValidationError(violations)
    return ok("Attachments uploaded successfully", storage.upload(files))


def delete_attachment_record(
    attachment_id: UUID = Path(...),
    issues: IssueService = Depends(get_issue_service),
) -> Envelope:
    issues.delete_attachment(attachment_id)
    return ok("Attachment deleted successfully")


def _required_file_name(file_name: str) -> str:
    cleaned = file_name.strip()
    if not cleaned:
        raise BadRequestError("file_name_required")
    return cleaned


def delete_stored_file(
    file_name: str = Query(..., alias="fileName"),
    storage: FileStorage = Depends(get_file_storage),
) -> Envelope:
    storage.delete(_required_file_name(file_name))
    return ok("Attachment deleted in bucket successfully")


def download_file(
    file_name: str = Query(..., alias="fileName"),
    storage: FileStorage = Depends(get_file_storage),
) -> Response:
    name = _required_file_name(file_name)
    content = storage.download(name)
    ascii_name = name.encode("ascii", "ignore").decode().replace('"', "").replace("\n", "") or "download"
    disposition = f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(name)}"
    return Response(
        content=content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": disposition},
    )


# ----- email ingestion -----


def create_email_configuration(
    payload: Any = Body(...),
    ingestion: EmailIngestion = Depends(get_email_ingestion),
) -> Envelope:
    request = validate_payload(EmailConfigurationRequest, payload)
    configuration = ingestion.create_configuration(request)
    configuration.pop("password", None)
    return ok("Email configuration created successfully", configuration)


class Route(NamedTuple):
    method: str
    path: str
    endpoint: Callable[..., Any]
    summary: str
    status_code: int = status.HTTP_200_OK
    dependencies: Sequence[DependsParam] = ()


ROUTES: tuple[Route, ...] = (
    Route("POST", "/create", create_issue, "Create a new issue", status.HTTP_201_CREATED),
    Route("POST", "/create/quick-ticket", create_quick_issue, "Create a quick issue", status.HTTP_201_CREATED),
    Route("GET", "", list_issues, "List issues with filters, paging and sorting"),
    Route("POST", "/all", list_issues_grouped_by_status, "List issues grouped by status"),
    Route("GET", "/user-issues/{user_id}/{project_id}", get_user_issues, "Get a user's issues in a project"),
    Route("GET", "/key", get_issue_by_key, "Get an issue by its key"),
    Route("GET", "/reporter", get_issues_by_reporter, "Get issues by reporter"),
    Route("GET", "/search", search_issues, "Search issues"),
    Route("GET", "/counts", get_counts, "Get issue and project counts"),
    Route("GET", "/download", download_file, "Download a stored file"),
    Route("GET", "/parent/{issue_id}", get_child_issues, "Get child issues"),
    Route("GET", "/priority/{priority_id}", get_issues_by_priority, "Get issues by priority"),
    Route("GET", "/status/{status_id}/project/{project_id}", get_issues_by_status, "Get issues by status"),
    Route("GET", "/project/{project_id}", get_project_issues, "Get issues of a project"),
    Route("GET", "/project/{project_id}/issues-by-status", get_project_status_board, "Get issues grouped by status"),
    Route("GET", "/user/{user_id}/project/{project_id}", get_issues_by_user, "Get a user's issues in a project, paginated"),
    Route("PATCH", "/update-status", update_issue_status, "Update issue status"),
    Route("POST", "/comment/{issue_id}", add_comment, "Add a comment to an issue"),
    Route("PUT", "/comment/{comment_id}", update_comment, "Update a comment"),
    Route("DELETE", "/comment/{comment_id}", delete_comment, "Delete a comment"),
    Route(
        "POST",
        "/upload-attachments",
        upload_attachments,
        "Upload attachments",
        status.HTTP_201_CREATED,
        (Depends(rate_limit("upload")),),
    ),
    Route("DELETE", "/attachments/{attachment_id}", delete_attachment_record, "Delete an attachment"),
    Route("DELETE", "/delete-attachment", delete_stored_file, "Delete an attachment in the bucket"),
    Route("POST", "/email-configs", create_email_configuration, "Create an email configuration", status.HTTP_201_CREATED),
    Route("GET", "/{issue_id}/comments", list_comments, "Get all comments of an issue"),
    Route("GET", "/{issue_id}", get_issue, "Get issue by ID"),
    Route("PUT", "/{issue_id}", update_issue, "Update an issue"),
    Route("DELETE", "/{issue_id}", delete_issue, "Delete an issue"),
)


def build_router(routes: Sequence[Route] = ROUTES) -> APIRouter:
    router = APIRouter(dependencies=[Depends(rate_limit()), Depends(get_current_principal)])
    for route in routes:
        router.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            status_code=route.status_code,
            summary=route.summary,
            dependencies=list(route.dependencies),
        )
    return router


router = build_router()
