"""Interfaces of the services the gateway delegates to.

The gateway owns none of the data behind these calls. Production wiring uses
the HTTP clients in ``issue_gateway.integrations``; tests swap in fakes via
FastAPI dependency overrides.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Protocol
from uuid import UUID

from issue_gateway.core.pagination import PageRequest, Sort
from issue_gateway.schemas.activity import ActivityEntry
from issue_gateway.schemas.comment import CommentRequest
from issue_gateway.schemas.common import Page, UpdateResult
from issue_gateway.schemas.email_config import EmailConfigurationRequest
from issue_gateway.schemas.filters import IssueFilters
from issue_gateway.schemas.issue import AttachmentRef, IssueRequest, QuickIssueRequest, StatusUpdateRequest

Json = dict[str, Any]


class IssueService(Protocol):
    def create_issue(self, payload: IssueRequest) -> Json: ...

    def create_quick_issue(self, payload: QuickIssueRequest) -> Json: ...

    def list_issues(self, filters: IssueFilters, page: PageRequest) -> Page[Json]: ...

    def grouped_issues_by_status(
        self,
        filters: IssueFilters,
        *,
        per_status_limit: int,
        status_pages: dict[str, int],
        sort: Sort,
    ) -> dict[str, Page[Json]]: ...

    def user_issues(self, user_id: str, project_id: UUID) -> list[Json]: ...

    def issue_by_key(self, key: int, project_id: UUID) -> Json: ...

    def issues_by_reporter(self, reporter: str, project_id: UUID, page: PageRequest) -> Page[Json]: ...

    def get_issue(self, issue_id: UUID) -> Json: ...

    def child_issues(self, parent_id: UUID) -> Json: ...

    def issues_by_priority(self, priority_id: UUID) -> list[Json]: ...

    def issues_by_status(self, status_id: str, project_id: UUID) -> list[Json]: ...

    def project_issues(self, project_id: UUID, *, parent_only: bool = False) -> list[Json]: ...

    def status_board(self, project_id: UUID, status_id: str | None, page: PageRequest) -> Json: ...

    def update_issue(self, issue_id: UUID, payload: IssueRequest) -> UpdateResult[Json]: ...

    def delete_issue(self, issue_id: UUID) -> Json: ...

    def add_comment(self, issue_id: UUID, payload: CommentRequest) -> Json: ...

    def update_comment(self, comment_id: UUID, payload: CommentRequest) -> UpdateResult[Json]: ...

    def delete_comment(self, comment_id: UUID) -> Json: ...

    def comments(self, issue_id: UUID) -> list[Json]: ...

    def update_status(self, payload: StatusUpdateRequest) -> UpdateResult[Json]: ...

    def search(self, query: str, page: PageRequest, project_id: UUID | None) -> Page[Json]: ...

    def counts(
        self,
        *,
        tenant: str,
        from_date: dt.date | None,
        to_date: dt.date | None,
        project_id: UUID | None,
    ) -> Json: ...

    def delete_attachment(self, attachment_id: UUID) -> None: ...

    def issues_by_user(self, user_id: str, project_id: UUID, page: PageRequest) -> Page[Json]: ...


class ProjectAccessEvaluator(Protocol):
    def can_modify_project(self, project_id: UUID) -> bool: ...

    def check_project_access_or_throw(self, project_id: str | None) -> None: ...

    def deny_if_project_completed_by_issue_id(self, issue_id: UUID) -> None: ...


class ActivityLogger(Protocol):
    def log_activity(self, entry: ActivityEntry) -> None: ...


class FileStorage(Protocol):
    def upload(self, files: list[tuple[str, bytes, str]]) -> list[AttachmentRef]:
        """Store ``(file name, content, content type)`` triples."""
        ...

    def delete(self, file_name: str) -> None: ...

    def download(self, file_name: str) -> bytes: ...


class EmailIngestion(Protocol):
    def create_configuration(self, payload: EmailConfigurationRequest) -> Json: ...
