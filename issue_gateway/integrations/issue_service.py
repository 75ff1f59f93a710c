"""HTTP client for the issue management service that owns issues and comments."""

from __future__ import annotations

import datetime as dt
from typing import Any
from uuid import UUID

from issue_gateway.core.config import settings
from issue_gateway.core.pagination import PageRequest, Sort
from issue_gateway.integrations.base import CallContext, ServiceClient
from issue_gateway.schemas.comment import CommentRequest
from issue_gateway.schemas.common import Page, UpdateResult
from issue_gateway.schemas.filters import IssueFilters
from issue_gateway.schemas.issue import IssueRequest, QuickIssueRequest, StatusUpdateRequest

Json = dict[str, Any]


def _as_list(payload: Any) -> list[Json]:
    return [item for item in payload if isinstance(item, dict)] if isinstance(payload, list) else []


def _as_dict(payload: Any) -> Json:
    return payload if isinstance(payload, dict) else {}


def _as_page(payload: Any) -> Page[Json]:
    return Page[Json].model_validate(_as_dict(payload))


def _as_update(payload: Any) -> UpdateResult[Json]:
    return UpdateResult[Json].model_validate(_as_dict(payload))


class IssueServiceClient(ServiceClient):
    service_name = "issue-service"

    def __init__(self, context: CallContext | None = None, **kwargs: Any) -> None:
        super().__init__(settings.ISSUE_SERVICE_URL, context, **kwargs)

    def create_issue(self, payload: IssueRequest) -> Json:
        return _as_dict(self._request("POST", "/issues", json=payload.to_wire()))

    def create_quick_issue(self, payload: QuickIssueRequest) -> Json:
        return _as_dict(self._request("POST", "/issues/quick", json=payload.to_wire()))

    def list_issues(self, filters: IssueFilters, page: PageRequest) -> Page[Json]:
        params = {**filters.to_params(), **page.to_params()}
        return _as_page(self._request("GET", "/issues", params=params))

    def grouped_issues_by_status(
        self,
        filters: IssueFilters,
        *,
        per_status_limit: int,
        status_pages: dict[str, int],
        sort: Sort,
    ) -> dict[str, Page[Json]]:
        params = {**filters.to_params(), "perStatusLimit": per_status_limit, "sort": sort.to_param()}
        payload = _as_dict(self._request("POST", "/issues/grouped", params=params, json=status_pages))
        return {str(status_id): _as_page(group) for status_id, group in payload.items()}

    def user_issues(self, user_id: str, project_id: UUID) -> list[Json]:
        return _as_list(self._request("GET", f"/users/{user_id}/projects/{project_id}/issues"))

    def issue_by_key(self, key: int, project_id: UUID) -> Json:
        params = {"key": key, "projectId": str(project_id)}
        return _as_dict(self._request("GET", "/issues/by-key", params=params))

    def issues_by_reporter(self, reporter: str, project_id: UUID, page: PageRequest) -> Page[Json]:
        params = {"reporter": reporter, "projectId": str(project_id), **page.to_params()}
        return _as_page(self._request("GET", "/issues/by-reporter", params=params))

    def get_issue(self, issue_id: UUID) -> Json:
        return _as_dict(self._request("GET", f"/issues/{issue_id}"))

    def child_issues(self, parent_id: UUID) -> Json:
        return _as_dict(self._request("GET", f"/issues/{parent_id}/children"))

    def issues_by_priority(self, priority_id: UUID) -> list[Json]:
        return _as_list(self._request("GET", f"/priorities/{priority_id}/issues"))

    def issues_by_status(self, status_id: str, project_id: UUID) -> list[Json]:
        return _as_list(self._request("GET", f"/projects/{project_id}/statuses/{status_id}/issues"))

    def project_issues(self, project_id: UUID, *, parent_only: bool = False) -> list[Json]:
        params = {"parentOnly": str(parent_only).lower()}
        return _as_list(self._request("GET", f"/projects/{project_id}/issues", params=params))

    def status_board(self, project_id: UUID, status_id: str | None, page: PageRequest) -> Json:
        params: dict[str, Any] = page.to_params()
        if status_id:
            params["statusId"] = status_id
        return _as_dict(self._request("GET", f"/projects/{project_id}/status-board", params=params))

    def update_issue(self, issue_id: UUID, payload: IssueRequest) -> UpdateResult[Json]:
        return _as_update(self._request("PUT", f"/issues/{issue_id}", json=payload.to_wire()))

    def delete_issue(self, issue_id: UUID) -> Json:
        return _as_dict(self._request("DELETE", f"/issues/{issue_id}"))

    def add_comment(self, issue_id: UUID, payload: CommentRequest) -> Json:
        return _as_dict(self._request("POST", f"/issues/{issue_id}/comments", json=payload.to_wire()))

    def update_comment(self, comment_id: UUID, payload: CommentRequest) -> UpdateResult[Json]:
        return _as_update(self._request("PUT", f"/comments/{comment_id}", json=payload.to_wire()))

    def delete_comment(self, comment_id: UUID) -> Json:
        return _as_dict(self._request("DELETE", f"/comments/{comment_id}"))

    def comments(self, issue_id: UUID) -> list[Json]:
        return _as_list(self._request("GET", f"/issues/{issue_id}/comments"))

    def update_status(self, payload: StatusUpdateRequest) -> UpdateResult[Json]:
        return _as_update(self._request("PATCH", "/issues/status", json=payload.to_wire()))

    def search(self, query: str, page: PageRequest, project_id: UUID | None) -> Page[Json]:
        params: dict[str, Any] = {"query": query, **page.to_params()}
        if project_id:
            params["projectId"] = str(project_id)
        return _as_page(self._request("GET", "/issues/search", params=params))

    def counts(
        self,
        *,
        tenant: str,
        from_date: dt.date | None,
        to_date: dt.date | None,
        project_id: UUID | None,
    ) -> Json:
        params: dict[str, Any] = {"tenant": tenant}
        if from_date:
            params["fromDate"] = from_date.isoformat()
        if to_date:
            params["toDate"] = to_date.isoformat()
        if project_id:
            params["projectId"] = str(project_id)
        return _as_dict(self._request("GET", "/issues/counts", params=params))

    def delete_attachment(self, attachment_id: UUID) -> None:
        self._request("DELETE", f"/attachments/{attachment_id}")

    def issues_by_user(self, user_id: str, project_id: UUID, page: PageRequest) -> Page[Json]:
        params = {"userId": user_id, "projectId": str(project_id), **page.to_params()}
        return _as_page(self._request("GET", "/issues/assigned", params=params))
