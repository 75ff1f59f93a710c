from __future__ import annotations

import sys
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from fastapi.testclient import TestClient  # noqa: E402

from issue_gateway.core import deps  # noqa: E402
from issue_gateway.core.config import settings  # noqa: E402
from issue_gateway.core.exceptions import InsufficientPermissionsError, NotFoundError, ProjectCompletedError  # noqa: E402
from issue_gateway.core.security import create_access_token  # noqa: E402
from issue_gateway.main import app as gateway_app  # noqa: E402
from issue_gateway.schemas.common import Page, UpdateResult  # noqa: E402
from issue_gateway.schemas.issue import AttachmentRef  # noqa: E402

PROJECT_ID = UUID("11111111-1111-4111-8111-111111111111")
OTHER_PROJECT_ID = UUID("22222222-2222-4222-8222-222222222222")
PRIORITY_ID = UUID("33333333-3333-4333-8333-333333333333")


def valid_issue_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "title": "Login page returns 500",
        "description": "Steps:\n1. open /login\n2. submit",
        "summary": "Login broken",
        "projectId": str(PROJECT_ID),
        "priorityId": str(PRIORITY_ID),
        "statusId": "todo",
        "workTypeId": "bug",
        "startDate": "2026-10-01",
        "storyPoints": 3,
        "type": "BACKLOG",
    }
    payload.update(overrides)
    return payload


class FakeIssueService:
    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.issues: dict[UUID, dict[str, Any]] = {}
        self.comment_store: dict[UUID, dict[str, Any]] = {}

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))

    def called(self, name: str) -> list[tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]

    def add_issue(self, project_id: UUID = PROJECT_ID, **fields: Any) -> dict[str, Any]:
        issue_id = uuid4()
        issue = {"id": str(issue_id), "title": "Existing issue", "projectId": str(project_id), "statusId": "todo", **fields}
        self.issues[issue_id] = issue
        return issue

    def create_issue(self, payload):  # noqa: ANN001
        self._record("create_issue", payload)
        return {"id": str(uuid4()), **payload.to_wire()}

    def create_quick_issue(self, payload):  # noqa: ANN001
        self._record("create_quick_issue", payload)
        return {"id": str(uuid4()), **payload.to_wire()}

    def list_issues(self, filters, page):  # noqa: ANN001
        self._record("list_issues", filters, page)
        rows = list(self.issues.values())
        start = page.page * page.size
        chunk = rows[start : start + page.size]
        total_pages = -(-len(rows) // page.size) if rows else 0
        return Page[dict](content=chunk, page=page.page, size=page.size, total_elements=len(rows), total_pages=total_pages)

    def grouped_issues_by_status(self, filters, *, per_status_limit, status_pages, sort):  # noqa: ANN001
        self._record("grouped_issues_by_status", filters, per_status_limit, status_pages, sort)
        groups: dict[str, Page[dict]] = {}
        for issue in self.issues.values():
            status_id = issue["statusId"]
            group = groups.setdefault(status_id, Page[dict](page=status_pages.get(status_id, 0), size=per_status_limit))
            if len(group.content) < per_status_limit:
                group.content.append(issue)
            group.total_elements += 1
        return groups

    def user_issues(self, user_id, project_id):  # noqa: ANN001
        self._record("user_issues", user_id, project_id)
        return [issue for issue in self.issues.values() if issue.get("assignedTo") == user_id]

    def issue_by_key(self, key, project_id):  # noqa: ANN001
        self._record("issue_by_key", key, project_id)
        return {"key": key, "projectId": str(project_id)}

    def issues_by_reporter(self, reporter, project_id, page):  # noqa: ANN001
        self._record("issues_by_reporter", reporter, project_id, page)
        return Page[dict](page=page.page, size=page.size)

    def get_issue(self, issue_id):  # noqa: ANN001
        self._record("get_issue", issue_id)
        if issue_id not in self.issues:
            raise NotFoundError("issue_not_found", details={"issue_id": str(issue_id)})
        return dict(self.issues[issue_id])

    def child_issues(self, parent_id):  # noqa: ANN001
        self._record("child_issues", parent_id)
        return {"parentId": str(parent_id), "children": []}

    def issues_by_priority(self, priority_id):  # noqa: ANN001
        self._record("issues_by_priority", priority_id)
        return []

    def issues_by_status(self, status_id, project_id):  # noqa: ANN001
        self._record("issues_by_status", status_id, project_id)
        return [issue for issue in self.issues.values() if issue["statusId"] == status_id]

    def project_issues(self, project_id, *, parent_only=False):  # noqa: ANN001
        self._record("project_issues", project_id, parent_only)
        return [issue for issue in self.issues.values() if issue["projectId"] == str(project_id)]

    def status_board(self, project_id, status_id, page):  # noqa: ANN001
        self._record("status_board", project_id, status_id, page)
        return {}

    def update_issue(self, issue_id, payload):  # noqa: ANN001
        self._record("update_issue", issue_id, payload)
        old = dict(self.issues[issue_id])
        updated = {**old, **payload.to_wire()}
        self.issues[issue_id] = updated
        return UpdateResult[dict](old_value=old, updated_value=updated)

    def delete_issue(self, issue_id):  # noqa: ANN001
        self._record("delete_issue", issue_id)
        return self.issues.pop(issue_id)

    def add_comment(self, issue_id, payload):  # noqa: ANN001
        self._record("add_comment", issue_id, payload)
        comment_id = uuid4()
        comment = {"id": str(comment_id), "issueId": str(issue_id), "content": payload.content, "author": "alice"}
        self.comment_store[comment_id] = comment
        return comment

    def update_comment(self, comment_id, payload):  # noqa: ANN001
        self._record("update_comment", comment_id, payload)
        old = dict(self.comment_store[comment_id])
        updated = {**old, "content": payload.content}
        self.comment_store[comment_id] = updated
        return UpdateResult[dict](old_value=old, updated_value=updated)

    def delete_comment(self, comment_id):  # noqa: ANN001
        self._record("delete_comment", comment_id)
        return self.comment_store.pop(comment_id)

    def comments_for(self, issue_id: UUID) -> list[dict[str, Any]]:
        return [comment for comment in self.comment_store.values() if comment["issueId"] == str(issue_id)]

    def comments(self, issue_id):  # noqa: ANN001
        self._record("comments", issue_id)
        return self.comments_for(issue_id)

    def update_status(self, payload):  # noqa: ANN001
        self._record("update_status", payload)
        old = dict(self.issues[payload.issue_id])
        updated = {**old, "statusId": payload.status_id}
        self.issues[payload.issue_id] = updated
        return UpdateResult[dict](old_value=old, updated_value=updated)

    def search(self, query, page, project_id):  # noqa: ANN001
        self._record("search", query, page, project_id)
        return Page[dict](page=page.page, size=page.size)

    def counts(self, *, tenant, from_date, to_date, project_id):  # noqa: ANN001
        self._record("counts", tenant, from_date, to_date, project_id)
        return {"totalIssues": len(self.issues), "tenant": tenant}

    def delete_attachment(self, attachment_id):  # noqa: ANN001
        self._record("delete_attachment", attachment_id)

    def issues_by_user(self, user_id, project_id, page):  # noqa: ANN001
        self._record("issues_by_user", user_id, project_id, page)
        return Page[dict](page=page.page, size=page.size)


class FakeAccessEvaluator:
    def __init__(self) -> None:
        self.modifiable: set[str] = {str(PROJECT_ID)}
        self.accessible: set[str] = {str(PROJECT_ID)}
        self.completed_issues: set[str] = set()
        self.modify_checks: list[str] = []

    def can_modify_project(self, project_id):  # noqa: ANN001
        self.modify_checks.append(str(project_id))
        return str(project_id) in self.modifiable

    def check_project_access_or_throw(self, project_id):  # noqa: ANN001
        if project_id not in self.accessible:
            raise InsufficientPermissionsError("project_access_denied", details={"project_id": project_id})

    def deny_if_project_completed_by_issue_id(self, issue_id):  # noqa: ANN001
        if str(issue_id) in self.completed_issues:
            raise ProjectCompletedError(issue_id=str(issue_id))


class FakeActivityLogger:
    def __init__(self) -> None:
        self.entries = []
        self.fail = False

    def log_activity(self, entry) -> None:  # noqa: ANN001
        if self.fail:
            raise RuntimeError("activity log unavailable")
        self.entries.append(entry)


class FakeFileStorage:
    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.error: Exception | None = None

    def upload(self, files):  # noqa: ANN001
        refs = []
        for name, content, content_type in files:
            self.files[name] = content
            refs.append(AttachmentRef(file_name=name, content_type=content_type, size=len(content)))
        return refs

    def delete(self, file_name):  # noqa: ANN001
        if self.error:
            raise self.error
        self.files.pop(file_name, None)

    def download(self, file_name):  # noqa: ANN001
        if self.error:
            raise self.error
        return self.files[file_name]


class FakeEmailIngestion:
    def __init__(self) -> None:
        self.configs = []

    def create_configuration(self, payload):  # noqa: ANN001
        self.configs.append(payload)
        return {"id": str(uuid4()), **payload.to_wire()}


@pytest.fixture(autouse=True)
def _disable_rate_limit(monkeypatch) -> None:
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)


@pytest.fixture
def issue_service() -> FakeIssueService:
    return FakeIssueService()


@pytest.fixture
def access() -> FakeAccessEvaluator:
    return FakeAccessEvaluator()


@pytest.fixture
def activity_logger() -> FakeActivityLogger:
    return FakeActivityLogger()


@pytest.fixture
def storage() -> FakeFileStorage:
    return FakeFileStorage()


@pytest.fixture
def ingestion() -> FakeEmailIngestion:
    return FakeEmailIngestion()


@pytest.fixture
def token() -> str:
    return create_access_token({"sub": "user-1", "preferred_username": "alice"})


@pytest.fixture
def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}", settings.PROJECT_ID_HEADER: str(PROJECT_ID)}


@pytest.fixture
def client(issue_service, access, activity_logger, storage, ingestion):
    gateway_app.dependency_overrides[deps.get_issue_service] = lambda: issue_service
    gateway_app.dependency_overrides[deps.get_access_evaluator] = lambda: access
    gateway_app.dependency_overrides[deps.get_activity_logger] = lambda: activity_logger
    gateway_app.dependency_overrides[deps.get_file_storage] = lambda: storage
    gateway_app.dependency_overrides[deps.get_email_ingestion] = lambda: ingestion
    try:
        yield TestClient(gateway_app)
    finally:
        gateway_app.dependency_overrides.clear()
