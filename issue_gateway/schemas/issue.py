"""Request schemas for issue creation, update and status changes."""

from __future__ import annotations

import datetime as dt
import re
from typing import Any, ClassVar
from uuid import UUID

from pydantic import Field, field_validator
from pydantic_core import PydanticCustomError

from issue_gateway.core.sanitize import clean_multiline, clean_optional, clean_single_line
from issue_gateway.schemas.common import CamelModel
from issue_gateway.schemas.enums import EntityKind, SprintBacklogType

MAX_TITLE_LEN = 255
MAX_SUMMARY_LEN = 300
MAX_DESCRIPTION_LEN = 20000
MAX_REFERENCE_LEN = 255
MAX_ATTACHMENTS = 50
MAX_CUSTOM_FIELDS = 200

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_calendar_date(value: Any) -> dt.date | None:
    """Accept ``yyyy-MM-dd`` strings only."""
    if value is None or (isinstance(value, dt.date) and not isinstance(value, dt.datetime)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if _ISO_DATE_RE.match(text):
            try:
                return dt.date.fromisoformat(text)
            except ValueError:
                pass
    raise PydanticCustomError("date_format", "Date must be a valid calendar date in yyyy-MM-dd format")


class AttachmentRef(CamelModel):
    id: UUID | None = None
    file_name: str = Field(min_length=1, max_length=MAX_REFERENCE_LEN)
    file_url: str | None = Field(default=None, max_length=2048)
    content_type: str | None = Field(default=None, max_length=MAX_REFERENCE_LEN)
    size: int | None = Field(default=None, ge=0)

    @field_validator("file_name", mode="before")
    @classmethod
    def normalize_file_name(cls, value: Any) -> Any:
        return clean_single_line(value)


class CustomFieldValue(CamelModel):
    field_id: str = Field(min_length=1, max_length=MAX_REFERENCE_LEN)
    value: str | None = None


class IssueRequest(CamelModel):
    entity_kind: ClassVar[EntityKind] = EntityKind.issue
    field_messages: ClassVar[dict[str, dict[str, str]]] = {
        "title": {
            "string_too_long": f"Issue name should not exceed {MAX_TITLE_LEN} characters",
            "*": "Issue name cannot be blank",
        },
        "summary": {"string_too_long": f"Summary should not exceed {MAX_SUMMARY_LEN} characters"},
        "projectId": {"missing": "Project ID cannot be null", "string_type": "Project ID cannot be null"},
        "priorityId": {"missing": "Priority ID cannot be null", "string_type": "Priority ID cannot be null"},
        "statusId": {"*": "Status ID cannot be null"},
        "workTypeId": {"*": "Work Type ID cannot be null"},
    }

    title: str = Field(min_length=1, max_length=MAX_TITLE_LEN)
    description: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LEN)
    summary: str | None = Field(default=None, max_length=MAX_SUMMARY_LEN)
    project_id: UUID
    assigned_to: str | None = Field(default=None, max_length=MAX_REFERENCE_LEN)
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    original_estimate_date: dt.date | None = None
    reporter: str | None = Field(default=None, max_length=MAX_REFERENCE_LEN)
    priority_id: UUID
    status_id: str = Field(min_length=1, max_length=MAX_REFERENCE_LEN)
    parent_issue_id: UUID | None = None
    work_type_id: str = Field(max_length=MAX_REFERENCE_LEN)
    attachments: list[AttachmentRef] = Field(default_factory=list, max_length=MAX_ATTACHMENTS)
    custom_field_values: list[CustomFieldValue] = Field(default_factory=list, max_length=MAX_CUSTOM_FIELDS)
    story_points: int | None = Field(default=None, ge=0)
    type: SprintBacklogType | None = None

    @field_validator("title", "status_id", mode="before")
    @classmethod
    def normalize_single_line(cls, value: Any) -> Any:
        return clean_single_line(value)

    @field_validator("summary", "assigned_to", "reporter", mode="before")
    @classmethod
    def normalize_optional(cls, value: Any) -> Any:
        return clean_optional(value)

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, value: Any) -> Any:
        cleaned = clean_multiline(value)
        return cleaned or None

    @field_validator("start_date", "end_date", "original_estimate_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> dt.date | None:
        return parse_calendar_date(value)

    @field_validator("attachments", "custom_field_values", mode="before")
    @classmethod
    def default_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value


class QuickIssueRequest(CamelModel):
    entity_kind: ClassVar[EntityKind] = EntityKind.quick_issue
    field_messages: ClassVar[dict[str, dict[str, str]]] = {
        "title": IssueRequest.field_messages["title"],
        "projectId": IssueRequest.field_messages["projectId"],
        "statusId": IssueRequest.field_messages["statusId"],
        "workTypeId": IssueRequest.field_messages["workTypeId"],
    }

    title: str = Field(min_length=1, max_length=MAX_TITLE_LEN)
    project_id: UUID
    status_id: str = Field(min_length=1, max_length=MAX_REFERENCE_LEN)
    work_type_id: str = Field(max_length=MAX_REFERENCE_LEN)
    priority_id: UUID | None = None
    sprint_id: str | None = Field(default=None, max_length=MAX_REFERENCE_LEN)
    assigned_to: str | None = Field(default=None, max_length=MAX_REFERENCE_LEN)
    type: SprintBacklogType | None = None

    @field_validator("title", "status_id", mode="before")
    @classmethod
    def normalize_single_line(cls, value: Any) -> Any:
        return clean_single_line(value)

    @field_validator("sprint_id", "assigned_to", mode="before")
    @classmethod
    def normalize_optional(cls, value: Any) -> Any:
        return clean_optional(value)


class StatusUpdateRequest(CamelModel):
    entity_kind: ClassVar[EntityKind] = EntityKind.issue_status
    field_messages: ClassVar[dict[str, dict[str, str]]] = {
        "issueId": {"*": "Issue ID cannot be null"},
        "statusId": {"*": "Status ID cannot be null"},
    }

    issue_id: UUID
    status_id: str = Field(min_length=1, max_length=MAX_REFERENCE_LEN)

    @field_validator("status_id", mode="before")
    @classmethod
    def normalize_status(cls, value: Any) -> Any:
        return clean_single_line(value)
