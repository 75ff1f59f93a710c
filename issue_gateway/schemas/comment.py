"""Pydantic schemas for issue comments."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field, field_validator

from issue_gateway.core.sanitize import clean_multiline
from issue_gateway.schemas.common import CamelModel
from issue_gateway.schemas.enums import EntityKind

MAX_COMMENT_LEN = 5000


class CommentRequest(CamelModel):
    entity_kind: ClassVar[EntityKind] = EntityKind.comment
    field_messages: ClassVar[dict[str, dict[str, str]]] = {
        "content": {
            "string_too_long": f"Comment should not exceed {MAX_COMMENT_LEN} characters",
            "*": "Comment cannot be blank",
        },
    }

    content: str = Field(min_length=1, max_length=MAX_COMMENT_LEN)

    @field_validator("content", mode="before")
    @classmethod
    def normalize_content(cls, value: Any) -> Any:
        return clean_multiline(value)


def describe_deleted_comment(username: str, comment: dict[str, Any]) -> str:
    content = comment.get("content") or comment.get("comment") or ""
    comment_id = comment.get("id") or comment.get("commentId") or ""
    return f'{username} deleted Comment: "{content}" | CommentId: {comment_id}'
