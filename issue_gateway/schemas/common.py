"""Envelope, page and update-wrapper schemas shared by every endpoint."""

from __future__ import annotations

from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from issue_gateway.schemas.enums import EntityKind

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    entity_kind: ClassVar[EntityKind | None] = None
    field_messages: ClassVar[dict[str, dict[str, str]]] = {}

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    message: str
    data: T | None = None


def ok(message: str, data: Any = None) -> dict[str, Any]:
    return ApiResponse[Any](success=True, message=message, data=data).model_dump(mode="json", by_alias=True)


class Page(CamelModel, Generic[T]):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    content: list[T] = Field(default_factory=list)
    page: int = 0
    size: int = 0
    total_elements: int = 0
    total_pages: int = 0


class UpdateResult(CamelModel, Generic[T]):
    """Old and new value of one mutation, consumed by the audit emitter."""

    old_value: T | None = None
    updated_value: T | None = None
