"""Schema for registering an inbound mailbox that turns emails into issues."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import Field, field_validator

from issue_gateway.core.sanitize import clean_single_line
from issue_gateway.schemas.common import CamelModel
from issue_gateway.schemas.enums import MailProtocol


class EmailConfigurationRequest(CamelModel):
    project_id: UUID
    host: str = Field(min_length=1, max_length=255)
    port: int = Field(default=993, ge=1, le=65535)
    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=1024, repr=False)
    protocol: MailProtocol = MailProtocol.imaps
    folder: str = Field(default="INBOX", min_length=1, max_length=255)
    enabled: bool = True

    @field_validator("host", "username", "folder", mode="before")
    @classmethod
    def normalize_single_line(cls, value: Any) -> Any:
        return clean_single_line(value)

    @field_validator("protocol", mode="before")
    @classmethod
    def normalize_protocol(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value
