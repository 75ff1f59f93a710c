"""Activity log entry emitted after each successful mutation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from issue_gateway.core.security import Principal
from issue_gateway.schemas.enums import EntityKind


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    return value


@dataclass(frozen=True)
class ActivityEntry:
    entity_kind: EntityKind
    old_value: Any
    new_value: Any
    actor: Principal

    def to_payload(self) -> dict[str, Any]:
        return {
            "entityKind": self.entity_kind.value,
            "oldValue": _jsonable(self.old_value),
            "newValue": _jsonable(self.new_value),
            "actor": {"id": self.actor.subject, "username": self.actor.username},
        }
