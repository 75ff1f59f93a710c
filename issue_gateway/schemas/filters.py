"""Filter set shared by the flat and grouped issue listings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class IssueFilters:
    status_ids: tuple[str, ...] = ()
    priority_ids: tuple[UUID, ...] = ()
    work_type_ids: tuple[str, ...] = ()
    reporters: tuple[str, ...] = ()
    assigned_to: str | None = None
    project_id: UUID | None = None
    sprint_id: str | None = None
    search_text: str | None = None

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {
            "statusIds": list(self.status_ids),
            "priorityIds": [str(item) for item in self.priority_ids],
            "workTypeIds": list(self.work_type_ids),
            "reporters": list(self.reporters),
            "assignedTo": self.assigned_to,
            "projectId": str(self.project_id) if self.project_id else None,
            "sprintId": self.sprint_id,
            "searchText": self.search_text,
        }
        return {key: value for key, value in params.items() if value not in (None, [], "")}
