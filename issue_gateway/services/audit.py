"""Post-commit activity audit emission.

Entries are emitted only after the issue service has returned, so the
mutation is already committed. A failing activity log never turns a
successful mutation into an error response: the entry is written to the
application log instead, which is the record used to replay it.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import BackgroundTasks

from issue_gateway.core.security import Principal
from issue_gateway.schemas.activity import ActivityEntry
from issue_gateway.schemas.common import UpdateResult
from issue_gateway.schemas.enums import EntityKind
from issue_gateway.services.collaborators import ActivityLogger

logger = logging.getLogger(__name__)


class ActivityAuditEmitter:
    def __init__(
        self,
        activity_logger: ActivityLogger,
        actor: Principal,
        *,
        background_tasks: BackgroundTasks | None = None,
    ) -> None:
        self._activity_logger = activity_logger
        self._actor = actor
        self._background_tasks = background_tasks

    def record(self, kind: EntityKind, old_value: Any, new_value: Any) -> ActivityEntry:
        entry = ActivityEntry(entity_kind=kind, old_value=old_value, new_value=new_value, actor=self._actor)
        if self._background_tasks is not None:
            self._background_tasks.add_task(self._emit, entry)
        else:
            self._emit(entry)
        return entry

    def created(self, kind: EntityKind, value: Any) -> ActivityEntry:
        return self.record(kind, None, value)

    def updated(self, kind: EntityKind, result: UpdateResult[Any]) -> ActivityEntry:
        return self.record(kind, result.old_value, result.updated_value)

    def deleted(self, kind: EntityKind, value: Any) -> ActivityEntry:
        return self.record(kind, value, None)

    def _emit(self, entry: ActivityEntry) -> None:
        try:
            self._activity_logger.log_activity(entry)
        except Exception:
            logger.exception(
                "Activity log emission failed for %s by %s; unrecorded entry: %s",
                entry.entity_kind.value,
                entry.actor.username,
                json.dumps(entry.to_payload(), default=str),
            )
