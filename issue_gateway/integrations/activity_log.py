"""HTTP client for the activity log service."""

from __future__ import annotations

from typing import Any

from issue_gateway.core.config import settings
from issue_gateway.integrations.base import CallContext, ServiceClient
from issue_gateway.schemas.activity import ActivityEntry


class ActivityLogClient(ServiceClient):
    service_name = "activity-log"

    def __init__(self, context: CallContext | None = None, **kwargs: Any) -> None:
        super().__init__(settings.ACTIVITY_LOG_URL, context, **kwargs)

    def log_activity(self, entry: ActivityEntry) -> None:
        self._request("POST", "/activities", json=entry.to_payload())
