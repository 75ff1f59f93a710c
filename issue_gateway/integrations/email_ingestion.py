"""HTTP client for the service that turns inbound emails into issues."""

from __future__ import annotations

from typing import Any

from issue_gateway.core.config import settings
from issue_gateway.integrations.base import CallContext, ServiceClient
from issue_gateway.schemas.email_config import EmailConfigurationRequest


class EmailIngestionClient(ServiceClient):
    service_name = "email-ingestion"

    def __init__(self, context: CallContext | None = None, **kwargs: Any) -> None:
        super().__init__(settings.EMAIL_INGESTION_URL, context, **kwargs)

    def create_configuration(self, payload: EmailConfigurationRequest) -> dict[str, Any]:
        result = self._request("POST", "/email-configs", json=payload.to_wire())
        return result if isinstance(result, dict) else {}
