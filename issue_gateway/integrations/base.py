"""Shared httpx plumbing for collaborator service clients."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from issue_gateway.core.config import settings
from issue_gateway.core.exceptions import (
    BadRequestError,
    ConflictError,
    InsufficientPermissionsError,
    NotFoundError,
    UpstreamServiceError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallContext:
    """Caller identity and scope forwarded with every collaborator call."""

    token: str | None = None
    tenant_id: str | None = None
    project_id: str | None = None


class ServiceClient:
    service_name = "collaborator"

    def __init__(
        self,
        base_url: str,
        context: CallContext | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.context = context or CallContext()
        self.timeout = timeout or settings.COLLABORATOR_TIMEOUT_SECONDS
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.context.token:
            headers["Authorization"] = f"Bearer {self.context.token}"
        if self.context.tenant_id:
            headers[settings.TENANT_ID_HEADER] = self.context.tenant_id
        if self.context.project_id:
            headers[settings.PROJECT_ID_HEADER] = self.context.project_id
        return headers

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout, headers=self._headers(), transport=self._transport) as client:
                response = client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("%s call timed out: %s %s", self.service_name, method, path)
            raise UpstreamTimeoutError(self.service_name) from exc
        except httpx.TransportError as exc:
            logger.warning("%s unreachable: %s %s (%s)", self.service_name, method, path, exc)
            raise UpstreamUnavailableError(self.service_name) from exc
        if response.is_error:
            self._raise_for_status(response, method, path)
        return response

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._send(method, path, **kwargs)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s returned a non-JSON body for %s %s", self.service_name, method, path)
            raise UpstreamServiceError(
                self.service_name,
                upstream_status=response.status_code,
                message="invalid_upstream_payload",
            ) from exc

    def _request_bytes(self, method: str, path: str, **kwargs: Any) -> bytes:
        return self._send(method, path, **kwargs).content

    @staticmethod
    def _error_body(response: httpx.Response) -> tuple[str | None, dict[str, Any]]:
        try:
            body = response.json()
        except ValueError:
            return None, {}
        if not isinstance(body, dict):
            return None, {}
        message = body.get("message") or body.get("error")
        details = body.get("details") if isinstance(body.get("details"), dict) else {}
        violations = body.get("violations") or body.get("errors")
        if isinstance(violations, list):
            details = {**details, "violations": violations}
        return (str(message) if message else None), details

    def _raise_for_status(self, response: httpx.Response, method: str, path: str) -> None:
        status = response.status_code
        message, details = self._error_body(response)
        if status == 404:
            raise NotFoundError(message or "not_found", details=details or {"path": path})
        if status in {401, 403}:
            raise InsufficientPermissionsError(message or "forbidden", details=details or None)
        if status in {400, 422}:
            raise BadRequestError(message or "bad_request", details=details)
        if status == 409:
            raise ConflictError(message or "conflict", details=details)
        logger.warning("%s failed: %s %s -> %s", self.service_name, method, path, status)
        raise UpstreamServiceError(self.service_name, upstream_status=status)
