"""HTTP client for the attachment object store."""

from __future__ import annotations

from typing import Any

from issue_gateway.core.config import settings
from issue_gateway.core.exceptions import (
    CollaboratorException,
    NotFoundError,
    StorageError,
    StoredFileNotFoundError,
)
from issue_gateway.integrations.base import CallContext, ServiceClient
from issue_gateway.schemas.issue import AttachmentRef


class FileStorageClient(ServiceClient):
    service_name = "file-storage"

    def __init__(self, context: CallContext | None = None, **kwargs: Any) -> None:
        super().__init__(settings.FILE_STORAGE_URL, context, **kwargs)

    def upload(self, files: list[tuple[str, bytes, str]]) -> list[AttachmentRef]:
        parts = [("files", (name, content, content_type)) for name, content, content_type in files]
        try:
            payload = self._request("POST", "/files", files=parts)
        except CollaboratorException as exc:
            raise StorageError("attachment_upload_failed") from exc
        rows = payload if isinstance(payload, list) else []
        return [AttachmentRef.model_validate(row) for row in rows if isinstance(row, dict)]

    def delete(self, file_name: str) -> None:
        try:
            self._request("DELETE", "/files", params={"fileName": file_name})
        except NotFoundError as exc:
            raise StoredFileNotFoundError(file_name) from exc
        except CollaboratorException as exc:
            raise StorageError("attachment_delete_failed", file_name=file_name) from exc

    def download(self, file_name: str) -> bytes:
        try:
            return self._request_bytes("GET", "/files/content", params={"fileName": file_name})
        except NotFoundError as exc:
            raise StoredFileNotFoundError(file_name) from exc
        except CollaboratorException as exc:
            raise StorageError("attachment_download_failed", file_name=file_name) from exc
