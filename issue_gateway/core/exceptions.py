"""Custom exceptions for gateway error handling."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class IssueGatewayException(Exception):
    """Base exception for all gateway errors."""

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Render the exception as a failure envelope."""
        return {
            "success": False,
            "message": self.message,
            "data": {
                "error": self.__class__.__name__,
                "error_code": self.error_code,
                "details": self.details,
            },
        }


class NotFoundError(IssueGatewayException):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "not_found", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="NOT_FOUND", details=details, status_code=404)


class ConflictError(IssueGatewayException):
    """Raised when a request conflicts with current state."""

    def __init__(self, message: str = "conflict", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="CONFLICT", details=details, status_code=409)


class BadRequestError(IssueGatewayException):
    """Raised when request is invalid."""

    def __init__(self, message: str = "bad_request", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="BAD_REQUEST", details=details, status_code=400)


class RateLimitExceeded(IssueGatewayException):
    """Raised when a client exceeds rate limits."""

    def __init__(self, *, retry_after: int, limit: int, window_seconds: int):
        headers = {
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Window": str(window_seconds),
        }
        super().__init__(
            "rate_limit_exceeded",
            error_code="RATE_LIMIT",
            details={"retry_after": retry_after, "limit": limit, "window_seconds": window_seconds},
            status_code=429,
            headers=headers,
        )


# ===== VALIDATION EXCEPTIONS =====


class PayloadValidationError(IssueGatewayException):
    """Raised when a payload violates one or more field constraints."""

    def __init__(self, violations: List[Dict[str, Any]], message: str = "validation_failed"):
        self.violations = violations
        super().__init__(
            message,
            error_code="VALIDATION_ERROR",
            details={"violations": violations},
            status_code=422,
        )


class MissingHeaderError(BadRequestError):
    """Raised when a required request header is absent."""

    def __init__(self, header: str):
        super().__init__("missing_header", details={"header": header})
        self.error_code = "MISSING_HEADER"


# ===== AUTHENTICATION/AUTHORIZATION EXCEPTIONS =====


class AuthenticationException(IssueGatewayException):
    """Base exception for authentication errors."""


class ExpiredTokenError(AuthenticationException):
    """Raised when token has expired."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message, error_code="EXPIRED_TOKEN", status_code=401)


class InsufficientPermissionsError(AuthenticationException):
    """Raised when the caller lacks access to the target project."""

    def __init__(self, message: str = "Insufficient permissions", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="INSUFFICIENT_PERMISSIONS", details=details, status_code=403)


class ProjectCompletedError(InsufficientPermissionsError):
    """Raised when a mutation targets an issue of a completed project."""

    def __init__(self, *, issue_id: str, project_id: Optional[str] = None):
        details: Dict[str, Any] = {"issue_id": issue_id}
        if project_id:
            details["project_id"] = project_id
        super().__init__("project_completed", details=details)
        self.error_code = "PROJECT_COMPLETED"


# ===== COLLABORATOR EXCEPTIONS =====


class CollaboratorException(IssueGatewayException):
    """Base exception for failures reported by downstream services."""


class UpstreamServiceError(CollaboratorException):
    """Raised when a collaborator answers with an unexpected failure."""

    def __init__(self, service: str, *, upstream_status: Optional[int] = None, message: str = "upstream_error"):
        details: Dict[str, Any] = {"service": service}
        if upstream_status:
            details["upstream_status"] = upstream_status
        super().__init__(message, error_code="UPSTREAM_ERROR", details=details, status_code=502)


class UpstreamUnavailableError(CollaboratorException):
    """Raised when a collaborator cannot be reached."""

    def __init__(self, service: str):
        super().__init__(
            "upstream_unavailable",
            error_code="UPSTREAM_UNAVAILABLE",
            details={"service": service},
            status_code=503,
        )


class UpstreamTimeoutError(CollaboratorException):
    """Raised when a collaborator call times out."""

    def __init__(self, service: str):
        super().__init__(
            "upstream_timeout",
            error_code="UPSTREAM_TIMEOUT",
            details={"service": service},
            status_code=504,
        )


# ===== STORAGE EXCEPTIONS =====


class StorageException(IssueGatewayException):
    """Base exception for attachment storage errors."""


class StoredFileNotFoundError(StorageException):
    """Raised when a requested file does not exist in the bucket."""

    def __init__(self, file_name: str):
        super().__init__(
            f"File {file_name} not found",
            error_code="FILE_NOT_FOUND",
            details={"file_name": file_name},
            status_code=404,
        )


class StorageError(StorageException):
    """Raised when the storage backend fails to read or write a file."""

    def __init__(self, message: str = "storage_error", *, file_name: Optional[str] = None):
        details = {"file_name": file_name} if file_name else {}
        super().__init__(message, error_code="STORAGE_ERROR", details=details, status_code=502)
