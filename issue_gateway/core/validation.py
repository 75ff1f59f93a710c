"""Explicit payload validation producing field-level violations."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from issue_gateway.core.exceptions import PayloadValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

# FastAPI prefixes parameter errors with their source.
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def _field_path(loc: Sequence[Any]) -> str:
    parts = [str(part) for part in loc]
    if len(parts) > 1 and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(parts) or "body"


def violations_from_errors(
    errors: Sequence[Mapping[str, Any]],
    *,
    messages: Mapping[str, Mapping[str, str]] | None = None,
) -> list[dict[str, str]]:
    """Turn pydantic error dicts into one violation per failed constraint.

    ``messages`` maps a field name to ``{error_type: message}``; the ``"*"``
    key is the fallback for any error type on that field.
    """
    messages = messages or {}
    violations: list[dict[str, str]] = []
    for error in errors:
        loc = tuple(error.get("loc") or ())
        field = _field_path(loc)
        error_type = str(error.get("type") or "value_error")
        overrides = messages.get(field.split(".")[0]) or {}
        message = overrides.get(error_type) or overrides.get("*") or str(error.get("msg") or "invalid value")
        violations.append({"field": field, "message": message, "type": error_type})
    return violations


def validate_payload(model: type[ModelT], raw: Any) -> ModelT:
    """Validate ``raw`` against ``model`` or raise with every violation found."""
    if not isinstance(raw, Mapping):
        raise PayloadValidationError(
            [{"field": "body", "message": "Request body must be a JSON object", "type": "dict_type"}]
        )
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        messages = getattr(model, "field_messages", None)
        raise PayloadValidationError(violations_from_errors(exc.errors(), messages=messages)) from exc
