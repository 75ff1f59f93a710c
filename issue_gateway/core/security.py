"""JWT helpers for authenticating gateway callers."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from issue_gateway.core.config import settings

ACCESS_TOKEN_TYPE = "access"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, forwarded to collaborators and the audit log."""

    subject: str
    username: str
    token: str
    claims: dict[str, Any] = field(default_factory=dict, compare=False)


def create_access_token(data: dict[str, Any], expires_minutes: int | None = None) -> str:
    to_encode = data.copy()
    now = dt.datetime.now(dt.timezone.utc)
    expire = now + dt.timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"type": ACCESS_TOKEN_TYPE, "iat": int(now.timestamp()), "exp": expire})
    if settings.JWT_AUDIENCE and "aud" not in to_encode:
        to_encode["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, *, verify_exp: bool = True) -> dict[str, Any]:
    options = {"verify_exp": verify_exp, "verify_aud": bool(settings.JWT_AUDIENCE)}
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE or None,
            options=options,
        )
    except ExpiredSignatureError as exc:
        raise ValueError("expired_token") from exc
    except JWTError as exc:
        raise ValueError("invalid_token") from exc


def principal_from_claims(token: str, claims: dict[str, Any]) -> Principal:
    subject = str(claims.get("sub") or "").strip()
    username = str(claims.get(settings.JWT_USERNAME_CLAIM) or claims.get("email") or subject).strip()
    return Principal(subject=subject, username=username, token=token, claims=claims)
