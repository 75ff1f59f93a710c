from __future__ import annotations

import pytest
from jose import jwt

from issue_gateway.core.config import settings
from issue_gateway.core.rate_limit import SlidingWindowLimiter, _limiter
from issue_gateway.core.security import create_access_token, decode_token, principal_from_claims


def test_token_round_trip_builds_principal() -> None:
    token = create_access_token({"sub": "user-1", "preferred_username": "alice"})

    claims = decode_token(token)
    principal = principal_from_claims(token, claims)

    assert claims["type"] == "access"
    assert principal.subject == "user-1"
    assert principal.username == "alice"


def test_username_falls_back_to_email_then_subject() -> None:
    assert principal_from_claims("t", {"sub": "user-1", "email": "a@example.com"}).username == "a@example.com"
    assert principal_from_claims("t", {"sub": "user-1"}).username == "user-1"


def test_expired_and_forged_tokens() -> None:
    expired = create_access_token({"sub": "user-1"}, expires_minutes=-5)
    with pytest.raises(ValueError, match="expired_token"):
        decode_token(expired)
    assert decode_token(expired, verify_exp=False)["sub"] == "user-1"

    forged = jwt.encode({"sub": "user-1", "type": "access"}, "another-secret", algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(ValueError, match="invalid_token"):
        decode_token(forged)


def test_expired_token_is_rejected_by_routes(client) -> None:
    expired = create_access_token({"sub": "user-1"}, expires_minutes=-5)

    response = client.get(settings.API_PREFIX, headers={"Authorization": f"Bearer {expired}"})

    assert response.status_code == 401
    assert response.json()["data"]["error_code"] == "EXPIRED_TOKEN"


def test_sliding_window_limiter() -> None:
    limiter = SlidingWindowLimiter()

    assert limiter.hit("k", limit=2, window_seconds=60, now=100.0) == (True, 1, 0)
    assert limiter.hit("k", limit=2, window_seconds=60, now=101.0) == (True, 0, 0)
    allowed, remaining, retry_after = limiter.hit("k", limit=2, window_seconds=60, now=102.0)
    assert (allowed, remaining) == (False, 0)
    assert retry_after == 58
    assert limiter.hit("k", limit=2, window_seconds=60, now=161.0)[0] is True


def test_rate_limit_rejects_excess_requests(client, auth_headers, monkeypatch) -> None:
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "RATE_LIMIT_MAX_REQUESTS", 2)
    _limiter.reset()
    try:
        responses = [client.get(settings.API_PREFIX, headers=auth_headers) for _ in range(3)]
    finally:
        _limiter.reset()

    assert [response.status_code for response in responses] == [200, 200, 429]
    assert responses[0].headers["X-RateLimit-Remaining"] == "1"
    assert "Retry-After" in responses[2].headers


def test_expired_windows_are_dropped() -> None:
    limiter = SlidingWindowLimiter()
    for index in range(50):
        limiter.hit(f"client-{index}", limit=5, window_seconds=60, now=100.0 + index * 0.01)
    assert len(limiter) == 50

    limiter.hit("late-client", limit=5, window_seconds=60, now=200.0)

    assert len(limiter) == 1


def test_tenant_header_does_not_open_new_buckets(client, auth_headers, monkeypatch) -> None:
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    _limiter.reset()
    try:
        for index in range(20):
            client.get(settings.API_PREFIX, headers={**auth_headers, settings.TENANT_ID_HEADER: f"tenant-{index}"})
        tracked = len(_limiter)
    finally:
        _limiter.reset()

    assert tracked == 1
