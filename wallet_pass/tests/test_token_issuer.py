"""Tests for the service-account token issuer and the shared token cache."""
import threading
import time
from dataclasses import replace

import jwt
import pytest

from wallet_pass.config import TOKEN_URL, WALLET_SCOPE
from wallet_pass.errors import ConfigurationError, UpstreamAuthError
from wallet_pass.token_issuer import (
    JWT_BEARER_GRANT,
    CachedToken,
    TokenCache,
    build_assertion,
    exchange_assertion,
    get_access_token,
)


def test_assertion_claims(config, rsa_key):
    token = build_assertion(config, now=1700000000)
    claims = jwt.decode(
        token,
        rsa_key.public_key(),
        algorithms=["RS256"],
        audience=TOKEN_URL,
        options={"verify_exp": False, "verify_iat": False},
    )
    assert claims["iss"] == config.service_account_email
    assert claims["scope"] == WALLET_SCOPE
    assert claims["aud"] == TOKEN_URL
    assert claims["iat"] == 1700000000
    assert claims["exp"] == 1700000000 + 3600


@pytest.mark.parametrize("field", ["service_account_email", "private_key"])
def test_missing_credentials_raise_before_network(config, fake_google, field):
    with pytest.raises(ConfigurationError):
        get_access_token(replace(config, **{field: ""}), TokenCache())
    assert fake_google.calls == []


def test_exchange_posts_jwt_bearer_form(config, fake_google):
    access_token, expires_in = exchange_assertion(config)
    assert access_token == "ya29.fake"
    assert expires_in == 3600
    sent = fake_google.requests[0]
    assert sent["url"] == TOKEN_URL
    assert sent["data"]["grant_type"] == JWT_BEARER_GRANT
    assert sent["data"]["assertion"].count(".") == 2


def test_exchange_rejected_carries_status_and_body(config, fake_google):
    fake_google.token_status = 400
    with pytest.raises(UpstreamAuthError) as exc:
        exchange_assertion(config)
    assert exc.value.upstream_status == 400
    assert "invalid_grant" in exc.value.body
    assert exc.value.status_code == 500


def test_cached_token_reused(config, fake_google):
    cache = TokenCache()
    assert get_access_token(config, cache) == "ya29.fake"
    assert get_access_token(config, cache) == "ya29.fake"
    assert fake_google.calls == ["token"]


def test_cached_token_refreshed_when_expired(config, fake_google):
    cache = TokenCache()
    fake_google.expires_in = 0
    get_access_token(config, cache)
    get_access_token(config, cache)
    assert fake_google.calls == ["token", "token"]


def test_concurrent_requests_share_one_refresh(config, fake_google):
    cache = TokenCache()
    results = []

    def worker():
        results.append(get_access_token(config, cache))

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results == ["ya29.fake"] * 5
    assert fake_google.calls == ["token"]


def test_fresh_token_not_expired_or_soon():
    t = CachedToken(access_token="at", expires_in=3600, issued_at=time.time())
    assert t.expired_or_soon(buffer_seconds=60) is False


def test_token_near_expiry_is_refreshed():
    """3600s lifetime, 3560s elapsed: inside the 60s buffer."""
    t = CachedToken(access_token="at", expires_in=3600, issued_at=time.time() - 3560)
    assert t.expired_or_soon(buffer_seconds=60) is True


def test_short_lifetime_not_expired():
    t = CachedToken(access_token="at", expires_in=30, issued_at=time.time() - 10)
    assert t.expired_or_soon(buffer_seconds=60) is False


def test_short_lifetime_expired():
    t = CachedToken(access_token="at", expires_in=30, issued_at=time.time() - 31)
    assert t.expired_or_soon(buffer_seconds=60) is True
