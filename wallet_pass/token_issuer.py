"""
Service-account token issuer: signed JWT assertion exchanged at the Google token endpoint
(jwt-bearer grant). Access tokens are cached process-wide until shortly before expiry.
"""
import logging
import threading
import time
from dataclasses import dataclass

import httpx

from wallet_pass.config import (
    ASSERTION_TTL_SECONDS,
    TOKEN_REFRESH_BUFFER_SECONDS,
    TOKEN_URL,
    WALLET_SCOPE,
    WalletConfig,
)
from wallet_pass.errors import ConfigurationError, UpstreamAuthError
from wallet_pass.keys import sign_rs256

logger = logging.getLogger(__name__)

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"


@dataclass
class CachedToken:
    access_token: str
    expires_in: int
    issued_at: float

    def expired_or_soon(self, buffer_seconds: int = TOKEN_REFRESH_BUFFER_SECONDS) -> bool:
        """Due for refresh. The buffer is skipped for lifetimes shorter than the buffer itself."""
        remaining = self.issued_at + self.expires_in - time.time()
        if remaining <= 0:
            return True
        return self.expires_in > buffer_seconds and remaining <= buffer_seconds


class TokenCache:
    """Access tokens keyed by (service account, scope). One lock so concurrent refreshes coalesce."""

    def __init__(self):
        self._tokens: dict[tuple[str, str], CachedToken] = {}
        self._lock = threading.Lock()

    def get_or_fetch(self, key: tuple[str, str], fetch) -> str:
        with self._lock:
            cached = self._tokens.get(key)
            if cached is not None and not cached.expired_or_soon():
                return cached.access_token
            access_token, expires_in = fetch()
            self._tokens[key] = CachedToken(access_token=access_token, expires_in=expires_in, issued_at=time.time())
            return access_token

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()


# Shared by all requests in this process
token_cache = TokenCache()


def build_assertion(config: WalletConfig, now: int | None = None) -> str:
    """Signed service-account assertion for the wallet issuer scope."""
    if not config.service_account_email or not config.private_key:
        raise ConfigurationError("Missing Google service account credentials")
    if now is None:
        now = int(time.time())
    claims = {
        "iss": config.service_account_email,
        "scope": WALLET_SCOPE,
        "aud": TOKEN_URL,
        "iat": now,
        "exp": now + ASSERTION_TTL_SECONDS,
    }
    return sign_rs256(claims, config.private_key)


def exchange_assertion(config: WalletConfig) -> tuple[str, int]:
    """POST the assertion to the token endpoint. Returns (access_token, expires_in)."""
    assertion = build_assertion(config)
    r = httpx.post(
        TOKEN_URL,
        data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
        headers={"Accept": "application/json"},
        timeout=config.http_timeout,
    )
    if r.status_code < 200 or r.status_code >= 300:
        logger.warning("Token exchange rejected: %s", r.status_code)
        raise UpstreamAuthError(r.status_code, r.text)
    data = r.json()
    return data["access_token"], int(data.get("expires_in", ASSERTION_TTL_SECONDS))


def get_access_token(config: WalletConfig, cache: TokenCache | None = None) -> str:
    """Bearer token for the Wallet API, from cache when still fresh."""
    if cache is None:
        cache = token_cache
    return cache.get_or_fetch(
        (config.service_account_email, WALLET_SCOPE),
        lambda: exchange_assertion(config),
    )
