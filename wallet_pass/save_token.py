"""
Save-to-Wallet JWT. Signed locally with the service-account key; no network call.
"""
import time

from wallet_pass.config import SAVE_URL_BASE, WalletConfig
from wallet_pass.errors import ConfigurationError
from wallet_pass.keys import sign_rs256

SAVE_AUDIENCE = "google"
SAVE_TYPE = "savetowallet"


def build_save_claims(config: WalletConfig, object_id: str, now: int | None = None) -> dict:
    if now is None:
        now = int(time.time())
    claims = {
        "iss": config.service_account_email,
        "aud": SAVE_AUDIENCE,
        "typ": SAVE_TYPE,
        "iat": now,
        "payload": {"genericObjects": [{"id": object_id}]},
    }
    if config.origins:
        claims["origins"] = list(config.origins)
    return claims


def build_save_jwt(config: WalletConfig, object_id: str) -> str:
    if not config.service_account_email or not config.private_key:
        raise ConfigurationError("Missing Google service account credentials")
    return sign_rs256(build_save_claims(config, object_id), config.private_key)


def build_save_url(token: str) -> str:
    return f"{SAVE_URL_BASE}/{token}"
