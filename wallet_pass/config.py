"""
Wallet pass configuration. Identifiers and credentials come from env only.
Provider endpoints are fixed Google Wallet values, not secrets.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from wallet_pass.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Google Wallet REST API (generic passes)
WALLET_API_URL = "https://walletobjects.googleapis.com/walletobjects/v1"

# OAuth token endpoint; also the audience of the service-account assertion
TOKEN_URL = "https://oauth2.googleapis.com/token"
WALLET_SCOPE = "https://www.googleapis.com/auth/wallet_object.issuer"

# Save-to-Wallet deep link; the signed save token is appended as the last path segment
SAVE_URL_BASE = "https://pay.google.com/gp/v/save"

# Service-account assertion lifetime (seconds)
ASSERTION_TTL_SECONDS = 3600

# Refresh cached access tokens this many seconds before they expire
TOKEN_REFRESH_BUFFER_SECONDS = 60

# Presentation constants for class and object payloads
ISSUER_NAME = "Digital Placemaking"
PROGRAM_NAME = "Coupon Program"
CLASS_CARD_TITLE = "Digital Placemaking Coupon"
LOGO_URI = "https://placehold.co/200x200/000000/FFFFFF/png?text=DP"
HERO_IMAGE_URI = "https://placehold.co/600x400/4F46E5/FFFFFF/png?text=Coupon"
WEBSITE_URI = "https://digitalplacemaking.com"
LANGUAGE = "en-US"


@dataclass(frozen=True)
class WalletConfig:
    """Everything the issuance workflow needs, resolved once and passed to each component."""

    issuer_id: str = ""
    class_suffix: str = ""
    service_account_email: str = ""
    private_key: str = ""
    origins: tuple[str, ...] = field(default_factory=tuple)
    http_timeout: float = 10.0

    @property
    def class_id(self) -> str:
        return f"{self.issuer_id}.{self.class_suffix}"

    def missing(self) -> list[str]:
        """Names of required settings that are empty."""
        required = {
            "issuer_id": self.issuer_id,
            "class_suffix": self.class_suffix,
            "service_account_email": self.service_account_email,
            "private_key": self.private_key,
        }
        return [name for name, value in required.items() if not value]

    @classmethod
    def from_env(cls) -> "WalletConfig":
        email = os.environ.get("GOOGLE_SERVICE_ACCOUNT_EMAIL", "").strip()
        private_key = os.environ.get("GOOGLE_PRIVATE_KEY", "")
        if not email or not private_key:
            file_email, file_key = _load_service_account_file(os.environ.get("GOOGLE_APPLICATION_CREDENTIALS", ""))
            email = email or file_email
            private_key = private_key or file_key

        origins = tuple(o.strip() for o in os.environ.get("GOOGLE_WALLET_ORIGINS", "").split(",") if o.strip())
        return cls(
            issuer_id=os.environ.get("GOOGLE_WALLET_ISSUER_ID", "").strip(),
            class_suffix=os.environ.get("GOOGLE_WALLET_CLASS_ID", "").strip(),
            service_account_email=email,
            private_key=private_key,
            origins=origins,
            http_timeout=_read_timeout(os.environ.get("WALLET_HTTP_TIMEOUT", "10")),
        )


def _read_timeout(raw: str) -> float:
    try:
        timeout = float(raw)
    except ValueError:
        raise ConfigurationError("Invalid WALLET_HTTP_TIMEOUT")
    if not timeout > 0:
        raise ConfigurationError("Invalid WALLET_HTTP_TIMEOUT")
    return timeout


def _load_service_account_file(path: str) -> tuple[str, str]:
    """Read client_email and private_key from a service-account JSON key file. Empty strings if unusable."""
    if not path:
        return "", ""
    p = Path(path)
    if not p.is_file():
        logger.warning("Service account file %s not found", path)
        return "", ""
    try:
        info = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Could not read service account file %s: %s", path, e)
        return "", ""
    return info.get("client_email", ""), info.get("private_key", "")
