"""
Pass issuance workflow: token -> class ensure -> object build -> object submit -> save token.
Strictly sequential; errors propagate to the app's single error boundary.
"""
import json
import logging
import re
from dataclasses import dataclass

from wallet_pass.config import WalletConfig
from wallet_pass.coupons import CouponData, validate_coupon
from wallet_pass.errors import ConfigurationError, SaveTokenError, UpstreamError, ValidationError
from wallet_pass.pass_builder import build_object_payload
from wallet_pass.save_token import build_save_jwt, build_save_url
from wallet_pass.token_issuer import TokenCache, get_access_token
from wallet_pass.wallet_client import WalletClient

logger = logging.getLogger(__name__)


@dataclass
class IssueResult:
    pass_id: str
    save_url: str
    title: str = ""

    def to_dict(self) -> dict:
        body = {"success": True, "passId": self.pass_id, "saveUrl": self.save_url}
        if self.title:
            body["message"] = f'"{self.title}" is ready to save to Google Wallet.'
        return body


def check_config(config: WalletConfig) -> None:
    """Fail before any network activity when issuer/class or credentials are missing."""
    missing = config.missing()
    if "issuer_id" in missing or "class_suffix" in missing:
        raise ConfigurationError("Google Wallet API not configured. Missing issuer/class.")
    if missing:
        raise ConfigurationError("Missing Google service account credentials")


def is_issuer_object_id(object_id: str, issuer_id: str) -> bool:
    """True for <issuer>.<suffix> ids whose suffix is safe as a single URL path segment."""
    if ".." in object_id:
        return False
    return re.fullmatch(rf"{re.escape(issuer_id)}\.[\w.-]+", object_id) is not None


class PassIssuer:
    def __init__(self, config: WalletConfig, cache: TokenCache | None = None):
        self.config = config
        self.cache = cache

    def _client(self) -> WalletClient:
        access_token = get_access_token(self.config, self.cache)
        return WalletClient(access_token, timeout=self.config.http_timeout)

    def _mint(self, pass_id: str) -> str:
        """Save URL for a created object. Failures keep the pass id so the caller can resume."""
        try:
            return build_save_url(build_save_jwt(self.config, pass_id))
        except Exception as e:
            logger.error("Save token for %s could not be signed: %s", pass_id, e)
            raise SaveTokenError(pass_id, str(e)) from e

    def issue(self, body) -> IssueResult:
        check_config(self.config)
        coupon: CouponData = validate_coupon(body)
        logger.info("Creating wallet pass for coupon: %s", coupon.title)

        client = self._client()
        class_id = client.ensure_class(self.config.class_id)
        payload = build_object_payload(class_id, coupon, self.config.issuer_id)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Creating wallet object with payload: %s", json.dumps(payload, indent=2))

        created = client.submit_object(payload)
        pass_id = created.get("id") or payload["id"]
        save_url = self._mint(pass_id)
        logger.info("Wallet pass created: %s", pass_id)
        return IssueResult(pass_id=pass_id, save_url=save_url, title=coupon.title)

    def resume(self, pass_id) -> IssueResult:
        """Mint a fresh save URL for an object that already exists at the provider."""
        check_config(self.config)
        if not pass_id or not isinstance(pass_id, str):
            raise ValidationError("Missing required field: passId")
        if not is_issuer_object_id(pass_id, self.config.issuer_id):
            raise ValidationError("passId does not belong to this issuer")

        client = self._client()
        existing = client.get_object(pass_id)
        if existing.get("id", pass_id) != pass_id:
            raise UpstreamError("Wallet object id mismatch", 502, f"requested {pass_id}, got {existing.get('id')}")
        return IssueResult(pass_id=pass_id, save_url=self._mint(pass_id))
