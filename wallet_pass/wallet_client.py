"""
Thin client for the Google Wallet generic class/object endpoints.
All calls are bearer-authenticated; non-success statuses become UpstreamError with the body verbatim.
"""
import logging

import httpx

from wallet_pass.config import WALLET_API_URL
from wallet_pass.errors import UpstreamError
from wallet_pass.pass_builder import build_class_payload

logger = logging.getLogger(__name__)


def _ok(r) -> bool:
    return 200 <= r.status_code < 300


class WalletClient:
    def __init__(self, access_token: str, timeout: float = 10.0, base_url: str = WALLET_API_URL):
        self.access_token = access_token
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    def _headers(self, json_body: bool = False) -> dict:
        headers = {"Authorization": f"Bearer {self.access_token}"}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _get(self, path: str):
        return httpx.get(f"{self.base_url}/{path}", headers=self._headers(), timeout=self.timeout)

    def _post(self, path: str, payload: dict):
        return httpx.post(
            f"{self.base_url}/{path}",
            json=payload,
            headers=self._headers(json_body=True),
            timeout=self.timeout,
        )

    def ensure_class(self, class_id: str) -> str:
        """
        Make sure genericClass/<class_id> exists. 2xx on the probe returns at once; 404 creates it
        from the fixed template; any other probe status is an error rather than "absent".
        """
        r = self._get(f"genericClass/{class_id}")
        if _ok(r):
            logger.info("Wallet class already exists: %s", class_id)
            return class_id
        if r.status_code != 404:
            raise UpstreamError("Failed to look up GenericClass", r.status_code, r.text)

        logger.info("Creating new wallet class: %s", class_id)
        created = self._post("genericClass", build_class_payload(class_id))
        if not _ok(created):
            raise UpstreamError("Failed to create GenericClass", created.status_code, created.text)
        logger.info("Wallet class created: %s", class_id)
        return class_id

    def get_object(self, object_id: str) -> dict:
        r = self._get(f"genericObject/{object_id}")
        if not _ok(r):
            raise UpstreamError("Failed to retrieve existing wallet object", r.status_code, r.text)
        return r.json()

    def submit_object(self, payload: dict) -> dict:
        """
        Create the object. 409 means it already exists: fetch and return that instead.
        Any other failure carries the create status and body.
        """
        r = self._post("genericObject", payload)
        logger.debug("Object creation response status: %s", r.status_code)
        if _ok(r):
            return r.json()
        if r.status_code == 409:
            logger.warning("Wallet object %s already exists; retrieving", payload.get("id"))
            return self.get_object(payload["id"])
        raise UpstreamError("Failed to create wallet object", r.status_code, r.text)
