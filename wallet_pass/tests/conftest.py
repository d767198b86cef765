"""
Pytest configuration for wallet_pass. Config is injected through dependency overrides,
and Google endpoints are replaced by an in-process fake that records call order.
"""
import json

import httpx
import pytest
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import generate_private_key
from fastapi.testclient import TestClient

from wallet_pass.config import WalletConfig
from wallet_pass.main import app, get_config
from wallet_pass.token_issuer import token_cache

ISSUER_ID = "3388000000022222222"
CLASS_SUFFIX = "digital_placemaking_coupon"
SA_EMAIL = "wallet-demo@example-project.iam.gserviceaccount.com"


class MockResponse:
    def __init__(self, status_code: int = 200, payload=None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    def json(self):
        return self._payload


class FakeGoogle:
    """Stands in for the token endpoint and the Wallet REST API."""

    def __init__(self):
        self.calls: list[str] = []
        self.requests: list[dict] = []
        self.token_status = 200
        self.class_probe_status = 200
        self.class_create_status = 200
        self.object_create_status = 200
        self.object_get_status = 200
        self.expires_in = 3600
        self.object_get_id = None

    def post(self, url, **kwargs):
        self.requests.append({"method": "POST", "url": url, **kwargs})
        if url.endswith("/token"):
            self.calls.append("token")
            if self.token_status != 200:
                return MockResponse(self.token_status, text='{"error": "invalid_grant"}')
            return MockResponse(200, {"access_token": "ya29.fake", "expires_in": self.expires_in, "token_type": "Bearer"})
        if url.endswith("/genericClass"):
            self.calls.append("class-create")
            if self.class_create_status != 200:
                return MockResponse(self.class_create_status, text="class create rejected")
            return MockResponse(200, kwargs.get("json"))
        if url.endswith("/genericObject"):
            self.calls.append("object-create")
            if self.object_create_status == 409:
                return MockResponse(409, text='{"error": {"code": 409, "message": "Resource already exists"}}')
            if self.object_create_status != 200:
                return MockResponse(self.object_create_status, text="object create rejected")
            return MockResponse(200, kwargs.get("json"))
        raise AssertionError(f"unexpected POST {url}")

    def get(self, url, **kwargs):
        self.requests.append({"method": "GET", "url": url, **kwargs})
        if "/genericClass/" in url:
            self.calls.append("class-probe")
            if self.class_probe_status != 200:
                return MockResponse(self.class_probe_status, text="class probe failed")
            return MockResponse(200, {"id": url.rsplit("/", 1)[-1]})
        if "/genericObject/" in url:
            self.calls.append("object-get")
            if self.object_get_status != 200:
                return MockResponse(self.object_get_status, text="object not readable")
            return MockResponse(200, {"id": self.object_get_id or url.rsplit("/", 1)[-1], "state": "ACTIVE"})
        raise AssertionError(f"unexpected GET {url}")


@pytest.fixture(scope="session")
def rsa_key():
    return generate_private_key(65537, 2048, default_backend())


@pytest.fixture(scope="session")
def private_key_pem(rsa_key) -> str:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def config(private_key_pem) -> WalletConfig:
    return WalletConfig(
        issuer_id=ISSUER_ID,
        class_suffix=CLASS_SUFFIX,
        service_account_email=SA_EMAIL,
        private_key=private_key_pem,
    )


@pytest.fixture(autouse=True)
def _reset_state():
    token_cache.clear()
    yield
    token_cache.clear()
    app.dependency_overrides.clear()


@pytest.fixture
def fake_google(monkeypatch):
    fake = FakeGoogle()
    monkeypatch.setattr(httpx, "post", fake.post)
    monkeypatch.setattr(httpx, "get", fake.get)
    return fake


@pytest.fixture
def client(config):
    app.dependency_overrides[get_config] = lambda: config
    return TestClient(app)
