"""Shared fixtures: isolated settings and a fake DMS/storage transport."""
from __future__ import annotations

import json
from typing import Callable
from urllib.parse import parse_qs

import httpx
import pytest

from maestro_dms import DMSConfig, DocumentService


PRESIGN = {
    "url": "https://storage.test/bucket",
    "key": "uploads/abc123",
    "policy": "cG9saWN5",
    "signature": "c2lnbmF0dXJl",
    "AWSAccessKeyId": "AKIATEST",
    "acl": "private",
}


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    for name in ("DMS_HOST", "DMS_API_KEY", "DMS_API_SECRET", "DMS_CUSTOMER", "DMS_LOGGING"):
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)


class FakeDMS:
    """Records requests and answers them from simple per-host handlers."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.storage_requests: list[httpx.Request] = []
        self.dms_handler: Callable[[httpx.Request], httpx.Response] = self.default_dms
        self.storage_handler: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(204)
        )

    @staticmethod
    def default_dms(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/v1/pre-sign":
            return httpx.Response(200, json=PRESIGN)
        return httpx.Response(200, json={"ok": True})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "storage.test":
            self.storage_requests.append(request)
            return self.storage_handler(request)
        self.requests.append(request)
        return self.dms_handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @staticmethod
    def json_body(request: httpx.Request):
        return json.loads(request.content)

    @staticmethod
    def query(request: httpx.Request) -> dict[str, str]:
        return {k: v[0] for k, v in parse_qs(request.url.query.decode()).items()}


@pytest.fixture
def fake_dms() -> FakeDMS:
    return FakeDMS()


@pytest.fixture
def make_service(fake_dms):
    def _make(**kwargs) -> DocumentService:
        kwargs.setdefault("api_key", "token-123")
        kwargs.setdefault("config", DMSConfig(host="https://dms.test"))
        kwargs.setdefault("transport", fake_dms.transport)
        return DocumentService(**kwargs)

    return _make


@pytest.fixture
def service(make_service) -> DocumentService:
    return make_service()
