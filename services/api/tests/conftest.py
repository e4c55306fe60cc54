import importlib

import pytest
import anyio
import httpx


@pytest.fixture()
def api_app(monkeypatch):
    monkeypatch.setenv("CHARTSHARE_SHARE_BASE_URL", "https://charts.example/")
    monkeypatch.setenv("CHARTSHARE_CORS_ORIGINS", "https://charts.example")

    from services.common import share as share_module
    from services.api import app as app_module

    importlib.reload(share_module)
    importlib.reload(app_module)

    transport = httpx.ASGITransport(app=app_module.app)
    async_client = httpx.AsyncClient(transport=transport, base_url="http://testserver")

    class SyncClient:
        def __init__(self, default_headers: dict[str, str]):
            self._default_headers = default_headers

        def request(self, method: str, url: str, **kwargs):
            headers = dict(self._default_headers)
            extra_headers = kwargs.pop("headers", None) or {}
            headers.update(extra_headers)
            return anyio.run(lambda: async_client.request(method, url, headers=headers, **kwargs))

        def get(self, url: str, **kwargs):
            return self.request("GET", url, **kwargs)

        def post(self, url: str, **kwargs):
            return self.request("POST", url, **kwargs)

    client = SyncClient({"x-request-id": "test-request"})

    try:
        yield {
            "client": client,
            "module": app_module,
        }
    finally:
        anyio.run(async_client.aclose)
