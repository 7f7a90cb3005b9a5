from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from storage_provisioner.config import ApplianceSettings, Settings, StorageSettings

APPLIANCE_URL = "https://nas.test"
APPLIANCE_TOKEN = "test-token"


class ApplianceRecorder:
    """``httpx.MockTransport`` handler that records calls and replays canned responses."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object]] = []
        self.headers: list[httpx.Headers] = []
        self._responses: dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def respond(self, path: str, response: httpx.Response) -> None:
        self._responses[path] = lambda _request: response

    def raise_on(self, path: str, exc: Exception) -> None:
        def _raise(_request: httpx.Request) -> httpx.Response:
            raise exc

        self._responses[path] = _raise

    def paths(self) -> list[str]:
        return [path for _, path, _ in self.calls]

    def payload_for(self, path: str) -> object:
        for _, call_path, payload in self.calls:
            if call_path == path:
                return payload
        raise AssertionError(f"no call to {path}")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content) if request.content else None
        self.calls.append((request.method, request.url.path, payload))
        self.headers.append(request.headers)
        handler = self._responses.get(request.url.path)
        if handler is not None:
            return handler(request)
        return httpx.Response(200, json={"id": len(self.calls)})


@pytest.fixture
def recorder() -> ApplianceRecorder:
    return ApplianceRecorder()


@pytest.fixture
def mock_transport(recorder: ApplianceRecorder) -> httpx.MockTransport:
    return httpx.MockTransport(recorder)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        appliance=ApplianceSettings(base_url=APPLIANCE_URL, api_token=APPLIANCE_TOKEN),
        storage=StorageSettings(sqlite_path=str(tmp_path / "requests.sqlite"), sqlite_wal=False),
    )
