from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any

import pytest
import requests

API = "https://api.github.com"


def make_response(status: int, payload: Any = None, text: str | None = None, url: str = API) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp.encoding = "utf-8"
    if text is not None:
        resp._content = text.encode("utf-8")
    else:
        resp._content = json.dumps(payload if payload is not None else {}).encode("utf-8")
    return resp


@dataclass(slots=True)
class Call:
    url: str
    params: dict[str, Any] | None
    headers: dict[str, str]


class FakeSession:
    """Stands in for ``requests.Session``; unknown URLs answer 404."""

    def __init__(self) -> None:
        self.routes: dict[str, list[requests.Response]] = {}
        self.calls: list[Call] = []

    def add(self, url: str, *responses: requests.Response) -> None:
        self.routes.setdefault(url, []).extend(responses)

    def get(self, url: str, params: dict[str, Any] | None = None, headers: dict[str, str] | None = None, timeout: float | None = None) -> requests.Response:
        self.calls.append(Call(url=url, params=params, headers=dict(headers or {})))
        queue = self.routes.get(url)
        if not queue:
            return make_response(404, {"message": "Not Found"}, url=url)
        # the last response repeats
        return queue.pop(0) if len(queue) > 1 else queue[0]


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("REPORANK_GITHUB_TOKEN", raising=False)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def no_sleep():
    waits: list[float] = []

    async def _sleep(seconds: float) -> None:
        waits.append(seconds)

    _sleep.waits = waits  # type: ignore[attr-defined]
    return _sleep
