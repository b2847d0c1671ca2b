from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, TypeVar

import requests

from reporank.config import ApiConfig
from reporank.http.retry import FetchFailed, ResilientClient, is_ok
from reporank.models import Contributor, Repo, SearchPage

logger = logging.getLogger(__name__)

PROJECT_LINK = "https://github.com/reporank/reporank#access-token"
JSON_MEDIA_TYPE = "application/vnd.github+json"
RAW_MEDIA_TYPE = "application/vnd.github.raw"

R = TypeVar("R")

_warned_no_token = False


def _warn_missing_token_once() -> None:
    global _warned_no_token
    if _warned_no_token:
        return
    _warned_no_token = True
    logger.error("No GitHub token provided (set GITHUB_TOKEN). Requests will be unauthenticated and rate-limited.")
    logger.error("See the access token section for details: %s", PROJECT_LINK)


def _map(outcome: Any, convert: Callable[[Any], R]) -> R | Any:
    if not is_ok(outcome):
        return outcome
    try:
        return convert(outcome)
    except (TypeError, ValueError, AttributeError) as exc:
        return FetchFailed(message=f"unexpected response shape: {exc}")


class GitHubApi:
    def __init__(
        self,
        config: ApiConfig,
        client: ResilientClient,
        session: requests.Session | None = None,
    ):
        self.config = config
        self.client = client
        self.session = session or requests.Session()

    def auth_headers(self, accept: str = JSON_MEDIA_TYPE) -> dict[str, str]:
        headers = {"Accept": accept}
        token = self.config.resolved_token()
        if token:
            headers["Authorization"] = f"token {token}"
        else:
            _warn_missing_token_once()
        return headers

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _get_sync(self, url: str, params: dict[str, Any] | None, accept: str) -> requests.Response:
        resp = self.session.get(url, params=params, headers=self.auth_headers(accept), timeout=self.config.timeout)
        resp.raise_for_status()
        return resp

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = self._url(path)

        async def _request() -> Any:
            resp = await asyncio.to_thread(self._get_sync, url, params, JSON_MEDIA_TYPE)
            return resp.json()

        return await self.client.invoke(_request)

    async def _get_text(self, path: str) -> Any:
        url = self._url(path)

        async def _request() -> str:
            resp = await asyncio.to_thread(self._get_sync, url, None, RAW_MEDIA_TYPE)
            return resp.text

        return await self.client.invoke(_request)

    async def search_repos(self, q: str, page: int = 1) -> SearchPage | Any:
        params = {
            "q": q,
            "page": page,
            "sort": "stars",
            "order": "desc",
            "per_page": self.config.per_page,
        }
        return _map(await self._get_json("/search/repositories", params), SearchPage.from_json)

    async def repo_details(self, identifier: str) -> Repo | Any:
        # numeric repository id, or "owner/name"
        if "/" in identifier:
            path = f"/repos/{identifier}"
        else:
            path = f"/repositories/{identifier}"
        return _map(await self._get_json(path), Repo.from_json)

    async def contributors(self, url: str) -> list[Contributor] | Any:
        outcome = await self._get_json(url, {"per_page": self.config.contributors_per_page})
        return _map(outcome, lambda rows: [Contributor.from_json(r) for r in rows])

    async def languages(self, url: str) -> list[str] | Any:
        return _map(await self._get_json(url), lambda data: list(data.keys()))

    async def user_repos(self, username: str) -> list[Repo] | Any:
        outcome = await self._get_json(f"/users/{username}/repos", {"per_page": self.config.user_repos_per_page})
        return _map(outcome, lambda rows: [Repo.from_json(r) for r in rows])

    async def readme(self, owner: str, name: str) -> str | None:
        outcome = await self._get_text(f"/repos/{owner}/{name}/readme")
        if not is_ok(outcome):
            return None
        return outcome or None
