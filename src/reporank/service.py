from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
from typing import Any

from reporank.config import AppConfig
from reporank.github.api import GitHubApi
from reporank.http.retry import RATE_LIMITED, FetchFailed, RateLimitFlag, ResilientClient, is_ok
from reporank.models import Repo
from reporank.output_models import (
    ContributorOutput,
    OwnerOutput,
    ReadmeOutput,
    RepoOutput,
    SearchResultOutput,
    StatusOutput,
)
from reporank.query.markdown import strip_markdown, summarize_to_words
from reporank.rank.rerank import RankingSession, maybe_rank

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SearchResult:
    query: str
    page: int
    items: list[Repo] = field(default_factory=list)
    total_count: int = 0
    incomplete_results: bool = False
    ranked: bool = False
    rate_limited: bool = False
    error: str | None = None

    def to_output(self) -> SearchResultOutput:
        return SearchResultOutput(
            query=self.query,
            page=self.page,
            total_count=self.total_count,
            incomplete_results=self.incomplete_results,
            ranked=self.ranked,
            rate_limited=self.rate_limited,
            error=self.error,
            items=[repo_to_output(r) for r in self.items],
        )


def repo_to_output(repo: Repo) -> RepoOutput:
    return RepoOutput(
        id=repo.id,
        name=repo.name,
        full_name=repo.full_name,
        description=repo.description,
        html_url=repo.html_url,
        owner=OwnerOutput(login=repo.owner.login, html_url=repo.owner.html_url) if repo.owner else None,
        stars=repo.stargazers_count,
        forks=repo.forks_count,
        language=repo.language,
        updated_at=repo.updated_at,
        languages=list(repo.languages),
        contributors=[ContributorOutput(login=c.login, contributions=c.contributions) for c in repo.contributors],
    )


def _failure_message(outcome: Any) -> str:
    if isinstance(outcome, FetchFailed):
        return outcome.message
    return "rate limited"


class RepoRankService:
    def __init__(self, config: AppConfig, api: GitHubApi | None = None, flag: RateLimitFlag | None = None):
        self.config = config
        self.flag = flag or (api.client.flag if api is not None else RateLimitFlag())
        if api is None:
            client = ResilientClient(
                self.flag,
                retries=config.retry.retries,
                backoff_ms=config.retry.backoff_ms,
            )
            api = GitHubApi(config.api, client)
        self.api = api

    def search_term(self, query: str) -> str:
        q = query.strip()
        return f"{q} in:name" if q else self.config.rank.default_query

    async def readme_text(self, repo: Repo) -> str:
        if not repo.owner_login or not repo.name:
            return ""
        return strip_markdown(await self.api.readme(repo.owner_login, repo.name))

    async def search(
        self,
        query: str,
        page: int = 1,
        deep: bool = True,
        session: RankingSession | None = None,
    ) -> SearchResult:
        result = SearchResult(query=query, page=page)
        outcome = await self.api.search_repos(self.search_term(query), page)
        if outcome is RATE_LIMITED:
            result.rate_limited = True
            return result
        if not is_ok(outcome):
            result.error = _failure_message(outcome)
            logger.error("Failed to load repositories: %s", result.error)
            return result

        result.items = outcome.items
        result.total_count = outcome.total_count
        result.incomplete_results = outcome.incomplete_results
        if not deep:
            return result

        def _apply(ranked: list[Repo]) -> None:
            result.items = ranked
            result.ranked = True

        await maybe_rank(
            query.strip(),
            outcome.items,
            self.readme_text,
            settings=self.config.rank,
            session=session,
            on_ranked=_apply,
        )
        return result

    async def repo(self, identifier: str) -> Repo | Any:
        return await self.api.repo_details(identifier)

    async def readme(self, owner: str, name: str) -> ReadmeOutput:
        text = await self.api.readme(owner, name)
        return ReadmeOutput(
            owner=owner,
            name=name,
            found=text is not None,
            text=text,
            summary=summarize_to_words(text, self.config.rank.summary_words) if text else None,
        )

    async def _augment(self, repo: Repo) -> Repo:
        async def _none() -> list[Any]:
            return []

        langs, contribs = await asyncio.gather(
            self.api.languages(repo.languages_url) if repo.languages_url else _none(),
            self.api.contributors(repo.contributors_url) if repo.contributors_url else _none(),
        )
        repo.languages = langs if isinstance(langs, list) else []
        repo.contributors = contribs if isinstance(contribs, list) else []
        return repo

    async def user_profile(self, username: str, limit: int = 50) -> list[Repo] | Any:
        outcome = await self.api.user_repos(username)
        if not is_ok(outcome):
            return outcome
        return list(await asyncio.gather(*(self._augment(r) for r in outcome[:limit])))

    def status(self) -> StatusOutput:
        return StatusOutput(
            api_base_url=self.config.api.base_url,
            authenticated=self.config.api.resolved_token() is not None,
            rate_limited=self.flag.is_set,
        )
