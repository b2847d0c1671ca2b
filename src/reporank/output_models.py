from __future__ import annotations

from pydantic import BaseModel


class OwnerOutput(BaseModel):
    login: str
    html_url: str | None = None


class ContributorOutput(BaseModel):
    login: str
    contributions: int = 0


class RepoOutput(BaseModel):
    id: int
    name: str
    full_name: str = ""
    description: str | None = None
    html_url: str | None = None
    owner: OwnerOutput | None = None
    stars: int = 0
    forks: int = 0
    language: str | None = None
    updated_at: str | None = None
    languages: list[str] = []
    contributors: list[ContributorOutput] = []


class SearchResultOutput(BaseModel):
    query: str
    page: int
    total_count: int = 0
    incomplete_results: bool = False
    ranked: bool = False
    rate_limited: bool = False
    error: str | None = None
    items: list[RepoOutput] = []


class ReadmeOutput(BaseModel):
    owner: str
    name: str
    found: bool
    text: str | None = None
    summary: str | None = None


class StatusOutput(BaseModel):
    api_base_url: str
    authenticated: bool
    rate_limited: bool
