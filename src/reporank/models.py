from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class Owner:
    login: str
    avatar_url: str | None = None
    html_url: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Owner:
        return cls(
            login=str(data.get("login") or ""),
            avatar_url=data.get("avatar_url"),
            html_url=data.get("html_url"),
        )


@dataclass(slots=True)
class Contributor:
    login: str
    contributions: int = 0
    html_url: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Contributor:
        return cls(
            login=str(data.get("login") or ""),
            contributions=int(data.get("contributions") or 0),
            html_url=data.get("html_url"),
        )


@dataclass(slots=True)
class Repo:
    id: int
    name: str
    full_name: str = ""
    description: str | None = None
    html_url: str | None = None
    owner: Owner | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    language: str | None = None
    languages_url: str | None = None
    contributors_url: str | None = None
    updated_at: str | None = None
    languages: list[str] = field(default_factory=list)
    contributors: list[Contributor] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Repo:
        owner = data.get("owner")
        return cls(
            id=int(data.get("id") or 0),
            name=str(data.get("name") or ""),
            full_name=str(data.get("full_name") or ""),
            description=data.get("description"),
            html_url=data.get("html_url"),
            owner=Owner.from_json(owner) if isinstance(owner, dict) else None,
            stargazers_count=int(data.get("stargazers_count") or 0),
            forks_count=int(data.get("forks_count") or 0),
            language=data.get("language"),
            languages_url=data.get("languages_url"),
            contributors_url=data.get("contributors_url"),
            updated_at=data.get("updated_at"),
        )

    @property
    def owner_login(self) -> str | None:
        return self.owner.login if self.owner and self.owner.login else None


@dataclass(slots=True)
class SearchPage:
    items: list[Repo]
    total_count: int = 0
    incomplete_results: bool = False

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> SearchPage:
        return cls(
            items=[Repo.from_json(r) for r in data.get("items") or [] if isinstance(r, dict)],
            total_count=int(data.get("total_count") or 0),
            incomplete_results=bool(data.get("incomplete_results", False)),
        )
