from __future__ import annotations

import asyncio
from dataclasses import dataclass
import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from reporank.config import default_config_path, load_config, write_default_config
from reporank.http.retry import RATE_LIMITED, FetchFailed, is_ok
from reporank.models import Repo
from reporank.query.markdown import summarize_to_words
from reporank.service import RepoRankService, repo_to_output
from reporank.util.logging import setup_logging, use_color

app = typer.Typer(help="reporank: GitHub repository search, reranked by what you meant")


@dataclass(slots=True)
class AppState:
    service: RepoRankService
    console: Console
    config_path: Path


def _print_logo(console: Console, show_logo: bool) -> None:
    if not show_logo:
        return
    console.print()
    console.print("[bold cyan]reporank[/bold cyan] [dim]search • readmes • tf-idf[/dim]")
    console.print()


def _state(ctx: typer.Context) -> AppState:
    st = ctx.obj
    if not isinstance(st, AppState):
        raise RuntimeError("app state not initialized")
    return st


def _dump(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


def _fail(console: Console, outcome: Any) -> None:
    if outcome is RATE_LIMITED:
        console.print("[yellow]GitHub API rate limit reached; set GITHUB_TOKEN or try again later.[/yellow]")
    elif isinstance(outcome, FetchFailed):
        console.print(f"[red]request failed:[/red] {outcome.message}")
    raise typer.Exit(1)


def _repo_table(title: str, repos: list[Repo], summary_words: int) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("repository")
    table.add_column("stars", justify="right")
    table.add_column("language")
    table.add_column("description")
    for idx, repo in enumerate(repos, start=1):
        table.add_row(
            str(idx),
            repo.full_name or repo.name,
            f"{repo.stargazers_count:,}",
            repo.language or "",
            summarize_to_words(repo.description, summary_words),
        )
    return table


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[Path | None, typer.Option("--config", help="Config YAML path")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging")] = False,
) -> None:
    setup_logging(verbose)
    cfg_path = config.expanduser() if config else default_config_path()
    cfg = load_config(cfg_path)
    color_on = use_color()
    console = Console(color_system="auto" if color_on else None, force_terminal=color_on)
    ctx.obj = AppState(
        service=RepoRankService(cfg),
        console=console,
        config_path=cfg_path,
    )


@app.command("init-config")
def init_config(
    ctx: typer.Context,
    path: Annotated[Path | None, typer.Option("--path", help="Write config to this path")] = None,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    written = write_default_config(path.expanduser() if path else st.config_path)
    if json_out:
        _dump({"config_path": str(written)})
        return
    st.console.print(f"[green]config:[/green] {written}")


@app.command("search")
def search_cmd(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Search text; descriptive queries are reranked by README content")] = "",
    page: Annotated[int, typer.Option("-p", "--page")] = 1,
    no_deep: Annotated[bool, typer.Option("--no-deep", help="Keep GitHub's ordering")] = False,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    result = asyncio.run(st.service.search(query, page=page, deep=not no_deep))
    if json_out:
        _dump(result.to_output().model_dump())
        return

    _print_logo(st.console, st.service.config.ui.show_logo)
    if result.rate_limited:
        st.console.print("[yellow]GitHub API rate limit reached; showing no results.[/yellow]")
        return
    if result.error:
        st.console.print(f"[red]search failed:[/red] {result.error}")
        raise typer.Exit(1)
    if not result.items:
        st.console.print("[dim]no results[/dim]")
        return

    title = f"{result.total_count:,} repositories (page {result.page})"
    if result.ranked:
        title += " · reranked"
    st.console.print(_repo_table(title, result.items, st.service.config.rank.summary_words))


@app.command("repo")
def repo_cmd(
    ctx: typer.Context,
    identifier: Annotated[str, typer.Argument(help="Repository id or owner/name")],
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    outcome = asyncio.run(st.service.repo(identifier))
    if not is_ok(outcome):
        _fail(st.console, outcome)
    out = repo_to_output(outcome).model_dump()
    if json_out:
        _dump(out)
        return
    for k, v in out.items():
        if k in {"languages", "contributors"}:
            continue
        st.console.print(f"[bold]{k}[/bold]: {v}")


@app.command("readme")
def readme_cmd(
    ctx: typer.Context,
    owner: str,
    name: str,
    summary: Annotated[bool, typer.Option("--summary", help="Print a short plain-text summary")] = False,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    out = asyncio.run(st.service.readme(owner, name))
    if json_out:
        _dump(out.model_dump())
        return
    if not out.found:
        st.console.print(f"[dim]no README for {owner}/{name}[/dim]")
        raise typer.Exit(1)
    typer.echo(out.summary if summary else out.text)


@app.command("user")
def user_cmd(
    ctx: typer.Context,
    username: str,
    limit: Annotated[int, typer.Option("-n", "--limit")] = 50,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    outcome = asyncio.run(st.service.user_profile(username, limit=limit))
    if not is_ok(outcome):
        _fail(st.console, outcome)
    if json_out:
        _dump([repo_to_output(r).model_dump() for r in outcome])
        return
    table = Table(title=f"{username}: {len(outcome)} repositories")
    table.add_column("repository")
    table.add_column("stars", justify="right")
    table.add_column("languages")
    table.add_column("top contributors")
    for repo in outcome:
        table.add_row(
            repo.name,
            f"{repo.stargazers_count:,}",
            ", ".join(repo.languages),
            ", ".join(c.login for c in repo.contributors[:3]),
        )
    st.console.print(table)


@app.command("status")
def status_cmd(
    ctx: typer.Context,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    out = st.service.status().model_dump()
    if json_out:
        _dump(out)
        return
    for k, v in out.items():
        st.console.print(f"[bold]{k}[/bold]: {v}")


if __name__ == "__main__":
    app()
