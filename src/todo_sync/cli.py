"""CLI commands for syncing TODO comments with an issue tracker."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer
import yaml

from .comments import SourceReadError
from .config import DEFAULT_CONFIG_NAME, ConfigError, SyncConfig, load_config
from .confirm import ConfirmChoice, ScriptedConfirmer
from .extraction import Todo
from .pipeline import from_diff
from .reconcile import ReconcileResult, UserAbortError
from .skiplist import SkipList, SkipListError
from .tools.diff import parse_unified_diff
from .tools.vcs import GitError, GitRepository
from .trackers import TrackerError, build_tracker

APP_HELP = "Create, comment and tag issues from TODO comments added in git commits."

app = typer.Typer(help=APP_HELP)

_FAILURES = (ConfigError, GitError, SkipListError, SourceReadError, TrackerError)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _open_repository() -> GitRepository:
    try:
        return GitRepository.discover()
    except GitError as error:
        typer.echo(str(error))
        raise typer.Exit(code=1) from error


def _load(repo: GitRepository, config: Optional[str], /, **overrides: Any) -> SyncConfig:
    """Load configuration, defaulting to the file at the repository root."""
    config_path = Path(config) if config else repo.root / DEFAULT_CONFIG_NAME
    if config and not config_path.exists():
        raise typer.BadParameter(f"Config file not found: {config_path}")
    try:
        return load_config(config_path).with_overrides(**overrides)
    except ConfigError as error:
        typer.echo(str(error))
        raise typer.Exit(code=1) from error


def _resolve_repo_slug(repo: GitRepository, config: SyncConfig) -> str:
    if config.repo:
        return config.repo
    slug = repo.remote_slug(config.remote)
    if slug is None:
        typer.echo(
            f"Unable to detect the tracker repository from remote '{config.remote}'. "
            "Set 'repo' in the configuration or pass --repo owner/name."
        )
        raise typer.Exit(code=1)
    return slug


def _echo_progress(error: Optional[BaseException], result: Optional[ReconcileResult], todo: Todo) -> None:
    location = f"{todo.file}:{todo.line}"
    if error is not None:
        typer.echo(f"- {location} {todo.title} -> failed: {error}")
        return
    if result is None:
        return
    suffix = f" #{result.issue}" if result.issue else ""
    typer.echo(f"- {location} {todo.title} -> {result.outcome.value}{suffix}")


@app.command()
def sync(
    base: str = typer.Argument("HEAD~1", help="Revision the diff starts from."),
    head: str = typer.Argument("HEAD", help="Revision the diff ends at (its sha is used in links)."),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Path to the configuration file (defaults to {DEFAULT_CONFIG_NAME} at the repository root).",
    ),
    repo_slug: Optional[str] = typer.Option(None, "--repo", help="Tracker repository as owner/name."),
    confirm: Optional[bool] = typer.Option(
        None,
        "--confirm/--yes",
        help="Ask before creating each issue (--yes creates without asking).",
    ),
    skip_all: bool = typer.Option(
        False,
        "--skip-all",
        help="Answer 'skip' to every create prompt; only existing issues are updated.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Sync TODO comments added between BASE and HEAD with the tracker."""
    _configure_logging(verbose)
    repo = _open_repository()
    settings = _load(repo, config, repo=repo_slug, confirm_create=True if skip_all else confirm)
    slug = _resolve_repo_slug(repo, settings)

    confirmer = ScriptedConfirmer(fallback=ConfirmChoice.SKIP) if skip_all else None
    try:
        sha = repo.rev_parse(head)
        diff = parse_unified_diff(repo.diff(base, head))
        tracker = build_tracker(settings)
        result = from_diff(
            slug,
            diff,
            sha,
            settings,
            tracker=tracker,
            accessor=repo,
            confirmer=confirmer,
            on_progress=_echo_progress,
        )
    except UserAbortError as error:
        typer.echo(str(error))
        raise typer.Exit(code=2) from error
    except _FAILURES as error:
        typer.echo(f"Error: {error}")
        raise typer.Exit(code=1) from error

    if not result.todos:
        typer.echo("No new TODO comments found.")
    else:
        typer.echo(f"Processed {len(result.results)} TODO comment(s).")


@app.command()
def ignore(
    title: str = typer.Argument(..., help="Title to add to the skip list."),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the configuration file.",
    ),
) -> None:
    """Never create an issue for TITLE."""
    repo = _open_repository()
    settings = _load(repo, config)
    skip_list = SkipList(repo)
    try:
        added = skip_list.remember(title, case_sensitive=settings.case_sensitive)
    except SkipListError as error:
        typer.echo(f"Error: {error}")
        raise typer.Exit(code=1) from error
    if added:
        typer.echo(f"Added '{title.strip()}' to {skip_list.path.name}.")
    else:
        typer.echo(f"'{title.strip()}' is already in {skip_list.path.name}.")


@app.command("config")
def show_config(
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the configuration file.",
    ),
) -> None:
    """Print the effective configuration and trigger table."""
    repo = _open_repository()
    settings = _load(repo, config)
    data: Dict[str, Any] = settings.model_dump(by_alias=True, exclude={"labels", "github_token"})
    data["triggers"] = settings.trigger_table()
    typer.echo(yaml.safe_dump(data, sort_keys=False, allow_unicode=True).rstrip())


if __name__ == "__main__":
    app()
