"""Shared helpers for CLI commands: session bootstrap, first-run setup, error reporting."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

import typer

from grain.application.accounting import recalculate_overall_stats
from grain.application.config import (
    GrainConfig,
    GrainPaths,
    load_config,
    resolve_paths,
    save_config,
)
from grain.application.tracker_service import TrackerService
from grain.domain.constants import DEFAULT_BREAK_START, DEFAULT_WEEKLY_GOAL
from grain.domain.errors import GrainError, InternalConsistencyError
from grain.infrastructure.json_store import JsonStateRepository
from grain.interface.format import format_header

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Everything one command invocation works on."""

    paths: GrainPaths
    config: GrainConfig
    service: TrackerService


def _ask_int(prompt: str, default: int, minimum: int) -> int:
    answer = typer.prompt(prompt, default=str(default), show_default=True)
    try:
        value = int(answer)
    except ValueError:
        value = minimum - 1
    if value < minimum:
        typer.echo("Invalid input, using default.")
        return default
    return value


def run_first_time_setup(paths: GrainPaths) -> GrainConfig:
    """Ask for the weekly goal and starting break credits, then save them."""
    typer.echo(format_header("👋 Welcome to Grain!"))
    goal = _ask_int("Enter your study goal per week", DEFAULT_WEEKLY_GOAL, minimum=1)
    break_start = _ask_int("Set initial break credits", DEFAULT_BREAK_START, minimum=0)

    save_config(paths.config_path, {"weekly_goal": goal, "break_start": break_start})
    typer.echo(f"✨ Configuration saved to {paths.config_path}")
    return load_config(paths.config_path)


def open_session(now: datetime | None = None) -> Session:
    """
    Resolve paths, load config (prompting on first run) and state,
    and refresh the streak before any command runs.
    """
    paths = resolve_paths()
    config = load_config(paths.config_path)
    if config is None:
        config = run_first_time_setup(paths)

    repo = JsonStateRepository(paths.data_path, paths.backup_dir)
    first_run = not repo.exists()
    state = repo.load(config)
    recalculate_overall_stats(state, now)

    if first_run:
        repo.save(state)

    return Session(paths=paths, config=config, service=TrackerService(state, repo))


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Turn GrainError into a red message on stderr and a non-zero exit."""
    try:
        yield
    except InternalConsistencyError as e:
        logger.debug("Internal consistency failure", exc_info=True)
        typer.secho(f"Error: internal error: {e}", fg="red", err=True)
        typer.secho(
            "Your data file may have been edited or corrupted. "
            "Consider 'grain restore' from a backup.",
            fg="yellow",
            err=True,
        )
        raise typer.Exit(2) from e
    except GrainError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1) from e
