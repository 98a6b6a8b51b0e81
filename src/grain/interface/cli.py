"""Grain CLI — logging, views, goal, undo/reset and backup commands."""

import json
import logging
import os
import shutil
import subprocess
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer

from grain.application.config import update_config_file
from grain.domain.constants import RESET_CONFIRMATION, RESTORE_CONFIRMATION
from grain.domain.errors import GrainError, ValidationError
from grain.interface._common import open_session, reporting_errors
from grain.interface.format import credits, format_header, format_log_entry

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="🧘 Grain: Minimalist habit tracker for focused work & breaks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="⚙️  Inspect or edit the grain configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now()


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Track focused work (study) and mindful breaks with a weekly credit system."""
    if verbose >= 2:
        logging.getLogger().setLevel(logging.DEBUG)
    elif verbose == 1:
        logging.getLogger().setLevel(logging.INFO)


# ---------------------------------------------------------------------------
# Logging commands
# ---------------------------------------------------------------------------

AmountArg = Annotated[int, typer.Argument(help="Number of credits (default: 1).")]


@app.command("study")
def study(amount: AmountArg = 1):
    """🧠 Log study credits."""
    with reporting_errors():
        now = _now()
        session = open_session(now)
        session.service.log_study(amount, now)
    typer.echo(f"✨ +{amount} study {credits(amount)} logged. Keep it rolling!")


@app.command("break")
def break_(amount: AmountArg = 1):
    """🍵 Spend break credits."""
    with reporting_errors():
        now = _now()
        session = open_session(now)
        session.service.log_break(amount, now)
    typer.echo(f"🍵 -{amount} break {credits(amount)} logged. Breathe easy.")


app.command("s", hidden=True)(study)
app.command("b", hidden=True)(break_)


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


@app.command("log")
def log_cmd(
    since: Annotated[
        str | None,
        typer.Option(
            "--since",
            help="Show logs since 'today', 'yesterday', 'monday' or a YYYY-MM-DD date.",
        ),
    ] = None,
):
    """🗓️  View log entries (today by default)."""
    with reporting_errors():
        now = _now()
        view = open_session(now).service.entries_since(since, now)

    typer.echo(format_header(f"🗓️  Log {view.header}"))
    if not view.entries:
        typer.echo("No matching entries found.")
        return

    for entry in view.entries:
        typer.echo(format_log_entry(entry))
    typer.echo(f"\nTotal ▸ 🧠 {view.total_study} study   💤 {view.total_breaks} break")


@app.command("week")
def week():
    """📊 View the current weekly overview."""
    with reporting_errors():
        now = _now()
        ov = open_session(now).service.week_overview(now)

    typer.echo(format_header(f"📊 Week of {ov.week_start:%b} {ov.week_start.day}"))
    typer.echo(f"🧠 Study     ▸ {ov.study_credits} / {ov.weekly_goal}")
    typer.echo(f"💤 Breaks    ▸ {ov.breaks_available} / {ov.break_start}")
    typer.echo(f"✨ Surplus   ▸ {ov.surplus}")
    typer.echo(f"🔥 Streak    ▸ {ov.streak} weeks")


@app.command("stats")
def stats():
    """📈 Show overall stats (streak, totals)."""
    with reporting_errors():
        now = _now()
        st = open_session(now).service.lifetime_stats(now)

    typer.echo(format_header("📈 Your Stats"))
    typer.echo(f"🔁 Streak:         {st.streak} weeks")
    typer.echo(f"🏆 Best Surplus:   +{st.best_surplus}")
    typer.echo(f"📚 Total Study:    {st.total_study} credits")
    typer.echo(f"🍵 Total Breaks:   {st.total_breaks} credits")
    typer.echo(f"🧾 Total Entries:  {st.total_entries}")


# ---------------------------------------------------------------------------
# Goal
# ---------------------------------------------------------------------------


@app.command("goal")
def goal(
    amount: Annotated[
        int | None, typer.Argument(help="New weekly study goal. Omit to show the current one.")
    ] = None,
):
    """🎯 View or set your weekly study goal."""
    with reporting_errors():
        session = open_session(_now())
        if amount is None:
            typer.echo(f"🎯 Current weekly study goal: {session.config.weekly_goal} credits")
            return

        if amount <= 0:
            raise ValidationError(
                f"invalid goal amount: '{amount}'. Please provide a positive number"
            )
        update_config_file(session.paths.config_path, weekly_goal=amount)

    typer.echo(f"🎯 Weekly study goal updated to: {amount} credits")


# ---------------------------------------------------------------------------
# Undo / reset
# ---------------------------------------------------------------------------


@app.command("undo")
def undo():
    """🔙 Undo the last logged action."""
    with reporting_errors():
        now = _now()
        service = open_session(now).service
        entry = service.undo(now)

    typer.echo(f"🔙 Undid log: {format_log_entry(entry)}")
    typer.echo(f"Remaining undo steps: {service.remaining_undo}")


@app.command("reset")
def reset(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Bypass the confirmation prompt.")
    ] = False,
):
    """🧹 Reset all data for the current week."""
    with reporting_errors():
        now = _now()
        session = open_session(now)

        if not force:
            answer = typer.prompt(
                "⚠️  Are you sure you want to reset this week's data?\n"
                f'Type "{RESET_CONFIRMATION}" to confirm',
                default="",
                show_default=False,
            )
            if answer.strip() != RESET_CONFIRMATION:
                typer.echo("Reset cancelled.")
                return

        session.service.reset_week(now)

    typer.echo("🧹 Current week data has been reset.")


# ---------------------------------------------------------------------------
# Backup / restore
# ---------------------------------------------------------------------------


def _display_path(path: Path) -> str:
    try:
        return str(Path("~") / path.relative_to(Path.home()))
    except ValueError:
        return str(path)


@app.command("backup")
def backup():
    """🗃️  Save a timestamped backup of all data."""
    with reporting_errors():
        now = _now()
        target = open_session(now).service.backup(now)
    typer.echo(f"🗃️  Backup saved to: {_display_path(target)}")


@app.command("backups")
def backups():
    """🗂️  List available backups, newest first."""
    with reporting_errors():
        session = open_session(_now())
        found = session.service.list_backups()

    if not found:
        typer.echo("No backups found.")
        return
    for path in found:
        typer.echo(path.name)


@app.command("restore")
def restore(
    backup_name: Annotated[str, typer.Argument(help="Backup file name inside the backups directory.")],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Bypass the confirmation prompt.")
    ] = False,
):
    """♻️  Load state from a backup file, overwriting current data."""
    with reporting_errors():
        now = _now()
        session = open_session(now)

        if not force:
            answer = typer.prompt(
                f"⚠️  This will overwrite current data with the contents of '{backup_name}'.\n"
                f'Type "{RESTORE_CONFIRMATION}" to confirm',
                default="",
                show_default=False,
            )
            if answer.strip().lower() not in (RESTORE_CONFIRMATION, "y"):
                typer.echo("Restore cancelled.")
                return

        session.service.restore(backup_name, session.paths.backup_dir, now)

    typer.echo(f"♻️  Data restored from {backup_name} and current stats recalculated.")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display the resolved configuration and file locations."""
    with reporting_errors():
        session = open_session(_now())

    d = session.config.model_dump()
    d.update(
        {
            "config_path": str(session.paths.config_path),
            "data_path": str(session.paths.data_path),
            "backup_dir": str(session.paths.backup_dir),
        }
    )
    typer.echo(json.dumps(d, indent=2))


def _find_editor() -> str | None:
    editor = os.environ.get("EDITOR")
    if editor:
        return editor
    for candidate in ("vim", "nano", "code"):
        if shutil.which(candidate):
            return candidate
    return None


@config_app.command("open")
def config_open():
    """Open the config file in $EDITOR."""
    with reporting_errors():
        session = open_session(_now())
        cfg_path = session.paths.config_path

        editor = _find_editor()
        if editor is None:
            raise GrainError(
                "EDITOR environment variable not set and common editors "
                f"(vim, nano, code) not found.\nPlease edit manually: {cfg_path}"
            )

        typer.echo(f"Opening {cfg_path} with {editor}...")
        try:
            subprocess.run([editor, str(cfg_path)], check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            raise GrainError(
                f"failed to open editor '{editor}': {e}\nCheck if '{editor}' is in your PATH."
            ) from e

    typer.echo("Editor closed. Changes apply the next time you run grain.")


def main():
    app()
