"""Main CLI entry point for the student intake client."""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from student_intake import __version__
from student_intake.cli.admin import app as admin_app
from student_intake.cli.auth import app as auth_app
from student_intake.cli.dashboard import app as dashboard_app
from student_intake.cli.form import app as form_app
from student_intake.cli.status import status_command

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Create main Typer app
app = typer.Typer(
    name="intake",
    help="Student mental-health intake: submit forms, check status, review.",
    no_args_is_help=True,
)

# Register subcommands
app.add_typer(form_app, name="form")
app.add_typer(auth_app, name="auth")
app.add_typer(admin_app, name="admin")
app.add_typer(dashboard_app, name="dashboard")
app.command("status")(status_command)


def configure_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    httpx_level = max(logging.getLevelName(level), logging.WARNING)
    logging.getLogger("httpx").setLevel(httpx_level)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"intake {__version__}")
        raise typer.Exit()


@app.callback()
def root(
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            "-l",
            help="Logging level (DEBUG, INFO, WARNING, ERROR)",
        ),
    ] = "WARNING",
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit",
        ),
    ] = False,
) -> None:
    """Student mental-health intake client."""
    level = log_level.upper()
    if level not in LOG_LEVELS:
        raise typer.BadParameter(
            f"must be one of {', '.join(LOG_LEVELS)}", param_hint="--log-level"
        )
    configure_logging(level)


def main() -> None:
    """Entry point for the intake CLI."""
    app()


if __name__ == "__main__":
    main()
