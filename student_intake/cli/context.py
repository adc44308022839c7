"""Shared helpers for CLI commands: client construction and error reporting."""

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from pydantic import ValidationError

from student_intake.api.client import ApiClient, create_client
from student_intake.cli.display import (
    console,
    create_validation_table,
    print_error,
    print_warning,
)
from student_intake.errors import ApiError, AuthenticationError
from student_intake.intake.validation import IntakeValidationError
from student_intake.models.intake import InsuranceCard, IntakeDraft

logger = logging.getLogger(__name__)


def get_client() -> ApiClient:
    """Build an API client from the environment, exiting on bad configuration."""
    try:
        return create_client()
    except ValueError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(code=1) from None


def require_login(client: ApiClient) -> None:
    """Fail early when no user is signed in.

    Raises:
        AuthenticationError: If the session holds no token.
    """
    if not client.session.is_authenticated:
        raise AuthenticationError("Please log in to continue.")


@contextmanager
def handle_errors() -> Iterator[None]:
    """Report API and validation failures and exit with status 1."""
    try:
        yield
    except IntakeValidationError as e:
        console.print(create_validation_table(e.errors))
        for warning in e.result.warnings:
            print_warning(warning)
        print_error("Intake form is invalid.")
        raise typer.Exit(code=1) from None
    except ApiError as e:
        print_error(e.message)
        raise typer.Exit(code=1) from None


def read_json(path: Path) -> dict:
    """Load a JSON object from a file, exiting on unreadable input."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        print_error(f"Invalid JSON file: {e}")
        raise typer.Exit(code=1) from None

    if not isinstance(data, dict):
        print_error("Form file must contain a JSON object")
        raise typer.Exit(code=1)
    return data


def build_draft(
    data: dict, front: Path | None = None, back: Path | None = None
) -> IntakeDraft:
    """Create a draft from parsed JSON and attach any card images."""
    try:
        draft = IntakeDraft.model_validate(data)
    except ValidationError as e:
        print_error(
            f"Form file has an unexpected structure: {e.error_count()} error(s)"
        )
        raise typer.Exit(code=1) from None

    try:
        if front is not None:
            draft.insurance_information.insurance_card_front = InsuranceCard.from_path(
                front
            )
        if back is not None:
            draft.insurance_information.insurance_card_back = InsuranceCard.from_path(
                back
            )
    except OSError as e:
        print_error(f"Cannot read insurance card image: {e}")
        raise typer.Exit(code=1) from None
    return draft


def load_draft(
    path: Path, front: Path | None = None, back: Path | None = None
) -> IntakeDraft:
    """Read a draft from a JSON file."""
    return build_draft(read_json(path), front, back)
