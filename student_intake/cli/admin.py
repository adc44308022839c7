"""CLI commands for staff review of submitted intakes."""

import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from student_intake.api.admin import AdminService
from student_intake.api.intake import IntakeService
from student_intake.cli.context import (
    build_draft,
    get_client,
    handle_errors,
    read_json,
    require_login,
)
from student_intake.cli.display import (
    console,
    create_details_panel,
    create_queue_table,
    print_error,
    print_info,
    print_success,
)
from student_intake.intake.transform import details_to_draft
from student_intake.models.dashboard import ProcessIntakeRequest
from student_intake.models.enums import IntakeStatus

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="admin",
    help="Review, process and edit submitted intake forms.",
    no_args_is_help=True,
)

OutputJson = Annotated[
    bool, typer.Option("--json", "-j", help="Output the result as JSON")
]


def merge_changes(base: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    """Recursively overlay ``changes`` onto ``base``.

    Nested objects are merged key by key; any other value replaces the
    existing one.
    """
    merged = dict(base)
    for key, value in changes.items():
        current = merged.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merged[key] = merge_changes(current, value)
        else:
            merged[key] = value
    return merged


@app.command("queue")
def queue_command(output_json: OutputJson = False) -> None:
    """List intakes waiting to be processed (VPM admins only)."""
    with get_client() as client, handle_errors():
        items = AdminService(client).intake_queue()

    if output_json:
        console.print_json(
            "[" + ",".join(item.model_dump_json() for item in items) + "]"
        )
        return
    if not items:
        print_info("The intake queue is empty.")
        return
    console.print(create_queue_table(items))


@app.command("show")
def show_command(
    intake_id: Annotated[int, typer.Argument(help="Queue entry ID")],
) -> None:
    """Show a queued intake with its full details (VPM admins only)."""
    with get_client() as client, handle_errors():
        details = AdminService(client).intake_details(intake_id)

    console.print_json(details.model_dump_json())


@app.command("process")
def process_command(
    intake_id: Annotated[int, typer.Argument(help="Queue entry ID")],
    record_id: Annotated[
        str,
        typer.Option("--record-id", "-r", help="SimplePractice record ID"),
    ],
    notes: Annotated[
        str | None,
        typer.Option("--notes", help="Processing notes"),
    ] = None,
) -> None:
    """Mark a queued intake as processed (VPM admins only)."""
    try:
        request = ProcessIntakeRequest(simplepractice_record_id=record_id, notes=notes)
    except ValidationError as e:
        print_error(f"Invalid input: {e.errors()[0]['msg']}")
        raise typer.Exit(code=1) from None

    with get_client() as client, handle_errors():
        AdminService(client).process_intake(intake_id, request)

    print_success(f"Intake {intake_id} marked as processed.")


@app.command("details")
def details_command(
    identifier: Annotated[str, typer.Argument(help="Intake form ID")],
    output_json: OutputJson = False,
) -> None:
    """Show a submitted intake form."""
    with get_client() as client, handle_errors():
        require_login(client)
        details = IntakeService(client).get_details(identifier)

    if output_json:
        console.print_json(details.model_dump_json())
    else:
        console.print(create_details_panel(details))


@app.command("set-status")
def set_status_command(
    identifier: Annotated[str, typer.Argument(help="Intake form ID")],
    status: Annotated[IntakeStatus, typer.Argument(help="New processing status")],
) -> None:
    """Change the processing status of an intake form."""
    with get_client() as client, handle_errors():
        require_login(client)
        new_status = IntakeService(client).update_status(identifier, status)

    print_success(f"Intake {identifier} status set to {new_status.value}.")


@app.command("update")
def update_command(
    identifier: Annotated[str, typer.Argument(help="Intake form ID")],
    changes_file: Annotated[
        Path,
        typer.Argument(
            help="JSON file with the fields to change",
            exists=True,
            readable=True,
            dir_okay=False,
        ),
    ],
    front: Annotated[
        Path | None,
        typer.Option("--front", help="Replacement image of the card front"),
    ] = None,
    back: Annotated[
        Path | None,
        typer.Option("--back", help="Replacement image of the card back"),
    ] = None,
) -> None:
    """Edit a submitted intake form.

    The current form is fetched, the changes are applied on top, and the
    result is validated again before it is sent. Stored card images are kept
    unless replacements are given.
    """
    changes = read_json(changes_file)

    with get_client() as client, handle_errors():
        require_login(client)
        service = IntakeService(client)
        current = details_to_draft(service.get_details(identifier))
        draft = build_draft(
            merge_changes(current.model_dump(), changes), front, back
        )
        updated = service.update(identifier, draft)

    print_success(f"Intake {updated.id} updated.")
