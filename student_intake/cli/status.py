"""CLI command for the public status lookup."""

import json
from typing import Annotated

import typer

from student_intake.api.intake import IntakeService
from student_intake.cli.context import get_client
from student_intake.cli.display import (
    console,
    create_status_panel,
    print_error,
    print_info,
)
from student_intake.intake.submission import StatusChecker, StatusState


def status_command(
    student_uuid: Annotated[
        str, typer.Argument(help="Student UUID returned when the form was submitted")
    ],
    output_json: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output the status record as JSON"),
    ] = False,
) -> None:
    """Check the status of a submitted intake form.

    No login is required. An unknown UUID is reported but is not an error.

    Example:
        intake status 3f2b9c1e-8d4a-4a57-9b1f-0c6e2d7a5e11
    """
    with get_client() as client:
        outcome = StatusChecker(IntakeService(client)).check(student_uuid)

    if outcome.state == StatusState.FOUND and outcome.record is not None:
        if output_json:
            console.print_json(outcome.record.model_dump_json())
        else:
            console.print(create_status_panel(outcome.record))
        return

    if outcome.state == StatusState.NOT_FOUND:
        if output_json:
            console.print_json(json.dumps({"status": None, "message": outcome.message}))
        else:
            print_info(outcome.message or "Intake form not found.")
        return

    print_error(outcome.message or "Status check failed.")
    raise typer.Exit(code=1)
