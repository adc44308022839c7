"""CLI commands for validating, previewing and submitting intake forms.

Form files are JSON documents shaped like the form itself:

    {
      "student_information": {"first_name": "Ana", ...},
      "parent_guardian_contact": {...},
      "service_request_type": "start_now",
      "insurance_information": {"has_insurance": "no"},
      ...
    }
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from student_intake.api.intake import IntakeService
from student_intake.cli.context import get_client, handle_errors, load_draft
from student_intake.cli.display import (
    console,
    create_payload_table,
    create_validation_table,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from student_intake.intake.submission import SubmissionTracker
from student_intake.intake.transform import serialize_intake
from student_intake.intake.validation import parse_intake, validate_intake

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="form",
    help="Validate, preview and submit intake forms.",
    no_args_is_help=True,
)

FormFile = Annotated[
    Path,
    typer.Argument(
        help="Path to JSON file containing the intake form",
        exists=True,
        readable=True,
        dir_okay=False,
    ),
]
FrontCard = Annotated[
    Path | None,
    typer.Option("--front", help="Image of the front of the insurance card"),
]
BackCard = Annotated[
    Path | None,
    typer.Option("--back", help="Image of the back of the insurance card"),
]


@app.command("validate")
def validate_command(file_path: FormFile) -> None:
    """Check a form without sending it.

    Example:
        intake form validate examples/intake.json
    """
    draft = load_draft(file_path)
    result = validate_intake(draft)

    for warning in result.warnings:
        print_warning(warning)

    if not result.is_valid:
        console.print(create_validation_table(result.errors))
        print_error(f"{len(result.errors)} field(s) need attention.")
        raise typer.Exit(code=1)

    print_success("Intake form is valid.")


@app.command("payload")
def payload_command(
    file_path: FormFile,
    front: FrontCard = None,
    back: BackCard = None,
    output_json: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output the text fields as JSON"),
    ] = False,
) -> None:
    """Show exactly what would be sent for a form."""
    draft = load_draft(file_path, front, back)

    with handle_errors():
        payload = serialize_intake(parse_intake(draft))

    if output_json:
        data = dict(payload.fields)
        data.update({key: card.filename for key, card in payload.files.items()})
        console.print_json(json.dumps(data))
    else:
        console.print(create_payload_table(payload))


@app.command("submit")
def submit_command(
    file_path: FormFile,
    front: FrontCard = None,
    back: BackCard = None,
    captcha: Annotated[
        str | None,
        typer.Option("--captcha", help="CAPTCHA response token"),
    ] = None,
    output_json: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output the result as JSON"),
    ] = False,
) -> None:
    """Validate a form and submit it.

    Keep the student UUID that is printed; it is needed to check the status
    later.

    Example:
        intake form submit examples/intake.json --front card_front.jpg
    """
    draft = load_draft(file_path, front, back)

    with get_client() as client:
        tracker = SubmissionTracker(IntakeService(client))
        result = tracker.submit(draft, captcha_token=captcha)

    if output_json:
        console.print_json(
            json.dumps(
                {
                    "state": result.state.value,
                    "student_uuid": result.student_uuid,
                    "message": result.message,
                    "errors": result.errors,
                    "warnings": result.warnings,
                }
            )
        )
        if not result.succeeded:
            raise typer.Exit(code=1)
        return

    for warning in result.warnings:
        print_warning(warning)

    if not result.succeeded:
        if result.errors:
            console.print(create_validation_table(result.errors))
        print_error(result.message or "Submission failed.")
        raise typer.Exit(code=1)

    print_success("Intake form submitted.")
    console.print(f"  [bold]Student UUID:[/bold] {result.student_uuid}")
    print_info("Save this UUID to check the status of the submission later.")
