"""Rich display utilities for CLI output."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from student_intake.intake.transform import WirePayload
from student_intake.models.dashboard import (
    DashboardSummary,
    DistrictBreakdown,
    DistrictOption,
    IntakeQueueItem,
    MetricChange,
    SchoolBreakdown,
    TrendPoint,
)
from student_intake.models.enums import IntakeStatus
from student_intake.models.intake import IntakeFormDetails, IntakeStatusRecord

console = Console()


def format_status(status: IntakeStatus) -> Text:
    """Format an intake status with color coding.

    Args:
        status: Intake status.

    Returns:
        Colored text representation.
    """
    style_map = {
        IntakeStatus.PENDING: "yellow",
        IntakeStatus.SUBMITTED: "blue",
        IntakeStatus.PROCESSED: "green",
        IntakeStatus.ACTIVE: "cyan",
    }
    return Text(status.value.upper(), style=style_map.get(status, "white"))


def format_change(change: MetricChange | None) -> Text:
    if change is None:
        return Text("-", style="dim")
    return Text(change.value, style="green" if change.is_positive else "red")


def format_date(value: str | None) -> str:
    """Trim an ISO timestamp to its date, or 'N/A'."""
    if not value:
        return "N/A"
    return value[:10]


def create_validation_table(errors: dict[str, str]) -> Table:
    """Create a table listing field errors.

    Args:
        errors: Field path to message.

    Returns:
        Rich Table object.
    """
    table = Table(title="Validation Errors", show_header=True)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Message", style="red")
    for path, message in errors.items():
        table.add_row(path, message)
    return table


def create_payload_table(payload: WirePayload) -> Table:
    """Create a table showing each wire field and attachment."""
    table = Table(title="Submission Payload", show_header=True)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for key, value in payload.fields.items():
        table.add_row(key, value)
    for key, card in payload.files.items():
        table.add_row(
            key,
            f"[magenta]{card.filename}[/magenta] "
            f"({card.content_type}, {len(card.content)} bytes)",
        )
    return table


def create_status_panel(record: IntakeStatusRecord) -> Panel:
    """Create a panel showing the public status of a submission."""
    lines = [
        f"[bold]Student UUID:[/bold] {record.student_uuid}",
        f"[bold]Status:[/bold] {format_status(record.status)}",
        f"[bold]Submitted:[/bold] {format_date(record.submitted_date)}",
    ]
    if record.processed_date:
        lines.append(f"[bold]Processed:[/bold] {format_date(record.processed_date)}")
    return Panel(
        "\n".join(lines),
        title="[bold]Intake Status[/bold]",
        border_style="blue",
    )


def create_details_panel(details: IntakeFormDetails) -> Panel:
    """Create a panel displaying a full intake form.

    Args:
        details: Intake form as returned by the details endpoint.

    Returns:
        Rich Panel object.
    """
    student = details.student_information
    contact = details.parent_guardian_contact
    insurance = details.insurance_information
    needs = details.service_needs

    lines = [
        f"[bold]ID:[/bold] {details.id}",
        f"[bold]Student UUID:[/bold] {details.student_uuid}",
        f"[bold]Status:[/bold] {format_status(details.status)}",
        f"[bold]Submitted:[/bold] {format_date(details.submitted_date)}",
        "",
        "[bold cyan]Student Information[/bold cyan]",
        f"  Name: {student.first_name or ''} {student.last_name or ''}".rstrip(),
        f"  Grade: {student.grade or 'N/A'}",
        f"  School: {student.school or 'N/A'}",
        f"  Date of Birth: {student.date_of_birth or 'N/A'}",
        f"  Student ID: {student.student_id or 'N/A'}",
        "",
        "[bold cyan]Parent/Guardian Contact[/bold cyan]",
        f"  Name: {contact.name or 'N/A'}",
        f"  Email: {contact.email or 'N/A'}",
        f"  Phone: {contact.phone or 'N/A'}",
        "",
        "[bold cyan]Insurance[/bold cyan]",
        f"  Has Insurance: {insurance.has_insurance or 'N/A'}",
    ]
    if insurance.has_insurance == "yes":
        lines.extend([
            f"  Company: {insurance.insurance_company or 'N/A'}",
            f"  Policyholder: {insurance.policyholder_name or 'N/A'}",
            f"  Member ID: {insurance.member_id or 'N/A'}",
            f"  Group: {insurance.group_number or 'N/A'}",
        ])

    lines.extend([
        "",
        "[bold cyan]Service Needs[/bold cyan]",
        f"  Request Type: {details.service_request_type or 'N/A'}",
        f"  Categories: {', '.join(needs.service_category) or 'N/A'}",
        f"  Severity: {needs.severity_of_concern or 'N/A'}",
        f"  Services: {', '.join(needs.type_of_service_needed) or 'N/A'}",
        "",
        f"[bold]Immediate Safety Concern:[/bold] "
        f"{details.immediate_safety_concern or 'N/A'}",
    ])

    return Panel(
        "\n".join(lines),
        title=f"[bold]Intake Form: {details.id}[/bold]",
        border_style="blue",
    )


def create_queue_table(items: list[IntakeQueueItem]) -> Table:
    """Create a table listing intakes awaiting processing."""
    table = Table(title="Intake Queue", show_header=True)
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Student UUID", style="white", no_wrap=True)
    table.add_column("District", style="white")
    table.add_column("School", style="white")
    table.add_column("Insurance", justify="center")
    table.add_column("Status", justify="center")
    table.add_column("Submitted", style="dim")

    for item in items:
        table.add_row(
            str(item.id),
            item.student_uuid,
            item.district or "-",
            item.school or "-",
            "yes" if item.has_insurance else "no",
            format_status(item.status),
            format_date(item.submitted_date),
        )
    return table


def create_summary_table(summary: DashboardSummary) -> Table:
    table = Table(title="Dashboard Summary", show_header=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Change", justify="right")

    table.add_row(
        "Opt-ins", str(summary.total_opt_ins), format_change(summary.opt_ins_change)
    )
    table.add_row(
        "Referrals",
        str(summary.total_referrals),
        format_change(summary.referrals_change),
    )
    table.add_row(
        "Active Students",
        str(summary.active_students),
        format_change(summary.active_students_change),
    )
    table.add_row(
        "Pending Intakes", str(summary.pending_intakes), Text("-", style="dim")
    )
    table.add_row(
        "Completed Sessions",
        str(summary.completed_sessions),
        format_change(summary.sessions_change),
    )
    return table


def create_district_table(rows: list[DistrictBreakdown]) -> Table:
    table = Table(title="District Breakdown", show_header=True)
    table.add_column("District", style="cyan")
    table.add_column("Opt-ins", justify="right")
    table.add_column("Referrals", justify="right")
    table.add_column("Active", justify="right")
    for row in rows:
        table.add_row(
            row.district_name,
            str(row.opt_ins),
            str(row.referrals),
            str(row.active_students),
        )
    return table


def create_school_table(rows: list[SchoolBreakdown]) -> Table:
    table = Table(title="School Breakdown", show_header=True)
    table.add_column("School", style="cyan")
    table.add_column("District ID", justify="right", style="dim")
    table.add_column("Opt-ins", justify="right")
    table.add_column("Referrals", justify="right")
    table.add_column("Active", justify="right")
    for row in rows:
        table.add_row(
            row.school_name,
            str(row.district_id),
            str(row.opt_ins),
            str(row.referrals),
            str(row.active_students),
        )
    return table


def create_trends_table(points: list[TrendPoint]) -> Table:
    table = Table(title="Trends", show_header=True)
    table.add_column("Period", style="cyan")
    table.add_column("Opt-ins", justify="right")
    table.add_column("Referrals", justify="right")
    table.add_column("Sessions", justify="right")
    for point in points:
        table.add_row(
            point.date, str(point.opt_ins), str(point.referrals), str(point.sessions)
        )
    return table


def create_districts_tree_table(districts: list[DistrictOption]) -> Table:
    """Create a table of filterable districts and their schools."""
    table = Table(title="Districts and Schools", show_header=True)
    table.add_column("District", style="cyan")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Schools", style="white")
    for district in districts:
        schools = ", ".join(f"{s.name} ({s.id})" for s in district.schools)
        table.add_row(district.name, str(district.id), schools or "-")
    return table


def print_error(message: str) -> None:
    """Print an error message.

    Args:
        message: Error message to display.
    """
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message.

    Args:
        message: Success message to display.
    """
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message.

    Args:
        message: Warning message to display.
    """
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message.

    Args:
        message: Info message to display.
    """
    console.print(f"[bold blue]Info:[/bold blue] {message}")


def prompt_confirmation(message: str) -> bool:
    """Prompt the user for yes/no confirmation.

    Args:
        message: Prompt message.

    Returns:
        True if confirmed, False otherwise.
    """
    response = console.input(f"{message} [y/N]: ").strip().lower()
    return response in ("y", "yes")
