"""CLI commands for dashboard statistics."""

import json
from typing import Annotated

import typer
from pydantic import BaseModel

from student_intake.api.dashboard import DashboardService
from student_intake.cli.context import get_client, handle_errors, require_login
from student_intake.cli.display import (
    console,
    create_district_table,
    create_districts_tree_table,
    create_school_table,
    create_summary_table,
    create_trends_table,
    print_info,
)
from student_intake.errors import NotFoundError
from student_intake.models.dashboard import DashboardFilters

app = typer.Typer(
    name="dashboard",
    help="Opt-in, referral and session statistics.",
    no_args_is_help=True,
)

District = Annotated[int | None, typer.Option("--district", help="District ID")]
School = Annotated[int | None, typer.Option("--school", help="School ID")]
Start = Annotated[str | None, typer.Option("--start", help="Start date (YYYY-MM-DD)")]
End = Annotated[str | None, typer.Option("--end", help="End date (YYYY-MM-DD)")]
Period = Annotated[
    str | None,
    typer.Option("--period", help="weekly, monthly, quarterly or yearly"),
]
ServiceStatus = Annotated[
    list[str] | None,
    typer.Option("--status", help="Service status (repeatable)"),
]
FiscalPeriod = Annotated[
    str | None, typer.Option("--fiscal-period", help="Fiscal period label")
]
OutputJson = Annotated[
    bool, typer.Option("--json", "-j", help="Output the result as JSON")
]


def _filters(
    district: int | None,
    school: int | None,
    start: str | None,
    end: str | None,
    period: str | None,
    status: list[str] | None,
    fiscal_period: str | None,
) -> DashboardFilters:
    return DashboardFilters(
        district_id=district,
        school_id=school,
        start_date=start,
        end_date=end,
        period=period,
        service_status=status or [],
        fiscal_period=fiscal_period,
    )


def _print_json(data: BaseModel | list[BaseModel]) -> None:
    if isinstance(data, list):
        console.print_json(json.dumps([item.model_dump(mode="json") for item in data]))
    else:
        console.print_json(data.model_dump_json())


@app.command("summary")
def summary_command(
    district: District = None,
    school: School = None,
    start: Start = None,
    end: End = None,
    period: Period = None,
    status: ServiceStatus = None,
    fiscal_period: FiscalPeriod = None,
    output_json: OutputJson = False,
) -> None:
    """Show headline counts."""
    filters = _filters(district, school, start, end, period, status, fiscal_period)
    with get_client() as client, handle_errors():
        require_login(client)
        try:
            summary = DashboardService(client).summary(filters)
        except NotFoundError as e:
            print_info(e.message)
            return

    if output_json:
        _print_json(summary)
    else:
        console.print(create_summary_table(summary))


@app.command("districts")
def districts_command(
    district: District = None,
    school: School = None,
    start: Start = None,
    end: End = None,
    period: Period = None,
    status: ServiceStatus = None,
    fiscal_period: FiscalPeriod = None,
    output_json: OutputJson = False,
) -> None:
    """Show totals per district."""
    filters = _filters(district, school, start, end, period, status, fiscal_period)
    with get_client() as client, handle_errors():
        require_login(client)
        try:
            rows = DashboardService(client).district_breakdown(filters)
        except NotFoundError as e:
            print_info(e.message)
            return

    if output_json:
        _print_json(rows)
    else:
        console.print(create_district_table(rows))


@app.command("schools")
def schools_command(
    district: District = None,
    school: School = None,
    start: Start = None,
    end: End = None,
    period: Period = None,
    status: ServiceStatus = None,
    fiscal_period: FiscalPeriod = None,
    output_json: OutputJson = False,
) -> None:
    """Show totals per school."""
    filters = _filters(district, school, start, end, period, status, fiscal_period)
    with get_client() as client, handle_errors():
        require_login(client)
        try:
            rows = DashboardService(client).school_breakdown(filters)
        except NotFoundError as e:
            print_info(e.message)
            return

    if output_json:
        _print_json(rows)
    else:
        console.print(create_school_table(rows))


@app.command("trends")
def trends_command(
    district: District = None,
    school: School = None,
    start: Start = None,
    end: End = None,
    period: Period = None,
    status: ServiceStatus = None,
    fiscal_period: FiscalPeriod = None,
    output_json: OutputJson = False,
) -> None:
    """Show opt-ins, referrals and sessions over time."""
    filters = _filters(district, school, start, end, period, status, fiscal_period)
    with get_client() as client, handle_errors():
        require_login(client)
        try:
            points = DashboardService(client).trends(filters)
        except NotFoundError as e:
            print_info(e.message)
            return

    if output_json:
        _print_json(points)
    else:
        console.print(create_trends_table(points))


@app.command("options")
def options_command(output_json: OutputJson = False) -> None:
    """List the districts and schools available as filters."""
    with get_client() as client, handle_errors():
        require_login(client)
        districts = DashboardService(client).districts_schools()

    if output_json:
        _print_json(districts)
    else:
        console.print(create_districts_tree_table(districts))
