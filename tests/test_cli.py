"""Tests for the intake CLI."""

import json
from contextlib import ExitStack
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from typer.testing import CliRunner

from student_intake import __version__
from student_intake.cli.admin import merge_changes
from student_intake.cli.display import format_date, format_status
from student_intake.cli.main import app
from student_intake.models.enums import IntakeStatus, UserRole

runner = CliRunner()


@pytest.fixture
def use_server(make_client):
    """Route CLI requests to a handler, optionally as a signed-in user."""
    with ExitStack() as stack:

        def install(handler, token: str | None = None, role: UserRole | None = None):
            client = make_client(handler, token=token, role=role)
            stack.enter_context(
                patch("student_intake.cli.context.create_client", return_value=client)
            )
            return client

        yield install


class TestDisplayUtilities:
    """Tests for display helpers."""

    def test_format_status(self) -> None:
        result = format_status(IntakeStatus.PROCESSED)
        assert "PROCESSED" in str(result)
        assert result.style == "green"

    def test_format_date(self) -> None:
        assert format_date("2025-01-02T10:00:00") == "2025-01-02"
        assert format_date(None) == "N/A"


class TestRoot:
    """Tests for the root command."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_invalid_log_level(self, form_file: Path) -> None:
        result = runner.invoke(
            app, ["--log-level", "loud", "form", "validate", str(form_file)]
        )
        assert result.exit_code != 0


class TestFormCommands:
    """Tests for intake form commands."""

    def test_validate_valid(self, form_file: Path) -> None:
        result = runner.invoke(app, ["form", "validate", str(form_file)])

        assert result.exit_code == 0
        assert "Intake form is valid" in result.output

    def test_validate_invalid(self, tmp_path: Path, draft_data: dict) -> None:
        """Missing fields are listed and the command fails."""
        draft_data["student_information"]["first_name"] = ""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(draft_data))

        result = runner.invoke(app, ["form", "validate", str(path)])

        assert result.exit_code == 1
        assert "student_information.first_name" in result.output

    def test_validate_safety_warning(self, tmp_path: Path, draft_data: dict) -> None:
        draft_data["immediate_safety_concern"] = "yes"
        path = tmp_path / "urgent.json"
        path.write_text(json.dumps(draft_data))

        result = runner.invoke(app, ["form", "validate", str(path)])

        assert result.exit_code == 0
        assert "911" in result.output

    def test_validate_bad_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{")

        result = runner.invoke(app, ["form", "validate", str(path)])

        assert result.exit_code == 1
        assert "Invalid JSON file" in result.output

    def test_validate_non_utf8_file(self, tmp_path: Path) -> None:
        path = tmp_path / "latin1.json"
        path.write_bytes(b"\xff\xfe\x00garbage")

        result = runner.invoke(app, ["form", "validate", str(path)])

        assert result.exit_code == 1
        assert "Invalid JSON file" in result.output

    def test_payload_json(self, form_file: Path) -> None:
        result = runner.invoke(app, ["form", "payload", str(form_file), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["student_information.full_name"] == "Ana Ruiz"
        assert payload["insurance_information.has_insurance"] == "no"

    def test_submit_success(self, form_file: Path, use_server) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json={"student_uuid": "u-123", "message": "ok"})

        use_server(handler)
        result = runner.invoke(app, ["form", "submit", str(form_file), "--json"])

        assert result.exit_code == 0
        output = json.loads(result.output)
        assert output["state"] == "succeeded"
        assert output["student_uuid"] == "u-123"

    def test_submit_server_error(self, form_file: Path, use_server) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"detail": "Invalid CAPTCHA"})

        use_server(handler)
        result = runner.invoke(app, ["form", "submit", str(form_file)])

        assert result.exit_code == 1
        assert "Invalid CAPTCHA" in result.output


class TestStatusCommand:
    """Tests for intake status."""

    def test_found(self, use_server) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"student_uuid": "u-1", "status": "pending"}
            )

        use_server(handler)
        result = runner.invoke(app, ["status", "u-1", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["status"] == "pending"

    def test_not_found(self, use_server) -> None:
        """An unknown UUID is reported without failing."""
        use_server(lambda r: httpx.Response(404, json={}))
        result = runner.invoke(app, ["status", "nope"])

        assert result.exit_code == 0
        assert "Intake form not found." in result.output

    def test_error(self, use_server) -> None:
        use_server(lambda r: httpx.Response(500, json={"detail": "Server exploded"}))
        result = runner.invoke(app, ["status", "u-1"])

        assert result.exit_code == 1
        assert "Server exploded" in result.output


class TestAuthCommands:
    """Tests for intake auth."""

    def test_login(self, use_server) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"access_token": "tok", "full_name": "Staff", "role": "vpm_admin"},
            )

        client = use_server(handler)
        result = runner.invoke(
            app, ["auth", "login", "--email", "a@x.org", "--password", "Secret123"]
        )

        assert result.exit_code == 0
        assert "Signed in as Staff" in result.output
        assert client.session.token == "tok"

    def test_signup_weak_password(self, use_server) -> None:
        use_server(lambda r: httpx.Response(201, json={}))
        result = runner.invoke(
            app,
            [
                "auth",
                "signup",
                "--email",
                "a@x.org",
                "--name",
                "Staff",
                "--password",
                "weak",
            ],
        )

        assert result.exit_code == 1
        assert "at least 8 characters" in result.output

    def test_whoami_logged_out(self, use_server) -> None:
        use_server(lambda r: httpx.Response(200, json={}))
        result = runner.invoke(app, ["auth", "whoami"])

        assert result.exit_code == 1
        assert "Please log in" in result.output

    def test_logout(self, use_server) -> None:
        client = use_server(lambda r: httpx.Response(200), token="tok")
        result = runner.invoke(app, ["auth", "logout"])

        assert result.exit_code == 0
        assert not client.session.is_authenticated


class TestAdminCommands:
    """Tests for intake admin."""

    def test_queue_requires_admin(self, use_server) -> None:
        use_server(
            lambda r: httpx.Response(200, json=[]),
            token="tok",
            role=UserRole.DISTRICT_VIEWER,
        )
        result = runner.invoke(app, ["admin", "queue"])

        assert result.exit_code == 1
        assert "permission" in result.output

    def test_queue_json(self, use_server) -> None:
        use_server(
            lambda r: httpx.Response(200, json=[{"id": 1, "student_uuid": "u-1"}]),
            token="tok",
            role=UserRole.VPM_ADMIN,
        )
        result = runner.invoke(app, ["admin", "queue", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)[0]["student_uuid"] == "u-1"

    def test_set_status(self, use_server) -> None:
        use_server(
            lambda r: httpx.Response(200, json={"status": "processed"}), token="tok"
        )
        result = runner.invoke(app, ["admin", "set-status", "42", "processed"])

        assert result.exit_code == 0
        assert "processed" in result.output

    def test_update_merges_changes(
        self, use_server, tmp_path: Path, valid_draft
    ) -> None:
        """Changes are applied on top of the stored form and re-sent."""
        sent: list[httpx.Request] = []
        body = {
            "id": "42",
            "student_uuid": "u-1",
            "status": "pending",
            **valid_draft.model_dump(),
        }

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "PUT":
                sent.append(request)
            return httpx.Response(200, json=body)

        use_server(handler, token="tok")
        changes = tmp_path / "changes.json"
        changes.write_text(json.dumps({"student_information": {"grade": "8"}}))

        result = runner.invoke(app, ["admin", "update", "42", str(changes)])

        assert result.exit_code == 0
        assert len(sent) == 1
        assert b'name="student_information.grade"\r\n\r\n8\r\n' in sent[0].content
        assert b"Ana" in sent[0].content

    def test_merge_changes(self) -> None:
        base = {"a": {"b": 1, "c": 2}, "d": [1]}
        assert merge_changes(base, {"a": {"b": 3}, "d": []}) == {
            "a": {"b": 3, "c": 2},
            "d": [],
        }


class TestDashboardCommands:
    """Tests for intake dashboard."""

    def test_summary_requires_login(self, use_server) -> None:
        use_server(lambda r: httpx.Response(200, json={}))
        result = runner.invoke(app, ["dashboard", "summary"])

        assert result.exit_code == 1

    def test_summary_json(self, use_server) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"total_opt_ins": 5})

        use_server(handler, token="tok")
        result = runner.invoke(
            app,
            ["dashboard", "summary", "--district", "3", "--status", "active", "--json"],
        )

        assert result.exit_code == 0
        assert json.loads(result.output)["total_opt_ins"] == 5
        assert seen[0].url.params["district_id"] == "3"
        assert seen[0].url.params["service_status"] == "active"

    def test_no_data(self, use_server) -> None:
        use_server(lambda r: httpx.Response(404), token="tok")
        result = runner.invoke(app, ["dashboard", "trends"])

        assert result.exit_code == 0
        assert "No dashboard data found." in result.output
