"""Pytest configuration and fixtures."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from student_intake.api.client import ApiClient, ApiConfig
from student_intake.models.enums import UserRole
from student_intake.models.intake import IntakeDraft
from student_intake.models.user import AuthUser
from student_intake.session.store import Session, SessionStore

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def draft_data() -> dict[str, Any]:
    """A complete, valid form for a student without insurance."""
    return {
        "student_information": {
            "first_name": "Ana",
            "last_name": "Ruiz",
            "grade": "7",
            "school": "Lincoln MS",
            "date_of_birth": "2012-04-03",
            "student_id": "S123",
        },
        "parent_guardian_contact": {
            "name": "Maria Ruiz",
            "email": "m@x.org",
            "phone": "5551234567",
        },
        "service_request_type": "start_now",
        "insurance_information": {"has_insurance": "no"},
        "service_needs": {
            "service_category": ["mental health"],
            "severity_of_concern": "moderate",
            "type_of_service_needed": ["counseling"],
        },
        "immediate_safety_concern": "no",
        "authorization_consent": True,
    }


@pytest.fixture
def valid_draft(draft_data: dict[str, Any]) -> IntakeDraft:
    """A complete, valid draft."""
    return IntakeDraft.model_validate(draft_data)


@pytest.fixture
def insured_draft(draft_data: dict[str, Any]) -> IntakeDraft:
    """A complete, valid draft with insurance details."""
    draft_data["insurance_information"] = {
        "has_insurance": "yes",
        "insurance_company": "Acme Health",
        "policyholder_name": "Maria Ruiz",
        "member_id": "M-9",
        "group_number": "G-1",
    }
    return IntakeDraft.model_validate(draft_data)


@pytest.fixture
def form_file(tmp_path: Path, draft_data: dict[str, Any]) -> Path:
    """The valid draft written to a JSON file."""
    path = tmp_path / "intake.json"
    path.write_text(json.dumps(draft_data), encoding="utf-8")
    return path


@pytest.fixture
def session_file(tmp_path: Path) -> Path:
    """Location for a temporary session file."""
    return tmp_path / "session.json"


@pytest.fixture
def config(session_file: Path) -> ApiConfig:
    """Client config pointing at a fake server with fast retries."""
    return ApiConfig(
        base_url="http://testserver",
        max_retries=2,
        base_delay=0.0,
        max_delay=0.0,
        session_file=session_file,
    )


@pytest.fixture
def make_client(config: ApiConfig) -> Callable[..., ApiClient]:
    """Build a client that answers requests with ``handler``."""

    def factory(
        handler: Handler,
        token: str | None = None,
        role: UserRole | None = None,
    ) -> ApiClient:
        session = Session(SessionStore(config.session_file))
        if token is not None:
            user = AuthUser(email="staff@x.org", full_name="Staff", role=role)
            session.login(token, user)
        return ApiClient(
            config=config, session=session, transport=httpx.MockTransport(handler)
        )

    return factory


def multipart_fields(request: httpx.Request) -> dict[str, str]:
    """Decode the text parts of a multipart request body."""
    content_type = request.headers["content-type"]
    boundary = content_type.split("boundary=")[1].encode()
    fields: dict[str, str] = {}
    for part in request.content.split(b"--" + boundary):
        header, sep, body = part.partition(b"\r\n\r\n")
        if not sep or b"filename=" in header:
            continue
        name = header.split(b'name="')[1].split(b'"')[0].decode()
        fields[name] = body.removesuffix(b"\r\n").decode()
    return fields


def multipart_filenames(request: httpx.Request) -> dict[str, str]:
    """Map file part names to their filenames in a multipart request body."""
    content_type = request.headers["content-type"]
    boundary = content_type.split("boundary=")[1].encode()
    files: dict[str, str] = {}
    for part in request.content.split(b"--" + boundary):
        header, sep, _ = part.partition(b"\r\n\r\n")
        if not sep or b"filename=" not in header:
            continue
        name = header.split(b'name="')[1].split(b'"')[0].decode()
        files[name] = header.split(b'filename="')[1].split(b'"')[0].decode()
    return files
