"""REST API client and per-area services."""

from student_intake.api.admin import AdminService
from student_intake.api.auth import (
    AuthService,
    PasswordPolicyError,
    UserService,
    validate_password,
)
from student_intake.api.client import ApiClient, ApiConfig, create_client
from student_intake.api.dashboard import DashboardService
from student_intake.api.intake import IntakeService

__all__ = [
    "AdminService",
    "ApiClient",
    "ApiConfig",
    "AuthService",
    "DashboardService",
    "IntakeService",
    "PasswordPolicyError",
    "UserService",
    "create_client",
    "validate_password",
]
