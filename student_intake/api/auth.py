"""Authentication and user profile endpoints."""

import logging
import re

from student_intake.api.client import ApiClient, decode
from student_intake.errors import ApiResponseError
from student_intake.models.user import (
    AuthUser,
    MessageResponse,
    SignupResponse,
    TokenResponse,
    UserProfile,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class PasswordPolicyError(ApiResponseError):
    """Password rejected locally before any request is sent."""

    def __init__(self, errors: list[str]):
        super().__init__(", ".join(errors), status_code=None)
        self.errors = errors


def validate_password(password: str) -> list[str]:
    """Check a password against the account policy.

    Returns:
        List of unmet requirements; empty if the password is acceptable.
    """
    errors: list[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least 1 uppercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least 1 digit")
    return errors


class AuthService:
    """Signup, OTP verification, login and password reset.

    A successful OTP verification or login starts a new session on the
    client.
    """

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def _start_session(self, email: str, token: TokenResponse) -> TokenResponse:
        self.client.session.login(
            token.access_token,
            AuthUser(email=email, full_name=token.full_name, role=token.role),
        )
        return token

    def signup(self, full_name: str, email: str, password: str) -> SignupResponse:
        """Create an account; the server emails a one-time code.

        Raises:
            PasswordPolicyError: If the password fails the local policy.
            ApiError: If the request fails.
        """
        errors = validate_password(password)
        if errors:
            raise PasswordPolicyError(errors)

        fallback = "Signup failed. Please try again."
        response = self.client.request(
            "POST",
            "/auth/signup",
            json={"full_name": full_name, "email": email, "password": password},
            fallback=fallback,
        )
        return decode(response, SignupResponse, fallback)

    def verify_otp(self, email: str, otp: str) -> TokenResponse:
        """Confirm the emailed code and sign in."""
        fallback = "OTP verification failed. Please try again."
        response = self.client.request(
            "POST",
            "/auth/verify-otp",
            json={"email": email, "otp": otp},
            fallback=fallback,
        )
        return self._start_session(email, decode(response, TokenResponse, fallback))

    def login(self, email: str, password: str) -> TokenResponse:
        """Sign in with email and password."""
        fallback = "Login failed. Please check your credentials and try again."
        response = self.client.request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
            fallback=fallback,
        )
        return self._start_session(email, decode(response, TokenResponse, fallback))

    def logout(self) -> None:
        self.client.session.logout()

    def forgot_password(self, email: str) -> MessageResponse:
        """Request a password reset email."""
        fallback = "Failed to send reset email. Please try again."
        response = self.client.request(
            "POST",
            "/auth/forgot-password",
            json={"email": email},
            fallback=fallback,
        )
        return decode(response, MessageResponse, fallback)

    def reset_password(self, token: str, new_password: str) -> MessageResponse:
        """Set a new password using the emailed reset token.

        Raises:
            PasswordPolicyError: If the new password fails the local policy.
        """
        errors = validate_password(new_password)
        if errors:
            raise PasswordPolicyError(errors)

        fallback = "Failed to reset password. Please try again."
        response = self.client.request(
            "POST",
            "/auth/reset-password",
            json={"token": token, "new_password": new_password},
            fallback=fallback,
        )
        return decode(response, MessageResponse, fallback)


class UserService:
    """Profile of the signed-in user."""

    PROFILE_PATH = "/auth/user/profile"

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def get_profile(self) -> UserProfile:
        """Fetch the profile and cache it on the session.

        Raises:
            AuthenticationError: If the token is missing or expired.
            NotFoundError: If the profile does not exist.
        """
        generation = self.client.session.generation
        response = self.client.request(
            "GET",
            self.PROFILE_PATH,
            authenticated=True,
            fallback=(
                "Failed to fetch user profile. "
                "Please check your connection and try again."
            ),
            not_found="User profile not found",
        )
        profile = decode(response, UserProfile, "Failed to fetch user profile.")
        self.client.session.set_profile(profile, generation)
        return profile

    def update_profile(self, **updates: object) -> UserProfile:
        """Apply partial updates to the profile."""
        fallback = "Failed to update user profile. Please try again."
        response = self.client.request(
            "PATCH",
            self.PROFILE_PATH,
            authenticated=True,
            json=updates,
            fallback=fallback,
        )
        profile = decode(response, UserProfile, fallback)
        self.client.session.set_profile(profile)
        return profile


def display_name(profile: UserProfile | None) -> str:
    """Name to greet the user with."""
    if profile is None:
        return "User"
    return profile.full_name or profile.email or "User"


def is_profile_valid(profile: UserProfile | None) -> bool:
    """Whether a loaded profile has every required attribute."""
    return bool(profile and profile.id and profile.full_name and profile.email)
