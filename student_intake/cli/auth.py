"""CLI commands for staff accounts: signup, login and password reset."""

from typing import Annotated

import typer

from student_intake.api.auth import AuthService, UserService, display_name
from student_intake.cli.context import get_client, handle_errors, require_login
from student_intake.cli.display import console, print_info, print_success

app = typer.Typer(
    name="auth",
    help="Sign up, sign in and manage your staff account.",
    no_args_is_help=True,
)

Email = Annotated[str, typer.Option("--email", "-e", help="Account email address")]


@app.command("signup")
def signup_command(
    email: Email,
    full_name: Annotated[str, typer.Option("--name", "-n", help="Your full name")],
    password: Annotated[
        str,
        typer.Option(
            "--password",
            prompt=True,
            hide_input=True,
            confirmation_prompt=True,
            help="At least 8 characters with an uppercase letter and a digit",
        ),
    ],
) -> None:
    """Create a staff account. A one-time code is emailed for verification."""
    with get_client() as client, handle_errors():
        response = AuthService(client).signup(full_name, email, password)

    print_success(response.message or "Account created.")
    print_info(f"Run 'intake auth verify --email {email} --otp CODE' to finish.")


@app.command("verify")
def verify_command(
    email: Email,
    otp: Annotated[str, typer.Option("--otp", help="Code from the signup email")],
) -> None:
    """Verify a new account with its one-time code and sign in."""
    with get_client() as client, handle_errors():
        token = AuthService(client).verify_otp(email, otp)

    print_success(f"Verified and signed in as {token.full_name or email}.")


@app.command("login")
def login_command(
    email: Email,
    password: Annotated[
        str, typer.Option("--password", prompt=True, hide_input=True)
    ],
) -> None:
    """Sign in and remember the session for later commands."""
    with get_client() as client, handle_errors():
        token = AuthService(client).login(email, password)

    print_success(f"Signed in as {token.full_name or email}.")


@app.command("logout")
def logout_command() -> None:
    """Forget the stored session."""
    with get_client() as client:
        AuthService(client).logout()
    print_success("Signed out.")


@app.command("forgot-password")
def forgot_password_command(email: Email) -> None:
    """Email a password reset link."""
    with get_client() as client, handle_errors():
        response = AuthService(client).forgot_password(email)

    print_success(
        response.message
        or "If an account exists for that email, a reset link has been sent."
    )


@app.command("reset-password")
def reset_password_command(
    token: Annotated[str, typer.Option("--token", help="Token from the reset email")],
    password: Annotated[
        str,
        typer.Option(
            "--password",
            prompt="New password",
            hide_input=True,
            confirmation_prompt=True,
        ),
    ],
) -> None:
    """Choose a new password using a reset token."""
    with get_client() as client, handle_errors():
        response = AuthService(client).reset_password(token, password)

    print_success(response.message or "Password has been reset.")


@app.command("whoami")
def whoami_command() -> None:
    """Show the signed-in user's profile."""
    with get_client() as client, handle_errors():
        require_login(client)
        profile = UserService(client).get_profile()

    console.print(f"[bold]{display_name(profile)}[/bold]")
    console.print(f"  Email: {profile.email}")
    console.print(f"  Role: {profile.role.value if profile.role else 'public'}")
    console.print(f"  Verified: {'yes' if profile.is_verified else 'no'}")
