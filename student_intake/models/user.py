"""Authentication and user profile models."""

from pydantic import BaseModel, Field

from student_intake.models.enums import UserRole


class SignupResponse(BaseModel):
    """Response to a signup request; an OTP is emailed to the user."""

    message: str = Field(default="")
    username: str = Field(default="")
    full_name: str = Field(default="")


class TokenResponse(BaseModel):
    """Bearer token issued by OTP verification or login."""

    access_token: str
    token_type: str = Field(default="bearer")
    username: str = Field(default="")
    full_name: str = Field(default="")
    role: UserRole | None = Field(default=None)


class AuthUser(BaseModel):
    """The signed-in user as remembered by the session."""

    email: str
    full_name: str = Field(default="")
    role: UserRole | None = Field(default=None)


class UserProfile(BaseModel):
    """Profile of the signed-in user."""

    id: int
    full_name: str = Field(default="")
    email: str = Field(default="")
    is_verified: bool = Field(default=False)
    role: UserRole | None = Field(default=None)


class MessageResponse(BaseModel):
    """Generic acknowledgement returned by several endpoints."""

    message: str = Field(default="")
