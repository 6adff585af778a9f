# auth.py
from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from jobboard.schemas.common import CamelModel
from jobboard.schemas.user import UserSummary, validate_email_like


class SignupRequest(CamelModel):
    name: str = Field(min_length=1)
    email: str
    password: str = Field(min_length=6)
    role: str
    profile: dict[str, Any] | None = None

    @field_validator("email")
    @classmethod
    def _validate_email_like(cls, v: str) -> str:
        return validate_email_like(v)


class LoginRequest(CamelModel):
    email: str
    password: str
    role: str

    @field_validator("email")
    @classmethod
    def _validate_email_like(cls, v: str) -> str:
        return validate_email_like(v)


class AuthPayload(CamelModel):
    user: UserSummary
    token: str
    token_type: str = "bearer"


class ForgotPasswordRequest(CamelModel):
    email: str
    role: str

    @field_validator("email")
    @classmethod
    def _validate_email_like(cls, v: str) -> str:
        return validate_email_like(v)


class VerifyOtpRequest(ForgotPasswordRequest):
    otp: str = Field(min_length=1)


class ResetPasswordRequest(VerifyOtpRequest):
    new_password: str = Field(min_length=6)


class GoogleProfile(CamelModel):
    id: str
    email: str
    name: str | None = None
    picture: str | None = None


class GoogleSignInResult(CamelModel):
    new_user: bool
    user: UserSummary | None = None
    token: str | None = None
    # Present when new_user is true: the caller must pick a role and complete sign-up.
    google_profile: GoogleProfile | None = None
    pending_token: str | None = None


class GoogleCompleteRequest(CamelModel):
    pending_token: str
    role: str
