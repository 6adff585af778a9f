# user.py
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from jobboard.schemas.common import CamelModel


def validate_email_like(v: str) -> str:
    value = (v or "").strip()
    if "@" not in value:
        raise ValueError("email must contain '@'")
    left, right = value.split("@", 1)
    if not left or not right:
        raise ValueError("email must have text before and after '@'")
    return value.lower()


class UserSummary(CamelModel):
    id: int
    name: str
    email: str
    role: str


class UserRead(UserSummary):
    profile: dict[str, Any] = Field(default_factory=dict)
    google_linked: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EliteTeamCreate(CamelModel):
    name: str = Field(min_length=1)
    email: str
    password: str = Field(min_length=6)

    @field_validator("email")
    @classmethod
    def _validate_email_like(cls, v: str) -> str:
        return validate_email_like(v)


class EliteTeamUpdate(CamelModel):
    name: str | None = None
    email: str | None = None
    password: str | None = Field(default=None, min_length=6)

    @field_validator("email")
    @classmethod
    def _validate_email_like(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return validate_email_like(v)
