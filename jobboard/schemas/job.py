from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import Field, field_validator

from jobboard.schemas.common import CamelModel
from jobboard.schemas.user import UserSummary


def _coerce_locations(v: Any) -> Any:
    if v is None:
        return v
    if isinstance(v, str):
        v = [v]
    if isinstance(v, list):
        return [str(item).strip() for item in v if item is not None and str(item).strip()]
    return v


def _require_locations(v: list[str] | None) -> list[str] | None:
    if v is not None and not v:
        raise ValueError("At least one location is required")
    return v


class CompanyInfo(CamelModel):
    name: str | None = None
    description: str | None = None
    website: str | None = None
    logo: str | None = None


class Salary(CamelModel):
    # Kept as text so ranges like "3-5 LPA" survive.
    min: str | None = None
    max: str | None = None
    currency: str | None = "INR"

    @field_validator("min", "max", mode="before")
    @classmethod
    def _amount_as_text(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class JobFields(CamelModel):
    company: CompanyInfo | None = None
    job_type: str | None = None
    interview_type: str | None = None
    work_type: str | None = None
    min_education: str | None = None
    salary: Salary | None = None
    requirements: list[str] | None = None
    responsibilities: list[str] | None = None
    skills: list[str] | None = None
    experience_level: str | None = None
    notice_period: str | None = None
    application_deadline: datetime | None = None
    number_of_openings: int | None = None
    year_of_passing: int | None = None
    shift: str | None = None
    walk_in_date: date | None = None
    walk_in_time: str | None = None


class JobCreate(JobFields):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    location: list[str]
    category: str = Field(min_length=1)

    @field_validator("location", mode="before")
    @classmethod
    def _coerce_location(cls, v):
        return _coerce_locations(v)

    @field_validator("location")
    @classmethod
    def _validate_location(cls, v):
        return _require_locations(v)


class JobUpdate(JobFields):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    location: list[str] | None = None
    category: str | None = Field(default=None, min_length=1)
    is_active: bool | None = None

    @field_validator("location", mode="before")
    @classmethod
    def _coerce_location(cls, v):
        return _coerce_locations(v)

    @field_validator("location")
    @classmethod
    def _validate_location(cls, v):
        return _require_locations(v)


class JobRead(CamelModel):
    id: int
    title: str
    description: str
    company: CompanyInfo
    location: list[str] = Field(default_factory=list)
    job_type: str | None = None
    interview_type: str | None = None
    work_type: str | None = None
    min_education: str | None = None
    salary: Salary
    requirements: list[str] = Field(default_factory=list)
    responsibilities: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    experience_level: str | None = None
    notice_period: str | None = None
    category: str
    number_of_openings: int | None = None
    year_of_passing: int | None = None
    shift: str | None = None
    walk_in_date: date | None = None
    walk_in_time: str | None = None
    application_deadline: datetime | None = None
    posted_by: int
    poster: UserSummary | None = None
    is_active: bool
    verification_status: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class JobPage(CamelModel):
    jobs: list[JobRead]
    total_pages: int
    current_page: int
    total_jobs: int


class VerificationStatusUpdate(CamelModel):
    verification_status: str


class CategoryCount(CamelModel):
    category: str
    count: int


class VerificationStatusCount(CamelModel):
    status: str
    count: int


class EliteTeamJobCount(CamelModel):
    user: UserSummary
    job_count: int


class CompanyJobCount(CamelModel):
    name: str
    logo: str | None = None
    website: str | None = None
    job_count: int


class MaintenanceResult(CamelModel):
    updated: int
