from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import Field

from jobboard.schemas.common import CamelModel
from jobboard.schemas.job import JobRead
from jobboard.schemas.user import UserRead


ApplicationStatus = Literal["pending", "reviewed", "interview", "accepted", "rejected"]


class ApplyRequest(CamelModel):
    resume: str | None = None
    cover_letter: str | None = None


class ApplicationStatusUpdate(CamelModel):
    status: ApplicationStatus


class ApplicationRead(CamelModel):
    id: int
    job_id: int
    applicant_id: int
    resume: str | None = None
    cover_letter: str | None = None
    status: str
    applied_at: datetime
    job: JobRead | None = None
    applicant: UserRead | None = None


class ApplicantOverview(CamelModel):
    user: UserRead
    applications: list[ApplicationRead] = Field(default_factory=list)


class DailyCount(CamelModel):
    day: date
    count: int


class WeeklyCount(CamelModel):
    week_start: date
    week_end: date
    count: int


class JobApplicationStats(CamelModel):
    job_id: int
    title: str
    total: int
    daily: list[DailyCount]
    weekly: list[WeeklyCount]


class ApplicationStats(CamelModel):
    total: int
    daily: list[DailyCount]
    weekly: list[WeeklyCount]
    jobs: list[JobApplicationStats]
