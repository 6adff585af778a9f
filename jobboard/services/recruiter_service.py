"""Read-only views over job seekers for recruiter, admin and eliteTeam users."""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from jobboard.errors import NotFound
from jobboard.models.user import User
from jobboard.schemas.profile import JobSeekerProfile
from jobboard.services.identity_service import list_users
from jobboard.services.permissions import Role
from jobboard.services.profile_service import build_user_profile


@dataclass
class ApplicantFilters:
    skills: list[str] = field(default_factory=list)
    location: str | None = None
    experience: str | None = None
    category: str | None = None
    education: str | None = None
    notice_period: str | None = None
    gender: str | None = None


def get_job_seeker(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user or user.role != Role.JOB_SEEKER.value:
        raise NotFound("Job seeker not found")
    return user


def _same(expected: str | None, actual: str | None) -> bool:
    return not expected or (actual or "").strip().lower() == expected.strip().lower()


def matches(profile: JobSeekerProfile, filters: ApplicantFilters) -> bool:
    if filters.skills:
        owned = {s.strip().lower() for s in profile.skills}
        if not any(s.strip().lower() in owned for s in filters.skills):
            return False
    if filters.location:
        needle = filters.location.strip().lower()
        haystack = f"{profile.preferred_location or ''} {profile.address or ''}".lower()
        if needle not in haystack:
            return False
    return (
        _same(filters.experience, profile.exp_in_work)
        and _same(filters.category, profile.preferred_category)
        and _same(filters.education, profile.highest_education)
        and _same(filters.notice_period, profile.notice_period)
        and _same(filters.gender, profile.gender)
    )


def filter_job_seekers(db: Session, filters: ApplicantFilters) -> list[User]:
    # Profiles are JSON documents, so matching happens here rather than in SQL.
    seekers = list_users(db, Role.JOB_SEEKER.value)
    return [u for u in seekers if matches(build_user_profile(u.role, u.profile), filters)]
