"""Role capability table and ownership checks.

Route allow-lists are derived from ``CAPABILITIES`` (see ``roles_with``) so
that adding a role means adding one row here rather than editing handlers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from jobboard.errors import Forbidden
from jobboard.models.job import Job
from jobboard.models.user import User


class Role(str, Enum):
    JOB_SEEKER = "jobSeeker"
    JOB_HOSTER = "jobHoster"
    RECRUITER = "recruiter"
    ADMIN = "admin"
    ELITE_TEAM = "eliteTeam"


ALL_ROLES = tuple(r.value for r in Role)
COMPANY_ROLES = (Role.JOB_HOSTER.value, Role.RECRUITER.value)
STAFF_ROLES = (Role.ADMIN.value, Role.ELITE_TEAM.value)


@dataclass(frozen=True)
class RoleCapabilities:
    can_self_register: bool = False
    can_apply: bool = False
    can_post_jobs: bool = False
    # Company snapshot on new jobs comes from the poster's profile instead of the payload.
    company_from_profile: bool = False
    can_delete_own_jobs: bool = False
    can_delete_any_job: bool = False
    can_update_any_job: bool = False
    can_verify_jobs: bool = False
    can_read_any_applications: bool = False
    can_update_any_application_status: bool = False
    can_browse_job_seekers: bool = False
    can_manage_users: bool = False


CAPABILITIES: dict[str, RoleCapabilities] = {
    Role.JOB_SEEKER.value: RoleCapabilities(can_self_register=True, can_apply=True),
    Role.JOB_HOSTER.value: RoleCapabilities(
        can_self_register=True,
        can_post_jobs=True,
        company_from_profile=True,
        can_delete_own_jobs=True,
    ),
    Role.RECRUITER.value: RoleCapabilities(
        can_self_register=True,
        can_post_jobs=True,
        company_from_profile=True,
        can_delete_own_jobs=True,
        can_read_any_applications=True,
        can_update_any_application_status=True,
        can_browse_job_seekers=True,
    ),
    Role.ADMIN.value: RoleCapabilities(
        can_post_jobs=True,
        can_delete_own_jobs=True,
        can_delete_any_job=True,
        can_update_any_job=True,
        can_verify_jobs=True,
        can_read_any_applications=True,
        can_update_any_application_status=True,
        can_browse_job_seekers=True,
        can_manage_users=True,
    ),
    # Internal staff: posts and verifies on behalf of third parties, never deletes jobs.
    Role.ELITE_TEAM.value: RoleCapabilities(
        can_post_jobs=True,
        can_update_any_job=True,
        can_verify_jobs=True,
        can_read_any_applications=True,
        can_update_any_application_status=True,
        can_browse_job_seekers=True,
    ),
}


def capabilities_for(role: str | None) -> RoleCapabilities:
    return CAPABILITIES.get(role or "", RoleCapabilities())


def roles_with(capability: str) -> tuple[str, ...]:
    return tuple(role for role, caps in CAPABILITIES.items() if getattr(caps, capability))


def is_job_owner(user: User, job: Job) -> bool:
    return job.posted_by == user.id


def ensure_can_update_job(user: User, job: Job) -> None:
    if is_job_owner(user, job) or capabilities_for(user.role).can_update_any_job:
        return
    raise Forbidden("You do not have permission to update this job")


def ensure_can_delete_job(user: User, job: Job) -> None:
    caps = capabilities_for(user.role)
    if caps.can_delete_any_job:
        return
    if caps.can_delete_own_jobs and is_job_owner(user, job):
        return
    raise Forbidden("You do not have permission to delete this job")


def ensure_can_read_job_applications(user: User, job: Job) -> None:
    if is_job_owner(user, job) or capabilities_for(user.role).can_read_any_applications:
        return
    raise Forbidden("You do not have permission to view applications for this job")


def ensure_can_update_application_status(user: User, job: Job) -> None:
    if is_job_owner(user, job) or capabilities_for(user.role).can_update_any_application_status:
        return
    raise Forbidden("You do not have permission to update this application")
