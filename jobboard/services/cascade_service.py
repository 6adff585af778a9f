"""Account removal.

Deletion runs as an ordered sequence of independently committed steps:
stored files, then applications, then jobs, then the user row. There is
no foreign-key cascade behind it, so the user row must go last. A failure
part-way leaves the earlier steps applied; it is logged and reported as
``UpstreamFailure``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobboard.errors import Forbidden, NotFound, UpstreamFailure
from jobboard.models.application import Application
from jobboard.models.job import Job
from jobboard.models.user import User
from jobboard.services.permissions import Role
from jobboard.services.storage import ObjectStorage, delete_quietly


logger = logging.getLogger(__name__)

# Roles whose postings are removed together with the account.
_POSTER_ROLES = (Role.JOB_HOSTER.value, Role.RECRUITER.value, Role.ELITE_TEAM.value)


@dataclass
class DeletionSummary:
    user_id: int
    role: str
    files_deleted: int = 0
    files_failed: list[str] = field(default_factory=list)
    applications_deleted: int = 0
    jobs_deleted: int = 0


def profile_file_urls(user: User) -> list[str]:
    profile = user.profile or {}
    urls = [profile.get("photo"), profile.get("resume"), profile.get("companyLogo")]
    documents = profile.get("companyDocument") or []
    if isinstance(documents, str):
        documents = [documents]
    urls.extend(documents)
    return [url for url in urls if url]


def _run_step(db: Session, summary: DeletionSummary, name: str, step: Callable[[], int]) -> int:
    try:
        count = step()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            "account.delete step=%s failed user_id=%s (earlier steps already applied): %s",
            name, summary.user_id, exc,
        )
        raise UpstreamFailure("Account deletion did not complete") from exc
    logger.info("account.delete step=%s user_id=%s count=%s", name, summary.user_id, count)
    return count


def delete_user_account(db: Session, storage: ObjectStorage, user_id: int) -> DeletionSummary:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFound("User not found")
    if user.role == Role.ADMIN.value:
        raise Forbidden("The admin account cannot be deleted")

    summary = DeletionSummary(user_id=user.id, role=user.role)

    for url in profile_file_urls(user):
        if delete_quietly(storage, url):
            summary.files_deleted += 1
        else:
            summary.files_failed.append(url)

    if user.role == Role.JOB_SEEKER.value:
        summary.applications_deleted = _run_step(
            db, summary, "applications",
            lambda: db.query(Application)
            .filter(Application.applicant_id == user.id)
            .delete(synchronize_session=False),
        )

    if user.role in _POSTER_ROLES:
        job_ids = [job_id for (job_id,) in db.query(Job.id).filter(Job.posted_by == user.id).all()]
        if job_ids:
            summary.applications_deleted = _run_step(
                db, summary, "job-applications",
                lambda: db.query(Application)
                .filter(Application.job_id.in_(job_ids))
                .delete(synchronize_session=False),
            )
            summary.jobs_deleted = _run_step(
                db, summary, "jobs",
                lambda: db.query(Job).filter(Job.id.in_(job_ids)).delete(synchronize_session=False),
            )

    _run_step(
        db, summary, "user",
        lambda: db.query(User).filter(User.id == user.id).delete(synchronize_session=False),
    )
    logger.info(
        "account.deleted user_id=%s role=%s files=%s files_failed=%s applications=%s jobs=%s",
        summary.user_id, summary.role, summary.files_deleted, len(summary.files_failed),
        summary.applications_deleted, summary.jobs_deleted,
    )
    return summary
