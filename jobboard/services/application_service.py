from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobboard.errors import Conflict, Forbidden, NotFound, ValidationError
from jobboard.models.application import Application
from jobboard.models.job import Job
from jobboard.models.user import User
from jobboard.schemas.application import (
    ApplicantOverview,
    ApplicationRead,
    ApplicationStats,
    ApplyRequest,
    DailyCount,
    JobApplicationStats,
    WeeklyCount,
)
from jobboard.services.identity_service import to_user_read
from jobboard.services.job_service import get_job, to_job_read
from jobboard.services.permissions import (
    Role,
    capabilities_for,
    ensure_can_read_job_applications,
    ensure_can_update_application_status,
)
from jobboard.services.profile_service import build_user_profile


logger = logging.getLogger(__name__)

DAILY_BUCKETS = 7
WEEKLY_BUCKETS = 4


def to_application_read(
    application: Application,
    *,
    job: Job | None = None,
    applicant: User | None = None,
) -> ApplicationRead:
    return ApplicationRead(
        id=application.id,
        job_id=application.job_id,
        applicant_id=application.applicant_id,
        resume=application.resume,
        cover_letter=application.cover_letter,
        status=application.status,
        applied_at=application.applied_at,
        job=to_job_read(job) if job is not None else None,
        applicant=to_user_read(applicant) if applicant is not None else None,
    )


def _with_relations(db: Session, applications: list[Application], *, jobs: bool, applicants: bool) -> list[ApplicationRead]:
    job_map: dict[int, Job] = {}
    user_map: dict[int, User] = {}
    if jobs and applications:
        ids = {a.job_id for a in applications}
        job_map = {j.id: j for j in db.query(Job).filter(Job.id.in_(ids)).all()}
    if applicants and applications:
        ids = {a.applicant_id for a in applications}
        user_map = {u.id: u for u in db.query(User).filter(User.id.in_(ids)).all()}
    return [
        to_application_read(a, job=job_map.get(a.job_id), applicant=user_map.get(a.applicant_id))
        for a in applications
    ]


def apply_for_job(db: Session, user: User, job_id: int, payload: ApplyRequest) -> Application:
    if not capabilities_for(user.role).can_apply:
        raise Forbidden("Only job seekers can apply for jobs")

    job = db.query(Job).filter(Job.id == job_id).first()
    if not job or not job.is_active:
        raise NotFound("Job not found or no longer accepting applications")

    existing = (
        db.query(Application)
        .filter(Application.job_id == job.id, Application.applicant_id == user.id)
        .first()
    )
    if existing:
        raise Conflict("You have already applied for this job")

    if not (user.name or "").strip() or not (user.email or "").strip():
        raise ValidationError("Complete your name and email before applying")

    resume = (payload.resume or "").strip()
    if not resume:
        resume = build_user_profile(user.role, user.profile).resume or ""
    if not resume:
        raise ValidationError("A resume is required. Upload one to your profile or include it with the application")

    application = Application(
        job_id=job.id,
        applicant_id=user.id,
        resume=resume,
        cover_letter=payload.cover_letter,
        status="pending",
    )
    db.add(application)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("You have already applied for this job") from exc
    db.refresh(application)
    logger.info("application.created id=%s job_id=%s applicant_id=%s", application.id, job.id, user.id)
    return application


def get_application(db: Session, application_id: int) -> Application:
    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise NotFound("Application not found")
    return application


def update_application_status(db: Session, user: User, application_id: int, status: str) -> Application:
    application = get_application(db, application_id)
    job = db.query(Job).filter(Job.id == application.job_id).first()
    if job is None:
        raise NotFound("Job not found")
    ensure_can_update_application_status(user, job)

    previous = application.status
    application.status = status
    db.commit()
    db.refresh(application)
    logger.info(
        "application.status id=%s %s->%s by=%s", application.id, previous, status, user.id
    )
    return application


def list_applications_for_job(db: Session, user: User, job_id: int) -> list[ApplicationRead]:
    job = get_job(db, job_id)
    ensure_can_read_job_applications(user, job)
    applications = (
        db.query(Application)
        .filter(Application.job_id == job.id)
        .order_by(Application.applied_at.desc(), Application.id.desc())
        .all()
    )
    return _with_relations(db, applications, jobs=False, applicants=True)


def list_applications_for_applicant(db: Session, applicant_id: int) -> list[ApplicationRead]:
    applications = (
        db.query(Application)
        .filter(Application.applicant_id == applicant_id)
        .order_by(Application.applied_at.desc(), Application.id.desc())
        .all()
    )
    return _with_relations(db, applications, jobs=True, applicants=False)


def list_all_applications(db: Session) -> list[ApplicationRead]:
    applications = db.query(Application).order_by(Application.applied_at.desc(), Application.id.desc()).all()
    return _with_relations(db, applications, jobs=True, applicants=True)


def list_applicants_overview(db: Session) -> list[ApplicantOverview]:
    """Every job seeker with the applications they have submitted."""
    seekers = (
        db.query(User)
        .filter(User.role == Role.JOB_SEEKER.value)
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )
    applications = db.query(Application).order_by(Application.applied_at.desc(), Application.id.desc()).all()
    reads = _with_relations(db, applications, jobs=True, applicants=False)
    by_applicant: dict[int, list[ApplicationRead]] = defaultdict(list)
    for read in reads:
        by_applicant[read.applicant_id].append(read)
    return [ApplicantOverview(user=to_user_read(s), applications=by_applicant.get(s.id, [])) for s in seekers]


def _day_of(value: datetime) -> date:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).date()


def _buckets(days: list[date], today: date) -> tuple[list[DailyCount], list[WeeklyCount]]:
    counts: dict[date, int] = defaultdict(int)
    for day in days:
        counts[day] += 1

    daily = []
    for offset in range(DAILY_BUCKETS - 1, -1, -1):
        day = today - timedelta(days=offset)
        daily.append(DailyCount(day=day, count=counts.get(day, 0)))

    weekly = []
    for index in range(WEEKLY_BUCKETS - 1, -1, -1):
        week_end = today - timedelta(days=7 * index)
        week_start = week_end - timedelta(days=6)
        total = sum(n for day, n in counts.items() if week_start <= day <= week_end)
        weekly.append(WeeklyCount(week_start=week_start, week_end=week_end, count=total))
    return daily, weekly


def application_stats(db: Session, user: User, *, today: date | None = None) -> ApplicationStats:
    """Trailing 7 daily and 4 weekly application counts, overall and per job.

    Callers who may read any job's applications get every job; everyone else
    gets the jobs they posted.
    """
    today = today or datetime.now(timezone.utc).date()
    query = db.query(Job)
    if not capabilities_for(user.role).can_read_any_applications:
        query = query.filter(Job.posted_by == user.id)
    jobs = query.order_by(Job.created_at.desc(), Job.id.desc()).all()

    window_start = today - timedelta(days=7 * WEEKLY_BUCKETS - 1)
    per_job: dict[int, list[date]] = defaultdict(list)
    totals: dict[int, int] = defaultdict(int)
    if jobs:
        rows = (
            db.query(Application.job_id, Application.applied_at)
            .filter(Application.job_id.in_([j.id for j in jobs]))
            .all()
        )
        for job_id, applied_at in rows:
            totals[job_id] += 1
            day = _day_of(applied_at)
            if window_start <= day <= today:
                per_job[job_id].append(day)

    job_stats = []
    for job in jobs:
        daily, weekly = _buckets(per_job.get(job.id, []), today)
        job_stats.append(
            JobApplicationStats(job_id=job.id, title=job.title, total=totals.get(job.id, 0), daily=daily, weekly=weekly)
        )

    all_days = [day for days in per_job.values() for day in days]
    daily, weekly = _buckets(all_days, today)
    return ApplicationStats(total=sum(totals.values()), daily=daily, weekly=weekly, jobs=job_stats)
