"""Job postings: creation, updates, verification workflow, listing and aggregate views."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from urllib.parse import unquote

from sqlalchemy import false, func, or_
from sqlalchemy.orm import Session

from jobboard.data.options import (
    CATEGORY_OPTIONS,
    DEFAULT_JOB_TYPE,
    DEFAULT_SALARY_CURRENCY,
    NOT_VERIFIED,
    VERIFICATION_STATUS_OPTIONS,
    VERIFIED,
    WALK_IN,
)
from jobboard.errors import Forbidden, NotFound, ValidationError
from jobboard.models.application import Application
from jobboard.models.job import LOCATION_SEPARATOR, Job
from jobboard.models.user import User
from jobboard.schemas.job import (
    CategoryCount,
    CompanyInfo,
    CompanyJobCount,
    EliteTeamJobCount,
    JobCreate,
    JobPage,
    JobRead,
    JobUpdate,
    Salary,
    VerificationStatusCount,
)
from jobboard.services.identity_service import to_user_summary
from jobboard.services.permissions import (
    COMPANY_ROLES,
    Role,
    capabilities_for,
    ensure_can_delete_job,
    ensure_can_update_job,
)
from jobboard.services.profile_service import build_user_profile


logger = logging.getLogger(__name__)

SORT_OPTIONS = ("newest", "oldest", "salary-high", "salary-low", "company")

_LIST_FIELDS = ("requirements", "responsibilities", "skills")
_NON_NULLABLE_FIELDS = ("title", "description", "category", "location", "is_active")
_SEPARATORS_RE = re.compile(r"[\s_\-+.]+")
_AMOUNT_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


@dataclass
class JobFilters:
    search: str | None = None
    location: str | None = None
    job_type: str | None = None
    work_type: str | None = None
    experience_level: str | None = None
    category: str | None = None
    verification_status: str | None = None
    posted_by: int | None = None
    posted_by_admin: bool = False
    include_inactive: bool = False


def to_job_read(job: Job, poster: User | None = None) -> JobRead:
    return JobRead(
        id=job.id,
        title=job.title,
        description=job.description,
        company=CompanyInfo(
            name=job.company_name,
            description=job.company_description,
            website=job.company_website,
            logo=job.company_logo,
        ),
        location=list(job.location or []),
        job_type=job.job_type,
        interview_type=job.interview_type,
        work_type=job.work_type,
        min_education=job.min_education,
        salary=Salary(min=job.salary_min, max=job.salary_max, currency=job.salary_currency),
        requirements=list(job.requirements or []),
        responsibilities=list(job.responsibilities or []),
        skills=list(job.skills or []),
        experience_level=job.experience_level,
        notice_period=job.notice_period,
        category=job.category,
        number_of_openings=job.number_of_openings,
        year_of_passing=job.year_of_passing,
        shift=job.shift,
        walk_in_date=job.walk_in_date,
        walk_in_time=job.walk_in_time,
        application_deadline=job.application_deadline,
        posted_by=job.posted_by,
        poster=to_user_summary(poster) if poster is not None else None,
        is_active=bool(job.is_active),
        verification_status=job.verification_status,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


def load_posters(db: Session, jobs: list[Job]) -> dict[int, User]:
    ids = {job.posted_by for job in jobs}
    if not ids:
        return {}
    return {user.id: user for user in db.query(User).filter(User.id.in_(ids)).all()}


def to_job_reads(db: Session, jobs: list[Job]) -> list[JobRead]:
    posters = load_posters(db, jobs)
    return [to_job_read(job, posters.get(job.posted_by)) for job in jobs]


def get_job(db: Session, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise NotFound("Job not found")
    return job


def is_walk_in(interview_type: str | None) -> bool:
    return (interview_type or "").strip().lower() == WALK_IN.lower()


def normalize_verification_status(value: str | None) -> str | None:
    """Map spelling variants ("Not_Verified", "not%20verified", ...) onto the stored values."""
    if value is None:
        return None
    text = _SEPARATORS_RE.sub(" ", unquote(str(value)).strip().lower()).strip()
    compact = text.replace(" ", "")
    if compact in ("notverified", "unverified"):
        return NOT_VERIFIED
    if compact == VERIFIED:
        return VERIFIED
    return text or None


def _profile_logo(user: User | None) -> str | None:
    if user is None:
        return None
    profile = build_user_profile(user.role, user.profile)
    return getattr(profile, "company_logo", None) or None


def resolve_company(user: User, supplied: CompanyInfo | None) -> CompanyInfo:
    if capabilities_for(user.role).company_from_profile:
        profile = build_user_profile(user.role, user.profile)
        supplied = supplied or CompanyInfo()
        company = CompanyInfo(
            name=profile.company_name or supplied.name,
            description=profile.company_description or supplied.description,
            website=profile.company_website or supplied.website,
            logo=profile.company_logo or supplied.logo,
        )
        if not company.name:
            raise ValidationError("Company name is required. Complete your company profile before posting jobs")
        return company

    # Staff post on behalf of third-party companies and must say which one.
    if supplied is None or not (supplied.name or "").strip():
        raise ValidationError("Company details with a name are required when posting on behalf of a company")
    return supplied


def create_job(db: Session, user: User, payload: JobCreate) -> Job:
    if not capabilities_for(user.role).can_post_jobs:
        raise Forbidden("Your role cannot post jobs")

    walk_in = is_walk_in(payload.interview_type)
    if walk_in and not (payload.walk_in_date and payload.walk_in_time):
        raise ValidationError("Walk-in date and time are required for walk-in interviews")

    company = resolve_company(user, payload.company)
    salary = payload.salary or Salary()

    job = Job(
        title=payload.title.strip(),
        description=payload.description,
        company_name=company.name.strip(),
        company_description=company.description,
        company_website=company.website,
        company_logo=company.logo,
        location=payload.location,
        job_type=payload.job_type or DEFAULT_JOB_TYPE,
        interview_type=payload.interview_type,
        work_type=payload.work_type,
        min_education=payload.min_education,
        salary_min=salary.min,
        salary_max=salary.max,
        salary_currency=salary.currency or DEFAULT_SALARY_CURRENCY,
        requirements=payload.requirements or [],
        responsibilities=payload.responsibilities or [],
        skills=payload.skills or [],
        experience_level=payload.experience_level,
        notice_period=payload.notice_period,
        category=payload.category.strip(),
        number_of_openings=payload.number_of_openings,
        year_of_passing=payload.year_of_passing,
        shift=payload.shift,
        walk_in_date=payload.walk_in_date if walk_in else None,
        walk_in_time=payload.walk_in_time if walk_in else None,
        application_deadline=payload.application_deadline,
        posted_by=user.id,
        is_active=True,
        verification_status=NOT_VERIFIED,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info("job.created id=%s posted_by=%s role=%s", job.id, user.id, user.role)
    return job


def _apply_company_patch(db: Session, job: Job, company: dict) -> None:
    if not company.get("logo"):
        poster = db.query(User).filter(User.id == job.posted_by).first()
        logo = _profile_logo(poster)
        if logo:
            company["logo"] = logo
    for key in ("name", "description", "website", "logo"):
        if key in company:
            setattr(job, f"company_{key}", company[key])


def update_job(db: Session, user: User, job_id: int, payload: JobUpdate) -> Job:
    job = get_job(db, job_id)
    ensure_can_update_job(user, job)

    changes = payload.model_dump(exclude_unset=True)
    company = changes.pop("company", None)
    salary = changes.pop("salary", None)
    if company is not None and "name" in company and not (company.get("name") or "").strip():
        raise ValidationError("Company name cannot be empty")

    for field, value in changes.items():
        if value is None and field in _NON_NULLABLE_FIELDS:
            continue
        if value is None and field in _LIST_FIELDS:
            value = []
        setattr(job, field, value)
    if "job_type" in changes and not job.job_type:
        job.job_type = DEFAULT_JOB_TYPE

    if company is not None:
        _apply_company_patch(db, job, company)
    if salary is not None:
        job.salary_min = salary.get("min", job.salary_min)
        job.salary_max = salary.get("max", job.salary_max)
        job.salary_currency = salary.get("currency") or job.salary_currency or DEFAULT_SALARY_CURRENCY

    if is_walk_in(job.interview_type):
        if not (job.walk_in_date and job.walk_in_time):
            db.rollback()
            raise ValidationError("Walk-in date and time are required for walk-in interviews")
    else:
        job.walk_in_date = None
        job.walk_in_time = None

    db.commit()
    db.refresh(job)
    logger.info("job.updated id=%s by=%s fields=%s", job.id, user.id, sorted(payload.model_fields_set))
    return job


def delete_job(db: Session, user: User, job_id: int) -> None:
    job = get_job(db, job_id)
    ensure_can_delete_job(user, job)

    # Applications first: nothing else removes them once the job is gone.
    removed = db.query(Application).filter(Application.job_id == job.id).delete(synchronize_session=False)
    db.delete(job)
    db.commit()
    logger.info("job.deleted id=%s by=%s applications_removed=%s", job_id, user.id, removed)


def set_verification_status(db: Session, user: User, job_id: int, raw_status: str) -> Job:
    if not capabilities_for(user.role).can_verify_jobs:
        raise Forbidden("Only admin and eliteTeam users can change verification status")
    status = normalize_verification_status(raw_status)
    if status not in VERIFICATION_STATUS_OPTIONS:
        raise ValidationError(f"verificationStatus must be one of: {', '.join(VERIFICATION_STATUS_OPTIONS)}")
    job = get_job(db, job_id)
    job.verification_status = status
    db.commit()
    db.refresh(job)
    logger.info("job.verification id=%s status=%s by=%s", job.id, status, user.id)
    return job


def _filtered_query(db: Session, filters: JobFilters):
    query = db.query(Job)
    if not filters.include_inactive:
        query = query.filter(Job.is_active.is_(True))
    if filters.search:
        term = filters.search.strip()
        query = query.filter(
            or_(
                Job.title.icontains(term, autoescape=True),
                Job.description.icontains(term, autoescape=True),
                Job.company_name.icontains(term, autoescape=True),
            )
        )
    if filters.location:
        term = filters.location.strip().lower()
        if LOCATION_SEPARATOR in term:
            query = query.filter(false())
        else:
            query = query.filter(Job.location_text.contains(term, autoescape=True))
    if filters.job_type:
        query = query.filter(Job.job_type == filters.job_type)
    if filters.work_type:
        query = query.filter(Job.work_type == filters.work_type)
    if filters.experience_level:
        query = query.filter(Job.experience_level == filters.experience_level)
    if filters.category:
        query = query.filter(Job.category == filters.category)
    if filters.verification_status:
        query = query.filter(Job.verification_status == normalize_verification_status(filters.verification_status))
    if filters.posted_by is not None:
        query = query.filter(Job.posted_by == filters.posted_by)
    if filters.posted_by_admin:
        admin_ids = db.query(User.id).filter(User.role == Role.ADMIN.value)
        query = query.filter(Job.posted_by.in_(admin_ids.scalar_subquery()))
    return query


def salary_amount(value: str | None) -> float | None:
    match = _AMOUNT_RE.search(value or "")
    if not match:
        return None
    return float(match.group(0).replace(",", ""))


def _salary_sort_key(job: Job, *, high_first: bool):
    if high_first:
        amount = salary_amount(job.salary_max) or salary_amount(job.salary_min)
        return (amount is None, -(amount or 0.0), -job.id)
    amount = salary_amount(job.salary_min) or salary_amount(job.salary_max)
    return (amount is None, amount or 0.0, -job.id)


def list_jobs(db: Session, filters: JobFilters, *, page: int = 1, limit: int = 10, sort: str = "newest") -> JobPage:
    if sort not in SORT_OPTIONS:
        raise ValidationError(f"sort must be one of: {', '.join(SORT_OPTIONS)}")
    page = max(page, 1)
    limit = max(limit, 1)
    offset = (page - 1) * limit

    query = _filtered_query(db, filters)
    total = query.count()

    if sort in ("salary-high", "salary-low"):
        # Amounts are free text, so ordering happens after parsing them here.
        ordered = sorted(query.all(), key=lambda j: _salary_sort_key(j, high_first=sort == "salary-high"))
        jobs = ordered[offset:offset + limit]
    else:
        if sort == "oldest":
            query = query.order_by(Job.created_at.asc(), Job.id.asc())
        elif sort == "company":
            query = query.order_by(func.lower(Job.company_name).asc(), Job.id.desc())
        else:
            query = query.order_by(Job.created_at.desc(), Job.id.desc())
        jobs = query.offset(offset).limit(limit).all()

    return JobPage(
        jobs=to_job_reads(db, jobs),
        total_pages=math.ceil(total / limit) if total else 0,
        current_page=page,
        total_jobs=total,
    )


def count_jobs_by_category(db: Session) -> list[CategoryCount]:
    rows = (
        db.query(Job.category, func.count(Job.id))
        .filter(Job.is_active.is_(True))
        .group_by(Job.category)
        .all()
    )
    counts = {category: int(count) for category, count in rows}
    result = [CategoryCount(category=category, count=counts.pop(category, 0)) for category in CATEGORY_OPTIONS]
    for category, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])):
        result.append(CategoryCount(category=category, count=count))
    return result


def count_jobs_by_verification_status(db: Session) -> list[VerificationStatusCount]:
    rows = db.query(Job.verification_status, func.count(Job.id)).group_by(Job.verification_status).all()
    counts = {status: int(count) for status, count in rows}
    result = [VerificationStatusCount(status=status, count=counts.pop(status, 0)) for status in VERIFICATION_STATUS_OPTIONS]
    for status, count in counts.items():
        # Rows predating the verification workflow have no status until backfilled.
        result.append(VerificationStatusCount(status=status or "unset", count=count))
    return result


def count_jobs_by_elite_team(db: Session) -> list[EliteTeamJobCount]:
    members = db.query(User).filter(User.role == Role.ELITE_TEAM.value).all()
    if not members:
        return []
    rows = (
        db.query(Job.posted_by, func.count(Job.id))
        .filter(Job.posted_by.in_([m.id for m in members]))
        .group_by(Job.posted_by)
        .all()
    )
    counts = {posted_by: int(count) for posted_by, count in rows}
    result = [EliteTeamJobCount(user=to_user_summary(m), job_count=counts.get(m.id, 0)) for m in members]
    result.sort(key=lambda item: (-item.job_count, item.user.name.lower()))
    return result


def list_companies(db: Session) -> list[CompanyJobCount]:
    rows = (
        db.query(
            Job.company_name,
            func.max(Job.company_logo),
            func.max(Job.company_website),
            func.count(Job.id),
        )
        .filter(Job.is_active.is_(True))
        .group_by(Job.company_name)
        .order_by(func.count(Job.id).desc(), Job.company_name.asc())
        .all()
    )
    return [
        CompanyJobCount(name=name, logo=logo or None, website=website or None, job_count=int(count))
        for name, logo, website, count in rows
    ]


def sync_poster_logo(db: Session, user: User, logo: str | None) -> int:
    updated = (
        db.query(Job)
        .filter(Job.posted_by == user.id)
        .update({Job.company_logo: logo}, synchronize_session=False)
    )
    db.commit()
    return int(updated or 0)


def resync_company_logos(db: Session) -> int:
    """Copy every jobHoster/recruiter profile logo onto the jobs they posted."""
    updated = 0
    posters = db.query(User).filter(User.role.in_(COMPANY_ROLES)).all()
    for poster in posters:
        logo = _profile_logo(poster)
        if not logo:
            continue
        updated += int(
            db.query(Job)
            .filter(Job.posted_by == poster.id)
            .filter(or_(Job.company_logo.is_(None), Job.company_logo != logo))
            .update({Job.company_logo: logo}, synchronize_session=False)
            or 0
        )
    db.commit()
    logger.info("maintenance.company_logos updated=%s", updated)
    return updated


def backfill_verification_status(db: Session) -> int:
    updated = (
        db.query(Job)
        .filter(or_(Job.verification_status.is_(None), Job.verification_status == ""))
        .update({Job.verification_status: NOT_VERIFIED}, synchronize_session=False)
    )
    db.commit()
    logger.info("maintenance.verification_status updated=%s", updated)
    return int(updated or 0)
