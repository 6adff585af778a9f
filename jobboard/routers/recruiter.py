from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from jobboard.database import get_db
from jobboard.models.user import User
from jobboard.routers.dependencies import require_capability
from jobboard.routers.jobs import listing_filters
from jobboard.schemas.application import ApplicantOverview, ApplicationRead
from jobboard.schemas.common import ApiResponse
from jobboard.schemas.job import JobPage, JobRead
from jobboard.schemas.user import UserRead
from jobboard.services import application_service, identity_service, job_service, recruiter_service
from jobboard.services.permissions import Role


router = APIRouter(prefix="/recruiter", tags=["recruiter"])

_require_reviewer = require_capability("can_browse_job_seekers")


@router.get("/jobseekers", response_model=ApiResponse[list[UserRead]])
def list_job_seekers(
    db: Session = Depends(get_db),
    _user: User = Depends(_require_reviewer),
) -> ApiResponse[list[UserRead]]:
    seekers = identity_service.list_users(db, Role.JOB_SEEKER.value)
    return ApiResponse(data=[identity_service.to_user_read(u) for u in seekers])


@router.get("/jobseekers/{user_id}", response_model=ApiResponse[ApplicantOverview])
def get_job_seeker(
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    _user: User = Depends(_require_reviewer),
) -> ApiResponse[ApplicantOverview]:
    seeker = recruiter_service.get_job_seeker(db, user_id)
    applications = application_service.list_applications_for_applicant(db, seeker.id)
    return ApiResponse(data=ApplicantOverview(user=identity_service.to_user_read(seeker), applications=applications))


@router.get("/applications", response_model=ApiResponse[list[ApplicationRead]])
def list_applications(
    db: Session = Depends(get_db),
    _user: User = Depends(_require_reviewer),
) -> ApiResponse[list[ApplicationRead]]:
    return ApiResponse(data=application_service.list_all_applications(db))


@router.get("/applications/jobseeker/{user_id}", response_model=ApiResponse[list[ApplicationRead]])
def list_seeker_applications(
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    _user: User = Depends(_require_reviewer),
) -> ApiResponse[list[ApplicationRead]]:
    seeker = recruiter_service.get_job_seeker(db, user_id)
    return ApiResponse(data=application_service.list_applications_for_applicant(db, seeker.id))


@router.get("/jobs", response_model=ApiResponse[JobPage])
def list_jobs(
    filters: job_service.JobFilters = Depends(listing_filters),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort: str = Query(default="newest"),
    db: Session = Depends(get_db),
    _user: User = Depends(_require_reviewer),
) -> ApiResponse[JobPage]:
    return ApiResponse(data=job_service.list_jobs(db, filters, page=page, limit=limit, sort=sort))


@router.get("/jobs/{job_id}", response_model=ApiResponse[JobRead])
def get_job(
    job_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    _user: User = Depends(_require_reviewer),
) -> ApiResponse[JobRead]:
    job = job_service.get_job(db, job_id)
    return ApiResponse(data=job_service.to_job_reads(db, [job])[0])


@router.get("/applicants/filter", response_model=ApiResponse[list[UserRead]])
def filter_applicants(
    skills: str | None = Query(default=None, description="Comma-separated; any match"),
    location: str | None = Query(default=None),
    experience: str | None = Query(default=None),
    category: str | None = Query(default=None),
    education: str | None = Query(default=None),
    notice_period: str | None = Query(default=None, alias="noticePeriod"),
    gender: str | None = Query(default=None),
    db: Session = Depends(get_db),
    _user: User = Depends(_require_reviewer),
) -> ApiResponse[list[UserRead]]:
    filters = recruiter_service.ApplicantFilters(
        skills=[s.strip() for s in (skills or "").split(",") if s.strip()],
        location=location,
        experience=experience,
        category=category,
        education=education,
        notice_period=notice_period,
        gender=gender,
    )
    seekers = recruiter_service.filter_job_seekers(db, filters)
    return ApiResponse(data=[identity_service.to_user_read(u) for u in seekers])
