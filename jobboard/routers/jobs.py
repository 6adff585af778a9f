from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from jobboard.data.options import job_options
from jobboard.database import get_db
from jobboard.models.job import Job
from jobboard.models.user import User
from jobboard.routers.dependencies import get_current_user, require_capability, require_roles
from jobboard.schemas.application import (
    ApplicationRead,
    ApplicationStats,
    ApplicationStatusUpdate,
    ApplyRequest,
)
from jobboard.schemas.common import ApiResponse, MessageResponse
from jobboard.schemas.job import (
    CategoryCount,
    CompanyJobCount,
    JobCreate,
    JobPage,
    JobRead,
    JobUpdate,
    VerificationStatusUpdate,
)
from jobboard.services import application_service, cascade_service, job_service
from jobboard.services.permissions import Role, roles_with
from jobboard.services.storage import ObjectStorage, get_storage


router = APIRouter(prefix="/jobs", tags=["jobs"])

POSTER_ROLES = roles_with("can_post_jobs")
DELETER_ROLES = tuple(dict.fromkeys(roles_with("can_delete_own_jobs") + roles_with("can_delete_any_job")))


def listing_filters(
    search: str | None = Query(default=None),
    location: str | None = Query(default=None),
    job_type: str | None = Query(default=None, alias="jobType"),
    work_type: str | None = Query(default=None, alias="workType"),
    experience_level: str | None = Query(default=None, alias="experienceLevel"),
    category: str | None = Query(default=None),
    verification_status: str | None = Query(default=None, alias="verificationStatus"),
    posted_by: int | None = Query(default=None, alias="postedBy"),
    posted_by_admin: bool = Query(default=False, alias="postedByAdmin"),
) -> job_service.JobFilters:
    return job_service.JobFilters(
        search=search or None,
        location=location or None,
        job_type=job_type or None,
        work_type=work_type or None,
        experience_level=experience_level or None,
        category=category or None,
        verification_status=verification_status or None,
        posted_by=posted_by,
        posted_by_admin=posted_by_admin,
    )


@router.get("", response_model=ApiResponse[JobPage])
def list_jobs(
    filters: job_service.JobFilters = Depends(listing_filters),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort: str = Query(default="newest"),
    db: Session = Depends(get_db),
) -> ApiResponse[JobPage]:
    return ApiResponse(data=job_service.list_jobs(db, filters, page=page, limit=limit, sort=sort))


@router.get("/options", response_model=ApiResponse[dict[str, list[str]]])
def get_job_options() -> ApiResponse[dict[str, list[str]]]:
    return ApiResponse(data=job_options())


@router.get("/companies", response_model=ApiResponse[list[CompanyJobCount]])
def list_companies(db: Session = Depends(get_db)) -> ApiResponse[list[CompanyJobCount]]:
    return ApiResponse(data=job_service.list_companies(db))


@router.get("/stats/categories", response_model=ApiResponse[list[CategoryCount]])
def category_stats(db: Session = Depends(get_db)) -> ApiResponse[list[CategoryCount]]:
    return ApiResponse(data=job_service.count_jobs_by_category(db))


@router.get("/my", response_model=ApiResponse[list[JobRead]])
def my_jobs(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*POSTER_ROLES)),
) -> ApiResponse[list[JobRead]]:
    jobs = (
        db.query(Job)
        .filter(Job.posted_by == current_user.id)
        .order_by(Job.created_at.desc(), Job.id.desc())
        .all()
    )
    return ApiResponse(data=[job_service.to_job_read(job, current_user) for job in jobs])


@router.get("/applications/my", response_model=ApiResponse[list[ApplicationRead]])
def my_applications(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.JOB_SEEKER.value)),
) -> ApiResponse[list[ApplicationRead]]:
    return ApiResponse(data=application_service.list_applications_for_applicant(db, current_user.id))


@router.get("/applications/stats", response_model=ApiResponse[ApplicationStats])
def application_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*POSTER_ROLES)),
) -> ApiResponse[ApplicationStats]:
    return ApiResponse(data=application_service.application_stats(db, current_user))


@router.patch("/applications/{application_id}/status", response_model=ApiResponse[ApplicationRead])
def update_application_status(
    payload: ApplicationStatusUpdate,
    application_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*POSTER_ROLES)),
) -> ApiResponse[ApplicationRead]:
    application = application_service.update_application_status(db, current_user, application_id, payload.status)
    return ApiResponse(
        message="Application status updated",
        data=application_service.to_application_read(application),
    )


@router.delete("/account", response_model=MessageResponse)
def delete_account(
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    cascade_service.delete_user_account(db, storage, current_user.id)
    return MessageResponse(message="Account and related data deleted successfully")


@router.post("", response_model=ApiResponse[JobRead], status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability("can_post_jobs")),
) -> ApiResponse[JobRead]:
    job = job_service.create_job(db, current_user, payload)
    return ApiResponse(message="Job created successfully", data=job_service.to_job_read(job, current_user))


@router.get("/{job_id}", response_model=ApiResponse[JobRead])
def get_job(job_id: int = Path(..., ge=1), db: Session = Depends(get_db)) -> ApiResponse[JobRead]:
    job = job_service.get_job(db, job_id)
    return ApiResponse(data=job_service.to_job_reads(db, [job])[0])


@router.put("/{job_id}", response_model=ApiResponse[JobRead])
def update_job(
    payload: JobUpdate,
    job_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*POSTER_ROLES)),
) -> ApiResponse[JobRead]:
    job = job_service.update_job(db, current_user, job_id, payload)
    return ApiResponse(message="Job updated successfully", data=job_service.to_job_reads(db, [job])[0])


@router.delete("/{job_id}", response_model=MessageResponse)
def delete_job(
    job_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*DELETER_ROLES)),
) -> MessageResponse:
    job_service.delete_job(db, current_user, job_id)
    return MessageResponse(message="Job deleted successfully")


@router.patch("/{job_id}/verification", response_model=ApiResponse[JobRead])
def update_verification_status(
    payload: VerificationStatusUpdate,
    job_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability("can_verify_jobs")),
) -> ApiResponse[JobRead]:
    job = job_service.set_verification_status(db, current_user, job_id, payload.verification_status)
    return ApiResponse(message="Verification status updated", data=job_service.to_job_reads(db, [job])[0])


@router.post("/{job_id}/apply", response_model=ApiResponse[ApplicationRead], status_code=status.HTTP_201_CREATED)
def apply_for_job(
    payload: ApplyRequest | None = None,
    job_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability("can_apply")),
) -> ApiResponse[ApplicationRead]:
    application = application_service.apply_for_job(db, current_user, job_id, payload or ApplyRequest())
    return ApiResponse(
        message="Application submitted successfully",
        data=application_service.to_application_read(application),
    )


@router.get("/{job_id}/applications", response_model=ApiResponse[list[ApplicationRead]])
def job_applications(
    job_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*POSTER_ROLES)),
) -> ApiResponse[list[ApplicationRead]]:
    return ApiResponse(data=application_service.list_applications_for_job(db, current_user, job_id))
