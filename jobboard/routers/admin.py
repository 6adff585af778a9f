from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from jobboard.database import get_db
from jobboard.models.user import User
from jobboard.routers.dependencies import require_roles
from jobboard.routers.jobs import listing_filters
from jobboard.schemas.application import ApplicantOverview
from jobboard.schemas.common import ApiResponse, MessageResponse
from jobboard.schemas.job import EliteTeamJobCount, JobCreate, JobPage, JobRead, MaintenanceResult, VerificationStatusCount
from jobboard.services import application_service, cascade_service, job_service
from jobboard.services.permissions import Role
from jobboard.services.storage import ObjectStorage, get_storage


router = APIRouter(prefix="/admin", tags=["admin"])

logger = logging.getLogger(__name__)

_require_admin = require_roles(Role.ADMIN.value)


@router.post("/jobs", response_model=ApiResponse[JobRead], status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(_require_admin),
) -> ApiResponse[JobRead]:
    job = job_service.create_job(db, admin, payload)
    return ApiResponse(message="Job created successfully", data=job_service.to_job_read(job, admin))


@router.get("/jobs", response_model=ApiResponse[JobPage])
def list_jobs(
    filters: job_service.JobFilters = Depends(listing_filters),
    include_inactive: bool = Query(default=True, alias="includeInactive"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    sort: str = Query(default="newest"),
    db: Session = Depends(get_db),
    _admin: User = Depends(_require_admin),
) -> ApiResponse[JobPage]:
    filters.include_inactive = include_inactive
    return ApiResponse(data=job_service.list_jobs(db, filters, page=page, limit=limit, sort=sort))


@router.get("/applicants", response_model=ApiResponse[list[ApplicantOverview]])
def list_applicants(
    db: Session = Depends(get_db),
    _admin: User = Depends(_require_admin),
) -> ApiResponse[list[ApplicantOverview]]:
    return ApiResponse(data=application_service.list_applicants_overview(db))


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(_require_admin),
) -> MessageResponse:
    summary = cascade_service.delete_user_account(db, storage, user_id)
    logger.info("admin.delete_user admin_id=%s user_id=%s role=%s", admin.id, user_id, summary.role)
    return MessageResponse(message="User and related data deleted successfully")


@router.get("/jobs/stats/verification", response_model=ApiResponse[list[VerificationStatusCount]])
def verification_stats(
    db: Session = Depends(get_db),
    _admin: User = Depends(_require_admin),
) -> ApiResponse[list[VerificationStatusCount]]:
    return ApiResponse(data=job_service.count_jobs_by_verification_status(db))


@router.get("/jobs/stats/elite-team", response_model=ApiResponse[list[EliteTeamJobCount]])
def elite_team_stats(
    db: Session = Depends(get_db),
    _admin: User = Depends(_require_admin),
) -> ApiResponse[list[EliteTeamJobCount]]:
    return ApiResponse(data=job_service.count_jobs_by_elite_team(db))


@router.post("/maintenance/verification-status", response_model=ApiResponse[MaintenanceResult])
def backfill_verification_status(
    db: Session = Depends(get_db),
    _admin: User = Depends(_require_admin),
) -> ApiResponse[MaintenanceResult]:
    updated = job_service.backfill_verification_status(db)
    return ApiResponse(message=f"Updated {updated} jobs", data=MaintenanceResult(updated=updated))


@router.post("/maintenance/company-logos", response_model=ApiResponse[MaintenanceResult])
def resync_company_logos(
    db: Session = Depends(get_db),
    _admin: User = Depends(_require_admin),
) -> ApiResponse[MaintenanceResult]:
    updated = job_service.resync_company_logos(db)
    return ApiResponse(message=f"Updated {updated} jobs", data=MaintenanceResult(updated=updated))
