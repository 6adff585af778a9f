# elite_team.py
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from jobboard.database import get_db
from jobboard.models.user import User
from jobboard.routers.dependencies import require_roles
from jobboard.schemas.common import ApiResponse, MessageResponse
from jobboard.schemas.job import JobCreate, JobRead
from jobboard.schemas.user import EliteTeamCreate, EliteTeamUpdate, UserRead
from jobboard.services import cascade_service, identity_service, job_service
from jobboard.services.permissions import Role
from jobboard.services.storage import ObjectStorage, get_storage


router = APIRouter(prefix="/elite-team", tags=["elite-team"])

_require_admin = require_roles(Role.ADMIN.value)


@router.post("", response_model=ApiResponse[UserRead], status_code=status.HTTP_201_CREATED)
def create_member(
    payload: EliteTeamCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(_require_admin),
) -> ApiResponse[UserRead]:
    user = identity_service.create_elite_team_user(db, payload)
    return ApiResponse(message="eliteTeam user created successfully", data=identity_service.to_user_read(user))


@router.get("", response_model=ApiResponse[list[UserRead]])
def list_members(
    db: Session = Depends(get_db),
    _admin: User = Depends(_require_admin),
) -> ApiResponse[list[UserRead]]:
    users = identity_service.list_users(db, Role.ELITE_TEAM.value)
    return ApiResponse(data=[identity_service.to_user_read(u) for u in users])


@router.post("/jobs", response_model=ApiResponse[JobRead], status_code=status.HTTP_201_CREATED)
def post_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ELITE_TEAM.value)),
) -> ApiResponse[JobRead]:
    job = job_service.create_job(db, current_user, payload)
    return ApiResponse(message="Job created successfully", data=job_service.to_job_read(job, current_user))


@router.get("/{user_id}", response_model=ApiResponse[UserRead])
def get_member(
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    _admin: User = Depends(_require_admin),
) -> ApiResponse[UserRead]:
    user = identity_service.get_elite_team_user(db, user_id)
    return ApiResponse(data=identity_service.to_user_read(user))


@router.put("/{user_id}", response_model=ApiResponse[UserRead])
def update_member(
    payload: EliteTeamUpdate,
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    _admin: User = Depends(_require_admin),
) -> ApiResponse[UserRead]:
    user = identity_service.update_elite_team_user(db, user_id, payload)
    return ApiResponse(message="eliteTeam user updated successfully", data=identity_service.to_user_read(user))


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_member(
    user_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    _admin: User = Depends(_require_admin),
) -> MessageResponse:
    identity_service.get_elite_team_user(db, user_id)
    cascade_service.delete_user_account(db, storage, user_id)
    return MessageResponse(message="eliteTeam user and their jobs deleted successfully")
