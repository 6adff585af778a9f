# auth.py
from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from jobboard.data.options import profile_options
from jobboard.database import get_db
from jobboard.models.user import User
from jobboard.routers.dependencies import get_current_user
from jobboard.schemas.auth import (
    AuthPayload,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
    VerifyOtpRequest,
)
from jobboard.schemas.common import ApiResponse, MessageResponse
from jobboard.schemas.profile import ProfileUpdateRequest
from jobboard.schemas.user import UserRead
from jobboard.services import cascade_service, file_service, identity_service, password_reset_service
from jobboard.services.email_service import EmailSender, get_email_sender
from jobboard.services.storage import ObjectStorage, get_storage
from jobboard.utils.jwt_handler import create_session_token


router = APIRouter()


def _auth_payload(user: User) -> AuthPayload:
    return AuthPayload(
        user=identity_service.to_user_summary(user),
        token=create_session_token(user.id, user.role),
    )


@router.post("/signup", response_model=ApiResponse[AuthPayload], status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Session = Depends(get_db)) -> ApiResponse[AuthPayload]:
    user = identity_service.register_user(db, payload)
    return ApiResponse(message="User registered successfully", data=_auth_payload(user))


@router.post("/login", response_model=ApiResponse[AuthPayload])
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> ApiResponse[AuthPayload]:
    user = identity_service.authenticate(db, payload.email, payload.password, payload.role)
    return ApiResponse(message="Login successful", data=_auth_payload(user))


@router.get("/profile", response_model=ApiResponse[UserRead])
def get_profile(current_user: User = Depends(get_current_user)) -> ApiResponse[UserRead]:
    return ApiResponse(data=identity_service.to_user_read(current_user))


@router.put("/profile", response_model=ApiResponse[UserRead])
def update_profile(
    payload: ProfileUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[UserRead]:
    user = identity_service.update_profile(db, current_user, payload)
    return ApiResponse(message="Profile updated successfully", data=identity_service.to_user_read(user))


@router.delete("/profile", response_model=MessageResponse)
def delete_profile(
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    cascade_service.delete_user_account(db, storage, current_user.id)
    return MessageResponse(message="Account deleted successfully")


@router.get("/profile-options", response_model=ApiResponse[dict[str, list[str]]])
def get_profile_options() -> ApiResponse[dict[str, list[str]]]:
    return ApiResponse(data=profile_options())


@router.put("/profile/photo", response_model=ApiResponse[UserRead])
def upload_photo(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[UserRead]:
    content = file_service.read_upload(file.file, file.size)
    user = file_service.replace_profile_file(
        db, storage, current_user, "photo", content, file.filename, file.content_type
    )
    return ApiResponse(message="Photo uploaded successfully", data=identity_service.to_user_read(user))


@router.put("/profile/resume", response_model=ApiResponse[UserRead])
def upload_resume(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[UserRead]:
    content = file_service.read_upload(file.file, file.size)
    user = file_service.replace_profile_file(
        db, storage, current_user, "resume", content, file.filename, file.content_type
    )
    return ApiResponse(message="Resume uploaded successfully", data=identity_service.to_user_read(user))


@router.put("/profile/company-logo", response_model=ApiResponse[UserRead])
def upload_company_logo(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[UserRead]:
    content = file_service.read_upload(file.file, file.size)
    user = file_service.replace_profile_file(
        db, storage, current_user, "company_logo", content, file.filename, file.content_type
    )
    return ApiResponse(message="Company logo uploaded successfully", data=identity_service.to_user_read(user))


@router.post("/profile/company-document", response_model=ApiResponse[UserRead], status_code=status.HTTP_201_CREATED)
def upload_company_document(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[UserRead]:
    content = file_service.read_upload(file.file, file.size)
    user = file_service.add_company_document(
        db, storage, current_user, content, file.filename, file.content_type
    )
    return ApiResponse(message="Document uploaded successfully", data=identity_service.to_user_read(user))


@router.delete("/profile/company-document", response_model=ApiResponse[UserRead])
def delete_company_document(
    url: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[UserRead]:
    user = file_service.remove_company_document(db, storage, current_user, url)
    return ApiResponse(message="Document removed successfully", data=identity_service.to_user_read(user))


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
) -> MessageResponse:
    password_reset_service.request_password_reset(db, sender, payload.email, payload.role)
    return MessageResponse(message="A verification code has been sent to your email")


@router.post("/verify-otp", response_model=MessageResponse)
def verify_otp(payload: VerifyOtpRequest, db: Session = Depends(get_db)) -> MessageResponse:
    password_reset_service.verify_otp(db, payload.email, payload.role, payload.otp)
    return MessageResponse(message="Code verified")


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)) -> MessageResponse:
    password_reset_service.reset_password(db, payload.email, payload.role, payload.otp, payload.new_password)
    return MessageResponse(message="Password reset successfully")
