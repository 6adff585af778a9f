# __init__.py
from jobboard.schemas.application import ApplicationRead, ApplicationStats, ApplicationStatusUpdate, ApplyRequest
from jobboard.schemas.auth import AuthPayload, LoginRequest, SignupRequest
from jobboard.schemas.common import ApiResponse, MessageResponse
from jobboard.schemas.job import JobCreate, JobPage, JobRead, JobUpdate
from jobboard.schemas.profile import CompanyProfile, JobSeekerProfile, ProfileUpdateRequest, StaffProfile
from jobboard.schemas.user import UserRead, UserSummary

__all__ = [
	"ApiResponse",
	"MessageResponse",
	"ApplicationRead",
	"ApplicationStats",
	"ApplicationStatusUpdate",
	"ApplyRequest",
	"AuthPayload",
	"LoginRequest",
	"SignupRequest",
	"JobCreate",
	"JobPage",
	"JobRead",
	"JobUpdate",
	"CompanyProfile",
	"JobSeekerProfile",
	"ProfileUpdateRequest",
	"StaffProfile",
	"UserRead",
	"UserSummary",
]
