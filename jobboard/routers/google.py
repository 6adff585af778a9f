# google.py
from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from jobboard.database import get_db
from jobboard.schemas.auth import GoogleCompleteRequest, GoogleSignInResult
from jobboard.schemas.common import ApiResponse
from jobboard.services import oauth_service
from jobboard.services.oauth_service import GoogleOAuthClient, get_google_client


router = APIRouter()


@router.get("/google", summary="Redirect to Google sign-in")
def google_login(client: GoogleOAuthClient = Depends(get_google_client)) -> RedirectResponse:
    return RedirectResponse(client.authorization_url(oauth_service.create_state()))


@router.get("/google/callback", response_model=ApiResponse[GoogleSignInResult])
def google_callback(
    code: str = Query(..., min_length=1),
    state: str | None = Query(default=None),
    db: Session = Depends(get_db),
    client: GoogleOAuthClient = Depends(get_google_client),
) -> ApiResponse[GoogleSignInResult]:
    oauth_service.verify_state(state)
    profile, access_token = client.exchange_code(code)
    result = oauth_service.resolve_google_identity(db, profile, access_token)
    message = "Select a role to finish signing up" if result.new_user else "Login successful"
    return ApiResponse(message=message, data=result)


@router.post("/google/complete", response_model=ApiResponse[GoogleSignInResult])
def google_complete(payload: GoogleCompleteRequest, db: Session = Depends(get_db)) -> ApiResponse[GoogleSignInResult]:
    result = oauth_service.complete_google_signup(db, payload.pending_token, payload.role)
    return ApiResponse(message="User registered successfully", data=result)
