"""Google sign-in (OAuth2 authorization-code flow).

A callback either resolves to an existing account (matched on Google id,
then on email) or, for an unknown identity, returns a short-lived signed
"pending" token carrying the Google profile. The client asks the person
for a role and posts that token back to finish registration; no role is
ever assigned automatically.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from urllib.parse import urlencode

import httpx
from sqlalchemy.orm import Session

from jobboard.config import settings
from jobboard.errors import Unauthenticated, UpstreamFailure, ValidationError
from jobboard.models.user import User
from jobboard.schemas.auth import GoogleProfile, GoogleSignInResult
from jobboard.services.identity_service import SELF_REGISTER_ROLES, ensure_email_available, to_user_summary
from jobboard.services.profile_service import build_user_profile, profile_to_document
from jobboard.utils.jwt_handler import create_access_token, create_session_token, decode_access_token


logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

STATE_PURPOSE = "google-state"
PENDING_PURPOSE = "google-signup"


class GoogleOAuthClient:
    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, timeout: float = 10.0) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "state": state,
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> tuple[GoogleProfile, str]:
        """Trade an authorization code for the Google profile and access token."""
        data = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            with httpx.Client(timeout=self.timeout) as client:
                token_response = client.post(GOOGLE_TOKEN_URL, data=data)
                token_response.raise_for_status()
                access_token = token_response.json().get("access_token")
                if not access_token:
                    raise UpstreamFailure("Google did not return an access token")
                info_response = client.get(
                    GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
                )
                info_response.raise_for_status()
                info = info_response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("google.exchange failed status=%s", exc.response.status_code)
            raise UpstreamFailure("Google sign-in failed") from exc
        except httpx.HTTPError as exc:
            logger.error("google.exchange unreachable error=%s", exc)
            raise UpstreamFailure("Google sign-in is unavailable") from exc

        if not info.get("sub") or not info.get("email"):
            raise UpstreamFailure("Google profile is missing an id or email")
        profile = GoogleProfile(
            id=str(info["sub"]),
            email=str(info["email"]).strip().lower(),
            name=info.get("name"),
            picture=info.get("picture"),
        )
        return profile, access_token


_client: GoogleOAuthClient | None = None


def get_google_client() -> GoogleOAuthClient:
    global _client
    if _client is None:
        _client = GoogleOAuthClient(
            settings.google_client_id,
            settings.google_client_secret,
            settings.google_callback_url,
        )
    return _client


def _purpose_token(purpose: str, claims: dict) -> str:
    return create_access_token(
        {"purpose": purpose, **claims},
        expires_delta=timedelta(minutes=settings.oauth_pending_token_minutes),
    )


def _read_purpose_token(token: str, purpose: str) -> dict:
    payload = decode_access_token(token)
    if payload.get("purpose") != purpose:
        raise Unauthenticated("Invalid token")
    return payload


def create_state() -> str:
    return _purpose_token(STATE_PURPOSE, {})


def verify_state(state: str | None) -> None:
    if not state:
        raise ValidationError("Missing OAuth state")
    _read_purpose_token(state, STATE_PURPOSE)


def _signed_in(user: User) -> GoogleSignInResult:
    return GoogleSignInResult(
        new_user=False,
        user=to_user_summary(user),
        token=create_session_token(user.id, user.role),
    )


def resolve_google_identity(db: Session, profile: GoogleProfile, access_token: str | None = None) -> GoogleSignInResult:
    user = db.query(User).filter(User.google_id == profile.id).first()
    if user is None:
        user = (
            db.query(User)
            .filter(User.email == profile.email, User.role.in_(SELF_REGISTER_ROLES))
            .order_by(User.id)
            .first()
        )
        if user is not None:
            user.google_id = profile.id
            logger.info("google.linked user_id=%s", user.id)

    if user is not None:
        if access_token:
            user.google_token = access_token
        db.commit()
        db.refresh(user)
        return _signed_in(user)

    pending = _purpose_token(PENDING_PURPOSE, {"google": profile.model_dump()})
    return GoogleSignInResult(new_user=True, google_profile=profile, pending_token=pending)


def complete_google_signup(db: Session, pending_token: str, role: str) -> GoogleSignInResult:
    if role not in SELF_REGISTER_ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(SELF_REGISTER_ROLES)}")
    payload = _read_purpose_token(pending_token, PENDING_PURPOSE)
    profile = GoogleProfile.model_validate(payload.get("google") or {})

    existing = db.query(User).filter(User.google_id == profile.id).first()
    if existing is not None:
        return _signed_in(existing)

    ensure_email_available(db, profile.email, role)
    document = profile_to_document(build_user_profile(role, {"photo": profile.picture}))
    user = User(
        name=(profile.name or profile.email.split("@", 1)[0]).strip(),
        email=profile.email,
        password=None,
        role=role,
        profile=document,
        google_id=profile.id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("google.registered user_id=%s role=%s", user.id, role)
    return _signed_in(user)
