"""Accounts: sign-up, login, profile reads/updates and eliteTeam provisioning."""

from __future__ import annotations

import logging
import secrets

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobboard.config import is_admin_email, settings
from jobboard.errors import InvalidCredentials, NotFound, ValidationError
from jobboard.models.user import User
from jobboard.schemas.auth import SignupRequest
from jobboard.schemas.profile import ProfileUpdateRequest
from jobboard.schemas.user import EliteTeamCreate, EliteTeamUpdate, UserRead, UserSummary
from jobboard.services.permissions import ALL_ROLES, Role, roles_with
from jobboard.services.profile_service import build_user_profile, merge_profiles, profile_to_document
from jobboard.utils.password_hash import hash_password, verify_password


logger = logging.getLogger(__name__)

SELF_REGISTER_ROLES = roles_with("can_self_register")


def to_user_summary(user: User) -> UserSummary:
    return UserSummary.model_validate(user)


def to_user_read(user: User) -> UserRead:
    profile = build_user_profile(user.role, user.profile)
    return UserRead(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        profile=profile_to_document(profile),
        google_linked=bool(user.google_id),
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def find_user(db: Session, email: str, role: str) -> User | None:
    return db.query(User).filter(User.email == email, User.role == role).first()


def ensure_email_available(db: Session, email: str, role: str, *, exclude_user_id: int | None = None) -> None:
    """Job seeker emails are unique across every role; other roles are unique per (email, role)."""
    query = db.query(User).filter(User.email == email)
    if role != Role.JOB_SEEKER.value:
        query = query.filter(or_(User.role == role, User.role == Role.JOB_SEEKER.value))
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    if query.first() is not None:
        raise ValidationError("User with this email already exists")


def register_user(db: Session, payload: SignupRequest) -> User:
    if payload.role not in SELF_REGISTER_ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(SELF_REGISTER_ROLES)}")
    ensure_email_available(db, payload.email, payload.role)

    profile = build_user_profile(payload.role, payload.profile)
    user = User(
        name=payload.name.strip(),
        email=payload.email,
        password=hash_password(payload.password),
        role=payload.role,
        profile=profile_to_document(profile),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationError("User with this email already exists") from exc
    db.refresh(user)
    logger.info("user.registered id=%s role=%s", user.id, user.role)
    return user


def authenticate(db: Session, email: str, password: str, role: str) -> User:
    if role not in ALL_ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ALL_ROLES)}")
    if role == Role.ADMIN.value:
        return _authenticate_admin(db, email, password)

    user = find_user(db, email, role)
    if not user or not verify_password(password, user.password):
        raise InvalidCredentials()
    return user


def _authenticate_admin(db: Session, email: str, password: str) -> User:
    configured_password = settings.admin_password or ""
    if not settings.admin_email or not configured_password:
        raise InvalidCredentials("Admin login is not configured")
    if not is_admin_email(email) or not secrets.compare_digest(password, configured_password):
        raise InvalidCredentials()

    admin = db.query(User).filter(User.role == Role.ADMIN.value).order_by(User.id).first()
    if admin is None:
        admin = User(
            name=settings.admin_name,
            email=email,
            password=hash_password(password),
            role=Role.ADMIN.value,
            profile={},
        )
        db.add(admin)
        logger.info("admin.provisioned email=%s", email)
    else:
        admin.email = email
        admin.name = settings.admin_name
        if not verify_password(password, admin.password):
            admin.password = hash_password(password)
    db.commit()
    db.refresh(admin)
    return admin


def update_profile(db: Session, user: User, payload: ProfileUpdateRequest) -> User:
    if payload.name is not None and payload.name.strip():
        user.name = payload.name.strip()
    if payload.profile is not None:
        merged = merge_profiles(user.role, user.profile, payload.profile)
        user.profile = profile_to_document(merged)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def list_users(db: Session, role: str | None = None) -> list[User]:
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    return query.order_by(User.created_at.desc(), User.id.desc()).all()


def create_elite_team_user(db: Session, payload: EliteTeamCreate) -> User:
    ensure_email_available(db, payload.email, Role.ELITE_TEAM.value)
    user = User(
        name=payload.name.strip(),
        email=payload.email,
        password=hash_password(payload.password),
        role=Role.ELITE_TEAM.value,
        profile={},
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("eliteTeam.created id=%s", user.id)
    return user


def get_elite_team_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user or user.role != Role.ELITE_TEAM.value:
        raise NotFound("eliteTeam user not found")
    return user


def update_elite_team_user(db: Session, user_id: int, payload: EliteTeamUpdate) -> User:
    user = get_elite_team_user(db, user_id)
    if payload.email and payload.email != user.email:
        ensure_email_available(db, payload.email, Role.ELITE_TEAM.value, exclude_user_id=user.id)
        user.email = payload.email
    if payload.name:
        user.name = payload.name.strip()
    if payload.password:
        user.password = hash_password(payload.password)
    db.commit()
    db.refresh(user)
    return user
