from __future__ import annotations

import logging
import secrets
import string
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from jobboard.config import settings
from jobboard.errors import NotFound, UpstreamFailure, ValidationError
from jobboard.models.user import User
from jobboard.services.email_service import EmailDeliveryError, EmailSender, render_otp_email
from jobboard.services.identity_service import find_user
from jobboard.services.permissions import Role
from jobboard.utils.password_hash import hash_password, verify_password


logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    # sqlite hands back naive datetimes; everything is stored in UTC.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def generate_otp(length: int | None = None) -> str:
    return "".join(secrets.choice(string.digits) for _ in range(length or settings.otp_length))


def _load_user(db: Session, email: str, role: str) -> User:
    if role == Role.ADMIN.value:
        raise ValidationError("Admin credentials are managed through configuration")
    user = find_user(db, email, role)
    if not user:
        raise NotFound("User not found")
    return user


def request_password_reset(db: Session, sender: EmailSender, email: str, role: str, *, now: datetime | None = None) -> None:
    now = now or _utc_now()
    user = _load_user(db, email, role)

    if user.reset_password_token and user.reset_password_expires:
        sent_at = _as_utc(user.reset_password_expires) - timedelta(minutes=settings.otp_expire_minutes)
        retry_at = sent_at + timedelta(minutes=settings.otp_resend_cooldown_minutes)
        if now < retry_at:
            wait_seconds = int((retry_at - now).total_seconds()) + 1
            raise ValidationError(f"Please wait {wait_seconds} seconds before requesting a new code")

    otp = generate_otp()
    user.reset_password_token = hash_password(otp)
    user.reset_password_expires = now + timedelta(minutes=settings.otp_expire_minutes)

    try:
        sender.send(
            user.email,
            "Your password reset code",
            render_otp_email(user.name, otp, settings.otp_expire_minutes),
        )
    except EmailDeliveryError as exc:
        db.rollback()
        logger.error("password_reset.email_failed user_id=%s error=%s", user.id, exc)
        raise UpstreamFailure("Could not send the verification code. Please try again later") from exc

    db.commit()
    logger.info("password_reset.requested user_id=%s", user.id)


def _check_otp(user: User, otp: str, now: datetime) -> None:
    if not user.reset_password_token or not user.reset_password_expires:
        raise ValidationError("Invalid or expired code")
    if now > _as_utc(user.reset_password_expires):
        raise ValidationError("Invalid or expired code")
    if not verify_password(otp.strip(), user.reset_password_token):
        raise ValidationError("Invalid or expired code")


def verify_otp(db: Session, email: str, role: str, otp: str, *, now: datetime | None = None) -> None:
    user = _load_user(db, email, role)
    _check_otp(user, otp, now or _utc_now())


def reset_password(db: Session, email: str, role: str, otp: str, new_password: str, *, now: datetime | None = None) -> None:
    user = _load_user(db, email, role)
    _check_otp(user, otp, now or _utc_now())
    user.password = hash_password(new_password)
    user.reset_password_token = None
    user.reset_password_expires = None
    db.commit()
    logger.info("password_reset.completed user_id=%s", user.id)
