# dependencies.py
from typing import Callable

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from jobboard.database import get_db
from jobboard.errors import Forbidden, Unauthenticated
from jobboard.models.user import User
from jobboard.services.permissions import roles_with
from jobboard.utils.jwt_handler import decode_access_token


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_current_user(db: Session = Depends(get_db), token: str | None = Depends(oauth2_scheme)) -> User:
    if not token:
        raise Unauthenticated("Not authenticated")
    payload = decode_access_token(token)
    user_id = payload.get("userId")
    role = payload.get("role")
    if user_id is None or not role:
        raise Unauthenticated("Invalid token payload")
    try:
        user_id = int(user_id)
    except (TypeError, ValueError) as exc:
        raise Unauthenticated("Invalid token subject") from exc
    user = db.query(User).filter(User.id == user_id).first()
    if not user or user.role != role:
        raise Unauthenticated("User not found")
    return user


def require_roles(*roles: str) -> Callable[..., User]:
    allowed = tuple(roles)

    def _check(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise Forbidden(f"Access denied. Allowed roles: {', '.join(allowed)}")
        return current_user

    return _check


def require_capability(capability: str) -> Callable[..., User]:
    return require_roles(*roles_with(capability))
