# password_hash.py
from passlib.context import CryptContext

from jobboard.config import settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    # Accounts created through Google sign-in have no password.
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)
