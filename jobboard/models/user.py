# user.py
from sqlalchemy import JSON, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from jobboard.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), index=True, nullable=False)
    # Null for accounts created through Google sign-in.
    password = Column(String(255), nullable=True)
    role = Column(String(32), index=True, nullable=False)
    # Shape depends on role; validated through jobboard.schemas.profile on every read/write.
    profile = Column(JSON, nullable=False, default=dict)

    # Password reset OTP (stored hashed).
    reset_password_token = Column(String(255), nullable=True)
    reset_password_expires = Column(DateTime(timezone=True), nullable=True)

    google_id = Column(String(255), index=True, nullable=True)
    google_token = Column(String(2048), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("email", "role", name="uq_users_email_role"),
    )
