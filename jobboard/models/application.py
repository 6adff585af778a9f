from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from jobboard.database import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Application(Base):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), index=True, nullable=False)
    applicant_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)

    resume = Column(String(1024), nullable=True)
    cover_letter = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    applied_at = Column(DateTime(timezone=True), nullable=False, default=_utc_now, index=True)

    # A seeker may apply to a job at most once; racing inserts lose with IntegrityError.
    __table_args__ = (
        UniqueConstraint("job_id", "applicant_id", name="uq_applications_job_applicant"),
    )
