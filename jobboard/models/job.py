# job.py
from sqlalchemy import JSON, Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from jobboard.database import Base


# Joins location entries in location_text; never part of a stored entry.
LOCATION_SEPARATOR = "\n"


def location_search_text(locations) -> str:
    return LOCATION_SEPARATOR.join(
        str(entry).replace(LOCATION_SEPARATOR, " ").strip().lower() for entry in locations or []
    )


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), index=True, nullable=False)
    description = Column(Text, nullable=False)

    # Company snapshot taken at creation time (see services.job_service.resolve_company).
    company_name = Column(String(255), index=True, nullable=False)
    company_description = Column(Text, nullable=True)
    company_website = Column(String(512), nullable=True)
    company_logo = Column(String(1024), nullable=True)

    location = Column(JSON, nullable=False, default=list)
    # Lower-cased copy of location for substring search, kept in step by _sync_location_text.
    location_text = Column(Text, nullable=False, default="")
    job_type = Column(String(100), nullable=True, default="Full-time")
    interview_type = Column(String(100), nullable=True)
    work_type = Column(String(100), nullable=True)
    min_education = Column(String(255), nullable=True)

    # Salary amounts are free text ("3,00,000", "negotiable", ...).
    salary_min = Column(String(100), nullable=True)
    salary_max = Column(String(100), nullable=True)
    salary_currency = Column(String(16), nullable=True, default="INR")

    requirements = Column(JSON, nullable=False, default=list)
    responsibilities = Column(JSON, nullable=False, default=list)
    skills = Column(JSON, nullable=False, default=list)

    experience_level = Column(String(100), nullable=True)
    notice_period = Column(String(100), nullable=True)
    category = Column(String(100), index=True, nullable=False)
    number_of_openings = Column(Integer, nullable=True)
    year_of_passing = Column(Integer, nullable=True)
    shift = Column(String(50), nullable=True)
    walk_in_date = Column(Date, nullable=True)
    walk_in_time = Column(String(50), nullable=True)
    application_deadline = Column(DateTime(timezone=True), nullable=True)

    posted_by = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    verification_status = Column(String(32), index=True, nullable=True, default="not verified")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @validates("location")
    def _sync_location_text(self, key, value):
        self.location_text = location_search_text(value)
        return value
