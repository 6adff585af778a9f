# profile.py
from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from jobboard.data.options import (
    CATEGORY_OPTIONS,
    EDUCATION_OPTIONS,
    GENDER_OPTIONS,
    NOTICE_PERIOD_OPTIONS,
    SEEKER_EXPERIENCE_OPTIONS,
)
from jobboard.schemas.common import CamelModel


def _match_option(value: Any, options: list[str], field_name: str) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    for option in options:
        if option.lower() == text.lower():
            return option
    raise ValueError(f"{field_name} must be one of: {', '.join(options)}")


def _none_to_list(v: Any) -> Any:
    return [] if v is None else v


def _number_to_text(v: Any) -> Any:
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class EducationEntry(CamelModel):
    degree: str | None = None
    institution: str | None = None
    field: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class ExperienceEntry(CamelModel):
    position: str | None = None
    company: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    description: str | None = None


class ProfileBase(CamelModel):
    # Unknown keys are rejected so one role's fields never leak into another's profile.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True, extra="forbid")

    photo: str | None = None


class JobSeekerProfile(ProfileBase):
    age: int | None = None
    address: str | None = None
    phone: str | None = None
    github_url: str | None = None
    linkedin_url: str | None = None
    skills: list[str] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    resume: str | None = None
    gender: str | None = None
    notice_period: str | None = None
    preferred_location: str | None = None
    designation: str | None = None
    exp_in_work: str | None = None
    salary_expectation: str | None = None
    preferred_category: str | None = None
    highest_education: str | None = None

    @field_validator("skills", "education", "experience", mode="before")
    @classmethod
    def _coerce_lists(cls, v):
        return _none_to_list(v)

    @field_validator("phone", "salary_expectation", mode="before")
    @classmethod
    def _coerce_text(cls, v):
        return _number_to_text(v)

    @field_validator("gender", mode="before")
    @classmethod
    def _validate_gender(cls, v):
        return _match_option(v, GENDER_OPTIONS, "gender")

    @field_validator("notice_period", mode="before")
    @classmethod
    def _validate_notice_period(cls, v):
        return _match_option(v, NOTICE_PERIOD_OPTIONS, "noticePeriod")

    @field_validator("exp_in_work", mode="before")
    @classmethod
    def _validate_exp_in_work(cls, v):
        return _match_option(v, SEEKER_EXPERIENCE_OPTIONS, "expInWork")

    @field_validator("preferred_category", mode="before")
    @classmethod
    def _validate_preferred_category(cls, v):
        return _match_option(v, CATEGORY_OPTIONS, "preferredCategory")

    @field_validator("highest_education", mode="before")
    @classmethod
    def _validate_highest_education(cls, v):
        return _match_option(v, EDUCATION_OPTIONS, "highestEducation")


class CompanyProfile(ProfileBase):
    """Profile shared by jobHoster and recruiter accounts."""

    company_name: str | None = None
    company_description: str | None = None
    company_website: str | None = None
    company_email: str | None = None
    company_phone: str | None = None
    number_of_employees: int | None = None
    company_logo: str | None = None
    company_document: list[str] = Field(default_factory=list)
    phone: str | None = None
    pan_card_number: str | None = None
    gst_number: str | None = None

    @field_validator("company_document", mode="before")
    @classmethod
    def _coerce_documents(cls, v):
        return _none_to_list(v)

    @field_validator("phone", "company_phone", mode="before")
    @classmethod
    def _coerce_text(cls, v):
        return _number_to_text(v)


class StaffProfile(ProfileBase):
    """admin / eliteTeam: nothing required, photo and logo uploads allowed."""

    company_logo: str | None = None


PROFILE_MODELS: dict[str, type[ProfileBase]] = {
    "jobSeeker": JobSeekerProfile,
    "jobHoster": CompanyProfile,
    "recruiter": CompanyProfile,
    "admin": StaffProfile,
    "eliteTeam": StaffProfile,
}


class ProfileUpdateRequest(CamelModel):
    name: str | None = None
    # Validated against the caller's role-specific profile model in the service layer.
    profile: dict[str, Any] | None = None
