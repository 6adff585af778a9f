from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO

from sqlalchemy.orm import Session

from jobboard.config import settings
from jobboard.errors import Forbidden, NotFound, UpstreamFailure, ValidationError
from jobboard.models.user import User
from jobboard.services.job_service import sync_poster_logo
from jobboard.services.permissions import ALL_ROLES, COMPANY_ROLES, Role, STAFF_ROLES
from jobboard.services.profile_service import build_user_profile, profile_to_document, set_profile_field
from jobboard.services.storage import ObjectStorage, StorageError, delete_quietly


logger = logging.getLogger(__name__)

PDF_TYPES = ("application/pdf",)


@dataclass(frozen=True)
class FileRule:
    field: str
    folder: str
    roles: tuple[str, ...]
    pdf_only: bool = False

    def accepts(self, content_type: str | None) -> bool:
        content_type = (content_type or "").lower()
        if self.pdf_only:
            return content_type in PDF_TYPES
        return content_type.startswith("image/")


FILE_RULES: dict[str, FileRule] = {
    "photo": FileRule("photo", "job-files/photos", ALL_ROLES),
    "resume": FileRule("resume", "job-files/resumes", (Role.JOB_SEEKER.value,), pdf_only=True),
    "company_logo": FileRule("company_logo", "job-files/logos", COMPANY_ROLES + STAFF_ROLES),
    "company_document": FileRule("company_document", "job-files/company-docs", COMPANY_ROLES, pdf_only=True),
}


def _too_large() -> ValidationError:
    limit_mb = settings.max_upload_bytes // (1024 * 1024)
    return ValidationError(f"File is too large (max {limit_mb}MB)")


def read_upload(stream: BinaryIO, declared_size: int | None = None) -> bytes:
    """Read an uploaded file, never more than one byte past the size limit."""
    limit = settings.max_upload_bytes
    if declared_size is not None and declared_size > limit:
        raise _too_large()
    content = stream.read(limit + 1)
    if len(content) > limit:
        raise _too_large()
    return content


def _check_upload(rule: FileRule, user: User, content: bytes, content_type: str | None) -> None:
    if user.role not in rule.roles:
        raise Forbidden("Your role cannot upload this file")
    if not content:
        raise ValidationError("Uploaded file is empty")
    if len(content) > settings.max_upload_bytes:
        raise _too_large()
    if not rule.accepts(content_type):
        expected = "a PDF" if rule.pdf_only else "an image"
        raise ValidationError(f"Invalid file type: {rule.field} must be {expected}")


def _store(storage: ObjectStorage, rule: FileRule, content: bytes, filename: str | None, content_type: str | None) -> str:
    try:
        return storage.upload(content, filename or rule.field, content_type, rule.folder)
    except StorageError as exc:
        logger.error("upload.failed field=%s error=%s", rule.field, exc)
        raise UpstreamFailure("Could not store the uploaded file") from exc


def replace_profile_file(
    db: Session,
    storage: ObjectStorage,
    user: User,
    field: str,
    content: bytes,
    filename: str | None,
    content_type: str | None,
) -> User:
    """Store a new single-valued profile file and drop the one it replaces."""
    rule = FILE_RULES[field]
    _check_upload(rule, user, content, content_type)

    previous = getattr(build_user_profile(user.role, user.profile), field, None)
    url = _store(storage, rule, content, filename, content_type)
    user.profile = profile_to_document(set_profile_field(user.role, user.profile, field, url))
    db.commit()
    db.refresh(user)

    if previous and previous != url:
        delete_quietly(storage, previous)

    if field == "company_logo" and user.role in COMPANY_ROLES:
        updated = sync_poster_logo(db, user, url)
        logger.info("upload.logo_resync user_id=%s jobs=%s", user.id, updated)
    return user


def add_company_document(
    db: Session,
    storage: ObjectStorage,
    user: User,
    content: bytes,
    filename: str | None,
    content_type: str | None,
) -> User:
    rule = FILE_RULES["company_document"]
    _check_upload(rule, user, content, content_type)

    url = _store(storage, rule, content, filename, content_type)
    documents = list(build_user_profile(user.role, user.profile).company_document)
    documents.append(url)
    user.profile = profile_to_document(set_profile_field(user.role, user.profile, "company_document", documents))
    db.commit()
    db.refresh(user)
    return user


def remove_company_document(db: Session, storage: ObjectStorage, user: User, url: str) -> User:
    if user.role not in FILE_RULES["company_document"].roles:
        raise Forbidden("Your role has no company documents")
    documents = list(build_user_profile(user.role, user.profile).company_document)
    if url not in documents:
        raise NotFound("Document not found")
    documents.remove(url)
    user.profile = profile_to_document(set_profile_field(user.role, user.profile, "company_document", documents))
    db.commit()
    db.refresh(user)
    delete_quietly(storage, url)
    return user
