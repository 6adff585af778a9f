# profile_service.py
from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from jobboard.errors import ValidationError
from jobboard.schemas.profile import PROFILE_MODELS, ProfileBase


def profile_model_for(role: str) -> type[ProfileBase]:
    try:
        return PROFILE_MODELS[role]
    except KeyError as exc:
        raise ValidationError(f"Unknown role: {role}") from exc


def _describe(exc: PydanticValidationError) -> str:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(p) for p in first.get("loc", []))
    if first.get("type") == "extra_forbidden":
        return f"Field '{location}' is not allowed for this role"
    return f"Invalid profile field '{location}': {first.get('msg')}"


def build_user_profile(role: str, raw: dict[str, Any] | ProfileBase | None) -> ProfileBase:
    model = profile_model_for(role)
    if isinstance(raw, model):
        return raw
    try:
        return model.model_validate(raw or {})
    except PydanticValidationError as exc:
        raise ValidationError(_describe(exc), detail=exc.errors(include_url=False)) from exc


def profile_to_document(profile: ProfileBase) -> dict[str, Any]:
    return profile.model_dump(mode="json", by_alias=True)


def merge_profiles(role: str, existing: dict[str, Any] | None, incoming: dict[str, Any]) -> ProfileBase:
    """Incoming fields win, omitted fields keep their stored value, the rest fall back to defaults.

    An explicit null or empty value in ``incoming`` overwrites. Lists are replaced, never merged.
    """
    origin = build_user_profile(role, existing)
    overrides = build_user_profile(role, incoming)
    changes = overrides.model_dump(exclude_unset=True)
    merged = origin.model_dump()
    merged.update(changes)
    return build_user_profile(role, merged)


def set_profile_field(role: str, existing: dict[str, Any] | None, field: str, value: Any) -> ProfileBase:
    profile = build_user_profile(role, existing)
    if field not in type(profile).model_fields:
        raise ValidationError(f"Field '{field}' is not allowed for this role")
    data = profile.model_dump()
    data[field] = value
    return build_user_profile(role, data)
