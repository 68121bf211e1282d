from __future__ import annotations

from ..extensions import db
from ..models import STORE_PROFILE_ID, StoreProfile
from ..validation import ValidationError
from .audit_service import append_log
from .concurrency import run_with_retry


PROFILE_FIELDS = ("name", "address", "phone", "email", "tax_id")

DEFAULT_PROFILE = {
    "name": "My Consignment Store",
    "address": "",
    "phone": "",
    "email": "",
    "tax_id": "",
}


def get_store_profile() -> dict:
    """The saved profile, or the defaults when none has been saved yet."""
    profile = db.session.get(StoreProfile, STORE_PROFILE_ID)
    if profile is None:
        return {**DEFAULT_PROFILE, "updated_at": None}
    return profile.to_dict()


def ensure_store_profile() -> StoreProfile:
    profile = db.session.get(StoreProfile, STORE_PROFILE_ID)
    if profile is None:
        profile = StoreProfile(id=STORE_PROFILE_ID, **DEFAULT_PROFILE)
        db.session.add(profile)
        db.session.flush()
    return profile


def _clean_profile(payload: dict) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    unknown = sorted(k for k in payload if k not in PROFILE_FIELDS)
    if unknown:
        raise ValidationError(f"Field not allowed: {', '.join(unknown)}")

    cleaned = {}
    for key in PROFILE_FIELDS:
        value = payload.get(key)
        cleaned[key] = "" if value is None else str(value).strip()
    if not cleaned["name"]:
        raise ValidationError("name cannot be blank")
    return cleaned


def replace_store_profile(payload: dict, actor: str | None = None) -> dict:
    """Whole-document replace: fields left out are cleared."""
    cleaned = _clean_profile(payload)

    def _op() -> dict:
        profile = ensure_store_profile()
        for key, value in cleaned.items():
            setattr(profile, key, value)
        db.session.flush()
        append_log(
            action="Updated Store Settings",
            details="Modified store contact or billing details",
            user=actor,
        )
        db.session.commit()
        return profile.to_dict()

    return run_with_retry(_op)
