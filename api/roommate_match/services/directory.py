from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from ..errors import NotFoundError, ValidationError
from ..lifestyle import decode_lifestyle, encode_lifestyle
from ..schemas import CandidateFilters, ProfileCreate, ProfileUpdate, UserProfile, parse_model
from ..store import Store

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def profile_from_record(record: dict[str, Any]) -> UserProfile:
    data = dict(record)
    data["lifestyle_preferences"] = decode_lifestyle(data.get("lifestyle_preferences"))
    return UserProfile.model_validate(data)


def _gender_preference_compatible(profile: UserProfile, wanted: str | None) -> bool:
    if wanted in (None, "any"):
        return True
    if profile.preferred_gender in (None, "any"):
        return True
    return profile.preferred_gender == wanted


def profile_matches_filters(profile: UserProfile, filters: CandidateFilters) -> bool:
    if filters.location and filters.location.strip().lower() not in profile.location.lower():
        return False
    if filters.min_age is not None and profile.age < filters.min_age:
        return False
    if filters.max_age is not None and profile.age > filters.max_age:
        return False
    if filters.budget_min is not None and profile.budget_max < filters.budget_min:
        return False
    if filters.budget_max is not None and profile.budget_min > filters.budget_max:
        return False
    return _gender_preference_compatible(profile, filters.preferred_gender)


def filter_candidates(
    profiles: Iterable[UserProfile], viewer_id: int | None, filters: CandidateFilters
) -> list[UserProfile]:
    return [
        p
        for p in profiles
        if p.id != viewer_id and p.is_active and profile_matches_filters(p, filters)
    ]


class ProfileDirectory:
    """Owns profile records and answers candidate queries."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def create_profile(self, payload: ProfileCreate | dict[str, Any]) -> UserProfile:
        data = parse_model(ProfileCreate, payload)
        now = _now_utc()
        record = data.model_dump(exclude={"lifestyle_preferences", "profile_image_url"})
        record.update(
            lifestyle_preferences=encode_lifestyle(data.lifestyle_preferences),
            profile_image_url=str(data.profile_image_url) if data.profile_image_url else None,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        row = self.store.insert_profile(record)
        if row is None:
            raise ValidationError(f"A profile with email {data.email} already exists")
        logger.info("[PROFILE] created profile_id=%s location=%s", row["id"], row["location"])
        return profile_from_record(row)

    def get_profile(self, profile_id: int) -> UserProfile:
        row = self.store.get_profile(profile_id)
        if row is None:
            raise NotFoundError(f"Profile {profile_id} not found")
        return profile_from_record(row)

    def find_profile(self, profile_id: int) -> UserProfile | None:
        row = self.store.get_profile(profile_id)
        return profile_from_record(row) if row else None

    def update_profile(self, profile_id: int, payload: ProfileUpdate | dict[str, Any]) -> UserProfile:
        data = parse_model(ProfileUpdate, payload)
        changes = data.model_dump(exclude_unset=True, exclude={"lifestyle_preferences", "profile_image_url"})
        if "lifestyle_preferences" in data.model_fields_set:
            changes["lifestyle_preferences"] = encode_lifestyle(data.lifestyle_preferences)
        if "profile_image_url" in data.model_fields_set:
            changes["profile_image_url"] = str(data.profile_image_url) if data.profile_image_url else None
        changes["updated_at"] = _now_utc()

        # the store checks the merged budget range in the same unit as the write
        row = self.store.update_profile(profile_id, changes)
        if row is None:
            raise NotFoundError(f"Profile {profile_id} not found")
        logger.info("[PROFILE] updated profile_id=%s fields=%s", profile_id, sorted(data.model_fields_set))
        return profile_from_record(row)

    def list_candidates(
        self, viewer_id: int | None, filters: CandidateFilters | dict[str, Any] | None = None
    ) -> list[UserProfile]:
        criteria = parse_model(CandidateFilters, filters or {})
        profiles = [profile_from_record(row) for row in self.store.list_profiles()]
        return filter_candidates(profiles, viewer_id, criteria)
