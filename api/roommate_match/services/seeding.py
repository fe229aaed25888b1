from __future__ import annotations

import logging
from typing import Any

from ..errors import DuplicateInterestError
from .directory import ProfileDirectory
from .engine import InterestEngine

logger = logging.getLogger(__name__)

DEMO_PROFILES: list[dict[str, Any]] = [
    {
        "email": "current@example.com",
        "first_name": "Current",
        "last_name": "User",
        "age": 25,
        "bio": "Looking for a great roommate!",
        "location": "New York, NY",
        "budget_min": 800,
        "budget_max": 1200,
        "preferred_gender": "any",
        "lifestyle_preferences": {"smoking": False, "pets": True, "cleanliness": "high"},
        "profile_image_url": "https://images.unsplash.com/photo-1535713875002-d1d0cf377fde?w=150",
    },
    {
        "email": "alice@example.com",
        "first_name": "Alice",
        "last_name": "Johnson",
        "age": 24,
        "bio": "Graduate student looking for a quiet, clean roommate. I love reading and cooking!",
        "location": "New York, NY",
        "budget_min": 800,
        "budget_max": 1200,
        "preferred_gender": "female",
        "lifestyle_preferences": {"smoking": False, "pets": True, "cleanliness": "high", "quietness": "high"},
        "profile_image_url": "https://images.unsplash.com/photo-1494790108755-2616b612b786?w=150",
    },
    {
        "email": "bob@example.com",
        "first_name": "Bob",
        "last_name": "Smith",
        "age": 26,
        "bio": "Software engineer who works from home. Looking for someone responsible and friendly.",
        "location": "New York, NY",
        "budget_min": 1000,
        "budget_max": 1500,
        "preferred_gender": "any",
        "lifestyle_preferences": {"smoking": False, "pets": False, "cleanliness": "medium", "quietness": "medium"},
        "profile_image_url": "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=150",
    },
    {
        "email": "charlie@example.com",
        "first_name": "Charlie",
        "last_name": "Davis",
        "age": 22,
        "bio": "Art student who loves music and painting. Looking for a creative, open-minded roommate.",
        "location": "Brooklyn, NY",
        "budget_min": 700,
        "budget_max": 1000,
        "preferred_gender": "any",
        "lifestyle_preferences": {"smoking": False, "pets": True, "cleanliness": "medium", "quietness": "low"},
        "profile_image_url": "https://images.unsplash.com/photo-1438761681033-6461ffad8d80?w=150",
    },
]

DEMO_INTEREST_MESSAGE = "Hi! I think we'd make great roommates. Let's chat!"


def seed_demo_profiles(
    directory: ProfileDirectory,
    engine: InterestEngine | None = None,
    with_interest: bool = True,
) -> dict[str, int]:
    """Create the demo listings, skipping any whose email already exists."""
    created = 0
    ids: dict[str, int] = {}
    for payload in DEMO_PROFILES:
        existing = directory.store.get_profile_by_email(payload["email"])
        if existing:
            ids[payload["email"]] = existing["id"]
            continue
        profile = directory.create_profile(payload)
        ids[payload["email"]] = profile.id
        created += 1

    interests = 0
    if engine is not None and with_interest:
        requester, target = ids["alice@example.com"], ids["current@example.com"]
        # any earlier demo interest counts, including one that was since answered
        if not directory.store.list_interests(requester_id=requester, target_id=target):
            try:
                engine.create_interest(requester, target, DEMO_INTEREST_MESSAGE)
                interests += 1
            except DuplicateInterestError:
                pass

    logger.info("[SEED] profiles_created=%s interests_created=%s", created, interests)
    return {"profiles_created": created, "profiles_total": len(ids), "interests_created": interests}
