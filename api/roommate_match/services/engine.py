"""
Interest/match engine.

Writes are serialized under one lock so the duplicate check and the insert,
and the acceptance and its match, each happen as a single step within a
process. The store backs both with its own guard (a partial unique index on
active interests, a unique canonical pair on matches) for writers in other
processes. Reads go straight to the store, which only ever returns fully
written records.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any

from ..config import INTEREST_MESSAGE_MAX_LENGTH
from ..errors import (
    DuplicateInterestError,
    InvalidStateError,
    NotFoundError,
    SelfInterestError,
    UnauthorizedError,
    ValidationError,
)
from ..schemas import Interest, InterestView, Match, MatchView, RespondResult
from ..store import Store
from .directory import ProfileDirectory
from .state_machine import canonical_pair, transition_interest

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _received_sort_key(interest: Interest) -> tuple[int, int]:
    return (0 if interest.status == "pending" else 1, interest.id)


class InterestEngine:
    def __init__(
        self,
        store: Store,
        directory: ProfileDirectory,
        message_max_length: int = INTEREST_MESSAGE_MAX_LENGTH,
    ) -> None:
        self.store = store
        self.directory = directory
        self.message_max_length = message_max_length
        self._write_lock = threading.Lock()

    def _require_active_profile(self, profile_id: int) -> None:
        row = self.store.get_profile(profile_id)
        if row is None or not row.get("is_active"):
            raise NotFoundError(f"Profile {profile_id} not found")

    def _normalize_message(self, message: str | None) -> str | None:
        if message is None:
            return None
        text = str(message).strip()
        if not text:
            return None
        if len(text) > self.message_max_length:
            raise ValidationError(f"message must be {self.message_max_length} characters or fewer")
        return text

    def create_interest(self, requester_id: int, target_id: int, message: str | None = None) -> Interest:
        if requester_id == target_id:
            raise SelfInterestError("Cannot express interest in yourself")
        self._require_active_profile(requester_id)
        self._require_active_profile(target_id)
        text = self._normalize_message(message)

        with self._write_lock:
            existing = self.store.find_active_interest(requester_id, target_id)
            if existing is not None:
                self._raise_duplicate(requester_id, target_id, existing)
            now = _now_utc()
            row = self.store.insert_interest(
                {
                    "requester_id": requester_id,
                    "target_id": target_id,
                    "status": "pending",
                    "message": text,
                    "created_at": now,
                    "updated_at": now,
                }
            )
            if row is None:
                self._raise_duplicate(requester_id, target_id, self.store.find_active_interest(requester_id, target_id))
        logger.info("[INTEREST] created interest_id=%s requester_id=%s target_id=%s", row["id"], requester_id, target_id)
        return Interest.model_validate(row)

    @staticmethod
    def _raise_duplicate(requester_id: int, target_id: int, existing: dict[str, Any] | None) -> None:
        status = existing["status"] if existing else "active"
        logger.debug(
            "[INTEREST] duplicate requester_id=%s target_id=%s existing_id=%s status=%s",
            requester_id,
            target_id,
            existing["id"] if existing else None,
            status,
        )
        raise DuplicateInterestError(f"An interest from {requester_id} to {target_id} is already {status}")

    def respond_to_interest(self, interest_id: int, responder_id: int, decision: str) -> RespondResult:
        with self._write_lock:
            row = self.store.get_interest(interest_id)
            if row is None:
                raise NotFoundError(f"Interest {interest_id} not found")
            if row["target_id"] != responder_id:
                raise UnauthorizedError("Only the recipient of an interest may respond to it")
            new_status = transition_interest(row["status"], decision)

            now = _now_utc()
            if new_status == "accepted":
                pair = canonical_pair(row["requester_id"], row["target_id"])
                result = self.store.accept_interest(interest_id, pair, now)
                if result is None:
                    raise InvalidStateError(f"Interest {interest_id} is no longer pending")
                interest_row, match_row = result
                logger.info(
                    "[MATCH] interest_id=%s accepted match_id=%s user1_id=%s user2_id=%s",
                    interest_id,
                    match_row["id"],
                    match_row["user1_id"],
                    match_row["user2_id"],
                )
                return RespondResult(
                    interest=Interest.model_validate(interest_row),
                    match=Match.model_validate(match_row),
                )

            interest_row = self.store.reject_interest(interest_id, now)
            if interest_row is None:
                raise InvalidStateError(f"Interest {interest_id} is no longer pending")
        logger.info("[INTEREST] interest_id=%s rejected by user_id=%s", interest_id, responder_id)
        return RespondResult(interest=Interest.model_validate(interest_row))

    def list_interests(self, user_id: int, direction: str | None = None) -> list[InterestView]:
        if direction not in (None, "sent", "received"):
            raise ValidationError("direction must be one of: sent, received")
        self.directory.get_profile(user_id)

        views: list[InterestView] = []
        if direction in (None, "sent"):
            for row in self.store.list_interests(requester_id=user_id):
                views.append(self._view(row, "sent", row["target_id"]))
        if direction in (None, "received"):
            received = [Interest.model_validate(r) for r in self.store.list_interests(target_id=user_id)]
            if direction == "received":
                received.sort(key=_received_sort_key)
            for interest in received:
                views.append(self._view(interest.model_dump(), "received", interest.requester_id))
        if direction is None:
            views.sort(key=lambda v: v.id)
        return views

    def _view(self, row: dict[str, Any], direction: str, counterpart_id: int) -> InterestView:
        return InterestView(**row, direction=direction, counterpart=self.directory.find_profile(counterpart_id))

    def list_matches(self, user_id: int) -> list[MatchView]:
        self.directory.get_profile(user_id)
        views: list[MatchView] = []
        for row in self.store.list_matches_for_user(user_id):
            match = Match.model_validate(row)
            views.append(
                MatchView(**match.model_dump(), matched_user=self.directory.find_profile(match.other_party(user_id)))
            )
        return views
