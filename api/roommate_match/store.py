"""
Storage backends for profiles, interests and matches.

Both backends expose the same operations and hand back plain ``dict`` records
so callers never hold a reference into live storage. ``accept_interest`` is
the main compound write: it flips a pending interest to accepted and creates
(or reuses) the match for the canonical pair as a single unit. Profile updates
merge and check the budget range inside the same unit as the write, and
interest inserts refuse a second active interest for the same ordered pair.
"""
import itertools
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError

from .errors import ValidationError
from .models import InterestRow, MatchRow, UserProfileRow

PROFILE_FIELDS = (
    "email",
    "first_name",
    "last_name",
    "age",
    "bio",
    "location",
    "budget_min",
    "budget_max",
    "preferred_gender",
    "lifestyle_preferences",
    "profile_image_url",
    "is_active",
    "created_at",
    "updated_at",
)
ACTIVE_STATUSES = ("pending", "accepted")
BUDGET_ORDER_MESSAGE = "Budget max must be greater than or equal to budget min"


def _updatable(changes: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in changes.items() if k in PROFILE_FIELDS and k != "email"}


def _check_budget(record: dict[str, Any]) -> None:
    if record["budget_max"] < record["budget_min"]:
        raise ValidationError(BUDGET_ORDER_MESSAGE)


class Store(ABC):
    @abstractmethod
    def insert_profile(self, record: dict[str, Any]) -> dict[str, Any] | None:
        """Insert a profile; returns None when the email is already taken."""

    @abstractmethod
    def get_profile(self, profile_id: int) -> dict[str, Any] | None: ...

    @abstractmethod
    def get_profile_by_email(self, email: str) -> dict[str, Any] | None: ...

    @abstractmethod
    def update_profile(self, profile_id: int, changes: dict[str, Any]) -> dict[str, Any] | None:
        """Merge ``changes`` into a profile; None if it does not exist.

        Raises ValidationError when the merged budget range is inverted. The
        read, merge, check and write happen as one unit.
        """

    @abstractmethod
    def list_profiles(self) -> list[dict[str, Any]]: ...

    @abstractmethod
    def insert_interest(self, record: dict[str, Any]) -> dict[str, Any] | None:
        """Insert an interest; None when the pair already has an active one."""

    @abstractmethod
    def get_interest(self, interest_id: int) -> dict[str, Any] | None: ...

    @abstractmethod
    def find_active_interest(self, requester_id: int, target_id: int) -> dict[str, Any] | None: ...

    @abstractmethod
    def reject_interest(self, interest_id: int, now: datetime) -> dict[str, Any] | None:
        """Mark a pending interest rejected; None if it is no longer pending."""

    @abstractmethod
    def accept_interest(
        self, interest_id: int, pair: tuple[int, int], now: datetime
    ) -> tuple[dict[str, Any], dict[str, Any]] | None:
        """Mark a pending interest accepted and get-or-create the pair's match."""

    @abstractmethod
    def list_interests(
        self, requester_id: int | None = None, target_id: int | None = None
    ) -> list[dict[str, Any]]: ...

    @abstractmethod
    def get_match_by_pair(self, user1_id: int, user2_id: int) -> dict[str, Any] | None: ...

    @abstractmethod
    def list_matches_for_user(self, user_id: int) -> list[dict[str, Any]]: ...


class InMemoryStore(Store):
    def __init__(self) -> None:
        self._profiles: dict[int, dict[str, Any]] = {}
        self._interests: dict[int, dict[str, Any]] = {}
        self._matches: dict[int, dict[str, Any]] = {}
        self._match_by_pair: dict[tuple[int, int], int] = {}
        self._profile_ids = itertools.count(1)
        self._interest_ids = itertools.count(1)
        self._match_ids = itertools.count(1)
        self._lock = threading.RLock()

    def insert_profile(self, record: dict[str, Any]) -> dict[str, Any] | None:
        with self._lock:
            if any(p["email"] == record["email"] for p in self._profiles.values()):
                return None
            row = {field: record.get(field) for field in PROFILE_FIELDS}
            row["id"] = next(self._profile_ids)
            self._profiles[row["id"]] = row
            return dict(row)

    def get_profile(self, profile_id: int) -> dict[str, Any] | None:
        with self._lock:
            row = self._profiles.get(profile_id)
            return dict(row) if row else None

    def get_profile_by_email(self, email: str) -> dict[str, Any] | None:
        with self._lock:
            for row in self._profiles.values():
                if row["email"] == email:
                    return dict(row)
        return None

    def update_profile(self, profile_id: int, changes: dict[str, Any]) -> dict[str, Any] | None:
        with self._lock:
            row = self._profiles.get(profile_id)
            if row is None:
                return None
            merged = {**row, **_updatable(changes)}
            _check_budget(merged)
            self._profiles[profile_id] = merged
            return dict(merged)

    def list_profiles(self) -> list[dict[str, Any]]:
        with self._lock:
            return [dict(self._profiles[k]) for k in sorted(self._profiles)]

    def insert_interest(self, record: dict[str, Any]) -> dict[str, Any] | None:
        with self._lock:
            if record["status"] in ACTIVE_STATUSES and self._active_interest(record["requester_id"], record["target_id"]):
                return None
            row = dict(record)
            row["id"] = next(self._interest_ids)
            self._interests[row["id"]] = row
            return dict(row)

    def get_interest(self, interest_id: int) -> dict[str, Any] | None:
        with self._lock:
            row = self._interests.get(interest_id)
            return dict(row) if row else None

    def _active_interest(self, requester_id: int, target_id: int) -> dict[str, Any] | None:
        for row in self._interests.values():
            if (
                row["requester_id"] == requester_id
                and row["target_id"] == target_id
                and row["status"] in ACTIVE_STATUSES
            ):
                return row
        return None

    def find_active_interest(self, requester_id: int, target_id: int) -> dict[str, Any] | None:
        with self._lock:
            row = self._active_interest(requester_id, target_id)
            return dict(row) if row else None

    def reject_interest(self, interest_id: int, now: datetime) -> dict[str, Any] | None:
        with self._lock:
            row = self._interests.get(interest_id)
            if row is None or row["status"] != "pending":
                return None
            updated = {**row, "status": "rejected", "updated_at": now}
            self._interests[interest_id] = updated
            return dict(updated)

    def accept_interest(
        self, interest_id: int, pair: tuple[int, int], now: datetime
    ) -> tuple[dict[str, Any], dict[str, Any]] | None:
        with self._lock:
            row = self._interests.get(interest_id)
            if row is None or row["status"] != "pending":
                return None
            match_id = self._match_by_pair.get(pair)
            if match_id is None:
                match_id = next(self._match_ids)
                self._matches[match_id] = {"id": match_id, "user1_id": pair[0], "user2_id": pair[1], "created_at": now}
                self._match_by_pair[pair] = match_id
            updated = {**row, "status": "accepted", "updated_at": now}
            self._interests[interest_id] = updated
            return dict(updated), dict(self._matches[match_id])

    def list_interests(
        self, requester_id: int | None = None, target_id: int | None = None
    ) -> list[dict[str, Any]]:
        with self._lock:
            rows = [self._interests[k] for k in sorted(self._interests)]
            return [
                dict(r)
                for r in rows
                if (requester_id is None or r["requester_id"] == requester_id)
                and (target_id is None or r["target_id"] == target_id)
            ]

    def get_match_by_pair(self, user1_id: int, user2_id: int) -> dict[str, Any] | None:
        with self._lock:
            match_id = self._match_by_pair.get((user1_id, user2_id))
            return dict(self._matches[match_id]) if match_id is not None else None

    def list_matches_for_user(self, user_id: int) -> list[dict[str, Any]]:
        with self._lock:
            return [
                dict(self._matches[k])
                for k in sorted(self._matches)
                if user_id in (self._matches[k]["user1_id"], self._matches[k]["user2_id"])
            ]


def _as_dict(obj) -> dict[str, Any]:
    record = {c.name: getattr(obj, c.name) for c in obj.__table__.columns}
    for key, value in record.items():
        # SQLite hands timestamps back without an offset; they were written as UTC
        if isinstance(value, datetime) and value.tzinfo is None:
            record[key] = value.replace(tzinfo=timezone.utc)
    return record


class SqlStore(Store):
    """SQLAlchemy-backed store; every operation runs in its own session."""

    def __init__(self, session_factory) -> None:
        self.SessionLocal = session_factory

    def insert_profile(self, record: dict[str, Any]) -> dict[str, Any] | None:
        try:
            with self.SessionLocal() as db:
                row = UserProfileRow(**{field: record.get(field) for field in PROFILE_FIELDS})
                db.add(row)
                db.commit()
                db.refresh(row)
                return _as_dict(row)
        except IntegrityError:
            return None

    def get_profile(self, profile_id: int) -> dict[str, Any] | None:
        with self.SessionLocal() as db:
            row = db.get(UserProfileRow, profile_id)
            return _as_dict(row) if row else None

    def get_profile_by_email(self, email: str) -> dict[str, Any] | None:
        with self.SessionLocal() as db:
            row = db.execute(select(UserProfileRow).where(UserProfileRow.email == email)).scalars().first()
            return _as_dict(row) if row else None

    def update_profile(self, profile_id: int, changes: dict[str, Any]) -> dict[str, Any] | None:
        with self.SessionLocal() as db:
            row = db.execute(
                select(UserProfileRow).where(UserProfileRow.id == profile_id).with_for_update()
            ).scalars().first()
            if row is None:
                return None
            updates = _updatable(changes)
            _check_budget({**_as_dict(row), **updates})
            for key, value in updates.items():
                setattr(row, key, value)
            try:
                db.commit()
            except IntegrityError:
                # a concurrent writer changed the other budget bound first
                db.rollback()
                raise ValidationError(BUDGET_ORDER_MESSAGE)
            db.refresh(row)
            return _as_dict(row)

    def list_profiles(self) -> list[dict[str, Any]]:
        with self.SessionLocal() as db:
            rows = db.execute(select(UserProfileRow).order_by(UserProfileRow.id)).scalars().all()
            return [_as_dict(r) for r in rows]

    def insert_interest(self, record: dict[str, Any]) -> dict[str, Any] | None:
        try:
            with self.SessionLocal() as db:
                row = InterestRow(**record)
                db.add(row)
                db.commit()
                db.refresh(row)
                return _as_dict(row)
        except IntegrityError:
            # uq_interest_active_pair: another writer holds an active interest for the pair
            return None

    def get_interest(self, interest_id: int) -> dict[str, Any] | None:
        with self.SessionLocal() as db:
            row = db.get(InterestRow, interest_id)
            return _as_dict(row) if row else None

    def find_active_interest(self, requester_id: int, target_id: int) -> dict[str, Any] | None:
        with self.SessionLocal() as db:
            row = db.execute(
                select(InterestRow)
                .where(
                    InterestRow.requester_id == requester_id,
                    InterestRow.target_id == target_id,
                    InterestRow.status.in_(ACTIVE_STATUSES),
                )
                .order_by(InterestRow.id)
            ).scalars().first()
            return _as_dict(row) if row else None

    def _resolve_pending(self, db, interest_id: int, status: str, now: datetime) -> bool:
        result = db.execute(
            update(InterestRow)
            .where(InterestRow.id == interest_id, InterestRow.status == "pending")
            .values(status=status, updated_at=now)
        )
        return result.rowcount == 1

    def reject_interest(self, interest_id: int, now: datetime) -> dict[str, Any] | None:
        with self.SessionLocal() as db:
            if not self._resolve_pending(db, interest_id, "rejected", now):
                db.rollback()
                return None
            db.commit()
            return _as_dict(db.get(InterestRow, interest_id))

    def accept_interest(
        self, interest_id: int, pair: tuple[int, int], now: datetime
    ) -> tuple[dict[str, Any], dict[str, Any]] | None:
        for attempt in range(2):
            with self.SessionLocal() as db:
                if not self._resolve_pending(db, interest_id, "accepted", now):
                    db.rollback()
                    return None
                match = self._match_for_pair(db, pair)
                if match is None:
                    match = MatchRow(user1_id=pair[0], user2_id=pair[1], created_at=now)
                    db.add(match)
                try:
                    db.commit()
                except IntegrityError:
                    # another writer created the pair's match first; redo the unit and reuse it
                    db.rollback()
                    if attempt:
                        raise
                    continue
                return _as_dict(db.get(InterestRow, interest_id)), _as_dict(match)
        return None

    @staticmethod
    def _match_for_pair(db, pair: tuple[int, int]):
        return db.execute(
            select(MatchRow).where(MatchRow.user1_id == pair[0], MatchRow.user2_id == pair[1])
        ).scalars().first()

    def list_interests(
        self, requester_id: int | None = None, target_id: int | None = None
    ) -> list[dict[str, Any]]:
        stmt = select(InterestRow).order_by(InterestRow.id)
        if requester_id is not None:
            stmt = stmt.where(InterestRow.requester_id == requester_id)
        if target_id is not None:
            stmt = stmt.where(InterestRow.target_id == target_id)
        with self.SessionLocal() as db:
            return [_as_dict(r) for r in db.execute(stmt).scalars().all()]

    def get_match_by_pair(self, user1_id: int, user2_id: int) -> dict[str, Any] | None:
        with self.SessionLocal() as db:
            row = self._match_for_pair(db, (user1_id, user2_id))
            return _as_dict(row) if row else None

    def list_matches_for_user(self, user_id: int) -> list[dict[str, Any]]:
        with self.SessionLocal() as db:
            rows = db.execute(
                select(MatchRow)
                .where(or_(MatchRow.user1_id == user_id, MatchRow.user2_id == user_id))
                .order_by(MatchRow.id)
            ).scalars().all()
            return [_as_dict(r) for r in rows]
