from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)

from .database import Base


class UserProfileRow(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(254), nullable=False, unique=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    age = Column(Integer, nullable=False)
    bio = Column(Text, nullable=True)
    location = Column(String, nullable=False)
    budget_min = Column(Float, nullable=False)
    budget_max = Column(Float, nullable=False)
    preferred_gender = Column(String, nullable=True)
    lifestyle_preferences = Column(Text, nullable=True)
    profile_image_url = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("budget_max >= budget_min", name="ck_profiles_budget"),
        CheckConstraint("age >= 18 AND age <= 100", name="ck_profiles_age"),
    )


class InterestRow(Base):
    __tablename__ = "interests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    requester_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    target_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    status = Column(String, nullable=False, default="pending")
    message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("requester_id <> target_id", name="ck_interest_not_self"),
        Index("idx_interest_requester_target", "requester_id", "target_id"),
        Index("idx_interest_target", "target_id"),
        Index(
            "uq_interest_active_pair",
            "requester_id",
            "target_id",
            unique=True,
            sqlite_where=text("status IN ('pending', 'accepted')"),
            postgresql_where=text("status IN ('pending', 'accepted')"),
        ),
    )


class MatchRow(Base):
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user1_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    user2_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("user1_id", "user2_id", name="uq_match_pair"),
        CheckConstraint("user1_id < user2_id", name="ck_match_pair_order"),
        Index("idx_match_user2", "user2_id"),
    )
