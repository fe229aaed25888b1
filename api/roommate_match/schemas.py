from datetime import datetime
from typing import Annotated, Any, Literal, TypeVar

from pydantic import BaseModel, BeforeValidator, EmailStr, Field, HttpUrl, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .config import MAX_AGE, MIN_AGE
from .errors import ValidationError
from .lifestyle import LifestylePreferences, decode_lifestyle

Gender = Literal["male", "female", "any"]
InterestStatus = Literal["pending", "accepted", "rejected"]
Decision = Literal["accepted", "rejected"]
Direction = Literal["sent", "received"]

ACTIVE_INTEREST_STATUSES = frozenset({"pending", "accepted"})


ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_model(model_cls: type[ModelT], data: Any) -> ModelT:
    """Validate ``data`` into ``model_cls``, raising the domain ValidationError."""
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or "payload"
        raise ValidationError(f"{field}: {first.get('msg')}")


def _strip_required(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
    return value


def _lifestyle_before(value: Any) -> Any:
    try:
        return decode_lifestyle(value)
    except ValidationError as exc:
        raise ValueError(exc.message)


RequiredText = Annotated[str, BeforeValidator(_strip_required)]
LifestyleBlob = Annotated[LifestylePreferences | None, BeforeValidator(_lifestyle_before)]


class ProfileCreate(BaseModel):
    email: EmailStr
    first_name: RequiredText
    last_name: RequiredText
    age: int = Field(ge=MIN_AGE, le=MAX_AGE)
    bio: str | None = None
    location: RequiredText
    budget_min: float = Field(gt=0)
    budget_max: float = Field(gt=0)
    preferred_gender: Gender | None = None
    lifestyle_preferences: LifestyleBlob = None
    profile_image_url: HttpUrl | None = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @model_validator(mode="after")
    def check_budget_order(self) -> "ProfileCreate":
        if self.budget_max < self.budget_min:
            raise ValueError("Budget max must be greater than or equal to budget min")
        return self


class ProfileUpdate(BaseModel):
    first_name: RequiredText | None = None
    last_name: RequiredText | None = None
    age: int | None = Field(None, ge=MIN_AGE, le=MAX_AGE)
    bio: str | None = None
    location: RequiredText | None = None
    budget_min: float | None = Field(None, gt=0)
    budget_max: float | None = Field(None, gt=0)
    preferred_gender: Gender | None = None
    lifestyle_preferences: LifestyleBlob = None
    profile_image_url: HttpUrl | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def check_required_not_null(self) -> "ProfileUpdate":
        # only the optional profile fields may be cleared
        for name in ("first_name", "last_name", "age", "location", "budget_min", "budget_max", "is_active"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class UserProfile(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    age: int
    bio: str | None = None
    location: str
    budget_min: float
    budget_max: float
    preferred_gender: Gender | None = None
    lifestyle_preferences: LifestylePreferences | None = None
    profile_image_url: str | None = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class CandidateFilters(BaseModel):
    location: str | None = None
    min_age: int | None = Field(None, ge=MIN_AGE, le=MAX_AGE)
    max_age: int | None = Field(None, ge=MIN_AGE, le=MAX_AGE)
    budget_min: float | None = Field(None, gt=0)
    budget_max: float | None = Field(None, gt=0)
    preferred_gender: Gender | None = None

    @field_validator("location", mode="before")
    @classmethod
    def blank_location_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def check_ranges(self) -> "CandidateFilters":
        if self.min_age is not None and self.max_age is not None and self.min_age > self.max_age:
            raise ValueError("min_age must be less than or equal to max_age")
        if self.budget_min is not None and self.budget_max is not None and self.budget_min > self.budget_max:
            raise ValueError("budget_min must be less than or equal to budget_max")
        return self


class Interest(BaseModel):
    id: int
    requester_id: int
    target_id: int
    status: InterestStatus
    message: str | None = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_INTEREST_STATUSES


class Match(BaseModel):
    id: int
    user1_id: int
    user2_id: int
    created_at: datetime

    def other_party(self, user_id: int) -> int:
        return self.user2_id if self.user1_id == user_id else self.user1_id


class InterestView(Interest):
    direction: Direction
    counterpart: UserProfile | None = None


class MatchView(Match):
    matched_user: UserProfile | None = None


class InterestCreateRequest(BaseModel):
    target_id: int
    message: str | None = None


class InterestRespondRequest(BaseModel):
    status: Decision


class RespondResult(BaseModel):
    interest: Interest
    match: Match | None = None

