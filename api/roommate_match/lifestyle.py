"""
Typed lifestyle preferences and their serialized form.

Stores keep the preferences as an opaque JSON document. ``decode_lifestyle``
is the single place that document is parsed; it raises instead of falling
back to ``None`` so a corrupt blob never looks like "no preferences".
"""
import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

Level = Literal["low", "medium", "high"]


class LifestylePreferences(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    smoking: StrictBool | None = None
    pets: StrictBool | None = None
    cleanliness: Level | None = None
    quietness: Level | None = None
    social_level: Level | None = Field(None, alias="socialLevel")


def decode_lifestyle(raw: Any) -> LifestylePreferences | None:
    if raw is None:
        return None
    if isinstance(raw, LifestylePreferences):
        return raw
    if isinstance(raw, (str, bytes)):
        if not raw.strip():
            return None
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"lifestyle_preferences is not valid JSON: {exc.msg}")
    if not isinstance(raw, dict):
        raise ValidationError("lifestyle_preferences must be a JSON object")
    try:
        return LifestylePreferences.model_validate(raw)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        raise ValidationError(f"lifestyle_preferences.{field}: {first.get('msg')}")


def encode_lifestyle(prefs: LifestylePreferences | None) -> str | None:
    if prefs is None:
        return None
    return json.dumps(prefs.model_dump(by_alias=True, exclude_none=True), sort_keys=True)
