"""Declarative field schema for the event record.

Field-level rules (types, lengths, formats) live on pydantic models here.
Rules spanning several fields live in `validation.rules` and run even when
some field-level rule fails, so every step sees its own problems.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from meetspace_wizard.models.visibility import visibility_to_dict
from meetspace_wizard.utils.sanitization import is_absolute_url

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def parse_iso_date(value: Any) -> date | None:
    """Parse a strict YYYY-MM-DD string; None when malformed or not a real date."""
    if not isinstance(value, str) or not DATE_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _error(code: str, message: str) -> PydanticCustomError:
    return PydanticCustomError(code, message)


def _blank_to_none(value: Any) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return value


def _coerce_number(value: Any, integer: bool, message: str) -> int | float | None:
    value = _blank_to_none(value)
    if value is None:
        return None
    if isinstance(value, bool):
        raise _error("number_type", message)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise _error("number_type", message) from None
    if integer:
        if not number.is_integer():
            raise _error("number_type", message)
        return int(number)
    return number


def _check_email(value: str) -> str:
    if not EMAIL_RE.match(value.strip()):
        raise _error("email", "Invalid email format in restricted list.")
    return value.strip()


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ImageSchema(_Schema):
    """Uploaded image metadata, or a local file still waiting to be submitted."""

    pending_file: bool = False
    url: str = Field("", validate_default=True)
    public_id: str = ""

    @field_validator("url")
    @classmethod
    def _url_is_absolute(cls, value: str, info: ValidationInfo) -> str:
        if info.data.get("pending_file") and not value:
            return value
        if not is_absolute_url(value):
            raise _error("invalid_url", "Invalid image URL")
        return value


class SpeakerSchema(_Schema):
    id: str = ""
    name: str = Field("", validate_default=True)
    role: str = ""
    bio: str | None = None
    photo: ImageSchema | None = Field(None, validate_default=True)

    @field_validator("name")
    @classmethod
    def _name_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise _error("too_short", "Speaker name must be at least 2 characters")
        if len(value) > 100:
            raise _error("too_long", "Speaker name must be less than 100 characters")
        return value

    @field_validator("bio")
    @classmethod
    def _bio_length(cls, value: str | None) -> str | None:
        if value and len(value) > 500:
            raise _error("too_long", "Bio must be less than 500 characters")
        return value

    @field_validator("photo")
    @classmethod
    def _photo_required(cls, value: ImageSchema | None) -> ImageSchema:
        if value is None:
            raise _error("missing", "Speaker photo is required")
        return value


class LocationSchema(_Schema):
    address: str | None = None
    city: str | None = None
    country: str | None = None
    postal_code: str | None = None


class VisibilitySchema(_Schema):
    status: Literal["public", "private"] = "public"
    restricted_to: list[Annotated[str, AfterValidator(_check_email)]] = Field(default_factory=list)


class EventRecordSchema(_Schema):
    """Field-level schema of a complete event record.

    Field order follows the wizard's step order so the first reported issue
    points at the earliest step that needs attention.
    """

    # Basic info
    title: str = Field("", validate_default=True)
    category: str = Field("", validate_default=True)
    event_date: str = Field("", validate_default=True)
    start_time: str = Field("", validate_default=True)
    end_time: str = Field("", validate_default=True)
    duration: int | None = None

    # Details
    description: str = Field("", validate_default=True)
    short_description: str | None = None
    tags: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    target_audience: list[str] = Field(default_factory=list)

    # Location / virtual
    is_virtual: bool = False
    location: LocationSchema | None = None
    meeting_link: str | None = None
    streaming_platform: str | None = None
    room_name: str | None = None
    max_attendees: int | None = None
    minimum_attendees: int | None = None

    # Tickets & pricing
    is_free_event: bool = True
    price: float | None = None
    currency: str | None = None
    refund_policy: str | None = None
    early_bird_deadline: str | None = None

    # Images & speakers
    cover_image: ImageSchema | None = Field(None, validate_default=True)
    logo: ImageSchema | None = None
    speakers: list[SpeakerSchema] = Field(default_factory=list, validate_default=True)

    visibility: VisibilitySchema = Field(default_factory=VisibilitySchema)

    @field_validator("title")
    @classmethod
    def _title_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 3:
            raise _error("too_short", "Title must be at least 3 characters")
        if len(value) > 100:
            raise _error("too_long", "Title must be less than 100 characters")
        return value

    @field_validator("category")
    @classmethod
    def _category_required(cls, value: str) -> str:
        if not value.strip():
            raise _error("missing", "Category is required")
        return value

    @field_validator("event_date")
    @classmethod
    def _event_date_valid(cls, value: str, info: ValidationInfo) -> str:
        if not DATE_RE.match(value or ""):
            raise _error("date_format", "Invalid date format (YYYY-MM-DD required)")
        parsed = parse_iso_date(value)
        today = _context_now(info).date()
        if parsed is None or parsed < today:
            raise _error("date_past", "Event date must be today or in the future")
        return value

    @field_validator("start_time")
    @classmethod
    def _start_required(cls, value: str) -> str:
        if not value.strip():
            raise _error("missing", "Start time is required")
        return value

    @field_validator("end_time")
    @classmethod
    def _end_required(cls, value: str) -> str:
        if not value.strip():
            raise _error("missing", "End time is required")
        return value

    @field_validator("duration", mode="before")
    @classmethod
    def _duration_number(cls, value: Any) -> Any:
        number = _coerce_number(value, True, "Duration must be a whole number of minutes")
        if number is not None and number <= 0:
            raise _error("not_positive", "Duration must be a positive number")
        return number

    @field_validator("description")
    @classmethod
    def _description_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 10:
            raise _error("too_short", "Description must be at least 10 characters")
        return value

    @field_validator("short_description")
    @classmethod
    def _short_description_length(cls, value: str | None) -> str | None:
        if value and len(value.strip()) > 150:
            raise _error("too_long", "Short description must be less than 150 characters")
        return value

    @field_validator("room_name")
    @classmethod
    def _room_name_length(cls, value: str | None, info: ValidationInfo) -> str | None:
        minimum = (info.context or {}).get("room_name_min_length", 3)
        if value is not None and value.strip() and len(value.strip()) < minimum:
            raise _error("too_short", f"Room name must be at least {minimum} characters")
        return value

    @field_validator("max_attendees", mode="before")
    @classmethod
    def _max_attendees_number(cls, value: Any) -> Any:
        number = _coerce_number(value, True, "Max attendees must be a whole number")
        if number is not None and number <= 0:
            raise _error("not_positive", "Max attendees must be a positive number")
        return number

    @field_validator("minimum_attendees", mode="before")
    @classmethod
    def _minimum_attendees_number(cls, value: Any) -> Any:
        number = _coerce_number(value, True, "Minimum attendees must be a whole number")
        if number is not None and number < 0:
            raise _error("negative", "Minimum attendees cannot be negative")
        return number

    @field_validator("price", mode="before")
    @classmethod
    def _price_number(cls, value: Any) -> Any:
        return _coerce_number(value, False, "Price must be a number")

    @field_validator("currency", mode="before")
    @classmethod
    def _currency_code(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if value is not None and not re.fullmatch(r"[A-Za-z]{3}", str(value).strip()):
            raise _error("currency", "Currency code must be 3 letters")
        return value

    @field_validator("refund_policy")
    @classmethod
    def _refund_policy_length(cls, value: str | None) -> str | None:
        if value and len(value) > 500:
            raise _error("too_long", "Refund policy too long (max 500 chars)")
        return value

    @field_validator("early_bird_deadline", mode="before")
    @classmethod
    def _early_bird_format(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if value is not None and parse_iso_date(value) is None:
            raise _error("date_format", "Invalid date format (YYYY-MM-DD required)")
        return value

    @field_validator("cover_image")
    @classmethod
    def _cover_required(cls, value: ImageSchema | None) -> ImageSchema:
        if value is None:
            raise _error("missing", "Cover image is required")
        return value

    @field_validator("speakers")
    @classmethod
    def _at_least_one_speaker(cls, value: list[SpeakerSchema]) -> list[SpeakerSchema]:
        if not value:
            raise _error("too_short", "At least one speaker is required")
        return value

    @field_validator("visibility", mode="before")
    @classmethod
    def _normalize_visibility(cls, value: Any) -> Any:
        return visibility_to_dict(value)


def _context_now(info: ValidationInfo) -> datetime:
    now = (info.context or {}).get("now")
    return now if isinstance(now, datetime) else datetime.now()
