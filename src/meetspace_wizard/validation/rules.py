"""Cross-field rules and active-branch projection.

These rules look at several fields at once. They run on the raw record after
the field schema, whether or not the field schema passed, so an invalid title
never hides a missing venue.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterator

from meetspace_wizard.models.event import is_built_in_platform
from meetspace_wizard.models.visibility import PrivateVisibility, normalize_visibility
from meetspace_wizard.utils.sanitization import is_absolute_url
from meetspace_wizard.validation.errors import Issue
from meetspace_wizard.validation.schema import parse_iso_date

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

# Fields that only exist for one side of a branch
PHYSICAL_ONLY_FIELDS = ("location",)
VIRTUAL_ONLY_FIELDS = ("meeting_link", "streaming_platform", "room_name")
PAID_ONLY_FIELDS = ("price", "currency", "refund_policy", "early_bird_deadline")

# Messages shared with the step orchestrator
MSG_LOCATION_REQUIRED = "Address or City is required for physical events."
MSG_ROOM_REQUIRED = "A valid room name (at least {min} characters) is required for built-in meetings."
MSG_LINK_REQUIRED = "Meeting link is required for virtual events."
MSG_LINK_INVALID = "Meeting link must be a valid URL (e.g., https://...)"
MSG_PRICE_REQUIRED = "Price is required for paid events and must be non-negative"
MSG_PRICE_MINIMUM = "Minimum price for paid events is {min:g}"
MSG_PRICE_MAXIMUM = "Price seems too high (max {max:,.0f})"
MSG_CURRENCY_REQUIRED = "Currency is required for paid events"


@dataclass
class RuleContext:
    """Limits and clock used while checking a record.

    Attributes:
        now: Reference time for "in the future" checks (defaults to now)
        min_price: Smallest accepted price for paid events
        max_price: Largest accepted price for paid events
        room_name_min_length: Minimum length of a built-in meeting room name
    """

    now: datetime = field(default_factory=datetime.now)
    min_price: float = 0.01
    max_price: float = 100000.0
    room_name_min_length: int = 3

    @classmethod
    def from_config(cls, config: Any, now: datetime | None = None) -> RuleContext:
        return cls(
            now=now or datetime.now(),
            min_price=config.min_price,
            max_price=config.max_price,
            room_name_min_length=config.room_name_min_length,
        )

    def schema_context(self) -> dict[str, Any]:
        """Context passed to pydantic field validators."""
        return {"now": self.now, "room_name_min_length": self.room_name_min_length}


Rule = Callable[[dict[str, Any], RuleContext], Iterator[Issue]]


def project_active(record: dict[str, Any]) -> dict[str, Any]:
    """Drop the fields of the inactive virtual/physical and free/paid shapes.

    The inactive values stay on the draft; they are only hidden from checks.
    """
    projected = dict(record)
    hidden = VIRTUAL_ONLY_FIELDS if not record.get("is_virtual") else PHYSICAL_ONLY_FIELDS
    if record.get("is_free_event", True):
        hidden = hidden + PAID_ONLY_FIELDS
    for name in hidden:
        projected.pop(name, None)
    return projected


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_number(value: Any) -> float | None:
    """Parse raw form input as a number; None when blank or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def check_event_times(record: dict[str, Any], ctx: RuleContext) -> Iterator[Issue]:
    """Times are HH:MM, the event starts in the future and ends after it starts."""
    event_date = _text(record.get("event_date"))
    start = _text(record.get("start_time"))
    end = _text(record.get("end_time"))
    if not event_date or not start or not end:
        return

    if not TIME_RE.match(start):
        yield Issue(("start_time",), "Invalid time format (HH:MM required)", "time_format")
        return
    if not TIME_RE.match(end):
        yield Issue(("end_time",), "Invalid time format (HH:MM required)", "time_format")
        return

    day = parse_iso_date(event_date)
    if day is None:
        yield Issue(("event_date",), "Invalid date or time value provided", "date_format")
        return

    starts = datetime.combine(day, datetime.strptime(start, "%H:%M").time())
    ends = datetime.combine(day, datetime.strptime(end, "%H:%M").time())
    if starts <= ctx.now:
        yield Issue(("start_time",), "Event start time must be in the future", "time_past")
    if ends <= starts:
        yield Issue(("end_time",), "End time must be after start time", "time_order")


def check_venue(record: dict[str, Any], ctx: RuleContext) -> Iterator[Issue]:
    """Physical events need an address or city."""
    if record.get("is_virtual"):
        return
    location = record.get("location") or {}
    address = _text(location.get("address"))
    city = _text(location.get("city"))
    if not address and not city:
        yield Issue(("location",), MSG_LOCATION_REQUIRED, "location_required")
        return
    if address and len(address) < 3:
        yield Issue(("location", "address"), "Address must be at least 3 characters if provided.")
    if city and len(city) < 3:
        yield Issue(("location", "city"), "City must be at least 3 characters if provided.")


def check_meeting(record: dict[str, Any], ctx: RuleContext) -> Iterator[Issue]:
    """Virtual events need a room (built-in platform) or a meeting link."""
    if not record.get("is_virtual"):
        return
    if is_built_in_platform(record.get("streaming_platform")):
        room = _text(record.get("room_name"))
        if len(room) < ctx.room_name_min_length:
            yield Issue(
                ("room_name",),
                MSG_ROOM_REQUIRED.format(min=ctx.room_name_min_length),
                "room_required",
            )
        return
    link = _text(record.get("meeting_link"))
    if not link:
        yield Issue(("meeting_link",), MSG_LINK_REQUIRED, "link_required")
    elif not is_absolute_url(link):
        yield Issue(("meeting_link",), MSG_LINK_INVALID, "invalid_url")


def check_price(record: dict[str, Any], ctx: RuleContext) -> Iterator[Issue]:
    """Paid events need a price within bounds and a currency."""
    if record.get("is_free_event", True):
        return
    price = parse_number(record.get("price"))
    if price is None or price < 0:
        yield Issue(("price",), MSG_PRICE_REQUIRED, "price_required")
    elif price < ctx.min_price:
        yield Issue(("price",), MSG_PRICE_MINIMUM.format(min=ctx.min_price), "price_minimum")
    elif price > ctx.max_price:
        yield Issue(("price",), MSG_PRICE_MAXIMUM.format(max=ctx.max_price), "price_maximum")

    if not _text(record.get("currency")):
        yield Issue(("currency",), MSG_CURRENCY_REQUIRED, "currency_required")

    deadline = parse_iso_date(_text(record.get("early_bird_deadline")))
    event_day = parse_iso_date(_text(record.get("event_date")))
    if deadline and event_day and deadline >= event_day:
        yield Issue(
            ("early_bird_deadline",),
            "Early-bird deadline must be before the event date",
            "deadline_order",
        )


def check_attendance(record: dict[str, Any], ctx: RuleContext) -> Iterator[Issue]:
    """The attendance floor cannot exceed the cap."""
    minimum = parse_number(record.get("minimum_attendees"))
    maximum = parse_number(record.get("max_attendees"))
    if minimum is not None and maximum is not None and minimum > maximum:
        yield Issue(
            ("minimum_attendees",),
            "Minimum attendees cannot exceed max attendees",
            "attendance_order",
        )


def check_visibility(record: dict[str, Any], ctx: RuleContext) -> Iterator[Issue]:
    """Private events must name at least one member."""
    visibility = normalize_visibility(record.get("visibility"))
    if isinstance(visibility, PrivateVisibility) and not visibility.allow_list:
        yield Issue(
            ("visibility", "restricted_to"),
            "At least one user must be specified for private visibility.",
            "allow_list_required",
        )


# Evaluated in order after the field schema
CROSS_FIELD_RULES: list[Rule] = [
    check_event_times,
    check_venue,
    check_meeting,
    check_price,
    check_attendance,
    check_visibility,
]


def run_rules(record: dict[str, Any], ctx: RuleContext) -> list[Issue]:
    """Run every cross-field rule and collect the issues they report."""
    issues: list[Issue] = []
    for rule in CROSS_FIELD_RULES:
        try:
            issues.extend(rule(record, ctx))
        except (TypeError, ValueError, AttributeError) as e:
            # Malformed raw input; the field schema reports the shape problem
            logger.debug(f"Rule {rule.__name__} skipped: {e}")
    return issues
