"""Room names and meeting URLs for the built-in conferencing platform."""

import logging
import time

from meetspace_wizard.core.exceptions import ValidationError
from meetspace_wizard.utils.sanitization import slugify

logger = logging.getLogger(__name__)

DEFAULT_MEETING_DOMAIN = "8x8.vc"

# Stands in for the event id until the event has been persisted
PENDING_EVENT_ID = "pending"


def generate_room_name(event_id: str | None, timestamp: int | None = None) -> str:
    """Derive a URL-safe room name for an event.

    Args:
        event_id: Persisted event id, or None before the first save
        timestamp: Milliseconds since the epoch (defaults to now)

    Returns:
        ``event-<id>-<timestamp>`` lowercased, with unsafe characters dashed

    Example:
        >>> generate_room_name("AbC_1", 1700000000000)
        'event-abc-1-1700000000000'
    """
    ts = timestamp if timestamp is not None else int(time.time() * 1000)
    room = slugify(f"event-{event_id or PENDING_EVENT_ID}-{ts}".lower())
    logger.debug(f"Generated room name {room}")
    return room


def create_meeting_url(app_id: str, room_name: str, domain: str = DEFAULT_MEETING_DOMAIN) -> str:
    """Compose the meeting URL for a room.

    Raises:
        ValidationError: If the app id or room name is missing
    """
    if not app_id or not room_name:
        raise ValidationError(
            "A meeting app id and room name are required to build a meeting URL",
            field="room_name",
            value=room_name,
        )
    return f"https://{domain}/{app_id}/{slugify(room_name)}"
