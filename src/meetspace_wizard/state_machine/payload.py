"""Assembly of the submission payload from a validated draft."""

import json
import logging
from typing import Any

from meetspace_wizard.core.config import Config
from meetspace_wizard.models.event import EventDraft, ImageAsset, is_built_in_platform
from meetspace_wizard.models.payload import SubmissionPayload
from meetspace_wizard.models.visibility import visibility_to_dict
from meetspace_wizard.services.meeting import create_meeting_url

logger = logging.getLogger(__name__)


def _text(value: Any) -> str | None:
    """Form encoding of a scalar; None means the part is omitted."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value).strip()
    return text or None


def _image_details(image: ImageAsset | None) -> str | None:
    if image is None or not image.is_uploaded:
        return None
    details: dict[str, Any] = {"url": image.url}
    if image.public_id:
        details["public_id"] = image.public_id
    if image.width:
        details["width"] = image.width
    if image.height:
        details["height"] = image.height
    if image.attribution:
        details["attribution"] = image.attribution.to_dict()
    return json.dumps(details)


def assemble_payload(draft: EventDraft, config: Config | None = None) -> SubmissionPayload:
    """Flatten a draft into text parts plus pending file parts.

    Only the active virtual/physical and free/paid shapes are sent. For the
    built-in meeting platform the meeting link is composed from the room name.

    Args:
        draft: Validated draft
        config: Supplies the meeting app id and domain

    Returns:
        SubmissionPayload ready for the create operation
    """
    config = config or Config()
    payload = SubmissionPayload()

    def put(name: str, value: Any) -> None:
        text = _text(value)
        if text is not None:
            payload.fields[name] = text

    def put_json(name: str, value: Any) -> None:
        if value:
            payload.fields[name] = json.dumps(value)

    put("event_id", draft.event_id)
    put("title", draft.title)
    put("description", draft.description)
    put("short_description", draft.short_description)
    put("event_date", draft.event_date)
    put("start_time", draft.start_time)
    put("end_time", draft.end_time)
    put("category", draft.category)
    put("is_virtual", draft.is_virtual)

    if draft.is_virtual:
        put("streaming_platform", draft.streaming_platform)
        if is_built_in_platform(draft.streaming_platform):
            put("room_name", draft.room_name)
            if draft.room_name and config.meetings_enabled:
                put(
                    "meeting_link",
                    create_meeting_url(config.jaas_app_id, draft.room_name, config.jaas_domain),
                )
        else:
            put("meeting_link", draft.meeting_link)
    else:
        put_json("location", draft.location.to_dict())

    put("duration", draft.duration)
    put("max_attendees", draft.max_attendees)
    put("minimum_attendees", draft.minimum_attendees)
    put("is_free_event", draft.is_free_event)
    if not draft.is_free_event:
        put("price", draft.price)
        put("currency", (draft.currency or "").upper())
        put("refund_policy", draft.refund_policy)
        put("early_bird_deadline", draft.early_bird_deadline)

    put_json("tags", draft.tags)
    put_json("requirements", draft.requirements)
    put_json("target_audience", draft.target_audience)

    cover = _image_details(draft.cover_image)
    if cover:
        payload.fields["cover_image_details"] = cover
    logo = _image_details(draft.logo)
    if logo:
        payload.fields["logo_details"] = logo

    put_json("speakers", [speaker.to_dict() for speaker in draft.speakers])
    payload.fields["visibility"] = json.dumps(visibility_to_dict(draft.visibility))

    payload.files = draft.pending_files()
    logger.debug(
        f"Assembled payload with {len(payload.fields)} fields and {len(payload.files)} files"
    )
    return payload
