"""Event draft data models for the submission wizard."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

from meetspace_wizard.models.visibility import (
    PublicVisibility,
    Visibility,
    normalize_visibility,
)
from meetspace_wizard.utils.sanitization import clean_list, parse_flag, sanitize_input


class StreamingPlatform(str, Enum):
    """Conferencing platforms offered for virtual events.

    JITSI is the built-in option: the wizard provisions the room itself.
    Every other platform needs a user-supplied meeting link.
    """

    JITSI = "JITSI"
    ZOOM = "ZOOM"
    TEAMS = "TEAMS"
    MEET = "MEET"
    CUSTOM = "CUSTOM"


BUILT_IN_PLATFORM = StreamingPlatform.JITSI


def is_built_in_platform(platform: Any) -> bool:
    """Check whether a raw or enum platform value is the built-in one."""
    if isinstance(platform, StreamingPlatform):
        return platform is BUILT_IN_PLATFORM
    return str(platform or "").upper() == BUILT_IN_PLATFORM.value


@dataclass
class PendingFile:
    """An in-memory file selected by the user but not yet submitted.

    Never persisted in draft snapshots.
    """

    filename: str
    content: bytes = field(repr=False)
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class Attribution:
    """Credit for a third-party stock image."""

    name: str = ""
    url: str = ""
    source: str = ""
    source_url: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "url": self.url,
            "source": self.source,
            "source_url": self.source_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Attribution | None:
        if not data:
            return None
        return cls(
            name=data.get("name", ""),
            url=data.get("url", ""),
            source=data.get("source", ""),
            source_url=data.get("source_url", data.get("sourceUrl", "")),
        )


@dataclass
class ImageAsset:
    """Reference to an uploaded image plus an optional pending local file.

    Attributes:
        url: Stored URL returned by the upload service
        public_id: Storage identifier
        width: Pixel width
        height: Pixel height
        attribution: Credit for stock images
        file: Local file awaiting submission (excluded from snapshots)
    """

    url: str = ""
    public_id: str = ""
    width: int = 0
    height: int = 0
    attribution: Attribution | None = None
    file: PendingFile | None = field(default=None, repr=False, compare=False)

    @property
    def is_uploaded(self) -> bool:
        return bool(self.url)

    def to_dict(self) -> dict[str, Any]:
        """Serializable metadata. The pending file is never included."""
        data: dict[str, Any] = {
            "url": self.url,
            "public_id": self.public_id,
            "width": self.width,
            "height": self.height,
        }
        if self.attribution:
            data["attribution"] = self.attribution.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ImageAsset | None:
        if not data:
            return None
        return cls(
            url=data.get("url", "") or "",
            public_id=data.get("public_id", data.get("publicId", "")) or "",
            width=int(data.get("width") or 0),
            height=int(data.get("height") or 0),
            attribution=Attribution.from_dict(data.get("attribution")),
        )


def uploaded_image(image: ImageAsset | None) -> dict[str, Any] | None:
    """Snapshot form of an image; None unless it has been uploaded."""
    if image is None or not image.is_uploaded:
        return None
    return image.to_dict()


@dataclass
class Location:
    """Physical venue of an in-person event."""

    address: str = ""
    city: str = ""
    country: str = ""
    postal_code: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "address": self.address,
            "city": self.city,
            "country": self.country,
            "postal_code": self.postal_code,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Location:
        data = data or {}
        return cls(
            address=sanitize_input(data.get("address")),
            city=sanitize_input(data.get("city")),
            country=sanitize_input(data.get("country")),
            postal_code=sanitize_input(data.get("postal_code", data.get("postalCode"))),
        )

    def summary(self) -> str:
        parts = [p for p in (self.address, self.city, self.country) if p.strip()]
        return ", ".join(parts)


@dataclass
class Speaker:
    """A speaker listed on the event page."""

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    name: str = ""
    role: str = ""
    bio: str = ""
    photo: ImageAsset | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "bio": self.bio,
            "photo": uploaded_image(self.photo),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Speaker:
        return cls(
            id=str(data.get("id") or uuid.uuid4().hex[:12]),
            name=sanitize_input(data.get("name")),
            role=sanitize_input(data.get("role")),
            bio=sanitize_input(data.get("bio")),
            photo=ImageAsset.from_dict(data.get("photo")),
        )


@dataclass
class EventDraft:
    """The in-progress event record collected by the wizard.

    Only one of the virtual/physical shapes and one of the free/paid shapes
    is active at a time, governed by `is_virtual` and `is_free_event`. The
    inactive shape keeps its values so toggling back restores them.

    Numeric fields accept raw form input (strings); the schema coerces them.
    """

    # Basic info
    title: str = ""
    category: str = ""
    event_date: str = ""
    start_time: str = ""
    end_time: str = ""
    duration: Any = 60

    # Details
    description: str = ""
    short_description: str = ""
    tags: list[str] = field(default_factory=list)
    requirements: list[str] = field(default_factory=list)
    target_audience: list[str] = field(default_factory=list)

    # Location / virtual
    is_virtual: bool = False
    location: Location = field(default_factory=Location)
    streaming_platform: str = ""
    meeting_link: str = ""
    room_name: str | None = None
    max_attendees: Any = 100
    minimum_attendees: Any = 1

    # Tickets & pricing
    is_free_event: bool = True
    price: Any = 0
    currency: str = "USD"
    refund_policy: str = ""
    early_bird_deadline: str = ""

    # Media & people
    cover_image: ImageAsset | None = None
    logo: ImageAsset | None = None
    speakers: list[Speaker] = field(default_factory=list)

    visibility: Visibility = field(default_factory=PublicVisibility)

    # Set when editing a persisted event
    event_id: str | None = None

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    def to_dict(self) -> dict[str, Any]:
        """Serializable projection used for snapshots and validation.

        Pending files are excluded; only uploaded asset metadata survives.
        """
        return {
            "title": self.title,
            "category": self.category,
            "event_date": self.event_date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "description": self.description,
            "short_description": self.short_description,
            "tags": list(self.tags),
            "requirements": list(self.requirements),
            "target_audience": list(self.target_audience),
            "is_virtual": self.is_virtual,
            "location": self.location.to_dict(),
            "streaming_platform": self.streaming_platform,
            "meeting_link": self.meeting_link,
            "room_name": self.room_name,
            "max_attendees": self.max_attendees,
            "minimum_attendees": self.minimum_attendees,
            "is_free_event": self.is_free_event,
            "price": self.price,
            "currency": self.currency,
            "refund_policy": self.refund_policy,
            "early_bird_deadline": self.early_bird_deadline,
            "cover_image": uploaded_image(self.cover_image),
            "logo": uploaded_image(self.logo),
            "speakers": [s.to_dict() for s in self.speakers],
            "visibility": normalize_visibility(self.visibility).to_dict(),
            "event_id": self.event_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EventDraft:
        """Create an EventDraft from a snapshot or JSON document.

        Unknown keys are ignored; missing keys take the fresh-draft defaults.
        """
        defaults = cls()

        def get(key: str, default: Any) -> Any:
            value = data.get(key)
            return default if value is None else value

        return cls(
            title=sanitize_input(get("title", "")),
            category=sanitize_input(get("category", "")),
            event_date=str(get("event_date", "")),
            start_time=str(get("start_time", "")),
            end_time=str(get("end_time", "")),
            duration=get("duration", defaults.duration),
            description=sanitize_input(get("description", "")),
            short_description=sanitize_input(get("short_description", "")),
            tags=clean_list(data.get("tags")),
            requirements=clean_list(data.get("requirements")),
            target_audience=clean_list(data.get("target_audience")),
            is_virtual=parse_flag(data.get("is_virtual", False)),
            location=Location.from_dict(data.get("location")),
            streaming_platform=str(get("streaming_platform", "")),
            meeting_link=str(get("meeting_link", "")).strip(),
            room_name=data.get("room_name") or None,
            max_attendees=get("max_attendees", defaults.max_attendees),
            minimum_attendees=get("minimum_attendees", defaults.minimum_attendees),
            is_free_event=parse_flag(data.get("is_free_event", True)),
            price=get("price", defaults.price),
            currency=str(get("currency", defaults.currency)),
            refund_policy=sanitize_input(get("refund_policy", "")),
            early_bird_deadline=str(get("early_bird_deadline", "")),
            cover_image=ImageAsset.from_dict(data.get("cover_image")),
            logo=ImageAsset.from_dict(data.get("logo")),
            speakers=[Speaker.from_dict(s) for s in data.get("speakers") or []],
            visibility=normalize_visibility(data.get("visibility")),
            event_id=data.get("event_id") or None,
        )

    def pending_files(self) -> dict[str, PendingFile]:
        """Local files awaiting submission, keyed by payload part name."""
        files: dict[str, PendingFile] = {}
        if self.cover_image and self.cover_image.file:
            files["cover_image_file"] = self.cover_image.file
        if self.logo and self.logo.file:
            files["logo_file"] = self.logo.file
        for index, speaker in enumerate(self.speakers):
            if speaker.photo and speaker.photo.file:
                files[f"speaker_photo_file[{index}]"] = speaker.photo.file
        return files

    def is_blank(self) -> bool:
        """True when nothing worth autosaving has been entered."""
        return not self.title.strip() and not self.description.strip()

    def find_speaker(self, speaker_id: str) -> tuple[int, Speaker] | None:
        for index, speaker in enumerate(self.speakers):
            if speaker.id == speaker_id:
                return index, speaker
        return None
