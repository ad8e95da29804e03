"""Data models for the event wizard."""

from meetspace_wizard.models.event import (
    BUILT_IN_PLATFORM,
    Attribution,
    EventDraft,
    ImageAsset,
    Location,
    PendingFile,
    Speaker,
    StreamingPlatform,
    is_built_in_platform,
)
from meetspace_wizard.models.payload import SubmissionPayload
from meetspace_wizard.models.results import (
    CreatedEvent,
    Outcome,
    TransitionResult,
    UploadResult,
)
from meetspace_wizard.models.visibility import (
    PrivateVisibility,
    PublicVisibility,
    Visibility,
    normalize_visibility,
    visibility_to_dict,
)

__all__ = [
    "EventDraft",
    "Location",
    "Speaker",
    "ImageAsset",
    "Attribution",
    "PendingFile",
    "StreamingPlatform",
    "BUILT_IN_PLATFORM",
    "is_built_in_platform",
    "Visibility",
    "PublicVisibility",
    "PrivateVisibility",
    "normalize_visibility",
    "visibility_to_dict",
    "Outcome",
    "TransitionResult",
    "CreatedEvent",
    "UploadResult",
    "SubmissionPayload",
]
