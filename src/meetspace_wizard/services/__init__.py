"""External collaborators: event creation, uploads, meeting rooms and the plan gate."""

from meetspace_wizard.services.base import (
    AssetFolder,
    AssetUploader,
    EventCreator,
    SubscriptionGate,
    allow_all,
)
from meetspace_wizard.services.creators import HttpEventCreator, OutboxEventCreator
from meetspace_wizard.services.meeting import (
    PENDING_EVENT_ID,
    create_meeting_url,
    generate_room_name,
)
from meetspace_wizard.services.uploads import (
    ALLOWED_IMAGE_TYPES,
    MAX_UPLOAD_MB,
    RetryingUploader,
    validate_file,
)

__all__ = [
    "AssetFolder",
    "AssetUploader",
    "EventCreator",
    "SubscriptionGate",
    "allow_all",
    "HttpEventCreator",
    "OutboxEventCreator",
    "PENDING_EVENT_ID",
    "create_meeting_url",
    "generate_room_name",
    "ALLOWED_IMAGE_TYPES",
    "MAX_UPLOAD_MB",
    "RetryingUploader",
    "validate_file",
]
