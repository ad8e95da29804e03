"""Result models for wizard transitions and external operations."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from meetspace_wizard.models.event import Attribution


class Outcome(str, Enum):
    """Outcome of a wizard transition."""

    ADVANCED = "advanced"
    MOVED_BACK = "moved_back"
    JUMPED = "jumped"
    BLOCKED = "blocked"
    UPLOAD_IN_PROGRESS = "upload_in_progress"
    ALREADY_SUBMITTING = "already_submitting"
    SUBMITTED = "submitted"
    SUBMIT_FAILED = "submit_failed"
    CANCELLED = "cancelled"


@dataclass
class TransitionResult:
    """Result of `next`, `back`, `edit_step`, `submit` or `cancel`.

    Attributes:
        outcome: What happened
        step: Step the wizard is on afterwards
        message: User-facing explanation (empty when nothing to say)
        event: Created event when the outcome is SUBMITTED
    """

    outcome: Outcome
    step: str
    message: str = ""
    event: "CreatedEvent | None" = None

    @property
    def ok(self) -> bool:
        return self.outcome in (
            Outcome.ADVANCED,
            Outcome.MOVED_BACK,
            Outcome.JUMPED,
            Outcome.SUBMITTED,
            Outcome.CANCELLED,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "step": self.step,
            "message": self.message,
            "event": self.event.to_dict() if self.event else None,
        }


@dataclass
class CreatedEvent:
    """Record returned by the create operation.

    Attributes:
        event_id: Identifier assigned by the server
        url: Public URL of the event page, if any
        data: Raw response data
        created_at: When the record was created
    """

    event_id: str
    url: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "url": self.url,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class UploadResult:
    """Stored asset returned by the upload operation."""

    url: str
    public_id: str
    width: int = 0
    height: int = 0
    attribution: Attribution | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "public_id": self.public_id,
            "width": self.width,
            "height": self.height,
            "attribution": self.attribution.to_dict() if self.attribution else None,
        }
