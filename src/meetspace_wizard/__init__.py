"""MeetSpace Wizard - client-side engine for the event submission wizard.

This package provides a library interface and a CLI for:
- Validating event records field by field, step by step or as a whole
- Walking the seven-step wizard with per-step gating and direct step edits
- Debounced, user-scoped draft autosave and resume
- Assembling the submission payload and handing it to a create operation

Library Usage:
    >>> from meetspace_wizard import EventWizard, OutboxEventCreator
    >>>
    >>> wizard = EventWizard("user-1", creator=OutboxEventCreator("outbox"))
    >>> wizard.mount()
    >>> wizard.change(title="Python Meetup", category="tech", event_date="2030-05-01")
    >>> result = wizard.next()
    >>> print(result.outcome, wizard.visible_errors())

CLI Usage:
    $ meetspace-wizard steps
    $ meetspace-wizard validate event.json --step location
    $ meetspace-wizard submit event.json --user user-1 --outbox ./outbox
"""

__version__ = "0.1.0"

# Core
from meetspace_wizard.core.config import Config
from meetspace_wizard.core.exceptions import (
    DraftStoreError,
    LimitReachedError,
    StepTransitionError,
    SubmissionError,
    UploadError,
    ValidationError,
    WizardError,
)
from meetspace_wizard.core.notices import Notice, NoticeLevel, Notifier

# Models
from meetspace_wizard.models.event import (
    EventDraft,
    ImageAsset,
    Location,
    PendingFile,
    Speaker,
    StreamingPlatform,
)
from meetspace_wizard.models.results import CreatedEvent, Outcome, TransitionResult
from meetspace_wizard.models.visibility import PrivateVisibility, PublicVisibility

# Validation
from meetspace_wizard.validation import (
    RuleContext,
    ValidationErrorMap,
    is_valid,
    validate_field,
    validate_record,
)

# Drafts
from meetspace_wizard.drafts import DraftStore, FileDraftStore, MemoryDraftStore

# Services
from meetspace_wizard.services import (
    AssetUploader,
    EventCreator,
    HttpEventCreator,
    OutboxEventCreator,
)

# State Machine
from meetspace_wizard.state_machine import (
    DraftPersistence,
    DraftSnapshot,
    EventWizard,
    StepValidator,
    WizardStep,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "WizardError",
    "ValidationError",
    "StepTransitionError",
    "UploadError",
    "SubmissionError",
    "DraftStoreError",
    "LimitReachedError",
    "Notice",
    "NoticeLevel",
    "Notifier",
    # Models
    "EventDraft",
    "Location",
    "Speaker",
    "ImageAsset",
    "PendingFile",
    "StreamingPlatform",
    "PublicVisibility",
    "PrivateVisibility",
    "Outcome",
    "TransitionResult",
    "CreatedEvent",
    # Validation
    "RuleContext",
    "ValidationErrorMap",
    "validate_field",
    "validate_record",
    "is_valid",
    # Drafts
    "DraftStore",
    "MemoryDraftStore",
    "FileDraftStore",
    # Services
    "EventCreator",
    "AssetUploader",
    "HttpEventCreator",
    "OutboxEventCreator",
    # State Machine
    "WizardStep",
    "StepValidator",
    "DraftSnapshot",
    "DraftPersistence",
    "EventWizard",
]
