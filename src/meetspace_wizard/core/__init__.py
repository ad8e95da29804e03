"""Core configuration, exceptions and notices."""

from meetspace_wizard.core.config import Config
from meetspace_wizard.core.exceptions import (
    DraftStoreError,
    LimitReachedError,
    RetryExhaustedError,
    StepTransitionError,
    SubmissionError,
    TransientUploadError,
    UploadError,
    UploadInProgressError,
    ValidationError,
    WizardError,
)
from meetspace_wizard.core.notices import Notice, NoticeLevel, Notifier

__all__ = [
    "Config",
    "WizardError",
    "ValidationError",
    "StepTransitionError",
    "UploadError",
    "UploadInProgressError",
    "TransientUploadError",
    "RetryExhaustedError",
    "SubmissionError",
    "DraftStoreError",
    "LimitReachedError",
    "Notice",
    "NoticeLevel",
    "Notifier",
]
