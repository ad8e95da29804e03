"""Custom exceptions for the event wizard."""

from typing import Any


class WizardError(Exception):
    """Base exception for all wizard errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ValidationError(WizardError):
    """Raised when input validation fails outside the wizard's error map."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value


class StepTransitionError(WizardError):
    """Raised when a step id is unknown or a jump is not allowed."""

    def __init__(
        self,
        message: str,
        current_step: str,
        attempted_step: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.current_step = current_step
        self.attempted_step = attempted_step


class UploadInProgressError(WizardError):
    """Raised when navigation is attempted while an asset upload is pending."""

    def __init__(
        self,
        message: str = "Please wait for the upload to finish",
        pending: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.pending = pending or []


class UploadError(WizardError):
    """Raised when an asset upload fails permanently."""

    def __init__(
        self,
        message: str,
        folder: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.folder = folder


class TransientUploadError(UploadError):
    """Raised by uploaders for failures worth retrying (timeouts, 5xx)."""


class RetryExhaustedError(WizardError):
    """Raised when all retry attempts have been exhausted."""

    def __init__(
        self,
        message: str = "All retry attempts exhausted",
        attempts: int = 0,
        last_error: Exception | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.attempts = attempts
        self.last_error = last_error


class SubmissionError(WizardError):
    """Raised by the create operation when the server rejects a submission.

    Attributes:
        code: Machine-readable error code from the server
        field: Record field the server blamed, if any
    """

    def __init__(
        self,
        message: str,
        code: str = "submission_failed",
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.code = code
        self.field = field


class DraftStoreError(WizardError):
    """Raised when the draft key-value store cannot be read or written."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.key = key


class LimitReachedError(WizardError):
    """Raised when the subscription gate refuses to open the wizard."""

    def __init__(
        self,
        message: str = "You have reached the event limit for your plan",
        user_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.user_id = user_id
