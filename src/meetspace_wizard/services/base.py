"""Interfaces of the wizard's external collaborators."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable

from meetspace_wizard.models.event import PendingFile
from meetspace_wizard.models.payload import SubmissionPayload
from meetspace_wizard.models.results import CreatedEvent, UploadResult


class AssetFolder(str, Enum):
    """Destination categories for uploaded assets."""

    EVENT_IMAGES = "event_images"
    EVENT_LOGOS = "event_logos"
    SPEAKER_PHOTOS = "speaker_photos"


# Returns False when the user may not open the wizard (plan limit reached)
SubscriptionGate = Callable[["str | None"], bool]


def allow_all(user_id: "str | None") -> bool:
    """Gate that never blocks."""
    return True


class EventCreator(ABC):
    """Persists a finished event record.

    Subclasses must implement:
    - create: Store the payload and return the created record

    Example:
        >>> class ApiCreator(EventCreator):
        ...     name = "api"
        ...
        ...     def create(self, payload: SubmissionPayload) -> CreatedEvent:
        ...         response = session.post(url, data=payload.fields, files=...)
        ...         return CreatedEvent(event_id=response.json()["id"])
    """

    name: str = "base"

    @abstractmethod
    def create(self, payload: SubmissionPayload) -> CreatedEvent:
        """Create an event from an assembled payload.

        Args:
            payload: Text and file parts

        Returns:
            CreatedEvent with the server-assigned id

        Raises:
            SubmissionError: If the record is rejected
        """
        raise NotImplementedError


class AssetUploader(ABC):
    """Stores a binary asset and returns where it lives."""

    name: str = "base"

    @abstractmethod
    def upload(self, file: PendingFile, folder: AssetFolder) -> UploadResult:
        """Upload one file.

        Args:
            file: File selected by the user
            folder: Destination category

        Returns:
            UploadResult with stored URL, storage id and dimensions

        Raises:
            TransientUploadError: For failures worth retrying
            UploadError: For permanent failures
        """
        raise NotImplementedError
