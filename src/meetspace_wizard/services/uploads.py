"""Asset upload checks and retrying."""

import logging
import time
from typing import Callable

from meetspace_wizard.core.exceptions import (
    RetryExhaustedError,
    TransientUploadError,
    UploadError,
    ValidationError,
)
from meetspace_wizard.models.event import PendingFile
from meetspace_wizard.models.results import UploadResult
from meetspace_wizard.services.base import AssetFolder, AssetUploader
from meetspace_wizard.utils.backoff import retry_with_backoff

logger = logging.getLogger(__name__)

MAX_UPLOAD_MB = 5
ALLOWED_IMAGE_TYPES = (
    "image/jpeg",
    "image/png",
    "image/jpg",
    "image/webp",
    "image/gif",
)


def validate_file(
    file: PendingFile | None,
    max_size_mb: float = MAX_UPLOAD_MB,
    allowed_types: tuple[str, ...] = ALLOWED_IMAGE_TYPES,
) -> None:
    """Check a file's type and size before upload.

    Raises:
        ValidationError: With a message suitable for the user
    """
    if file is None:
        raise ValidationError("No file selected", field="file")
    if file.content_type not in allowed_types:
        raise ValidationError(
            f"Invalid file type. Allowed types: {', '.join(allowed_types)}",
            field="file",
            value=file.content_type,
        )
    if file.size > max_size_mb * 1024 * 1024:
        raise ValidationError(
            f"File size exceeds limit ({max_size_mb:g}MB)",
            field="file",
            value=file.size,
        )


class RetryingUploader(AssetUploader):
    """Wraps an uploader, retrying transient failures with backoff.

    Example:
        >>> uploader = RetryingUploader(CloudUploader(), max_retries=3)
        >>> result = uploader.upload(file, AssetFolder.EVENT_IMAGES)
    """

    def __init__(
        self,
        uploader: AssetUploader,
        max_retries: int = 3,
        base_delay: float = 0.5,
        max_delay: float = 8.0,
        jitter: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.uploader = uploader
        self.name = uploader.name
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self.sleep = sleep

    @classmethod
    def from_config(cls, uploader: AssetUploader, config) -> "RetryingUploader":
        return cls(
            uploader,
            max_retries=config.upload_max_retries,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
            jitter=config.retry_jitter,
        )

    def upload(self, file: PendingFile, folder: AssetFolder) -> UploadResult:
        """Upload with bounded retries.

        Raises:
            UploadError: If the upload failed permanently or every retry failed
        """
        try:
            return retry_with_backoff(
                lambda: self.uploader.upload(file, folder),
                max_retries=self.max_retries,
                base_delay=self.base_delay,
                max_delay=self.max_delay,
                jitter=self.jitter,
                retryable_exceptions=(TransientUploadError,),
                sleep=self.sleep,
            )
        except RetryExhaustedError as e:
            logger.error(f"Upload of {file.filename} to {folder.value} failed: {e.last_error}")
            raise UploadError(
                f"Upload failed after {e.attempts} attempts",
                folder=folder.value,
                details={"last_error": str(e.last_error)},
            ) from e
