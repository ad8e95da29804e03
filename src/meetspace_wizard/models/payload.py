"""Submission payload handed to the create operation."""

from dataclasses import dataclass, field
from typing import Any

from meetspace_wizard.models.event import PendingFile


@dataclass
class SubmissionPayload:
    """Flattened multipart-style submission.

    Attributes:
        fields: Text parts; nested values are JSON strings
        files: Binary parts keyed by part name (``speaker_photo_file[0]``)
    """

    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, PendingFile] = field(default_factory=dict)

    def describe(self) -> dict[str, Any]:
        """JSON-safe view with file parts reduced to their metadata."""
        return {
            "fields": dict(self.fields),
            "files": {
                name: {
                    "filename": f.filename,
                    "content_type": f.content_type,
                    "size": f.size,
                }
                for name, f in self.files.items()
            },
        }
