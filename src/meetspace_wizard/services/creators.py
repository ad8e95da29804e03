"""Create-operation backends."""

import base64
import json
import logging
import re
import uuid
from datetime import datetime
from pathlib import Path

import requests

from meetspace_wizard.core.exceptions import SubmissionError
from meetspace_wizard.models.payload import SubmissionPayload
from meetspace_wizard.models.results import CreatedEvent
from meetspace_wizard.services.base import EventCreator

logger = logging.getLogger(__name__)


class OutboxEventCreator(EventCreator):
    """Writes each submission to a JSON file in an outbox directory.

    Used by the CLI and for offline runs; a delivery process picks the files
    up later.
    """

    name = "outbox"

    def __init__(self, outbox_dir: Path | str) -> None:
        self.outbox_dir = Path(outbox_dir)

    def create(self, payload: SubmissionPayload) -> CreatedEvent:
        if not payload.fields.get("title"):
            raise SubmissionError("Event title is missing", code="missing_field", field="title")

        event_id = uuid.uuid4().hex[:12]
        document = {
            "event_id": event_id,
            "submitted_at": datetime.utcnow().isoformat(),
            "fields": payload.fields,
            "files": {
                name: {
                    "filename": f.filename,
                    "content_type": f.content_type,
                    "content": base64.b64encode(f.content).decode("ascii"),
                }
                for name, f in payload.files.items()
            },
        }
        path = self.outbox_dir / f"event_{event_id}.json"
        try:
            self.outbox_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        except OSError as e:
            raise SubmissionError(
                "Could not save the event. Please try again.",
                code="outbox_unavailable",
                details={"path": str(path), "error": str(e)},
            ) from e

        logger.info(f"Event {event_id} written to outbox: {path}")
        return CreatedEvent(event_id=event_id, url=path.resolve().as_uri(), data=document)


# Server field names that differ from the record's snake_case names
SERVER_FIELD_NAMES = {
    "date": "event_date",
    "endDate": "event_date",
}

# Outbound part names that are not a plain camelCase of the record's name
API_FIELD_NAMES = {
    "event_date": "date",
}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def server_field(name: str | None) -> str | None:
    """Map a field name reported by the events API to a record field.

    Combined names such as ``date/startTime`` map to their first part.
    """
    if not name:
        return None
    name = name.split("/")[0].strip()
    if name in SERVER_FIELD_NAMES:
        return SERVER_FIELD_NAMES[name]
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def api_field(name: str) -> str:
    """Map a payload part name to the form field the events API reads.

    An index suffix is kept: ``speaker_photo_file[0]`` becomes
    ``speakerPhotoFile[0]``.
    """
    base, bracket, index = name.partition("[")
    if base in API_FIELD_NAMES:
        base = API_FIELD_NAMES[base]
    else:
        head, *rest = base.split("_")
        base = head + "".join(part.capitalize() for part in rest)
    return f"{base}{bracket}{index}"


class HttpEventCreator(EventCreator):
    """Posts submissions to the events API as multipart form data.

    Example:
        >>> creator = HttpEventCreator("https://meetspace.example", api_token="...")
        >>> event = creator.create(payload)
        >>> print(event.url)
    """

    name = "http"
    CREATE_PATH = "/api/events/create"

    def __init__(
        self,
        base_url: str,
        api_token: str | None = None,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("An events API base URL is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if api_token:
            self.session.headers["Authorization"] = f"Bearer {api_token}"

    @classmethod
    def from_config(cls, config) -> "HttpEventCreator":
        return cls(config.api_base_url, api_token=config.api_token, timeout=config.api_timeout)

    def create(self, payload: SubmissionPayload) -> CreatedEvent:
        url = f"{self.base_url}{self.CREATE_PATH}"
        fields = {api_field(name): value for name, value in payload.fields.items()}
        files = {
            api_field(name): (f.filename, f.content, f.content_type)
            for name, f in payload.files.items()
        }
        logger.info(f"Posting event to {url} ({len(fields)} fields, {len(files)} files)")

        try:
            response = self.session.post(
                url, data=fields, files=files or None, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise self._rejection(e.response) from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"Events API unreachable: {type(e).__name__}: {e}")
            raise SubmissionError(
                "Could not reach the event service. Please try again.",
                code="network_error",
                details={"error": f"{type(e).__name__}: {e}"},
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise SubmissionError(
                "The event service returned an unexpected response.",
                code="invalid_response",
                details={"status": response.status_code},
            ) from e

        event = data.get("event") or {}
        event_id = str(event.get("_id") or event.get("id") or "")
        if not event_id:
            raise SubmissionError(
                "The event service did not return the created event.",
                code="invalid_response",
                details={"status": response.status_code},
            )

        link = (data.get("links") or {}).get("self", "")
        event_url = f"{self.base_url}{link}" if link.startswith("/") else link
        logger.info(f"Event {event_id} created via {self.base_url}")
        return CreatedEvent(event_id=event_id, url=event_url, data=data)

    def _rejection(self, response: requests.Response) -> SubmissionError:
        """Turn an error response into a SubmissionError naming the blamed field."""
        status = response.status_code if response is not None else 0
        try:
            body = response.json() if response is not None else {}
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        fields = body.get("fields") or []
        field_name = server_field(body.get("field") or (fields[0] if fields else None))
        message = body.get("error") or f"Event service returned HTTP {status}"
        logger.warning(f"Events API rejected the event: HTTP {status} {body.get('code', '')}")
        return SubmissionError(
            message,
            code=str(body.get("code") or f"http_{status}"),
            field=field_name,
            details={"status": status},
        )
