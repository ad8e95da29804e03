"""Pytest configuration and fixtures for MeetSpace Wizard tests."""

from datetime import datetime
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest

from meetspace_wizard.core.config import Config
from meetspace_wizard.core.notices import Notifier
from meetspace_wizard.drafts.storage import MemoryDraftStore
from meetspace_wizard.models.event import EventDraft, PendingFile
from meetspace_wizard.models.results import CreatedEvent
from meetspace_wizard.services.base import EventCreator
from meetspace_wizard.state_machine.machine import EventWizard
from meetspace_wizard.utils.timers import ManualScheduler
from meetspace_wizard.validation.rules import RuleContext

FIXED_NOW = datetime(2026, 10, 19, 12, 0)
APP_ID = "vpaas-magic-cookie-123"


@pytest.fixture
def now() -> datetime:
    """Fixed wall-clock time used by date and time rules."""
    return FIXED_NOW


@pytest.fixture
def context(now) -> RuleContext:
    return RuleContext(now=now)


@pytest.fixture
def valid_record() -> dict[str, Any]:
    """A complete physical, free, public event record."""
    return {
        "title": "Python Meetup Philly",
        "category": "technology",
        "event_date": "2099-05-01",
        "start_time": "18:00",
        "end_time": "20:00",
        "duration": 120,
        "description": "An evening of lightning talks about Python tooling.",
        "short_description": "Lightning talks",
        "tags": ["python", "meetup"],
        "is_virtual": False,
        "location": {"address": "Main Street 1", "city": "Philadelphia"},
        "max_attendees": 80,
        "minimum_attendees": 5,
        "is_free_event": True,
        "cover_image": {
            "url": "https://cdn.example.com/event_images/cover.png",
            "public_id": "event_images/cover",
            "width": 1200,
            "height": 630,
        },
        "speakers": [
            {
                "id": "spk-1",
                "name": "Ada Lovelace",
                "role": "Keynote",
                "bio": "Writes programs for engines.",
                "photo": {
                    "url": "https://cdn.example.com/speaker_photos/ada.png",
                    "public_id": "speaker_photos/ada",
                },
            }
        ],
        "visibility": "public",
    }


@pytest.fixture
def valid_draft(valid_record) -> EventDraft:
    return EventDraft.from_dict(valid_record)


@pytest.fixture
def image_file() -> PendingFile:
    return PendingFile(filename="cover.png", content=b"\x89PNG fake", content_type="image/png")


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Configuration independent of the test runner's environment."""
    return Config(
        autosave_delay=2.0,
        field_validation_delay=0.5,
        upload_max_retries=3,
        retry_base_delay=0.5,
        retry_max_delay=8.0,
        retry_jitter=0.0,
        draft_dir=tmp_path / "drafts",
        jaas_app_id=APP_ID,
        jaas_domain="8x8.vc",
        min_price=0.01,
        max_price=100000.0,
        room_name_min_length=3,
        log_level="DEBUG",
    )


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def store() -> MemoryDraftStore:
    return MemoryDraftStore()


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def creator() -> Mock:
    """Mock create operation that always succeeds."""
    mock = Mock(spec=EventCreator)
    mock.create.return_value = CreatedEvent(event_id="evt-1", url="https://meetspace.example/e/evt-1")
    return mock


@pytest.fixture
def make_wizard(config, store, scheduler, creator, notifier, now):
    """Factory for wizards sharing the same store, scheduler and clock."""

    def factory(**overrides: Any) -> EventWizard:
        options = {
            "user_id": "user-1",
            "config": config,
            "store": store,
            "scheduler": scheduler,
            "creator": creator,
            "notifier": notifier,
            "clock": lambda: now,
        }
        options.update(overrides)
        return EventWizard(**options)

    return factory


@pytest.fixture
def wizard(make_wizard) -> EventWizard:
    wizard = make_wizard()
    wizard.mount()
    return wizard


@pytest.fixture
def filled_wizard(wizard, valid_record) -> EventWizard:
    """Mounted wizard holding a complete, valid record."""
    wizard.change(**valid_record)
    return wizard
