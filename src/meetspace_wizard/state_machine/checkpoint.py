"""Draft snapshots and debounced autosave for the event wizard."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from meetspace_wizard.core.exceptions import DraftStoreError
from meetspace_wizard.drafts.storage import DraftStore
from meetspace_wizard.models.event import EventDraft
from meetspace_wizard.state_machine.steps import FIRST_STEP, STEP_FLOW, WizardStep
from meetspace_wizard.utils.timers import Debouncer, ManualScheduler, Scheduler

logger = logging.getLogger(__name__)

DRAFT_KEY_PREFIX = "event_form_draft_"


def draft_key(user_id: str) -> str:
    """Storage key for a user's in-progress draft."""
    return f"{DRAFT_KEY_PREFIX}{user_id}"


@dataclass
class DraftSnapshot:
    """Serializable projection of the wizard for resume after a reload.

    Pending local files are never part of a snapshot; only metadata of
    already uploaded assets survives.

    Attributes:
        user_id: Owner of the draft
        current_step: Step the user was on
        data: Record projection (`EventDraft.to_dict`)
        last_modified: When the snapshot was taken
    """

    user_id: str
    current_step: WizardStep
    data: dict[str, Any]
    last_modified: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def capture(cls, user_id: str, step: WizardStep, draft: EventDraft) -> DraftSnapshot:
        return cls(user_id=user_id, current_step=step, data=draft.to_dict())

    @property
    def is_blank(self) -> bool:
        """Nothing worth saving: no title and no description."""
        return not str(self.data.get("title") or "").strip() and not str(
            self.data.get("description") or ""
        ).strip()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "user_id": self.user_id,
            "current_step": self.current_step.value,
            "last_modified": self.last_modified.isoformat(),
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DraftSnapshot:
        """Create a DraftSnapshot from its serialized form.

        Raises:
            KeyError: If a required key is missing
            ValueError: If the step or timestamp cannot be parsed
        """
        if not isinstance(data.get("data"), dict):
            raise ValueError("Snapshot has no record data")
        last_modified = data.get("last_modified")
        return cls(
            user_id=str(data["user_id"]),
            current_step=WizardStep(data.get("current_step") or FIRST_STEP.value),
            data=data["data"],
            last_modified=(
                datetime.fromisoformat(last_modified) if last_modified else datetime.utcnow()
            ),
        )

    def restore(self) -> EventDraft:
        return EventDraft.from_dict(self.data)

    @property
    def progress_percentage(self) -> float:
        """Share of steps before the saved one."""
        return STEP_FLOW.index(self.current_step) / len(STEP_FLOW) * 100

    def __str__(self) -> str:
        return (
            f"DraftSnapshot({draft_key(self.user_id)}, "
            f"step={self.current_step.value}, "
            f"progress={self.progress_percentage:.0f}%)"
        )


class DraftPersistence:
    """Debounced, user-scoped draft saving.

    A mutation calls `schedule`; the write happens after `delay` seconds of
    quiet. A new mutation restarts the quiet period, so at most one write is
    ever pending. The snapshot is taken when the write runs, not when it was
    scheduled.

    Example:
        persistence = DraftPersistence(MemoryDraftStore(), "user-1", delay=2.0)
        persistence.schedule(lambda: DraftSnapshot.capture("user-1", step, draft))
        persistence.flush()  # write now instead of waiting
        snapshot = persistence.load()
    """

    def __init__(
        self,
        store: DraftStore,
        user_id: str | None,
        delay: float = 2.0,
        scheduler: Scheduler | None = None,
        on_error: Callable[[DraftStoreError], None] | None = None,
        on_saved: Callable[[DraftSnapshot], None] | None = None,
    ) -> None:
        """Initialize draft persistence.

        Args:
            store: Key-value backend
            user_id: Authenticated user; anonymous sessions are never saved
            delay: Quiet period in seconds before a write
            scheduler: Timer source (defaults to a manual virtual clock)
            on_error: Called when a debounced write fails
            on_saved: Called after a debounced write succeeds
        """
        self.store = store
        self.user_id = user_id
        self.on_error = on_error
        self.on_saved = on_saved
        self.last_saved_at: datetime | None = None
        self._debouncer = Debouncer(
            scheduler or ManualScheduler(), delay, self._write, name="autosave"
        )

    @property
    def key(self) -> str | None:
        return draft_key(self.user_id) if self.user_id else None

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    @property
    def scheduled_at(self) -> float | None:
        """Scheduler time of the trigger that started the current quiet period."""
        return self._debouncer.scheduled_at

    def schedule(self, capture: Callable[[], DraftSnapshot | None]) -> bool:
        """(Re)start the quiet period before saving.

        Args:
            capture: Builds the snapshot when the write runs

        Returns:
            False if the session is anonymous and nothing was scheduled
        """
        if not self.user_id:
            return False
        self._debouncer.trigger(capture)
        return True

    def flush(self) -> bool:
        """Run a pending write immediately. Returns True if one ran."""
        return self._debouncer.flush()

    def cancel(self) -> None:
        self._debouncer.cancel()

    def _write(self, capture: Callable[[], DraftSnapshot | None]) -> None:
        snapshot = capture()
        try:
            saved = self.save(snapshot)
        except DraftStoreError as e:
            logger.warning(f"Autosave failed: {e}")
            if self.on_error:
                self.on_error(e)
            return
        if saved and self.on_saved:
            self.on_saved(snapshot)

    def save(self, snapshot: DraftSnapshot | None) -> bool:
        """Write a snapshot now.

        Blank drafts are skipped.

        Returns:
            True if the snapshot was written

        Raises:
            DraftStoreError: If the store rejects the write
        """
        if snapshot is None or not self.key:
            return False
        if snapshot.is_blank:
            logger.debug("Skipping autosave of an empty draft")
            return False
        try:
            payload = json.dumps(snapshot.to_dict(), default=str)
        except (TypeError, ValueError) as e:
            raise DraftStoreError(
                "Draft could not be serialized", key=self.key, details={"error": str(e)}
            ) from e
        self.store.set(self.key, payload)
        self.last_saved_at = snapshot.last_modified
        logger.info(f"Draft saved: {snapshot}")
        return True

    def load(self) -> DraftSnapshot | None:
        """Load the user's snapshot.

        A snapshot that cannot be parsed is removed so the next session
        starts clean.

        Returns:
            DraftSnapshot if found and readable, None otherwise

        Raises:
            DraftStoreError: If the store cannot be read
        """
        if not self.key:
            return None
        raw = self.store.get(self.key)
        if raw is None:
            return None
        try:
            snapshot = DraftSnapshot.from_dict(json.loads(raw))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Discarding unreadable draft {self.key}: {e}")
            self.store.remove(self.key)
            return None
        logger.info(f"Draft loaded: {snapshot}")
        return snapshot

    def clear(self) -> None:
        """Cancel any pending write and delete the stored snapshot."""
        self._debouncer.cancel()
        if self.key:
            self.store.remove(self.key)
            logger.info(f"Draft cleared: {self.key}")
