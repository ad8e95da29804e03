"""Event submission wizard controller."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator

from meetspace_wizard.core.config import Config
from meetspace_wizard.core.exceptions import (
    DraftStoreError,
    LimitReachedError,
    SubmissionError,
    UploadError,
    UploadInProgressError,
    ValidationError,
    WizardError,
)
from meetspace_wizard.core.notices import Notifier
from meetspace_wizard.drafts.storage import DraftStore, MemoryDraftStore
from meetspace_wizard.models.event import (
    BUILT_IN_PLATFORM,
    EventDraft,
    ImageAsset,
    Location,
    PendingFile,
    Speaker,
    StreamingPlatform,
    is_built_in_platform,
)
from meetspace_wizard.models.results import CreatedEvent, Outcome, TransitionResult
from meetspace_wizard.models.visibility import (
    PrivateVisibility,
    PublicVisibility,
    Visibility,
    normalize_visibility,
)
from meetspace_wizard.services.base import (
    AssetFolder,
    AssetUploader,
    EventCreator,
    SubscriptionGate,
    allow_all,
)
from meetspace_wizard.services.meeting import create_meeting_url, generate_room_name
from meetspace_wizard.services.uploads import validate_file
from meetspace_wizard.state_machine.checkpoint import DraftPersistence, DraftSnapshot
from meetspace_wizard.state_machine.orchestrator import STEP_INVALID_MESSAGE, StepValidator
from meetspace_wizard.state_machine.payload import assemble_payload
from meetspace_wizard.state_machine.steps import (
    FIRST_STEP,
    STEP_FLOW,
    STEP_TABLE,
    WizardStep,
    get_next_step,
    get_previous_step,
    get_step,
    step_for_field,
)
from meetspace_wizard.utils.sanitization import clean_list, parse_flag, sanitize_input
from meetspace_wizard.utils.timers import Debouncer, ManualScheduler, Scheduler
from meetspace_wizard.validation.errors import ValidationErrorMap
from meetspace_wizard.validation.fields import as_record, validate_field, validate_record
from meetspace_wizard.validation.rules import (
    PAID_ONLY_FIELDS,
    PHYSICAL_ONLY_FIELDS,
    VIRTUAL_ONLY_FIELDS,
    RuleContext,
)

logger = logging.getLogger(__name__)

# User-facing notices
UPLOAD_IN_PROGRESS_MESSAGE = "Please wait for the upload to finish before continuing."
SUBMIT_INVALID_MESSAGE = "Please fix the errors before submitting."
SUBMIT_FAILED_MESSAGE = "Event submission failed. Please try again."
SUBMITTING_MESSAGE = "Submitting event..."
SUBMITTED_MESSAGE = "Event created successfully!"
DRAFT_SAVED_MESSAGE = "Draft saved"
DRAFT_SAVE_FAILED_MESSAGE = "Failed to save draft"
DRAFT_LOADED_MESSAGE = "Draft loaded successfully!"
DRAFT_LOAD_FAILED_MESSAGE = "Could not load saved draft."
UPLOAD_FAILED_MESSAGE = "Image upload failed. Please try again."
CLOSED_MESSAGE = "This event form is closed. Start a new one to make further changes."

TEXT_FIELDS = frozenset({
    "title",
    "category",
    "description",
    "short_description",
    "refund_policy",
})
LIST_FIELDS = frozenset({"tags", "requirements", "target_audience"})
IMAGE_FIELDS = {
    "cover_image": AssetFolder.EVENT_IMAGES,
    "logo": AssetFolder.EVENT_LOGOS,
}
SPEAKER_FIELDS = frozenset({"name", "role", "bio"})


class UploadTracker:
    """Uploads currently in flight, by label.

    The wizard owns one tracker; `next` and `submit` refuse to proceed while
    it is busy. Async callers use `begin`/`finish` (or `track`) around their
    own upload.
    """

    def __init__(self) -> None:
        self._active: dict[str, int] = {}

    @property
    def busy(self) -> bool:
        return bool(self._active)

    @property
    def pending(self) -> list[str]:
        return sorted(self._active)

    def begin(self, label: str) -> None:
        self._active[label] = self._active.get(label, 0) + 1
        logger.debug(f"Upload started: {label}")

    def finish(self, label: str) -> None:
        remaining = self._active.get(label, 0) - 1
        if remaining > 0:
            self._active[label] = remaining
        else:
            self._active.pop(label, None)
        logger.debug(f"Upload finished: {label}")

    def ensure_idle(self) -> None:
        """Raise if any upload is still running.

        Raises:
            UploadInProgressError: With the labels of the pending uploads
        """
        if self._active:
            raise UploadInProgressError(UPLOAD_IN_PROGRESS_MESSAGE, pending=self.pending)

    @contextmanager
    def track(self, label: str) -> Iterator[None]:
        self.begin(label)
        try:
            yield
        finally:
            self.finish(label)


class EventWizard:
    """Multi-step controller for collecting and submitting an event.

    The wizard owns the draft, the current step, the error map, the touched
    set and the submission flag. Views mutate the draft only through the
    wizard; every mutation schedules a debounced draft save.

    - `next` validates the current step and advances (submits on the last step)
    - `back` moves back without validating (cancels on the first step)
    - `edit_step` jumps to any step without validating
    - `submit` validates the whole record, then hands the payload to the creator

    Example:
        >>> wizard = EventWizard("user-1", creator=OutboxEventCreator("outbox"))
        >>> wizard.mount()
        >>> wizard.change(title="Python Meetup", category="tech")
        >>> result = wizard.next()
        >>> result.outcome
        <Outcome.BLOCKED: 'blocked'>
    """

    def __init__(
        self,
        user_id: str | None = None,
        config: Config | None = None,
        store: DraftStore | None = None,
        scheduler: Scheduler | None = None,
        creator: EventCreator | None = None,
        uploader: AssetUploader | None = None,
        gate: SubscriptionGate = allow_all,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = datetime.now,
        event_id: str | None = None,
    ) -> None:
        """Initialize the wizard.

        Args:
            user_id: Authenticated user; drafts are only saved for known users
            config: Wizard configuration (defaults from the environment)
            store: Draft key-value store (defaults to in-memory)
            scheduler: Timer source for debouncing (defaults to a manual clock)
            creator: Create operation used by `submit`
            uploader: Asset upload operation; without one files stay pending
            gate: Subscription check run on `mount`
            notifier: Receives user-facing notices
            clock: Current local time, used by date and time rules
            event_id: Id of the persisted event when editing
        """
        self.user_id = user_id
        self.config = config or Config.from_env()
        self.scheduler = scheduler or ManualScheduler()
        self.creator = creator
        self.uploader = uploader
        self.gate = gate
        self.notifier = notifier or Notifier()
        self.clock = clock

        self.step = FIRST_STEP
        self.draft = EventDraft(event_id=event_id)
        self.errors = ValidationErrorMap()
        self.touched: set[str] = set()
        self.is_submitting = False
        self.submit_attempted = False
        self.has_unsaved_changes = False
        self.mounted = False
        self.closed = False
        self.created_event: CreatedEvent | None = None
        self.uploads = UploadTracker()

        # Allow list kept while visibility is public so switching back restores it
        self._stashed_allow_list: tuple[str, ...] = ()

        self.validator = StepValidator(
            notifier=self.notifier, context_factory=self._rule_context
        )
        self.persistence = DraftPersistence(
            store or MemoryDraftStore(),
            user_id,
            delay=self.config.autosave_delay,
            scheduler=self.scheduler,
            on_error=self._on_autosave_error,
            on_saved=self._on_autosave,
        )
        self._field_validation = Debouncer(
            self.scheduler,
            self.config.field_validation_delay,
            self._validate_field_now,
            name="field-validation",
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self) -> DraftSnapshot | None:
        """Open the wizard: check the plan gate and restore any saved draft.

        Runs once; later calls do nothing.

        Returns:
            The restored snapshot, or None

        Raises:
            LimitReachedError: If the subscription gate refuses the user
        """
        if self.mounted:
            return None
        if not self.gate(self.user_id):
            logger.info(f"Wizard blocked by subscription gate for user {self.user_id}")
            error = LimitReachedError(user_id=self.user_id)
            self.notifier.error(error.message)
            raise error
        self.mounted = True

        try:
            snapshot = self.persistence.load()
        except DraftStoreError as e:
            logger.warning(f"Draft load failed: {e}")
            self.notifier.warning(DRAFT_LOAD_FAILED_MESSAGE)
            snapshot = None

        if snapshot is not None:
            self.draft = snapshot.restore()
            self.step = snapshot.current_step
            self._stashed_allow_list = ()
            self.notifier.success(DRAFT_LOADED_MESSAGE)
            logger.info(f"Restored draft at step '{self.step.value}'")
        self.has_unsaved_changes = False
        return snapshot

    def _ensure_mounted(self) -> None:
        if not self.mounted:
            self.mount()

    def _ensure_open(self) -> None:
        """Mount on first use; refuse edits once the wizard has closed."""
        if self.closed:
            raise WizardError(CLOSED_MESSAGE)
        self._ensure_mounted()

    def _rule_context(self) -> RuleContext:
        return RuleContext.from_config(self.config, now=self.clock())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def change(self, **values: Any) -> None:
        """Apply field edits to the draft.

        Branch flags route through their dedicated setters so dependent
        fields (platform, room name, price errors) stay consistent.

        Raises:
            ValidationError: If a field name is unknown
            WizardError: If the wizard was already submitted or cancelled
        """
        self._ensure_open()
        unknown = sorted(set(values) - EventDraft.field_names())
        if unknown:
            raise ValidationError(f"Unknown field(s): {', '.join(unknown)}", field=unknown[0])

        for name, value in values.items():
            if name == "is_virtual":
                self._apply_virtual(parse_flag(value))
            elif name == "is_free_event":
                self._apply_free(parse_flag(value))
            elif name == "streaming_platform":
                self._apply_platform(value)
            else:
                setattr(self.draft, name, self._coerce(name, value))
        self._mark_changed()

    def _coerce(self, name: str, value: Any) -> Any:
        if name in TEXT_FIELDS:
            return sanitize_input(value)
        if name in LIST_FIELDS:
            return clean_list(value)
        if name == "location":
            return value if isinstance(value, Location) else Location.from_dict(value)
        if name in IMAGE_FIELDS:
            return value if value is None or isinstance(value, ImageAsset) else ImageAsset.from_dict(value)
        if name == "speakers":
            return [s if isinstance(s, Speaker) else Speaker.from_dict(s) for s in value or []]
        if name == "visibility":
            return normalize_visibility(value)
        return value

    def set_title(self, title: str) -> None:
        """Keystroke-level title edit with debounced validation."""
        self.change(title=title)
        self._field_validation.trigger("title")

    def _validate_field_now(self, field_name: str) -> str | None:
        message = validate_field(field_name, self.draft, self._rule_context())
        self.errors.set_field(field_name, message)
        return message

    def blur(self, field_name: str) -> str | None:
        """Mark a field touched and validate it immediately.

        Returns:
            The field's error message, or None if it is valid
        """
        self.touched.add(field_name)
        return self._validate_field_now(field_name)

    def set_virtual(self, is_virtual: bool) -> None:
        self.change(is_virtual=is_virtual)

    def set_streaming_platform(self, platform: "StreamingPlatform | str") -> None:
        self.change(streaming_platform=platform)

    def set_free_event(self, is_free: bool) -> None:
        self.change(is_free_event=is_free)

    def _apply_virtual(self, is_virtual: bool) -> None:
        self.draft.is_virtual = is_virtual
        hidden = PHYSICAL_ONLY_FIELDS if is_virtual else VIRTUAL_ONLY_FIELDS
        for name in hidden:
            self.errors.clear_field(name)
        if is_virtual:
            if not self.draft.streaming_platform:
                self.draft.streaming_platform = BUILT_IN_PLATFORM.value
            self._ensure_room()

    def _apply_platform(self, platform: Any) -> None:
        value = platform.value if isinstance(platform, StreamingPlatform) else str(platform or "")
        self.draft.streaming_platform = value.strip().upper()
        self.errors.clear_field("meeting_link")
        self.errors.clear_field("room_name")
        if is_built_in_platform(value):
            self._ensure_room()
        elif self._is_generated_link(self.draft.meeting_link):
            # The composed built-in link is not a link the user chose
            self.draft.meeting_link = ""

    def _ensure_room(self) -> None:
        """Give a built-in meeting a room name and link, keeping an existing room."""
        if not self.draft.is_virtual or not is_built_in_platform(self.draft.streaming_platform):
            return
        if not self.draft.room_name:
            timestamp = int(self.clock().timestamp() * 1000)
            self.draft.room_name = generate_room_name(self.draft.event_id, timestamp)
            logger.info(f"Generated meeting room {self.draft.room_name}")
        if self.config.meetings_enabled:
            self.draft.meeting_link = create_meeting_url(
                self.config.jaas_app_id, self.draft.room_name, self.config.jaas_domain
            )

    def _is_generated_link(self, link: str) -> bool:
        return bool(link) and link.startswith(f"https://{self.config.jaas_domain}/")

    def _apply_free(self, is_free: bool) -> None:
        self.draft.is_free_event = is_free
        if is_free:
            for name in PAID_ONLY_FIELDS:
                self.errors.clear_field(name)

    # Speakers

    def add_speaker(self, name: str = "", role: str = "", bio: str = "") -> Speaker:
        self._ensure_open()
        speaker = Speaker(
            name=sanitize_input(name), role=sanitize_input(role), bio=sanitize_input(bio)
        )
        self.draft.speakers.append(speaker)
        self.errors.clear_field("speakers")
        self._mark_changed()
        return speaker

    def _require_speaker(self, speaker_id: str) -> tuple[int, Speaker]:
        found = self.draft.find_speaker(speaker_id)
        if found is None:
            raise ValidationError(f"Unknown speaker '{speaker_id}'", field="speakers", value=speaker_id)
        return found

    def update_speaker(self, speaker_id: str, **values: Any) -> Speaker:
        """Edit a speaker's name, role or bio.

        Raises:
            ValidationError: If the speaker or a field name is unknown
        """
        self._ensure_open()
        index, speaker = self._require_speaker(speaker_id)
        unknown = sorted(set(values) - SPEAKER_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown speaker field(s): {', '.join(unknown)}", field=unknown[0])
        for name, value in values.items():
            setattr(speaker, name, sanitize_input(value))
        self._mark_changed()
        return speaker

    def remove_speaker(self, speaker_id: str) -> None:
        self._ensure_open()
        index, _ = self._require_speaker(speaker_id)
        del self.draft.speakers[index]
        # Indexed error keys no longer line up with the list
        self.errors.clear_field("speakers")
        self._mark_changed()

    # Visibility

    def set_visibility(self, visibility: Any) -> Visibility:
        """Switch between public and private.

        Switching to private without an explicit allow list restores the
        list the event had before it was made public.
        """
        self._ensure_open()
        current = self.draft.visibility
        new = normalize_visibility(visibility)
        if isinstance(current, PrivateVisibility) and isinstance(new, PublicVisibility):
            self._stashed_allow_list = current.allow_list
        if isinstance(new, PrivateVisibility) and not new.allow_list:
            new = PrivateVisibility(self._stashed_allow_list)
        self.draft.visibility = new
        self.errors.clear_field("visibility")
        self._mark_changed()
        return new

    def add_restricted_user(self, identifier: str) -> PrivateVisibility:
        """Add an identifier to a private event's allow list.

        Raises:
            ValidationError: If the event is public
        """
        self._ensure_open()
        visibility = self.draft.visibility
        if not isinstance(visibility, PrivateVisibility):
            raise ValidationError(
                "Only private events have an allow list", field="visibility", value=identifier
            )
        self.draft.visibility = visibility.with_member(identifier)
        self.errors.clear_field("visibility")
        self._mark_changed()
        return self.draft.visibility

    def remove_restricted_user(self, identifier: str) -> None:
        self._ensure_open()
        visibility = self.draft.visibility
        if isinstance(visibility, PrivateVisibility):
            self.draft.visibility = visibility.without_member(identifier)
            self._mark_changed()

    # Uploads

    def upload_image(self, field_name: str, file: PendingFile) -> ImageAsset | None:
        """Upload a cover image or logo and attach it to the draft.

        Returns:
            The attached image, or None if the file was rejected or the upload failed
        """
        if field_name not in IMAGE_FIELDS:
            raise ValidationError(f"'{field_name}' is not an image field", field=field_name)
        self._ensure_open()
        image = self._upload(file, IMAGE_FIELDS[field_name], label=field_name)
        if image is None:
            return None
        setattr(self.draft, field_name, image)
        self.errors.clear_field(field_name)
        self._mark_changed()
        return image

    def upload_speaker_photo(self, speaker_id: str, file: PendingFile) -> ImageAsset | None:
        """Upload a speaker's photo and attach it to the speaker."""
        self._ensure_open()
        index, speaker = self._require_speaker(speaker_id)
        image = self._upload(file, AssetFolder.SPEAKER_PHOTOS, label=f"speakers.{index}.photo")
        if image is None:
            return None
        speaker.photo = image
        self.errors.clear_field(f"speakers.{index}.photo")
        self._mark_changed()
        return image

    def _upload(self, file: PendingFile, folder: AssetFolder, label: str) -> ImageAsset | None:
        try:
            validate_file(file)
        except ValidationError as e:
            self.notifier.error(e.message)
            return None

        if self.uploader is None:
            # Sent as a binary part with the submission
            return ImageAsset(file=file)

        with self.uploads.track(label):
            try:
                result = self.uploader.upload(file, folder)
            except UploadError as e:
                logger.warning(f"Upload of {file.filename} failed: {e}")
                self.notifier.error(UPLOAD_FAILED_MESSAGE)
                return None
        return ImageAsset(
            url=result.url,
            public_id=result.public_id,
            width=result.width,
            height=result.height,
            attribution=result.attribution,
        )

    # ------------------------------------------------------------------
    # Autosave
    # ------------------------------------------------------------------

    def _capture(self) -> DraftSnapshot | None:
        if not self.user_id:
            return None
        return DraftSnapshot.capture(self.user_id, self.step, self.draft)

    def _mark_changed(self) -> None:
        self.has_unsaved_changes = True
        self.persistence.schedule(self._capture)

    def _on_autosave(self, snapshot: DraftSnapshot) -> None:
        self.has_unsaved_changes = False
        self.notifier.info(DRAFT_SAVED_MESSAGE)

    def _on_autosave_error(self, error: DraftStoreError) -> None:
        self.notifier.error(DRAFT_SAVE_FAILED_MESSAGE)

    def save_draft(self) -> bool:
        """Save the draft now instead of waiting for the quiet period.

        Returns:
            True if a snapshot was written
        """
        self.persistence.cancel()
        snapshot = self._capture()
        try:
            saved = self.persistence.save(snapshot)
        except DraftStoreError as e:
            logger.warning(f"Draft save failed: {e}")
            self.notifier.error(DRAFT_SAVE_FAILED_MESSAGE)
            return False
        if saved:
            self._on_autosave(snapshot)
        return saved

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _result(self, outcome: Outcome, message: str = "") -> TransitionResult:
        return TransitionResult(outcome=outcome, step=self.step.value, message=message)

    def _upload_blocked(self) -> TransitionResult | None:
        try:
            self.uploads.ensure_idle()
        except UploadInProgressError as e:
            logger.info(f"Navigation blocked by uploads in progress: {e.pending}")
            self.notifier.warning(e.message)
            return self._result(Outcome.UPLOAD_IN_PROGRESS, e.message)
        return None

    def next(self) -> TransitionResult:
        """Validate the current step and advance; submit from the last step."""
        self._ensure_mounted()
        blocked = self._upload_blocked()
        if blocked:
            return blocked

        if not self.validator.validate_step(self.step, self.draft, self.errors, self.touched):
            return self._result(Outcome.BLOCKED, STEP_INVALID_MESSAGE)

        following = get_next_step(self.step)
        if following is None:
            return self.submit()

        logger.info(f"Step {self.step.value} -> {following.value}")
        self.step = following
        self.persistence.schedule(self._capture)
        return self._result(Outcome.ADVANCED)

    def back(self) -> TransitionResult:
        """Go to the previous step without validating; cancel from the first."""
        self._ensure_mounted()
        previous = get_previous_step(self.step)
        if previous is None:
            return self.cancel()
        logger.info(f"Step {self.step.value} -> {previous.value} (back)")
        self.step = previous
        self.persistence.schedule(self._capture)
        return self._result(Outcome.MOVED_BACK)

    def edit_step(self, target: "WizardStep | str") -> TransitionResult:
        """Jump straight to a step, skipping validation of steps in between.

        Raises:
            StepTransitionError: If the step id is unknown
        """
        self._ensure_mounted()
        step = get_step(target)
        logger.info(f"Step {self.step.value} -> {step.value} (edit)")
        self.step = step
        self.persistence.schedule(self._capture)
        return self._result(Outcome.JUMPED)

    def submit(self) -> TransitionResult:
        """Validate the whole record and hand it to the create operation.

        On validation failure the wizard jumps to the step owning the first
        invalid field. On a create failure it stays put with the submitting
        flag cleared so the user can retry.
        """
        self._ensure_mounted()
        if self.is_submitting:
            return self._result(Outcome.ALREADY_SUBMITTING, SUBMITTING_MESSAGE)
        blocked = self._upload_blocked()
        if blocked:
            return blocked

        self.submit_attempted = True
        found = validate_record(self.draft, self._rule_context())
        if found:
            self.errors.clear()
            self.errors.update(found)
            self.touched.update(found)
            first = found.first_key
            self.step = step_for_field(first) or FIRST_STEP
            logger.info(f"Submission blocked by {len(found)} error(s); first is '{first}'")
            self.notifier.error(SUBMIT_INVALID_MESSAGE)
            return self._result(Outcome.BLOCKED, SUBMIT_INVALID_MESSAGE)

        if self.creator is None:
            raise WizardError("No event creator configured")

        payload = assemble_payload(self.draft, self.config)
        self.is_submitting = True
        self.notifier.info(SUBMITTING_MESSAGE)
        try:
            event = self.creator.create(payload)
        except SubmissionError as e:
            logger.warning(f"Create operation rejected the event ({e.code}): {e}")
            message = SUBMIT_FAILED_MESSAGE
            if e.field:
                self.errors[e.field] = e.message
                self.touched.add(e.field)
                owner = step_for_field(e.field)
                if owner:
                    message = f"{SUBMIT_FAILED_MESSAGE} Check the {owner.definition.display_name} step."
            self.notifier.error(message)
            return self._result(Outcome.SUBMIT_FAILED, message)
        finally:
            self.is_submitting = False

        self.created_event = event
        try:
            self.persistence.clear()
        except DraftStoreError as e:
            logger.warning(f"Could not clear draft after submission: {e}")
        self.touched.clear()
        self.errors.clear()
        self.submit_attempted = False
        self.has_unsaved_changes = False
        self.closed = True
        logger.info(f"Event submitted: {event.event_id}")
        self.notifier.success(SUBMITTED_MESSAGE)
        return TransitionResult(
            outcome=Outcome.SUBMITTED, step=self.step.value, message=SUBMITTED_MESSAGE, event=event
        )

    def cancel(self, discard_draft: bool = False) -> TransitionResult:
        """Close the wizard.

        Args:
            discard_draft: Delete the saved draft instead of keeping it for later
        """
        if discard_draft:
            try:
                self.persistence.clear()
            except DraftStoreError as e:
                logger.warning(f"Could not discard draft: {e}")
                self.notifier.error(DRAFT_SAVE_FAILED_MESSAGE)
        else:
            self.persistence.flush()
        self._field_validation.cancel()
        self.closed = True
        logger.info(f"Wizard cancelled (draft {'discarded' if discard_draft else 'kept'})")
        return self._result(Outcome.CANCELLED)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def visible_errors(self) -> dict[str, str]:
        """Errors for touched fields, or every error after a submit attempt."""
        if self.submit_attempted:
            return dict(self.errors)
        return {
            key: message
            for key, message in self.errors.items()
            if key in self.touched or key.split(".")[0] in self.touched
        }

    @property
    def progress(self) -> dict[str, Any]:
        index = STEP_FLOW.index(self.step)
        return {
            "step": self.step.value,
            "display_name": self.step.definition.display_name,
            "position": index + 1,
            "total": len(STEP_FLOW),
            "percentage": round(index / (len(STEP_FLOW) - 1) * 100),
        }

    def summary(self) -> list[dict[str, Any]]:
        """Per-step view of the record for the review screen."""
        record = as_record(self.draft)
        sections = []
        for definition in STEP_TABLE:
            if not definition.owned_fields:
                continue
            sections.append({
                "step": definition.id.value,
                "display_name": definition.display_name,
                "values": {name: record.get(name) for name in definition.owned_fields},
                "errors": {k: v for k, v in self.errors.items() if definition.owns(k)},
            })
        return sections
