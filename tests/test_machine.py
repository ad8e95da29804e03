"""Tests for the event wizard controller."""

from datetime import timedelta

import pytest
from unittest.mock import Mock

from meetspace_wizard.core.exceptions import (
    DraftStoreError,
    LimitReachedError,
    StepTransitionError,
    SubmissionError,
    UploadError,
    UploadInProgressError,
    ValidationError,
    WizardError,
)
from meetspace_wizard.core.notices import NoticeLevel
from meetspace_wizard.drafts.storage import DraftStore
from meetspace_wizard.models.event import PendingFile
from meetspace_wizard.models.payload import SubmissionPayload
from meetspace_wizard.models.results import Outcome, UploadResult
from meetspace_wizard.models.visibility import PrivateVisibility, PublicVisibility
from meetspace_wizard.services.base import AssetFolder, AssetUploader
from meetspace_wizard.services.meeting import generate_room_name
from meetspace_wizard.state_machine.checkpoint import draft_key
from meetspace_wizard.state_machine.machine import (
    DRAFT_LOADED_MESSAGE,
    DRAFT_LOAD_FAILED_MESSAGE,
    DRAFT_SAVE_FAILED_MESSAGE,
    DRAFT_SAVED_MESSAGE,
    SUBMIT_INVALID_MESSAGE,
    SUBMITTED_MESSAGE,
    UPLOAD_FAILED_MESSAGE,
    UPLOAD_IN_PROGRESS_MESSAGE,
    UploadTracker,
)
from meetspace_wizard.state_machine.orchestrator import STEP_INVALID_MESSAGE
from meetspace_wizard.state_machine.steps import STEP_FLOW, WizardStep
from meetspace_wizard.validation.rules import MSG_LINK_REQUIRED, MSG_LOCATION_REQUIRED

KEY = draft_key("user-1")


def room_timestamp(moment) -> int:
    return int(moment.timestamp() * 1000)


class TestUploadTracker:
    """Tests for UploadTracker."""

    def test_begin_and_finish(self):
        tracker = UploadTracker()
        tracker.begin("cover_image")
        tracker.begin("cover_image")
        tracker.begin("logo")
        assert tracker.busy
        assert tracker.pending == ["cover_image", "logo"]

        tracker.finish("cover_image")
        assert tracker.pending == ["cover_image", "logo"]
        tracker.finish("cover_image")
        tracker.finish("logo")
        assert not tracker.busy

    def test_track_finishes_on_error(self):
        tracker = UploadTracker()
        with pytest.raises(RuntimeError):
            with tracker.track("logo"):
                assert tracker.busy
                raise RuntimeError("boom")
        assert not tracker.busy

    def test_ensure_idle(self):
        tracker = UploadTracker()
        tracker.ensure_idle()
        tracker.begin("logo")
        with pytest.raises(UploadInProgressError) as exc_info:
            tracker.ensure_idle()
        assert exc_info.value.pending == ["logo"]


class TestMount:
    """Tests for mounting and draft restore."""

    def test_fresh_mount(self, make_wizard):
        wizard = make_wizard()
        assert wizard.mount() is None
        assert wizard.mounted
        assert wizard.step is WizardStep.BASIC
        assert not wizard.has_unsaved_changes

    def test_mount_runs_once(self, make_wizard):
        gate = Mock(return_value=True)
        wizard = make_wizard(gate=gate)
        wizard.mount()
        wizard.mount()
        gate.assert_called_once_with("user-1")

    def test_change_mounts_lazily(self, make_wizard):
        wizard = make_wizard()
        wizard.change(title="Python Meetup")
        assert wizard.mounted

    def test_gate_blocks_mount(self, make_wizard, notifier):
        wizard = make_wizard(gate=lambda user_id: False)
        with pytest.raises(LimitReachedError) as exc_info:
            wizard.mount()
        assert exc_info.value.user_id == "user-1"
        assert notifier.last.level is NoticeLevel.ERROR
        assert not wizard.mounted

    def test_restore_saved_draft(self, make_wizard, scheduler, valid_record, notifier):
        """Test a reloaded wizard resumes at the same step with the same record."""
        first = make_wizard()
        first.mount()
        first.change(**valid_record)
        assert first.next().outcome is Outcome.ADVANCED
        scheduler.advance(2.0)

        second = make_wizard()
        snapshot = second.mount()

        assert snapshot is not None
        assert second.step is WizardStep.DETAILS
        assert second.draft == first.draft
        assert second.has_unsaved_changes is False
        assert notifier.last.message == DRAFT_LOADED_MESSAGE

    def test_restore_excludes_pending_files(self, make_wizard, scheduler, valid_record, image_file):
        first = make_wizard()
        first.change(**valid_record)
        first.upload_image("logo", image_file)
        scheduler.advance(2.0)

        second = make_wizard()
        second.mount()
        assert first.draft.logo.file is image_file
        assert second.draft.logo is None or second.draft.logo.file is None
        assert second.draft.pending_files() == {}

    def test_restore_requires_image_that_was_never_uploaded(
        self, make_wizard, valid_record, image_file
    ):
        """Test an image held only as a local file is asked for again after a reload."""
        first = make_wizard()
        first.change(**valid_record)
        first.upload_image("cover_image", image_file)
        assert first.save_draft()

        second = make_wizard()
        second.mount()

        assert second.draft.cover_image is None
        assert second.blur("cover_image") == "Cover image is required"

    def test_corrupt_draft_is_discarded(self, make_wizard, store):
        store.set(KEY, "{not json")
        wizard = make_wizard()
        assert wizard.mount() is None
        assert store.get(KEY) is None

    def test_store_failure_on_load(self, make_wizard, notifier):
        failing = Mock(spec=DraftStore)
        failing.get.side_effect = DraftStoreError("disk unavailable", key=KEY)
        wizard = make_wizard(store=failing)

        assert wizard.mount() is None
        assert wizard.mounted
        assert notifier.last.level is NoticeLevel.WARNING
        assert notifier.last.message == DRAFT_LOAD_FAILED_MESSAGE

    def test_anonymous_user_never_loads(self, make_wizard, store):
        store.set(KEY, "{}")
        wizard = make_wizard(user_id=None)
        assert wizard.mount() is None
        assert wizard.persistence.key is None


class TestFieldEdits:
    """Tests for field mutations."""

    def test_change_marks_unsaved(self, wizard):
        wizard.change(title="Python Meetup")
        assert wizard.draft.title == "Python Meetup"
        assert wizard.has_unsaved_changes
        assert wizard.persistence.pending

    def test_change_unknown_field(self, wizard):
        with pytest.raises(ValidationError) as exc_info:
            wizard.change(venue="Main Street")
        assert exc_info.value.field == "venue"

    def test_change_coerces_nested_values(self, wizard):
        wizard.change(
            location={"address": "Main Street 1", "postalCode": "19107"},
            tags="python, meetup, python",
            visibility={"status": "private", "restrictedTo": ["ada@example.com"]},
            speakers=[{"name": "Ada"}],
        )
        assert wizard.draft.location.postal_code == "19107"
        assert wizard.draft.tags == ["python", "meetup"]
        assert wizard.draft.visibility == PrivateVisibility(("ada@example.com",))
        assert wizard.draft.speakers[0].name == "Ada"

    def test_change_strips_control_characters(self, wizard):
        wizard.change(title="Python\x00 Meetup")
        assert wizard.draft.title == "Python Meetup"

    def test_set_title_validates_after_quiet_period(self, wizard, scheduler):
        wizard.set_title("P")
        scheduler.advance(0.25)
        wizard.set_title("Py")
        scheduler.advance(0.25)
        assert "title" not in wizard.errors

        scheduler.advance(0.5)
        assert wizard.errors["title"] == "Title must be at least 3 characters"

        wizard.set_title("Python Meetup")
        scheduler.advance(0.5)
        assert "title" not in wizard.errors

    def test_title_validation_and_autosave_are_independent(self, wizard, scheduler, store):
        """Test keystroke validation firing leaves the pending autosave alone."""
        wizard.set_title("Py")
        scheduler.advance(0.5)
        assert "title" in wizard.errors
        assert wizard.persistence.pending
        assert store.writes == 0

        scheduler.advance(1.5)
        assert store.writes == 1

    def test_blur_touches_and_validates(self, wizard):
        assert wizard.blur("category") == "Category is required"
        assert "category" in wizard.touched
        assert wizard.errors["category"] == "Category is required"

        wizard.change(category="technology")
        assert wizard.blur("category") is None
        assert "category" not in wizard.errors


class TestVirtualBranching:
    """Tests for virtual/physical switching and meeting rooms."""

    def test_form_string_flags(self, wizard):
        """Test text checkbox values are read as booleans, not by truthiness."""
        wizard.change(is_virtual="false")
        assert wizard.draft.is_virtual is False
        assert not wizard.draft.room_name

        wizard.change(is_virtual="True")
        assert wizard.draft.is_virtual is True
        assert wizard.draft.streaming_platform == "JITSI"

    def test_switch_to_virtual_provisions_room(self, wizard, now):
        wizard.set_virtual(True)
        room = generate_room_name(None, room_timestamp(now))

        assert wizard.draft.streaming_platform == "JITSI"
        assert wizard.draft.room_name == room
        assert wizard.draft.meeting_link == f"https://8x8.vc/vpaas-magic-cookie-123/{room}"

    def test_room_uses_event_id(self, make_wizard, now):
        wizard = make_wizard(event_id="Evt_42")
        wizard.set_virtual(True)
        assert wizard.draft.room_name == f"event-evt-42-{room_timestamp(now)}"

    def test_toggle_restores_room(self, wizard, now):
        """Test toggling virtual off and on keeps the generated room."""
        wizard.set_virtual(True)
        room = wizard.draft.room_name

        wizard.clock = lambda: now + timedelta(hours=1)
        wizard.set_virtual(False)
        wizard.set_virtual(True)
        assert wizard.draft.room_name == room

    def test_without_app_id_no_link_is_composed(self, make_wizard, config):
        config.jaas_app_id = ""
        wizard = make_wizard()
        wizard.set_virtual(True)
        assert wizard.draft.room_name
        assert wizard.draft.meeting_link == ""

    def test_switch_to_other_platform(self, wizard):
        wizard.set_virtual(True)
        room = wizard.draft.room_name

        wizard.set_streaming_platform("zoom")
        assert wizard.draft.streaming_platform == "ZOOM"
        assert wizard.draft.meeting_link == ""
        assert wizard.draft.room_name == room

    def test_user_link_kept_on_platform_switch(self, wizard):
        wizard.change(is_virtual=True)
        wizard.set_streaming_platform("ZOOM")
        wizard.change(meeting_link="https://zoom.us/j/123")
        wizard.set_streaming_platform("TEAMS")
        assert wizard.draft.meeting_link == "https://zoom.us/j/123"

    def test_other_platform_requires_link_on_next(self, filled_wizard):
        filled_wizard.edit_step("location")
        filled_wizard.set_virtual(True)
        filled_wizard.set_streaming_platform("ZOOM")

        result = filled_wizard.next()
        assert result.outcome is Outcome.BLOCKED
        assert filled_wizard.errors["meeting_link"] == MSG_LINK_REQUIRED

    def test_switching_clears_hidden_branch_errors(self, filled_wizard):
        filled_wizard.change(location={})
        filled_wizard.edit_step("location")
        filled_wizard.next()
        assert filled_wizard.errors["location"] == MSG_LOCATION_REQUIRED

        filled_wizard.set_virtual(True)
        assert "location" not in filled_wizard.errors
        assert filled_wizard.next().outcome is Outcome.ADVANCED


class TestFreeBranching:
    """Tests for free/paid switching."""

    def test_form_string_flags(self, wizard):
        wizard.change(is_free_event="false")
        assert wizard.draft.is_free_event is False

        wizard.change(is_free_event="true")
        assert wizard.draft.is_free_event is True

    def test_price_rule_follows_free_flag(self, filled_wizard):
        filled_wizard.edit_step("tickets")
        filled_wizard.change(is_free_event=False, price=0)

        assert filled_wizard.next().outcome is Outcome.BLOCKED
        assert filled_wizard.errors["price"] == "Minimum price for paid events is 0.01"

        filled_wizard.set_free_event(True)
        assert "price" not in filled_wizard.errors
        assert filled_wizard.next().outcome is Outcome.ADVANCED

        filled_wizard.edit_step("tickets")
        filled_wizard.set_free_event(False)
        assert filled_wizard.next().outcome is Outcome.BLOCKED
        assert "price" in filled_wizard.errors

    def test_price_value_survives_toggle(self, wizard):
        wizard.change(is_free_event=False, price="15")
        wizard.set_free_event(True)
        wizard.set_free_event(False)
        assert wizard.draft.price == "15"


class TestSpeakers:
    """Tests for speaker editing."""

    def test_add_update_remove(self, wizard):
        speaker = wizard.add_speaker("Ada", role="Keynote")
        wizard.update_speaker(speaker.id, bio="Writes programs.")
        assert wizard.draft.speakers[0].bio == "Writes programs."

        wizard.remove_speaker(speaker.id)
        assert wizard.draft.speakers == []

    def test_remove_clears_indexed_errors(self, wizard):
        speaker = wizard.add_speaker("A")
        wizard.errors["speakers.0.name"] = "Speaker name must be at least 2 characters"
        wizard.remove_speaker(speaker.id)
        assert not wizard.errors.has_error("speakers")

    def test_unknown_speaker(self, wizard):
        with pytest.raises(ValidationError):
            wizard.remove_speaker("missing")

    def test_unknown_speaker_field(self, wizard):
        speaker = wizard.add_speaker("Ada")
        with pytest.raises(ValidationError):
            wizard.update_speaker(speaker.id, photo="x")


class TestVisibility:
    """Tests for visibility editing."""

    def test_private_allow_list(self, wizard):
        wizard.set_visibility("private")
        wizard.add_restricted_user("ada@example.com")
        wizard.add_restricted_user("bob@example.com")
        wizard.remove_restricted_user("ada@example.com")
        assert wizard.draft.visibility == PrivateVisibility(("bob@example.com",))

    def test_allow_list_restored_after_public(self, wizard):
        wizard.set_visibility({"status": "private", "restricted_to": ["ada@example.com"]})
        wizard.set_visibility("public")
        assert wizard.draft.visibility == PublicVisibility()

        restored = wizard.set_visibility("private")
        assert restored.allow_list == ("ada@example.com",)

    def test_add_user_to_public_event(self, wizard):
        with pytest.raises(ValidationError):
            wizard.add_restricted_user("ada@example.com")


class TestUploads:
    """Tests for image and speaker photo uploads."""

    @pytest.fixture
    def uploader(self):
        mock = Mock(spec=AssetUploader)
        mock.upload.return_value = UploadResult(
            url="https://cdn.example.com/event_images/abc.png",
            public_id="event_images/abc",
            width=1200,
            height=630,
        )
        return mock

    def test_upload_cover_image(self, make_wizard, uploader, image_file):
        wizard = make_wizard(uploader=uploader)
        image = wizard.upload_image("cover_image", image_file)

        uploader.upload.assert_called_once_with(image_file, AssetFolder.EVENT_IMAGES)
        assert wizard.draft.cover_image is image
        assert image.url == "https://cdn.example.com/event_images/abc.png"
        assert image.file is None
        assert not wizard.uploads.busy

    def test_upload_logo_folder(self, make_wizard, uploader, image_file):
        wizard = make_wizard(uploader=uploader)
        wizard.upload_image("logo", image_file)
        uploader.upload.assert_called_once_with(image_file, AssetFolder.EVENT_LOGOS)

    def test_tracker_busy_during_upload(self, make_wizard, uploader, image_file):
        wizard = make_wizard(uploader=uploader)
        seen = []
        uploader.upload.side_effect = lambda f, folder: (
            seen.append(wizard.uploads.pending) or uploader.upload.return_value
        )
        wizard.upload_image("cover_image", image_file)
        assert seen == [["cover_image"]]

    def test_upload_failure(self, make_wizard, uploader, image_file, notifier):
        wizard = make_wizard(uploader=uploader)
        uploader.upload.side_effect = UploadError("Upload failed after 4 attempts")

        assert wizard.upload_image("cover_image", image_file) is None
        assert wizard.draft.cover_image is None
        assert notifier.last.message == UPLOAD_FAILED_MESSAGE
        assert not wizard.uploads.busy

    def test_rejected_file_type(self, wizard, notifier):
        document = PendingFile("agenda.pdf", b"%PDF", "application/pdf")
        assert wizard.upload_image("cover_image", document) is None
        assert notifier.last.message.startswith("Invalid file type")

    def test_unknown_image_field(self, wizard, image_file):
        with pytest.raises(ValidationError):
            wizard.upload_image("banner", image_file)

    def test_pending_file_without_uploader(self, wizard, image_file):
        image = wizard.upload_image("cover_image", image_file)
        assert image.file is image_file
        assert wizard.draft.pending_files() == {"cover_image_file": image_file}

    def test_speaker_photo(self, make_wizard, uploader, image_file):
        wizard = make_wizard(uploader=uploader)
        speaker = wizard.add_speaker("Ada")
        wizard.errors["speakers.0.photo"] = "Speaker photo is required"

        photo = wizard.upload_speaker_photo(speaker.id, image_file)
        uploader.upload.assert_called_once_with(image_file, AssetFolder.SPEAKER_PHOTOS)
        assert wizard.draft.speakers[0].photo is photo
        assert "speakers.0.photo" not in wizard.errors

    def test_pending_speaker_photo(self, wizard, image_file):
        speaker = wizard.add_speaker("Ada")
        wizard.upload_speaker_photo(speaker.id, image_file)
        assert wizard.draft.pending_files() == {"speaker_photo_file[0]": image_file}


class TestNavigation:
    """Tests for next, back and edit_step."""

    def test_next_blocked_on_empty_basic_step(self, wizard, notifier):
        result = wizard.next()

        assert result.outcome is Outcome.BLOCKED
        assert result.step == "basic"
        assert wizard.step is WizardStep.BASIC
        assert wizard.errors["title"] == "Title must be at least 3 characters"
        assert {"title", "category", "event_date"} <= wizard.touched
        assert notifier.last.message == STEP_INVALID_MESSAGE

    def test_next_ignores_other_steps(self, wizard, valid_record):
        basic = {k: valid_record[k] for k in ("title", "category", "event_date", "start_time", "end_time")}
        wizard.change(**basic)
        assert wizard.next().outcome is Outcome.ADVANCED
        assert wizard.step is WizardStep.DETAILS

    def test_walk_through_and_submit(self, filled_wizard, creator, store, scheduler):
        outcomes = [filled_wizard.next().outcome for _ in STEP_FLOW[:-1]]
        assert outcomes == [Outcome.ADVANCED] * (len(STEP_FLOW) - 1)
        assert filled_wizard.step is WizardStep.REVIEW

        result = filled_wizard.next()
        assert result.outcome is Outcome.SUBMITTED
        assert result.event.event_id == "evt-1"
        creator.create.assert_called_once()
        assert isinstance(creator.create.call_args.args[0], SubmissionPayload)

        scheduler.advance(10.0)
        assert store.get(KEY) is None
        assert filled_wizard.touched == set()
        assert filled_wizard.closed

    def test_back(self, filled_wizard):
        filled_wizard.next()
        result = filled_wizard.back()
        assert result.outcome is Outcome.MOVED_BACK
        assert filled_wizard.step is WizardStep.BASIC

    def test_back_from_first_step_cancels(self, wizard):
        result = wizard.back()
        assert result.outcome is Outcome.CANCELLED
        assert wizard.closed

    def test_back_skips_validation(self, wizard):
        wizard.edit_step("details")
        assert wizard.back().outcome is Outcome.MOVED_BACK
        assert wizard.errors == {}

    def test_edit_step_jumps_without_validation(self, wizard):
        result = wizard.edit_step("speakers")
        assert result.outcome is Outcome.JUMPED
        assert wizard.step is WizardStep.SPEAKERS
        assert wizard.errors == {}

    def test_edit_unknown_step(self, wizard):
        with pytest.raises(StepTransitionError):
            wizard.edit_step("payment")

    def test_entering_step_does_not_revalidate(self, filled_wizard):
        filled_wizard.next()
        filled_wizard.change(title="")
        assert filled_wizard.next().outcome is Outcome.ADVANCED
        assert "title" not in filled_wizard.errors

    def test_uploads_block_next(self, filled_wizard, notifier):
        filled_wizard.uploads.begin("cover_image")

        result = filled_wizard.next()
        assert result.outcome is Outcome.UPLOAD_IN_PROGRESS
        assert filled_wizard.step is WizardStep.BASIC
        assert notifier.last.level is NoticeLevel.WARNING
        assert notifier.last.message == UPLOAD_IN_PROGRESS_MESSAGE

        filled_wizard.uploads.finish("cover_image")
        assert filled_wizard.next().outcome is Outcome.ADVANCED

    def test_progress(self, wizard):
        assert wizard.progress == {
            "step": "basic",
            "display_name": "Basic Info",
            "position": 1,
            "total": 7,
            "percentage": 0,
        }
        wizard.edit_step("review")
        assert wizard.progress["percentage"] == 100


class TestSubmit:
    """Tests for submission."""

    def test_invalid_record_jumps_to_first_invalid_step(self, filled_wizard, creator, notifier):
        filled_wizard.edit_step("review")
        filled_wizard.change(location={}, speakers=[])

        result = filled_wizard.submit()
        assert result.outcome is Outcome.BLOCKED
        assert filled_wizard.step is WizardStep.LOCATION
        assert set(filled_wizard.errors) == {"location", "speakers"}
        assert notifier.last.message == SUBMIT_INVALID_MESSAGE
        creator.create.assert_not_called()

    def test_unowned_error_falls_back_to_first_step(self, filled_wizard):
        filled_wizard.edit_step("review")
        filled_wizard.set_visibility("private")

        assert filled_wizard.submit().outcome is Outcome.BLOCKED
        assert filled_wizard.step is WizardStep.BASIC
        assert "visibility.restricted_to" in filled_wizard.errors

    def test_errors_visible_after_attempt(self, filled_wizard):
        filled_wizard.change(speakers=[])
        assert filled_wizard.visible_errors() == {}

        filled_wizard.submit()
        assert filled_wizard.visible_errors() == {
            "speakers": "At least one speaker is required"
        }

    def test_visible_errors_follow_touched(self, wizard):
        wizard.errors["title"] = "Title must be at least 3 characters"
        wizard.errors["speakers.0.name"] = "Speaker name must be at least 2 characters"
        wizard.touched.add("speakers")
        assert wizard.visible_errors() == {
            "speakers.0.name": "Speaker name must be at least 2 characters"
        }

    def test_success(self, filled_wizard, creator, notifier, store):
        filled_wizard.save_draft()
        assert store.get(KEY) is not None

        result = filled_wizard.submit()
        assert result.outcome is Outcome.SUBMITTED
        assert filled_wizard.created_event.event_id == "evt-1"
        assert store.get(KEY) is None
        assert not filled_wizard.is_submitting
        assert not filled_wizard.has_unsaved_changes
        assert notifier.last.message == SUBMITTED_MESSAGE

    def test_payload_sent_to_creator(self, filled_wizard, creator):
        filled_wizard.submit()
        payload = creator.create.call_args.args[0]
        assert payload.fields["title"] == "Python Meetup Philly"
        assert payload.fields["is_virtual"] == "false"

    def test_create_failure_stays_on_review(self, filled_wizard, creator, notifier):
        filled_wizard.edit_step("review")
        creator.create.side_effect = SubmissionError(
            "An event with this title already exists", code="duplicate_title", field="title"
        )

        result = filled_wizard.submit()
        assert result.outcome is Outcome.SUBMIT_FAILED
        assert filled_wizard.step is WizardStep.REVIEW
        assert not filled_wizard.is_submitting
        assert filled_wizard.errors["title"] == "An event with this title already exists"
        assert "Basic Info" in result.message
        assert notifier.last.level is NoticeLevel.ERROR

    def test_retry_after_failure(self, filled_wizard, creator):
        creator.create.side_effect = [SubmissionError("Server unavailable"), creator.create.return_value]
        assert filled_wizard.submit().outcome is Outcome.SUBMIT_FAILED
        assert filled_wizard.submit().outcome is Outcome.SUBMITTED
        assert creator.create.call_count == 2

    def test_already_submitting(self, filled_wizard, creator):
        filled_wizard.is_submitting = True
        assert filled_wizard.submit().outcome is Outcome.ALREADY_SUBMITTING
        creator.create.assert_not_called()

    def test_upload_in_progress(self, filled_wizard, creator):
        filled_wizard.uploads.begin("logo")
        assert filled_wizard.submit().outcome is Outcome.UPLOAD_IN_PROGRESS
        creator.create.assert_not_called()

    def test_without_creator(self, make_wizard, valid_record):
        wizard = make_wizard(creator=None)
        wizard.change(**valid_record)
        with pytest.raises(WizardError):
            wizard.submit()

    def test_edits_rejected_after_submit(self, filled_wizard, store, scheduler):
        """Test a submitted wizard refuses further edits and never saves them."""
        assert filled_wizard.submit().outcome is Outcome.SUBMITTED

        with pytest.raises(WizardError):
            filled_wizard.change(title="Edited after submit")
        with pytest.raises(WizardError):
            filled_wizard.add_speaker("Grace Hopper")

        scheduler.advance(10.0)
        assert store.get(KEY) is None
        assert filled_wizard.draft.title == "Python Meetup Philly"
        assert not filled_wizard.has_unsaved_changes


class TestAutosave:
    """Tests for debounced draft saving through the wizard."""

    def test_two_edits_one_write(self, wizard, scheduler, store):
        """Test a second edit restarts the quiet period instead of queuing a write."""
        wizard.change(title="Python Meetup")
        scheduler.advance(1.0)
        wizard.change(title="Python Meetup Philly")
        assert wizard.persistence.scheduled_at == 1.0

        scheduler.advance(1.5)
        assert store.writes == 0

        scheduler.advance(0.5)
        assert store.writes == 1
        assert '"Python Meetup Philly"' in store.get(KEY)

    def test_saved_clears_unsaved_flag(self, wizard, scheduler, notifier):
        wizard.change(title="Python Meetup")
        scheduler.advance(2.0)
        assert not wizard.has_unsaved_changes
        assert notifier.last.message == DRAFT_SAVED_MESSAGE

    def test_blank_draft_not_saved(self, wizard, scheduler, store):
        wizard.change(category="technology")
        scheduler.advance(2.0)
        assert store.writes == 0

    def test_anonymous_draft_not_saved(self, make_wizard, scheduler, store):
        wizard = make_wizard(user_id=None)
        wizard.change(title="Python Meetup")
        assert not wizard.persistence.pending
        scheduler.advance(2.0)
        assert store.keys() == []

    def test_store_failure_surfaces_notice(self, make_wizard, scheduler, notifier):
        failing = Mock(spec=DraftStore)
        failing.get.return_value = None
        failing.set.side_effect = DraftStoreError("disk full", key=KEY)
        wizard = make_wizard(store=failing)

        wizard.change(title="Python Meetup")
        scheduler.advance(2.0)
        assert notifier.last.message == DRAFT_SAVE_FAILED_MESSAGE
        assert wizard.has_unsaved_changes
        assert failing.set.call_count == 1

    def test_save_draft_now(self, wizard, store):
        wizard.change(title="Python Meetup")
        assert wizard.save_draft() is True
        assert store.writes == 1
        assert not wizard.persistence.pending

    def test_snapshot_taken_at_write_time(self, wizard, scheduler, store):
        wizard.change(title="Python Meetup")
        wizard.draft.description = "Set directly before the write"
        scheduler.advance(2.0)
        assert "Set directly before the write" in store.get(KEY)

    def test_cancel_keeps_draft(self, wizard, store):
        wizard.change(title="Python Meetup")
        result = wizard.cancel()
        assert result.outcome is Outcome.CANCELLED
        assert store.get(KEY) is not None

    def test_cancel_discards_draft(self, wizard, store):
        wizard.change(title="Python Meetup")
        wizard.save_draft()
        wizard.cancel(discard_draft=True)
        assert store.get(KEY) is None


class TestSummary:
    """Tests for the review summary."""

    def test_sections(self, filled_wizard):
        sections = filled_wizard.summary()
        assert [s["step"] for s in sections] == [s.value for s in STEP_FLOW[:-1]]
        assert sections[0]["values"]["title"] == "Python Meetup Philly"
        assert sections[0]["errors"] == {}

    def test_section_errors(self, filled_wizard):
        filled_wizard.change(speakers=[])
        filled_wizard.submit()
        speakers = filled_wizard.summary()[-1]
        assert speakers["errors"] == {"speakers": "At least one speaker is required"}
