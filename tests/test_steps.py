"""Tests for the wizard step table."""

import pytest

from meetspace_wizard.core.exceptions import StepTransitionError
from meetspace_wizard.state_machine.steps import (
    FIRST_STEP,
    STEP_DEFINITIONS,
    STEP_FLOW,
    STEP_TABLE,
    StepDefinition,
    WizardStep,
    get_next_step,
    get_previous_step,
    get_step,
    step_for_field,
    step_index,
)
from meetspace_wizard.validation.fields import FIELD_ORDER


class TestWizardStep:
    """Tests for WizardStep enum."""

    def test_flow_order(self):
        """Test steps run in the expected order."""
        assert [s.value for s in STEP_FLOW] == [
            "basic", "details", "location", "tickets", "images", "speakers", "review",
        ]

    def test_first_and_last(self):
        assert FIRST_STEP is WizardStep.BASIC
        assert WizardStep.REVIEW.is_last
        assert not WizardStep.SPEAKERS.is_last

    def test_definition_lookup(self):
        assert WizardStep.IMAGES.definition.display_name == "Images"
        assert WizardStep.IMAGES.definition is STEP_DEFINITIONS[WizardStep.IMAGES]

    def test_review_owns_nothing(self):
        assert WizardStep.REVIEW.definition.owned_fields == ()


class TestStepTable:
    """Tests for field ownership."""

    def test_every_field_owned_at_most_once(self):
        owned = [name for d in STEP_TABLE for name in d.owned_fields]
        assert len(owned) == len(set(owned))

    def test_record_fields_owned_by_a_step(self):
        """Test every schema field except visibility belongs to a step."""
        owned = {name for d in STEP_TABLE for name in d.owned_fields}
        assert set(FIELD_ORDER) - owned == {"visibility"}

    def test_owns_nested_keys(self):
        definition = StepDefinition(WizardStep.SPEAKERS, "Speakers", ("speakers",))
        assert definition.owns("speakers")
        assert definition.owns("speakers.2.photo")
        assert not definition.owns("speaker")

    def test_definitions_are_immutable(self):
        with pytest.raises(AttributeError):
            STEP_TABLE[0].display_name = "Changed"


class TestStepNavigation:
    """Tests for step lookup helpers."""

    def test_get_step(self):
        assert get_step("tickets") is WizardStep.TICKETS
        assert get_step(WizardStep.TICKETS) is WizardStep.TICKETS

    def test_get_unknown_step(self):
        with pytest.raises(StepTransitionError) as exc_info:
            get_step("payment")
        assert exc_info.value.attempted_step == "payment"

    def test_next_and_previous(self):
        assert get_next_step(WizardStep.BASIC) is WizardStep.DETAILS
        assert get_next_step(WizardStep.REVIEW) is None
        assert get_previous_step(WizardStep.DETAILS) is WizardStep.BASIC
        assert get_previous_step(WizardStep.BASIC) is None

    @pytest.mark.parametrize("key,step", [
        ("title", WizardStep.BASIC),
        ("tags", WizardStep.DETAILS),
        ("location.address", WizardStep.LOCATION),
        ("room_name", WizardStep.LOCATION),
        ("price", WizardStep.TICKETS),
        ("cover_image.url", WizardStep.IMAGES),
        ("speakers.0.name", WizardStep.SPEAKERS),
    ])
    def test_step_for_field(self, key, step):
        assert step_for_field(key) is step

    def test_unowned_field(self):
        assert step_for_field("visibility.restricted_to") is None

    def test_step_index(self):
        assert step_index(WizardStep.BASIC) == 0
        assert step_index(WizardStep.REVIEW) == len(STEP_FLOW) - 1
