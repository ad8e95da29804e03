"""Wizard steps, step validation, draft persistence and the wizard controller."""

from meetspace_wizard.state_machine.checkpoint import (
    DRAFT_KEY_PREFIX,
    DraftPersistence,
    DraftSnapshot,
    draft_key,
)
from meetspace_wizard.state_machine.machine import EventWizard, UploadTracker
from meetspace_wizard.state_machine.orchestrator import (
    STEP_INVALID_MESSAGE,
    StepCheck,
    StepValidator,
)
from meetspace_wizard.state_machine.payload import assemble_payload
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

__all__ = [
    "WizardStep",
    "StepDefinition",
    "STEP_TABLE",
    "STEP_DEFINITIONS",
    "STEP_FLOW",
    "FIRST_STEP",
    "get_step",
    "get_next_step",
    "get_previous_step",
    "step_for_field",
    "step_index",
    "StepCheck",
    "StepValidator",
    "STEP_INVALID_MESSAGE",
    "DraftSnapshot",
    "DraftPersistence",
    "DRAFT_KEY_PREFIX",
    "draft_key",
    "assemble_payload",
    "EventWizard",
    "UploadTracker",
]
