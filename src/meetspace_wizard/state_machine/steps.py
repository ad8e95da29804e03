"""Step definitions for the event submission wizard."""

from dataclasses import dataclass
from enum import Enum

from meetspace_wizard.core.exceptions import StepTransitionError
from meetspace_wizard.validation.errors import key_belongs_to


class WizardStep(str, Enum):
    """Steps of the event submission wizard.

    The wizard walks through these screens in order:
    1. BASIC - Title, category, date and times
    2. DETAILS - Description, tags, requirements and audience
    3. LOCATION - Venue or virtual meeting, attendance bounds
    4. TICKETS - Free or paid, price and refund policy
    5. IMAGES - Cover image and logo
    6. SPEAKERS - Speaker list
    7. REVIEW - Summary, visibility and submit
    """

    BASIC = "basic"
    DETAILS = "details"
    LOCATION = "location"
    TICKETS = "tickets"
    IMAGES = "images"
    SPEAKERS = "speakers"
    REVIEW = "review"

    @property
    def definition(self) -> "StepDefinition":
        return STEP_DEFINITIONS[self]

    @property
    def is_last(self) -> bool:
        return self is STEP_FLOW[-1]


@dataclass(frozen=True)
class StepDefinition:
    """A wizard screen and the record fields it owns.

    Attributes:
        id: Step identifier
        display_name: Title shown in the progress bar
        owned_fields: Top-level record fields edited on this step
    """

    id: WizardStep
    display_name: str
    owned_fields: tuple[str, ...] = ()

    def owns(self, key: str) -> bool:
        """Check if an error key (possibly nested) belongs to this step."""
        return any(key_belongs_to(key, name) for name in self.owned_fields)


# Step order; the wizard always moves along this list
STEP_TABLE: tuple[StepDefinition, ...] = (
    StepDefinition(
        WizardStep.BASIC,
        "Basic Info",
        ("title", "event_date", "start_time", "end_time", "category", "duration"),
    ),
    StepDefinition(
        WizardStep.DETAILS,
        "Details",
        ("description", "short_description", "tags", "requirements", "target_audience"),
    ),
    StepDefinition(
        WizardStep.LOCATION,
        "Location",
        (
            "is_virtual",
            "location",
            "meeting_link",
            "streaming_platform",
            "room_name",
            "max_attendees",
            "minimum_attendees",
        ),
    ),
    StepDefinition(
        WizardStep.TICKETS,
        "Tickets",
        ("is_free_event", "price", "currency", "refund_policy", "early_bird_deadline"),
    ),
    StepDefinition(WizardStep.IMAGES, "Images", ("cover_image", "logo")),
    StepDefinition(WizardStep.SPEAKERS, "Speakers", ("speakers",)),
    StepDefinition(WizardStep.REVIEW, "Review"),
)

STEP_DEFINITIONS: dict[WizardStep, StepDefinition] = {d.id: d for d in STEP_TABLE}

STEP_FLOW: list[WizardStep] = [d.id for d in STEP_TABLE]

FIRST_STEP = STEP_FLOW[0]


def get_step(step: "WizardStep | str") -> WizardStep:
    """Resolve a step id.

    Raises:
        StepTransitionError: If the id names no step
    """
    try:
        return WizardStep(step)
    except ValueError:
        raise StepTransitionError(
            f"Unknown step '{step}'",
            current_step="",
            attempted_step=str(step),
        ) from None


def get_next_step(current: WizardStep) -> WizardStep | None:
    """Get the step after `current`.

    Args:
        current: Current step

    Returns:
        Next step in flow, or None on the last step
    """
    idx = STEP_FLOW.index(current)
    if idx + 1 < len(STEP_FLOW):
        return STEP_FLOW[idx + 1]
    return None


def get_previous_step(current: WizardStep) -> WizardStep | None:
    """Get the step before `current`, or None on the first step."""
    idx = STEP_FLOW.index(current)
    return STEP_FLOW[idx - 1] if idx > 0 else None


def step_for_field(key: str) -> WizardStep | None:
    """Find the step that owns a field or nested error key.

    Args:
        key: Field name or dotted path such as ``speakers.0.name``

    Returns:
        Owning step, or None if no step owns it
    """
    for definition in STEP_TABLE:
        if definition.owns(key):
            return definition.id
    return None


def step_index(step: WizardStep) -> int:
    return STEP_FLOW.index(step)
