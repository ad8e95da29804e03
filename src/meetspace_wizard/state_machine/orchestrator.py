"""Per-step validation for the event wizard.

A step is checked against the whole-record result, filtered to the fields
the step owns, plus a few conditional rules that depend on the branch the
user picked on that step. Problems on other steps never block the step.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from meetspace_wizard.core.notices import Notifier
from meetspace_wizard.models.event import EventDraft, is_built_in_platform
from meetspace_wizard.state_machine.steps import StepDefinition, WizardStep, get_step
from meetspace_wizard.utils.sanitization import is_absolute_url
from meetspace_wizard.validation.errors import ValidationErrorMap
from meetspace_wizard.validation.fields import as_record, check_record
from meetspace_wizard.validation.rules import (
    MSG_LINK_INVALID,
    MSG_LINK_REQUIRED,
    MSG_PRICE_MINIMUM,
    MSG_PRICE_REQUIRED,
    MSG_ROOM_REQUIRED,
    RuleContext,
    parse_number,
)

logger = logging.getLogger(__name__)

STEP_INVALID_MESSAGE = "Please fix the errors in this section before proceeding."


@dataclass
class StepCheck:
    """Outcome of checking one step.

    Attributes:
        step: Step that was checked
        errors: Fresh errors for fields the step owns
        touched: Field paths to mark touched
    """

    step: WizardStep
    errors: dict[str, str] = field(default_factory=dict)
    touched: set[str] = field(default_factory=set)

    @property
    def valid(self) -> bool:
        return not self.errors


def _location_rules(record: dict[str, Any], context: RuleContext) -> dict[str, str]:
    """Virtual meeting requirements that depend on the chosen platform."""
    errors: dict[str, str] = {}
    if not record.get("is_virtual"):
        return errors
    if is_built_in_platform(record.get("streaming_platform")):
        room = (record.get("room_name") or "").strip()
        if len(room) < context.room_name_min_length:
            errors["room_name"] = MSG_ROOM_REQUIRED.format(min=context.room_name_min_length)
    else:
        link = (record.get("meeting_link") or "").strip()
        if not link:
            errors["meeting_link"] = MSG_LINK_REQUIRED
        elif not is_absolute_url(link):
            errors["meeting_link"] = MSG_LINK_INVALID
    return errors


def _ticket_rules(record: dict[str, Any], context: RuleContext) -> dict[str, str]:
    """Minimum price for paid events."""
    if record.get("is_free_event", True):
        return {}
    price = parse_number(record.get("price"))
    if price is None or price < 0:
        return {"price": MSG_PRICE_REQUIRED}
    if price < context.min_price:
        return {"price": MSG_PRICE_MINIMUM.format(min=context.min_price)}
    return {}


STEP_RULES = {
    WizardStep.LOCATION: _location_rules,
    WizardStep.TICKETS: _ticket_rules,
}


class StepValidator:
    """Decides whether the wizard may leave a step.

    Example:
        >>> validator = StepValidator()
        >>> errors, touched = ValidationErrorMap(), set()
        >>> validator.validate_step("location", draft, errors, touched)
        False
        >>> errors["location"]
        'Address or City is required for physical events.'
    """

    def __init__(
        self,
        context: RuleContext | None = None,
        notifier: Notifier | None = None,
        context_factory: Callable[[], RuleContext] | None = None,
    ) -> None:
        """Initialize the validator.

        Args:
            context: Fixed clock and limits
            notifier: Receives the notice raised when a step is blocked
            context_factory: Builds a fresh context per check (wins over `context`)
        """
        self.context = context
        self.notifier = notifier
        self.context_factory = context_factory

    def _context(self) -> RuleContext:
        if self.context_factory:
            return self.context_factory()
        return self.context or RuleContext()

    def check_step(self, step: "WizardStep | str", draft: EventDraft | dict) -> StepCheck:
        """Compute a step's errors without touching any wizard state."""
        definition: StepDefinition = get_step(step).definition
        result = StepCheck(step=definition.id)
        if not definition.owned_fields:
            return result

        context = self._context()
        for issue in check_record(draft, context):
            if definition.owns(issue.key) and issue.key not in result.errors:
                result.errors[issue.key] = issue.message
                result.touched.add(str(issue.path[0]))
                result.touched.add(issue.key)

        extra_rules = STEP_RULES.get(definition.id)
        if extra_rules:
            for key, message in extra_rules(as_record(draft), context).items():
                if key not in result.errors:
                    result.errors[key] = message
                    result.touched.add(key)

        if definition.id is WizardStep.TICKETS and as_record(draft).get("is_free_event", True):
            result.errors.pop("price", None)

        return result

    def validate_step(
        self,
        step: "WizardStep | str",
        draft: EventDraft | dict,
        errors: ValidationErrorMap,
        touched: set[str],
    ) -> bool:
        """Validate a step and merge its errors into the wizard's error map.

        Only keys owned by the step are replaced; errors belonging to other
        steps keep their previous state.

        Args:
            step: Step to validate
            draft: Current record
            errors: Wizard error map, updated in place
            touched: Wizard touched set, updated in place

        Returns:
            True if the step has no errors
        """
        result = self.check_step(step, draft)
        definition = result.step.definition
        errors.replace_owned(definition.owned_fields, result.errors)
        touched.update(result.touched)

        if result.valid:
            logger.debug(f"Step '{result.step.value}' is valid")
            return True

        logger.info(f"Step '{result.step.value}' blocked by {sorted(result.errors)}")
        if self.notifier:
            self.notifier.error(STEP_INVALID_MESSAGE)
        return False
