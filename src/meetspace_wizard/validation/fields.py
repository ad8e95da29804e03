"""Whole-record checks and single-field lookups.

`check_record` is the one place a record is evaluated. `validate_field` and
`validate_record` are views over its issue list.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from meetspace_wizard.models.event import EventDraft, ImageAsset
from meetspace_wizard.validation.errors import Issue, ValidationErrorMap
from meetspace_wizard.validation.rules import RuleContext, project_active, run_rules
from meetspace_wizard.validation.schema import EventRecordSchema

logger = logging.getLogger(__name__)

# Top-level fields in step order; issues are reported in this order
FIELD_ORDER = {name: index for index, name in enumerate(EventRecordSchema.model_fields)}


def _image_record(image: ImageAsset | None) -> dict[str, Any] | None:
    if image is None:
        return None
    data = image.to_dict()
    data["pending_file"] = image.file is not None
    return data


def as_record(draft: EventDraft | dict[str, Any]) -> dict[str, Any]:
    """Plain-dict view of a draft as seen by the schema.

    Pending local files are reduced to a `pending_file` marker on their image.
    """
    if not isinstance(draft, EventDraft):
        return dict(draft)
    record = draft.to_dict()
    record["cover_image"] = _image_record(draft.cover_image)
    record["logo"] = _image_record(draft.logo)
    for data, speaker in zip(record["speakers"], draft.speakers):
        data["photo"] = _image_record(speaker.photo)
    return record


def _issues_from_pydantic(error: PydanticValidationError) -> list[Issue]:
    return [
        Issue(path=tuple(item["loc"]), message=item["msg"], code=item["type"])
        for item in error.errors()
    ]


def check_record(
    draft: EventDraft | dict[str, Any],
    context: RuleContext | None = None,
) -> list[Issue]:
    """Evaluate the field schema and every cross-field rule.

    Fields of the inactive virtual/physical and free/paid shapes are hidden
    before evaluation.

    Args:
        draft: Draft or plain record
        context: Clock and limits (defaults to the current time)

    Returns:
        Issues ordered by the step that owns their field; empty when valid
    """
    context = context or RuleContext()
    record = project_active(as_record(draft))

    issues: list[Issue] = []
    try:
        EventRecordSchema.model_validate(record, context=context.schema_context())
    except PydanticValidationError as e:
        issues.extend(_issues_from_pydantic(e))

    issues.extend(run_rules(record, context))
    issues.sort(key=lambda issue: FIELD_ORDER.get(str(issue.path[0]), len(FIELD_ORDER)))
    if issues:
        logger.debug(f"Record check found {len(issues)} issue(s): {[i.key for i in issues]}")
    return issues


def validate_field(
    field_name: str,
    draft: EventDraft | dict[str, Any],
    context: RuleContext | None = None,
) -> str | None:
    """Return the first message concerning `field_name`, or None.

    None means the field is fine, even if other fields are not.
    """
    for issue in check_record(draft, context):
        if issue.touches(field_name):
            return issue.message
    return None


def validate_record(
    draft: EventDraft | dict[str, Any],
    context: RuleContext | None = None,
) -> ValidationErrorMap:
    """Every issue keyed by its dotted path, first message per path."""
    return ValidationErrorMap.from_issues(check_record(draft, context))


def is_valid(draft: EventDraft | dict[str, Any], now: datetime | None = None) -> bool:
    return not check_record(draft, RuleContext(now=now) if now else None)
