"""Record validation: field schema, cross-field rules and the error map."""

from meetspace_wizard.validation.errors import Issue, ValidationErrorMap, key_belongs_to
from meetspace_wizard.validation.fields import (
    as_record,
    check_record,
    is_valid,
    validate_field,
    validate_record,
)
from meetspace_wizard.validation.rules import (
    CROSS_FIELD_RULES,
    RuleContext,
    parse_number,
    project_active,
)
from meetspace_wizard.validation.schema import EventRecordSchema

__all__ = [
    "Issue",
    "ValidationErrorMap",
    "key_belongs_to",
    "as_record",
    "check_record",
    "is_valid",
    "validate_field",
    "validate_record",
    "CROSS_FIELD_RULES",
    "RuleContext",
    "parse_number",
    "project_active",
    "EventRecordSchema",
]
