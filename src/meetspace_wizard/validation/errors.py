"""Validation issues and the field-keyed error map."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping


@dataclass(frozen=True)
class Issue:
    """A single validation failure.

    Attributes:
        path: Location of the failing value, e.g. ("speakers", 0, "name")
        message: Human-readable reason
        code: Machine-readable reason
    """

    path: tuple[str | int, ...]
    message: str
    code: str = "custom"

    @property
    def key(self) -> str:
        """Dotted path used as the error-map key (``speakers.0.name``)."""
        return ".".join(str(p) for p in self.path)

    def touches(self, field_name: str) -> bool:
        """Whether this issue concerns `field_name` or something nested under it."""
        if key_belongs_to(self.key, field_name):
            return True
        return field_name in (str(p) for p in self.path)


def key_belongs_to(key: str, field_name: str) -> bool:
    """Check if an error key is the field itself or nested under it."""
    return key == field_name or key.startswith(field_name + ".")


class ValidationErrorMap(dict):
    """Mapping of dotted field path to error message.

    A plain dict with helpers for merging one step's results without
    disturbing errors that belong to other steps.
    """

    @classmethod
    def from_issues(cls, issues: Iterable[Issue]) -> ValidationErrorMap:
        """Build a map keeping the first message reported for each path."""
        errors = cls()
        for issue in issues:
            if issue.path and issue.key not in errors:
                errors[issue.key] = issue.message
        return errors

    def keys_for(self, field_name: str) -> list[str]:
        return [key for key in self if key_belongs_to(key, field_name)]

    def has_error(self, field_name: str) -> bool:
        return bool(self.keys_for(field_name))

    def clear_field(self, field_name: str) -> None:
        """Remove the field's error and every nested error under it."""
        for key in self.keys_for(field_name):
            del self[key]

    def set_field(self, field_name: str, message: str | None) -> None:
        """Set or clear a single field's own error."""
        if message:
            self[field_name] = message
        else:
            self.pop(field_name, None)

    def replace_owned(self, owned_fields: Iterable[str], fresh: Mapping[str, str]) -> None:
        """Replace exactly the keys owned by `owned_fields` with `fresh`.

        Keys owned by a field but absent from `fresh` are deleted; keys owned
        by no field in `owned_fields` are left untouched.
        """
        for field_name in owned_fields:
            for key in self.keys_for(field_name):
                if key not in fresh:
                    del self[key]
            for key, message in fresh.items():
                if key_belongs_to(key, field_name):
                    self[key] = message

    @property
    def first_key(self) -> str | None:
        return next(iter(self), None)
