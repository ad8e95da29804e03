"""Event visibility variants.

Visibility arrives in several raw shapes: a bare string, a mapping with a
`status` key (camel- or snake-cased allow list), or an already-built variant.
`normalize_visibility` turns any of them into `PublicVisibility` or
`PrivateVisibility`; the rest of the package only ever sees those two.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublicVisibility:
    """Anyone can see the event."""

    status: ClassVar[str] = "public"

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status}


@dataclass(frozen=True)
class PrivateVisibility:
    """Only identifiers on the allow list can see the event."""

    allow_list: tuple[str, ...] = ()
    status: ClassVar[str] = "private"

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "restricted_to": list(self.allow_list)}

    def with_member(self, identifier: str) -> PrivateVisibility:
        identifier = identifier.strip()
        if not identifier or identifier in self.allow_list:
            return self
        return PrivateVisibility(self.allow_list + (identifier,))

    def without_member(self, identifier: str) -> PrivateVisibility:
        return PrivateVisibility(tuple(i for i in self.allow_list if i != identifier))


Visibility = Union[PublicVisibility, PrivateVisibility]


def _allow_list(raw: Any) -> tuple[str, ...]:
    if not raw:
        return ()
    if isinstance(raw, str):
        raw = [raw]
    members: list[str] = []
    for item in raw:
        text = str(item).strip()
        if text and text not in members:
            members.append(text)
    return tuple(members)


def normalize_visibility(raw: Any) -> Visibility:
    """Convert any supported raw visibility shape into a variant.

    Unknown statuses fall back to public.
    """
    if isinstance(raw, (PublicVisibility, PrivateVisibility)):
        return raw
    if raw is None or raw == "":
        return PublicVisibility()

    if isinstance(raw, str):
        status, members = raw, ()
    elif isinstance(raw, dict):
        status = str(raw.get("status", "public"))
        members = _allow_list(raw.get("restricted_to", raw.get("restrictedTo")))
    else:
        logger.warning(f"Unsupported visibility value {raw!r}, defaulting to public")
        return PublicVisibility()

    status = status.strip().lower()
    if status == "private":
        return PrivateVisibility(members)
    if status != "public":
        logger.warning(f"Unknown visibility status '{status}', defaulting to public")
    return PublicVisibility()


def visibility_to_dict(visibility: Any) -> dict[str, Any]:
    """Serialize any raw or normalized visibility to its boundary shape."""
    return normalize_visibility(visibility).to_dict()
