"""Reference tracker models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from publish_protect.domain.entities import TargetKind

LINK_TYPE = "Link"
ARRAY_TYPE = "Array"

InvalidReferenceCode = Literal["reference_unpublished", "reference_unverified"]
UnverifiedPolicy = Literal["block", "ignore"]


@dataclass(frozen=True)
class LinkReference:
    """One link occurrence inside a link or array-of-link field."""

    field_id: str
    field_name: str
    target_id: str
    target_kind: TargetKind


@dataclass(frozen=True)
class InvalidReference:
    """A reference that currently blocks publishing."""

    reference: LinkReference
    code: InvalidReferenceCode
    message: str

    @property
    def field_id(self) -> str:
        return self.reference.field_id

    @property
    def field_name(self) -> str:
        return self.reference.field_name

    @property
    def target_id(self) -> str:
        return self.reference.target_id


# field id -> references held by that field
TrackedFieldState = Mapping[str, tuple[LinkReference, ...]]
