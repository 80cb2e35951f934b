"""
Lifecycle status derivation.

Checks run in a fixed order and the first match wins:
archived, changed, draft, published, then new.
"""

from __future__ import annotations

from publish_protect.domain.entities import LifecycleStatus, RecordMeta


def is_archived(meta: RecordMeta) -> bool:
    return meta.archived_version is not None


def is_changed(meta: RecordMeta) -> bool:
    return (
        meta.published_version is not None
        and meta.version >= meta.published_version + 2
    )


def is_draft(meta: RecordMeta) -> bool:
    return meta.published_version is None


def is_published(meta: RecordMeta) -> bool:
    return (
        meta.published_version is not None
        and meta.version == meta.published_version + 1
    )


def derive_status(meta: RecordMeta) -> LifecycleStatus:
    """Return the single lifecycle status of a record snapshot."""
    if is_archived(meta):
        return "archived"
    if is_changed(meta):
        return "changed"
    if is_draft(meta):
        return "draft"
    if is_published(meta):
        return "published"
    return "new"
