"""Predicates deciding whether an existing record should be updated.

Each policy has the signature ``(record, page, context) -> bool`` and is
called once per page whose stored id still resolves to a live record.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from ._constants import PAGE_VERSION_META
from .guard import is_older

if typ.TYPE_CHECKING:
    from .content import ContentStore
    from .models import PageDefinition, Record


@dc.dataclass(slots=True)
class UpdateContext:
    """Information available to update policies."""

    version: str
    content: ContentStore


UpdatePolicy = typ.Callable[["Record", "PageDefinition", UpdateContext], bool]


def never_update(record: Record, page: PageDefinition, context: UpdateContext) -> bool:
    """Leave existing records alone."""
    return False


def version_changed(
    record: Record, page: PageDefinition, context: UpdateContext
) -> bool:
    """Update when the record was written by an older configured version."""
    metadata = context.content.get_metadata(record.id)
    return is_older(metadata.get(PAGE_VERSION_META), context.version)


def content_changed(
    record: Record, page: PageDefinition, context: UpdateContext
) -> bool:
    """Update when the title, content, or status drifted from the declaration."""
    if record.title != page.title or record.content != page.content:
        return True
    return page.status is not None and record.status != page.status


POLICIES: dict[str, UpdatePolicy] = {
    "never": never_update,
    "version": version_changed,
    "content": content_changed,
}


def resolve_policy(policy: str | UpdatePolicy) -> UpdatePolicy:
    """Return the callable for ``policy``, accepting a name or a callable."""
    if callable(policy):
        return policy
    try:
        return POLICIES[policy]
    except KeyError as exc:
        available = ", ".join(sorted(POLICIES))
        msg = f"Unknown update policy '{policy}'. Known policies: {available}"
        raise ValueError(msg) from exc


__all__ = [
    "POLICIES",
    "UpdateContext",
    "UpdatePolicy",
    "content_changed",
    "never_update",
    "resolve_policy",
    "version_changed",
]
