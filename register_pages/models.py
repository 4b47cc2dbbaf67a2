"""Typed dataclasses describing declared pages, records, and snapshots."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import enum
import typing as typ

from ._constants import FIELD_MAP


class PageState(enum.StrEnum):
    """Reconciliation outcome for a single page key during ``install``."""

    PENDING = "pending"
    EXISTING = "existing"
    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"


@dc.dataclass(slots=True)
class PageDefinition:
    """A declared page with attributes already mapped to host field names."""

    key: str
    attributes: dict[str, typ.Any]

    @property
    def title(self) -> str:
        return str(self.attributes.get(FIELD_MAP["title"], ""))

    @property
    def content(self) -> str:
        return str(self.attributes.get(FIELD_MAP["content"], ""))

    @property
    def status(self) -> str | None:
        return self.attributes.get(FIELD_MAP["status"])

    @property
    def parent(self) -> int | str:
        return self.attributes.get(FIELD_MAP["parent"], 0)


@dc.dataclass(slots=True)
class TemplateDefinition:
    """A reusable page shape carrying literal placeholder tokens."""

    name: str
    shape: dict[str, typ.Any]


@dc.dataclass(slots=True)
class Record:
    """A content record as reported by the content store."""

    id: int
    title: str
    content: str
    status: str
    record_type: str = "page"
    parent: int = 0
    menu_order: int = 0


@dc.dataclass(slots=True)
class StoredMapping:
    """A persisted ``key -> record id`` association with an optional label."""

    key: str
    record_id: int
    label: str | None = None

    def to_option(self) -> int | dict[str, typ.Any]:
        """Return the richest stored shape available for this mapping."""
        if self.label is None:
            return self.record_id
        return {"value": self.record_id, "label": self.label}

    @classmethod
    def from_option(cls, key: str, value: object) -> StoredMapping | None:
        """Parse either a bare id or a ``{value, label}`` mapping."""
        label = None
        if isinstance(value, cabc.Mapping):
            label = value.get("label")
            value = value.get("value")
        try:
            record_id = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if record_id <= 0:
            return None
        return cls(key=key, record_id=record_id, label=label)


@dc.dataclass(slots=True)
class BackupEntry:
    """Captured state of one live record."""

    title: str
    content: str
    status: str
    meta: dict[str, typ.Any] = dc.field(default_factory=dict)

    def as_declaration(self) -> dict[str, typ.Any]:
        """Return the entry as simplified attributes suitable for ``declare``."""
        return {"title": self.title, "content": self.content, "status": self.status}


@dc.dataclass(slots=True)
class BackupSnapshot:
    """Persisted collection of :class:`BackupEntry` values keyed by page key."""

    entries: dict[str, BackupEntry] = dc.field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def to_payload(self) -> dict[str, dict[str, typ.Any]]:
        return {key: dc.asdict(entry) for key, entry in self.entries.items()}

    @classmethod
    def from_payload(cls, payload: cabc.Mapping[str, typ.Any] | None) -> BackupSnapshot:
        entries: dict[str, BackupEntry] = {}
        for key, raw in (payload or {}).items():
            if not isinstance(raw, cabc.Mapping):
                continue
            entries[str(key)] = BackupEntry(
                title=str(raw.get("title", "")),
                content=str(raw.get("content", "")),
                status=str(raw.get("status", "publish")),
                meta=dict(raw.get("meta") or {}),
            )
        return cls(entries=entries)


@dc.dataclass(slots=True)
class InstallReport:
    """Per-key outcome of one reconciliation pass."""

    states: dict[str, PageState] = dc.field(default_factory=dict)
    page_ids: dict[str, int] = dc.field(default_factory=dict)
    errors: dict[str, Exception] = dc.field(default_factory=dict)
    short_circuited: bool = False

    @property
    def changed(self) -> bool:
        """Return ``True`` when any page was created or updated."""
        return any(
            state in (PageState.CREATED, PageState.UPDATED)
            for state in self.states.values()
        )

    def keys_in(self, state: PageState) -> list[str]:
        return [key for key, value in self.states.items() if value is state]


__all__ = [
    "BackupEntry",
    "BackupSnapshot",
    "InstallReport",
    "PageDefinition",
    "PageState",
    "Record",
    "StoredMapping",
    "TemplateDefinition",
]
