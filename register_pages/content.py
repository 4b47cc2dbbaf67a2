"""Content-store collaborator protocol and an in-memory implementation."""

from __future__ import annotations

import copy
import itertools
import typing as typ

from .errors import ContentStoreError
from .models import Record

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class ContentStore(typ.Protocol):
    """Persistent storage for content records addressed by integer id.

    ``create`` and ``update`` raise :class:`ContentStoreError` when the host
    rejects a write. ``fetch`` returns ``None`` for ids that do not resolve
    to a live record.
    """

    def create(self, attributes: cabc.Mapping[str, typ.Any]) -> int: ...

    def update(self, record_id: int, attributes: cabc.Mapping[str, typ.Any]) -> int: ...

    def fetch(self, record_id: int) -> Record | None: ...

    def delete(self, record_id: int, *, permanently: bool = False) -> bool: ...

    def permalink(self, record_id: int) -> str | None: ...

    def get_metadata(self, record_id: int) -> dict[str, typ.Any]: ...

    def set_metadata(self, record_id: int, key: str, value: typ.Any) -> bool: ...


class InMemoryContentStore:
    """Dictionary-backed content store.

    Records are kept as host-native attribute mappings. Trashed records stay
    in :attr:`trash` until deleted permanently and no longer ``fetch``.
    """

    def __init__(self, *, base_url: str = "https://example.invalid") -> None:
        self.base_url = base_url.rstrip("/")
        self.records: dict[int, dict[str, typ.Any]] = {}
        self.metadata: dict[int, dict[str, typ.Any]] = {}
        self.trash: dict[int, dict[str, typ.Any]] = {}
        self.calls: list[tuple[str, int | None]] = []
        self._ids = itertools.count(1)

    def create(self, attributes: cabc.Mapping[str, typ.Any]) -> int:
        self.calls.append(("create", None))
        if not attributes.get("post_title"):
            msg = "Content, title, and excerpt are empty."
            raise ContentStoreError(msg)
        record_id = next(self._ids)
        self.records[record_id] = copy.deepcopy(dict(attributes))
        self.metadata[record_id] = {}
        return record_id

    def update(self, record_id: int, attributes: cabc.Mapping[str, typ.Any]) -> int:
        self.calls.append(("update", record_id))
        if record_id not in self.records:
            msg = f"Invalid record ID {record_id}."
            raise ContentStoreError(msg)
        self.records[record_id].update(copy.deepcopy(dict(attributes)))
        return record_id

    def fetch(self, record_id: int) -> Record | None:
        self.calls.append(("fetch", record_id))
        attributes = self.records.get(record_id)
        if attributes is None:
            return None
        return Record(
            id=record_id,
            title=str(attributes.get("post_title", "")),
            content=str(attributes.get("post_content", "")),
            status=str(attributes.get("post_status", "publish")),
            record_type=str(attributes.get("post_type", "page")),
            parent=_as_int(attributes.get("post_parent")),
            menu_order=_as_int(attributes.get("menu_order")),
        )

    def delete(self, record_id: int, *, permanently: bool = False) -> bool:
        self.calls.append(("delete", record_id))
        attributes = self.records.pop(record_id, None)
        if attributes is None:
            return False
        if permanently:
            self.metadata.pop(record_id, None)
        else:
            self.trash[record_id] = attributes
        return True

    def permalink(self, record_id: int) -> str | None:
        attributes = self.records.get(record_id)
        if attributes is None:
            return None
        slug = str(attributes.get("post_name") or record_id)
        return f"{self.base_url}/{slug}/"

    def get_metadata(self, record_id: int) -> dict[str, typ.Any]:
        return copy.deepcopy(self.metadata.get(record_id, {}))

    def set_metadata(self, record_id: int, key: str, value: typ.Any) -> bool:
        if record_id not in self.records:
            return False
        self.metadata.setdefault(record_id, {})[key] = copy.deepcopy(value)
        return True

    def count(self, action: str) -> int:
        """Return how many times ``action`` was invoked."""
        return sum(1 for name, _ in self.calls if name == action)


def _as_int(value: object) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0


__all__ = ["ContentStore", "InMemoryContentStore"]
