"""Shared fixtures for the register_pages test suite.

The fixtures provide in-memory content and settings stores so every test can
inspect exactly which collaborator calls were made and what was persisted.
"""

from __future__ import annotations

import copy
import typing as typ

import pytest

from register_pages import (
    ContentStoreError,
    InMemoryContentStore,
    InMemorySettingsStore,
    PageRegistrar,
)
from register_pages.config import RegistrarConfig

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from register_pages import Record


class FailingContentStore(InMemoryContentStore):
    """Content store that rejects writes for selected titles.

    ``fail_fetch_ids`` holds record ids whose next lookup times out; each id
    fails once. ``fail_metadata`` makes every metadata write fail.
    """

    def __init__(
        self,
        fail_titles: cabc.Iterable[str] = (),
        *,
        fail_fetch_ids: cabc.Iterable[int] = (),
        fail_metadata: bool = False,
    ) -> None:
        super().__init__()
        self.fail_titles = set(fail_titles)
        self.fail_fetch_ids = set(fail_fetch_ids)
        self.fail_metadata = fail_metadata

    def fetch(self, record_id: int) -> Record | None:
        if record_id in self.fail_fetch_ids:
            self.fail_fetch_ids.discard(record_id)
            self.calls.append(("fetch", record_id))
            msg = f"Timed out fetching record {record_id}"
            raise ContentStoreError(msg)
        return super().fetch(record_id)

    def set_metadata(self, record_id: int, key: str, value: typ.Any) -> bool:
        if self.fail_metadata:
            msg = f"Could not write {key} on record {record_id}"
            raise ContentStoreError(msg)
        return super().set_metadata(record_id, key, value)

    def create(self, attributes: cabc.Mapping[str, typ.Any]) -> int:
        if attributes.get("post_title") in self.fail_titles:
            self.calls.append(("create", None))
            msg = f"Could not insert {attributes.get('post_title')!r}"
            raise ContentStoreError(msg)
        return super().create(attributes)

    def update(self, record_id: int, attributes: cabc.Mapping[str, typ.Any]) -> int:
        if attributes.get("post_title") in self.fail_titles:
            self.calls.append(("update", record_id))
            msg = f"Could not update record {record_id}"
            raise ContentStoreError(msg)
        return super().update(record_id, attributes)


SAMPLE_PAGES: dict[str, dict[str, typ.Any]] = {
    "about": {"title": "About Us", "content": "Who we are"},
    "contact": {"title": "Contact", "content": "Say hello", "parent": "about"},
}


@pytest.fixture
def sample_pages() -> dict[str, dict[str, typ.Any]]:
    """Return a fresh copy of the about/contact declarations."""
    return copy.deepcopy(SAMPLE_PAGES)


@pytest.fixture
def make_failing_content() -> cabc.Callable[..., FailingContentStore]:
    """Return a factory for content stores that reject selected titles."""
    return FailingContentStore


@pytest.fixture
def content() -> InMemoryContentStore:
    """Return an empty in-memory content store."""
    return InMemoryContentStore()


@pytest.fixture
def settings() -> InMemorySettingsStore:
    """Return an empty in-memory settings store."""
    return InMemorySettingsStore()


@pytest.fixture
def make_registrar(
    content: InMemoryContentStore, settings: InMemorySettingsStore
) -> cabc.Callable[..., PageRegistrar]:
    """Build registrars sharing the test's content and settings stores."""

    def _make(
        *,
        prefix: str = "shop",
        version: str = "1.0.0",
        pages: cabc.Mapping[str, cabc.Mapping[str, typ.Any]] | None = None,
        **config: typ.Any,
    ) -> PageRegistrar:
        registrar = PageRegistrar(
            content,
            settings,
            prefix=prefix,
            config=RegistrarConfig(version=version, **config),
        )
        registrar.declare_many(SAMPLE_PAGES if pages is None else pages)
        return registrar

    return _make
