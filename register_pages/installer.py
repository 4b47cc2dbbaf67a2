"""Reconciliation of declared pages against the content store.

For each declared page, in declaration order, the engine decides whether the
stored record is still live (``EXISTING``, optionally ``UPDATED``), whether
a new record must be created (``CREATED``), or whether the collaborator
failed (``FAILED``). Failures are isolated per page and the pass carries on.
A failed create leaves the key out of the resulting mapping. A failed lookup
or update keeps the stored id, since the record may still exist. Metadata
stamps that cannot be written are logged and do not fail the page.

String parents are resolved against ids already known in the current pass.
A parent key that has not been created or verified yet (declared later, or
failed) resolves to ``0`` and is logged; it is not retried.
"""

from __future__ import annotations

import logging
import typing as typ

from ._constants import PAGE_CONFIG_META, PAGE_VERSION_META
from .errors import (
    ContentStoreError,
    RecordCreateFailedError,
    RecordFetchFailedError,
    RecordUpdateFailedError,
)
from .log import RegistrarLogger
from .models import InstallReport, PageState
from .policies import UpdateContext, never_update

if typ.TYPE_CHECKING:
    from .content import ContentStore
    from .errors import _RecordError
    from .guard import VersionGuard
    from .id_store import IDStore
    from .models import PageDefinition, Record
    from .policies import UpdatePolicy
    from .registry import PageRegistry

_PARENT_FIELD = "post_parent"


class InstallationEngine:
    """Create or verify records for every page in a :class:`PageRegistry`."""

    def __init__(
        self,
        *,
        registry: PageRegistry,
        content: ContentStore,
        id_store: IDStore,
        guard: VersionGuard,
        version: str,
        policy: UpdatePolicy = never_update,
        log: RegistrarLogger | None = None,
    ) -> None:
        self.registry = registry
        self.content = content
        self.id_store = id_store
        self.guard = guard
        self.version = version
        self.policy = policy
        self.log = log or RegistrarLogger(logging.getLogger(__name__))

    def stored_ids(self) -> dict[str, int]:
        """Return persisted ids for the declared keys (or everything stored)."""
        keys = self.registry.keys()
        return self.id_store.get_all(keys or None)

    def install(self) -> InstallReport:
        """Run one reconciliation pass unless the version guard is satisfied.

        Returns
        -------
        InstallReport
            Per-key states, the resulting ``{key: id}`` mapping, and any
            per-page errors. When the guard short-circuits the pass, the
            report carries the stored mapping and no content-store call is
            made.
        """
        if self.guard.is_satisfied(self.version):
            return InstallReport(page_ids=self.stored_ids(), short_circuited=True)

        self.log.event("Starting page installation", pages=len(self.registry))
        report = InstallReport()
        stored = self.stored_ids()

        for page in self.registry:
            report.states[page.key] = PageState.PENDING
            self._reconcile(page, stored.get(page.key), report)

        if report.changed:
            self._persist(report)
            self.guard.mark(self.version)
            self.log.event("Installation completed", pages=len(report.page_ids))
        return report

    def force_reinstall(self) -> bool:
        """Clear the guard so the next :meth:`install` reconciles again."""
        self.log.event("Installation reset")
        return self.guard.clear()

    def update_pages(self, *, force: bool = False) -> dict[str, int]:
        """Push current declarations onto tracked live records.

        Records are updated when ``force`` is set or the update policy
        reports a change. Returns the ids of records that were updated.
        """
        updated: dict[str, int] = {}
        stored = self.stored_ids()
        context = UpdateContext(version=self.version, content=self.content)
        for page in self.registry:
            try:
                record = self._live_record(stored.get(page.key))
                if record is None:
                    continue
                if not force and not self.policy(record, page, context):
                    continue
            except ContentStoreError as exc:
                self.log.warning("%s", _chained(RecordFetchFailedError, page.key, exc))
                continue
            try:
                updated[page.key] = self._write_update(page, record.id, stored)
            except RecordUpdateFailedError as exc:
                self.log.warning("%s", exc)
        return updated

    def _reconcile(
        self, page: PageDefinition, stored_id: int | None, report: InstallReport
    ) -> None:
        try:
            record = self._live_record(stored_id)
        except ContentStoreError as exc:
            report.page_ids[page.key] = typ.cast("int", stored_id)
            self._fail(page.key, _chained(RecordFetchFailedError, page.key, exc), report)
            return
        if record is not None:
            report.states[page.key] = PageState.EXISTING
            report.page_ids[page.key] = record.id
            self._maybe_update(page, record, report)
            return

        attributes = self._resolve_parent(page, report.page_ids)
        try:
            record_id = self.content.create(attributes)
        except ContentStoreError as exc:
            self._fail(page.key, _chained(RecordCreateFailedError, page.key, exc), report)
            return
        report.states[page.key] = PageState.CREATED
        report.page_ids[page.key] = record_id
        self.log.event("Created new page", key=page.key, id=record_id)
        self._stamp(page.key, record_id, attributes)

    def _maybe_update(
        self, page: PageDefinition, record: Record, report: InstallReport
    ) -> None:
        context = UpdateContext(version=self.version, content=self.content)
        try:
            if not self.policy(record, page, context):
                return
        except ContentStoreError as exc:
            self._fail(page.key, _chained(RecordFetchFailedError, page.key, exc), report)
            return
        try:
            self._write_update(page, record.id, report.page_ids)
        except RecordUpdateFailedError as exc:
            self._fail(page.key, exc, report)
            return
        report.states[page.key] = PageState.UPDATED
        self.log.event("Updated page", key=page.key, id=record.id)

    def _write_update(
        self, page: PageDefinition, record_id: int, known: dict[str, int]
    ) -> int:
        attributes = self._resolve_parent(page, known)
        try:
            result = self.content.update(record_id, attributes)
        except ContentStoreError as exc:
            raise _chained(RecordUpdateFailedError, page.key, exc) from exc
        self._stamp(page.key, record_id, attributes)
        return result

    def _live_record(self, record_id: int | None) -> Record | None:
        if not record_id:
            return None
        return self.content.fetch(record_id)

    def _resolve_parent(
        self, page: PageDefinition, known: dict[str, int]
    ) -> dict[str, typ.Any]:
        attributes = dict(page.attributes)
        parent = attributes.get(_PARENT_FIELD)
        if isinstance(parent, str):
            resolved = known.get(parent)
            if resolved is None:
                self.log.warning(
                    "Parent %r of page %s is not installed yet; using 0",
                    parent,
                    page.key,
                )
                resolved = 0
            attributes[_PARENT_FIELD] = resolved
        return attributes

    def _stamp(self, key: str, record_id: int, attributes: dict[str, typ.Any]) -> None:
        try:
            self.content.set_metadata(record_id, PAGE_VERSION_META, self.version)
            self.content.set_metadata(record_id, PAGE_CONFIG_META, attributes)
        except ContentStoreError as exc:
            self.log.warning(
                "Failed to stamp metadata on record %s for page %s: %s",
                record_id,
                key,
                exc,
            )

    def _fail(self, key: str, error: Exception, report: InstallReport) -> None:
        report.states[key] = PageState.FAILED
        report.errors[key] = error
        self.log.warning("%s", error)

    def _persist(self, report: InstallReport) -> None:
        declared = set(self.registry.keys())
        merged = {
            key: record_id
            for key, record_id in self.id_store.get_all().items()
            if key not in declared
        }
        merged.update(report.page_ids)
        labels = {
            key: page.title
            for key in report.page_ids
            if (page := self.registry.get(key)) is not None
        }
        if not self.id_store.save_all(merged, labels):
            self.log.warning("Failed to persist one or more page ids")


def _chained(
    error_cls: type[_RecordError], key: str, exc: ContentStoreError
) -> _RecordError:
    error = error_cls(key, str(exc))
    error.__cause__ = exc
    return error


__all__ = ["InstallationEngine"]
