"""Snapshot and restore of records tracked by the registrar."""

from __future__ import annotations

import logging
import typing as typ

from ._constants import PAGE_CONFIG_META, PAGE_VERSION_META
from .errors import NoBackupFoundError
from .log import RegistrarLogger
from .models import BackupEntry, BackupSnapshot

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .content import ContentStore
    from .installer import InstallationEngine
    from .models import InstallReport
    from .settings import SettingsStore

_STAMP_KEYS = frozenset({PAGE_CONFIG_META, PAGE_VERSION_META})


class BackupEngine:
    """Capture live records into a settings entry and replay them later.

    ``restore`` re-declares every snapshot entry through ``declare`` and runs
    a fresh installation pass, so records whose ids no longer resolve are
    recreated while surviving records are left in place.
    """

    def __init__(
        self,
        *,
        settings: SettingsStore,
        option_name: str,
        content: ContentStore,
        installer: InstallationEngine,
        declare: cabc.Callable[[cabc.Mapping[str, cabc.Mapping[str, typ.Any]]], object],
        log: RegistrarLogger | None = None,
    ) -> None:
        self.settings = settings
        self.option_name = option_name
        self.content = content
        self.installer = installer
        self.declare = declare
        self.log = log or RegistrarLogger(logging.getLogger(__name__))

    def backup(self, page_ids: cabc.Mapping[str, int]) -> BackupSnapshot:
        """Snapshot every record in ``page_ids`` that still resolves."""
        snapshot = BackupSnapshot()
        for key, record_id in page_ids.items():
            record = self.content.fetch(record_id)
            if record is None:
                continue
            snapshot.entries[key] = BackupEntry(
                title=record.title,
                content=record.content,
                status=record.status,
                meta=self.content.get_metadata(record_id),
            )
        self.settings.set(self.option_name, snapshot.to_payload())
        self.log.event("Created pages backup", count=len(snapshot))
        return snapshot

    def load(self) -> BackupSnapshot:
        return BackupSnapshot.from_payload(self.settings.get(self.option_name, {}))

    def restore(self) -> InstallReport:
        """Reinstall pages from the persisted snapshot.

        Raises
        ------
        NoBackupFoundError
            If no snapshot (or an empty one) is stored.
        """
        snapshot = self.load()
        if not snapshot.entries:
            self.log.event("No backup found to restore")
            raise NoBackupFoundError
        self.log.event("Starting backup restoration", pages=len(snapshot))
        self.installer.force_reinstall()
        self.declare(
            {key: entry.as_declaration() for key, entry in snapshot.entries.items()}
        )
        report = self.installer.install()
        for key, record_id in report.page_ids.items():
            entry = snapshot.entries.get(key)
            if entry is None:
                continue
            for meta_key, value in entry.meta.items():
                if meta_key in _STAMP_KEYS:
                    continue
                self.content.set_metadata(record_id, meta_key, value)
        return report

    def discard(self) -> bool:
        return bool(self.settings.delete(self.option_name))


__all__ = ["BackupEngine"]
