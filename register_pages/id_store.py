"""Persistence of page-key to record-id mappings.

Two backends share the :class:`IDStore` interface:

``AggregateIDStore``
    The whole ``{key: id}`` mapping lives under a single option name, read
    with one fetch and written with one write.

``PerKeyIDStore``
    Each key is stored under its own ``<key>_page`` option so external
    settings managers can expose the ids in their own selectors. The option
    prefix is not applied to these names. Values are written as
    ``{"value": id, "label": title}`` when a title is known; bare ids are
    accepted on read.

:func:`build_id_store` picks the per-key backend whenever custom option
callbacks are supplied.
"""

from __future__ import annotations

import abc
import logging
import typing as typ

from ._constants import PER_KEY_OPTION_TEMPLATE
from .models import StoredMapping
from .settings import CallbackSettingsStore

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .settings import GetOption, SettingsStore, UpdateOption

logger = logging.getLogger(__name__)


class IDStore(abc.ABC):
    """Read and write the key-to-record-id mapping."""

    @abc.abstractmethod
    def get_all(self, keys: cabc.Iterable[str] | None = None) -> dict[str, int]:
        """Return stored ids for ``keys``; missing entries are simply absent."""

    @abc.abstractmethod
    def save_all(
        self,
        mapping: cabc.Mapping[str, int],
        labels: cabc.Mapping[str, str] | None = None,
    ) -> bool:
        """Persist ``mapping`` and report whether every write succeeded."""

    @abc.abstractmethod
    def clear(self, keys: cabc.Iterable[str]) -> bool:
        """Remove stored ids for ``keys``."""

    def get(self, key: str) -> int | None:
        return self.get_all([key]).get(key)


class AggregateIDStore(IDStore):
    """Store the full mapping as one settings value."""

    def __init__(self, settings: SettingsStore, option_name: str) -> None:
        self.settings = settings
        self.option_name = option_name

    def _load(self) -> dict[str, int]:
        raw = self.settings.get(self.option_name, {}) or {}
        if not isinstance(raw, dict):
            logger.warning(
                "Ignoring malformed page mapping under %s", self.option_name
            )
            return {}
        mapping: dict[str, int] = {}
        for key, value in raw.items():
            stored = StoredMapping.from_option(str(key), value)
            if stored is not None:
                mapping[stored.key] = stored.record_id
        return mapping

    def get_all(self, keys: cabc.Iterable[str] | None = None) -> dict[str, int]:
        mapping = self._load()
        if keys is None:
            return mapping
        wanted = list(keys)
        return {key: mapping[key] for key in wanted if key in mapping}

    def save_all(
        self,
        mapping: cabc.Mapping[str, int],
        labels: cabc.Mapping[str, str] | None = None,
    ) -> bool:
        return bool(self.settings.set(self.option_name, dict(mapping)))

    def clear(self, keys: cabc.Iterable[str]) -> bool:
        return bool(self.settings.delete(self.option_name))


class PerKeyIDStore(IDStore):
    """Store one settings entry per page key, named ``<key>_page``."""

    def __init__(self, settings: SettingsStore) -> None:
        self.settings = settings

    @staticmethod
    def option_name(key: str) -> str:
        return PER_KEY_OPTION_TEMPLATE.format(key=key)

    def get_all(self, keys: cabc.Iterable[str] | None = None) -> dict[str, int]:
        mapping: dict[str, int] = {}
        for key in keys or ():
            stored = StoredMapping.from_option(
                key, self.settings.get(self.option_name(key))
            )
            if stored is not None:
                mapping[key] = stored.record_id
        return mapping

    def save_all(
        self,
        mapping: cabc.Mapping[str, int],
        labels: cabc.Mapping[str, str] | None = None,
    ) -> bool:
        labels = labels or {}
        results = []
        for key, record_id in mapping.items():
            stored = StoredMapping(key=key, record_id=record_id, label=labels.get(key))
            ok = bool(self.settings.set(self.option_name(key), stored.to_option()))
            if not ok:
                logger.warning("Failed to store record id for page %s", key)
            results.append(ok)
        return all(results)

    def clear(self, keys: cabc.Iterable[str]) -> bool:
        return all([self.settings.delete(self.option_name(key)) for key in keys])


def build_id_store(
    *,
    settings: SettingsStore,
    option_name: str,
    get_option: GetOption | None = None,
    update_option: UpdateOption | None = None,
) -> IDStore:
    """Return the per-key store when callbacks are given, else the aggregate one."""
    if get_option is not None or update_option is not None:
        return PerKeyIDStore(CallbackSettingsStore(get_option, update_option))
    return AggregateIDStore(settings, option_name)


__all__ = [
    "AggregateIDStore",
    "IDStore",
    "PerKeyIDStore",
    "build_id_store",
]
