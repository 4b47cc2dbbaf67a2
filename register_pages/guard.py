"""Version-gated marker that short-circuits repeated installations.

The guard stores an ``installed`` flag and the version string the last
successful pass ran with. Installation is considered satisfied when the flag
is set and the stored version is at least the configured one.
"""

from __future__ import annotations

import typing as typ

from packaging.version import InvalidVersion, Version

if typ.TYPE_CHECKING:
    from .settings import SettingsStore


def is_older(stored: str | None, current: str) -> bool:
    """Return ``True`` when ``stored`` is an earlier version than ``current``.

    Unparseable versions fall back to string equality, so any difference
    counts as older. A missing stored version is always older.

    Examples
    --------
    >>> is_older("0.9.0", "1.0.0")
    True
    >>> is_older("1.0.0", "1.0")
    False
    >>> is_older(None, "1.0.0")
    True
    """
    if not stored:
        return True
    try:
        return Version(str(stored)) < Version(current)
    except InvalidVersion:
        return str(stored) != current


class VersionGuard:
    """Persisted ``(installed, version)`` pair held in a settings store."""

    def __init__(
        self, settings: SettingsStore, *, installed_option: str, version_option: str
    ) -> None:
        self.settings = settings
        self.installed_option = installed_option
        self.version_option = version_option

    @property
    def stored_version(self) -> str | None:
        value = self.settings.get(self.version_option)
        return str(value) if value else None

    @property
    def installed(self) -> bool:
        return bool(self.settings.get(self.installed_option, False))

    def is_satisfied(self, version: str) -> bool:
        """Return ``True`` when a pass already completed for ``version``."""
        return self.installed and not is_older(self.stored_version, version)

    def mark(self, version: str) -> bool:
        flag_ok = self.settings.set(self.installed_option, True)
        version_ok = self.settings.set(self.version_option, version)
        return bool(flag_ok and version_ok)

    def clear(self) -> bool:
        """Drop the installed flag so the next pass reconciles again."""
        return bool(self.settings.delete(self.installed_option))

    def reset(self) -> bool:
        """Forget both the flag and the stored version."""
        flag_ok = self.settings.delete(self.installed_option)
        version_ok = self.settings.delete(self.version_option)
        return bool(flag_ok or version_ok)


__all__ = ["VersionGuard", "is_older"]
