"""Settings-store collaborators used to persist mappings and guards.

Three implementations share the :class:`SettingsStore` protocol:

* :class:`InMemorySettingsStore` keeps values in a dictionary for tests and
  dry runs.
* :class:`TomlSettingsStore` persists values into a TOML file with
  ``tomlkit``, preserving any unrelated tables already in the document.
* :class:`CallbackSettingsStore` adapts a pair of caller-supplied
  ``get(name)``/``set(name, value)`` functions, typically bound to an
  external settings manager.
"""

from __future__ import annotations

import copy
import typing as typ

import tomlkit
from tomlkit.exceptions import ParseError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

GetOption = typ.Callable[[str], typ.Any]
UpdateOption = typ.Callable[[str, typ.Any], bool]


class SettingsStore(typ.Protocol):
    """Named key-value storage shared by the registrar components."""

    def get(self, name: str, default: typ.Any = None) -> typ.Any:
        """Return the value stored under ``name`` or ``default``."""

    def set(self, name: str, value: typ.Any) -> bool:
        """Store ``value`` under ``name`` and report success."""

    def delete(self, name: str) -> bool:
        """Remove ``name`` and report whether it existed."""


class InMemorySettingsStore:
    """Dictionary-backed settings store."""

    def __init__(self, initial: cabc.Mapping[str, typ.Any] | None = None) -> None:
        self.values: dict[str, typ.Any] = dict(initial or {})

    def get(self, name: str, default: typ.Any = None) -> typ.Any:
        if name not in self.values:
            return default
        return copy.deepcopy(self.values[name])

    def set(self, name: str, value: typ.Any) -> bool:
        self.values[name] = copy.deepcopy(value)
        return True

    def delete(self, name: str) -> bool:
        return self.values.pop(name, None) is not None


class CallbackSettingsStore:
    """Settings store delegating to caller-supplied get/update functions.

    The callbacks are used verbatim: names are never prefixed. Deleting a
    value writes ``None`` through the update callback because external
    settings managers rarely expose a delete hook.
    """

    def __init__(
        self, get_option: GetOption | None, update_option: UpdateOption | None
    ) -> None:
        self._get_option = get_option
        self._update_option = update_option

    def get(self, name: str, default: typ.Any = None) -> typ.Any:
        if self._get_option is None:
            return default
        value = self._get_option(name)
        return default if value is None else value

    def set(self, name: str, value: typ.Any) -> bool:
        if self._update_option is None:
            return False
        return bool(self._update_option(name, value))

    def delete(self, name: str) -> bool:
        return self.set(name, None)


class TomlSettingsStore:
    """Persist settings as top-level entries in a TOML document."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> tomlkit.TOMLDocument:
        try:
            return tomlkit.parse(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return tomlkit.document()
        except ParseError as exc:
            msg = f"Unable to parse settings TOML at {self.path}"
            raise ValueError(msg) from exc

    def _write(self, doc: tomlkit.TOMLDocument) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(tomlkit.dumps(doc), encoding="utf-8")

    def get(self, name: str, default: typ.Any = None) -> typ.Any:
        return self._load().unwrap().get(name, default)

    def set(self, name: str, value: typ.Any) -> bool:
        doc = self._load()
        if value is None:
            doc.pop(name, None)
        else:
            doc[name] = _to_toml_value(value)
        self._write(doc)
        return True

    def delete(self, name: str) -> bool:
        doc = self._load()
        if name not in doc:
            return False
        del doc[name]
        self._write(doc)
        return True


def _to_toml_value(value: typ.Any) -> typ.Any:
    """Convert ``value`` into TOML-safe items, keeping mappings inline.

    Inline tables keep every entry a single top-level line so scalar
    settings never end up nested under a table header. ``None`` is dropped.
    """
    match value:
        case dict():
            table = tomlkit.inline_table()
            for key, item in value.items():
                if item is not None:
                    table[str(key)] = _to_toml_value(item)
            return table
        case list() | tuple():
            array = tomlkit.array()
            array.extend(_to_toml_value(item) for item in value if item is not None)
            return array
        case _:
            return value


__all__ = [
    "CallbackSettingsStore",
    "GetOption",
    "InMemorySettingsStore",
    "SettingsStore",
    "TomlSettingsStore",
    "UpdateOption",
]
