"""Logger adapter that tags messages with the registrar's option prefix."""

from __future__ import annotations

import json
import logging
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class RegistrarLogger(logging.LoggerAdapter):
    """Prefix messages with ``[prefix]`` and gate debug output on a flag.

    Debug messages are only emitted when ``debug`` is enabled, mirroring a
    host-wide debug switch; warnings and errors always pass through.
    """

    def __init__(self, logger: logging.Logger, *, prefix: str = "", debug: bool = False) -> None:
        super().__init__(logger, {"prefix": prefix})
        self.prefix = prefix
        self.debug_enabled = debug

    def process(
        self, msg: typ.Any, kwargs: cabc.MutableMapping[str, typ.Any]
    ) -> tuple[typ.Any, cabc.MutableMapping[str, typ.Any]]:
        label = f"[{self.prefix}] " if self.prefix else ""
        return f"{label}{msg}", kwargs

    def event(self, message: str, **context: typ.Any) -> None:
        """Emit a debug-level lifecycle event with JSON-encoded context."""
        if not self.debug_enabled:
            return
        try:
            payload = json.dumps(context, default=str) if context else ""
        except ValueError:
            payload = repr(context)
        self.debug("%s %s", message, payload)


__all__ = ["RegistrarLogger"]
