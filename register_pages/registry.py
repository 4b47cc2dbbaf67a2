"""In-memory collection of pages declared ahead of installation."""

from __future__ import annotations

import logging
import typing as typ

from .attributes import is_valid_key, prepare_attributes
from .errors import InvalidKeyError, RegistrationError
from .models import PageDefinition

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)


class PageRegistry:
    """Ordered mapping of page keys to resolved page definitions.

    Declaring a key twice replaces the earlier definition. Iteration follows
    first-declaration order, which is also the order pages are installed in.
    """

    def __init__(
        self,
        defaults: cabc.Mapping[str, typ.Any] | None = None,
        *,
        allow_empty_content: bool = False,
    ) -> None:
        self._defaults = dict(defaults or {})
        self._allow_empty_content = allow_empty_content
        self._pages: dict[str, PageDefinition] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._pages

    def __len__(self) -> int:
        return len(self._pages)

    def __iter__(self) -> cabc.Iterator[PageDefinition]:
        return iter(list(self._pages.values()))

    def keys(self) -> list[str]:
        return list(self._pages)

    def get(self, key: str) -> PageDefinition | None:
        return self._pages.get(key)

    def declare(self, key: str, raw: cabc.Mapping[str, typ.Any]) -> PageDefinition:
        """Validate and store one page.

        Raises
        ------
        InvalidKeyError
            If ``key`` does not match ``[a-z0-9_-]+``.
        MissingRequiredFieldError
            If ``title`` or ``content`` is missing.
        """
        if not is_valid_key(key):
            raise InvalidKeyError(key)
        attributes = prepare_attributes(
            raw, self._defaults, allow_empty_content=self._allow_empty_content
        )
        page = PageDefinition(key=key, attributes=attributes)
        self._pages[key] = page
        return page

    def declare_many(
        self, pages: cabc.Mapping[str, cabc.Mapping[str, typ.Any]]
    ) -> dict[str, RegistrationError]:
        """Declare each page independently and return the failures by key."""
        failures: dict[str, RegistrationError] = {}
        for key, raw in pages.items():
            try:
                self.declare(key, raw)
            except RegistrationError as exc:
                logger.warning("Failed to register page %s: %s", key, exc)
                failures[key] = exc
        return failures

    def clear(self) -> None:
        self._pages.clear()


__all__ = ["PageRegistry"]
