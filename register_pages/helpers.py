"""One-shot helpers for registering pages and looking them up later.

These wrap :class:`PageRegistrar` for the common activation-hook flow where
a host declares a handful of pages once and afterwards only needs their ids
or URLs.

Examples
--------
>>> from register_pages import InMemoryContentStore, InMemorySettingsStore
>>> from register_pages.helpers import get_registered_page_id, register_pages
>>> content, settings = InMemoryContentStore(), InMemorySettingsStore()
>>> register_pages(
...     {"checkout": {"title": "Checkout", "content": "[checkout]"}},
...     "shop",
...     content=content,
...     settings=settings,
... )
{'checkout': 1}
>>> get_registered_page_id("checkout", "shop", settings=settings)
1
"""

from __future__ import annotations

import typing as typ

from ._constants import PAGES_OPTION
from .id_store import AggregateIDStore, PerKeyIDStore
from .registrar import PageRegistrar
from .settings import CallbackSettingsStore

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .content import ContentStore
    from .settings import GetOption, SettingsStore, UpdateOption


def register_pages(
    pages: cabc.Mapping[str, cabc.Mapping[str, typ.Any]],
    prefix: str = "",
    *,
    content: ContentStore,
    settings: SettingsStore | None = None,
    get_option: GetOption | None = None,
    update_option: UpdateOption | None = None,
) -> dict[str, int]:
    """Declare ``pages`` and install them in one call.

    Returns the ``{key: id}`` mapping produced by :meth:`PageRegistrar.install`.
    Pages that fail validation are logged and skipped.
    """
    registrar = PageRegistrar(
        content,
        settings,
        prefix=prefix,
        get_option=get_option,
        update_option=update_option,
    )
    registrar.declare_many(pages)
    return registrar.install()


def get_registered_page_id(
    key: str,
    prefix: str = "",
    *,
    settings: SettingsStore | None = None,
    get_option: GetOption | None = None,
) -> int | None:
    """Return the stored record id for ``key`` without verifying it is live."""
    if get_option is not None:
        return PerKeyIDStore(CallbackSettingsStore(get_option, None)).get(key)
    if settings is None:
        return None
    option_name = f"{prefix}_{PAGES_OPTION}" if prefix else PAGES_OPTION
    return AggregateIDStore(settings, option_name).get(key)


def get_registered_page_url(
    key: str,
    prefix: str = "",
    *,
    content: ContentStore,
    settings: SettingsStore | None = None,
    get_option: GetOption | None = None,
) -> str | None:
    """Return the permalink of the record registered under ``key``."""
    record_id = get_registered_page_id(
        key, prefix, settings=settings, get_option=get_option
    )
    return content.permalink(record_id) if record_id else None


__all__ = ["get_registered_page_id", "get_registered_page_url", "register_pages"]
