"""Key validation and translation of simplified page attributes.

Callers describe pages with short field names (``title``, ``content``,
``parent``...). The content host expects its native names (``post_title``,
``post_content``, ``post_parent``...). :func:`prepare_attributes` performs
the rename, checks required fields, and layers caller values over the
configured defaults.

Examples
--------
>>> from register_pages.attributes import is_valid_key, prepare_attributes
>>> is_valid_key("about-us")
True
>>> is_valid_key("About Us")
False
>>> attrs = prepare_attributes({"title": "About", "content": "Hi"}, {"status": "draft"})
>>> attrs["post_title"], attrs["post_status"]
('About', 'draft')
"""

from __future__ import annotations

import typing as typ

from ._constants import FIELD_MAP, KEY_PATTERN, REQUIRED_FIELDS
from .errors import MissingRequiredFieldError

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def is_valid_key(key: str) -> bool:
    """Return ``True`` when ``key`` is non-empty and only uses ``[a-z0-9_-]``."""
    return bool(key) and KEY_PATTERN.fullmatch(key) is not None


def validate_required(
    raw: cabc.Mapping[str, typ.Any], *, allow_empty_content: bool = False
) -> None:
    """Raise :class:`MissingRequiredFieldError` for an empty title or content."""
    for field in REQUIRED_FIELDS:
        if field == "content" and allow_empty_content and "content" in raw:
            continue
        if not raw.get(field):
            raise MissingRequiredFieldError(field)


def map_field_names(raw: cabc.Mapping[str, typ.Any]) -> dict[str, typ.Any]:
    """Rename simplified fields to host names, passing unknown fields through."""
    return {FIELD_MAP.get(name, name): value for name, value in raw.items()}


def default_attributes(defaults: cabc.Mapping[str, typ.Any]) -> dict[str, typ.Any]:
    """Return defaults keyed by host field names.

    Defaults are written in the short form (``status``, ``comment_status``).
    Names in the mapping table are renamed; anything else gains the ``post_``
    prefix unless it already carries a host-native name.
    """
    resolved: dict[str, typ.Any] = {}
    for name, value in defaults.items():
        if name in FIELD_MAP:
            resolved[FIELD_MAP[name]] = value
        elif name.startswith("post_") or name.endswith("_status"):
            resolved[name] = value
        else:
            resolved[f"post_{name}"] = value
    return resolved


def prepare_attributes(
    raw: cabc.Mapping[str, typ.Any],
    defaults: cabc.Mapping[str, typ.Any] | None = None,
    *,
    allow_empty_content: bool = False,
) -> dict[str, typ.Any]:
    """Validate and translate ``raw`` into host-native record attributes.

    Parameters
    ----------
    raw : Mapping[str, Any]
        Simplified page attributes supplied by the caller.
    defaults : Mapping[str, Any] or None, optional
        Short-form defaults merged underneath ``raw``.
    allow_empty_content : bool, optional
        Accept an explicitly empty ``content`` value.

    Returns
    -------
    dict[str, Any]
        Host-native attributes with caller values taking precedence.

    Raises
    ------
    MissingRequiredFieldError
        If ``title`` or ``content`` is empty or absent.
    """
    validate_required(raw, allow_empty_content=allow_empty_content)
    merged = default_attributes(defaults or {})
    merged.update(map_field_names(raw))
    return merged


__all__ = [
    "default_attributes",
    "is_valid_key",
    "map_field_names",
    "prepare_attributes",
    "validate_required",
]
