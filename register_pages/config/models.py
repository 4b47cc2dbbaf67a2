"""Typed dataclasses describing registrar configuration and page manifests."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .._constants import DEFAULT_ATTRIBUTES, LIBRARY_VERSION

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from ..policies import UpdatePolicy


def _default_attributes() -> dict[str, typ.Any]:
    return dict(DEFAULT_ATTRIBUTES)


@dc.dataclass(slots=True)
class RegistrarConfig:
    """Options recognised by :class:`register_pages.PageRegistrar`.

    Attributes
    ----------
    version : str
        Version string the version guard and ``version`` policy compare
        against.
    option_key : str or None
        Settings name for the aggregate mapping; derived from the prefix
        (``<prefix>_pages``) when ``None``.
    defaults : dict[str, Any]
        Short-form attribute defaults merged under every declared page.
    debug : bool
        Emit lifecycle events through the ``register_pages`` logger.
    allow_empty_content : bool
        Accept pages whose ``content`` is explicitly empty.
    update_policy : str or callable
        ``never``, ``version``, ``content``, or a custom predicate.
    backup_on_upgrade : bool
        Snapshot tracked records before reconciling a new version.
    """

    version: str = LIBRARY_VERSION
    option_key: str | None = None
    defaults: dict[str, typ.Any] = dc.field(default_factory=_default_attributes)
    debug: bool = False
    allow_empty_content: bool = False
    update_policy: str | UpdatePolicy = "version"
    backup_on_upgrade: bool = True

    @classmethod
    def from_mapping(cls, data: cabc.Mapping[str, typ.Any] | None) -> RegistrarConfig:
        """Build a config from a loose mapping, keeping defaults for gaps."""
        data = data or {}
        base = cls()
        defaults = dict(base.defaults)
        defaults.update(data.get("defaults") or {})
        return cls(
            version=str(data.get("version", base.version)),
            option_key=data.get("option_key", base.option_key),
            defaults=defaults,
            debug=bool(data.get("debug", base.debug)),
            allow_empty_content=bool(
                data.get("allow_empty_content", base.allow_empty_content)
            ),
            update_policy=data.get("update_policy", base.update_policy),
            backup_on_upgrade=bool(
                data.get("backup_on_upgrade", base.backup_on_upgrade)
            ),
        )


@dc.dataclass(slots=True)
class TemplatePage:
    """A manifest entry that expands a named template."""

    template: str
    replacements: dict[str, str] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class PageManifest:
    """Pages, templates, and options loaded from a YAML manifest."""

    prefix: str = ""
    config: RegistrarConfig = dc.field(default_factory=RegistrarConfig)
    templates: dict[str, dict[str, typ.Any]] = dc.field(default_factory=dict)
    pages: dict[str, dict[str, typ.Any] | TemplatePage] = dc.field(
        default_factory=dict
    )


__all__ = ["PageManifest", "RegistrarConfig", "TemplatePage"]
