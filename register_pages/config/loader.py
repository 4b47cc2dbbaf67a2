"""Load YAML page manifests into typed dataclasses."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from ruamel.yaml import YAML

from ..errors import ManifestError
from .models import PageManifest, RegistrarConfig, TemplatePage

if typ.TYPE_CHECKING:
    from pathlib import Path


def load_page_manifest(path: Path) -> PageManifest:
    """Load a YAML manifest describing pages to register.

    Parameters
    ----------
    path : Path
        Filesystem path to the manifest (for example, ``pages.yaml``).

    Returns
    -------
    PageManifest
        Prefix, registrar options, templates, and page declarations. Pages
        that name a ``template`` become :class:`TemplatePage` entries.

    Raises
    ------
    FileNotFoundError
        If the manifest does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    ManifestError
        If a section has the wrong shape or a page entry is not a mapping.

    Examples
    --------
    >>> from pathlib import Path
    >>> manifest = load_page_manifest(Path("pages.yaml"))  # doctest: +SKIP
    >>> sorted(manifest.pages)  # doctest: +SKIP
    ['about', 'contact']
    """
    if not path.exists():
        msg = f"Manifest file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)

    raw: dict[str, typ.Any] = dict(loaded)
    config_raw = _section(raw, "config")
    templates_raw = _section(raw, "templates")
    pages_raw = _section(raw, "pages")

    templates: dict[str, dict[str, typ.Any]] = {}
    for name, shape in templates_raw.items():
        if not isinstance(shape, cabc.Mapping):
            msg = f"Template '{name}' must be a mapping."
            raise ManifestError(msg)
        templates[str(name)] = dict(shape)

    pages: dict[str, dict[str, typ.Any] | TemplatePage] = {}
    for key, payload in pages_raw.items():
        pages[str(key)] = _build_page_entry(str(key), payload)

    return PageManifest(
        prefix=str(raw.get("prefix") or ""),
        config=RegistrarConfig.from_mapping(config_raw),
        templates=templates,
        pages=pages,
    )


def _section(raw: cabc.Mapping[str, typ.Any], name: str) -> dict[str, typ.Any]:
    value = raw.get(name) or {}
    if not isinstance(value, cabc.Mapping):
        msg = f"Section '{name}' must be a mapping."
        raise ManifestError(msg)
    return dict(value)


def _build_page_entry(key: str, payload: object) -> dict[str, typ.Any] | TemplatePage:
    match payload:
        case {"template": str() as template, **rest}:
            replacements = rest.get("replacements") or {}
            if not isinstance(replacements, cabc.Mapping):
                msg = f"Page '{key}' replacements must be a mapping."
                raise ManifestError(msg)
            return TemplatePage(
                template=template,
                replacements={str(k): str(v) for k, v in replacements.items()},
            )
        case cabc.Mapping():
            return dict(payload)
        case _:
            msg = f"Page '{key}' must be a mapping."
            raise ManifestError(msg)


__all__ = ["load_page_manifest"]
