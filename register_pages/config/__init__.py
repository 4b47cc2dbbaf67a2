"""Registrar options and YAML page manifests.

This subpackage defines :class:`RegistrarConfig`, the typed replacement for
loose option arrays, and :func:`load_page_manifest`, which parses a
``pages.yaml`` file into a :class:`PageManifest` of templates and page
declarations ready for :meth:`PageRegistrar.from_manifest`.

Examples
--------
>>> from pathlib import Path
>>> from register_pages.config import load_page_manifest
>>> manifest = load_page_manifest(Path("config/pages.yaml"))  # doctest: +SKIP
>>> manifest.config.version  # doctest: +SKIP
'1.0.0'
"""

from .loader import load_page_manifest
from .models import PageManifest, RegistrarConfig, TemplatePage

__all__ = [
    "PageManifest",
    "RegistrarConfig",
    "TemplatePage",
    "load_page_manifest",
]
