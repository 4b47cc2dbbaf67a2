"""Declarative registration of content pages for a content-management host.

Callers declare named pages, optionally through reusable templates, and
:class:`PageRegistrar` makes sure a content record exists for each of them,
tracking the host-assigned ids between runs and skipping redundant passes
through a version guard.

Exports
-------
- ``PageRegistrar``: declare, install, look up, back up, and uninstall pages.
- ``RegistrarConfig``: typed registrar options.
- ``InMemoryContentStore`` / ``RestContentStore``: content-store collaborators.
- ``InMemorySettingsStore`` / ``TomlSettingsStore``: settings-store collaborators.

Examples
--------
>>> from register_pages import InMemoryContentStore, PageRegistrar
>>> registrar = PageRegistrar(InMemoryContentStore(), prefix="shop")
>>> _ = registrar.declare("about", {"title": "About", "content": "Hello"})
>>> registrar.install()
{'about': 1}
"""

from __future__ import annotations

from .config import PageManifest, RegistrarConfig, load_page_manifest
from .content import ContentStore, InMemoryContentStore
from .errors import (
    ContentStoreError,
    InvalidKeyError,
    ManifestError,
    MissingRequiredFieldError,
    NoBackupFoundError,
    RecordCreateFailedError,
    RecordFetchFailedError,
    RecordUpdateFailedError,
    RegistrationError,
    TemplateNotFoundError,
)
from .helpers import get_registered_page_id, get_registered_page_url, register_pages
from .models import BackupSnapshot, InstallReport, PageDefinition, PageState, Record
from .registrar import PageRegistrar
from .rest import RestContentStore
from .settings import InMemorySettingsStore, SettingsStore, TomlSettingsStore

__all__ = [
    "BackupSnapshot",
    "ContentStore",
    "ContentStoreError",
    "InMemoryContentStore",
    "InMemorySettingsStore",
    "InstallReport",
    "InvalidKeyError",
    "ManifestError",
    "MissingRequiredFieldError",
    "NoBackupFoundError",
    "PageDefinition",
    "PageManifest",
    "PageRegistrar",
    "PageState",
    "Record",
    "RecordCreateFailedError",
    "RecordFetchFailedError",
    "RecordUpdateFailedError",
    "RegistrationError",
    "RestContentStore",
    "SettingsStore",
    "TemplateNotFoundError",
    "TomlSettingsStore",
    "get_registered_page_id",
    "get_registered_page_url",
    "load_page_manifest",
    "register_pages",
]
