"""High-level entry point tying the registry, stores, and engines together.

:class:`PageRegistrar` is what host applications use at activation time:
declare pages (directly, in bulk, or from templates), call :meth:`install`,
and look up the resulting record ids and URLs afterwards.

Example
-------
.. code-block:: python

    from register_pages import InMemoryContentStore, PageRegistrar

    registrar = PageRegistrar(InMemoryContentStore(), prefix="shop")
    registrar.declare_many(
        {
            "checkout": {"title": "Checkout", "content": "[shop_checkout]"},
            "account": {"title": "My Account", "content": "[shop_account]"},
        }
    )
    page_ids = registrar.install()
    registrar.get_url("checkout")
"""

from __future__ import annotations

import logging
import typing as typ

from ._constants import BACKUP_OPTION, INSTALLED_OPTION, PAGES_OPTION, VERSION_OPTION
from .backup import BackupEngine
from .config import RegistrarConfig, TemplatePage
from .errors import ContentStoreError
from .guard import VersionGuard, is_older
from .id_store import build_id_store
from .installer import InstallationEngine
from .log import RegistrarLogger
from .policies import resolve_policy
from .registry import PageRegistry
from .settings import CallbackSettingsStore, InMemorySettingsStore
from .templates import TemplateStore

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import PageManifest
    from .content import ContentStore
    from .errors import RegistrationError
    from .models import BackupSnapshot, InstallReport, PageDefinition
    from .settings import GetOption, SettingsStore, UpdateOption

logger = logging.getLogger(__name__)


class PageRegistrar:
    """Declare pages and keep matching content records installed.

    Parameters
    ----------
    content : ContentStore
        Collaborator that creates, updates, fetches, and deletes records.
    settings : SettingsStore or None, optional
        Named value storage for the mapping, version guard, and backup.
        Defaults to an in-memory store.
    prefix : str, optional
        Prepended (``<prefix>_<name>``) to every option name unless custom
        option callbacks are supplied.
    config : RegistrarConfig or None, optional
        Version, defaults, update policy, and debug switches.
    get_option, update_option : callable or None, optional
        External settings-manager callbacks. When either is given, ids are
        stored per key as ``<key>_page`` and no prefix is applied.
    current_user : callable or None, optional
        Returns the author id used when the configured default author is 0.
    """

    def __init__(
        self,
        content: ContentStore,
        settings: SettingsStore | None = None,
        *,
        prefix: str = "",
        config: RegistrarConfig | None = None,
        get_option: GetOption | None = None,
        update_option: UpdateOption | None = None,
        current_user: cabc.Callable[[], int] | None = None,
    ) -> None:
        self.prefix = prefix
        self.config = config or RegistrarConfig()
        self.content = content
        self.uses_callbacks = get_option is not None or update_option is not None
        if self.uses_callbacks:
            self.settings: SettingsStore = CallbackSettingsStore(
                get_option, update_option
            )
        else:
            self.settings = settings if settings is not None else InMemorySettingsStore()
        self.log = RegistrarLogger(logger, prefix=prefix, debug=self.config.debug)

        defaults = dict(self.config.defaults)
        if not defaults.get("author") and current_user is not None:
            defaults["author"] = current_user()

        self.templates = TemplateStore()
        self.registry = PageRegistry(
            defaults, allow_empty_content=self.config.allow_empty_content
        )
        self.id_store = build_id_store(
            settings=self.settings,
            option_name=self.config.option_key or self.option_name(PAGES_OPTION),
            get_option=get_option,
            update_option=update_option,
        )
        self.guard = VersionGuard(
            self.settings,
            installed_option=self.option_name(INSTALLED_OPTION),
            version_option=self.option_name(VERSION_OPTION),
        )
        self.installer = InstallationEngine(
            registry=self.registry,
            content=content,
            id_store=self.id_store,
            guard=self.guard,
            version=self.config.version,
            policy=resolve_policy(self.config.update_policy),
            log=self.log,
        )
        self.backups = BackupEngine(
            settings=self.settings,
            option_name=self.option_name(BACKUP_OPTION),
            content=content,
            installer=self.installer,
            declare=self.declare_many,
            log=self.log,
        )
        self.last_report: InstallReport | None = None

    @classmethod
    def from_manifest(
        cls,
        manifest: PageManifest,
        content: ContentStore,
        settings: SettingsStore | None = None,
        **kwargs: typ.Any,
    ) -> PageRegistrar:
        """Build a registrar with the templates and pages of ``manifest``.

        Declaration failures are logged and skipped, as with
        :meth:`declare_many`.
        """
        registrar = cls(
            content, settings, prefix=manifest.prefix, config=manifest.config, **kwargs
        )
        for name, shape in manifest.templates.items():
            registrar.add_template(name, shape)
        for key, entry in manifest.pages.items():
            try:
                if isinstance(entry, TemplatePage):
                    registrar.add_page_from_template(
                        key, entry.template, entry.replacements
                    )
                else:
                    registrar.declare(key, entry)
            except ValueError as exc:
                registrar.log.warning("Failed to register page %s: %s", key, exc)
        return registrar

    def option_name(self, name: str) -> str:
        """Return ``name`` with the prefix applied, unless callbacks are in use."""
        if self.uses_callbacks or not self.prefix:
            return name
        return f"{self.prefix}_{name}"

    # Declarations

    def add_template(self, name: str, shape: cabc.Mapping[str, typ.Any]) -> PageRegistrar:
        self.templates.add_template(name, shape)
        return self

    def add_page_from_template(
        self,
        key: str,
        template: str,
        replacements: cabc.Mapping[str, str] | None = None,
    ) -> PageDefinition:
        """Expand ``template`` with ``replacements`` and declare it as ``key``.

        Raises
        ------
        TemplateNotFoundError
            If ``template`` was never added.
        InvalidKeyError, MissingRequiredFieldError
            If the expanded page fails validation.
        """
        return self.registry.declare(key, self.templates.expand(template, replacements))

    def declare(self, key: str, attributes: cabc.Mapping[str, typ.Any]) -> PageDefinition:
        return self.registry.declare(key, attributes)

    def declare_many(
        self, pages: cabc.Mapping[str, cabc.Mapping[str, typ.Any]]
    ) -> dict[str, RegistrationError]:
        return self.registry.declare_many(pages)

    add_page = declare
    add_pages = declare_many

    # Installation

    def install(self) -> dict[str, int]:
        """Create or verify every declared page and return ``{key: id}``."""
        if self.config.backup_on_upgrade and self._is_upgrade():
            self.log.event(
                "Version change detected",
                old=self.guard.stored_version,
                new=self.config.version,
            )
            self.backup()
        report = self.installer.install()
        self.last_report = report
        return dict(report.page_ids)

    def force_reinstall(self) -> bool:
        return self.installer.force_reinstall()

    def is_installed(self) -> bool:
        return self.guard.is_satisfied(self.config.version)

    def update_pages(self, *, force: bool = False) -> dict[str, int]:
        return self.installer.update_pages(force=force)

    def _is_upgrade(self) -> bool:
        stored = self.guard.stored_version
        if stored is None or not is_older(stored, self.config.version):
            return False
        return bool(self._tracked_ids())

    def _tracked_ids(self) -> dict[str, int]:
        """Return every stored id this registrar can see.

        The aggregate store holds ids for keys not declared in this session
        too; per-key storage can only be read for declared keys.
        """
        if self.uses_callbacks:
            return self.id_store.get_all(self.registry.keys())
        return self.id_store.get_all()

    # Lookups

    def get_all_ids(self, *, verify: bool = True) -> dict[str, int]:
        """Return stored ids, dropping those without a live record when ``verify``."""
        stored = self._tracked_ids()
        if not verify:
            return stored
        return {
            key: record_id
            for key, record_id in stored.items()
            if self.content.fetch(record_id) is not None
        }

    def get_id(self, key: str) -> int | None:
        """Return the live record id for ``key`` or ``None``."""
        record_id = self.id_store.get(key)
        if record_id and self.content.fetch(record_id) is not None:
            return record_id
        return None

    def exists(self, key: str) -> bool:
        return self.get_id(key) is not None

    def get_url(self, key: str) -> str | None:
        record_id = self.get_id(key)
        return self.content.permalink(record_id) if record_id else None

    def get_status(self, key: str) -> str | None:
        record_id = self.get_id(key)
        if record_id is None:
            return None
        record = self.content.fetch(record_id)
        return record.status if record else None

    # Mutations of installed records

    def set_meta(self, key: str, meta_key: str, value: typ.Any) -> bool:
        record_id = self.get_id(key)
        if record_id is None:
            return False
        return self.content.set_metadata(record_id, meta_key, value)

    def set_menu_positions(self, positions: cabc.Mapping[str, int]) -> dict[str, int]:
        """Apply ``menu_order`` values to installed pages; return those updated."""
        updated: dict[str, int] = {}
        for key, position in positions.items():
            record_id = self.get_id(key)
            if record_id is None:
                continue
            try:
                self.content.update(record_id, {"menu_order": int(position)})
            except ContentStoreError as exc:
                self.log.warning("Failed to set menu position for %s: %s", key, exc)
                continue
            updated[key] = int(position)
        return updated

    # Backup and teardown

    def backup(self) -> BackupSnapshot:
        return self.backups.backup(self.get_all_ids(verify=False))

    def restore(self) -> bool:
        """Reinstall pages from the stored backup.

        Raises
        ------
        NoBackupFoundError
            If no backup has been taken.
        """
        self.last_report = self.backups.restore()
        return True

    def uninstall(self, *, permanently: bool = False) -> bool:
        """Delete every tracked record and clear all persisted state."""
        self.log.event("Starting uninstallation", force=permanently)
        page_ids = self.get_all_ids(verify=False)
        for record_id in page_ids.values():
            self.content.delete(record_id, permanently=permanently)
        self.id_store.clear(page_ids)
        self.guard.reset()
        self.backups.discard()
        self.log.event("Uninstallation completed")
        return True


__all__ = ["PageRegistrar"]
