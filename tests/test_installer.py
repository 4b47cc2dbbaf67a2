"""Unit tests for the reconciliation pass and the version guard."""

from __future__ import annotations

import logging
import typing as typ

import pytest

from register_pages import (
    ContentStoreError,
    InMemorySettingsStore,
    PageRegistrar,
    PageState,
    RecordCreateFailedError,
    RecordFetchFailedError,
    RecordUpdateFailedError,
)
from register_pages.config import RegistrarConfig
from register_pages.guard import is_older

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from register_pages import InMemoryContentStore

PageMap = dict[str, dict[str, typ.Any]]


def test_second_install_makes_no_content_calls(
    make_registrar: cabc.Callable[..., PageRegistrar],
    content: InMemoryContentStore,
) -> None:
    """A repeated pass with an unchanged version short-circuits entirely."""
    first = make_registrar().install()
    calls_after_first = list(content.calls)

    second_registrar = make_registrar()
    second = second_registrar.install()

    assert second == first, f"expected the stored mapping, got {second!r}"
    assert content.calls == calls_after_first, "guard must skip every content call"
    assert second_registrar.last_report is not None
    assert second_registrar.last_report.short_circuited
    assert content.count("create") == 2


def test_repeat_after_reset_creates_nothing_new(
    make_registrar: cabc.Callable[..., PageRegistrar],
    content: InMemoryContentStore,
) -> None:
    """Live records are verified rather than duplicated once the guard is cleared."""
    registrar = make_registrar()
    first = registrar.install()
    registrar.force_reinstall()

    second = registrar.install()

    assert second == first
    assert content.count("create") == 2, "no duplicate records may be created"
    assert registrar.last_report is not None
    assert registrar.last_report.keys_in(PageState.EXISTING) == ["about", "contact"]


def test_parent_key_resolves_to_created_id(
    make_registrar: cabc.Callable[..., PageRegistrar],
    content: InMemoryContentStore,
) -> None:
    """String parents resolve against ids created earlier in the same pass."""
    page_ids = make_registrar().install()

    contact = content.records[page_ids["contact"]]
    assert contact["post_parent"] == page_ids["about"], (
        f"expected parent {page_ids['about']}, got {contact['post_parent']!r}"
    )


def test_unresolved_parent_falls_back_to_zero(
    make_registrar: cabc.Callable[..., PageRegistrar],
    content: InMemoryContentStore,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A parent declared later resolves to 0 and a warning is logged."""
    pages = {
        "child": {"title": "Child", "content": "x", "parent": "later"},
        "later": {"title": "Later", "content": "y"},
    }
    with caplog.at_level(logging.WARNING, logger="register_pages"):
        page_ids = make_registrar(pages=pages).install()

    assert content.records[page_ids["child"]]["post_parent"] == 0
    assert "Parent 'later' of page child" in caplog.text
    assert "[shop]" in caplog.text, "log lines carry the option prefix"


def test_create_failure_is_isolated(
    make_failing_content: cabc.Callable[..., InMemoryContentStore],
    sample_pages: PageMap,
) -> None:
    """One rejected page is reported while the others install."""
    content = make_failing_content(fail_titles={"About Us"})
    settings = InMemorySettingsStore()
    registrar = PageRegistrar(content, settings, prefix="shop")
    registrar.declare_many(sample_pages)

    page_ids = registrar.install()

    report = registrar.last_report
    assert report is not None
    assert report.states["about"] is PageState.FAILED
    assert report.states["contact"] is PageState.CREATED
    assert isinstance(report.errors["about"], RecordCreateFailedError)
    assert isinstance(report.errors["about"].__cause__, ContentStoreError)
    assert "about" not in page_ids
    assert content.records[page_ids["contact"]]["post_parent"] == 0
    assert settings.values["shop_pages"] == {"contact": page_ids["contact"]}
    assert settings.values["shop_pages_installed"] is True


def test_nothing_changed_leaves_guard_unmarked(
    make_failing_content: cabc.Callable[..., InMemoryContentStore],
    sample_pages: PageMap,
) -> None:
    """When every page fails, the guard stays clear for the next attempt."""
    content = make_failing_content(fail_titles={"About Us", "Contact"})
    settings = InMemorySettingsStore()
    registrar = PageRegistrar(content, settings, prefix="shop")
    registrar.declare_many(sample_pages)

    assert registrar.install() == {}
    assert "shop_pages_installed" not in settings.values
    assert not registrar.is_installed()


def test_satisfied_guard_returns_stored_ids_without_calls(
    content: InMemoryContentStore,
    sample_pages: PageMap,
) -> None:
    """A preloaded guard at the current version short-circuits installation."""
    settings = InMemorySettingsStore(
        {"pages": {"about": 5}, "pages_installed": True, "pages_version": "1.0.0"}
    )
    registrar = PageRegistrar(
        content, settings, config=RegistrarConfig(version="1.0.0")
    )
    registrar.declare_many(sample_pages)

    assert registrar.install() == {"about": 5}
    assert content.calls == [], f"expected no content calls, got {content.calls!r}"


def test_version_bump_updates_every_page(
    make_registrar: cabc.Callable[..., PageRegistrar],
    content: InMemoryContentStore,
    settings: InMemorySettingsStore,
) -> None:
    """Records stamped with an older version are updated on upgrade."""
    old_ids = make_registrar(version="0.9.0").install()

    upgraded = make_registrar(version="1.0.0")
    new_ids = upgraded.install()

    assert new_ids == old_ids
    assert content.count("update") == 2
    assert upgraded.last_report is not None
    assert upgraded.last_report.keys_in(PageState.UPDATED) == ["about", "contact"]
    assert settings.values["shop_pages_version"] == "1.0.0"
    for record_id in new_ids.values():
        assert content.metadata[record_id]["_page_version"] == "1.0.0"
    assert set(settings.values["shop_pages_backup"]) == {"about", "contact"}, (
        "upgrades snapshot tracked records first"
    )


def test_content_policy_updates_only_drifted_pages(
    make_registrar: cabc.Callable[..., PageRegistrar],
    content: InMemoryContentStore,
    sample_pages: PageMap,
) -> None:
    """The content policy rewrites pages whose declaration changed."""
    make_registrar(update_policy="content").install()
    changed = dict(sample_pages)
    changed["about"] = {"title": "About the Shop", "content": "Who we are"}
    registrar = make_registrar(update_policy="content", pages=changed)
    registrar.force_reinstall()

    page_ids = registrar.install()

    report = registrar.last_report
    assert report is not None
    assert report.states == {
        "about": PageState.UPDATED,
        "contact": PageState.EXISTING,
    }, f"unexpected states {report.states!r}"
    assert content.records[page_ids["about"]]["post_title"] == "About the Shop"


def test_update_failure_keeps_existing_id(
    make_failing_content: cabc.Callable[..., InMemoryContentStore],
    sample_pages: PageMap,
) -> None:
    """A rejected update marks the page failed but keeps its mapping."""
    content = make_failing_content(fail_titles={"Broken"})
    settings = InMemorySettingsStore()
    first = PageRegistrar(
        content, settings, config=RegistrarConfig(update_policy="content")
    )
    first.declare_many(sample_pages)
    original = first.install()

    second = PageRegistrar(
        content, settings, config=RegistrarConfig(update_policy="content")
    )
    second.declare_many({**sample_pages, "about": {"title": "Broken", "content": "x"}})
    second.force_reinstall()
    page_ids = second.install()

    report = second.last_report
    assert report is not None
    assert report.states["about"] is PageState.FAILED
    assert isinstance(report.errors["about"], RecordUpdateFailedError)
    assert page_ids["about"] == original["about"]


def test_lookup_failure_keeps_stored_id(
    make_failing_content: cabc.Callable[..., InMemoryContentStore],
    sample_pages: PageMap,
) -> None:
    """A lookup that times out keeps the tracked id instead of recreating it."""
    content = make_failing_content()
    settings = InMemorySettingsStore()
    first = PageRegistrar(content, settings)
    first.declare("about", sample_pages["about"])
    original = first.install()

    second = PageRegistrar(content, settings)
    second.declare_many(sample_pages)
    second.force_reinstall()
    content.fail_fetch_ids.add(original["about"])
    page_ids = second.install()

    report = second.last_report
    assert report is not None
    assert report.states["about"] is PageState.FAILED
    assert isinstance(report.errors["about"], RecordFetchFailedError)
    assert isinstance(report.errors["about"].__cause__, ContentStoreError)
    assert report.states["contact"] is PageState.CREATED
    assert page_ids["about"] == original["about"], "stored id must survive a lookup failure"
    assert settings.values["pages"]["about"] == original["about"]
    assert content.records[page_ids["contact"]]["post_parent"] == original["about"]

    second.force_reinstall()
    second.install()

    titles = [record["post_title"] for record in content.records.values()]
    assert titles.count("About Us") == 1, f"duplicate records created: {titles!r}"


def test_metadata_failure_keeps_created_record(
    make_failing_content: cabc.Callable[..., InMemoryContentStore],
    sample_pages: PageMap,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A record whose metadata stamp fails is still tracked as created."""
    content = make_failing_content(fail_metadata=True)
    settings = InMemorySettingsStore()
    registrar = PageRegistrar(content, settings)
    registrar.declare_many(sample_pages)

    with caplog.at_level(logging.WARNING, logger="register_pages"):
        page_ids = registrar.install()

    report = registrar.last_report
    assert report is not None
    assert report.keys_in(PageState.CREATED) == ["about", "contact"]
    assert report.errors == {}
    assert settings.values["pages"] == page_ids
    assert registrar.is_installed()
    assert "Failed to stamp metadata" in caplog.text

    content.fail_metadata = False
    registrar.force_reinstall()
    assert registrar.install() == page_ids
    assert content.count("create") == 2, "no duplicate records may be created"


def test_satisfied_guard_after_downgrade_makes_no_calls(
    make_registrar: cabc.Callable[..., PageRegistrar],
    content: InMemoryContentStore,
    settings: InMemorySettingsStore,
) -> None:
    """A newer stored version satisfies the guard without taking a backup."""
    first = make_registrar(version="2.0.0").install()
    calls_before = list(content.calls)

    registrar = make_registrar(version="1.0.0")
    page_ids = registrar.install()

    assert page_ids == first
    assert content.calls == calls_before, f"unexpected calls {content.calls!r}"
    assert "shop_pages_backup" not in settings.values
    assert registrar.last_report is not None
    assert registrar.last_report.short_circuited


def test_deleted_record_is_recreated(
    make_registrar: cabc.Callable[..., PageRegistrar],
    content: InMemoryContentStore,
    settings: InMemorySettingsStore,
) -> None:
    """Stored ids that no longer resolve trigger a fresh create."""
    registrar = make_registrar()
    first = registrar.install()
    content.delete(first["about"], permanently=True)
    registrar.force_reinstall()

    second = registrar.install()

    assert second["about"] != first["about"]
    assert second["contact"] == first["contact"]
    assert settings.values["shop_pages"] == second


def test_undeclared_keys_survive_persistence(
    make_registrar: cabc.Callable[..., PageRegistrar],
    settings: InMemorySettingsStore,
) -> None:
    """Mappings for keys outside this pass are merged, not discarded."""
    settings.values["shop_pages"] = {"legacy": 99}

    page_ids = make_registrar().install()

    assert settings.values["shop_pages"] == {"legacy": 99, **page_ids}


def test_update_pages_force_rewrites_live_records(
    make_registrar: cabc.Callable[..., PageRegistrar],
    content: InMemoryContentStore,
) -> None:
    """Forced updates bypass the policy for every tracked record."""
    registrar = make_registrar(update_policy="never")
    page_ids = registrar.install()

    assert registrar.update_pages() == {}
    assert registrar.update_pages(force=True) == page_ids
    assert content.count("update") == 2


@pytest.mark.parametrize(
    ("stored", "current", "expected"),
    [
        (None, "1.0.0", True),
        ("0.9.0", "1.0.0", True),
        ("1.0.0", "1.0.0", False),
        ("1.10.0", "1.9.0", False),
        ("2.0", "1.0.0", False),
        ("legacy", "1.0.0", True),
    ],
)
def test_is_older(stored: str | None, current: str, expected: bool) -> None:
    """Versions compare numerically, with inequality for unparseable strings."""
    assert is_older(stored, current) is expected
