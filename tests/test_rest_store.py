"""Unit tests for the REST-backed content store."""

from __future__ import annotations

import typing as typ

import pytest
import requests

from register_pages import ContentStoreError, RestContentStore

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture


def _response(
    mocker: MockerFixture, status: int, payload: object = None
) -> typ.Any:
    response = mocker.Mock()
    response.status_code = status
    response.text = "" if payload is None else str(payload)
    response.json.return_value = payload
    return response


@pytest.fixture
def session(mocker: MockerFixture) -> typ.Any:
    """Return a mocked requests session."""
    return mocker.Mock(spec=requests.Session)


def test_create_posts_mapped_payload(mocker: MockerFixture, session: typ.Any) -> None:
    """Host field names are translated before POSTing to the collection."""
    session.request.return_value = _response(mocker, 201, {"id": 17})
    store = RestContentStore(
        "https://example.invalid/",
        username="admin",
        app_password="abcd efgh",
        session=session,
    )

    record_id = store.create(
        {
            "post_title": "About",
            "post_content": "Hello",
            "post_status": "publish",
            "post_type": "page",
            "post_parent": 3,
        }
    )

    assert record_id == 17
    method, url = session.request.call_args.args
    assert (method, url) == ("POST", "https://example.invalid/wp-json/wp/v2/pages"), (
        f"unexpected request {method} {url}"
    )
    kwargs = session.request.call_args.kwargs
    assert kwargs["json"] == {
        "title": "About",
        "content": "Hello",
        "status": "publish",
        "parent": 3,
    }
    assert kwargs["timeout"] == 10.0
    assert session.auth == ("admin", "abcd efgh")


def test_fetch_reads_raw_fields(mocker: MockerFixture, session: typ.Any) -> None:
    """Fetched records prefer raw text over rendered HTML."""
    session.request.return_value = _response(
        mocker,
        200,
        {
            "id": 5,
            "title": {"raw": "About", "rendered": "<p>About</p>"},
            "content": {"raw": "Hello"},
            "status": "draft",
            "type": "page",
            "parent": 2,
            "menu_order": 4,
        },
    )
    store = RestContentStore("https://example.invalid", session=session)

    record = store.fetch(5)

    assert record is not None
    assert (record.title, record.content, record.status) == ("About", "Hello", "draft")
    assert (record.parent, record.menu_order) == (2, 4)
    assert session.request.call_args.kwargs["params"] == {"context": "edit"}


@pytest.mark.parametrize(
    ("status", "payload"), [(404, None), (410, None), (200, {"id": 5, "status": "trash"})]
)
def test_fetch_treats_missing_and_trashed_as_absent(
    mocker: MockerFixture, session: typ.Any, status: int, payload: object
) -> None:
    """Missing, gone, and trashed records do not resolve."""
    session.request.return_value = _response(mocker, status, payload)
    store = RestContentStore("https://example.invalid", session=session)

    assert store.fetch(5) is None


def test_server_errors_raise_content_store_error(
    mocker: MockerFixture, session: typ.Any
) -> None:
    """HTTP failures surface as ContentStoreError."""
    session.request.return_value = _response(mocker, 500, "boom")
    store = RestContentStore("https://example.invalid", session=session)

    with pytest.raises(ContentStoreError, match="status 500"):
        store.update(5, {"post_title": "About"})


def test_connection_errors_raise_content_store_error(session: typ.Any) -> None:
    """Transport exceptions are wrapped rather than leaking requests errors."""
    session.request.side_effect = requests.ConnectionError("refused")
    store = RestContentStore("https://example.invalid", session=session)

    with pytest.raises(ContentStoreError, match="Failed to reach"):
        store.create({"post_title": "About"})


def test_delete_passes_force_flag(mocker: MockerFixture, session: typ.Any) -> None:
    """Permanent deletes bypass the trash with ``force=true``."""
    session.request.return_value = _response(mocker, 200, {"deleted": True})
    store = RestContentStore("https://example.invalid", session=session)

    assert store.delete(9, permanently=True) is True
    method, url = session.request.call_args.args
    assert (method, url) == ("DELETE", "https://example.invalid/wp-json/wp/v2/pages/9")
    assert session.request.call_args.kwargs["params"] == {"force": "true"}


def test_metadata_travels_through_meta_field(
    mocker: MockerFixture, session: typ.Any
) -> None:
    """Meta values are written and read through the record's ``meta`` object."""
    session.request.side_effect = [
        _response(mocker, 200, {"id": 9}),
        _response(mocker, 200, {"id": 9, "meta": {"layout": "wide"}}),
    ]
    store = RestContentStore("https://example.invalid", session=session)

    assert store.set_metadata(9, "layout", "wide") is True
    assert session.request.call_args.kwargs["json"] == {"meta": {"layout": "wide"}}
    assert store.get_metadata(9) == {"layout": "wide"}
