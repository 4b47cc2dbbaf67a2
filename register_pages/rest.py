r"""Content store backed by a WordPress-style REST API.

This module maps the :class:`~register_pages.content.ContentStore` protocol
onto the ``/wp-json/wp/v2`` endpoints: records are created and updated with
``POST``, fetched with ``GET ?context=edit``, and removed with ``DELETE``.
Metadata travels through the record's ``meta`` object, so only meta keys the
host exposes over REST can be read or written.

Example
-------
>>> from register_pages.rest import RestContentStore
>>> store = RestContentStore(
...     "https://example.com", username="admin", app_password="abcd efgh"
... )  # doctest: +SKIP
>>> store.fetch(42).title  # doctest: +SKIP
'About'
"""

from __future__ import annotations

import json
import typing as typ
from http import HTTPStatus

import requests

from .errors import ContentStoreError
from .models import Record

if typ.TYPE_CHECKING:
    import collections.abc as cabc

API_PATH = "/wp-json/wp/v2"
REST_BASES: dict[str, str] = {"page": "pages", "post": "posts"}
_PAYLOAD_FIELDS: dict[str, str] = {
    "post_title": "title",
    "post_content": "content",
    "post_status": "status",
    "post_parent": "parent",
    "post_author": "author",
    "post_name": "slug",
    "menu_order": "menu_order",
    "comment_status": "comment_status",
    "ping_status": "ping_status",
    "meta": "meta",
}


class RestContentStore:
    """Thin wrapper around the REST endpoints for one record type.

    Requests are sent once with a per-request timeout; failures surface as
    :class:`ContentStoreError` and are never retried here.
    """

    def __init__(
        self,
        site_url: str,
        *,
        username: str | None = None,
        app_password: str | None = None,
        record_type: str = "page",
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialise the store with optional application-password auth.

        Parameters
        ----------
        site_url : str
            Root URL of the host site, without the ``/wp-json`` suffix.
        username, app_password : str or None, optional
            Credentials for HTTP basic auth with an application password.
        record_type : str, optional
            Record type whose endpoint ``fetch``/``update``/``delete`` use.
        session : requests.Session or None, optional
            Preconfigured session to reuse connections.
        timeout : float, optional
            Per-request timeout in seconds. Defaults to ``10.0``.
        """
        self._api_base = f"{site_url.rstrip('/')}{API_PATH}"
        self.record_type = record_type
        self._session = session or requests.Session()
        self.timeout = timeout
        self._headers = {
            "Accept": "application/json",
            "User-Agent": "register-pages/1.0",
        }
        if username and app_password:
            self._session.auth = (username, app_password)

    def _endpoint(self, record_type: str | None = None, record_id: int | None = None) -> str:
        kind = record_type or self.record_type
        url = f"{self._api_base}/{REST_BASES.get(kind, kind)}"
        return url if record_id is None else f"{url}/{record_id}"

    def _request(
        self, method: str, url: str, **kwargs: typ.Any
    ) -> requests.Response:
        try:
            return self._session.request(
                method, url, headers=self._headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach {url}: {exc}"
            raise ContentStoreError(msg) from exc

    def _json(self, response: requests.Response, url: str) -> dict[str, typ.Any]:
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            snippet = response.text[:200]
            msg = f"Request to {url} failed with status {response.status_code}: {snippet}"
            raise ContentStoreError(msg)
        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            msg = f"Response from {url} was not valid JSON"
            raise ContentStoreError(msg) from exc
        if not isinstance(payload, dict):
            msg = f"Response from {url} was not a JSON object"
            raise ContentStoreError(msg)
        return payload

    def create(self, attributes: cabc.Mapping[str, typ.Any]) -> int:
        url = self._endpoint(attributes.get("post_type"))
        payload = self._json(self._request("POST", url, json=_to_payload(attributes)), url)
        return int(payload["id"])

    def update(self, record_id: int, attributes: cabc.Mapping[str, typ.Any]) -> int:
        url = self._endpoint(attributes.get("post_type"), record_id)
        payload = self._json(self._request("POST", url, json=_to_payload(attributes)), url)
        return int(payload.get("id", record_id))

    def _get(self, record_id: int) -> dict[str, typ.Any] | None:
        url = self._endpoint(record_id=record_id)
        response = self._request("GET", url, params={"context": "edit"})
        if response.status_code in (HTTPStatus.NOT_FOUND, HTTPStatus.GONE):
            return None
        return self._json(response, url)

    def fetch(self, record_id: int) -> Record | None:
        payload = self._get(record_id)
        if payload is None or payload.get("status") == "trash":
            return None
        return Record(
            id=int(payload.get("id", record_id)),
            title=_rendered(payload.get("title")),
            content=_rendered(payload.get("content")),
            status=str(payload.get("status", "publish")),
            record_type=str(payload.get("type", self.record_type)),
            parent=int(payload.get("parent") or 0),
            menu_order=int(payload.get("menu_order") or 0),
        )

    def delete(self, record_id: int, *, permanently: bool = False) -> bool:
        url = self._endpoint(record_id=record_id)
        response = self._request(
            "DELETE", url, params={"force": "true" if permanently else "false"}
        )
        return response.status_code < HTTPStatus.BAD_REQUEST

    def permalink(self, record_id: int) -> str | None:
        payload = self._get(record_id)
        if payload is None:
            return None
        link = payload.get("link")
        return str(link) if link else None

    def get_metadata(self, record_id: int) -> dict[str, typ.Any]:
        payload = self._get(record_id)
        meta = (payload or {}).get("meta")
        return dict(meta) if isinstance(meta, dict) else {}

    def set_metadata(self, record_id: int, key: str, value: typ.Any) -> bool:
        url = self._endpoint(record_id=record_id)
        response = self._request("POST", url, json={"meta": {key: value}})
        return response.status_code < HTTPStatus.BAD_REQUEST


def _to_payload(attributes: cabc.Mapping[str, typ.Any]) -> dict[str, typ.Any]:
    """Translate host-native attribute names into REST field names."""
    return {
        _PAYLOAD_FIELDS[name]: value
        for name, value in attributes.items()
        if name in _PAYLOAD_FIELDS
    }


def _rendered(value: object) -> str:
    """Return the raw text of a REST ``{raw, rendered}`` field."""
    if isinstance(value, dict):
        return str(value.get("raw", value.get("rendered", "")))
    if value is None:
        return ""
    return str(value)


__all__ = ["RestContentStore"]
