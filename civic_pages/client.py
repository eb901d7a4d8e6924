r"""HTTP client for the CMS backend's public REST API.

This module wraps the handful of read endpoints the public site needs (pages,
sections, galleries, services, posts) plus the post view-counter increment.
Responses are decoded with ``msgspec.json`` and normalised into the dataclasses
from :mod:`civic_pages.models` and :mod:`civic_pages.sections.models`. HTTP 404
maps to :class:`~civic_pages.errors.NotFoundError`; any other error status,
transport failure, or undecodable body raises
:class:`~civic_pages.errors.CmsApiError`.

Example
-------
>>> from civic_pages.client import CmsApiClient
>>> client = CmsApiClient("https://cms.example.rs/api")
>>> client.media_url("uploads/grb.png")
'https://cms.example.rs/api/media/file/grb.png'
>>> page = client.get_page_by_slug("o-nama")  # doctest: +SKIP
>>> page.title  # doctest: +SKIP
'O nama'
"""

from __future__ import annotations

import logging
import typing as typ
from http import HTTPStatus
from urllib.parse import quote

import msgspec
import msgspec.json as msgspec_json
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import CmsApiError, NotFoundError
from .models import (
    Gallery,
    Page,
    Post,
    PostsPage,
    Service,
    gallery_from_payload,
    page_from_payload,
    post_from_payload,
    posts_page_from_payload,
    service_from_payload,
)
from .sections.models import Section, section_from_payload

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "civic-pages/0.1"
_ABSOLUTE_PREFIXES = ("http://", "https://", "//", "data:")
_UPLOADS_PREFIX = "uploads/"


class ContentSource(typ.Protocol):
    """Read surface of the CMS backend used by the route resolver."""

    def get_page_by_slug(self, slug: str) -> Page: ...

    def get_sections(self, page_id: int) -> list[Section]: ...

    def get_published_pages(self) -> list[Page]: ...

    def get_gallery_by_slug(self, slug: str) -> Gallery: ...

    def get_published_galleries(self) -> list[Gallery]: ...

    def get_service_by_slug(self, slug: str) -> Service: ...

    def get_published_services(self) -> list[Service]: ...

    def get_published_posts(self, page: int = 1, limit: int = 10) -> PostsPage: ...

    def get_post_by_slug(self, slug: str) -> Post: ...

    def increment_post_view(self, slug: str) -> None: ...

    def media_url(self, ref: str) -> str: ...


def build_session() -> requests.Session:
    """Return a session that retries idempotent requests on 5xx responses."""
    session = requests.Session()
    retry = Retry(
        total=3,
        connect=3,
        read=3,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class CmsApiClient:
    """Thin wrapper around the CMS backend endpoints.

    The client centralises the base URL, authentication header, timeout, and
    status-code mapping. It holds no cache; every call is a fresh request.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialise the client with the API root and optional transport.

        Parameters
        ----------
        base_url : str
            Root of the backend API, for example ``https://cms.example.rs/api``.
        token : str | None, optional
            Bearer token sent with every request when provided.
        session : requests.Session, optional
            Preconfigured session to reuse connections. Defaults to
            :func:`build_session`.
        timeout : float, optional
            Per-request timeout in seconds. Defaults to ``10.0``.
        user_agent : str, optional
            Value of the ``User-Agent`` header.
        """
        normalized = base_url.strip().rstrip("/")
        if not normalized:
            msg = "CMS API base URL cannot be empty"
            raise ValueError(msg)
        self.base_url = normalized
        self.timeout = timeout
        self._session = session or build_session()
        self._headers = {
            "Accept": "application/json",
            "User-Agent": user_agent,
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def get_page_by_slug(self, slug: str) -> Page:
        """Return the page published under ``slug``."""
        payload = self._get_json(f"/pages/slug/{_segment(slug)}", what=f"page '{slug}'")
        return page_from_payload(_expect_mapping(payload, f"page '{slug}'"))

    def get_sections(self, page_id: int) -> list[Section]:
        """Return the raw (unfiltered, unordered) sections attached to a page."""
        payload = self._get_json(
            f"/pages/{page_id}/sections", what=f"sections of page {page_id}"
        )
        return [
            section_from_payload(item)
            for item in _expect_list(payload, "sections")
            if isinstance(item, dict)
        ]

    def get_published_pages(self) -> list[Page]:
        """Return every published page as a flat list."""
        payload = self._get_json("/pages/published", what="published pages")
        return [
            page_from_payload(item)
            for item in _expect_list(payload, "pages")
            if isinstance(item, dict)
        ]

    def get_gallery_by_slug(self, slug: str) -> Gallery:
        """Return the gallery published under ``slug``."""
        payload = self._get_json(
            f"/galleries/slug/{_segment(slug)}", what=f"gallery '{slug}'"
        )
        return gallery_from_payload(_expect_mapping(payload, f"gallery '{slug}'"))

    def get_published_galleries(self, limit: int = 50) -> list[Gallery]:
        """Return published galleries, newest first."""
        payload = self._get_json(
            "/galleries/published", params={"limit": limit}, what="published galleries"
        )
        return [
            gallery_from_payload(item)
            for item in _expect_list(payload, "galleries")
            if isinstance(item, dict)
        ]

    def get_published_services(self) -> list[Service]:
        """Return every active service as a flat list."""
        payload = self._get_json("/services/published", what="published services")
        return [
            service_from_payload(item)
            for item in _expect_list(payload, "services")
            if isinstance(item, dict)
        ]

    def get_service_by_slug(self, slug: str) -> Service:
        """Return the service published under ``slug``."""
        payload = self._get_json(
            f"/services/slug/{_segment(slug)}", what=f"service '{slug}'"
        )
        return service_from_payload(_expect_mapping(payload, f"service '{slug}'"))

    def get_published_posts(self, page: int = 1, limit: int = 10) -> PostsPage:
        """Return one page of published posts, newest first."""
        payload = self._get_json(
            "/posts/published",
            params={"page": page, "limit": limit},
            what="published posts",
        )
        return posts_page_from_payload(_expect_mapping(payload, "published posts"))

    def get_post_by_slug(self, slug: str) -> Post:
        """Return the post published under ``slug``."""
        payload = self._get_json(f"/posts/slug/{_segment(slug)}", what=f"post '{slug}'")
        return post_from_payload(_expect_mapping(payload, f"post '{slug}'"))

    def increment_post_view(self, slug: str) -> None:
        """Ask the backend to bump the view counter of ``slug``."""
        self._request(
            "PATCH",
            f"/posts/{_segment(slug)}/increment-view",
            what=f"view counter of post '{slug}'",
        )

    def media_url(self, ref: str) -> str:
        """Return an absolute URL for a stored media reference.

        Absolute URLs pass through; a leading ``uploads/`` segment is stripped
        and the remainder is served from ``{base_url}/media/file/``.
        """
        cleaned = ref.strip()
        if not cleaned or cleaned.startswith(_ABSOLUTE_PREFIXES):
            return cleaned
        cleaned = cleaned.lstrip("/")
        cleaned = cleaned.removeprefix(_UPLOADS_PREFIX)
        return f"{self.base_url}/media/file/{cleaned}"

    def _get_json(
        self,
        path: str,
        *,
        what: str,
        params: dict[str, typ.Any] | None = None,
    ) -> object:
        response = self._request("GET", path, what=what, params=params)
        try:
            return msgspec_json.decode(response.content)
        except msgspec.DecodeError as exc:
            msg = f"CMS response for {what} was not valid JSON"
            raise CmsApiError(msg, status_code=response.status_code) from exc

    def _request(
        self,
        method: str,
        path: str,
        *,
        what: str,
        params: dict[str, typ.Any] | None = None,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(
                method, url, headers=self._headers, params=params, timeout=self.timeout
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach the CMS API for {what}: {exc}"
            raise CmsApiError(msg) from exc

        if response.status_code == HTTPStatus.NOT_FOUND:
            msg = f"CMS API has no {what}"
            raise NotFoundError(msg, status_code=response.status_code)
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            snippet = response.text[:200]
            msg = (
                f"CMS API lookup for {what} failed with status "
                f"{response.status_code}: {snippet}"
            )
            raise CmsApiError(msg, status_code=response.status_code)
        return response


def _segment(value: str) -> str:
    return quote(value.strip(), safe="")


def _expect_mapping(payload: object, what: str) -> dict[str, typ.Any]:
    if not isinstance(payload, dict):
        msg = f"CMS response for {what} was not a JSON object"
        raise CmsApiError(msg)
    return payload


def _expect_list(payload: object, key: str) -> list[typ.Any]:
    """Accept a bare JSON array or an object wrapping it under ``key``/``data``."""
    match payload:
        case list():
            return payload
        case {"data": list() as items}:
            return items
        case dict() if isinstance(payload.get(key), list):
            return payload[key]
        case _:
            msg = f"CMS response for {key} was not a JSON array"
            raise CmsApiError(msg)


__all__ = ["CmsApiClient", "ContentSource", "DEFAULT_USER_AGENT", "build_session"]
