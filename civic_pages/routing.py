"""Resolve a public URL into a render state.

A public URL has a primary slug naming a page and an optional secondary slug
naming a gallery or service beneath it. :class:`RouteResolver` looks the page
up first and only then decides whether the secondary slug addresses a
sub-entity, whether the page body comes from Page Builder sections, or whether
a legacy template with related posts applies.

Only the lookup of the addressed entity can fail a route. Section, post,
gallery-listing and service-listing fetches that fail after the page resolved
degrade to empty collections and are logged.

Every resolution belongs to a render pass identified by a
:class:`RenderSession` token. When a newer pass starts while a fetch is in
flight, the older pass raises :class:`~civic_pages.errors.StaleResponseError`
at its next checkpoint instead of returning a state.

Examples
--------
>>> session = RenderSession()
>>> first = session.begin()
>>> second = session.begin()
>>> session.is_current(first), session.is_current(second)
(False, True)
"""

from __future__ import annotations

import dataclasses as dc
import logging
import threading
import typing as typ

from ._constants import (
    DEFAULT_TEMPLATE_KEY,
    GALLERY_TEMPLATE_KEY,
    LEGACY_TEMPLATES,
    POSTS_TEMPLATE_KEY,
    SERVICES_TEMPLATE_KEY,
)
from .errors import CmsApiError, PartialLoadError, StaleResponseError
from .models import RenderMode

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .client import ContentSource
    from .models import Gallery, Page, Post, Service
    from .sections.models import Section
    from .tasks import DetachedTaskRunner

logger = logging.getLogger(__name__)

_T = typ.TypeVar("_T")

DEFAULT_POSTS_PAGE_SIZE = 50
DEFAULT_RELATED_POSTS_LIMIT = 6


@dc.dataclass(slots=True, frozen=True)
class NotFound:
    """The primary page does not exist or could not be loaded."""

    slug: str


@dc.dataclass(slots=True, frozen=True)
class GalleryItem:
    page: Page
    gallery: Gallery


@dc.dataclass(slots=True, frozen=True)
class GalleryNotFound:
    """The gallery-mode page exists but the addressed gallery does not."""

    page: Page
    slug: str


@dc.dataclass(slots=True, frozen=True)
class ServiceItem:
    page: Page
    service: Service


@dc.dataclass(slots=True, frozen=True)
class ServiceNotFound:
    """The services-mode page exists but the addressed service does not."""

    page: Page
    slug: str


@dc.dataclass(slots=True, frozen=True)
class PageView:
    """A page rendered either from its sections or from a legacy template.

    Attributes
    ----------
    page : Page
        The resolved page.
    sections : tuple[Section, ...]
        Raw sections for Page Builder pages; empty for legacy pages.
    posts : tuple[Post, ...]
        Related (or, for the posts template, all) published posts; empty for
        Page Builder pages.
    template : str
        Registered legacy template key, ``default`` when the page's own key
        is unknown.
    galleries : tuple[Gallery, ...]
        Published galleries listed by a gallery-mode page.
    services : tuple[Service, ...]
        Published services listed by a services-mode page.
    posts_page : int
        Archive page number shown by the posts template.
    posts_total_pages : int
        Number of archive pages the backend reported.
    """

    page: Page
    sections: tuple[Section, ...] = ()
    posts: tuple[Post, ...] = ()
    template: str = DEFAULT_TEMPLATE_KEY
    galleries: tuple[Gallery, ...] = ()
    services: tuple[Service, ...] = ()
    posts_page: int = 1
    posts_total_pages: int = 1

    @property
    def uses_page_builder(self) -> bool:
        return self.page.use_page_builder


@dc.dataclass(slots=True, frozen=True)
class PostItem:
    post: Post


@dc.dataclass(slots=True, frozen=True)
class PostNotFound:
    slug: str


RenderState = (
    NotFound
    | GalleryItem
    | GalleryNotFound
    | ServiceItem
    | ServiceNotFound
    | PageView
    | PostItem
    | PostNotFound
)


class RenderSession:
    """Hand out render-pass tokens; only the newest token is current."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generation = 0

    def begin(self) -> int:
        """Start a new render pass, superseding every earlier one."""
        with self._lock:
            self._generation += 1
            return self._generation

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._generation

    def ensure_current(self, token: int) -> None:
        """Raise :class:`StaleResponseError` when ``token`` was superseded."""
        if not self.is_current(token):
            logger.debug("Discarding response of superseded render pass %s", token)
            msg = f"Render pass {token} was superseded"
            raise StaleResponseError(msg)


def legacy_template_key(template: str | None) -> str:
    """Return ``template`` when it is registered, otherwise ``default``."""
    if template and template in LEGACY_TEMPLATES:
        return template
    return DEFAULT_TEMPLATE_KEY


class RouteResolver:
    """Turn ``(primary, secondary)`` slugs into a render state.

    Parameters
    ----------
    client : ContentSource
        Backend API used for every lookup.
    session : RenderSession, optional
        Render-pass registry shared with whoever starts navigations.
    tasks : DetachedTaskRunner, optional
        Runner for fire-and-forget view increments. Increments are skipped
        when omitted.
    posts_page_size : int, optional
        Number of published posts fetched for legacy pages.
    related_posts_limit : int, optional
        Maximum number of related posts kept for a legacy page.
    counter : ContentSource, optional
        Backend API used only by detached view increments, so background
        threads never share the lookup client's connection pool. Defaults
        to ``client``.
    """

    def __init__(
        self,
        client: ContentSource,
        *,
        session: RenderSession | None = None,
        tasks: DetachedTaskRunner | None = None,
        posts_page_size: int = DEFAULT_POSTS_PAGE_SIZE,
        related_posts_limit: int = DEFAULT_RELATED_POSTS_LIMIT,
        counter: ContentSource | None = None,
    ) -> None:
        self.client = client
        self.counter = counter if counter is not None else client
        self.session = session or RenderSession()
        self.tasks = tasks
        self.posts_page_size = posts_page_size
        self.related_posts_limit = related_posts_limit

    def resolve(
        self,
        primary: str,
        secondary: str | None = None,
        *,
        token: int | None = None,
        posts_page: int = 1,
    ) -> RenderState:
        """Resolve a route into exactly one render state.

        Parameters
        ----------
        primary : str
            Page slug.
        secondary : str | None, optional
            Gallery or service slug beneath the page.
        token : int | None, optional
            Render-pass token from :meth:`RenderSession.begin`. A new pass is
            started when omitted.
        posts_page : int, optional
            Archive page shown when the page uses the posts template.

        Returns
        -------
        RenderState
            ``NotFound``, ``GalleryItem``, ``GalleryNotFound``,
            ``ServiceItem``, ``ServiceNotFound`` or ``PageView``.

        Raises
        ------
        StaleResponseError
            If the pass was superseded while a fetch was in flight.
        """
        if token is None:
            token = self.session.begin()
        try:
            page = self.client.get_page_by_slug(primary)
        except CmsApiError as exc:
            self.session.ensure_current(token)
            logger.info("Page '%s' could not be loaded: %s", primary, exc)
            return NotFound(slug=primary)
        self.session.ensure_current(token)

        if secondary:
            match page.render_mode:
                case RenderMode.GALLERY:
                    return self._resolve_gallery(page, secondary, token)
                case RenderMode.SERVICES:
                    return self._resolve_service(page, secondary, token)
                case _:
                    pass
        return self._page_view(page, token, max(1, posts_page))

    def resolve_post(self, slug: str, *, token: int | None = None) -> PostItem | PostNotFound:
        """Resolve a single post and schedule its view-count increment."""
        if token is None:
            token = self.session.begin()
        try:
            post = self.client.get_post_by_slug(slug)
        except CmsApiError as exc:
            self.session.ensure_current(token)
            logger.info("Post '%s' could not be loaded: %s", slug, exc)
            return PostNotFound(slug=slug)
        self.session.ensure_current(token)
        if self.tasks is not None:
            self.tasks.submit(
                f"view increment for post '{slug}'", self.counter.increment_post_view, slug
            )
        return PostItem(post=post)

    def _resolve_gallery(
        self, page: Page, slug: str, token: int
    ) -> GalleryItem | GalleryNotFound:
        try:
            gallery = self.client.get_gallery_by_slug(slug)
        except CmsApiError as exc:
            self.session.ensure_current(token)
            logger.info("Gallery '%s' under '%s' not found: %s", slug, page.slug, exc)
            return GalleryNotFound(page=page, slug=slug)
        self.session.ensure_current(token)
        return GalleryItem(page=page, gallery=gallery)

    def _resolve_service(
        self, page: Page, slug: str, token: int
    ) -> ServiceItem | ServiceNotFound:
        try:
            service = self.client.get_service_by_slug(slug)
        except CmsApiError as exc:
            self.session.ensure_current(token)
            logger.info("Service '%s' under '%s' not found: %s", slug, page.slug, exc)
            return ServiceNotFound(page=page, slug=slug)
        self.session.ensure_current(token)
        return ServiceItem(page=page, service=service)

    def _page_view(self, page: Page, token: int, posts_page: int = 1) -> PageView:
        template = legacy_template_key(page.template)
        if page.use_page_builder:
            sections = self._partial(page, "sections", self.client.get_sections, page.id)
            self.session.ensure_current(token)
            return PageView(page=page, sections=tuple(sections or ()), template=template)

        galleries: list[Gallery] = []
        services: list[Service] = []
        if template == GALLERY_TEMPLATE_KEY:
            fetch_galleries = self.client.get_published_galleries
            galleries = self._partial(page, "galleries", fetch_galleries) or []
            self.session.ensure_current(token)
        elif template == SERVICES_TEMPLATE_KEY:
            fetch_services = self.client.get_published_services
            services = self._partial(page, "services", fetch_services) or []
            self.session.ensure_current(token)

        archive = template == POSTS_TEMPLATE_KEY
        listing = self._partial(
            page,
            "posts",
            self.client.get_published_posts,
            posts_page if archive else 1,
            self.posts_page_size,
        )
        self.session.ensure_current(token)
        posts: list[Post] = []
        total_pages = 1
        if listing is not None and archive:
            posts = listing.posts
            total_pages = max(1, listing.total_pages)
        elif listing is not None:
            related = [post for post in listing.posts if post.belongs_to(page.id)]
            posts = related[: self.related_posts_limit]
        return PageView(
            page=page,
            posts=tuple(posts),
            template=template,
            galleries=tuple(galleries),
            services=tuple(services),
            posts_page=posts_page if archive else 1,
            posts_total_pages=total_pages,
        )

    def _partial(
        self, page: Page, what: str, fetch: cabc.Callable[..., _T], *args: object
    ) -> _T | None:
        """Run a fetch whose failure empties one part of the page, not the page."""
        try:
            return _fetch_secondary(page, what, fetch, *args)
        except PartialLoadError as exc:
            logger.warning("%s", exc)
            return None


def _fetch_secondary(
    page: Page, what: str, fetch: cabc.Callable[..., _T], *args: object
) -> _T:
    try:
        return fetch(*args)
    except CmsApiError as exc:
        msg = f"{what} of page '{page.slug}' failed to load: {exc}"
        raise PartialLoadError(msg) from exc


__all__ = [
    "GalleryItem",
    "GalleryNotFound",
    "NotFound",
    "PageView",
    "PostItem",
    "PostNotFound",
    "RenderSession",
    "RenderState",
    "RouteResolver",
    "ServiceItem",
    "ServiceNotFound",
    "legacy_template_key",
]
