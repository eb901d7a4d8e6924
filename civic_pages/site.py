"""Public site rendering pipeline.

This module turns the render states produced by
:class:`~civic_pages.routing.RouteResolver` into complete HTML documents and
writes a static snapshot of the site to disk. :class:`SiteRenderer` owns the
Jinja environment, the section renderer, and the Page Builder composer; it
picks the page-level template for each state and wraps it in the shared
layout (header navigation, footer with the configured contact details).
:class:`SiteBuilder` fetches every published page, resolves and renders it,
and writes ``<slug>/index.html`` files, the galleries, services, archive
pages and posts those pages link to, the home ``index.html`` and a
``404.html``.

Typical usage mirrors the ``civic build`` command:

>>> from civic_pages.client import CmsApiClient
>>> from civic_pages.config import load_site_config
>>> config = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
>>> client = CmsApiClient(config.api.base_url)  # doctest: +SKIP
>>> written = SiteBuilder(config, client).run()  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from markupsafe import Markup

from ._constants import (
    ARCHIVE_PAGE_SEGMENT,
    LEGACY_TEMPLATES,
    POST_ROUTE_PREFIX,
    messages_for,
)
from .errors import CmsApiError
from .navigation import build_navigation
from .routing import (
    GalleryItem,
    GalleryNotFound,
    NotFound,
    PageView,
    PostItem,
    PostNotFound,
    RouteResolver,
    ServiceItem,
    ServiceNotFound,
)
from .sections.composer import PageBuilderComposer
from .sections.renderer import SectionRenderer
from .templating import create_environment

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .client import ContentSource
    from .config.models import SiteConfig
    from .models import Post
    from .navigation import NavigationItem
    from .routing import RenderState

logger = logging.getLogger(__name__)

NOT_FOUND_STATES = (NotFound, GalleryNotFound, ServiceNotFound, PostNotFound)


def status_for(state: RenderState) -> int:
    """Return the HTTP status a server would send for ``state``."""
    return 404 if isinstance(state, NOT_FOUND_STATES) else 200


class SiteRenderer:
    """Render resolved states into full HTML documents."""

    def __init__(
        self,
        config: SiteConfig,
        *,
        templates_dir: Path | None = None,
        media_url: cabc.Callable[[str], str] | None = None,
    ) -> None:
        """Initialise the renderer and its Jinja environment.

        Parameters
        ----------
        config : SiteConfig
            Site configuration; supplies the theme, language, and CTA
            fallback colour.
        templates_dir : Path, optional
            Directory containing the Jinja templates. Defaults to
            ``civic_pages/templates``.
        media_url : Callable[[str], str], optional
            Maps stored media references to absolute URLs, usually
            :meth:`CmsApiClient.media_url`.
        """
        self.config = config
        self.env = create_environment(templates_dir)
        self.messages = messages_for(config.language)
        self.media_url = media_url
        self.section_renderer = SectionRenderer(
            self.env,
            media_url=media_url,
            language=config.language,
            cta_background=config.theme.cta_background,
        )
        self.composer = PageBuilderComposer(self.section_renderer)

    def render(
        self,
        state: RenderState,
        navigation: cabc.Sequence[NavigationItem] = (),
        *,
        current_slug: str | None = None,
    ) -> str:
        """Render ``state`` inside the site layout and return the HTML."""
        context: dict[str, typ.Any] = {
            "theme": self.config.theme,
            "navigation": navigation,
            "messages": self.messages,
            "language": self.config.language,
            "current_slug": current_slug,
            "media": self._media,
        }
        match state:
            case NotFound():
                template = "not_found.jinja"
                context |= {
                    "title": self.messages["page_not_found"],
                    "body": self.messages["page_not_found_body"],
                    "back_href": "/",
                    "back_label": self.messages["back_home"],
                    "not_found_kind": "page",
                }
            case GalleryNotFound(page=page) | ServiceNotFound(page=page):
                kind = "gallery" if isinstance(state, GalleryNotFound) else "service"
                template = "not_found.jinja"
                context |= {
                    "title": self.messages[f"{kind}_not_found"],
                    "body": self.messages[f"{kind}_not_found_body"],
                    "back_href": f"/{page.slug}",
                    "back_label": f"{self.messages['back_to_parent']}: {page.title}",
                    "not_found_kind": kind,
                    "current_slug": current_slug or page.slug,
                }
            case PostNotFound():
                template = "not_found.jinja"
                context |= {
                    "title": self.messages["post_not_found"],
                    "body": self.messages["page_not_found_body"],
                    "back_href": "/",
                    "back_label": self.messages["back_home"],
                    "not_found_kind": "post",
                }
            case GalleryItem(page=page, gallery=gallery):
                template = "gallery.jinja"
                context |= {"title": gallery.title, "page": page, "gallery": gallery}
            case ServiceItem(page=page, service=service):
                template = "service.jinja"
                context |= {"title": service.name, "page": page, "service": service}
            case PostItem(post=post):
                template = "post.jinja"
                context |= {
                    "title": post.title,
                    "post": post,
                    "content": Markup(post.content),
                }
            case PageView(page=page, sections=sections, posts=posts):
                context |= {
                    "title": page.title,
                    "page": page,
                    "posts": posts,
                    "galleries": state.galleries,
                    "services": state.services,
                    "posts_page": state.posts_page,
                    "posts_total_pages": state.posts_total_pages,
                    "previous_href": _previous_archive_href(state),
                    "next_href": _next_archive_href(state),
                    "current_slug": current_slug or page.slug,
                }
                if state.uses_page_builder:
                    template = "page.jinja"
                    context["body"] = self.composer.render(sections)
                else:
                    template = LEGACY_TEMPLATES[state.template]
                    context["content"] = Markup(page.content)
            case _:
                msg = f"Unsupported render state: {type(state).__name__}"
                raise TypeError(msg)
        html = self.env.get_template(template).render(**context)
        if not html.endswith("\n"):
            html += "\n"
        return html

    def _media(self, ref: str | None) -> str:
        if not ref:
            return ""
        return self.media_url(ref) if self.media_url else ref


class SiteBuilder:
    """Write a static snapshot of every published page."""

    def __init__(
        self,
        config: SiteConfig,
        client: ContentSource,
        *,
        output_dir: Path | None = None,
        renderer: SiteRenderer | None = None,
        resolver: RouteResolver | None = None,
    ) -> None:
        self.config = config
        self.client = client
        self.output_dir = output_dir or config.output_dir
        self.renderer = renderer or SiteRenderer(config, media_url=client.media_url)
        self.resolver = resolver or RouteResolver(
            client,
            posts_page_size=config.posts_page_size,
            related_posts_limit=config.related_posts_limit,
        )

    def run(self) -> list[Path]:
        """Render and write every published page, returning the written paths.

        Returns
        -------
        list[Path]
            One ``<slug>/index.html`` per page, followed by the galleries,
            services and further archive pages that page links to. Then one
            ``objave/<slug>/index.html`` per published post, ``index.html``
            for the configured home page when it exists, and ``404.html``.

        Notes
        -----
        A failure to list the published pages propagates as
        :class:`~civic_pages.errors.CmsApiError`; nothing is written in
        that case. A failure while paging through the published posts stops
        the post listing and is logged.
        """
        pages = self.client.get_published_pages()
        navigation = build_navigation(self.config.navigation, pages)
        written: list[Path] = []
        home_html: str | None = None
        for page in pages:
            if not _is_safe_slug(page.slug):
                logger.warning("Skipping page %s with unsafe slug %r", page.id, page.slug)
                continue
            state = self.resolver.resolve(page.slug)
            html = self.renderer.render(state, navigation, current_slug=page.slug)
            written.append(self._write(Path(page.slug) / "index.html", html))
            if page.slug == self.config.home_slug:
                home_html = html
            if isinstance(state, PageView):
                written.extend(self._write_linked(state, navigation))
        written.extend(self._write_posts(navigation))
        if home_html is not None:
            written.append(self._write(Path("index.html"), home_html))
        else:
            logger.warning(
                "Home page '%s' is not published; skipping index.html",
                self.config.home_slug,
            )
        not_found = self.renderer.render(NotFound(slug=""), navigation)
        written.append(self._write(Path("404.html"), not_found))
        return written

    def _write_linked(
        self, view: PageView, navigation: cabc.Sequence[NavigationItem]
    ) -> list[Path]:
        """Write the sub-routes and archive pages a page view links to."""
        page = view.page
        written: list[Path] = []
        children = [gallery.slug for gallery in view.galleries]
        children += [service.slug for service in view.services]
        for slug in children:
            if not _is_safe_slug(slug):
                logger.warning("Skipping '%s' child with unsafe slug %r", page.slug, slug)
                continue
            state = self.resolver.resolve(page.slug, slug)
            html = self.renderer.render(state, navigation, current_slug=page.slug)
            written.append(self._write(Path(page.slug) / slug / "index.html", html))
        for number in range(2, view.posts_total_pages + 1):
            state = self.resolver.resolve(page.slug, posts_page=number)
            html = self.renderer.render(state, navigation, current_slug=page.slug)
            relative = Path(page.slug) / ARCHIVE_PAGE_SEGMENT / str(number) / "index.html"
            written.append(self._write(relative, html))
        return written

    def _write_posts(self, navigation: cabc.Sequence[NavigationItem]) -> list[Path]:
        written: list[Path] = []
        for post in self._published_posts():
            if not _is_safe_slug(post.slug):
                logger.warning("Skipping post %s with unsafe slug %r", post.id, post.slug)
                continue
            state = self.resolver.resolve_post(post.slug)
            html = self.renderer.render(state, navigation, current_slug=POST_ROUTE_PREFIX)
            relative = Path(POST_ROUTE_PREFIX) / post.slug / "index.html"
            written.append(self._write(relative, html))
        return written

    def _published_posts(self) -> list[Post]:
        posts: list[Post] = []
        number = 1
        while True:
            try:
                listing = self.client.get_published_posts(number, self.config.posts_page_size)
            except CmsApiError as exc:
                logger.warning("Published posts page %s failed to load: %s", number, exc)
                break
            posts.extend(listing.posts)
            if not listing.posts or number >= listing.total_pages:
                break
            number += 1
        return posts

    def _write(self, relative: Path, html: str) -> Path:
        output_path = self.output_dir / relative
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
        return output_path


def archive_href(slug: str, number: int) -> str:
    """Return the URL of archive page ``number`` of the page ``slug``."""
    if number <= 1:
        return f"/{slug}"
    return f"/{slug}/{ARCHIVE_PAGE_SEGMENT}/{number}"


def _previous_archive_href(view: PageView) -> str | None:
    if view.posts_page <= 1:
        return None
    return archive_href(view.page.slug, view.posts_page - 1)


def _next_archive_href(view: PageView) -> str | None:
    if view.posts_page >= view.posts_total_pages:
        return None
    return archive_href(view.page.slug, view.posts_page + 1)


def _is_safe_slug(slug: str) -> bool:
    return bool(slug) and slug not in {".", ".."} and "/" not in slug and "\\" not in slug


__all__ = ["NOT_FOUND_STATES", "SiteBuilder", "SiteRenderer", "archive_href", "status_for"]
