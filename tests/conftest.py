"""Shared fixtures for the civic_pages test suite.

The CMS backend is replaced with :class:`FakeCmsClient`, an in-memory stand-in
exposing the same methods as :class:`civic_pages.client.CmsApiClient`. It
records every call in ``calls`` so tests can assert which fetches a route
triggered, and any method name added to ``failing`` raises
:class:`~civic_pages.errors.CmsApiError` instead of answering.

Fixtures
--------
- ``site_pages``: a small municipal page tree (home, about, gallery,
  services with three sub-pages, posts archive, contact).
- ``fake_client``: a :class:`FakeCmsClient` seeded with ``site_pages``, one
  gallery, one service, sections for the home page, and two posts.
- ``site_config``: a :class:`SiteConfig` pointing at a temporary output
  directory and using the default navigation template.
- ``make_section``: factory building sections from camelCase payloads.
"""

from __future__ import annotations

import datetime as dt
import math
import typing as typ

import pytest

from civic_pages.config import DEFAULT_NAVIGATION, ApiConfig, SiteConfig, ThemeConfig
from civic_pages.errors import CmsApiError, NotFoundError
from civic_pages.models import Author, Gallery, GalleryImage, Page, Post, PostsPage, Service
from civic_pages.sections.models import Section, section_from_payload

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

MEDIA_BASE = "https://cms.test/api/media/file"


class FakeCmsClient:
    """In-memory CMS backend with call recording and failure injection."""

    def __init__(
        self,
        *,
        pages: cabc.Iterable[Page] = (),
        sections: dict[int, list[Section]] | None = None,
        galleries: cabc.Iterable[Gallery] = (),
        services: cabc.Iterable[Service] = (),
        posts: cabc.Iterable[Post] = (),
    ) -> None:
        self.pages = list(pages)
        self.sections = sections or {}
        self.galleries = {gallery.slug: gallery for gallery in galleries}
        self.services = {service.slug: service for service in services}
        self.posts = list(posts)
        self.calls: list[tuple[str, object]] = []
        self.failing: set[str] = set()
        self.views: list[str] = []
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def _record(self, name: str, argument: object) -> None:
        self.calls.append((name, argument))
        if name in self.failing:
            msg = f"{name} failed"
            raise CmsApiError(msg, status_code=500)

    def called(self, name: str) -> list[object]:
        """Return the arguments of every recorded call to ``name``."""
        return [argument for called, argument in self.calls if called == name]

    def get_page_by_slug(self, slug: str) -> Page:
        self._record("get_page_by_slug", slug)
        for page in self.pages:
            if page.slug == slug:
                return page
        msg = f"no page '{slug}'"
        raise NotFoundError(msg, status_code=404)

    def get_sections(self, page_id: int) -> list[Section]:
        self._record("get_sections", page_id)
        return list(self.sections.get(page_id, []))

    def get_published_pages(self) -> list[Page]:
        self._record("get_published_pages", None)
        return list(self.pages)

    def get_gallery_by_slug(self, slug: str) -> Gallery:
        self._record("get_gallery_by_slug", slug)
        try:
            return self.galleries[slug]
        except KeyError as exc:
            msg = f"no gallery '{slug}'"
            raise NotFoundError(msg, status_code=404) from exc

    def get_published_galleries(self) -> list[Gallery]:
        self._record("get_published_galleries", None)
        return list(self.galleries.values())

    def get_published_services(self) -> list[Service]:
        self._record("get_published_services", None)
        return list(self.services.values())

    def get_service_by_slug(self, slug: str) -> Service:
        self._record("get_service_by_slug", slug)
        try:
            return self.services[slug]
        except KeyError as exc:
            msg = f"no service '{slug}'"
            raise NotFoundError(msg, status_code=404) from exc

    def get_published_posts(self, page: int = 1, limit: int = 10) -> PostsPage:
        self._record("get_published_posts", (page, limit))
        chunk = self.posts[(page - 1) * limit : page * limit]
        total_pages = max(1, math.ceil(len(self.posts) / limit))
        return PostsPage(
            posts=list(chunk), total=len(self.posts), page=page, total_pages=total_pages
        )

    def get_post_by_slug(self, slug: str) -> Post:
        self._record("get_post_by_slug", slug)
        for post in self.posts:
            if post.slug == slug:
                return post
        msg = f"no post '{slug}'"
        raise NotFoundError(msg, status_code=404)

    def increment_post_view(self, slug: str) -> None:
        self._record("increment_post_view", slug)
        self.views.append(slug)

    def media_url(self, ref: str) -> str:
        if ref.startswith(("http://", "https://")):
            return ref
        return f"{MEDIA_BASE}/{ref.removeprefix('uploads/')}"


def build_section(section_id: int, section_type: str, **fields: typ.Any) -> Section:
    """Build a section from a type and camelCase payload fields.

    ``sortOrder``, ``isVisible`` and ``cssClasses`` are lifted to the section
    level; every other keyword lands in ``data``.
    """
    envelope: dict[str, typ.Any] = {"id": section_id, "type": section_type}
    for key in ("sortOrder", "isVisible", "cssClasses"):
        if key in fields:
            envelope[key] = fields.pop(key)
    envelope["data"] = fields
    return section_from_payload(envelope)


@pytest.fixture
def make_section() -> cabc.Callable[..., Section]:
    """Expose :func:`build_section` to tests."""
    return build_section


@pytest.fixture
def site_pages() -> list[Page]:
    """Return a flat page collection shaped like a small municipality site."""
    return [
        Page(1, "pocetna", "Početna", use_page_builder=True, sort_order=0),
        Page(2, "o-nama", "O nama", content="<p>Istorija opštine.</p>", sort_order=1),
        Page(3, "galerija", "Galerija", template="gallery", sort_order=3),
        Page(4, "usluge", "Usluge", template="services", sort_order=2),
        Page(5, "porezi", "Porezi", parent_id=4, sort_order=3),
        Page(6, "gradjevinske-dozvole", "Građevinske dozvole", parent_id=4, sort_order=1),
        Page(7, "maticna-sluzba", "Matična služba", parent_id=4, sort_order=2),
        Page(8, "objave", "Objave", template="posts", sort_order=4),
        Page(9, "kontakt", "Kontakt", template="contact", sort_order=5),
    ]


@pytest.fixture
def site_posts() -> list[Post]:
    """Return two published posts, one associated with the about page."""
    published = dt.datetime(2025, 5, 12, 9, 0, tzinfo=dt.UTC)
    return [
        Post(
            10,
            "otvoren-park",
            "Otvoren novi park",
            excerpt="Park u centru je otvoren.",
            content="<p>Svečano otvaranje.</p>",
            author=Author(1, "Služba za informisanje"),
            published_at=published,
            page_ids=(2,),
        ),
        Post(11, "javni-poziv", "Javni poziv", published_at=published, page_ids=(9,)),
    ]


@pytest.fixture
def fake_client(site_pages: list[Page], site_posts: list[Post]) -> FakeCmsClient:
    """Return a fake backend seeded with the standard site data."""
    gallery = Gallery(
        20,
        "otvaranje-parka",
        "Otvaranje parka",
        images=[
            GalleryImage("uploads/park-2.jpg", caption="Drugi", sort_order=2),
            GalleryImage("uploads/park-1.jpg", caption="Prvi", sort_order=1),
            GalleryImage("uploads/skriveno.jpg", is_visible=False),
        ],
    )
    service = Service(
        30,
        "izvod-iz-maticne-knjige",
        "Izvod iz matične knjige",
        short_description="Izdavanje izvoda za građane.",
        duration="1 dan",
        price="500",
        currency="RSD",
        responsible_department="Matična služba",
        requires_appointment=True,
        required_documents=["Lična karta"],
    )
    sections = {
        1: [
            build_section(100, "hero-stack", sortOrder=1, title="Dobrodošli"),
            build_section(101, "cta-one", sortOrder=2, title="Pišite nam"),
        ]
    }
    return FakeCmsClient(
        pages=site_pages,
        sections=sections,
        galleries=[gallery],
        services=[service],
        posts=site_posts,
    )


@pytest.fixture
def site_config(tmp_path: Path) -> SiteConfig:
    """Return a site configuration writing into a temporary directory."""
    return SiteConfig(
        api=ApiConfig(base_url="https://cms.test/api"),
        theme=ThemeConfig(site_name="Opština Test", email="info@opstina.test"),
        output_dir=tmp_path / "public",
        navigation=DEFAULT_NAVIGATION,
    )


@pytest.fixture
def client_factory() -> type[FakeCmsClient]:
    """Expose :class:`FakeCmsClient` for tests that seed their own data."""
    return FakeCmsClient
