"""Unit tests for route resolution, partial-load tolerance, and stale passes.

The resolver runs against the in-memory ``fake_client`` from
``tests/conftest.py``; assertions inspect both the returned render state and
the recorded backend calls, because which fetches happen (and in which order)
is part of the contract.
"""

from __future__ import annotations

import typing as typ

import pytest

from civic_pages.errors import StaleResponseError
from civic_pages.models import Page
from civic_pages.routing import (
    GalleryItem,
    GalleryNotFound,
    NotFound,
    PageView,
    PostItem,
    PostNotFound,
    RenderSession,
    RouteResolver,
    ServiceItem,
    ServiceNotFound,
    legacy_template_key,
)
from civic_pages.tasks import DetachedTaskRunner

if typ.TYPE_CHECKING:
    from .conftest import FakeCmsClient


@pytest.fixture
def resolver(fake_client: FakeCmsClient) -> RouteResolver:
    return RouteResolver(fake_client, posts_page_size=20, related_posts_limit=6)


def test_legacy_page_view_with_related_posts(
    resolver: RouteResolver, fake_client: FakeCmsClient
) -> None:
    """A template page resolves to PageView with only its associated posts."""
    state = resolver.resolve("o-nama")

    assert isinstance(state, PageView)
    assert state.template == "default"
    assert state.page.slug == "o-nama"
    assert [post.slug for post in state.posts] == ["otvoren-park"]
    assert state.sections == ()
    assert fake_client.called("get_published_posts") == [(1, 20)]
    assert fake_client.called("get_sections") == []


def test_page_builder_view_fetches_sections(
    resolver: RouteResolver, fake_client: FakeCmsClient
) -> None:
    state = resolver.resolve("pocetna")

    assert isinstance(state, PageView)
    assert state.uses_page_builder
    assert [section.id for section in state.sections] == [100, 101]
    assert state.posts == ()
    assert fake_client.called("get_published_posts") == []


def test_missing_page_short_circuits(
    resolver: RouteResolver, fake_client: FakeCmsClient
) -> None:
    """An unknown slug yields NotFound after exactly one fetch."""
    state = resolver.resolve("nonexistent-slug", "anything")

    assert state == NotFound(slug="nonexistent-slug")
    assert fake_client.calls == [("get_page_by_slug", "nonexistent-slug")]


def test_page_transport_error_is_not_found(
    resolver: RouteResolver, fake_client: FakeCmsClient
) -> None:
    fake_client.failing.add("get_page_by_slug")
    assert isinstance(resolver.resolve("o-nama"), NotFound)
    assert len(fake_client.calls) == 1


def test_gallery_item(resolver: RouteResolver) -> None:
    state = resolver.resolve("galerija", "otvaranje-parka")

    assert isinstance(state, GalleryItem)
    assert state.gallery.slug == "otvaranje-parka"
    assert [image.caption for image in state.gallery.visible_images] == ["Prvi", "Drugi"]


def test_gallery_not_found_is_distinct(resolver: RouteResolver) -> None:
    state = resolver.resolve("galerija", "nema-je")

    assert isinstance(state, GalleryNotFound)
    assert not isinstance(state, NotFound)
    assert state.page.slug == "galerija"
    assert state.slug == "nema-je"


def test_service_item_and_not_found(resolver: RouteResolver) -> None:
    found = resolver.resolve("usluge", "izvod-iz-maticne-knjige")
    missing = resolver.resolve("usluge", "nepostojeca")

    assert isinstance(found, ServiceItem)
    assert found.service.name == "Izvod iz matične knjige"
    assert isinstance(missing, ServiceNotFound)
    assert missing.page.slug == "usluge"


def test_secondary_slug_ignored_for_plain_pages(
    resolver: RouteResolver, fake_client: FakeCmsClient
) -> None:
    """A sub-slug under a non-gallery, non-services page renders the page."""
    state = resolver.resolve("o-nama", "bilo-sta")

    assert isinstance(state, PageView)
    assert fake_client.called("get_gallery_by_slug") == []
    assert fake_client.called("get_service_by_slug") == []


def test_gallery_page_without_secondary_is_page_view(resolver: RouteResolver) -> None:
    state = resolver.resolve("galerija")
    assert isinstance(state, PageView)
    assert state.template == "gallery"


def test_section_failure_degrades_to_empty(
    resolver: RouteResolver, fake_client: FakeCmsClient, caplog: pytest.LogCaptureFixture
) -> None:
    """Section fetch errors are logged and the page renders with no sections."""
    fake_client.failing.add("get_sections")
    with caplog.at_level("WARNING", logger="civic_pages.routing"):
        state = resolver.resolve("pocetna")

    assert isinstance(state, PageView)
    assert state.sections == ()
    assert "sections of page 'pocetna' failed to load" in caplog.text


def test_posts_failure_degrades_to_empty(
    resolver: RouteResolver, fake_client: FakeCmsClient
) -> None:
    fake_client.failing.add("get_published_posts")
    state = resolver.resolve("o-nama")
    assert isinstance(state, PageView)
    assert state.posts == ()


def test_posts_template_receives_all_posts(resolver: RouteResolver) -> None:
    state = resolver.resolve("objave")
    assert isinstance(state, PageView)
    assert [post.slug for post in state.posts] == ["otvoren-park", "javni-poziv"]


def test_related_posts_limit(
    fake_client: FakeCmsClient, site_posts: list[typ.Any]
) -> None:
    fake_client.posts = [site_posts[0]] * 5
    resolver = RouteResolver(fake_client, related_posts_limit=2)
    state = resolver.resolve("o-nama")
    assert isinstance(state, PageView)
    assert len(state.posts) == 2


def test_page_builder_flag_wins_over_template(
    client_factory: type[FakeCmsClient],
) -> None:
    """A page-builder page keeps a registered template key but loads sections."""
    page = Page(40, "transparentnost", "Transparentnost", template="about", use_page_builder=True)
    client = client_factory(pages=[page])
    state = RouteResolver(client).resolve("transparentnost")

    assert isinstance(state, PageView)
    assert state.uses_page_builder
    assert client.called("get_sections") == [40]
    assert client.called("get_published_posts") == []


@pytest.mark.parametrize(
    ("template", "expected"),
    [("about", "about"), ("posts", "posts"), ("landing", "default"), (None, "default")],
)
def test_legacy_template_key(template: str | None, expected: str) -> None:
    assert legacy_template_key(template) == expected


def test_render_session_tokens() -> None:
    session = RenderSession()
    first = session.begin()
    second = session.begin()

    assert second > first
    assert not session.is_current(first)
    session.ensure_current(second)
    with pytest.raises(StaleResponseError):
        session.ensure_current(first)


def test_superseded_pass_discards_response(
    fake_client: FakeCmsClient, mocker: typ.Any
) -> None:
    """A navigation starting mid-fetch makes the older pass raise, not return."""
    session = RenderSession()
    resolver = RouteResolver(fake_client, session=session)
    original = fake_client.get_page_by_slug

    def slow_lookup(slug: str) -> Page:
        page = original(slug)
        session.begin()
        return page

    mocker.patch.object(fake_client, "get_page_by_slug", side_effect=slow_lookup)

    with pytest.raises(StaleResponseError):
        resolver.resolve("o-nama")
    assert fake_client.called("get_published_posts") == []


def test_explicit_token_is_checked(fake_client: FakeCmsClient) -> None:
    session = RenderSession()
    resolver = RouteResolver(fake_client, session=session)
    stale = session.begin()
    session.begin()

    with pytest.raises(StaleResponseError):
        resolver.resolve("o-nama", token=stale)


def test_resolve_post_schedules_view_increment(fake_client: FakeCmsClient) -> None:
    with DetachedTaskRunner() as tasks:
        state = RouteResolver(fake_client, tasks=tasks).resolve_post("otvoren-park")

    assert isinstance(state, PostItem)
    assert state.post.title == "Otvoren novi park"
    assert fake_client.views == ["otvoren-park"]


def test_resolve_post_missing(fake_client: FakeCmsClient) -> None:
    with DetachedTaskRunner() as tasks:
        state = RouteResolver(fake_client, tasks=tasks).resolve_post("nema")

    assert state == PostNotFound(slug="nema")
    assert fake_client.views == []


def test_view_increment_failure_never_surfaces(fake_client: FakeCmsClient) -> None:
    fake_client.failing.add("increment_post_view")
    with DetachedTaskRunner() as tasks:
        state = RouteResolver(fake_client, tasks=tasks).resolve_post("otvoren-park")
    assert isinstance(state, PostItem)


def test_gallery_page_lists_published_galleries(
    resolver: RouteResolver, fake_client: FakeCmsClient
) -> None:
    state = resolver.resolve("galerija")

    assert isinstance(state, PageView)
    assert [gallery.slug for gallery in state.galleries] == ["otvaranje-parka"]
    assert state.services == ()
    assert fake_client.called("get_published_galleries") == [None]
    assert fake_client.called("get_published_services") == []


def test_gallery_listing_failure_degrades_to_empty(
    resolver: RouteResolver,
    fake_client: FakeCmsClient,
    caplog: pytest.LogCaptureFixture,
) -> None:
    fake_client.failing.add("get_published_galleries")
    with caplog.at_level("WARNING", logger="civic_pages.routing"):
        state = resolver.resolve("galerija")

    assert isinstance(state, PageView)
    assert state.galleries == ()
    assert "galleries of page 'galerija' failed to load" in caplog.text


def test_services_page_lists_published_services(
    resolver: RouteResolver, fake_client: FakeCmsClient
) -> None:
    state = resolver.resolve("usluge")

    assert isinstance(state, PageView)
    assert [service.slug for service in state.services] == ["izvod-iz-maticne-knjige"]
    assert fake_client.called("get_published_galleries") == []


def test_services_listing_failure_degrades_to_empty(
    resolver: RouteResolver, fake_client: FakeCmsClient
) -> None:
    fake_client.failing.add("get_published_services")
    state = resolver.resolve("usluge")
    assert isinstance(state, PageView)
    assert state.services == ()


def test_posts_archive_second_page(fake_client: FakeCmsClient) -> None:
    resolver = RouteResolver(fake_client, posts_page_size=1)
    state = resolver.resolve("objave", posts_page=2)

    assert isinstance(state, PageView)
    assert [post.slug for post in state.posts] == ["javni-poziv"]
    assert (state.posts_page, state.posts_total_pages) == (2, 2)
    assert fake_client.called("get_published_posts") == [(2, 1)]


def test_posts_page_ignored_outside_archive(fake_client: FakeCmsClient) -> None:
    resolver = RouteResolver(fake_client, posts_page_size=1)
    state = resolver.resolve("o-nama", posts_page=3)

    assert isinstance(state, PageView)
    assert state.posts_page == 1
    assert fake_client.called("get_published_posts") == [(1, 1)]


def test_view_increment_uses_counter_client(
    fake_client: FakeCmsClient, client_factory: type[FakeCmsClient]
) -> None:
    counter = client_factory()
    with DetachedTaskRunner() as tasks:
        resolver = RouteResolver(fake_client, tasks=tasks, counter=counter)
        state = resolver.resolve_post("otvoren-park")

    assert isinstance(state, PostItem)
    assert counter.views == ["otvoren-park"]
    assert fake_client.views == []
