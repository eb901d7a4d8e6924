"""Behaviour tests for public route resolution using pytest-bdd.

These scenarios open public URLs against the in-memory CMS backend from
``tests/conftest.py``, render the resolved state through
:class:`~civic_pages.site.SiteRenderer`, and assert on the resulting HTML and
the backend calls that were made.

Usage
-----
Run ``pytest tests/bdd/test_route_resolution.py -v``. The scenarios live in
``features/route_resolution.feature``.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, scenarios, then, when

from civic_pages.routing import RouteResolver
from civic_pages.site import SiteRenderer

if typ.TYPE_CHECKING:
    from civic_pages.config import SiteConfig

    from ..conftest import FakeCmsClient

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "route_resolution.feature"
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Share mutable scenario data across pytest-bdd steps."""
    return {}


@given("the municipal site backend")
def given_backend(
    fake_client: FakeCmsClient, site_config: SiteConfig, scenario_state: ScenarioState
) -> None:
    scenario_state["client"] = fake_client
    scenario_state["renderer"] = SiteRenderer(
        dc.replace(site_config, language="en"), media_url=fake_client.media_url
    )


@when(parsers.parse('a visitor opens "{path}"'))
def when_open(path: str, scenario_state: ScenarioState) -> None:
    """Split ``path`` into slugs, resolve it, and render the result."""
    client = typ.cast("FakeCmsClient", scenario_state["client"])
    renderer = typ.cast("SiteRenderer", scenario_state["renderer"])
    primary, _, secondary = path.strip("/").partition("/")
    state = RouteResolver(client).resolve(primary, secondary or None)
    scenario_state["state"] = state
    scenario_state["soup"] = BeautifulSoup(renderer.render(state), "html.parser")


@then(parsers.parse('the page renders with the "{template}" template'))
def then_template(template: str, scenario_state: ScenarioState) -> None:
    soup = typ.cast("BeautifulSoup", scenario_state["soup"])
    article = soup.find(attrs={"data-render-mode": "template"})
    assert article is not None, "Expected a template-mode page"
    assert article["data-template"] == template


@then(parsers.parse('the related posts are "{slugs}"'))
def then_related_posts(slugs: str, scenario_state: ScenarioState) -> None:
    soup = typ.cast("BeautifulSoup", scenario_state["soup"])
    rendered = [tag["data-post-slug"] for tag in soup.select("[data-post-slug]")]
    assert rendered == [slug.strip() for slug in slugs.split(",")]


@then(
    parsers.parse('the gallery "{slug}" is shown with a link back to "{href}"')
)
def then_gallery_shown(slug: str, href: str, scenario_state: ScenarioState) -> None:
    soup = typ.cast("BeautifulSoup", scenario_state["soup"])
    gallery = soup.find(attrs={"data-gallery-slug": slug})
    assert gallery is not None, f"Expected gallery {slug}"
    assert gallery.find(attrs={"data-back-link": True})["href"] == href


@then(parsers.parse('the gallery cards link to "{hrefs}"'))
def then_gallery_cards(hrefs: str, scenario_state: ScenarioState) -> None:
    soup = typ.cast("BeautifulSoup", scenario_state["soup"])
    links = [card.find("a")["href"] for card in soup.select(".gallery-card")]
    assert links == [href.strip() for href in hrefs.split(",")]


@then(parsers.parse('a "{kind}" not-found message links back to "{href}"'))
def then_not_found(kind: str, href: str, scenario_state: ScenarioState) -> None:
    soup = typ.cast("BeautifulSoup", scenario_state["soup"])
    block = soup.find(attrs={"data-not-found": kind})
    assert block is not None, f"Expected a {kind} not-found block"
    assert block.find(attrs={"data-back-link": True})["href"] == href


@then("the backend only received the page lookup")
def then_single_lookup(scenario_state: ScenarioState) -> None:
    client = typ.cast("FakeCmsClient", scenario_state["client"])
    assert [name for name, _ in client.calls] == ["get_page_by_slug"]
