"""Compose the site menu from a structural template and the page collection.

The menu's shape (which top-level slots exist and in which order) comes from
configuration; the CMS only supplies which pages exist. An entry whose page is
missing is dropped, fixed child slugs are resolved in the listed order with
missing ones skipped, and ``auto_subpages`` entries list the page's direct
sub-pages by ``sort_order``. All functions here are pure.

Examples
--------
>>> from civic_pages.config import NavTemplateEntry
>>> from civic_pages.models import Page
>>> pages = [Page(1, "usluge", "Usluge"), Page(2, "porezi", "Porezi", parent_id=1)]
>>> entry = NavTemplateEntry("services", "Usluge", "usluge", auto_subpages=True)
>>> [child.slug for child in build_navigation([entry], pages)[0].children]
['porezi']
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from types import MappingProxyType

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config.models import NavTemplateEntry
    from .models import Page


def _by_sort_order(pages: cabc.Iterable[Page]) -> tuple[Page, ...]:
    return tuple(sorted(pages, key=lambda page: page.sort_order))


@dc.dataclass(slots=True, frozen=True)
class PageIndex:
    """Immutable lookups over one flat page collection."""

    by_slug: typ.Mapping[str, Page]
    by_id: typ.Mapping[int, Page]
    by_parent: typ.Mapping[int | None, tuple[Page, ...]]

    @classmethod
    def build(cls, pages: cabc.Iterable[Page]) -> PageIndex:
        """Index ``pages``; on duplicate slugs or ids the first page wins."""
        by_slug: dict[str, Page] = {}
        by_id: dict[int, Page] = {}
        grouped: dict[int | None, list[Page]] = {}
        for page in pages:
            by_slug.setdefault(page.slug, page)
            by_id.setdefault(page.id, page)
            grouped.setdefault(page.parent_id, []).append(page)
        return cls(
            by_slug=MappingProxyType(by_slug),
            by_id=MappingProxyType(by_id),
            by_parent=MappingProxyType(
                {parent: _by_sort_order(children) for parent, children in grouped.items()}
            ),
        )

    def children_of(self, page_id: int) -> tuple[Page, ...]:
        """Return the direct sub-pages of ``page_id`` ordered by sort order."""
        return self.by_parent.get(page_id, ())


@dc.dataclass(slots=True, frozen=True)
class NavigationItem:
    """A rendered menu entry."""

    title: str
    slug: str
    page: Page
    children: tuple[NavigationItem, ...] = ()

    @property
    def has_dropdown(self) -> bool:
        return bool(self.children)

    @property
    def href(self) -> str:
        return f"/{self.slug}"


def _leaf(page: Page) -> NavigationItem:
    return NavigationItem(title=page.title, slug=page.slug, page=page)


def build_navigation(
    template: cabc.Iterable[NavTemplateEntry],
    pages: cabc.Iterable[Page] | PageIndex,
) -> tuple[NavigationItem, ...]:
    """Compose menu items from ``template`` and the available pages.

    Parameters
    ----------
    template : Iterable[NavTemplateEntry]
        Structural menu slots; processed in ascending ``sort_order`` with the
        listed order breaking ties.
    pages : Iterable[Page] | PageIndex
        Flat page collection, or an index already built from it.

    Returns
    -------
    tuple[NavigationItem, ...]
        Menu items for every slot whose page exists. The entry's configured
        title labels the top-level item; child items use page titles.
    """
    index = pages if isinstance(pages, PageIndex) else PageIndex.build(pages)
    items: list[NavigationItem] = []
    for entry in sorted(template, key=lambda entry: entry.sort_order):
        page = index.by_slug.get(entry.slug)
        if page is None:
            continue
        if entry.auto_subpages:
            children = index.children_of(page.id)
        else:
            children = tuple(
                index.by_slug[slug] for slug in entry.children if slug in index.by_slug
            )
        items.append(
            NavigationItem(
                title=entry.title or page.title,
                slug=page.slug,
                page=page,
                children=tuple(_leaf(child) for child in children),
            )
        )
    return tuple(items)


def build_hierarchy(pages: cabc.Iterable[Page]) -> list[Page]:
    """Return root pages with ``children`` populated from ``parent_id``.

    The input pages are copied, so the caller's objects keep their original
    ``children``. Pages whose parent is not in the collection are treated as
    roots. Siblings are ordered by ``sort_order``.
    """
    copies = [dc.replace(page, children=[]) for page in pages]
    by_id = {page.id: page for page in copies}
    roots: list[Page] = []
    for page in copies:
        parent = by_id.get(page.parent_id) if page.parent_id is not None else None
        if parent is None or parent is page:
            roots.append(page)
        else:
            parent.children.append(page)
    for page in copies:
        page.children.sort(key=lambda child: child.sort_order)
    roots.sort(key=lambda page: page.sort_order)
    return roots


def flatten_pages(roots: cabc.Iterable[Page]) -> list[Page]:
    """Return pages of a hierarchy in depth-first, pre-order sequence."""
    flat: list[Page] = []
    stack = list(reversed(list(roots)))
    while stack:
        page = stack.pop()
        flat.append(page)
        stack.extend(reversed(page.children))
    return flat


def page_depth(page: Page, pages: cabc.Iterable[Page] | PageIndex) -> int:
    """Return how many ancestors ``page`` has (0 for a root page).

    Broken or cyclic parent chains stop at the first missing or repeated
    page.
    """
    index = pages if isinstance(pages, PageIndex) else PageIndex.build(pages)
    depth = 0
    seen = {page.id}
    current = page
    while current.parent_id is not None:
        parent = index.by_id.get(current.parent_id)
        if parent is None or parent.id in seen:
            break
        seen.add(parent.id)
        depth += 1
        current = parent
    return depth


__all__ = [
    "NavigationItem",
    "PageIndex",
    "build_hierarchy",
    "build_navigation",
    "flatten_pages",
    "page_depth",
]
