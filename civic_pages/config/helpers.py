"""Utility helpers shared by the site configuration loader."""

from __future__ import annotations

import typing as typ

from .._coerce import coerce_bool, coerce_int, optional_str
from .models import NavTemplateEntry, SiteConfigError, ThemeConfig

DEFAULT_NAVIGATION: tuple[NavTemplateEntry, ...] = (
    NavTemplateEntry(id="home", title="Početna", slug="pocetna", sort_order=0),
    NavTemplateEntry(id="about", title="O nama", slug="o-nama", sort_order=1),
    NavTemplateEntry(
        id="services", title="Usluge", slug="usluge", sort_order=2, auto_subpages=True
    ),
    NavTemplateEntry(id="gallery", title="Galerija", slug="galerija", sort_order=3),
    NavTemplateEntry(id="posts", title="Objave", slug="objave", sort_order=4),
    NavTemplateEntry(id="contact", title="Kontakt", slug="kontakt", sort_order=5),
)


def _build_theme_config(payload: typ.Mapping[str, typ.Any]) -> ThemeConfig:
    """Build a ThemeConfig instance from the provided mapping payload."""
    base = ThemeConfig()
    return ThemeConfig(
        site_name=payload.get("site_name", base.site_name),
        tagline=payload.get("tagline", base.tagline),
        address=optional_str(payload.get("address")),
        phone=optional_str(payload.get("phone")),
        email=optional_str(payload.get("email")),
        working_hours=optional_str(payload.get("working_hours")),
        cta_background=payload.get("cta_background", base.cta_background),
    )


def _build_nav_entry(index: int, payload: typ.Mapping[str, typ.Any]) -> NavTemplateEntry:
    """Build a single navigation entry, validating its slug and children."""
    slug = optional_str(payload.get("slug"))
    if slug is None:
        msg = f"navigation[{index}] is missing 'slug'."
        raise SiteConfigError(msg)
    children_raw = payload.get("children") or []
    match children_raw:
        case list():
            children = tuple(
                text for text in (optional_str(child) for child in children_raw) if text
            )
        case _:
            msg = f"navigation[{index}].children must be a list of slugs."
            raise SiteConfigError(msg)
    auto_subpages = coerce_bool(payload.get("auto_subpages"))
    if auto_subpages and children:
        msg = f"navigation[{index}] cannot combine 'children' with 'auto_subpages'."
        raise SiteConfigError(msg)
    return NavTemplateEntry(
        id=optional_str(payload.get("id")) or slug,
        title=optional_str(payload.get("title")) or slug.replace("-", " ").title(),
        slug=slug,
        sort_order=coerce_int(payload.get("sort_order"), index),
        children=children,
        auto_subpages=auto_subpages,
    )


def _build_navigation(payload: object) -> tuple[NavTemplateEntry, ...]:
    """Return navigation entries from YAML, or the built-in default template."""
    match payload:
        case None:
            return DEFAULT_NAVIGATION
        case list():
            entries: list[NavTemplateEntry] = []
            for index, item in enumerate(payload):
                if not isinstance(item, dict):
                    msg = f"navigation[{index}] must be a mapping."
                    raise SiteConfigError(msg)
                entries.append(_build_nav_entry(index, item))
            return tuple(entries)
        case _:
            msg = "'navigation' must be a list of entries."
            raise SiteConfigError(msg)


__all__ = [
    "DEFAULT_NAVIGATION",
    "_build_nav_entry",
    "_build_navigation",
    "_build_theme_config",
]
