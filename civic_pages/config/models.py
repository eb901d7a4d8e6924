"""Typed dataclasses describing the public site configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from .._constants import DEFAULT_CTA_BACKGROUND, DEFAULT_LANGUAGE
from ..client import DEFAULT_USER_AGENT


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class ApiConfig:
    """Connection settings for the CMS backend."""

    base_url: str
    timeout: float = 10.0
    token: str | None = None
    user_agent: str = DEFAULT_USER_AGENT


@dc.dataclass(slots=True)
class ThemeConfig:
    """Site-wide copy and contact fallbacks shown in the header and footer."""

    site_name: str = "Opština"
    tagline: str = "Zvanična prezentacija"
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    working_hours: str | None = None
    cta_background: str = DEFAULT_CTA_BACKGROUND


@dc.dataclass(slots=True, frozen=True)
class NavTemplateEntry:
    """One top-level slot of the navigation menu.

    ``children`` lists fixed child slugs in display order. ``auto_subpages``
    instead fills the dropdown with the entry page's direct sub-pages. The
    two are mutually exclusive.
    """

    id: str
    title: str
    slug: str
    sort_order: int = 0
    children: tuple[str, ...] = ()
    auto_subpages: bool = False


@dc.dataclass(slots=True)
class SiteConfig:
    """Aggregated configuration for rendering the public site."""

    api: ApiConfig
    theme: ThemeConfig = dc.field(default_factory=ThemeConfig)
    output_dir: Path = Path("public")
    home_slug: str = "pocetna"
    posts_page_size: int = 50
    related_posts_limit: int = 6
    navigation: tuple[NavTemplateEntry, ...] = ()
    language: str = DEFAULT_LANGUAGE


__all__ = [
    "ApiConfig",
    "NavTemplateEntry",
    "SiteConfig",
    "SiteConfigError",
    "ThemeConfig",
]
