"""Load and validate the public site configuration.

This subpackage parses ``config/site.yaml``, applies defaults and environment
overrides for the CMS API connection, and produces typed dataclasses
(:class:`SiteConfig`, :class:`ApiConfig`, :class:`ThemeConfig`,
:class:`NavTemplateEntry`) consumed by the CLI, the route resolver, and the
site builder. When the file has no ``navigation`` block the built-in menu
template (:data:`DEFAULT_NAVIGATION`) is used.

Examples
--------
>>> from pathlib import Path
>>> from civic_pages.config import load_site_config
>>> site = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
>>> [entry.slug for entry in site.navigation][:2]  # doctest: +SKIP
['pocetna', 'o-nama']
"""

from .helpers import DEFAULT_NAVIGATION
from .loader import API_TOKEN_ENV, API_URL_ENV, load_site_config
from .models import ApiConfig, NavTemplateEntry, SiteConfig, SiteConfigError, ThemeConfig

__all__ = [
    "API_TOKEN_ENV",
    "API_URL_ENV",
    "DEFAULT_NAVIGATION",
    "ApiConfig",
    "NavTemplateEntry",
    "SiteConfig",
    "SiteConfigError",
    "ThemeConfig",
    "load_site_config",
]
