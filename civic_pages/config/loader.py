"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .._coerce import coerce_int, optional_str
from .helpers import _build_navigation, _build_theme_config
from .models import ApiConfig, SiteConfig, SiteConfigError

API_URL_ENV = "CIVIC_API_URL"
API_TOKEN_ENV = "CIVIC_API_TOKEN"  # noqa: S105 - environment variable name


def load_site_config(
    path: Path, *, environ: typ.Mapping[str, str] | None = None
) -> SiteConfig:
    """Load the YAML configuration describing the public site.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/site.yaml``).
    environ : Mapping[str, str], optional
        Environment used for ``CIVIC_API_URL``/``CIVIC_API_TOKEN`` overrides.
        Defaults to ``os.environ``.

    Returns
    -------
    SiteConfig
        Parsed configuration with defaults applied.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If required fields are missing or invalid (for example, no API base
        URL is configured anywhere).
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from civic_pages.config import load_site_config
    >>> config = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
    >>> config.api.base_url  # doctest: +SKIP
    'http://localhost:3001/api'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    env = os.environ if environ is None else environ

    api = _build_api_config(raw.get("api") or {}, env)
    theme = _build_theme_config(raw.get("theme") or {})
    site = raw.get("site") or {}
    if not isinstance(site, dict):
        msg = "'site' must be a mapping."
        raise SiteConfigError(msg)

    posts_page_size = coerce_int(site.get("posts_page_size"), 50)
    related_posts_limit = coerce_int(site.get("related_posts_limit"), 6)
    if posts_page_size < 1 or related_posts_limit < 0:
        msg = "'site.posts_page_size' must be positive and 'site.related_posts_limit' non-negative."
        raise SiteConfigError(msg)

    return SiteConfig(
        api=api,
        theme=theme,
        output_dir=Path(site.get("output_dir", "public")),
        home_slug=optional_str(site.get("home_slug")) or "pocetna",
        posts_page_size=posts_page_size,
        related_posts_limit=related_posts_limit,
        navigation=_build_navigation(raw.get("navigation")),
        language=optional_str(site.get("language")) or "sr",
    )


def _build_api_config(
    payload: typ.Mapping[str, typ.Any], env: typ.Mapping[str, str]
) -> ApiConfig:
    """Build the API settings, letting environment variables win."""
    if not isinstance(payload, dict):
        msg = "'api' must be a mapping."
        raise SiteConfigError(msg)
    base_url = optional_str(env.get(API_URL_ENV)) or optional_str(payload.get("base_url"))
    if base_url is None:
        msg = f"'api.base_url' is required (or set {API_URL_ENV})."
        raise SiteConfigError(msg)
    token = optional_str(env.get(API_TOKEN_ENV)) or optional_str(payload.get("token"))
    timeout_raw = payload.get("timeout", 10.0)
    try:
        timeout = float(timeout_raw)
    except (TypeError, ValueError) as exc:
        msg = f"'api.timeout' must be a number, got {timeout_raw!r}."
        raise SiteConfigError(msg) from exc
    api = ApiConfig(base_url=base_url.rstrip("/"), timeout=timeout, token=token)
    user_agent = optional_str(payload.get("user_agent"))
    if user_agent:
        api.user_agent = user_agent
    return api


__all__ = ["API_TOKEN_ENV", "API_URL_ENV", "load_site_config"]
