"""Shared Jinja environment for the section and page templates."""

from __future__ import annotations

import datetime as dt
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from ._constants import POST_ROUTE_PREFIX

TEMPLATES_DIR = Path(__file__).parent / "templates"


def _format_date(value: dt.datetime | None, fmt: str = "%d.%m.%Y.") -> str:
    """Format a datetime the way Serbian dates are written, or return ''."""
    if value is None:
        return ""
    return value.strftime(fmt)


def create_environment(templates_dir: Path | None = None) -> Environment:
    """Return a Jinja environment rooted at ``templates_dir``.

    Autoescaping is always on; templates mark trusted markup (page content
    and custom-HTML sections) with ``|safe`` or receive ``Markup`` objects.
    """
    env = Environment(
        loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["date"] = _format_date
    env.globals["post_prefix"] = POST_ROUTE_PREFIX
    return env


__all__ = ["TEMPLATES_DIR", "create_environment"]
