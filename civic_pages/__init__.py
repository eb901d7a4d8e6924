"""Render the public site of a municipal CMS from its REST API.

This package exposes the CLI entry points used by ``civic render`` and
``civic build`` to resolve page slugs, compose Page Builder sections, and
write the resulting HTML.

Exports
-------
- ``app``: Cyclopts application holding the subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from civic_pages import main
>>> main()  # doctest: +SKIP
>>> from civic_pages import app
>>> app.name  # doctest: +SKIP
('civic',)
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
