"""Compose a page body from its Page Builder sections."""

from __future__ import annotations

import typing as typ

from markupsafe import Markup

from .renderer import SectionRenderer

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import Section


def visible_sections(sections: cabc.Iterable[Section]) -> list[Section]:
    """Return visible sections in ascending ``sort_order``.

    ``sorted`` is stable, so sections sharing a sort order keep the order the
    backend returned them in.

    Examples
    --------
    >>> from civic_pages.sections.models import Section
    >>> rows = [Section(1, None, 2), Section(2, None, 1), Section(3, None, 1, False)]
    >>> [section.id for section in visible_sections(rows)]
    [2, 1]
    """
    return sorted(
        (section for section in sections if section.is_visible),
        key=lambda section: section.sort_order,
    )


class PageBuilderComposer:
    """Render a page's section collection in display order."""

    def __init__(self, renderer: SectionRenderer | None = None) -> None:
        self.renderer = renderer or SectionRenderer()

    def render(self, sections: cabc.Iterable[Section]) -> Markup:
        """Return the concatenated HTML of every visible section.

        An empty visible set renders the "no sections to display" block rather
        than an empty string, so an empty page stays distinguishable from one
        that failed to load.
        """
        ordered = visible_sections(sections)
        if not ordered:
            template = self.renderer.env.get_template("sections/empty.jinja")
            return Markup(template.render(messages=self.renderer.messages))
        fragments = [self.renderer.render(section) for section in ordered]
        return Markup("\n").join(fragment for fragment in fragments if fragment)


__all__ = ["PageBuilderComposer", "visible_sections"]
