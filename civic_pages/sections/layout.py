"""Layout resolution for Page Builder sections.

Every section element gets its width, height, padding and background from
the payload's shared presentation fields. Height applies to hero sections
only; non-hero sections get standard vertical padding instead, whatever the
payload says. Backgrounds become inline style on the section element so one
section's colours never leak into its siblings.

Examples
--------
>>> from civic_pages.sections.models import section_from_payload
>>> hero = section_from_payload({"id": 1, "type": "hero-stack", "data": {}})
>>> resolve_layout(hero).classes
'max-w-7xl mx-auto px-4 sm:px-6 lg:px-8 min-h-[60vh]'
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .._constants import (
    CONTAINED_CLASSES,
    DEFAULT_HERO_HEIGHT_CLASS,
    FULL_WIDTH_CLASSES,
    HERO_HEIGHT_CLASSES,
    SECTION_PADDING_CLASS,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import Section, SectionStyle

FULL_WIDTH_LAYOUT = "full-width"


@dc.dataclass(slots=True, frozen=True)
class ResolvedLayout:
    """Class list and inline style computed for a section element."""

    classes: str
    style: str


def width_classes(layout: str | None) -> str:
    """Return the width classes for a payload ``layout`` value."""
    if layout == FULL_WIDTH_LAYOUT:
        return FULL_WIDTH_CLASSES
    return CONTAINED_CLASSES


def height_class(section: Section) -> str | None:
    """Return the minimum-height class, or None for non-hero sections."""
    if not section.is_hero:
        return None
    return HERO_HEIGHT_CLASSES.get(section.style.height or "", DEFAULT_HERO_HEIGHT_CLASS)


def background_style(
    style: SectionStyle,
    media_url: cabc.Callable[[str], str] | None = None,
    *,
    default_background: str | None = None,
) -> str:
    """Build the inline CSS declarations for a section background."""
    declarations: list[str] = []
    background = style.background_color or default_background
    if background:
        declarations.append(f"background-color: {background}")
    if style.text_color:
        declarations.append(f"color: {style.text_color}")
    if style.background_image:
        image = media_url(style.background_image) if media_url else style.background_image
        declarations.extend(
            (
                f"background-image: url('{image}')",
                "background-size: cover",
                "background-position: center",
                "background-repeat: no-repeat",
            )
        )
    return "; ".join(declarations)


def resolve_layout(
    section: Section,
    media_url: cabc.Callable[[str], str] | None = None,
    *,
    default_background: str | None = None,
) -> ResolvedLayout:
    """Compute the classes and inline style for ``section``.

    Parameters
    ----------
    section : Section
        Section whose payload supplies the presentation fields.
    media_url : Callable[[str], str], optional
        Resolver applied to background image references.
    default_background : str, optional
        Colour used when the payload sets no ``backgroundColor``.

    Returns
    -------
    ResolvedLayout
        Width, height, and padding classes followed by the section's own
        ``css_classes``, plus the background inline style.
    """
    classes = [width_classes(section.style.layout)]
    height = height_class(section)
    if height:
        classes.append(height)
    if not section.is_hero:
        classes.append(SECTION_PADDING_CLASS)
    if section.css_classes:
        classes.append(section.css_classes)
    return ResolvedLayout(
        classes=" ".join(classes),
        style=background_style(
            section.style, media_url, default_background=default_background
        ),
    )


__all__ = [
    "FULL_WIDTH_LAYOUT",
    "ResolvedLayout",
    "background_style",
    "height_class",
    "resolve_layout",
    "width_classes",
]
