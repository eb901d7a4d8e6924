"""Render Page Builder sections to HTML fragments.

:class:`SectionRenderer` dispatches on the section's payload class to one
Jinja partial per variant under ``templates/sections/`` and wraps the result
in a ``<section>`` element carrying the resolved layout classes and inline
background style. The renderer never raises for content problems: hidden
sections yield ``None``, unknown types yield a visible placeholder naming the
type, and a template or payload error inside a known type is logged and
replaced with a "broken section" placeholder so the rest of the page still
renders.

Examples
--------
>>> from civic_pages.sections.models import section_from_payload
>>> renderer = SectionRenderer()
>>> hidden = section_from_payload({"id": 1, "type": "cta-one", "isVisible": False})
>>> renderer.render(hidden) is None
True
"""

from __future__ import annotations

import logging
import re
import typing as typ
from urllib.parse import parse_qs, urlparse

from jinja2 import TemplateError
from markupsafe import Markup

from .._constants import (
    DEFAULT_CTA_BACKGROUND,
    LOGO_MARQUEE_THRESHOLD,
    TEAM_MAX_COLUMNS,
    messages_for,
)
from ..templating import create_environment
from .layout import resolve_layout
from .models import (
    CardsPayload,
    ContactPayload,
    CtaPayload,
    CustomHtmlPayload,
    HeroPayload,
    HeroVideoPayload,
    LogosPayload,
    TeamPayload,
    UnknownPayload,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from jinja2 import Environment

    from .models import Section, SectionType

logger = logging.getLogger(__name__)

_YOUTUBE_ID = re.compile(r"^[A-Za-z0-9_-]{6,}$")
_YOUTUBE_HOSTS = {"youtube.com", "www.youtube.com", "m.youtube.com", "youtu.be"}
_RENDER_ERRORS = (TemplateError, TypeError, ValueError, AttributeError, KeyError)


def youtube_embed_url(url: str | None) -> str | None:
    """Return the embeddable player URL for a YouTube link, or None.

    Examples
    --------
    >>> youtube_embed_url("https://youtu.be/dQw4w9WgXcQ")
    'https://www.youtube.com/embed/dQw4w9WgXcQ?rel=0'
    >>> youtube_embed_url("https://vimeo.com/1") is None
    True
    """
    if not url:
        return None
    parsed = urlparse(url.strip())
    host = parsed.netloc.lower()
    if host not in _YOUTUBE_HOSTS:
        return None
    video_id: str | None = None
    if host == "youtu.be":
        video_id = parsed.path.strip("/").split("/")[0]
    elif parsed.path == "/watch":
        video_id = (parse_qs(parsed.query).get("v") or [None])[0]
    else:
        parts = parsed.path.strip("/").split("/")
        if len(parts) >= 2 and parts[0] in {"embed", "shorts", "live", "v"}:
            video_id = parts[1]
    if not video_id or not _YOUTUBE_ID.match(video_id):
        return None
    return f"https://www.youtube.com/embed/{video_id}?rel=0"


def team_columns(member_count: int) -> int:
    """Return the grid column count for a team of ``member_count`` people."""
    return max(1, min(member_count, TEAM_MAX_COLUMNS))


def _identity(ref: str) -> str:
    return ref


class SectionRenderer:
    """Render individual sections through the section partials.

    Parameters
    ----------
    env : Environment, optional
        Jinja environment to load ``sections/*.jinja`` from. A fresh one
        rooted at ``templates_dir`` is created when omitted.
    templates_dir : Path, optional
        Template root used when ``env`` is not provided.
    media_url : Callable[[str], str], optional
        Maps stored media references to absolute URLs. References pass
        through unchanged when omitted.
    language : str, optional
        Language of placeholder copy. Defaults to Serbian.
    cta_background : str, optional
        Background colour for CTA sections that do not set one.
    """

    def __init__(
        self,
        env: Environment | None = None,
        *,
        templates_dir: Path | None = None,
        media_url: cabc.Callable[[str], str] | None = None,
        language: str | None = None,
        cta_background: str = DEFAULT_CTA_BACKGROUND,
    ) -> None:
        self.env = env or create_environment(templates_dir)
        self.media_url = media_url or _identity
        self.messages = messages_for(language)
        self.cta_background = cta_background

    def render(self, section: Section) -> Markup | None:
        """Return the HTML for ``section``, or None when it is hidden."""
        if not section.is_visible:
            return None
        if section.type is None or isinstance(section.data, UnknownPayload):
            return self.placeholder("unknown", section)
        try:
            return self._render_known(section)
        except _RENDER_ERRORS:
            logger.exception(
                "Failed to render section %s of type %s", section.id, section.raw_type
            )
            return self.placeholder("broken", section)

    def placeholder(self, state: str, section: Section) -> Markup:
        """Render the visible fallback block for an unknown or broken section."""
        template = self.env.get_template(f"sections/{state}.jinja")
        return Markup(
            template.render(
                section=section,
                section_type=section.raw_type or "",
                messages=self.messages,
            )
        )

    def _render_known(self, section: Section) -> Markup:
        data = section.data
        section_type = typ.cast("SectionType", section.type)
        partial = section_type.value.replace("-", "_")
        context: dict[str, typ.Any] = {
            "section": section,
            "data": data,
            "messages": self.messages,
            "media": self._media,
        }
        default_background: str | None = None
        match data:
            case HeroVideoPayload(video_url=video_url):
                template = "hero_video"
                context["embed_url"] = youtube_embed_url(video_url)
            case HeroPayload():
                template = partial
            case CardsPayload(cards=cards):
                template = "cards"
                context["variant"] = section_type.value
                context["cards"] = cards
            case ContactPayload():
                template = partial
            case CtaPayload():
                template = "cta"
                default_background = self.cta_background
            case LogosPayload(logos=logos):
                template = "logos"
                context["marquee"] = len(logos) > LOGO_MARQUEE_THRESHOLD
                context["strip"] = logos + logos
            case TeamPayload(members=members):
                template = "team"
                context["columns"] = team_columns(len(members))
            case CustomHtmlPayload(html=html):
                template = "custom_html"
                context["html"] = Markup(html) if html.strip() else None
            case _:
                msg = f"No template for payload {type(data).__name__}"
                raise TypeError(msg)

        layout = resolve_layout(
            section, self._media, default_background=default_background
        )
        body = self.env.get_template(f"sections/{template}.jinja").render(**context)
        wrapper = self.env.get_template("sections/section.jinja")
        return Markup(
            wrapper.render(section=section, layout=layout, body=Markup(body))
        )

    def _media(self, ref: str | None) -> str:
        if not ref:
            return ""
        return self.media_url(ref)


__all__ = ["SectionRenderer", "team_columns", "youtube_embed_url"]
