"""Page Builder sections: typed model, layout, renderer, and composer."""

from __future__ import annotations

from .composer import PageBuilderComposer, visible_sections
from .layout import ResolvedLayout, resolve_layout
from .models import (
    HERO_TYPES,
    Section,
    SectionStyle,
    SectionType,
    build_payload,
    section_from_payload,
)
from .renderer import SectionRenderer, team_columns, youtube_embed_url

__all__ = [
    "HERO_TYPES",
    "PageBuilderComposer",
    "ResolvedLayout",
    "Section",
    "SectionRenderer",
    "SectionStyle",
    "SectionType",
    "build_payload",
    "resolve_layout",
    "section_from_payload",
    "team_columns",
    "visible_sections",
    "youtube_embed_url",
]
