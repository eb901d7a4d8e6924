"""Page Builder section model.

A page built with the Page Builder is an ordered list of sections. Each
section carries a closed ``type`` discriminator and a payload whose shape
depends on that type. The backend stores payloads as free-form JSON in camelCase;
:func:`section_from_payload` turns them into one dataclass per variant so the
renderer can dispatch with ``match`` on the payload class.

Type strings the renderer does not know are preserved in
:attr:`Section.raw_type` and paired with :class:`UnknownPayload` instead of
being rejected, because a newer dashboard may author sections this site has
no template for yet.

Examples
--------
>>> section = section_from_payload(
...     {"id": 1, "type": "cta-one", "sortOrder": 2,
...      "data": {"title": "Pišite nam", "buttonText": "Kontakt",
...               "buttonLink": "/kontakt"}}
... )
>>> section.type
<SectionType.CTA_ONE: 'cta-one'>
>>> section.data.button.text
'Kontakt'
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

from .._coerce import coerce_bool, coerce_int, optional_int, optional_str


class SectionType(enum.StrEnum):
    """Section variants the Page Builder can author."""

    HERO_STACK = "hero-stack"
    HERO_LEFT = "hero-left"
    HERO_IMAGE = "hero-image"
    HERO_VIDEO = "hero-video"
    CARD_TOP = "card-top"
    CARD_BOTTOM = "card-bottom"
    CARD_LEFT = "card-left"
    CARD_RIGHT = "card-right"
    CONTACT_ONE = "contact-one"
    CONTACT_TWO = "contact-two"
    CTA_ONE = "cta-one"
    LOGOS_ONE = "logos-one"
    TEAM_ONE = "team-one"
    CUSTOM_HTML = "custom-html"


HERO_TYPES: frozenset[SectionType] = frozenset(
    {
        SectionType.HERO_STACK,
        SectionType.HERO_LEFT,
        SectionType.HERO_IMAGE,
        SectionType.HERO_VIDEO,
    }
)
CARD_TYPES: frozenset[SectionType] = frozenset(
    {
        SectionType.CARD_TOP,
        SectionType.CARD_BOTTOM,
        SectionType.CARD_LEFT,
        SectionType.CARD_RIGHT,
    }
)
CONTACT_TYPES: frozenset[SectionType] = frozenset(
    {SectionType.CONTACT_ONE, SectionType.CONTACT_TWO}
)

BUTTON_STYLES = ("primary", "secondary", "outline")


@dc.dataclass(slots=True, frozen=True)
class SectionStyle:
    """Presentation fields shared by every section payload."""

    layout: str | None = None
    height: str | None = None
    background_color: str | None = None
    text_color: str | None = None
    background_image: str | None = None


@dc.dataclass(slots=True, frozen=True)
class CallToAction:
    """Button shown in hero, card, and CTA sections."""

    text: str | None = None
    link: str | None = None
    style: str = "primary"

    @property
    def is_renderable(self) -> bool:
        """Return True when both the label and the target are present."""
        return bool(self.text and self.link)


@dc.dataclass(slots=True, frozen=True)
class HeroPayload:
    title: str | None = None
    subtitle: str | None = None
    description: str | None = None
    button: CallToAction = dc.field(default_factory=CallToAction)
    image: str | None = None
    style: SectionStyle = dc.field(default_factory=SectionStyle)


@dc.dataclass(slots=True, frozen=True)
class HeroVideoPayload:
    title: str | None = None
    subtitle: str | None = None
    description: str | None = None
    button: CallToAction = dc.field(default_factory=CallToAction)
    video_url: str | None = None
    style: SectionStyle = dc.field(default_factory=SectionStyle)


@dc.dataclass(slots=True, frozen=True)
class Card:
    title: str | None = None
    description: str | None = None
    image: str | None = None
    link: str | None = None


@dc.dataclass(slots=True, frozen=True)
class CardsPayload:
    title: str | None = None
    subtitle: str | None = None
    description: str | None = None
    cards: tuple[Card, ...] = ()
    button: CallToAction = dc.field(default_factory=CallToAction)
    style: SectionStyle = dc.field(default_factory=SectionStyle)


@dc.dataclass(slots=True, frozen=True)
class ContactInfo:
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    working_hours: str | None = None
    map_url: str | None = None


@dc.dataclass(slots=True, frozen=True)
class ContactPayload:
    title: str | None = None
    subtitle: str | None = None
    description: str | None = None
    contact: ContactInfo = dc.field(default_factory=ContactInfo)
    style: SectionStyle = dc.field(default_factory=SectionStyle)


@dc.dataclass(slots=True, frozen=True)
class CtaPayload:
    title: str | None = None
    description: str | None = None
    button: CallToAction = dc.field(default_factory=CallToAction)
    style: SectionStyle = dc.field(default_factory=SectionStyle)


@dc.dataclass(slots=True, frozen=True)
class Logo:
    name: str | None = None
    image: str | None = None
    link: str | None = None


@dc.dataclass(slots=True, frozen=True)
class LogosPayload:
    title: str | None = None
    description: str | None = None
    logos: tuple[Logo, ...] = ()
    style: SectionStyle = dc.field(default_factory=SectionStyle)


@dc.dataclass(slots=True, frozen=True)
class TeamMember:
    name: str | None = None
    image: str | None = None
    position: str | None = None
    bio: str | None = None


@dc.dataclass(slots=True, frozen=True)
class TeamPayload:
    title: str | None = None
    description: str | None = None
    members: tuple[TeamMember, ...] = ()
    style: SectionStyle = dc.field(default_factory=SectionStyle)


@dc.dataclass(slots=True, frozen=True)
class CustomHtmlPayload:
    html: str = ""
    style: SectionStyle = dc.field(default_factory=SectionStyle)


@dc.dataclass(slots=True, frozen=True)
class UnknownPayload:
    """Payload kept verbatim for section types without a template."""

    raw: typ.Mapping[str, typ.Any] = dc.field(default_factory=dict)
    style: SectionStyle = dc.field(default_factory=SectionStyle)


SectionPayload = (
    HeroPayload
    | HeroVideoPayload
    | CardsPayload
    | ContactPayload
    | CtaPayload
    | LogosPayload
    | TeamPayload
    | CustomHtmlPayload
    | UnknownPayload
)


@dc.dataclass(slots=True)
class Section:
    """A single Page Builder block attached to a page.

    Attributes
    ----------
    id : int
        Backend identifier of the section.
    type : SectionType | None
        Section variant, or ``None`` when the backend sent an unknown type.
    sort_order : int
        Position within the page; lower values render first.
    is_visible : bool
        Hidden sections are skipped by the renderer and the composer.
    data : SectionPayload
        Variant-specific payload.
    css_classes : str | None
        Extra classes appended after the computed layout classes.
    raw_type : str
        Type string exactly as received from the backend.
    """

    id: int
    type: SectionType | None
    sort_order: int = 0
    is_visible: bool = True
    data: SectionPayload = dc.field(default_factory=UnknownPayload)
    css_classes: str | None = None
    raw_type: str = ""

    @property
    def is_hero(self) -> bool:
        return self.type in HERO_TYPES

    @property
    def style(self) -> SectionStyle:
        return self.data.style


def _text(data: typ.Mapping[str, typ.Any], key: str) -> str | None:
    return optional_str(data.get(key))


def _style_from(data: typ.Mapping[str, typ.Any]) -> SectionStyle:
    return SectionStyle(
        layout=_text(data, "layout"),
        height=_text(data, "height"),
        background_color=_text(data, "backgroundColor"),
        text_color=_text(data, "textColor"),
        background_image=_text(data, "backgroundImage"),
    )


def _button_from(data: typ.Mapping[str, typ.Any]) -> CallToAction:
    style = _text(data, "buttonStyle") or "primary"
    if style not in BUTTON_STYLES:
        style = "primary"
    return CallToAction(
        text=_text(data, "buttonText"),
        link=_text(data, "buttonLink"),
        style=style,
    )


def _items(data: typ.Mapping[str, typ.Any], key: str) -> list[typ.Mapping[str, typ.Any]]:
    value = data.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _card_from(item: typ.Mapping[str, typ.Any]) -> Card:
    return Card(
        title=_text(item, "title"),
        description=_text(item, "description"),
        image=_text(item, "image"),
        link=_text(item, "link"),
    )


def _contact_from(item: object) -> ContactInfo:
    if not isinstance(item, dict):
        return ContactInfo()
    return ContactInfo(
        address=_text(item, "address"),
        phone=_text(item, "phone"),
        email=_text(item, "email"),
        working_hours=_text(item, "workingHours"),
        map_url=_text(item, "mapUrl"),
    )


def build_payload(
    section_type: SectionType | None, data: typ.Mapping[str, typ.Any]
) -> SectionPayload:
    """Return the typed payload for ``section_type`` built from ``data``.

    Parameters
    ----------
    section_type : SectionType | None
        Variant discriminator; ``None`` yields :class:`UnknownPayload`.
    data : Mapping[str, Any]
        Raw camelCase payload mapping from the backend.

    Returns
    -------
    SectionPayload
        Payload dataclass matching the variant.
    """
    style = _style_from(data)
    match section_type:
        case SectionType.HERO_STACK | SectionType.HERO_LEFT | SectionType.HERO_IMAGE:
            return HeroPayload(
                title=_text(data, "title"),
                subtitle=_text(data, "subtitle"),
                description=_text(data, "description"),
                button=_button_from(data),
                image=_text(data, "image"),
                style=style,
            )
        case SectionType.HERO_VIDEO:
            return HeroVideoPayload(
                title=_text(data, "title"),
                subtitle=_text(data, "subtitle"),
                description=_text(data, "description"),
                button=_button_from(data),
                video_url=_text(data, "videoUrl"),
                style=style,
            )
        case (
            SectionType.CARD_TOP
            | SectionType.CARD_BOTTOM
            | SectionType.CARD_LEFT
            | SectionType.CARD_RIGHT
        ):
            return CardsPayload(
                title=_text(data, "title"),
                subtitle=_text(data, "subtitle"),
                description=_text(data, "description"),
                cards=tuple(_card_from(item) for item in _items(data, "cards")),
                button=_button_from(data),
                style=style,
            )
        case SectionType.CONTACT_ONE | SectionType.CONTACT_TWO:
            return ContactPayload(
                title=_text(data, "title"),
                subtitle=_text(data, "subtitle"),
                description=_text(data, "description"),
                contact=_contact_from(data.get("contactInfo")),
                style=style,
            )
        case SectionType.CTA_ONE:
            return CtaPayload(
                title=_text(data, "title"),
                description=_text(data, "description"),
                button=_button_from(data),
                style=style,
            )
        case SectionType.LOGOS_ONE:
            logos = tuple(
                Logo(
                    name=_text(item, "name"),
                    image=_text(item, "image"),
                    link=_text(item, "link"),
                )
                for item in _items(data, "logos")
            )
            return LogosPayload(
                title=_text(data, "title"),
                description=_text(data, "description"),
                logos=logos,
                style=style,
            )
        case SectionType.TEAM_ONE:
            members = tuple(
                TeamMember(
                    name=_text(item, "name"),
                    image=_text(item, "image"),
                    position=_text(item, "position"),
                    bio=_text(item, "bio"),
                )
                for item in _items(data, "teamMembers")
            )
            return TeamPayload(
                title=_text(data, "title"),
                description=_text(data, "description"),
                members=members,
                style=style,
            )
        case SectionType.CUSTOM_HTML:
            html = data.get("htmlContent")
            return CustomHtmlPayload(html=html if isinstance(html, str) else "", style=style)
        case _:
            return UnknownPayload(raw=dict(data), style=style)


def parse_section_type(value: object) -> SectionType | None:
    """Return the matching :class:`SectionType`, or None for unknown strings."""
    try:
        return SectionType(str(value))
    except ValueError:
        return None


def section_from_payload(payload: typ.Mapping[str, typ.Any]) -> Section:
    """Build a :class:`Section` from a backend section mapping."""
    raw_type = str(payload.get("type") or "")
    section_type = parse_section_type(raw_type)
    data = payload.get("data")
    if not isinstance(data, dict):
        data = {}
    return Section(
        id=optional_int(payload.get("id")) or 0,
        type=section_type,
        sort_order=coerce_int(payload.get("sortOrder")),
        is_visible=coerce_bool(payload.get("isVisible"), default=True),
        data=build_payload(section_type, data),
        css_classes=_text(payload, "cssClasses"),
        raw_type=raw_type,
    )


__all__ = [
    "BUTTON_STYLES",
    "CARD_TYPES",
    "CONTACT_TYPES",
    "HERO_TYPES",
    "CallToAction",
    "Card",
    "CardsPayload",
    "ContactInfo",
    "ContactPayload",
    "CtaPayload",
    "CustomHtmlPayload",
    "HeroPayload",
    "HeroVideoPayload",
    "Logo",
    "LogosPayload",
    "Section",
    "SectionPayload",
    "SectionStyle",
    "SectionType",
    "TeamMember",
    "TeamPayload",
    "UnknownPayload",
    "build_payload",
    "parse_section_type",
    "section_from_payload",
]
