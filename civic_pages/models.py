"""Typed content models decoded from CMS backend payloads.

The backend speaks camelCase JSON (``sortOrder``, ``usePageBuilder``,
``featuredImage``); the builders in this module translate those mappings into
slotted dataclasses with snake_case attributes so templates and the route
resolver never handle raw dictionaries. Builders raise
:class:`~civic_pages.errors.CmsApiError` when a payload lacks the identifying
fields (``id`` and ``slug``) that every addressable entity needs.

Examples
--------
>>> page = page_from_payload({"id": 3, "slug": "o-nama", "title": "O nama"})
>>> page.render_mode
<RenderMode.TEMPLATE: 'template'>
>>> page.template
'default'
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt  # noqa: TC003 - used for runtime type metadata
import enum
import typing as typ

from ._coerce import coerce_bool, coerce_int, optional_int, optional_str, parse_timestamp
from ._constants import DEFAULT_TEMPLATE_KEY, GALLERY_TEMPLATE_KEY, SERVICES_TEMPLATE_KEY
from .errors import CmsApiError


class RenderMode(enum.StrEnum):
    """How a page's body and sub-slugs are rendered."""

    PAGE_BUILDER = "page-builder"
    TEMPLATE = "template"
    GALLERY = "gallery"
    SERVICES = "services"


@dc.dataclass(slots=True)
class Page:
    """A content node in the CMS page tree."""

    id: int
    slug: str
    title: str
    content: str = ""
    parent_id: int | None = None
    sort_order: int = 0
    template: str = DEFAULT_TEMPLATE_KEY
    use_page_builder: bool = False
    status: str = "published"
    children: list[Page] = dc.field(default_factory=list)

    @property
    def render_mode(self) -> RenderMode:
        """Return the mode that selects sub-entity routing and the body renderer.

        Gallery and services pages own addressable sub-entities beneath their
        slug, so their template key wins over the page-builder flag for routing
        purposes. The page body itself is still rendered through the page
        builder when ``use_page_builder`` is set.
        """
        if self.template == GALLERY_TEMPLATE_KEY:
            return RenderMode.GALLERY
        if self.template == SERVICES_TEMPLATE_KEY:
            return RenderMode.SERVICES
        if self.use_page_builder:
            return RenderMode.PAGE_BUILDER
        return RenderMode.TEMPLATE


@dc.dataclass(slots=True)
class Author:
    """Author reference attached to posts."""

    id: int | None
    name: str


@dc.dataclass(slots=True)
class Category:
    """Post category reference."""

    id: int | None
    name: str
    slug: str


@dc.dataclass(slots=True)
class Post:
    """A published article."""

    id: int
    slug: str
    title: str
    excerpt: str | None = None
    content: str = ""
    author: Author | None = None
    category: Category | None = None
    featured_image: str | None = None
    published_at: dt.datetime | None = None
    view_count: int = 0
    page_ids: tuple[int, ...] = ()

    def belongs_to(self, page_id: int) -> bool:
        """Return True when the post is associated with ``page_id``."""
        return page_id in self.page_ids


@dc.dataclass(slots=True)
class PostsPage:
    """One page of results from the published-posts listing."""

    posts: list[Post]
    total: int
    page: int
    total_pages: int


@dc.dataclass(slots=True)
class GalleryImage:
    """Single image within a gallery."""

    url: str
    caption: str | None = None
    alt: str | None = None
    sort_order: int = 0
    is_visible: bool = True


@dc.dataclass(slots=True)
class Gallery:
    """Photo gallery addressable beneath a gallery-mode page."""

    id: int
    slug: str
    title: str
    description: str | None = None
    images: list[GalleryImage] = dc.field(default_factory=list)
    event_date: dt.datetime | None = None
    view_count: int = 0
    cover_image: str | None = None

    @property
    def visible_images(self) -> list[GalleryImage]:
        """Return visible images ordered by their sort order."""
        shown = [image for image in self.images if image.is_visible]
        return sorted(shown, key=lambda image: image.sort_order)

    @property
    def cover(self) -> str | None:
        """Return the explicit cover image, else the first visible image."""
        if self.cover_image:
            return self.cover_image
        visible = self.visible_images
        return visible[0].url if visible else None


@dc.dataclass(slots=True)
class Service:
    """Citizen service addressable beneath a services-mode page."""

    id: int
    slug: str
    name: str
    short_description: str | None = None
    description: str = ""
    duration: str | None = None
    price: str | None = None
    currency: str | None = None
    responsible_department: str | None = None
    location: str | None = None
    is_online: bool = False
    requires_appointment: bool = False
    required_documents: list[str] = dc.field(default_factory=list)


def _require_identity(payload: typ.Mapping[str, typ.Any], kind: str) -> tuple[int, str]:
    """Return the ``(id, slug)`` pair or raise when either is missing."""
    identifier = optional_int(payload.get("id"))
    slug = optional_str(payload.get("slug"))
    if identifier is None or slug is None:
        msg = f"{kind} payload is missing 'id' or 'slug'."
        raise CmsApiError(msg)
    return identifier, slug


def page_from_payload(payload: typ.Mapping[str, typ.Any]) -> Page:
    """Build a :class:`Page` from a backend page mapping."""
    identifier, slug = _require_identity(payload, "Page")
    children_raw = payload.get("children") or []
    children = [
        page_from_payload(child) for child in children_raw if isinstance(child, dict)
    ]
    return Page(
        id=identifier,
        slug=slug,
        title=optional_str(payload.get("title")) or slug,
        content=str(payload.get("content") or ""),
        parent_id=optional_int(payload.get("parentId")),
        sort_order=coerce_int(payload.get("sortOrder")),
        template=optional_str(payload.get("template")) or DEFAULT_TEMPLATE_KEY,
        use_page_builder=coerce_bool(payload.get("usePageBuilder")),
        status=optional_str(payload.get("status")) or "published",
        children=children,
    )


def _author_from_payload(payload: object) -> Author | None:
    match payload:
        case {"name": name, **rest} if name:
            return Author(id=optional_int(rest.get("id")), name=str(name))
        case _:
            return None


def _category_from_payload(payload: object) -> Category | None:
    match payload:
        case {"name": name, "slug": slug, **rest} if name and slug:
            return Category(id=optional_int(rest.get("id")), name=str(name), slug=str(slug))
        case _:
            return None


def _page_ids(payload: typ.Mapping[str, typ.Any]) -> tuple[int, ...]:
    """Collect associated page ids from ``pages`` objects or a ``pageIds`` list."""
    ids: list[int] = []
    for entry in payload.get("pages") or []:
        match entry:
            case {"id": raw_id}:
                value = optional_int(raw_id)
            case _:
                value = optional_int(entry)
        if value is not None:
            ids.append(value)
    for raw_id in payload.get("pageIds") or []:
        value = optional_int(raw_id)
        if value is not None and value not in ids:
            ids.append(value)
    return tuple(ids)


def post_from_payload(payload: typ.Mapping[str, typ.Any]) -> Post:
    """Build a :class:`Post` from a backend post mapping."""
    identifier, slug = _require_identity(payload, "Post")
    published = payload.get("publishedAt") or payload.get("createdAt")
    return Post(
        id=identifier,
        slug=slug,
        title=optional_str(payload.get("title")) or slug,
        excerpt=optional_str(payload.get("excerpt")),
        content=str(payload.get("content") or ""),
        author=_author_from_payload(payload.get("author")),
        category=_category_from_payload(payload.get("category")),
        featured_image=optional_str(payload.get("featuredImage")),
        published_at=parse_timestamp(published),
        view_count=coerce_int(payload.get("viewCount")),
        page_ids=_page_ids(payload),
    )


def posts_page_from_payload(payload: typ.Mapping[str, typ.Any]) -> PostsPage:
    """Build a :class:`PostsPage`, skipping malformed post entries."""
    posts: list[Post] = []
    for entry in payload.get("posts") or []:
        if not isinstance(entry, dict):
            continue
        try:
            posts.append(post_from_payload(entry))
        except CmsApiError:
            continue
    return PostsPage(
        posts=posts,
        total=coerce_int(payload.get("total"), len(posts)),
        page=coerce_int(payload.get("page"), 1),
        total_pages=coerce_int(payload.get("totalPages"), 1),
    )


def _gallery_image_from_payload(payload: typ.Mapping[str, typ.Any]) -> GalleryImage | None:
    url = (
        optional_str(payload.get("url"))
        or optional_str(payload.get("filename"))
        or optional_str(payload.get("path"))
    )
    if url is None:
        return None
    return GalleryImage(
        url=url,
        caption=optional_str(payload.get("caption")),
        alt=optional_str(payload.get("alt")),
        sort_order=coerce_int(payload.get("sortOrder")),
        is_visible=coerce_bool(payload.get("isVisible"), default=True),
    )


def gallery_from_payload(payload: typ.Mapping[str, typ.Any]) -> Gallery:
    """Build a :class:`Gallery` from a backend gallery mapping."""
    identifier, slug = _require_identity(payload, "Gallery")
    images: list[GalleryImage] = []
    for entry in payload.get("images") or []:
        if isinstance(entry, dict):
            image = _gallery_image_from_payload(entry)
            if image is not None:
                images.append(image)
    return Gallery(
        id=identifier,
        slug=slug,
        title=optional_str(payload.get("title")) or slug,
        description=optional_str(payload.get("description")),
        images=images,
        event_date=parse_timestamp(payload.get("eventDate")),
        view_count=coerce_int(payload.get("viewCount")),
        cover_image=optional_str(payload.get("coverImage")),
    )


def service_from_payload(payload: typ.Mapping[str, typ.Any]) -> Service:
    """Build a :class:`Service` from a backend service mapping."""
    identifier, slug = _require_identity(payload, "Service")
    documents = [
        text
        for text in (optional_str(item) for item in payload.get("requiredDocuments") or [])
        if text
    ]
    return Service(
        id=identifier,
        slug=slug,
        name=optional_str(payload.get("name")) or slug,
        short_description=optional_str(payload.get("shortDescription")),
        description=str(payload.get("description") or ""),
        duration=optional_str(payload.get("duration")),
        price=optional_str(payload.get("price")),
        currency=optional_str(payload.get("currency")),
        responsible_department=optional_str(payload.get("responsibleDepartment")),
        location=optional_str(payload.get("location")),
        is_online=coerce_bool(payload.get("isOnline")),
        requires_appointment=coerce_bool(payload.get("requiresAppointment")),
        required_documents=documents,
    )


__all__ = [
    "Author",
    "Category",
    "Gallery",
    "GalleryImage",
    "Page",
    "Post",
    "PostsPage",
    "RenderMode",
    "Service",
    "gallery_from_payload",
    "page_from_payload",
    "post_from_payload",
    "posts_page_from_payload",
    "service_from_payload",
]
