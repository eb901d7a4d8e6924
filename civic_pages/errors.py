"""Exception taxonomy shared by the civic_pages rendering pipeline.

Only lookup failures for the primary entity of a route (page, gallery,
service, post) are promoted to a terminal render state. Everything else
degrades to an empty rendering: :class:`PartialLoadError` marks a secondary
fetch that failed after its parent page resolved, and :class:`SideEffectError`
marks a detached operation such as a view-count increment. Both are logged by
the code that catches them and never reach the reader of the site.

Examples
--------
>>> from civic_pages.errors import CmsApiError, NotFoundError
>>> issubclass(NotFoundError, CmsApiError)
True
>>> NotFoundError("gone", status_code=404).status_code
404
"""

from __future__ import annotations


class CmsError(RuntimeError):
    """Base class for errors raised by civic_pages."""


class CmsApiError(CmsError):
    """Raised when the CMS backend cannot be reached or answers with an error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(CmsApiError):
    """Raised when the requested page, gallery, service, or post does not exist."""


class PartialLoadError(CmsError):
    """Raised when sections or related posts fail after the page itself loaded."""


class SideEffectError(CmsError):
    """Raised when a fire-and-forget operation such as a view increment fails."""


class StaleResponseError(CmsError):
    """Raised when a render pass was superseded while a fetch was in flight."""


__all__ = [
    "CmsApiError",
    "CmsError",
    "NotFoundError",
    "PartialLoadError",
    "SideEffectError",
    "StaleResponseError",
]
