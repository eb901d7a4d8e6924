"""Fire-and-forget side effects such as post view-count increments.

Failures of these operations must never reach the reader of the page. Each
task runs in :meth:`DetachedTaskRunner._guarded`, which re-raises any failure
as :class:`~civic_pages.errors.SideEffectError`; the error stays on the task's
future and a done-callback logs it. Nothing in the submitting thread ever
waits on, or re-raises, that future.
"""

from __future__ import annotations

import logging
import typing as typ
from concurrent.futures import Future, ThreadPoolExecutor

from .errors import SideEffectError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)


class DetachedTaskRunner:
    """Run side-effect callables on a small background thread pool."""

    def __init__(self, *, max_workers: int = 2) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="civic-side-effect"
        )

    def submit(
        self, name: str, fn: cabc.Callable[..., object], *args: object
    ) -> Future[None]:
        """Schedule ``fn(*args)`` without waiting for it.

        A failed task's future holds a :class:`SideEffectError`, which is
        logged at WARNING when the task finishes.
        """
        future = self._executor.submit(self._guarded, name, fn, *args)
        future.add_done_callback(_log_failure)
        return future

    def shutdown(self, *, wait: bool = True) -> None:
        """Stop accepting work, optionally waiting for queued tasks."""
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> DetachedTaskRunner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown(wait=True)

    @staticmethod
    def _guarded(name: str, fn: cabc.Callable[..., object], *args: object) -> None:
        try:
            fn(*args)
        except Exception as exc:
            msg = f"{name} failed: {exc}"
            raise SideEffectError(msg) from exc


def _log_failure(future: Future[None]) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.warning("%s", error)


__all__ = ["DetachedTaskRunner"]
