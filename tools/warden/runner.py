"""Single-lane background runner for store operations.

All store access from the authentication and seeding flows goes through one
worker thread, so the SQLite file never sees two callers at once and tasks
complete in the order they were submitted::

    caller ──submit()──► FIFO work queue ──► worker lane ──► Future
    caller ◄──await run() / on_complete(future)──────────────┘

Results are delivered through ``concurrent.futures.Future`` objects. ``run``
wraps them for ``await`` so a coroutine resumes on its own event loop, and
``submit_with_callback`` can hop the completion back to a given loop.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

from .errors import RunnerShutDown

T = TypeVar("T")

logger = logging.getLogger(__name__)


class AsyncQueryRunner:
    """Serializes callables onto one dedicated worker thread.

    Exceptions raised by a task are stored on its future unchanged. Tasks
    that have not started can be cancelled through their future; a task that
    is already running always completes.

    Args:
        name: Thread name prefix of the worker lane.
    """

    def __init__(self, name: str = "warden-worker") -> None:
        self._name = name
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._worker_ident: Optional[int] = None
        self._closed = False

    def _mark_lane(self) -> None:
        self._worker_ident = threading.get_ident()

    def submit(self, task: Callable[..., T], *args: Any, **kwargs: Any) -> "Future[T]":
        """Queue ``task(*args, **kwargs)`` behind everything already submitted.

        Raises:
            RunnerShutDown: The runner has been shut down.
        """
        if self._closed:
            raise RunnerShutDown(f"{self._name} runner is shut down")

        def _call() -> T:
            if self._worker_ident is None:
                self._mark_lane()
            return task(*args, **kwargs)

        try:
            return self._executor.submit(_call)
        except RuntimeError as e:
            raise RunnerShutDown(f"{self._name} runner is shut down") from e

    def submit_with_callback(
        self,
        task: Callable[..., T],
        on_complete: Callable[["Future[T]"], Any],
        *args: Any,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        **kwargs: Any,
    ) -> "Future[T]":
        """Queue a task and hand its finished future to ``on_complete``.

        With ``loop`` the callback is scheduled on that event loop; without
        it the callback runs on the worker lane, before the returned future
        completes. A task cancelled before starting delivers its cancelled
        future on the thread that cancelled it.
        """

        def _deliver(done: "Future[T]") -> None:
            if loop is None:
                on_complete(done)
            elif loop.is_closed():
                logger.warning("Dropping completion callback: event loop is closed")
            else:
                loop.call_soon_threadsafe(on_complete, done)

        def _run_then_deliver() -> T:
            done: "Future[T]" = Future()
            done.set_running_or_notify_cancel()
            try:
                done.set_result(task(*args, **kwargs))
            except Exception as e:
                done.set_exception(e)
            _deliver(done)
            return done.result()

        future = self.submit(_run_then_deliver)
        future.add_done_callback(lambda f: f.cancelled() and _deliver(f))
        return future

    async def run(self, task: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a task on the worker lane and await its result.

        Cancelling the awaiting coroutine cancels the task only if it has
        not started yet.
        """
        return await asyncio.wrap_future(self.submit(task, *args, **kwargs))

    def on_worker_lane(self) -> bool:
        """True when called from the worker thread."""
        return self._worker_ident == threading.get_ident()

    def shutdown(self, wait: bool = True, cancel_pending: bool = True) -> None:
        """Stop accepting tasks and optionally drop the ones still queued."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=cancel_pending)
        logger.debug(f"{self._name} runner shut down")
