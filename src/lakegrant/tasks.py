"""TaskRunner and TaskHandle — background work on a private event loop."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
import uuid
from typing import TYPE_CHECKING, Any

from .exceptions import TaskNotFoundError
from .types import TaskStatus

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine

logger = logging.getLogger(__name__)


class TaskHandle:
    """Handle to a submitted background task.

    Wraps the ``concurrent.futures.Future`` returned by the runner's
    loop.  ``id`` is an opaque identifier usable for status queries
    through :meth:`TaskRunner.get`.
    """

    def __init__(self, task_id: str, name: str, future: concurrent.futures.Future[Any]) -> None:
        self.id = task_id
        self.name = name
        self._future = future

    def __repr__(self) -> str:
        return f"TaskHandle(id={self.id!r}, name={self.name!r}, status={self.status.value!r})"

    @property
    def status(self) -> TaskStatus:
        if not self._future.done():
            return TaskStatus.RUNNING
        if self._future.cancelled() or self._future.exception() is not None:
            return TaskStatus.FAILED
        return TaskStatus.COMPLETED

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: float | None = None) -> Any:
        """Block until the task finishes and return its result (or raise its error)."""
        return self._future.result(timeout)

    def exception(self, timeout: float | None = None) -> BaseException | None:
        return self._future.exception(timeout)

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for completion.  Returns True if the task finished in time."""
        done, _ = concurrent.futures.wait([self._future], timeout=timeout)
        return bool(done)


class TaskRunner:
    """Runs coroutines on a private event loop in a daemon thread.

    ``submit`` returns immediately with a :class:`TaskHandle`; tasks run
    concurrently with no ordering between them.  There is no
    cancellation: a submitted task runs until it finishes or the
    process exits.

    Usage::

        with TaskRunner() as runner:
            handle = runner.submit(propagate, provider, setter, "/system", identity)
            print(handle.id)
            runner.wait_all()
    """

    def __init__(self) -> None:
        self._closed = False
        self._handles: dict[str, TaskHandle] = {}
        self._lock = threading.Lock()

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever, name="lakegrant-tasks", daemon=True
        )
        self._thread.start()

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(
        self,
        factory: Callable[..., Coroutine[Any, Any, Any]],
        *args: Any,
        name: str | None = None,
        **kwargs: Any,
    ) -> TaskHandle:
        """Schedule ``factory(*args, **kwargs)`` and return its handle at once.

        Arguments are captured at submission time.  Safe to call from
        any thread, including from coroutines already running on the
        runner's loop.
        """
        if self._closed:
            raise RuntimeError("TaskRunner is closed")

        future = asyncio.run_coroutine_threadsafe(factory(*args, **kwargs), self._loop)
        handle = TaskHandle(uuid.uuid4().hex, name or getattr(factory, "__name__", "task"), future)
        with self._lock:
            self._handles[handle.id] = handle

        future.add_done_callback(lambda f: self._on_done(handle, f))
        logger.debug("Submitted task %s (%s)", handle.id, handle.name)
        return handle

    def run(self, coro: Coroutine[Any, Any, Any]) -> Any:
        """Submit *coro* to the private loop and block for the result."""
        if threading.current_thread() is self._thread:
            coro.close()
            raise RuntimeError("TaskRunner.run() cannot be called from the runner's loop")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    @staticmethod
    def _on_done(handle: TaskHandle, future: concurrent.futures.Future[Any]) -> None:
        if future.cancelled():
            logger.warning("Task %s (%s) was cancelled", handle.id, handle.name)
            return
        exc = future.exception()
        if exc is not None:
            logger.warning(
                "Task %s (%s) failed: %s",
                handle.id,
                handle.name,
                exc,
                exc_info=exc,
            )
        else:
            logger.debug("Task %s (%s) completed", handle.id, handle.name)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, task_id: str) -> TaskHandle:
        """Look up a handle by id.  Raises ``TaskNotFoundError``."""
        with self._lock:
            handle = self._handles.get(task_id)
        if handle is None:
            raise TaskNotFoundError(f"No task with id: {task_id}")
        return handle

    def status(self, task_id: str) -> TaskStatus:
        return self.get(task_id).status

    def handles(self) -> list[TaskHandle]:
        """All handles, in submission order."""
        with self._lock:
            return list(self._handles.values())

    def wait_all(self, timeout: float | None = None) -> list[BaseException]:
        """Wait for every submitted task and return the failures in submission order.

        Tasks submitted while waiting (e.g. by a running task) are
        waited for too.
        """
        waited: set[str] = set()
        while True:
            pending = [h for h in self.handles() if h.id not in waited]
            if not pending:
                break
            concurrent.futures.wait([h._future for h in pending], timeout=timeout)
            waited.update(h.id for h in pending)

        failures: list[BaseException] = []
        for handle in self.handles():
            if handle.done() and handle.status is TaskStatus.FAILED:
                exc = handle.exception() if not handle._future.cancelled() else None
                failures.append(exc or concurrent.futures.CancelledError(handle.id))
        return failures

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self, wait: bool = False) -> None:
        """Stop the loop and join the thread.

        With *wait* every submitted task is allowed to finish first;
        otherwise unfinished tasks are abandoned with the loop.
        """
        if self._closed:
            return
        if wait:
            self.wait_all()
        self._closed = True
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)

    def __enter__(self) -> TaskRunner:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()
