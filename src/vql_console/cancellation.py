"""Per-statement cancellation.

Every dispatched statement gets a fresh :class:`ExecutionContext` and one
listener thread. The listener takes the first event off the context's wake
queue: an interrupt cancels the context, completion ends the listener. Each
statement arms its own interrupt source, so an interrupt delivered during one
statement can never reach a later one.
"""

from __future__ import annotations

import queue
import signal
import threading
from collections.abc import Callable
from types import FrameType
from typing import Any, Protocol, TypeVar

from loguru import logger

T = TypeVar("T")

_INTERRUPTED = "interrupted"
_DONE = "done"


class StatementCancelled(Exception):
    """Raised by :meth:`ExecutionContext.raise_if_cancelled`."""


class ExecutionContext:
    """Cancellation token observed cooperatively by running statements."""

    def __init__(self) -> None:
        self._cancelled = threading.Event()
        self._done = threading.Event()
        # SimpleQueue.put is reentrant, so signal handlers may call it.
        self._wake: queue.SimpleQueue[str] = queue.SimpleQueue()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def cancel(self) -> bool:
        """Cancel the context. Returns False when it was already cancelled."""
        if self._cancelled.is_set():
            return False
        self._cancelled.set()
        return True

    def wait_cancelled(self, timeout: float | None = None) -> bool:
        return self._cancelled.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise StatementCancelled

    def interrupt(self) -> None:
        self._wake.put(_INTERRUPTED)

    def finish(self) -> None:
        if self._done.is_set():
            return
        self._done.set()
        self._wake.put(_DONE)

    def next_event(self) -> str:
        return self._wake.get()


class InterruptSource(Protocol):
    def arm(self, notify: Callable[[], None]) -> None: ...

    def disarm(self) -> None: ...


class SignalInterrupts:
    """Deliver SIGINT to the armed statement instead of raising KeyboardInterrupt."""

    def __init__(self, signum: int = signal.SIGINT) -> None:
        self._signum = signum
        self._previous: Any = None
        self._installed = False

    def arm(self, notify: Callable[[], None]) -> None:
        if threading.current_thread() is not threading.main_thread():
            # Signal handlers can only be installed from the main thread.
            logger.debug("interrupts.unarmed thread={}", threading.current_thread().name)
            return

        def _handler(_signum: int, _frame: FrameType | None) -> None:
            notify()

        self._previous = signal.signal(self._signum, _handler)
        self._installed = True

    def disarm(self) -> None:
        if not self._installed:
            return
        signal.signal(self._signum, self._previous if self._previous is not None else signal.SIG_DFL)
        self._previous = None
        self._installed = False


class CancellationController:
    """Run statements with a fresh context and interrupt listener each."""

    def __init__(self, interrupts: InterruptSource | None = None) -> None:
        self._interrupts = interrupts if interrupts is not None else SignalInterrupts()

    def run_cancellable(self, work: Callable[[ExecutionContext], T]) -> T:
        context = ExecutionContext()
        listener = threading.Thread(target=_listen, args=(context,), name="vql-interrupt-listener", daemon=True)
        self._interrupts.arm(context.interrupt)
        listener.start()
        try:
            return work(context)
        finally:
            self._interrupts.disarm()
            context.finish()
            listener.join()


def _listen(context: ExecutionContext) -> None:
    event = context.next_event()
    if event == _INTERRUPTED and context.cancel():
        logger.info("statement.cancelled")
