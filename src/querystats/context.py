"""
src.querystats.context
~~~~~~~~~~~~~~~~~~~~~~

Cancellable execution context handed to every collector for one scrape.

A :class:`ScrapeContext` is shared by all collectors running in the same
scrape.  Engines register an *interrupt* callback for the duration of a
query so that :meth:`ScrapeContext.cancel` (or an expired deadline) aborts
the in-flight statement instead of waiting for it to finish.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional

from src.querystats.errors import ScrapeCancelled

CancelCallback = Callable[[], None]

logger = logging.getLogger(__name__)


class ScrapeContext:
    """
    Parameters
    ----------
    timeout : float, optional
        Seconds until the context cancels itself.  ``None`` (default) means
        no deadline; the context is then only cancelled explicitly.
    """

    def __init__(self, timeout: Optional[float] = None):
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be > 0")
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: Dict[int, CancelCallback] = {}
        self._next_token = 0
        self._reason: Optional[str] = None
        self.deadline: Optional[float] = None
        self._timer: Optional[threading.Timer] = None
        if timeout is not None:
            self.deadline = time.monotonic() + timeout
            self._timer = threading.Timer(timeout, self.cancel, kwargs={"reason": "deadline exceeded"})
            self._timer.daemon = True
            self._timer.start()

    # ------------------------------------------------------------------ #
    # State                                                              #
    # ------------------------------------------------------------------ #
    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def check(self) -> None:
        """Raise :class:`ScrapeCancelled` if the context is already cancelled."""
        if self._event.is_set():
            raise ScrapeCancelled(f"scrape cancelled: {self._reason}")

    # ------------------------------------------------------------------ #
    # Cancellation                                                       #
    # ------------------------------------------------------------------ #
    def cancel(self, reason: str = "cancelled") -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            callbacks = list(self._callbacks.values())
        # one failed interrupt must not leave the other queries running
        for cb in callbacks:
            try:
                cb()
            except Exception:
                logger.exception("interrupt callback %r failed", cb)

    @contextmanager
    def on_cancel(self, callback: CancelCallback) -> Iterator[None]:
        """Run *callback* if the context is cancelled while the block is active.

        A context that is already cancelled raises before the block starts.
        """
        with self._lock:
            if self._event.is_set():
                raise ScrapeCancelled(f"scrape cancelled: {self._reason}")
            token = self._next_token
            self._next_token += 1
            self._callbacks[token] = callback
        try:
            yield
        finally:
            with self._lock:
                self._callbacks.pop(token, None)

    def close(self) -> None:
        """Stop the deadline timer; the context keeps its current state."""
        if self._timer is not None:
            self._timer.cancel()

    def __enter__(self) -> "ScrapeContext":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:  # pragma: no cover
        state = "cancelled" if self.cancelled else "active"
        return f"<ScrapeContext {state}>"
