"""Repeated-check primitive for waiting on blockchain confirmations.

A poller runs ``check`` immediately and then every ``interval_seconds`` on a
daemon thread until the check reports ``done`` or the poller is stopped.
Each run captures the poller's cancellation token first, so a run that was
cancelled while its network call was in flight drops its result.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PollResult(Generic[T]):
    done: bool
    value: T | None = None
    message: str = ""


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def wait(self, timeout: float) -> bool:
        return self._event.wait(timeout)


class ConfirmationPoller(Generic[T]):
    DEFAULT_INTERVAL_SECONDS = 10.0

    def __init__(
        self,
        check: Callable[[], PollResult[T]],
        on_done: Callable[[PollResult[T]], None],
        on_pending: Callable[[PollResult[T]], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        name: str = "confirmation-poller",
    ):
        self.check = check
        self.on_done = on_done
        self.on_pending = on_pending
        self.on_error = on_error
        self.interval_seconds = interval_seconds
        self.name = name
        self._token = CancellationToken()
        self._finished = False
        self._thread: threading.Thread | None = None

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None or self.cancelled:
            return
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.debug("Poller %s started (interval %.1fs)", self.name, self.interval_seconds)

    def cancel(self) -> None:
        """Cancel without waiting for an in-flight check to return."""
        self._token.cancel()

    def stop(self) -> None:
        self._token.cancel()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)
        logger.debug("Poller %s stopped", self.name)

    def _run(self) -> None:
        token = self._token
        while not token.cancelled:
            if self.tick():
                return
            if token.wait(self.interval_seconds):
                return

    def tick(self) -> bool:
        """Run one check. Returns True once the awaited condition is satisfied."""
        token = self._token
        if token.cancelled or self._finished:
            return self._finished

        try:
            result = self.check()
        except Exception as e:
            if token.cancelled:
                return False
            logger.warning("Poller %s check failed: %s", self.name, e)
            if self.on_error:
                self.on_error(e)
            return False

        if token.cancelled:
            logger.debug("Poller %s discarded a result after cancellation", self.name)
            return False

        if result.done:
            self._finished = True
            self.on_done(result)
            return True

        if self.on_pending:
            self.on_pending(result)
        return False


def is_transaction_confirmed(tx: dict[str, Any] | None) -> bool:
    if not tx:
        return False
    if tx.get("confirmed"):
        return True
    height = tx.get("confirmed_at_height")
    return isinstance(height, int) and not isinstance(height, bool) and height > 0


def count_confirmed_transactions(
    fetch: Callable[[str], dict[str, Any] | None], transaction_ids: list[str]
) -> int:
    """Count confirmed ids; a failed lookup counts as not yet confirmed."""
    confirmed = 0
    for tx_id in transaction_ids:
        try:
            tx = fetch(tx_id)
        except Exception as e:
            logger.debug("Transaction lookup failed for %s: %s", tx_id, e)
            tx = None
        if is_transaction_confirmed(tx):
            confirmed += 1
    return confirmed
