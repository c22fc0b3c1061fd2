"""Cooperative cancellation tokens.

A token never interrupts running I/O. It only records that the work was
superseded so the owner can discard whatever result eventually arrives.
Backoff waits are the one place a token actively shortens a suspension.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from genre_player.domain.shared.exceptions import AcquisitionCancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """One-shot cancellation flag that can be awaited."""

    __slots__ = ("_event", "_reason", "_callbacks")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None
        self._callbacks: list[Callable[[CancellationToken], None]] = []

    def __repr__(self) -> str:
        state = f"cancelled={self._reason!r}" if self.cancelled else "live"
        return f"<CancellationToken {state}>"

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> bool:
        """Mark the token cancelled.

        Returns False when it was already cancelled; the first reason wins.
        """
        if self._event.is_set():
            return False
        self._reason = reason or "cancelled"
        self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback(self)
            except Exception:
                logger.exception("Cancellation callback failed for %r", self)
        return True

    def add_callback(self, callback: Callable[[CancellationToken], None]) -> None:
        """Run *callback* once when cancelled (immediately if already cancelled)."""
        if self._event.is_set():
            callback(self)
            return
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[CancellationToken], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AcquisitionCancelledError(self._reason)

    async def wait(self) -> None:
        """Suspend until the token is cancelled."""
        await self._event.wait()

    async def sleep(self, delay: float) -> None:
        """Sleep for *delay* seconds unless cancelled first.

        Raises:
            AcquisitionCancelledError: If the token fires before the delay elapses.
        """
        self.raise_if_cancelled()
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay)
        except TimeoutError:
            return
        raise AcquisitionCancelledError(self._reason)
