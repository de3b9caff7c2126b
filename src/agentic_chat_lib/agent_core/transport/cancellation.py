"""Cooperative cancellation shared by every backend call of one run."""

import asyncio
from typing import Optional

from ..exceptions import StreamCancelledError


class CancellationToken:
    """A one-shot cancellation signal.

    Once cancelled it stays cancelled. Must be awaited/timed from within a running event loop.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise StreamCancelledError(f"Operation aborted: {self._reason}")

    def cancel_after(self, delay: float) -> asyncio.TimerHandle:
        """Cancel this token after ``delay`` seconds; cancel the returned handle to disarm."""
        loop = asyncio.get_running_loop()
        return loop.call_later(delay, self.cancel, f"timed out after {delay} seconds")
