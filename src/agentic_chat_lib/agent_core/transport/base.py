"""Protocol for a single streamed request/response cycle against the model backend."""

from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from ..messages import ConversationTurn
from .cancellation import CancellationToken

TokenCallback = Callable[[str, str], None]


class ChatTransport(Protocol):
    """
    Protocol the agentic loop uses to talk to the backend.
    """

    async def stream(
        self,
        turns: Sequence[ConversationTurn],
        *,
        on_token: Optional[TokenCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Send ``turns`` and return the accumulated text once the stream ends.

        ``on_token(delta, full_text)`` is called for every text fragment as it arrives.
        Raises ``StreamCancelledError`` when the token fires and ``StreamTimeoutError`` when
        ``timeout`` elapses.
        """
        ...
