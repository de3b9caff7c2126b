"""HTTP streaming transport for the chat backend."""

from __future__ import annotations

import asyncio
import contextlib
from types import TracebackType
from typing import Any, Dict, Optional, Sequence, Type

import httpx

from ..config import AgentConfig
from ..exceptions import (
    BackendConnectionError,
    BackendRequestError,
    StreamCancelledError,
    StreamTimeoutError,
    StreamingError,
)
from ..logger import get_logger
from ..messages import ConversationTurn
from .base import TokenCallback
from .cancellation import CancellationToken
from .decoder import StreamDecoder

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    "accept": "*/*",
    "content-type": "application/json",
}


class StreamingTransport:
    """
    Performs one POST per call and decodes the response as an incremental event stream.

    The transport owns its ``httpx.AsyncClient`` unless one is injected; injected clients are
    left open for the caller to close.
    """

    def __init__(
        self,
        config: Optional[AgentConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Backend URL and model; defaults to ``AgentConfig()``.
            client: Optional pre-configured client (e.g. with a mock transport in tests).
            headers: Extra request headers merged over the defaults.
        """
        self.config = config or AgentConfig()
        self.headers = {**DEFAULT_HEADERS, **(headers or {})}
        self._owns_client = client is None
        # Timeouts are enforced per stream by ``stream()``, not by the client.
        self._client = client or httpx.AsyncClient(timeout=None)

    async def __aenter__(self) -> "StreamingTransport":
        return self

    async def __aexit__(
        self, exc_type: Optional[Type[BaseException]], exc_val: Optional[BaseException], exc_tb: Optional[TracebackType]
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def build_payload(self, turns: Sequence[ConversationTurn]) -> Dict[str, Any]:
        return {
            "selectedModel": self.config.model,
            "messages": [turn.to_wire() for turn in turns],
        }

    async def stream(
        self,
        turns: Sequence[ConversationTurn],
        *,
        on_token: Optional[TokenCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Stream one backend response.

        Args:
            turns: The full role-tagged turn list.
            on_token: Called with ``(delta, accumulated_text)`` for every fragment.
            cancel_token: Aborts the read promptly when cancelled.
            timeout: Seconds after which this call alone is aborted. ``None`` waits indefinitely.

        Returns:
            The accumulated text of the response.

        Raises:
            StreamCancelledError: If ``cancel_token`` fired.
            StreamTimeoutError: If ``timeout`` elapsed.
            BackendRequestError: If the backend answered with a non-success status.
            BackendConnectionError: If the backend could not be reached.
            StreamingError: If the response body could not be decoded.
        """
        token = cancel_token or CancellationToken()
        token.raise_if_cancelled()

        read_task = asyncio.ensure_future(self._read(turns, on_token))
        cancel_task = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait(
                {read_task, cancel_task}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
            if read_task in done:
                return read_task.result()
        finally:
            cancel_task.cancel()
            if not read_task.done():
                read_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await read_task

        if token.cancelled:
            logger.info(f"Stream aborted: {token.reason}")
            raise StreamCancelledError(f"Stream aborted: {token.reason}")

        logger.warning(f"Stream timed out after {timeout} seconds.")
        raise StreamTimeoutError(f"Stream timed out after {timeout} seconds.", timeout=timeout)

    async def _read(self, turns: Sequence[ConversationTurn], on_token: Optional[TokenCallback]) -> str:
        decoder = StreamDecoder()
        accumulated = ""
        payload = self.build_payload(turns)
        logger.debug(f"POST {self.config.backend_url} with {len(turns)} turn(s).")

        try:
            async with self._client.stream(
                "POST", self.config.backend_url, json=payload, headers=self.headers
            ) as response:
                if not response.is_success:
                    msg = f"API request failed: {response.status_code} - {response.reason_phrase}"
                    logger.error(msg)
                    raise BackendRequestError(msg, status_code=response.status_code)

                async for chunk in response.aiter_text():
                    for delta in decoder.feed(chunk):
                        accumulated += delta
                        if on_token:
                            on_token(delta, accumulated)

                for delta in decoder.close():
                    accumulated += delta
                    if on_token:
                        on_token(delta, accumulated)

        except httpx.DecodingError as e:
            msg = f"Failed to decode response stream: {e}"
            logger.error(msg)
            raise StreamingError(msg) from e
        except httpx.TransportError as e:
            msg = f"Connection to the AI service failed: {e}"
            logger.error(msg)
            raise BackendConnectionError(msg) from e

        logger.debug(f"Stream finished with {len(accumulated)} characters.")
        return accumulated
