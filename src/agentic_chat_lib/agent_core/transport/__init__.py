"""Streaming transport to the chat backend."""

from .base import ChatTransport, TokenCallback
from .cancellation import CancellationToken
from .decoder import StreamDecoder
from .stream import StreamingTransport

__all__ = ["ChatTransport", "TokenCallback", "CancellationToken", "StreamDecoder", "StreamingTransport"]
