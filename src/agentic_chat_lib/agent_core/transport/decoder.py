"""Line-buffered decoder for the backend's ``data: <json>`` event stream."""

import json
from typing import List, Optional

from ..logger import get_logger

logger = get_logger(__name__)

DATA_PREFIX = "data:"


class StreamDecoder:
    """
    Turns arbitrarily split text chunks into text deltas.

    Network chunk boundaries never line up with event boundaries, so complete lines are
    processed as they appear and the trailing partial line is kept for the next chunk.
    """

    def __init__(self) -> None:
        self._buffer = ""

    def feed(self, chunk: str) -> List[str]:
        """Consume a chunk and return the deltas of every line it completed."""
        self._buffer += chunk
        *lines, self._buffer = self._buffer.split("\n")
        deltas = []
        for line in lines:
            delta = self._parse_line(line)
            if delta:
                deltas.append(delta)
        return deltas

    def close(self) -> List[str]:
        """Flush a final line that was not newline-terminated."""
        remainder, self._buffer = self._buffer, ""
        delta = self._parse_line(remainder)
        return [delta] if delta else []

    @staticmethod
    def _parse_line(line: str) -> Optional[str]:
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            return None

        payload = line[len(DATA_PREFIX) :].strip()
        if not payload:
            return None

        try:
            event = json.loads(payload)
        except json.JSONDecodeError:
            logger.debug(f"Skipping unparseable stream line: {payload[:100]}")
            return None

        if not isinstance(event, dict):
            return None
        if event.get("type") == "text-delta":
            delta = event.get("delta")
            return delta if isinstance(delta, str) and delta else None
        # "finish" and unknown event types carry no text.
        return None
