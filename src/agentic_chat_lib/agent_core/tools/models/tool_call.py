"""Data models for tool calls detected in model output and their outcomes."""

from __future__ import annotations

import time
import uuid
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


def generate_call_id() -> str:
    """Build a call id from the current time plus a random suffix.

    The suffix keeps ids unique when several calls are detected within the same millisecond.
    """
    return f"call_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


class ToolCall(BaseModel):
    """A request to execute a named tool, immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_call_id)
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Outcome of executing a ``ToolCall``.

    Carries either a ``result`` payload or an ``error`` string, never both.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    result: Any = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _result_xor_error(self) -> "ToolResult":
        if self.error is not None and self.result is not None:
            raise ValueError("A ToolResult carries either a result or an error, not both.")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, call: ToolCall, result: Any) -> "ToolResult":
        return cls(id=call.id, name=call.name, result=result)

    @classmethod
    def failure(cls, call: ToolCall, error: str) -> "ToolResult":
        return cls(id=call.id, name=call.name, error=error)
