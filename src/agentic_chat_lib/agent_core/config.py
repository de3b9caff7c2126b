"""Runtime configuration for the agentic chat core."""

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .logger import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "AGENTIC_CHAT_"

DEFAULT_BACKEND_URL = "https://ai-sdk-starter-groq.vercel.app/api/chat"
DEFAULT_MODEL = "kimi-k2"

TimeoutScope = Literal["call", "run"]


class AgentConfig(BaseModel):
    """
    Settings shared by the streaming transport and the agentic loop.

    Attributes:
        backend_url: Streaming chat endpoint that receives the POST.
        model: Value sent as ``selectedModel``.
        stream_timeout: Seconds before a stream is aborted.
        timeout_scope: ``"call"`` gives every backend call its own ``stream_timeout``;
                       ``"run"`` arms a single timer for the whole multi-iteration run.
        max_iterations: Upper bound on backend calls per run; the last one never has tools.
        tool_timeout: Seconds a single tool executor may run.
        parallel_tool_calls: Execute the calls of one round concurrently instead of one by one.
    """

    backend_url: str = DEFAULT_BACKEND_URL
    model: str = DEFAULT_MODEL
    stream_timeout: float = Field(default=30.0, gt=0)
    timeout_scope: TimeoutScope = "call"
    max_iterations: int = Field(default=5, ge=1)
    tool_timeout: Optional[float] = Field(default=180.0, gt=0)
    parallel_tool_calls: bool = False

    @classmethod
    def from_env(cls, env_file: Optional[str | Path] = None, **overrides: Any) -> "AgentConfig":
        """Build a config from ``AGENTIC_CHAT_*`` environment variables.

        A ``.env`` file is loaded first (without overriding variables already set), e.g.
        ``AGENTIC_CHAT_MAX_ITERATIONS=3``.

        Args:
            env_file: Optional explicit path to the .env file.
            **overrides: Values that win over the environment.

        Returns:
            The validated configuration.
        """
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()

        values: Dict[str, Any] = {}
        for field_name in cls.model_fields:
            raw = os.getenv(f"{ENV_PREFIX}{field_name.upper()}")
            if raw is not None and raw != "":
                values[field_name] = raw
        values.update(overrides)

        config = cls.model_validate(values)
        logger.debug(f"Loaded agent config from environment: {config.model_dump()}")
        return config
