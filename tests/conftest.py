from typing import Annotated

import pytest
from pydantic import Field

from agentic_chat_lib.agent_core import ToolRegistry
from helpers import CallbackRecorder


@pytest.fixture
def recorder() -> CallbackRecorder:
    return CallbackRecorder()


@pytest.fixture
def registry() -> ToolRegistry:
    registry = ToolRegistry(tool_timeout=5.0)

    @registry.tool
    def get_current_time() -> str:
        """Returns the current time."""
        return "12:00 PM"

    @registry.tool
    def search(
        query: Annotated[str, Field(description="What to search for")],
        limit: Annotated[int, Field(description="Maximum number of hits")] = 3,
    ) -> str:
        """Searches the knowledge base."""
        return f"results for {query} (limit {limit})"

    return registry
