from pathlib import Path

import pytest
from pydantic import ValidationError

from agentic_chat_lib.agent_core import AgentConfig
from agentic_chat_lib.agent_core.config import DEFAULT_BACKEND_URL, DEFAULT_MODEL


def test_defaults() -> None:
    config = AgentConfig()

    assert config.backend_url == DEFAULT_BACKEND_URL
    assert config.model == DEFAULT_MODEL
    assert config.stream_timeout == 30.0
    assert config.timeout_scope == "call"
    assert config.max_iterations == 5
    assert config.parallel_tool_calls is False


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(ValidationError):
        AgentConfig(max_iterations=0)
    with pytest.raises(ValidationError):
        AgentConfig(stream_timeout=0)
    with pytest.raises(ValidationError):
        AgentConfig(timeout_scope="forever")  # type: ignore[arg-type]


def test_from_env_reads_prefixed_variables(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("AGENTIC_CHAT_MAX_ITERATIONS", "3")
    monkeypatch.setenv("AGENTIC_CHAT_TIMEOUT_SCOPE", "run")
    monkeypatch.setenv("AGENTIC_CHAT_PARALLEL_TOOL_CALLS", "true")
    monkeypatch.setenv("AGENTIC_CHAT_MODEL", "")

    config = AgentConfig.from_env(env_file=tmp_path / "missing.env")

    assert config.max_iterations == 3
    assert config.timeout_scope == "run"
    assert config.parallel_tool_calls is True
    assert config.model == DEFAULT_MODEL


def test_from_env_loads_dotenv_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # Registered with monkeypatch so the values load_dotenv sets are removed after the test.
    for name in ("AGENTIC_CHAT_BACKEND_URL", "AGENTIC_CHAT_STREAM_TIMEOUT"):
        monkeypatch.setenv(name, "unset")
        monkeypatch.delenv(name)
    env_file = tmp_path / ".env"
    env_file.write_text("AGENTIC_CHAT_BACKEND_URL=http://localhost:3000/api/chat\nAGENTIC_CHAT_STREAM_TIMEOUT=12.5\n")

    config = AgentConfig.from_env(env_file=env_file, model="override")

    assert config.backend_url == "http://localhost:3000/api/chat"
    assert config.stream_timeout == 12.5
    assert config.model == "override"
