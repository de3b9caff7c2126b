"""Conversation stores: an in-memory one and a JSON file one."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel, Field

from ..logger import get_logger
from .models import ChatConversation

logger = get_logger(__name__)


class ConversationStore(Protocol):
    """Persistence contract: conversations keyed by id plus the active conversation id."""

    async def save(self, conversation: ChatConversation) -> None: ...

    async def get(self, conversation_id: str) -> Optional[ChatConversation]: ...

    async def list(self) -> List[ChatConversation]: ...

    async def delete(self, conversation_id: str) -> None: ...

    async def rename(self, conversation_id: str, title: str) -> bool: ...

    async def get_active_id(self) -> Optional[str]: ...

    async def set_active_id(self, conversation_id: Optional[str]) -> None: ...


class _StoreSnapshot(BaseModel):
    conversations: Dict[str, ChatConversation] = Field(default_factory=dict)
    active_id: Optional[str] = None


class InMemoryConversationStore:
    """Keeps deep copies of conversations in a dict."""

    def __init__(self) -> None:
        self._snapshot = _StoreSnapshot()
        self._lock = asyncio.Lock()

    async def _load(self) -> _StoreSnapshot:
        return self._snapshot

    async def _dump(self, snapshot: _StoreSnapshot) -> None:
        self._snapshot = snapshot

    async def save(self, conversation: ChatConversation) -> None:
        async with self._lock:
            snapshot = await self._load()
            snapshot.conversations[conversation.id] = conversation.model_copy(deep=True)
            await self._dump(snapshot)
        logger.debug(f"Saved conversation '{conversation.id}' ({len(conversation.messages)} messages).")

    async def get(self, conversation_id: str) -> Optional[ChatConversation]:
        snapshot = await self._load()
        conversation = snapshot.conversations.get(conversation_id)
        return conversation.model_copy(deep=True) if conversation else None

    async def list(self) -> List[ChatConversation]:
        """All conversations, most recently updated first."""
        snapshot = await self._load()
        conversations = [c.model_copy(deep=True) for c in snapshot.conversations.values()]
        return sorted(conversations, key=lambda c: c.updated_at, reverse=True)

    async def delete(self, conversation_id: str) -> None:
        async with self._lock:
            snapshot = await self._load()
            snapshot.conversations.pop(conversation_id, None)
            if snapshot.active_id == conversation_id:
                snapshot.active_id = None
            await self._dump(snapshot)

    async def rename(self, conversation_id: str, title: str) -> bool:
        """Rename a conversation. Blank titles and unknown ids are rejected with False."""
        title = title.strip()
        if not title:
            return False
        async with self._lock:
            snapshot = await self._load()
            conversation = snapshot.conversations.get(conversation_id)
            if conversation is None:
                return False
            conversation.title = title
            conversation.updated_at = datetime.now(timezone.utc)
            await self._dump(snapshot)
        return True

    async def get_active_id(self) -> Optional[str]:
        return (await self._load()).active_id

    async def set_active_id(self, conversation_id: Optional[str]) -> None:
        async with self._lock:
            snapshot = await self._load()
            snapshot.active_id = conversation_id
            await self._dump(snapshot)


class JsonFileConversationStore(InMemoryConversationStore):
    """Stores every conversation in a single JSON file, rewritten on each change."""

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)

    async def _load(self) -> _StoreSnapshot:
        return await asyncio.to_thread(self._read)

    async def _dump(self, snapshot: _StoreSnapshot) -> None:
        await asyncio.to_thread(self._write, snapshot)

    def _read(self) -> _StoreSnapshot:
        if not self.path.exists():
            return _StoreSnapshot()
        return _StoreSnapshot.model_validate_json(self.path.read_text(encoding="utf-8"))

    def _write(self, snapshot: _StoreSnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
