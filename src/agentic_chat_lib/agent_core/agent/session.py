"""A chat conversation driven by the agentic loop, with at most one run in flight."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import List, Optional

from ..conversations import ChatConversation, ConversationStore, generate_chat_title
from ..logger import get_logger
from ..messages import ConversationTurn, Message, ThinkingStep
from ..tools.models import ToolCall, ToolResult
from ..transport import CancellationToken
from .callbacks import StreamCallbacks
from .history import ConversationHistoryBuilder
from .loop import AgenticLoop

logger = get_logger(__name__)


class ChatSession:
    """
    Binds a ``ChatConversation`` to an ``AgenticLoop``.

    ``send`` and ``retry`` cancel any run still in flight for this session before starting a
    new one, and starting is serialized, so two runs never write into the conversation at the
    same time.
    """

    def __init__(
        self,
        loop: AgenticLoop,
        builder: ConversationHistoryBuilder,
        conversation: Optional[ChatConversation] = None,
        store: Optional[ConversationStore] = None,
    ) -> None:
        """Initialize the session.

        Args:
            loop: The agentic loop that produces assistant replies.
            builder: Builds the backend turn list from the conversation.
            conversation: Conversation to continue; a new one is created if omitted.
            store: Optional persistence; the conversation is saved after every reply.
        """
        self.loop = loop
        self.builder = builder
        self.conversation = conversation or ChatConversation()
        self.store = store
        self._active_token: Optional[CancellationToken] = None
        self._active_task: Optional[asyncio.Task[None]] = None
        self._start_lock = asyncio.Lock()

    @property
    def messages(self) -> List[Message]:
        return self.conversation.messages

    @property
    def is_running(self) -> bool:
        return self._active_task is not None and not self._active_task.done()

    def cancel(self) -> None:
        """Abort the run in flight, if any. The run stops without completing or erroring."""
        if self._active_token is not None:
            self._active_token.cancel("cancelled by session")

    async def send(self, text: str, callbacks: Optional[StreamCallbacks] = None) -> Message:
        """Send a user message and wait for the assistant's reply.

        Args:
            text: The user's message.
            callbacks: Optional extra hooks; they are invoked after the session updated the
                       assistant message.

        Returns:
            The assistant message. If the run was cancelled it holds whatever text had streamed.
        """
        async with self._start_lock:
            await self._cancel_active()

            history = self.builder.build(self.conversation.messages, text)
            reply = Message(text="", is_user=False)
            self.conversation.messages.extend([Message(text=text, is_user=True), reply])
            if self.conversation.title == ChatConversation.DEFAULT_TITLE:
                self.conversation.title = generate_chat_title(text)
            task = self._start(history, reply, callbacks)

        return await self._complete(task, reply)

    async def retry(self, message_id: str, callbacks: Optional[StreamCallbacks] = None) -> Message:
        """Regenerate an assistant reply from the user message that precedes it.

        The reply and every message after it are dropped, then a fresh reply is streamed.

        Args:
            message_id: Id of the assistant message to regenerate.
            callbacks: Optional extra hooks, as for ``send``.

        Returns:
            The new assistant message.

        Raises:
            ValueError: If the id is unknown or does not name an assistant reply to a user message.
        """
        async with self._start_lock:
            messages = self.conversation.messages
            index = next((i for i, message in enumerate(messages) if message.id == message_id), None)
            if index is None:
                raise ValueError(f"Message '{message_id}' not found in this conversation.")
            if index == 0 or messages[index].is_user or not messages[index - 1].is_user:
                raise ValueError(f"Message '{message_id}' is not an assistant reply to a user message.")

            await self._cancel_active()

            user_message = messages[index - 1]
            del messages[index:]
            history = self.builder.build(messages[:-1], user_message.text)
            reply = Message(text="", is_user=False)
            messages.append(reply)
            logger.info(f"Retrying reply to message '{user_message.id}'.")
            task = self._start(history, reply, callbacks)

        return await self._complete(task, reply)

    def _start(
        self, history: List[ConversationTurn], reply: Message, callbacks: Optional[StreamCallbacks]
    ) -> asyncio.Task[None]:
        token = CancellationToken()
        task = asyncio.ensure_future(self.loop.run(history, self._bind(reply, callbacks), cancel_token=token))
        self._active_token, self._active_task = token, task
        return task

    async def _complete(self, task: asyncio.Task[None], reply: Message) -> Message:
        try:
            await task
        finally:
            if self._active_task is task:
                self._active_token, self._active_task = None, None

        self.conversation.updated_at = datetime.now(timezone.utc)
        if self.store is not None:
            await self.store.save(self.conversation)
        return reply

    async def _cancel_active(self) -> None:
        task = self._active_task
        if task is None or task.done():
            return
        logger.info("Cancelling in-flight run before starting a new one.")
        self.cancel()
        # The owner of the task sees its outcome.
        await asyncio.wait({task})

    @staticmethod
    def _bind(reply: Message, extra: Optional[StreamCallbacks]) -> StreamCallbacks:
        def on_token(delta: str, full_text: str) -> None:
            reply.text = full_text
            if extra:
                extra.on_token(delta, full_text)

        def on_complete(
            final_text: str,
            tool_calls: Optional[List[ToolCall]] = None,
            tool_results: Optional[List[ToolResult]] = None,
            thinking_steps: Optional[List[ThinkingStep]] = None,
        ) -> None:
            reply.text = final_text
            reply.tool_calls = tool_calls
            reply.tool_results = tool_results
            reply.thinking_steps = thinking_steps
            if extra:
                extra.on_complete(final_text, tool_calls, tool_results, thinking_steps)

        def on_error(message: str) -> None:
            reply.text = message
            if extra:
                extra.on_error(message)

        return StreamCallbacks(
            on_token=on_token,
            on_complete=on_complete,
            on_error=on_error,
            on_tool_call=extra.on_tool_call if extra else None,
            on_tool_result=extra.on_tool_result if extra else None,
            on_thinking_step=extra.on_thinking_step if extra else None,
            on_iteration_start=extra.on_iteration_start if extra else None,
        )
