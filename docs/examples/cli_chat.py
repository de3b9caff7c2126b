import asyncio
import logging
from datetime import datetime

from dotenv import load_dotenv

from agentic_chat_lib.agent_core import (
    AgentConfig,
    AgenticLoop,
    ChatSession,
    ConversationHistoryBuilder,
    JsonFileConversationStore,
    StreamCallbacks,
    StreamingTransport,
    ToolRegistry,
    describe_tool_call,
    setup_logging,
)

# Load environment variables
load_dotenv()

registry = ToolRegistry()


@registry.tool
def get_current_time() -> str:
    """Returns the current local date and time."""
    return datetime.now().strftime("%A, %d %B %Y, %H:%M")


def _print_token(delta: str, full_text: str) -> None:
    # An empty delta means the displayed text was replaced by a cleaned version.
    if delta:
        print(delta, end="", flush=True)


async def main() -> None:
    """
    Main function to run the CLI chat against the configured streaming backend.
    """
    setup_logging(level=logging.WARNING)
    config = AgentConfig.from_env()
    print(f"Welcome to the CLI Chat ({config.model})!")

    callbacks = StreamCallbacks(
        on_token=_print_token,
        on_complete=lambda text, calls, results, steps: print(),
        on_error=lambda message: print(f"\nError: {message}"),
        on_tool_call=lambda call: print(f"\n{describe_tool_call(call)}"),
        on_iteration_start=lambda iteration, steps: print(f"\n[step {iteration}] ", end=""),
    )

    async with StreamingTransport(config=config) as transport:
        loop = AgenticLoop(registry, transport, config)
        session = ChatSession(loop, ConversationHistoryBuilder(registry), store=JsonFileConversationStore("chats.json"))

        print("\nStart chatting! Type '/retry' to regenerate the last answer, 'exit' or 'quit' to stop.")
        while True:
            user_input = input("\nYou: ").strip()
            if user_input.lower() in ["exit", "quit"]:
                print("Goodbye!")
                break

            if not user_input:
                continue

            if user_input == "/retry":
                if len(session.messages) < 2:
                    print("Nothing to retry yet.")
                    continue
                print("Assistant: ", end="")
                await session.retry(session.messages[-1].id, callbacks)
                continue

            print("Assistant: ", end="")
            await session.send(user_input, callbacks)


if __name__ == "__main__":
    asyncio.run(main())
