"""Library-wide logger namespace and an opt-in console handler."""

import logging
import sys

_LOGGER_NAME = "agentic_chat_lib"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger below the ``agentic_chat_lib`` namespace.

    Modules call ``get_logger(__name__)``; names already inside the namespace are not
    prefixed a second time.

    Args:
        name: Module or component name. None returns the namespace root.
    """
    if not name or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    if name.startswith(_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


def setup_logging(level: int = logging.INFO, format_str: str = DEFAULT_FORMAT) -> None:
    """Print library logs to stdout.

    Meant for applications and scripts; the library itself only installs a NullHandler.
    Calling it again after a real handler was attached has no effect.

    Args:
        level: Threshold for the library's root logger.
        format_str: ``logging.Formatter`` format string.
    """
    root = logging.getLogger(_LOGGER_NAME)
    if any(not isinstance(h, logging.NullHandler) for h in root.handlers):
        return

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter(format_str))
    root.addHandler(console)
    root.setLevel(level)


logging.getLogger(_LOGGER_NAME).addHandler(logging.NullHandler())
