"""
Logging configuration module for the combat tracker.

Provides centralized logging setup with colored output using rich. The
library never configures logging on import; applications call
setup_logging() once at startup.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: int = logging.INFO) -> None:
    """
    Sets up logging configuration with rich colored output.

    Args:
        level (int): The logging level to set. Defaults to logging.INFO.

    """
    console = Console(width=120, force_jupyter=False)

    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_level=True,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
    )
    rich_handler.setFormatter(
        logging.Formatter("%(name)s - %(message)s", datefmt="[%X]")
    )

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[rich_handler],
    )


def get_logger(name: str) -> logging.Logger:
    """
    Gets a logger instance with the specified name.

    Args:
        name (str): The name of the logger.

    Returns:
        logging.Logger: The configured logger instance.

    """
    return logging.getLogger(name)


logger = get_logger("combat_tracker")


def format_context(message: str, context: dict[str, Any] | None = None) -> str:
    """
    Appends a context dictionary to a message as key=value pairs.

    Args:
        message (str): The message to decorate.
        context (dict[str, Any] | None): Optional context dictionary.

    Returns:
        str: The message, followed by the bracketed context if any.

    """
    if not context:
        return message
    context_str = " ".join(f"{k}={v}" for k, v in context.items())
    return f"{message} [{context_str}]"


def log_warning(message: str, context: dict[str, Any] | None = None) -> None:
    """Logs a warning message with optional context."""
    logger.warning(format_context(message, context))


def log_info(message: str, context: dict[str, Any] | None = None) -> None:
    """Logs an info message with optional context."""
    logger.info(format_context(message, context))


def log_debug(message: str, context: dict[str, Any] | None = None) -> None:
    """Logs a debug message with optional context."""
    logger.debug(format_context(message, context))
