"""Logging configuration for SceneWeaver.

Every module logs below the ``sceneweaver`` logger. ``setup_logging`` attaches
the engine's own handlers to it; records still propagate, so an application
that configures the root logger keeps seeing them.
"""

# Standard library imports
import logging
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = "sceneweaver"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty provider and HTTP client loggers
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "langchain_core")

# Marks handlers installed here, so a repeated setup replaces only those
_HANDLER_TAG = "_sceneweaver_handler"


def resolve_level(level: Union[str, int]) -> int:
    """Turn a level name (any case) or number into a logging level.

    Raises:
        ValueError: If the name is not a standard level
    """
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """Set up the engine's logger.

    Args:
        level: Level name or number for the ``sceneweaver`` logger
        log_file: Optional path of a log file; parent directories are created
        format_string: Optional custom format string

    Returns:
        The configured ``sceneweaver`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(resolve_level(level))

    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_TAG, False)]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_TAG, True)
        logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug(f"Logging configured at {logging.getLevelName(logger.level)}")
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger below the ``sceneweaver`` logger.

    Module names that carry the package prefix are mapped onto the
    ``sceneweaver`` hierarchy so that ``setup_logging`` controls them.
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith("sceneweaver_lib."):
        name = name[len("sceneweaver_lib."):]
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


# Module-level logger instances for common components
config_logger = get_logger("config")
catalog_logger = get_logger("catalog")
mood_logger = get_logger("mood")
journal_logger = get_logger("journal")
director_logger = get_logger("director")
