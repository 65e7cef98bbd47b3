import logging
import os

ROOT = "ctcmap"
LEVEL_ENV = "CTCMAP_LOG_LEVEL"


def _level_from_env(default_level: int) -> int:
    level_name = os.getenv(LEVEL_ENV, logging.getLevelName(default_level))
    try:
        return getattr(logging, level_name.upper())
    except AttributeError:
        return default_level


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False

    # WARNING for library use, INFO for the CLI; CTCMAP_LOG_LEVEL overrides both
    default_level = logging.INFO if name.endswith('.cli') else logging.WARNING
    logger.setLevel(_level_from_env(default_level))
    return logger


def set_level(level: int) -> None:
    """Apply ``level`` to every ctcmap logger created so far."""
    for name, logger in logging.root.manager.loggerDict.items():
        if name.startswith(ROOT) and isinstance(logger, logging.Logger):
            logger.setLevel(level)
