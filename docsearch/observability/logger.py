"""
Logger configuration.

One stdout handler on the root logger with ISO timestamps; library
modules only ever call logging.getLogger(__name__).

Dependencies: logging (stdlib), docsearch.configs
System role: Centralized logging configuration
"""

import logging
import sys

# Third-party loggers that are chatty at INFO
_NOISY_LOGGERS = ("urllib3", "httpx", "google", "grpc")


def configure_logging(level: str | None = None) -> None:
    """
    Install the stdout handler on the root logger.

    Calling again replaces the handler instead of adding a second one.

    Args:
        level: Root level name; defaults to the configured log_level
    """
    if level is None:
        from docsearch.configs.settings import get_settings

        level = get_settings().log_level

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger.setLevel(level.strip().upper())
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger for name (usually __name__)."""
    return logging.getLogger(name)
