"""
Structured logging helpers.

Turns context values into short strings before they reach a log record,
so vectors and candidate pools show up as shapes and counts rather than
thousands of floats.

Dependencies: logging (stdlib), numpy
System role: Logging helper functions
"""

import logging
from typing import Any, Mapping

import numpy as np


def _summarize(value: Any) -> str:
    if isinstance(value, np.ndarray):
        return f"ndarray(shape={value.shape}, dtype={value.dtype})"
    if isinstance(value, (list, tuple)):
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, Mapping):
        return f"dict({len(value)} keys)"
    return str(value)


def safe_log_value(value: Any, max_length: int = 500) -> str:
    """
    String form of value that is safe to attach to a log record.

    Args:
        value: Any value
        max_length: Longest string returned before truncation

    Returns:
        str: Summary or str(value), truncated to max_length
    """
    if value is None:
        return "None"
    try:
        text = value if isinstance(value, str) else _summarize(value)
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"

    if len(text) > max_length:
        return f"{text[:max_length]}... (truncated, {len(text)} total)"
    return text


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context,
) -> None:
    """
    Log message with context fields attached as record attributes.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: Values summarized with safe_log_value
    """
    logger.log(level, message, extra={key: safe_log_value(val) for key, val in context.items()})


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context,
) -> None:
    """
    Log exc at ERROR with traceback plus its type and message as context.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception being handled
        **context: Additional values summarized with safe_log_value
    """
    extra = {key: safe_log_value(val) for key, val in context.items()}
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    logger.error(message, exc_info=exc, extra=extra)
