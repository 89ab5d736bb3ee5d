"""
Cooperative cancellation for long-running scans.

Dependencies: threading (stdlib), docsearch.core.exceptions
System role: Cancellation signal checked between outer-loop iterations
"""

import threading

from docsearch.core.exceptions import OperationCancelledError


class CancellationToken:
    """Thread-safe, one-way cancellation flag."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, operation: str, **progress) -> None:
        """
        Raise OperationCancelledError when cancellation was requested.

        Args:
            operation: Name of the operation checking the token
            **progress: Progress context attached to the error details
        """
        if self._event.is_set():
            raise OperationCancelledError(operation, details=dict(progress))
