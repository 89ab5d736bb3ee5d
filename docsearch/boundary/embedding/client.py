"""
Lazily constructed, fail-open embedding provider client.

The underlying LangChain Embeddings object is built on first use behind a
double-checked lock: the fast path returns the built client without
locking, the slow path builds it exactly once even under concurrent first
callers. A failed build is remembered as "unavailable" and never retried
automatically, so a misconfigured provider costs one failed attempt, not one
per request.

Dependencies: langchain_core, tenacity, docsearch.configs
System role: EmbeddingProvider implementation consumed by RetrievalService
"""

import logging
import threading
from functools import partial
from typing import Callable, Protocol

from langchain_core.embeddings import Embeddings
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from docsearch.configs.embedding import EmbeddingSettings
from docsearch.core.vector_math import Vector, to_vector

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    """Converts text to a fixed-dimension vector; None when unavailable."""

    def embed(self, text: str) -> Vector | None:
        ...


class LazyEmbeddingClient:
    """
    EmbeddingProvider backed by any LangChain Embeddings implementation.

    Example:
        client = LazyEmbeddingClient.from_settings(get_settings().embedding)
        vector = client.embed("quarterly invoice totals")
        if vector is None:
            ...  # provider not configured or unreachable
    """

    def __init__(
        self,
        factory: Callable[[], Embeddings],
        max_attempts: int = 3,
        retry_initial_wait: float = 1.0,
        retry_max_wait: float = 30.0,
    ) -> None:
        """
        Initialize client without contacting the provider.

        Args:
            factory: Builds the LangChain Embeddings client; may raise
            max_attempts: Attempts per embed call before returning None
            retry_initial_wait: Initial exponential backoff in seconds
            retry_max_wait: Maximum backoff in seconds
        """
        self._factory = factory
        self._max_attempts = max_attempts
        self._retry_initial_wait = retry_initial_wait
        self._retry_max_wait = retry_max_wait

        self._client: Embeddings | None = None
        self._initialized = False
        self._init_error: Exception | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: EmbeddingSettings) -> "LazyEmbeddingClient":
        """Client for the Gemini provider described by settings."""
        from docsearch.boundary.embedding.gemini_embeddings import build_gemini_embeddings

        return cls(
            factory=partial(build_gemini_embeddings, settings),
            max_attempts=settings.max_attempts,
            retry_initial_wait=settings.retry_initial_wait,
            retry_max_wait=settings.retry_max_wait,
        )

    @property
    def available(self) -> bool:
        """Whether the provider client could be built."""
        return self._get_client() is not None

    @property
    def init_error(self) -> Exception | None:
        """Error recorded when the provider client failed to build."""
        return self._init_error

    def reset(self) -> None:
        """Forget the built client (or recorded failure) so the next call rebuilds it."""
        with self._lock:
            self._client = None
            self._init_error = None
            self._initialized = False

    def embed(self, text: str) -> Vector | None:
        """
        Embed text as a query vector.

        Transient provider failures are retried with exponential backoff.

        Args:
            text: Text to embed

        Returns:
            Vector | None: Float32 embedding, or None if the provider is
            unavailable or every attempt failed
        """
        client = self._get_client()
        if client is None:
            return None

        retryer = Retrying(
            retry=retry_if_exception_type(Exception),
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential_jitter(
                initial=self._retry_initial_wait,
                max=self._retry_max_wait,
            ),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:embed - Retry {retry_state.attempt_number}/{self._max_attempts} "
                f"after provider error"
            ),
            reraise=True,
        )

        try:
            values = retryer(client.embed_query, text)
            return to_vector(values)
        except Exception as e:
            logger.error(f"{__name__}:embed - {type(e).__name__}: {e}")
            return None

    def _get_client(self) -> Embeddings | None:
        if self._initialized:
            return self._client

        with self._lock:
            if not self._initialized:
                try:
                    self._client = self._factory()
                    logger.info(f"{__name__}:_get_client - Embedding provider initialized")
                except Exception as e:
                    self._init_error = e
                    logger.warning(
                        f"{__name__}:_get_client - Embedding provider unavailable, "
                        f"continuing without embeddings: {e}"
                    )
                finally:
                    self._initialized = True

        return self._client
