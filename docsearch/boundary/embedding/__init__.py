"""
Embedding provider boundary.

- LazyEmbeddingClient: fail-open EmbeddingProvider over LangChain Embeddings
- FixedDimensionEmbeddings: Gemini backend (imported lazily by from_settings)

Dependencies: langchain_core, langchain_google_genai, tenacity
System role: Text-to-vector adapter for the retrieval pipeline
"""

from docsearch.boundary.embedding.client import EmbeddingProvider, LazyEmbeddingClient

__all__ = ["EmbeddingProvider", "LazyEmbeddingClient"]
