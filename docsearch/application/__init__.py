"""Service orchestrators."""

from .retrieval_service import RetrievalService

__all__ = ["RetrievalService"]
