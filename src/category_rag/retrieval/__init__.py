"""
Retrieval Components - Policy, semantic engine and registries

This module implements:
- The RAG-vs-simple size policy
- The per-unit semantic retrieval engine and its explicit mode
- The category document/session registry
- Single-content (website/document) sessions

License: MIT
"""

from .policy import RetrievalMode, should_use_rag, fallback_chunks, DEFAULT_RAG_THRESHOLD
from .engine import RAGEngine, RAGEngineFactory, IndexedContent
from .category_store import CategoryStore, CategoryDocument, CategorySession
from .content_session import ContentSession, ContentSessionStore

__all__ = [
    "RetrievalMode",
    "should_use_rag",
    "fallback_chunks",
    "DEFAULT_RAG_THRESHOLD",
    "RAGEngine",
    "RAGEngineFactory",
    "IndexedContent",
    "CategoryStore",
    "CategoryDocument",
    "CategorySession",
    "ContentSession",
    "ContentSessionStore",
]
