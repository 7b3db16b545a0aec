"""
Category RAG - Category-aware retrieval-augmented chat

This package provides the retrieval subsystem behind a chat service that
answers questions about websites, uploaded documents and administrator
curated document categories.

Core
- Character-window chunking
- Embedding providers
- In-memory and Pinecone vector stores
- Document parsing, web loading and answer generation

Retrieval
- RAG-vs-simple size policy
- Per-unit semantic engine with explicit fallback mode
- Category document registry, fan-out search and sessions

Infrastructure
- FastAPI server
- Prometheus metrics and structured logging

License: MIT
"""

__version__ = "1.0.0"

# Core exports
from .core.chunker import Chunk, TextChunker, chunk_text
from .core.document_processor import DocumentProcessor
from .core.embedding_generator import EmbeddingProvider, OpenAIEmbeddingProvider
from .core.vector_store import (
    VectorStoreBase,
    InMemoryVectorStore,
    PineconeVectorStore,
    create_vector_store,
)
from .core.query import AnswerGenerator

# Retrieval exports
from .retrieval.policy import RetrievalMode, should_use_rag, DEFAULT_RAG_THRESHOLD
from .retrieval.engine import RAGEngine, RAGEngineFactory, IndexedContent
from .retrieval.category_store import CategoryStore, CategoryDocument, CategorySession
from .retrieval.content_session import ContentSession, ContentSessionStore

# Configuration exports
from .config import AppConfig, ConfigManager, get_config, get_config_manager, validate_config

# Error exports
from .exceptions import (
    CategoryRAGError,
    InvalidConfiguration,
    EmptyInput,
    DimensionMismatch,
    ProviderFailure,
    NotFound,
    DocumentParseError,
    ContentLoadError,
)

__all__ = [
    # Core
    "Chunk",
    "TextChunker",
    "chunk_text",
    "DocumentProcessor",
    "EmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "VectorStoreBase",
    "InMemoryVectorStore",
    "PineconeVectorStore",
    "create_vector_store",
    "AnswerGenerator",
    # Retrieval
    "RetrievalMode",
    "should_use_rag",
    "DEFAULT_RAG_THRESHOLD",
    "RAGEngine",
    "RAGEngineFactory",
    "IndexedContent",
    "CategoryStore",
    "CategoryDocument",
    "CategorySession",
    "ContentSession",
    "ContentSessionStore",
    # Configuration
    "AppConfig",
    "ConfigManager",
    "get_config",
    "get_config_manager",
    "validate_config",
    # Errors
    "CategoryRAGError",
    "InvalidConfiguration",
    "EmptyInput",
    "DimensionMismatch",
    "ProviderFailure",
    "NotFound",
    "DocumentParseError",
    "ContentLoadError",
]
