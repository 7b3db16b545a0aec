"""
Core Components - Building blocks for retrieval

This module contains:
- Character-window chunking
- Embedding providers
- In-memory and Pinecone vector stores
- Document parsing and web page loading
- Answer generation

License: MIT
"""

from .chunker import Chunk, TextChunker, chunk_text
from .embedding_generator import EmbeddingProvider, OpenAIEmbeddingProvider
from .vector_store import (
    StoredVector,
    VectorStoreBase,
    InMemoryVectorStore,
    PineconeVectorStore,
    create_vector_store,
)
from .document_processor import DocumentProcessor, parse_document, clean_document_text
from .web_loader import load_web_content, extract_text
from .query import AnswerGenerator, build_context, no_information_answer

__all__ = [
    "Chunk",
    "TextChunker",
    "chunk_text",
    "EmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "StoredVector",
    "VectorStoreBase",
    "InMemoryVectorStore",
    "PineconeVectorStore",
    "create_vector_store",
    "DocumentProcessor",
    "parse_document",
    "clean_document_text",
    "load_web_content",
    "extract_text",
    "AnswerGenerator",
    "build_context",
    "no_information_answer",
]
