"""
Test Configuration - Shared test fixtures and setup

This module provides common test fixtures and configuration for the test suite.
"""

import pytest
from typing import List, Sequence
from unittest.mock import AsyncMock, Mock

# Import test modules
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from category_rag.config import AppConfig, VectorStoreConfig
from category_rag.core.chunker import TextChunker
from category_rag.core.embedding_generator import EmbeddingProvider
from category_rag.core.query import AnswerGenerator
from category_rag.exceptions import ProviderFailure
from category_rag.retrieval import CategoryStore, ContentSessionStore, RAGEngineFactory

EMBEDDING_DIMENSION = 16


def keyword_vector(text: str, dimension: int = EMBEDDING_DIMENSION) -> List[float]:
    """Deterministic bag-of-words vector: each word increments one bucket."""
    vector = [0.0] * dimension
    for word in text.lower().split():
        word = word.strip(".,;:!?\"'()[]")
        if word:
            vector[sum(ord(c) for c in word) % dimension] += 1.0
    return vector


class FakeEmbeddingProvider(EmbeddingProvider):
    """In-process embedding provider that records its calls."""

    dimension = EMBEDDING_DIMENSION

    def __init__(self):
        self.batch_calls: List[List[str]] = []
        self.query_calls: List[str] = []

    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        self.batch_calls.append(list(texts))
        return [keyword_vector(text) for text in texts]

    async def embed_one(self, text: str) -> List[float]:
        self.query_calls.append(text)
        return keyword_vector(text)


class FailingEmbeddingProvider(FakeEmbeddingProvider):
    """Provider whose batch embedding always fails."""

    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        raise ProviderFailure("embedding service unavailable")


class FailingQueryEmbeddingProvider(FakeEmbeddingProvider):
    """Provider that indexes fine but fails at question time."""

    async def embed_one(self, text: str) -> List[float]:
        raise ProviderFailure("query embedding timed out")


@pytest.fixture
def embedding_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture
def failing_embedding_provider() -> FailingEmbeddingProvider:
    return FailingEmbeddingProvider()


@pytest.fixture
def failing_query_provider() -> FailingQueryEmbeddingProvider:
    return FailingQueryEmbeddingProvider()


@pytest.fixture
def engine_factory(embedding_provider) -> RAGEngineFactory:
    """Engine factory backed by in-memory vector stores."""
    return RAGEngineFactory(embedding_provider, VectorStoreConfig())


@pytest.fixture
def category_store(engine_factory) -> CategoryStore:
    return CategoryStore(engine_factory)


@pytest.fixture
def content_sessions(engine_factory) -> ContentSessionStore:
    return ContentSessionStore(engine_factory, chunker=TextChunker())


@pytest.fixture
def legal_text() -> str:
    """Long legal document; well above the RAG threshold."""
    paragraphs = [
        "Either party may invoke the termination clause with ninety days written notice.",
        "Confidential information must not be disclosed to third parties.",
        "Payment is due within thirty days of invoice.",
        "Disputes are resolved by binding arbitration in the governing jurisdiction.",
    ]
    text = " ".join(paragraphs)
    return (text + " ") * (60000 // len(text) + 1)


@pytest.fixture
def mock_openai_response():
    """Mock OpenAI chat completion response."""
    mock_response = Mock()
    mock_response.choices = [Mock()]
    mock_response.choices[0].message.content = "This is a sample AI response."
    return mock_response


@pytest.fixture
def mock_openai_client(mock_openai_response):
    """Mock AsyncOpenAI client with chat completions."""
    client = Mock()
    client.chat.completions.create = AsyncMock(return_value=mock_openai_response)
    return client


@pytest.fixture
def answer_generator(mock_openai_client) -> AnswerGenerator:
    return AnswerGenerator(client=mock_openai_client)


@pytest.fixture
def app_config() -> AppConfig:
    """Configuration with a low RAG threshold so small test documents get indexed."""
    config = AppConfig()
    config.retrieval.rag_threshold = 200
    config.retrieval.chunk_size = 100
    config.retrieval.chunk_overlap = 20
    config.monitoring.prometheus_enabled = True
    return config
