"""
Unit Tests for the Retrieval Engine

Tests the RAGEngine lifecycle and the two-phase IndexedContent build.
"""

import pytest
from unittest.mock import AsyncMock, Mock

from category_rag.config import VectorStoreConfig
from category_rag.core.vector_store import InMemoryVectorStore, PineconeVectorStore
from category_rag.exceptions import EmptyInput, ProviderFailure
from category_rag.retrieval import IndexedContent, RAGEngine, RAGEngineFactory, RetrievalMode


CHUNKS = [
    "The termination clause requires ninety days notice.",
    "Payment terms are thirty days from invoice.",
    "Confidential information stays confidential.",
]


class TestRAGEngine:
    """Test cases for RAGEngine."""

    async def test_initialize_embeds_in_one_batch(self, embedding_provider):
        engine = RAGEngine(embedding_provider, InMemoryVectorStore())

        await engine.initialize_from_chunks(CHUNKS)

        assert engine.is_ready
        assert embedding_provider.batch_calls == [CHUNKS]
        assert len(engine.vector_store) == 3
        assert engine.chunks == CHUNKS

    async def test_initialize_empty_chunks(self, embedding_provider):
        engine = RAGEngine(embedding_provider, InMemoryVectorStore())

        with pytest.raises(EmptyInput):
            await engine.initialize_from_chunks([])
        assert embedding_provider.batch_calls == []

    async def test_provider_failure_propagates(self, failing_embedding_provider):
        engine = RAGEngine(failing_embedding_provider, InMemoryVectorStore())

        with pytest.raises(ProviderFailure):
            await engine.initialize_from_chunks(CHUNKS)
        assert not engine.is_ready

    async def test_semantic_search_finds_relevant_chunk(self, embedding_provider):
        engine = RAGEngine(embedding_provider, InMemoryVectorStore())
        await engine.initialize_from_chunks(CHUNKS)

        results = await engine.semantic_search("payment invoice terms", top_k=1)

        assert results == [CHUNKS[1]]
        assert embedding_provider.query_calls == ["payment invoice terms"]

    async def test_semantic_search_before_initialize(self, embedding_provider):
        engine = RAGEngine(embedding_provider, InMemoryVectorStore())

        assert await engine.semantic_search("anything") == []
        assert embedding_provider.query_calls == []

    async def test_reset_is_idempotent(self, embedding_provider):
        engine = RAGEngine(embedding_provider, InMemoryVectorStore())
        await engine.initialize_from_chunks(CHUNKS)

        await engine.reset()
        await engine.reset()

        assert not engine.is_ready
        assert engine.chunks == []
        assert await engine.semantic_search("termination") == []
        assert await engine.vector_store.search([1.0] * 16, 3) == []

    async def test_reset_on_remote_store_does_not_error(self, embedding_provider):
        index = Mock()
        store = PineconeVectorStore("docs", namespace="doc-1", index=index)
        engine = RAGEngine(embedding_provider, store)
        await engine.initialize_from_chunks(CHUNKS)

        await engine.reset()

        assert not engine.is_ready


class TestRAGEngineFactory:
    def test_fresh_store_per_engine(self, embedding_provider):
        factory = RAGEngineFactory(embedding_provider, VectorStoreConfig())

        first, second = factory("doc-1"), factory("doc-2")

        assert first.vector_store is not second.vector_store
        assert first.embedding_provider is embedding_provider


class TestIndexedContent:
    """Test cases for the two-phase build."""

    async def test_below_threshold_is_fallback(self, engine_factory, embedding_provider):
        index = await IndexedContent.build(CHUNKS, False, engine_factory, namespace="doc-1")

        assert index.mode is RetrievalMode.FALLBACK
        assert index.downgrade_reason == "below_threshold"
        assert index.engine is None
        assert not index.use_rag
        assert embedding_provider.batch_calls == []

    async def test_semantic_when_initialization_succeeds(self, engine_factory):
        index = await IndexedContent.build(CHUNKS, True, engine_factory, namespace="doc-1")

        assert index.mode is RetrievalMode.SEMANTIC
        assert index.use_rag
        assert index.downgrade_reason is None
        assert await index.retrieve("confidential information", 1) == [CHUNKS[2]]

    async def test_initialization_failure_downgrades(self, failing_embedding_provider):
        factory = RAGEngineFactory(failing_embedding_provider, VectorStoreConfig())

        index = await IndexedContent.build(CHUNKS, True, factory, namespace="doc-1")

        assert index.mode is RetrievalMode.FALLBACK
        assert index.downgrade_reason == "init_failed"
        assert "embedding service unavailable" in index.error
        assert await index.retrieve("anything", 2) == CHUNKS[:2]

    async def test_empty_chunks_with_rag_downgrades(self, engine_factory):
        index = await IndexedContent.build([], True, engine_factory, namespace="doc-1")

        assert index.mode is RetrievalMode.FALLBACK
        assert index.downgrade_reason == "init_failed"
        assert await index.retrieve("anything", 3) == []

    async def test_fallback_retrieve_is_positional(self, engine_factory):
        index = await IndexedContent.build(CHUNKS, False, engine_factory, namespace="doc-1")

        assert await index.retrieve("confidential", 2) == CHUNKS[:2]
        assert await index.retrieve("confidential", 10) == CHUNKS

    async def test_semantic_search_errors_propagate(self, failing_query_provider):
        factory = RAGEngineFactory(failing_query_provider, VectorStoreConfig())
        index = await IndexedContent.build(CHUNKS, True, factory, namespace="doc-1")

        with pytest.raises(ProviderFailure):
            await index.retrieve("termination", 2)

    async def test_release_resets_engine(self, engine_factory):
        index = await IndexedContent.build(CHUNKS, True, engine_factory, namespace="doc-1")

        await index.release()

        assert not index.engine.is_ready

    async def test_release_without_engine(self, engine_factory):
        index = await IndexedContent.build(CHUNKS, False, engine_factory, namespace="doc-1")
        await index.release()

    async def test_failed_engine_is_reset(self):
        engine = Mock()
        engine.initialize_from_chunks = AsyncMock(side_effect=ProviderFailure("boom"))
        engine.reset = AsyncMock()

        index = await IndexedContent.build(CHUNKS, True, lambda namespace: engine, namespace="d")

        engine.reset.assert_awaited_once()
        assert index.engine is None
