"""
Retrieval Engine - Embedding-backed semantic search over one unit of content

RAGEngine owns one vector store and answers queries for a single document or
loaded website. IndexedContent decides, once, whether a unit is served
semantically or positionally and records that decision as an explicit mode.

License: MIT
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence
import logging

from ..config import VectorStoreConfig
from ..core.embedding_generator import EmbeddingProvider
from ..core.vector_store import VectorStoreBase, create_vector_store
from ..exceptions import EmptyInput
from ..infrastructure.monitoring import record_fallback
from .policy import RetrievalMode, fallback_chunks

logger = logging.getLogger(__name__)


class RAGEngine:
    """
    Semantic search over the chunks of one indexed unit.

    Lifecycle: uninitialized -> ready (initialize_from_chunks) -> uninitialized
    (reset). Provider and store errors propagate unchanged; the caller owns
    the fallback policy.
    """

    def __init__(self, embedding_provider: EmbeddingProvider, vector_store: VectorStoreBase):
        """
        Initialize the engine.

        Args:
            embedding_provider: Provider used for chunk and query embeddings
            vector_store: Store exclusively owned by this engine
        """
        self.embedding_provider = embedding_provider
        self.vector_store = vector_store
        self._chunks: List[str] = []

    @property
    def is_ready(self) -> bool:
        return bool(self._chunks)

    @property
    def chunks(self) -> List[str]:
        """The chunks this engine was initialized from, in original order."""
        return list(self._chunks)

    async def initialize_from_chunks(self, chunks: Sequence[str]) -> None:
        """
        Embed all chunks in one batch and store the (chunk, vector) pairs.

        Args:
            chunks: Ordered chunk texts

        Raises:
            EmptyInput: If chunks is empty
            ProviderFailure: If the embedding call fails
            DimensionMismatch: If the provider's output does not pair with the chunks
        """
        if not chunks:
            raise EmptyInput("Cannot initialize retrieval from zero chunks")

        chunks = list(chunks)
        vectors = await self.embedding_provider.embed_batch(chunks)
        await self.vector_store.add(chunks, vectors)
        self._chunks = chunks

        logger.info(
            f"Retrieval initialized with {len(chunks)} chunks",
            extra={"backend": self.vector_store.backend},
        )

    async def semantic_search(self, query: str, top_k: int = 3) -> List[str]:
        """
        Find the chunks most similar to the query.

        Args:
            query: Natural-language question
            top_k: Maximum number of chunks to return

        Returns:
            Chunk texts, most relevant first
        """
        if not self.is_ready:
            logger.debug("Semantic search on an uninitialized engine returns nothing")
            return []

        query_vector = await self.embedding_provider.embed_one(query)
        return await self.vector_store.search(query_vector, top_k)

    async def reset(self) -> None:
        """Clear the vector store and forget the chunks. Safe to call repeatedly."""
        await self.vector_store.clear()
        self._chunks = []


class RAGEngineFactory:
    """Builds a RAGEngine with a fresh vector store per indexed unit."""

    def __init__(self, embedding_provider: EmbeddingProvider, store_config: VectorStoreConfig):
        self.embedding_provider = embedding_provider
        self.store_config = store_config

    def __call__(self, namespace: str) -> RAGEngine:
        store = create_vector_store(self.store_config, namespace)
        return RAGEngine(self.embedding_provider, store)


@dataclass
class IndexedContent:
    """
    The retrieval state of one document or loaded website.

    Built in two phases: the size policy proposes semantic retrieval, then an
    initialization attempt confirms it. The outcome is stored in ``mode`` and
    never re-evaluated.
    """

    chunks: List[str]
    mode: RetrievalMode
    engine: Optional[RAGEngine] = None
    downgrade_reason: Optional[str] = None
    error: Optional[str] = field(default=None, repr=False)

    @classmethod
    async def build(
        cls,
        chunks: Sequence[str],
        use_rag: bool,
        engine_factory: Callable[[str], RAGEngine],
        namespace: str,
    ) -> "IndexedContent":
        """
        Attempt semantic indexing when the policy asks for it.

        Initialization failures are logged and turn into FALLBACK mode; they
        are not re-raised.

        Args:
            chunks: Ordered chunk texts
            use_rag: Result of the size policy
            engine_factory: Builds an engine for the given namespace
            namespace: Identifier of the unit (document or session id)
        """
        chunks = list(chunks)

        if not use_rag:
            record_fallback("below_threshold")
            return cls(chunks=chunks, mode=RetrievalMode.FALLBACK, downgrade_reason="below_threshold")

        engine = engine_factory(namespace)
        try:
            await engine.initialize_from_chunks(chunks)
        except Exception as e:
            logger.warning(
                f"Semantic indexing failed, falling back to simple context: {str(e)}",
                extra={"namespace": namespace, "error_type": type(e).__name__},
            )
            await engine.reset()
            record_fallback("init_failed")
            return cls(
                chunks=chunks,
                mode=RetrievalMode.FALLBACK,
                downgrade_reason="init_failed",
                error=str(e),
            )

        return cls(chunks=chunks, mode=RetrievalMode.SEMANTIC, engine=engine)

    @property
    def use_rag(self) -> bool:
        return self.mode is RetrievalMode.SEMANTIC

    async def retrieve(self, query: str, k: int) -> List[str]:
        """
        Return up to ``k`` chunks for the query according to ``mode``.

        Semantic search errors propagate.
        """
        if self.mode is RetrievalMode.SEMANTIC:
            return await self.engine.semantic_search(query, k)
        return fallback_chunks(self.chunks, k)

    async def release(self) -> None:
        """Reset the owned engine, if any."""
        if self.engine is not None:
            await self.engine.reset()
