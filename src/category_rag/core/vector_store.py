"""
Vector Store - Storage and nearest-neighbour search for chunk embeddings

Two backends share one contract: an exact in-memory cosine search, and a
remote Pinecone index addressed by namespace. create_vector_store() is the
only place that chooses between them.

License: MIT
"""

from typing import List, Optional, Sequence
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..config import VectorStoreConfig
from ..exceptions import DimensionMismatch
from ..infrastructure.monitoring import vector_search_duration_tracker
from ..utils.helpers import calculate_cosine_similarity, generate_id

logger = logging.getLogger(__name__)


@dataclass
class StoredVector:
    """A chunk text paired with its embedding."""

    text: str
    embedding: List[float]


class VectorStoreBase(ABC):
    """Abstract base class for vector stores."""

    backend: str = "base"

    #: Whether clear() actually removes stored vectors
    supports_clear: bool = True

    @abstractmethod
    async def add(self, texts: Sequence[str], vectors: Sequence[Sequence[float]]) -> None:
        """Store texts paired index-for-index with their vectors."""

    @abstractmethod
    async def search(self, query_vector: Sequence[float], k: int = 3) -> List[str]:
        """Return up to k stored texts, most similar first."""

    @abstractmethod
    async def clear(self) -> None:
        """Release stored vectors."""

    @abstractmethod
    def __len__(self) -> int:
        pass

    @staticmethod
    def _check_pairing(texts: Sequence[str], vectors: Sequence[Sequence[float]]) -> None:
        if len(texts) != len(vectors):
            raise DimensionMismatch(
                f"Got {len(texts)} texts but {len(vectors)} vectors; they must pair one-to-one"
            )


class InMemoryVectorStore(VectorStoreBase):
    """
    Exact cosine-similarity search over vectors held in process memory.

    Every query scores all stored vectors, which is O(n·d). n is bounded by the
    chunk count of a single document, never a global corpus.
    """

    backend = "memory"
    supports_clear = True

    def __init__(self):
        self._entries: List[StoredVector] = []
        self._dimension: Optional[int] = None

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    def __len__(self) -> int:
        return len(self._entries)

    async def add(self, texts: Sequence[str], vectors: Sequence[Sequence[float]]) -> None:
        """
        Append (text, vector) pairs.

        Raises:
            DimensionMismatch: If counts differ or a vector's length differs from the store's
        """
        self._check_pairing(texts, vectors)

        dimension = self._dimension
        for vector in vectors:
            if dimension is None:
                dimension = len(vector)
            elif len(vector) != dimension:
                raise DimensionMismatch(
                    f"Vector of length {len(vector)} does not match store dimension {dimension}"
                )

        self._dimension = dimension
        self._entries.extend(
            StoredVector(text=text, embedding=list(vector)) for text, vector in zip(texts, vectors)
        )

    async def search(self, query_vector: Sequence[float], k: int = 3) -> List[str]:
        """
        Rank stored texts by cosine similarity to the query.

        Ties keep insertion order.
        """
        if not self._entries or k <= 0:
            return []

        if len(query_vector) != self._dimension:
            raise DimensionMismatch(
                f"Query vector of length {len(query_vector)} does not match "
                f"store dimension {self._dimension}"
            )

        with vector_search_duration_tracker(self.backend):
            scores = [
                calculate_cosine_similarity(query_vector, entry.embedding)
                for entry in self._entries
            ]
            ranked = sorted(range(len(scores)), key=lambda i: scores[i], reverse=True)

        return [self._entries[i].text for i in ranked[:k]]

    async def clear(self) -> None:
        self._entries = []
        self._dimension = None


class PineconeVectorStore(VectorStoreBase):
    """
    Remote vector store backed by a Pinecone index.

    Each store instance owns one namespace of a shared index. The client is
    synchronous, so calls run in a worker thread.
    """

    backend = "pinecone"
    # Deleting remote vectors is not performed; clear() only forgets local bookkeeping
    supports_clear = False

    def __init__(
        self,
        index_name: str,
        namespace: str,
        api_key: Optional[str] = None,
        batch_size: int = 100,
        index=None,
    ):
        """
        Initialize the Pinecone store.

        Args:
            index_name: Name of an existing Pinecone index
            namespace: Namespace owned by this store
            api_key: Pinecone API key
            batch_size: Vectors per upsert request
            index: Optional pre-built index handle
        """
        self.index_name = index_name
        self.namespace = namespace
        self.api_key = api_key
        self.batch_size = batch_size
        self._index = index
        self._count = 0

    @property
    def index(self):
        """Lazy initialization of the Pinecone index handle."""
        if self._index is None:
            from pinecone import Pinecone

            pc = Pinecone(api_key=self.api_key)
            self._index = pc.Index(self.index_name)
        return self._index

    def __len__(self) -> int:
        return self._count

    async def add(self, texts: Sequence[str], vectors: Sequence[Sequence[float]]) -> None:
        self._check_pairing(texts, vectors)
        if not texts:
            return

        records = [
            {
                "id": f"{self.namespace}#{self._count + offset}",
                "values": list(vector),
                "metadata": {"text": text, "position": self._count + offset},
            }
            for offset, (text, vector) in enumerate(zip(texts, vectors))
        ]

        for i in range(0, len(records), self.batch_size):
            batch = records[i : i + self.batch_size]
            await asyncio.to_thread(self.index.upsert, vectors=batch, namespace=self.namespace)

        self._count += len(records)
        logger.info(
            f"Upserted {len(records)} vectors",
            extra={"index": self.index_name, "namespace": self.namespace},
        )

    async def search(self, query_vector: Sequence[float], k: int = 3) -> List[str]:
        if k <= 0 or not query_vector:
            return []

        with vector_search_duration_tracker(self.backend):
            response = await asyncio.to_thread(
                self.index.query,
                vector=list(query_vector),
                top_k=k,
                include_metadata=True,
                namespace=self.namespace,
            )

        return [(match.metadata or {}).get("text", "") for match in response.matches][:k]

    async def clear(self) -> None:
        logger.debug(
            "Pinecone clear is a no-op; remote vectors remain",
            extra={"index": self.index_name, "namespace": self.namespace},
        )


def create_vector_store(config: VectorStoreConfig, namespace: str) -> VectorStoreBase:
    """
    Build the vector store selected by configuration.

    Args:
        config: Vector store configuration
        namespace: Namespace for remote backends (one per indexed unit)

    Returns:
        A fresh, empty vector store. Remote stores get a namespace of their
        own, so a unit indexed twice never shares vectors with its earlier index.
    """
    if config.resolved_backend() == "pinecone":
        return PineconeVectorStore(
            index_name=config.index_name,
            namespace=f"{config.namespace_prefix}-{namespace}-{generate_id()[:8]}",
            api_key=config.api_key,
            batch_size=config.upsert_batch_size,
        )
    return InMemoryVectorStore()
