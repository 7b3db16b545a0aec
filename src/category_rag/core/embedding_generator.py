"""
Embedding Generator - Text-to-vector providers for semantic retrieval

The retrieval engine only depends on the EmbeddingProvider contract:
order-preserving batch embedding and single-text embedding.

License: MIT
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
import logging
import time

from ..exceptions import ProviderFailure
from ..infrastructure.monitoring import embedding_duration_tracker

logger = logging.getLogger(__name__)


class EmbeddingProvider(ABC):
    """Abstract embedding provider."""

    #: Vector length when known up front; None means provider-defined
    dimension: Optional[int] = None

    @abstractmethod
    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Embed many texts.

        Returns one vector per input text, in input order.
        """

    @abstractmethod
    async def embed_one(self, text: str) -> List[float]:
        """Embed a single text."""


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """
    Embedding provider backed by OpenAI's embeddings endpoint.

    Large inputs are sent in ``batch_size`` slices; vectors are reassembled in
    input order.
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        batch_size: int = 2048,
        dimension: Optional[int] = None,
        client=None,
        timeout: float = 30.0,
        max_retries: int = 3,
    ):
        """
        Initialize the embedding provider.

        Args:
            model: OpenAI embedding model to use
            batch_size: Number of texts sent in each request. Inputs up to this
                size are embedded in a single round trip; 2048 is the
                endpoint's per-request input limit
            dimension: Optional requested vector length (text-embedding-3 models only)
            client: Optional pre-built AsyncOpenAI client
            timeout: Request timeout in seconds
            max_retries: Client-level retry count
        """
        self.model = model
        self.batch_size = batch_size
        self.dimension = dimension
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = client

    @property
    def client(self):
        """Lazy initialization of the async OpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(timeout=self.timeout, max_retries=self.max_retries)
        return self._client

    async def _create(self, inputs: List[str]) -> List[List[float]]:
        kwargs = {"model": self.model, "input": inputs}
        if self.dimension:
            kwargs["dimensions"] = self.dimension

        try:
            response = await self.client.embeddings.create(**kwargs)
        except Exception as e:
            logger.error(f"Embedding request failed: {str(e)}", extra={"model": self.model})
            raise ProviderFailure(f"Embedding provider call failed: {str(e)}") from e

        data = sorted(response.data, key=lambda item: item.index)
        if len(data) != len(inputs):
            raise ProviderFailure(
                f"Embedding provider returned {len(data)} vectors for {len(inputs)} inputs"
            )
        return [item.embedding for item in data]

    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: Texts to embed

        Returns:
            One embedding per text, in input order

        Raises:
            ProviderFailure: If any request fails
        """
        texts = list(texts)
        if not texts:
            return []

        logger.info(f"Generating embeddings for {len(texts)} texts")
        start_time = time.time()

        embeddings: List[List[float]] = []
        with embedding_duration_tracker("batch"):
            for i in range(0, len(texts), self.batch_size):
                batch = texts[i : i + self.batch_size]
                embeddings.extend(await self._create(batch))

                if len(texts) > self.batch_size:
                    progress = min(i + self.batch_size, len(texts))
                    logger.info(f"Embedded {progress}/{len(texts)} texts")

        total_time = time.time() - start_time
        logger.info(f"Embedding generation completed in {total_time:.2f} seconds")

        return embeddings

    async def embed_one(self, text: str) -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: Text to embed

        Returns:
            Embedding vector

        Raises:
            ProviderFailure: If the request fails
        """
        with embedding_duration_tracker("query"):
            vectors = await self._create([text])
        return vectors[0]
