"""
API Dependencies - Service wiring and dependency injection for FastAPI

All mutable state lives on one ServiceContainer attached to ``app.state``;
route handlers receive it through FastAPI dependencies.

License: MIT
"""

from dataclasses import dataclass
from typing import Optional
import logging

from fastapi import Request

from ..config import AppConfig
from ..core.chunker import TextChunker
from ..core.document_processor import DocumentProcessor
from ..core.embedding_generator import EmbeddingProvider, OpenAIEmbeddingProvider
from ..core.query import AnswerGenerator
from ..retrieval.category_store import CategoryStore
from ..retrieval.content_session import ContentSessionStore
from ..retrieval.engine import RAGEngineFactory

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Everything a request handler needs."""

    config: AppConfig
    chunker: TextChunker
    document_processor: DocumentProcessor
    embedding_provider: EmbeddingProvider
    answer_generator: AnswerGenerator
    category_store: CategoryStore
    content_sessions: ContentSessionStore

    async def cleanup(self) -> None:
        """Release every engine held by the registries."""
        logger.info("Releasing category store and content sessions")
        await self.category_store.clear()
        await self.content_sessions.clear()


def build_services(
    config: AppConfig,
    embedding_provider: Optional[EmbeddingProvider] = None,
    answer_generator: Optional[AnswerGenerator] = None,
) -> ServiceContainer:
    """
    Build the service container from configuration.

    Args:
        config: Loaded application configuration
        embedding_provider: Override for the OpenAI embedding provider
        answer_generator: Override for the OpenAI answer generator

    Returns:
        A ready ServiceContainer
    """
    retrieval = config.retrieval

    if embedding_provider is None:
        embedding_provider = OpenAIEmbeddingProvider(
            model=config.embedding.model,
            batch_size=config.embedding.batch_size,
            dimension=config.embedding.dimension,
            timeout=config.embedding.timeout,
            max_retries=config.embedding.max_retries,
        )

    if answer_generator is None:
        answer_generator = AnswerGenerator(
            model=config.llm.model,
            temperature=config.llm.temperature,
            max_tokens=config.llm.max_tokens,
            timeout=config.llm.timeout,
            max_retries=config.llm.max_retries,
        )

    chunker = TextChunker(chunk_size=retrieval.chunk_size, overlap=retrieval.chunk_overlap)
    engine_factory = RAGEngineFactory(embedding_provider, config.vector_store)

    logger.info(
        "Services built",
        extra={
            "vector_store_backend": config.vector_store.resolved_backend(),
            "rag_threshold": retrieval.rag_threshold,
        },
    )

    return ServiceContainer(
        config=config,
        chunker=chunker,
        document_processor=DocumentProcessor(),
        embedding_provider=embedding_provider,
        answer_generator=answer_generator,
        category_store=CategoryStore(
            engine_factory,
            rag_threshold=retrieval.rag_threshold,
            per_document_k=retrieval.per_document_k,
        ),
        content_sessions=ContentSessionStore(
            engine_factory, chunker=chunker, rag_threshold=retrieval.rag_threshold
        ),
    )


def get_services(request: Request) -> ServiceContainer:
    """Service container of the running application."""
    return request.app.state.services


def get_category_store(request: Request) -> CategoryStore:
    return get_services(request).category_store


def get_content_sessions(request: Request) -> ContentSessionStore:
    return get_services(request).content_sessions
