"""
Category Store - Category-aware document registry and chat sessions

Admins register documents under a category; users open a session on a
category and ask questions that are answered from every document in it.

License: MIT
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence
import asyncio
import logging

from ..exceptions import NotFound
from ..infrastructure.monitoring import record_document_search_failure, set_document_count
from ..utils.helpers import generate_id, truncate_text
from .engine import IndexedContent, RAGEngineFactory
from .policy import DEFAULT_RAG_THRESHOLD, RetrievalMode, should_use_rag

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CategoryDocument:
    """A registered document and its retrieval state."""

    id: str
    category: str
    filename: str
    content: str
    chunks: List[str]
    index: IndexedContent
    uploaded_at: datetime = field(default_factory=_utcnow)

    @property
    def use_rag(self) -> bool:
        return self.index.use_rag

    @property
    def mode(self) -> RetrievalMode:
        return self.index.mode

    @property
    def content_size(self) -> int:
        return len(self.content)

    def to_summary(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "filename": self.filename,
            "uploadedAt": self.uploaded_at.isoformat(),
            "contentSize": self.content_size,
            "chunksCount": len(self.chunks),
            "ragMode": self.use_rag,
        }


@dataclass
class CategorySession:
    """
    A user's chat session on a category.

    ``documents`` is a snapshot taken at creation; later uploads or deletions
    in the category do not change it.
    """

    session_id: str
    user_id: str
    category: str
    documents: List[CategoryDocument]
    created_at: datetime = field(default_factory=_utcnow)


class CategoryStore:
    """
    Registry of documents, categories and category sessions.

    Each document exclusively owns its retrieval engine. Registry mutations
    are serialized by an asyncio lock; embedding work for a new document runs
    outside the lock.
    """

    def __init__(
        self,
        engine_factory: RAGEngineFactory,
        rag_threshold: int = DEFAULT_RAG_THRESHOLD,
        per_document_k: int = 2,
    ):
        """
        Initialize the store.

        Args:
            engine_factory: Builds one engine (with its own vector store) per document
            rag_threshold: Content length above which documents get semantic retrieval
            per_document_k: Chunks contributed by each document to a category search
        """
        self.engine_factory = engine_factory
        self.rag_threshold = rag_threshold
        self.per_document_k = per_document_k

        self._documents: Dict[str, CategoryDocument] = {}
        self._categories: set = set()
        self._sessions: Dict[str, CategorySession] = {}
        self._lock = asyncio.Lock()

    @property
    def document_count(self) -> int:
        return len(self._documents)

    async def add_document(
        self,
        doc_id: str,
        category: str,
        filename: str,
        content: str,
        chunks: Sequence[str],
    ) -> CategoryDocument:
        """
        Register a document under a category.

        Semantic indexing is attempted when the content exceeds the size
        threshold; if it fails the document is still registered, permanently
        in fallback mode.

        Args:
            doc_id: Unique document id
            category: Category name
            filename: Original filename, used to label retrieved chunks
            content: Cleaned document text
            chunks: Chunks of ``content``

        Returns:
            The registered document
        """
        use_rag = should_use_rag(len(content), self.rag_threshold)
        index = await IndexedContent.build(chunks, use_rag, self.engine_factory, namespace=doc_id)

        if index.use_rag:
            logger.info(f"RAG initialized for {category}/{filename}")
        elif use_rag:
            logger.warning(
                f"RAG init failed for {category}/{filename}; using simple context",
                extra={"doc_id": doc_id, "error": index.error},
            )

        document = CategoryDocument(
            id=doc_id,
            category=category,
            filename=filename,
            content=content,
            chunks=list(chunks),
            index=index,
        )

        async with self._lock:
            previous = self._documents.get(doc_id)
            self._documents[doc_id] = document
            self._categories.add(category)
            set_document_count(len(self._documents))

        if previous is not None:
            await previous.index.release()

        return document

    def get_categories(self) -> List[str]:
        """All known categories, sorted."""
        return sorted(self._categories)

    def get_documents_by_category(self, category: str) -> List[CategoryDocument]:
        """Documents in a category, in registration order."""
        return [doc for doc in self._documents.values() if doc.category == category]

    def get_document(self, doc_id: str) -> CategoryDocument:
        """
        Look up a document.

        Raises:
            NotFound: If no document has this id
        """
        document = self._documents.get(doc_id)
        if document is None:
            raise NotFound(f"Document not found: {doc_id}")
        return document

    async def search_category(self, category: str, query: str, top_k: int = 3) -> List[str]:
        """
        Search every document in a category and merge the results.

        Each document contributes up to ``per_document_k`` chunks (semantic when
        the document is in semantic mode, otherwise its first chunks). The
        contributions are concatenated in document order and truncated to
        ``top_k``; there is no ranking across documents. A failing document
        contributes nothing.

        Returns:
            Chunks labelled as ``"[filename]\\ntext"``
        """
        documents = self.get_documents_by_category(category)
        if not documents or top_k <= 0:
            return []

        outcomes = await asyncio.gather(
            *(doc.index.retrieve(query, self.per_document_k) for doc in documents),
            return_exceptions=True,
        )

        results: List[str] = []
        for document, outcome in zip(documents, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    f"Search failed for {document.filename}: {str(outcome)}",
                    extra={"doc_id": document.id, "error_type": type(outcome).__name__},
                )
                record_document_search_failure()
                continue

            results.extend(f"[{document.filename}]\n{chunk}" for chunk in outcome)

        logger.debug(
            f"Category search in {category} for '{truncate_text(query, 50)}' "
            f"found {len(results)} chunks across {len(documents)} documents"
        )
        return results[:top_k]

    def create_session(self, user_id: str, category: str) -> CategorySession:
        """
        Open a session on a category, snapshotting its current documents.

        The session is created even when the category is empty; callers decide
        whether that is acceptable.
        """
        session = CategorySession(
            session_id=generate_id(),
            user_id=user_id,
            category=category,
            documents=self.get_documents_by_category(category),
        )
        self._sessions[session.session_id] = session
        logger.info(
            f"Session created for category {category}",
            extra={"session_id": session.session_id, "user_id": user_id},
        )
        return session

    def find_session(self, session_id: str) -> Optional[CategorySession]:
        return self._sessions.get(session_id)

    def get_session(self, session_id: str) -> CategorySession:
        """
        Look up a session.

        Raises:
            NotFound: If the session id is unknown
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFound(f"Session not found: {session_id}")
        return session

    def list_sessions(self) -> List[CategorySession]:
        return list(self._sessions.values())

    async def delete_document(self, doc_id: str) -> bool:
        """
        Remove a document and release its vector store.

        Existing sessions keep their snapshot, including this document.

        Returns:
            Whether a document with this id existed
        """
        async with self._lock:
            document = self._documents.pop(doc_id, None)
            set_document_count(len(self._documents))

        if document is None:
            return False

        await document.index.release()
        logger.info(f"Document deleted: {document.category}/{document.filename}")
        return True

    async def clear(self) -> None:
        """Release every document's engine and forget all documents, categories and sessions."""
        async with self._lock:
            documents = list(self._documents.values())
            self._documents.clear()
            self._categories.clear()
            self._sessions.clear()
            set_document_count(0)

        for document in documents:
            await document.index.release()
