"""
Content Sessions - Question answering over a single website or document

Each loaded resource gets its own session id, chunks and retrieval state.

License: MIT
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
import logging

from ..core.chunker import TextChunker
from ..exceptions import NotFound
from ..infrastructure.monitoring import record_fallback
from ..utils.helpers import generate_id
from .engine import IndexedContent, RAGEngineFactory
from .policy import DEFAULT_RAG_THRESHOLD, fallback_chunks, should_use_rag

logger = logging.getLogger(__name__)


@dataclass
class ContentSession:
    """A loaded website or uploaded document."""

    session_id: str
    source: str
    kind: str  # "website" or "document"
    content: str
    index: IndexedContent
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def chunks(self) -> List[str]:
        return self.index.chunks

    @property
    def use_rag(self) -> bool:
        return self.index.use_rag


class ContentSessionStore:
    """Holds single-content sessions keyed by session id."""

    def __init__(
        self,
        engine_factory: RAGEngineFactory,
        chunker: Optional[TextChunker] = None,
        rag_threshold: int = DEFAULT_RAG_THRESHOLD,
    ):
        self.engine_factory = engine_factory
        self.chunker = chunker or TextChunker()
        self.rag_threshold = rag_threshold
        self._sessions: Dict[str, ContentSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def load(self, source: str, content: str, kind: str = "website") -> ContentSession:
        """
        Chunk and index content under a new session.

        Args:
            source: URL or filename the content came from
            content: Cleaned text
            kind: "website" or "document"

        Returns:
            The new session
        """
        session_id = generate_id()
        chunks = self.chunker.split(content)
        use_rag = should_use_rag(len(content), self.rag_threshold)

        index = await IndexedContent.build(chunks, use_rag, self.engine_factory, namespace=session_id)
        session = ContentSession(
            session_id=session_id, source=source, kind=kind, content=content, index=index
        )
        self._sessions[session_id] = session

        if index.use_rag:
            logger.info(f"RAG enabled for {kind} {source} (content size: {len(content)})")
        else:
            logger.info(
                f"Using simple context mode for {kind} {source} (content size: {len(content)})",
                extra={"reason": index.downgrade_reason},
            )
        return session

    def get(self, session_id: str) -> ContentSession:
        """
        Look up a session.

        Raises:
            NotFound: If the session id is unknown
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFound(f"Session not found: {session_id}")
        return session

    async def retrieve(self, session_id: str, question: str, top_k: int = 3) -> Tuple[List[str], bool]:
        """
        Pick context chunks for a question.

        A semantic search failure at question time falls back to the first
        ``top_k`` chunks for this question only.

        Returns:
            (chunks, whether semantic retrieval was used)
        """
        session = self.get(session_id)

        if not session.use_rag:
            return fallback_chunks(session.chunks, top_k), False

        try:
            return await session.index.retrieve(question, top_k), True
        except Exception as e:
            logger.warning(
                f"RAG search failed, falling back to simple context: {str(e)}",
                extra={"session_id": session_id, "error_type": type(e).__name__},
            )
            record_fallback("search_failed")
            return fallback_chunks(session.chunks, top_k), False

    def summary_context(self, session_id: str, n: int = 5) -> List[str]:
        """First ``n`` chunks of the session's content."""
        return fallback_chunks(self.get(session_id).chunks, n)

    async def remove(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        await session.index.release()
        return True

    async def clear(self) -> None:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            await session.index.release()
