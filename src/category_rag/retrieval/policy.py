"""
Retrieval Policy - When content earns semantic retrieval

Shared by the category flow and the single-content flow.

License: MIT
"""

from enum import Enum
from typing import List, Sequence

DEFAULT_RAG_THRESHOLD = 50000


class RetrievalMode(str, Enum):
    """How an indexed unit answers queries."""

    SEMANTIC = "semantic"
    FALLBACK = "fallback"


def should_use_rag(content_length: int, threshold: int = DEFAULT_RAG_THRESHOLD) -> bool:
    """
    Decide whether content is large enough to justify embeddings.

    The boundary is exclusive: exactly ``threshold`` characters stays in
    simple mode.
    """
    return content_length > threshold


def fallback_chunks(chunks: Sequence[str], k: int) -> List[str]:
    """First ``k`` chunks in original order."""
    if k <= 0:
        return []
    return list(chunks[:k])
