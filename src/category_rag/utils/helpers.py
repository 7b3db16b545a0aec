"""
Utility Helper Functions - Common utilities for the category RAG service

License: MIT
"""

import re
import time
import uuid
import math
from typing import Sequence
import logging

logger = logging.getLogger(__name__)


def generate_id(prefix: str = "") -> str:
    """
    Create a collision-resistant identifier.

    Uses 128 random bits (uuid4) rendered as 32 hex characters.

    Args:
        prefix: Optional prefix for the ID

    Returns:
        Identifier string
    """
    unique_id = uuid.uuid4().hex

    if prefix:
        return f"{prefix}_{unique_id}"

    return unique_id


def clean_text(text: str) -> str:
    """
    Collapse every whitespace run to a single space and strip the ends.

    Args:
        text: Text to clean

    Returns:
        Cleaned text
    """
    if not text:
        return ""

    return re.sub(r"\s+", " ", text).strip()


def calculate_cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """
    Calculate cosine similarity between two vectors.

    Args:
        vec1: First vector
        vec2: Second vector

    Returns:
        Cosine similarity (-1 to 1), 0.0 when either vector has zero norm

    Raises:
        ValueError: If vectors have different lengths
    """
    if len(vec1) != len(vec2):
        raise ValueError("Vectors must have the same length")

    if not vec1:
        return 0.0

    dot_product = sum(a * b for a, b in zip(vec1, vec2))

    magnitude1 = math.sqrt(sum(a * a for a in vec1))
    magnitude2 = math.sqrt(sum(b * b for b in vec2))

    # Avoid division by zero
    if magnitude1 == 0.0 or magnitude2 == 0.0:
        return 0.0

    return dot_product / (magnitude1 * magnitude2)


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add when truncating

    Returns:
        Truncated text
    """
    if not text or len(text) <= max_length:
        return text

    if max_length <= len(suffix):
        return suffix[:max_length]

    return text[: max_length - len(suffix)] + suffix


def format_duration(seconds: float) -> str:
    """
    Format duration in human-readable format.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        remaining_seconds = seconds % 60
        return f"{minutes}m {remaining_seconds:.0f}s"
    else:
        hours = int(seconds // 3600)
        remaining_minutes = int((seconds % 3600) // 60)
        return f"{hours}h {remaining_minutes}m"


class Timer:
    """Simple timer context manager for measuring execution time."""

    def __init__(self, name: str = "Timer"):
        """
        Initialize timer.

        Args:
            name: Timer name for logging
        """
        self.name = name
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        """Start the timer."""
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Stop the timer and log duration."""
        self.end_time = time.time()
        logger.debug(f"{self.name} completed in {format_duration(self.elapsed_time)}")

    @property
    def elapsed_time(self) -> float:
        """Get elapsed time in seconds."""
        if self.start_time is None:
            return 0.0

        end_time = self.end_time if self.end_time is not None else time.time()
        return end_time - self.start_time
