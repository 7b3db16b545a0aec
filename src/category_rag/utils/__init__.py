"""
Utility Functions - Common helper functions and utilities

License: MIT
"""

from .helpers import (
    generate_id,
    clean_text,
    calculate_cosine_similarity,
    truncate_text,
    format_duration,
    Timer,
)

__all__ = [
    "generate_id",
    "clean_text",
    "calculate_cosine_similarity",
    "truncate_text",
    "format_duration",
    "Timer",
]
