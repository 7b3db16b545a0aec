"""
Exceptions - Error taxonomy for the category RAG service

Every error carries the HTTP status the API layer answers with.

License: MIT
"""


class CategoryRAGError(Exception):
    """Base exception for retrieval and ingestion errors."""

    http_status = 500

    def __init__(self, message: str, http_status: int = None):
        self.message = message
        if http_status is not None:
            self.http_status = http_status
        super().__init__(message)


class InvalidConfiguration(CategoryRAGError):
    """Chunking or application configuration is unusable."""

    http_status = 400


class EmptyInput(CategoryRAGError):
    """Retrieval was initialized from zero chunks."""

    http_status = 400


class DimensionMismatch(CategoryRAGError):
    """Text/vector counts or vector lengths disagree on store insert."""

    http_status = 500


class ProviderFailure(CategoryRAGError):
    """The embedding provider call failed (network, quota, malformed response)."""

    http_status = 502


class NotFound(CategoryRAGError):
    """Unknown session or document id."""

    http_status = 404


class DocumentParseError(CategoryRAGError):
    """An uploaded file could not be turned into text."""

    http_status = 422


class ContentLoadError(CategoryRAGError):
    """A website could not be fetched or read."""

    http_status = 502
