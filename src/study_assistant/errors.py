"""
Exception hierarchy for the study assistant pipeline.

Every error carries a ``status_code`` so a boundary (CLI, HTTP adapter) can
map it to a 4xx-style response without inspecting message text.
"""
from typing import Any, Dict, Optional


class StudyAssistantError(Exception):
    """Base class for all pipeline errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> Dict[str, Any]:
        """Convert to the error shape returned at the boundary."""
        return {"error": self.message, "status": self.status_code}


class InvalidRequest(StudyAssistantError):
    """Request is missing required fields."""


class InvalidSource(StudyAssistantError):
    """Source descriptor is malformed (e.g. no video id in the URL)."""


class ExtractionFailed(StudyAssistantError):
    """Source exists but its content could not be read."""


class EmptySource(StudyAssistantError):
    """Source resolved to nothing to ingest (e.g. a playlist with no videos)."""


class EmbeddingServiceError(StudyAssistantError):
    """Embedding provider failed.

    When raised during ingestion, ``resource_id`` names the resource that was
    already created before embedding aborted.
    """

    def __init__(self, message: str, resource_id: Optional[str] = None):
        super().__init__(message)
        self.resource_id = resource_id

    def to_response(self) -> Dict[str, Any]:
        response = super().to_response()
        if self.resource_id:
            response["resource_id"] = self.resource_id
        return response


class RetrievalError(StudyAssistantError):
    """Vector store search failed."""


class GenerationError(StudyAssistantError):
    """Generative model call failed with a non-retryable error."""


class GenerationRetriesExhausted(GenerationError):
    """Every attempt was rate limited."""

    status_code = 429

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class OperationCancelled(StudyAssistantError):
    """Caller cancelled the operation between external calls."""

    status_code = 499
