"""Custom exception hierarchy for SceneWeaver.

This module defines the fatal error taxonomy of the scene pipeline. Non-fatal
structural problems are not exceptions; they are reported as warnings by
``sceneweaver_lib.analysis.validation``.
"""

# Standard library imports
import asyncio
from typing import Any, Dict, Optional


class SceneWeaverException(Exception):
    """Base exception for all SceneWeaver errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(SceneWeaverException):
    """Raised when configuration values are invalid or missing.

    This covers unknown model providers, missing API keys and environment
    values that cannot be parsed.
    """

    pass


class NotFoundError(SceneWeaverException):
    """Base class for hierarchy lookup misses.

    Attributes:
        entity: The kind of entity that was requested (story, chapter, ...).
        entity_id: The id (or composite path) that did not resolve.
    """

    entity = "entity"

    def __init__(
        self,
        entity_id: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message or f"{self.entity.capitalize()} not found: {entity_id}", details)
        self.entity_id = entity_id


class StoryNotFound(NotFoundError):
    """Raised when a story id does not resolve in the catalog."""

    entity = "story"


class ChapterNotFound(NotFoundError):
    """Raised when a chapter does not resolve under its story."""

    entity = "chapter"


class ArcNotFound(NotFoundError):
    """Raised when an arc does not resolve under its chapter."""

    entity = "arc"


class MomentNotFound(NotFoundError):
    """Raised when a moment does not resolve under its arc.

    The full composite path is kept in ``details`` so callers can report
    exactly which lookup missed.
    """

    entity = "moment"


class BackendFailure(SceneWeaverException):
    """Base class for failures of the external generation/filter backends.

    Attributes:
        backend: Name of the backend that failed ("generation" or "content_filter").
    """

    def __init__(
        self,
        message: str,
        backend: str = "unknown",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.backend = backend


class GenerationBackendError(BackendFailure):
    """Raised when the scene generation backend fails or returns a malformed scene."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, backend="generation", details=details)


class ContentFilterBackendError(BackendFailure):
    """Raised when the content-filter backend fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, backend="content_filter", details=details)


class BackendTimeoutError(BackendFailure):
    """Raised when a backend call exceeds its deadline."""

    pass


class OperationCancelled(SceneWeaverException):
    """Raised when a scene generation is cancelled through its token."""

    pass


class NarrativeSourceError(SceneWeaverException):
    """Raised when a narrative source cannot be read or does not support saving."""

    pass


class CatalogIntegrityError(SceneWeaverException):
    """Raised when loaded narrative data has fatal validation issues.

    Attributes:
        report: The validation report containing the fatal issues.
    """

    def __init__(self, message: str, report: Any = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.report = report


# Utility functions for consistent error handling


def handle_backend_error(error: Exception, backend: str, context: str = "") -> BackendFailure:
    """Convert provider exceptions to the backend failure taxonomy.

    Args:
        error: The original exception
        backend: Which backend raised it ("generation" or "content_filter")
        context: Additional context about where the error occurred

    Returns:
        Appropriate BackendFailure subclass
    """
    if isinstance(error, BackendFailure):
        return error

    error_msg = str(error)
    details = {"original_error": type(error).__name__, "context": context}

    if isinstance(error, (asyncio.TimeoutError, TimeoutError)) or "timeout" in error_msg.lower():
        return BackendTimeoutError(f"{backend} backend timed out: {error_msg}", backend=backend, details=details)
    if backend == "content_filter":
        return ContentFilterBackendError(f"Content filter failed: {error_msg}", details)
    return GenerationBackendError(f"Scene generation failed: {error_msg}", details)
