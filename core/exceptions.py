"""
Service exceptions shared by the pipeline and the web layer.

Every error carries an HTTP status so the web layer can translate it without
knowing which component raised it.
"""
from typing import Any, Dict, Iterable, Optional


class ServiceException(Exception):
    """Base exception for service layer errors."""
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(ServiceException):
    """Bad input shape, size or type."""
    status_code = 400


class AuthError(ServiceException):
    """Missing or invalid credential."""
    status_code = 401


class NotFoundError(ServiceException):
    """Referenced entity does not exist."""
    status_code = 404


class ConflictError(ServiceException):
    """Duplicate submission."""
    status_code = 409


class UpstreamError(ServiceException):
    """Extraction, storage or index service failure."""
    status_code = 500

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.cause = cause


class InternalError(ServiceException):
    """Unexpected failure."""
    status_code = 500


# Extraction

class UnsupportedFormat(ValidationError):
    """Declared document type is not accepted."""

    def __init__(self, declared: str, supported: Iterable[str]):
        supported = sorted(supported)
        super().__init__(
            f"Unsupported file type: {declared or 'unknown'}. "
            f"Supported types: {', '.join(supported)}",
            details={"declared": declared, "supported": supported}
        )


class SizeExceeded(ValidationError):
    """Document is larger than the configured ceiling."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            f"File size {size} bytes exceeds the {limit} byte limit",
            details={"size": size, "max_bytes": limit}
        )


class ExtractionFailed(UpstreamError):
    """Upstream completion failed or returned an unparseable profile."""


class IncompleteProfile(ExtractionFailed):
    """Extraction succeeded but a mandatory field is missing."""
    status_code = 422


# Generation / publishing / sync

class GenerationFailed(UpstreamError):
    """Section text could not be produced."""


class PublishFailed(UpstreamError):
    """Artifact upload to object storage failed."""


class SyncFailed(UpstreamError):
    """Search index operation failed."""
