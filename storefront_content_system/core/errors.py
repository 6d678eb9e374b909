"""
Error taxonomy for the content pipeline.

These exceptions never cross the orchestrator, poller, scheduler or ad hoc
service boundaries; those layers convert them to booleans or result objects.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """User-facing classification of a generator failure."""

    CREDENTIAL_INVALID = "credential_invalid"
    CREDENTIAL_COMPROMISED = "credential_compromised"
    OVERLOADED = "overloaded"
    TRUNCATED = "truncated"
    EMPTY = "empty"
    GENERIC = "generic"


class ContentPipelineError(Exception):
    """Base class for all pipeline errors."""

    kind: ErrorKind = ErrorKind.GENERIC

    def __init__(self, message: str, product_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.product_id = product_id


class GenerationRejected(ContentPipelineError):
    """Remote generator returned an explicit error."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.GENERIC,
        product_id: Optional[str] = None,
    ):
        super().__init__(message, product_id)
        self.kind = kind


class TruncatedOutput(ContentPipelineError):
    """Completion marker missing when the prompt variant requires it."""

    kind = ErrorKind.TRUNCATED


class EmptyOutput(ContentPipelineError):
    """Generator returned no title or no content."""

    kind = ErrorKind.EMPTY


class StoreWriteConflict(ContentPipelineError):
    """Create-only write found an existing record. Another writer won."""


class StoreUnavailable(ContentPipelineError):
    """Transport-level failure reading or writing the Content Store."""


class CacheUnavailable(ContentPipelineError):
    """Local Device Cache could not be read or written."""
