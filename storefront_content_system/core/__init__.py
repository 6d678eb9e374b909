"""
Core module: models, errors, configuration, events and the generation orchestrator.
"""

from storefront_content_system.core.errors import (
    CacheUnavailable,
    ContentPipelineError,
    EmptyOutput,
    ErrorKind,
    GenerationRejected,
    StoreUnavailable,
    StoreWriteConflict,
    TruncatedOutput,
)
from storefront_content_system.core.models import (
    GeneratedDocument,
    GenerationProgressRecord,
    GenerationRequest,
    GenerationResponse,
    PollResult,
    PollStatus,
    ProductCategory,
    ProductDescriptor,
    TickOutcome,
)

__all__ = [
    "CacheUnavailable",
    "ContentPipelineError",
    "EmptyOutput",
    "ErrorKind",
    "GenerationRejected",
    "StoreUnavailable",
    "StoreWriteConflict",
    "TruncatedOutput",
    "GeneratedDocument",
    "GenerationProgressRecord",
    "GenerationRequest",
    "GenerationResponse",
    "PollResult",
    "PollStatus",
    "ProductCategory",
    "ProductDescriptor",
    "TickOutcome",
]
