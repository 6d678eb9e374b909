import time
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

AI_PRODUCT_PREFIX = "ai-pdf-"
DEFAULT_DOCUMENT_TITLE = "AI-Generated Document"


# --- Catalog ---
class ProductCategory(str, Enum):
    """Fixed marketplace categories."""

    ACADEMIC_NOTES = "Academic Notes"
    EXAM_PREP = "Exam Prep"
    CODING_TECH = "Coding & Tech"
    SKILL_DEVELOPMENT = "Skill Development"
    PERSONAL_GROWTH = "Personal Growth"
    PLANNERS_ORGANIZERS = "Planners & Organizers"
    BUNDLES = "Bundles"
    DIGITAL_NOTEBOOKS = "Digital Notebooks"
    CODE_LIBRARIES = "Code Libraries"
    DIGITAL_JOURNALS = "Digital Journals"
    AI_SERVICES = "AI Services"
    PSYCHOLOGY = "Psychology"
    ECONOMICS = "Economics"


class ProductDescriptor(BaseModel):
    """Immutable reference data for a purchasable document."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Also the content cache key")
    name: str = Field(..., min_length=1)
    description: str = ""
    category: ProductCategory
    price: float = Field(..., ge=0, description="Price must be non-negative")
    tags: List[str] = Field(default_factory=list)
    has_static_content: bool = False

    @property
    def is_ai_generated(self) -> bool:
        return self.category == ProductCategory.AI_SERVICES or self.id.startswith(
            AI_PRODUCT_PREFIX
        )

    @classmethod
    def ai_product_id(cls, now_ms: Optional[int] = None) -> str:
        """Timestamp-derived id for a user-generated document."""
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        return f"{AI_PRODUCT_PREFIX}{now_ms}"


# --- Generated content ---
class GeneratedDocument(BaseModel):
    """Stored artifact. Once created for an id it is never overwritten."""

    title: str
    content: str
    created_at: Optional[datetime] = None

    def to_cache_payload(self) -> dict:
        """Local cache projection (no timestamp)."""
        return {"title": self.title, "content": self.content}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GenerationRequest(BaseModel):
    prompt: str


class GenerationResponse(BaseModel):
    """Remote generator result. A non-empty error is authoritative."""

    title: str = ""
    content: str = ""
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return bool(self.error)


# --- Per-device bookkeeping ---
class GenerationProgressRecord(BaseModel):
    """
    Advisory record of what this device believes is generated.
    May disagree with the Content Store; it only throttles the scheduler.
    """

    generated_ids: List[str] = Field(default_factory=list)
    last_attempt_at: int = 0  # epoch millis

    @field_validator("generated_ids")
    @classmethod
    def dedupe_ids(cls, v):
        seen = []
        for product_id in v:
            if product_id not in seen:
                seen.append(product_id)
        return seen

    def mark_generated(self, product_id: str):
        if product_id not in self.generated_ids:
            self.generated_ids.append(product_id)

    def is_generated(self, product_id: str) -> bool:
        return product_id in self.generated_ids


# --- Poller / scheduler outcomes ---
class PollStatus(str, Enum):
    FOUND = "found"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


class PollResult(BaseModel):
    status: PollStatus
    document: Optional[GeneratedDocument] = None
    attempts: int = 0

    @property
    def found(self) -> bool:
        return self.status == PollStatus.FOUND


class SchedulerState(Enum):
    IDLE = "IDLE"
    DUE_CHECK = "DUE_CHECK"
    GENERATING = "GENERATING"


class TickOutcome(str, Enum):
    """Result of a single due-check."""

    NOT_DUE = "NOT_DUE"
    GENERATED = "GENERATED"
    FAILED = "FAILED"
    NOTHING_LEFT = "NOTHING_LEFT"


class ManualGenerationResult(BaseModel):
    product_id: Optional[str] = None
    success: bool = False
    message: str = ""


class GenerationStats(BaseModel):
    generated_count: int
    total_catalog_items: int

    @property
    def remaining(self) -> int:
        return max(0, self.total_catalog_items - self.generated_count)


class AdHocResult(BaseModel):
    """Outcome of a user-prompted document generation."""

    success: bool
    product: Optional[ProductDescriptor] = None
    document: Optional[GeneratedDocument] = None
    error: Optional[str] = None
