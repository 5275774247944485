"""Models for receipt extraction and bill scoring."""

from dataclasses import dataclass
from uuid import UUID

from pydantic import BaseModel, Field

from label_score.domain.scoring import Grade, HealthScore


class ReceiptLine(BaseModel):
    """Single purchased line item read from a receipt."""

    name: str = Field(min_length=1)
    spec: str | None = None
    qty: float = Field(default=1, ge=0)
    unit_price: float | None = Field(default=None, ge=0)
    total_price: float | None = Field(default=None, ge=0)
    barcode: str | None = None


class ReceiptExtract(BaseModel):
    """Structured output for receipt extraction."""

    merchant: str | None = None
    date: str | None = None
    currency: str | None = None
    line_items: list[ReceiptLine]
    subtotal: float | None = None
    tax: float | None = None
    total: float | None = None


@dataclass(frozen=True)
class StoredReceipt:
    """A receipt extract persisted for a user."""

    id: UUID
    user_id: UUID | None
    extract: ReceiptExtract


@dataclass(frozen=True)
class BillItem:
    """A receipt line with its health score when it matched a catalog product."""

    name: str
    qty: float
    barcode: str | None
    health_score: HealthScore | None

    @property
    def grade(self) -> Grade | None:
        """Return the item grade, if scored."""
        if self.health_score is None:
            return None
        return self.health_score.grade


@dataclass(frozen=True)
class BillSummary:
    """Aggregate health result for a whole bill."""

    items: tuple[BillItem, ...]
    score: int | None
    grade: Grade | None
    healthy_count: int
    concern_count: int
