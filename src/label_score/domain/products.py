"""Product catalog domain models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from label_score.domain.scoring import Product

LookupSource = Literal["cache", "off", "not_found"]


@dataclass(frozen=True)
class CachedProduct:
    """A normalized product row stored in the catalog cache."""

    product: Product
    image_url: str | None
    fetched_at: datetime


@dataclass(frozen=True)
class ProductLookup:
    """Result of a barcode lookup."""

    product: Product | None
    source: LookupSource
    image_url: str | None = None
