"""Bill level scoring built on per-item health scores."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from label_score.domain.receipts import BillItem, BillSummary, ReceiptLine
from label_score.domain.scoring import Grade, HealthProfile, round_half_up
from label_score.services.products import ProductLookupError, ProductService
from label_score.services.scoring import compute_health_score, grade_for_score

GRADE_VALUES: dict[Grade, int] = {"A": 90, "B": 75, "C": 60, "D": 45, "E": 30}

_logger = logging.getLogger(__name__)


def aggregate_bill_score(items: Iterable[BillItem]) -> BillSummary:
    """Combine item grades into a quantity weighted bill score.

    Unscored items and items with a non-positive quantity do not count.
    """
    all_items = tuple(items)
    weighted_total = 0.0
    total_qty = 0.0
    healthy = 0
    concern = 0
    for item in all_items:
        grade = item.grade
        if grade is None or item.qty <= 0:
            continue
        weighted_total += GRADE_VALUES[grade] * item.qty
        total_qty += item.qty
        if grade in {"A", "B"}:
            healthy += 1
        elif grade in {"D", "E"}:
            concern += 1

    if total_qty == 0:
        return BillSummary(
            items=all_items,
            score=None,
            grade=None,
            healthy_count=0,
            concern_count=0,
        )

    score = int(round_half_up(weighted_total / total_qty))
    return BillSummary(
        items=all_items,
        score=score,
        grade=grade_for_score(score),
        healthy_count=healthy,
        concern_count=concern,
    )


@dataclass
class BillService:
    """Scores receipt lines against the product catalog."""

    product_service: ProductService

    async def score_lines(
        self, lines: list[ReceiptLine], profile: HealthProfile
    ) -> BillSummary:
        """Score every line that carries a barcode known to the catalog."""
        items: list[BillItem] = []
        for line in lines:
            health_score = None
            if line.barcode:
                try:
                    lookup = await self.product_service.get_by_barcode(line.barcode)
                except ProductLookupError:
                    _logger.warning(
                        "Bill line lookup failed", extra={"barcode": line.barcode}
                    )
                    lookup = None
                if lookup is not None and lookup.product is not None:
                    health_score = compute_health_score(lookup.product, profile)
            items.append(
                BillItem(
                    name=line.name,
                    qty=line.qty,
                    barcode=line.barcode,
                    health_score=health_score,
                )
            )
        return aggregate_bill_score(items)
