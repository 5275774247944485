"""Supabase implementation for parsed receipts."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from label_score.domain.receipts import ReceiptExtract, StoredReceipt
from label_score.services.receipts import ReceiptRepository

_TABLE = "receipts"


@dataclass
class SupabaseReceiptRepository(ReceiptRepository):
    """Supabase-backed repository for receipt extracts."""

    client: Client

    def create_receipt(
        self, user_id: UUID | None, extract: ReceiptExtract, parsed_by: str
    ) -> StoredReceipt:
        """Insert a receipt row and return it with the generated id."""
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "user_id": str(user_id) if user_id else None,
                    "merchant": extract.merchant,
                    "receipt_date": extract.date,
                    "currency": extract.currency,
                    "line_items": [line.model_dump() for line in extract.line_items],
                    "subtotal": extract.subtotal,
                    "tax": extract.tax,
                    "total": extract.total,
                    "parsed_by": parsed_by,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to store receipt in Supabase")
        row = response.data[0]
        return StoredReceipt(
            id=UUID(str(row["id"])),
            user_id=user_id,
            extract=extract,
        )
