"""Receipt extraction service using an LLM vision model."""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from pydantic import ValidationError

from label_score.domain.receipts import ReceiptExtract, StoredReceipt

_NULLABLE_STRING = {"anyOf": [{"type": "string"}, {"type": "null"}]}
_NULLABLE_NUMBER = {"anyOf": [{"type": "number", "minimum": 0}, {"type": "null"}]}

RECEIPT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "merchant": _NULLABLE_STRING,
        "date": _NULLABLE_STRING,
        "currency": _NULLABLE_STRING,
        "line_items": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "spec": _NULLABLE_STRING,
                    "qty": _NULLABLE_NUMBER,
                    "unit_price": _NULLABLE_NUMBER,
                    "total_price": _NULLABLE_NUMBER,
                    "barcode": _NULLABLE_STRING,
                },
                "required": [
                    "name",
                    "spec",
                    "qty",
                    "unit_price",
                    "total_price",
                    "barcode",
                ],
                "additionalProperties": False,
            },
        },
        "subtotal": _NULLABLE_NUMBER,
        "tax": _NULLABLE_NUMBER,
        "total": _NULLABLE_NUMBER,
    },
    "required": [
        "merchant",
        "date",
        "currency",
        "line_items",
        "subtotal",
        "tax",
        "total",
    ],
    "additionalProperties": False,
}

RECEIPT_PROMPT = (
    "Read this shopping receipt. Return the merchant, date and currency if printed, "
    "every purchased line item with its name, pack size or spec, quantity, unit "
    "price, line total and barcode when printed, and the subtotal, tax and total. "
    "Use null for anything that is not visible."
)

_logger = logging.getLogger(__name__)


class ReceiptExtractionError(Exception):
    """Raised when the vision model output cannot be used."""


class ReceiptModelError(ReceiptExtractionError):
    """Raised when the vision model returns empty or malformed output."""


class ReceiptVisionClient(Protocol):
    """Interface for LLM vision extraction."""

    async def extract(
        self,
        *,
        model: str,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured extraction data."""


class ReceiptRepository(Protocol):
    """Persistence interface for parsed receipts."""

    def create_receipt(
        self, user_id: UUID | None, extract: ReceiptExtract, parsed_by: str
    ) -> StoredReceipt:
        """Store a receipt extract and return it with its id."""


@dataclass
class ReceiptService:
    """Service that reads receipts with a vision model and stores the results."""

    client: ReceiptVisionClient
    repository: ReceiptRepository
    model: str

    async def extract(
        self, image_bytes: bytes, user_id: UUID | None = None
    ) -> StoredReceipt:
        """Extract line items from a receipt image and store the result."""
        try:
            raw = await self.client.extract(
                model=self.model,
                image_data_url=to_data_url(image_bytes),
                schema=RECEIPT_SCHEMA,
                prompt=RECEIPT_PROMPT,
            )
        except (RuntimeError, ValueError) as exc:
            _logger.warning("Receipt model returned unusable output: %s", exc)
            raise ReceiptModelError("Receipt reader returned invalid output") from exc
        if not isinstance(raw, dict):
            raise ReceiptModelError("Receipt reader returned invalid output")
        lines = raw.get("line_items")
        if isinstance(lines, list):
            for line in lines:
                # Models return null for an unprinted quantity; one unit is implied.
                if isinstance(line, dict) and line.get("qty") is None:
                    line["qty"] = 1
        try:
            extract = ReceiptExtract.model_validate(raw)
        except ValidationError as exc:
            _logger.warning("Receipt extraction returned invalid data: %s", exc)
            raise ReceiptExtractionError("Receipt could not be read") from exc
        return self.repository.create_receipt(user_id, extract, parsed_by=self.model)


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
