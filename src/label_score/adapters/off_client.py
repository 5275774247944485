"""Open Food Facts API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

OFF_FIELDS = (
    "code,product_name,brands,ingredients_text,nutriments,additives_tags,"
    "allergens_tags,selected_images"
)


class OffClient(Protocol):
    """Interface for Open Food Facts interactions."""

    async def get_product(self, barcode: str) -> dict[str, object] | None:
        """Return the raw OFF product, or None when OFF does not know it."""

    async def search_products(
        self, query: str, page: int = 1, page_size: int = 20
    ) -> list[dict[str, object]]:
        """Search products and return raw OFF product payloads."""


@dataclass
class HttpxOffClient(OffClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    user_agent: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str, user_agent: str) -> "HttpxOffClient":
        """Create an OFF client with a managed httpx session."""
        return cls(
            base_url=base_url,
            user_agent=user_agent,
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
        )

    async def get_product(self, barcode: str) -> dict[str, object] | None:
        """Fetch a product by barcode."""
        url = f"{self.base_url}/product/{barcode}.json"
        response = await self.http_client.get(
            url,
            params={"fields": OFF_FIELDS},
            timeout=8,
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        payload = response.json()
        if payload.get("status") != 1 or not payload.get("product"):
            return None
        return payload["product"]

    async def search_products(
        self, query: str, page: int = 1, page_size: int = 20
    ) -> list[dict[str, object]]:
        """Search products by free text."""
        url = f"{self.base_url}/search"
        response = await self.http_client.get(
            url,
            params={
                "search_terms": query,
                "search_simple": "1",
                "sort_by": "popularity_key",
                "page": page,
                "page_size": page_size,
                "fields": OFF_FIELDS,
            },
            timeout=8,
        )
        response.raise_for_status()
        return response.json().get("products") or []

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
