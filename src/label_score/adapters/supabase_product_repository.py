"""Supabase-backed catalog cache for normalized products."""

from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from supabase import Client

from label_score.domain.products import CachedProduct
from label_score.domain.scoring import NutrientProfile, Product
from label_score.services.products import ProductRepository

_TABLE = "products"


@dataclass
class SupabaseProductRepository(ProductRepository):
    """Supabase implementation for cached catalog products."""

    client: Client

    def get(self, barcode: str) -> CachedProduct | None:
        """Return the cached row for a barcode, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("barcode", barcode)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_cached(response.data[0])

    def upsert(self, cached: CachedProduct) -> None:
        """Insert or replace the cached row keyed by barcode."""
        product = cached.product
        self.client.table(_TABLE).upsert(
            {
                "barcode": product.barcode,
                "name": product.name,
                "brand": product.brand,
                "ingredients": product.ingredients,
                "nutrients": asdict(product.nutrients),
                "allergens": list(product.allergens),
                "additives": list(product.additives),
                "diet_tag": product.diet_tag,
                "image_url": cached.image_url,
                "last_fetched_at": cached.fetched_at.isoformat(),
            },
            on_conflict="barcode",
        ).execute()

    def delete(self, barcode: str) -> None:
        """Delete the cached row for a barcode."""
        self.client.table(_TABLE).delete().eq("barcode", barcode).execute()


def _parse_cached(row: dict[str, object]) -> CachedProduct:
    product = Product(
        barcode=str(row["barcode"]),
        nutrients=NutrientProfile.from_mapping(row.get("nutrients") or {}),
        allergens=row.get("allergens") or (),
        additives=row.get("additives") or (),
        diet_tag=row.get("diet_tag"),
        name=row.get("name"),
        brand=row.get("brand"),
        ingredients=row.get("ingredients"),
    )
    fetched_at = datetime.fromisoformat(str(row["last_fetched_at"]))
    if fetched_at.tzinfo is None:
        fetched_at = fetched_at.replace(tzinfo=UTC)
    return CachedProduct(
        product=product,
        image_url=row.get("image_url"),
        fetched_at=fetched_at,
    )
