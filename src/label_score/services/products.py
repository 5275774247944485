"""Product catalog service backed by Open Food Facts."""

import asyncio
import logging
import re
import unicodedata
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Protocol

from label_score.adapters.off_client import OffClient
from label_score.domain.products import CachedProduct, ProductLookup
from label_score.domain.scoring import (
    DietTag,
    NutrientProfile,
    Product,
    round_half_up,
)
from label_score.services.cache import Cache

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)

# OFF nutriment keys tried in order for each nutrient.
_NUTRIENT_KEYS: dict[str, tuple[str, ...]] = {
    "energy": ("energy-kcal", "energy-kcal_100g", "energy", "energy_100g"),
    "protein": ("proteins", "proteins_100g"),
    "carbohydrates": ("carbohydrates", "carbohydrates_100g"),
    "sugar": ("sugars", "sugars_100g"),
    "fat": ("fat", "fat_100g"),
    "saturated_fat": ("saturated-fat", "saturated-fat_100g"),
    "trans_fat": ("trans-fat", "trans-fat_100g"),
    "fiber": ("fiber", "fiber_100g"),
}
_SODIUM_KEYS = ("sodium", "sodium_100g")
_SALT_KEYS = ("salt", "salt_100g")

_NON_VEG_KEYWORDS = (
    "chicken",
    "meat",
    "pork",
    "beef",
    "fish",
    "prawn",
    "shrimp",
    "mutton",
    "gelatin",
    "lard",
    "bacon",
)
_ALLERGEN_KEYWORDS: dict[str, str] = {
    "milk": "milk",
    "peanut": "peanut",
    "peanuts": "peanut",
    "soy": "soy",
    "soya": "soy",
    "egg": "egg",
    "eggs": "egg",
    "gluten": "gluten",
    "wheat": "gluten",
    "shellfish": "shellfish",
    "prawn": "shellfish",
    "shrimp": "shellfish",
    "sesame": "sesame",
}
_ADDITIVE_TAG = re.compile(r"^(?:[a-z]{2}:)?(e\d{3,4}[a-z]?)", re.IGNORECASE)


class ProductLookupError(Exception):
    """Raised when a product cannot be fetched and no cached copy exists."""


class SearchQueryError(ValueError):
    """Raised when a search query is empty."""


class ProductRepository(Protocol):
    """Persistence interface for cached catalog products."""

    def get(self, barcode: str) -> CachedProduct | None:
        """Return the cached product row, if present."""

    def upsert(self, cached: CachedProduct) -> None:
        """Insert or replace a cached product row."""

    def delete(self, barcode: str) -> None:
        """Remove a cached product row."""


@dataclass
class ProductService:
    """Service for barcode lookups and product search with caching."""

    off_client: OffClient
    repository: ProductRepository
    cache: Cache
    stale_after_seconds: int = 7 * 24 * 3600
    search_ttl_seconds: int = 3600
    debug: bool = False
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def get_by_barcode(
        self, barcode: str, *, nocache: bool = False
    ) -> ProductLookup:
        """Return a product from the catalog cache or Open Food Facts."""
        existing = self._read_cached(barcode)
        if existing and not nocache and not self._is_stale(existing):
            return ProductLookup(
                product=existing.product, source="cache", image_url=existing.image_url
            )

        try:
            payload = await self._call_with_retry(
                lambda: self.off_client.get_product(barcode),
                action=f"get_product:{barcode}",
            )
        except Exception as exc:
            if existing and not nocache:
                _logger.warning(
                    "Falling back to cached product after Open Food Facts failure",
                    extra={"barcode": barcode, "error": str(exc)},
                )
                return ProductLookup(
                    product=existing.product,
                    source="cache",
                    image_url=existing.image_url,
                )
            _logger.exception(
                "Failed to fetch product from Open Food Facts",
                extra={"barcode": barcode},
            )
            raise ProductLookupError(
                f"Failed to fetch product {barcode} from Open Food Facts"
            ) from exc

        if payload is None:
            _logger.info("Product not found on Open Food Facts: %s", barcode)
            if existing:
                self.repository.delete(barcode)
            return ProductLookup(product=None, source="not_found")

        product, image_url = normalize_off_product(payload, fallback_barcode=barcode)
        try:
            self.repository.upsert(
                CachedProduct(
                    product=product,
                    image_url=image_url,
                    fetched_at=datetime.now(tz=UTC),
                )
            )
        except Exception:
            _logger.warning(
                "Catalog cache update failed, skipping", extra={"barcode": barcode}
            )
        return ProductLookup(product=product, source="off", image_url=image_url)

    async def search(
        self,
        query: str,
        *,
        page: int = 1,
        page_size: int = 20,
        nocache: bool = False,
    ) -> list[Product]:
        """Search Open Food Facts and rank results by name and brand relevance."""
        if not query or not query.strip():
            raise SearchQueryError("Query is required")
        cache_key = f"off:search:{query.strip().lower()}:{page}:{page_size}"
        if not nocache:
            cached = self.cache.get(cache_key)
            if isinstance(cached, list):
                return list(cached)

        payloads = await self._call_with_retry(
            lambda: self.off_client.search_products(
                query.strip(), page=page, page_size=page_size
            ),
            action="search",
        )
        products = [
            normalize_off_product(payload)[0]
            for payload in payloads or []
            if payload.get("code")
        ]
        ranked = rank_products(query, products)
        self.cache.set(cache_key, list(ranked), ttl_seconds=self.search_ttl_seconds)
        if self.debug:
            _logger.info("Product search OFF: query=%s results=%s", query, len(ranked))
        return ranked

    def _read_cached(self, barcode: str) -> CachedProduct | None:
        try:
            return self.repository.get(barcode)
        except Exception:
            _logger.warning(
                "Catalog cache lookup failed, continuing without cache",
                extra={"barcode": barcode},
            )
            return None

    def _is_stale(self, cached: CachedProduct) -> bool:
        age = datetime.now(tz=UTC) - cached.fetched_at
        return age > timedelta(seconds=self.stale_after_seconds)

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[object]]", *, action: str
    ) -> object:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                if self.debug:
                    _logger.warning(
                        "Open Food Facts %s failed (attempt %s/%s, status=%s): %s",
                        action,
                        attempt,
                        self.retry_attempts + 1,
                        _status_code_from_exception(exc),
                        exc,
                    )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def normalize_off_product(
    payload: dict[str, object], fallback_barcode: str | None = None
) -> tuple[Product, str | None]:
    """Convert a raw OFF product into a scorer product and a display image URL."""
    ingredients = _clean_text(payload.get("ingredients_text"))
    brand = _clean_text(payload.get("brands"))
    if brand:
        brand = brand.split(",")[0].strip() or None
    product = Product(
        barcode=str(payload.get("code") or fallback_barcode or ""),
        nutrients=normalize_nutrients(payload.get("nutriments")),
        allergens=detect_allergens(ingredients, payload.get("allergens_tags")),
        additives=parse_additives(payload.get("additives_tags")),
        diet_tag=detect_diet_tag(ingredients),
        name=_clean_text(payload.get("product_name")),
        brand=brand,
        ingredients=ingredients,
    )
    return product, _select_image(payload.get("selected_images"))


def normalize_nutrients(nutriments: object) -> NutrientProfile:
    """Map OFF nutriments to a per-100g nutrient profile with sodium in mg."""
    if not isinstance(nutriments, dict):
        return NutrientProfile()

    values: dict[str, float | None] = {}
    for name, keys in _NUTRIENT_KEYS.items():
        value = _first_number(nutriments, keys)
        if value is None:
            continue
        values[name] = round_half_up(value, 0 if name == "energy" else 2)

    sodium_g = _first_number(nutriments, _SODIUM_KEYS)
    if sodium_g is not None:
        values["sodium"] = round_half_up(sodium_g * 1000)
    else:
        salt_g = _first_number(nutriments, _SALT_KEYS)
        if salt_g is not None:
            values["sodium"] = round_half_up(salt_g * 400)

    return NutrientProfile.from_mapping(values)


def detect_diet_tag(ingredients: str | None) -> DietTag:
    """Classify ingredients text as veg, egg or non-veg."""
    if not ingredients:
        return "veg"
    text = ingredients.lower()
    if "egg" in text:
        return "egg"
    if any(keyword in text for keyword in _NON_VEG_KEYWORDS):
        return "non-veg"
    return "veg"


def detect_allergens(ingredients: str | None, tags: object = None) -> list[str]:
    """Collect allergens from OFF allergen tags and ingredient keywords."""
    found: dict[str, None] = {}
    if isinstance(tags, list):
        for tag in tags:
            name = str(tag).split(":")[-1].strip().lower()
            mapped = _ALLERGEN_KEYWORDS.get(name)
            if mapped:
                found[mapped] = None
    if ingredients:
        text = ingredients.lower()
        for keyword, mapped in _ALLERGEN_KEYWORDS.items():
            if keyword in text:
                found[mapped] = None
    return list(found)


def parse_additives(tags: object) -> list[str]:
    """Turn OFF additive tags such as 'en:e621' into codes such as 'E621'."""
    if not isinstance(tags, list):
        return []
    codes: list[str] = []
    for tag in tags:
        match = _ADDITIVE_TAG.match(str(tag).strip())
        if match:
            codes.append(match.group(1).upper())
    return codes


def rank_products(query: str, products: list[Product]) -> list[Product]:
    """Order products by relevance to the query, best first."""
    normalized_query = normalize_text(query)
    tokens = tokenize(normalized_query)
    return sorted(
        products,
        key=lambda product: relevance_score(normalized_query, tokens, product),
        reverse=True,
    )


def relevance_score(normalized_query: str, tokens: list[str], product: Product) -> int:
    """Score how well a product name and brand match a search query."""
    name = normalize_text(product.name)
    brand = normalize_text(product.brand)
    score = 0

    if name == normalized_query:
        score += 1000
    if brand == normalized_query:
        score += 700
    if name.startswith(normalized_query):
        score += 500
    if brand.startswith(normalized_query):
        score += 350

    for token in tokens:
        word = re.compile(rf"(^|\s){re.escape(token)}(\s|$)")
        if word.search(name):
            score += 120
        if word.search(brand):
            score += 90
        if token in name:
            score += 60
        if token in brand:
            score += 45

    if normalized_query in product.barcode:
        score += 10
    return score


def normalize_text(value: str | None) -> str:
    """Lowercase and strip diacritics."""
    decomposed = unicodedata.normalize("NFKD", (value or "").lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).strip()


def tokenize(value: str) -> list[str]:
    return [token for token in re.split(r"[^a-z0-9]+", value) if token]


def _first_number(values: dict[str, object], keys: tuple[str, ...]) -> float | None:
    for key in keys:
        value = values.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, int | float):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                continue
    return None


def _clean_text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _select_image(selected_images: object) -> str | None:
    if not isinstance(selected_images, dict):
        return None
    for variants in selected_images.values():
        display = variants.get("display") if isinstance(variants, dict) else None
        if isinstance(display, dict):
            url = display.get("en") or display.get("fr")
            if url:
                return str(url)
    return None
