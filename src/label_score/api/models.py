"""Request and response models for the HTTP API."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from label_score.domain.products import ProductLookup
from label_score.domain.profiles import ProfileRecord
from label_score.domain.receipts import BillSummary, ReceiptLine
from label_score.domain.scoring import (
    HealthProfile,
    HealthScore,
    NutrientProfile,
    Product,
    ProfileWarning,
)

ConditionName = Literal["diabetes", "hypertension"]
AllergenName = Literal["peanut", "milk", "egg", "soy", "gluten", "sesame", "shellfish"]
AgeGroupName = Literal["adult", "child", "senior"]
DietName = Literal["none", "veg", "vegan", "jain"]
LanguageName = Literal["en", "hi", "kn"]

REASON_LABELS: dict[str, str] = {
    "very_high_sugar": "Very high sugar",
    "high_sugar": "High sugar",
    "moderate_sugar": "Moderate sugar",
    "very_high_sodium": "Very high sodium",
    "high_sodium": "High sodium",
    "moderate_sodium": "Moderate sodium",
    "high_saturated_fat": "High saturated fat",
    "moderate_saturated_fat": "Moderate saturated fat",
    "contains_trans_fat": "Contains trans fat",
    "concerning_additives": "Contains concerning additives",
    "diabetes_concern": "Not ideal with diabetes",
    "hypertension_concern": "Not ideal with high blood pressure",
    "child_sweetener_concern": "Artificial sweeteners, not for children",
    "child_additive_concern": "Many additives for a child",
}


class ApiModel(BaseModel):
    """Base model using camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NutrientsBody(ApiModel):
    """Per 100g nutrient values; sodium in mg."""

    energy: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbohydrates: float | None = Field(default=None, ge=0)
    sugar: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)
    saturated_fat: float | None = Field(default=None, ge=0)
    trans_fat: float | None = Field(default=None, ge=0)
    sodium: float | None = Field(default=None, ge=0)
    fiber: float | None = Field(default=None, ge=0)

    @classmethod
    def from_domain(cls, nutrients: NutrientProfile) -> "NutrientsBody":
        return cls(
            energy=nutrients.energy,
            protein=nutrients.protein,
            carbohydrates=nutrients.carbohydrates,
            sugar=nutrients.sugar,
            fat=nutrients.fat,
            saturated_fat=nutrients.saturated_fat,
            trans_fat=nutrients.trans_fat,
            sodium=nutrients.sodium,
            fiber=nutrients.fiber,
        )


class ProductBody(ApiModel):
    """Product payload, used both inbound and outbound."""

    barcode: str
    name: str | None = None
    brand: str | None = None
    ingredients: str | None = None
    nutrients: NutrientsBody | None = None
    allergens: list[str] | None = None
    additives: list[str] | None = None
    diet_tag: Literal["veg", "non-veg", "egg"] | None = None
    image_url: str | None = None

    def to_domain(self) -> Product:
        """Build a scorer product, treating missing values as zero or empty."""
        nutrients = self.nutrients.model_dump() if self.nutrients else {}
        return Product(
            barcode=self.barcode,
            nutrients=NutrientProfile.from_mapping(nutrients),
            allergens=self.allergens or (),
            additives=self.additives or (),
            diet_tag=self.diet_tag,
            name=self.name,
            brand=self.brand,
            ingredients=self.ingredients,
        )

    @classmethod
    def from_domain(
        cls, product: Product, image_url: str | None = None
    ) -> "ProductBody":
        return cls(
            barcode=product.barcode,
            name=product.name,
            brand=product.brand,
            ingredients=product.ingredients,
            nutrients=NutrientsBody.from_domain(product.nutrients),
            allergens=list(product.allergens),
            additives=list(product.additives),
            diet_tag=product.diet_tag,
            image_url=image_url,
        )


class HealthProfileBody(ApiModel):
    """Inline health profile for scoring requests."""

    conditions: list[ConditionName] | None = None
    allergies: list[AllergenName] | None = None
    diet: DietName = "none"
    age_group: AgeGroupName = "adult"

    def to_domain(self) -> HealthProfile:
        return HealthProfile(
            conditions=self.conditions or (),
            allergies=self.allergies or (),
            diet=self.diet,
            age_group=self.age_group,
        )


class WarningBody(ApiModel):
    """Suitability warning as returned to clients."""

    type: str
    severity: Literal["high", "medium"]
    message: str

    @classmethod
    def from_domain(cls, warning: ProfileWarning) -> "WarningBody":
        return cls(
            type=warning.type, severity=warning.severity, message=warning.message
        )


class ScoreRequest(ApiModel):
    """Product and profile to score."""

    product: ProductBody
    profile: HealthProfileBody = Field(default_factory=HealthProfileBody)


class ScoreResponse(ApiModel):
    """Score, grade, reasons and warnings for a product."""

    score: int
    grade: Literal["A", "B", "C", "D", "E"]
    reasons: list[str]
    reason_labels: list[str]
    warnings: list[WarningBody]
    suitable: bool

    @classmethod
    def build(
        cls,
        health_score: HealthScore,
        warnings: list[ProfileWarning],
        **extra: object,
    ) -> "ScoreResponse":
        return cls(
            **extra,
            score=health_score.score,
            grade=health_score.grade,
            reasons=list(health_score.reasons),
            reason_labels=[
                REASON_LABELS.get(reason, reason) for reason in health_score.reasons
            ],
            warnings=[WarningBody.from_domain(warning) for warning in warnings],
            suitable=not warnings,
        )


class ProductLookupResponse(ApiModel):
    """Barcode lookup result and where it came from."""

    found: bool
    source: Literal["cache", "off", "not_found"]
    product: ProductBody | None = None

    @classmethod
    def from_domain(cls, lookup: ProductLookup) -> "ProductLookupResponse":
        product = (
            ProductBody.from_domain(lookup.product, lookup.image_url)
            if lookup.product
            else None
        )
        return cls(found=product is not None, source=lookup.source, product=product)


class ProductScoreResponse(ScoreResponse):
    """Score for a catalog product and the profile used."""

    product: ProductBody
    profile_id: UUID | None = None


class SearchResponse(ApiModel):
    """Ranked page of search results."""

    products: list[ProductBody]
    page: int
    page_size: int


class ProfileCreate(ApiModel):
    """New profile fields."""

    name: str = Field(min_length=1, max_length=80)
    age_group: AgeGroupName = "adult"
    language: LanguageName = "en"
    conditions: list[ConditionName] = Field(default_factory=list)
    allergies: list[AllergenName] = Field(default_factory=list)
    diet: DietName = "none"
    set_active: bool = False


class ProfileUpdate(ApiModel):
    """Partial profile update; unset fields are left alone."""

    name: str | None = Field(default=None, min_length=1, max_length=80)
    age_group: AgeGroupName | None = None
    language: LanguageName | None = None
    conditions: list[ConditionName] | None = None
    allergies: list[AllergenName] | None = None
    diet: DietName | None = None
    set_active: bool = False


class ProfileBody(ApiModel):
    """Stored profile as returned to clients."""

    id: UUID
    name: str
    age_group: str
    language: str
    conditions: list[str]
    allergies: list[str]
    diet: str
    is_active: bool

    @classmethod
    def from_domain(cls, profile: ProfileRecord) -> "ProfileBody":
        return cls(
            id=profile.id,
            name=profile.name,
            age_group=profile.age_group,
            language=profile.language,
            conditions=list(profile.conditions),
            allergies=list(profile.allergies),
            diet=profile.diet,
            is_active=profile.is_active,
        )


class BillLineBody(ApiModel):
    """Bill line sent by the client."""

    name: str = Field(min_length=1)
    qty: float = Field(default=1, ge=0)
    barcode: str | None = None

    def to_domain(self) -> ReceiptLine:
        return ReceiptLine(name=self.name, qty=self.qty, barcode=self.barcode)


class BillScoreRequest(ApiModel):
    """Bill lines to grade."""

    items: list[BillLineBody]
    profile_id: UUID | None = None


class BillParseRequest(ApiModel):
    """Base64 receipt image to read and grade."""

    image_base64: str = Field(min_length=1)
    profile_id: UUID | None = None


class BillItemBody(ApiModel):
    """Graded bill line."""

    name: str
    qty: float
    barcode: str | None
    score: int | None
    grade: Literal["A", "B", "C", "D", "E"] | None
    reasons: list[str]


class BillResponse(ApiModel):
    """Graded bill with its weighted score."""

    receipt_id: UUID | None = None
    merchant: str | None = None
    date: str | None = None
    items: list[BillItemBody]
    score: int | None
    grade: Literal["A", "B", "C", "D", "E"] | None
    healthy_count: int
    concern_count: int

    @classmethod
    def from_domain(
        cls,
        summary: BillSummary,
        merchant: str | None = None,
        date: str | None = None,
        receipt_id: UUID | None = None,
    ) -> "BillResponse":
        items = [
            BillItemBody(
                name=item.name,
                qty=item.qty,
                barcode=item.barcode,
                score=item.health_score.score if item.health_score else None,
                grade=item.grade,
                reasons=list(item.health_score.reasons) if item.health_score else [],
            )
            for item in summary.items
        ]
        return cls(
            receipt_id=receipt_id,
            merchant=merchant,
            date=date,
            items=items,
            score=summary.score,
            grade=summary.grade,
            healthy_count=summary.healthy_count,
            concern_count=summary.concern_count,
        )
