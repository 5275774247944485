"""Qualitative suitability warnings for a product and a profile."""

from label_score.domain.scoring import HealthProfile, Product, ProfileWarning
from label_score.services.scoring import CHILD_ADDITIVE_LIMIT, CHILD_SWEETENERS

JAIN_EXCLUDED_INGREDIENTS = ("onion", "garlic")


def evaluate_profile_warnings(
    product: Product, profile: HealthProfile
) -> list[ProfileWarning]:
    """Return warnings in display order. An empty list means suitable."""
    nutrients = product.nutrients
    warnings: list[ProfileWarning] = []

    if "diabetes" in profile.conditions and nutrients.sugar > 5:
        high = nutrients.sugar > 10
        warnings.append(
            ProfileWarning(
                type="diabetes",
                severity="high" if high else "medium",
                message=(
                    "High sugar content - Not recommended for diabetes"
                    if high
                    else "Moderate sugar content - Consume in moderation"
                ),
            )
        )

    if "hypertension" in profile.conditions and nutrients.sodium > 120:
        high = nutrients.sodium > 400
        warnings.append(
            ProfileWarning(
                type="hypertension",
                severity="high" if high else "medium",
                message=(
                    "Very high sodium - Avoid if possible"
                    if high
                    else "Moderate sodium - Monitor your intake"
                ),
            )
        )

    if profile.is_child:
        if any(code in CHILD_SWEETENERS for code in product.additives):
            warnings.append(
                ProfileWarning(
                    type="child_sweeteners",
                    severity="medium",
                    message=(
                        "Contains artificial sweeteners - Not recommended for children"
                    ),
                )
            )
        if len(product.additives) > CHILD_ADDITIVE_LIMIT:
            warnings.append(
                ProfileWarning(
                    type="child_additives",
                    severity="medium",
                    message="Multiple additives present - Consider alternatives",
                )
            )

    matches = [
        allergen for allergen in product.allergens if allergen in profile.allergies
    ]
    if matches:
        warnings.append(
            ProfileWarning(
                type="allergens",
                severity="high",
                message=f"Contains allergens: {', '.join(matches)}",
            )
        )

    if profile.diet == "vegan" and product.diet_tag != "veg":
        warnings.append(
            ProfileWarning(
                type="diet_vegan",
                severity="high",
                message="Contains non-vegetarian ingredients",
            )
        )

    if profile.diet == "veg" and product.diet_tag == "non-veg":
        warnings.append(
            ProfileWarning(
                type="diet_veg",
                severity="high",
                message="Contains meat or fish - Not suitable for a vegetarian diet",
            )
        )

    if profile.diet == "jain" and _mentions_any(
        product.ingredients, JAIN_EXCLUDED_INGREDIENTS
    ):
        warnings.append(
            ProfileWarning(
                type="diet_jain",
                severity="high",
                message="May contain onion/garlic - Not suitable for Jain diet",
            )
        )

    return warnings


def has_high_severity(warnings: list[ProfileWarning]) -> bool:
    """Return True when any warning is high severity."""
    return any(warning.severity == "high" for warning in warnings)


def _mentions_any(text: str | None, words: tuple[str, ...]) -> bool:
    lowered = (text or "").lower()
    return any(word in lowered for word in words)
