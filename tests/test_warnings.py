"""Tests for profile suitability warnings."""

from label_score.domain.scoring import HealthProfile, NutrientProfile, Product
from label_score.services.warnings import evaluate_profile_warnings, has_high_severity


def _types(product: Product, profile: HealthProfile) -> list[str]:
    return [warning.type for warning in evaluate_profile_warnings(product, profile)]


def test_no_warnings_for_plain_product() -> None:
    product = Product(barcode="1", diet_tag="veg")

    warnings = evaluate_profile_warnings(product, HealthProfile())

    assert warnings == []
    assert not has_high_severity(warnings)


def test_diabetes_severity_follows_sugar() -> None:
    profile = HealthProfile(conditions=("diabetes",))

    moderate = evaluate_profile_warnings(
        Product(barcode="1", nutrients=NutrientProfile(sugar=8)), profile
    )
    high = evaluate_profile_warnings(
        Product(barcode="1", nutrients=NutrientProfile(sugar=12)), profile
    )

    assert [(w.type, w.severity) for w in moderate] == [("diabetes", "medium")]
    assert [(w.type, w.severity) for w in high] == [("diabetes", "high")]


def test_hypertension_warning() -> None:
    warnings = evaluate_profile_warnings(
        Product(barcode="1", nutrients=NutrientProfile(sodium=450)),
        HealthProfile(conditions=("hypertension",)),
    )

    assert len(warnings) == 1
    assert warnings[0].severity == "high"
    assert "sodium" in warnings[0].message.lower()


def test_child_warnings() -> None:
    product = Product(barcode="1", additives=("E955", "E300", "E330"), diet_tag="veg")

    assert _types(product, HealthProfile(age_group="child")) == [
        "child_sweeteners",
        "child_additives",
    ]
    assert _types(product, HealthProfile(age_group="senior")) == []


def test_allergen_matches_are_listed() -> None:
    product = Product(barcode="1", allergens=("milk", "gluten", "soy"), diet_tag="veg")

    warnings = evaluate_profile_warnings(
        product, HealthProfile(allergies=("soy", "milk"))
    )

    assert len(warnings) == 1
    assert warnings[0].type == "allergens"
    assert warnings[0].message == "Contains allergens: milk, soy"
    assert has_high_severity(warnings)


def test_vegan_requires_veg_tag() -> None:
    profile = HealthProfile(diet="vegan")

    assert _types(Product(barcode="1", diet_tag="egg"), profile) == ["diet_vegan"]
    assert _types(Product(barcode="1"), profile) == ["diet_vegan"]
    assert _types(Product(barcode="1", diet_tag="veg"), profile) == []


def test_vegetarian_rejects_non_veg() -> None:
    profile = HealthProfile(diet="veg")

    assert _types(Product(barcode="1", diet_tag="non-veg"), profile) == ["diet_veg"]
    assert _types(Product(barcode="1", diet_tag="egg"), profile) == []


def test_jain_checks_onion_and_garlic() -> None:
    profile = HealthProfile(diet="jain")

    assert _types(
        Product(barcode="1", ingredients="Potato, Garlic powder", diet_tag="veg"),
        profile,
    ) == ["diet_jain"]
    assert _types(Product(barcode="1", ingredients="Rice, salt"), profile) == []
    assert _types(Product(barcode="1"), profile) == []


def test_warnings_keep_rule_order() -> None:
    product = Product(
        barcode="1",
        nutrients=NutrientProfile(sugar=11, sodium=130),
        allergens=("peanut",),
        additives=("E951",),
        diet_tag="non-veg",
    )
    profile = HealthProfile(
        conditions=("hypertension", "diabetes"),
        allergies=("peanut",),
        diet="vegan",
        age_group="child",
    )

    assert _types(product, profile) == [
        "diabetes",
        "hypertension",
        "child_sweeteners",
        "allergens",
        "diet_vegan",
    ]
