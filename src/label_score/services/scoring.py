"""Rule-based health scoring for products.

The score starts at 100 and every rule that fires subtracts a fixed penalty and
records a reason tag. Nutrient brackets are ordered tables evaluated top-down;
only the first matching bracket of a table applies.
"""

from label_score.domain.scoring import Grade, HealthProfile, HealthScore, Product

MAX_SCORE = 100
MAX_REASONS = 5

# (exclusive lower threshold, penalty, reason tag), highest threshold first.
SUGAR_BRACKETS: tuple[tuple[float, int, str], ...] = (
    (22.5, 20, "very_high_sugar"),
    (10.0, 12, "high_sugar"),
    (5.0, 5, "moderate_sugar"),
)
SODIUM_BRACKETS: tuple[tuple[float, int, str], ...] = (
    (600.0, 20, "very_high_sodium"),
    (400.0, 12, "high_sodium"),
    (120.0, 5, "moderate_sodium"),
)
SATURATED_FAT_BRACKETS: tuple[tuple[float, int, str], ...] = (
    (5.0, 15, "high_saturated_fat"),
    (3.0, 8, "moderate_saturated_fat"),
)
TRANS_FAT_PENALTY = 25

CONCERNING_ADDITIVES: frozenset[str] = frozenset(
    {"E621", "E951", "E952", "E954", "E129", "E102"}
)
ADDITIVE_PENALTY_EACH = 4
ADDITIVE_PENALTY_CAP = 12

CHILD_SWEETENERS: frozenset[str] = frozenset({"E951", "E952", "E954", "E955"})
CHILD_SWEETENER_PENALTY = 6
CHILD_ADDITIVE_LIMIT = 2
CHILD_ADDITIVE_PENALTY = 4

# (inclusive lower bound, grade), highest first; anything below is "E".
GRADE_BRACKETS: tuple[tuple[int, Grade], ...] = (
    (80, "A"),
    (70, "B"),
    (55, "C"),
    (40, "D"),
)


def compute_health_score(product: Product, profile: HealthProfile) -> HealthScore:
    """Score a product for a health profile.

    Never raises for well-formed input and never mutates its arguments.
    """
    nutrients = product.nutrients
    score = MAX_SCORE
    reasons: list[str] = []

    for value, brackets in (
        (nutrients.sugar, SUGAR_BRACKETS),
        (nutrients.sodium, SODIUM_BRACKETS),
        (nutrients.saturated_fat, SATURATED_FAT_BRACKETS),
    ):
        penalty, tag = bracket_penalty(value, brackets)
        if tag is not None:
            score -= penalty
            reasons.append(tag)

    if nutrients.trans_fat > 0:
        score -= TRANS_FAT_PENALTY
        reasons.append("contains_trans_fat")

    additive_penalty = concerning_additive_penalty(product.additives)
    if additive_penalty > 0:
        score -= additive_penalty
        reasons.append("concerning_additives")

    if "diabetes" in profile.conditions and nutrients.sugar > 5:
        score -= 15 if nutrients.sugar > 10 else 8
        add_reason(reasons, "diabetes_concern")

    if "hypertension" in profile.conditions and nutrients.sodium > 120:
        score -= 15 if nutrients.sodium > 400 else 8
        add_reason(reasons, "hypertension_concern")

    if profile.is_child:
        if any(code in CHILD_SWEETENERS for code in product.additives):
            score -= CHILD_SWEETENER_PENALTY
            add_reason(reasons, "child_sweetener_concern")
        if len(product.additives) > CHILD_ADDITIVE_LIMIT:
            score -= CHILD_ADDITIVE_PENALTY
            add_reason(reasons, "child_additive_concern")

    final_score = round(max(0, min(MAX_SCORE, score)))
    return HealthScore(
        score=final_score,
        grade=grade_for_score(final_score),
        reasons=tuple(reasons[:MAX_REASONS]),
    )


def bracket_penalty(
    value: float, brackets: tuple[tuple[float, int, str], ...]
) -> tuple[int, str | None]:
    """Return the penalty and tag of the first bracket the value exceeds."""
    for threshold, penalty, tag in brackets:
        if value > threshold:
            return penalty, tag
    return 0, None


def concerning_additive_penalty(additives: tuple[str, ...]) -> int:
    """Return the capped penalty for concerning additives."""
    count = sum(1 for code in additives if code in CONCERNING_ADDITIVES)
    return min(count * ADDITIVE_PENALTY_EACH, ADDITIVE_PENALTY_CAP)


def add_reason(reasons: list[str], tag: str) -> None:
    """Append a tag unless it is already present."""
    if tag not in reasons:
        reasons.append(tag)


def grade_for_score(score: float) -> Grade:
    """Map a 0-100 score to its letter grade."""
    for lower_bound, grade in GRADE_BRACKETS:
        if score >= lower_bound:
            return grade
    return "E"
