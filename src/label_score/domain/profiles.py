"""Stored consumer profile models."""

from dataclasses import dataclass
from uuid import UUID

from label_score.domain.scoring import AgeGroup, Diet, HealthProfile


@dataclass(frozen=True)
class ProfileRecord:
    """A consumer profile as persisted for a user."""

    id: UUID
    user_id: UUID
    name: str
    age_group: AgeGroup
    language: str
    conditions: tuple[str, ...]
    allergies: tuple[str, ...]
    diet: Diet
    is_active: bool

    def to_health_profile(self) -> HealthProfile:
        """Return the scoring view of this profile."""
        return HealthProfile(
            conditions=self.conditions,
            allergies=self.allergies,
            diet=self.diet,
            age_group=self.age_group,
        )
