"""Consumer profile management."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from label_score.domain.profiles import ProfileRecord

PROFILE_FIELDS = frozenset(
    {"name", "age_group", "language", "conditions", "allergies", "diet"}
)


class ProfileNotFoundError(Exception):
    """Raised when a profile does not exist for the user."""


class ProfileRepository(Protocol):
    """Persistence interface for consumer profiles."""

    def list_profiles(self, user_id: UUID) -> list[ProfileRecord]:
        """Return a user's profiles in creation order."""

    def get_profile(self, user_id: UUID, profile_id: UUID) -> ProfileRecord | None:
        """Return a profile owned by the user, if present."""

    def create_profile(
        self, user_id: UUID, payload: dict[str, object], is_active: bool
    ) -> ProfileRecord:
        """Create a profile and return it."""

    def update_profile(
        self, user_id: UUID, profile_id: UUID, payload: dict[str, object]
    ) -> ProfileRecord:
        """Apply a partial update and return the profile."""

    def set_active(self, user_id: UUID, profile_id: UUID) -> None:
        """Mark one profile active and every other profile of the user inactive."""

    def delete_profile(self, user_id: UUID, profile_id: UUID) -> None:
        """Delete a profile."""


@dataclass
class ProfileService:
    """Application service for profile lifecycle actions."""

    repository: ProfileRepository

    def list_for_user(self, user_id: UUID) -> list[ProfileRecord]:
        """List a user's profiles."""
        return self.repository.list_profiles(user_id)

    def get(self, user_id: UUID, profile_id: UUID) -> ProfileRecord:
        """Return a profile or raise ProfileNotFoundError."""
        profile = self.repository.get_profile(user_id, profile_id)
        if profile is None:
            raise ProfileNotFoundError(str(profile_id))
        return profile

    def get_active(self, user_id: UUID) -> ProfileRecord | None:
        """Return the user's active profile, falling back to the first one."""
        profiles = self.repository.list_profiles(user_id)
        for profile in profiles:
            if profile.is_active:
                return profile
        return profiles[0] if profiles else None

    def create(
        self, user_id: UUID, payload: dict[str, object], set_active: bool = False
    ) -> ProfileRecord:
        """Create a profile. A user's first profile is always active."""
        is_first = not self.repository.list_profiles(user_id)
        created = self.repository.create_profile(
            user_id, _clean_payload(payload), is_active=is_first
        )
        if set_active and not is_first:
            self.repository.set_active(user_id, created.id)
            return self.get(user_id, created.id)
        return created

    def update(
        self,
        user_id: UUID,
        profile_id: UUID,
        payload: dict[str, object],
        set_active: bool = False,
    ) -> ProfileRecord:
        """Apply a partial update to a profile."""
        self.get(user_id, profile_id)
        changes = _clean_payload(payload)
        if changes:
            self.repository.update_profile(user_id, profile_id, changes)
        if set_active:
            self.repository.set_active(user_id, profile_id)
        return self.get(user_id, profile_id)

    def delete(self, user_id: UUID, profile_id: UUID) -> None:
        """Delete a profile, promoting another one if the active one is removed."""
        profile = self.get(user_id, profile_id)
        self.repository.delete_profile(user_id, profile_id)
        if profile.is_active:
            remaining = self.repository.list_profiles(user_id)
            if remaining:
                self.repository.set_active(user_id, remaining[0].id)


def _clean_payload(payload: dict[str, object]) -> dict[str, object]:
    """Drop unknown and unset fields."""
    return {
        key: value
        for key, value in payload.items()
        if key in PROFILE_FIELDS and value is not None
    }
