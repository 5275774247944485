"""Supabase implementation for consumer profiles."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from label_score.domain.profiles import ProfileRecord
from label_score.services.profiles import ProfileRepository

_TABLE = "profiles"


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase-backed repository for consumer profiles."""

    client: Client

    def list_profiles(self, user_id: UUID) -> list[ProfileRecord]:
        """Return a user's profiles ordered by creation time."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .order("created_at")
            .execute()
        )
        return [_parse_profile(row) for row in response.data or []]

    def get_profile(self, user_id: UUID, profile_id: UUID) -> ProfileRecord | None:
        """Return a profile owned by the user, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("id", str(profile_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def create_profile(
        self, user_id: UUID, payload: dict[str, object], is_active: bool
    ) -> ProfileRecord:
        """Insert a profile row and return it."""
        row = {
            "user_id": str(user_id),
            "age_group": "adult",
            "language": "en",
            "conditions": [],
            "allergies": [],
            "diet": "none",
            **_serialize(payload),
            "is_active": is_active,
        }
        response = self.client.table(_TABLE).insert(row).execute()
        if not response.data:
            raise RuntimeError("Failed to create profile in Supabase")
        return _parse_profile(response.data[0])

    def update_profile(
        self, user_id: UUID, profile_id: UUID, payload: dict[str, object]
    ) -> ProfileRecord:
        """Update profile fields and return the stored row."""
        response = (
            self.client.table(_TABLE)
            .update(
                {
                    **_serialize(payload),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", str(profile_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update profile in Supabase")
        return _parse_profile(response.data[0])

    def set_active(self, user_id: UUID, profile_id: UUID) -> None:
        """Activate one profile and deactivate the rest."""
        self.client.table(_TABLE).update({"is_active": False}).eq(
            "user_id", str(user_id)
        ).execute()
        self.client.table(_TABLE).update({"is_active": True}).eq(
            "id", str(profile_id)
        ).eq("user_id", str(user_id)).execute()

    def delete_profile(self, user_id: UUID, profile_id: UUID) -> None:
        """Delete a profile row."""
        self.client.table(_TABLE).delete().eq("id", str(profile_id)).eq(
            "user_id", str(user_id)
        ).execute()


def _serialize(payload: dict[str, object]) -> dict[str, object]:
    return {
        key: list(value) if isinstance(value, tuple | list) else value
        for key, value in payload.items()
    }


def _parse_profile(row: dict[str, object]) -> ProfileRecord:
    return ProfileRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name") or ""),
        age_group=row.get("age_group") or "adult",
        language=str(row.get("language") or "en"),
        conditions=tuple(row.get("conditions") or ()),
        allergies=tuple(row.get("allergies") or ()),
        diet=row.get("diet") or "none",
        is_active=bool(row.get("is_active")),
    )
