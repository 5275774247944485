"""Tests for profile lifecycle management."""

from uuid import uuid4

import pytest

from label_score.services.profiles import ProfileNotFoundError, ProfileService
from tests.conftest import InMemoryProfileRepository


@pytest.fixture
def service() -> ProfileService:
    return ProfileService(InMemoryProfileRepository())


def test_first_profile_becomes_active(service: ProfileService) -> None:
    user_id = uuid4()

    first = service.create(user_id, {"name": "Me", "conditions": ["diabetes"]})
    second = service.create(user_id, {"name": "Kid", "age_group": "child"})

    assert first.is_active
    assert not second.is_active
    assert service.get_active(user_id) == first
    assert first.to_health_profile().conditions == ("diabetes",)


def test_create_with_set_active_switches_profile(service: ProfileService) -> None:
    user_id = uuid4()
    first = service.create(user_id, {"name": "Me"})

    second = service.create(user_id, {"name": "Mom"}, set_active=True)

    assert second.is_active
    assert not service.get(user_id, first.id).is_active
    assert service.get_active(user_id).id == second.id


def test_unknown_fields_are_dropped(service: ProfileService) -> None:
    user_id = uuid4()

    profile = service.create(
        user_id, {"name": "Me", "is_admin": True, "diet": None, "language": "hi"}
    )

    assert profile.diet == "none"
    assert profile.language == "hi"


def test_update_applies_partial_changes(service: ProfileService) -> None:
    user_id = uuid4()
    profile = service.create(user_id, {"name": "Me"})

    updated = service.update(
        user_id, profile.id, {"allergies": ["peanut"], "diet": "jain"}
    )

    assert updated.name == "Me"
    assert updated.allergies == ("peanut",)
    assert updated.to_health_profile().diet == "jain"


def test_profiles_are_scoped_to_user(service: ProfileService) -> None:
    owner = uuid4()
    profile = service.create(owner, {"name": "Me"})

    with pytest.raises(ProfileNotFoundError):
        service.get(uuid4(), profile.id)
    with pytest.raises(ProfileNotFoundError):
        service.update(uuid4(), profile.id, {"name": "Stolen"})
    assert service.list_for_user(uuid4()) == []


def test_deleting_active_profile_promotes_next(service: ProfileService) -> None:
    user_id = uuid4()
    first = service.create(user_id, {"name": "Me"})
    second = service.create(user_id, {"name": "Dad"})

    service.delete(user_id, first.id)

    assert [p.id for p in service.list_for_user(user_id)] == [second.id]
    assert service.get_active(user_id).is_active


def test_get_active_without_profiles(service: ProfileService) -> None:
    assert service.get_active(uuid4()) is None
