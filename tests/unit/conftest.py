"""Shared fixtures for unit tests."""

from datetime import datetime, timedelta

import pytest

from domain.entities.profile import PlayTime, ProfileFields


class FakeClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: datetime = datetime(2026, 3, 1, 9, 0, 0)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


@pytest.fixture
def clock() -> FakeClock:
    """A fresh FakeClock."""
    return FakeClock()


@pytest.fixture
def profile_fields() -> ProfileFields:
    """Valid onboarding form fields."""
    return ProfileFields(
        name="Alice Court",
        skill_rating=3.5,
        phone="555-0100",
        play_times=[PlayTime.MORNING, PlayTime.NIGHT],
        play_locations="Central Park Courts",
    )
