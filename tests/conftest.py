"""Shared fixtures for the volunteer network tests.

The ledger database is an in-memory SQLite instance, so no PostgreSQL is
needed to run the suite.
"""

import math
import os
from datetime import datetime

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest

from schemas.common import Location
from schemas.volunteer import (
    VolunteerCreate, Skill, SkillCategory, SkillLevel, Experience, ExperienceLevel,
    Preferences,
)
from schemas.mission import MissionCreate, MissionPriority
from services.network import VolunteerNetwork

# Monday morning
FIXED_NOW = datetime(2024, 1, 1, 9, 0)

BASE_LAT = 40.7128
BASE_LNG = -74.0060


def lat_offset(km: float) -> float:
    """Latitude delta that is `km` along a meridian."""
    return math.degrees(km / 6371.0)


def _volunteer(**overrides) -> VolunteerCreate:
    """Build a VolunteerCreate with sensible defaults, override any field."""
    defaults = dict(
        name="Test Volunteer",
        email="volunteer@example.org",
        location=Location(lat=BASE_LAT, lng=BASE_LNG),
        skills=[Skill(name="First Aid", category=SkillCategory.MEDICAL, level=SkillLevel.INTERMEDIATE)],
        experience=Experience(level=ExperienceLevel.INTERMEDIATE, total_hours=20),
        preferences=Preferences(max_distance=50),
    )
    defaults.update(overrides)
    return VolunteerCreate(**defaults)


def _mission(**overrides) -> MissionCreate:
    """Build a MissionCreate with sensible defaults, override any field."""
    defaults = dict(
        title="Flood Relief",
        location=Location(lat=BASE_LAT + lat_offset(2), lng=BASE_LNG),
        required_skills=[
            Skill(name="First Aid", category=SkillCategory.MEDICAL, level=SkillLevel.INTERMEDIATE)
        ],
        priority=MissionPriority.HIGH,
        volunteers_needed=1,
        start_time=FIXED_NOW,
        estimated_duration=4,
    )
    defaults.update(overrides)
    return MissionCreate(**defaults)


@pytest.fixture
def make_volunteer():
    return _volunteer


@pytest.fixture
def make_mission():
    return _mission


@pytest.fixture
def network() -> VolunteerNetwork:
    """A fresh network on a fixed clock."""
    return VolunteerNetwork.from_settings(clock=lambda: FIXED_NOW)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
