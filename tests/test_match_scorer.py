"""Tests for the weighted compatibility score."""

import math

import pytest

from config import MatchWeights
from schemas.common import Location
from schemas.volunteer import (
    Skill, SkillCategory, SkillLevel, Experience, ExperienceLevel, Preferences,
    Availability, AvailabilityStatus, Resource, ResourceType, ResourceAvailability,
)
from schemas.mission import MissionPriority, ResourceRequirement
from services.match_scorer import MatchScorer
from services.resource_ledger import ResourceLedger

LAT, LNG = 40.7128, -74.0060


def _km_north(km: float) -> Location:
    return Location(lat=LAT + math.degrees(km / 6371.0), lng=LNG)


class TestMatchWeights:
    def test_defaults_sum_to_one(self):
        w = MatchWeights()
        total = w.skill_match + w.location_proximity + w.experience + w.availability + w.resource_fit
        assert total == pytest.approx(1.0)

    def test_bad_total_rejected(self):
        with pytest.raises(ValueError):
            MatchWeights(skill_match=0.5)

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            MatchWeights(skill_match=0.5, resource_fit=-0.05)


class TestProximity:
    def test_linear_falloff(self):
        assert MatchScorer.proximity_score(2, 50) == pytest.approx(96)

    def test_exactly_at_max_distance_is_zero(self):
        assert MatchScorer.proximity_score(50, 50) == 0

    def test_beyond_max_distance_never_negative(self):
        assert MatchScorer.proximity_score(80, 50) == 0


class TestExperience:
    def test_saturates_at_hundred(self, network, make_volunteer):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(
            experience=Experience(level=ExperienceLevel.EXPERT, total_hours=500, completed_missions=50),
        ))
        assert MatchScorer.experience_score(volunteer) == 100

    def test_blend_of_hours_missions_and_level(self, network, make_volunteer):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(
            experience=Experience(level=ExperienceLevel.EXPERT, total_hours=245, completed_missions=18),
        ))
        assert MatchScorer.experience_score(volunteer) == pytest.approx(97)


class TestScore:
    def test_expert_medic_nearby_is_recommended(self, network, make_volunteer, make_mission):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(
            location=Location(lat=LAT, lng=LNG),
            skills=[Skill(name="Emergency Medicine", category=SkillCategory.MEDICAL, level=SkillLevel.EXPERT)],
            experience=Experience(level=ExperienceLevel.EXPERT, total_hours=245, completed_missions=18),
            preferences=Preferences(max_distance=50),
        ))
        mission = network.coordinator.create_mission(make_mission(
            location=_km_north(2),
            required_skills=[
                Skill(name="Emergency Medicine", category=SkillCategory.MEDICAL, level=SkillLevel.INTERMEDIATE)
            ],
            priority=MissionPriority.CRITICAL,
        ))

        match = MatchScorer().score(volunteer, mission)

        assert match.match_factors.skill_match == 100
        assert match.match_factors.location_proximity == pytest.approx(96, abs=0.01)
        assert match.match_factors.experience == pytest.approx(97)
        assert match.distance_km == pytest.approx(2, abs=0.001)
        assert match.estimated_travel_time == 4
        assert match.match_score > 70
        assert match.recommended is True

    def test_score_stays_in_range_for_poor_match(self, network, make_volunteer, make_mission):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(
            skills=[],
            experience=Experience(),
            preferences=Preferences(max_distance=1),
        ))
        mission = network.coordinator.create_mission(make_mission(location=_km_north(300)))

        match = MatchScorer().score(volunteer, mission)

        assert 0 <= match.match_score <= 100
        assert match.match_factors.location_proximity == 0
        assert match.recommended is False

    def test_unavailable_volunteer_scores_zero_availability(self, network, make_volunteer, make_mission):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(
            availability=Availability(status=AvailabilityStatus.BUSY),
        ))
        mission = network.coordinator.create_mission(make_mission())

        match = MatchScorer().score(volunteer, mission)

        assert match.match_factors.availability == 0

    def test_custom_weights(self, network, make_volunteer, make_mission):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer())
        mission = network.coordinator.create_mission(make_mission())
        skills_only = MatchWeights(
            skill_match=1.0, location_proximity=0, experience=0, availability=0, resource_fit=0,
        )

        match = MatchScorer(weights=skills_only).score(volunteer, mission)

        assert match.match_score == pytest.approx(match.match_factors.skill_match)


class TestResourceFit:
    def test_nothing_required_is_full_fit(self, network, make_volunteer, make_mission):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(resources=[]))
        mission = network.coordinator.create_mission(make_mission(required_resources=[]))
        assert ResourceLedger.resource_fit(volunteer, mission) == 100

    def test_only_available_resources_count(self, network, make_volunteer, make_mission):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(resources=[
            Resource(id="R-1", name="Truck", type=ResourceType.VEHICLE),
            Resource(
                id="R-2", name="Radio", type=ResourceType.COMMUNICATION,
                availability=ResourceAvailability.MAINTENANCE,
            ),
        ]))
        mission = network.coordinator.create_mission(make_mission(required_resources=[
            ResourceRequirement(type=ResourceType.VEHICLE),
            ResourceRequirement(type=ResourceType.COMMUNICATION),
        ]))
        assert ResourceLedger.resource_fit(volunteer, mission) == 50
