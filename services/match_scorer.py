"""
Volunteer/mission compatibility scoring.

matchScore = sum(weight_i * subscore_i) over skill match, location
proximity, experience, availability and resource fit. Every sub-score is
clamped to [0, 100] and the weights sum to 1.0 (enforced by
`config.MatchWeights`), so the result stays in [0, 100].
"""

from typing import Optional

from config import MatchWeights
from schemas.volunteer import Volunteer, AvailabilityStatus, ExperienceLevel
from schemas.mission import Mission, MatchFactors, VolunteerMatch
from services.geo_math import distance_km, travel_time_hours, DEFAULT_EMERGENCY_SPEED_KMH
from services.schedule_index import ScheduleIndex
from services.skill_catalog import SkillCatalog
from services.resource_ledger import ResourceLedger

EXPERIENCE_LEVEL_SCORES = {
    ExperienceLevel.BEGINNER: 20,
    ExperienceLevel.INTERMEDIATE: 60,
    ExperienceLevel.EXPERT: 100,
}

# Hours and missions at which each experience component saturates
HOURS_FOR_FULL_CREDIT = 100
MISSIONS_FOR_FULL_CREDIT = 20


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


class MatchScorer:
    """Combines the sub-scores into one compatibility score per pair."""

    def __init__(
        self,
        weights: Optional[MatchWeights] = None,
        skills: Optional[SkillCatalog] = None,
        schedule: Optional[ScheduleIndex] = None,
        recommendation_threshold: float = 70.0,
        emergency_speed_kmh: float = DEFAULT_EMERGENCY_SPEED_KMH,
    ):
        self.weights = weights or MatchWeights()
        self.skills = skills or SkillCatalog()
        self.schedule = schedule or ScheduleIndex()
        self.recommendation_threshold = recommendation_threshold
        self.emergency_speed_kmh = emergency_speed_kmh

    # ==================== Sub-scores ====================

    @staticmethod
    def proximity_score(distance: float, max_distance: float) -> float:
        """Linear falloff to 0 at the volunteer's maximum distance."""
        return max(0.0, 100 - (distance / max_distance) * 100)

    @staticmethod
    def experience_score(volunteer: Volunteer) -> float:
        experience = volunteer.experience
        hours_part = min(experience.total_hours / HOURS_FOR_FULL_CREDIT * 100, 100)
        missions_part = min(experience.completed_missions / MISSIONS_FOR_FULL_CREDIT * 100, 100)
        level_part = EXPERIENCE_LEVEL_SCORES[experience.level]
        return min(100.0, 0.3 * hours_part + 0.3 * missions_part + 0.4 * level_part)

    def availability_score(self, volunteer: Volunteer, mission: Mission) -> float:
        if volunteer.availability.status != AvailabilityStatus.AVAILABLE:
            return 0.0
        return self.schedule.availability_score(volunteer.availability, mission)

    def factors(self, volunteer: Volunteer, mission: Mission, distance: float) -> MatchFactors:
        return MatchFactors(
            skill_match=_clamp(self.skills.skill_match(volunteer.skills, mission.required_skills)),
            location_proximity=_clamp(
                self.proximity_score(distance, volunteer.preferences.max_distance)
            ),
            availability=_clamp(self.availability_score(volunteer, mission)),
            experience=_clamp(self.experience_score(volunteer)),
            resource_fit=_clamp(ResourceLedger.resource_fit(volunteer, mission)),
        )

    def combine(self, factors: MatchFactors) -> float:
        w = self.weights
        total = (
            w.skill_match * factors.skill_match
            + w.location_proximity * factors.location_proximity
            + w.experience * factors.experience
            + w.availability * factors.availability
            + w.resource_fit * factors.resource_fit
        )
        return _clamp(total)

    # ==================== Public ====================

    def score(self, volunteer: Volunteer, mission: Mission) -> VolunteerMatch:
        """Score one pair. Eligibility filtering is the caller's job."""
        distance = distance_km(volunteer.location, mission.location)
        factors = self.factors(volunteer, mission, distance)
        match_score = self.combine(factors)

        return VolunteerMatch(
            volunteer=volunteer,
            mission=mission,
            match_score=match_score,
            match_factors=factors,
            distance_km=round(distance, 3),
            estimated_travel_time=round(
                travel_time_hours(distance, self.emergency_speed_kmh) * 60
            ),
            recommended=match_score > self.recommendation_threshold,
        )
