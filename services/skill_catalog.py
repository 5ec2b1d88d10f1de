"""
Skill level comparison and the skill sub-score.
"""

from typing import List, Optional

import numpy as np

from schemas.volunteer import Skill, SkillLevel

SKILL_LEVEL_RANK = {
    SkillLevel.BASIC: 1,
    SkillLevel.INTERMEDIATE: 2,
    SkillLevel.ADVANCED: 3,
    SkillLevel.EXPERT: 4,
}

MEETS_LEVEL_SCORE = 100.0
ONE_BELOW_SCORE = 70.0
UNDERQUALIFIED_SCORE = 30.0
MISSING_SKILL_SCORE = 0.0


class SkillCatalog:
    """Scores a volunteer's skills against a mission's required skills."""

    @staticmethod
    def find_matching(volunteer_skills: List[Skill], required: Skill) -> Optional[Skill]:
        for skill in volunteer_skills:
            if skill.name == required.name and skill.category == required.category:
                return skill
        return None

    @staticmethod
    def level_score(volunteer_level: SkillLevel, required_level: SkillLevel) -> float:
        gap = SKILL_LEVEL_RANK[required_level] - SKILL_LEVEL_RANK[volunteer_level]
        if gap <= 0:
            return MEETS_LEVEL_SCORE
        if gap == 1:
            return ONE_BELOW_SCORE
        return UNDERQUALIFIED_SCORE

    def required_skill_score(self, volunteer_skills: List[Skill], required: Skill) -> float:
        matching = self.find_matching(volunteer_skills, required)
        if matching is None:
            return MISSING_SKILL_SCORE
        return self.level_score(matching.level, required.level)

    def skill_match(self, volunteer_skills: List[Skill], required_skills: List[Skill]) -> float:
        """Mean per-requirement score; 100 when nothing is required."""
        if not required_skills:
            return 100.0
        scores = [self.required_skill_score(volunteer_skills, req) for req in required_skills]
        return float(np.mean(scores))
