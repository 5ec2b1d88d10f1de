"""
Volunteer Recognition Service

Handles:
- Points ledger (per-volunteer balance)
- Milestone rules over cumulative volunteer history
- Award issuance with at-most-once-per-name semantics
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel

from schemas.volunteer import Volunteer
from schemas.recognition import AwardType, AwardRarity, RecognitionAward
from schemas.events import PointsAwarded, AwardsEarned
from services.registry import NetworkRegistry
from services.event_bus import EventBus

logger = logging.getLogger(__name__)


class VolunteerHistory(BaseModel):
    """The cumulative figures milestone rules look at."""
    completed_missions: int
    total_hours: float
    certification_count: int

    @classmethod
    def of(cls, volunteer: Volunteer) -> "VolunteerHistory":
        return cls(
            completed_missions=volunteer.experience.completed_missions,
            total_hours=volunteer.experience.total_hours,
            certification_count=len(volunteer.certifications),
        )


class MilestoneRule(BaseModel):
    """A threshold predicate that grants one named award when reached."""
    name: str
    description: str
    criteria: str
    type: AwardType
    rarity: AwardRarity
    category: str
    points: int
    min_missions: int = 0
    min_hours: float = 0
    min_certifications: int = 0

    def is_satisfied(self, history: VolunteerHistory) -> bool:
        return (
            history.completed_missions >= self.min_missions
            and history.total_hours >= self.min_hours
            and history.certification_count >= self.min_certifications
        )


DEFAULT_MILESTONES: List[MilestoneRule] = [
    MilestoneRule(
        name="First Mission",
        description="Completed your first volunteer mission",
        criteria="Complete 1 mission",
        type=AwardType.BADGE,
        rarity=AwardRarity.COMMON,
        category="missions",
        points=50,
        min_missions=1,
    ),
    MilestoneRule(
        name="Dedicated Volunteer",
        description="Completed 10 volunteer missions",
        criteria="Complete 10 missions",
        type=AwardType.CERTIFICATE,
        rarity=AwardRarity.UNCOMMON,
        category="missions",
        points=200,
        min_missions=10,
    ),
    MilestoneRule(
        name="Time Contributor",
        description="Contributed 50+ hours of volunteer service",
        criteria="Volunteer for 50+ hours",
        type=AwardType.MILESTONE,
        rarity=AwardRarity.RARE,
        category="time",
        points=300,
        min_hours=50,
    ),
    MilestoneRule(
        name="Skilled Responder",
        description="Completed 3 or more training certifications",
        criteria="Complete 3+ training programs",
        type=AwardType.BADGE,
        rarity=AwardRarity.UNCOMMON,
        category="training",
        points=150,
        min_certifications=3,
    ),
]


class RecognitionEngine:
    """Points and achievements for volunteers."""

    def __init__(
        self,
        registry: NetworkRegistry,
        bus: EventBus,
        rules: Optional[List[MilestoneRule]] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.registry = registry
        self.bus = bus
        self.rules = list(DEFAULT_MILESTONES if rules is None else rules)
        self.clock = clock
        self._awards: Dict[str, List[RecognitionAward]] = {}
        self._balances: Dict[str, int] = {}

        names = [rule.name for rule in self.rules]
        if len(names) != len(set(names)):
            raise ValueError("Milestone rule names must be unique")

    # ==================== Points ====================

    def award_points(self, volunteer_id: str, points: int, reason: str) -> None:
        """Credit points, announce them, then evaluate milestones."""
        self.registry.require_volunteer(volunteer_id)

        with self.registry.lock_for("volunteer", volunteer_id):
            balance = self._credit(volunteer_id, points)

        self.bus.publish(PointsAwarded(
            volunteer_id=volunteer_id,
            points=points,
            reason=reason,
            balance=balance,
        ))
        logger.info(f"Awarded {points} points to {volunteer_id} ({reason})")

        self.check_achievements(volunteer_id)

    def points_balance(self, volunteer_id: str) -> int:
        self.registry.require_volunteer(volunteer_id)
        return self._balances.get(volunteer_id, 0)

    def _credit(self, volunteer_id: str, points: int) -> int:
        self._balances[volunteer_id] = self._balances.get(volunteer_id, 0) + points
        return self._balances[volunteer_id]

    # ==================== Achievements ====================

    def awards_for(self, volunteer_id: str) -> List[RecognitionAward]:
        self.registry.require_volunteer(volunteer_id)
        return list(self._awards.get(volunteer_id, []))

    def check_achievements(self, volunteer_id: str) -> List[RecognitionAward]:
        """Grant every newly satisfied milestone. Returns only the new awards."""
        volunteer = self.registry.require_volunteer(volunteer_id)

        with self.registry.lock_for("volunteer", volunteer_id):
            existing = self._awards.setdefault(volunteer_id, [])
            held = {award.name for award in existing}
            history = VolunteerHistory.of(volunteer)

            new_awards = [
                self._issue(volunteer_id, rule)
                for rule in self.rules
                if rule.name not in held and rule.is_satisfied(history)
            ]
            existing.extend(new_awards)
            for award in new_awards:
                self._credit(volunteer_id, award.points)

        if new_awards:
            self.bus.publish(AwardsEarned(volunteer_id=volunteer_id, new_awards=new_awards))
            logger.info(
                f"{volunteer_id} earned {', '.join(a.name for a in new_awards)}"
            )
        return new_awards

    def _issue(self, volunteer_id: str, rule: MilestoneRule) -> RecognitionAward:
        return RecognitionAward(
            id=f"AWD-{uuid.uuid4().hex[:8].upper()}",
            volunteer_id=volunteer_id,
            type=rule.type,
            name=rule.name,
            description=rule.description,
            criteria=rule.criteria,
            earned_date=self.clock(),
            points=rule.points,
            rarity=rule.rarity,
            category=rule.category,
        )
