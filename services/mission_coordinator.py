"""
Mission Coordination Service

Handles:
- Ranking the available volunteer pool against a mission
- Explicit volunteer assignment
- Mission lifecycle transitions (open -> in-progress -> completed, or cancelled)
- Completion credit: experience, points and achievement checks
- Volunteer availability updates and inbound status reports

Ranking is read-only: it never changes mission or volunteer state.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, List, Optional

from schemas.volunteer import Volunteer, VolunteerCreate, AvailabilityStatus
from schemas.mission import (
    Mission, MissionCreate, MissionStatus, MissionPriority, VolunteerMatch,
)
from schemas.status import VolunteerStatusReport, MissionStatusReport
from schemas.events import (
    VolunteerStatusChanged, MissionStatusChanged, MissionCompleted, VolunteersCoordinated,
)
from services.registry import NetworkRegistry
from services.event_bus import EventBus
from services.match_scorer import MatchScorer
from services.recognition_service import RecognitionEngine
from exceptions import InvalidStateError, NotFoundError
from config import PointReasons

logger = logging.getLogger(__name__)

# Allowed forward transitions; completed and cancelled are terminal
MISSION_TRANSITIONS = {
    MissionStatus.OPEN: {MissionStatus.IN_PROGRESS, MissionStatus.CANCELLED},
    MissionStatus.IN_PROGRESS: {MissionStatus.COMPLETED, MissionStatus.CANCELLED},
    MissionStatus.COMPLETED: set(),
    MissionStatus.CANCELLED: set(),
}


class MissionCoordinator:
    """Matches volunteers to missions and advances their state."""

    def __init__(
        self,
        registry: NetworkRegistry,
        bus: EventBus,
        scorer: MatchScorer,
        recognition: RecognitionEngine,
        min_match_score: float = 30.0,
        candidate_multiplier: int = 2,
        points_base: int = 10,
        points_high_bonus: int = 20,
        points_critical_bonus: int = 30,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.registry = registry
        self.bus = bus
        self.scorer = scorer
        self.recognition = recognition
        self.min_match_score = min_match_score
        self.candidate_multiplier = candidate_multiplier
        self.points_base = points_base
        self.points_high_bonus = points_high_bonus
        self.points_critical_bonus = points_critical_bonus
        self.clock = clock

    # ==================== Enrollment ====================

    def enroll_volunteer(self, data: VolunteerCreate) -> Volunteer:
        now = self.clock()
        volunteer_data = data.model_dump()
        volunteer_data["id"] = data.id or f"VOL-{uuid.uuid4().hex[:8].upper()}"
        volunteer_data["joined_date"] = now
        volunteer_data["last_active"] = now

        volunteer = self.registry.add_volunteer(Volunteer(**volunteer_data))
        logger.info(f"Enrolled volunteer: {volunteer.id}")
        return volunteer

    def create_mission(self, data: MissionCreate) -> Mission:
        mission_data = data.model_dump()
        mission_data["id"] = data.id or f"MSN-{uuid.uuid4().hex[:8].upper()}"
        mission_data["created_at"] = self.clock()

        mission = self.registry.add_mission(Mission(**mission_data))
        logger.info(f"Created mission: {mission.id} ({mission.priority.value})")
        return mission

    # ==================== Matching ====================

    def coordinate_volunteers(self, mission_id: str) -> List[VolunteerMatch]:
        """
        Rank available volunteers for a mission.

        Only volunteers whose status is `available` are scored. Matches at or
        below `min_match_score` are dropped, the rest are sorted by score and
        at most `candidate_multiplier * volunteers_needed` are returned.
        Raises NotFoundError for an unknown mission.
        """
        mission = self.registry.get_mission(mission_id)
        if mission is None:
            raise NotFoundError("mission", mission_id)

        candidates = [
            v for v in self.registry.list_volunteers()
            if v.availability.status == AvailabilityStatus.AVAILABLE
        ]

        matches: List[VolunteerMatch] = []
        for volunteer in candidates:
            try:
                match = self.scorer.score(volunteer, mission)
            except Exception as e:
                logger.warning(f"Skipping volunteer {volunteer.id} for {mission_id}: {e!r}")
                continue
            if match.match_score > self.min_match_score:
                matches.append(match)

        matches.sort(key=lambda m: m.match_score, reverse=True)
        shortlist = matches[: mission.volunteers_needed * self.candidate_multiplier]

        self.bus.publish(VolunteersCoordinated(
            mission_id=mission_id,
            candidate_ids=[m.volunteer.id for m in shortlist],
            recommended_ids=[m.volunteer.id for m in shortlist if m.recommended],
        ))
        logger.info(
            f"Mission {mission_id}: {len(candidates)} available, "
            f"{len(matches)} above threshold, {len(shortlist)} shortlisted"
        )
        return shortlist

    # ==================== Assignment ====================

    def assign_volunteer(self, mission_id: str, volunteer_id: str) -> Mission:
        """Attach a volunteer to a mission; the volunteer goes on-mission."""
        mission = self.registry.require_mission(mission_id)
        volunteer = self.registry.require_volunteer(volunteer_id)

        with self.registry.lock_for("mission", mission_id), \
                self.registry.lock_for("volunteer", volunteer_id):
            if mission.status not in (MissionStatus.OPEN, MissionStatus.IN_PROGRESS):
                raise InvalidStateError(
                    f"Mission {mission_id} is {mission.status.value}; assignments are closed"
                )
            if volunteer_id in mission.assigned_volunteers:
                raise InvalidStateError(f"Volunteer {volunteer_id} already assigned to {mission_id}")
            if len(mission.assigned_volunteers) >= mission.volunteers_needed:
                raise InvalidStateError(f"Mission {mission_id} is fully staffed")
            if volunteer.availability.status != AvailabilityStatus.AVAILABLE:
                raise InvalidStateError(
                    f"Volunteer {volunteer_id} is {volunteer.availability.status.value}"
                )

            mission.assigned_volunteers.append(volunteer_id)
            self._set_status(volunteer, AvailabilityStatus.ON_MISSION)

        logger.info(f"Assigned {volunteer_id} to mission {mission_id}")
        return mission

    # ==================== Lifecycle ====================

    def completion_points(self, priority: MissionPriority) -> int:
        bonus = {
            MissionPriority.CRITICAL: self.points_critical_bonus,
            MissionPriority.HIGH: self.points_high_bonus,
        }.get(priority, 0)
        return self.points_base + bonus

    def transition_mission(
        self,
        mission_id: str,
        status: MissionStatus,
        actual_duration: Optional[float] = None,
    ) -> bool:
        """
        Move a mission forward. Returns False for a transition the current
        state does not allow; a cancelled mission can never complete.
        """
        mission = self.registry.require_mission(mission_id)

        with self.registry.lock_for("mission", mission_id):
            previous = mission.status
            if status not in MISSION_TRANSITIONS[previous]:
                logger.warning(
                    f"Rejected transition {previous.value} -> {status.value} for mission {mission_id}"
                )
                return False

            mission.status = status
            released: List[str] = []
            if status == MissionStatus.COMPLETED:
                mission.actual_duration = (
                    actual_duration if actual_duration is not None else mission.estimated_duration
                )
                mission.completed_at = self.clock()
                self._credit_completion(mission)
            elif status == MissionStatus.CANCELLED:
                released = self._release_volunteers(mission)

        self.bus.publish(MissionStatusChanged(
            mission_id=mission_id, previous_status=previous, status=status,
        ))
        if status == MissionStatus.COMPLETED:
            self.bus.publish(MissionCompleted(
                mission_id=mission_id,
                priority=mission.priority,
                assigned_volunteers=list(mission.assigned_volunteers),
                actual_duration=mission.actual_duration,
                points_per_volunteer=self.completion_points(mission.priority),
            ))
        logger.info(f"Mission {mission_id}: {previous.value} -> {status.value}")
        if released:
            logger.info(f"Released {len(released)} volunteers from cancelled mission {mission_id}")
        return True

    def start_mission(self, mission_id: str) -> bool:
        return self.transition_mission(mission_id, MissionStatus.IN_PROGRESS)

    def complete_mission(self, mission_id: str, actual_duration: Optional[float] = None) -> bool:
        return self.transition_mission(mission_id, MissionStatus.COMPLETED, actual_duration)

    def cancel_mission(self, mission_id: str) -> bool:
        return self.transition_mission(mission_id, MissionStatus.CANCELLED)

    def _credit_completion(self, mission: Mission) -> None:
        points = self.completion_points(mission.priority)
        for volunteer_id in mission.assigned_volunteers:
            volunteer = self.registry.get_volunteer(volunteer_id)
            if volunteer is None:
                logger.warning(f"Assigned volunteer {volunteer_id} vanished from registry")
                continue
            with self.registry.lock_for("volunteer", volunteer_id):
                volunteer.experience.completed_missions += 1
                volunteer.experience.total_hours += mission.actual_duration
                if volunteer.availability.status == AvailabilityStatus.ON_MISSION:
                    self._set_status(volunteer, AvailabilityStatus.AVAILABLE)
            self.recognition.award_points(volunteer_id, points, PointReasons.MISSION_COMPLETION)

    def _release_volunteers(self, mission: Mission) -> List[str]:
        released = []
        for volunteer_id in mission.assigned_volunteers:
            volunteer = self.registry.get_volunteer(volunteer_id)
            if volunteer is None:
                continue
            with self.registry.lock_for("volunteer", volunteer_id):
                if volunteer.availability.status == AvailabilityStatus.ON_MISSION:
                    self._set_status(volunteer, AvailabilityStatus.AVAILABLE)
                    released.append(volunteer_id)
        return released

    # ==================== Volunteer status ====================

    def update_volunteer_status(self, volunteer_id: str, status: AvailabilityStatus) -> Volunteer:
        volunteer = self.registry.require_volunteer(volunteer_id)
        with self.registry.lock_for("volunteer", volunteer_id):
            self._set_status(volunteer, status)
        return volunteer

    def _set_status(self, volunteer: Volunteer, status: AvailabilityStatus) -> None:
        previous = volunteer.availability.status
        volunteer.last_active = self.clock()
        if previous == status:
            return
        volunteer.availability.status = status
        self.bus.publish(VolunteerStatusChanged(
            volunteer_id=volunteer.id, previous_status=previous, status=status,
        ))

    # ==================== Status reports ====================

    def apply_status_report(self, report) -> bool:
        """Apply one inbound report. Failures are logged, never raised."""
        try:
            if isinstance(report, VolunteerStatusReport):
                self.update_volunteer_status(report.volunteer_id, report.status)
                return True
            if isinstance(report, MissionStatusReport):
                return self.transition_mission(
                    report.mission_id, report.status, report.actual_duration
                )
        except NotFoundError as e:
            logger.warning(f"Dropped status report: {e}")
            return False
        logger.warning(f"Unsupported status report: {report!r}")
        return False

    def apply_status_reports(self, reports) -> int:
        return sum(1 for report in reports if self.apply_status_report(report))
