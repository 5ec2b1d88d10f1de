"""
In-memory registries of volunteers, missions and training programs.

One `NetworkRegistry` is the single owner of these collections. Every
check-then-act sequence on an entity runs under that entity's lock from
`lock_for`.
"""

import threading
from collections import defaultdict
from typing import Dict, List, Optional

from schemas.volunteer import Volunteer
from schemas.mission import Mission
from schemas.training import TrainingProgram
from exceptions import NotFoundError, InvalidStateError


class NetworkRegistry:
    """Id-keyed collections plus per-entity locks."""

    def __init__(self):
        self._volunteers: Dict[str, Volunteer] = {}
        self._missions: Dict[str, Mission] = {}
        self._programs: Dict[str, TrainingProgram] = {}
        self._locks: Dict[str, threading.RLock] = defaultdict(threading.RLock)
        self._locks_guard = threading.Lock()

    def lock_for(self, kind: str, entity_id: str) -> threading.RLock:
        with self._locks_guard:
            return self._locks[f"{kind}:{entity_id}"]

    # ==================== Volunteers ====================

    def add_volunteer(self, volunteer: Volunteer) -> Volunteer:
        if volunteer.id in self._volunteers:
            raise InvalidStateError(f"Duplicate volunteer id: {volunteer.id}")
        self._volunteers[volunteer.id] = volunteer
        return volunteer

    def get_volunteer(self, volunteer_id: str) -> Optional[Volunteer]:
        return self._volunteers.get(volunteer_id)

    def require_volunteer(self, volunteer_id: str) -> Volunteer:
        volunteer = self._volunteers.get(volunteer_id)
        if volunteer is None:
            raise NotFoundError("volunteer", volunteer_id)
        return volunteer

    def list_volunteers(self) -> List[Volunteer]:
        return list(self._volunteers.values())

    # ==================== Missions ====================

    def add_mission(self, mission: Mission) -> Mission:
        if mission.id in self._missions:
            raise InvalidStateError(f"Duplicate mission id: {mission.id}")
        self._missions[mission.id] = mission
        return mission

    def get_mission(self, mission_id: str) -> Optional[Mission]:
        return self._missions.get(mission_id)

    def require_mission(self, mission_id: str) -> Mission:
        mission = self._missions.get(mission_id)
        if mission is None:
            raise NotFoundError("mission", mission_id)
        return mission

    def list_missions(self) -> List[Mission]:
        return list(self._missions.values())

    # ==================== Training ====================

    def add_program(self, program: TrainingProgram) -> TrainingProgram:
        if program.id in self._programs:
            raise InvalidStateError(f"Duplicate training program id: {program.id}")
        self._programs[program.id] = program
        return program

    def require_program(self, program_id: str) -> TrainingProgram:
        program = self._programs.get(program_id)
        if program is None:
            raise NotFoundError("training program", program_id)
        return program

    def list_programs(self) -> List[TrainingProgram]:
        return list(self._programs.values())
