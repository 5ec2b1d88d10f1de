"""
Weekly availability lookups.

Times are compared as integer minutes since midnight, taken from the
mission's wall-clock start time, so no timezone conversion happens here.
A day with no slots counts as open availability and scores
`empty_schedule_score` (50 by default) rather than zero.
"""

from datetime import datetime
from typing import List, Optional

from schemas.volunteer import Availability, TimeSlot, WEEKDAYS
from schemas.mission import Mission, MissionPriority


def clock_to_minutes(value: str) -> int:
    """Convert an HH:MM string to minutes since midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def day_key(moment: datetime) -> str:
    return WEEKDAYS[moment.weekday()]


def minutes_since_midnight(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


class ScheduleIndex:
    """Answers whether a mission window fits a volunteer's weekly schedule."""

    def __init__(
        self,
        empty_schedule_score: float = 50.0,
        miss_score: float = 20.0,
        emergency_override_score: float = 80.0,
    ):
        self.empty_schedule_score = empty_schedule_score
        self.miss_score = miss_score
        self.emergency_override_score = emergency_override_score

    @staticmethod
    def slot_contains(slot: TimeSlot, start_minute: int, duration_minutes: float) -> bool:
        slot_start = clock_to_minutes(slot.start)
        slot_end = clock_to_minutes(slot.end)
        return start_minute >= slot_start and start_minute + duration_minutes <= slot_end

    def find_slot(
        self,
        slots: List[TimeSlot],
        start_minute: int,
        duration_minutes: float,
    ) -> Optional[TimeSlot]:
        for slot in slots:
            if self.slot_contains(slot, start_minute, duration_minutes):
                return slot
        return None

    def fits(self, availability: Availability, start: datetime, duration_hours: float) -> Optional[bool]:
        """
        True if a slot on the start day fully contains the window, False if
        none does, None if the day has no slots at all.
        """
        slots = availability.schedule.slots_for(day_key(start))
        if not slots:
            return None
        return self.find_slot(slots, minutes_since_midnight(start), duration_hours * 60) is not None

    def availability_score(self, availability: Availability, mission: Mission) -> float:
        """Availability sub-score in [0, 100]."""
        fit = self.fits(availability, mission.start_time, mission.estimated_duration)
        if fit is None:
            return self.empty_schedule_score
        if fit:
            return 100.0
        if availability.emergency_only and mission.priority == MissionPriority.CRITICAL:
            return self.emergency_override_score
        return self.miss_score
