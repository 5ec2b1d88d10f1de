"""
Status feeds and the periodic tick.

A feed yields status reports since its last poll. The ticker polls every
feed on a fixed interval, applies the reports through the coordinator,
expires overdue loans and then drains the event bus.
"""

import asyncio
import logging
import random
from collections import deque
from datetime import datetime
from typing import Callable, Deque, List, Optional, Sequence, Union

from schemas.volunteer import AvailabilityStatus
from schemas.mission import MissionStatus
from schemas.status import VolunteerStatusReport, MissionStatusReport
from services.registry import NetworkRegistry
from services.event_bus import EventBus
from services.mission_coordinator import MissionCoordinator
from services.resource_ledger import ResourceLedger

logger = logging.getLogger(__name__)

Report = Union[VolunteerStatusReport, MissionStatusReport]


class StatusFeed:
    """Source of inbound status reports."""

    def poll(self) -> List[Report]:
        raise NotImplementedError


class QueuedStatusFeed(StatusFeed):
    """Buffers reports pushed by collaborators until the next poll."""

    def __init__(self):
        self._queue: Deque[Report] = deque()

    def push(self, report: Report) -> None:
        self._queue.append(report)

    def poll(self) -> List[Report]:
        reports = []
        while self._queue:
            reports.append(self._queue.popleft())
        return reports


class SimulatedStatusFeed(StatusFeed):
    """
    Random status flux for demos and load testing.

    Each poll flips every volunteer to a random status with probability
    `volunteer_flux_probability`, and completes each in-progress mission
    with probability `mission_completion_probability` using the estimated
    duration plus or minus up to one hour.
    """

    def __init__(
        self,
        registry: NetworkRegistry,
        rng: Optional[random.Random] = None,
        volunteer_flux_probability: float = 0.1,
        mission_completion_probability: float = 0.05,
    ):
        self.registry = registry
        self.rng = rng or random.Random()
        self.volunteer_flux_probability = volunteer_flux_probability
        self.mission_completion_probability = mission_completion_probability

    def poll(self) -> List[Report]:
        reports: List[Report] = []
        statuses = list(AvailabilityStatus)

        for volunteer in self.registry.list_volunteers():
            if self.rng.random() < self.volunteer_flux_probability:
                reports.append(VolunteerStatusReport(
                    volunteer_id=volunteer.id,
                    status=self.rng.choice(statuses),
                ))

        for mission in self.registry.list_missions():
            if mission.status != MissionStatus.IN_PROGRESS:
                continue
            if self.rng.random() < self.mission_completion_probability:
                duration = mission.estimated_duration + self.rng.uniform(-1, 1)
                reports.append(MissionStatusReport(
                    mission_id=mission.id,
                    status=MissionStatus.COMPLETED,
                    actual_duration=max(0.0, duration),
                ))

        return reports


class StatusTicker:
    """Periodic driver for feeds, loan expiry and event delivery."""

    def __init__(
        self,
        coordinator: MissionCoordinator,
        ledger: ResourceLedger,
        bus: EventBus,
        feeds: Sequence[StatusFeed] = (),
        interval_seconds: float = 30.0,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.coordinator = coordinator
        self.ledger = ledger
        self.bus = bus
        self.feeds = list(feeds)
        self.interval_seconds = interval_seconds
        self.clock = clock

    async def tick(self) -> int:
        """Run one cycle. Returns the number of reports applied."""
        applied = 0
        for feed in self.feeds:
            reports = feed.poll()
            if reports:
                applied += self.coordinator.apply_status_reports(reports)

        expired = self.ledger.expire_loans(self.clock())
        if expired:
            logger.info(f"Expired {len(expired)} resource loans")

        await self.bus.drain()
        return applied

    async def run(self) -> None:
        logger.info(f"Status ticker started ({self.interval_seconds}s interval)")
        try:
            while True:
                try:
                    await self.tick()
                except Exception:
                    logger.exception("Status tick failed")
                await asyncio.sleep(self.interval_seconds)
        finally:
            logger.info("Status ticker stopped")
