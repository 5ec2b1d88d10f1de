"""
Composition root for one volunteer network.

Builds the registry, bus and every service on top of them from settings.
The FastAPI app keeps one instance on `app.state.network`.
"""

import random
from datetime import datetime
from typing import Callable, Optional

from config import Settings, get_settings
from services.registry import NetworkRegistry
from services.event_bus import EventBus
from services.schedule_index import ScheduleIndex
from services.skill_catalog import SkillCatalog
from services.match_scorer import MatchScorer
from services.recognition_service import RecognitionEngine
from services.resource_ledger import ResourceLedger
from services.mission_coordinator import MissionCoordinator
from services.training_service import TrainingService
from services.risk_aggregator import RiskAggregator
from services.status_feed import QueuedStatusFeed, SimulatedStatusFeed, StatusTicker


class VolunteerNetwork:
    """All services of one network, sharing a registry and an event bus."""

    def __init__(
        self,
        registry: NetworkRegistry,
        bus: EventBus,
        recognition: RecognitionEngine,
        ledger: ResourceLedger,
        scorer: MatchScorer,
        coordinator: MissionCoordinator,
        training: TrainingService,
        risk: RiskAggregator,
        status_feed: QueuedStatusFeed,
        ticker: StatusTicker,
    ):
        self.registry = registry
        self.bus = bus
        self.recognition = recognition
        self.ledger = ledger
        self.scorer = scorer
        self.coordinator = coordinator
        self.training = training
        self.risk = risk
        self.status_feed = status_feed
        self.ticker = ticker

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> "VolunteerNetwork":
        settings = settings or get_settings()

        registry = NetworkRegistry()
        bus = EventBus()
        recognition = RecognitionEngine(registry, bus, clock=clock)
        ledger = ResourceLedger(
            registry, bus, recognition,
            share_points=settings.resource_share_points,
            clock=clock,
        )
        scorer = MatchScorer(
            weights=settings.match_weights,
            skills=SkillCatalog(),
            schedule=ScheduleIndex(
                empty_schedule_score=settings.empty_schedule_score,
                miss_score=settings.schedule_miss_score,
                emergency_override_score=settings.emergency_override_score,
            ),
            recommendation_threshold=settings.recommendation_threshold,
            emergency_speed_kmh=settings.emergency_speed_kmh,
        )
        coordinator = MissionCoordinator(
            registry, bus, scorer, recognition,
            min_match_score=settings.min_match_score,
            candidate_multiplier=settings.candidate_multiplier,
            points_base=settings.mission_points_base,
            points_high_bonus=settings.mission_points_high_bonus,
            points_critical_bonus=settings.mission_points_critical_bonus,
            clock=clock,
        )
        training = TrainingService(
            registry, bus, recognition,
            pass_score=settings.certification_pass_score,
            validity_days=settings.certification_validity_days,
            clock=clock,
        )
        risk = RiskAggregator(
            weights=settings.risk_weights,
            radius_km=settings.risk_assessment_radius_km,
            clock=clock,
        )

        status_feed = QueuedStatusFeed()
        feeds = [status_feed]
        if settings.simulate_status_flux:
            feeds.append(SimulatedStatusFeed(
                registry,
                rng=random.Random(settings.simulation_seed),
                volunteer_flux_probability=settings.volunteer_flux_probability,
                mission_completion_probability=settings.mission_completion_probability,
            ))
        ticker = StatusTicker(
            coordinator, ledger, bus,
            feeds=feeds,
            interval_seconds=settings.status_tick_seconds,
            clock=clock,
        )

        return cls(
            registry=registry,
            bus=bus,
            recognition=recognition,
            ledger=ledger,
            scorer=scorer,
            coordinator=coordinator,
            training=training,
            risk=risk,
            status_feed=status_feed,
            ticker=ticker,
        )
