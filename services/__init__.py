"""
Services for the Volunteer Network: Coordination & Recognition Engine
"""

from .registry import NetworkRegistry
from .event_bus import EventBus
from .schedule_index import ScheduleIndex
from .skill_catalog import SkillCatalog
from .match_scorer import MatchScorer
from .recognition_service import RecognitionEngine, MilestoneRule, DEFAULT_MILESTONES
from .resource_ledger import ResourceLedger
from .mission_coordinator import MissionCoordinator
from .training_service import TrainingService
from .risk_aggregator import RiskAggregator
from .hazard_feed_service import HazardFeedService
from .status_feed import QueuedStatusFeed, SimulatedStatusFeed, StatusTicker
from .ledger_store import LedgerStore
from .network import VolunteerNetwork

__all__ = [
    "NetworkRegistry",
    "EventBus",
    "ScheduleIndex",
    "SkillCatalog",
    "MatchScorer",
    "RecognitionEngine",
    "MilestoneRule",
    "DEFAULT_MILESTONES",
    "ResourceLedger",
    "MissionCoordinator",
    "TrainingService",
    "RiskAggregator",
    "HazardFeedService",
    "QueuedStatusFeed",
    "SimulatedStatusFeed",
    "StatusTicker",
    "LedgerStore",
    "VolunteerNetwork",
]
