"""
Mission schemas and derived match results.
"""

from datetime import datetime
from typing import Optional, List
from enum import Enum

from pydantic import BaseModel, Field

from .common import BaseSchema, Location
from .volunteer import Skill, ResourceType, Volunteer


class MissionType(str, Enum):
    EMERGENCY = "emergency"
    TRAINING = "training"
    COMMUNITY_SERVICE = "community-service"
    PREPARATION = "preparation"


class MissionPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MissionStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MissionDifficulty(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    CHALLENGING = "challenging"
    EXPERT = "expert"


class ResourceRequirement(BaseSchema):
    """A resource type the mission needs a volunteer to bring."""
    type: ResourceType
    quantity: int = Field(default=1, ge=1)
    description: Optional[str] = None


class MissionCreate(BaseModel):
    id: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    type: MissionType = MissionType.EMERGENCY
    priority: MissionPriority = MissionPriority.MEDIUM
    location: Location
    required_skills: List[Skill] = []
    required_resources: List[ResourceRequirement] = []
    volunteers_needed: int = Field(..., ge=1)
    created_by: Optional[str] = None
    start_time: datetime
    estimated_duration: float = Field(..., gt=0, description="Estimated duration (hours)")
    difficulty: MissionDifficulty = MissionDifficulty.MODERATE
    safety_rating: float = Field(default=5, ge=0, le=10)


class Mission(MissionCreate, BaseSchema):
    id: str
    status: MissionStatus = MissionStatus.OPEN
    assigned_volunteers: List[str] = []
    created_at: datetime
    actual_duration: Optional[float] = None
    completed_at: Optional[datetime] = None


class MissionAssignmentRequest(BaseModel):
    volunteer_id: str


class MissionTransitionRequest(BaseModel):
    status: MissionStatus
    actual_duration: Optional[float] = Field(None, ge=0)


class MatchFactors(BaseSchema):
    """Sub-scores of one compatibility score, each in [0, 100]."""
    skill_match: float = Field(..., ge=0, le=100)
    location_proximity: float = Field(..., ge=0, le=100)
    availability: float = Field(..., ge=0, le=100)
    experience: float = Field(..., ge=0, le=100)
    resource_fit: float = Field(..., ge=0, le=100)


class VolunteerMatch(BaseSchema):
    """Derived, never stored: one volunteer scored against one mission."""
    volunteer: Volunteer
    mission: Mission
    match_score: float = Field(..., ge=0, le=100)
    match_factors: MatchFactors
    distance_km: float
    estimated_travel_time: int = Field(..., description="Minutes at emergency speed")
    recommended: bool = False
