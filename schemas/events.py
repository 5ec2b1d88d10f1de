"""
Typed event payloads, one model per topic.

Every event names the entity it concerns through `entity_id`; the bus keeps
per-entity emission order.
"""

from datetime import datetime
from typing import Optional, List, Literal, Union, Annotated

from pydantic import BaseModel, Field

from .volunteer import AvailabilityStatus, Certification
from .mission import MissionStatus, MissionPriority
from .recognition import RecognitionAward, ResourceLoan


class BaseEvent(BaseModel):
    occurred_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def entity_id(self) -> str:
        raise NotImplementedError


class VolunteerStatusChanged(BaseEvent):
    topic: Literal["volunteer-status-changed"] = "volunteer-status-changed"
    volunteer_id: str
    previous_status: AvailabilityStatus
    status: AvailabilityStatus

    @property
    def entity_id(self) -> str:
        return self.volunteer_id


class MissionStatusChanged(BaseEvent):
    topic: Literal["mission-status-changed"] = "mission-status-changed"
    mission_id: str
    previous_status: MissionStatus
    status: MissionStatus

    @property
    def entity_id(self) -> str:
        return self.mission_id


class MissionCompleted(BaseEvent):
    topic: Literal["mission-completed"] = "mission-completed"
    mission_id: str
    priority: MissionPriority
    assigned_volunteers: List[str]
    actual_duration: float
    points_per_volunteer: int

    @property
    def entity_id(self) -> str:
        return self.mission_id


class VolunteersCoordinated(BaseEvent):
    topic: Literal["volunteer-coordination"] = "volunteer-coordination"
    mission_id: str
    candidate_ids: List[str]
    recommended_ids: List[str]

    @property
    def entity_id(self) -> str:
        return self.mission_id


class ResourceShared(BaseEvent):
    topic: Literal["resource-shared"] = "resource-shared"
    loan: ResourceLoan

    @property
    def entity_id(self) -> str:
        return self.loan.resource_id


class ResourceReturned(BaseEvent):
    topic: Literal["resource-returned"] = "resource-returned"
    loan: ResourceLoan

    @property
    def entity_id(self) -> str:
        return self.loan.resource_id


class PointsAwarded(BaseEvent):
    topic: Literal["points-awarded"] = "points-awarded"
    volunteer_id: str
    points: int
    reason: str
    balance: int

    @property
    def entity_id(self) -> str:
        return self.volunteer_id


class AwardsEarned(BaseEvent):
    topic: Literal["awards-earned"] = "awards-earned"
    volunteer_id: str
    new_awards: List[RecognitionAward]

    @property
    def entity_id(self) -> str:
        return self.volunteer_id


class TrainingCompleted(BaseEvent):
    topic: Literal["training-completed"] = "training-completed"
    volunteer_id: str
    program_id: str
    score: float
    certification: Optional[Certification] = None

    @property
    def entity_id(self) -> str:
        return self.volunteer_id


NetworkEvent = Annotated[
    Union[
        VolunteerStatusChanged,
        MissionStatusChanged,
        MissionCompleted,
        VolunteersCoordinated,
        ResourceShared,
        ResourceReturned,
        PointsAwarded,
        AwardsEarned,
        TrainingCompleted,
    ],
    Field(discriminator="topic"),
]
