"""
Recognition, points and resource loan schemas.
"""

from datetime import datetime
from typing import Optional, List
from enum import Enum

from pydantic import BaseModel, Field

from .common import BaseSchema


class AwardType(str, Enum):
    BADGE = "badge"
    CERTIFICATE = "certificate"
    ACHIEVEMENT = "achievement"
    MILESTONE = "milestone"


class AwardRarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


class RecognitionAward(BaseSchema):
    id: str
    volunteer_id: str
    type: AwardType
    name: str
    description: str = ""
    criteria: str
    earned_date: datetime
    points: int = Field(..., ge=0)
    rarity: AwardRarity
    category: str


class PointsAwardRequest(BaseModel):
    points: int = Field(..., ge=0)
    reason: str = Field(..., min_length=1, max_length=100)


class PointsBalance(BaseSchema):
    volunteer_id: str
    balance: int
    awards: List[RecognitionAward] = []


class LoanStatus(str, Enum):
    ACTIVE = "active"
    RETURNED = "returned"
    EXPIRED = "expired"


class ResourceLoan(BaseSchema):
    id: str
    resource_id: str
    owner_id: str
    recipient_id: str
    start_date: datetime
    end_date: datetime
    status: LoanStatus = LoanStatus.ACTIVE
    closed_at: Optional[datetime] = None


class ResourceShareRequest(BaseModel):
    owner_id: str
    resource_id: str
    recipient_id: str
    duration_hours: float = Field(..., gt=0)


class PointsHistoryEntry(BaseSchema):
    volunteer_id: str
    points: int
    reason: str
    balance_after: int
    occurred_at: datetime
