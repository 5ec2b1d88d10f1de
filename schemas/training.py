"""
Training program schemas.
"""

from typing import Optional, List
from enum import Enum

from pydantic import BaseModel, Field

from .common import BaseSchema, Location


class TrainingCategory(str, Enum):
    BASIC_SAFETY = "basic-safety"
    FIRST_AID = "first-aid"
    SEARCH_RESCUE = "search-rescue"
    DISASTER_RESPONSE = "disaster-response"
    LEADERSHIP = "leadership"


class TrainingLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class TrainingFormat(str, Enum):
    ONLINE = "online"
    IN_PERSON = "in-person"
    HYBRID = "hybrid"


class TrainingProgramCreate(BaseModel):
    id: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    category: TrainingCategory
    level: TrainingLevel = TrainingLevel.BEGINNER
    duration_hours: float = Field(..., gt=0)
    format: TrainingFormat = TrainingFormat.HYBRID
    prerequisites: List[str] = Field(default=[], description="Names of required verified certifications")
    max_participants: int = Field(..., ge=1)
    instructor: Optional[str] = None
    location: Optional[Location] = None
    certification: Optional[str] = None
    cost: float = Field(default=0, ge=0)


class TrainingProgram(TrainingProgramCreate, BaseSchema):
    id: str
    current_participants: List[str] = []


class EnrollmentRequest(BaseModel):
    volunteer_id: str


class TrainingCompletionRequest(BaseModel):
    volunteer_id: str
    score: float = Field(..., ge=0, le=100)
