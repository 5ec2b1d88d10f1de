"""
Volunteer schemas: skills, weekly schedule, experience, certifications,
resources and preferences.
"""

from datetime import datetime
from typing import Optional, List
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from .common import BaseSchema, GeoPoint, Location


class SkillCategory(str, Enum):
    MEDICAL = "medical"
    RESCUE = "rescue"
    LOGISTICS = "logistics"
    COMMUNICATION = "communication"
    TECHNICAL = "technical"
    SUPPORT = "support"


class SkillLevel(str, Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    ON_MISSION = "on-mission"
    OFFLINE = "offline"


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"


class CertificationLevel(str, Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ResourceType(str, Enum):
    VEHICLE = "vehicle"
    EQUIPMENT = "equipment"
    SUPPLIES = "supplies"
    SHELTER = "shelter"
    COMMUNICATION = "communication"


class ResourceCondition(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_REPAIR = "needs-repair"


class ResourceAvailability(str, Enum):
    AVAILABLE = "available"
    IN_USE = "in-use"
    MAINTENANCE = "maintenance"


class CommunicationMethod(str, Enum):
    PHONE = "phone"
    SMS = "sms"
    EMAIL = "email"
    APP = "app"


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_CLOCK_PATTERN = r"^(?:[01]\d|2[0-3]):[0-5]\d$|^24:00$"


class Skill(BaseSchema):
    name: str = Field(..., min_length=1, max_length=120)
    category: SkillCategory
    level: SkillLevel
    verified: bool = False
    certification_required: bool = False


class TimeSlot(BaseSchema):
    """Availability window within one day, as HH:MM strings."""
    start: str = Field(..., pattern=_CLOCK_PATTERN)
    end: str = Field(..., pattern=_CLOCK_PATTERN)
    recurring: bool = True

    @model_validator(mode="after")
    def _check_order(self):
        # zero-padded HH:MM compares correctly as text
        if self.start >= self.end:
            raise ValueError(f"Time slot must end after it starts ({self.start}-{self.end})")
        return self


class WeeklySchedule(BaseSchema):
    monday: List[TimeSlot] = []
    tuesday: List[TimeSlot] = []
    wednesday: List[TimeSlot] = []
    thursday: List[TimeSlot] = []
    friday: List[TimeSlot] = []
    saturday: List[TimeSlot] = []
    sunday: List[TimeSlot] = []

    def slots_for(self, day: str) -> List[TimeSlot]:
        if day not in WEEKDAYS:
            raise ValueError(f"Unknown day key: {day}")
        return getattr(self, day)


class Availability(BaseSchema):
    status: AvailabilityStatus = AvailabilityStatus.AVAILABLE
    schedule: WeeklySchedule = Field(default_factory=WeeklySchedule)
    emergency_only: bool = False


class Experience(BaseSchema):
    level: ExperienceLevel = ExperienceLevel.BEGINNER
    total_hours: float = Field(default=0, ge=0)
    completed_missions: int = Field(default=0, ge=0)
    specializations: List[str] = []


class Certification(BaseSchema):
    id: Optional[str] = None
    name: str
    issuer: str
    issue_date: datetime
    expiry_date: Optional[datetime] = None
    verified: bool = False
    level: CertificationLevel = CertificationLevel.BASIC
    skills: List[str] = []


class Resource(BaseSchema):
    id: str
    name: str
    type: ResourceType
    description: str = ""
    quantity: int = Field(default=1, ge=0)
    condition: ResourceCondition = ResourceCondition.GOOD
    availability: ResourceAvailability = ResourceAvailability.AVAILABLE
    location: Optional[GeoPoint] = None


class Preferences(BaseSchema):
    max_distance: float = Field(default=25, gt=0, description="Maximum travel distance (km)")
    communication_method: CommunicationMethod = CommunicationMethod.APP
    languages: List[str] = []
    working_with_children: bool = False
    physical_capabilities: List[str] = []


class VolunteerCreate(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Location
    skills: List[Skill] = []
    availability: Availability = Field(default_factory=Availability)
    experience: Experience = Field(default_factory=Experience)
    certifications: List[Certification] = []
    resources: List[Resource] = []
    preferences: Preferences = Field(default_factory=Preferences)
    rating: float = Field(default=0, ge=0, le=5)


class Volunteer(VolunteerCreate, BaseSchema):
    id: str
    joined_date: datetime
    last_active: datetime

    @property
    def status(self) -> AvailabilityStatus:
        return self.availability.status

    def find_resource(self, resource_id: str) -> Optional[Resource]:
        for resource in self.resources:
            if resource.id == resource_id:
                return resource
        return None


class VolunteerStatusUpdate(BaseModel):
    status: AvailabilityStatus
