"""
Inbound status reports driving the periodic tick.
"""

from typing import Optional, Literal, Union, Annotated

from pydantic import BaseModel, Field

from .volunteer import AvailabilityStatus
from .mission import MissionStatus


class VolunteerStatusReport(BaseModel):
    kind: Literal["volunteer"] = "volunteer"
    volunteer_id: str
    status: AvailabilityStatus


class MissionStatusReport(BaseModel):
    kind: Literal["mission"] = "mission"
    mission_id: str
    status: MissionStatus
    actual_duration: Optional[float] = Field(None, ge=0)


StatusReport = Annotated[
    Union[VolunteerStatusReport, MissionStatusReport],
    Field(discriminator="kind"),
]
