"""
Disaster risk aggregation schemas.
"""

from datetime import datetime
from typing import Optional, List, Dict
from enum import Enum

from pydantic import BaseModel, Field

from .common import BaseSchema, GeoPoint


class RiskFactorType(str, Enum):
    WEATHER = "weather"
    GEOLOGICAL = "geological"
    ENVIRONMENTAL = "environmental"
    SOCIAL = "social"
    INFRASTRUCTURE = "infrastructure"


class RiskSignal(str, Enum):
    """What a risk factor measures; predictions key off these."""
    HIGH_WIND = "high_wind"
    HEAVY_RAINFALL = "heavy_rainfall"
    EXTREME_HEAT = "extreme_heat"
    EXTREME_COLD = "extreme_cold"
    THUNDERSTORM = "thunderstorm"
    SEISMIC_ACTIVITY = "seismic_activity"
    HISTORICAL_SEISMICITY = "historical_seismicity"
    WILDFIRE_CONDITIONS = "wildfire_conditions"
    AIR_QUALITY = "air_quality"
    FLOOD_TERRAIN = "flood_terrain"
    POPULATION_DENSITY = "population_density"
    LARGE_GATHERING = "large_gathering"
    HAZARDOUS_FACILITY = "hazardous_facility"
    TRAFFIC_CONGESTION = "traffic_congestion"


class DisasterType(str, Enum):
    FLOOD = "flood"
    EARTHQUAKE = "earthquake"
    WILDFIRE = "wildfire"
    STORM = "storm"
    TORNADO = "tornado"
    TSUNAMI = "tsunami"
    LANDSLIDE = "landslide"
    HEATWAVE = "heatwave"
    BLIZZARD = "blizzard"


class PredictionSeverity(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    EXTREME = "extreme"


class SeismicEvent(BaseModel):
    magnitude: float = Field(..., ge=0)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    depth_km: Optional[float] = None
    occurred_at: Optional[datetime] = None
    place: Optional[str] = None


class LargeEvent(BaseModel):
    name: str
    expected_attendance: int = Field(..., ge=0)


class CriticalFacility(BaseModel):
    type: str
    distance_km: float = Field(..., ge=0)


class RiskObservation(BaseModel):
    """Raw readings from the hazard collaborators. Every reading is optional."""
    wind_speed_ms: Optional[float] = Field(None, ge=0)
    rainfall_mm_h: Optional[float] = Field(None, ge=0)
    temperature_c: Optional[float] = None
    thunderstorm_forecasts: int = Field(default=0, ge=0)
    earthquakes: List[SeismicEvent] = []
    historical_seismic_risk: Optional[float] = Field(None, ge=0, le=100)
    wildfire_index: Optional[float] = Field(None, ge=0)
    air_quality_index: Optional[float] = Field(None, ge=0)
    flood_terrain_risk: Optional[float] = Field(None, ge=0)
    population_density: Optional[float] = Field(None, ge=0)
    large_events: List[LargeEvent] = []
    critical_facilities: List[CriticalFacility] = []
    traffic_congestion: Optional[float] = Field(None, ge=0, le=100)


class RiskFactor(BaseSchema):
    type: RiskFactorType
    signal: RiskSignal
    severity: float = Field(..., ge=0, le=100)
    confidence: float = Field(..., ge=0, le=100)
    source: str
    radius_km: float
    description: str
    timestamp: datetime


class PredictionTimeframe(BaseModel):
    min: float
    max: float
    peak: float


class DisasterPrediction(BaseSchema):
    disaster_type: DisasterType
    probability: float = Field(..., ge=0, le=100)
    timeframe: PredictionTimeframe
    severity: PredictionSeverity
    confidence: float = Field(..., ge=0, le=100)
    affected_radius_km: float
    urgency: str
    risk_factors: List[RiskFactor]


class RiskAssessmentRequest(BaseModel):
    location: GeoPoint
    observation: RiskObservation


class RiskAssessment(BaseSchema):
    location: GeoPoint
    assessed_at: datetime
    factors: List[RiskFactor]
    category_scores: Dict[RiskFactorType, float]
    overall_risk: float = Field(..., ge=0, le=100)
    predictions: List[DisasterPrediction]
