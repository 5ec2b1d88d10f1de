"""
Disaster Risk Aggregation Service

Handles:
- Converting raw hazard readings into risk factors (severity, confidence)
- Per-category and overall risk scores (weighted, normalised to [0, 100])
- Per-disaster-type probability predictions from combined factor severities

Read-only: nothing here touches volunteer or mission state.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

import numpy as np

from config import RiskWeights
from schemas.common import GeoPoint
from schemas.risk import (
    RiskObservation, RiskFactor, RiskFactorType, RiskSignal,
    DisasterPrediction, DisasterType, PredictionSeverity, PredictionTimeframe,
    RiskAssessment,
)
from services.geo_math import haversine_km

logger = logging.getLogger(__name__)

# Reading thresholds above which a factor is raised
WIND_THRESHOLD_MS = 15
RAINFALL_THRESHOLD_MM_H = 10
HEAT_THRESHOLD_C = 35
COLD_THRESHOLD_C = -10
MIN_QUAKE_MAGNITUDE = 2.0
HISTORICAL_SEISMIC_THRESHOLD = 30
WILDFIRE_INDEX_THRESHOLD = 40
AQI_THRESHOLD = 150
FLOOD_TERRAIN_THRESHOLD = 50
POPULATION_DENSITY_THRESHOLD = 1000  # people per km²
TRAFFIC_THRESHOLD = 70
HAZARDOUS_FACILITY_TYPES = {"nuclear", "chemical"}


def _clamp(value: float) -> float:
    return float(max(0.0, min(100.0, value)))


def _urgency(probability: float) -> str:
    if probability > 70:
        return "critical"
    if probability > 50:
        return "high"
    if probability > 30:
        return "medium"
    return "low"


class RiskAggregator:
    """Multi-factor disaster risk scoring."""

    def __init__(
        self,
        weights: Optional[RiskWeights] = None,
        radius_km: float = 100.0,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.weights = weights or RiskWeights()
        self.radius_km = radius_km
        self.clock = clock

    # ==================== Factors ====================

    def _factor(
        self,
        kind: RiskFactorType,
        signal: RiskSignal,
        severity: float,
        confidence: float,
        source: str,
        description: str,
        radius_km: Optional[float] = None,
    ) -> RiskFactor:
        return RiskFactor(
            type=kind,
            signal=signal,
            severity=_clamp(severity),
            confidence=_clamp(confidence),
            source=source,
            radius_km=self.radius_km if radius_km is None else radius_km,
            description=description,
            timestamp=self.clock(),
        )

    def build_factors(self, location: GeoPoint, obs: RiskObservation) -> List[RiskFactor]:
        factors: List[RiskFactor] = []
        factors.extend(self._weather_factors(obs))
        factors.extend(self._geological_factors(location, obs))
        factors.extend(self._environmental_factors(obs))
        factors.extend(self._social_factors(obs))
        factors.extend(self._infrastructure_factors(obs))
        return factors

    def _weather_factors(self, obs: RiskObservation) -> List[RiskFactor]:
        factors = []
        kind = RiskFactorType.WEATHER

        if obs.wind_speed_ms is not None and obs.wind_speed_ms > WIND_THRESHOLD_MS:
            factors.append(self._factor(
                kind, RiskSignal.HIGH_WIND, (obs.wind_speed_ms - WIND_THRESHOLD_MS) * 5, 85,
                "OpenWeatherMap", f"High winds detected: {obs.wind_speed_ms} m/s",
            ))

        if obs.rainfall_mm_h is not None and obs.rainfall_mm_h > RAINFALL_THRESHOLD_MM_H:
            factors.append(self._factor(
                kind, RiskSignal.HEAVY_RAINFALL, obs.rainfall_mm_h * 3, 90,
                "OpenWeatherMap", f"Heavy rainfall: {obs.rainfall_mm_h} mm/h",
            ))

        temp = obs.temperature_c
        if temp is not None and temp > HEAT_THRESHOLD_C:
            factors.append(self._factor(
                kind, RiskSignal.EXTREME_HEAT, (temp - HEAT_THRESHOLD_C) * 2, 95,
                "OpenWeatherMap", f"Extreme temperature: {temp:.1f}°C",
            ))
        elif temp is not None and temp < COLD_THRESHOLD_C:
            factors.append(self._factor(
                kind, RiskSignal.EXTREME_COLD, (COLD_THRESHOLD_C - temp) * 2, 95,
                "OpenWeatherMap", f"Extreme temperature: {temp:.1f}°C",
            ))

        if obs.thunderstorm_forecasts > 0:
            factors.append(self._factor(
                kind, RiskSignal.THUNDERSTORM, 60, 75,
                "OpenWeatherMap Forecast",
                f"Thunderstorm predicted in {obs.thunderstorm_forecasts} forecast window(s)",
            ))
        return factors

    def _geological_factors(self, location: GeoPoint, obs: RiskObservation) -> List[RiskFactor]:
        factors = []
        kind = RiskFactorType.GEOLOGICAL

        for quake in obs.earthquakes:
            distance = haversine_km(location.lat, location.lng, quake.lat, quake.lng)
            if distance <= self.radius_km and quake.magnitude >= MIN_QUAKE_MAGNITUDE:
                factors.append(self._factor(
                    kind, RiskSignal.SEISMIC_ACTIVITY, quake.magnitude * 15, 90, "USGS",
                    f"Earthquake M{quake.magnitude:.1f} at {distance:.1f}km distance",
                    radius_km=distance,
                ))

        historical = obs.historical_seismic_risk
        if historical is not None and historical > HISTORICAL_SEISMIC_THRESHOLD:
            factors.append(self._factor(
                kind, RiskSignal.HISTORICAL_SEISMICITY, historical, 70,
                "Historical Analysis", "High historical seismic activity in region",
            ))
        return factors

    def _environmental_factors(self, obs: RiskObservation) -> List[RiskFactor]:
        factors = []
        kind = RiskFactorType.ENVIRONMENTAL

        if obs.wildfire_index is not None and obs.wildfire_index > WILDFIRE_INDEX_THRESHOLD:
            factors.append(self._factor(
                kind, RiskSignal.WILDFIRE_CONDITIONS, obs.wildfire_index, 80, "NASA VIIRS",
                "Elevated wildfire risk based on vegetation and weather conditions",
            ))

        if obs.air_quality_index is not None and obs.air_quality_index > AQI_THRESHOLD:
            factors.append(self._factor(
                kind, RiskSignal.AIR_QUALITY, (obs.air_quality_index - 100) / 2, 85,
                "Air Quality API", f"Poor air quality: AQI {obs.air_quality_index:.0f}",
            ))

        if obs.flood_terrain_risk is not None and obs.flood_terrain_risk > FLOOD_TERRAIN_THRESHOLD:
            factors.append(self._factor(
                kind, RiskSignal.FLOOD_TERRAIN, obs.flood_terrain_risk, 75,
                "Elevation & Rainfall Analysis",
                "Flood risk based on topography and precipitation patterns",
            ))
        return factors

    def _social_factors(self, obs: RiskObservation) -> List[RiskFactor]:
        factors = []
        kind = RiskFactorType.SOCIAL

        density = obs.population_density
        if density is not None and density > POPULATION_DENSITY_THRESHOLD:
            factors.append(self._factor(
                kind, RiskSignal.POPULATION_DENSITY, density / 50, 80, "Census Data",
                f"High population density: {density:.0f} people/km²",
            ))

        for event in obs.large_events:
            if event.expected_attendance <= 0:
                continue
            factors.append(self._factor(
                kind, RiskSignal.LARGE_GATHERING, event.expected_attendance / 1000, 70, "Event APIs",
                f"Large event: {event.name} ({event.expected_attendance} attendees)",
            ))
        return factors

    def _infrastructure_factors(self, obs: RiskObservation) -> List[RiskFactor]:
        factors = []
        kind = RiskFactorType.INFRASTRUCTURE

        for facility in obs.critical_facilities:
            if facility.type not in HAZARDOUS_FACILITY_TYPES:
                continue
            severity = 80 - facility.distance_km * 2
            if severity <= 0:
                continue
            factors.append(self._factor(
                kind, RiskSignal.HAZARDOUS_FACILITY, severity, 90, "Infrastructure Database",
                f"{facility.type} facility within {facility.distance_km}km",
                radius_km=facility.distance_km,
            ))

        if obs.traffic_congestion is not None and obs.traffic_congestion > TRAFFIC_THRESHOLD:
            factors.append(self._factor(
                kind, RiskSignal.TRAFFIC_CONGESTION, obs.traffic_congestion, 85, "Traffic Analysis",
                "High traffic congestion affecting evacuation routes",
            ))
        return factors

    # ==================== Scores ====================

    @staticmethod
    def _strongest(factors: List[RiskFactor], signal: RiskSignal) -> Optional[RiskFactor]:
        matching = [f for f in factors if f.signal == signal]
        return max(matching, key=lambda f: f.severity) if matching else None

    def category_scores(self, factors: List[RiskFactor]) -> Dict[RiskFactorType, float]:
        """Strongest confidence-weighted severity per category, 0 when absent."""
        scores = {category: 0.0 for category in RiskFactorType}
        for factor in factors:
            weighted = factor.severity * factor.confidence / 100
            scores[factor.type] = max(scores[factor.type], weighted)
        return scores

    def overall_risk(self, category_scores: Dict[RiskFactorType, float]) -> float:
        weights = self.weights.model_dump()
        categories = list(RiskFactorType)
        values = np.array([category_scores.get(c, 0.0) for c in categories])
        w = np.array([weights[c.value] for c in categories])
        return _clamp(float(np.average(values, weights=w)))

    # ==================== Predictions ====================

    def _prediction(
        self,
        disaster_type: DisasterType,
        probability: float,
        timeframe: tuple,
        severity: PredictionSeverity,
        confidence: float,
        radius_km: float,
        factors: List[RiskFactor],
    ) -> DisasterPrediction:
        probability = _clamp(probability)
        low, high, peak = timeframe
        return DisasterPrediction(
            disaster_type=disaster_type,
            probability=probability,
            timeframe=PredictionTimeframe(min=low, max=high, peak=peak),
            severity=severity,
            confidence=confidence,
            affected_radius_km=radius_km,
            urgency=_urgency(probability),
            risk_factors=factors,
        )

    def predict(self, factors: List[RiskFactor]) -> List[DisasterPrediction]:
        predictions: List[DisasterPrediction] = []
        rain = self._strongest(factors, RiskSignal.HEAVY_RAINFALL)
        wind = self._strongest(factors, RiskSignal.HIGH_WIND)
        heat = self._strongest(factors, RiskSignal.EXTREME_HEAT)
        cold = self._strongest(factors, RiskSignal.EXTREME_COLD)
        quake = self._strongest(factors, RiskSignal.SEISMIC_ACTIVITY)
        historical = self._strongest(factors, RiskSignal.HISTORICAL_SEISMICITY)
        fire = self._strongest(factors, RiskSignal.WILDFIRE_CONDITIONS)

        if rain:
            predictions.append(self._prediction(
                DisasterType.FLOOD, min(rain.severity + 20, 95), (2, 24, 8),
                PredictionSeverity.HIGH if rain.severity > 70 else PredictionSeverity.MODERATE,
                80, 25, [rain],
            ))

        if wind and wind.severity > 60:
            predictions.append(self._prediction(
                DisasterType.STORM, min(wind.severity + 20, 95), (1, 12, 4),
                PredictionSeverity.HIGH if wind.severity > 80 else PredictionSeverity.MODERATE,
                85, 40, [wind],
            ))

        temperature = heat or cold
        if temperature:
            predictions.append(self._prediction(
                DisasterType.HEATWAVE if heat else DisasterType.BLIZZARD,
                min(temperature.severity + 15, 90), (6, 72, 24),
                PredictionSeverity.HIGH if temperature.severity > 75 else PredictionSeverity.MODERATE,
                90, 100, [temperature],
            ))

        if quake and quake.severity > 40:
            predictions.append(self._prediction(
                DisasterType.EARTHQUAKE, min(quake.severity, 75), (1, 168, 72),
                PredictionSeverity.HIGH if quake.severity > 70 else PredictionSeverity.MODERATE,
                70, 150, [quake],
            ))

        if rain and historical and rain.severity > 50:
            combined = (rain.severity + historical.severity) / 2
            predictions.append(self._prediction(
                DisasterType.LANDSLIDE, min(combined, 80), (4, 48, 12),
                PredictionSeverity.HIGH if rain.severity > 70 else PredictionSeverity.MODERATE,
                75, 20, [rain, historical],
            ))

        if fire or (wind and heat):
            combined = fire.severity if fire else (wind.severity + heat.severity) / 2
            if combined > 70:
                severity = PredictionSeverity.EXTREME
            elif combined > 50:
                severity = PredictionSeverity.HIGH
            else:
                severity = PredictionSeverity.MODERATE
            predictions.append(self._prediction(
                DisasterType.WILDFIRE, min(combined + 20, 95), (2, 96, 24),
                severity, 80, 80, [f for f in (fire, wind, heat) if f is not None],
            ))

        predictions.sort(key=lambda p: p.probability, reverse=True)
        return predictions

    # ==================== Public ====================

    def assess(self, location: GeoPoint, observation: RiskObservation) -> RiskAssessment:
        factors = self.build_factors(location, observation)
        categories = self.category_scores(factors)
        overall = self.overall_risk(categories)
        predictions = self.predict(factors)

        logger.info(
            f"Risk at ({location.lat}, {location.lng}): {len(factors)} factors, "
            f"overall {overall:.1f}, {len(predictions)} predictions"
        )
        return RiskAssessment(
            location=location,
            assessed_at=self.clock(),
            factors=factors,
            category_scores=categories,
            overall_risk=overall,
            predictions=predictions,
        )
