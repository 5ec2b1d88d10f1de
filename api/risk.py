"""
Disaster Risk API Routes
"""

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_network
from services.network import VolunteerNetwork
from services.hazard_feed_service import HazardFeedService
from schemas.common import GeoPoint
from schemas.risk import RiskAssessment, RiskAssessmentRequest

router = APIRouter()


@router.post("/assess", response_model=RiskAssessment)
async def assess_risk(
    data: RiskAssessmentRequest,
    network: VolunteerNetwork = Depends(get_network)
):
    """Score the supplied observation for a location."""
    return network.risk.assess(data.location, data.observation)


@router.get("/live", response_model=RiskAssessment)
async def assess_live_risk(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    network: VolunteerNetwork = Depends(get_network)
):
    """Pull current weather and seismic readings and score them."""
    location = GeoPoint(lat=lat, lng=lng)
    feed = HazardFeedService()
    try:
        observation = await feed.collect_observation(location, network.risk.radius_km)
    except (httpx.HTTPError, ValueError) as e:
        raise HTTPException(status_code=502, detail=f"Hazard feed unavailable: {e}")
    return network.risk.assess(location, observation)
