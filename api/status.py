"""
Status Report API Routes
"""

from typing import List

from fastapi import APIRouter, Depends

from api.deps import get_network
from services.network import VolunteerNetwork
from schemas.common import StatusResponse
from schemas.status import StatusReport

router = APIRouter()


@router.post("", response_model=StatusResponse, status_code=202)
async def push_status_reports(
    reports: List[StatusReport],
    network: VolunteerNetwork = Depends(get_network)
):
    """Queue status reports for the next tick."""
    for report in reports:
        network.status_feed.push(report)
    return StatusResponse(success=True, message=f"Queued {len(reports)} status reports")


@router.post("/tick", response_model=StatusResponse)
async def run_tick(network: VolunteerNetwork = Depends(get_network)):
    """Run one status tick now instead of waiting for the interval."""
    applied = await network.ticker.tick()
    return StatusResponse(success=True, message=f"Applied {applied} status reports")
