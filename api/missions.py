"""
Mission API Routes
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_network
from services.network import VolunteerNetwork
from schemas.mission import (
    Mission, MissionCreate, MissionStatus, MissionPriority, VolunteerMatch,
    MissionAssignmentRequest, MissionTransitionRequest,
)

router = APIRouter()


@router.post("", response_model=Mission, status_code=201)
async def create_mission(
    data: MissionCreate,
    network: VolunteerNetwork = Depends(get_network)
):
    """Create an open mission."""
    return network.coordinator.create_mission(data)


@router.get("", response_model=List[Mission])
async def list_missions(
    status: Optional[MissionStatus] = None,
    priority: Optional[MissionPriority] = None,
    network: VolunteerNetwork = Depends(get_network)
):
    missions = network.registry.list_missions()
    if status is not None:
        missions = [m for m in missions if m.status == status]
    if priority is not None:
        missions = [m for m in missions if m.priority == priority]
    return missions


@router.get("/{mission_id}", response_model=Mission)
async def get_mission(
    mission_id: str,
    network: VolunteerNetwork = Depends(get_network)
):
    mission = network.registry.get_mission(mission_id)
    if not mission:
        raise HTTPException(status_code=404, detail="Mission not found")
    return mission


@router.get("/{mission_id}/matches", response_model=List[VolunteerMatch])
async def coordinate_volunteers(
    mission_id: str,
    network: VolunteerNetwork = Depends(get_network)
):
    """
    Ranked candidate volunteers for a mission.

    Only available volunteers scoring above the minimum are returned, best
    first, at most twice the number of volunteers needed.
    """
    matches = network.coordinator.coordinate_volunteers(mission_id)
    await network.bus.drain()
    return matches


@router.post("/{mission_id}/assignments", response_model=Mission)
async def assign_volunteer(
    mission_id: str,
    data: MissionAssignmentRequest,
    network: VolunteerNetwork = Depends(get_network)
):
    mission = network.coordinator.assign_volunteer(mission_id, data.volunteer_id)
    await network.bus.drain()
    return mission


@router.post("/{mission_id}/transition", response_model=Mission)
async def transition_mission(
    mission_id: str,
    data: MissionTransitionRequest,
    network: VolunteerNetwork = Depends(get_network)
):
    """Move a mission to a new status. Completion credits every assigned volunteer."""
    if not network.coordinator.transition_mission(mission_id, data.status, data.actual_duration):
        mission = network.registry.require_mission(mission_id)
        raise HTTPException(
            status_code=409,
            detail=f"Cannot move mission from {mission.status.value} to {data.status.value}"
        )
    await network.bus.drain()
    return network.registry.require_mission(mission_id)
