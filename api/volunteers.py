"""
Volunteer API Routes
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_network, get_ledger_store
from services.network import VolunteerNetwork
from services.ledger_store import LedgerStore
from schemas.volunteer import (
    Volunteer, VolunteerCreate, VolunteerStatusUpdate, AvailabilityStatus, Certification,
)
from schemas.recognition import (
    RecognitionAward, PointsAwardRequest, PointsBalance, PointsHistoryEntry,
)

router = APIRouter()


# ==================== Enrollment ====================

@router.post("", response_model=Volunteer, status_code=201)
async def enroll_volunteer(
    data: VolunteerCreate,
    network: VolunteerNetwork = Depends(get_network)
):
    """Enroll a volunteer in the network."""
    return network.coordinator.enroll_volunteer(data)


@router.get("", response_model=List[Volunteer])
async def list_volunteers(
    status: Optional[AvailabilityStatus] = None,
    network: VolunteerNetwork = Depends(get_network)
):
    """List volunteers, optionally filtered by availability status."""
    volunteers = network.registry.list_volunteers()
    if status is not None:
        volunteers = [v for v in volunteers if v.availability.status == status]
    return volunteers


@router.get("/{volunteer_id}", response_model=Volunteer)
async def get_volunteer(
    volunteer_id: str,
    network: VolunteerNetwork = Depends(get_network)
):
    volunteer = network.registry.get_volunteer(volunteer_id)
    if not volunteer:
        raise HTTPException(status_code=404, detail="Volunteer not found")
    return volunteer


@router.patch("/{volunteer_id}/status", response_model=Volunteer)
async def update_volunteer_status(
    volunteer_id: str,
    data: VolunteerStatusUpdate,
    network: VolunteerNetwork = Depends(get_network)
):
    """Update a volunteer's availability status."""
    volunteer = network.coordinator.update_volunteer_status(volunteer_id, data.status)
    await network.bus.drain()
    return volunteer


@router.post("/{volunteer_id}/certifications", response_model=Certification, status_code=201)
async def add_certification(
    volunteer_id: str,
    data: Certification,
    network: VolunteerNetwork = Depends(get_network)
):
    """Record a certification issued outside the network's own training."""
    certification = network.training.record_certification(volunteer_id, data)
    await network.bus.drain()
    return certification


# ==================== Recognition ====================

@router.get("/{volunteer_id}/points", response_model=PointsBalance)
async def get_points(
    volunteer_id: str,
    network: VolunteerNetwork = Depends(get_network)
):
    return PointsBalance(
        volunteer_id=volunteer_id,
        balance=network.recognition.points_balance(volunteer_id),
        awards=network.recognition.awards_for(volunteer_id),
    )


@router.post("/{volunteer_id}/points", response_model=PointsBalance)
async def award_points(
    volunteer_id: str,
    data: PointsAwardRequest,
    network: VolunteerNetwork = Depends(get_network)
):
    """Credit points to a volunteer and evaluate milestones."""
    network.recognition.award_points(volunteer_id, data.points, data.reason)
    await network.bus.drain()
    return PointsBalance(
        volunteer_id=volunteer_id,
        balance=network.recognition.points_balance(volunteer_id),
        awards=network.recognition.awards_for(volunteer_id),
    )


@router.get("/{volunteer_id}/awards", response_model=List[RecognitionAward])
async def list_awards(
    volunteer_id: str,
    network: VolunteerNetwork = Depends(get_network)
):
    return network.recognition.awards_for(volunteer_id)


@router.post("/{volunteer_id}/achievements/check", response_model=List[RecognitionAward])
async def check_achievements(
    volunteer_id: str,
    network: VolunteerNetwork = Depends(get_network)
):
    """Evaluate milestones. Returns only awards granted by this call."""
    new_awards = network.recognition.check_achievements(volunteer_id)
    await network.bus.drain()
    return new_awards


@router.get("/{volunteer_id}/points/history", response_model=List[PointsHistoryEntry])
async def get_points_history(
    volunteer_id: str,
    network: VolunteerNetwork = Depends(get_network),
    store: LedgerStore = Depends(get_ledger_store)
):
    """Persisted points transactions, oldest first."""
    network.registry.require_volunteer(volunteer_id)
    return await store.points_history(volunteer_id)
