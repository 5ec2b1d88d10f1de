"""
Training Program API Routes
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_network
from services.network import VolunteerNetwork
from schemas.common import StatusResponse
from schemas.volunteer import Certification
from schemas.training import (
    TrainingProgram, TrainingProgramCreate, EnrollmentRequest, TrainingCompletionRequest,
)

router = APIRouter()


@router.post("", response_model=TrainingProgram, status_code=201)
async def create_program(
    data: TrainingProgramCreate,
    network: VolunteerNetwork = Depends(get_network)
):
    return network.training.create_program(data)


@router.get("", response_model=List[TrainingProgram])
async def list_programs(network: VolunteerNetwork = Depends(get_network)):
    return network.registry.list_programs()


@router.post("/{program_id}/enrollments", response_model=StatusResponse)
async def enroll(
    program_id: str,
    data: EnrollmentRequest,
    network: VolunteerNetwork = Depends(get_network)
):
    """Enroll a volunteer. Rejected when full, already enrolled or missing prerequisites."""
    if not network.training.enroll_in_training(data.volunteer_id, program_id):
        raise HTTPException(status_code=409, detail="Enrollment rejected")
    return StatusResponse(success=True, message=f"{data.volunteer_id} enrolled in {program_id}")


@router.post("/{program_id}/completions", response_model=Optional[Certification])
async def complete_training(
    program_id: str,
    data: TrainingCompletionRequest,
    network: VolunteerNetwork = Depends(get_network)
):
    """Record a completion. Returns the issued certification, if any."""
    certification = network.training.complete_training(data.volunteer_id, program_id, data.score)
    await network.bus.drain()
    return certification
