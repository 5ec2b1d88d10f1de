"""
Resource Sharing API Routes
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_network
from services.network import VolunteerNetwork
from schemas.common import StatusResponse
from schemas.recognition import ResourceLoan, ResourceShareRequest

router = APIRouter()


@router.post("/share", response_model=StatusResponse)
async def share_resource(
    data: ResourceShareRequest,
    network: VolunteerNetwork = Depends(get_network)
):
    """Lend an available resource from one volunteer to another."""
    shared = network.ledger.share_resource(
        data.owner_id, data.resource_id, data.recipient_id, data.duration_hours
    )
    if not shared:
        raise HTTPException(status_code=409, detail="Resource could not be shared")
    await network.bus.drain()
    return StatusResponse(
        success=True,
        message=f"Resource {data.resource_id} shared with {data.recipient_id}",
    )


@router.get("/loans", response_model=List[ResourceLoan])
async def list_active_loans(network: VolunteerNetwork = Depends(get_network)):
    return network.ledger.active_loans()


@router.get("/loans/{loan_id}", response_model=ResourceLoan)
async def get_loan(
    loan_id: str,
    network: VolunteerNetwork = Depends(get_network)
):
    return network.ledger.get_loan(loan_id)


@router.post("/loans/{loan_id}/return", response_model=ResourceLoan)
async def return_resource(
    loan_id: str,
    network: VolunteerNetwork = Depends(get_network)
):
    if not network.ledger.return_resource(loan_id):
        raise HTTPException(status_code=409, detail="Loan is already closed")
    await network.bus.drain()
    return network.ledger.get_loan(loan_id)
