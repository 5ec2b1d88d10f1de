"""
Resource Ledger Service

Handles:
- Short-term resource loans between volunteers
- Loan return and expiry
- The resource-fit sub-score for mission matching

A resource is lent only from the `available` state, so a second share of a
resource that is already `in-use` is always rejected.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from schemas.volunteer import Volunteer, ResourceAvailability
from schemas.mission import Mission
from schemas.recognition import ResourceLoan, LoanStatus
from schemas.events import ResourceShared, ResourceReturned
from services.registry import NetworkRegistry
from services.event_bus import EventBus
from services.recognition_service import RecognitionEngine
from exceptions import NotFoundError
from config import PointReasons

logger = logging.getLogger(__name__)


class ResourceLedger:
    """Tracks resource availability and loans."""

    def __init__(
        self,
        registry: NetworkRegistry,
        bus: EventBus,
        recognition: RecognitionEngine,
        share_points: int = 10,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.registry = registry
        self.bus = bus
        self.recognition = recognition
        self.share_points = share_points
        self.clock = clock
        self._loans: Dict[str, ResourceLoan] = {}

    # ==================== Loans ====================

    def share_resource(
        self,
        owner_id: str,
        resource_id: str,
        recipient_id: str,
        duration_hours: float,
    ) -> bool:
        """Lend an available resource. Returns False without side effects on rejection."""
        owner = self.registry.get_volunteer(owner_id)
        recipient = self.registry.get_volunteer(recipient_id)
        if owner is None or recipient is None:
            logger.warning(f"Share rejected: unknown owner {owner_id} or recipient {recipient_id}")
            return False
        if owner_id == recipient_id:
            logger.warning(f"Share rejected: {owner_id} cannot lend to themselves")
            return False
        if duration_hours <= 0:
            logger.warning(f"Share rejected: non-positive duration {duration_hours}")
            return False

        with self.registry.lock_for("resource", resource_id):
            resource = owner.find_resource(resource_id)
            if resource is None:
                logger.warning(f"Share rejected: {owner_id} does not own resource {resource_id}")
                return False
            if resource.availability != ResourceAvailability.AVAILABLE:
                logger.warning(
                    f"Share rejected: resource {resource_id} is {resource.availability.value}"
                )
                return False

            resource.availability = ResourceAvailability.IN_USE
            start = self.clock()
            loan = ResourceLoan(
                id=f"LOAN-{uuid.uuid4().hex[:8].upper()}",
                resource_id=resource_id,
                owner_id=owner_id,
                recipient_id=recipient_id,
                start_date=start,
                end_date=start + timedelta(hours=duration_hours),
            )
            self._loans[loan.id] = loan

        self.bus.publish(ResourceShared(loan=loan.model_copy()))
        logger.info(
            f"Resource {resource_id} lent by {owner_id} to {recipient_id} until {loan.end_date.isoformat()}"
        )

        self.recognition.award_points(owner_id, self.share_points, PointReasons.RESOURCE_SHARING)
        return True

    def return_resource(self, loan_id: str) -> bool:
        """Close an active loan early. False if it is already closed."""
        loan = self._loans.get(loan_id)
        if loan is None:
            raise NotFoundError("loan", loan_id)
        return self._close(loan, LoanStatus.RETURNED)

    def expire_loans(self, now: Optional[datetime] = None) -> List[ResourceLoan]:
        """Close every active loan whose end date has passed."""
        now = now or self.clock()
        expired = []
        for loan in list(self._loans.values()):
            if loan.status == LoanStatus.ACTIVE and loan.end_date <= now:
                if self._close(loan, LoanStatus.EXPIRED, now):
                    expired.append(loan)
        return expired

    def _close(self, loan: ResourceLoan, status: LoanStatus, now: Optional[datetime] = None) -> bool:
        with self.registry.lock_for("resource", loan.resource_id):
            if loan.status != LoanStatus.ACTIVE:
                logger.warning(f"Loan {loan.id} is already {loan.status.value}")
                return False
            loan.status = status
            loan.closed_at = now or self.clock()

            owner = self.registry.get_volunteer(loan.owner_id)
            resource = owner.find_resource(loan.resource_id) if owner else None
            if resource is not None and resource.availability == ResourceAvailability.IN_USE:
                resource.availability = ResourceAvailability.AVAILABLE

        self.bus.publish(ResourceReturned(loan=loan.model_copy()))
        logger.info(f"Loan {loan.id} {status.value}; resource {loan.resource_id} available")
        return True

    def get_loan(self, loan_id: str) -> ResourceLoan:
        loan = self._loans.get(loan_id)
        if loan is None:
            raise NotFoundError("loan", loan_id)
        return loan

    def active_loans(self) -> List[ResourceLoan]:
        return [loan for loan in self._loans.values() if loan.status == LoanStatus.ACTIVE]

    # ==================== Matching ====================

    @staticmethod
    def resource_fit(volunteer: Volunteer, mission: Mission) -> float:
        """Percentage of required resource types the volunteer holds as available."""
        if not mission.required_resources:
            return 100.0

        held = {
            resource.type
            for resource in volunteer.resources
            if resource.availability == ResourceAvailability.AVAILABLE
        }
        covered = sum(1 for req in mission.required_resources if req.type in held)
        return covered / len(mission.required_resources) * 100
