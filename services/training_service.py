"""
Training Program Service

Handles:
- Training program creation
- Enrollment with capacity and prerequisite checks
- Completion: certification, points and achievement checks
- Certifications fed in by external training providers
"""

import logging
import math
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from schemas.volunteer import Certification, CertificationLevel
from schemas.training import TrainingProgram, TrainingProgramCreate, TrainingLevel
from schemas.events import TrainingCompleted
from services.registry import NetworkRegistry
from services.event_bus import EventBus
from services.recognition_service import RecognitionEngine
from config import PointReasons

logger = logging.getLogger(__name__)

CERTIFICATE_ISSUER = "Emergency Response Training"

_CERTIFICATION_LEVELS = {
    TrainingLevel.BEGINNER: CertificationLevel.BASIC,
    TrainingLevel.INTERMEDIATE: CertificationLevel.INTERMEDIATE,
    TrainingLevel.ADVANCED: CertificationLevel.ADVANCED,
}


class TrainingService:
    """Service for volunteer training programs."""

    def __init__(
        self,
        registry: NetworkRegistry,
        bus: EventBus,
        recognition: RecognitionEngine,
        pass_score: float = 80.0,
        validity_days: int = 365,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.registry = registry
        self.bus = bus
        self.recognition = recognition
        self.pass_score = pass_score
        self.validity_days = validity_days
        self.clock = clock

    def create_program(self, data: TrainingProgramCreate) -> TrainingProgram:
        program_data = data.model_dump()
        program_data["id"] = data.id or f"TRN-{uuid.uuid4().hex[:8].upper()}"

        program = self.registry.add_program(TrainingProgram(**program_data))
        logger.info(f"Created training program: {program.id}")
        return program

    def enroll_in_training(self, volunteer_id: str, program_id: str) -> bool:
        """Enroll a volunteer. False when full, already enrolled or missing prerequisites."""
        volunteer = self.registry.require_volunteer(volunteer_id)
        program = self.registry.require_program(program_id)

        with self.registry.lock_for("training", program_id):
            if volunteer_id in program.current_participants:
                logger.warning(f"{volunteer_id} already enrolled in {program_id}")
                return False
            if len(program.current_participants) >= program.max_participants:
                logger.warning(f"Training {program_id} is full")
                return False

            held = {cert.name for cert in volunteer.certifications if cert.verified}
            missing = [req for req in program.prerequisites if req not in held]
            if missing:
                logger.warning(
                    f"{volunteer_id} lacks prerequisites for {program_id}: {', '.join(missing)}"
                )
                return False

            program.current_participants.append(volunteer_id)

        logger.info(f"Enrolled {volunteer_id} in training {program_id}")
        return True

    def complete_training(
        self,
        volunteer_id: str,
        program_id: str,
        score: float,
    ) -> Optional[Certification]:
        """
        Record a completion. Issues the program certification when the score
        passes, awards floor(duration * score / 10) points and re-checks
        achievements. Returns the new certification, if any.
        """
        volunteer = self.registry.require_volunteer(volunteer_id)
        program = self.registry.require_program(program_id)

        certification = None
        if program.certification and score >= self.pass_score:
            now = self.clock()
            certification = Certification(
                id=f"CERT-{uuid.uuid4().hex[:8].upper()}",
                name=program.certification,
                issuer=CERTIFICATE_ISSUER,
                issue_date=now,
                expiry_date=now + timedelta(days=self.validity_days),
                verified=True,
                level=_CERTIFICATION_LEVELS[program.level],
                skills=program.category.value.split("-"),
            )
            self.record_certification(volunteer_id, certification)

        points = math.floor(program.duration_hours * score / 10)
        self.recognition.award_points(volunteer_id, points, PointReasons.TRAINING_COMPLETION)

        self.bus.publish(TrainingCompleted(
            volunteer_id=volunteer.id,
            program_id=program_id,
            score=score,
            certification=certification,
        ))
        logger.info(f"{volunteer_id} completed training {program_id} with score {score}")
        return certification

    def record_certification(self, volunteer_id: str, certification: Certification) -> Certification:
        """Attach a certification and re-check achievements."""
        volunteer = self.registry.require_volunteer(volunteer_id)
        if certification.id is None:
            certification = certification.model_copy(
                update={"id": f"CERT-{uuid.uuid4().hex[:8].upper()}"}
            )

        with self.registry.lock_for("volunteer", volunteer_id):
            volunteer.certifications.append(certification)

        self.recognition.check_achievements(volunteer_id)
        return certification
