"""
Ledger Store

Persists recognition and resource-sharing history from bus events:
- awards (skipping any that are already recorded)
- points transactions
- resource loan lifecycle
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from models.ledger import AwardRecord, PointsTransaction, ResourceLoanRecord
from schemas.recognition import RecognitionAward, PointsHistoryEntry, AwardType, AwardRarity
from schemas.events import AwardsEarned, PointsAwarded, ResourceShared, ResourceReturned
from services.event_bus import EventBus

logger = logging.getLogger(__name__)


class LedgerStore:
    """Writes bus events to the history tables and reads them back."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    def attach(self, bus: EventBus) -> None:
        bus.subscribe(AwardsEarned, self.record_awards)
        bus.subscribe(PointsAwarded, self.record_points)
        bus.subscribe(ResourceShared, self.record_loan_opened)
        bus.subscribe(ResourceReturned, self.record_loan_closed)

    # ==================== Writers ====================

    async def record_awards(self, event: AwardsEarned) -> None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(AwardRecord.name).where(AwardRecord.volunteer_id == event.volunteer_id)
            )
            recorded = set(result.scalars().all())

            for award in event.new_awards:
                if award.name in recorded:
                    logger.info(f"Award {award.name!r} already recorded for {award.volunteer_id}")
                    continue
                session.add(AwardRecord(
                    award_id=award.id,
                    volunteer_id=award.volunteer_id,
                    name=award.name,
                    award_type=award.type.value,
                    rarity=award.rarity.value,
                    category=award.category,
                    description=award.description,
                    criteria=award.criteria,
                    points=award.points,
                    earned_date=award.earned_date,
                ))
                recorded.add(award.name)
            await session.commit()

    async def record_points(self, event: PointsAwarded) -> None:
        async with self.session_factory() as session:
            session.add(PointsTransaction(
                volunteer_id=event.volunteer_id,
                points=event.points,
                reason=event.reason,
                balance_after=event.balance,
                occurred_at=event.occurred_at,
            ))
            await session.commit()

    async def record_loan_opened(self, event: ResourceShared) -> None:
        loan = event.loan
        async with self.session_factory() as session:
            session.add(ResourceLoanRecord(
                loan_id=loan.id,
                resource_id=loan.resource_id,
                owner_id=loan.owner_id,
                recipient_id=loan.recipient_id,
                start_date=loan.start_date,
                end_date=loan.end_date,
                status=loan.status.value,
            ))
            await session.commit()

    async def record_loan_closed(self, event: ResourceReturned) -> None:
        loan = event.loan
        async with self.session_factory() as session:
            result = await session.execute(
                select(ResourceLoanRecord).where(ResourceLoanRecord.loan_id == loan.id)
            )
            record = result.scalar_one_or_none()
            if record is None:
                logger.warning(f"Closing unrecorded loan {loan.id}")
                return
            record.status = loan.status.value
            record.closed_at = loan.closed_at
            await session.commit()

    # ==================== Readers ====================

    async def list_awards(self, volunteer_id: str) -> List[RecognitionAward]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(AwardRecord)
                .where(AwardRecord.volunteer_id == volunteer_id)
                .order_by(AwardRecord.earned_date, AwardRecord.id)
            )
            return [
                RecognitionAward(
                    id=record.award_id,
                    volunteer_id=record.volunteer_id,
                    type=AwardType(record.award_type),
                    name=record.name,
                    description=record.description or "",
                    criteria=record.criteria or "",
                    earned_date=record.earned_date,
                    points=record.points or 0,
                    rarity=AwardRarity(record.rarity),
                    category=record.category or "",
                )
                for record in result.scalars().all()
            ]

    async def points_history(self, volunteer_id: str) -> List[PointsHistoryEntry]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(PointsTransaction)
                .where(PointsTransaction.volunteer_id == volunteer_id)
                .order_by(PointsTransaction.occurred_at, PointsTransaction.id)
            )
            return [PointsHistoryEntry.model_validate(row) for row in result.scalars().all()]

    async def loan_status(self, loan_id: str) -> Optional[str]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ResourceLoanRecord.status).where(ResourceLoanRecord.loan_id == loan_id)
            )
            return result.scalar_one_or_none()
