"""
Recognition and resource-sharing history.

Rows are append-only records written from bus events; the live balances
and loans stay in memory.
"""

from sqlalchemy import Column, String, Integer, DateTime, Text, UniqueConstraint, Index

from .base import Base


class AwardRecord(Base):
    """An achievement granted to a volunteer. One per (volunteer, name)."""

    __tablename__ = "award_records"
    __table_args__ = (
        UniqueConstraint("volunteer_id", "name", name="uq_award_volunteer_name"),
    )

    award_id = Column(String(50), unique=True, nullable=False)
    volunteer_id = Column(String(50), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    award_type = Column(String(30), nullable=False)
    rarity = Column(String(30), nullable=False)
    category = Column(String(100))
    description = Column(Text)
    criteria = Column(Text)
    points = Column(Integer, default=0)
    earned_date = Column(DateTime, nullable=False)


class PointsTransaction(Base):
    """One credit to a volunteer's points balance."""

    __tablename__ = "points_transactions"
    __table_args__ = (
        Index("ix_points_volunteer_time", "volunteer_id", "occurred_at"),
    )

    volunteer_id = Column(String(50), nullable=False)
    points = Column(Integer, nullable=False)
    reason = Column(String(100), nullable=False)
    balance_after = Column(Integer, nullable=False)
    occurred_at = Column(DateTime, nullable=False)


class ResourceLoanRecord(Base):
    """Lifecycle of a resource loan between two volunteers."""

    __tablename__ = "resource_loans"

    loan_id = Column(String(50), unique=True, nullable=False)
    resource_id = Column(String(100), nullable=False, index=True)
    owner_id = Column(String(50), nullable=False)
    recipient_id = Column(String(50), nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default="active")
    closed_at = Column(DateTime)
