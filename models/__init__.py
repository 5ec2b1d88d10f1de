"""
Database Models for the Volunteer Network ledger
"""

from .base import (
    Base,
    get_engine,
    get_session_factory,
    create_engine_for,
    create_session_factory,
    init_db,
    dispose_engine,
)
from .ledger import AwardRecord, PointsTransaction, ResourceLoanRecord

__all__ = [
    "Base",
    "get_engine",
    "get_session_factory",
    "create_engine_for",
    "create_session_factory",
    "init_db",
    "dispose_engine",
    "AwardRecord",
    "PointsTransaction",
    "ResourceLoanRecord",
]
