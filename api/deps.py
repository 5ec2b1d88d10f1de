"""
Shared API dependencies.
"""

from fastapi import Request

from services.network import VolunteerNetwork
from services.ledger_store import LedgerStore


def get_network(request: Request) -> VolunteerNetwork:
    """The network instance built at startup."""
    return request.app.state.network


def get_ledger_store(request: Request) -> LedgerStore:
    return request.app.state.ledger_store
