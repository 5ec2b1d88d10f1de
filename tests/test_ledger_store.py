"""Tests for persisted recognition and loan history."""

import pytest

from models.base import create_engine_for, create_session_factory, init_db
from schemas.volunteer import Experience, Resource, ResourceType
from schemas.events import AwardsEarned
from services.ledger_store import LedgerStore


@pytest.fixture
async def store(network):
    engine = create_engine_for("sqlite+aiosqlite:///:memory:")
    await init_db(engine)

    ledger_store = LedgerStore(create_session_factory(engine))
    ledger_store.attach(network.bus)
    yield ledger_store

    await engine.dispose()


class TestLedgerStore:
    async def test_points_history(self, network, store, make_volunteer):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer())
        network.recognition.award_points(volunteer.id, 10, "resource-sharing")
        network.recognition.award_points(volunteer.id, 30, "mission-completion")
        await network.bus.drain()

        history = await store.points_history(volunteer.id)

        assert [(h.points, h.reason, h.balance_after) for h in history] == [
            (10, "resource-sharing", 10),
            (30, "mission-completion", 40),
        ]

    async def test_awards_persisted(self, network, store, make_volunteer):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(
            experience=Experience(completed_missions=1),
        ))
        network.recognition.check_achievements(volunteer.id)
        await network.bus.drain()

        [award] = await store.list_awards(volunteer.id)

        assert award.name == "First Mission"
        assert award.points == 50
        assert award.criteria == "Complete 1 mission"

    async def test_replayed_award_skipped(self, network, store, make_volunteer):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(
            experience=Experience(completed_missions=1),
        ))
        [award] = network.recognition.check_achievements(volunteer.id)
        network.bus.publish(AwardsEarned(volunteer_id=volunteer.id, new_awards=[award]))
        await network.bus.drain()

        assert len(await store.list_awards(volunteer.id)) == 1

    async def test_loan_lifecycle(self, network, store, make_volunteer):
        owner = network.coordinator.enroll_volunteer(make_volunteer(resources=[
            Resource(id="RES-1", name="Chainsaw", type=ResourceType.EQUIPMENT),
        ]))
        recipient = network.coordinator.enroll_volunteer(make_volunteer())
        network.ledger.share_resource(owner.id, "RES-1", recipient.id, 6)
        [loan] = network.ledger.active_loans()
        await network.bus.drain()

        assert await store.loan_status(loan.id) == "active"

        network.ledger.return_resource(loan.id)
        await network.bus.drain()

        assert await store.loan_status(loan.id) == "returned"
