"""Tests for points and milestone awards."""

import pytest

from exceptions import NotFoundError
from schemas.volunteer import Experience, Certification
from schemas.recognition import AwardType, AwardRarity
from schemas.events import AwardsEarned, PointsAwarded
from services.recognition_service import RecognitionEngine, MilestoneRule


class TestAwardPoints:
    def test_balance_accumulates(self, network, make_volunteer):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer())
        network.recognition.award_points(volunteer.id, 15, "mission-completion")
        network.recognition.award_points(volunteer.id, 5, "resource-sharing")
        assert network.recognition.points_balance(volunteer.id) == 20

    def test_negative_points_debit_balance(self, network, make_volunteer):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer())
        network.recognition.award_points(volunteer.id, 10, "mission-completion")
        network.recognition.award_points(volunteer.id, -4, "correction")
        assert network.recognition.points_balance(volunteer.id) == 6

    def test_unknown_volunteer(self, network):
        with pytest.raises(NotFoundError):
            network.recognition.award_points("VOL-MISSING", 10, "mission-completion")

    async def test_points_event_carries_balance(self, network, make_volunteer):
        received = []
        network.bus.subscribe(PointsAwarded, received.append)
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(
            experience=Experience(completed_missions=0),
        ))

        network.recognition.award_points(volunteer.id, 25, "training-completion")
        await network.bus.drain()

        assert [(e.points, e.balance) for e in received] == [(25, 25)]


class TestCheckAchievements:
    def test_first_mission_awarded_exactly_once(self, network, make_volunteer):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(
            experience=Experience(completed_missions=1, total_hours=4),
        ))

        first = network.recognition.check_achievements(volunteer.id)
        second = network.recognition.check_achievements(volunteer.id)

        assert [award.name for award in first] == ["First Mission"]
        assert second == []
        assert network.recognition.points_balance(volunteer.id) == 50

    def test_nothing_for_newcomer(self, network, make_volunteer):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(experience=Experience()))
        assert network.recognition.check_achievements(volunteer.id) == []

    def test_several_milestones_at_once(self, network, make_volunteer, fixed_now):
        certifications = [
            Certification(name=f"Cert {i}", issuer="Red Cross", issue_date=fixed_now, verified=True)
            for i in range(3)
        ]
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(
            experience=Experience(completed_missions=12, total_hours=80),
            certifications=certifications,
        ))

        names = {award.name for award in network.recognition.check_achievements(volunteer.id)}

        assert names == {"First Mission", "Dedicated Volunteer", "Time Contributor", "Skilled Responder"}
        assert network.recognition.points_balance(volunteer.id) == 50 + 200 + 300 + 150

    def test_award_metadata(self, network, make_volunteer, fixed_now):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(
            experience=Experience(completed_missions=1),
        ))
        [award] = network.recognition.check_achievements(volunteer.id)
        assert award.id.startswith("AWD-")
        assert award.type == AwardType.BADGE
        assert award.rarity == AwardRarity.COMMON
        assert award.earned_date == fixed_now

    async def test_awards_event_only_when_new(self, network, make_volunteer):
        received = []
        network.bus.subscribe(AwardsEarned, received.append)
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(
            experience=Experience(completed_missions=1),
        ))

        network.recognition.check_achievements(volunteer.id)
        network.recognition.check_achievements(volunteer.id)
        await network.bus.drain()

        assert len(received) == 1


class TestCustomRules:
    def test_duplicate_rule_names_rejected(self, network):
        rule = MilestoneRule(
            name="Helper", description="", criteria="", type=AwardType.BADGE,
            rarity=AwardRarity.COMMON, category="missions", points=1,
        )
        with pytest.raises(ValueError):
            RecognitionEngine(network.registry, network.bus, rules=[rule, rule])
