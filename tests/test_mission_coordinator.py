"""Tests for ranking, assignment and the mission lifecycle."""

import pytest

from exceptions import NotFoundError, InvalidStateError
from schemas.volunteer import Availability, AvailabilityStatus, Experience, ExperienceLevel
from schemas.mission import MissionStatus, MissionPriority
from schemas.status import VolunteerStatusReport, MissionStatusReport
from schemas.events import MissionCompleted, VolunteersCoordinated, VolunteerStatusChanged


def _collect(bus, event_type):
    received = []
    bus.subscribe(event_type, received.append)
    return received


class TestEnrollment:
    def test_ids_assigned(self, network, make_volunteer, make_mission):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer())
        mission = network.coordinator.create_mission(make_mission())
        assert volunteer.id.startswith("VOL-")
        assert mission.id.startswith("MSN-")
        assert mission.status == MissionStatus.OPEN

    def test_duplicate_id_rejected(self, network, make_volunteer):
        network.coordinator.enroll_volunteer(make_volunteer(id="VOL-1"))
        with pytest.raises(InvalidStateError):
            network.coordinator.enroll_volunteer(make_volunteer(id="VOL-1"))


class TestCoordinateVolunteers:
    def test_unknown_mission(self, network):
        with pytest.raises(NotFoundError):
            network.coordinator.coordinate_volunteers("MSN-MISSING")

    def test_only_available_volunteers_returned(self, network, make_volunteer, make_mission):
        network.coordinator.enroll_volunteer(make_volunteer(id="VOL-FREE"))
        for i, status in enumerate([
            AvailabilityStatus.BUSY, AvailabilityStatus.ON_MISSION, AvailabilityStatus.OFFLINE,
        ]):
            network.coordinator.enroll_volunteer(make_volunteer(
                id=f"VOL-{i}", availability=Availability(status=status),
            ))
        mission = network.coordinator.create_mission(make_mission(volunteers_needed=5))

        matches = network.coordinator.coordinate_volunteers(mission.id)

        assert [m.volunteer.id for m in matches] == ["VOL-FREE"]

    def test_at_most_twice_volunteers_needed(self, network, make_volunteer, make_mission):
        for i in range(6):
            network.coordinator.enroll_volunteer(make_volunteer(id=f"VOL-{i}"))
        mission = network.coordinator.create_mission(make_mission(volunteers_needed=2))

        matches = network.coordinator.coordinate_volunteers(mission.id)

        assert len(matches) == 4

    def test_sorted_best_first(self, network, make_volunteer, make_mission):
        network.coordinator.enroll_volunteer(make_volunteer(
            id="VOL-NOVICE", experience=Experience(level=ExperienceLevel.BEGINNER),
        ))
        network.coordinator.enroll_volunteer(make_volunteer(
            id="VOL-VETERAN",
            experience=Experience(level=ExperienceLevel.EXPERT, total_hours=200, completed_missions=30),
        ))
        mission = network.coordinator.create_mission(make_mission(volunteers_needed=2))

        matches = network.coordinator.coordinate_volunteers(mission.id)

        assert [m.volunteer.id for m in matches] == ["VOL-VETERAN", "VOL-NOVICE"]

    @pytest.mark.parametrize("corrupt", [
        lambda v: setattr(v, "location", None),
        lambda v: setattr(v, "experience", None),
        lambda v: setattr(v.preferences, "max_distance", 0),
    ], ids=["no-location", "no-experience", "zero-max-distance"])
    def test_malformed_record_skipped(self, network, make_volunteer, make_mission, corrupt):
        network.coordinator.enroll_volunteer(make_volunteer(id="VOL-GOOD"))
        bad = network.coordinator.enroll_volunteer(make_volunteer(id="VOL-BAD"))
        corrupt(bad)
        mission = network.coordinator.create_mission(make_mission(volunteers_needed=2))

        matches = network.coordinator.coordinate_volunteers(mission.id)

        assert [m.volunteer.id for m in matches] == ["VOL-GOOD"]
        assert matches[0].match_score >= matches[1].match_score

    def test_below_minimum_dropped(self, network, make_volunteer, make_mission):
        network.coordinator.min_match_score = 99.9
        network.coordinator.enroll_volunteer(make_volunteer())
        mission = network.coordinator.create_mission(make_mission())

        assert network.coordinator.coordinate_volunteers(mission.id) == []

    def test_ranking_leaves_state_untouched(self, network, make_volunteer, make_mission):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer())
        mission = network.coordinator.create_mission(make_mission())

        network.coordinator.coordinate_volunteers(mission.id)

        assert volunteer.availability.status == AvailabilityStatus.AVAILABLE
        assert mission.assigned_volunteers == []

    async def test_publishes_coordination_event(self, network, make_volunteer, make_mission):
        received = _collect(network.bus, VolunteersCoordinated)
        volunteer = network.coordinator.enroll_volunteer(make_volunteer())
        mission = network.coordinator.create_mission(make_mission())

        network.coordinator.coordinate_volunteers(mission.id)
        await network.bus.drain()

        assert len(received) == 1
        assert received[0].candidate_ids == [volunteer.id]


class TestAssignment:
    def test_assignment_puts_volunteer_on_mission(self, network, make_volunteer, make_mission):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer())
        mission = network.coordinator.create_mission(make_mission())

        network.coordinator.assign_volunteer(mission.id, volunteer.id)

        assert mission.assigned_volunteers == [volunteer.id]
        assert volunteer.availability.status == AvailabilityStatus.ON_MISSION

    def test_full_mission_rejects(self, network, make_volunteer, make_mission):
        first = network.coordinator.enroll_volunteer(make_volunteer())
        second = network.coordinator.enroll_volunteer(make_volunteer())
        mission = network.coordinator.create_mission(make_mission(volunteers_needed=1))
        network.coordinator.assign_volunteer(mission.id, first.id)

        with pytest.raises(InvalidStateError):
            network.coordinator.assign_volunteer(mission.id, second.id)

    def test_unavailable_volunteer_rejected(self, network, make_volunteer, make_mission):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer(
            availability=Availability(status=AvailabilityStatus.OFFLINE),
        ))
        mission = network.coordinator.create_mission(make_mission())

        with pytest.raises(InvalidStateError):
            network.coordinator.assign_volunteer(mission.id, volunteer.id)

    def test_closed_mission_rejects(self, network, make_volunteer, make_mission):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer())
        mission = network.coordinator.create_mission(make_mission())
        network.coordinator.cancel_mission(mission.id)

        with pytest.raises(InvalidStateError):
            network.coordinator.assign_volunteer(mission.id, volunteer.id)


class TestLifecycle:
    def _staffed(self, network, make_volunteer, make_mission, **mission_overrides):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer())
        mission = network.coordinator.create_mission(make_mission(**mission_overrides))
        network.coordinator.assign_volunteer(mission.id, volunteer.id)
        return volunteer, mission

    def test_completion_credits_volunteer(self, network, make_volunteer, make_mission):
        volunteer, mission = self._staffed(network, make_volunteer, make_mission)
        missions_before = volunteer.experience.completed_missions
        hours_before = volunteer.experience.total_hours

        assert network.coordinator.start_mission(mission.id)
        assert network.coordinator.complete_mission(mission.id, actual_duration=3.5)

        assert mission.status == MissionStatus.COMPLETED
        assert volunteer.experience.completed_missions == missions_before + 1
        assert volunteer.experience.total_hours == pytest.approx(hours_before + 3.5)
        assert volunteer.availability.status == AvailabilityStatus.AVAILABLE

    def test_completion_defaults_to_estimated_duration(self, network, make_volunteer, make_mission):
        _, mission = self._staffed(network, make_volunteer, make_mission, estimated_duration=6)
        network.coordinator.start_mission(mission.id)
        network.coordinator.complete_mission(mission.id)
        assert mission.actual_duration == 6

    @pytest.mark.parametrize("priority, points", [
        (MissionPriority.CRITICAL, 40),
        (MissionPriority.HIGH, 30),
        (MissionPriority.MEDIUM, 10),
        (MissionPriority.LOW, 10),
    ])
    def test_completion_points_by_priority(self, network, priority, points):
        assert network.coordinator.completion_points(priority) == points

    def test_completion_awards_points_and_first_mission(self, network, make_volunteer, make_mission):
        volunteer, mission = self._staffed(
            network, make_volunteer, make_mission, priority=MissionPriority.CRITICAL,
        )

        network.coordinator.start_mission(mission.id)
        network.coordinator.complete_mission(mission.id)

        names = [award.name for award in network.recognition.awards_for(volunteer.id)]
        assert names == ["First Mission"]
        assert network.recognition.points_balance(volunteer.id) == 40 + 50

    def test_open_mission_cannot_complete(self, network, make_volunteer, make_mission):
        _, mission = self._staffed(network, make_volunteer, make_mission)
        assert network.coordinator.complete_mission(mission.id) is False
        assert mission.status == MissionStatus.OPEN

    async def test_cancelled_mission_never_completes(self, network, make_volunteer, make_mission):
        completed = _collect(network.bus, MissionCompleted)
        volunteer, mission = self._staffed(network, make_volunteer, make_mission)
        network.coordinator.start_mission(mission.id)

        assert network.coordinator.cancel_mission(mission.id)
        assert network.coordinator.complete_mission(mission.id) is False
        await network.bus.drain()

        assert completed == []
        assert volunteer.experience.completed_missions == 0
        assert network.recognition.awards_for(volunteer.id) == []
        assert volunteer.availability.status == AvailabilityStatus.AVAILABLE

    def test_unknown_mission_transition(self, network):
        with pytest.raises(NotFoundError):
            network.coordinator.start_mission("MSN-MISSING")


class TestStatusUpdates:
    async def test_status_change_published_once(self, network, make_volunteer):
        received = _collect(network.bus, VolunteerStatusChanged)
        volunteer = network.coordinator.enroll_volunteer(make_volunteer())

        network.coordinator.update_volunteer_status(volunteer.id, AvailabilityStatus.BUSY)
        network.coordinator.update_volunteer_status(volunteer.id, AvailabilityStatus.BUSY)
        await network.bus.drain()

        assert len(received) == 1
        assert received[0].previous_status == AvailabilityStatus.AVAILABLE

    def test_apply_status_reports(self, network, make_volunteer, make_mission):
        volunteer = network.coordinator.enroll_volunteer(make_volunteer())
        mission = network.coordinator.create_mission(make_mission())

        applied = network.coordinator.apply_status_reports([
            VolunteerStatusReport(volunteer_id=volunteer.id, status=AvailabilityStatus.OFFLINE),
            MissionStatusReport(mission_id=mission.id, status=MissionStatus.IN_PROGRESS),
            VolunteerStatusReport(volunteer_id="VOL-MISSING", status=AvailabilityStatus.BUSY),
        ])

        assert applied == 2
        assert volunteer.availability.status == AvailabilityStatus.OFFLINE
        assert mission.status == MissionStatus.IN_PROGRESS
