"""Tests for housing/employment matching."""

import pytest

from tilecity.entity_ids import BuildingId, InhabitantId
from tilecity.enums import AssignmentKind, EducationLevel
from tilecity.inhabitants.assignment_queue import MatchingPipeline
from tilecity.inhabitants.inhabitant import Inhabitant
from tilecity.spatial.position import Position


@pytest.fixture
def housing():
    return MatchingPipeline(AssignmentKind.HOUSING, default_origin=Position(0, 0))


def assert_conserved(pipeline):
    assert pipeline.introduced_count == pipeline.matched_count + pipeline.pending_count


def test_house_fills_one_resident_per_call(housing):
    house = BuildingId(1)
    housing.register_supply(house, Position(4, 1), capacity=8)

    for n in range(8):
        housing.introduce_demand(InhabitantId(n))
        result = housing.match_one()
        assert len(result) == 1
        assert result[0].count == 1
        assert result[0].to_building_id == house
        assert_conserved(housing)

    housing.introduce_demand(InhabitantId(8))
    assert housing.match_one() == []
    assert housing.matched_count == 8
    assert housing.pending_count == 1
    assert_conserved(housing)


def test_resigned_proposal_is_fully_undone(housing):
    house = BuildingId(1)
    housing.register_supply(house, Position(5, 5), capacity=1)
    housing.introduce_demand(InhabitantId(0))

    [proposal] = housing.match_one()
    assert housing.remaining(house) == 0
    assert not housing.is_waiting(InhabitantId(0))

    housing.resign(proposal)

    assert housing.remaining(house) == 1
    assert housing.is_waiting(InhabitantId(0))
    assert_conserved(housing)
    assert housing.match_one() == [proposal]


def test_empty_pools_give_no_match(housing):
    assert housing.match_one() == []

    housing.introduce_demand(InhabitantId(0))
    assert housing.match_one() == []

    housing.register_supply(BuildingId(1), Position(1, 1), capacity=0)
    assert housing.match_one() == []
    assert_conserved(housing)


def test_proposals_start_at_default_origin_unless_demand_has_one(housing):
    housing.register_supply(BuildingId(1), Position(1, 1), capacity=2)
    housing.introduce_demand(InhabitantId(0))
    housing.introduce_demand(InhabitantId(1), origin=Position(7, 7))

    assert housing.match_one()[0].from_position == Position(0, 0)
    assert housing.match_one()[0].from_position == Position(7, 7)


def test_registering_again_accumulates_capacity(housing):
    house = BuildingId(1)
    housing.register_supply(house, Position(1, 1), capacity=2)
    housing.register_supply(house, Position(1, 1), capacity=3)

    assert housing.remaining(house) == 5
    assert housing.free_capacity == 5


def test_selection_is_first_available_in_insertion_order(housing):
    housing.register_supply(BuildingId(1), Position(1, 1), capacity=1)
    housing.register_supply(BuildingId(2), Position(3, 1), capacity=1)
    housing.introduce_demand(InhabitantId(5))
    housing.introduce_demand(InhabitantId(3))

    first = housing.match_one()[0]
    second = housing.match_one()[0]

    assert (first.from_id, first.to_building_id) == (InhabitantId(5), BuildingId(1))
    assert (second.from_id, second.to_building_id) == (InhabitantId(3), BuildingId(2))


def test_resign_moves_building_to_the_back(housing):
    housing.register_supply(BuildingId(1), Position(9, 9), capacity=2)
    housing.register_supply(BuildingId(2), Position(1, 1), capacity=2)
    housing.introduce_demand(InhabitantId(0))

    [unreachable] = housing.match_one()
    housing.resign(unreachable)

    [retry] = housing.match_one()
    assert retry.to_building_id == BuildingId(2)


def test_education_requirement_filters_demand():
    offices = MatchingPipeline(AssignmentKind.EMPLOYMENT, default_origin=Position(0, 0))
    offices.register_supply(
        BuildingId(1), Position(2, 2), capacity=1, required_level=EducationLevel.LOW
    )
    offices.introduce_demand(InhabitantId(0), EducationLevel.NONE)
    assert offices.match_one() == []

    offices.introduce_demand(InhabitantId(1), EducationLevel.LOW)
    [proposal] = offices.match_one()
    assert proposal.from_id == InhabitantId(1)
    assert offices.is_waiting(InhabitantId(0))


def test_recreated_supply_keeps_its_requirement():
    offices = MatchingPipeline(AssignmentKind.EMPLOYMENT, default_origin=Position(0, 0))
    office = BuildingId(1)
    offices.register_supply(office, Position(2, 2), capacity=1, required_level=EducationLevel.LOW)
    offices.introduce_demand(InhabitantId(0), EducationLevel.LOW)
    [proposal] = offices.match_one()

    # the exhausted entry is dropped by the next attempt
    offices.introduce_demand(InhabitantId(1), EducationLevel.NONE)
    assert offices.match_one() == []

    offices.resign(proposal)
    assert offices.remaining(office) == 1

    [retry] = offices.match_one()
    assert retry.from_id == InhabitantId(0)


def test_conservation_over_mixed_sequence(housing):
    housing.register_supply(BuildingId(1), Position(1, 1), capacity=3)
    proposals = []
    for n in range(5):
        housing.introduce_demand(InhabitantId(n))
        proposals.extend(housing.match_one())
        assert_conserved(housing)

    housing.resign(proposals[0])
    assert_conserved(housing)
    housing.confirm(proposals[1])
    assert_conserved(housing)
    proposals.extend(housing.match_one())
    assert_conserved(housing)

    assert housing.confirmed_count == 1
    assert housing.in_flight_count == 2


def test_confirming_twice_is_an_invariant_violation(housing):
    housing.register_supply(BuildingId(1), Position(1, 1), capacity=1)
    housing.introduce_demand(InhabitantId(0))
    [proposal] = housing.match_one()
    housing.confirm(proposal)

    with pytest.raises(AssertionError):
        housing.confirm(proposal)
    with pytest.raises(AssertionError):
        housing.resign(proposal)


def test_matched_demand_cannot_be_introduced_again(housing):
    housing.register_supply(BuildingId(1), Position(1, 1), capacity=1)
    housing.introduce_demand(InhabitantId(0))
    housing.match_one()

    with pytest.raises(AssertionError):
        housing.introduce_demand(InhabitantId(0))


# =============================================================================
# AssignmentQueue
# =============================================================================


def test_confirmed_home_turns_inhabitant_into_job_seeker(queue):
    house, office = BuildingId(1), BuildingId(2)
    queue.register_house(house, Position(2, 1), capacity=8)
    queue.register_office(office, Position(3, -1), capacity=6)
    queue.introduce_inhabitant(Inhabitant(InhabitantId(0)))

    [home] = queue.match_housing()
    assert home.from_position == Position(0, 0)
    inhabitant = queue.confirm(home)
    assert inhabitant.home.house_id == house
    assert inhabitant.is_housed and not inhabitant.is_employed

    assert queue.register_job_seeker(InhabitantId(0))
    [job] = queue.match_employment()
    assert job.kind is AssignmentKind.EMPLOYMENT
    assert job.from_position == Position(2, 1)

    queue.confirm(job)
    assert queue.inhabitant(InhabitantId(0)).workplace.office_id == office
    assert not queue.register_job_seeker(InhabitantId(0))


def test_homeless_or_unknown_inhabitants_cannot_seek_jobs(queue):
    queue.introduce_inhabitant(Inhabitant(InhabitantId(0)))

    assert not queue.register_job_seeker(InhabitantId(0))
    assert not queue.register_job_seeker(InhabitantId(42))
    assert queue.employment.pending_count == 0


def test_resign_routes_to_the_right_pipeline(queue):
    queue.register_house(BuildingId(1), Position(2, 1), capacity=1)
    queue.introduce_inhabitant(Inhabitant(InhabitantId(0)))
    [proposal] = queue.match_housing()

    queue.resign(proposal)

    assert queue.waiting_home_seekers == 1
    assert queue.free_housing == 1


def test_a_home_is_assigned_only_once():
    inhabitant = Inhabitant(InhabitantId(0))
    inhabitant.home_found(BuildingId(1), Position(1, 1))

    with pytest.raises(AssertionError):
        inhabitant.home_found(BuildingId(2), Position(2, 2))


def test_slots_taken_outside_matching_are_not_offered(housing):
    house = BuildingId(1)
    housing.register_supply(house, Position(4, 1), capacity=3)

    assert housing.take_supply(house, 5) == 3
    assert housing.take_supply(BuildingId(99), 1) == 0
    housing.introduce_demand(InhabitantId(0))
    assert housing.match_one() == []

    housing.return_supply(house, Position(4, 1), 2)
    assert housing.remaining(house) == 2
    [proposal] = housing.match_one()
    assert proposal.to_building_id == house
    assert_conserved(housing)


def test_returned_slots_keep_the_required_level():
    employment = MatchingPipeline(AssignmentKind.EMPLOYMENT, default_origin=Position(0, 0))
    office = BuildingId(2)
    employment.register_supply(
        office, Position(3, -1), capacity=1, required_level=EducationLevel.LOW
    )
    employment.take_supply(office, 1)
    employment.return_supply(office, Position(3, -1), 1)

    employment.introduce_demand(InhabitantId(0), EducationLevel.NONE)
    assert employment.match_one() == []
    employment.introduce_demand(InhabitantId(1), EducationLevel.LOW)
    [proposal] = employment.match_one()
    assert proposal.from_id == InhabitantId(1)
