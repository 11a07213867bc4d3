"""End-to-end tests driving CitySimulation tick by tick."""

import logging

import orjson
import pytest

from tilecity.config.city_config import CityConfig
from tilecity.entity_ids import BuildingId
from tilecity.enums import BuildingKind
from tilecity.events import BuildingCompleted, HomeAssigned, OccupancyChanged
from tilecity.exceptions import SimulationError
from tilecity.simulation.engine import CitySimulation
from tilecity.simulation.pipeline import PipelineStep, TickPipeline, default_pipeline
from tilecity.spatial.position import Position


def build_small_town(simulation, with_office=False):
    """Street (1,0)..(3,0), a house at (2,1) and a power plant at (3,-1)."""
    for x in range(1, 4):
        simulation.request_construction(BuildingKind.STREET, (x, 0))
    simulation.request_construction(BuildingKind.HOUSE, (2, 1))
    simulation.request_construction(BuildingKind.BIOMASS_POWER_PLANT, (3, -1))
    if with_office:
        simulation.request_construction(BuildingKind.OFFICE, (1, -1))


def test_default_pipeline_order():
    assert default_pipeline().step_names == [
        "construction",
        "navigation",
        "immigration",
        "housing",
        "employment",
        "travel",
        "power",
        "report",
    ]


def test_streets_are_linked_the_tick_they_complete(simulation):
    build_small_town(simulation)

    first, second = simulation.run(2)

    assert first.streets_linked == 0
    assert second.buildings_completed == 3
    assert second.streets_linked == 3
    assert len(simulation.graph) == 4


def test_newcomers_move_in_and_get_power(simulation):
    build_small_town(simulation)
    reports = simulation.run(14)

    # house and plant finish on tick 10
    tick10 = reports[9]
    assert tick10.buildings_completed == 2
    assert tick10.inhabitants_arrived == 6
    assert tick10.homes_confirmed == 6
    assert reports[10].inhabitants_arrived == 2
    assert reports[11].inhabitants_arrived == 0

    # four steps from the entry point to the house
    assert reports[12].trips_completed == 6
    assert reports[12].population == 6
    assert reports[13].trips_completed == 2
    assert reports[13].population == 8

    house = simulation.registry.at(Position(2, 1))
    plant = simulation.registry.at(Position(3, -1))
    assert house.current_residents == 8
    assert simulation.allocation.drawn_from(plant.id) == 8 * 300
    assert simulation.missing_power() == 0
    assert all(i.is_housed for i in simulation.queue.inhabitants)


def test_housed_inhabitants_find_jobs():
    simulation = CitySimulation()
    build_small_town(simulation, with_office=True)
    reports = simulation.run(14)

    # office desks are all taken by the first six residents
    assert reports[9].jobs_confirmed == 6
    assert reports[10].jobs_confirmed == 0
    assert simulation.queue.employment.pending_count == 2
    # home (2,1) -> street (2,0) -> (1,0) -> office (1,-1)
    assert reports[11].trips_completed == 6

    office = simulation.registry.at(Position(1, -1))
    assert office.current_workers == 6
    assert simulation.allocation.consumers[office.id].requested_wh == 6 * 2000
    assert simulation.get_stats()["employed"] == 6


def test_unreachable_house_is_retried_every_tick(simulation):
    simulation.request_construction(BuildingKind.HOUSE, (6, 6))
    reports = simulation.run(11)

    assert reports[9].homes_resigned == 6
    assert reports[9].homes_confirmed == 0
    assert reports[10].inhabitants_arrived == 2
    assert reports[10].homes_resigned == 8
    assert simulation.queue.free_housing == 8

    # connecting the house later lets everyone move in
    for x in range(1, 7):
        simulation.request_construction(BuildingKind.STREET, (x, 0))
    for y in range(1, 6):
        simulation.request_construction(BuildingKind.STREET, (6, y))
    simulation.run(2)

    assert simulation.last_report.streets_linked == 11
    assert simulation.last_report.homes_confirmed == 8
    assert simulation.last_report.inhabitants_arrived == 0


def test_rejected_construction_returns_none(simulation, caplog):
    with caplog.at_level(logging.WARNING):
        assert simulation.request_construction(BuildingKind.HOUSE, (0, 0)) is None
    assert "rejected" in caplog.text

    assert simulation.request_construction(BuildingKind.STREET, (1, 0)) is not None
    assert simulation.request_construction(BuildingKind.GARDEN, (1, 0)) is None


def test_houses_keep_their_distance(simulation):
    simulation.request_construction(BuildingKind.HOUSE, (2, 1))
    simulation.run(10)

    assert simulation.query_desirability(Position(3, 1)) == -1
    assert not simulation.is_positive(simulation.query_desirability(Position(3, 1)))
    assert simulation.request_construction(BuildingKind.HOUSE, (3, 1)) is None
    assert simulation.request_construction(BuildingKind.HOUSE, (2, 3)) is not None
    assert simulation.request_construction(BuildingKind.OFFICE, (3, 1)) is not None


def ingest_street_and_house(simulation, capacity=8):
    """Street (1,0) and a house at (1,1), both reported by the game layer."""
    simulation.ingest(
        BuildingCompleted(BuildingId(100), BuildingKind.STREET, Position(1, 0), capacity=0)
    )
    simulation.ingest(
        BuildingCompleted(BuildingId(101), BuildingKind.HOUSE, Position(1, 1), capacity=capacity)
    )
    return BuildingId(101)


def test_ingested_events_feed_the_systems(simulation):
    house_id = ingest_street_and_house(simulation)
    report = simulation.tick()

    assert report.streets_linked == 1
    assert report.homes_confirmed == 6
    assert simulation.request_construction(BuildingKind.GARDEN, (5, 5)) == BuildingId(102)

    assert simulation.ingest(OccupancyChanged(house_id, delta_count=2))
    assert simulation.desirability.total_population == 2


def test_ingested_house_keeps_its_reported_capacity(simulation):
    house_id = ingest_street_and_house(simulation, capacity=12)
    simulation.run(8)

    house = simulation.registry.house(house_id)
    assert house.max_residents == 12
    assert house.current_residents == 12
    assert simulation.queue.free_housing == 0
    assert simulation.allocation.consumers[house_id].occupancy == 12
    assert simulation.desirability.total_population == 12


def test_ingested_occupancy_agrees_across_components(simulation):
    house_id = ingest_street_and_house(simulation)

    assert simulation.ingest(OccupancyChanged(house_id, delta_count=3))
    house = simulation.registry.house(house_id)
    assert house.current_residents == 3
    assert simulation.allocation.consumers[house_id].occupancy == 3
    assert simulation.desirability.total_population == 3
    assert simulation.queue.free_housing == 5

    simulation.run(6)

    assert house.current_residents == 8
    assert simulation.allocation.consumers[house_id].occupancy == 8
    assert simulation.desirability.total_population == 8


def test_ingested_departures_free_beds_again(simulation, caplog):
    house_id = ingest_street_and_house(simulation)
    simulation.ingest(OccupancyChanged(house_id, delta_count=8))

    with caplog.at_level(logging.WARNING):
        assert not simulation.ingest(OccupancyChanged(house_id, delta_count=1))
        assert simulation.ingest(OccupancyChanged(house_id, delta_count=-10))
        assert not simulation.ingest(OccupancyChanged(BuildingId(100), delta_count=1))
    assert "clipped" in caplog.text

    assert simulation.registry.house(house_id).current_residents == 0
    assert simulation.allocation.consumers[house_id].occupancy == 0
    assert simulation.desirability.total_population == 0
    assert simulation.queue.free_housing == 8


def test_ingested_buildings_cannot_take_used_cells(simulation, caplog):
    ingest_street_and_house(simulation)

    with caplog.at_level(logging.WARNING):
        entry = BuildingCompleted(BuildingId(102), BuildingKind.HOUSE, Position(0, 0), capacity=8)
        taken = BuildingCompleted(BuildingId(103), BuildingKind.OFFICE, Position(1, 1), capacity=6)
        assert not simulation.ingest(entry)
        assert not simulation.ingest(taken)

    assert "rejected" in caplog.text
    assert simulation.registry.get(BuildingId(102)) is None
    assert simulation.registry.get(BuildingId(103)) is None
    assert simulation.queue.free_housing == 8
    assert simulation.queue.employment.free_capacity == 0


def test_every_system_updates_once_per_tick(simulation):
    simulation.run(3)

    updates = {
        name: info["updates"] for name, info in simulation.get_systems_debug_info().items()
    }
    assert updates == {"Navigation": 3, "Desirability": 3, "Inhabitants": 3, "Power": 3}


def test_ingesting_outbound_events_is_an_error(simulation):
    with pytest.raises(SimulationError):
        simulation.ingest(HomeAssigned(inhabitant_id=None, house_id=None, house_position=None))


def test_component_api_delegates(simulation):
    build_small_town(simulation)
    simulation.run(10)

    path = simulation.get_path(Position(0, 0), Position(4, 0))
    assert len(path) == 5
    # everything was already matched by the tick itself
    assert simulation.match_housing() == []
    assert simulation.match_employment() == []
    assert simulation.dedicate_power().is_empty()


def test_identical_runs_give_identical_reports():
    def run():
        simulation = CitySimulation()
        build_small_town(simulation, with_office=True)
        return [report.to_dict() for report in simulation.run(20)]

    assert run() == run()


def test_trace_writes_one_line_per_tick(tmp_path):
    trace = tmp_path / "out" / "trace.jsonl"
    config = CityConfig().with_overrides(trace_output=str(trace))

    with CitySimulation(config) as simulation:
        build_small_town(simulation)
        simulation.run(3)

    lines = trace.read_bytes().splitlines()
    assert [orjson.loads(line)["tick"] for line in lines] == [1, 2, 3]
    assert orjson.loads(lines[1])["streets_linked"] == 3


def test_custom_pipeline_and_disabled_systems(simulation):
    seen = []
    simulation.pipeline = TickPipeline(
        default_pipeline().steps[:-1]
        + [
            PipelineStep("spy", lambda engine, ctx: seen.append(ctx.tick)),
            default_pipeline().steps[-1],
        ]
    )
    simulation.set_system_enabled("Inhabitants", False)
    simulation.request_construction(BuildingKind.HOUSE, (2, 1))
    reports = simulation.run(11)

    assert seen == list(range(1, 12))
    assert all(r.inhabitants_arrived == 0 for r in reports)
    assert simulation.get_systems_debug_info()["Inhabitants"]["enabled"] is False
    assert simulation.get_systems_debug_info()["Inhabitants"]["updates"] == 0
