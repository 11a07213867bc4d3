"""Tests for the systems wrapping the core components."""

from tilecity.buildings.registry import BuildingRegistry
from tilecity.desirability.field import DesirabilityManager
from tilecity.entity_ids import BuildingId, IdAllocator, InhabitantId
from tilecity.enums import AssignmentKind, BuildingKind
from tilecity.events import (
    BuildingCompleted,
    EventBus,
    HomeAssigned,
    InhabitantsArrived,
    OccupancyChanged,
    PowerRebalanced,
)
from tilecity.inhabitants.assignment_queue import AssignmentQueue
from tilecity.navigation.street_graph import StreetGraph
from tilecity.power.allocation import PowerAllocation
from tilecity.spatial.position import Position
from tilecity.systems import (
    DesirabilitySystem,
    InhabitantSystem,
    NavigationSystem,
    PowerSystem,
    SystemRegistry,
    SystemResult,
)


def completed(building_id, kind, position, capacity=0):
    return BuildingCompleted(
        building_id=BuildingId(building_id), kind=kind, position=position, capacity=capacity
    )


def test_system_results_combine():
    a = SystemResult(affected=2, details={"streets_linked": 1})
    b = SystemResult(affected=3, events=1, details={"streets_linked": 2, "note": "x"})

    combined = SystemResult.combine([a, SystemResult.skipped_result(), b])

    assert combined.affected == 5
    assert combined.events == 1
    assert combined.details == {"streets_linked": 3, "note": "x"}
    assert not combined.skipped
    assert SystemResult.combine([SystemResult.skipped_result()]).skipped


def test_disabled_system_is_skipped():
    system = NavigationSystem(EventBus(), StreetGraph(origin=Position(0, 0)))
    system.enabled = False

    assert system.update(1).skipped
    assert system.updates == 0


def test_registry_toggles_systems_by_name():
    registry = SystemRegistry()
    system = NavigationSystem(EventBus(), StreetGraph())
    registry.register(system)

    assert registry.set_enabled("Navigation", False)
    assert not system.enabled
    assert not registry.set_enabled("Missing", False)
    assert registry.get("Navigation") is system
    assert len(registry) == 1


def test_navigation_queues_only_streets_and_links_on_update():
    bus = EventBus()
    graph = StreetGraph(origin=Position(0, 0))
    system = NavigationSystem(bus, graph)

    bus.emit(completed(1, BuildingKind.STREET, Position(1, 0)))
    bus.emit(completed(2, BuildingKind.HOUSE, Position(1, 1), capacity=8))
    assert graph.pending == [Position(1, 0)]

    result = system.update(1)

    assert result.details["streets_linked"] == 1
    assert Position(1, 0) in graph
    assert Position(1, 1) not in graph


def test_desirability_sources_follow_config(config):
    bus = EventBus()
    manager = DesirabilityManager()
    DesirabilitySystem(bus, manager, config.buildings)

    bus.emit(completed(1, BuildingKind.GARDEN, Position(0, 0)))
    bus.emit(completed(2, BuildingKind.STREET, Position(0, 1)))

    assert len(manager.houses) == 1
    assert len(manager.offices) == 1
    assert manager.query_house(Position(5, 0)) == 6


def test_population_counts_house_residents_only(config):
    bus = EventBus()
    manager = DesirabilityManager()
    DesirabilitySystem(bus, manager, config.buildings)

    bus.emit(OccupancyChanged(BuildingId(1), delta_count=2, kind=BuildingKind.HOUSE, occupancy=2))
    bus.emit(OccupancyChanged(BuildingId(2), delta_count=1, kind=BuildingKind.OFFICE, occupancy=1))

    assert manager.total_population == 2


def test_power_system_registers_and_rebalances(config):
    bus = EventBus()
    allocation = PowerAllocation()
    system = PowerSystem(bus, allocation, config.buildings)
    rebalanced = []
    bus.subscribe(PowerRebalanced, rebalanced.append)

    bus.emit(completed(1, BuildingKind.HOUSE, Position(2, 1), capacity=8))
    bus.emit(completed(2, BuildingKind.BIOMASS_POWER_PLANT, Position(9, -1), capacity=7_000_000))
    bus.emit(OccupancyChanged(BuildingId(1), delta_count=3, kind=BuildingKind.HOUSE, occupancy=3))

    result = system.update(1)

    assert allocation.consumers[BuildingId(1)].requested_wh == 900
    assert allocation.missing_power() == 0
    assert result.details["missing_wh"] == 0
    assert len(rebalanced) == 1
    assert rebalanced[0].consumers_changed == 1

    # nothing left to do: no event
    system.update(2)
    assert len(rebalanced) == 1


class TestInhabitantSystem:
    def build(self, config, graph):
        bus = EventBus()
        ids = IdAllocator()
        queue = AssignmentQueue(entry_point=config.entry_position)
        registry = BuildingRegistry(config.buildings, ids)
        system = InhabitantSystem(bus, queue, graph, registry, ids, config)
        return bus, queue, registry, system

    def test_immigration_fills_free_beds_up_to_the_per_tick_cap(self, config, street_graph):
        bus, queue, _, system = self.build(config, street_graph)
        arrivals = []
        bus.subscribe(InhabitantsArrived, arrivals.append)
        bus.emit(completed(1, BuildingKind.HOUSE, Position(2, 1), capacity=8))

        assert system.immigrate(1) == [InhabitantId(n) for n in range(6)]
        assert system.immigrate(2) == [InhabitantId(6), InhabitantId(7)]
        assert system.immigrate(3) == []
        assert [len(e.inhabitant_ids) for e in arrivals] == [6, 2]
        assert queue.waiting_home_seekers == 8

    def test_unreachable_house_resigns_every_proposal(self, config, street_graph):
        _, queue, _, system = self.build(config, street_graph)
        queue.register_house(BuildingId(1), Position(8, 8), 8)
        system.immigrate(1)

        outcome = system.match(AssignmentKind.HOUSING, 1)

        assert (outcome.confirmed, outcome.resigned) == (0, 6)
        assert queue.waiting_home_seekers == 6
        assert queue.housing.remaining(BuildingId(1)) == 8

    def test_reachable_house_confirms_and_travellers_arrive(self, config, street_graph):
        bus, queue, registry, system = self.build(config, street_graph)
        homes, occupancy = [], []
        bus.subscribe(HomeAssigned, homes.append)
        bus.subscribe(OccupancyChanged, occupancy.append)

        house = registry.adopt(BuildingKind.HOUSE, BuildingId(1), Position(2, 1))
        queue.register_house(house.id, house.position, 8)
        system.immigrate(1)

        outcome = system.match(AssignmentKind.HOUSING, 1)
        assert outcome.confirmed == 6
        assert len(homes) == 6
        # each new resident now looks for a job
        assert queue.employment.pending_count == 6

        # (0,0) -> (1,0) -> (2,0) -> house: four steps
        arrived = [system.advance_trips(tick) for tick in range(1, 5)]

        assert arrived == [0, 0, 0, 6]
        assert house.current_residents == 6
        assert [e.occupancy for e in occupancy] == [1, 2, 3, 4, 5, 6]
        assert system.trips == []
