"""Pytest configuration and fixtures for city core tests."""

import pytest

from tilecity.config.city_config import CityConfig
from tilecity.entity_ids import BuildingId
from tilecity.inhabitants.assignment_queue import AssignmentQueue
from tilecity.navigation.street_graph import StreetGraph
from tilecity.power.allocation import PowerAllocation
from tilecity.spatial.position import Position


@pytest.fixture
def config():
    """Default configuration."""
    return CityConfig()


@pytest.fixture
def street_graph():
    """A straight street from the origin (0, 0) to (3, 0), fully linked."""
    graph = StreetGraph(origin=Position(0, 0))
    for x in range(1, 4):
        graph.add_node(Position(x, 0))
    graph.rebuild()
    return graph


@pytest.fixture
def queue():
    return AssignmentQueue(entry_point=Position(0, 0))


@pytest.fixture
def allocation():
    return PowerAllocation()


@pytest.fixture
def simulation():
    """A fresh engine with the default configuration."""
    from tilecity.simulation.engine import CitySimulation

    engine = CitySimulation()
    yield engine
    engine.close()


@pytest.fixture
def building_ids():
    """Factory for building ids that never collide within a test."""
    counter = iter(range(1000))

    def make():
        return BuildingId(next(counter))

    return make
