"""Default building constants.

These values seed ``CityConfig``. Anything here can be overridden by
passing a different configuration to ``CitySimulation``; nothing else in
the package reads these constants directly.

Desirability sources are described by four numbers:
    value   - contribution inside the inner radius
    inner   - distance under which the value applies unattenuated
    outer   - distance under which the value decays linearly
    decay   - amount subtracted per step beyond the inner radius
"""

# =============================================================================
# CITY
# =============================================================================

CONFIG_VERSION = 1

# Where newcomers enter the city; also the first node of the street graph.
ENTRY_POINT = (0, 0)

# Upper bound on newcomers spawned in a single tick.
MAX_INHABITANTS_PER_TICK = 6


# =============================================================================
# HOUSE
# =============================================================================

HOUSE_MAX_RESIDENTS = 8
HOUSE_TIME_FOR_BUILDING = 10
HOUSE_CONSUME_WH = 300  # per resident

# Houses crowd each other out: a small negative patch around every house.
HOUSE_SOURCE_FOR_HOUSE = {"value": -1, "inner_radius": 2, "outer_radius": 1, "decay": 0}


# =============================================================================
# OFFICE
# =============================================================================

OFFICE_MAX_WORKERS = 6
OFFICE_TIME_FOR_BUILDING = 5
OFFICE_CONSUME_WH = 2000  # per worker

OFFICE_SOURCE_FOR_OFFICE = {"value": 1, "inner_radius": 3, "outer_radius": 0, "decay": 0}


# =============================================================================
# GARDEN
# =============================================================================

GARDEN_TIME_FOR_BUILDING = 2

GARDEN_SOURCE_FOR_HOUSE = {"value": 10, "inner_radius": 3, "outer_radius": 10, "decay": 2}
GARDEN_SOURCE_FOR_OFFICE = {"value": 10, "inner_radius": 3, "outer_radius": 10, "decay": 2}


# =============================================================================
# STREET
# =============================================================================

STREET_TIME_FOR_BUILDING = 2


# =============================================================================
# BIOMASS POWER PLANT
# =============================================================================

BIOMASS_POWER_PLANT_TIME_FOR_BUILDING = 10
BIOMASS_POWER_PLANT_CAPACITY_WH = 7_000_000
