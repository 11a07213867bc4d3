"""Engine, tick pipeline and per-tick reporting."""

from tilecity.simulation.engine import CitySimulation
from tilecity.simulation.pipeline import PipelineStep, TickPipeline, default_pipeline
from tilecity.simulation.report import TickReport
from tilecity.simulation.tick_context import TickContext
from tilecity.simulation.trace import TraceSink

__all__ = [
    "CitySimulation",
    "PipelineStep",
    "TickContext",
    "TickPipeline",
    "TickReport",
    "TraceSink",
    "default_pipeline",
]
