"""Power supply/demand allocation."""

from tilecity.power.allocation import (
    ChangeSet,
    ConsumerChange,
    PowerAllocation,
    PowerConsumer,
    PowerProducer,
)

__all__ = ["ChangeSet", "ConsumerChange", "PowerAllocation", "PowerConsumer", "PowerProducer"]
