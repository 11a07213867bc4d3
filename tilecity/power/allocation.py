"""Greedy power allocation with partial coverage.

Consumers (houses, offices) request ``base_wh + per_unit_wh * occupancy``;
producers (power plants) offer a fixed capacity. ``dedicate_power`` walks
the consumers that are not fully covered and, for each one:

1. draws from the producers it is already linked to, in link order, as much
   as they can still give (stable pairings are preferred over reshuffling);
2. if still short, links the first unlinked producer whose remaining
   capacity covers the *whole* remainder and draws from it;
3. otherwise leaves the consumer partially covered, to be retried on the
   next call.

There is no blackout simulation: an underpowered consumer simply stays
partially covered and shows up in ``missing_power()``.

Invariants (checked with assertions):
- a producer never gives more than ``total_capacity_wh``;
- a consumer's ``covered_wh`` never exceeds ``requested_wh``. When occupancy
  drops, the surplus is handed back to the linked producers, most recently
  linked first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from tilecity.entity_ids import BuildingId
from tilecity.spatial.position import Position

logger = logging.getLogger(__name__)


@dataclass
class PowerConsumer:
    position: Position
    base_wh: int = 0
    per_unit_wh: int = 0
    occupancy: int = 0
    covered_wh: int = 0

    @property
    def requested_wh(self) -> int:
        return self.base_wh + self.per_unit_wh * self.occupancy

    @property
    def shortfall_wh(self) -> int:
        return self.requested_wh - self.covered_wh


@dataclass
class PowerProducer:
    position: Position
    total_capacity_wh: int
    remaining_capacity_wh: int

    @property
    def drawn_wh(self) -> int:
        return self.total_capacity_wh - self.remaining_capacity_wh


@dataclass(frozen=True)
class ConsumerChange:
    """How much a consumer's coverage moved, and what it still lacks."""

    delta_wh: int
    shortfall_wh: int


@dataclass
class ChangeSet:
    """Consumers and producers touched by one allocation call.

    Attributes:
        consumers: consumer id -> coverage change and new shortfall
        producers: producer id -> energy drawn (negative when released)
    """

    consumers: Dict[BuildingId, ConsumerChange] = field(default_factory=dict)
    producers: Dict[BuildingId, int] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.consumers and not self.producers

    def merge(self, other: "ChangeSet") -> "ChangeSet":
        for consumer_id, change in other.consumers.items():
            previous = self.consumers.get(consumer_id)
            delta = change.delta_wh + (previous.delta_wh if previous else 0)
            self.consumers[consumer_id] = ConsumerChange(delta, change.shortfall_wh)
        for producer_id, delta in other.producers.items():
            self.producers[producer_id] = self.producers.get(producer_id, 0) + delta
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "consumers": {
                str(cid): {"delta_wh": c.delta_wh, "shortfall_wh": c.shortfall_wh}
                for cid, c in self.consumers.items()
            },
            "producers": {str(pid): delta for pid, delta in self.producers.items()},
        }


class PowerAllocation:
    """Consumers, producers and the links between them."""

    def __init__(self) -> None:
        self.consumers: Dict[BuildingId, PowerConsumer] = {}
        self.producers: Dict[BuildingId, PowerProducer] = {}
        # dict used as an insertion-ordered set
        self._uncovered: Dict[BuildingId, None] = {}
        # consumer -> {producer: energy drawn from it}, in link order
        self._links: Dict[BuildingId, Dict[BuildingId, int]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_consumer(
        self,
        consumer_id: BuildingId,
        position: Position,
        base_wh: int = 0,
        per_unit_wh: int = 0,
        occupancy: int = 0,
    ) -> None:
        assert consumer_id not in self.consumers, f"consumer {consumer_id} already registered"
        self.consumers[consumer_id] = PowerConsumer(position, base_wh, per_unit_wh, occupancy)
        self._uncovered[consumer_id] = None
        logger.debug(
            f"Registered power consumer {consumer_id} requesting "
            f"{self.consumers[consumer_id].requested_wh} Wh"
        )

    def register_producer(
        self, producer_id: BuildingId, position: Position, capacity_wh: int
    ) -> None:
        assert producer_id not in self.producers, f"producer {producer_id} already registered"
        self.producers[producer_id] = PowerProducer(position, capacity_wh, capacity_wh)
        logger.info(f"Registered power producer {producer_id} with {capacity_wh} Wh")

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    def dedicate_power(self) -> ChangeSet:
        """Try to cover every consumer that is still short of power."""
        changes = ChangeSet()

        for consumer_id in list(self._uncovered):
            consumer = self.consumers[consumer_id]
            links = self._links.setdefault(consumer_id, {})

            # 1. extend existing pairings
            for producer_id in links:
                need = consumer.shortfall_wh
                if need == 0:
                    break
                available = self.producers[producer_id].remaining_capacity_wh
                if available:
                    self._draw(consumer_id, producer_id, min(need, available), changes)

            # 2. one new producer able to take the whole remainder
            need = consumer.shortfall_wh
            if need > 0:
                producer_id = next(
                    (
                        pid
                        for pid, producer in self.producers.items()
                        if pid not in links and producer.remaining_capacity_wh >= need
                    ),
                    None,
                )
                if producer_id is not None:
                    links[producer_id] = 0
                    self._draw(consumer_id, producer_id, need, changes)

            # 3. whatever is left waits for the next call
            if consumer.shortfall_wh == 0:
                del self._uncovered[consumer_id]

        if not changes.is_empty():
            logger.debug(
                f"Power rebalanced: {len(changes.consumers)} consumer(s), "
                f"{len(changes.producers)} producer(s), missing {self.missing_power()} Wh"
            )
        return self._finalise(changes)

    def _draw(
        self, consumer_id: BuildingId, producer_id: BuildingId, amount: int, changes: ChangeSet
    ) -> None:
        consumer = self.consumers[consumer_id]
        producer = self.producers[producer_id]
        assert 0 < amount <= producer.remaining_capacity_wh, (
            f"producer {producer_id} cannot give {amount} Wh"
        )
        assert consumer.covered_wh + amount <= consumer.requested_wh, (
            f"consumer {consumer_id} would be over-covered"
        )

        producer.remaining_capacity_wh -= amount
        consumer.covered_wh += amount
        self._links[consumer_id][producer_id] += amount
        self._record(changes, consumer_id, producer_id, amount)

    @staticmethod
    def _record(
        changes: ChangeSet, consumer_id: BuildingId, producer_id: BuildingId, amount: int
    ) -> None:
        changes.producers[producer_id] = changes.producers.get(producer_id, 0) + amount
        previous = changes.consumers.get(consumer_id)
        changes.consumers[consumer_id] = ConsumerChange(
            (previous.delta_wh if previous else 0) + amount, 0
        )

    def _finalise(self, changes: ChangeSet) -> ChangeSet:
        for consumer_id, change in changes.consumers.items():
            changes.consumers[consumer_id] = ConsumerChange(
                change.delta_wh, self.consumers[consumer_id].shortfall_wh
            )
        return changes

    # ------------------------------------------------------------------
    # Occupancy
    # ------------------------------------------------------------------

    def update_occupancy(self, consumer_id: BuildingId, occupancy: int) -> ChangeSet:
        """Change a consumer's occupancy and keep coverage consistent.

        Growing demand flags the consumer for the next ``dedicate_power``;
        shrinking demand releases any surplus back to its producers.

        Returns:
            Changes caused by released energy (empty when nothing was released
            or the consumer is unknown).
        """
        changes = ChangeSet()
        consumer = self.consumers.get(consumer_id)
        if consumer is None:
            return changes

        assert occupancy >= 0, f"negative occupancy for {consumer_id}"
        consumer.occupancy = occupancy

        surplus = consumer.covered_wh - consumer.requested_wh
        if surplus > 0:
            links = self._links.get(consumer_id, {})
            for producer_id in reversed(list(links)):
                if surplus == 0:
                    break
                give_back = min(surplus, links[producer_id])
                links[producer_id] -= give_back
                if links[producer_id] == 0:
                    del links[producer_id]
                self.producers[producer_id].remaining_capacity_wh += give_back
                consumer.covered_wh -= give_back
                surplus -= give_back
                self._record(changes, consumer_id, producer_id, -give_back)

        if consumer.shortfall_wh > 0:
            self._uncovered[consumer_id] = None
        else:
            self._uncovered.pop(consumer_id, None)

        return self._finalise(changes)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def missing_power(self) -> int:
        """Total shortfall across consumers not fully covered."""
        return sum(self.consumers[cid].shortfall_wh for cid in self._uncovered)

    def coverage(self, building_id: BuildingId) -> Tuple[int, bool]:
        """Return ``(shortfall_wh, fully_covered)`` for a building.

        Producers are always considered covered; unknown ids are not.
        """
        if building_id in self.producers:
            return 0, True
        consumer = self.consumers.get(building_id)
        if consumer is None:
            return 0, False
        return consumer.shortfall_wh, consumer.shortfall_wh == 0

    def producers_of(self, consumer_id: BuildingId) -> List[BuildingId]:
        return list(self._links.get(consumer_id, {}))

    def drawn_from(self, producer_id: BuildingId) -> int:
        """Energy currently given by *producer_id*, summed over its links."""
        return sum(links.get(producer_id, 0) for links in self._links.values())

    @property
    def uncovered(self) -> List[BuildingId]:
        return list(self._uncovered)
