"""
Chain-reaction resolution.

A placement is resolved by an explicit FIFO worklist over the flat board of
a :class:`SimState`. Every explosion mutates the board immediately and
reads the exploding cell's owner at dequeue time, so resolving the whole
queue in one call (:meth:`CascadeResolver.run`) and stepping it one
explosion at a time (:meth:`CascadeResolver.step`) reach the same state.

HQ cells never receive units. An explosion next to an enemy HQ damages it
instead; an explosion next to the exploding player's own HQ simply loses
that unit.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, NamedTuple, Optional, Set, Tuple

from ..config import CASCADE_STEP_LIMIT, MAX_HQ_HEALTH
from ..errors import InvalidStateError
from ..models import HQEventType, PlayerColor
from .state import SimState

logger = logging.getLogger(__name__)


class HQEventRecord(NamedTuple):
    owner: PlayerColor
    event_type: HQEventType
    health_after: int
    source_player: PlayerColor


@dataclass
class CascadeOutcome:
    """What one cascade did to the board."""

    exploded: int = 0
    depth: int = 0
    captured: Set[int] = field(default_factory=set)
    hq_events: List[HQEventRecord] = field(default_factory=list)
    halted_early: bool = False


def place_unit(sim: SimState, idx: int, player: PlayerColor) -> bool:
    """Put one unit of ``player`` on ``idx``.

    An enemy cell is captured and reset to a single unit; an own or empty
    cell gains one unit. Returns True when a capture happened.
    """
    owner = sim.owners[idx]
    if owner is not None and owner != player and sim.units[idx] > 0:
        sim.units[idx] = 1
        sim.owners[idx] = player
        return True
    sim.units[idx] += 1
    sim.owners[idx] = player
    return False


def damage_hq(
    sim: SimState,
    owner: PlayerColor,
    source: PlayerColor,
    events: List[HQEventRecord],
) -> None:
    health = max(0, sim.hq_health[owner] - 1)
    sim.hq_health[owner] = health
    events.append(HQEventRecord(owner, HQEventType.DAMAGE, health, source))


def heal_hq(
    sim: SimState,
    owner: PlayerColor,
    events: List[HQEventRecord],
) -> None:
    health = min(MAX_HQ_HEALTH, sim.hq_health[owner] + 1)
    sim.hq_health[owner] = health
    events.append(HQEventRecord(owner, HQEventType.HEAL, health, owner))


class CascadeResolver:
    """Worklist resolver for the explosions triggered by one placement.

    The queue holds ``(index, wave)`` pairs and never holds the same index
    twice. ``wave`` is the chain generation: the placed cell is wave 1,
    cells it pushes over critical mass are wave 2, and so on.
    """

    def __init__(
        self,
        sim: SimState,
        seed_idx: int,
        step_limit: int = CASCADE_STEP_LIMIT,
    ) -> None:
        self.sim = sim
        self.step_limit = step_limit
        self.steps = 0
        self.outcome = CascadeOutcome()
        self._geometry = sim.geometry
        self._queue: Deque[Tuple[int, int]] = deque()
        self._queued: Set[int] = set()

        # Occupied-cell count per player, maintained incrementally so the
        # early-halt check stays O(players) per explosion.
        self._occupied: Dict[Optional[PlayerColor], int] = {}
        for owner, n in zip(sim.owners, sim.units):
            if owner is not None and n > 0:
                self._occupied[owner] = self._occupied.get(owner, 0) + 1

        if sim.units[seed_idx] >= self._geometry.critical_masses[seed_idx]:
            self._enqueue(seed_idx, 1)

    @property
    def done(self) -> bool:
        return not self._queue

    @property
    def pending(self) -> List[int]:
        return [idx for idx, _ in self._queue]

    def _enqueue(self, idx: int, wave: int) -> None:
        if idx not in self._queued:
            self._queued.add(idx)
            self._queue.append((idx, wave))

    def _only_owner_left(self, owner: PlayerColor) -> bool:
        return all(
            count == 0
            for player, count in self._occupied.items()
            if player != owner
        )

    def step(self) -> bool:
        """Resolve the next queued cell. Returns True if it exploded."""
        if not self._queue:
            return False
        idx, wave = self._queue.popleft()
        self._queued.discard(idx)

        sim = self.sim
        units = sim.units
        owners = sim.owners
        critical_masses = self._geometry.critical_masses
        mass = critical_masses[idx]
        if units[idx] < mass:
            return False

        owner = owners[idx]
        units[idx] -= mass
        if units[idx] == 0:
            owners[idx] = None
            self._occupied[owner] -= 1

        outcome = self.outcome
        outcome.exploded += 1
        outcome.depth = max(outcome.depth, wave)

        for n in self._geometry.neighbor_indices[idx]:
            hq_owner = sim.hq_cells.get(n)
            if hq_owner is not None:
                if hq_owner != owner:
                    damage_hq(sim, hq_owner, owner, outcome.hq_events)
                continue
            previous = owners[n]
            if units[n] == 0:
                self._occupied[owner] = self._occupied.get(owner, 0) + 1
            elif previous != owner:
                outcome.captured.add(n)
                self._occupied[previous] -= 1
                self._occupied[owner] = self._occupied.get(owner, 0) + 1
            units[n] += 1
            owners[n] = owner
            if units[n] >= critical_masses[n]:
                self._enqueue(n, wave + 1)

        if units[idx] >= mass:
            self._enqueue(idx, wave + 1)

        self.steps += 1
        if self.steps > self.step_limit:
            raise InvalidStateError(
                "Cascade did not settle",
                context={"steps": self.steps, "pending": len(self._queue)},
            )

        if self._queue and self._only_owner_left(owner):
            # Nobody else holds a cell, so the game is decided.
            logger.debug(
                "Cascade halted after %d explosions: only %s remains",
                outcome.exploded,
                owner.value,
            )
            self._queue.clear()
            self._queued.clear()
            outcome.halted_early = True
        return True

    def run(self) -> CascadeOutcome:
        while self._queue:
            self.step()
        return self.outcome


def resolve_placement(sim: SimState, idx: int, player: PlayerColor) -> CascadeOutcome:
    """Place a unit and resolve the resulting cascade to a fixed point."""
    captured = place_unit(sim, idx, player)
    outcome = CascadeResolver(sim, idx).run()
    if captured:
        outcome.captured.add(idx)
    return outcome
