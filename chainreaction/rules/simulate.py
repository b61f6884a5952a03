"""
The single move-simulation primitive shared by the game engine and the AI.

``simulate_move`` mutates the :class:`SimState` it is given; callers that
need to keep the original (the AI, tests) pass ``sim.copy()``. Legality is
not checked here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Set

from ..models import PlayerColor, PowerUpKind
from .arbiter import resolve_turn
from .cascade import HQEventRecord, resolve_placement
from .power_ups import apply_power_up
from .state import SimState


@dataclass
class MoveOutcome:
    idx: int
    player: PlayerColor
    power_up: Optional[PowerUpKind] = None
    exploded: int = 0
    depth: int = 0
    captured: Set[int] = field(default_factory=set)
    hq_events: List[HQEventRecord] = field(default_factory=list)
    filled: List[int] = field(default_factory=list)


def simulate_move(sim: SimState, idx: int, player: PlayerColor) -> MoveOutcome:
    kind = sim.power_ups.get(idx)
    if kind is not None:
        effect = apply_power_up(sim, idx, player, kind)
        outcome = MoveOutcome(
            idx=idx,
            player=player,
            power_up=kind,
            hq_events=effect.hq_events,
            filled=effect.filled,
        )
    else:
        cascade = resolve_placement(sim, idx, player)
        outcome = MoveOutcome(
            idx=idx,
            player=player,
            exploded=cascade.exploded,
            depth=cascade.depth,
            captured=cascade.captured,
            hq_events=cascade.hq_events,
        )
    sim.move_count += 1
    resolve_turn(sim, player)
    return outcome
