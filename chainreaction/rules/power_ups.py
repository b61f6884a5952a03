"""
Power-up effects and spawning (base mode).

A placement on a power-up cell replaces the ordinary placement: the
power-up is consumed and its effect applied, and no cascade is seeded
from the cells it touches.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..config import MAX_HQ_HEALTH
from ..models import PlayerColor, PowerUpKind
from .cascade import HQEventRecord, damage_hq, heal_hq
from .state import SimState


@dataclass
class PowerUpOutcome:
    kind: PowerUpKind
    filled: List[int] = field(default_factory=list)
    hq_events: List[HQEventRecord] = field(default_factory=list)


def diamond_targets(sim: SimState, idx: int) -> List[int]:
    """Row of the target with two players, 3x3 block around it otherwise."""
    if len(sim.players) == 2:
        row = idx // sim.cols
        return [sim.index(row, c) for c in range(sim.cols)]
    return list(sim.geometry.block_indices[idx])


def apply_power_up(
    sim: SimState, idx: int, player: PlayerColor, kind: PowerUpKind
) -> PowerUpOutcome:
    sim.power_ups.pop(idx, None)
    outcome = PowerUpOutcome(kind=kind)

    if kind == PowerUpKind.DIAMOND:
        units = sim.units
        owners = sim.owners
        for target in diamond_targets(sim, idx):
            if target in sim.hq_cells:
                continue
            owner = owners[target]
            if owner is None or owner == player:
                units[target] += 1
                owners[target] = player
                outcome.filled.append(target)
        return outcome

    # Heart
    if player not in sim.hq_health:
        return outcome
    if len(sim.players) == 2 and sim.hq_health[player] >= MAX_HQ_HEALTH:
        for opponent in sim.players:
            if opponent != player and opponent in sim.hq_health:
                damage_hq(sim, opponent, player, outcome.hq_events)
    elif sim.hq_health[player] < MAX_HQ_HEALTH:
        heal_hq(sim, player, outcome.hq_events)
    return outcome


def is_spawn_cell(sim: SimState, idx: int) -> bool:
    """Empty, not an HQ, not holding a power-up, clear of every occupied
    cell (Chebyshev), and outside the middle third of rows in 2-player
    games."""
    if sim.units[idx] > 0 or idx in sim.hq_cells or idx in sim.power_ups:
        return False
    if len(sim.players) == 2:
        row = idx // sim.cols
        if sim.rows // 3 <= row < sim.rows - sim.rows // 3:
            return False
    units = sim.units
    return not any(units[n] > 0 for n in sim.geometry.block_indices[idx])


def try_spawn_power_up(
    sim: SimState,
    rng: random.Random,
    chance: float,
    max_live: int,
    attempts: int,
) -> Optional[Tuple[int, PowerUpKind]]:
    """Maybe drop one power-up on a random eligible cell.

    Returns the spawned ``(index, kind)`` or None. Running out of attempts
    is not an error.
    """
    if rng.random() >= chance or len(sim.power_ups) >= max_live:
        return None
    size = sim.rows * sim.cols
    for _ in range(attempts):
        idx = rng.randrange(size)
        if not is_spawn_cell(sim, idx):
            continue
        kind = PowerUpKind.DIAMOND if rng.random() < 0.5 else PowerUpKind.HEART
        sim.power_ups[idx] = kind
        return idx, kind
    return None
