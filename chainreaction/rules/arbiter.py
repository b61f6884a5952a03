"""
Turn and win resolution, run after every resolved move.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from ..errors import InvalidStateError
from ..models import PlayerColor
from .state import SimState

logger = logging.getLogger(__name__)


def detect_winner(sim: SimState) -> Tuple[bool, Optional[PlayerColor]]:
    """Return ``(is_over, winner)``; a finished game with no winner is a draw.

    Base mode is decided by surviving HQs. Classic mode is decided once two
    moves have been made and a single player owns every occupied cell.
    """
    if sim.is_base_mode:
        alive = [p for p in sim.players if sim.hq_alive(p)]
        if len(alive) == 1:
            return True, alive[0]
        if not alive:
            return True, None
        return False, None

    if sim.move_count >= 2:
        occupied = sim.occupied_players()
        if len(occupied) == 1:
            return True, next(iter(occupied))
    return False, None


def next_player(sim: SimState, current: PlayerColor) -> PlayerColor:
    """Next eligible player after ``current`` in rotation order.

    Skips players whose HQ is destroyed (base mode) and, once every player
    has had a turn, players owning no cells. Checks at most one full cycle
    and keeps ``current`` if nobody qualifies.
    """
    players = sim.players
    if current not in players:
        raise InvalidStateError(
            "Active player is not seated in this game",
            context={"player": current.value},
        )
    count = len(players)
    start = players.index(current)
    skip_empty = sim.move_count > count
    for offset in range(1, count + 1):
        candidate = players[(start + offset) % count]
        if sim.is_base_mode and not sim.hq_alive(candidate):
            continue
        if skip_empty and sim.cell_count(candidate) == 0:
            continue
        return candidate

    logger.warning(
        "No eligible next player after %s at move %d; keeping current player",
        current.value,
        sim.move_count,
    )
    return current


def resolve_turn(sim: SimState, mover: PlayerColor) -> None:
    """Update ``is_over``/``winner`` or hand the turn to the next player."""
    is_over, winner = detect_winner(sim)
    if is_over:
        sim.is_over = True
        sim.winner = winner
        return
    sim.active_player = next_player(sim, mover)
