"""
Placement legality.

Pure queries over :class:`SimState`; nothing here mutates the state, so
the same call can be repeated any number of times with identical results.
"""

from __future__ import annotations

from typing import List

from ..errors import InvalidStateError
from ..models import PlayerColor
from .state import SimState


def _require_hq(sim: SimState, player: PlayerColor) -> int:
    hq_idx = sim.hq_index(player)
    if hq_idx is None:
        raise InvalidStateError(
            "Base-mode player has no HQ", context={"player": player.value}
        )
    return hq_idx


def hq_line_indices(sim: SimState, player: PlayerColor) -> List[int]:
    """Cells on the player's HQ line.

    The line runs along the edge the HQ sits on: the column for an HQ on
    the left/right edge, the row for an HQ on the top/bottom edge.
    """
    hq_row, hq_col = divmod(_require_hq(sim, player), sim.cols)
    if hq_col in (0, sim.cols - 1):
        return [sim.index(r, hq_col) for r in range(sim.rows)]
    if hq_row in (0, sim.rows - 1):
        return [sim.index(hq_row, c) for c in range(sim.cols)]
    # Interior HQ (custom boards only): both lines through it.
    return sorted(
        {sim.index(r, hq_col) for r in range(sim.rows)}
        | {sim.index(hq_row, c) for c in range(sim.cols)}
    )


def is_on_hq_line(sim: SimState, player: PlayerColor, row: int, col: int) -> bool:
    hq_row, hq_col = divmod(_require_hq(sim, player), sim.cols)
    if hq_col in (0, sim.cols - 1):
        return col == hq_col
    if hq_row in (0, sim.rows - 1):
        return row == hq_row
    return row == hq_row or col == hq_col


def has_made_first_move(sim: SimState, player: PlayerColor) -> bool:
    """True once any non-HQ cell owned by ``player`` holds a unit."""
    units = sim.units
    hq_cells = sim.hq_cells
    for idx, owner in enumerate(sim.owners):
        if owner == player and units[idx] > 0 and idx not in hq_cells:
            return True
    return False


def is_legal_placement(sim: SimState, row: int, col: int, player: PlayerColor) -> bool:
    if player not in sim.players:
        return False
    if not sim.in_bounds(row, col) or sim.is_over:
        return False
    idx = sim.index(row, col)
    if idx in sim.hq_cells:
        return False
    owner = sim.owners[idx]
    if owner is not None and owner != player:
        return False
    if not sim.is_base_mode:
        return True

    hq_idx = _require_hq(sim, player)
    if not sim.hq_alive(player):
        return False
    if is_on_hq_line(sim, player, row, col):
        return True
    if not has_made_first_move(sim, player):
        return False

    # Chebyshev reach: the player's HQ or any cell the player occupies.
    units = sim.units
    owners = sim.owners
    for near in sim.geometry.block_indices[idx]:
        if near == hq_idx:
            return True
        if owners[near] == player and units[near] > 0:
            return True
    return False


def legal_moves(sim: SimState, player: PlayerColor) -> List[int]:
    """Board indices of every legal placement for ``player``, in board order."""
    if player not in sim.players:
        return []
    if sim.is_over:
        return []
    owners = sim.owners
    hq_cells = sim.hq_cells

    def _open(idx: int) -> bool:
        owner = owners[idx]
        return idx not in hq_cells and (owner is None or owner == player)

    if not sim.is_base_mode:
        return [idx for idx in range(sim.rows * sim.cols) if _open(idx)]

    hq_idx = _require_hq(sim, player)
    if not sim.hq_alive(player):
        return []

    candidates = set(hq_line_indices(sim, player))
    if has_made_first_move(sim, player):
        block_indices = sim.geometry.block_indices
        units = sim.units
        candidates.update(block_indices[hq_idx])
        for idx, owner in enumerate(owners):
            if owner == player and units[idx] > 0:
                candidates.update(block_indices[idx])
    return sorted(idx for idx in candidates if _open(idx))
