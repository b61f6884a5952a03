"""Rule resolution over the flat :class:`SimState` board."""

from .simulate import MoveOutcome, simulate_move
from .state import SimState
from .validator import is_legal_placement, legal_moves

__all__ = [
    "MoveOutcome",
    "SimState",
    "is_legal_placement",
    "legal_moves",
    "simulate_move",
]
