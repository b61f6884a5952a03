"""
Shared pytest fixtures for the Chain Reaction tests.

Game state fixtures are function-scoped so every test gets its own state.
"""

from typing import Callable, Dict, Optional, Sequence, Tuple

import pytest

from chainreaction.game_engine import GameEngine
from chainreaction.models import (
    GameMode,
    GameState,
    PlayerColor,
    PowerUpKind,
)
from chainreaction.rules.state import SimState

Coord = Tuple[int, int]


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def state_factory() -> Callable[..., GameState]:
    """Factory for GameStates with hand-placed cells, HQ health and power-ups.

    ``cells`` maps ``(row, col)`` to ``(units, owner)``. Base-mode HQs sit
    at their standard sites; ``hq_health`` overrides their health.
    Power-up spawning is off unless ``power_ups_enabled=True`` is passed.
    """

    def _create_state(
        mode: GameMode = GameMode.CLASSIC,
        players: Sequence[PlayerColor] = (PlayerColor.RED, PlayerColor.BLUE),
        rows: Optional[int] = None,
        cols: Optional[int] = None,
        cells: Optional[Dict[Coord, Tuple[int, PlayerColor]]] = None,
        hq_health: Optional[Dict[PlayerColor, int]] = None,
        power_ups: Optional[Dict[Coord, PowerUpKind]] = None,
        active_player: Optional[PlayerColor] = None,
        move_count: int = 0,
        **overrides,
    ) -> GameState:
        overrides.setdefault("power_ups_enabled", False)
        state = GameEngine.new_game(
            mode, players=list(players), rows=rows, cols=cols, **overrides
        )
        sim = SimState.from_game_state(state)
        for (row, col), (units, owner) in (cells or {}).items():
            idx = sim.index(row, col)
            sim.units[idx] = units
            sim.owners[idx] = owner if units > 0 else None
        for player, health in (hq_health or {}).items():
            sim.hq_health[player] = health
        for (row, col), kind in (power_ups or {}).items():
            sim.power_ups[sim.index(row, col)] = kind
        if active_player is not None:
            sim.active_player = active_player
        sim.move_count = move_count
        return sim.to_game_state(state.settings)

    return _create_state


@pytest.fixture
def sim_factory(state_factory) -> Callable[..., SimState]:
    """Same arguments as ``state_factory``, returning a SimState."""

    def _create_sim(**kwargs) -> SimState:
        return SimState.from_game_state(state_factory(**kwargs))

    return _create_sim


# =============================================================================
# COMMON GAME STATE FIXTURES
# =============================================================================


@pytest.fixture
def classic_state() -> GameState:
    """Fresh 2-player classic game on the default 9x7 board."""
    return GameEngine.new_game(GameMode.CLASSIC, player_count=2, rng_seed=1)


@pytest.fixture
def base_state() -> GameState:
    """Fresh 2-player base game on the default 9x9 board, no power-ups."""
    return GameEngine.new_game(
        GameMode.BASE, player_count=2, rng_seed=1, power_ups_enabled=False
    )
