"""Tests for chain-reaction resolution."""

import pytest

from chainreaction.errors import InvalidStateError
from chainreaction.game_engine import GameEngine
from chainreaction.models import GameMode, HQEventType, PlayerColor
from chainreaction.rules.cascade import (
    CascadeResolver,
    HQEventRecord,
    place_unit,
    resolve_placement,
)

RED = PlayerColor.RED
BLUE = PlayerColor.BLUE


def _checkerboard_cells(rows, cols):
    """Every cell one unit short of critical mass, colours alternating."""
    cells = {}
    for r in range(rows):
        for c in range(cols):
            on_row_edge = r in (0, rows - 1)
            on_col_edge = c in (0, cols - 1)
            mass = 4 - on_row_edge - on_col_edge
            cells[(r, c)] = (mass - 1, RED if (r + c) % 2 == 0 else BLUE)
    return cells


class TestPlacement:
    def test_placement_on_own_cell_adds_a_unit(self, sim_factory) -> None:
        sim = sim_factory(cells={(1, 1): (2, RED)})
        assert place_unit(sim, sim.index(1, 1), RED) is False
        assert sim.units[sim.index(1, 1)] == 3

    def test_placement_on_enemy_cell_resets_to_one(self, sim_factory) -> None:
        sim = sim_factory(cells={(1, 1): (2, BLUE)})
        assert place_unit(sim, sim.index(1, 1), RED) is True
        assert sim.units[sim.index(1, 1)] == 1
        assert sim.owners[sim.index(1, 1)] == RED


class TestCornerScenario:
    def test_corner_explodes_into_both_neighbors(self) -> None:
        state = GameEngine.new_game(GameMode.CLASSIC, player_count=2, rows=3, cols=3)
        state = GameEngine.apply_move(state, 0, 0, RED)
        state = GameEngine.apply_move(state, 2, 2, BLUE)
        state = GameEngine.apply_move(state, 0, 0, RED)

        board = state.board
        assert board.cell_at(0, 0).unit_count == 0
        assert board.cell_at(0, 0).owner is None
        assert board.cell_at(0, 1).unit_count == 1
        assert board.cell_at(0, 1).owner == RED
        assert board.cell_at(1, 0).unit_count == 1
        assert board.cell_at(1, 0).owner == RED
        assert board.cell_at(2, 2).owner == BLUE
        assert state.last_move.exploded_cells == 1
        assert state.last_move.cascade_depth == 1
        assert not state.is_over


class TestCascadeResolution:
    def test_deposit_captures_enemy_cell_and_adds(self, sim_factory) -> None:
        sim = sim_factory(rows=3, cols=3, cells={(0, 0): (1, RED), (0, 1): (1, BLUE)})
        outcome = resolve_placement(sim, sim.index(0, 0), RED)
        assert sim.owners[sim.index(0, 1)] == RED
        assert sim.units[sim.index(0, 1)] == 2
        assert sim.index(0, 1) in outcome.captured

    def test_stepping_matches_eager_resolution(self, sim_factory) -> None:
        cells = _checkerboard_cells(5, 5)
        cells[(4, 4)] = (1, BLUE)
        eager = sim_factory(rows=5, cols=5, cells=cells)
        stepped = eager.copy()
        seed = eager.index(2, 2)

        place_unit(eager, seed, RED)
        eager_outcome = CascadeResolver(eager, seed).run()

        place_unit(stepped, seed, RED)
        resolver = CascadeResolver(stepped, seed)
        while not resolver.done:
            pending = resolver.pending
            assert len(pending) == len(set(pending))
            resolver.step()

        assert stepped.units == eager.units
        assert stepped.owners == eager.owners
        assert resolver.outcome.exploded == eager_outcome.exploded
        assert resolver.outcome.depth == eager_outcome.depth

    @pytest.mark.parametrize("size", [(3, 3), (4, 4), (6, 5)])
    def test_dense_board_terminates(self, sim_factory, size) -> None:
        rows, cols = size
        sim = sim_factory(rows=rows, cols=cols, cells=_checkerboard_cells(rows, cols))
        before = sim.total_units()
        outcome = resolve_placement(sim, sim.index(0, 0), RED)

        # Classic explosions only move units around.
        assert sim.total_units() == before + 1
        assert outcome.exploded > 0
        masses = sim.geometry.critical_masses
        settled = all(n < masses[i] for i, n in enumerate(sim.units))
        assert settled or outcome.halted_early

    def test_runaway_cascade_raises(self, sim_factory) -> None:
        sim = sim_factory(rows=3, cols=3, cells={(0, 0): (1, RED), (2, 2): (1, BLUE)})
        idx = sim.index(0, 0)
        place_unit(sim, idx, RED)
        with pytest.raises(InvalidStateError):
            CascadeResolver(sim, idx, step_limit=0).run()


class TestHQInteraction:
    def test_explosion_damages_enemy_hq(self, sim_factory) -> None:
        sim = sim_factory(mode=GameMode.BASE, cells={(3, 8): (2, RED)})
        hq_idx = sim.index(4, 8)
        before = sim.total_units()
        outcome = resolve_placement(sim, sim.index(3, 8), RED)

        assert outcome.hq_events == [
            HQEventRecord(BLUE, HQEventType.DAMAGE, 4, RED)
        ]
        assert sim.hq_health[BLUE] == 4
        # The HQ cell itself receives nothing.
        assert sim.units[hq_idx] == 1
        assert sim.owners[hq_idx] == BLUE
        assert sim.owners[sim.index(2, 8)] == RED
        assert sim.owners[sim.index(3, 7)] == RED
        assert sim.total_units() == before + 1 - 1

    def test_own_hq_absorbs_unit_without_event(self, sim_factory) -> None:
        sim = sim_factory(mode=GameMode.BASE, cells={(3, 0): (2, RED)})
        before = sim.total_units()
        outcome = resolve_placement(sim, sim.index(3, 0), RED)

        assert outcome.hq_events == []
        assert sim.hq_health[RED] == 5
        assert sim.units[sim.index(4, 0)] == 1
        assert sim.owners[sim.index(2, 0)] == RED
        assert sim.owners[sim.index(3, 1)] == RED
        assert sim.total_units() == before + 1 - 1

    def test_hq_health_floors_at_zero(self, sim_factory) -> None:
        sim = sim_factory(
            mode=GameMode.BASE,
            cells={(3, 8): (2, RED), (5, 8): (2, RED)},
            hq_health={BLUE: 1},
        )
        resolve_placement(sim, sim.index(3, 8), RED)
        assert sim.hq_health[BLUE] == 0
        resolve_placement(sim, sim.index(5, 8), RED)
        assert sim.hq_health[BLUE] == 0
