"""Tests for placement legality."""

import pytest

from chainreaction.errors import InvalidStateError
from chainreaction.game_engine import GameEngine
from chainreaction.models import GameMode, PlayerColor
from chainreaction.rules.state import SimState
from chainreaction.rules.validator import (
    hq_line_indices,
    is_legal_placement,
    legal_moves,
)

RED = PlayerColor.RED
BLUE = PlayerColor.BLUE


class TestClassicLegality:
    def test_empty_and_own_cells_are_legal(self, state_factory) -> None:
        state = state_factory(cells={(0, 0): (1, RED)})
        assert GameEngine.is_legal_move(state, 0, 0, RED)
        assert GameEngine.is_legal_move(state, 3, 3, RED)

    def test_enemy_cell_is_illegal(self, state_factory) -> None:
        state = state_factory(cells={(0, 0): (1, BLUE)})
        assert not GameEngine.is_legal_move(state, 0, 0, RED)

    def test_out_of_bounds_is_illegal(self, classic_state) -> None:
        assert not GameEngine.is_legal_move(classic_state, -1, 0, RED)
        assert not GameEngine.is_legal_move(classic_state, 9, 0, RED)
        assert not GameEngine.is_legal_move(classic_state, 0, 7, RED)

    def test_finished_game_has_no_legal_moves(self, classic_state) -> None:
        over = classic_state.model_copy(update={"is_over": True, "winner": RED})
        assert not GameEngine.is_legal_move(over, 0, 0, RED)
        assert legal_moves(SimState.from_game_state(over), RED) == []

    def test_check_is_repeatable_and_pure(self, state_factory) -> None:
        state = state_factory(cells={(1, 1): (2, RED), (2, 2): (1, BLUE)})
        before = state.model_dump()
        results = [GameEngine.is_legal_move(state, r, c, RED) for r, c in [(1, 1), (2, 2)] * 3]
        assert results == [True, False] * 3
        assert state.model_dump() == before


class TestBaseLegality:
    def test_hq_line_follows_hq_edge(self, sim_factory) -> None:
        sim = sim_factory(mode=GameMode.BASE)
        # Red HQ at (4, 0): the line is column 0.
        assert hq_line_indices(sim, RED) == [sim.index(r, 0) for r in range(9)]

    def test_first_move_must_be_on_hq_line(self, base_state) -> None:
        assert GameEngine.is_legal_move(base_state, 0, 0, RED)
        assert GameEngine.is_legal_move(base_state, 3, 0, RED)
        # Next to the HQ but off its line.
        assert not GameEngine.is_legal_move(base_state, 4, 1, RED)
        assert not GameEngine.is_legal_move(base_state, 0, 4, RED)

    def test_hq_cell_is_never_legal(self, base_state) -> None:
        assert not GameEngine.is_legal_move(base_state, 4, 0, RED)
        assert not GameEngine.is_legal_move(base_state, 4, 8, RED)

    def test_first_move_options(self, sim_factory) -> None:
        sim = sim_factory(mode=GameMode.BASE)
        expected = [sim.index(r, 0) for r in range(9) if r != 4]
        assert legal_moves(sim, RED) == expected

    def test_reach_after_first_move(self, state_factory) -> None:
        state = state_factory(mode=GameMode.BASE, cells={(0, 0): (1, RED)})
        # Adjacent to the HQ.
        assert GameEngine.is_legal_move(state, 4, 1, RED)
        assert GameEngine.is_legal_move(state, 5, 1, RED)
        # Adjacent (diagonally) to an owned cell.
        assert GameEngine.is_legal_move(state, 1, 1, RED)
        # Two steps from everything red.
        assert not GameEngine.is_legal_move(state, 2, 2, RED)

    def test_legal_moves_agree_with_single_checks(self, sim_factory) -> None:
        sim = sim_factory(
            mode=GameMode.BASE,
            cells={(0, 0): (1, RED), (1, 1): (1, BLUE), (7, 2): (2, RED)},
        )
        expected = [
            sim.index(r, c)
            for r in range(sim.rows)
            for c in range(sim.cols)
            if is_legal_placement(sim, r, c, RED)
        ]
        assert legal_moves(sim, RED) == expected

    def test_destroyed_hq_has_no_moves(self, sim_factory) -> None:
        sim = sim_factory(mode=GameMode.BASE, hq_health={RED: 0})
        assert legal_moves(sim, RED) == []
        assert not is_legal_placement(sim, 0, 0, RED)

    def test_missing_hq_is_invalid_state(self, base_state) -> None:
        broken = base_state.model_copy(update={"hqs": base_state.hqs[:1]})
        with pytest.raises(InvalidStateError):
            SimState.from_game_state(broken)


class TestUnseatedPlayer:
    @pytest.mark.parametrize("mode", [GameMode.CLASSIC, GameMode.BASE])
    def test_player_not_in_game_has_no_moves(self, mode) -> None:
        state = GameEngine.new_game(mode, player_count=2, power_ups_enabled=False)
        sim = SimState.from_game_state(state)
        assert not GameEngine.is_legal_move(state, 0, 0, PlayerColor.BLACK)
        assert not is_legal_placement(sim, 0, 0, PlayerColor.BLACK)
        assert legal_moves(sim, PlayerColor.BLACK) == []
        assert GameEngine.get_valid_moves(state, PlayerColor.BLACK) == []
