"""Tests for power-up effects and spawning."""

import random

from chainreaction.game_engine import GameEngine
from chainreaction.models import GameMode, HQEventType, PlayerColor, PowerUpKind
from chainreaction.rules.power_ups import (
    apply_power_up,
    is_spawn_cell,
    try_spawn_power_up,
)
from chainreaction.rules.simulate import simulate_move

RED = PlayerColor.RED
BLUE = PlayerColor.BLUE
VIOLET = PlayerColor.VIOLET
THREE_PLAYERS = (RED, BLUE, VIOLET)


class TestDiamond:
    def test_two_players_fills_the_row(self, sim_factory) -> None:
        sim = sim_factory(
            mode=GameMode.BASE,
            rows=9,
            cols=7,
            cells={(2, 0): (1, RED), (2, 5): (2, BLUE)},
            power_ups={(2, 3): PowerUpKind.DIAMOND},
        )
        outcome = simulate_move(sim, sim.index(2, 3), RED)

        assert outcome.power_up == PowerUpKind.DIAMOND
        assert outcome.exploded == 0
        row = [(sim.units[sim.index(2, c)], sim.owners[sim.index(2, c)]) for c in range(7)]
        assert row == [
            (2, RED),
            (1, RED),
            (1, RED),
            (1, RED),
            (1, RED),
            (2, BLUE),
            (1, RED),
        ]
        assert len(outcome.filled) == 6
        assert sim.power_ups == {}

    def test_more_players_fills_the_block_and_skips_hq(self, sim_factory) -> None:
        sim = sim_factory(
            mode=GameMode.BASE,
            players=THREE_PLAYERS,
            power_ups={(1, 4): PowerUpKind.DIAMOND},
        )
        # Blue's HQ sits at (0, 4), inside the block.
        outcome = apply_power_up(sim, sim.index(1, 4), RED, PowerUpKind.DIAMOND)
        assert len(outcome.filled) == 8
        assert sim.index(0, 4) not in outcome.filled
        assert sim.owners[sim.index(0, 4)] == BLUE
        assert sim.units[sim.index(0, 4)] == 1
        assert all(sim.owners[i] == RED for i in outcome.filled)

    def test_no_cascade_from_filled_cells(self, sim_factory) -> None:
        sim = sim_factory(
            mode=GameMode.BASE,
            cells={(0, 0): (1, RED)},
            power_ups={(0, 2): PowerUpKind.DIAMOND},
        )
        simulate_move(sim, sim.index(0, 2), RED)
        # The corner reached its critical mass but does not explode.
        assert sim.units[sim.index(0, 0)] == 2
        assert sim.owners[sim.index(0, 0)] == RED


class TestHeart:
    def test_heals_damaged_hq(self, sim_factory) -> None:
        sim = sim_factory(mode=GameMode.BASE, hq_health={RED: 3})
        outcome = apply_power_up(sim, sim.index(0, 0), RED, PowerUpKind.HEART)
        assert sim.hq_health[RED] == 4
        assert [e.event_type for e in outcome.hq_events] == [HQEventType.HEAL]

    def test_full_health_two_players_damages_opponent(self, sim_factory) -> None:
        sim = sim_factory(mode=GameMode.BASE)
        outcome = apply_power_up(sim, sim.index(0, 0), RED, PowerUpKind.HEART)
        assert sim.hq_health == {RED: 5, BLUE: 4}
        assert len(outcome.hq_events) == 1
        event = outcome.hq_events[0]
        assert event.owner == BLUE
        assert event.event_type == HQEventType.DAMAGE
        assert event.source_player == RED

    def test_full_health_more_players_does_nothing(self, sim_factory) -> None:
        sim = sim_factory(
            mode=GameMode.BASE,
            players=THREE_PLAYERS,
            power_ups={(0, 0): PowerUpKind.HEART},
        )
        outcome = apply_power_up(sim, sim.index(0, 0), RED, PowerUpKind.HEART)
        assert outcome.hq_events == []
        assert set(sim.hq_health.values()) == {5}
        assert sim.power_ups == {}


class TestSpawning:
    def test_middle_third_excluded_with_two_players(self, sim_factory) -> None:
        sim = sim_factory(mode=GameMode.BASE)
        assert not is_spawn_cell(sim, sim.index(4, 4))
        assert not is_spawn_cell(sim, sim.index(3, 4))
        assert is_spawn_cell(sim, sim.index(1, 4))
        assert is_spawn_cell(sim, sim.index(7, 4))

    def test_middle_allowed_with_four_players(self, sim_factory) -> None:
        sim = sim_factory(mode=GameMode.BASE, players=tuple(PlayerColor))
        assert is_spawn_cell(sim, sim.index(4, 4))

    def test_needs_clear_surroundings(self, sim_factory) -> None:
        sim = sim_factory(mode=GameMode.BASE, cells={(0, 3): (1, RED)})
        assert not is_spawn_cell(sim, sim.index(1, 4))
        assert not is_spawn_cell(sim, sim.index(0, 3))
        assert is_spawn_cell(sim, sim.index(1, 6))

    def test_chance_and_cap(self, sim_factory) -> None:
        sim = sim_factory(mode=GameMode.BASE)
        assert try_spawn_power_up(sim, random.Random(1), 0.0, 4, 50) is None
        assert try_spawn_power_up(sim, random.Random(1), 1.0, 0, 50) is None

        result = try_spawn_power_up(sim, random.Random(1), 1.0, 4, 500)
        assert result is not None
        idx, kind = result
        assert sim.power_ups == {idx: kind}

    def test_engine_spawn_is_reproducible(self) -> None:
        state = GameEngine.new_game(
            GameMode.BASE,
            player_count=2,
            rng_seed=7,
            power_up_spawn_chance=1.0,
            power_up_spawn_attempts=500,
        )
        first = GameEngine.apply_move(state, 0, 0, RED)
        second = GameEngine.apply_move(state, 0, 0, RED)
        assert first.power_ups == second.power_ups
        assert len(first.power_ups) == 1
        assert first.last_move.spawned_power_up == first.power_ups[0]

        redone = GameEngine.apply_move(GameEngine.undo(first), 0, 0, RED)
        assert redone.power_ups == first.power_ups
