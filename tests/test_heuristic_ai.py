import unittest
from unittest.mock import patch

from chainreaction.ai.base import ScoredMove
from chainreaction.ai.heuristic_ai import HeuristicAI
from chainreaction.ai.heuristic_weights import HEURISTIC_WEIGHT_PROFILES
from chainreaction.ai.personality import AIPersonality
from chainreaction.game_engine import GameEngine
from chainreaction.models import (
    AIConfig,
    AIDifficulty,
    GameMode,
    PlayerColor,
)
from chainreaction.rules.state import SimState

RED = PlayerColor.RED
BLUE = PlayerColor.BLUE


def _state_with(rows, cols, cells, mode=GameMode.CLASSIC, move_count=0, hq_health=None):
    state = GameEngine.new_game(
        mode, player_count=2, rows=rows, cols=cols, power_ups_enabled=False
    )
    sim = SimState.from_game_state(state)
    for (r, c), (n, owner) in cells.items():
        sim.units[sim.index(r, c)] = n
        sim.owners[sim.index(r, c)] = owner
    for player, health in (hq_health or {}).items():
        sim.hq_health[player] = health
    sim.move_count = move_count
    return sim.to_game_state(state.settings)


class TestHeuristicAI(unittest.TestCase):
    def setUp(self) -> None:
        self.config = AIConfig(
            difficulty=AIDifficulty.HARD, score_noise=0.0, rng_seed=42
        )
        self.ai = HeuristicAI(RED, self.config)

    def test_select_move_returns_legal_move(self) -> None:
        state = GameEngine.new_game(GameMode.CLASSIC, player_count=2)
        move = self.ai.select_move(state)
        self.assertIsNotNone(move)
        self.assertTrue(GameEngine.is_legal_move(state, move[0], move[1], RED))
        self.assertEqual(len(self.ai.last_ranking), 63)

    def test_does_not_modify_state(self) -> None:
        state = _state_with(5, 5, {(0, 0): (1, RED), (1, 1): (2, BLUE)}, move_count=2)
        before = state.model_dump()
        self.ai.select_move(state)
        self.assertEqual(state.model_dump(), before)

    def test_takes_immediately_winning_move(self) -> None:
        state = _state_with(3, 3, {(0, 0): (1, RED), (0, 1): (1, BLUE)}, move_count=2)
        self.assertEqual(self.ai.select_move(state), (0, 0))
        best = self.ai.last_ranking[0]
        self.assertGreaterEqual(best.score, HeuristicAI.WEIGHT_WIN)

    def test_prefers_corner_early(self) -> None:
        state = GameEngine.new_game(GameMode.CLASSIC, player_count=2, rows=5, cols=5)
        sim = SimState.from_game_state(state)
        corner = self.ai.score_move(sim, sim.index(0, 0))["positional"]
        centre = self.ai.score_move(sim, sim.index(2, 2))["positional"]
        self.assertGreater(corner, centre)

    def test_risk_counts_opponent_explosion(self) -> None:
        # Blue's corner is one unit from exploding into (0, 1).
        state = _state_with(3, 3, {(0, 0): (1, BLUE), (2, 2): (1, RED)}, move_count=2)
        sim = SimState.from_game_state(state)
        exposed = self.ai.score_move(sim, sim.index(0, 1))["risk"]
        safe = self.ai.score_move(sim, sim.index(2, 0))["risk"]
        self.assertLess(exposed, safe)

    def test_base_mode_values_hq_damage(self) -> None:
        state = _state_with(
            9, 9, {(3, 8): (2, RED), (0, 0): (1, RED)}, mode=GameMode.BASE
        )
        sim = SimState.from_game_state(state)
        attack = self.ai.score_move(sim, sim.index(3, 8))
        quiet = self.ai.score_move(sim, sim.index(1, 0))
        self.assertGreater(attack["base_attack"], quiet["base_attack"])
        self.assertGreater(attack["total"], quiet["total"])

    def test_no_legal_move_returns_none(self) -> None:
        state = _state_with(9, 9, {}, mode=GameMode.BASE, hq_health={RED: 0})
        self.assertIsNone(self.ai.select_move(state))
        self.assertEqual(self.ai.last_ranking, [])

    def test_same_seed_same_choices(self) -> None:
        config = AIConfig(difficulty=AIDifficulty.EASY, rng_seed=7)
        state = GameEngine.new_game(GameMode.CLASSIC, player_count=2, rows=5, cols=5)
        first = HeuristicAI(RED, config).select_move(state)
        second = HeuristicAI(RED, config).select_move(state)
        self.assertEqual(first, second)

    def test_personality_scales_categories(self) -> None:
        state = GameEngine.new_game(GameMode.CLASSIC, player_count=2, rows=5, cols=5)
        sim = SimState.from_game_state(state)
        doubled = HeuristicAI(
            RED,
            self.config,
            personality=AIPersonality(multipliers={"positional": 2.0}),
        )
        base = self.ai.score_move(sim, sim.index(0, 0))["positional"]
        scaled = doubled.score_move(sim, sim.index(0, 0))["positional"]
        self.assertAlmostEqual(scaled, 2.0 * base)


class TestWeightProfiles(unittest.TestCase):
    def test_profile_overrides_weights(self) -> None:
        config = AIConfig(heuristic_profile_id="heuristic_v1_aggressive")
        ai = HeuristicAI(RED, config)
        profile = HEURISTIC_WEIGHT_PROFILES["heuristic_v1_aggressive"]
        self.assertEqual(ai.WEIGHT_HQ_ATTACK, profile["WEIGHT_HQ_ATTACK"])
        self.assertNotEqual(ai.WEIGHT_HQ_ATTACK, HeuristicAI.WEIGHT_HQ_ATTACK)

    def test_unknown_profile_keeps_defaults(self) -> None:
        config = AIConfig(heuristic_profile_id="no_such_profile")
        with self.assertLogs("chainreaction.ai.heuristic_ai", level="WARNING"):
            ai = HeuristicAI(RED, config)
        self.assertEqual(ai.WEIGHT_HQ_ATTACK, HeuristicAI.WEIGHT_HQ_ATTACK)


class TestDifficultySlices(unittest.TestCase):
    def _ranking(self, n):
        return [ScoredMove(float(n - i), i, 0, i) for i in range(n)]

    def test_hard_takes_best(self) -> None:
        ai = HeuristicAI(RED, AIConfig(difficulty=AIDifficulty.HARD))
        self.assertEqual(ai.choose_from_ranking(self._ranking(8)).idx, 0)

    def test_easy_samples_top_half(self) -> None:
        ai = HeuristicAI(RED, AIConfig(difficulty=AIDifficulty.EASY))
        ranking = self._ranking(8)
        with patch.object(ai.rng, "choice", side_effect=lambda items: items[-1]) as choice:
            picked = ai.choose_from_ranking(ranking)
        choice.assert_called_once_with(ranking[:4])
        self.assertEqual(picked.idx, 3)

    def test_medium_samples_top_quarter(self) -> None:
        ai = HeuristicAI(RED, AIConfig(difficulty=AIDifficulty.MEDIUM))
        ranking = self._ranking(9)
        for _ in range(20):
            self.assertLess(ai.choose_from_ranking(ranking).idx, 3)


if __name__ == "__main__":
    unittest.main()
