"""Minimax AI implementation for Chain Reaction.

This agent uses depth-limited minimax with alpha-beta pruning over private
:class:`SimState` copies, driven by iterative deepening under a wall-clock
budget. ``config.think_time`` (when set) is an upper bound on search time
per move; when the budget runs out mid-iteration the ranking from the last
completed depth is used, or the heuristic ranking if not even depth 1
finished.

Multi-player semantics:
For 3p/4p games MinimaxAI uses a "Paranoid" reduction: this AI is the sole
maximiser and every other player is treated as a minimising coalition.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

import numpy as np

from ..config import AI_MAX_BRANCHING, AI_THINK_TIME_MS
from ..errors import AITimeoutError
from ..models import AIConfig, AIDifficulty, GameState, PlayerColor
from ..rules.simulate import simulate_move
from ..rules.state import SimState
from ..rules.validator import legal_moves
from .base import ScoredMove
from .bounded_transposition_table import (
    EXACT,
    LOWER_BOUND,
    UPPER_BOUND,
    BoundedTranspositionTable,
    SearchEntry,
)
from .heuristic_ai import HeuristicAI
from .personality import AIPersonality

logger = logging.getLogger(__name__)

WIN_SCORE = 1_000_000.0

# Check the clock every N nodes.
_TIME_CHECK_INTERVAL = 64


class MinimaxAI(HeuristicAI):
    """AI that uses minimax with alpha-beta pruning.

    Difficulty and depth:
        ``config.search_depth`` when set, otherwise by difficulty
        (see :meth:`_get_max_depth`):

        - hard   → depth 4
        - medium → depth 3
        - easy   → depth 2

    Static evaluation (:meth:`evaluate_position`) combines material,
    position, mobility, safety, tempo and (base mode) HQ health, each
    scaled by ``EVAL_WEIGHTS`` and the personality.
    """

    EVAL_WEIGHTS: Dict[str, float] = {
        "material": 100.0,
        "position": 50.0,
        "mobility": 30.0,
        "safety": 80.0,
        "tempo": 25.0,
        "hq": 150.0,
    }

    def __init__(
        self,
        player: PlayerColor,
        config: AIConfig,
        personality: Optional[AIPersonality] = None,
        game_seed: int = 0,
    ) -> None:
        super().__init__(player, config, personality, game_seed)
        # Use bounded tables to prevent memory leaks
        self.transposition_table: BoundedTranspositionTable = (
            BoundedTranspositionTable(max_entries=100_000)
        )
        # Wall-clock search bookkeeping, populated at the start of each
        # rank_moves call.
        self.start_time: float = 0.0
        self.time_limit: float = 0.0
        self.nodes_visited: int = 0
        self.completed_depth: int = 0
        self.max_branching: int = config.max_branching or AI_MAX_BRANCHING

    def _get_max_depth(self) -> int:
        """Get maximum search depth based on configuration."""
        if self.config.search_depth is not None:
            return self.config.search_depth
        if self.config.difficulty == AIDifficulty.HARD:
            return 4
        elif self.config.difficulty == AIDifficulty.MEDIUM:
            return 3
        else:
            return 2

    def _get_time_limit(self) -> float:
        if self.config.think_time is not None and self.config.think_time > 0:
            return self.config.think_time / 1000.0
        return AI_THINK_TIME_MS / 1000.0

    # ------------------------------------------------------------------
    # Root search
    # ------------------------------------------------------------------

    def rank_moves(self, sim: SimState, moves: List[int]) -> List[ScoredMove]:
        """Iterative deepening over every root move with a full window, so
        the returned ranking orders all moves and not just the best."""
        self.start_time = time.time()
        self.time_limit = self._get_time_limit()
        self.nodes_visited = 0
        self.completed_depth = 0
        self.transposition_table.clear()

        children: Dict[int, SimState] = {}
        for idx in moves:
            child = sim.copy()
            simulate_move(child, idx, self.player)
            children[idx] = child

        ordered = self._score_and_sort_moves(sim, moves, self.player)
        best_scores: Optional[Dict[int, float]] = None
        max_depth = self._get_max_depth()

        for depth in range(1, max_depth + 1):
            scores: Dict[int, float] = {}
            try:
                for idx in ordered:
                    scores[idx] = self._minimax(
                        children[idx], depth - 1, float("-inf"), float("inf")
                    )
            except AITimeoutError as e:
                # The incomplete depth is discarded.
                logger.debug("MinimaxAI(%s): %s", self.player.value, e)
                break

            best_scores = scores
            self.completed_depth = depth
            # Best-first ordering for the next iteration.
            ordered = sorted(ordered, key=lambda i: (-scores[i], i))
            if scores[ordered[0]] >= WIN_SCORE:
                break

        if best_scores is None:
            logger.warning(
                "MinimaxAI(%s): no search depth completed within %.2fs; "
                "falling back to heuristic ranking",
                self.player.value,
                self.time_limit,
            )
            return super().rank_moves(sim, moves)

        entries = []
        for idx in moves:
            row, col = divmod(idx, sim.cols)
            entries.append(
                ScoredMove(self.apply_noise(best_scores[idx]), idx, row, col)
            )
        ranking = self.sort_ranking(entries)
        logger.debug(
            "MinimaxAI(%s): depth %d, %d nodes, best (%d,%d) %.1f, tt=%s",
            self.player.value,
            self.completed_depth,
            self.nodes_visited,
            ranking[0].row,
            ranking[0].col,
            ranking[0].score,
            self.transposition_table.stats(),
        )
        return ranking

    def _score_and_sort_moves(
        self, sim: SimState, moves: List[int], mover: PlayerColor
    ) -> List[int]:
        """Cheap ordering for better pruning: exploding placements first,
        then power-ups, then cells covering an enemy cell about to explode.
        Ties keep board order."""
        geo = sim.geometry
        units = sim.units
        owners = sim.owners
        critical_masses = geo.critical_masses

        def priority(idx: int) -> int:
            if owners[idx] == mover and units[idx] >= critical_masses[idx] - 1:
                return 3
            if idx in sim.power_ups:
                return 2
            for n in geo.neighbor_indices[idx]:
                owner = owners[n]
                if (
                    owner is not None
                    and owner != mover
                    and units[n] >= critical_masses[n] - 1
                ):
                    return 1
            return 0

        return sorted(moves, key=lambda i: (-priority(i), i))

    # ------------------------------------------------------------------
    # Tree search
    # ------------------------------------------------------------------

    def _minimax(
        self,
        sim: SimState,
        depth: int,
        alpha: float,
        beta: float,
    ) -> float:
        """
        Paranoid alpha-beta: maximise on this AI's turns, minimise on
        every opponent's.
        """
        self.nodes_visited += 1
        if (
            self.nodes_visited % _TIME_CHECK_INTERVAL == 0
            and time.time() - self.start_time > self.time_limit
        ):
            raise AITimeoutError(
                "Search budget exhausted",
                context={
                    "time_limit": self.time_limit,
                    "nodes": self.nodes_visited,
                    "completed_depth": self.completed_depth,
                },
            )

        if sim.is_over:
            if sim.winner == self.player:
                return WIN_SCORE + depth  # Prefer faster wins
            elif sim.winner is not None:
                return -WIN_SCORE - depth  # Prefer slower losses
            return 0.0
        if depth == 0:
            return self.evaluate_position(sim)

        key = sim.key()
        cached = self.transposition_table.probe(key, depth, alpha, beta)
        if cached is not None:
            return cached

        mover = sim.active_player
        moves = legal_moves(sim, mover)
        if not moves:
            return self.evaluate_position(sim)
        ordered = self._score_and_sort_moves(sim, moves, mover)[: self.max_branching]

        alpha_orig, beta_orig = alpha, beta
        if mover == self.player:
            value = float("-inf")
            for idx in ordered:
                child = sim.copy()
                simulate_move(child, idx, mover)
                value = max(value, self._minimax(child, depth - 1, alpha, beta))
                alpha = max(alpha, value)
                if alpha >= beta:
                    break
        else:
            value = float("inf")
            for idx in ordered:
                child = sim.copy()
                simulate_move(child, idx, mover)
                value = min(value, self._minimax(child, depth - 1, alpha, beta))
                beta = min(beta, value)
                if alpha >= beta:
                    break

        if value <= alpha_orig:
            flag = UPPER_BOUND
        elif value >= beta_orig:
            flag = LOWER_BOUND
        else:
            flag = EXACT
        self.transposition_table.put(key, SearchEntry(depth, value, flag))
        return value

    # ------------------------------------------------------------------
    # Static evaluation
    # ------------------------------------------------------------------

    def _evaluation_terms(self, sim: SimState) -> Dict[str, float]:
        geo = sim.geometry
        units = np.asarray(sim.units, dtype=np.int32)
        occupied = units > 0
        mine = np.fromiter(
            (owner == self.player for owner in sim.owners), dtype=bool, count=geo.size
        ) & occupied
        opponent_weight = np.fromiter(
            (
                0.0 if owner is None or owner == self.player
                else self.personality.opponent_weight(owner)
                for owner in sim.owners
            ),
            dtype=np.float64,
            count=geo.size,
        ) * occupied
        theirs = opponent_weight > 0

        material = (
            mine.sum() - opponent_weight.sum()
            + 0.1 * (units[mine].sum() - (units * opponent_weight).sum())
        )

        cell_value = (
            geo.corner_mask * 3.0
            + geo.edge_mask * 2.0
            + np.maximum(0.0, 5.0 - geo.center_distance)
        )
        position = cell_value[mine].sum()

        opponents = self.get_opponents(sim)
        mobility = len(legal_moves(sim, self.player)) - 0.5 * sum(
            len(legal_moves(sim, o)) for o in opponents
        )

        near_critical = units >= geo.critical_mass_array - 1
        threats = (theirs & near_critical).reshape(sim.rows, sim.cols).astype(np.int32)
        padded = np.pad(threats, 1)
        adjacent_threats = (
            padded[:-2, 1:-1] + padded[2:, 1:-1] + padded[1:-1, :-2] + padded[1:-1, 2:]
        ).ravel()
        safety = -2.0 * (mine & near_critical).sum() - 3.0 * adjacent_threats[mine].sum()

        tempo = 2.0 * (mine & (units == geo.critical_mass_array - 1)).sum()

        hq = 0.0
        if sim.is_base_mode and opponents:
            enemy = sum(sim.hq_health[o] for o in opponents) / len(opponents)
            hq = sim.hq_health.get(self.player, 0) - enemy

        return {
            "material": float(material),
            "position": float(position),
            "mobility": float(mobility),
            "safety": float(safety),
            "tempo": float(tempo),
            "hq": float(hq),
        }

    def evaluate_position(self, sim: SimState) -> float:
        if sim.is_over:
            if sim.winner == self.player:
                return WIN_SCORE
            if sim.winner is not None:
                return -WIN_SCORE
            return 0.0
        terms = self._evaluation_terms(sim)
        return sum(
            terms[name] * weight * self.personality.weight(name)
            for name, weight in self.EVAL_WEIGHTS.items()
        )

    def get_evaluation_breakdown(self, game_state: GameState) -> Dict[str, float]:
        sim = SimState.from_game_state(game_state)
        breakdown = self._evaluation_terms(sim) if not sim.is_over else {}
        breakdown["total"] = self.evaluate_position(sim)
        return breakdown
