"""
Heuristic AI implementation for Chain Reaction.

Every legal move is simulated on a private copy of the board with the same
``simulate_move`` primitive the engine uses, and scored as a weighted sum
of categories:

- ``immediate``: what the placement itself does (build, empty, power-up,
  nearness to critical mass, cells captured by the cascade)
- ``chain``: explosion count and cascade depth
- ``positional``: corner/edge early, centre in mid-game, by share of the
  board the player holds
- ``tactical``: own neighbours, being surrounded, covering enemy cells
  that are about to explode
- ``risk``: cells (and HQ health) lost to each opponent's best immediate
  exploding reply
- ``base_attack`` / ``base_defense``: HQ damage dealt/healed and distance
  to enemy/own HQs weighted by health (base mode only)

Each category total is scaled by the AI's :class:`AIPersonality`, an
immediately winning move gets ``WEIGHT_WIN``, and bounded noise is added
to the final score.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..config import MAX_HQ_HEALTH
from ..geometry import manhattan_distance
from ..models import AIConfig, HQEventType, PlayerColor
from ..rules.cascade import resolve_placement
from ..rules.simulate import MoveOutcome, simulate_move
from ..rules.state import SimState
from .base import BaseAI, ScoredMove
from .heuristic_weights import get_weight_profile
from .personality import HEURISTIC_CATEGORIES, AIPersonality

logger = logging.getLogger(__name__)


class HeuristicAI(BaseAI):
    """AI that ranks moves by one-ply simulation and weighted scoring.

    Class-level ``WEIGHT_*`` constants are the balanced defaults; a
    profile named by ``config.heuristic_profile_id`` overrides them per
    instance.
    """

    WEIGHT_CAPTURE_CELL = 15.0
    WEIGHT_BUILD_ON_OWN = 8.0
    WEIGHT_EMPTY_CELL = 3.0
    WEIGHT_NEAR_CRITICAL = 50.0
    WEIGHT_ONE_FROM_CRITICAL = 80.0
    WEIGHT_POWER_UP = 30.0

    WEIGHT_EXPLOSION_BONUS = 40.0
    WEIGHT_CHAIN_MULTIPLIER = 25.0
    WEIGHT_BIG_CHAIN_BONUS = 60.0  # 4+ explosions
    WEIGHT_CHAIN_DEPTH = 6.0

    WEIGHT_CORNER_EARLY = 35.0
    WEIGHT_EDGE_EARLY = 20.0
    WEIGHT_CENTER_MID = 15.0

    WEIGHT_OWN_ADJACENT = 10.0
    WEIGHT_DEFEND_CRITICAL = 45.0
    WEIGHT_VULNERABILITY_PENALTY = -40.0
    WEIGHT_ISOLATION_PENALTY = -20.0

    WEIGHT_HQ_ATTACK = 70.0
    WEIGHT_HQ_DAMAGE_DEALT = 120.0
    WEIGHT_HQ_DEFENSE = 55.0
    WEIGHT_PATH_TO_HQ = 25.0

    WEIGHT_WIN = 100000.0

    # Phase thresholds on the share of board cells the player holds.
    EARLY_PHASE_RATIO = 0.15
    MID_PHASE_RATIO = 0.4

    def __init__(
        self,
        player: PlayerColor,
        config: AIConfig,
        personality: Optional[AIPersonality] = None,
        game_seed: int = 0,
    ) -> None:
        super().__init__(player, config, personality, game_seed)
        self._apply_weight_profile()

    def _apply_weight_profile(self) -> None:
        """Override class-level weights from ``config.heuristic_profile_id``."""
        profile_id = self.config.heuristic_profile_id
        if not profile_id:
            return
        weights = get_weight_profile(profile_id)
        if weights is None:
            logger.warning(
                "Unknown heuristic profile %r; keeping default weights", profile_id
            )
            return
        for name, value in weights.items():
            setattr(self, name, value)

    # ------------------------------------------------------------------
    # Ranking
    # ------------------------------------------------------------------

    def rank_moves(self, sim: SimState, moves: List[int]) -> List[ScoredMove]:
        entries = []
        for idx in moves:
            breakdown = self.score_move(sim, idx)
            row, col = divmod(idx, sim.cols)
            entries.append(
                ScoredMove(self.apply_noise(breakdown["total"]), idx, row, col)
            )
        ranking = self.sort_ranking(entries)
        if ranking and logger.isEnabledFor(logging.DEBUG):
            best = ranking[0]
            logger.debug(
                "HeuristicAI(%s): %d moves, best (%d,%d) score %.1f",
                self.player.value,
                len(ranking),
                best.row,
                best.col,
                best.score,
            )
        return ranking

    def score_move(self, sim: SimState, idx: int) -> Dict[str, float]:
        """Category scores (already personality-weighted) and their total."""
        child = sim.copy()
        outcome = simulate_move(child, idx, self.player)

        raw = {
            "immediate": self._score_immediate(sim, idx, outcome),
            "chain": self._score_chain(outcome),
            "positional": self._score_positional(sim, idx),
            "tactical": self._score_tactical(sim, idx),
            "risk": self._score_risk(child),
            "base_attack": 0.0,
            "base_defense": 0.0,
        }
        if sim.is_base_mode:
            raw["base_attack"] = self._score_base_attack(sim, idx, outcome)
            raw["base_defense"] = self._score_base_defense(sim, idx, outcome)

        breakdown = {
            category: raw[category] * self.personality.weight(category)
            for category in HEURISTIC_CATEGORIES
        }
        total = sum(breakdown.values())
        if child.is_over and child.winner is not None:
            total += self.WEIGHT_WIN if child.winner == self.player else -self.WEIGHT_WIN
        breakdown["total"] = total
        return breakdown

    def _score_immediate(self, sim: SimState, idx: int, outcome: MoveOutcome) -> float:
        score = 0.0
        owner = sim.owners[idx]
        units = sim.units[idx]
        mass = sim.geometry.critical_masses[idx]
        if idx in sim.power_ups:
            score += self.WEIGHT_POWER_UP
        if owner == self.player:
            score += self.WEIGHT_BUILD_ON_OWN
            if units == mass - 1:
                score += self.WEIGHT_ONE_FROM_CRITICAL
            elif units == mass - 2:
                score += self.WEIGHT_NEAR_CRITICAL
        elif owner is None:
            score += self.WEIGHT_EMPTY_CELL
        else:
            score += self.WEIGHT_CAPTURE_CELL * self.personality.opponent_weight(owner)
        for captured in outcome.captured:
            previous = sim.owners[captured]
            score += self.WEIGHT_CAPTURE_CELL * self.personality.opponent_weight(previous)
        return score

    def _score_chain(self, outcome: MoveOutcome) -> float:
        exploded = outcome.exploded
        score = exploded * self.WEIGHT_EXPLOSION_BONUS
        if exploded >= 2:
            score += self.WEIGHT_CHAIN_MULTIPLIER * exploded
        if exploded >= 4:
            score += self.WEIGHT_BIG_CHAIN_BONUS
        score += outcome.depth * self.WEIGHT_CHAIN_DEPTH
        return score

    def _score_positional(self, sim: SimState, idx: int) -> float:
        geo = sim.geometry
        ratio = sim.cell_count(self.player) / geo.size
        if ratio < self.EARLY_PHASE_RATIO:
            if geo.corner_mask[idx]:
                return self.WEIGHT_CORNER_EARLY
            if geo.edge_mask[idx]:
                return self.WEIGHT_EDGE_EARLY
        elif ratio < self.MID_PHASE_RATIO and geo.center_mask[idx]:
            return self.WEIGHT_CENTER_MID
        return 0.0

    def _score_tactical(self, sim: SimState, idx: int) -> float:
        geo = sim.geometry
        own_adjacent = 0
        opponent_adjacent = 0
        opponent_near_critical = 0
        for n in geo.neighbor_indices[idx]:
            owner = sim.owners[n]
            if owner == self.player:
                own_adjacent += 1
            elif owner is not None:
                opponent_adjacent += 1
                if sim.units[n] >= geo.critical_masses[n] - 1:
                    opponent_near_critical += 1

        score = own_adjacent * self.WEIGHT_OWN_ADJACENT
        if opponent_adjacent >= 3:
            score += self.WEIGHT_VULNERABILITY_PENALTY
        score += opponent_near_critical * self.WEIGHT_DEFEND_CRITICAL
        if own_adjacent == 0 and sim.cell_count(self.player) >= 3:
            score += self.WEIGHT_ISOLATION_PENALTY
        return score

    def _score_risk(self, child: SimState) -> float:
        """Loss to each opponent's best immediate exploding reply.

        Only cells an opponent owns one unit short of critical mass can
        explode on the next placement, so those are the only replies that
        can take anything away.
        """
        if child.is_over:
            return 0.0
        geo = child.geometry
        my_cells = child.cell_count(self.player)
        my_health = child.hq_health.get(self.player, 0)
        risk = 0.0
        for opponent in self.get_opponents(child):
            worst = 0.0
            for j, owner in enumerate(child.owners):
                if (
                    owner != opponent
                    or j in child.hq_cells
                    or child.units[j] < geo.critical_masses[j] - 1
                ):
                    continue
                reply = child.copy()
                resolve_placement(reply, j, opponent)
                lost = my_cells - reply.cell_count(self.player)
                damage = my_health - reply.hq_health.get(self.player, 0)
                loss = (
                    -lost * self.WEIGHT_VULNERABILITY_PENALTY
                    + damage * self.WEIGHT_HQ_DAMAGE_DEALT
                )
                worst = max(worst, loss)
            risk -= worst * self.personality.opponent_weight(opponent)
        return risk

    def _score_base_attack(self, sim: SimState, idx: int, outcome: MoveOutcome) -> float:
        score = 0.0
        for event in outcome.hq_events:
            if event.event_type == HQEventType.DAMAGE and event.owner != self.player:
                score += self.WEIGHT_HQ_DAMAGE_DEALT * self.personality.opponent_weight(event.owner)

        here = divmod(idx, sim.cols)
        for opponent in self.get_opponents(sim):
            hq_idx = sim.hq_index(opponent)
            if hq_idx is None:
                continue
            distance = manhattan_distance(here, divmod(hq_idx, sim.cols))
            pressure = MAX_HQ_HEALTH + 1 - sim.hq_health[opponent]
            weight = self.personality.opponent_weight(opponent)
            if distance == 1:
                score += self.WEIGHT_HQ_ATTACK * pressure * weight
            elif distance <= 3:
                score += self.WEIGHT_PATH_TO_HQ * (4 - distance) * pressure * weight
        return score

    def _score_base_defense(self, sim: SimState, idx: int, outcome: MoveOutcome) -> float:
        score = 0.0
        for event in outcome.hq_events:
            if event.event_type == HQEventType.HEAL and event.owner == self.player:
                score += self.WEIGHT_HQ_DEFENSE

        hq_idx = sim.hq_index(self.player)
        health = sim.hq_health.get(self.player, 0)
        if hq_idx is not None and health <= 3:
            distance = manhattan_distance(divmod(idx, sim.cols), divmod(hq_idx, sim.cols))
            if distance <= 2:
                score += self.WEIGHT_HQ_DEFENSE * (4 - health) * (3 - distance)
        return score

    # ------------------------------------------------------------------
    # Position evaluation
    # ------------------------------------------------------------------

    def evaluate_position(self, sim: SimState) -> float:
        if sim.is_over:
            if sim.winner == self.player:
                return self.WEIGHT_WIN
            if sim.winner is not None:
                return -self.WEIGHT_WIN
            return 0.0
        opponents = self.get_opponents(sim)
        score = float(sim.cell_count(self.player)) * self.WEIGHT_CAPTURE_CELL
        for opponent in opponents:
            score -= (
                sim.cell_count(opponent)
                * self.WEIGHT_CAPTURE_CELL
                * self.personality.opponent_weight(opponent)
                / len(opponents)
            )
        if sim.is_base_mode and opponents:
            own = sim.hq_health.get(self.player, 0)
            enemy = sum(sim.hq_health[o] for o in opponents) / len(opponents)
            score += (own - enemy) * self.WEIGHT_HQ_ATTACK
        return score

    def get_evaluation_breakdown(self, game_state) -> Dict[str, float]:
        sim = SimState.from_game_state(game_state)
        return {
            "total": self.evaluate_position(sim),
            "cells": float(sim.cell_count(self.player)),
            "units": float(sim.unit_count(self.player)),
        }
