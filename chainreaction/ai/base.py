"""
Base AI Player class for Chain Reaction
Abstract base class that all AI implementations inherit from
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any, NamedTuple, Tuple
import math
import random

from ..config import AI_SCORE_NOISE
from ..models import AIConfig, AIDifficulty, GameState, PlayerColor
from ..rules.state import SimState
from ..rules.validator import legal_moves
from .personality import AIPersonality


# Share of the ranking each difficulty samples from (0 = always the best).
DIFFICULTY_TOP_FRACTION: Dict[AIDifficulty, float] = {
    AIDifficulty.EASY: 0.5,
    AIDifficulty.MEDIUM: 0.25,
    AIDifficulty.HARD: 0.0,
}

_PLAYER_SEED_SALT = {
    PlayerColor.RED: 1,
    PlayerColor.BLUE: 2,
    PlayerColor.VIOLET: 3,
    PlayerColor.BLACK: 4,
}


def derive_ai_seed(game_seed: int, player: PlayerColor) -> int:
    """
    Deterministic per-player seed used when ``AIConfig.rng_seed`` is not set.

    Mixes the game seed with the seat so two AIs in the same game never
    share a random stream.
    """
    base = (game_seed * 1_000_003) ^ (_PLAYER_SEED_SALT[player] * 97_911)
    return int(base & 0xFFFFFFFF)


class ScoredMove(NamedTuple):
    score: float
    idx: int
    row: int
    col: int


class BaseAI(ABC):
    """Abstract base class for all AI implementations"""

    def __init__(
        self,
        player: PlayerColor,
        config: AIConfig,
        personality: Optional[AIPersonality] = None,
        game_seed: int = 0,
    ):
        """
        Initialize AI player

        Args:
            player: The seat this AI controls
            config: AI configuration settings
            personality: Per-game category multipliers and rival
            game_seed: Game-level seed used when ``config.rng_seed`` is unset
        """
        self.player = PlayerColor(player)
        self.config = config
        self.personality = personality or AIPersonality.neutral()
        self.move_count = 0

        # Per-instance RNG used for all stochastic behaviour (score noise,
        # sampling within the difficulty slice).
        if self.config.rng_seed is not None:
            self.rng_seed: int = int(self.config.rng_seed)
        else:
            self.rng_seed = derive_ai_seed(game_seed, self.player)
        self.rng: random.Random = random.Random(self.rng_seed)

        self.score_noise: float = (
            config.score_noise if config.score_noise is not None else AI_SCORE_NOISE
        )
        self.last_ranking: List[ScoredMove] = []

    def select_move(self, game_state: GameState) -> Optional[Tuple[int, int]]:
        """
        Select a move for the current game state

        Args:
            game_state: Current game state (never modified)

        Returns:
            ``(row, col)`` or None if there is no legal move
        """
        sim = SimState.from_game_state(game_state)
        moves = legal_moves(sim, self.player)
        if not moves:
            self.last_ranking = []
            return None
        ranking = self.rank_moves(sim, moves)
        self.last_ranking = ranking
        choice = self.choose_from_ranking(ranking)
        self.move_count += 1
        return choice.row, choice.col

    @abstractmethod
    def rank_moves(self, sim: SimState, moves: List[int]) -> List[ScoredMove]:
        """
        Score every candidate move

        Args:
            sim: Current state; implementations must work on copies
            moves: Legal board indices for this AI's player

        Returns:
            Scored moves sorted best first
        """
        pass

    @abstractmethod
    def evaluate_position(self, sim: SimState) -> float:
        """
        Evaluate a position from this AI's perspective

        Returns:
            Evaluation score (positive = good for this AI, negative = bad)
        """
        pass

    def get_evaluation_breakdown(
        self, game_state: GameState
    ) -> Dict[str, float]:
        """
        Get detailed breakdown of position evaluation

        Returns:
            Dictionary with evaluation components
        """
        return {
            "total": self.evaluate_position(SimState.from_game_state(game_state))
        }

    def apply_noise(self, score: float) -> float:
        """Add bounded uniform noise from the per-instance RNG."""
        if self.score_noise <= 0:
            return score
        return score + self.rng.uniform(-self.score_noise, self.score_noise)

    def sort_ranking(self, entries: List[ScoredMove]) -> List[ScoredMove]:
        """Best first; equal scores keep board order."""
        return sorted(entries, key=lambda m: (-m.score, m.idx))

    def choose_from_ranking(self, ranking: List[ScoredMove]) -> ScoredMove:
        """
        Pick from the top slice of the ranking for the configured difficulty

        easy samples the top 50%, medium the top 25%, hard takes the best.
        """
        fraction = DIFFICULTY_TOP_FRACTION[self.config.difficulty]
        count = max(1, math.ceil(len(ranking) * fraction))
        if count == 1:
            return ranking[0]
        return self.get_random_element(ranking[:count])

    def get_random_element(self, items: List[Any]) -> Optional[Any]:
        """
        Get random element from list using the per-instance RNG.

        Returns:
            Random item or None if list is empty
        """
        if not items:
            return None
        return self.rng.choice(items)

    def get_opponents(self, sim: SimState) -> List[PlayerColor]:
        """Opponents still in the game (live HQ in base mode)."""
        return [
            p for p in sim.players
            if p != self.player and (not sim.is_base_mode or sim.hq_alive(p))
        ]
