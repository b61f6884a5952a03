"""AI factory for Chain Reaction.

All AI creation goes through :class:`AIFactory` so that seeding,
personality and configuration are applied consistently.

Usage:
    from chainreaction.ai.factory import AIFactory, choose_ai_move

    ai = AIFactory.create(
        AIStrategy.MINIMAX,
        PlayerColor.BLUE,
        AIConfig(strategy=AIStrategy.MINIMAX, difficulty=AIDifficulty.HARD),
    )
    move = choose_ai_move(state, PlayerColor.BLUE, ai)
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from ..errors import AIError, ConfigurationError
from ..metrics import AI_MOVE_LATENCY, AI_MOVE_REQUESTS, observe_ai_move_start
from ..models import AIConfig, AIStrategy, GameState, PlayerColor
from .personality import AIPersonality

if TYPE_CHECKING:
    from .base import BaseAI

logger = logging.getLogger(__name__)


class AIFactory:
    """Centralized factory for creating AI instances.

    Classes are imported lazily on first use and cached per strategy.
    """

    # Cache for imported AI classes (lazy loading)
    _class_cache: Dict[AIStrategy, type] = {}

    @classmethod
    def _get_ai_class(cls, strategy: AIStrategy) -> type:
        """Get the AI class for a given strategy, with lazy loading.

        Raises:
            ConfigurationError: If the strategy is not supported
        """
        if strategy in cls._class_cache:
            return cls._class_cache[strategy]

        # Lazy imports to avoid circular dependencies
        if strategy == AIStrategy.HEURISTIC:
            from .heuristic_ai import HeuristicAI
            ai_class = HeuristicAI
        elif strategy == AIStrategy.MINIMAX:
            from .minimax_ai import MinimaxAI
            ai_class = MinimaxAI
        else:
            raise ConfigurationError(
                "Unsupported AI strategy", context={"strategy": str(strategy)}
            )

        cls._class_cache[strategy] = ai_class
        return ai_class

    @classmethod
    def create(
        cls,
        strategy: AIStrategy,
        player: PlayerColor,
        config: AIConfig,
        personality: Optional[AIPersonality] = None,
        game_seed: int = 0,
    ) -> "BaseAI":
        """Create an AI instance with explicit strategy and configuration.

        Args:
            strategy: Which search to use
            player: The seat the AI controls
            config: AI configuration
            personality: Per-game personality (neutral when omitted)
            game_seed: Game seed, used to derive the AI's RNG seed when
                ``config.rng_seed`` is unset

        Returns:
            Configured AI instance
        """
        ai_class = cls._get_ai_class(AIStrategy(strategy))
        return ai_class(player, config, personality, game_seed)

    @classmethod
    def create_from_config(
        cls,
        player: PlayerColor,
        config: AIConfig,
        personality: Optional[AIPersonality] = None,
        game_seed: int = 0,
    ) -> "BaseAI":
        """Create an AI using ``config.strategy``."""
        return cls.create(config.strategy, player, config, personality, game_seed)


def choose_ai_move(
    state: GameState,
    player: PlayerColor,
    ai: "BaseAI",
) -> Optional[Tuple[int, int]]:
    """Ask ``ai`` for a move on ``state`` and record AI metrics.

    Returns ``(row, col)``, or None when ``player`` has no legal move.
    ``state`` is never modified.
    """
    if ai.player != player:
        raise AIError(
            "AI seat does not match requested player",
            context={"ai_player": ai.player.value, "player": player.value},
        )
    strategy, difficulty = observe_ai_move_start(
        ai.config.strategy.value, ai.config.difficulty.value
    )
    start = time.time()
    try:
        move = ai.select_move(state)
    except Exception:
        AI_MOVE_REQUESTS.labels(strategy, difficulty, "error").inc()
        logger.error(
            "AI move selection failed for %s (%s/%s)",
            player.value,
            strategy,
            difficulty,
            exc_info=True,
        )
        raise
    finally:
        AI_MOVE_LATENCY.labels(strategy, difficulty).observe(time.time() - start)

    if move is None:
        AI_MOVE_REQUESTS.labels(strategy, difficulty, "no_move").inc()
        logger.info("AI %s has no legal move", player.value)
        return None

    AI_MOVE_REQUESTS.labels(strategy, difficulty, "success").inc()
    return move
