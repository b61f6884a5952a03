"""Per-game AI context.

Holds everything the AI needs across a single game: which seats are
AI-controlled, their :class:`AIConfig`, and the personality drawn for each
AI seat at game start. Personalities never change mid-game; a restart
builds a new context.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Sequence, Tuple

from ..errors import ConfigurationError
from ..models import AIConfig, GameState, PlayerColor, PlayerControl
from .factory import AIFactory, choose_ai_move
from .personality import AIPersonality

if TYPE_CHECKING:
    from .base import BaseAI

logger = logging.getLogger(__name__)


class AIGameContext:
    """Control map, AI configuration and personalities for one game."""

    def __init__(
        self,
        players: Sequence[PlayerColor],
        controls: Optional[Mapping[PlayerColor, PlayerControl]] = None,
        ai_configs: Optional[Mapping[PlayerColor, AIConfig]] = None,
        seed: int = 0,
    ) -> None:
        self.players: Tuple[PlayerColor, ...] = tuple(PlayerColor(p) for p in players)
        self.seed = seed
        self.controls: Dict[PlayerColor, PlayerControl] = {
            p: PlayerControl.HUMAN for p in self.players
        }
        for player, control in (controls or {}).items():
            player = PlayerColor(player)
            if player not in self.players:
                raise ConfigurationError(
                    "Control given for a player not in the game",
                    context={"player": player.value},
                )
            self.controls[player] = PlayerControl(control)

        self.ai_configs: Dict[PlayerColor, AIConfig] = {}
        for player in self.players:
            config = (ai_configs or {}).get(player)
            if config is None:
                config = AIConfig()
            self.ai_configs[player] = config

        # One RNG for the whole draw so the personalities of a game are a
        # function of its seed alone.
        rng = random.Random(seed)
        self.personalities: Dict[PlayerColor, AIPersonality] = {}
        for player in self.players:
            if not self.is_ai_player(player):
                continue
            personality = AIPersonality.generate(
                player,
                self.players,
                rng,
                archetype=self.ai_configs[player].archetype,
            )
            self.personalities[player] = personality
            logger.debug(
                "AI %s personality: %s (rival %s)",
                player.value,
                personality.archetype,
                personality.rival.value if personality.rival else None,
            )

        self._ais: Dict[PlayerColor, "BaseAI"] = {}

    @classmethod
    def for_game(
        cls,
        state: GameState,
        controls: Optional[Mapping[PlayerColor, PlayerControl]] = None,
        ai_configs: Optional[Mapping[PlayerColor, AIConfig]] = None,
    ) -> "AIGameContext":
        """Build a context seeded from the game's own settings."""
        return cls(
            state.players,
            controls=controls,
            ai_configs=ai_configs,
            seed=state.settings.rng_seed,
        )

    def is_ai_player(self, player: PlayerColor) -> bool:
        return self.controls.get(PlayerColor(player)) == PlayerControl.AI

    def config_for(self, player: PlayerColor) -> AIConfig:
        return self.ai_configs[PlayerColor(player)]

    def personality_for(self, player: PlayerColor) -> AIPersonality:
        """Personality for an AI seat; human seats get the neutral one."""
        return self.personalities.get(PlayerColor(player), AIPersonality.neutral())

    def get_ai(self, player: PlayerColor) -> "BaseAI":
        """Return the AI instance for ``player``, creating it on first use."""
        player = PlayerColor(player)
        if player not in self.players:
            raise ConfigurationError(
                "Player is not seated in this game",
                context={"player": player.value},
            )
        ai = self._ais.get(player)
        if ai is None:
            ai = AIFactory.create_from_config(
                player,
                self.config_for(player),
                self.personality_for(player),
                game_seed=self.seed,
            )
            self._ais[player] = ai
        return ai


def choose_move(
    state: GameState,
    player: PlayerColor,
    context: AIGameContext,
) -> Optional[Tuple[int, int]]:
    """Pick a move for ``player`` using its AI from ``context``.

    Returns ``(row, col)`` or None when the player has no legal move.
    """
    ai = context.get_ai(player)
    move = choose_ai_move(state, PlayerColor(player), ai)
    if move is not None:
        logger.info(
            "AI %s (%s/%s) chose (%d,%d)",
            ai.player.value,
            ai.config.strategy.value,
            ai.config.difficulty.value,
            move[0],
            move[1],
        )
    return move
