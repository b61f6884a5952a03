"""Per-game AI personalities.

A personality is a vector of multipliers, one per scoring category, plus a
designated rival whose cells and HQ count for more. It is generated once
per AI player at game start from an archetype with bounded jitter, and
held unchanged for the rest of the game. The scoring formulas themselves
never change; only the weight each category carries in the total.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from ..errors import ConfigurationError
from ..models import PlayerColor

# Heuristic evaluator categories
HEURISTIC_CATEGORIES = (
    "immediate",
    "tactical",
    "positional",
    "chain",
    "risk",
    "base_attack",
    "base_defense",
)

# Minimax static-evaluation categories
SEARCH_CATEGORIES = (
    "material",
    "position",
    "mobility",
    "safety",
    "tempo",
    "hq",
)

ALL_CATEGORIES = HEURISTIC_CATEGORIES + SEARCH_CATEGORIES

ARCHETYPES: Dict[str, Dict[str, float]] = {
    "balanced": {},
    "aggressive": {
        "immediate": 1.2,
        "chain": 1.35,
        "risk": 0.7,
        "base_attack": 1.4,
        "base_defense": 0.8,
        "material": 1.2,
        "safety": 0.75,
        "tempo": 1.3,
    },
    "defensive": {
        "tactical": 1.3,
        "risk": 1.4,
        "base_attack": 0.8,
        "base_defense": 1.5,
        "safety": 1.4,
        "hq": 1.3,
    },
    "expansionist": {
        "immediate": 1.15,
        "positional": 1.4,
        "chain": 0.9,
        "material": 1.3,
        "mobility": 1.4,
        "position": 1.2,
    },
}

DEFAULT_JITTER = 0.15
DEFAULT_RIVAL_BIAS = 1.25


@dataclass(frozen=True)
class AIPersonality:
    archetype: str = "balanced"
    multipliers: Dict[str, float] = field(default_factory=dict)
    rival: Optional[PlayerColor] = None
    rival_bias: float = 1.0

    def weight(self, category: str) -> float:
        return self.multipliers.get(category, 1.0)

    def opponent_weight(self, player: Optional[PlayerColor]) -> float:
        """Extra emphasis applied to the rival's cells and HQ."""
        if player is not None and player == self.rival:
            return self.rival_bias
        return 1.0

    @classmethod
    def neutral(cls) -> "AIPersonality":
        return cls()

    @classmethod
    def generate(
        cls,
        player: PlayerColor,
        players: Sequence[PlayerColor],
        rng: random.Random,
        archetype: Optional[str] = None,
        jitter: float = DEFAULT_JITTER,
    ) -> "AIPersonality":
        """Draw a personality for ``player``.

        The archetype is picked at random unless given; every category
        multiplier is then scaled by a factor in ``[1 - jitter, 1 + jitter]``.
        The rival is a random opponent.
        """
        if archetype is None:
            archetype = rng.choice(sorted(ARCHETYPES))
        elif archetype not in ARCHETYPES:
            raise ConfigurationError(
                "Unknown AI archetype", context={"archetype": archetype}
            )
        base = ARCHETYPES[archetype]
        multipliers = {
            category: round(
                base.get(category, 1.0) * rng.uniform(1.0 - jitter, 1.0 + jitter), 4
            )
            for category in ALL_CATEGORIES
        }
        opponents = [p for p in players if p != player]
        rival = rng.choice(opponents) if opponents else None
        return cls(
            archetype=archetype,
            multipliers=multipliers,
            rival=rival,
            rival_bias=round(DEFAULT_RIVAL_BIAS * rng.uniform(0.9, 1.1), 4),
        )
