"""Heuristic weight profiles for Chain Reaction.

This module centralises the scalar weights used by :class:`HeuristicAI`
for move scoring and exposes named profiles that can be selected through
``AIConfig.heuristic_profile_id``.

The keys in each profile mirror the attribute names on
:class:`HeuristicAI` (``WEIGHT_CAPTURE_CELL``, ``WEIGHT_HQ_ATTACK``, etc.)
so that instances can simply ``setattr(self, name, value)`` when applying
a profile. Profiles change the scalar constants; per-game play style is
layered on top by :class:`chainreaction.ai.personality.AIPersonality`,
which scales whole scoring categories.
"""

from __future__ import annotations

from collections.abc import Mapping

HeuristicWeights = dict[str, float]


# --- v1 Balanced Base Profile ----------------------------------------------

BASE_V1_BALANCED_WEIGHTS: HeuristicWeights = {
    # Immediate value of the placement itself
    "WEIGHT_CAPTURE_CELL": 15.0,
    "WEIGHT_BUILD_ON_OWN": 8.0,
    "WEIGHT_EMPTY_CELL": 3.0,
    "WEIGHT_NEAR_CRITICAL": 50.0,
    "WEIGHT_ONE_FROM_CRITICAL": 80.0,
    "WEIGHT_POWER_UP": 30.0,
    # Chain reactions
    "WEIGHT_EXPLOSION_BONUS": 40.0,
    "WEIGHT_CHAIN_MULTIPLIER": 25.0,
    "WEIGHT_BIG_CHAIN_BONUS": 60.0,
    "WEIGHT_CHAIN_DEPTH": 6.0,
    # Position by game phase
    "WEIGHT_CORNER_EARLY": 35.0,
    "WEIGHT_EDGE_EARLY": 20.0,
    "WEIGHT_CENTER_MID": 15.0,
    # Local tactics
    "WEIGHT_OWN_ADJACENT": 10.0,
    "WEIGHT_DEFEND_CRITICAL": 45.0,
    "WEIGHT_VULNERABILITY_PENALTY": -40.0,
    "WEIGHT_ISOLATION_PENALTY": -20.0,
    # Base mode
    "WEIGHT_HQ_ATTACK": 70.0,
    "WEIGHT_HQ_DAMAGE_DEALT": 120.0,
    "WEIGHT_HQ_DEFENSE": 55.0,
    "WEIGHT_PATH_TO_HQ": 25.0,
    # Decisive result
    "WEIGHT_WIN": 100000.0,
}


# --- Personas ----------------------------------------------------------------
#
# Small deltas over the balanced profile.

_AGGRESSIVE_DELTAS: HeuristicWeights = {
    "WEIGHT_CAPTURE_CELL": 20.0,
    "WEIGHT_EXPLOSION_BONUS": 50.0,
    "WEIGHT_HQ_ATTACK": 90.0,
    "WEIGHT_HQ_DAMAGE_DEALT": 150.0,
    "WEIGHT_VULNERABILITY_PENALTY": -30.0,
}

_DEFENSIVE_DELTAS: HeuristicWeights = {
    "WEIGHT_DEFEND_CRITICAL": 60.0,
    "WEIGHT_VULNERABILITY_PENALTY": -55.0,
    "WEIGHT_HQ_DEFENSE": 75.0,
    "WEIGHT_ISOLATION_PENALTY": -30.0,
}

_TERRITORIAL_DELTAS: HeuristicWeights = {
    "WEIGHT_EMPTY_CELL": 8.0,
    "WEIGHT_CORNER_EARLY": 45.0,
    "WEIGHT_EDGE_EARLY": 28.0,
    "WEIGHT_OWN_ADJACENT": 6.0,
}


def _with_deltas(deltas: Mapping[str, float]) -> HeuristicWeights:
    weights = dict(BASE_V1_BALANCED_WEIGHTS)
    weights.update(deltas)
    return weights


HEURISTIC_WEIGHT_PROFILES: dict[str, HeuristicWeights] = {
    "heuristic_v1_balanced": dict(BASE_V1_BALANCED_WEIGHTS),
    "heuristic_v1_aggressive": _with_deltas(_AGGRESSIVE_DELTAS),
    "heuristic_v1_defensive": _with_deltas(_DEFENSIVE_DELTAS),
    "heuristic_v1_territorial": _with_deltas(_TERRITORIAL_DELTAS),
}


def get_weight_profile(profile_id: str | None) -> HeuristicWeights | None:
    """Look up a profile by id; None for unknown or missing ids."""
    if not profile_id:
        return None
    return HEURISTIC_WEIGHT_PROFILES.get(profile_id)
