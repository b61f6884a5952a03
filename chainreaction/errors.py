"""
Chain Reaction Error Hierarchy

Unified exception hierarchy for the game engine, the AI and the HTTP
service. All custom exceptions inherit from ChainReactionError so callers
can catch the whole family at once.

Usage:
    from chainreaction.errors import IllegalMoveError

    try:
        state = GameEngine.apply_move(state, row, col, player)
    except IllegalMoveError as e:
        logger.warning("Rejected move: %s", e.message)
"""

from typing import Any

__all__ = [
    "AIError",
    "AITimeoutError",
    # Base error
    "ChainReactionError",
    "ConfigurationError",
    "GameNotFoundError",
    # Game rules errors
    "IllegalMoveError",
    "InvalidStateError",
    "RulesViolationError",
]


class ChainReactionError(Exception):
    """Base exception for all Chain Reaction errors.

    Attributes:
        code: Machine-readable error code for categorization
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "CHAIN_REACTION_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Game Rules Errors
# =============================================================================


class RulesViolationError(ChainReactionError):
    """Move rejected by the game rules.

    Attributes:
        rule: Short name of the rule that rejected the move
            (e.g. "hq_cell", "enemy_cell", "not_your_turn")
    """
    code: str = "RULES_VIOLATION"

    def __init__(
        self,
        message: str,
        rule: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.rule = rule
        if rule:
            self.context["rule"] = rule


class IllegalMoveError(RulesViolationError):
    """Placement that cannot be applied to the current state.

    Covers out-of-bounds coordinates, HQ cells, enemy cells, placements
    outside the base-mode reach, moves made out of turn and moves on a
    finished game. The input state is never modified.
    """
    code: str = "ILLEGAL_MOVE"


class InvalidStateError(ChainReactionError):
    """Corrupted or unexpected game state.

    Raised when the game state is in a configuration that should not be
    reachable through normal play (a configured base-mode player without
    an HQ, a cascade that never settles).
    """
    code: str = "INVALID_STATE"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ChainReactionError):
    """Invalid game or AI settings."""
    code: str = "CONFIGURATION_ERROR"


class GameNotFoundError(ChainReactionError):
    """Unknown game session id."""
    code: str = "GAME_NOT_FOUND"


# =============================================================================
# AI Errors
# =============================================================================


class AIError(ChainReactionError):
    """Base class for AI-related errors."""
    code: str = "AI_ERROR"


class AITimeoutError(AIError):
    """AI search exceeded its time budget."""
    code: str = "AI_TIMEOUT"
