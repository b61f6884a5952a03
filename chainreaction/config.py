"""Environment-driven defaults for the Chain Reaction service.

Values are read once at import time. Structured per-game and per-AI
settings live on :class:`chainreaction.models.GameSettings` and
:class:`chainreaction.models.AIConfig`; the constants here only provide
their defaults and the service-wide limits.
"""

from __future__ import annotations

import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


# Board defaults (classic 9x7, base 9x9)
DEFAULT_CLASSIC_ROWS = 9
DEFAULT_CLASSIC_COLS = 7
DEFAULT_BASE_ROWS = 9
DEFAULT_BASE_COLS = 9

MIN_PLAYERS = 2
MAX_PLAYERS = 4

MAX_HQ_HEALTH = 5

# Power-up spawning
POWER_UP_SPAWN_CHANCE = float(
    os.getenv("CHAINREACTION_POWER_UP_CHANCE", "0.25")
)
MAX_POWER_UPS = int(os.getenv("CHAINREACTION_MAX_POWER_UPS", "4"))
POWER_UP_SPAWN_ATTEMPTS = int(
    os.getenv("CHAINREACTION_POWER_UP_ATTEMPTS", "50")
)

# Upper bound on explosions resolved for a single move. A cascade that
# exceeds it is reported as an InvalidStateError.
CASCADE_STEP_LIMIT = int(
    os.getenv("CHAINREACTION_CASCADE_STEP_LIMIT", "100000")
)

# AI defaults
AI_THINK_TIME_MS = int(os.getenv("CHAINREACTION_AI_THINK_TIME_MS", "1500"))
AI_MAX_BRANCHING = int(os.getenv("CHAINREACTION_AI_MAX_BRANCHING", "12"))
AI_SCORE_NOISE = float(os.getenv("CHAINREACTION_AI_SCORE_NOISE", "4.0"))

DEBUG_ENGINE = _env_flag("CHAINREACTION_DEBUG_ENGINE")
LOG_LEVEL = os.getenv("CHAINREACTION_LOG_LEVEL", "INFO").upper()

# HTTP service
SESSION_MAX = int(os.getenv("CHAINREACTION_SESSION_MAX", "256"))