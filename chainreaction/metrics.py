"""Prometheus metrics for the Chain Reaction service.

This module centralises counters and histograms so that the engine, the
AI entry point and the HTTP handlers can record lightweight telemetry
without each managing its own metric instances. Everything is exposed on
``GET /metrics``.
"""

from __future__ import annotations

from typing import Final

from prometheus_client import Counter, Gauge, Histogram


MOVES_APPLIED: Final[Counter] = Counter(
    "chainreaction_moves_applied_total",
    "Total committed moves, labeled by game mode and move kind.",
    labelnames=("mode", "kind"),
)

CASCADE_EXPLOSIONS: Final[Histogram] = Histogram(
    "chainreaction_cascade_explosions",
    "Number of cell explosions resolved per committed move.",
    labelnames=("mode",),
    buckets=(0, 1, 2, 4, 8, 16, 32, 64, 128),
)

HQ_EVENTS: Final[Counter] = Counter(
    "chainreaction_hq_events_total",
    "Total HQ damage/heal events.",
    labelnames=("event_type",),
)

GAMES_COMPLETED: Final[Counter] = Counter(
    "chainreaction_games_completed_total",
    "Total completed games, labeled by mode, num_players and outcome.",
    labelnames=("mode", "num_players", "outcome"),
)

ACTIVE_SESSIONS: Final[Gauge] = Gauge(
    "chainreaction_active_sessions",
    "Current number of in-memory game sessions.",
)

AI_MOVE_REQUESTS: Final[Counter] = Counter(
    "chainreaction_ai_move_requests_total",
    (
        "Total AI move selections, labeled by strategy, difficulty "
        "and outcome."
    ),
    labelnames=("strategy", "difficulty", "outcome"),
)

AI_MOVE_LATENCY: Final[Histogram] = Histogram(
    "chainreaction_ai_move_latency_seconds",
    "Latency of AI move selection in seconds.",
    labelnames=("strategy", "difficulty"),
    buckets=(
        0.01,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.0,
        5.0,
    ),
)


def observe_ai_move_start(strategy: str, difficulty: str) -> tuple[str, str]:
    """Prepare metric label values for a new AI move selection.

    Keeps the label-shape logic in one place; callers pass the returned
    labels into the Counter/Histogram as needed.
    """

    return strategy, difficulty


def record_move(mode: str, kind: str, exploded: int, hq_event_types: list[str]) -> None:
    """Record metrics for one committed move."""
    MOVES_APPLIED.labels(mode=mode, kind=kind).inc()
    CASCADE_EXPLOSIONS.labels(mode=mode).observe(exploded)
    for event_type in hq_event_types:
        HQ_EVENTS.labels(event_type=event_type).inc()


def record_game_outcome(mode: str, num_players: int, winner: str | None) -> None:
    """Record a finished game; ``winner`` None means a draw."""
    outcome = "draw" if winner is None else "win"
    GAMES_COMPLETED.labels(
        mode=mode, num_players=str(num_players), outcome=outcome
    ).inc()
