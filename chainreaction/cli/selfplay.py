#!/usr/bin/env python3
"""AI-vs-AI self-play for Chain Reaction.

Plays a batch of games where every seat is AI-controlled and writes one
JSON line per game.

Usage:
    # Ten 2-player classic games, heuristic vs heuristic
    chainreaction-selfplay --num-games 10

    # Base mode, 4 players, minimax vs heuristic in alternating seats
    chainreaction-selfplay --mode base --players 4 --strategy mixed \
        --output data/selfplay_base_4p.jsonl --show-board
"""

from __future__ import annotations

import argparse
import json
import logging
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..ai.context import AIGameContext, choose_move
from ..board_manager import BoardManager
from ..game_engine import GameEngine
from ..models import (
    AIConfig,
    AIDifficulty,
    AIStrategy,
    GameMode,
    PlayerColor,
    PlayerControl,
)

logger = logging.getLogger(__name__)

STRATEGY_CHOICES = ("heuristic", "minimax", "mixed")


@dataclass
class GameResult:
    """Result of a single self-play game."""
    game_index: int
    seed: int
    mode: str
    num_players: int
    winner: Optional[str]
    moves: int
    finished: bool
    strategies: Dict[str, str]
    archetypes: Dict[str, str]
    final_hash: str
    duration_ms: float
    hq_events: int = 0
    explosions: int = 0
    final_board: Optional[str] = field(default=None, repr=False)


def build_ai_configs(
    players: List[PlayerColor],
    strategy: str,
    difficulty: AIDifficulty,
    think_time: Optional[int],
) -> Dict[PlayerColor, AIConfig]:
    """One AIConfig per seat; ``mixed`` alternates minimax and heuristic."""
    configs = {}
    for seat, player in enumerate(players):
        if strategy == "mixed":
            chosen = AIStrategy.MINIMAX if seat % 2 == 0 else AIStrategy.HEURISTIC
        else:
            chosen = AIStrategy(strategy)
        configs[player] = AIConfig(
            strategy=chosen, difficulty=difficulty, think_time=think_time
        )
    return configs


def play_game(
    game_index: int,
    mode: GameMode,
    num_players: int,
    strategy: str = "heuristic",
    difficulty: AIDifficulty = AIDifficulty.MEDIUM,
    seed: int = 0,
    max_moves: int = 500,
    think_time: Optional[int] = None,
    rows: Optional[int] = None,
    cols: Optional[int] = None,
) -> GameResult:
    """Play one AI-vs-AI game to completion or ``max_moves``."""
    state = GameEngine.new_game(
        mode, player_count=num_players, rows=rows, cols=cols, rng_seed=seed
    )
    ai_configs = build_ai_configs(state.players, strategy, difficulty, think_time)
    context = AIGameContext.for_game(
        state,
        controls={p: PlayerControl.AI for p in state.players},
        ai_configs=ai_configs,
    )

    start_time = time.time()
    moves = 0
    hq_events = 0
    explosions = 0
    while not state.is_over and moves < max_moves:
        player = state.active_player
        move = choose_move(state, player, context)
        if move is None:
            logger.warning(
                "Game %d: %s has no legal move at move %d",
                game_index,
                player.value,
                moves,
            )
            break
        state = GameEngine.apply_move(state, move[0], move[1], player)
        moves += 1
        if state.last_move is not None:
            hq_events += len(state.last_move.hq_events)
            explosions += state.last_move.exploded_cells

    duration_ms = (time.time() - start_time) * 1000
    return GameResult(
        game_index=game_index,
        seed=seed,
        mode=mode.value,
        num_players=num_players,
        winner=state.winner.value if state.winner is not None else None,
        moves=moves,
        finished=state.is_over,
        strategies={p.value: c.strategy.value for p, c in ai_configs.items()},
        archetypes={
            p.value: context.personality_for(p).archetype for p in state.players
        },
        final_hash=BoardManager.hash_game_state(state),
        duration_ms=duration_ms,
        hq_events=hq_events,
        explosions=explosions,
        final_board=BoardManager.render_ascii(state),
    )


def run_selfplay(
    num_games: int,
    mode: GameMode,
    num_players: int,
    strategy: str,
    difficulty: AIDifficulty,
    seed: int,
    max_moves: int,
    output: Optional[Path] = None,
    think_time: Optional[int] = None,
    show_board: bool = False,
) -> List[GameResult]:
    results: List[GameResult] = []
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)

    for i in range(num_games):
        result = play_game(
            i,
            mode,
            num_players,
            strategy=strategy,
            difficulty=difficulty,
            seed=seed + i,
            max_moves=max_moves,
            think_time=think_time,
        )
        results.append(result)
        logger.info(
            "Game %d/%d: winner=%s moves=%d (%.0f ms)",
            i + 1,
            num_games,
            result.winner or "none",
            result.moves,
            result.duration_ms,
        )
        if show_board and result.final_board:
            print(result.final_board)
            print()
        if output is not None:
            record = asdict(result)
            record.pop("final_board")
            with open(output, "a") as f:
                f.write(json.dumps(record) + "\n")

    wins = Counter(r.winner or "none" for r in results)
    logger.info(
        "Finished %d games: %s",
        len(results),
        ", ".join(f"{k}={v}" for k, v in sorted(wins.items())),
    )
    return results


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chain Reaction AI self-play")
    parser.add_argument(
        "--num-games",
        type=int,
        default=10,
        help="Number of games to play",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in GameMode],
        default=GameMode.CLASSIC.value,
        help="Game mode",
    )
    parser.add_argument(
        "--players",
        type=int,
        choices=(2, 3, 4),
        default=2,
        help="Number of players",
    )
    parser.add_argument(
        "--strategy",
        choices=STRATEGY_CHOICES,
        default="heuristic",
        help="AI strategy for every seat, or 'mixed' to alternate",
    )
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in AIDifficulty],
        default=AIDifficulty.MEDIUM.value,
        help="AI difficulty for every seat",
    )
    parser.add_argument(
        "--think-time",
        type=int,
        default=None,
        help="Minimax time budget per move in milliseconds",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed of the first game; game i uses seed + i",
    )
    parser.add_argument(
        "--max-moves",
        type=int,
        default=500,
        help="Maximum moves per game",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="JSONL file to append one record per game to",
    )
    parser.add_argument(
        "--show-board",
        action="store_true",
        help="Print the final board of every game",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = create_argument_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    run_selfplay(
        num_games=args.num_games,
        mode=GameMode(args.mode),
        num_players=args.players,
        strategy=args.strategy,
        difficulty=AIDifficulty(args.difficulty),
        seed=args.seed,
        max_moves=args.max_moves,
        output=args.output,
        think_time=args.think_time,
        show_board=args.show_board,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
