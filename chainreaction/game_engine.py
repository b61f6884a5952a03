"""Core game engine for the Chain Reaction service.

``GameEngine`` is the public facade over the rule modules in
:mod:`chainreaction.rules`. It converts the pydantic :class:`GameState`
into a flat :class:`SimState`, runs the shared ``simulate_move``
primitive, spawns power-ups, pushes an undo snapshot and converts back.
A ``GameState`` passed in is never modified; every operation returns a
new one.

Determinism: given the same settings (including ``rng_seed``) and the
same sequence of moves, the resulting states are identical. Power-up
spawning draws from an RNG derived from the seed and the move number, so
undo followed by the same move reproduces the same spawn.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Tuple

from pydantic import ValidationError

from .board_manager import BoardManager
from .config import (
    DEBUG_ENGINE,
    DEFAULT_BASE_COLS,
    DEFAULT_BASE_ROWS,
    DEFAULT_CLASSIC_COLS,
    DEFAULT_CLASSIC_ROWS,
    MAX_HQ_HEALTH,
    MAX_PLAYERS,
    MIN_PLAYERS,
)
from .errors import ConfigurationError, IllegalMoveError
from .metrics import record_game_outcome, record_move
from .models import (
    BoardState,
    Cell,
    GameMode,
    GameSettings,
    GameState,
    HistorySnapshot,
    HQ,
    HQEvent,
    MoveReport,
    PlayerColor,
    Position,
    PowerUp,
)
from .rules.power_ups import try_spawn_power_up
from .rules.simulate import MoveOutcome, simulate_move
from .rules.state import SimState
from .rules.validator import is_legal_placement, is_on_hq_line, legal_moves

logger = logging.getLogger(__name__)


def hq_positions(rows: int, cols: int, player_count: int) -> List[Position]:
    """Fixed HQ sites, in seat order: left, (top), right, (bottom)."""
    left = Position(row=rows // 2, col=0)
    right = Position(row=rows // 2, col=cols - 1)
    top = Position(row=0, col=cols // 2)
    bottom = Position(row=rows - 1, col=cols // 2)
    if player_count == 2:
        return [left, right]
    if player_count == 3:
        return [left, top, right]
    return [left, top, right, bottom]


def derive_spawn_seed(rng_seed: int, move_count: int) -> int:
    """Per-move seed for power-up spawning."""
    base = (rng_seed * 1_000_003) ^ (move_count * 97_911)
    return int(base & 0xFFFFFFFF)


class GameEngine:
    """Static entry points for creating and advancing games."""

    @staticmethod
    def build_settings(
        mode: GameMode = GameMode.CLASSIC,
        player_count: Optional[int] = None,
        players: Optional[List[PlayerColor]] = None,
        rows: Optional[int] = None,
        cols: Optional[int] = None,
        **overrides,
    ) -> GameSettings:
        """Resolve defaults and validate a game configuration.

        Raises:
            ConfigurationError: for player counts outside 2-4, duplicate
                players, mismatched ``player_count``/``players`` or boards
                too small for the mode.
        """
        mode = GameMode(mode)
        if players is None:
            count = player_count if player_count is not None else MIN_PLAYERS
            if not MIN_PLAYERS <= count <= MAX_PLAYERS:
                raise ConfigurationError(
                    "Player count must be between 2 and 4",
                    context={"player_count": count},
                )
            players = list(PlayerColor)[:count]
        else:
            players = [PlayerColor(p) for p in players]
            if player_count is not None and player_count != len(players):
                raise ConfigurationError(
                    "player_count does not match the player list",
                    context={"player_count": player_count, "players": len(players)},
                )

        if rows is None:
            rows = DEFAULT_BASE_ROWS if mode == GameMode.BASE else DEFAULT_CLASSIC_ROWS
        if cols is None:
            cols = DEFAULT_BASE_COLS if mode == GameMode.BASE else DEFAULT_CLASSIC_COLS

        try:
            settings = GameSettings(
                mode=mode, players=players, rows=rows, cols=cols, **overrides
            )
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid game settings",
                context={"errors": [err["msg"] for err in e.errors()]},
            ) from e
        GameEngine.validate_settings(settings)
        return settings

    @staticmethod
    def validate_settings(settings: GameSettings) -> None:
        count = len(settings.players)
        if not MIN_PLAYERS <= count <= MAX_PLAYERS:
            raise ConfigurationError(
                "Player count must be between 2 and 4",
                context={"player_count": count},
            )
        if len(set(settings.players)) != count:
            raise ConfigurationError(
                "Players must be distinct",
                context={"players": [p.value for p in settings.players]},
            )
        if settings.mode == GameMode.BASE and (settings.rows < 3 or settings.cols < 3):
            raise ConfigurationError(
                "Base mode needs at least a 3x3 board",
                context={"rows": settings.rows, "cols": settings.cols},
            )

    @staticmethod
    def new_game(
        mode: GameMode = GameMode.CLASSIC,
        player_count: Optional[int] = None,
        players: Optional[List[PlayerColor]] = None,
        rows: Optional[int] = None,
        cols: Optional[int] = None,
        settings: Optional[GameSettings] = None,
        **overrides,
    ) -> GameState:
        """Create the initial state for a game.

        Classic games start on an empty board. Base games place one HQ per
        player (health 5, one unit of its owner on the HQ cell).
        """
        if settings is None:
            settings = GameEngine.build_settings(
                mode, player_count, players, rows, cols, **overrides
            )
        else:
            GameEngine.validate_settings(settings)

        board = BoardState.empty(settings.rows, settings.cols)
        hqs: List[HQ] = []
        if settings.mode == GameMode.BASE:
            sites = hq_positions(settings.rows, settings.cols, len(settings.players))
            for player, site in zip(settings.players, sites):
                hqs.append(HQ(position=site, owner=player, health=MAX_HQ_HEALTH))
                board.cells[board.index(site.row, site.col)] = Cell(
                    unit_count=1, owner=player
                )

        state = GameState(
            board=board,
            hqs=hqs,
            active_player=settings.players[0],
            settings=settings,
        )
        logger.info(
            "New %s game: %d players on %dx%d",
            settings.mode.value,
            len(settings.players),
            settings.rows,
            settings.cols,
        )
        return state

    @staticmethod
    def restart(state: GameState) -> GameState:
        """Fresh game with the same settings; history is discarded."""
        return GameEngine.new_game(settings=state.settings)

    @staticmethod
    def is_legal_move(
        state: GameState, row: int, col: int, player: PlayerColor
    ) -> bool:
        """Placement legality for ``player``; does not check whose turn it is."""
        if not state.board.in_bounds(row, col) or state.is_over:
            return False
        return is_legal_placement(SimState.from_game_state(state), row, col, player)

    @staticmethod
    def get_valid_moves(
        state: GameState, player: Optional[PlayerColor] = None
    ) -> List[Tuple[int, int]]:
        """All legal placements for ``player`` (default: the active player)
        as ``(row, col)`` pairs in board order."""
        if player is None:
            player = state.active_player
        sim = SimState.from_game_state(state)
        return [divmod(idx, sim.cols) for idx in legal_moves(sim, player)]

    @staticmethod
    def apply_move(
        state: GameState, row: int, col: int, player: PlayerColor
    ) -> GameState:
        """
        Apply a placement and return the new state.

        Raises:
            IllegalMoveError: the game is over, it is not ``player``'s turn,
                or the placement is illegal. ``state`` is left untouched.
        """
        context = {"row": row, "col": col, "player": PlayerColor(player).value}
        if state.is_over:
            raise IllegalMoveError("Game is already over", rule="game_over", context=context)
        if player != state.active_player:
            context["active_player"] = state.active_player.value
            raise IllegalMoveError("Not this player's turn", rule="not_your_turn", context=context)

        sim = SimState.from_game_state(state)
        if not is_legal_placement(sim, row, col, player):
            rule = GameEngine._rejection_rule(sim, row, col, player)
            raise IllegalMoveError("Illegal placement", rule=rule, context=context)

        outcome = simulate_move(sim, sim.index(row, col), player)
        settings = state.settings

        spawned: Optional[PowerUp] = None
        if (
            settings.mode == GameMode.BASE
            and settings.power_ups_enabled
            and not sim.is_over
        ):
            rng = random.Random(derive_spawn_seed(settings.rng_seed, sim.move_count))
            result = try_spawn_power_up(
                sim,
                rng,
                settings.power_up_spawn_chance,
                settings.max_power_ups,
                settings.power_up_spawn_attempts,
            )
            if result is not None:
                idx, kind = result
                spawned = PowerUp(
                    position=Position(row=idx // sim.cols, col=idx % sim.cols),
                    kind=kind,
                )
                logger.debug("Spawned %s at %s", kind.value, spawned.position.to_key())

        report = GameEngine._build_report(outcome, sim.cols, spawned)
        # Snapshots never hold their own history; the stack links them.
        stripped = state.model_copy(update={"history": None})
        snapshot = HistorySnapshot(
            state=stripped.model_copy(deep=True),
            parent=state.history,
            depth=state.history_depth + 1,
        )
        new_state = sim.to_game_state(settings, last_move=report, history=snapshot)

        record_move(
            settings.mode.value,
            outcome.power_up.value if outcome.power_up else "placement",
            outcome.exploded,
            [event.event_type.value for event in report.hq_events],
        )
        logger.debug(
            "Move %d: %s at (%d,%d), %d explosions, depth %d, %d captured",
            new_state.move_count,
            PlayerColor(player).value,
            row,
            col,
            outcome.exploded,
            outcome.depth,
            len(outcome.captured),
        )
        if DEBUG_ENGINE:
            logger.debug("Board after move %d:\n%s", new_state.move_count,
                         BoardManager.render_ascii(new_state))
        if new_state.is_over:
            logger.info(
                "Game over after %d moves: %s",
                new_state.move_count,
                f"{new_state.winner.value} wins" if new_state.winner else "draw",
            )
            record_game_outcome(
                settings.mode.value,
                len(settings.players),
                new_state.winner.value if new_state.winner else None,
            )
        return new_state

    @staticmethod
    def undo(state: GameState) -> GameState:
        """Restore the state before the last move; no-op without history."""
        snapshot = state.history
        if snapshot is None:
            return state
        restored = snapshot.state.model_copy(deep=True)
        return restored.model_copy(update={"history": snapshot.parent})

    @staticmethod
    def _build_report(
        outcome: MoveOutcome, cols: int, spawned: Optional[PowerUp]
    ) -> MoveReport:
        return MoveReport(
            position=Position(row=outcome.idx // cols, col=outcome.idx % cols),
            player=outcome.player,
            power_up=outcome.power_up,
            exploded_cells=outcome.exploded,
            cascade_depth=outcome.depth,
            captured_cells=len(outcome.captured),
            hq_events=[
                HQEvent(
                    owner=event.owner,
                    event_type=event.event_type,
                    health_after=event.health_after,
                    source_player=event.source_player,
                )
                for event in outcome.hq_events
            ],
            spawned_power_up=spawned,
        )

    @staticmethod
    def _rejection_rule(
        sim: SimState, row: int, col: int, player: PlayerColor
    ) -> str:
        if not sim.in_bounds(row, col):
            return "out_of_bounds"
        idx = sim.index(row, col)
        if idx in sim.hq_cells:
            return "hq_cell"
        owner = sim.owners[idx]
        if owner is not None and owner != player:
            return "enemy_cell"
        if sim.is_base_mode and not sim.hq_alive(player):
            return "hq_destroyed"
        if sim.is_base_mode and not is_on_hq_line(sim, player, row, col):
            return "out_of_reach"
        return "illegal"
