"""Board-level helpers for the Chain Reaction service.

Side-effect-free queries over :class:`BoardState` / :class:`GameState`
used by the engine, the HTTP layer, the self-play CLI and the tests. The
hot paths (cascade, legality, AI search) work on
:class:`chainreaction.rules.state.SimState` instead.
"""
from __future__ import annotations

import hashlib

from .models import (
    BoardState,
    Cell,
    GameState,
    PlayerColor,
    Position,
    PowerUpKind,
)

__all__ = ["BoardManager"]


_PLAYER_GLYPHS = {
    PlayerColor.RED: "r",
    PlayerColor.BLUE: "b",
    PlayerColor.VIOLET: "v",
    PlayerColor.BLACK: "k",
}

_POWER_UP_GLYPHS = {
    PowerUpKind.DIAMOND: "<>",
    PowerUpKind.HEART: "<3",
}


class BoardManager:
    """Static helpers over pydantic board models.

    It is intentionally side-effect-free; callers pass in ``BoardState``
    instances and receive derived views.
    """

    @staticmethod
    def is_valid_position(position: Position, board: BoardState) -> bool:
        return board.in_bounds(position.row, position.col)

    @staticmethod
    def get_cell(position: Position, board: BoardState) -> Cell | None:
        """Return the cell at ``position`` or ``None`` if off the board."""
        if not board.in_bounds(position.row, position.col):
            return None
        return board.cell_at(position.row, position.col)

    @staticmethod
    def get_player_cells(
        board: BoardState, player: PlayerColor
    ) -> list[Position]:
        return [
            Position(row=idx // board.cols, col=idx % board.cols)
            for idx, cell in enumerate(board.cells)
            if cell.owner == player and cell.unit_count > 0
        ]

    @staticmethod
    def count_cells(board: BoardState, player: PlayerColor) -> int:
        return sum(
            1 for cell in board.cells
            if cell.owner == player and cell.unit_count > 0
        )

    @staticmethod
    def count_units(board: BoardState, player: PlayerColor) -> int:
        return sum(
            cell.unit_count for cell in board.cells if cell.owner == player
        )

    @staticmethod
    def total_units(board: BoardState) -> int:
        return sum(cell.unit_count for cell in board.cells)

    @staticmethod
    def occupied_players(board: BoardState) -> set[PlayerColor]:
        """Players owning at least one occupied cell."""
        return {
            cell.owner for cell in board.cells
            if cell.owner is not None and cell.unit_count > 0
        }

    @staticmethod
    def hash_game_state(state: GameState) -> str:
        """
        Canonical fingerprint of a GameState used by tests and the self-play
        records to compare positions. History and the last-move report do
        not contribute.
        """
        parts = [
            f"{state.settings.mode.value}:{state.board.rows}x{state.board.cols}",
            "|".join(
                f"{cell.unit_count}{_PLAYER_GLYPHS[cell.owner] if cell.owner else '-'}"
                for cell in state.board.cells
            ),
            ",".join(
                f"{hq.owner.value}@{hq.position.to_key()}={hq.health}"
                for hq in state.hqs
            ),
            ",".join(
                sorted(
                    f"{p.kind.value}@{p.position.to_key()}"
                    for p in state.power_ups
                )
            ),
            f"{state.active_player.value}:{state.move_count}:{int(state.is_over)}",
        ]
        return hashlib.sha256("#".join(parts).encode("utf-8")).hexdigest()[:16]

    @staticmethod
    def render_ascii(state: GameState) -> str:
        """Fixed-width text rendering of the board.

        ``r2`` is two red units, ``B@5`` the blue HQ at health 5, ``<>`` a
        diamond and ``<3`` a heart.
        """
        board = state.board
        hq_cells = {
            board.index(hq.position.row, hq.position.col): hq
            for hq in state.hqs
        }
        power_ups = {
            board.index(p.position.row, p.position.col): p.kind
            for p in state.power_ups
        }
        lines = []
        for row in range(board.rows):
            tokens = []
            for col in range(board.cols):
                idx = board.index(row, col)
                cell = board.cells[idx]
                if idx in hq_cells:
                    hq = hq_cells[idx]
                    token = f"{_PLAYER_GLYPHS[hq.owner].upper()}@{hq.health}"
                elif cell.owner is not None:
                    token = f"{_PLAYER_GLYPHS[cell.owner]}{cell.unit_count}"
                elif idx in power_ups:
                    token = _POWER_UP_GLYPHS[power_ups[idx]]
                else:
                    token = "."
                tokens.append(token.rjust(4))
            lines.append("".join(tokens))
        return "\n".join(lines)
