"""
Mutable flat-board state for rule resolution and search.

The pydantic :class:`GameState` is convenient at the API boundary but too
slow to copy for every candidate move the AI evaluates. ``SimState`` keeps
the board as two parallel lists indexed by ``row * cols + col`` and is
converted from/to ``GameState`` once per committed move.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..errors import InvalidStateError
from ..geometry import BoardGeometry, get_geometry
from ..models import (
    BoardState,
    Cell,
    GameMode,
    GameSettings,
    GameState,
    HistorySnapshot,
    HQ,
    MoveReport,
    PlayerColor,
    Position,
    PowerUp,
    PowerUpKind,
)


@dataclass(slots=True)
class SimState:
    """Flat, mutable game state."""

    rows: int
    cols: int
    mode: GameMode
    players: Tuple[PlayerColor, ...]
    units: List[int]
    owners: List[Optional[PlayerColor]]
    hq_health: Dict[PlayerColor, int]
    hq_cells: Dict[int, PlayerColor]  # board index -> HQ owner
    power_ups: Dict[int, PowerUpKind]
    active_player: PlayerColor
    move_count: int = 0
    is_over: bool = False
    winner: Optional[PlayerColor] = None

    @property
    def geometry(self) -> BoardGeometry:
        return get_geometry(self.rows, self.cols)

    @property
    def is_base_mode(self) -> bool:
        return self.mode == GameMode.BASE

    def index(self, row: int, col: int) -> int:
        return row * self.cols + col

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def hq_index(self, player: PlayerColor) -> Optional[int]:
        for idx, owner in self.hq_cells.items():
            if owner == player:
                return idx
        return None

    def hq_alive(self, player: PlayerColor) -> bool:
        return self.hq_health.get(player, 0) > 0

    def cell_count(self, player: PlayerColor) -> int:
        units = self.units
        return sum(
            1 for idx, owner in enumerate(self.owners)
            if owner == player and units[idx] > 0
        )

    def non_hq_cell_count(self, player: PlayerColor) -> int:
        units = self.units
        hq_cells = self.hq_cells
        return sum(
            1 for idx, owner in enumerate(self.owners)
            if owner == player and units[idx] > 0 and idx not in hq_cells
        )

    def unit_count(self, player: PlayerColor) -> int:
        return sum(
            n for n, owner in zip(self.units, self.owners) if owner == player
        )

    def total_units(self) -> int:
        return sum(self.units)

    def occupied_players(self) -> set[PlayerColor]:
        return {
            owner for owner, n in zip(self.owners, self.units)
            if owner is not None and n > 0
        }

    def copy(self) -> "SimState":
        # hq_cells never changes during a game and is shared between copies.
        return SimState(
            rows=self.rows,
            cols=self.cols,
            mode=self.mode,
            players=self.players,
            units=list(self.units),
            owners=list(self.owners),
            hq_health=dict(self.hq_health),
            hq_cells=self.hq_cells,
            power_ups=dict(self.power_ups),
            active_player=self.active_player,
            move_count=self.move_count,
            is_over=self.is_over,
            winner=self.winner,
        )

    def key(self) -> tuple:
        """Hashable position key for transposition tables."""
        return (
            tuple(self.units),
            tuple(self.owners),
            tuple(self.hq_health.values()),
            tuple(sorted(self.power_ups.items())),
            self.active_player,
            self.is_over,
        )

    @classmethod
    def from_game_state(cls, state: GameState) -> "SimState":
        board = state.board
        hq_health: Dict[PlayerColor, int] = {}
        hq_cells: Dict[int, PlayerColor] = {}
        for hq in state.hqs:
            hq_health[hq.owner] = hq.health
            hq_cells[board.index(hq.position.row, hq.position.col)] = hq.owner

        if state.settings.mode == GameMode.BASE:
            missing = [p for p in state.settings.players if p not in hq_health]
            if missing:
                raise InvalidStateError(
                    "Base-mode player has no HQ",
                    context={"players": [p.value for p in missing]},
                )

        return cls(
            rows=board.rows,
            cols=board.cols,
            mode=state.settings.mode,
            players=tuple(state.settings.players),
            units=[cell.unit_count for cell in board.cells],
            owners=[cell.owner for cell in board.cells],
            hq_health=hq_health,
            hq_cells=hq_cells,
            power_ups={
                board.index(p.position.row, p.position.col): p.kind
                for p in state.power_ups
            },
            active_player=state.active_player,
            move_count=state.move_count,
            is_over=state.is_over,
            winner=state.winner,
        )

    def to_game_state(
        self,
        settings: GameSettings,
        last_move: Optional[MoveReport] = None,
        history: Optional[HistorySnapshot] = None,
    ) -> GameState:
        cells = [
            Cell(unit_count=n, owner=owner if n > 0 else None)
            for n, owner in zip(self.units, self.owners)
        ]
        hq_positions = {owner: idx for idx, owner in self.hq_cells.items()}
        hqs = []
        for owner, health in self.hq_health.items():
            row, col = divmod(hq_positions[owner], self.cols)
            hqs.append(HQ(position=Position(row=row, col=col), owner=owner, health=health))
        power_ups = [
            PowerUp(position=Position(row=idx // self.cols, col=idx % self.cols), kind=kind)
            for idx, kind in sorted(self.power_ups.items())
        ]
        return GameState(
            board=BoardState(rows=self.rows, cols=self.cols, cells=cells),
            hqs=hqs,
            power_ups=power_ups,
            active_player=self.active_player,
            is_over=self.is_over,
            winner=self.winner,
            move_count=self.move_count,
            settings=settings,
            last_move=last_move,
            history=history,
        )
