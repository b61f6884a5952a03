"""
Pydantic Models for Chain Reaction Game State
Shared by the game engine, the AI and the HTTP service
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum

from .config import (
    MAX_HQ_HEALTH,
    MAX_POWER_UPS,
    POWER_UP_SPAWN_ATTEMPTS,
    POWER_UP_SPAWN_CHANCE,
)


class GameMode(str, Enum):
    """Game mode enumeration"""
    CLASSIC = "classic"
    BASE = "base"


class PlayerColor(str, Enum):
    """Player identity; declaration order is the default rotation order"""
    RED = "red"
    BLUE = "blue"
    VIOLET = "violet"
    BLACK = "black"


class PowerUpKind(str, Enum):
    """Power-up kind enumeration"""
    DIAMOND = "diamond"
    HEART = "heart"


class HQEventType(str, Enum):
    """HQ event enumeration"""
    DAMAGE = "damage"
    HEAL = "heal"


class AIStrategy(str, Enum):
    """AI strategy enumeration"""
    HEURISTIC = "heuristic"
    MINIMAX = "minimax"


class AIDifficulty(str, Enum):
    """AI difficulty enumeration"""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class PlayerControl(str, Enum):
    """Who drives a seat"""
    HUMAN = "human"
    AI = "ai"


class Position(BaseModel):
    """Board position"""
    row: int
    col: int

    class Config:
        frozen = True

    def to_key(self) -> str:
        """Convert position to string key"""
        return f"{self.row},{self.col}"


class Cell(BaseModel):
    """A single grid cell. ``unit_count == 0`` iff ``owner`` is None."""
    unit_count: int = Field(0, ge=0, alias="unitCount")
    owner: Optional[PlayerColor] = None

    class Config:
        populate_by_name = True


class BoardState(BaseModel):
    """Rectangular grid stored row-major in a flat list"""
    rows: int = Field(ge=2)
    cols: int = Field(ge=2)
    cells: List[Cell]

    @classmethod
    def empty(cls, rows: int, cols: int) -> "BoardState":
        return cls(rows=rows, cols=cols, cells=[Cell() for _ in range(rows * cols)])

    def index(self, row: int, col: int) -> int:
        return row * self.cols + col

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell_at(self, row: int, col: int) -> Cell:
        return self.cells[self.index(row, col)]


class HQ(BaseModel):
    """Headquarters record (base mode only)"""
    position: Position
    owner: PlayerColor
    health: int = Field(MAX_HQ_HEALTH, ge=0, le=MAX_HQ_HEALTH)

    class Config:
        populate_by_name = True


class PowerUp(BaseModel):
    """Live power-up on an empty cell"""
    position: Position
    kind: PowerUpKind


class HQEvent(BaseModel):
    """Damage or heal applied to an HQ during a move"""
    owner: PlayerColor
    event_type: HQEventType = Field(alias="type")
    health_after: int = Field(alias="healthAfter")
    source_player: PlayerColor = Field(alias="sourcePlayer")

    class Config:
        populate_by_name = True


class MoveReport(BaseModel):
    """Side-channel log of the most recent move"""
    position: Position
    player: PlayerColor
    power_up: Optional[PowerUpKind] = Field(None, alias="powerUp")
    exploded_cells: int = Field(0, alias="explodedCells")
    cascade_depth: int = Field(0, alias="cascadeDepth")
    captured_cells: int = Field(0, alias="capturedCells")
    hq_events: List[HQEvent] = Field(default_factory=list, alias="hqEvents")
    spawned_power_up: Optional[PowerUp] = Field(None, alias="spawnedPowerUp")

    class Config:
        populate_by_name = True


class GameSettings(BaseModel):
    """Settings fixed for the lifetime of a game"""
    mode: GameMode = GameMode.CLASSIC
    players: List[PlayerColor]
    rows: int = Field(ge=2)
    cols: int = Field(ge=2)
    power_ups_enabled: bool = Field(True, alias="powerUpsEnabled")
    power_up_spawn_chance: float = Field(
        POWER_UP_SPAWN_CHANCE, ge=0, le=1, alias="powerUpSpawnChance"
    )
    max_power_ups: int = Field(MAX_POWER_UPS, ge=0, alias="maxPowerUps")
    power_up_spawn_attempts: int = Field(
        POWER_UP_SPAWN_ATTEMPTS, ge=0, alias="powerUpSpawnAttempts"
    )
    rng_seed: int = Field(0, alias="rngSeed")

    class Config:
        populate_by_name = True


class GameState(BaseModel):
    """Complete game state.

    ``history`` is a persistent stack of prior states. It is excluded from
    serialization but takes part in equality.
    """
    board: BoardState
    hqs: List[HQ] = Field(default_factory=list)
    power_ups: List[PowerUp] = Field(default_factory=list, alias="powerUps")
    active_player: PlayerColor = Field(alias="activePlayer")
    is_over: bool = Field(False, alias="isOver")
    winner: Optional[PlayerColor] = None
    move_count: int = Field(0, ge=0, alias="moveCount")
    settings: GameSettings
    last_move: Optional[MoveReport] = Field(None, alias="lastMove")
    history: Optional["HistorySnapshot"] = Field(None, exclude=True)

    class Config:
        populate_by_name = True

    @property
    def mode(self) -> GameMode:
        return self.settings.mode

    @property
    def players(self) -> List[PlayerColor]:
        return self.settings.players

    @property
    def history_depth(self) -> int:
        return self.history.depth if self.history is not None else 0

    def hq_for(self, player: PlayerColor) -> Optional[HQ]:
        for hq in self.hqs:
            if hq.owner == player:
                return hq
        return None

    def power_up_at(self, row: int, col: int) -> Optional[PowerUp]:
        for power_up in self.power_ups:
            if power_up.position.row == row and power_up.position.col == col:
                return power_up
        return None


class HistorySnapshot(BaseModel):
    """Immutable link in the undo stack.

    ``state`` is the pre-move state with its own history stripped;
    ``parent`` is the snapshot that was on top when it was pushed.
    """
    state: GameState
    parent: Optional["HistorySnapshot"] = None
    depth: int = Field(1, ge=1)

    class Config:
        frozen = True


GameState.model_rebuild()
HistorySnapshot.model_rebuild()


class AIConfig(BaseModel):
    """AI configuration"""
    strategy: AIStrategy = AIStrategy.HEURISTIC
    difficulty: AIDifficulty = AIDifficulty.MEDIUM
    think_time: Optional[int] = Field(None, ge=0, alias="thinkTime")
    search_depth: Optional[int] = Field(None, ge=1, le=6, alias="searchDepth")
    score_noise: Optional[float] = Field(None, ge=0, alias="scoreNoise")
    max_branching: Optional[int] = Field(None, ge=1, alias="maxBranching")
    rng_seed: Optional[int] = Field(None, alias="rngSeed")
    heuristic_profile_id: Optional[str] = Field(
        None, alias="heuristicProfileId"
    )
    archetype: Optional[str] = None

    class Config:
        populate_by_name = True
