"""
Chain Reaction Service - FastAPI Application
Hosts in-memory game sessions, move application and AI move selection
"""

import logging
import os
import random
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from . import __version__
from .ai.context import AIGameContext, choose_move
from .config import LOG_LEVEL, SESSION_MAX
from .errors import (
    ChainReactionError,
    ConfigurationError,
    GameNotFoundError,
    IllegalMoveError,
)
from .game_engine import GameEngine
from .metrics import ACTIVE_SESSIONS
from .models import (
    AIConfig,
    GameMode,
    GameState,
    PlayerColor,
    PlayerControl,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Chain Reaction Service",
    description="Game sessions, rules resolution and AI moves for Chain Reaction",
    version=__version__,
)

cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@dataclass
class GameSession:
    state: GameState
    context: AIGameContext
    created_at: float
    last_access: float
    lock: threading.Lock = field(default_factory=threading.Lock)


_sessions_lock = threading.Lock()
sessions: "OrderedDict[str, GameSession]" = OrderedDict()
_next_game_id = 0


class CreateGameRequest(BaseModel):
    """Request to start a new game"""
    mode: GameMode = GameMode.CLASSIC
    players: Optional[List[PlayerColor]] = None
    player_count: Optional[int] = Field(None, alias="playerCount")
    rows: Optional[int] = None
    cols: Optional[int] = None
    power_ups_enabled: Optional[bool] = Field(None, alias="powerUpsEnabled")
    rng_seed: Optional[int] = Field(None, alias="rngSeed")
    controls: Dict[PlayerColor, PlayerControl] = Field(default_factory=dict)
    ai_configs: Dict[PlayerColor, AIConfig] = Field(
        default_factory=dict, alias="aiConfigs"
    )

    class Config:
        populate_by_name = True


class MoveRequest(BaseModel):
    """Request to place a unit"""
    row: int
    col: int
    player: Optional[PlayerColor] = None


class AIMoveRequest(BaseModel):
    """Request for an AI move; ``apply`` commits it to the session"""
    player: Optional[PlayerColor] = None
    apply: bool = True


def _http_error(exc: ChainReactionError) -> HTTPException:
    if isinstance(exc, GameNotFoundError):
        status = 404
    elif isinstance(exc, IllegalMoveError):
        status = 409
    elif isinstance(exc, ConfigurationError):
        status = 422
    else:
        status = 500
    return HTTPException(status_code=status, detail=exc.to_dict())


def _store_session(session: GameSession) -> str:
    global _next_game_id
    with _sessions_lock:
        _next_game_id += 1
        game_id = f"g{_next_game_id}"
        sessions[game_id] = session
        while len(sessions) > SESSION_MAX:
            evicted, _ = sessions.popitem(last=False)
            logger.info("Evicted game session %s (limit %d)", evicted, SESSION_MAX)
        ACTIVE_SESSIONS.set(len(sessions))
    return game_id


def _get_session(game_id: str) -> GameSession:
    with _sessions_lock:
        session = sessions.get(game_id)
        if session is None:
            raise GameNotFoundError(
                "Unknown game", context={"game_id": game_id}
            )
        sessions.move_to_end(game_id)
        session.last_access = time.time()
        return session


def _session_payload(game_id: str, session: GameSession) -> Dict[str, Any]:
    state = session.state
    return {
        "gameId": game_id,
        "state": state.model_dump(by_alias=True, mode="json"),
        "historyDepth": state.history_depth,
        "validMoves": (
            [] if state.is_over
            else [list(move) for move in GameEngine.get_valid_moves(state)]
        ),
        "controls": {p.value: c.value for p, c in session.context.controls.items()},
    }


@app.get("/")
async def root():
    """Service information"""
    return {
        "service": "Chain Reaction Service",
        "status": "running",
        "version": __version__,
    }


@app.get("/health")
async def health_check():
    """Health check for container orchestration"""
    return {"status": "healthy"}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@app.post("/games")
def create_game(request: CreateGameRequest):
    """Start a new game session"""
    try:
        overrides: Dict[str, Any] = {}
        if request.power_ups_enabled is not None:
            overrides["power_ups_enabled"] = request.power_ups_enabled
        overrides["rng_seed"] = (
            request.rng_seed
            if request.rng_seed is not None
            else random.randint(0, 2**31 - 1)
        )
        state = GameEngine.new_game(
            request.mode,
            player_count=request.player_count,
            players=request.players,
            rows=request.rows,
            cols=request.cols,
            **overrides,
        )
        context = AIGameContext.for_game(
            state, controls=request.controls, ai_configs=request.ai_configs
        )
        now = time.time()
        session = GameSession(
            state=state, context=context, created_at=now, last_access=now
        )
        game_id = _store_session(session)
        logger.info("Created game %s", game_id)
        return _session_payload(game_id, session)
    except ChainReactionError as e:
        logger.warning("Rejected game creation: %s", e)
        raise _http_error(e)
    except Exception as e:
        logger.error("Error creating game: %s", str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/games/{game_id}")
def get_game(game_id: str):
    try:
        session = _get_session(game_id)
        with session.lock:
            return _session_payload(game_id, session)
    except ChainReactionError as e:
        raise _http_error(e)


@app.get("/games/{game_id}/valid-moves")
def get_valid_moves(game_id: str, player: Optional[PlayerColor] = None):
    try:
        session = _get_session(game_id)
        with session.lock:
            state = session.state
            target = player or state.active_player
            moves = [] if state.is_over else GameEngine.get_valid_moves(state, target)
            return {
                "gameId": game_id,
                "player": target.value,
                "validMoves": [list(move) for move in moves],
            }
    except ChainReactionError as e:
        raise _http_error(e)


@app.post("/games/{game_id}/moves")
def make_move(game_id: str, request: MoveRequest):
    """Apply a placement for the active player (or ``player`` if given)"""
    try:
        session = _get_session(game_id)
        with session.lock:
            player = request.player or session.state.active_player
            session.state = GameEngine.apply_move(
                session.state, request.row, request.col, player
            )
            return _session_payload(game_id, session)
    except IllegalMoveError as e:
        logger.info("Rejected move in %s: %s", game_id, e)
        raise _http_error(e)
    except ChainReactionError as e:
        logger.error("Error applying move in %s: %s", game_id, e, exc_info=True)
        raise _http_error(e)


@app.post("/games/{game_id}/undo")
def undo_move(game_id: str):
    try:
        session = _get_session(game_id)
        with session.lock:
            session.state = GameEngine.undo(session.state)
            return _session_payload(game_id, session)
    except ChainReactionError as e:
        raise _http_error(e)


@app.post("/games/{game_id}/restart")
def restart_game(game_id: str):
    """Fresh game with the same settings; the AI context is rebuilt from the
    same seed, so controls and personalities carry over"""
    try:
        session = _get_session(game_id)
        with session.lock:
            old = session.context
            session.state = GameEngine.restart(session.state)
            session.context = AIGameContext.for_game(
                session.state, controls=old.controls, ai_configs=old.ai_configs
            )
            return _session_payload(game_id, session)
    except ChainReactionError as e:
        raise _http_error(e)


@app.post("/games/{game_id}/ai-move")
def ai_move(game_id: str, request: AIMoveRequest):
    """Choose a move with the player's AI and optionally apply it"""
    try:
        session = _get_session(game_id)
        with session.lock:
            state = session.state
            player = request.player or state.active_player
            if state.is_over:
                raise IllegalMoveError(
                    "Game is already over", rule="game_over",
                    context={"player": player.value},
                )
            start = time.time()
            move = choose_move(state, player, session.context)
            elapsed_ms = int((time.time() - start) * 1000)
            applied = False
            if move is not None and request.apply:
                session.state = GameEngine.apply_move(state, move[0], move[1], player)
                applied = True
            payload = _session_payload(game_id, session)
            payload.update(
                {
                    "player": player.value,
                    "move": list(move) if move is not None else None,
                    "applied": applied,
                    "thinkingTimeMs": elapsed_ms,
                }
            )
            return payload
    except IllegalMoveError as e:
        logger.info("Rejected AI move in %s: %s", game_id, e)
        raise _http_error(e)
    except ChainReactionError as e:
        logger.error("Error generating AI move in %s: %s", game_id, e, exc_info=True)
        raise _http_error(e)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
