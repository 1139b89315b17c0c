from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

import db
from trapcat.engine import DEFAULT_BOARD_SIZE, DEFAULT_DIFFICULTY, GameEngine
from trapcat.game_state import GameState
from trapcat.hexgrid import HexPosition
from trapcat.persistence import game_to_dict
from trapcat.render_ascii import render_board_ascii

logging.basicConfig(
    level=os.environ.get("TRAPCAT_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Trap the Cat")
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


class BlockRequest(BaseModel):
    gameId: str
    q: int
    r: int


def _engine() -> GameEngine:
    return GameEngine(
        db.GameRepository(),
        default_board_size=int(os.environ.get("TRAPCAT_BOARD_SIZE", DEFAULT_BOARD_SIZE)),
        default_difficulty=os.environ.get("TRAPCAT_DIFFICULTY", DEFAULT_DIFFICULTY),
    )


def _require(value, game_id: str):
    if value is None:
        raise HTTPException(status_code=404, detail=f"No such game: {game_id}")
    return value


def _position(q: int, r: int) -> HexPosition:
    try:
        return HexPosition(q, r)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _state_payload(engine: GameEngine, game: GameState) -> Dict[str, Any]:
    payload = game_to_dict(game)
    payload["implementation"] = engine.strategy_for(game).name
    payload["score"] = game.calculate_score()
    payload["isGameOver"] = game.is_finished()
    return payload


@app.exception_handler(db.PersistenceError)
def _persistence_failed(request: Request, exc: db.PersistenceError):
    logger.error("Persistence failure on %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.post("/api/game/start")
def start_game(boardSize: Optional[int] = None, difficulty: Optional[str] = None):
    engine = _engine()
    try:
        game = engine.start_new_game(boardSize, difficulty)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _state_payload(engine, game)


@app.post("/api/game/block")
def block_position(payload: BlockRequest):
    engine = _engine()
    game = engine.execute_player_move(payload.gameId, _position(payload.q, payload.r))
    return _state_payload(engine, _require(game, payload.gameId))


@app.get("/api/game/state/{game_id}")
def get_state(game_id: str):
    engine = _engine()
    return _require(engine.enriched_state(game_id), game_id)


@app.get("/api/game/statistics/{game_id}")
def get_statistics(game_id: str):
    engine = _engine()
    stats = _require(engine.game_statistics(game_id), game_id)
    return {**stats, "analysis": engine.analyze_game(game_id)}


@app.get("/api/game/suggestion/{game_id}")
def get_suggestion(game_id: str):
    engine = _engine()
    _require(engine.get_game(game_id), game_id)
    h = engine.suggest_move(game_id)
    if h is None:
        return {"message": "No suggestion available"}
    return {"suggestion": h.to_dict(), "message": f"Block ({h.q},{h.r})"}


@app.post("/api/game/undo/{game_id}")
def undo_move(game_id: str):
    engine = _engine()
    game = _require(engine.undo_last_move(game_id), game_id)
    return _state_payload(engine, game)


@app.post("/api/game/pause/{game_id}")
def toggle_pause(game_id: str):
    engine = _engine()
    _require(engine.get_game(game_id), game_id)
    if engine.toggle_pause(game_id) is None:
        raise HTTPException(status_code=409, detail=f"Game {game_id} is over")
    return _state_payload(engine, engine.get_game(game_id))


@app.get("/api/game/leaderboard")
def leaderboard(limit: int = 10):
    return {"leaderboard": _engine().leaderboard(limit)}


@app.get("/api/game/implementation-info")
def implementation_info():
    engine = _engine()
    return {
        "defaultBoardSize": engine.default_board_size,
        "defaultDifficulty": engine.default_difficulty,
        "strategies": {"facil": "bfs", "normal": "bfs", "dificil": "astar"},
    }


# -----------------------------
# Minimal HTML UI
# -----------------------------
def _ui_state(engine: GameEngine, game_id: str) -> Dict[str, Any]:
    game = _require(engine.get_game(game_id), game_id)
    return {
        "game_id": game_id,
        "status": game.status.value,
        "move_count": game.move_count,
        "score": game.calculate_score(),
        "board_text": render_board_ascii(game),
        "log_tail": "\n".join(game.log[-30:]),
    }


@app.get("/", response_class=HTMLResponse)
def index(request: Request, game_id: Optional[str] = None):
    engine = _engine()
    # If no game is given, create one and redirect to it.
    if game_id is None:
        game = engine.start_new_game()
        return RedirectResponse(url=f"/?game_id={game.game_id}", status_code=302)

    return templates.TemplateResponse(
        request,
        "index.html",
        {**_ui_state(engine, game_id), "games": db.list_game_ids()},
    )


@app.post("/ui/block", response_class=HTMLResponse)
def ui_block(
    request: Request,
    game_id: str = Form(...),
    q: int = Form(...),
    r: int = Form(...),
):
    engine = _engine()
    before = _require(engine.get_game(game_id), game_id).move_count
    game = engine.execute_player_move(game_id, _position(q, r))
    message = f"Blocked ({q},{r})" if game.move_count != before else f"Cannot block ({q},{r})"

    return templates.TemplateResponse(
        request,
        "index.html",
        {**_ui_state(engine, game_id), "games": db.list_game_ids(), "last_events": message},
    )
