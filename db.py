from __future__ import annotations

import logging
import os
import sqlite3
from datetime import datetime, timezone
from typing import Dict, List, Optional
from pathlib import Path

from trapcat.game_state import GameState
from trapcat.persistence import game_from_json, game_to_json

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = str((Path(__file__).parent / "games.db").resolve())


class PersistenceError(RuntimeError):
    """Storage failed; the operation did not complete."""


def db_path() -> str:
    return os.environ.get("TRAPCAT_DB_PATH", DEFAULT_DB_PATH)


def _connect() -> sqlite3.Connection:
    # New connection per call keeps things simple and avoids threading pitfalls.
    return sqlite3.connect(db_path())


def init_db() -> None:
    with _connect() as con:
        con.execute(
            """
            CREATE TABLE IF NOT EXISTS games (
                id TEXT PRIMARY KEY,
                state_json TEXT NOT NULL,
                board_size INTEGER NOT NULL,
                status TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        con.commit()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def list_game_ids() -> list[str]:
    init_db()
    with _connect() as con:
        rows = con.execute("SELECT id FROM games ORDER BY updated_at DESC").fetchall()
    return [r[0] for r in rows]


def get_game_json(game_id: str) -> Optional[str]:
    init_db()
    with _connect() as con:
        row = con.execute("SELECT state_json FROM games WHERE id = ?", (game_id,)).fetchone()
    return None if row is None else row[0]


def all_game_json() -> list[str]:
    init_db()
    with _connect() as con:
        rows = con.execute("SELECT state_json FROM games ORDER BY updated_at DESC").fetchall()
    return [r[0] for r in rows]


def save_game_json(game_id: str, state_json: str, board_size: int, status: str) -> None:
    init_db()
    with _connect() as con:
        cur = con.execute(
            "UPDATE games SET state_json = ?, board_size = ?, status = ?, updated_at = ? WHERE id = ?",
            (state_json, board_size, status, _now_iso(), game_id),
        )
        if cur.rowcount == 0:
            # If missing, create it.
            con.execute(
                "INSERT INTO games(id, state_json, board_size, status, updated_at) VALUES(?,?,?,?,?)",
                (game_id, state_json, board_size, status, _now_iso()),
            )
        con.commit()


def delete_game(game_id: str) -> bool:
    init_db()
    with _connect() as con:
        cur = con.execute("DELETE FROM games WHERE id = ?", (game_id,))
        con.commit()
        return cur.rowcount > 0


class GameRepository:
    """SQLite-backed store keyed by game id. Missing games come back as None."""

    def find(self, game_id: str) -> Optional[GameState]:
        try:
            s = get_game_json(game_id)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not load game {game_id}") from e
        return None if s is None else game_from_json(s)

    def save(self, game: GameState) -> GameState:
        try:
            save_game_json(game.game_id, game_to_json(game), game.board_size, game.status.value)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not save game {game.game_id}") from e
        logger.debug("Saved game %s (%s) to %s", game.game_id, game.status.value, db_path())
        return game

    def delete(self, game_id: str) -> bool:
        try:
            return delete_game(game_id)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not delete game {game_id}") from e

    def find_all(self) -> List[GameState]:
        try:
            rows = all_game_json()
        except sqlite3.Error as e:
            raise PersistenceError("Could not list games") from e
        return [game_from_json(s) for s in rows]


class InMemoryGameRepository:
    """Same contract as GameRepository, kept in a dict of serialized games."""

    def __init__(self):
        self._games: Dict[str, str] = {}

    def find(self, game_id: str) -> Optional[GameState]:
        s = self._games.get(game_id)
        return None if s is None else game_from_json(s)

    def save(self, game: GameState) -> GameState:
        self._games[game.game_id] = game_to_json(game)
        return game

    def delete(self, game_id: str) -> bool:
        return self._games.pop(game_id, None) is not None

    def find_all(self) -> List[GameState]:
        return [game_from_json(s) for s in self._games.values()]
