# trapcat/persistence.py
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from trapcat.game_state import GameState, GameStatus, MoveRecord
from trapcat.hexgrid import HexPosition


SCHEMA_VERSION = 1


def _hex_sort_key(h: HexPosition):
    return (h.q, h.r)


def _record_to_dict(rec: MoveRecord) -> dict[str, Any]:
    return {"blocked": rec.blocked.to_dict(), "catBefore": rec.cat_before.to_dict()}


def _record_from_dict(d: dict[str, Any]) -> MoveRecord:
    return MoveRecord(
        blocked=HexPosition.from_dict(d["blocked"]),
        cat_before=HexPosition.from_dict(d["catBefore"]),
    )


def game_to_dict(game: GameState) -> dict[str, Any]:
    return {
        "schemaVersion": SCHEMA_VERSION,
        "gameId": game.game_id,
        "catPosition": game.cat_position.to_dict(),
        "blockedCells": [h.to_dict() for h in sorted(game.board.blocked, key=_hex_sort_key)],
        "status": game.status.value,
        "moveCount": int(game.move_count),
        "paused": bool(game.paused),
        "boardSize": int(game.board_size),
        "difficulty": game.difficulty,
        "createdAt": game.created_at.isoformat(),
        "moveHistory": [_record_to_dict(r) for r in game.history],
        "log": list(game.log),
    }


def game_from_dict(data: dict[str, Any]) -> GameState:
    if int(data.get("schemaVersion", SCHEMA_VERSION)) != SCHEMA_VERSION:
        raise ValueError(f"Unsupported schemaVersion: {data.get('schemaVersion')}")

    # Radius always travels with the state; blocked cells cannot determine it.
    if "boardSize" not in data:
        raise ValueError("Serialized game is missing boardSize")

    created_at = data.get("createdAt")
    if created_at:
        created_at = datetime.fromisoformat(created_at)
        # naive timestamps are read as UTC
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
    game = GameState(
        game_id=str(data["gameId"]),
        board_size=data["boardSize"],
        difficulty=str(data.get("difficulty", "normal")),
        created_at=created_at or None,
    )

    for cell in data.get("blockedCells", []):
        game.board.block(HexPosition.from_dict(cell))

    game.move_count = int(data.get("moveCount", 0))
    game.paused = bool(data.get("paused", False))
    game.history = [_record_from_dict(r) for r in data.get("moveHistory", [])]
    game.log = list(data.get("log", []))

    status = game.restore_cat(HexPosition.from_dict(data.get("catPosition", {"q": 0, "r": 0})))
    stored = data.get("status")
    if stored is not None and GameStatus(stored) != status:
        raise ValueError(f"Stored status {stored} does not match board ({status.value})")

    return game


def game_to_json(game: GameState) -> str:
    return json.dumps(game_to_dict(game), sort_keys=True)


def game_from_json(s: str) -> GameState:
    return game_from_dict(json.loads(s))
