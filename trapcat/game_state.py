# trapcat/game_state.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from trapcat.board import HexBoard
from trapcat.hexgrid import CENTER, HexPosition


class GameStatus(Enum):
    IN_PROGRESS = "IN_PROGRESS"
    PLAYER_WON = "PLAYER_WON"
    PLAYER_LOST = "PLAYER_LOST"


@dataclass(frozen=True)
class MoveRecord:
    blocked: HexPosition
    cat_before: HexPosition


def derive_status(board: HexBoard, cat: HexPosition) -> GameStatus:
    if board.is_border(cat):
        return GameStatus.PLAYER_LOST
    if not board.adjacent(cat):
        return GameStatus.PLAYER_WON
    return GameStatus.IN_PROGRESS


def score_for(won: bool, move_count: int, board_radius: int, elapsed_seconds: int) -> int:
    if won:
        return max(0, 1000 - 10 * move_count + 50 * board_radius - elapsed_seconds)
    return max(0, 100 - 5 * move_count)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GameState:
    def __init__(self, game_id: str, board_size: int, difficulty: str = "normal",
                 created_at: Optional[datetime] = None):
        self.game_id = game_id
        self.board = HexBoard(board_size)
        self.difficulty = difficulty
        self.created_at: datetime = created_at or _utcnow()
        self.move_count: int = 0
        self.history: List[MoveRecord] = []
        self.log: List[str] = []
        self.paused: bool = False
        self._cat_position: HexPosition = CENTER
        self._status: GameStatus = GameStatus.IN_PROGRESS
        self.update_status()

    # -----------------------------
    # Read side
    # -----------------------------
    @property
    def board_size(self) -> int:
        return self.board.radius

    @property
    def cat_position(self) -> HexPosition:
        return self._cat_position

    @property
    def status(self) -> GameStatus:
        return self._status

    def is_finished(self) -> bool:
        return self._status != GameStatus.IN_PROGRESS

    def has_player_won(self) -> bool:
        return self._status == GameStatus.PLAYER_WON

    def is_cat_at_border(self) -> bool:
        return self.board.is_border(self._cat_position)

    def is_cat_trapped(self) -> bool:
        return not self.board.adjacent(self._cat_position)

    def can_block(self, pos: HexPosition) -> bool:
        return self.board.is_valid_move(pos) and pos != self._cat_position

    def elapsed_seconds(self, now: Optional[datetime] = None) -> int:
        now = now or _utcnow()
        return max(0, int((now - self.created_at).total_seconds()))

    def calculate_score(self, now: Optional[datetime] = None) -> int:
        return score_for(self.has_player_won(), self.move_count, self.board_size, self.elapsed_seconds(now))

    # -----------------------------
    # Transitions
    # -----------------------------
    def update_status(self) -> GameStatus:
        before = self._status
        self._status = derive_status(self.board, self._cat_position)
        if self._status != before:
            self.log.append(f"STATUS {before.value} -> {self._status.value}")
        return self._status

    def apply_block(self, pos: HexPosition) -> bool:
        """
        Player move. Returns False (state untouched) when the game is over or
        paused, or the cell cannot be blocked.
        """
        if self.is_finished() or self.paused or not self.can_block(pos):
            return False

        self.board.block(pos)
        self.move_count += 1
        self.history.append(MoveRecord(blocked=pos, cat_before=self._cat_position))
        self.log.append(f"BLOCK #{self.move_count} {pos}")
        self.update_status()
        return True

    def move_cat(self, pos: HexPosition) -> bool:
        if not self.board.is_valid_move(pos):
            return False
        self.log.append(f"CAT {self._cat_position} -> {pos}")
        self._cat_position = pos
        self.update_status()
        return True

    def restore_cat(self, pos: HexPosition) -> GameStatus:
        """Place the cat without logging a move; used when loading saved games."""
        if not self.board.in_bounds(pos) or self.board.is_blocked(pos):
            raise ValueError(f"Cat position {pos} is out of bounds or blocked")
        self._cat_position = pos
        self._status = derive_status(self.board, pos)
        return self._status

    def toggle_pause(self) -> bool:
        if self.is_finished():
            return self.paused
        self.paused = not self.paused
        self.log.append("PAUSE" if self.paused else "RESUME")
        return self.paused

    def undo_last_move(self) -> bool:
        """Take back the last block. Finished and paused games keep their moves."""
        if self.is_finished() or self.paused or not self.history:
            return False
        rec = self.history.pop()
        self.board.unblock(rec.blocked)
        self._cat_position = rec.cat_before
        self.move_count -= 1
        self.log.append(f"UNDO {rec.blocked}, cat back to {rec.cat_before}")
        self.update_status()
        return True

    # -----------------------------
    # Reporting
    # -----------------------------
    def advanced_statistics(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        score = self.calculate_score(now)
        efficiency = score // self.move_count if self.move_count else 0
        from_center = self._cat_position.ring()
        if from_center > 4:
            rating = "poor"
        elif from_center > 2:
            rating = "fair"
        else:
            rating = "good"
        return {
            "score": score,
            "moveCount": self.move_count,
            "efficiency": efficiency,
            "strategy": rating,
        }

    def __repr__(self):
        return (f"GameState({self.game_id!r}, size={self.board_size}, cat={self._cat_position}, "
                f"status={self._status.value}, moves={self.move_count})")
