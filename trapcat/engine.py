from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, List, Optional, Protocol

from trapcat.game_state import GameState
from trapcat.hexgrid import CENTER, HexPosition, hex_distance
from trapcat.pathfinding import BFSCatMovement, CatMovementStrategy, create_strategy
from trapcat.persistence import game_to_dict

logger = logging.getLogger(__name__)

DEFAULT_BOARD_SIZE = 11
DEFAULT_DIFFICULTY = "normal"


class GameStore(Protocol):
    def find(self, game_id: str) -> Optional[GameState]: ...

    def save(self, game: GameState) -> GameState: ...

    def delete(self, game_id: str) -> bool: ...

    def find_all(self) -> List[GameState]: ...


class GameEngine:
    """
    Runs games stored in a GameStore. Every public call loads the game, works on
    it and saves it back; unknown ids give None rather than an error.
    """

    def __init__(self, store: GameStore,
                 id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
                 default_board_size: int = DEFAULT_BOARD_SIZE,
                 default_difficulty: str = DEFAULT_DIFFICULTY):
        self.store = store
        self.id_factory = id_factory
        self.default_board_size = default_board_size
        self.default_difficulty = default_difficulty

    # -----------------------------
    # Lifecycle
    # -----------------------------
    def start_new_game(self, board_size: Optional[int] = None, difficulty: Optional[str] = None) -> GameState:
        size = self.default_board_size if board_size is None else board_size
        game = GameState(self.id_factory(), size, difficulty or self.default_difficulty)
        self.store.save(game)
        logger.info("Started game %s (size=%s, difficulty=%s)", game.game_id, size, game.difficulty)
        return game

    def get_game(self, game_id: str) -> Optional[GameState]:
        return self.store.find(game_id)

    def delete_game(self, game_id: str) -> bool:
        return self.store.delete(game_id)

    def strategy_for(self, game: GameState) -> CatMovementStrategy:
        return create_strategy(game.difficulty, game.board)

    def set_difficulty(self, game_id: str, difficulty: str) -> Optional[GameState]:
        game = self.store.find(game_id)
        if game is None:
            return None
        game.difficulty = difficulty
        game.log.append(f"DIFFICULTY {difficulty} ({self.strategy_for(game).name})")
        return self.store.save(game)

    # -----------------------------
    # Moves
    # -----------------------------
    def is_valid_move(self, game_id: str, pos: HexPosition) -> bool:
        game = self.store.find(game_id)
        return game is not None and not game.is_finished() and not game.paused and game.can_block(pos)

    def execute_player_move(self, game_id: str, pos: HexPosition) -> Optional[GameState]:
        """
        Block pos and let the cat answer. A rejected move (game over, cell out
        of bounds or taken) returns the stored state untouched.
        """
        game = self.store.find(game_id)
        if game is None:
            return None

        if not game.apply_block(pos):
            logger.debug("Rejected move %s in game %s (%s)", pos, game_id, game.status.value)
            return game

        if not game.is_finished():
            self.execute_cat_move(game)

        if game.is_finished():
            logger.info("Game %s finished: %s after %d moves", game_id, game.status.value, game.move_count)

        return self.store.save(game)

    def execute_cat_move(self, game: GameState) -> Optional[HexPosition]:
        nxt = self.strategy_for(game).find_next_move(game.cat_position, self.target_position(game))
        if nxt is None or not game.move_cat(nxt):
            return None
        return nxt

    def undo_last_move(self, game_id: str) -> Optional[GameState]:
        game = self.store.find(game_id)
        if game is None:
            return None
        if game.undo_last_move():
            self.store.save(game)
        return game

    def toggle_pause(self, game_id: str) -> Optional[bool]:
        """Flip the pause flag; returns the new value, or None for unknown or finished games."""
        game = self.store.find(game_id)
        if game is None or game.is_finished():
            return None
        paused = game.toggle_pause()
        self.store.save(game)
        logger.info("Game %s %s", game_id, "paused" if paused else "resumed")
        return paused

    # -----------------------------
    # Targets and suggestions
    # -----------------------------
    def target_position(self, game: GameState) -> HexPosition:
        """Closest open border cell to the cat; first found on ties."""
        board = game.board
        cat = game.cat_position
        borders = board.positions_matching(lambda h: board.is_border(h) and not board.is_blocked(h))
        if not borders:
            borders = board.border_positions()
        return min(borders, key=lambda h: hex_distance(cat, h))

    def adjacent_suggestion(self, game: GameState) -> Optional[HexPosition]:
        """Cat neighbor closest to the border."""
        moves = game.board.adjacent(game.cat_position)
        if not moves:
            return None
        return max(moves, key=lambda h: h.ring())

    def suggestion_candidates(self, game: GameState) -> List[HexPosition]:
        """Cells next to the cat, then the rest of its shortest escape route."""
        cat = game.cat_position
        route = BFSCatMovement(game.board).path_to_goal(cat)
        out: List[HexPosition] = []
        for cell in game.board.adjacent(cat) + route[1:]:
            if cell != cat and cell not in out:
                out.append(cell)
        return out

    def suggest_move(self, game_id: str) -> Optional[HexPosition]:
        """
        Try each candidate block, let the cat answer on the speculative board,
        and keep the cell that leaves the cat the longest way out. Ties go to
        the cell nearest the cat.
        """
        game = self.store.find(game_id)
        if game is None or game.is_finished():
            return None

        board = game.board
        cat = game.cat_position
        strategy = self.strategy_for(game)
        escape = BFSCatMovement(board)
        no_exit = len(board.positions_matching(lambda h: True))

        best: Optional[HexPosition] = None
        best_key = None
        for cell in self.suggestion_candidates(game):
            with board.simulate_block(cell):
                reply = strategy.find_next_move(cat, self.target_position(game))
                if reply is None:
                    # the block traps the cat outright
                    steps = float("inf")
                else:
                    route = escape.path_to_goal(reply)
                    steps = len(route) - 1 if route else no_exit
            key = (steps, -hex_distance(cat, cell))
            if best_key is None or key > best_key:
                best_key = key
                best = cell

        return best

    # -----------------------------
    # Reporting
    # -----------------------------
    def game_statistics(self, game_id: str) -> Optional[Dict[str, Any]]:
        game = self.store.find(game_id)
        if game is None:
            return None
        return {
            "moveCount": game.move_count,
            "blockedPositions": len(game.board.blocked),
            "catPosition": game.cat_position.to_dict(),
            "isGameOver": game.is_finished(),
            "isPaused": game.paused,
        }

    def analyze_game(self, game_id: str) -> Optional[Dict[str, Any]]:
        game = self.store.find(game_id)
        if game is None:
            return None

        stats = game.advanced_statistics()
        efficiency = stats["efficiency"]
        if efficiency < 10:
            tip = "Block cells closer to the cat to trap it sooner."
        elif efficiency < 30:
            tip = "Good work. Try to anticipate the cat's next step."
        else:
            tip = "Excellent strategy."

        same_size = [g for g in self.store.find_all() if g.board_size == game.board_size]
        avg = sum(g.calculate_score() for g in same_size) / len(same_size) if same_size else 0.0

        return {
            "advancedStats": stats,
            "keyMoments": {
                "start": {"catPosition": CENTER.to_dict()},
                "current": {"catPosition": game.cat_position.to_dict()},
            },
            "tip": tip,
            "comparison": {"score": stats["score"], "averageScoreSameBoardSize": avg},
        }

    def enriched_state(self, game_id: str) -> Optional[Dict[str, Any]]:
        game = self.store.find(game_id)
        if game is None:
            return None
        suggestion = self.adjacent_suggestion(game)
        return {
            "basicState": game_to_dict(game),
            "advancedStats": game.advanced_statistics(),
            "suggestedMove": None if suggestion is None else suggestion.to_dict(),
            "score": game.calculate_score(),
            "implementation": self.strategy_for(game).name,
        }

    def leaderboard(self, limit: int = 10) -> List[Dict[str, Any]]:
        scored = sorted(((g.calculate_score(), g) for g in self.store.find_all()),
                        key=lambda pair: pair[0], reverse=True)
        return [
            {
                "gameId": g.game_id,
                "score": score,
                "moveCount": g.move_count,
                "catPosition": g.cat_position.to_dict(),
                "status": g.status.value,
                "boardSize": g.board_size,
                "createdAt": g.created_at.isoformat(),
            }
            for score, g in scored[:max(0, limit)]
        ]
