from __future__ import annotations

import heapq
import itertools
from collections import deque
from typing import Callable, Dict, List, Optional, Sequence

from trapcat.board import HexBoard
from trapcat.hexgrid import HexPosition, hex_distance


Heuristic = Callable[[HexPosition], float]
GoalPredicate = Callable[[HexPosition], bool]


class CatMovementStrategy:
    """
    How the cat picks its next cell. The board is borrowed for the duration of
    each call and must not be mutated while a search runs.
    """

    name = "base"

    def __init__(self, board: HexBoard):
        self.board = board

    # -----------------------------
    # Shared pieces
    # -----------------------------
    def possible_moves(self, pos: HexPosition) -> List[HexPosition]:
        return self.board.adjacent(pos)

    def move_cost(self, a: HexPosition, b: HexPosition) -> float:
        # Unweighted grid: every step costs the same.
        return 1.0

    def goal_predicate(self) -> GoalPredicate:
        return self.board.is_border

    def heuristic(self, target: HexPosition) -> Heuristic:
        return lambda h: float(hex_distance(h, target))

    def before_move_calculation(self, current: HexPosition) -> None:
        pass

    def after_move_calculation(self, selected: Optional[HexPosition]) -> None:
        pass

    def find_next_move(self, current: HexPosition, target: HexPosition) -> Optional[HexPosition]:
        self.before_move_calculation(current)
        selected = self.select_best_move(self.possible_moves(current), current, target)
        self.after_move_calculation(selected)
        return selected

    # -----------------------------
    # Per-strategy
    # -----------------------------
    def select_best_move(
        self, candidates: Sequence[HexPosition], current: HexPosition, target: HexPosition
    ) -> Optional[HexPosition]:
        raise NotImplementedError

    def has_path_to_goal(self, pos: HexPosition) -> bool:
        raise NotImplementedError

    def get_full_path(self, start: HexPosition, target: HexPosition) -> List[HexPosition]:
        raise NotImplementedError


class BFSCatMovement(CatMovementStrategy):
    name = "bfs"

    def select_best_move(self, candidates, current, target):
        """
        Pick the candidate with the shortest escape route. Ties keep the first
        candidate. When no candidate can escape, the cat still steps to the
        first one.
        """
        if not candidates:
            return None

        best: Optional[HexPosition] = None
        best_len = None
        for c in candidates:
            path = self.path_to_goal(c)
            if not path:
                continue
            if best_len is None or len(path) < best_len:
                best_len = len(path)
                best = c

        return best if best is not None else candidates[0]

    def has_path_to_goal(self, pos: HexPosition) -> bool:
        is_goal = self.goal_predicate()
        frontier = deque([pos])
        seen = {pos}

        while frontier:
            current = frontier.popleft()
            if is_goal(current):
                return True
            for nxt in self.possible_moves(current):
                if nxt in seen:
                    continue
                seen.add(nxt)
                frontier.append(nxt)

        return False

    def path_to_goal(self, start: HexPosition) -> List[HexPosition]:
        """Shortest path (start included) to any border cell, or [] if none."""
        return self._bfs_paths(start, self.goal_predicate())

    def get_full_path(self, start, target):
        return self._bfs_paths(start, lambda h: h == target)

    def _bfs_paths(self, start: HexPosition, done: GoalPredicate) -> List[HexPosition]:
        # Carries whole paths rather than parent pointers.
        frontier = deque([[start]])
        seen = {start}

        while frontier:
            path = frontier.popleft()
            last = path[-1]
            if done(last):
                return path
            for nxt in self.possible_moves(last):
                if nxt in seen:
                    continue
                seen.add(nxt)
                frontier.append(path + [nxt])

        return []


class AStarCatMovement(CatMovementStrategy):
    name = "astar"

    def select_best_move(self, candidates, current, target):
        h = self.heuristic(target)
        best: Optional[HexPosition] = None
        best_f = None
        for c in candidates:
            f = self.move_cost(current, c) + h(c)
            if best_f is None or f < best_f:
                best_f = f
                best = c
        return best

    def border_heuristic(self) -> Heuristic:
        """Rings left to cross before reaching the border; never overestimates."""
        edge = self.board.radius - 1
        return lambda h: float(max(0, edge - h.ring()))

    def has_path_to_goal(self, pos: HexPosition) -> bool:
        return bool(self._search(pos, self.goal_predicate(), self.border_heuristic()))

    def get_full_path(self, start, target):
        return self._search(start, lambda h: h == target, self.heuristic(target))

    def _search(self, start: HexPosition, done: GoalPredicate, h: Heuristic) -> List[HexPosition]:
        counter = itertools.count()
        open_heap = [(h(start), next(counter), start)]
        g_score: Dict[HexPosition, float] = {start: 0.0}
        came_from: Dict[HexPosition, Optional[HexPosition]] = {start: None}
        closed = set()

        while open_heap:
            _, _, current = heapq.heappop(open_heap)
            if current in closed:
                continue
            if done(current):
                return self._reconstruct(came_from, current)
            closed.add(current)

            for nxt in self.possible_moves(current):
                if nxt in closed:
                    continue
                tentative = g_score[current] + self.move_cost(current, nxt)
                if tentative < g_score.get(nxt, float("inf")):
                    g_score[nxt] = tentative
                    came_from[nxt] = current
                    heapq.heappush(open_heap, (tentative + h(nxt), next(counter), nxt))

        return []

    @staticmethod
    def _reconstruct(came_from: Dict[HexPosition, Optional[HexPosition]], goal: HexPosition) -> List[HexPosition]:
        path_rev: List[HexPosition] = []
        cur: Optional[HexPosition] = goal
        while cur is not None:
            path_rev.append(cur)
            cur = came_from[cur]
        path_rev.reverse()
        return path_rev


DIFFICULTY_STRATEGIES = {
    "facil": BFSCatMovement,
    "fácil": BFSCatMovement,
    "normal": BFSCatMovement,
    "dificil": AStarCatMovement,
    "difícil": AStarCatMovement,
}


def create_strategy(difficulty: Optional[str], board: HexBoard) -> CatMovementStrategy:
    """Unknown or missing labels fall back to BFS."""
    key = (difficulty or "").strip().lower()
    return DIFFICULTY_STRATEGIES.get(key, BFSCatMovement)(board)
