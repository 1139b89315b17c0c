from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Set

from trapcat.hexgrid import HexPosition

MIN_RADIUS = 3


@dataclass
class HexBoard:
    radius: int

    blocked: Set[HexPosition] = field(default_factory=set)

    def __post_init__(self) -> None:
        if isinstance(self.radius, bool) or not isinstance(self.radius, int):
            raise ValueError(f"Board radius must be an integer, got {self.radius!r}")
        if self.radius < MIN_RADIUS:
            raise ValueError(f"Board radius must be at least {MIN_RADIUS}, got {self.radius}")

    def in_bounds(self, h: HexPosition) -> bool:
        return h.ring() <= self.radius

    def is_blocked(self, h: HexPosition) -> bool:
        return h in self.blocked

    def is_valid_move(self, h: HexPosition) -> bool:
        return self.in_bounds(h) and not self.is_blocked(h)

    def is_border(self, h: HexPosition) -> bool:
        # Reaching the second-to-last ring already counts as an escape.
        return h.ring() >= self.radius - 1

    def block(self, h: HexPosition) -> None:
        self.blocked.add(h)

    def unblock(self, h: HexPosition) -> None:
        self.blocked.discard(h)

    def adjacent(self, h: HexPosition) -> List[HexPosition]:
        """Neighbors of h in direction order, dropping out-of-bounds and blocked cells."""
        return [n for n in h.neighbors() if self.in_bounds(n) and not self.is_blocked(n)]

    def positions_matching(self, predicate: Callable[[HexPosition], bool]) -> List[HexPosition]:
        out = []
        for q in range(-self.radius + 1, self.radius):
            for r in range(-self.radius + 1, self.radius):
                if abs(-q - r) > self.radius:
                    continue
                h = HexPosition(q, r)
                if predicate(h):
                    out.append(h)
        return out

    def border_positions(self) -> List[HexPosition]:
        return self.positions_matching(self.is_border)

    def free_positions(self) -> List[HexPosition]:
        return self.positions_matching(lambda h: not self.is_blocked(h))

    @contextmanager
    def simulate_block(self, h: HexPosition) -> Iterator[HexPosition]:
        """
        Temporarily block h. The blocked set is restored on exit, also when the
        body raises.
        """
        already = h in self.blocked
        self.blocked.add(h)
        try:
            yield h
        finally:
            if not already:
                self.blocked.discard(h)
