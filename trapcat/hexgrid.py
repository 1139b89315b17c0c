# trapcat/hexgrid.py

from __future__ import annotations

from typing import List, Tuple


# Cube directions (dq, dr, ds). This order is the tie-break for every search.
DIRECTIONS: Tuple[Tuple[int, int, int], ...] = (
    (1, 0, -1), (1, -1, 0), (0, -1, 1),
    (-1, 0, 1), (-1, 1, 0), (0, 1, -1),
)


def _as_int(name: str, value) -> int:
    # bool is an int subclass, but True is not a coordinate
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return value


class HexPosition:
    """
    Cube coordinate on a hex grid. s is derived when omitted; when given it
    must satisfy q + r + s == 0.
    """

    __slots__ = ("q", "r", "s")

    def __init__(self, q, r, s=None):
        q = _as_int("q", q)
        r = _as_int("r", r)
        if s is None:
            s = -q - r
        else:
            s = _as_int("s", s)
            if q + r + s != 0:
                raise ValueError(f"q + r + s must be 0, got ({q},{r},{s})")
        self.q = q
        self.r = r
        self.s = s

    def __eq__(self, other):
        return isinstance(other, HexPosition) and self.q == other.q and self.r == other.r

    def __hash__(self):
        return hash((self.q, self.r))

    def __repr__(self):
        return f"({self.q},{self.r},{self.s})"

    def __add__(self, other: HexPosition) -> HexPosition:
        return HexPosition(self.q + other.q, self.r + other.r)

    def neighbors(self) -> List[HexPosition]:
        return [self + d for d in DIRECTION_VECTORS]

    def ring(self) -> int:
        """Distance from the origin."""
        return max(abs(self.q), abs(self.r), abs(self.s))

    def to_dict(self) -> dict:
        return {"q": self.q, "r": self.r}

    @staticmethod
    def from_dict(d) -> HexPosition:
        if not isinstance(d, dict) or "q" not in d or "r" not in d:
            raise ValueError(f"Expected a {{q, r}} mapping, got {d!r}")
        return HexPosition(d["q"], d["r"])


CENTER = HexPosition(0, 0)

DIRECTION_VECTORS: Tuple[HexPosition, ...] = tuple(HexPosition(dq, dr, ds) for dq, dr, ds in DIRECTIONS)


def hex_distance(a: HexPosition, b: HexPosition) -> int:
    return max(abs(a.q - b.q), abs(a.r - b.r), abs(a.s - b.s))
