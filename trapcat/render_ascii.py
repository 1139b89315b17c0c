from __future__ import annotations

from trapcat.game_state import GameState
from trapcat.hexgrid import HexPosition

SYMBOLS = {
    "cat": "C",
    "blocked": "#",
    "border": "o",
    "free": ".",
}


def cell_symbol(game: GameState, h: HexPosition) -> str:
    if h == game.cat_position:
        return SYMBOLS["cat"]
    if game.board.is_blocked(h):
        return SYMBOLS["blocked"]
    if game.board.is_border(h):
        return SYMBOLS["border"]
    return SYMBOLS["free"]


def render_board_ascii(game: GameState) -> str:
    """
    One text row per r, indented so neighboring rows interleave like a hex
    grid. Row labels are r; the first cell of each row has q = max(-N, -N - r).
    """
    n = game.board_size
    lines = [
        f"Game {game.game_id}  size={n}  moves={game.move_count}  status={game.status.value}",
    ]
    for r in range(-n, n + 1):
        q_lo = max(-n, -n - r)
        q_hi = min(n, n - r)
        cells = " ".join(cell_symbol(game, HexPosition(q, r)) for q in range(q_lo, q_hi + 1))
        lines.append(f"{r:>3} " + " " * abs(r) + cells)
    return "\n".join(lines)
