import itertools

import pytest

from db import InMemoryGameRepository
from trapcat.board import HexBoard
from trapcat.engine import GameEngine
from trapcat.game_state import GameState
from trapcat.hexgrid import CENTER


def _id_factory():
    counter = itertools.count(1)
    return lambda: f"game-{next(counter)}"


@pytest.fixture
def store():
    return InMemoryGameRepository()


@pytest.fixture
def engine(store):
    return GameEngine(store, id_factory=_id_factory(), default_board_size=3)


@pytest.fixture
def board():
    return HexBoard(5)


@pytest.fixture
def small_game():
    return GameState("g1", 3)


def block_all_but(board, keep=None, around=CENTER):
    """Block every in-bounds neighbor of `around` except `keep`."""
    for n in around.neighbors():
        if n != keep and board.in_bounds(n):
            board.block(n)


def dump_log(game):
    print("\n--- GAME LOG ---")
    for e in game.log:
        print(e)
    print("--- END LOG ---\n")
