import pytest

from trapcat.board import HexBoard
from trapcat.hexgrid import CENTER, HexPosition, hex_distance


@pytest.mark.parametrize("radius", [3, 4, 7])
def test_in_bounds_matches_cube_ring(radius):
    b = HexBoard(radius)
    for q in range(-radius - 2, radius + 3):
        for r in range(-radius - 2, radius + 3):
            h = HexPosition(q, r)
            assert b.in_bounds(h) == (max(abs(h.q), abs(h.r), abs(h.s)) <= radius)


@pytest.mark.parametrize("radius", [2, 0, -1])
def test_radius_below_three_is_rejected(radius):
    with pytest.raises(ValueError):
        HexBoard(radius)


def test_radius_must_be_integer():
    with pytest.raises(ValueError):
        HexBoard(4.0)


def test_adjacent_only_free_in_bounds_neighbors(board):
    board.block(HexPosition(1, 0))
    board.block(HexPosition(0, 1))

    for q in range(-5, 6):
        for r in range(-5, 6):
            h = HexPosition(q, r)
            if not board.in_bounds(h):
                continue
            adj = board.adjacent(h)
            assert len(adj) <= 6
            for n in adj:
                assert hex_distance(h, n) == 1
                assert board.in_bounds(n)
                assert not board.is_blocked(n)

    assert HexPosition(1, 0) not in board.adjacent(CENTER)
    assert len(board.adjacent(CENTER)) == 4
    # direction order is kept
    assert board.adjacent(CENTER) == [n for n in CENTER.neighbors() if not board.is_blocked(n)]


def test_corner_has_three_neighbors(board):
    assert len(board.adjacent(HexPosition(5, 0))) == 3


def test_block_is_idempotent(board):
    h = HexPosition(2, -1)
    board.block(h)
    board.block(h)
    assert len(board.blocked) == 1
    assert board.is_blocked(h)
    assert not board.is_valid_move(h)


def test_is_valid_move():
    b = HexBoard(3)
    assert b.is_valid_move(HexPosition(3, 0))
    assert not b.is_valid_move(HexPosition(4, 0))
    b.block(HexPosition(3, 0))
    assert not b.is_valid_move(HexPosition(3, 0))


def test_border_uses_second_to_last_ring():
    b = HexBoard(3)
    assert not b.is_border(CENTER)
    assert not b.is_border(HexPosition(1, 0))
    assert b.is_border(HexPosition(2, -2))
    assert b.is_border(HexPosition(3, 0))


def test_positions_matching_enumeration():
    b = HexBoard(3)
    everything = b.positions_matching(lambda h: True)
    # q, r in [-2, 2] with |s| <= 3 drops (2, 2) and (-2, -2)
    assert len(everything) == 23
    assert HexPosition(2, 2) not in everything
    assert len(set(everything)) == len(everything)

    borders = b.border_positions()
    assert borders
    assert all(h.ring() >= 2 for h in borders)


def test_free_positions_skip_blocked(board):
    before = len(board.free_positions())
    board.block(HexPosition(1, 1))
    assert len(board.free_positions()) == before - 1


def test_simulate_block_restores(board):
    h = HexPosition(0, 2)
    with board.simulate_block(h):
        assert board.is_blocked(h)
    assert not board.is_blocked(h)
    assert board.blocked == set()


def test_simulate_block_restores_on_error(board):
    h = HexPosition(0, 2)
    with pytest.raises(RuntimeError):
        with board.simulate_block(h):
            raise RuntimeError("boom")
    assert not board.is_blocked(h)


def test_simulate_block_keeps_existing_block(board):
    h = HexPosition(0, 2)
    board.block(h)
    with board.simulate_block(h):
        pass
    assert board.is_blocked(h)
