from datetime import datetime, timedelta, timezone

import pytest

from tests.conftest import block_all_but
from trapcat.game_state import GameState, GameStatus, derive_status, score_for
from trapcat.hexgrid import CENTER, HexPosition


def test_new_game_starts_in_center(small_game):
    assert small_game.cat_position == CENTER
    assert small_game.status == GameStatus.IN_PROGRESS
    assert small_game.move_count == 0
    assert not small_game.is_cat_at_border()


def test_blocking_all_neighbors_wins(small_game):
    for n in CENTER.neighbors():
        assert small_game.apply_block(n)

    assert small_game.is_cat_trapped()
    assert small_game.status == GameStatus.PLAYER_WON
    assert small_game.has_player_won()
    assert small_game.move_count == 6


def test_cat_on_border_loses(small_game):
    assert small_game.move_cat(HexPosition(2, -2, 0))
    assert small_game.status == GameStatus.PLAYER_LOST
    assert small_game.is_finished()
    assert not small_game.has_player_won()


def test_terminal_state_rejects_moves(small_game):
    small_game.move_cat(HexPosition(2, -2))
    assert not small_game.apply_block(HexPosition(0, 1))
    assert small_game.move_count == 0
    assert not small_game.board.is_blocked(HexPosition(0, 1))


def test_invalid_blocks_are_rejected(small_game):
    assert not small_game.apply_block(HexPosition(4, 0))   # out of bounds
    assert not small_game.apply_block(CENTER)               # the cat's cell
    assert small_game.apply_block(HexPosition(1, 0))
    assert not small_game.apply_block(HexPosition(1, 0))    # already blocked
    assert small_game.move_count == 1


def test_cat_cannot_move_onto_blocked_cell(small_game):
    small_game.apply_block(HexPosition(1, 0))
    assert not small_game.move_cat(HexPosition(1, 0))
    assert small_game.cat_position == CENTER


def test_derive_status_is_pure(small_game):
    board = small_game.board
    block_all_but(board, keep=HexPosition(0, 1))
    assert derive_status(board, CENTER) == GameStatus.IN_PROGRESS
    board.block(HexPosition(0, 1))
    assert derive_status(board, CENTER) == GameStatus.PLAYER_WON
    # status field only changes through transitions
    assert small_game.status == GameStatus.IN_PROGRESS
    assert small_game.update_status() == GameStatus.PLAYER_WON


def test_undo_restores_block_and_cat(small_game):
    small_game.apply_block(HexPosition(1, 0))
    small_game.move_cat(HexPosition(1, -1))
    assert small_game.status == GameStatus.IN_PROGRESS

    assert small_game.undo_last_move()
    assert small_game.cat_position == CENTER
    assert small_game.move_count == 0
    assert not small_game.board.is_blocked(HexPosition(1, 0))
    assert small_game.status == GameStatus.IN_PROGRESS

    assert not small_game.undo_last_move()


def test_undo_refused_on_finished_game(small_game):
    small_game.apply_block(HexPosition(1, 0))
    small_game.move_cat(HexPosition(2, -2))
    assert small_game.status == GameStatus.PLAYER_LOST

    assert not small_game.undo_last_move()
    assert small_game.status == GameStatus.PLAYER_LOST
    assert small_game.cat_position == HexPosition(2, -2)
    assert small_game.move_count == 1
    assert small_game.board.is_blocked(HexPosition(1, 0))


def test_paused_game_rejects_blocks_and_undo(small_game):
    small_game.apply_block(HexPosition(1, 0))

    assert small_game.toggle_pause() is True
    assert not small_game.apply_block(HexPosition(0, 1))
    assert not small_game.undo_last_move()
    assert small_game.move_count == 1

    assert small_game.toggle_pause() is False
    assert small_game.apply_block(HexPosition(0, 1))
    assert small_game.log[-3:-1] == ["PAUSE", "RESUME"]


def test_score_formula():
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)
    g = GameState("g", 5, created_at=created)
    for n in CENTER.neighbors():
        g.apply_block(n)

    now = created + timedelta(seconds=30)
    assert g.elapsed_seconds(now) == 30
    assert g.calculate_score(now) == 1000 - 60 + 250 - 30

    lost = GameState("h", 5, created_at=created)
    lost.apply_block(HexPosition(1, 0))
    assert lost.calculate_score(now) == 95


def test_score_non_increasing_and_non_negative():
    for won in (True, False):
        for elapsed in (0, 100, 5000):
            scores = [score_for(won, m, 11, elapsed) for m in range(0, 200)]
            assert all(s >= 0 for s in scores)
            assert all(a >= b for a, b in zip(scores, scores[1:]))


def test_advanced_statistics(small_game):
    stats = small_game.advanced_statistics()
    assert stats["moveCount"] == 0
    assert stats["efficiency"] == 0
    assert stats["strategy"] == "good"

    small_game.apply_block(HexPosition(1, 0))
    assert small_game.advanced_statistics()["efficiency"] == 95


def test_restore_cat_rejects_blocked_cell(small_game):
    small_game.board.block(HexPosition(1, 0))
    with pytest.raises(ValueError):
        small_game.restore_cat(HexPosition(1, 0))


def test_log_records_events(small_game):
    small_game.apply_block(HexPosition(1, 0))
    small_game.move_cat(HexPosition(1, -1))
    assert small_game.log[0].startswith("BLOCK #1")
    assert small_game.log[1].startswith("CAT")
