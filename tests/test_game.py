"""Unit tests for the PerfectXO board model."""

import pytest

from perfectxo.game import (
    Board,
    InvalidMove,
    MalformedEncoding,
    Outcome,
    apply_move,
    changed_cell,
    classify,
    deserialize,
    serialize,
)


def test_empty_board_is_ongoing():
    board = Board.empty()
    assert serialize(board) == "_" * 9
    assert classify(board) is Outcome.ONGOING
    assert board.empty_cells() == list(range(9))


def test_apply_move_returns_new_board():
    board = Board.empty()
    moved = apply_move(board, 1, 2, "X")
    assert serialize(moved) == "_____X___"
    assert serialize(board) == "_" * 9
    assert moved.cell_at(1, 2) == "X"


@pytest.mark.parametrize("row, col", [(-1, 0), (0, 3), (3, 3), (1, -2)])
def test_apply_move_rejects_out_of_bounds(row, col):
    with pytest.raises(InvalidMove):
        Board.empty().apply_move(row, col, "X")


def test_apply_move_rejects_occupied_cell():
    board = deserialize("X________")
    with pytest.raises(InvalidMove, match="occupied"):
        board.apply_move(0, 0, "O")


@pytest.mark.parametrize(
    "encoding, expected",
    [
        ("XXXOO____", Outcome.WIN_A),
        ("XX_OOOX__", Outcome.WIN_B),
        ("XO_XO_X__", Outcome.WIN_A),
        ("XO__XO__X", Outcome.WIN_A),
        ("XXO_O_O_X", Outcome.WIN_B),
        ("XOXXOOOXX", Outcome.TIE),
        ("XO__X____", Outcome.ONGOING),
    ],
)
def test_classify(encoding, expected):
    assert classify(deserialize(encoding)) is expected


def test_double_win_board_uses_first_line_found():
    # Rows are scanned before columns and diagonals.
    assert classify(deserialize("OOOXXX___")) is Outcome.WIN_B
    assert classify(deserialize("XXXOOO___")) is Outcome.WIN_A


def test_classify_larger_board():
    board = deserialize("O___" "XO__" "XXO_" "XX_O")
    assert board.size == 4
    assert classify(board) is Outcome.WIN_B


def test_round_trip_preserves_classification():
    for encoding in ("XO__X____", "XOXXOOOXX", "XXXOO____", "_" * 9):
        board = deserialize(encoding)
        again = deserialize(serialize(board))
        assert again == board
        assert classify(again) is classify(board)


@pytest.mark.parametrize("encoding", ["", "XO", "X" * 10, "XO_XO_XO?"])
def test_deserialize_rejects_malformed(encoding):
    with pytest.raises(MalformedEncoding):
        deserialize(encoding)


def test_deserialize_checks_expected_size():
    with pytest.raises(MalformedEncoding):
        deserialize("_" * 9, size=4)


def test_changed_cell_and_rendering():
    assert changed_cell("X________", "X___O____", 3) == (1, 1)
    with pytest.raises(MalformedEncoding):
        changed_cell("X________", "O________", 3)
    assert str(deserialize("XO__X___O")) == "XO_\n_X_\n__O"


@pytest.mark.parametrize("mark", ["XO", "x", "_", ""])
def test_apply_move_rejects_unknown_marks(mark):
    board = Board.empty()
    with pytest.raises(InvalidMove, match="Unknown mark"):
        board.apply_move(0, 0, mark)


def test_board_rejects_unknown_symbols():
    with pytest.raises(MalformedEncoding, match="unknown symbols"):
        Board(size=3, cells=("x",) + ("_",) * 8)
    with pytest.raises(MalformedEncoding):
        Board(size=2, cells=("XO", "_", "_", "_"))
