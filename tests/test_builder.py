import pytest

from config import CFG
from dlx.builder import (
    PuzzleOptions,
    build_from_text,
    build_puzzle,
    symmetry_transforms,
    tile_orientations,
)
from models import Shape


def _cells(*coords):
    return tuple(sorted(((r, c), "") for r, c in coords))


DOMINO = _cells((0, 0), (0, 1))
L_TETROMINO = _cells((0, 0), (1, 0), (2, 0), (2, 1))
L_TROMINO = _cells((0, 0), (1, 0), (1, 1))

MIXED_DOMINOES = """\
XX
XX

XX X
   X
"""

CHECKER = """\
ab
ba

ab ba
"""


def test_reflection_implies_rotation():
    assert PuzzleOptions(reflection=True).rotation is True
    assert PuzzleOptions().rotation is False


def test_options_from_cfg_with_overrides(monkeypatch):
    monkeypatch.setattr(CFG, "ENABLE_ROTATION", True)
    monkeypatch.setattr(CFG, "ELIMINATE_SYMMETRY", False)
    opts = PuzzleOptions.from_cfg(eliminate_duplicates=False, reflection=None)
    assert opts.rotation is True
    assert opts.reflection is False
    assert opts.eliminate_symmetry is False
    assert opts.eliminate_duplicates is False


@pytest.mark.parametrize(
    "cells, rotation, reflection, expected",
    [
        (DOMINO, False, False, 1),
        (DOMINO, True, False, 2),
        (DOMINO, True, True, 2),
        (L_TROMINO, True, False, 4),
        (L_TROMINO, True, True, 4),
        (L_TETROMINO, True, False, 4),
        (L_TETROMINO, True, True, 8),
    ],
)
def test_orientation_counts(cells, rotation, reflection, expected):
    assert len(tile_orientations(cells, rotation, reflection)) == expected


def test_rotated_twins_form_one_duplicate_group():
    with_rot, _ = build_from_text(MIXED_DOMINOES, PuzzleOptions(rotation=True))
    without, _ = build_from_text(MIXED_DOMINOES, PuzzleOptions())
    assert with_rot.config.duplica == [0, 0]
    assert without.config.duplica == [0, 1]
    assert with_rot.config.is_duplicated(0) and with_rot.config.is_duplicated(1)
    assert not without.config.is_duplicated(0)
    assert not without.config.is_duplicated(1)


def test_placements_and_rows():
    puzzle, err = build_from_text(MIXED_DOMINOES, PuzzleOptions())
    assert err is None
    # horizontal: two rows; vertical: two columns
    assert puzzle.placements_per_tile == [2, 2]
    assert len(puzzle.rows) == puzzle.links.num_rows == 4
    for row in puzzle.rows:
        assert row[0] < puzzle.num_tiles
        assert all(c >= puzzle.num_tiles for c in row[1:])
    assert not puzzle.directly_fail


def test_symmetry_transforms_depend_on_rotation():
    board = _cells((0, 0), (0, 1), (1, 0), (1, 1))
    flat = [tile_orientations(DOMINO, False, False)]
    turned = [tile_orientations(DOMINO, True, False)]
    assert symmetry_transforms(board, flat) == ("identity", "rot180", "flip_h", "flip_v")
    assert len(symmetry_transforms(board, turned)) == 8


def test_colored_board_restricts_placements_and_symmetry():
    puzzle, err = build_from_text(CHECKER, PuzzleOptions(rotation=False))
    assert err is None
    assert puzzle.placements_per_tile == [1, 1]
    assert puzzle.config.transforms == ("identity",)
    assert puzzle.config.leader_id is None


def test_leader_skips_duplicated_tiles():
    text = "XXX\nXXX\n\nXX XX X\n      X\n"
    puzzle, _ = build_from_text(text, PuzzleOptions(rotation=True))
    # two horizontal dominoes and one vertical: all twins under rotation
    assert puzzle.config.duplica == [0, 0, 0]
    assert puzzle.config.leader_id is None

    unpruned, _ = build_from_text(
        text, PuzzleOptions(rotation=True, eliminate_duplicates=False)
    )
    assert unpruned.config.leader_id == 0


def test_no_leader_without_symmetry_elimination():
    text = "XXX\nXXX\n\nXX XX XX\n"
    puzzle, _ = build_from_text(
        text, PuzzleOptions(rotation=True, eliminate_duplicates=False, eliminate_symmetry=False)
    )
    assert puzzle.config.leader_id is None


def test_extra_mode_when_tiles_exceed_board():
    puzzle, _ = build_from_text("XXX\n\nX XX X\n", PuzzleOptions())
    assert puzzle.config.enable_extra is True
    assert puzzle.config.leader_id is None
    assert not puzzle.directly_fail


@pytest.mark.parametrize(
    "text, fragment",
    [
        ("XX\nXX\n\nXX\n", "smaller than board area"),
        ("XXX\n\nX\nX X\n", "no placement: A"),
        ("ab\n\na a\n", "no tile can cover: r0c1"),
    ],
)
def test_directly_fail_reasons(text, fragment):
    puzzle, err = build_from_text(text, PuzzleOptions())
    assert err is None
    assert puzzle.directly_fail
    assert fragment in puzzle.fail_reason


def test_empty_board_is_a_programming_error():
    with pytest.raises(ValueError):
        build_puzzle(Shape(cells=()), [Shape(cells=DOMINO, name="A")], PuzzleOptions())


def test_parse_error_is_reported():
    puzzle, err = build_from_text("", PuzzleOptions())
    assert puzzle is None
    assert err == "empty puzzle"
