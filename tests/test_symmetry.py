from dlx.symmetry import (
    ALL_TRANSFORMS,
    FREE,
    OCCUPIED,
    OFF_BOARD,
    ROTATIONS,
    is_equivalent,
    orientation_transforms,
    placement_view,
    transform_colored,
    transform_points,
    transform_view,
)


SQUARE = [(r, c) for r in range(2) for c in range(2)]


def test_orientation_transforms_reflection_implies_rotation():
    assert orientation_transforms(False, False) == ("identity",)
    assert orientation_transforms(True, False) == ROTATIONS
    assert orientation_transforms(False, True) == ALL_TRANSFORMS


def test_transform_points_normalizes_origin():
    # horizontal domino turned a quarter becomes vertical
    assert sorted(transform_points([(0, 0), (0, 1)], "rot90")) == [(0, 0), (1, 0)]
    assert sorted(transform_points([(0, 0), (0, 1), (1, 0)], "flip_h")) == [(0, 0), (0, 1), (1, 1)]


def test_every_transform_keeps_cell_count_and_colors():
    cells = (((0, 0), "a"), ((0, 1), "b"), ((1, 0), "a"))
    for name in ALL_TRANSFORMS:
        out = transform_colored(cells, name)
        assert len(out) == 3
        assert sorted(color for _, color in out) == ["a", "a", "b"]


def test_placement_view_marks_board_and_tile():
    board = [(0, 0), (0, 1), (1, 1)]
    view = placement_view([(0, 1)], board)
    assert view == ((FREE, OCCUPIED), (OFF_BOARD, FREE))


def test_opposite_rows_equivalent_on_square():
    top = placement_view([(0, 0), (0, 1)], SQUARE)
    bottom = placement_view([(1, 0), (1, 1)], SQUARE)
    left = placement_view([(0, 0), (1, 0)], SQUARE)
    assert is_equivalent(top, bottom)
    assert is_equivalent(top, left)
    # without rotations a row never maps onto a column
    assert not is_equivalent(top, left, ("identity", "rot180", "flip_h", "flip_v"))


def test_transform_view_identity_and_rot180():
    board = [(0, 0), (0, 1), (0, 2)]
    view = placement_view([(0, 0)], board)
    assert transform_view(view, "identity") == view
    assert transform_view(view, "rot180") == ((FREE, FREE, OCCUPIED),)
