# dlx/symmetry.py: dihedral grid transforms and placement-view comparison
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Sequence, Tuple

Coord = Tuple[int, int]
View = Tuple[Tuple[int, ...], ...]

OFF_BOARD = 0
FREE = 1
OCCUPIED = 2

# Point maps on (row, col); results are re-normalized to a (0, 0) origin.
_POINT_MAPS: Dict[str, Callable[[int, int], Coord]] = {
    "identity":       lambda r, c: (r, c),
    "rot90":          lambda r, c: (c, -r),
    "rot180":         lambda r, c: (-r, -c),
    "rot270":         lambda r, c: (-c, r),
    "flip_h":         lambda r, c: (r, -c),
    "flip_v":         lambda r, c: (-r, c),
    "transpose":      lambda r, c: (c, r),
    "anti_transpose": lambda r, c: (-c, -r),
}

ROTATIONS: Tuple[str, ...] = ("identity", "rot90", "rot180", "rot270")
REFLECTIONS: Tuple[str, ...] = ("flip_h", "flip_v", "transpose", "anti_transpose")
ALL_TRANSFORMS: Tuple[str, ...] = ROTATIONS + REFLECTIONS


def orientation_transforms(rotation: bool, reflection: bool) -> Tuple[str, ...]:
    """Transforms a tile may undergo; reflection implies rotation."""
    if reflection:
        return ALL_TRANSFORMS
    if rotation:
        return ROTATIONS
    return ("identity",)


def transform_points(points: Iterable[Coord], name: str) -> List[Coord]:
    """Apply ``name`` and shift so the minimum row and column are 0."""
    fn = _POINT_MAPS[name]
    moved = [fn(r, c) for (r, c) in points]
    if not moved:
        return []
    r0 = min(r for r, _ in moved)
    c0 = min(c for _, c in moved)
    return [(r - r0, c - c0) for (r, c) in moved]


def transform_colored(cells: Sequence[Tuple[Coord, str]], name: str) -> Tuple[Tuple[Coord, str], ...]:
    """Transform (coord, color) pairs; result is normalized and sorted."""
    pts = transform_points([rc for rc, _ in cells], name)
    return tuple(sorted(zip(pts, (color for _, color in cells))))


def transform_view(view: View, name: str) -> View:
    h = len(view)
    w = len(view[0]) if h else 0
    if name == "identity" or h == 0:
        return view
    src = [(r, c) for r in range(h) for c in range(w)]
    dst = transform_points(src, name)
    nh = 1 + max(r for r, _ in dst)
    nw = 1 + max(c for _, c in dst)
    grid = [[OFF_BOARD] * nw for _ in range(nh)]
    for (r, c), (nr, nc) in zip(src, dst):
        grid[nr][nc] = view[r][c]
    return tuple(tuple(row) for row in grid)


def placement_view(placed: Iterable[Coord], board: Iterable[Coord]) -> View:
    """
    Render one placement over the board's bounding box:
    0 = not a board cell, 1 = free board cell, 2 = covered by the placement.
    """
    board = list(board)
    if not board:
        return ()
    r0 = min(r for r, _ in board)
    c0 = min(c for _, c in board)
    h = 1 + max(r for r, _ in board) - r0
    w = 1 + max(c for _, c in board) - c0
    grid = [[OFF_BOARD] * w for _ in range(h)]
    for r, c in board:
        grid[r - r0][c - c0] = FREE
    for r, c in placed:
        grid[r - r0][c - c0] = OCCUPIED
    return tuple(tuple(row) for row in grid)


def is_equivalent(v1: View, v2: View, transforms: Iterable[str] = ALL_TRANSFORMS) -> bool:
    """True when some transform in ``transforms`` maps ``v1`` exactly onto ``v2``."""
    for name in transforms:
        if transform_view(v1, name) == v2:
            return True
    return False


__all__ = [
    "ALL_TRANSFORMS", "ROTATIONS", "REFLECTIONS",
    "orientation_transforms", "transform_points", "transform_colored",
    "transform_view", "placement_view", "is_equivalent",
]
