# dlx/builder.py: board + tiles -> exact-cover matrix and search configuration
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from config import CFG
from models import Coord, Shape
from puzzle_parser import parse_puzzle
from dlx.links import LinksArray
from dlx.search_config import SearchConfig
from dlx.symmetry import ALL_TRANSFORMS, orientation_transforms, transform_colored

log = logging.getLogger(__name__)

Colored = Tuple[Tuple[Coord, str], ...]


@dataclass
class PuzzleOptions:
    rotation: bool = False
    reflection: bool = False
    eliminate_duplicates: bool = True
    eliminate_symmetry: bool = True
    verbose: bool = False

    def __post_init__(self) -> None:
        # a flipped tile may always be turned as well
        if self.reflection:
            self.rotation = True

    @classmethod
    def from_cfg(cls, cfg=CFG, **overrides) -> "PuzzleOptions":
        base = dict(
            rotation=bool(cfg.ENABLE_ROTATION),
            reflection=bool(cfg.ENABLE_REFLECTION),
            eliminate_duplicates=bool(cfg.ELIMINATE_DUPLICATES),
            eliminate_symmetry=bool(cfg.ELIMINATE_SYMMETRY),
            verbose=bool(cfg.VERBOSE),
        )
        base.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**base)


@dataclass
class Puzzle:
    board: Shape
    tiles: List[Shape]
    options: PuzzleOptions
    links: LinksArray
    config: SearchConfig
    rows: List[Tuple[int, ...]] = field(default_factory=list)
    cell_coords: List[Coord] = field(default_factory=list)
    placements_per_tile: List[int] = field(default_factory=list)
    fail_reason: Optional[str] = None

    @property
    def num_tiles(self) -> int:
        return len(self.tiles)

    @property
    def num_cells(self) -> int:
        return len(self.cell_coords)

    @property
    def directly_fail(self) -> bool:
        return self.config.directly_fail


def _strip_colors(cells: Colored) -> Colored:
    return tuple(sorted((rc, "") for rc, _ in cells))


def tile_orientations(cells: Colored, rotation: bool, reflection: bool) -> List[Colored]:
    """Distinct normalized orientations, in transform order."""
    seen = set()
    out: List[Colored] = []
    for name in orientation_transforms(rotation, reflection):
        o = transform_colored(cells, name)
        if o not in seen:
            seen.add(o)
            out.append(o)
    return out


def _fits(orient: Colored, dr: int, dc: int, board: Dict[Coord, str]) -> bool:
    for (r, c), color in orient:
        if board.get((r + dr, c + dc)) != color:
            return False
    return True


def _duplica(orientations: Sequence[List[Colored]]) -> List[int]:
    first_by_key: Dict[frozenset, int] = {}
    out: List[int] = []
    for tid, orients in enumerate(orientations):
        key = frozenset(orients)
        out.append(first_by_key.setdefault(key, tid))
    return out


def symmetry_transforms(board_cells: Colored, orientations: Sequence[List[Colored]]) -> Tuple[str, ...]:
    """
    Dihedral transforms that map the colored board onto itself and every
    tile's set of allowed orientations onto itself. Only these carry one
    solution onto another.
    """
    board_norm = tuple(sorted(board_cells))
    allowed: List[str] = []
    for name in ALL_TRANSFORMS:
        if transform_colored(board_norm, name) != board_norm:
            continue
        ok = True
        for orients in orientations:
            current = set(orients)
            if {transform_colored(o, name) for o in orients} != current:
                ok = False
                break
        if ok:
            allowed.append(name)
    return tuple(allowed)


def _choose_leader(
    placements_per_tile: Sequence[int],
    duplica: Sequence[int],
    eliminate_duplicates: bool,
) -> Optional[int]:
    group_size: Dict[int, int] = {}
    for canon in duplica:
        group_size[canon] = group_size.get(canon, 0) + 1
    best: Optional[int] = None
    for tid, count in enumerate(placements_per_tile):
        if count <= 0:
            continue
        if eliminate_duplicates and group_size[duplica[tid]] > 1:
            continue
        if best is None or count > placements_per_tile[best]:
            best = tid
    return best


def build_puzzle(board: Shape, tiles: Sequence[Shape], options: Optional[PuzzleOptions] = None) -> Puzzle:
    """Enumerate every placement of every tile and link them into a matrix."""
    if options is None:
        options = PuzzleOptions.from_cfg()
    if not board.cells:
        raise ValueError("board has no cells")
    tiles = list(tiles)

    colored = len(set(board.colors().values())) > 1
    board_cells: Colored = board.cells if colored else _strip_colors(board.cells)
    board_map: Dict[Coord, str] = dict(board_cells)
    cell_coords: List[Coord] = sorted(board.coords())
    cell_index: Dict[Coord, int] = {rc: i for i, rc in enumerate(cell_coords)}

    num_tiles = len(tiles)
    num_cells = len(cell_coords)
    bh, bw = board.height, board.width

    orientations: List[List[Colored]] = []
    for t in tiles:
        cells = t.cells if colored else _strip_colors(t.cells)
        orientations.append(tile_orientations(cells, options.rotation, options.reflection))

    names = [t.name or f"T{i}" for i, t in enumerate(tiles)]
    names += [f"r{r}c{c}" for (r, c) in cell_coords]
    links = LinksArray(num_tiles, num_cells, names)

    rows: List[Tuple[int, ...]] = []
    placements_per_tile = [0] * num_tiles
    for tid, orients in enumerate(orientations):
        for orient in orients:
            shape = Shape(orient)
            oh, ow = shape.height, shape.width
            for dr in range(bh - oh + 1):
                for dc in range(bw - ow + 1):
                    if not _fits(orient, dr, dc, board_map):
                        continue
                    cols = [tid] + sorted(
                        num_tiles + cell_index[(r + dr, c + dc)] for (r, c), _ in orient
                    )
                    links.add_row(cols)
                    rows.append(tuple(cols))
                    placements_per_tile[tid] += 1

    tile_area = sum(t.size for t in tiles)
    enable_extra = tile_area > num_cells
    duplica = _duplica(orientations)
    transforms = symmetry_transforms(board_cells, orientations)

    fail_reason: Optional[str] = None
    if tile_area < num_cells:
        fail_reason = f"tile area {tile_area} is smaller than board area {num_cells}"
    elif not enable_extra and any(n == 0 for n in placements_per_tile):
        stuck = [names[i] for i, n in enumerate(placements_per_tile) if n == 0]
        fail_reason = f"tiles with no placement: {', '.join(stuck)}"
    else:
        uncovered = [
            names[num_tiles + i]
            for i in range(num_cells)
            if links.S[links.column(num_tiles + i)] == 0
        ]
        if uncovered:
            fail_reason = f"board cells no tile can cover: {', '.join(uncovered[:8])}"

    leader: Optional[int] = None
    if options.eliminate_symmetry and not enable_extra and len(transforms) > 1:
        leader = _choose_leader(placements_per_tile, duplica, options.eliminate_duplicates)

    config = SearchConfig(
        eliminate_duplicates=options.eliminate_duplicates,
        eliminate_symmetry=options.eliminate_symmetry,
        enable_extra=enable_extra,
        verbose=options.verbose,
        duplica=duplica,
        leader_id=leader,
        transforms=transforms,
        cell_coords=list(cell_coords),
        directly_fail=fail_reason is not None,
    )

    log.info(
        "Built matrix: %d tiles, %d cells, %d rows, extra=%s, leader=%s, symmetries=%s",
        num_tiles, num_cells, links.num_rows, enable_extra, leader, ",".join(transforms),
    )
    if fail_reason:
        log.info("Puzzle fails directly: %s", fail_reason)

    return Puzzle(
        board=board,
        tiles=tiles,
        options=options,
        links=links,
        config=config,
        rows=rows,
        cell_coords=list(cell_coords),
        placements_per_tile=placements_per_tile,
        fail_reason=fail_reason,
    )


def build_from_text(text: str, options: Optional[PuzzleOptions] = None) -> Tuple[Optional[Puzzle], Optional[str]]:
    board, tiles, err = parse_puzzle(text)
    if err or board is None:
        return None, err or "nothing parsed from puzzle"
    return build_puzzle(board, tiles, options), None


__all__ = [
    "PuzzleOptions", "Puzzle", "build_puzzle", "build_from_text",
    "tile_orientations", "symmetry_transforms",
]
