# puzzle_parser.py: ASCII puzzle files -> board + tiles
from __future__ import annotations

import os
from typing import Dict, List, Optional, Tuple

from models import Coord, Shape

_BLANK = frozenset(" \t\r\n")


def _grid_cells(text: str) -> Dict[Coord, str]:
    cells: Dict[Coord, str] = {}
    for r, line in enumerate(text.splitlines()):
        for c, ch in enumerate(line.rstrip("\r\n")):
            if ch not in _BLANK:
                cells[(r, c)] = ch
    return cells


def _components(cells: Dict[Coord, str]) -> List[List[Coord]]:
    """4-connected components in reading order of their first cell."""
    seen = set()
    comps: List[List[Coord]] = []
    for start in sorted(cells):
        if start in seen:
            continue
        seen.add(start)
        comp = [start]
        stack = [start]
        while stack:
            r, c = stack.pop()
            for nb in ((r - 1, c), (r + 1, c), (r, c - 1), (r, c + 1)):
                if nb in cells and nb not in seen:
                    seen.add(nb)
                    comp.append(nb)
                    stack.append(nb)
        comps.append(sorted(comp))
    return comps


def _to_shape(comp: List[Coord], cells: Dict[Coord, str], name: str) -> Shape:
    r0 = min(r for r, _ in comp)
    c0 = min(c for _, c in comp)
    return Shape(
        cells=tuple(sorted(((r - r0, c - c0), cells[(r, c)]) for (r, c) in comp)),
        name=name,
    )


def tile_label(idx: int) -> str:
    """A, B, ..., Z, AA, AB, ... (spreadsheet style)."""
    out = ""
    n = idx + 1
    while n:
        n, rem = divmod(n - 1, 26)
        out = chr(ord("A") + rem) + out
    return out


def parse_puzzle(text: Optional[str]) -> Tuple[Optional[Shape], List[Shape], Optional[str]]:
    """
    Return (board, tiles, error_message_or_None).

    Every non-blank character is a cell colored by that character. The
    largest 4-connected component is the board (ties: first in reading
    order); the rest are tiles, in reading order.
    """
    if not text or not text.strip():
        return None, [], "empty puzzle"

    cells = _grid_cells(text)
    comps = _components(cells)
    if len(comps) < 2:
        return None, [], "puzzle needs a board and at least one tile"

    board_idx = max(range(len(comps)), key=lambda i: (len(comps[i]), -i))
    board = _to_shape(comps[board_idx], cells, "board")
    tiles: List[Shape] = []
    for i, comp in enumerate(comps):
        if i == board_idx:
            continue
        tiles.append(_to_shape(comp, cells, tile_label(len(tiles))))
    return board, tiles, None


def load_puzzle(path: str) -> Tuple[Optional[Shape], List[Shape], Optional[str]]:
    if not os.path.exists(path):
        return None, [], f"no such file: {path}"
    with open(path, "r", encoding="utf-8") as fh:
        return parse_puzzle(fh.read())


__all__ = ["parse_puzzle", "load_puzzle", "tile_label"]
