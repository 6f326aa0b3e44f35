"""Helpers for writing solver outputs to disk."""

from __future__ import annotations

import os
from typing import List, Sequence

from config import CFG
from models import Solution


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def solution_grid(puzzle, solution: Solution) -> List[str]:
    """Board rows with every cell replaced by the name of the tile covering it."""

    coords = puzzle.cell_coords
    rows, cols = puzzle.board.height, puzzle.board.width
    width = max((len(t.name) for t in puzzle.tiles), default=1)
    grid = [[" " * width] * cols for _ in range(rows)]
    for r, c in coords:
        grid[r][c] = ".".ljust(width)
    for p in solution:
        name = puzzle.tiles[p.tile_id].name.ljust(width)
        for cell in p.cells:
            r, c = coords[cell]
            grid[r][c] = name
    sep = " " if width > 1 else ""
    return [sep.join(line).rstrip() for line in grid]


def write_solutions(puzzle, solutions: Sequence[Solution], base_dir: str) -> str:
    """Write every solution as a labelled grid to the configured text file."""

    path = _resolve_output_path(base_dir, CFG.SOLUTIONS_OUT, "solutions.txt")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        if not solutions:
            reason = getattr(puzzle, "fail_reason", None)
            f.write(f"No solution ({reason})\n" if reason else "No solution\n")
        else:
            for i, sol in enumerate(solutions, start=1):
                f.write(f"Solution {i}\n")
                for line in solution_grid(puzzle, sol):
                    f.write(line + "\n")
                f.write("\n")
    return path


def write_layout_view_html(svg: str, legend_html: str, base_dir: str) -> str:
    """Write the rendered SVG/legend preview to the configured HTML file."""

    path = _resolve_output_path(base_dir, CFG.LAYOUT_HTML, "layout_view.html")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as vf:
        vf.write(
            f"""<!doctype html>
<html><head><meta charset='utf-8'><title>Layout View</title></head>
<body class='container'>
<h1>Layout View</h1>
<section class='card'><div class='gridwrap'>{svg}</div></section>
<section class='card'><h3>Legend</h3><ul>{legend_html}</ul></section>
</body></html>"""
        )
    return path


__all__ = ["solution_grid", "write_solutions", "write_layout_view_html"]
