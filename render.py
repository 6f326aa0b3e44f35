import random
from typing import Dict, Optional, Tuple

from config import CFG
from models import Solution


def _color(name: str) -> str:
    random.seed(sum(ord(ch) * 131 ** i for i, ch in enumerate(name)) & 0xFFFFFFFF)
    r = random.randint(40, 200)
    g = random.randint(40, 200)
    b = random.randint(40, 200)
    return f"rgb({r},{g},{b})"


def render_solution(puzzle, solution: Optional[Solution], cell_px: Optional[int] = None) -> Tuple[str, str]:
    """SVG of the board with each placed tile filled in its own color, plus legend items."""
    scale = int(cell_px or CFG.CELL_PX)
    coords = puzzle.cell_coords
    rows, cols = puzzle.board.height, puzzle.board.width
    svg_w = cols * scale + 2
    svg_h = rows * scale + 2

    owner: Dict[int, str] = {}
    palette: Dict[str, str] = {}
    for p in solution or []:
        name = puzzle.tiles[p.tile_id].name
        palette.setdefault(name, _color(name))
        for cell in p.cells:
            owner[cell] = name

    rects = []
    for i, (r, c) in enumerate(coords):
        x = c * scale + 1
        y = r * scale + 1
        name = owner.get(i)
        fill = palette[name] if name else "#f4f4f4"
        rects.append(
            f'<rect x="{x}" y="{y}" width="{scale}" height="{scale}" fill="{fill}" stroke="black" stroke-width="1"/>'
        )
        if name:
            rects.append(f'<text x="{x+4}" y="{y+14}" font-size="12" fill="black">{name}</text>')
    frame = f'<rect x="1" y="1" width="{svg_w-2}" height="{svg_h-2}" fill="none" stroke="black" stroke-width="2"/>'
    svg = (
        f'<svg class="layout-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{"".join(rects)}{frame}</svg>'
    )

    legend = "".join(f"<li><span class='swatch' style='background:{c}'></span>{n}</li>" for n, c in palette.items())
    return svg, legend
