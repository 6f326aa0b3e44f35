from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

Coord = Tuple[int, int]  # (row, col)


@dataclass(frozen=True)
class Shape:
    """A connected group of colored cells, normalized to start at (0, 0)."""
    cells: Tuple[Tuple[Coord, str], ...]
    name: str = ""

    @property
    def size(self) -> int:
        return len(self.cells)

    def coords(self) -> List[Coord]:
        return [rc for rc, _ in self.cells]

    def colors(self) -> Dict[Coord, str]:
        return dict(self.cells)

    @property
    def height(self) -> int:
        return 1 + max((r for (r, _), _ in self.cells), default=-1)

    @property
    def width(self) -> int:
        return 1 + max((c for (_, c), _ in self.cells), default=-1)


@dataclass(frozen=True)
class Placement:
    tile_id: int
    cells: Tuple[int, ...]  # board-cell indices

    def as_list(self) -> List[int]:
        return [self.tile_id, *self.cells]


Solution = List[Placement]


@dataclass
class Meta:
    mode: str
    elapsed_sec: float
    solutions: int = 0
    steps: int = 0
    note: Optional[str] = None

    def template_vars(self, **kw):
        elapsed = f"{int(self.elapsed_sec//60)}m {int(self.elapsed_sec%60)}s"
        return dict(elapsed_str=elapsed, mode=self.mode, solution_count=self.solutions, **kw)
