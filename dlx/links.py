# dlx/links.py: toroidal dancing-links matrix over integer handles
from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple

HEADER = 0  # handle of the master header


class LinksArray:
    """
    Exact-cover matrix stored as a flat arena.

    Handle 0 is the master header, handles 1..num_columns are column headers
    (column index = handle - 1), every later handle is a row cell. Each
    handle owns four neighbor handles L/R/U/D and a column handle C.

    Column indices 0..num_tiles-1 are tile-identity constraints, indices
    num_tiles..num_tiles+num_cells-1 are board-cell constraints.
    """

    def __init__(self, num_tiles: int, num_cells: int, names: Optional[Sequence[str]] = None):
        self.num_tiles = int(num_tiles)
        self.num_cells = int(num_cells)
        ncols = self.num_tiles + self.num_cells
        n = ncols + 1

        self.L: List[int] = [0] * n
        self.R: List[int] = [0] * n
        self.U: List[int] = list(range(n))
        self.D: List[int] = list(range(n))
        self.C: List[int] = list(range(n))
        self.S: List[int] = [0] * n
        self.live: List[bool] = [True] * n
        self.num_rows = 0

        # master ring: header, then columns in index order
        for h in range(n):
            self.L[h] = (h - 1) % n
            self.R[h] = (h + 1) % n

        if names is None:
            names = [f"T{i}" for i in range(self.num_tiles)] + [
                f"c{i}" for i in range(self.num_cells)
            ]
        self.names: List[str] = ["H"] + [str(x) for x in names]
        if len(self.names) != n:
            raise ValueError(f"expected {ncols} column names, got {len(self.names) - 1}")

    # ---------- construction ----------

    @property
    def num_columns(self) -> int:
        return self.num_tiles + self.num_cells

    def column(self, index: int) -> int:
        """Header handle of column ``index`` (-1 is the master header)."""
        return index + 1

    def index_of(self, handle: int) -> int:
        """Column index of any cell or header handle."""
        return self.C[handle] - 1

    def add_row(self, columns: Sequence[int]) -> int:
        """Append a row covering ``columns`` (indices); returns its first cell.

        Cells are linked in ascending column order, so the leftmost cell of
        every row sits in the row's smallest column.
        """
        cols = sorted(set(int(c) for c in columns))
        if not cols:
            raise ValueError("a row needs at least one column")
        for c in cols:
            if not 0 <= c < self.num_columns:
                raise ValueError(f"column index out of range: {c}")

        self.num_rows += 1
        first = len(self.L)
        for k, c in enumerate(cols):
            x = first + k
            h = self.column(c)
            # append above the header, i.e. at the bottom of the column
            self.U.append(self.U[h])
            self.D.append(h)
            self.D[self.U[h]] = x
            self.U[h] = x
            self.C.append(h)
            self.S[h] += 1
            self.L.append(first + (k - 1) % len(cols))
            self.R.append(first + (k + 1) % len(cols))
            self.live.append(True)
        return first

    # ---------- link surgery ----------

    def cover(self, c: int) -> None:
        L, R, U, D, C, S = self.L, self.R, self.U, self.D, self.C, self.S
        R[L[c]] = R[c]
        L[R[c]] = L[c]
        self.live[c] = False
        i = D[c]
        while i != c:
            j = R[i]
            while j != i:
                U[D[j]] = U[j]
                D[U[j]] = D[j]
                S[C[j]] -= 1
                j = R[j]
            i = D[i]

    def uncover(self, c: int) -> None:
        L, R, U, D, C, S = self.L, self.R, self.U, self.D, self.C, self.S
        i = U[c]
        while i != c:
            j = L[i]
            while j != i:
                S[C[j]] += 1
                U[D[j]] = j
                D[U[j]] = j
                j = L[j]
            i = U[i]
        R[L[c]] = c
        L[R[c]] = c
        self.live[c] = True

    # ---------- traversal ----------

    def is_reachable(self, index: int) -> bool:
        """True while column ``index`` is still linked into the master ring."""
        return self.live[self.column(index)]

    def is_empty(self) -> bool:
        return self.R[HEADER] == HEADER

    def columns(self) -> Iterator[int]:
        """Live column header handles, left to right."""
        h = self.R[HEADER]
        while h != HEADER:
            yield h
            h = self.R[h]

    def column_cells(self, c: int, upward: bool = False) -> Iterator[int]:
        nxt = self.U if upward else self.D
        i = nxt[c]
        while i != c:
            yield i
            i = nxt[i]

    def row_cells(self, x: int) -> Iterator[int]:
        """``x`` followed by the rest of its row, walking right."""
        yield x
        j = self.R[x]
        while j != x:
            yield j
            j = self.R[j]

    def leftmost(self, x: int) -> int:
        while self.index_of(self.L[x]) < self.index_of(x):
            x = self.L[x]
        return x

    def row_columns(self, x: int) -> List[int]:
        return [self.index_of(j) for j in self.row_cells(self.leftmost(x))]

    # ---------- diagnostics ----------

    def signature(self) -> Tuple[Tuple[int, ...], ...]:
        """Hashable snapshot of every link and every column size."""
        return (
            tuple(self.L), tuple(self.R), tuple(self.U), tuple(self.D),
            tuple(self.S), tuple(self.live),
        )

    def check_rings(self) -> bool:
        """True when every live ring is doubly consistent and every S matches."""
        L, R, U, D = self.L, self.R, self.U, self.D
        h = HEADER
        while True:
            if L[R[h]] != h:
                return False
            h = R[h]
            if h == HEADER:
                break
        for c in self.columns():
            count = 0
            for i in self.column_cells(c):
                if U[D[i]] != i or D[U[i]] != i:
                    return False
                if R[L[i]] != i or L[R[i]] != i:
                    return False
                count += 1
            if count != self.S[c]:
                return False
        return True

    def __repr__(self) -> str:
        live = [self.names[h] for h in self.columns()]
        return f"LinksArray(tiles={self.num_tiles}, cells={self.num_cells}, rows={self.num_rows}, live={live})"
