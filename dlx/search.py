# dlx/search.py: iterative dancing-links search with three granularities
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional

from models import Placement, Solution
from dlx.links import HEADER, LinksArray
from dlx.search_config import SearchConfig
from dlx.symmetry import is_equivalent, placement_view
from dlx.trail import Trail

log = logging.getLogger(__name__)


class StopMode(Enum):
    STEP = "step"          # one branching decision
    SOLUTION = "solution"  # until the next complete solution
    ALL = "all"            # until the frontier is exhausted


class DLXSearch:
    """
    Knuth's Algorithm X on a :class:`LinksArray`, driven by two trails
    instead of recursion so a caller can pace the search one step at a time.

    The frontier trail holds every pending candidate cell; the solution
    trail holds the committed ones and is always a prefix of the frontier's
    push history. A level is exhausted when both tops are the same cell.
    """

    def __init__(self, links: LinksArray, config: SearchConfig):
        self.links = links
        self.config = config
        self.trail = Trail()
        self.solution = Trail()
        self.steps = 0
        self.solutions_found = 0
        self.root_candidates = 0

    # ---------- public entry points ----------

    def solve_all(self, on_solution: Optional[Callable[[Solution], None]] = None) -> List[Solution]:
        """Enumerate every remaining solution."""
        found: List[Solution] = []

        def _collect(sol: Solution) -> None:
            found.append(sol)
            if on_solution is not None:
                on_solution(sol)

        self._search_loop(StopMode.ALL, _collect)
        return found

    def solve_next_solution(self) -> Optional[Solution]:
        self._search_loop(StopMode.SOLUTION)
        if not self.solution.complete:
            return None
        return self.solution_to_position(self.solution)

    def solve_next_step(self) -> Optional[Solution]:
        """Run one branching decision; returns the (possibly partial) assignment."""
        self._search_loop(StopMode.STEP)
        return self.solution_to_position(self.solution)

    def is_complete_solution(self) -> bool:
        return self.solution.complete

    def is_finished(self) -> bool:
        return self.config.search_finished

    def depth(self) -> int:
        return self.solution.size()

    def progress_fraction(self) -> float:
        """Share of the first-level candidates already exhausted."""
        if self.config.search_finished:
            return 1.0
        if not self.root_candidates or self.solution.is_empty():
            return 0.0
        pos = self.trail.index(self.solution.get(0))
        return (self.root_candidates - pos - 1) / self.root_candidates

    def reset(self) -> None:
        """Undo every committed choice, clear both trails and the progress flags."""
        while not self.solution.is_empty():
            self._undo(self.solution.pop())
        self.trail.clear()
        self.solution.clear()
        self.config.reset()
        self.steps = 0
        self.solutions_found = 0
        self.root_candidates = 0

    # ---------- conversion ----------

    def solution_to_position(self, solution: Trail) -> Optional[Solution]:
        """Committed cells as placements; ``None`` for an empty trail."""
        if solution.is_empty():
            return None
        links = self.links
        out: Solution = []
        for x in solution:
            tid, *cols = links.row_columns(x)
            out.append(Placement(tid, tuple(c - links.num_tiles for c in cols)))
        return out

    # ---------- column choice ----------

    def _choose_column(self) -> int:
        """Live column with the fewest rows, skipping columns the policies exclude."""
        links, cfg = self.links, self.config
        chosen = links.R[HEADER]
        best = None
        for h in links.columns():
            col = links.index_of(h)
            if col < links.num_tiles:
                if cfg.enable_extra:
                    continue
                # twins are placed only through the cells they cover
                if cfg.eliminate_duplicates and cfg.is_duplicated(col):
                    continue
            size = links.S[h]
            if best is None or size < best:
                chosen, best = h, size
        return chosen

    def _choose_first_column(self) -> int:
        cfg = self.config
        if not cfg.eliminate_symmetry or cfg.enable_extra:
            return self._choose_column()
        if cfg.has_leader():
            log.debug("Leader tile id = %s", cfg.leader_id)
            leader = self.links.column(cfg.leader_id)
            if self.links.live[leader]:
                return leader
        else:
            log.debug("No leader tile.")
        return self._choose_column()

    # ---------- candidate pushing ----------

    def _duplicates_used_in_order(self) -> bool:
        # Only the newest candidate needs checking; the rest of the trail is
        # already a legal prefix.
        x = self.trail.top()
        tid = self.links.index_of(self.links.leftmost(x))
        if self.config.is_canonical(tid):
            return True
        for j in self.config.smaller_duplicates(tid):
            if self.links.is_reachable(j):
                return False
        return True

    def _push_next_level(self, c: int) -> None:
        eliminate = self.config.eliminate_duplicates
        for i in self.links.column_cells(c, upward=True):
            self.trail.push(i)
            if eliminate and not self._duplicates_used_in_order():
                self.trail.pop()

    def _view_of(self, x: int):
        cfg = self.config
        links = self.links
        placed = [
            cfg.cell_coords[links.index_of(j) - links.num_tiles]
            for j in links.row_cells(x)
            if links.index_of(j) >= links.num_tiles
        ]
        return placement_view(placed, cfg.cell_coords)

    def _push_first_level(self, c: int) -> None:
        cfg = self.config
        if not cfg.eliminate_symmetry or cfg.enable_extra or not cfg.has_leader():
            self._push_next_level(c)
            self.root_candidates = self.trail.size()
            return

        kept = []
        for i in self.links.column_cells(c, upward=True):
            view = self._view_of(i)
            if any(is_equivalent(view, other, cfg.transforms) for other in kept):
                continue
            kept.append(view)
            self.trail.push(i)
        self.root_candidates = self.trail.size()
        cfg.symmetry_eliminated_by_leader = True
        total = self.links.S[c]
        log.info(
            "Leader tile eliminates %d/%d symmetric possibilities.",
            total - len(kept), total,
        )

    # ---------- commit / undo ----------

    def _commit(self, x: int) -> None:
        links = self.links
        links.cover(links.C[x])
        j = links.R[x]
        while j != x:
            links.cover(links.C[j])
            j = links.R[j]

    def _undo(self, x: int) -> None:
        links = self.links
        j = links.L[x]
        while j != x:
            links.uncover(links.C[j])
            j = links.L[j]
        links.uncover(links.C[x])

    def _is_cover_complete(self) -> bool:
        links = self.links
        if links.is_empty():
            return True
        return links.index_of(links.L[HEADER]) < links.num_tiles

    # ---------- kernel ----------

    def _search_loop(
        self,
        mode: StopMode,
        on_solution: Optional[Callable[[Solution], None]] = None,
    ) -> None:
        cfg = self.config
        trail, solution = self.trail, self.solution
        solution.complete = False

        if cfg.directly_fail:
            cfg.search_finished = True
            return

        if not cfg.search_finished and trail.is_empty():
            self._push_first_level(self._choose_first_column())

        while True:
            solution.complete = False

            # backtrack out of every exhausted level
            while not solution.is_empty() and solution.top() == trail.top():
                trail.pop()
                self._undo(solution.pop())
            if trail.is_empty():
                cfg.search_finished = True
                break

            x = trail.top()
            solution.push(x)
            self._commit(x)
            self.steps += 1

            c = self._choose_column()
            if self.links.S[c] > 0:
                self._push_next_level(c)
            elif self._is_cover_complete():
                solution.complete = True
                self.solutions_found += 1
                if cfg.verbose:
                    log.debug("Find: %s", self.solution_to_position(solution))
                if on_solution is not None:
                    on_solution(self.solution_to_position(solution))

            if mode is StopMode.STEP:
                break
            if mode is StopMode.SOLUTION and solution.complete:
                break
