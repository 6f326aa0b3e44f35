# dlx/cp_check.py: independent solution count for a built puzzle via CP-SAT
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model as _cp

from config import CFG


class _Counter(_cp.CpSolverSolutionCallback):
    def __init__(self, limit: Optional[int] = None):
        super().__init__()
        self.count = 0
        self.limit = limit

    def on_solution_callback(self) -> None:
        self.count += 1
        if self.limit and self.count >= self.limit:
            self.StopSearch()


def count_exact_covers(
    rows: Sequence[Sequence[int]],
    num_tiles: int,
    num_cells: int,
    *,
    enable_extra: bool = False,
    max_seconds: Optional[float] = None,
    limit: Optional[int] = None,
) -> Tuple[bool, int, Optional[str]]:
    """
    Count exact covers of ``rows`` without any symmetry or duplicate pruning.

    Board columns must be covered exactly once; tile columns exactly once,
    or at most once when extra tiles are allowed. Returns
    ``(ok, count, reason)``; ``ok`` is False when the enumeration did not
    finish inside the time box.
    """
    m = _cp.CpModel()
    x = [m.NewBoolVar(f"row_{i}") for i in range(len(rows))]

    by_col: Dict[int, List[int]] = defaultdict(list)
    for i, cols in enumerate(rows):
        for c in cols:
            by_col[int(c)].append(i)

    for col in range(num_tiles + num_cells):
        vars_here = [x[i] for i in by_col.get(col, [])]
        if col < num_tiles and enable_extra:
            if vars_here:
                m.AddAtMostOne(vars_here)
            continue
        if not vars_here:
            return True, 0, "column without candidates"
        m.AddExactlyOne(vars_here)

    if max_seconds is None:
        max_seconds = float(getattr(CFG, "CP_CHECK_SECONDS", 30.0))

    solver = _cp.CpSolver()
    solver.parameters.max_time_in_seconds = float(max_seconds)
    solver.parameters.enumerate_all_solutions = True
    # full enumeration needs a single worker
    solver.parameters.num_search_workers = 1
    solver.parameters.log_search_progress = False

    counter = _Counter(limit)
    res = solver.Solve(m, counter)

    if res == _cp.OPTIMAL:
        return True, counter.count, None
    if res == _cp.INFEASIBLE:
        return True, 0, "Proven infeasible"
    if res == _cp.FEASIBLE and limit and counter.count >= limit:
        return True, counter.count, f"stopped at limit {limit}"
    if res == _cp.MODEL_INVALID:
        return False, counter.count, "Model invalid (configuration error)"
    return False, counter.count, "Stopped before enumeration finished (timebox)"


def count_puzzle(puzzle, max_seconds: Optional[float] = None, limit: Optional[int] = None) -> Tuple[bool, int, Optional[str]]:
    """Count the solutions of a :class:`dlx.builder.Puzzle`."""
    if puzzle.directly_fail:
        return True, 0, puzzle.fail_reason
    return count_exact_covers(
        puzzle.rows,
        puzzle.num_tiles,
        puzzle.num_cells,
        enable_extra=puzzle.config.enable_extra,
        max_seconds=max_seconds,
        limit=limit,
    )
