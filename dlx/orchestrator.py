# dlx/orchestrator.py: one puzzle + one engine + progress reporting
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, List, Optional

from config import CFG
from models import Meta, Solution
from progress import (
    reset as progress_reset,
    start_timer, set_status, set_mode, set_puzzle, set_counters,
    set_progress_pct, set_message, set_done, log_solution,
)
from dlx.builder import Puzzle, PuzzleOptions, build_from_text
from dlx.search import DLXSearch

log = logging.getLogger(__name__)

MODES = ("all", "next", "step")


def solution_to_lists(solution: Optional[Solution]) -> List[List[int]]:
    return [p.as_list() for p in (solution or [])]


class SolverSession:
    """
    Owns the single active search over one puzzle's matrix.

    All public methods hold ``lock``; the matrix is mutated in place and
    must never see two searches at once.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.puzzle: Optional[Puzzle] = None
        self.engine: Optional[DLXSearch] = None
        self.label = ""
        self.solutions: List[Solution] = []
        self.last: Optional[Solution] = None

    # ---------- lifecycle ----------

    def load(self, text: str, options: Optional[PuzzleOptions] = None, label: str = "") -> Dict[str, Any]:
        with self.lock:
            puzzle, err = build_from_text(text, options)
            if err or puzzle is None:
                return {"ok": False, "reason": f"Bad puzzle: {err}"}
            self.puzzle = puzzle
            self.engine = DLXSearch(puzzle.links, puzzle.config)
            self.label = label or f"{puzzle.num_tiles} tiles / {puzzle.num_cells} cells"
            self.solutions = []
            self.last = None
            progress_reset()
            set_puzzle(self.label)
            log.info("Loaded puzzle %s", self.label)
            return {"ok": True, **self.summary()}

    def loaded(self) -> bool:
        return self.engine is not None

    def reset(self) -> Dict[str, Any]:
        with self.lock:
            if self.engine is None:
                return {"ok": False, "reason": "no puzzle loaded"}
            self.engine.reset()
            self.solutions = []
            self.last = None
            progress_reset()
            return {"ok": True, **self.summary()}

    def summary(self) -> Dict[str, Any]:
        p = self.puzzle
        if p is None:
            return {}
        cfg = p.config
        return {
            "label": self.label,
            "tiles": [t.name for t in p.tiles],
            "num_tiles": p.num_tiles,
            "num_cells": p.num_cells,
            "rows": p.links.num_rows,
            "extra": cfg.enable_extra,
            "leader": None if cfg.leader_id is None else p.tiles[cfg.leader_id].name,
            "symmetries": list(cfg.transforms),
            "directly_fail": cfg.directly_fail,
            "fail_reason": p.fail_reason,
            "finished": cfg.search_finished,
        }

    # ---------- search ----------

    def _publish(self) -> None:
        eng = self.engine
        set_counters(steps=eng.steps, solutions=len(self.solutions), depth=eng.depth())
        set_progress_pct(100.0 * eng.progress_fraction())

    def _on_solution(self, sol: Solution) -> None:
        self.solutions.append(sol)
        log_solution(len(self.solutions), solution_to_lists(sol))

    def solve(self, mode: str = "all", limit: Optional[int] = None) -> Dict[str, Any]:
        """
        Advance the search.

        ``all`` enumerates (up to ``limit`` or ``CFG.MAX_SOLUTIONS`` when
        non-zero), ``next`` runs to the next solution, ``step`` commits one
        choice.
        """
        if mode not in MODES:
            return {"ok": False, "reason": f"unknown mode: {mode!r}"}
        with self.lock:
            eng = self.engine
            if eng is None:
                return {"ok": False, "reason": "no puzzle loaded"}

            t0 = time.time()
            if eng.steps == 0 and not eng.is_finished():
                start_timer()
            set_status("Searching")
            set_mode(mode)
            found_before = len(self.solutions)

            if mode == "step":
                snap = eng.solve_next_step()
                if eng.is_complete_solution():
                    self._on_solution(snap)
                self.last = snap
            else:
                cap = limit if limit is not None else int(getattr(CFG, "MAX_SOLUTIONS", 0) or 0)
                if mode == "next":
                    cap = 1
                every = max(1, int(getattr(CFG, "PROGRESS_EVERY", 5000) or 5000))
                next_report = eng.steps + every
                while not eng.is_finished():
                    sol = eng.solve_next_solution()
                    if sol is not None:
                        self._on_solution(sol)
                        self.last = sol
                    if eng.steps >= next_report:
                        self._publish()
                        next_report = eng.steps + every
                    if cap and len(self.solutions) - found_before >= cap:
                        break

            self._publish()

            finished = eng.is_finished()
            new = self.solutions[found_before:]
            if finished:
                note = self.puzzle.fail_reason or f"{len(self.solutions)} solution(s)"
                log.info("Search finished: %s after %d steps", note, eng.steps)
                set_done(len(self.solutions) > 0, reason=note)
            else:
                set_status("Paused")
                set_message(f"{len(self.solutions)} solution(s) so far")

            meta = Meta(
                mode=mode,
                elapsed_sec=time.time() - t0,
                solutions=len(self.solutions),
                steps=eng.steps,
                note=self.puzzle.fail_reason,
            )
            return {
                "ok": True,
                "finished": finished,
                "complete": eng.is_complete_solution(),
                "depth": eng.depth(),
                "current": solution_to_lists(self.last),
                "new_solutions": [solution_to_lists(s) for s in new],
                "total_solutions": len(self.solutions),
                **meta.template_vars(steps=eng.steps, note=meta.note),
            }


def solve_puzzle(
    text: str,
    options: Optional[PuzzleOptions] = None,
    mode: str = "all",
    limit: Optional[int] = None,
) -> Dict[str, Any]:
    """One-shot helper: load ``text`` into a fresh session and run ``mode``."""
    session = SolverSession()
    loaded = session.load(text, options)
    if not loaded.get("ok"):
        return loaded
    out = session.solve(mode, limit)
    out["summary"] = session.summary()
    out["solutions"] = [solution_to_lists(s) for s in session.solutions]
    return out
