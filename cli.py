# cli.py: run the tiling search on a puzzle file from the command line
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from config import CFG
from dlx.builder import PuzzleOptions
from dlx.orchestrator import MODES, SolverSession
from io_files import solution_grid, write_layout_view_html, write_solutions
from models import Placement
from render import render_solution

log = logging.getLogger("dlx.cli")


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description=(
            "Exact-cover polyomino tiler (dancing links).\n\n"
            "Examples:\n"
            "  python cli.py puzzles/pentomino.txt --rotate --reflect\n"
            "  python cli.py puzzles/pentomino.txt --mode next\n"
            "  python cli.py puzzles/small.txt --keep-symmetry --verify\n"
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    p.add_argument("puzzle", help="Puzzle text file: the largest shape is the board, the rest are tiles.")
    p.add_argument("--rotate", action="store_true", default=None,
                   help="Allow tiles to be rotated.")
    p.add_argument("--reflect", action="store_true", default=None,
                   help="Allow tiles to be flipped (implies --rotate).")
    p.add_argument("--keep-duplicates", action="store_true",
                   help="Report solutions that only differ by swapping identical tiles.")
    p.add_argument("--keep-symmetry", action="store_true",
                   help="Report solutions that only differ by a board symmetry.")
    p.add_argument("--mode", choices=MODES, default="all",
                   help="all: enumerate; next: stop at the first solution; step: one decision.")
    p.add_argument("--limit", type=int, default=None, metavar="N",
                   help="Stop after N solutions in --mode all (default: DLX_MAX_SOLUTIONS, 0 = no limit).")
    p.add_argument("--verify", action="store_true",
                   help="Count solutions independently with OR-Tools CP-SAT (no pruning) and compare.")
    p.add_argument("--out", default=None, metavar="PATH",
                   help=f"Solutions text file (default: {CFG.SOLUTIONS_OUT}).")
    p.add_argument("--html", default=None, metavar="PATH",
                   help="Also write an HTML preview of the last assignment.")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Debug logging, including every solution found.")
    return p


def _options(args: argparse.Namespace) -> PuzzleOptions:
    return PuzzleOptions.from_cfg(
        rotation=args.rotate,
        reflection=args.reflect,
        eliminate_duplicates=False if args.keep_duplicates else None,
        eliminate_symmetry=False if args.keep_symmetry else None,
        verbose=True if args.verbose else None,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_argparser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        with open(args.puzzle, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        print(f"cannot read {args.puzzle}: {e}", file=sys.stderr)
        return 2

    session = SolverSession()
    loaded = session.load(text, _options(args), label=os.path.basename(args.puzzle))
    if not loaded.get("ok"):
        print(loaded.get("reason"), file=sys.stderr)
        return 2
    puzzle = session.puzzle
    print(
        f"{loaded['num_tiles']} tiles, {loaded['num_cells']} cells, {loaded['rows']} placements"
        f"{', extra tiles' if loaded['extra'] else ''}"
    )
    if loaded.get("leader"):
        print(f"leader tile {loaded['leader']} over symmetries {', '.join(loaded['symmetries'])}")

    out = session.solve(args.mode, args.limit)

    if args.mode == "step":
        current = [Placement(row[0], tuple(row[1:])) for row in out.get("current") or []]
        for line in solution_grid(puzzle, current):
            print(line)
        print(f"depth {out['depth']}{' (complete)' if out['complete'] else ''}")
    else:
        for i, sol in enumerate(session.solutions, start=1):
            print(f"Solution {i}")
            for line in solution_grid(puzzle, sol):
                print(line)
            print()
    if puzzle.fail_reason:
        print(f"no solution: {puzzle.fail_reason}")
    print(
        f"{out['total_solutions']} solution(s), {out['steps']} steps, {out['elapsed_str']}"
        f"{'' if out['finished'] else ' (search not finished)'}"
    )

    base = os.getcwd()
    if args.out:
        CFG.SOLUTIONS_OUT = args.out
    path = write_solutions(puzzle, session.solutions, base)
    log.info("Solutions written to %s", path)
    if args.html:
        CFG.LAYOUT_HTML = args.html
        last = session.last or []
        svg, legend = render_solution(puzzle, last)
        log.info("Layout written to %s", write_layout_view_html(svg, legend, base))

    if args.verify:
        from dlx.cp_check import count_puzzle

        ok, count, reason = count_puzzle(puzzle)
        if not ok:
            print(f"cross-check inconclusive: {reason}")
        else:
            print(f"CP-SAT count without pruning: {count}{f' ({reason})' if reason else ''}")
            if (
                out["finished"]
                and not puzzle.options.eliminate_duplicates
                and not puzzle.options.eliminate_symmetry
                and count != out["total_solutions"]
            ):
                print("MISMATCH between dancing links and CP-SAT counts", file=sys.stderr)
                return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
