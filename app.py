# app.py: Flask front end over one SolverSession; progress no-cache
from __future__ import annotations
import os
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, request, render_template_string, send_from_directory, jsonify, url_for

from config import CFG
from dlx.builder import PuzzleOptions
from dlx.orchestrator import MODES, SolverSession
from io_files import write_solutions, write_layout_view_html
from models import Placement
from render import render_solution

from progress import (
    as_json as progress_json,
    set_result_url,
)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _resolve_output_paths(configured: str, fallback: str) -> Tuple[str, str, str]:
    name = (configured or "").strip() or fallback
    if os.path.isabs(name):
        full_path = name
    else:
        full_path = os.path.abspath(os.path.join(BASE_DIR, name))
    directory = os.path.dirname(full_path) or BASE_DIR
    filename = os.path.basename(full_path) or fallback
    return full_path, directory, filename


_SOLUTIONS_FULL_PATH, SOLUTIONS_DIR, SOLUTIONS_FILENAME = _resolve_output_paths(
    CFG.SOLUTIONS_OUT, "solutions.txt"
)
_LAYOUT_FULL_PATH, LAYOUT_DIR, LAYOUT_FILENAME = _resolve_output_paths(
    CFG.LAYOUT_HTML, "layout_view.html"
)

SESSION = SolverSession()

LAST_RESULT: Dict[str, Any] = {
    "ok": False,
    "status": "No puzzle loaded.",
    "puzzle": "",
    "solution_count": 0,
    "steps": 0,
    "finished": False,
    "elapsed_str": "0s",
    "svg": "",
    "legend": "",
    "solutions_filename": SOLUTIONS_FILENAME,
    "layout_filename": LAYOUT_FILENAME,
}

RESULT_PAGE = """<!doctype html>
<html><head><meta charset='utf-8'><title>Tiling Result</title></head>
<body class='container'>
<h1>{{ puzzle or "Tiling" }}</h1>
<p>{{ status }}</p>
<p>{{ solution_count }} solution(s), {{ steps }} steps, {{ elapsed_str }}{% if finished %}, search finished{% endif %}</p>
{% if svg %}<section class='card'><div class='gridwrap'>{{ svg|safe }}</div></section>
<section class='card'><h3>Legend</h3><ul>{{ legend|safe }}</ul></section>{% endif %}
{% if prev_url or next_url %}<p>{% if prev_url %}<a href='{{ prev_url }}'>Prev</a>{% endif %}
{% if next_url %}<a href='{{ next_url }}'>Next</a>{% endif %}</p>{% endif %}
<p><a href='/download/solutions'>{{ solutions_filename }}</a></p>
</body></html>"""

app = Flask(__name__, static_folder=None)


@app.after_request
def _no_cache_progress(resp):
    try:
        if request.path == "/progress3":
            resp.headers["Cache-Control"] = "no-store, max-age=0"
            resp.headers["Pragma"] = "no-cache"
            resp.headers["Expires"] = "0"
    except Exception:
        pass
    return resp


@app.route("/result/latest")
def result_latest():
    return render_template_string(RESULT_PAGE, **LAST_RESULT)


@app.route("/result/<int:n>")
def result_nth(n: int):
    """Browse solution ``n`` (1-based) of the current session."""
    with SESSION.lock:
        puzzle = SESSION.puzzle
        total = len(SESSION.solutions)
        if puzzle is None or not 1 <= n <= total:
            return jsonify({"ok": False, "reason": f"no solution {n}"}), 404
        svg, legend = render_solution(puzzle, SESSION.solutions[n - 1])
        label = SESSION.label

    page = dict(LAST_RESULT)
    page.update({
        "ok": True,
        "status": f"Solution {n} of {total}",
        "puzzle": label,
        "solution_count": total,
        "svg": svg,
        "legend": legend,
        "prev_url": url_for("result_nth", n=n - 1) if n > 1 else "",
        "next_url": url_for("result_nth", n=n + 1) if n < total else "",
    })
    return render_template_string(RESULT_PAGE, **page)


def _fmt_elapsed(seconds: float) -> str:
    if seconds < 1:
        return "0s"
    m, s = divmod(int(seconds), 60)
    if m == 0:
        return f"{s}s"
    h, m = divmod(m, 60)
    if h == 0:
        return f"{m}m {s}s"
    return f"{h}h {m}m {s}s"


def _merge_like_mapping() -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        merged.update(payload)

    try:
        form_dict = request.form.to_dict(flat=False)
    except Exception:
        form_dict = dict(request.form or {})
    for k, v in form_dict.items():
        merged.setdefault(k, v if isinstance(v, list) else [v])

    try:
        args_dict = request.args.to_dict(flat=False)
    except Exception:
        args_dict = dict(request.args or {})
    for k, v in args_dict.items():
        merged.setdefault(k, v if isinstance(v, list) else [v])

    return merged


def _first(like: Dict[str, Any], key: str) -> Any:
    v = like.get(key)
    if isinstance(v, list):
        return v[0] if v else None
    return v


def _flag(like: Dict[str, Any], key: str) -> Optional[bool]:
    v = _first(like, key)
    if v is None or v == "":
        return None
    if isinstance(v, bool):
        return v
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def _options_from(like: Dict[str, Any]) -> PuzzleOptions:
    return PuzzleOptions.from_cfg(
        rotation=_flag(like, "rotation"),
        reflection=_flag(like, "reflection"),
        eliminate_duplicates=_flag(like, "eliminate_duplicates"),
        eliminate_symmetry=_flag(like, "eliminate_symmetry"),
    )


def _to_placements(lists: List[List[int]]) -> List[Placement]:
    return [Placement(row[0], tuple(row[1:])) for row in lists]


def _refresh_result(out: Dict[str, Any]) -> None:
    """Re-render the latest assignment and rewrite the output files."""
    svg = legend = ""
    solutions_name = SOLUTIONS_FILENAME
    layout_name = LAYOUT_FILENAME
    with SESSION.lock:
        puzzle = SESSION.puzzle
        label = SESSION.label
        if puzzle is not None:
            current = _to_placements(out.get("current") or [])
            svg, legend = render_solution(puzzle, current)
            solutions_path = write_solutions(puzzle, SESSION.solutions, BASE_DIR)
            solutions_name = os.path.basename(solutions_path) or SOLUTIONS_FILENAME
            layout_path = write_layout_view_html(svg, legend, BASE_DIR)
            layout_name = os.path.basename(layout_path) or LAYOUT_FILENAME

    total = int(out.get("total_solutions") or 0)
    if out.get("finished"):
        status = puzzle.fail_reason if puzzle is not None and puzzle.fail_reason else "Search finished."
    elif out.get("complete"):
        status = "Complete solution."
    else:
        status = "Partial assignment."
    LAST_RESULT.update({
        "ok": total > 0,
        "status": status,
        "puzzle": label,
        "solution_count": total,
        "steps": out.get("steps", 0),
        "finished": bool(out.get("finished")),
        "elapsed_str": _fmt_elapsed(float(progress_json().get("elapsed") or 0.0)),
        "svg": svg,
        "legend": legend,
        "solutions_filename": solutions_name,
        "layout_filename": layout_name,
    })


@app.route("/puzzle", methods=["POST"])
def load_puzzle():
    like = _merge_like_mapping()
    text = _first(like, "puzzle")
    if not text:
        if not request.is_json and not request.form:
            text = request.get_data(as_text=True)
    out = SESSION.load(text or "", _options_from(like), label=str(_first(like, "label") or ""))
    if not out.get("ok"):
        return jsonify(out), 400
    return jsonify(out)


@app.route("/solve", methods=["POST"])
def solve():
    if not SESSION.loaded():
        return jsonify({"ok": False, "reason": "no puzzle loaded"}), 409

    like = _merge_like_mapping()
    mode = str(_first(like, "mode") or "all").strip().lower()
    if mode not in MODES:
        return jsonify({"ok": False, "reason": f"unknown mode: {mode!r}"}), 400
    limit_raw = _first(like, "limit")
    try:
        limit = int(limit_raw) if limit_raw not in (None, "") else None
    except (TypeError, ValueError):
        return jsonify({"ok": False, "reason": f"bad limit: {limit_raw!r}"}), 400

    out = SESSION.solve(mode, limit)
    if not out.get("ok"):
        return jsonify(out), 400
    _refresh_result(out)
    set_result_url(url_for("result_latest"))
    return jsonify(out)


@app.route("/reset", methods=["POST"])
def reset():
    out = SESSION.reset()
    if not out.get("ok"):
        return jsonify(out), 409
    LAST_RESULT.update({"ok": False, "status": "Reset.", "solution_count": 0, "steps": 0,
                        "finished": False, "svg": "", "legend": ""})
    return jsonify(out)


@app.route("/download/solutions")
def download_solutions():
    return send_from_directory(SOLUTIONS_DIR, SOLUTIONS_FILENAME, as_attachment=True)


@app.route("/download/html")
def download_html():
    return send_from_directory(LAYOUT_DIR, LAYOUT_FILENAME, as_attachment=True)


@app.route("/progress3")
def progress3():
    return jsonify(progress_json())


if __name__ == "__main__":
    app.run(debug=False)
