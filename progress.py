from __future__ import annotations

import logging
import os
import time
import threading
from pathlib import Path
from typing import Any, Dict, Optional

# ------------------------------
# Thread-safe global progress state
# ------------------------------

PROGRESS_LOCK = threading.Lock()


def _log_file_path() -> Path:
    configured = os.environ.get("DLX_SEARCH_LOG")
    if configured:
        return Path(configured)
    return Path(__file__).resolve().parent / "logs" / "search_runs.log"


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("dlx.search_log")
    if logger.handlers:
        return logger

    log_path = _log_file_path()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    except Exception:
        # If the logger cannot be initialised we silently continue; progress
        # tracking should not break the search.
        logger.handlers.clear()
    return logger


RUN_LOGGER = _init_logger()


def _log_enabled() -> bool:
    return bool(RUN_LOGGER.handlers)


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    if seconds is None:
        return None
    try:
        return f"{float(seconds):.2f}s"
    except Exception:
        return None


def _emit_log(event: str, **fields: Any) -> None:
    if not _log_enabled():
        return
    extras = [
        f"{key}={value}"
        for key, value in fields.items()
        if value is not None and value != ""
    ]
    try:
        if extras:
            RUN_LOGGER.info("%s | %s", event, " ".join(extras))
        else:
            RUN_LOGGER.info("%s", event)
    except Exception:
        # Logging failures must never bubble back to callers.
        pass


LOG_STATE: Dict[str, Any] = {
    "run_start": None,
    "mode": "",
    "mode_start": None,
}


def _log_mode_transition_locked(new_mode: str) -> None:
    prev_mode = LOG_STATE.get("mode") or ""
    if new_mode == prev_mode:
        return
    now = _now()
    if prev_mode and LOG_STATE.get("mode_start"):
        duration = max(0.0, now - float(LOG_STATE["mode_start"]))
        _emit_log(
            "Mode finished",
            mode=prev_mode,
            duration=_fmt_seconds(duration),
            steps=PROGRESS.get("steps"),
            solutions=PROGRESS.get("solutions"),
        )
    LOG_STATE["mode"] = new_mode
    LOG_STATE["mode_start"] = now
    if new_mode:
        _emit_log("Mode started", mode=new_mode, puzzle=PROGRESS.get("puzzle") or "")

# Single source of truth for the UI poller
PROGRESS: Dict[str, Any] = {
    "status": "Idle",          # Idle | Searching | Paused | Solved | Exhausted | Error
    "mode": "",                # all | next | step
    "puzzle": "",              # short label of the loaded puzzle
    "steps": 0,                # committed choices so far
    "solutions": 0,            # complete solutions found so far
    "depth": 0,                # current size of the solution trail
    "percent": 0.0,            # 0..100 float (coarse, first-level candidates tried)
    "elapsed_start": None,     # t0 (float) when searching started
    "elapsed": 0.0,            # seconds snapshot
    "message": "",             # optional note
    "done": False,             # search exhausted or stopped
    "ok": None,                # True when at least one solution exists
    "result_url": "",          # optional navigation target
    "run_id": 0,               # monotonically increasing identifier
}

# ------------------------------
# Helpers
# ------------------------------

def _now() -> float:
    return time.time()

def _fmt_elapsed(seconds: float) -> str:
    seconds = max(0.0, float(seconds))
    if seconds < 60:
        return f"{int(seconds)}s"
    m, s = divmod(int(seconds), 60)
    if m < 60:
        return f"{m}m {s}s"
    h, m = divmod(m, 60)
    return f"{h}h {m}m"

def reset() -> None:
    with PROGRESS_LOCK:
        try:
            current_run_id = int(PROGRESS.get("run_id", 0))
        except Exception:
            current_run_id = 0
        puzzle = PROGRESS.get("puzzle", "")
        PROGRESS.update({
            "status": "Idle",
            "mode": "",
            "puzzle": puzzle,
            "steps": 0,
            "solutions": 0,
            "depth": 0,
            "percent": 0.0,
            "elapsed_start": None,
            "elapsed": 0.0,
            "message": "",
            "done": False,
            "ok": None,
            "result_url": "",
            "run_id": current_run_id + 1,
        })
        LOG_STATE.update({
            "run_start": None,
            "mode": "",
            "mode_start": None,
        })
        _emit_log("Progress reset")

def start_timer() -> None:
    with PROGRESS_LOCK:
        now = _now()
        PROGRESS["elapsed_start"] = now
        PROGRESS["elapsed"] = 0.0
        LOG_STATE["run_start"] = now
        _emit_log("Run timer started")

def _touch_elapsed_locked() -> None:
    t0 = PROGRESS.get("elapsed_start")
    if t0 is not None:
        PROGRESS["elapsed"] = _now() - float(t0)

# ------------------------------
# Setters (tolerant)
# ------------------------------

def set_status(v: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["status"] = str(v)

def set_mode(v: Any) -> None:
    with PROGRESS_LOCK:
        mode_str = "" if v is None else str(v)
        PROGRESS["mode"] = mode_str
        _log_mode_transition_locked(mode_str)

def set_puzzle(v: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["puzzle"] = "" if v is None else str(v)
        _emit_log("Puzzle loaded", puzzle=PROGRESS["puzzle"])

def set_counters(*, steps: Any = None, solutions: Any = None, depth: Any = None) -> None:
    with PROGRESS_LOCK:
        for key, value in (("steps", steps), ("solutions", solutions), ("depth", depth)):
            if value is None:
                continue
            try:
                PROGRESS[key] = max(0, int(value))
            except Exception:
                continue
        _touch_elapsed_locked()

def set_progress_pct(pct: Any) -> None:
    try:
        f = float(pct)
    except Exception:
        f = 0.0
    f = max(0.0, min(100.0, f))
    with PROGRESS_LOCK:
        PROGRESS["percent"] = f
        _touch_elapsed_locked()

def set_message(msg: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["message"] = "" if msg is None else str(msg)

def set_result_url(url: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["result_url"] = "" if url is None else str(url)

def log_solution(index: int, placements: Any) -> None:
    with PROGRESS_LOCK:
        _emit_log("Solution found", index=index, mode=LOG_STATE.get("mode") or "", placements=placements)

def set_done(ok: Any = None, *, reason: Any = None, message: Any = None) -> None:
    """Mark the search complete.

    ``ok`` decides the final status when provided (``Solved`` when at least
    one solution was found, ``Exhausted`` otherwise); without it the status
    is derived from the solution counter. A ``reason``/``message`` is
    surfaced via the ``message`` field.
    """

    final_message = message if message is not None else reason

    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        now = _now()
        if ok is None:
            ok_flag = int(PROGRESS.get("solutions") or 0) > 0
        else:
            ok_flag = bool(ok)
        if PROGRESS.get("status") != "Error":
            PROGRESS["status"] = "Solved" if ok_flag else "Exhausted"
        PROGRESS["percent"] = 100.0
        if final_message is not None:
            PROGRESS["message"] = str(final_message)
        PROGRESS["done"] = True
        PROGRESS["ok"] = ok_flag
        run_start = LOG_STATE.get("run_start")
        if isinstance(run_start, (int, float)):
            total = max(0.0, now - float(run_start))
        else:
            total = None
        LOG_STATE.update({
            "run_start": None,
            "mode_start": None,
        })
        _emit_log(
            "Run finished",
            status=PROGRESS.get("status"),
            ok=PROGRESS.get("ok"),
            duration=_fmt_seconds(total),
            steps=PROGRESS.get("steps"),
            solutions=PROGRESS.get("solutions"),
            message=PROGRESS.get("message"),
        )

# ------------------------------
# Snapshots for the UI
# ------------------------------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        return {
            "status": PROGRESS["status"],
            "mode": PROGRESS["mode"],
            "puzzle": PROGRESS["puzzle"],
            "steps": PROGRESS["steps"],
            "solutions": PROGRESS["solutions"],
            "depth": PROGRESS["depth"],
            "percent": PROGRESS["percent"],
            "elapsed": PROGRESS["elapsed"],
            "elapsed_str": _fmt_elapsed(PROGRESS["elapsed"]),
            "message": PROGRESS["message"],
            "done": PROGRESS["done"],
            "ok": PROGRESS["ok"],
            "result_url": PROGRESS["result_url"],
            "run_id": PROGRESS["run_id"],
        }

def as_json() -> Dict[str, Any]:
    # Alias used by /progress3
    return snapshot()
