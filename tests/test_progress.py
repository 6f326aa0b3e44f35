import importlib
import logging

from progress import (
    reset, set_status, set_done, set_result_url, set_counters, set_mode,
    set_progress_pct, set_puzzle, snapshot, as_json,
)


def test_set_done_no_args_derives_from_counter():
    reset()
    set_counters(solutions=2)
    set_done()
    snap = snapshot()
    assert snap["status"] == "Solved"
    assert snap["percent"] == 100.0
    assert snap["done"] is True
    assert snap["ok"] is True
    assert snap["result_url"] == ""


def test_set_done_without_solutions_is_exhausted():
    reset()
    set_done(False, reason="nothing fits")
    snap = snapshot()
    assert snap["status"] == "Exhausted"
    assert snap["message"] == "nothing fits"
    assert snap["ok"] is False


def test_set_done_keeps_error_status():
    reset()
    set_status("Error")
    set_done(False, reason="boom")
    snap = snapshot()
    assert snap["status"] == "Error"
    assert snap["percent"] == 100.0
    assert snap["message"] == "boom"
    assert snap["done"] is True
    assert snap["ok"] is False


def test_set_result_url_tracks_navigation_target():
    reset()
    set_result_url("/foo")
    snap = snapshot()
    assert snap["result_url"] == "/foo"
    assert snap["done"] is False


def test_reset_increments_run_identifier_and_keeps_puzzle():
    set_puzzle("corner")
    reset()
    first = snapshot()["run_id"]
    reset()
    second = snapshot()
    assert isinstance(first, int)
    assert second["run_id"] == first + 1
    assert second["puzzle"] == "corner"


def test_setters_are_tolerant():
    reset()
    set_counters(steps="12", solutions=None, depth=-3)
    set_progress_pct("not a number")
    snap = snapshot()
    assert snap["steps"] == 12
    assert snap["solutions"] == 0
    assert snap["depth"] == 0
    assert snap["percent"] == 0.0
    set_progress_pct(250)
    assert as_json()["percent"] == 100.0


def test_run_log_written_to_configured_file(tmp_path, monkeypatch):
    import progress as progress_module

    log_path = tmp_path / "runs.log"
    monkeypatch.setenv("DLX_SEARCH_LOG", str(log_path))
    logger = logging.getLogger("dlx.search_log")
    saved = list(logger.handlers)
    for h in saved:
        logger.removeHandler(h)
    try:
        progress = importlib.reload(progress_module)
        progress.reset()
        progress.set_mode("all")
        progress.log_solution(1, [[0, 1, 2]])
        progress.set_done(True, reason="done")
        for h in logger.handlers:
            h.flush()
        text = log_path.read_text(encoding="utf-8")
        assert "Mode started | mode=all" in text
        assert "Solution found | index=1" in text
        assert "Run finished | status=Solved" in text
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
        for h in saved:
            logger.addHandler(h)
        monkeypatch.delenv("DLX_SEARCH_LOG")
        importlib.reload(progress_module)
