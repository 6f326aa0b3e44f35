import threading

import pytest

pytest.importorskip("flask")

import app as app_module
from config import CFG
from dlx.orchestrator import SolverSession


RECT = "XXX\nXXX\n\nXX XX XX\n"


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(app_module, "SESSION", SolverSession())
    monkeypatch.setattr(app_module, "BASE_DIR", str(tmp_path))
    monkeypatch.setattr(app_module, "SOLUTIONS_DIR", str(tmp_path))
    monkeypatch.setattr(app_module, "SOLUTIONS_FILENAME", "solutions.txt")
    monkeypatch.setattr(CFG, "SOLUTIONS_OUT", "solutions.txt")
    monkeypatch.setattr(CFG, "LAYOUT_HTML", "layout_view.html")
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c


def test_solve_before_loading_conflicts(client):
    resp = client.post("/solve", json={"mode": "all"})
    assert resp.status_code == 409
    assert resp.get_json()["ok"] is False


def test_bad_puzzle_is_400(client):
    resp = client.post("/puzzle", json={"puzzle": "X"})
    assert resp.status_code == 400
    assert resp.get_json()["reason"].startswith("Bad puzzle")


def test_load_and_solve_all(client, tmp_path):
    resp = client.post("/puzzle", json={"puzzle": RECT, "rotation": True})
    assert resp.status_code == 200
    assert resp.get_json()["num_cells"] == 6

    resp = client.post("/solve", json={"mode": "all"})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["finished"] is True
    assert body["total_solutions"] == 3

    assert (tmp_path / "solutions.txt").exists()
    assert (tmp_path / "layout_view.html").exists()

    page = client.get("/result/latest")
    assert page.status_code == 200
    assert b"<svg" in page.data
    assert b"3 solution(s)" in page.data

    dl = client.get("/download/solutions")
    assert dl.status_code == 200
    assert b"Solution 3" in dl.data


def test_form_flags_and_step_mode(client):
    resp = client.post(
        "/puzzle",
        data={"puzzle": RECT, "rotation": "on", "eliminate_duplicates": "0"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["leader"] == "A"

    resp = client.post("/solve", data={"mode": "step"})
    body = resp.get_json()
    assert body["depth"] == 1
    assert len(body["current"]) == 1


def test_raw_text_body_is_accepted(client):
    resp = client.post("/puzzle", data=RECT, content_type="text/plain")
    assert resp.status_code == 200
    assert resp.get_json()["tiles"] == ["A", "B", "C"]


def test_bad_mode_and_limit(client):
    client.post("/puzzle", json={"puzzle": RECT})
    assert client.post("/solve", json={"mode": "sideways"}).status_code == 400
    assert client.post("/solve", json={"mode": "all", "limit": "many"}).status_code == 400


def test_limit_pauses_search_and_reset_restarts(client):
    client.post("/puzzle", json={"puzzle": RECT, "rotation": True, "eliminate_duplicates": False,
                                 "eliminate_symmetry": False})
    body = client.post("/solve", json={"mode": "all", "limit": 2}).get_json()
    assert body["total_solutions"] == 2
    assert body["finished"] is False

    progress = client.get("/progress3")
    assert progress.headers["Cache-Control"] == "no-store, max-age=0"
    assert progress.get_json()["status"] == "Paused"

    resp = client.post("/reset")
    assert resp.status_code == 200
    body = client.post("/solve", json={"mode": "all"}).get_json()
    assert body["total_solutions"] == 18


def test_reset_without_puzzle(client):
    assert client.post("/reset").status_code == 409


def test_browse_each_solution(client):
    client.post("/puzzle", json={"puzzle": RECT, "rotation": True})
    client.post("/solve", json={"mode": "all"})

    first = client.get("/result/1")
    assert first.status_code == 200
    assert b"Solution 1 of 3" in first.data
    assert b"<svg" in first.data
    assert b"/result/2" in first.data
    assert b"Prev" not in first.data

    middle = client.get("/result/2")
    assert b"/result/1" in middle.data
    assert b"/result/3" in middle.data

    last = client.get("/result/3")
    assert b"Prev" in last.data
    assert b"Next" not in last.data

    assert client.get("/result/4").status_code == 404
    assert client.get("/result/0").status_code == 404


def test_browse_without_solutions_is_404(client):
    assert client.get("/result/1").status_code == 404


class _CountingLock:
    """Re-entrant lock that remembers how deep it is currently held."""

    def __init__(self):
        self._lock = threading.RLock()
        self.depth = 0

    def __enter__(self):
        self._lock.acquire()
        self.depth += 1
        return self

    def __exit__(self, *exc):
        self.depth -= 1
        self._lock.release()
        return False


def test_result_files_are_written_under_the_session_lock(client, monkeypatch):
    lock = _CountingLock()
    monkeypatch.setattr(app_module.SESSION, "lock", lock)
    seen = []
    real_write = app_module.write_solutions

    def _write(puzzle, solutions, base_dir):
        seen.append(lock.depth)
        return real_write(puzzle, solutions, base_dir)

    monkeypatch.setattr(app_module, "write_solutions", _write)
    client.post("/puzzle", json={"puzzle": RECT, "rotation": True})
    client.post("/solve", json={"mode": "all"})
    assert seen and all(depth >= 1 for depth in seen)
    assert lock.depth == 0
