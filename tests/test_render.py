from dlx.builder import PuzzleOptions, build_from_text
from models import Placement
from render import _color, render_solution


def _puzzle():
    puzzle, _ = build_from_text("XX\nXX\n\nXX XX\n", PuzzleOptions())
    return puzzle


def test_color_is_stable_per_name():
    assert _color("A") == _color("A")
    assert _color("A").startswith("rgb(")


def test_render_solution_fills_each_tile():
    sol = [Placement(0, (0, 1)), Placement(1, (2, 3))]
    svg, legend = render_solution(_puzzle(), sol, cell_px=10)
    assert svg.startswith("<svg")
    assert 'width="22"' in svg
    assert svg.count(_color("A")) == 2
    assert svg.count(_color("B")) == 2
    assert legend.count("<li>") == 2


def test_render_empty_assignment_draws_free_board():
    svg, legend = render_solution(_puzzle(), None, cell_px=10)
    assert svg.count("#f4f4f4") == 4
    assert legend == ""
