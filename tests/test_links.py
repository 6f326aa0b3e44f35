import pytest

from dlx.links import HEADER, LinksArray


def _small_matrix() -> LinksArray:
    # 2 tiles, 3 cells; Knuth-style toy rows
    links = LinksArray(2, 3)
    links.add_row([0, 2, 3])
    links.add_row([0, 3, 4])
    links.add_row([1, 4])
    links.add_row([1, 2])
    return links


def test_new_matrix_links_columns_in_index_order():
    links = LinksArray(2, 3)
    assert [links.index_of(h) for h in links.columns()] == [0, 1, 2, 3, 4]
    assert links.L[HEADER] == links.column(4)
    assert all(s == 0 for s in links.S)
    assert links.check_rings()


def test_add_row_counts_and_orders_cells():
    links = _small_matrix()
    assert links.num_rows == 4
    assert [links.S[links.column(i)] for i in range(5)] == [2, 2, 2, 2, 2]
    first = links.add_row([4, 1])
    assert links.row_columns(first) == [1, 4]
    # leftmost of any cell in the row is the cell in the smallest column
    assert links.leftmost(links.R[first]) == first


def test_add_row_rejects_bad_columns():
    links = LinksArray(1, 2)
    with pytest.raises(ValueError):
        links.add_row([])
    with pytest.raises(ValueError):
        links.add_row([3])


def test_names_must_match_column_count():
    with pytest.raises(ValueError):
        LinksArray(1, 2, names=["A", "r0c0"])


def test_cover_removes_column_and_conflicting_rows():
    links = _small_matrix()
    c = links.column(3)
    links.cover(c)
    assert not links.is_reachable(3)
    assert links.index_of(c) not in [links.index_of(h) for h in links.columns()]
    # both rows through column 3 also used columns 0, 2 and 4
    assert links.S[links.column(0)] == 0
    assert links.S[links.column(2)] == 1
    assert links.S[links.column(4)] == 1
    assert links.check_rings()


def test_cover_uncover_restores_every_link():
    links = _small_matrix()
    before = links.signature()
    order = [links.column(i) for i in (3, 1, 0)]
    for c in order:
        links.cover(c)
    for c in reversed(order):
        links.uncover(c)
    assert links.signature() == before
    assert links.check_rings()


def test_column_cells_walks_both_directions():
    links = _small_matrix()
    c = links.column(4)
    down = list(links.column_cells(c))
    up = list(links.column_cells(c, upward=True))
    assert up == list(reversed(down))
    assert [links.row_columns(x) for x in down] == [[0, 3, 4], [1, 4]]


def test_is_empty_after_covering_everything():
    links = LinksArray(1, 1)
    links.add_row([0, 1])
    assert not links.is_empty()
    links.cover(links.column(0))
    links.cover(links.column(1))
    assert links.is_empty()
