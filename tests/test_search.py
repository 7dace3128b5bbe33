import numpy as np
import pytest

from tripeg.engine import INVALID, OCCUPIED, TriangleConfig, apply_jump, count_pegs, initial_board, legal_jumps
from tripeg.search import NO_BOARD, BoardTree, ExhaustiveSearch, reconstruct_path, search


@pytest.fixture(scope="module")
def layout1():
    return search(TriangleConfig(), 1)


def _peg_counts(tree):
    n = len(tree)
    return (tree.cells[:n] == OCCUPIED).sum(axis=(1, 2))


def test_layout1_totals(layout1):
    assert layout1.total_boards == 323_873
    assert len(layout1.tree) == layout1.total_boards
    assert layout1.total_wins == 1_550
    assert layout1.tree.board_number(layout1.winner) == 19_402


def test_layout1_winning_path(layout1):
    tree = layout1.tree
    path = layout1.winning_path()

    assert [tree.board_number(i) for i in path] == [
        1, 2, 19293, 19294, 19295, 19296, 19297, 19382, 19383, 19391, 19398, 19399, 19401, 19402,
    ]
    assert [tree.pegs(i) for i in path] == list(range(14, 0, -1))

    states = layout1.winning_states()
    assert states[-1].pegs() == [(6, 6)]
    assert [(s.last_row, s.last_col) for s in states[1:]] == [
        (4, 6), (5, 5), (5, 7), (5, 9), (3, 5), (4, 4), (6, 4),
        (6, 6), (6, 8), (4, 8), (6, 6), (6, 4), (6, 6),
    ]


def test_layout1_every_child_loses_one_peg(layout1):
    tree = layout1.tree
    n = len(tree)
    counts = _peg_counts(tree)
    parents = tree.parent[1:n]
    assert tree.parent[0] == NO_BOARD
    assert np.all(parents >= 0)
    assert np.all(counts[1:] == counts[parents] - 1)
    assert np.all(tree.depth[1:n] == tree.depth[parents] + 1)
    assert int(tree.depth[:n].max()) == 13


def test_layout1_invalid_cells_never_change(layout1):
    tree = layout1.tree
    n = len(tree)
    root_invalid = tree.cells[0] == INVALID
    assert np.all((tree.cells[:n] == INVALID) == root_invalid)


def test_layout1_last_moved_marker(layout1):
    tree = layout1.tree
    n = len(tree)
    assert (tree.last_row[0], tree.last_col[0]) == (-1, -1)
    idx = np.arange(1, n)
    rows = tree.last_row[1:n].astype(np.intp)
    cols = tree.last_col[1:n].astype(np.intp)
    assert np.all(rows >= 0)
    assert np.all(tree.cells[idx, rows, cols] == OCCUPIED)


def test_layout1_tree_shape(layout1):
    tree = layout1.tree
    assert len(tree.children(0)) == 2
    assert tree.children(0)[0] == 1
    assert layout1.is_terminal(layout1.winner)
    assert not layout1.is_terminal(0)
    n = len(tree)
    assert layout1.dead_ends() == int(np.count_nonzero(tree.first_child[:n] == NO_BOARD))
    # winners are always dead ends
    assert layout1.dead_ends() >= layout1.total_wins


def test_small_triangle_solution():
    cfg = TriangleConfig(size=4)
    result = search(cfg, 3)

    assert result.total_boards == 260
    assert result.total_wins == 14
    assert result.tree.board_number(result.winner) == 12

    states = result.winning_states()
    assert [count_pegs(s) for s in states] == list(range(9, 0, -1))
    assert states[-1].pegs() == [(3, 6)]
    assert [(s.last_row, s.last_col) for s in states[1:]] == [
        (3, 4), (4, 3), (2, 5), (4, 7), (3, 6), (4, 7), (5, 8), (3, 6),
    ]


def test_unsolvable_start_has_no_winner():
    result = search(TriangleConfig(size=4), 2)
    assert result.total_boards == 119
    assert result.total_wins == 0
    assert result.winner is None
    assert result.winning_path() == []
    assert result.winning_states() == []


def test_no_legal_move_at_root():
    # The centre-of-row-three hole cannot be reached on a 4-row triangle.
    result = search(TriangleConfig(size=4), 1)
    assert result.total_boards == 1
    assert result.is_terminal(0)


def test_discovery_is_deterministic():
    cfg = TriangleConfig(size=4)
    a = search(cfg, 4)
    b = search(cfg, 4)

    assert a.total_boards == b.total_boards == 260
    assert a.winner == b.winner
    assert a.winning_path() == b.winning_path()
    n = len(a.tree)
    np.testing.assert_array_equal(a.tree.parent[:n], b.tree.parent[:n])
    np.testing.assert_array_equal(a.tree.cells[:n], b.tree.cells[:n])


def test_trace_reports_boards_in_discovery_order():
    cfg = TriangleConfig(size=4)
    visits = []
    result = search(cfg, 3, trace=visits.append)

    assert [v.board_number for v in visits] == list(range(1, result.total_boards + 1))
    assert visits[0].prev_number == 0
    assert visits[0].depth == 0
    assert visits[0].pegs == 9
    assert sum(v.is_winner for v in visits) == result.total_wins
    for v in visits[1:]:
        assert v.prev_number < v.board_number
        assert v.depth >= 1


def test_search_cannot_be_reused():
    cfg = TriangleConfig(size=4)
    engine = ExhaustiveSearch(cfg)
    engine.run(initial_board(cfg, 3))
    with pytest.raises(ValueError):
        engine.run(initial_board(cfg, 3))


def test_board_tree_grows_and_keeps_child_order():
    cfg = TriangleConfig()
    tree = BoardTree(cfg, capacity=2)
    root = initial_board(cfg, 1)
    r = tree.add(root)
    kids = [tree.add(apply_jump(root, j), parent=r) for j in legal_jumps(root)]
    first = tree.state(kids[0])
    grandkids = [tree.add(apply_jump(first, j), parent=kids[0]) for j in legal_jumps(first)]

    assert len(tree) == 1 + len(kids) + len(grandkids)
    assert tree.children(r) == kids
    assert tree.children(kids[0]) == grandkids
    assert tree.is_terminal(kids[1])
    assert tree.parent_of(r) is None
    assert tree.parent_of(grandkids[-1]) == kids[0]

    path = reconstruct_path(tree, grandkids[-1])
    assert path == [r, kids[0], grandkids[-1]]
    assert tree.next_win[r] == kids[0]


def test_tree_states_are_independent_copies():
    cfg = TriangleConfig()
    tree = BoardTree(cfg)
    root = initial_board(cfg, 1)
    idx = tree.add(root)
    s = tree.state(idx)
    s.cells[2, 6] = 0
    assert tree.pegs(idx) == 14
    assert count_pegs(root) == 14


@pytest.mark.slow
@pytest.mark.parametrize(
    "layout,boards,wins",
    [(2, 1_293_179, 29_760), (3, 671_085, 14_880), (4, 2_592_133, 85_258)],
)
def test_other_layout_totals(layout, boards, wins):
    result = search(TriangleConfig(), layout)
    assert result.total_boards == boards
    assert result.total_wins == wins
    assert [result.tree.pegs(i) for i in result.winning_path()] == list(range(14, 0, -1))
