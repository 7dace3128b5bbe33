"""Exhaustive depth-first search over triangle peg solitaire boards."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

import numpy as np

from tripeg.engine import OCCUPIED, BoardState, TriangleConfig, apply_jump, count_pegs, initial_board, legal_jumps

NO_BOARD = -1


class BoardTree:
    """
    Arena of every board produced by the search, addressed by index.

    Index 0 is the root. Children of a board are kept in discovery order as a
    singly linked sibling list (first_child -> next_sibling -> ...), and
    next_win is only filled in by reconstruct_path().
    """

    def __init__(self, cfg: TriangleConfig, capacity: int = 1024) -> None:
        self.cfg = cfg
        self.size = 0
        self.cells = np.empty((capacity, cfg.num_rows, cfg.num_cols), dtype=np.int8)
        self.parent = np.full((capacity,), NO_BOARD, dtype=np.int32)
        self.first_child = np.full((capacity,), NO_BOARD, dtype=np.int32)
        self.last_child = np.full((capacity,), NO_BOARD, dtype=np.int32)
        self.next_sibling = np.full((capacity,), NO_BOARD, dtype=np.int32)
        self.next_win = np.full((capacity,), NO_BOARD, dtype=np.int32)
        self.depth = np.zeros((capacity,), dtype=np.int16)
        self.last_row = np.full((capacity,), -1, dtype=np.int16)
        self.last_col = np.full((capacity,), -1, dtype=np.int16)

    def __len__(self) -> int:
        return self.size

    def _grow(self) -> None:
        n = len(self.parent)
        self.cells = np.concatenate([self.cells, np.empty_like(self.cells)])
        for name in ("parent", "first_child", "last_child", "next_sibling", "next_win"):
            setattr(self, name, np.concatenate([getattr(self, name), np.full((n,), NO_BOARD, dtype=np.int32)]))
        self.depth = np.concatenate([self.depth, np.zeros((n,), dtype=np.int16)])
        self.last_row = np.concatenate([self.last_row, np.full((n,), -1, dtype=np.int16)])
        self.last_col = np.concatenate([self.last_col, np.full((n,), -1, dtype=np.int16)])

    def add(self, s: BoardState, parent: int = NO_BOARD) -> int:
        if self.size == len(self.parent):
            self._grow()

        idx = self.size
        self.size += 1
        self.cells[idx] = s.cells
        self.last_row[idx] = s.last_row
        self.last_col[idx] = s.last_col
        self.parent[idx] = parent

        if parent != NO_BOARD:
            self.depth[idx] = self.depth[parent] + 1
            if self.first_child[parent] == NO_BOARD:
                self.first_child[parent] = idx
            else:
                self.next_sibling[self.last_child[parent]] = idx
            self.last_child[parent] = idx
        return idx

    def state(self, idx: int) -> BoardState:
        return BoardState(
            cells=self.cells[idx].copy(),
            last_row=int(self.last_row[idx]),
            last_col=int(self.last_col[idx]),
        )

    def board_number(self, idx: int) -> int:
        """Discovery order of a board, starting at 1 for the root."""
        return idx + 1

    def parent_of(self, idx: int) -> Optional[int]:
        p = int(self.parent[idx])
        return None if p == NO_BOARD else p

    def children(self, idx: int) -> List[int]:
        return list(self._iter_children(idx))

    def _iter_children(self, idx: int) -> Iterator[int]:
        child = int(self.first_child[idx])
        while child != NO_BOARD:
            yield child
            child = int(self.next_sibling[child])

    def is_terminal(self, idx: int) -> bool:
        return int(self.first_child[idx]) == NO_BOARD

    def pegs(self, idx: int) -> int:
        return int(np.count_nonzero(self.cells[idx] == OCCUPIED))


@dataclass(frozen=True)
class BoardVisit:
    """What the search reports about each board as it enters it."""

    state: BoardState
    board_number: int
    prev_number: int  # 0 for the root
    depth: int
    pegs: int

    @property
    def is_winner(self) -> bool:
        return self.pegs == 1


TraceFn = Callable[[BoardVisit], None]


@dataclass
class SearchResult:
    tree: BoardTree
    total_boards: int
    total_wins: int
    winner: Optional[int]

    def is_terminal(self, idx: int) -> bool:
        return self.tree.is_terminal(idx)

    def dead_ends(self) -> int:
        return int(np.count_nonzero(self.tree.first_child[: self.tree.size] == NO_BOARD))

    def winning_path(self) -> List[int]:
        if self.winner is None:
            return []
        return reconstruct_path(self.tree, self.winner)

    def winning_states(self) -> List[BoardState]:
        return [self.tree.state(idx) for idx in self.winning_path()]


class ExhaustiveSearch:
    """
    Build the complete tree of boards reachable from a root.

    The search does not stop at the first solved board: every reachable board
    is generated so the total can be reported. The first one-peg board in
    discovery order is remembered as the winner.
    """

    def __init__(self, cfg: TriangleConfig, *, trace: Optional[TraceFn] = None) -> None:
        cfg.validate()
        self.cfg = cfg
        self.trace = trace
        self.tree = BoardTree(cfg)
        self.total_boards = 0
        self.total_wins = 0
        self.winner: Optional[int] = None
        self.depth = 0

    def run(self, root: BoardState) -> SearchResult:
        if self.tree.size:
            raise ValueError("search already ran; create a new ExhaustiveSearch")

        idx = self.tree.add(root)
        self.total_boards = 1
        self._expand(idx, root)
        return SearchResult(
            tree=self.tree,
            total_boards=self.total_boards,
            total_wins=self.total_wins,
            winner=self.winner,
        )

    def _expand(self, idx: int, s: BoardState) -> bool:
        count = count_pegs(s)

        if self.trace is not None:
            parent = self.tree.parent_of(idx)
            self.trace(
                BoardVisit(
                    state=s,
                    board_number=self.tree.board_number(idx),
                    prev_number=0 if parent is None else self.tree.board_number(parent),
                    depth=self.depth,
                    pegs=count,
                )
            )

        if count == 1:
            if self.winner is None:
                self.winner = idx
            self.total_wins += 1

        self.depth += 1
        found = False
        for jump in legal_jumps(s):
            child = apply_jump(s, jump)
            child_idx = self.tree.add(child, parent=idx)
            self.total_boards += 1
            found = True
            self._expand(child_idx, child)
        self.depth -= 1

        return found


def reconstruct_path(tree: BoardTree, winner: int) -> List[int]:
    """
    Return board indices from the root to `winner`.

    Walk parent links back to the root, pointing each parent's next_win at the
    child it was reached from, then follow next_win forward from the root.
    """

    idx = winner
    parent = tree.parent_of(idx)
    while parent is not None:
        tree.next_win[parent] = idx
        idx = parent
        parent = tree.parent_of(idx)

    path: List[int] = []
    cur = idx
    while cur != NO_BOARD:
        path.append(cur)
        if cur == winner:
            break
        cur = int(tree.next_win[cur])
    return path


def search(cfg: TriangleConfig, layout: int = 1, *, trace: Optional[TraceFn] = None) -> SearchResult:
    return ExhaustiveSearch(cfg, trace=trace).run(initial_board(cfg, layout))
