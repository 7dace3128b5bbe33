"""Board model for triangular peg solitaire.

The triangle is embedded in a rectangular grid. Horizontal neighbours sit two
grid columns apart, so the default 5-row triangle looks like this (with a
2-cell border of invalid cells on every side):

    . . . . . . . . . . . . .
    . . . . . . . . . . . . .
    . . . . . . X . . . . . .
    . . . . . X . X . . . . .
    . . . . X . O . X . . . .
    . . . X . X . X . X . . .
    . . X . X . X . X . X . .
    . . . . . . . . . . . . .
    . . . . . . . . . . . . .
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np

EMPTY = 0
OCCUPIED = 1
INVALID = 2

# One step of each jump, in discovery order: up-left, up-right, down-left,
# down-right, left, right.
DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (-1, -1),
    (-1, 1),
    (1, -1),
    (1, 1),
    (0, -2),
    (0, 2),
)

# Starting layouts, keyed by number, given as the (row, position) of the one
# empty hole in triangle coordinates.
LAYOUTS: Dict[int, Tuple[int, int]] = {
    1: (2, 1),
    2: (0, 0),
    3: (1, 0),
    4: (2, 0),
}


@dataclass(frozen=True)
class TriangleConfig:
    size: int = 5
    border: int = 2

    def validate(self) -> None:
        if self.size < 1:
            raise ValueError("size must be >= 1")
        if self.border < 2:
            raise ValueError("border must be >= 2")

    @property
    def num_rows(self) -> int:
        return self.size + 2 * self.border

    @property
    def num_cols(self) -> int:
        return 2 * self.size - 1 + 2 * self.border

    @property
    def num_holes(self) -> int:
        return self.size * (self.size + 1) // 2

    def hole_to_cell(self, row: int, pos: int) -> Tuple[int, int]:
        """Map triangle coordinates (row, position in row) to a grid cell."""
        if not (0 <= row < self.size and 0 <= pos <= row):
            raise ValueError(f"hole ({row}, {pos}) is outside a {self.size}-row triangle")
        return self.border + row, self.border + (self.size - 1 - row) + 2 * pos


@dataclass(frozen=True)
class BoardState:
    """
    One board position.

    cells values:
      EMPTY    = playable hole without a peg
      OCCUPIED = hole holding a peg
      INVALID  = outside the triangle

    last_row/last_col locate the peg that landed on the jump producing this
    board, or -1/-1 on a starting board.
    """

    cells: np.ndarray  # shape (R, C), dtype=int8
    last_row: int
    last_col: int

    def cell(self, row: int, col: int) -> int:
        return int(self.cells[row, col])

    def is_last_moved(self, row: int, col: int) -> bool:
        return row == self.last_row and col == self.last_col

    def pegs(self) -> List[Tuple[int, int]]:
        return [(int(r), int(c)) for r, c in np.argwhere(self.cells == OCCUPIED)]


@dataclass(frozen=True)
class Jump:
    row: int
    col: int
    dr: int
    dc: int

    @property
    def over(self) -> Tuple[int, int]:
        return self.row + self.dr, self.col + self.dc

    @property
    def landing(self) -> Tuple[int, int]:
        return self.row + 2 * self.dr, self.col + 2 * self.dc

    def reversed(self) -> "Jump":
        r, c = self.landing
        return Jump(row=r, col=c, dr=-self.dr, dc=-self.dc)


def initial_board(cfg: TriangleConfig, layout: int = 1) -> BoardState:
    cfg.validate()
    if layout not in LAYOUTS:
        raise ValueError(f"unknown layout: {layout} (expected one of {sorted(LAYOUTS)})")

    cells = np.full((cfg.num_rows, cfg.num_cols), INVALID, dtype=np.int8)
    for row in range(cfg.size):
        for pos in range(row + 1):
            cells[cfg.hole_to_cell(row, pos)] = OCCUPIED

    cells[cfg.hole_to_cell(*LAYOUTS[layout])] = EMPTY
    return BoardState(cells=cells, last_row=-1, last_col=-1)


def count_pegs(s: BoardState) -> int:
    return int(np.count_nonzero(s.cells == OCCUPIED))


def playable_mask(s: BoardState) -> np.ndarray:
    return s.cells != INVALID


def _shifted(a: np.ndarray, dr: int, dc: int) -> np.ndarray:
    """Return b with b[r, c] == a[r + dr, c + dc], False where that falls off the grid."""
    h, w = a.shape
    out = np.zeros_like(a)
    out[max(-dr, 0) : h - max(dr, 0), max(-dc, 0) : w - max(dc, 0)] = a[
        max(dr, 0) : h + min(dr, 0), max(dc, 0) : w + min(dc, 0)
    ]
    return out


def jump_mask(s: BoardState) -> np.ndarray:
    """
    Boolean array of shape (R, C, len(DIRECTIONS)).

    mask[r, c, k] is True when the peg at (r, c) can jump in DIRECTIONS[k]:
    the neighbouring cell holds a peg and the cell beyond it is an empty hole.
    """

    occupied = s.cells == OCCUPIED
    empty = s.cells == EMPTY
    mask = np.zeros(s.cells.shape + (len(DIRECTIONS),), dtype=bool)
    for k, (dr, dc) in enumerate(DIRECTIONS):
        mask[:, :, k] = occupied & _shifted(occupied, dr, dc) & _shifted(empty, 2 * dr, 2 * dc)
    return mask


def legal_jumps(s: BoardState) -> List[Jump]:
    # argwhere walks (row, col, direction) lexicographically, which is exactly
    # the discovery order of the search.
    moves = []
    for r, c, k in np.argwhere(jump_mask(s)):
        dr, dc = DIRECTIONS[k]
        moves.append(Jump(row=int(r), col=int(c), dr=dr, dc=dc))
    return moves


def _in_grid(s: BoardState, row: int, col: int) -> bool:
    h, w = s.cells.shape
    return 0 <= row < h and 0 <= col < w


def is_legal_jump(s: BoardState, jump: Jump) -> bool:
    cells = [(jump.row, jump.col), jump.over, jump.landing]
    if not all(_in_grid(s, r, c) for r, c in cells):
        return False
    src, over, land = (int(s.cells[r, c]) for r, c in cells)
    return src == OCCUPIED and over == OCCUPIED and land == EMPTY


def apply_jump(s: BoardState, jump: Jump) -> BoardState:
    """
    Return the board after `jump`; `s` is left untouched.

    1) The jumping peg leaves its hole.
    2) The jumped-over peg is removed.
    3) The peg lands two steps away and becomes the last-moved peg.
    """

    if not is_legal_jump(s, jump):
        raise ValueError(f"illegal jump: {jump}")

    cells = s.cells.copy()
    cells[jump.row, jump.col] = EMPTY
    cells[jump.over] = EMPTY
    lr, lc = jump.landing
    cells[lr, lc] = OCCUPIED
    return BoardState(cells=cells, last_row=lr, last_col=lc)
