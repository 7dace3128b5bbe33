"""CLI rendering and replay for the triangle peg solitaire solver."""

from __future__ import annotations

import time
from typing import Iterator, List, Tuple

import typer
from rich.color import ColorSystem
from rich.console import Console
from rich.control import Control
from rich.style import Style
from rich.table import Table
from rich.text import Text

from tripeg.engine import LAYOUTS, OCCUPIED, BoardState, TriangleConfig
from tripeg.search import BoardVisit, SearchResult, search

console = Console()
app = typer.Typer(add_completion=False)

FRAME_WIDTH = 22
LAST_MOVED = Style(reverse=True)


def _board_rows(cfg: TriangleConfig, s: BoardState) -> Iterator[Tuple[str, List[str], int]]:
    """Yield (row label, cell glyphs, column of the last-moved peg or -1) per grid row."""
    for r, row in enumerate(s.cells.tolist()):
        label = r - cfg.border + 1
        prefix = f"{label:1d}  " if 1 <= label <= cfg.size else ""
        glyphs = ["X" if v == OCCUPIED else " " for v in row]
        yield prefix, glyphs, s.last_col if r == s.last_row else -1


def render_board(cfg: TriangleConfig, s: BoardState) -> Text:
    text = Text()
    text.append("+" * FRAME_WIDTH + "\n")
    for prefix, glyphs, last in _board_rows(cfg, s):
        text.append(prefix)
        for c, glyph in enumerate(glyphs):
            text.append(glyph, style="reverse" if c == last else None)
        text.append("\n")
    text.append("-" * FRAME_WIDTH + "\n")
    return text


def format_board(cfg: TriangleConfig, s: BoardState, *, marker: str = "X") -> str:
    """Plain-text board, with `marker` drawn in place of the last-moved peg."""
    lines = ["+" * FRAME_WIDTH]
    for prefix, glyphs, last in _board_rows(cfg, s):
        if last >= 0:
            glyphs[last] = marker
        lines.append(prefix + "".join(glyphs))
    lines.append("-" * FRAME_WIDTH)
    return "\n".join(lines) + "\n"


def _last_moved_marker() -> str:
    if console.is_terminal and console.color_system is not None:
        return LAST_MOVED.render("X", color_system=ColorSystem.STANDARD)
    return "X"


def print_board(
    cfg: TriangleConfig,
    s: BoardState,
    *,
    visual: bool = False,
    debug: bool = False,
    delay: float = 1.0,
) -> None:
    paced = visual and not debug
    if paced:
        console.control(Control.home())
    console.print(render_board(cfg, s))
    if paced and delay > 0:
        time.sleep(delay)


def print_visit(cfg: TriangleConfig, visit: BoardVisit, *, marker: str = "X") -> None:
    # The trace can run to hundreds of thousands of boards, so it bypasses
    # console.print and writes pre-rendered text.
    parts = []
    if visit.is_winner:
        parts.append("Board is a winner!\n")
    parts.append(f"DEPTH: {visit.depth} COUNT: {visit.pegs} BOARDNUM {visit.board_number} PREV {visit.prev_number}\n")
    parts.append(format_board(cfg, visit.state, marker=marker))
    parts.append("\n")
    console.file.write("".join(parts))


def print_summary(result: SearchResult) -> None:
    table = Table(title="Search summary")
    table.add_column("metric")
    table.add_column("value", justify="right")
    table.add_row("total boards", str(result.total_boards))
    table.add_row("winning boards", str(result.total_wins))
    table.add_row("dead-end boards", str(result.dead_ends()))
    if result.winner is None:
        table.add_row("first winner", "-")
    else:
        table.add_row("first winner", f"board {result.tree.board_number(result.winner)}")
    console.print(table)


def run(
    cfg: TriangleConfig,
    layout: int = 1,
    *,
    debug: bool = False,
    visual: bool = False,
    delay: float = 1.0,
    summary: bool = False,
) -> SearchResult:
    """Search every board reachable from `layout`, then replay the first winning path."""

    if visual and not debug:
        console.clear()

    marker = _last_moved_marker()

    def trace(visit: BoardVisit) -> None:
        print_visit(cfg, visit, marker=marker)

    result = search(cfg, layout, trace=trace if debug else None)
    if debug:
        console.file.flush()

    console.print(f"Total boards: {result.total_boards}")
    if debug:
        console.print(f"Winning boards: {result.total_wins}")
    if summary:
        print_summary(result)

    for s in result.winning_states():
        print_board(cfg, s, visual=visual, debug=debug, delay=delay)
    return result


@app.command()
def solve(
    debug: bool = typer.Option(False, "--debug", "-d", help="Print every board visited during the search."),
    visual: bool = typer.Option(False, "--visual", "-v", help="Redraw the winning path in place, one board at a time."),
    layout: int = typer.Option(
        1, "--layout", "-l", min=min(LAYOUTS), max=max(LAYOUTS), help="Starting layout (which hole starts empty)."
    ),
    delay: float = typer.Option(1.0, min=0.0, help="Seconds to pause between boards in visual mode."),
    summary: bool = typer.Option(False, "--summary", help="Print a table of search totals."),
) -> None:
    """
    Exhaustively search the triangle peg puzzle and show one way to solve it.
    """
    run(TriangleConfig(), layout, debug=debug, visual=visual, delay=delay, summary=summary)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
