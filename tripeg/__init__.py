"""Triangle peg solitaire package (engine + exhaustive search + CLI)."""

from tripeg.engine import BoardState, Jump, TriangleConfig
from tripeg.search import BoardTree, ExhaustiveSearch, SearchResult

__all__ = ["BoardState", "Jump", "TriangleConfig", "BoardTree", "ExhaustiveSearch", "SearchResult"]
