"""
Grid walk harness for the cycle detectors.

Every cell of a square board holds an arrow. A token starts on some cell and
keeps following arrows; the walk halts when a move would leave the board.
Whether it halts is exactly whether its position sequence never repeats, so
the detectors answer the question in constant memory.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from cycles import detect_cycle
from lazy import Multipass, SinglePass, collect, stateful_map, take
from models import AgreementSummary, BoardRows, GridWalkParams, Strategy

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


class Direction(Enum):
    """Arrow on a cell, valued by its (dx, dy) move; y grows downwards"""
    N = (0, -1)
    E = (1, 0)
    S = (0, 1)
    W = (-1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @classmethod
    def parse(cls, glyph: str) -> "Direction":
        try:
            return _GLYPHS[glyph.upper()]
        except KeyError:
            raise ValueError(f"Unknown arrow glyph: {glyph!r}") from None


_GLYPHS = {
    "N": Direction.N, "^": Direction.N, "↑": Direction.N,
    "E": Direction.E, ">": Direction.E, "→": Direction.E,
    "S": Direction.S, "V": Direction.S, "↓": Direction.S,
    "W": Direction.W, "<": Direction.W, "←": Direction.W,
}


@dataclass(frozen=True)
class Board:
    """Immutable square board, ``cells[y][x]``."""
    cells: Tuple[Tuple[Direction, ...], ...]

    @property
    def size(self) -> int:
        return len(self.cells)

    def contains(self, position: Position) -> bool:
        x, y = position
        return 0 <= x < self.size and 0 <= y < self.size

    def arrow_at(self, position: Position) -> Direction:
        x, y = position
        return self.cells[y][x]

    @classmethod
    def random(cls, size: int, rng: random.Random) -> "Board":
        directions = list(Direction)
        return cls(tuple(
            tuple(rng.choice(directions) for _ in range(size))
            for _ in range(size)
        ))

    @classmethod
    def from_rows(cls, rows: Iterable[str]) -> "Board":
        """Build a rigged board, e.g. ``Board.from_rows(["EW", "NN"])``."""
        layout = BoardRows(rows=list(rows))
        return cls(tuple(
            tuple(Direction.parse(glyph) for glyph in row)
            for row in layout.rows
        ))

    def __str__(self):
        arrows = {Direction.N: "↑", Direction.E: "→", Direction.S: "↓", Direction.W: "←"}
        return "\n".join("".join(arrows[d] for d in row) for row in self.cells)


def _move(position: Position, direction: Direction):
    x, y = position
    return (x + direction.dx, y + direction.dy), position


class GridWalk:
    """
    One walk over one board. The board is owned by the walk and never
    mutated, so walks share nothing.
    """

    def __init__(self, board: Board, start: Position):
        start = tuple(start)
        if not board.contains(start):
            raise ValueError(f"start {start} lies outside a {board.size}x{board.size} board")
        self.board = board
        self.start = start

    @classmethod
    def random(cls, params: Optional[GridWalkParams] = None, **kwargs) -> "GridWalk":
        """Random board plus a random interior start (any cell below 3x3)."""
        if params is not None and kwargs:
            raise TypeError("pass either a GridWalkParams or keyword arguments, not both")
        params = params or GridWalkParams(**kwargs)
        rng = random.Random(params.seed)
        board = Board.random(params.size, rng)
        if params.start is not None:
            return cls(board, params.start)
        if params.size >= 3:
            lo, hi = 1, params.size - 2
        else:
            lo, hi = 0, params.size - 1
        return cls(board, (rng.randint(lo, hi), rng.randint(lo, hi)))

    def _arrows(self):
        position = self.start
        while True:
            direction = self.board.arrow_at(position)
            yield direction
            position, _ = _move(position, direction)
            if not self.board.contains(position):
                return

    def directions(self, multipass: bool = True):
        """
        Arrow of every visited cell, the last being the one that leads off
        the board. Infinite when the walk cycles.
        """
        if multipass:
            return Multipass(self._arrows)
        return SinglePass(self._arrows())

    def positions(self, multipass: bool = True):
        """Start position, then every visited cell, until a move leaves the board."""
        return stateful_map(_move, self.start, self.directions(multipass))

    def halts(self, strategy=Strategy.FLOYD) -> bool:
        strategy = Strategy(strategy)
        # Brent gets the single-pass rendition since one cursor is all it needs
        positions = self.positions(multipass=strategy == Strategy.FLOYD)
        return not detect_cycle(positions, strategy=strategy)

    def path(self, limit: Optional[int] = None):
        """
        First ``limit`` positions; defaults to one more than the number of
        cells, which is enough to show any repeat.
        """
        if limit is None:
            limit = self.board.size ** 2 + 1
        return collect(take(limit, self.positions()))

    def __repr__(self):
        return f"GridWalk(size={self.board.size}, start={self.start})"


def compare_strategies(size: int, seeds: Iterable[int]) -> AgreementSummary:
    """Walk one random board per seed and check Floyd and Brent agree."""
    summary = AgreementSummary()
    for seed in seeds:
        walk = GridWalk.random(GridWalkParams(size=size, seed=seed))
        by_floyd = walk.halts(Strategy.FLOYD)
        by_brent = walk.halts(Strategy.BRENT)

        summary.boards += 1
        if by_floyd:
            summary.halting += 1
        else:
            summary.cycling += 1
        if by_floyd != by_brent:
            logger.warning(f"Strategies disagree on seed {seed}: floyd={by_floyd} brent={by_brent}")
            summary.disagreements.append(seed)

    logger.info(
        f"Compared strategies on {summary.boards} {size}x{size} boards: "
        f"{summary.halting} halting, {summary.cycling} cycling, "
        f"{len(summary.disagreements)} disagreements"
    )
    return summary
