"""
Pytest configuration for the lazyseq tests.

This file ensures that the project root is in the Python path so that test
files can import lazy, cycles, gridwalk, models and utils, and provides a few
shared boards and call counters.
"""

import sys
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest

from gridwalk import Board, GridWalk


class CallCounter:
    """Wraps a function and counts how often it is called."""

    def __init__(self, fn=lambda x: x):
        self.fn = fn
        self.calls = 0

    def __call__(self, *args):
        self.calls += 1
        return self.fn(*args)


@pytest.fixture
def counter():
    """Factory for call-counting wrappers."""
    return CallCounter


@pytest.fixture
def east_walk():
    """3x3 board where every arrow points East, starting top-left."""
    return GridWalk(Board.from_rows(["EEE", "EEE", "EEE"]), (0, 0))


@pytest.fixture
def bounce_walk():
    """2x2 board rigged so (0, 0) -> (1, 0) -> (0, 0) forever."""
    return GridWalk(Board.from_rows(["EW", "NN"]), (0, 0))


@pytest.fixture
def loop_walk():
    """4x4 board whose walk enters a 4-cell loop at its fourth position."""
    rows = [
        "SWWW",
        "SESW",
        "ENWW",
        "NNNN",
    ]
    return GridWalk(Board.from_rows(rows), (0, 0))
