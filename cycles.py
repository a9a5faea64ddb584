"""
Constant-space cycle detection over lazy sequences.

Both strategies assume the values come from a deterministic process: once a
value repeats, everything after it repeats too. Under that assumption a
single repeated value proves the sequence never completes. The equality
predicate is injected because values such as grid coordinates are compared
structurally, not by identity; a predicate that disagrees with the domain's
notion of equality gives wrong answers without raising.
"""

import logging
import operator
import time
from typing import Callable, Optional

from lazy import SequenceError, from_iterable, require_multipass
from models import CycleInfo, CycleState, DetectionParams, DetectionReport, Strategy

logger = logging.getLogger(__name__)


class CycleScan:
    """
    Bookkeeping for one detection run: the SCANNING -> FOUND / EXHAUSTED
    state machine plus advance and comparison counters.
    """

    def __init__(self, strategy: Strategy, equals: Callable):
        self.strategy = strategy
        self.equals = equals
        self.state = CycleState.SCANNING
        self.advances = 0
        self.comparisons = 0

    def pull(self, cursor):
        self.advances += 1
        step = cursor.advance()
        if step.done:
            self._finish(CycleState.EXHAUSTED)
        return step

    def matches(self, a, b) -> bool:
        self.comparisons += 1
        if self.equals(a, b):
            self._finish(CycleState.FOUND)
            return True
        return False

    def _finish(self, state: CycleState):
        if self.state != CycleState.SCANNING:
            raise SequenceError(f"scan already finished as {self.state.value}")
        self.state = state

    @property
    def found(self) -> bool:
        return self.state == CycleState.FOUND

    def report(self, elapsed_ms: float = 0.0) -> DetectionReport:
        return DetectionReport(
            strategy=self.strategy,
            state=self.state,
            advances=self.advances,
            comparisons=self.comparisons,
            elapsed_ms=elapsed_ms,
        )


def _floyd(sequence, scan: CycleScan) -> CycleScan:
    """
    Tortoise and hare on two independent cursors. Each round the hare takes
    two steps, compared with the tortoise after each one, then the tortoise
    takes one; position k is checked against 2k+1 and 2k+2.
    """
    tortoise = sequence.cursor()
    hare = sequence.cursor()

    t = scan.pull(tortoise)
    if t.done:
        return scan
    if scan.pull(hare).done:
        return scan

    while True:
        for _ in range(2):
            h = scan.pull(hare)
            if h.done or scan.matches(t.value, h.value):
                return scan
        t = scan.pull(tortoise)
        if t.done:
            return scan


def _brent(sequence, scan: CycleScan) -> CycleScan:
    """
    Teleporting turtle on a single cursor: walk up to ``leash`` values past
    the checkpoint, then move the checkpoint to the last value and double
    the leash.
    """
    cursor = sequence.cursor()

    step = scan.pull(cursor)
    if step.done:
        return scan
    checkpoint = step.value
    leash = 1

    while True:
        for _ in range(leash):
            step = scan.pull(cursor)
            if step.done or scan.matches(checkpoint, step.value):
                return scan
        checkpoint = step.value
        leash *= 2


_STRATEGIES = {
    Strategy.FLOYD: _floyd,
    Strategy.BRENT: _brent,
}


def floyd(sequence, equals: Optional[Callable] = None) -> bool:
    """Floyd's tortoise and hare. Raises ProtocolViolationError for SinglePass input."""
    return detect_cycle(sequence, equals, Strategy.FLOYD)


def brent(sequence, equals: Optional[Callable] = None) -> bool:
    """Brent's teleporting turtle; works on SinglePass sequences."""
    return detect_cycle(sequence, equals, Strategy.BRENT)


def detect_cycle_report(sequence, equals: Optional[Callable] = None,
                        strategy=Strategy.FLOYD) -> DetectionReport:
    """Run a detector and describe what it did."""
    strategy = DetectionParams(strategy=strategy).strategy
    if strategy == Strategy.FLOYD:
        sequence = require_multipass(sequence, "Floyd's cycle detection")
    else:
        sequence = from_iterable(sequence)

    scan = CycleScan(strategy, equals or operator.eq)
    start_time = time.perf_counter()
    _STRATEGIES[strategy](sequence, scan)
    elapsed_ms = (time.perf_counter() - start_time) * 1000

    report = scan.report(elapsed_ms)
    logger.debug(
        f"{strategy.value}: {report.state.value} after {report.advances} advances, "
        f"{report.comparisons} comparisons ({elapsed_ms:.3f}ms)"
    )
    return report


def detect_cycle(sequence, equals: Optional[Callable] = None,
                 strategy=Strategy.FLOYD) -> bool:
    """
    True when a repeated value turns up during the scan, which for a
    deterministic process means the sequence never completes. A finite
    sequence that merely contains a repeat can also give True. False when
    the sequence completes first. Runs forever only if the sequence is
    infinite and never repeats.
    """
    return detect_cycle_report(sequence, equals, strategy).found


def measure_cycle(sequence, equals: Optional[Callable] = None) -> Optional[CycleInfo]:
    """
    Locate the cycle of a Multipass sequence: its length from Brent's search,
    then its start by walking two fresh cursors ``length`` apart until they
    meet. Returns None when the sequence completes.
    """
    sequence = require_multipass(sequence, "measure_cycle")
    equals = equals or operator.eq

    cursor = sequence.cursor()
    step = cursor.advance()
    if step.done:
        return None
    checkpoint = step.value
    leash = 1
    length = 0
    while True:
        step = cursor.advance()
        if step.done:
            return None
        length += 1
        if equals(checkpoint, step.value):
            break
        if length == leash:
            checkpoint = step.value
            leash *= 2
            length = 0

    trail = sequence.cursor()
    lead = sequence.cursor()
    for _ in range(length):
        lead.advance()

    start = 0
    while True:
        a = trail.advance()
        b = lead.advance()
        if a.done or b.done:
            return None
        if equals(a.value, b.value):
            return CycleInfo(start=start, length=length)
        start += 1
