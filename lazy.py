"""
Lazy sequences built on a single-method cursor protocol.

A Cursor exposes ``advance()``, which returns a ``Step``: either a value or
completion. A Sequence hands out cursors and is tagged as one of two kinds:

- ``Multipass``: every ``cursor()`` call replays the sequence from its origin
  with a fresh cursor that shares no state with any other cursor.
- ``SinglePass``: the sequence *is* its cursor; ``cursor()`` returns ``self``
  and consumption continues wherever it left off.

Combinators wrap a source sequence without doing any work and keep its kind,
so a chain built over a Multipass source can still be replayed.
"""

import functools
from abc import ABC, abstractmethod
from typing import Any, Callable, List, NamedTuple


class SequenceError(Exception):
    """Base class for sequence protocol errors."""
    pass


class ProtocolViolationError(SequenceError):
    """Raised when a SinglePass sequence is used where Multipass is required."""
    pass


class Step(NamedTuple):
    """Result of a single ``advance()``."""
    done: bool
    value: Any = None


DONE = Step(True)


# --------- cursors ----------

class Cursor(ABC):
    """
    Stateful traversal primitive. Once ``advance()`` returns a done step,
    every later call must return a done step as well.
    """

    @abstractmethod
    def advance(self) -> Step:
        ...

    # Bridge to Python's iterator protocol
    def __iter__(self):
        return self

    def __next__(self):
        step = self.advance()
        if step.done:
            raise StopIteration
        return step.value


class GeneratorCursor(Cursor):
    """
    Cursor backed by a Python iterator (usually a generator). The position is
    the generator's suspension point, so no state tags are needed.
    """

    def __init__(self, iterator):
        self._iterator = iterator

    def advance(self) -> Step:
        if self._iterator is None:
            return DONE
        try:
            return Step(False, next(self._iterator))
        except StopIteration:
            # drop the generator so completion sticks
            self._iterator = None
            return DONE

    @property
    def exhausted(self) -> bool:
        return self._iterator is None


def as_cursor(obj) -> Cursor:
    """Coerce a Cursor or anything iterable into a Cursor."""
    if isinstance(obj, Cursor):
        return obj
    return GeneratorCursor(iter(obj))


# --------- sequences ----------

class Sequence(ABC):
    """
    Capability to produce cursors. ``multipass`` tells consumers whether
    repeated ``cursor()`` calls replay from the origin.
    """
    multipass = False

    @abstractmethod
    def cursor(self) -> Cursor:
        ...

    def __iter__(self):
        return iter(self.cursor())

    # --------- chainable operators (lazy) ----------
    def map(self, fn):
        return map_seq(fn, self)

    def filter(self, pred):
        return filter_seq(pred, self)

    def take(self, n):
        return take(n, self)

    def drop(self):
        return drop(self)

    def skip(self, n):
        return skip(n, self)

    def until(self, pred):
        return until(pred, self)

    def stateful_map(self, fn, seed):
        return stateful_map(fn, seed, self)

    def zip(self, *others):
        return zip_seq(self, *others)

    def batch(self, size):
        return batch(size, self)

    # --------- forcing evaluation ----------
    def collect(self):
        return collect(self)

    def first(self, default=None):
        return first(self, default)

    def count(self):
        return count(self)

    def reduce(self, fn, initial):
        return reduce(fn, self, initial)

    def find(self, pred, default=None):
        return find(pred, self, default)


class Multipass(Sequence):
    """
    Sequence whose cursors are produced by calling ``factory``. The factory
    may return a Cursor or any iterator; it must build a new one per call.
    """
    multipass = True

    def __init__(self, factory: Callable[[], Any]):
        self._factory = factory

    def cursor(self) -> Cursor:
        return as_cursor(self._factory())

    def __repr__(self):
        return f"Multipass({self._factory!r})"


class SinglePass(Sequence, Cursor):
    """
    Self-iterable sequence: ``cursor()`` always returns this same object.

    Handing one SinglePass to two independent consumers aliases its state;
    each value goes to whichever consumer advances first.
    """
    multipass = False

    def __init__(self, source):
        self._cursor = as_cursor(source)

    def cursor(self) -> Cursor:
        return self

    def advance(self) -> Step:
        return self._cursor.advance()

    def __iter__(self):
        return self

    def __repr__(self):
        return f"SinglePass({self._cursor!r})"


# --------- sources ----------

def multipass(generator_function):
    """
    Decorator turning a generator function into a Multipass factory: calling
    the decorated function returns a Sequence that re-runs the generator with
    the same arguments for every cursor.
    """
    @functools.wraps(generator_function)
    def wrapper(*args, **kwargs):
        return Multipass(lambda: generator_function(*args, **kwargs))
    return wrapper


def from_iterable(iterable) -> Sequence:
    """Multipass for re-iterable containers, SinglePass for iterators."""
    if isinstance(iterable, Sequence):
        return iterable
    if isinstance(iterable, Cursor) or iter(iterable) is iterable:
        return SinglePass(iterable)
    return Multipass(lambda: iter(iterable))


def single_pass(iterable) -> SinglePass:
    if isinstance(iterable, Sequence):
        return SinglePass(iterable.cursor())
    return SinglePass(iterable)


@multipass
def iterate(fn, seed):
    """``seed, fn(seed), fn(fn(seed)), ...`` without end."""
    value = seed
    while True:
        yield value
        value = fn(value)


@multipass
def naturals(start=0):
    n = start
    while True:
        yield n
        n += 1


def empty() -> Sequence:
    return Multipass(lambda: iter(()))


# --------- combinators ----------

def _wrap(source, transform, *params):
    """
    Apply ``transform(*params, cursor)`` lazily to ``source`` while keeping
    its kind: Multipass sources get a new inner cursor per outer cursor,
    SinglePass sources hand over their one cursor.
    """
    source = from_iterable(source)
    if source.multipass:
        return Multipass(lambda: transform(*params, source.cursor()))
    return SinglePass(transform(*params, source.cursor()))


def _mapped(fn, cursor):
    for value in cursor:
        yield fn(value)


def _filtered(pred, cursor):
    for value in cursor:
        if pred(value):
            yield value


def _taken(n, cursor):
    # checked before pulling so the (n+1)-th value stays in the source
    remaining = n
    while remaining > 0:
        step = cursor.advance()
        if step.done:
            return
        remaining -= 1
        yield step.value


def _skipped(n, cursor):
    for _ in range(n):
        if cursor.advance().done:
            return
    yield from cursor


def _until(pred, cursor):
    for value in cursor:
        if pred(value):
            return
        yield value


def _stateful(fn, seed, cursor):
    state = seed
    for value in cursor:
        state, out = fn(state, value)
        yield out


def _zipped(cursors):
    while True:
        values = []
        for cursor in cursors:
            step = cursor.advance()
            if step.done:
                return
            values.append(step.value)
        yield tuple(values)


def _batched(size, cursor):
    bucket = []
    for value in cursor:
        bucket.append(value)
        if len(bucket) == size:
            yield tuple(bucket)
            bucket = []
    if bucket:
        yield tuple(bucket)


def map_seq(fn, source) -> Sequence:
    return _wrap(source, _mapped, fn)


def filter_seq(pred, source) -> Sequence:
    return _wrap(source, _filtered, pred)


def take(n: int, source) -> Sequence:
    n = int(n)
    if n < 0:
        raise ValueError(f"take() count must be >= 0, got {n}")
    return _wrap(source, _taken, n)


def skip(n: int, source) -> Sequence:
    n = int(n)
    if n < 0:
        raise ValueError(f"skip() count must be >= 0, got {n}")
    return _wrap(source, _skipped, n)


def drop(source) -> Sequence:
    """Skip exactly the first value."""
    return skip(1, source)


def until(pred, source) -> Sequence:
    """Values before the first one satisfying ``pred``; that one is consumed."""
    return _wrap(source, _until, pred)


def stateful_map(fn, seed, source) -> Sequence:
    """
    Carry an accumulator across advances: each source value ``v`` produces
    ``(state, out) = fn(state, v)`` and ``out`` is yielded. This turns
    relative deltas into absolute positions, running totals, and so on.
    """
    return _wrap(source, _stateful, fn, seed)


def batch(size: int, source) -> Sequence:
    size = int(size)
    if size < 1:
        raise ValueError(f"batch() size must be >= 1, got {size}")
    return _wrap(source, _batched, size)


def zip_seq(*sources) -> Sequence:
    """
    Lockstep tuples over all sources, stopping at the shortest. The result is
    Multipass only when every source is; no sources give an empty sequence.
    """
    if not sources:
        return empty()

    seen = set()
    for s in sources:
        if isinstance(s, Multipass):
            continue
        if isinstance(s, Cursor) or iter(s) is s:
            if id(s) in seen:
                raise ProtocolViolationError(
                    "the same single-pass source cannot be zipped with itself"
                )
            seen.add(id(s))

    sources = [from_iterable(s) for s in sources]
    if all(s.multipass for s in sources):
        return Multipass(lambda: _zipped([s.cursor() for s in sources]))
    return SinglePass(_zipped([s.cursor() for s in sources]))


# --------- materialization and reductions ----------

def collect(sequence) -> List[Any]:
    """
    Drain ``sequence`` into a list. The sequence must be bounded; compose
    ``take`` or ``until`` first for infinite ones, otherwise this never returns.
    """
    cursor = from_iterable(sequence).cursor()
    out = []
    while True:
        step = cursor.advance()
        if step.done:
            return out
        out.append(step.value)


def first(sequence, default=None):
    """Return the first value, pulling at most one, or ``default``."""
    step = from_iterable(sequence).cursor().advance()
    return default if step.done else step.value


def count(sequence) -> int:
    n = 0
    for _ in from_iterable(sequence):
        n += 1
    return n


def reduce(fn, sequence, initial):
    """Fold values left to right starting from ``initial``."""
    return functools.reduce(fn, from_iterable(sequence), initial)


def find(pred, sequence, default=None):
    """First value satisfying ``pred``; stops pulling once found."""
    for value in from_iterable(sequence):
        if pred(value):
            return value
    return default


def require_multipass(sequence, operation: str) -> Sequence:
    sequence = from_iterable(sequence)
    if not sequence.multipass:
        raise ProtocolViolationError(
            f"{operation} needs a Multipass sequence, got {sequence!r}"
        )
    return sequence
