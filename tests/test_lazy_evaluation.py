import pytest
import time

from lazy import (
    Multipass, SinglePass, batch, collect, drop, filter_seq, from_iterable,
    map_seq, naturals, skip, stateful_map, take, until, zip_seq,
)


class TestLazyEvaluation:
    """Test that combinators do no work until values are pulled"""

    def test_deferred_execution(self, counter):
        """Test that operations are not executed during construction"""
        double = counter(lambda x: x * 2)

        seq = map_seq(double, range(10))
        assert double.calls == 0, "Operations should not execute during definition"

        result = take(3, seq).collect()
        assert double.calls == 3, f"Expected exactly 3 calls, got {double.calls}"
        assert result == [0, 2, 4], f"Unexpected result: {result}"

    def test_construction_over_infinite_source(self):
        """Test that chains over infinite sequences build instantly"""
        seq = naturals().map(lambda x: x * x).filter(lambda x: x % 2 == 1)
        assert take(4, seq).collect() == [1, 9, 25, 49]

    def test_take_never_pulls_extra_values(self, counter):
        """Test that take stops pulling once it has n values"""
        pulls = counter()
        seq = take(3, map_seq(pulls, naturals()))
        assert seq.collect() == [0, 1, 2]
        assert pulls.calls == 3

    def test_take_zero_pulls_nothing(self, counter):
        """Test that take(0) completes without touching the source"""
        pulls = counter()
        assert take(0, map_seq(pulls, naturals())).collect() == []
        assert pulls.calls == 0

    def test_first_pulls_one_value(self, counter):
        """Test that first() advances the source once"""
        pulls = counter()
        assert map_seq(pulls, naturals(5)).first() == 5
        assert pulls.calls == 1

    def test_lazy_evaluation_performance(self):
        """Test that lazy evaluation only computes what is needed"""
        start_time = time.perf_counter()
        result = (
            from_iterable(range(10_000_000))
            .map(lambda x: x * x)
            .filter(lambda x: x % 1000 == 0)
            .take(5)
            .collect()
        )
        lazy_time = time.perf_counter() - start_time

        assert result == [0, 10000, 40000, 90000, 160000]
        assert lazy_time < 1.0, f"Lazy evaluation took too long: {lazy_time:.2f}s"


class TestCombinators:
    """Test each combinator's semantics"""

    def test_map(self):
        """Test 1:1 order-preserving mapping"""
        assert map_seq(str, [1, 2, 3]).collect() == ["1", "2", "3"]

    def test_filter(self):
        """Test that filter keeps order and only matching values"""
        data = [5, 2, 8, 1, 9, 4]
        result = filter_seq(lambda x: x > 3, data).collect()
        assert result == [5, 8, 9, 4]
        assert len(result) <= len(data)

    @pytest.mark.parametrize("k", [0, 1, 3, 5, 9])
    def test_take_length(self, k):
        """Test that take yields min(k, len(S)) values"""
        data = [10, 20, 30, 40, 50]
        assert len(take(k, data).collect()) == min(k, len(data))

    def test_take_rejects_negative(self):
        """Test that a negative count is an error"""
        with pytest.raises(ValueError):
            take(-1, [1, 2])

    def test_drop_skips_exactly_one(self):
        """Test that drop skips only the first value"""
        assert drop([1, 2, 3]).collect() == [2, 3]
        assert drop([1]).collect() == []
        assert drop([]).collect() == []

    def test_skip(self):
        """Test skipping several values"""
        assert skip(3, range(6)).collect() == [3, 4, 5]
        assert skip(10, range(6)).collect() == []
        with pytest.raises(ValueError):
            skip(-2, range(6))

    def test_until_is_exclusive(self):
        """Test that until stops before the first matching value"""
        assert until(lambda x: x >= 3, naturals()).collect() == [0, 1, 2]
        assert until(lambda x: x > 100, [1, 2]).collect() == [1, 2]
        assert until(lambda x: True, [1, 2]).collect() == []

    def test_until_consumes_the_match_on_single_pass(self):
        """Test that the terminating value is taken from a single-pass source"""
        source = from_iterable(iter([1, 2, 3, 4]))
        assert until(lambda x: x == 2, source).collect() == [1]
        assert source.collect() == [3, 4]

    def test_stateful_map_running_total(self):
        """Test that state is carried across advances"""
        totals = stateful_map(lambda acc, x: (acc + x, acc + x), 0, [1, 2, 3, 4])
        assert totals.collect() == [1, 3, 6, 10]

    def test_stateful_map_deltas_to_positions(self):
        """Test turning relative moves into absolute positions"""
        moves = [(1, 0), (0, 1), (-1, 0)]

        def step(pos, delta):
            nxt = (pos[0] + delta[0], pos[1] + delta[1])
            return nxt, nxt

        assert stateful_map(step, (0, 0), moves).collect() == [(1, 0), (1, 1), (0, 1)]

    def test_stateful_map_restarts_per_cursor(self):
        """Test that each multipass cursor starts from the seed"""
        totals = stateful_map(lambda acc, x: (acc + x, acc + x), 0, [1, 1, 1])
        assert totals.collect() == [1, 2, 3]
        assert totals.collect() == [1, 2, 3]

    def test_zip_lockstep(self):
        """Test that zip stops at the shortest source"""
        result = zip_seq([1, 2, 3], "ab", naturals()).collect()
        assert result == [(1, "a", 0), (2, "b", 1)]

    def test_zip_empty_source(self):
        """Test zip with an empty source"""
        assert zip_seq([1, 2], []).collect() == []

    def test_batch(self):
        """Test grouping into tuples with a short last batch"""
        assert batch(2, range(5)).collect() == [(0, 1), (2, 3), (4,)]
        assert batch(3, []).collect() == []
        with pytest.raises(ValueError):
            batch(0, range(5))


class TestClassificationPreserved:
    """Test that wrapping keeps the multipass / single-pass tag"""

    @pytest.mark.parametrize("wrap", [
        lambda s: map_seq(abs, s),
        lambda s: filter_seq(bool, s),
        lambda s: take(2, s),
        lambda s: drop(s),
        lambda s: skip(1, s),
        lambda s: until(lambda x: x > 5, s),
        lambda s: stateful_map(lambda a, x: (a, x), None, s),
        lambda s: batch(2, s),
        lambda s: zip_seq(s, naturals()),
    ])
    def test_wrapping_preserves_kind(self, wrap):
        """Test every combinator against both kinds of source"""
        assert isinstance(wrap(from_iterable([1, 2, 3])), Multipass)
        assert isinstance(wrap(from_iterable(iter([1, 2, 3]))), SinglePass)

    def test_single_pass_wrapper_forwards_state(self):
        """Test that a single-pass chain and its source share one position"""
        source = from_iterable(iter(range(10)))
        doubled = map_seq(lambda x: x * 2, source)

        assert doubled.advance().value == 0
        assert source.advance().value == 1
        assert doubled.advance().value == 4

    def test_collect_preserves_order_and_length(self):
        """Test that collect returns every value of a finite sequence in order"""
        data = [7, 3, 9, 1, 3]
        assert collect(from_iterable(data)) == data
        assert collect(data) == data
