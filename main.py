from itertools import islice

from cycles import detect_cycle_report, measure_cycle
from gridwalk import Board, GridWalk, compare_strategies
from lazy import from_iterable, iterate, naturals
from models import Strategy
from utils import measure_performance, get_performance_summary, setup_logging


def expensive_square(x):
    # Visible work so laziness shows up in the output
    print(f"  computing f({x}) ...")
    return x * x


def main():
    setup_logging()

    print("\n--- Demo: laziness (no work until a cursor is advanced) ---")
    pipeline = (
        from_iterable(range(1, 10_000))
        .map(expensive_square)
        .filter(lambda v: v % 2 == 0)
        .skip(3)
        .take(5)
    )
    print("Constructed pipeline. Nothing computed yet.")
    print(f"Result: {pipeline.collect()}")

    print("\n--- Demo: multipass replays, single-pass continues ---")
    evens = naturals().filter(lambda n: n % 2 == 0)
    print("Multipass, twice:", evens.take(3).collect(), evens.take(3).collect())
    stream = from_iterable(iter(range(10)))
    print("SinglePass, twice:", stream.take(3).collect(), stream.take(3).collect())

    print("\n--- Demo: cycle detection on x -> x*x mod 11 ---")
    squares_mod = iterate(lambda x: x * x % 11, 3)
    print("First values:", list(islice(squares_mod, 8)))
    for strategy in Strategy:
        print(f"  {strategy.value}:", detect_cycle_report(squares_mod, strategy=strategy))
    print("  cycle:", measure_cycle(squares_mod))

    print("\n--- Demo: grid walks ---")
    straight = GridWalk(Board.from_rows(["EEE", "EEE", "EEE"]), (0, 0))
    print(f"All-East 3x3 from (0, 0): {straight.path()} halts={straight.halts()}")
    bounce = GridWalk(Board.from_rows(["EW", "NN"]), (0, 0))
    print(f"Rigged 2x2 from (0, 0): {bounce.path(6)} halts={bounce.halts()}")

    walk = GridWalk.random(size=6, seed=7)
    print(f"\nRandom board, start {walk.start}:\n{walk.board}")
    print(f"floyd halts={walk.halts(Strategy.FLOYD)} brent halts={walk.halts(Strategy.BRENT)}")

    info = measure_performance("compare_strategies", compare_strategies, 16, range(200))
    summary = info["result"]
    print(
        f"\n{summary.boards} random 16x16 boards: {summary.halting} halt, "
        f"{summary.cycling} cycle, agree={summary.agree} "
        f"({info['execution_time_ms']:.1f}ms, peak {info['memory_usage_mb']:.3f}MB)"
    )
    print(get_performance_summary())


if __name__ == "__main__":
    main()
