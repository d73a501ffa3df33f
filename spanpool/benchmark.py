"""Timing of plain allocation against the pool from several threads."""

import argparse
import time
from concurrent.futures import ThreadPoolExecutor

from spanpool.allocator import Allocator

THREADS = 4
ROUNDS = 1000
TIMES = 1000
SIZE = 128

_RULE = "=" * 91


def _check_positive(**values):
    for name, value in values.items():
        if value < 1:
            raise ValueError(f"{name} must be positive: {value}")


def _run_threads(workers):
    """Run every worker in its own thread; return elapsed milliseconds."""
    start = time.perf_counter()
    with ThreadPoolExecutor(max_workers=len(workers)) as executor:
        futures = [executor.submit(worker) for worker in workers]
        for future in futures:
            future.result()
    return (time.perf_counter() - start) * 1000.0


def _malloc_worker(rounds, times, size):
    for _ in range(rounds):
        blocks = [bytearray(size) for _ in range(times)]
        blocks.clear()


def _pool_worker(rounds, times, size):
    alloc = Allocator(size)
    for _ in range(rounds):
        addresses = [alloc.allocate(1) for _ in range(times)]
        for address in addresses:
            alloc.deallocate(address, 1)


def run_malloc_benchmark(threads, rounds, times, size):
    """Allocate and free ``times`` buffers per round with the runtime; return ms."""
    _check_positive(threads=threads, rounds=rounds, times=times, size=size)
    return _run_threads([lambda: _malloc_worker(rounds, times, size)] * threads)


def run_pool_benchmark(threads, rounds, times, size):
    """Allocate and free ``times`` blocks per round from the pool; return ms."""
    _check_positive(threads=threads, rounds=rounds, times=times, size=size)
    return _run_threads([lambda: _pool_worker(rounds, times, size)] * threads)


def run_analysis(rounds, times):
    """Drive the pool with 512 and 1024 byte blocks in two threads; return ms."""
    _check_positive(rounds=rounds, times=times)
    return _run_threads([
        lambda: _pool_worker(rounds, times, 512),
        lambda: _pool_worker(rounds, times, 1024),
    ])


def main(argv=None):
    """Run the benchmark and print its report."""
    parser = argparse.ArgumentParser(
        prog="spanpool-benchmark",
        description="Compare plain allocation with the memory pool.",
    )
    parser.add_argument("--threads", type=int, default=THREADS)
    parser.add_argument("--rounds", type=int, default=ROUNDS)
    parser.add_argument("--times", type=int, default=TIMES)
    parser.add_argument("--size", type=int, default=SIZE)
    parser.add_argument(
        "--analyze",
        action="store_true",
        help="run the two-thread 512/1024 byte workload only",
    )
    args = parser.parse_args(argv)
    for name in ("threads", "rounds", "times", "size"):
        if getattr(args, name) < 1:
            parser.error(f"--{name} must be positive")

    if args.analyze:
        cost = run_analysis(args.rounds, args.times)
        print(f"2 threads operated {args.rounds} rounds with {args.times} times "
              f"each allocate and deallocate, cost {cost:.2f} ms")
        return 0

    print("=" * 34 + " MEMORY BENCHMARK " + "=" * 39)
    print("=== MALLOC TEST " + "=" * 75)
    cost = run_malloc_benchmark(args.threads, args.rounds, args.times, args.size)
    print(f"{args.threads} threads operated {args.rounds} rounds with {args.times} "
          f"times each malloc and free, cost {cost:.2f} ms")
    print("=== MEMORY POOL TEST " + "=" * 70)
    cost = run_pool_benchmark(args.threads, args.rounds, args.times, args.size)
    print(f"{args.threads} threads operated {args.rounds} rounds with {args.times} "
          f"times each allocate and deallocate, cost {cost:.2f} ms")
    print(_RULE)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())