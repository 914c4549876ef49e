#!/usr/bin/env python3
"""
Benchmarks for the 2-3 tree.

This script measures:
 1. Full tree build times for various sizes
 2. Per-insert and per-search cost into trees of various sizes
 3. Per-delete cost
 4. Range count versus range enumeration
 5. A method-level breakdown from the performance tracker

Usage:
    python stats/benchmarks.py [--sizes 100 1000 10000] [--trials T] [--seed S]
"""
import argparse
import gc
import time
from dataclasses import asdict
from pprint import pprint
from statistics import mean, variance

import numpy as np

from two_three_trees import CompositeKey, LeafNode, TwoThreeTree, tree_stats_
from two_three_trees import operations as ops
from two_three_trees.profiling import profiled


def random_keys(rng: np.random.Generator, n: int, space: int) -> list[int]:
    return [int(k) for k in rng.choice(np.arange(1, space), size=n, replace=False)]


def build_tree(keys: list[int]) -> TwoThreeTree:
    tree = TwoThreeTree()
    for key in keys:
        ops.insert(tree, LeafNode(key, None, f"val{key}"))
    return tree


def bench_build(sizes: list[int], rng: np.random.Generator) -> None:
    """Measure building trees of various sizes from random keys."""
    for n in sizes:
        keys = random_keys(rng, n, 4 * n)
        t0 = time.perf_counter()
        build_tree(keys)
        elapsed = time.perf_counter() - t0
        print(f"[bench] build({n}): {elapsed:.4f}s")


def bench_tree_stats(n: int, rng: np.random.Generator) -> None:
    """Build a single random tree and print its stats."""
    tree = build_tree(random_keys(rng, n, 4 * n))
    print(f"[bench] tree_stats_ for {n} keys:")
    pprint(asdict(tree_stats_(tree)))


def measure_single_ops(n: int, rng: np.random.Generator, trials: int) -> dict[str, tuple[float, float]]:
    """
    Measure per-operation cost on a tree of exactly `n` keys.
    Keys at odd values are stored, probes use even values so every insert is fresh.
    Returns {operation: (mean_s, variance_s)}.
    """
    stored = [2 * k + 1 for k in random_keys(rng, n, 4 * n)]
    tree = build_tree(stored)
    probes = [2 * k for k in random_keys(rng, trials, 4 * n)]
    results = {}

    gc.collect()
    gc.disable()
    try:
        search_times = []
        for key in probes:
            t0 = time.perf_counter()
            ops.search(tree.root, CompositeKey(key))
            search_times.append(time.perf_counter() - t0)

        insert_times = []
        inserted = []
        for key in probes:
            leaf = LeafNode(key, None, f"val{key}")
            t0 = time.perf_counter()
            ops.insert(tree, leaf)
            insert_times.append(time.perf_counter() - t0)
            inserted.append(leaf)

        delete_times = []
        for leaf in inserted:
            t0 = time.perf_counter()
            ops.delete(tree, leaf)
            delete_times.append(time.perf_counter() - t0)
    finally:
        gc.enable()

    for name, times in (("search", search_times), ("insert", insert_times), ("delete", delete_times)):
        results[name] = (mean(times), variance(times) if len(times) > 1 else 0.0)
    return results


def bench_single_ops(sizes: list[int], rng: np.random.Generator, trials: int) -> None:
    for n in sizes:
        for name, (avg, var) in measure_single_ops(n, rng, trials).items():
            print(f"[bench] {name:<6} in size {n:<7} → avg {avg*1e6:8.2f} µs   σ²={var*1e12:8.2f} µs²")


def bench_ranges(n: int, rng: np.random.Generator, trials: int) -> None:
    """Compare counting a range by rank against walking it through the sibling chain."""
    space = 4 * n
    tree = build_tree(random_keys(rng, n, space))
    bounds = [sorted(int(b) for b in rng.integers(1, space, size=2)) for _ in range(trials)]

    t0 = time.perf_counter()
    counts = [ops.count_in_range(tree, CompositeKey(lo), CompositeKey(hi)) for lo, hi in bounds]
    count_time = time.perf_counter() - t0

    t0 = time.perf_counter()
    walked = [sum(1 for _ in ops.iter_range(tree, CompositeKey(lo), CompositeKey(hi))) for lo, hi in bounds]
    walk_time = time.perf_counter() - t0

    if counts != walked:
        raise RuntimeError("range count disagrees with range enumeration")
    print(f"[bench] count_in_range x{trials} on {n}: {count_time:.4f}s "
          f"(avg {mean(counts):.0f} hits)")
    print(f"[bench] iter_range     x{trials} on {n}: {walk_time:.4f}s")


def main():
    parser = argparse.ArgumentParser(description="2-3 tree benchmarks")
    parser.add_argument("--sizes", nargs='+', type=int, default=[100, 1000, 10_000],
                        help="Tree sizes for single-operation benchmarks")
    parser.add_argument("--trials", type=int, default=200,
                        help="Number of probes per tree size")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for numpy's random generator")
    args = parser.parse_args()
    rng = np.random.default_rng(args.seed)

    print("\n=== Full Tree Build ===")
    bench_build([10, 100, 1000, 10_000, 100_000], rng)

    print("\n=== Tree Stats ===")
    bench_tree_stats(10_000, rng)

    print("\n=== Single-Operation Benchmarks ===")
    bench_single_ops(args.sizes, rng, args.trials)

    print("\n=== Range Queries ===")
    bench_ranges(max(args.sizes), rng, args.trials)

    print("\n=== Method-Level Performance Breakdown ===")
    with profiled() as tracker:
        bench_single_ops(args.sizes, rng, args.trials)
    print(tracker.report())


if __name__ == "__main__":
    main()
