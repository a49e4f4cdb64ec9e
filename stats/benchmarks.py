#!/usr/bin/env python3
"""
Benchmarks for the fluent-trees data structure.

This script measures:
 1. Random tree build times (random_tree_of_size)
 2. Tree statistics for a large random tree
 3. Id lookup cost (get_node_by_id, root.get_descendant)
 4. Predicate search cost (tree.get_nodes)
 5. Detach/reattach round trips on trees of various sizes

Usage (from the repository root):
    PYTHONPATH=.:src python stats/benchmarks.py [--sizes 100 1000 10000] [--branching B] [--trials T]
"""
import argparse
import time
import gc
from pprint import pprint
from dataclasses import asdict

import numpy as np
from tqdm import tqdm

from fluent_trees.tree_base import TreeBase, tree_stats_
from tests.stats_tree import random_tree_of_size


def bench_build_tree(sizes: list[int], branching: float) -> None:
    """Measure random_tree_of_size for various sizes."""
    for n in sizes:
        t0 = time.perf_counter()
        _ = random_tree_of_size(n, branching)
        elapsed = time.perf_counter() - t0
        print(f"[bench] random_tree_of_size({n}): {elapsed:.4f}s")


def bench_tree_stats(n: int, branching: float) -> None:
    """Build a single random tree and print its stats."""
    tree = random_tree_of_size(n, branching)
    level_hist = {}
    stats = tree_stats_(tree, level_hist)
    print(f"[bench] random_tree_of_size({n}, {branching}) stats:")
    pprint(asdict(stats))
    print(f"[bench] nodes per level: {dict(sorted(level_hist.items()))}")


def measure_lookups(n: int, branching: float, trials: int, rng: np.random.Generator) -> tuple[float, float, float, float]:
    """
    Measure id lookups on a tree of `n` nodes.
    Returns (index_avg, index_var, descendant_avg, descendant_var) in seconds.
    """
    tree = random_tree_of_size(n, branching)
    ids = [f"n{i}" for i in rng.integers(1, n, size=trials)] if n > 1 else ["root"] * trials
    root = tree.root

    gc.collect()
    gc.disable()
    try:
        index_times = []
        for node_id in ids:
            t0 = time.perf_counter()
            tree.get_node_by_id(node_id)
            index_times.append(time.perf_counter() - t0)

        descendant_times = []
        for node_id in ids:
            t0 = time.perf_counter()
            root.has_descendant(node_id)
            descendant_times.append(time.perf_counter() - t0)
    finally:
        gc.enable()

    return (
        float(np.mean(index_times)), float(np.var(index_times)),
        float(np.mean(descendant_times)), float(np.var(descendant_times)),
    )


def measure_search(n: int, branching: float, trials: int) -> tuple[float, float]:
    """Measure a full-tree predicate search. Returns (mean_s, variance_s)."""
    tree = random_tree_of_size(n, branching)
    times = []
    for _ in range(trials):
        t0 = time.perf_counter()
        tree.get_nodes(lambda data: data % 7 == 0)
        times.append(time.perf_counter() - t0)
    return float(np.mean(times)), float(np.var(times))


def measure_move(n: int, branching: float, trials: int, rng: np.random.Generator) -> tuple[float, float]:
    """
    Measure detaching a random subtree and reattaching it under a random
    attached node. Returns (mean_s, variance_s).
    """
    tree = random_tree_of_size(n, branching)
    times = []
    for _ in range(trials):
        attached = tree.get_all_nodes()
        moved = attached[1 + int(rng.integers(len(attached) - 1))]
        t0 = time.perf_counter()
        moved.remove()
        remaining = tree.get_all_nodes()
        remaining[int(rng.integers(len(remaining)))].append_nodes([moved])
        times.append(time.perf_counter() - t0)
    return float(np.mean(times)), float(np.var(times))


def bench_operations(sizes: list[int], branching: float, trials: int, seed: int) -> None:
    """Run the lookup, search and move measurements for each size and print results."""
    rng = np.random.default_rng(seed)
    for n in tqdm(sizes, desc="Tree sizes", unit="tree"):
        idx_avg, idx_var, desc_avg, desc_var = measure_lookups(n, branching, trials, rng)
        search_avg, search_var = measure_search(n, branching, max(1, trials // 10))
        print(
            f"[bench] get_node_by_id in size {n:<7} → avg {idx_avg*1e6:8.2f} µs   σ²={idx_var*1e12:8.2f} µs²"
        )
        print(
            f"[bench] has_descendant in size {n:<7} → avg {desc_avg*1e6:8.2f} µs   σ²={desc_var*1e12:8.2f} µs²"
        )
        print(
            f"[bench] get_nodes in size {n:<7} → avg {search_avg*1e3:8.2f} ms   σ²={search_var*1e6:8.2f} ms²"
        )
        if n > 1:
            move_avg, move_var = measure_move(n, branching, max(1, trials // 10), rng)
            print(
                f"[bench] detach+append in size {n:<7} → avg {move_avg*1e3:8.2f} ms   σ²={move_var*1e6:8.2f} ms²"
            )


def main():
    parser = argparse.ArgumentParser(description="fluent-trees benchmarks")
    parser.add_argument("--sizes", nargs='+', type=int, default=[100, 1000, 10_000],
                        help="Tree sizes for the operation benchmarks")
    parser.add_argument("--branching", type=float, default=3.0,
                        help="Mean number of children per expanded node")
    parser.add_argument("--trials", type=int, default=1000,
                        help="Number of lookups per size")
    parser.add_argument("--seed", type=int, default=0,
                        help="Seed for picking ids and move targets")
    args = parser.parse_args()

    print("\n=== Random Tree Build ===")
    bench_build_tree([10, 100, 1000, 10_000, 100_000], args.branching)

    print("\n=== random_tree_of_size Stats ===")
    bench_tree_stats(100_000, args.branching)

    TreeBase.enable_performance_tracking()

    print("\n=== Operation Benchmarks ===")
    bench_operations(args.sizes, args.branching, args.trials, args.seed)

    print("\n=== Operation-Level Performance Breakdown ===")
    print(TreeBase.get_performance_report())
    TreeBase.reset_performance_metrics()
    TreeBase.disable_performance_tracking()

if __name__ == "__main__":
    main()
