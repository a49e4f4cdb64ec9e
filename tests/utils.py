"""Utility functions for testing tree invariants."""

import logging
from fluent_trees.tree_base import (
    TreeBase,
    Stats
)

TREE_FLAGS = (
    "levels_consistent",
    "parents_consistent",
    "index_consistent",
    "height_covers_levels",
)

def assert_tree_invariants_tc(tc, t: TreeBase, stats: Stats, skip=()) -> None:
    """TestCase version: use inside unittest.TestCase methods."""
    for flag in TREE_FLAGS:
        if flag in skip:
            continue
        tc.assertTrue(
            getattr(stats, flag),
            f"Invariant failed: {flag} is False\n{t.print_structure()}"
        )

    tc.assertGreater(
        stats.node_count, 0,
        f"Invariant failed: node_count={stats.node_count} ≤ 0, the root is always attached"
    )
    tc.assertEqual(
        stats.node_count, t.node_count(),
        f"Invariant failed: node_count={stats.node_count} ≠ tree.node_count()={t.node_count()}"
    )
    tc.assertLessEqual(
        stats.id_count, len(t),
        f"Invariant failed: id_count={stats.id_count} > indexed ids={len(t)}"
    )
    tc.assertTrue(
        t.root.is_root,
        "Invariant failed: root node has a parent"
    )

def check_tree_invariants(t: TreeBase, stats: Stats) -> bool:
    """Check all invariants, logging an ERROR for the first failure."""
    for flag in TREE_FLAGS:
        if not getattr(stats, flag):
            logging.error(f"Invariant failed: {flag} is False")
            return False

    if stats.node_count <= 0:
        logging.error(f"Invariant failed: node_count={stats.node_count} ≤ 0")
        return False
    if stats.id_count > len(t):
        logging.error(f"Invariant failed: id_count={stats.id_count} > indexed ids={len(t)}")
        return False
    return True
