"""Random tree generation for tests and benchmarks."""
# pylint: skip-file

import collections
from typing import Optional

import numpy as np

from fluent_trees.base import NodeData
from fluent_trees.factory import create_tree
from fluent_trees.tree_base import TreeBase


def random_tree_of_size(
    n: int,
    mean_branching: float = 3.0,
    recompute_levels: bool = True,
    seed: Optional[int] = None,
) -> TreeBase:
    """
    Build a tree of exactly `n` nodes (root included), breadth first.

    Each expanded node receives a geometrically distributed number of
    children (at least one) with mean `mean_branching`. Node i has id
    "n<i>" and data i; the root holds data 0.
    """
    if n < 1:
        raise ValueError(f"a tree has at least its root, got n={n}")
    if mean_branching < 1:
        raise ValueError(f"mean_branching must be ≥ 1, got {mean_branching}")

    rng = np.random.default_rng(seed)
    p = 1.0 / mean_branching

    tree = create_tree(root_data=0, recompute_levels=recompute_levels)
    queue = collections.deque([tree.root])
    created = 1

    while created < n:
        parent = queue.popleft()
        count = min(int(rng.geometric(p)), n - created)
        items = [NodeData(f"n{created + i}", created + i) for i in range(count)]
        queue.extend(parent.add_children(items))
        created += count

    return tree
