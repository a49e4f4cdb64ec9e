"""
fluent_trees - ordered, mutable n-ary trees with a tree-wide id index.

Nodes carry arbitrary payload data and an optional unique id. All insertion,
search, removal and reattachment is driven through node operations; the tree
seeds the root and answers id lookups in O(1).
"""

from fluent_trees.base import (
    ROOT_ID,
    NodeData,
    validate_id,
    is_valid_id,
    TreeError,
    InvalidIdentifierError,
    NullIdentifierError,
    DuplicateIdentifierError,
    NodeNotFoundError,
    ChildNotFoundError,
    DescendantNotFoundError,
    IndexOutOfRangeError,
    NoParentError,
    NullArgumentError,
)
from fluent_trees.tree_base import (
    TreeBase,
    TreeNodeBase,
    Stats,
    tree_stats_,
    print_pretty,
)
from fluent_trees.factory import (
    make_tree_classes,
    create_tree
)

Tree, TreeNode = make_tree_classes(recompute_levels=True)

__all__ = [
    'ROOT_ID',
    'NodeData',
    'validate_id',
    'is_valid_id',
    'TreeError',
    'InvalidIdentifierError',
    'NullIdentifierError',
    'DuplicateIdentifierError',
    'NodeNotFoundError',
    'ChildNotFoundError',
    'DescendantNotFoundError',
    'IndexOutOfRangeError',
    'NoParentError',
    'NullArgumentError',
    'TreeBase',
    'TreeNodeBase',
    'Stats',
    'tree_stats_',
    'print_pretty',
    'make_tree_classes',
    'create_tree',
    'Tree',
    'TreeNode',
]
