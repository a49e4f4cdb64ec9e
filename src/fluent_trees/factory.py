"""Factory for the creation of tree classes"""

from typing import Any, Type, Tuple, Dict
import logging

from fluent_trees.tree_base import TreeBase, TreeNodeBase

# Configure logging
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

# Cache for previously created classes to avoid recreating them
_class_cache: Dict[bool, Tuple[Type[TreeBase], Type[TreeNodeBase]]] = {}


def _variant_name(recompute_levels: bool) -> str:
    return "RecomputedLevels" if recompute_levels else "CachedLevels"


def make_tree_classes(recompute_levels: bool = True) -> Tuple[
    Type[TreeBase],
    Type[TreeNodeBase]
]:
    """
    Factory function to generate tree and node classes for a level policy.

    Parameters:
        recompute_levels (bool): If True, append_nodes() recomputes the level of
            every node in a reattached subtree. If False, only the reattached
            node's own level is updated and its descendants keep their old levels.

    Returns:
        TreeK – subclass of TreeBase with NodeClass=NodeK.
        NodeK – subclass of TreeNodeBase with RECOMPUTE_LEVELS set.
    """
    recompute_levels = bool(recompute_levels)
    if recompute_levels in _class_cache:
        logger.debug(f"Using cached classes for recompute_levels={recompute_levels}")
        return _class_cache[recompute_levels]

    suffix = _variant_name(recompute_levels)
    logger.debug(f"Creating new classes for recompute_levels={recompute_levels}")

    # 1) Node class carries the level policy
    NodeK = type(
        f"TreeNode_{suffix}",
        (TreeNodeBase,),
        {
            "__module__": __name__,
            "RECOMPUTE_LEVELS": recompute_levels,
            "__slots__": ()
        }
    )
    logger.debug(f"Created {NodeK.__name__} with RECOMPUTE_LEVELS={recompute_levels}")

    # 2) Tree class points at the node class
    TreeK = type(
        f"Tree_{suffix}",
        (TreeBase,),
        {
            "NodeClass": NodeK,
            "__module__": __name__,
            "RECOMPUTE_LEVELS": recompute_levels,
            "__slots__": ()
        }
    )
    logger.debug(f"Created {TreeK.__name__} with NodeClass={NodeK.__name__}")

    _class_cache[recompute_levels] = (TreeK, NodeK)
    return _class_cache[recompute_levels]


def create_tree(root_data: Any = None, recompute_levels: bool = True) -> TreeBase:
    """
    Create a new tree whose root holds `root_data`.

    Args:
        root_data: Payload of the root node (default None)
        recompute_levels (bool): Level policy for reattached subtrees

    Returns:
        A new tree containing only its root node
    """
    TreeK, _ = make_tree_classes(recompute_levels)
    tree = TreeK(root_data)
    logger.debug(f"Created tree instance of type {type(tree).__name__}")
    return tree
