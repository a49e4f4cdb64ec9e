"""Ordered n-ary tree base implementation"""

from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Type
from dataclasses import dataclass
import collections

from fluent_trees.base import (
    ROOT_ID,
    AbstractTreeNode,
    NodeData,
    Predicate,
    ChildKey,
    validate_id,
    ChildNotFoundError,
    DescendantNotFoundError,
    DuplicateIdentifierError,
    IndexOutOfRangeError,
    NodeNotFoundError,
    NoParentError,
    NullArgumentError,
    NullIdentifierError,
)
from fluent_trees.profiling import (
    track_performance,
    PerformanceTracker
)

# Configure logging
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


class TreeNodeBase(AbstractTreeNode):
    """
    A node of an ordered n-ary tree.

    Holds a payload, an optional tree-wide unique id, the ordered list of its
    children, a back-reference to its parent (None for the root and for
    detached nodes) and its cached level (root = 0).

    The factory sets:
      - RECOMPUTE_LEVELS : whether append_nodes() re-levels reattached subtrees
    """
    __slots__ = ("_tree", "_id", "_data", "_parent", "_children", "_level")

    RECOMPUTE_LEVELS: bool = True

    def __init__(
        self,
        tree: TreeBase,
        node_id: Optional[str] = None,
        data: Any = None,
        parent: Optional[TreeNodeBase] = None
    ) -> None:
        self._tree = tree
        self._id = node_id
        self._data = data
        self._parent = parent
        self._children: List[TreeNodeBase] = []
        self._level = 0 if parent is None else parent._level + 1

    def __repr__(self):
        return (f"{self.__class__.__name__}(id={self._id!r}, level={self._level}, "
                f"data={self._data!r})")

    # Identity & links
    @property
    def id(self) -> Optional[str]:
        return self._id

    @property
    def data(self) -> Any:
        return self._data

    @data.setter
    def data(self, value: Any) -> None:
        self._data = value

    @property
    def level(self) -> int:
        return self._level

    @property
    def tree(self) -> TreeBase:
        return self._tree

    @property
    def parent(self) -> TreeNodeBase:
        """
        The parent node.

        Raises:
            NoParentError: If this is the root or a detached node.
        """
        if self._parent is None:
            raise NoParentError(f"{self!r} has no parent")
        return self._parent

    @property
    def is_root(self) -> bool:
        return self._parent is None

    @property
    def is_detached(self) -> bool:
        """True for a parentless node that is not its tree's root."""
        return self._parent is None and self._tree.root is not self

    @property
    def index(self) -> int:
        """Position of this node among its parent's children."""
        if self._parent is None:
            raise NoParentError(f"{self!r} has no parent")
        return self._parent._children.index(self)

    @property
    def child_count(self) -> int:
        return len(self._children)

    def has_preceding_sibling(self) -> bool:
        return self._parent is not None and self.index > 0

    def has_next_sibling(self) -> bool:
        return self._parent is not None and self.index < len(self._parent._children) - 1

    @property
    def preceding_sibling(self) -> TreeNodeBase:
        if not self.has_preceding_sibling():
            raise NoParentError(f"{self!r} has no preceding sibling")
        return self._parent._children[self.index - 1]

    @property
    def next_sibling(self) -> TreeNodeBase:
        if not self.has_next_sibling():
            raise NoParentError(f"{self!r} has no next sibling")
        return self._parent._children[self.index + 1]

    # Child mutation
    def add_children(self, items: Iterable[Any]) -> List[TreeNodeBase]:
        """
        Append one child per element of `items` to the end of this node's children.

        Each element is either a NodeData(id, data) or a bare payload. The whole
        batch is validated before anything is attached.

        Args:
            items (Iterable): The new children.

        Returns:
            List[TreeNodeBase]: The created nodes, in order.

        Raises:
            NullArgumentError: If items is None.
            InvalidIdentifierError: If an id is malformed.
            DuplicateIdentifierError: If an id is already in the tree or repeated in the batch.
        """
        batch = self._prepare_batch(items)
        return self._create_children(len(self._children), batch)

    def insert_children(self, position: int, items: Iterable[Any]) -> List[TreeNodeBase]:
        """
        Insert one child per element of `items`, starting at `position`.

        Same semantics as add_children(). `position` must lie in
        [0, child_count]; child_count appends.

        Raises:
            IndexOutOfRangeError: If position is outside [0, child_count].
        """
        if (not isinstance(position, int) or isinstance(position, bool)
                or not 0 <= position <= len(self._children)):
            raise IndexOutOfRangeError(
                f"insert_children(): position {position!r} outside [0, {len(self._children)}]"
            )
        batch = self._prepare_batch(items)
        return self._create_children(position, batch)

    def remove(self) -> TreeNodeBase:
        """Detach this node from its parent and return it."""
        if self._parent is None:
            raise NoParentError(f"{self!r} has no parent to be removed from")
        self._parent._detach(self)
        return self

    def remove_child(self, key: ChildKey) -> TreeNodeBase:
        """
        Detach the direct child at index `key` (int) or with id `key` (str).

        The child keeps its own subtree; only its own id leaves the tree index.

        Returns:
            TreeNodeBase: The detached child.

        Raises:
            ChildNotFoundError: If key does not resolve to a direct child.
        """
        child = self.get_child(key)
        self._detach(child)
        return child

    def remove_children(self, predicate: Predicate) -> List[TreeNodeBase]:
        """
        Detach every direct child whose data matches `predicate`, in a single pass.

        Returns:
            List[TreeNodeBase]: The detached children in their original order.
        """
        if predicate is None:
            raise NullArgumentError("remove_children(): predicate cannot be None")

        kept: List[TreeNodeBase] = []
        removed: List[TreeNodeBase] = []
        for child in self._children:
            (removed if predicate(child._data) else kept).append(child)

        if removed:
            self._children = kept
            for child in removed:
                self._unlink(child)
            logger.debug(f"Removed {len(removed)} children from {self!r}")
        return removed

    def remove_all_children(self) -> List[TreeNodeBase]:
        return self.remove_children(lambda _: True)

    def append_nodes(self, nodes: Iterable[TreeNodeBase]) -> List[TreeNodeBase]:
        """
        Reattach previously detached nodes at the end of this node's children.

        A candidate is rejected (and returned) if it still has a parent, is the
        tree root, belongs to another tree, is this node or one of its
        ancestors, or carries an id already indexed by the tree.

        Args:
            nodes (Iterable[TreeNodeBase]): The detached nodes to reattach.

        Returns:
            List[TreeNodeBase]: The nodes that were NOT appended.

        Raises:
            NullArgumentError: If nodes is None.
        """
        if nodes is None:
            raise NullArgumentError("append_nodes(): nodes cannot be None")

        tree = self._tree
        index = tree._nodes_by_id
        lineage = list(self._lineage())
        not_appended: List[TreeNodeBase] = []

        for node in nodes:
            if (
                not isinstance(node, TreeNodeBase)
                or node._parent is not None
                or node._tree is not tree
                or node is tree._root
                or any(node is ancestor for ancestor in lineage)
                or (node._id is not None and node._id in index)
            ):
                logger.debug(f"Rejected {node!r} for append under {self!r}")
                not_appended.append(node)
                continue

            if node._id is not None:
                index[node._id] = node
            node._parent = self
            node._level = self._level + 1
            self._children.append(node)

            if self.RECOMPUTE_LEVELS:
                self._relevel_subtree(node)

        return not_appended

    # Traversal & search
    def has_child(self, key: ChildKey) -> bool:
        return self._resolve_child(key) is not None

    def get_child(self, key: ChildKey) -> TreeNodeBase:
        child = self._resolve_child(key)
        if child is None:
            raise ChildNotFoundError(f"child not found: {key!r}")
        return child

    def get_children(self, predicate: Predicate) -> List[TreeNodeBase]:
        if predicate is None:
            raise NullArgumentError("get_children(): predicate cannot be None")
        return [child for child in self._children if predicate(child._data)]

    def get_all_children(self) -> List[TreeNodeBase]:
        return list(self._children)

    def iter_descendants(self) -> Iterator[TreeNodeBase]:
        """
        Yield every descendant of this node exactly once.

        A node's children are yielded together, in order, before descending
        into the first of them that has children of its own. Each child list
        is copied before it is yielded, so callers may detach nodes while
        iterating.
        """
        stack = [self]
        while stack:
            node = stack.pop()
            children = list(node._children)
            yield from children
            stack.extend(reversed([child for child in children if child._children]))

    @track_performance
    def get_descendants(self, predicate: Predicate) -> List[TreeNodeBase]:
        """
        Return the descendants whose data matches `predicate`, in the order of
        iter_descendants(). The node itself is never a candidate.
        """
        if predicate is None:
            raise NullArgumentError("get_descendants(): predicate cannot be None")
        matches = []
        visited = 0
        for node in self.iter_descendants():
            visited += 1
            if predicate(node._data):
                matches.append(node)
        PerformanceTracker.get_instance().count_visited(visited)
        return matches

    def get_all_descendants(self) -> List[TreeNodeBase]:
        return self.get_descendants(lambda _: True)

    def get_descendant(self, node_id: str) -> TreeNodeBase:
        """
        Find a descendant by id.

        The id is resolved through the tree-wide index in O(1); the match is
        then confirmed to lie under this node by walking at most
        (target.level - self.level) parent links upwards.

        Raises:
            DescendantNotFoundError: If the id is not indexed or not under this node.
        """
        validate_id(node_id)
        target = self._tree._nodes_by_id.get(node_id)

        if target is not None and target._level > self._level:
            current = target
            for _ in range(target._level - self._level):
                parent = current._parent
                if parent is None:
                    break
                if parent is self:
                    return target
                current = parent

        raise DescendantNotFoundError(f"descendant not found: {node_id!r}")

    def has_descendant(self, node_id: str) -> bool:
        try:
            self.get_descendant(node_id)
        except DescendantNotFoundError:
            return False
        return True

    def remove_descendant(self, node_id: str) -> TreeNodeBase:
        descendant = self.get_descendant(node_id)
        return descendant._parent.remove_child(node_id)

    @track_performance
    def remove_descendants(self, predicate: Predicate) -> List[TreeNodeBase]:
        """
        Detach every descendant whose data matches `predicate`.

        Works one parent per pass: take the parent of the first match, detach
        all of that parent's matching children, then rescan the subtree, until
        no match remains.

        Returns:
            List[TreeNodeBase]: Every detached node, batch after batch.
        """
        if predicate is None:
            raise NullArgumentError("remove_descendants(): predicate cannot be None")

        removed: List[TreeNodeBase] = []
        matches = self.get_descendants(predicate)
        while matches:
            removed.extend(matches[0]._parent.remove_children(predicate))
            matches = self.get_descendants(predicate)
        return removed

    def remove_all_descendants(self) -> List[TreeNodeBase]:
        return self.remove_descendants(lambda _: True)

    def print_structure(self, indent: int = 0, max_depth: Optional[int] = None) -> str:
        """Return an indented outline of this node's subtree, one node per line."""
        result = []
        stack = [(self, 0)]
        while stack:
            node, depth = stack.pop()
            prefix = ' ' * (indent + 4 * depth)
            label = node._id if node._id is not None else "-"
            result.append(f"{prefix}{label} (level={node._level}, data={node._data!r})")
            if max_depth is not None and depth >= max_depth:
                if node._children:
                    result.append(f"{prefix}    ... (max depth reached)")
                continue
            stack.extend((child, depth + 1) for child in reversed(node._children))
        return "\n".join(result)

    # Private Methods
    def _resolve_child(self, key: ChildKey) -> Optional[TreeNodeBase]:
        if key is None:
            raise NullIdentifierError("child key cannot be None")
        if isinstance(key, str):
            validate_id(key)
            for child in self._children:
                if child._id == key:
                    return child
            return None
        if isinstance(key, int) and not isinstance(key, bool):
            if 0 <= key < len(self._children):
                return self._children[key]
            return None
        raise TypeError(f"child key must be an int index or a str id, got {type(key).__name__}")

    def _prepare_batch(self, items: Iterable[Any]) -> List[NodeData]:
        """Normalise `items` to NodeData and validate every id against the tree index."""
        if items is None:
            raise NullArgumentError("items cannot be None")

        batch = [item if isinstance(item, NodeData) else NodeData(None, item) for item in items]

        index = self._tree._nodes_by_id
        seen = set()
        for entry in batch:
            if entry.id is None:
                continue
            validate_id(entry.id)
            if entry.id in index or entry.id in seen:
                raise DuplicateIdentifierError(f"a node with id {entry.id!r} already exists")
            seen.add(entry.id)
        return batch

    def _create_children(self, position: int, batch: List[NodeData]) -> List[TreeNodeBase]:
        tree = self._tree
        if batch and tree._height == self._level:
            tree._height += 1
            logger.debug(f"Tree height raised to {tree._height}")

        NodeClass = type(self)
        created = [NodeClass(tree, entry.id, entry.data, self) for entry in batch]
        for node in created:
            if node._id is not None:
                tree._nodes_by_id[node._id] = node
        self._children[position:position] = created

        logger.debug(f"Created {len(created)} children under {self!r} at position {position}")
        return created

    def _detach(self, child: TreeNodeBase) -> None:
        self._children.remove(child)
        self._unlink(child)
        logger.debug(f"Removed {child!r} from {self!r}")

    def _unlink(self, child: TreeNodeBase) -> None:
        child._parent = None
        if child._id is not None:
            self._tree._nodes_by_id.pop(child._id, None)

    def _lineage(self) -> Iterator[TreeNodeBase]:
        """Yield this node followed by each of its ancestors."""
        node = self
        while node is not None:
            yield node
            node = node._parent

    def _relevel_subtree(self, node: TreeNodeBase) -> None:
        """Recompute levels below a reattached `node` and raise the tree height if needed."""
        deepest = node._level
        stack = [node]
        while stack:
            current = stack.pop()
            for child in current._children:
                child._level = current._level + 1
                deepest = max(deepest, child._level)
                stack.append(child)

        tree = self._tree
        if deepest > tree._height:
            tree._height = deepest
            logger.debug(f"Tree height raised to {tree._height} by reattachment")


class TreeBase:
    """
    An ordered n-ary tree: a root node plus a tree-wide index from node id to node.

    The root is created on construction with id ROOT_ID and is never replaced.
    `height` records the deepest level ever reached by an insertion; it is not
    decreased when nodes are removed.

    The factory sets:
      - NodeClass        : which TreeNodeBase subclass to build nodes from
      - RECOMPUTE_LEVELS : mirrored from NodeClass
    """
    __slots__ = ("_root", "_nodes_by_id", "_height")

    NodeClass: Type[TreeNodeBase] = TreeNodeBase
    RECOMPUTE_LEVELS: bool = True

    def __init__(self, root_data: Any = None):
        self._nodes_by_id: Dict[str, TreeNodeBase] = {}
        self._height = 0
        self._root = self.NodeClass(self, ROOT_ID, root_data, None)
        self._nodes_by_id[ROOT_ID] = self._root

    def __str__(self):
        return f"{self.__class__.__name__}(height={self._height}, ids={len(self._nodes_by_id)})"

    __repr__ = __str__

    def __len__(self) -> int:
        return len(self._nodes_by_id)

    def __contains__(self, node_id) -> bool:
        return isinstance(node_id, str) and node_id in self._nodes_by_id

    @property
    def root(self) -> TreeNodeBase:
        return self._root

    @property
    def height(self) -> int:
        return self._height

    def has_node_by_id(self, node_id: str) -> bool:
        validate_id(node_id)
        return node_id in self._nodes_by_id

    def get_node_by_id(self, node_id: str) -> TreeNodeBase:
        """
        Return the node indexed under `node_id`, wherever it sits in the tree.

        Raises:
            NodeNotFoundError: If no node carries this id.
        """
        validate_id(node_id)
        try:
            return self._nodes_by_id[node_id]
        except KeyError:
            raise NodeNotFoundError(f"node not found: {node_id!r}") from None

    @track_performance
    def get_nodes(self, predicate: Predicate) -> List[TreeNodeBase]:
        """
        Return the root (when its data is not None and matches) followed by
        every matching descendant of the root.
        """
        if predicate is None:
            raise NullArgumentError("get_nodes(): predicate cannot be None")

        nodes = []
        root = self._root
        PerformanceTracker.get_instance().count_visited(1)
        if root.data is not None and predicate(root.data):
            nodes.append(root)
        nodes.extend(root.get_descendants(predicate))
        return nodes

    def get_all_nodes(self) -> List[TreeNodeBase]:
        return self.get_nodes(lambda _: True)

    def node_count(self) -> int:
        """Number of nodes attached under the root, root included."""
        return 1 + sum(1 for _ in self._root.iter_descendants())

    def print_structure(self, indent: int = 0, max_depth: Optional[int] = None) -> str:
        return self._root.print_structure(indent, max_depth)

    # Profiling
    @classmethod
    def enable_performance_tracking(cls) -> None:
        PerformanceTracker.get_instance().enable()

    @classmethod
    def disable_performance_tracking(cls) -> None:
        PerformanceTracker.get_instance().disable()

    @classmethod
    def get_performance_report(cls, sort_by: str = 'total_time') -> str:
        """Table of time and visited nodes per tracked scan, see PerformanceTracker.report()."""
        return PerformanceTracker.get_instance().report(sort_by)

    @classmethod
    def reset_performance_metrics(cls) -> None:
        PerformanceTracker.get_instance().reset()


@dataclass
class Stats:
    node_count: int
    id_count: int
    leaf_count: int
    max_level: int
    max_branching: int
    levels_consistent: bool
    parents_consistent: bool
    index_consistent: bool
    height_covers_levels: bool

def tree_stats_(t: TreeBase,
                level_hist: Optional[Dict[int, int]] = None,
                ) -> Stats:
    """
    Returns aggregated statistics for the attached part of a tree in **O(n)** time.

    The caller can supply an existing Counter / dict for `level_hist`, which
    receives the number of nodes per level.
    """
    if level_hist is None:
        level_hist = collections.Counter()

    index = t._nodes_by_id
    root = t.root
    stats = Stats(node_count           = 0,
                  id_count             = 0,
                  leaf_count           = 0,
                  max_level            = 0,
                  max_branching        = 0,
                  levels_consistent    = root.level == 0,
                  parents_consistent   = root._parent is None,
                  index_consistent     = True,
                  height_covers_levels = True)

    stack = [root]
    while stack:
        node = stack.pop()
        children = node._children

        stats.node_count += 1
        level_hist[node.level] = level_hist.get(node.level, 0) + 1
        stats.max_level = max(stats.max_level, node.level)
        stats.max_branching = max(stats.max_branching, len(children))

        if node.id is not None:
            stats.id_count += 1
            if index.get(node.id) is not node:
                stats.index_consistent = False

        if not children:
            stats.leaf_count += 1

        for child in children:
            if child._parent is not node:
                stats.parents_consistent = False
            if child.level != node.level + 1:
                stats.levels_consistent = False
            stack.append(child)

    stats.height_covers_levels = t.height >= stats.max_level
    return stats

def print_pretty(tree: TreeBase) -> None:
    """
    Prints the tree one level per line, nodes left to right in
    traversal order, all columns padded to the same width.
    """
    SEP = " | "

    layers = collections.defaultdict(list)  # level -> list of labels
    max_len = 0

    stack = [tree.root]
    while stack:
        node = stack.pop()
        label = node.id if node.id is not None else "-"
        layers[node.level].append(label)
        max_len = max(max_len, len(label))
        stack.extend(reversed(node.get_all_children()))

    column_width = max_len + 1
    for level in sorted(layers):
        line = SEP.join(label.center(column_width) for label in layers[level])
        print(f"Level {level}: {line}")
