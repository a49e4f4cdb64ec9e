from abc import ABC, abstractmethod
import re

from typing import Any, Callable, Iterable, List, NamedTuple, Optional, TypeVar, Generic, Union

ROOT_ID = "root"

# First character alphanumeric or underscore, then alphanumerics, '.', '_' or '-'
ID_PATTERN = re.compile(r"[a-zA-Z0-9_][a-zA-Z0-9._-]*")


class TreeError(Exception):
    """Base class for every error raised by fluent_trees."""
    pass

class InvalidIdentifierError(TreeError, ValueError):
    """Raised when a node id does not match ID_PATTERN."""
    pass

class NullIdentifierError(TreeError, ValueError):
    """Raised when a node id is required but None was given."""
    pass

class DuplicateIdentifierError(TreeError, ValueError):
    """Raised when a node id is already indexed by the tree."""
    pass

class NodeNotFoundError(TreeError, LookupError):
    """Raised when a tree-wide id lookup fails."""
    pass

class ChildNotFoundError(TreeError, LookupError):
    """Raised when an index or id does not resolve to a direct child."""
    pass

class DescendantNotFoundError(TreeError, LookupError):
    """Raised when an id does not resolve to a descendant of the calling node."""
    pass

class IndexOutOfRangeError(TreeError, IndexError):
    """Raised when an insertion position is outside the child sequence."""
    pass

class NoParentError(TreeError, LookupError):
    """Raised when a parent or sibling relation is requested but absent."""
    pass

class NullArgumentError(TreeError, TypeError):
    """Raised when a required collection or predicate argument is None."""
    pass


def validate_id(node_id: Optional[str]) -> str:
    """
    Check that `node_id` is a well-formed node identifier.

    Parameters:
        node_id (str): The identifier to check.

    Returns:
        str: The identifier, unchanged.

    Raises:
        NullIdentifierError: If node_id is None.
        InvalidIdentifierError: If node_id is not a string matching ID_PATTERN.
    """
    if node_id is None:
        raise NullIdentifierError("node id cannot be None")
    if not isinstance(node_id, str) or ID_PATTERN.fullmatch(node_id) is None:
        raise InvalidIdentifierError(f"invalid node id: {node_id!r}")
    return node_id


def is_valid_id(node_id: Optional[str]) -> bool:
    """Return True if `node_id` would pass validate_id()."""
    return isinstance(node_id, str) and ID_PATTERN.fullmatch(node_id) is not None


class NodeData(NamedTuple):
    """
    A single element of an add/insert batch.

    Attributes:
        id (Optional[str]): The unique id for the new node, or None.
        data (Any): The payload stored in the new node.
    """
    id: Optional[str]
    data: Any


Predicate = Callable[[Any], bool]
ChildKey = Union[int, str]

N = TypeVar("N", bound="AbstractTreeNode")


class AbstractTreeNode(ABC, Generic[N]):
    """
    Abstract base class for a node of an ordered n-ary tree.

    Nodes are created by add/insert operations on an attached node; all
    structural mutation and search is expressed as node operations.
    """

    @abstractmethod
    def add_children(self, items: Iterable[Any]) -> List[N]:
        """
        Append new child nodes built from `items`.

        Parameters:
            items (Iterable): NodeData entries or bare payloads.

        Returns:
            List[AbstractTreeNode]: The nodes that were created.
        """
        pass

    @abstractmethod
    def insert_children(self, position: int, items: Iterable[Any]) -> List[N]:
        """
        Insert new child nodes built from `items` at `position`.

        Returns:
            List[AbstractTreeNode]: The nodes that were created.
        """
        pass

    @abstractmethod
    def get_child(self, key: ChildKey) -> N:
        """Return the direct child at index `key` (int) or with id `key` (str)."""
        pass

    @abstractmethod
    def get_descendant(self, node_id: str) -> N:
        """Return the descendant with id `node_id`."""
        pass

    @abstractmethod
    def get_descendants(self, predicate: Predicate) -> List[N]:
        """Return every descendant whose data matches `predicate`."""
        pass

    @abstractmethod
    def remove_child(self, key: ChildKey) -> N:
        """Detach and return the direct child at index `key` or with id `key`."""
        pass

    @abstractmethod
    def remove_descendants(self, predicate: Predicate) -> List[N]:
        """Detach and return every descendant whose data matches `predicate`."""
        pass

    @abstractmethod
    def append_nodes(self, nodes: Iterable[N]) -> List[N]:
        """
        Reattach previously detached nodes as children of this node.

        Returns:
            List[AbstractTreeNode]: The nodes that were NOT appended.
        """
        pass
