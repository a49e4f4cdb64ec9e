"""Tests for child and descendant lookup"""
# pylint: skip-file

import unittest
import logging

from fluent_trees.base import (
    NodeData,
    ChildNotFoundError,
    DescendantNotFoundError,
    InvalidIdentifierError,
    NullArgumentError,
    NullIdentifierError,
)
from tests.tree.base import TreeTestCase

# Configure logging for test
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class TestChildLookup(TreeTestCase):

    def setUp(self):
        super().setUp()
        self._build_sample_tree()

    def test_get_child_by_index_and_id(self):
        self.assertIs(self.root.get_child(0), self.a)
        self.assertIs(self.root.get_child(2), self.c)
        self.assertIs(self.root.get_child("b"), self.b)

    def test_get_child_is_not_recursive(self):
        with self.assertRaises(ChildNotFoundError):
            self.root.get_child("a21")
        self.assertFalse(self.root.has_child("a21"))

    def test_has_child(self):
        self.assertTrue(self.root.has_child(0))
        self.assertTrue(self.root.has_child("c"))
        self.assertFalse(self.root.has_child(3))
        self.assertFalse(self.root.has_child(-1))
        self.assertFalse(self.c.has_child(0))

    def test_has_child_validates_id(self):
        with self.assertRaises(InvalidIdentifierError):
            self.root.has_child(".a")
        with self.assertRaises(NullIdentifierError):
            self.root.has_child(None)

    def test_get_children(self):
        children = self.root.get_children(lambda data: data != "B")
        self.assertEqual(self._ids(children), ["a", "c"])
        self.assertEqual(self.root.get_children(lambda data: data == "A1"), [])
        self.assertEqual(self.c.get_children(lambda data: True), [])

    def test_get_all_children_is_a_copy(self):
        children = self.root.get_all_children()
        children.pop()
        self.assertEqual(self.root.child_count, 3)

    def test_get_children_none_predicate(self):
        with self.assertRaises(NullArgumentError):
            self.root.get_children(None)


class TestDescendantSearch(TreeTestCase):

    def setUp(self):
        super().setUp()
        self._build_sample_tree()

    def test_visiting_order(self):
        # children of a node are gathered before descending into any of them
        self.assertEqual(
            self._ids(self.root.get_all_descendants()),
            ["a", "b", "c", "a1", "a2", "a21", "b1"]
        )
        self.assertEqual(
            self._ids(self.root.iter_descendants()),
            ["a", "b", "c", "a1", "a2", "a21", "b1"]
        )

    def test_visiting_order_deeper_siblings(self):
        a11, = self.a1.add_children([NodeData("a11", "A11")])
        self.a2.add_children([NodeData("a22", "A22")])
        self.assertEqual(
            self._ids(self.a.get_all_descendants()),
            ["a1", "a2", "a11", "a21", "a22"]
        )
        self.expected_node_count = 10

    def test_excludes_self(self):
        self.assertNotIn(self.a, self.a.get_descendants(lambda data: data.startswith("A")))

    def test_predicate(self):
        found = self.root.get_descendants(lambda data: data.endswith("1"))
        self.assertEqual(self._ids(found), ["a1", "a21", "b1"])

    def test_no_match(self):
        self.assertEqual(self.root.get_descendants(lambda data: False), [])
        self.assertEqual(self.c.get_all_descendants(), [])

    def test_every_descendant_once(self):
        descendants = self.root.get_all_descendants()
        self.assertEqual(len(descendants), len({id(node) for node in descendants}))
        self.assertEqual(len(descendants), 7)

    def test_none_predicate(self):
        with self.assertRaises(NullArgumentError):
            self.root.get_descendants(None)

    def test_deep_chain(self):
        node = self.c
        for i in range(3000):
            node, = node.add_children([i])
        self.assertEqual(len(self.c.get_all_descendants()), 3000)
        self.assertEqual(self.tree.height, 3001)

    def test_detach_while_iterating(self):
        seen = []
        for node in self.root.iter_descendants():
            seen.append(node.id)
            node.remove()
        self.assertEqual(seen, ["a", "b", "c", "a1", "a2", "a21", "b1"])
        self.assertEqual(self.root.child_count, 0)
        self.assertEqual(self.a.child_count, 0)
        self.expected_node_count = 1


class TestGetDescendant(TreeTestCase):

    def setUp(self):
        super().setUp()
        self._build_sample_tree()

    def test_found_at_any_depth(self):
        self.assertIs(self.root.get_descendant("a21"), self.a21)
        self.assertIs(self.a.get_descendant("a21"), self.a21)
        self.assertIs(self.a2.get_descendant("a21"), self.a21)
        self.assertTrue(self.root.has_descendant("b1"))

    def test_indexed_elsewhere(self):
        with self.assertRaises(DescendantNotFoundError):
            self.a.get_descendant("b1")
        self.assertFalse(self.b.has_descendant("a21"))

    def test_self_and_ancestors_are_not_descendants(self):
        self.assertFalse(self.a.has_descendant("a"))
        self.assertFalse(self.a2.has_descendant("a"))
        self.assertFalse(self.a.has_descendant("root"))

    def test_sibling_at_same_level(self):
        self.assertFalse(self.a1.has_descendant("a2"))

    def test_unknown_id(self):
        with self.assertRaises(DescendantNotFoundError):
            self.root.get_descendant("zzz")
        self.assertFalse(self.root.has_descendant("zzz"))

    def test_invalid_id_is_not_swallowed(self):
        with self.assertRaises(InvalidIdentifierError):
            self.root.has_descendant("no good")
        with self.assertRaises(NullIdentifierError):
            self.root.get_descendant(None)


class TestDetachedSubtreeSearch(TreeTestCase):
    """root -> c -> (d, e), searched before and after c is detached"""

    def setUp(self):
        super().setUp()
        self.c, = self.root.add_children([NodeData("c", "c")])
        self.d, self.e = self.c.add_children([NodeData("node.d", "d"), NodeData("node.e", "e")])

    def test_scenario(self):
        self.assertEqual(self.c.get_descendants(lambda data: data == "d"), [self.d])
        self.assertIs(self.root.get_descendant("node.e"), self.e)

        self.root.remove_child("c")

        with self.assertRaises(DescendantNotFoundError):
            self.root.get_descendant("node.e")
        self.expected_node_count = 1

    def test_detached_subtree_still_searchable(self):
        self.root.remove_child("c")
        self.assertIs(self.c.get_descendant("node.e"), self.e)
        self.assertEqual(self.c.get_all_descendants(), [self.d, self.e])


if __name__ == "__main__":
    unittest.main()
