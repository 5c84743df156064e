import unittest

from sku_drilldown.drill_path import DrillPath


class DrillPathTests(unittest.TestCase):

    def test_descend_then_ascend(self):
        path = DrillPath().descend("A").descend("B").ascend()
        self.assertEqual(path.values, ("A",))

    def test_reset_to_depth_zero_from_any_path(self):
        for values in [(), ("A",), ("A", "B"), ("A", "B", "C")]:
            self.assertEqual(DrillPath(values).reset_to_depth(0).values, ())

    def test_breadcrumb_jump(self):
        path = DrillPath(("A", "B", "C"))
        self.assertEqual(path.reset_to_depth(1).values, ("A",))
        self.assertEqual(path.breadcrumbs(), ["All Categories", "A", "B", "C"])

    def test_group_field_per_depth(self):
        self.assertEqual(DrillPath().group_field, "category")
        self.assertEqual(DrillPath(("A",)).group_field, "sub_category")
        self.assertEqual(DrillPath(("A", "B")).group_field, "item")
        self.assertIsNone(DrillPath(("A", "B", "C")).group_field)

    def test_descend_into_leaf(self):
        path = DrillPath(("A", "B")).descend("C")
        self.assertTrue(path.is_leaf)
        self.assertIs(path.descend("D"), path)

    def test_ascend_at_root_is_ignored(self):
        root = DrillPath()
        self.assertIs(root.ascend(), root)
        self.assertTrue(root.is_root)

    def test_reset_to_root(self):
        self.assertEqual(DrillPath(("A", "B")).reset_to_root(), DrillPath())

    def test_transitions_do_not_mutate(self):
        path = DrillPath(("A",))
        path.descend("B")
        path.ascend()
        self.assertEqual(path.values, ("A",))

    def test_invalid_depths(self):
        with self.assertRaises(ValueError):
            DrillPath(("A",)).reset_to_depth(2)
        with self.assertRaises(ValueError):
            DrillPath(("A",)).reset_to_depth(-1)
        with self.assertRaises(ValueError):
            DrillPath(("A", "B", "C", "D"))


if __name__ == "__main__":
    unittest.main()
