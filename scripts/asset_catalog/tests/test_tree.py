"""
Tests for category tree construction.
"""

import unittest

from ..errors import DuplicateAssetKey, DuplicateIdentifier
from ..processing.tree import AssetLeaf, CategoryTree, SoundLeaf, build_tree


class TestBuildTree(unittest.TestCase):
    """Test building image trees from flat paths."""

    def setUp(self):
        self.paths = [
            "assets/ui/button.png",
            "assets/ui/icons/gear.png",
        ]

    def test_nested_shape(self):
        tree = build_tree("assets", self.paths)

        self.assertEqual(tree.shape(), {
            "ui": {
                "button": "assets/ui/button.png",
                "icons": {"gear": "assets/ui/icons/gear.png"},
            }
        })

    def test_branch_and_leaf_types(self):
        tree = build_tree("assets", self.paths)

        ui = tree.children["ui"]
        self.assertIsInstance(ui, CategoryTree)
        self.assertEqual(ui.children["button"], AssetLeaf("button", "assets/ui/button.png"))
        self.assertIsInstance(ui.children["icons"], CategoryTree)

    def test_input_order_does_not_change_shape(self):
        forward = build_tree("assets", self.paths + ["assets/bg.png"])
        backward = build_tree("assets", list(reversed(self.paths + ["assets/bg.png"])))

        self.assertEqual(forward.shape(), backward.shape())

    def test_keys_keep_insertion_order(self):
        tree = build_tree("assets", ["assets/b.png", "assets/a.png", "assets/c.png"])

        self.assertEqual(list(tree.children), ["b", "a", "c"])

    def test_root_level_files(self):
        tree = build_tree("assets", ["assets/logo.png"])

        self.assertEqual(tree.shape(), {"logo": "assets/logo.png"})

    def test_empty_input(self):
        tree = build_tree("assets", [])

        self.assertEqual(len(tree), 0)
        self.assertEqual(list(tree.leaves()), [])

    def test_leaves_report_categories(self):
        tree = build_tree("assets", self.paths)
        leaves = [(categories, leaf.key) for categories, leaf in tree.leaves()]

        self.assertEqual(leaves, [(("ui",), "button"), (("ui", "icons"), "gear")])

    def test_same_path_twice_is_not_a_conflict(self):
        tree = build_tree("assets", ["assets/ui/button.png", "assets/ui/button.png"])

        self.assertEqual(len(list(tree.leaves())), 1)


class TestDuplicateKeys(unittest.TestCase):
    """Test key collisions are reported rather than overwritten."""

    def test_same_stem_different_extension(self):
        with self.assertRaises(DuplicateAssetKey) as ctx:
            build_tree("assets", ["assets/ui/a.png", "assets/ui/a.jpeg"])

        self.assertEqual(ctx.exception.key, "a")
        self.assertIn("assets/ui/a.png", ctx.exception.paths)
        self.assertIn("assets/ui/a.jpeg", ctx.exception.paths)
        self.assertEqual(ctx.exception.category, "ui")

    def test_leaf_then_directory_with_same_name(self):
        with self.assertRaises(DuplicateAssetKey):
            build_tree("assets", ["assets/ui.png", "assets/ui/button.png"])

    def test_directory_then_leaf_with_same_name(self):
        with self.assertRaises(DuplicateAssetKey):
            build_tree("assets", ["assets/ui/button.png", "assets/ui.png"])

    def test_directories_with_same_category_name(self):
        with self.assertRaises(DuplicateIdentifier) as ctx:
            build_tree("assets", ["assets/ui-icons/a.png", "assets/uiIcons/b.png"])

        self.assertEqual(ctx.exception.identifier, "uiIcons")
        self.assertEqual(ctx.exception.paths, ["ui-icons", "uiIcons"])
        self.assertIsNone(ctx.exception.category)

    def test_nested_directories_with_same_category_name(self):
        with self.assertRaises(DuplicateIdentifier) as ctx:
            build_tree("assets", ["assets/ui/Big Buttons/ok.png", "assets/ui/big_buttons/cancel.png"])

        self.assertEqual(ctx.exception.paths, ["ui/Big Buttons", "ui/big_buttons"])
        self.assertEqual(ctx.exception.category, "ui")

    def test_same_directory_across_files_is_not_a_conflict(self):
        tree = build_tree("assets", ["assets/ui-icons/a.png", "assets\\ui-icons\\b.png"])

        self.assertEqual(list(tree.children["uiIcons"].children), ["a", "b"])


class TestSoundTree(unittest.TestCase):
    """Test sound trees merge siblings sharing a basename."""

    def test_extensions_are_grouped(self):
        tree = build_tree("assets", ["assets/sfx/jump.ogg", "assets/sfx/jump.mp3"], group_extensions=True)

        leaf = tree.children["sfx"].children["jump"]
        self.assertIsInstance(leaf, SoundLeaf)
        self.assertEqual(leaf.paths, ("assets/sfx/jump.ogg", "assets/sfx/jump.mp3"))

    def test_same_extension_twice_conflicts(self):
        with self.assertRaises(DuplicateAssetKey):
            build_tree("assets", ["assets/sfx/jump.ogg", "assets/sfx/jump.OGG"], group_extensions=True)


if __name__ == '__main__':
    unittest.main()
