#!/usr/bin/env python3
"""Tests for vizlib/hierarchy.py"""

import os

from vizlib.constants import SVG_DEFAULT_WIDTH, SVG_MARGIN
from vizlib.hierarchy import HierarchyNode, build_hierarchical_structure, calculate_svg_dimensions


def build(root: str, *rel_paths: str):
    return build_hierarchical_structure([os.path.join(root, *p.split("/")) for p in rel_paths], root)


class TestBuildHierarchicalStructure:
    """Tests for build_hierarchical_structure function."""

    def test_root_node(self) -> None:
        """Test the root is a directory named after the analyzed folder."""
        root, max_depth = build(os.path.join(os.sep, "work", "app"), "index.js")
        assert root.name == "app"
        assert root.is_directory
        assert root.file_type == "directory"
        assert root.depth == 0
        assert max_depth == 1

    def test_shared_directories(self) -> None:
        """Test files in the same folder share one directory node."""
        base = os.path.join(os.sep, "work", "app")
        root, max_depth = build(base, "src/a.js", "src/b.ts", "src/util/c.js", "main.js")
        assert [child.name for child in root.children] == ["src", "main.js"]
        src = root.children[0]
        assert [child.name for child in src.children] == ["a.js", "b.ts", "util"]
        assert src.is_directory
        assert src.path == os.path.join(base, "src")
        assert max_depth == 3

    def test_file_nodes(self) -> None:
        """Test file nodes get a type, depth and parent."""
        base = os.path.join(os.sep, "work", "app")
        root, _ = build(base, "src/util/c.js")
        leaf = root.children[0].children[0].children[0]
        assert leaf.name == "c.js"
        assert not leaf.is_directory
        assert leaf.file_type == "script"
        assert leaf.depth == 3
        assert leaf.parent is root.children[0].children[0]

    def test_undecodable_name_is_displayable(self) -> None:
        """Test surrogate-escaped file names get a printable label but keep their path."""
        base = os.path.join(os.sep, "work", "app")
        root, _ = build(base, "src/\udcff.js")
        leaf = root.children[0].children[0]
        assert leaf.name == "\ufffd.js"
        assert leaf.path == os.path.join(base, "src", "\udcff.js")

    def test_empty(self) -> None:
        """Test no files yields a lone root."""
        root, max_depth = build_hierarchical_structure([], os.sep + "x")
        assert root.children == []
        assert max_depth == 0


class TestHierarchyNode:
    """Tests for HierarchyNode traversal helpers."""

    def test_descendants_breadth_first(self) -> None:
        """Test breadth-first order with the node itself first."""
        base = os.path.join(os.sep, "w")
        root, _ = build(base, "a/x.js", "b.js")
        assert [node.name for node in root.descendants()] == ["w", "a", "b.js", "x.js"]

    def test_leaves_links_height(self) -> None:
        """Test leaves, parent/child links and height."""
        base = os.path.join(os.sep, "w")
        root, _ = build(base, "a/x.js", "b.js")
        assert [leaf.name for leaf in root.leaves()] == ["b.js", "x.js"]
        assert [(p.name, c.name) for p, c in root.links()] == [("w", "a"), ("w", "b.js"), ("a", "x.js")]
        assert root.height == 2
        assert root.has_children
        assert not root.leaves()[0].has_children

    def test_add_child_sets_parent(self) -> None:
        """Test add_child links both directions."""
        parent = HierarchyNode(name="p", path="/p", is_directory=True)
        child = parent.add_child(HierarchyNode(name="c.js", path="/p/c.js"))
        assert child.parent is parent
        assert parent.children == [child]


class TestCalculateSvgDimensions:
    """Tests for calculate_svg_dimensions function."""

    def test_default_canvas(self) -> None:
        """Test width, aspect ratio and margins."""
        dims = calculate_svg_dimensions(3, 16 / 9, SVG_MARGIN, SVG_DEFAULT_WIDTH)
        assert dims.width == 1800
        assert dims.height == 1800 / (16 / 9)
        assert dims.content_width == 1800 - 150 - 350
        assert dims.content_height == dims.height - 240
