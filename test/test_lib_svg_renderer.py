#!/usr/bin/env python3
"""Tests for vizlib/svg_renderer.py"""

import os
import xml.etree.ElementTree as ET

import pytest

from vizlib.constants import DIRECTORY_COLOR_PALETTE, SHAPE_LEGEND, RenderError
from vizlib.graph_utils import DependencyLink
from vizlib.hierarchy import HierarchyNode, build_hierarchical_structure
from vizlib.svg_renderer import (
    build_svg_styles,
    create_base_svg,
    dependency_link_path,
    fmt,
    legend_height,
    render_dependency_links,
    render_legend,
    render_node_shape,
    render_nodes,
    render_shape_for_legend,
    render_structural_links,
    serialize_svg,
    structural_link_path,
    to_screen,
)

BASE = os.path.join(os.sep, "w")


def positioned_tree():
    root, _ = build_hierarchical_structure([os.path.join(BASE, "src", "a.js"), os.path.join(BASE, "src", "b.css")], BASE)
    for i, node in enumerate(root.descendants()):
        node.x = i * 10.0
        node.y = node.depth * 100.0
    return root


def node(x: float, y: float, file_type: str = "script") -> HierarchyNode:
    return HierarchyNode(name="n", path=f"/n{x}{y}", file_type=file_type, x=x, y=y)


class TestFormatting:
    """Tests for fmt and to_screen."""

    @pytest.mark.parametrize("value,expected", [(1.0, "1"), (1.5, "1.5"), (1.234, "1.23"), (-0.001, "0"), (100, "100")])
    def test_fmt(self, value: float, expected: str) -> None:
        """Test compact number formatting."""
        assert fmt(value) == expected

    def test_to_screen(self) -> None:
        """Test horizontal graphs swap the axes."""
        n = node(1, 2)
        assert to_screen(n, "horizontal") == (2, 1)
        assert to_screen(n, "vertical") == (1, 2)


class TestBaseSvg:
    """Tests for create_base_svg and build_svg_styles."""

    def test_attributes(self) -> None:
        """Test size, viewBox and namespace."""
        svg = create_base_svg(800, 600.5)
        assert svg.get("width") == "800"
        assert svg.get("height") == "600.5"
        assert svg.get("viewBox") == "0 0 800 600.5"
        assert svg.get("xmlns") == "http://www.w3.org/2000/svg"
        assert svg.find("defs/style") is not None

    def test_invalid_size(self) -> None:
        """Test non-positive sizes are rejected."""
        with pytest.raises(RenderError):
            create_base_svg(0, 100)

    def test_fixed_themes(self) -> None:
        """Test light and dark themes pin their variables."""
        light = build_svg_styles("light")
        dark = build_svg_styles("dark")
        assert "#f7fafc" in light and "prefers-color-scheme" not in light
        assert "#1a1f36" in dark and "prefers-color-scheme" not in dark

    def test_auto_theme(self) -> None:
        """Test auto theme follows the system preference."""
        css = build_svg_styles("auto")
        assert "@media (prefers-color-scheme: dark)" in css
        assert ".dependency-link" in css


class TestLinkPaths:
    """Tests for link path generation."""

    def test_structural_horizontal(self) -> None:
        """Test the curve bends around the horizontal midpoint."""
        assert structural_link_path(node(0, 0), node(50, 100), "horizontal") == "M0,0C50,0,50,50,100,50"

    def test_structural_vertical(self) -> None:
        """Test the curve bends around the vertical midpoint."""
        assert structural_link_path(node(0, 0), node(50, 100), "vertical") == "M0,0C0,50,50,50,50,100"

    def test_dependency_curve_intensity_is_capped(self) -> None:
        """Test control points move at most the curve offset."""
        path = dependency_link_path(node(0, 0), node(0, 1000), "horizontal")
        assert path == "M0,0C120,0,880,0,1000,0"

    def test_dependency_short_link(self) -> None:
        """Test short links bend by a quarter of their length."""
        path = dependency_link_path(node(0, 0), node(0, 100), "vertical")
        assert path == "M0,0C0,25,0,75,0,100"


class TestRenderLinks:
    """Tests for render_structural_links and render_dependency_links."""

    def test_structural_links(self) -> None:
        """Test one path per parent/child pair."""
        group = ET.Element("g")
        assert render_structural_links(group, positioned_tree()) == 3
        assert all(path.get("class") == "link" for path in group.findall("path"))

    def test_dependency_links(self) -> None:
        """Test cycle highlighting, colors and missing endpoints."""
        root = positioned_tree()
        by_path = {n.path: n for n in root.descendants()}
        a = os.path.join(BASE, "src", "a.js")
        b = os.path.join(BASE, "src", "b.css")
        links = [DependencyLink(a, b), DependencyLink(b, a), DependencyLink(a, "/elsewhere.js")]
        group = ET.Element("g")

        count = render_dependency_links(group, links, {(b, a)}, by_path, lambda n: "#123456")
        paths = group.findall("path")
        assert count == 3
        assert paths[0].get("class") == "link dependency-link"
        assert paths[0].get("stroke") == "#123456"
        assert paths[0].get("stroke-width") == "2"
        assert paths[1].get("class") == "link dependency-link cycle-link"
        assert paths[1].get("stroke-width") == "3"
        assert paths[2].get("d") == ""
        assert paths[2].get("stroke") == "var(--dependency-stroke)"


class TestRenderNodes:
    """Tests for node shapes and node groups."""

    @pytest.mark.parametrize(
        "file_type,tag",
        [("directory", "circle"), ("style", "rect"), ("script", "path"), ("image", "path"), ("multimedia", "path"), ("default", "path")],
    )
    def test_shape_per_type(self, file_type: str, tag: str) -> None:
        """Test the element used for each file type."""
        parent = ET.Element("g")
        shape = render_node_shape(parent, node(0, 0, file_type), "#fff")
        assert shape.tag == tag
        assert shape.get("class") == f"node-shape shape-{file_type}"
        assert shape.get("fill") == "#fff"

    def test_render_nodes(self) -> None:
        """Test groups, positions and label anchors."""
        root = positioned_tree()
        group = ET.Element("g")
        count = render_nodes(group, root, lambda n: "#abc", "horizontal")
        nodes = group.findall("g")
        assert count == 4
        assert nodes[0].get("class") == "node node--directory"
        assert nodes[1].get("transform") == "translate(100,10)"
        assert nodes[0].find("text").get("text-anchor") == "end"
        assert nodes[3].find("text").get("text-anchor") == "start"
        assert nodes[3].find("text").text == "b.css"
        assert "--color: #abc" in nodes[0].get("style")

    def test_label_offsets(self) -> None:
        """Test label displacement."""
        root = positioned_tree()
        leaf = root.descendants()[-1]
        group = ET.Element("g")
        render_nodes(group, root, lambda n: "#abc", "horizontal", {leaf.path: (5.0, -7.0)})
        text = group.findall("g")[-1].find("text")
        assert text.get("x") == "17"
        assert text.get("y") == "-7"


class TestLegend:
    """Tests for the legend."""

    def test_height(self) -> None:
        """Test legend height grows with the directory count."""
        assert legend_height(2) == (2 + len(SHAPE_LEGEND) + 2) * 25 + 40

    def test_render_legend(self) -> None:
        """Test titles, directory swatches and shape entries."""
        svg = create_base_svg(100, 100)
        legend = render_legend(svg, 10, 20, ["src", "lib"], {"src": "core", "lib": "data", "default": "default"})
        assert legend.get("transform") == "translate(10,20)"
        titles = [t.text for t in legend.findall("text")]
        assert titles == ["Directory Colors", "File Type Shapes"]
        items = legend.findall("g")
        assert len(items) == 2 + len(SHAPE_LEGEND)
        assert items[0].find("rect").get("fill") == DIRECTORY_COLOR_PALETTE["core"]
        assert items[0].find("text").text == "src"

    def test_legend_shapes_are_scaled(self) -> None:
        """Test legend shapes are 60 % of node size."""
        parent = ET.Element("g")
        assert render_shape_for_legend(parent, "directory", "#000").get("r") == "4.8"
        assert render_shape_for_legend(parent, "script", "#000").get("transform") == "scale(0.6)"


class TestSerialize:
    """Tests for serialize_svg."""

    def test_round_trip_parses(self) -> None:
        """Test the output is well-formed XML."""
        svg = create_base_svg(10, 10)
        text = serialize_svg(svg)
        assert text.startswith("<svg")
        assert ET.fromstring(text).get("width") == "10"
