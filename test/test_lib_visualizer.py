#!/usr/bin/env python3
"""Tests for vizlib/visualizer.py"""

import os
import xml.etree.ElementTree as ET
from typing import Any

import pytest

from vizlib.constants import LEGEND_WIDTH, LEGEND_X
from vizlib.file_utils import find_source_files
from vizlib.graph_utils import detect_circular_dependencies, parse_files_and_build_graph
from vizlib.hierarchy import HierarchyNode
from vizlib.layouts import Bounds
from vizlib.visualizer import VisualizerOptions, compute_label_offsets, generate_svg, screen_bounds


def analyze(root: str):
    graph = parse_files_and_build_graph(find_source_files(root), root)
    return graph, detect_circular_dependencies(graph)


class TestScreenBounds:
    """Tests for screen_bounds function."""

    def test_horizontal_swaps_axes(self) -> None:
        """Test the depth axis becomes screen x."""
        assert screen_bounds(Bounds(0, 10, 20, 50), "horizontal") == Bounds(20, 50, 0, 10)

    def test_vertical_keeps_axes(self) -> None:
        """Test vertical bounds are unchanged."""
        assert screen_bounds(Bounds(0, 10, 20, 50), "vertical") == Bounds(0, 10, 20, 50)


class TestComputeLabelOffsets:
    """Tests for compute_label_offsets function."""

    def test_colliding_labels_are_moved(self) -> None:
        """Test only the second of two stacked labels moves."""
        root = HierarchyNode(name="r", path="/r", is_directory=True, file_type="directory")
        first = root.add_child(HierarchyNode(name="a.js", path="/r/a.js", depth=1))
        second = root.add_child(HierarchyNode(name="b.js", path="/r/b.js", depth=1))
        offsets = compute_label_offsets(root, "horizontal")
        assert first.path not in offsets
        assert second.path in offsets
        assert offsets[second.path] != (0.0, 0.0)

    def test_separate_labels_stay(self) -> None:
        """Test distant labels are not moved."""
        root = HierarchyNode(name="r", path="/r", is_directory=True, file_type="directory")
        child = root.add_child(HierarchyNode(name="a.js", path="/r/a.js", depth=1))
        child.y = 300
        assert compute_label_offsets(root, "horizontal") == {}


class TestGenerateSvg:
    """Tests for generate_svg function."""

    def test_well_formed_document(self, acyclic_project: str) -> None:
        """Test the output parses and contains every node."""
        graph, cycles = analyze(acyclic_project)
        svg = ET.fromstring(generate_svg(graph, cycles, acyclic_project))
        assert svg.tag == "{http://www.w3.org/2000/svg}svg"
        text = ET.tostring(svg, encoding="unicode")
        for name in ("index.js", "math.js", "logger.js", "helpers.ts", "src", "lib", "utils"):
            assert f">{name}<" in text

    def test_dependency_links(self, acyclic_project: str) -> None:
        """Test one dependency path per import and no cycle links."""
        graph, cycles = analyze(acyclic_project)
        content = generate_svg(graph, cycles, acyclic_project)
        assert content.count('class="link dependency-link"') == 4
        assert "cycle-link" not in content.replace(".cycle-link", "")

    def test_cycle_links(self, circular_project: str) -> None:
        """Test both imports of the cycle are highlighted."""
        graph, cycles = analyze(circular_project)
        content = generate_svg(graph, cycles, circular_project)
        assert content.count('class="link dependency-link cycle-link"') == 2
        assert content.count('class="link dependency-link"') == 1

    def test_legend_widens_canvas(self, acyclic_project: str) -> None:
        """Test the legend sits beside the content."""
        graph, cycles = analyze(acyclic_project)
        with_legend = ET.fromstring(generate_svg(graph, cycles, acyclic_project, VisualizerOptions(legend=True)))
        without = ET.fromstring(generate_svg(graph, cycles, acyclic_project, VisualizerOptions(legend=False)))
        delta = float(with_legend.get("width")) - float(without.get("width"))
        assert delta == pytest.approx(LEGEND_WIDTH + LEGEND_X * 2, abs=0.05)
        assert 'class="legend"' not in ET.tostring(without, encoding="unicode")

    @pytest.mark.parametrize("layout", ["circular", "diagonal", "linear", "horizontal", "vertical", "tree", "grid"])
    @pytest.mark.parametrize("direction", ["horizontal", "vertical"])
    def test_every_layout_and_direction(self, acyclic_project: str, layout: str, direction: str) -> None:
        """Test every layout renders in both directions."""
        graph, cycles = analyze(acyclic_project)
        options = VisualizerOptions(layout=layout, direction=direction, theme="dark")
        svg = ET.fromstring(generate_svg(graph, cycles, acyclic_project, options))
        assert float(svg.get("width")) > 0
        assert float(svg.get("height")) > 0

    def test_crop_is_logged(self, acyclic_project: str, caplog: Any) -> None:
        """Test the cropped size is reported."""
        graph, cycles = analyze(acyclic_project)
        with caplog.at_level("INFO"):
            generate_svg(graph, cycles, acyclic_project, VisualizerOptions(layout="grid"))
        assert "SVG cropped:" in caplog.text
        assert "layout: grid" in caplog.text

    def test_theme_styles(self, acyclic_project: str) -> None:
        """Test the chosen theme is embedded."""
        graph, cycles = analyze(acyclic_project)
        assert "prefers-color-scheme" in generate_svg(graph, cycles, acyclic_project)
        assert "prefers-color-scheme" not in generate_svg(graph, cycles, acyclic_project, VisualizerOptions(theme="light"))

    def test_label_adjustment_can_be_disabled(self, acyclic_project: str) -> None:
        """Test rendering without label adjustment."""
        graph, cycles = analyze(acyclic_project)
        content = generate_svg(graph, cycles, acyclic_project, VisualizerOptions(adjust_labels=False))
        assert content.startswith("<svg")
