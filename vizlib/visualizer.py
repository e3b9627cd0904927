#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""SVG generation for a dependency graph.

Turns the flat file graph into a directory hierarchy, positions it with the
requested layout, crops the canvas to the content, separates overlapping
labels and renders links, nodes and the legend.
"""

import os
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from vizlib.constants import (
    CROP_PADDING,
    DEFAULT_DIRECTION,
    DEFAULT_LAYOUT,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_THEME,
    DIRECTION_HORIZONTAL,
    LABEL_ADJUST_NODE_LIMIT,
    LEGEND_WIDTH,
    LEGEND_X,
    LEGEND_Y,
    SVG_ASPECT_RATIO,
    SVG_DEFAULT_WIDTH,
    SVG_MARGIN,
    SVG_NODE_OFFSET,
    generate_directory_color_map,
)
from vizlib.dimension_store import create_dimension_store
from vizlib.file_utils import extract_second_level_directories, get_color_by_depth
from vizlib.graph_utils import DependencyLink, create_dependency_links, get_cycle_edges
from vizlib.hierarchy import HierarchyNode, build_hierarchical_structure, calculate_svg_dimensions
from vizlib.layouts import Bounds, node_extent, position_nodes
from vizlib.svg_renderer import (
    create_base_svg,
    fmt,
    legend_height,
    render_dependency_links,
    render_legend,
    render_nodes,
    render_structural_links,
    serialize_svg,
    to_screen,
)

logger = logging.getLogger(__name__)

# Approximate glyph width of the 12px label font
LABEL_CHAR_WIDTH = 7


@dataclass
class VisualizerOptions:
    """Options controlling analysis and rendering.

    Attributes:
        output: Output SVG file name
        depth: Maximum directory depth to scan (None = unlimited)
        hidden: Include hidden files and default-ignored directories
        layout: Layout algorithm name
        direction: "horizontal" (depth grows to the right) or "vertical"
        theme: "auto", "light" or "dark"
        exclude: Glob patterns of files to leave out
        export: Optional graph export file (.graphml, .gexf, .json, .dot)
        legend: Render the legend
        adjust_labels: Separate overlapping labels
        output_dir: Directory all output files are written to
        show_summary: Print graph statistics
        show_progress: Animate a spinner while analyzing
    """

    output: str = DEFAULT_OUTPUT_FILE
    depth: Optional[int] = None
    hidden: bool = False
    layout: str = DEFAULT_LAYOUT
    direction: str = DEFAULT_DIRECTION
    theme: str = DEFAULT_THEME
    exclude: List[str] = field(default_factory=list)
    export: Optional[str] = None
    legend: bool = True
    adjust_labels: bool = True
    output_dir: str = DEFAULT_OUTPUT_DIR
    show_summary: bool = False
    show_progress: bool = True


def screen_bounds(bounds: Bounds, direction: str) -> Bounds:
    """Layout bounds expressed in screen axes."""
    if direction == DIRECTION_HORIZONTAL:
        return Bounds(bounds.min_y, bounds.max_y, bounds.min_x, bounds.max_x)
    return bounds


def compute_label_offsets(root: HierarchyNode, direction: str) -> Dict[str, Tuple[float, float]]:
    """Nudge labels that would collide with other labels.

    Each label is registered as a text element at its approximate centre; the
    dimension store moves colliding ones. The returned offsets are the screen
    displacement of every moved label.
    """
    store = create_dimension_store()
    original: Dict[str, Tuple[float, float]] = {}

    for node in root.descendants():
        x, y = to_screen(node, direction)
        half_width = len(node.name) * LABEL_CHAR_WIDTH / 2
        cx = x - SVG_NODE_OFFSET - half_width if node.has_children else x + SVG_NODE_OFFSET + half_width
        original[node.path] = (cx, y)
        store.set_node_dimensions(
            node.path,
            {"x": cx, "y": y, "width": half_width * 2, "height": 14, "text_content": node.name, "is_label": True},
        )

    offsets: Dict[str, Tuple[float, float]] = {}
    for path, (ox, oy) in original.items():
        placed = store.get_node_dimensions(path)
        if placed is not None and (placed.x != ox or placed.y != oy):
            offsets[path] = (placed.x - ox, placed.y - oy)

    logger.debug("Moved %s of %s labels to avoid overlaps", len(offsets), len(original))
    return offsets


def generate_svg(graph: Any, cycles: List[List[str]], root_dir: str, options: Optional[VisualizerOptions] = None) -> str:
    """Render the dependency graph as a standalone SVG document.

    Args:
        graph: NetworkX DiGraph of analyzed files
        cycles: Detected circular dependencies
        root_dir: Absolute root directory of the analysis
        options: Rendering options (layout, direction, theme, legend)

    Returns:
        Serialized SVG
    """
    if options is None:
        options = VisualizerOptions()

    files = list(graph.nodes())
    directories = extract_second_level_directories(files, root_dir)
    directory_color_map = generate_directory_color_map(directories)

    root, max_depth = build_hierarchical_structure(files, root_dir)
    dimensions = calculate_svg_dimensions(max_depth, SVG_ASPECT_RATIO, SVG_MARGIN, SVG_DEFAULT_WIDTH)

    layout_bounds = position_nodes(root, max_depth, dimensions.content_width, options.layout)
    # Consolidated bounds may cut into the node extent; keep every node on the canvas
    content = screen_bounds(layout_bounds.union(node_extent(root)), options.direction)

    cropped_width = content.width + CROP_PADDING * 2
    cropped_height = content.height + CROP_PADDING * 2
    logger.info("SVG cropped: %dx%d (layout: %s)", round(cropped_width), round(cropped_height), options.layout)

    total_width = cropped_width
    total_height = cropped_height
    if options.legend:
        total_width += LEGEND_WIDTH + LEGEND_X * 2
        total_height = max(total_height, LEGEND_Y + legend_height(len(directories)) + CROP_PADDING)

    label_offsets: Dict[str, Tuple[float, float]] = {}
    node_count = len(root.descendants())
    if options.adjust_labels and node_count <= LABEL_ADJUST_NODE_LIMIT:
        label_offsets = compute_label_offsets(root, options.direction)
    elif options.adjust_labels:
        logger.debug("Skipping label adjustment for %s nodes", node_count)

    def color_for(node: HierarchyNode) -> str:
        return get_color_by_depth(node.depth, max_depth, node.file_type, node.path, root_dir, directory_color_map)

    svg = create_base_svg(total_width, total_height, options.theme)
    group = ET.SubElement(
        svg, "g", {"transform": f"translate({fmt(-content.min_x + CROP_PADDING)},{fmt(-content.min_y + CROP_PADDING)})"}
    )

    render_structural_links(group, root, options.direction)

    nodes_by_path = {os.path.normpath(node.path): node for node in root.descendants()}
    links = create_dependency_links(graph)
    render_dependency_links(
        group,
        [DependencyLink(os.path.normpath(link.source), os.path.normpath(link.target)) for link in links],
        {(os.path.normpath(a), os.path.normpath(b)) for a, b in get_cycle_edges(cycles)},
        nodes_by_path,
        color_for,
        options.direction,
    )

    render_nodes(group, root, color_for, options.direction, label_offsets)

    if options.legend:
        render_legend(svg, cropped_width + LEGEND_X, LEGEND_Y, directories, directory_color_map)

    return serialize_svg(svg)
