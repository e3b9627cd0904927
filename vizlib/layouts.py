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
"""Node positioning algorithms for the hierarchy.

Every layout writes ``x`` (breadth axis) and ``y`` (depth axis) on each
HierarchyNode and returns the padded content bounds. The renderer maps the two
axes to screen coordinates according to the requested direction.
"""

import math
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import numpy as np

from vizlib.constants import (
    AUTO_CIRCULAR_MIN_DEPTH,
    AUTO_HORIZONTAL_ASPECT,
    AUTO_TREE_MAX_NODES,
    LAYOUT_AUTO,
    SVG_NODE_RADIUS,
)
from vizlib.hierarchy import HierarchyNode

logger = logging.getLogger(__name__)

# Whitespace consolidation thresholds for calculate_optimal_bounds()
MIN_DENSITY = 0.001
TARGET_DENSITY = MIN_DENSITY * 1.5
MIN_CONSOLIDATION_AREA = 10000
MIN_CONSOLIDATION_FACTOR = 0.7
FINAL_PADDING = 30


@dataclass
class Bounds:
    """Axis-aligned box in layout coordinates."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def union(self, other: "Bounds") -> "Bounds":
        return Bounds(
            min(self.min_x, other.min_x),
            max(self.max_x, other.max_x),
            min(self.min_y, other.min_y),
            max(self.max_y, other.max_y),
        )


def node_extent(root: Optional[HierarchyNode], buffer: float = SVG_NODE_RADIUS * 2) -> Bounds:
    """Raw box around every node position, grown by ``buffer``."""
    if root is None:
        return Bounds(0, 100, 0, 100)
    coords = np.array([(node.x, node.y) for node in root.descendants()], dtype=float)
    return Bounds(
        float(coords[:, 0].min()) - buffer,
        float(coords[:, 0].max()) + buffer,
        float(coords[:, 1].min()) - buffer,
        float(coords[:, 1].max()) + buffer,
    )


def calculate_optimal_bounds(root: Optional[HierarchyNode]) -> Bounds:
    """Compute content bounds with whitespace consolidation.

    Bounds start as the node extent plus two node radii. Sparse layouts
    (density below 0.001 nodes/px² over more than 10 000 px²) are shrunk
    around their centre towards 1.5x that density, by at most 30 %. A fixed
    30 px padding is added last.

    Args:
        root: Positioned hierarchy root (None yields a 100x100 box)

    Returns:
        Bounds
    """
    if root is None:
        return Bounds(0, 100, 0, 100)

    bounds = node_extent(root)
    node_count = len(root.descendants())
    area = bounds.width * bounds.height

    if area > MIN_CONSOLIDATION_AREA and node_count / area < MIN_DENSITY:
        scale = math.sqrt((node_count / TARGET_DENSITY) / area)
        factor = max(MIN_CONSOLIDATION_FACTOR, min(1.0, scale))
        center = np.array([(bounds.min_x + bounds.max_x) / 2, (bounds.min_y + bounds.max_y) / 2])
        half = np.array([bounds.width, bounds.height]) * factor / 2
        bounds = Bounds(center[0] - half[0], center[0] + half[0], center[1] - half[1], center[1] + half[1])
        logger.debug("Consolidated sparse layout bounds by factor %.2f", factor)

    return Bounds(
        bounds.min_x - FINAL_PADDING,
        bounds.max_x + FINAL_PADDING,
        bounds.min_y - FINAL_PADDING,
        bounds.max_y + FINAL_PADDING,
    )


def _nodes_by_level(root: HierarchyNode) -> "OrderedDict[int, List[HierarchyNode]]":
    levels: "OrderedDict[int, List[HierarchyNode]]" = OrderedDict()
    for node in root.descendants():
        levels.setdefault(node.depth, []).append(node)
    return levels


def layout_auto(root: HierarchyNode, max_depth: int, content_width: float) -> Bounds:
    """Pick a layout from the tree size and shape."""
    total_nodes = len(root.descendants())
    aspect_ratio = content_width / (max(max_depth, 1) * 100)

    if total_nodes <= AUTO_TREE_MAX_NODES:
        chosen = "tree"
    elif aspect_ratio > AUTO_HORIZONTAL_ASPECT:
        chosen = "horizontal"
    elif max_depth > AUTO_CIRCULAR_MIN_DEPTH:
        chosen = "circular"
    else:
        chosen = "diagonal"

    logger.debug("Auto layout selected '%s' (%s nodes, max depth %s)", chosen, total_nodes, max_depth)
    return LAYOUT_ALGORITHMS[chosen](root, max_depth, content_width)


def layout_circular(root: HierarchyNode, max_depth: int, content_width: float) -> Bounds:
    """Concentric half-circles, one per depth level."""
    level_width = max(content_width / max(max_depth, 1), 200)

    for level, nodes in _nodes_by_level(root).items():
        base_y = level * level_width
        if len(nodes) == 1:
            nodes[0].x = 0.0
            nodes[0].y = base_y
            continue

        radius = max(120, len(nodes) * 20)
        angle_step = math.pi / (len(nodes) - 1)
        for i, node in enumerate(nodes):
            angle = -math.pi / 2 + i * angle_step
            node.x = radius * math.sin(angle)
            node.y = base_y + radius * (0.4 + 0.6 * abs(math.cos(angle)))

    return calculate_optimal_bounds(root)


def layout_diagonal(root: HierarchyNode, max_depth: int, content_width: float) -> Bounds:
    """Staggered positions, each level indented further."""
    for level, nodes in _nodes_by_level(root).items():
        for i, node in enumerate(nodes):
            node.x = level * 60 + i * 40
            node.y = level * 80 + i * 30

    return calculate_optimal_bounds(root)


def layout_linear(root: HierarchyNode, max_depth: int, content_width: float) -> Bounds:
    """Breadth-first index along one axis, depth along the other."""
    for i, node in enumerate(root.descendants()):
        node.x = i * 40
        node.y = node.depth * 100

    return calculate_optimal_bounds(root)


def layout_horizontal(root: HierarchyNode, max_depth: int, content_width: float) -> Bounds:
    """Depth bands spread over the content width, nodes centred in each band."""
    level_width = content_width / max(max_depth, 1)
    spacing = 60

    for level, nodes in _nodes_by_level(root).items():
        for i, node in enumerate(nodes):
            node.y = level * level_width
            node.x = i * spacing - (len(nodes) - 1) * spacing / 2

    return calculate_optimal_bounds(root)


def layout_vertical(root: HierarchyNode, max_depth: int, content_width: float) -> Bounds:
    """Fixed 80 px level steps, nodes centred with 50 px spacing."""
    spacing = 50
    current_y = 0.0

    for nodes in _nodes_by_level(root).values():
        for i, node in enumerate(nodes):
            node.x = i * spacing - (len(nodes) - 1) * spacing / 2
            node.y = current_y
        current_y += 80

    return calculate_optimal_bounds(root)


def _separation(a: HierarchyNode, b: HierarchyNode) -> float:
    return 1.0 if a.parent is b.parent else 2.0


def layout_tree(root: HierarchyNode, max_depth: int, content_width: float) -> Bounds:
    """Cluster-style tree sized to [content_width, max_depth * 100].

    A single leaf sweep: leaves get consecutive breadth slots in walk order
    (separation 1 between siblings, 2 between cousins) and every parent is
    centred over its first and last child. Depth gives the row; subtrees are
    not compacted against each other. The result is normalized to the target
    size, then breadth becomes ``y`` and depth becomes ``x`` so the tree
    grows along the horizontal axis.
    """
    size_x = content_width
    size_y = max_depth * 100
    previous_leaf: List[Optional[HierarchyNode]] = [None]
    breadth: Dict[int, float] = {}

    def place(node: HierarchyNode) -> None:
        if not node.children:
            prev = previous_leaf[0]
            breadth[id(node)] = 0.0 if prev is None else breadth[id(prev)] + _separation(prev, node)
            previous_leaf[0] = node
            return
        for child in node.children:
            place(child)
        breadth[id(node)] = (breadth[id(node.children[0])] + breadth[id(node.children[-1])]) / 2

    place(root)

    nodes = root.descendants()
    left = min(nodes, key=lambda n: breadth[id(n)])
    right = max(nodes, key=lambda n: breadth[id(n)])
    bottom_depth = max(node.depth for node in nodes)

    s = 1.0 if left is right else _separation(left, right) / 2
    tx = s - breadth[id(left)]
    kx = size_x / (breadth[id(right)] + s + tx)
    ky = size_y / (bottom_depth or 1)

    for node in nodes:
        node.y = (breadth[id(node)] + tx) * kx
        node.x = node.depth * ky

    return calculate_optimal_bounds(root)


def layout_grid(root: HierarchyNode, max_depth: int, content_width: float) -> Bounds:
    """Regular grid in breadth-first order."""
    nodes = root.descendants()
    grid_size = math.ceil(math.sqrt(len(nodes)))
    cell_size = min(content_width / grid_size, 100)

    for i, node in enumerate(nodes):
        row, col = divmod(i, grid_size)
        node.x = col * cell_size
        node.y = row * cell_size

    return calculate_optimal_bounds(root)


LAYOUT_ALGORITHMS: Dict[str, Callable[[HierarchyNode, int, float], Bounds]] = {
    "auto": layout_auto,
    "circular": layout_circular,
    "diagonal": layout_diagonal,
    "linear": layout_linear,
    "horizontal": layout_horizontal,
    "vertical": layout_vertical,
    "tree": layout_tree,
    "grid": layout_grid,
}


def position_nodes(root: HierarchyNode, max_depth: int, content_width: float, layout_style: str = LAYOUT_AUTO) -> Bounds:
    """Position every node with the named layout (unknown names fall back to auto).

    Args:
        root: Hierarchy root
        max_depth: Maximum depth of the hierarchy
        content_width: Available content width
        layout_style: One of LAYOUT_STYLES

    Returns:
        Bounds of the positioned nodes
    """
    algorithm = LAYOUT_ALGORITHMS.get(layout_style)
    if algorithm is None:
        logger.warning("Unknown layout '%s', using auto", layout_style)
        algorithm = layout_auto
    return algorithm(root, max_depth, content_width)
