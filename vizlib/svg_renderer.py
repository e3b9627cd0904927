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
"""SVG element construction for the dependency visualization.

Builds the document with ``xml.etree.ElementTree``: base canvas and theme
styles, structural (directory) links, dependency links, node shapes with
labels, and the legend.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from vizlib.constants import (
    DIRECTION_HORIZONTAL,
    DIRECTORY_COLOR_PALETTE,
    LEGEND_COLOR_BOX_SIZE,
    LEGEND_ITEM_HEIGHT,
    LEGEND_SHAPE_SIZE,
    LEGEND_SPACING,
    LEGEND_WIDTH,
    SHAPE_LEGEND,
    SVG_BASE_STYLES,
    SVG_CURVE_OFFSET,
    SVG_NODE_OFFSET,
    SVG_NODE_RADIUS,
    SVG_SHAPES,
    THEME_VARIABLES,
    RenderError,
)
from vizlib.file_utils import display_name
from vizlib.graph_utils import DependencyLink
from vizlib.hierarchy import HierarchyNode

logger = logging.getLogger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
LEGEND_SHAPE_SCALE = 0.6

ColorFor = Callable[[HierarchyNode], str]


def fmt(value: float) -> str:
    """Compact number formatting for SVG attributes (at most two decimals)."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def to_screen(node: HierarchyNode, direction: str = DIRECTION_HORIZONTAL) -> Tuple[float, float]:
    """Map layout coordinates to screen coordinates.

    Horizontal graphs grow left to right, so the depth axis (``y``) becomes
    screen x. Vertical graphs grow top to bottom and keep the axes as laid out.
    """
    if direction == DIRECTION_HORIZONTAL:
        return node.y, node.x
    return node.x, node.y


def build_svg_styles(theme: str = "auto") -> str:
    """Embedded CSS for a theme: "light", "dark" or "auto" (follows prefers-color-scheme)."""

    def root_block(variables: Dict[str, str], indent: str = "  ") -> str:
        lines = [f"{indent}  {name}: {value};" for name, value in variables.items()]
        return f"{indent}:root {{\n" + "\n".join(lines) + f"\n{indent}}}\n"

    if theme in ("light", "dark"):
        variables = root_block(THEME_VARIABLES[theme])
    else:
        variables = (
            root_block(THEME_VARIABLES["light"])
            + "\n  @media (prefers-color-scheme: dark) {\n"
            + root_block(THEME_VARIABLES["dark"], indent="    ")
            + "  }\n"
        )
    return "\n" + variables + SVG_BASE_STYLES


def create_base_svg(width: float, height: float, theme: str = "auto") -> ET.Element:
    """Create the root <svg> element with size, viewBox and theme styles."""
    if width <= 0 or height <= 0:
        raise RenderError(f"Invalid SVG size {width}x{height}")

    svg = ET.Element(
        "svg",
        {
            "xmlns": SVG_NAMESPACE,
            "width": fmt(width),
            "height": fmt(height),
            "viewBox": f"0 0 {fmt(width)} {fmt(height)}",
        },
    )
    defs = ET.SubElement(svg, "defs")
    style = ET.SubElement(defs, "style")
    style.text = build_svg_styles(theme)
    return svg


def structural_link_path(source: HierarchyNode, target: HierarchyNode, direction: str = DIRECTION_HORIZONTAL) -> str:
    """Cubic link curve between parent and child, bent along the growth axis."""
    sx, sy = to_screen(source, direction)
    tx, ty = to_screen(target, direction)
    if direction == DIRECTION_HORIZONTAL:
        mid = (sx + tx) / 2
        return f"M{fmt(sx)},{fmt(sy)}C{fmt(mid)},{fmt(sy)},{fmt(mid)},{fmt(ty)},{fmt(tx)},{fmt(ty)}"
    mid = (sy + ty) / 2
    return f"M{fmt(sx)},{fmt(sy)}C{fmt(sx)},{fmt(mid)},{fmt(tx)},{fmt(mid)},{fmt(tx)},{fmt(ty)}"


def dependency_link_path(source: HierarchyNode, target: HierarchyNode, direction: str = DIRECTION_HORIZONTAL) -> str:
    """Adaptive Bézier curve for an import.

    Control points are pushed along the growth axis by min(distance * 0.25,
    curve offset) and skewed across it, so links between nodes of one level
    still bow instead of overlapping the structural links.
    """
    sx, sy = to_screen(source, direction)
    tx, ty = to_screen(target, direction)
    dx = tx - sx
    dy = ty - sy
    intensity = min((dx * dx + dy * dy) ** 0.5 * 0.25, SVG_CURVE_OFFSET)

    if direction == DIRECTION_HORIZONTAL:
        c1 = (sx + intensity, sy + dy * 0.3)
        c2 = (tx - intensity, ty + dy * 0.2)
    else:
        c1 = (sx + dx * 0.3, sy + intensity)
        c2 = (tx + dx * 0.2, ty - intensity)

    return f"M{fmt(sx)},{fmt(sy)}C{fmt(c1[0])},{fmt(c1[1])},{fmt(c2[0])},{fmt(c2[1])},{fmt(tx)},{fmt(ty)}"


def render_structural_links(group: ET.Element, root: HierarchyNode, direction: str = DIRECTION_HORIZONTAL) -> int:
    """Append one path per parent/child relationship. Returns the number of links."""
    links = root.links()
    for source, target in links:
        ET.SubElement(group, "path", {"class": "link", "d": structural_link_path(source, target, direction)})
    return len(links)


def render_dependency_links(
    group: ET.Element,
    links: Iterable[DependencyLink],
    cycle_edges: Set[Tuple[str, str]],
    nodes_by_path: Dict[str, HierarchyNode],
    color_for: ColorFor,
    direction: str = DIRECTION_HORIZONTAL,
) -> int:
    """Append one path per import.

    Links take the color of the imported node; cycle members get the
    ``cycle-link`` class and a wider stroke. Links whose endpoints are not
    part of the hierarchy are emitted with an empty path.

    Returns:
        Number of links rendered
    """
    count = 0
    for link in links:
        in_cycle = (link.source, link.target) in cycle_edges
        source = nodes_by_path.get(link.source)
        target = nodes_by_path.get(link.target)

        attrs = {
            "class": "link dependency-link cycle-link" if in_cycle else "link dependency-link",
            "stroke": color_for(target) if target is not None else "var(--dependency-stroke)",
            "stroke-width": "3" if in_cycle else "2",
            "stroke-opacity": "0.8",
            "d": dependency_link_path(source, target, direction) if source is not None and target is not None else "",
        }
        ET.SubElement(group, "path", attrs)
        count += 1
    return count


def render_node_shape(element: ET.Element, node: HierarchyNode, color: str) -> ET.Element:
    """Append the shape for the node's file type."""
    file_type = node.file_type if node.file_type in SHAPE_LEGEND else "default"
    css_class = f"node-shape shape-{file_type}"

    if file_type == "directory":
        return ET.SubElement(element, "circle", {"r": fmt(SVG_NODE_RADIUS), "class": css_class, "fill": color})
    if file_type == "style":
        return ET.SubElement(
            element, "rect", {"x": "-6", "y": "-6", "width": "12", "height": "12", "class": css_class, "fill": color}
        )

    path_data = {"script": "diamond", "image": "star", "multimedia": "trapezoid"}.get(file_type, "tag")
    return ET.SubElement(element, "path", {"d": SVG_SHAPES[path_data], "class": css_class, "fill": color})


def render_nodes(
    group: ET.Element,
    root: HierarchyNode,
    color_for: ColorFor,
    direction: str = DIRECTION_HORIZONTAL,
    label_offsets: Optional[Dict[str, Tuple[float, float]]] = None,
) -> int:
    """Append a group with shape and label for every node of the hierarchy.

    Labels of nodes with children sit before the shape (anchored at the end),
    leaf labels after it.

    Args:
        group: Parent element
        root: Positioned hierarchy root
        color_for: Node -> fill color
        direction: Screen direction
        label_offsets: Optional node path -> (dx, dy) label displacement

    Returns:
        Number of nodes rendered
    """
    nodes = root.descendants()
    for node in nodes:
        color = color_for(node)
        x, y = to_screen(node, direction)
        element = ET.SubElement(
            group,
            "g",
            {
                "class": f"node node--{node.file_type}",
                "transform": f"translate({fmt(x)},{fmt(y)})",
                "style": f"--color: {color}",
            },
        )
        render_node_shape(element, node, color)

        dx, dy = (label_offsets or {}).get(node.path, (0.0, 0.0))
        label_x = (-SVG_NODE_OFFSET if node.has_children else SVG_NODE_OFFSET) + dx
        attrs = {"dy": "0.31em", "x": fmt(label_x), "text-anchor": "end" if node.has_children else "start"}
        if dy:
            attrs["y"] = fmt(dy)
        text = ET.SubElement(element, "text", attrs)
        text.text = node.name
    return len(nodes)


def legend_height(directory_count: int) -> float:
    """Height of the legend box for the given number of directory entries."""
    return (directory_count + len(SHAPE_LEGEND) + 2) * LEGEND_ITEM_HEIGHT + 40


def render_legend(svg: ET.Element, x: float, y: float, directories: List[str], directory_color_map: Dict[str, str]) -> ET.Element:
    """Append the legend: directory color swatches followed by file type shapes.

    Args:
        svg: Root element
        x: Left edge of the legend content
        y: Baseline of the first title
        directories: Top-level directory names in display order
        directory_color_map: Directory name -> palette key

    Returns:
        The legend group
    """
    legend = ET.SubElement(svg, "g", {"class": "legend", "transform": f"translate({fmt(x)},{fmt(y)})"})
    ET.SubElement(
        legend,
        "rect",
        {
            "class": "legend-background",
            "x": "-10",
            "y": "-10",
            "rx": "4",
            "width": fmt(LEGEND_WIDTH),
            "height": fmt(legend_height(len(directories))),
        },
    )

    y_offset = 0.0
    _legend_title(legend, "Directory Colors", y_offset)
    y_offset += LEGEND_ITEM_HEIGHT + 5

    for name in directories:
        palette_key = directory_color_map.get(name, "default")
        color = DIRECTORY_COLOR_PALETTE.get(palette_key, DIRECTORY_COLOR_PALETTE["default"])
        item = ET.SubElement(legend, "g", {"class": "legend-item", "transform": f"translate(0,{fmt(y_offset)})"})
        ET.SubElement(item, "rect", {"width": fmt(LEGEND_COLOR_BOX_SIZE), "height": fmt(LEGEND_COLOR_BOX_SIZE), "fill": color})
        _legend_text(item, display_name(name), LEGEND_COLOR_BOX_SIZE)
        y_offset += LEGEND_ITEM_HEIGHT

    y_offset += 10
    _legend_title(legend, "File Type Shapes", y_offset)
    y_offset += LEGEND_ITEM_HEIGHT + 5

    for shape_type, info in SHAPE_LEGEND.items():
        item = ET.SubElement(legend, "g", {"class": "legend-item", "transform": f"translate(0,{fmt(y_offset)})"})
        half = LEGEND_SHAPE_SIZE / 2
        shape_group = ET.SubElement(item, "g", {"transform": f"translate({fmt(half)},{fmt(half)})"})
        render_shape_for_legend(shape_group, shape_type, DIRECTORY_COLOR_PALETTE["default"])
        _legend_text(item, info["name"], LEGEND_SHAPE_SIZE)
        y_offset += LEGEND_ITEM_HEIGHT

    return legend


def _legend_title(legend: ET.Element, text: str, y: float) -> None:
    title = ET.SubElement(legend, "text", {"class": "legend-title", "x": "0", "y": fmt(y)})
    title.text = text


def _legend_text(item: ET.Element, text: str, icon_size: float) -> None:
    label = ET.SubElement(
        item,
        "text",
        {"class": "legend-text", "x": fmt(icon_size + LEGEND_SPACING), "y": fmt(icon_size / 2), "dy": "0.31em"},
    )
    label.text = text


def render_shape_for_legend(element: ET.Element, shape_type: str, color: str) -> ET.Element:
    """Append a scaled-down node shape for a legend entry."""
    scale = LEGEND_SHAPE_SCALE
    if shape_type == "directory":
        return ET.SubElement(element, "circle", {"r": fmt(SVG_NODE_RADIUS * scale), "fill": color})
    if shape_type == "style":
        side = 12 * scale
        return ET.SubElement(
            element, "rect", {"x": fmt(-side / 2), "y": fmt(-side / 2), "width": fmt(side), "height": fmt(side), "fill": color}
        )

    path_data = {"script": "diamond", "image": "star", "multimedia": "trapezoid"}.get(shape_type, "tag")
    return ET.SubElement(element, "path", {"d": SVG_SHAPES[path_data], "transform": f"scale({fmt(scale)})", "fill": color})


def serialize_svg(svg: ET.Element) -> str:
    """Serialize the document to a string."""
    return ET.tostring(svg, encoding="unicode")
