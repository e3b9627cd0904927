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
"""Dimension tracking and overlap prevention for rendered elements.

Elements are registered with a position, a size and a category. Text
(contextual) elements must keep clear of each other and of indicator shapes;
presentational elements such as lines may overlap anything. When a new element
collides, the store searches outward on a spiral for a free position and
notifies the registered positioning callbacks.
"""

import math
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional

from vizlib.constants import SVG_NODE_RADIUS

logger = logging.getLogger(__name__)

CONTEXTUAL = "contextual"
PRESENTATIONAL = "presentational"
INDICATORS = "indicators"
NODE_CATEGORIES = (CONTEXTUAL, PRESENTATIONAL, INDICATORS)

TEXT_BUFFER = 18
INDICATOR_SPACING = 24
PRESENTATIONAL_MARGIN = 8
TEXT_LENGTH_MULTIPLIER = 2

RESOLVE_ATTEMPTS = 20
RESOLVE_MAX_DISTANCE = 100


@dataclass
class NodeDimensions:
    """Geometry and classification of one tracked element."""

    id: str
    x: float = 0.0
    y: float = 0.0
    width: float = SVG_NODE_RADIUS * 2
    height: float = SVG_NODE_RADIUS * 2
    category: str = PRESENTATIONAL
    text_content: str = ""
    shape: str = "circle"
    buffer: float = PRESENTATIONAL_MARGIN
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Overlap:
    node_id: str
    overlapping_id: str
    type: str
    distance: float
    severity: float


@dataclass
class PositioningUpdate:
    """Payload passed to positioning callbacks."""

    node_id: str
    old_value: Optional[NodeDimensions]
    new_value: NodeDimensions
    store: "DimensionStore"


PositioningCallback = Callable[[PositioningUpdate], None]


def categorize(dimensions: Dict[str, Any]) -> str:
    if dimensions.get("text_content") or dimensions.get("node_type") == "text" or dimensions.get("is_label"):
        return CONTEXTUAL
    shape = dimensions.get("shape")
    if shape and shape not in ("line", "rect"):
        return INDICATORS
    return PRESENTATIONAL


def calculate_buffer(dimensions: Dict[str, Any]) -> float:
    category = categorize(dimensions)
    if category == CONTEXTUAL:
        return max(TEXT_BUFFER, len(dimensions.get("text_content") or "") * TEXT_LENGTH_MULTIPLIER)
    if category == INDICATORS:
        return INDICATOR_SPACING
    return PRESENTATIONAL_MARGIN


def _empty_bounds() -> Dict[str, float]:
    return {"min_x": math.inf, "max_x": -math.inf, "min_y": math.inf, "max_y": -math.inf}


class DimensionStore:
    """Registry of element dimensions with overlap detection and resolution."""

    def __init__(self) -> None:
        self._nodes: Dict[str, NodeDimensions] = {}
        self._callbacks: List[PositioningCallback] = []
        self._overlaps: List[Overlap] = []
        self._layout_bounds = _empty_bounds()

    def __len__(self) -> int:
        return len(self._nodes)

    def set_node_dimensions(self, node_id: str, dimensions: Dict[str, Any], resolve: bool = True) -> NodeDimensions:
        """Register or update an element.

        Args:
            node_id: Unique element identifier
            dimensions: x, y, width, height, text_content, shape, node_type, is_label;
                other keys are kept in ``extra``
            resolve: Move the element away from overlaps immediately

        Returns:
            The stored NodeDimensions (after any repositioning)
        """
        old_node = self._nodes.get(node_id)
        known = {"x", "y", "width", "height", "text_content", "shape", "node_type", "is_label"}
        node = NodeDimensions(
            id=node_id,
            x=dimensions.get("x") or 0.0,
            y=dimensions.get("y") or 0.0,
            width=dimensions.get("width") or SVG_NODE_RADIUS * 2,
            height=dimensions.get("height") or SVG_NODE_RADIUS * 2,
            category=categorize(dimensions),
            text_content=dimensions.get("text_content") or "",
            shape=dimensions.get("shape") or "circle",
            buffer=calculate_buffer(dimensions),
            extra={k: v for k, v in dimensions.items() if k not in known},
        )

        self._nodes[node_id] = node
        self._update_layout_bounds(node)

        if resolve:
            self._check_overlaps_and_reposition(node_id, old_node, node)
        return self._nodes[node_id]

    def get_node_dimensions(self, node_id: str) -> Optional[NodeDimensions]:
        return self._nodes.get(node_id)

    def get_nodes_by_category(self, category: str) -> List[NodeDimensions]:
        return [node for node in self._nodes.values() if node.category == category]

    def on_positioning_update(self, callback: PositioningCallback) -> None:
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def off_positioning_update(self, callback: PositioningCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def get_layout_bounds(self) -> Dict[str, float]:
        return dict(self._layout_bounds)

    def get_overlaps(self) -> List[Overlap]:
        return list(self._overlaps)

    def resolve_overlaps(self) -> int:
        """Move every overlapping element to a free position.

        Candidates are checked against the positions before this pass; all
        moves are applied together at the end.

        Returns:
            Number of elements moved
        """
        moved: Dict[str, NodeDimensions] = {}
        for node in list(self._nodes.values()):
            overlaps = self._detect_overlaps_for_node(node)
            if not overlaps:
                continue
            self._overlaps.extend(overlaps)
            position = self._find_free_position(node)
            if position is not None:
                moved[node.id] = replace(node, x=position[0], y=position[1])

        for node_id, node in moved.items():
            old_node = self._nodes[node_id]
            self._nodes[node_id] = node
            self._update_layout_bounds(node)
            self._trigger_positioning_update(node_id, old_node, node)

        logger.debug("Resolved %s overlapping elements", len(moved))
        return len(moved)

    def clear(self) -> None:
        self._nodes.clear()
        self._overlaps.clear()
        self._layout_bounds = _empty_bounds()

    def get_statistics(self) -> Dict[str, Any]:
        return {
            "total_nodes": len(self._nodes),
            "categories": {category: len(self.get_nodes_by_category(category)) for category in NODE_CATEGORIES},
            "overlaps": len(self._overlaps),
            "bounds": self.get_layout_bounds(),
            "density": self._calculate_density(),
        }

    def _update_layout_bounds(self, node: NodeDimensions) -> None:
        bounds = self._layout_bounds
        bounds["min_x"] = min(bounds["min_x"], node.x - node.width / 2 - node.buffer)
        bounds["max_x"] = max(bounds["max_x"], node.x + node.width / 2 + node.buffer)
        bounds["min_y"] = min(bounds["min_y"], node.y - node.height / 2 - node.buffer)
        bounds["max_y"] = max(bounds["max_y"], node.y + node.height / 2 + node.buffer)

    def _check_overlaps_and_reposition(self, node_id: str, old_node: Optional[NodeDimensions], node: NodeDimensions) -> None:
        overlaps = self._detect_overlaps_for_node(node)
        if not overlaps:
            return

        self._overlaps.extend(overlaps)
        position = self._find_free_position(node)
        if position is not None:
            node.x, node.y = position
            self._update_layout_bounds(node)

        self._trigger_positioning_update(node_id, old_node, node)

    def _detect_overlaps_for_node(self, node: NodeDimensions) -> List[Overlap]:
        overlaps = []
        for other_id, other in self._nodes.items():
            if other_id == node.id:
                continue
            overlap = check_node_overlap(node, other)
            if overlap is not None:
                overlaps.append(overlap)
        return overlaps

    def _find_free_position(self, node: NodeDimensions) -> Optional[tuple]:
        step = RESOLVE_MAX_DISTANCE / RESOLVE_ATTEMPTS
        for attempt in range(RESOLVE_ATTEMPTS):
            radius = (attempt + 1) * step
            angle = 2 * math.pi * attempt / RESOLVE_ATTEMPTS
            candidate = replace(node, x=node.x + math.cos(angle) * radius, y=node.y + math.sin(angle) * radius)
            if not self._detect_overlaps_for_node(candidate):
                return candidate.x, candidate.y
        return None

    def _trigger_positioning_update(self, node_id: str, old_node: Optional[NodeDimensions], node: NodeDimensions) -> None:
        event = PositioningUpdate(node_id=node_id, old_value=old_node, new_value=node, store=self)
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.warning("Positioning callback error: %s", e)

    def _calculate_density(self) -> float:
        bounds = self._layout_bounds
        area = (bounds["max_x"] - bounds["min_x"]) * (bounds["max_y"] - bounds["min_y"])
        if not self._nodes or not math.isfinite(area) or area <= 0:
            return 0.0
        return len(self._nodes) / area


def check_node_overlap(node1: NodeDimensions, node2: NodeDimensions) -> Optional[Overlap]:
    """Return the overlap between two elements, or None when they may share space.

    Text next to text needs the larger of the two buffers; text next to an
    indicator needs text buffer plus indicator spacing. Any pair involving a
    presentational element, and indicator pairs, never overlap.
    """
    categories = {node1.category, node2.category}
    if categories == {CONTEXTUAL}:
        min_distance = max(node1.buffer, node2.buffer)
        overlap_type = "text-text"
    elif categories == {CONTEXTUAL, INDICATORS}:
        min_distance = TEXT_BUFFER + INDICATOR_SPACING
        overlap_type = "text-indicator"
    else:
        return None

    distance = math.hypot(node1.x - node2.x, node1.y - node2.y)
    if distance >= min_distance:
        return None

    return Overlap(
        node_id=node1.id,
        overlapping_id=node2.id,
        type=overlap_type,
        distance=distance,
        severity=(min_distance - distance) / min_distance,
    )


def create_dimension_store() -> DimensionStore:
    return DimensionStore()
