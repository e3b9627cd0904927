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
"""Directory hierarchy model used for layout and rendering."""

import os
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from vizlib.file_utils import display_name, get_file_type

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class HierarchyNode:
    """A directory or file in the visualized tree.

    Attributes:
        name: Base name shown as label
        path: Absolute path
        is_directory: True for directories (including the root)
        file_type: Classification from get_file_type()
        depth: Distance from the root (root = 0)
        children: Child nodes in first-seen order
        parent: Parent node (None for the root)
        x: Breadth-axis coordinate assigned by a layout
        y: Depth-axis coordinate assigned by a layout
    """

    name: str
    path: str
    is_directory: bool = False
    file_type: str = "default"
    depth: int = 0
    children: List["HierarchyNode"] = field(default_factory=list)
    parent: Optional["HierarchyNode"] = field(default=None, repr=False)
    x: float = 0.0
    y: float = 0.0

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    @property
    def height(self) -> int:
        """Length of the longest downward path to a leaf."""
        if not self.children:
            return 0
        return 1 + max(child.height for child in self.children)

    def add_child(self, child: "HierarchyNode") -> "HierarchyNode":
        child.parent = self
        self.children.append(child)
        return child

    def descendants(self) -> List["HierarchyNode"]:
        """All nodes of this subtree in breadth-first order, self first."""
        return list(self._iter_breadth_first())

    def leaves(self) -> List["HierarchyNode"]:
        return [node for node in self._iter_breadth_first() if not node.children]

    def links(self) -> List[Tuple["HierarchyNode", "HierarchyNode"]]:
        """Parent to child pairs in breadth-first order."""
        return [(node.parent, node) for node in self._iter_breadth_first() if node.parent is not None and node is not self]

    def _iter_breadth_first(self) -> Iterator["HierarchyNode"]:
        queue = deque([self])
        while queue:
            node = queue.popleft()
            yield node
            queue.extend(node.children)


@dataclass
class SvgDimensions:
    width: float
    height: float
    content_width: float
    content_height: float


def build_hierarchical_structure(paths: List[str], root_dir: str) -> Tuple[HierarchyNode, int]:
    """Convert a flat file list into a directory tree.

    Intermediate path components become directory nodes shared by all files
    below them; the last component becomes a file node.

    Args:
        paths: Absolute file paths below root_dir
        root_dir: Root directory (becomes the root node)

    Returns:
        Tuple of (root node, maximum number of path components of any file)
    """
    root = HierarchyNode(
        name=display_name(os.path.basename(os.path.normpath(root_dir))),
        path=root_dir,
        is_directory=True,
        file_type="directory",
        depth=0,
    )
    nodes_by_path: Dict[str, HierarchyNode] = {root_dir: root}
    max_depth = 0

    for path in paths:
        parts = os.path.relpath(path, root_dir).split(os.sep)
        max_depth = max(max_depth, len(parts))
        current = root

        for i, part in enumerate(parts):
            is_last = i == len(parts) - 1
            current_path = os.path.join(root_dir, *parts[: i + 1])
            child = nodes_by_path.get(current_path)
            if child is None:
                child = current.add_child(
                    HierarchyNode(
                        name=display_name(part),
                        path=current_path,
                        is_directory=not is_last,
                        file_type=get_file_type(part) if is_last else "directory",
                        depth=i + 1,
                    )
                )
                nodes_by_path[current_path] = child
            current = child

    logger.debug("Built hierarchy with %s nodes (max depth %s)", len(nodes_by_path), max_depth)
    return root, max_depth


def calculate_svg_dimensions(max_depth: int, aspect_ratio: float, margin: Dict[str, int], default_width: float) -> SvgDimensions:
    """Initial canvas size: default width, height from the aspect ratio, content inside the margins.

    The starting canvas does not depend on ``max_depth``; cropping adapts it later.
    """
    width = default_width
    height = width / aspect_ratio
    return SvgDimensions(
        width=width,
        height=height,
        content_width=width - margin["left"] - margin["right"],
        content_height=height - margin["top"] - margin["bottom"],
    )
