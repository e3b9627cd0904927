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
"""Export utilities for writing the dependency graph to graph file formats."""

import os
import json
import logging
from typing import Any, List

import networkx as nx
from networkx.readwrite import json_graph

from vizlib.console_utils import print_error, print_success
from vizlib.constants import SUPPORTED_GRAPH_FORMATS, ExportError
from vizlib.file_utils import display_name, get_file_type, group_files_by_directory
from vizlib.graph_utils import compute_fan_in_fan_out, get_cycle_edges

logger = logging.getLogger(__name__)


def build_export_graph(directed_graph: Any, cycles: List[List[str]], root_dir: str) -> "nx.DiGraph[Any]":
    """Copy the graph keyed by root-relative paths and attach visualization attributes.

    Node attributes:
        - label: File basename
        - path: Path relative to root_dir
        - file_type: Classification used for the node shape
        - group: Top-level directory ("root" for files directly in root_dir)
        - fan_in, fan_out: Import counts
        - in_cycle: Whether the file takes part in a circular dependency

    Edge attributes:
        - cycle: Whether the import is part of a detected cycle
    """
    fan = compute_fan_in_fan_out(directed_graph)
    files_in_cycles = {path for cycle in cycles for path in cycle}
    cycle_edges = get_cycle_edges(cycles)

    def rel(path: str) -> str:
        return display_name(os.path.relpath(path, root_dir).replace(os.sep, "/"))

    group_of = {path: group for group, paths in group_files_by_directory(directed_graph.nodes(), root_dir).items() for path in paths}

    G: nx.DiGraph[str] = nx.DiGraph()
    for node in directed_graph.nodes():
        rel_path = rel(node)
        fan_in, fan_out = fan[node]
        G.add_node(
            rel_path,
            label=display_name(os.path.basename(node)),
            path=rel_path,
            file_type=get_file_type(node),
            group=display_name(group_of[node]),
            fan_in=fan_in,
            fan_out=fan_out,
            in_cycle=node in files_in_cycles,
        )

    for source, target in directed_graph.edges():
        G.add_edge(rel(source), rel(target), cycle=(source, target) in cycle_edges)

    return G


def export_dependency_graph(filename: str, directed_graph: Any, cycles: List[List[str]], root_dir: str) -> bool:
    """Export the dependency graph; the file extension selects the format.

    Supports: GraphML (.graphml), GEXF (.gexf), node-link JSON (.json), DOT (.dot, via pydot)

    Args:
        filename: Output filename
        directed_graph: NetworkX DiGraph of analyzed files
        cycles: Detected circular dependencies
        root_dir: Root directory of the analysis

    Returns:
        True if the file was written

    Raises:
        ExportError: If the extension is not a supported format
    """
    ext = os.path.splitext(filename)[1].lower()
    if ext not in SUPPORTED_GRAPH_FORMATS:
        raise ExportError(f"Unsupported graph format '{ext or filename}'. Supported: {', '.join(SUPPORTED_GRAPH_FORMATS)}")

    G = build_export_graph(directed_graph, cycles, root_dir)

    try:
        parent = os.path.dirname(filename)
        if parent:
            os.makedirs(parent, exist_ok=True)

        if ext == ".graphml":
            nx.write_graphml(G, filename)
        elif ext == ".gexf":
            nx.write_gexf(G, filename)
        elif ext == ".json":
            data = json_graph.node_link_data(G)
            with open(filename, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        else:
            nx.drawing.nx_pydot.write_dot(G, filename)

    except (IOError, OSError) as e:
        logger.error("Failed to export graph: %s", e)
        print_error(f"Failed to export graph: {e}")
        return False

    logger.info("Exported dependency graph to %s", filename)
    print_success(f"Exported dependency graph to {filename}")
    return True
