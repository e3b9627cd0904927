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
"""Dependency graph construction and analysis utilities using NetworkX."""

import os
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set, Tuple

import networkx as nx

from vizlib.import_parser import build_import_graph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencyLink:
    """A single import relationship between two analyzed files."""

    source: str
    target: str


@dataclass
class GraphSummary:
    """Aggregate statistics of a dependency graph.

    Attributes:
        file_count: Number of analyzed files
        edge_count: Number of resolved imports
        avg_imports: Average imports per file
        leaf_files: Files that import nothing
        orphan_files: Files with no imports and no importers
        top_fan_in: Most imported files as (path, fan_in), descending
        cycle_count: Number of distinct cycles reported by detection
        scc_count: Number of multi-file strongly connected components
        self_loops: Files importing themselves
        feedback_edges: Imports whose removal breaks every cycle
    """

    file_count: int = 0
    edge_count: int = 0
    avg_imports: float = 0.0
    leaf_files: List[str] = field(default_factory=list)
    orphan_files: List[str] = field(default_factory=list)
    top_fan_in: List[Tuple[str, int]] = field(default_factory=list)
    cycle_count: int = 0
    scc_count: int = 0
    self_loops: List[str] = field(default_factory=list)
    feedback_edges: List[Tuple[str, str]] = field(default_factory=list)


def build_dependency_graph(file_paths: List[str], import_graph: Dict[str, List[str]]) -> "nx.DiGraph[Any]":
    """Build a NetworkX directed graph from an import graph.

    Every file becomes a node (attributes ``path`` and ``name``) in input
    order. Imports pointing outside ``file_paths`` are dropped.

    Args:
        file_paths: Analyzed files
        import_graph: Mapping of files to the files they import

    Returns:
        NetworkX DiGraph
    """
    G: nx.DiGraph[str] = nx.DiGraph()
    G.add_nodes_from((path, {"path": path, "name": os.path.basename(path)}) for path in file_paths)

    edges = [(source, target) for source, targets in import_graph.items() if source in G for target in targets if target in G]
    G.add_edges_from(edges)

    logger.debug("Built graph with %s nodes and %s edges", G.number_of_nodes(), G.number_of_edges())
    return G


def parse_files_and_build_graph(file_paths: List[str], root_dir: str) -> "nx.DiGraph[Any]":
    """Parse the given files and return their dependency graph."""
    if not file_paths:
        return nx.DiGraph()
    return build_dependency_graph(file_paths, build_import_graph(file_paths, root_dir))


def detect_circular_dependencies(graph: "nx.DiGraph[Any]") -> List[List[str]]:
    """Detect circular dependencies with a three-color depth-first search.

    A search starts from every unvisited node in node order and follows
    imports in insertion order. Reaching a node that is still on the current
    path records the path slice from that node to the current one as a cycle;
    a file importing itself yields a one-element cycle. Cycles with the same
    members are reported once, first occurrence wins.

    Args:
        graph: NetworkX DiGraph

    Returns:
        List of cycles, each a list of file paths in import order
    """
    cycles: List[List[str]] = []
    visited: Set[str] = set()
    on_path: Set[str] = set()
    path: List[str] = []

    for start in graph.nodes():
        if start in visited:
            continue

        visited.add(start)
        on_path.add(start)
        path.append(start)
        stack = [(start, iter(graph.successors(start)))]

        while stack:
            node, neighbors = stack[-1]
            advanced = False
            for neighbor in neighbors:
                if neighbor not in visited:
                    visited.add(neighbor)
                    on_path.add(neighbor)
                    path.append(neighbor)
                    stack.append((neighbor, iter(graph.successors(neighbor))))
                    advanced = True
                    break
                if neighbor in on_path:
                    cycles.append(path[path.index(neighbor) :])

            if not advanced:
                stack.pop()
                on_path.discard(node)
                path.pop()

    unique_cycles: List[List[str]] = []
    seen: Set[Tuple[str, ...]] = set()
    for cycle in cycles:
        key = tuple(sorted(cycle))
        if key not in seen:
            seen.add(key)
            unique_cycles.append(cycle)

    logger.debug("Detected %s circular dependencies", len(unique_cycles))
    return unique_cycles


def find_strongly_connected_components(graph: "nx.DiGraph[Any]") -> Tuple[List[Set[str]], List[str]]:
    """Find strongly connected components (cycles) and self-loops in a directed graph.

    Args:
        graph: NetworkX DiGraph

    Returns:
        Tuple of (cycles, self_loops) where:
        - cycles: List of sets containing nodes in multi-file cycles
        - self_loops: List of files that import themselves
    """
    cycles = []
    self_loops = []
    for scc in nx.strongly_connected_components(graph):
        if len(scc) > 1:
            cycles.append(scc)
        else:
            node = next(iter(scc))
            if graph.has_edge(node, node):
                self_loops.append(node)

    return cycles, self_loops


def compute_minimum_feedback_arc_set(graph: "nx.DiGraph[Any]") -> List[Tuple[str, str]]:
    """Compute an approximate minimum feedback arc set.

    Greedy: repeatedly find a cycle and remove its edge whose source has the
    highest remaining out-degree.

    Args:
        graph: NetworkX DiGraph

    Returns:
        List of edges (u, v) to remove to break cycles
    """
    feedback_edges: List[Tuple[str, str]] = []
    G = graph.copy()
    out_degrees = dict(G.out_degree())

    while True:
        try:
            cycle = nx.find_cycle(G, orientation="original")
        except nx.NetworkXNoCycle:
            break

        edge_to_remove = max(cycle, key=lambda e: out_degrees.get(e[0], 0))
        feedback_edges.append((edge_to_remove[0], edge_to_remove[1]))
        G.remove_edge(edge_to_remove[0], edge_to_remove[1])
        out_degrees[edge_to_remove[0]] -= 1

    return feedback_edges


def get_cycle_edges(cycles: List[List[str]]) -> Set[Tuple[str, str]]:
    """Collect the edges of all cycles, in both directions, for highlighting."""
    cycle_edges: Set[Tuple[str, str]] = set()
    for cycle in cycles:
        for i, source in enumerate(cycle):
            target = cycle[(i + 1) % len(cycle)]
            cycle_edges.add((source, target))
            cycle_edges.add((target, source))
    return cycle_edges


def create_dependency_links(graph: "nx.DiGraph[Any]") -> List[DependencyLink]:
    """Convert graph edges to DependencyLink objects in edge order."""
    return [DependencyLink(source, target) for source, target in graph.edges() if source in graph and target in graph]


def compute_fan_in_fan_out(graph: "nx.DiGraph[Any]") -> Dict[str, Tuple[int, int]]:
    """Compute fan-in and fan-out for each node in a graph.

    Args:
        graph: NetworkX DiGraph

    Returns:
        Dictionary mapping node → (fan_in, fan_out)
    """
    in_degrees = dict(graph.in_degree())
    out_degrees = dict(graph.out_degree())
    return {node: (in_degrees[node], out_degrees[node]) for node in graph.nodes()}


def summarize_graph(graph: "nx.DiGraph[Any]", cycles: List[List[str]], top_n: int = 5) -> GraphSummary:
    """Compute the statistics printed by the --summary option."""
    file_count = graph.number_of_nodes()
    edge_count = graph.number_of_edges()
    fan = compute_fan_in_fan_out(graph)

    leaf_files = [node for node, (_, fan_out) in fan.items() if fan_out == 0]
    orphan_files = [node for node, (fan_in, fan_out) in fan.items() if fan_in == 0 and fan_out == 0]
    ranked = sorted(((node, fan_in) for node, (fan_in, _) in fan.items() if fan_in > 0), key=lambda item: (-item[1], item[0]))

    scc_cycles, self_loops = find_strongly_connected_components(graph)

    return GraphSummary(
        file_count=file_count,
        edge_count=edge_count,
        avg_imports=edge_count / file_count if file_count else 0.0,
        leaf_files=leaf_files,
        orphan_files=orphan_files,
        top_fan_in=ranked[:top_n],
        cycle_count=len(cycles),
        scc_count=len(scc_cycles),
        self_loops=self_loops,
        feedback_edges=compute_minimum_feedback_arc_set(graph) if cycles else [],
    )
