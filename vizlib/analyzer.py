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
"""Analysis pipeline: discover files, build the graph, detect cycles, render and write the SVG."""

import os
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from vizlib.console_utils import Colors, Spinner, print_cycle_report, print_info, print_success
from vizlib.constants import MESSAGES, SUPPORTED_GRAPH_FORMATS, DirectoryNotFoundError, ExportError, GraphBuildError, RenderError
from vizlib.export_utils import export_dependency_graph
from vizlib.file_utils import display_name, ensure_output_directory, find_source_files, resolve_output_path, validate_source_files
from vizlib.graph_utils import GraphSummary, detect_circular_dependencies, parse_files_and_build_graph, summarize_graph
from vizlib.visualizer import VisualizerOptions, generate_svg

logger = logging.getLogger(__name__)

__all__ = ["AnalysisResult", "VisualizerOptions", "analyze_and_visualize", "print_graph_summary"]


@dataclass
class AnalysisResult:
    """Outcome of one analyze_and_visualize() run."""

    root_dir: str
    files: List[str]
    graph: Any
    cycles: List[List[str]]
    output_path: str
    export_path: Optional[str] = None
    export_ok: bool = False


def analyze_and_visualize(root_dir: str, options: Optional[VisualizerOptions] = None) -> AnalysisResult:
    """Analyze a codebase and write an SVG visualization of its dependency graph.

    The SVG is always written inside ``options.output_dir``; an output path
    pointing elsewhere keeps only its file name.

    Args:
        root_dir: Directory to analyze
        options: Analysis and rendering options

    Returns:
        AnalysisResult

    Raises:
        DirectoryNotFoundError: If root_dir is not a directory
        NoSourceFilesError: If no JavaScript/TypeScript files were found
        GraphBuildError: If the dependency graph cannot be built
        ExportError: If options.export has an unsupported extension
        RenderError: If the SVG cannot be written
    """
    if options is None:
        options = VisualizerOptions()

    output_path = resolve_output_path(options.output, options.output_dir)
    absolute_root = os.path.abspath(root_dir)
    if not os.path.isdir(absolute_root):
        raise DirectoryNotFoundError(f'Directory not found: "{root_dir}"')
    if options.export and os.path.splitext(options.export)[1].lower() not in SUPPORTED_GRAPH_FORMATS:
        raise ExportError(f"Unsupported graph format '{options.export}'. Supported: {', '.join(SUPPORTED_GRAPH_FORMATS)}")

    spinner = Spinner(MESSAGES["FINDING_FILES"], enabled=options.show_progress)
    spinner.start()
    try:
        files = find_source_files(absolute_root, options.depth, options.hidden, options.exclude)
        validate_source_files(files, root_dir)

        spinner.set_title(MESSAGES["PARSING_FILES"])
        try:
            graph = parse_files_and_build_graph(files, absolute_root)
        except ValueError as e:
            raise GraphBuildError(f"Failed to build dependency graph: {e}") from e

        spinner.set_title(MESSAGES["DETECTING_CYCLES"])
        cycles = detect_circular_dependencies(graph)
    finally:
        spinner.stop()

    logger.info("Analyzed %s files, %s imports, %s cycles", graph.number_of_nodes(), graph.number_of_edges(), len(cycles))
    print_cycle_report(cycles, absolute_root)

    if options.show_summary:
        print_graph_summary(summarize_graph(graph, cycles), absolute_root)

    print_info(f"\n{MESSAGES['GENERATING_SVG']}")
    svg_content = generate_svg(graph, cycles, absolute_root, options)

    try:
        ensure_output_directory(output_path)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(svg_content)
    except (IOError, OSError) as e:
        raise RenderError(f"Failed to write {output_path}: {e}") from e

    print_success(f"\n{MESSAGES['SUCCESS']} {output_path}")

    result = AnalysisResult(root_dir=absolute_root, files=files, graph=graph, cycles=cycles, output_path=output_path)
    if options.export:
        result.export_path = resolve_output_path(options.export, options.output_dir)
        result.export_ok = export_dependency_graph(result.export_path, graph, cycles, absolute_root)

    return result


def print_graph_summary(summary: GraphSummary, root_dir: str) -> None:
    """Print graph statistics in the banner style of the other reports."""

    def rel(path: str) -> str:
        return display_name(os.path.relpath(path, root_dir))

    print(f"\n{Colors.BRIGHT}{'=' * 80}{Colors.RESET}")
    print(f"{Colors.BRIGHT}DEPENDENCY GRAPH SUMMARY{Colors.RESET}")
    print(f"{Colors.BRIGHT}{'=' * 80}{Colors.RESET}\n")

    print(f"  Files:                 {summary.file_count}")
    print(f"  Imports:               {summary.edge_count}")
    print(f"  Avg imports per file:  {summary.avg_imports:.2f}")
    print(f"  Leaf files:            {len(summary.leaf_files)}")
    print(f"  Orphan files:          {len(summary.orphan_files)}")

    if summary.top_fan_in:
        print(f"\n{Colors.CYAN}Most imported files:{Colors.RESET}")
        for path, fan_in in summary.top_fan_in:
            print(f"  {fan_in:4d}  {rel(path)}")

    if summary.cycle_count:
        print(f"\n{Colors.RED}Circular dependencies:{Colors.RESET}")
        print(f"  • {summary.cycle_count} cycles in {summary.scc_count} strongly connected groups")
        if summary.self_loops:
            print(f"  • {len(summary.self_loops)} files import themselves")
        if summary.feedback_edges:
            print(f"\n{Colors.YELLOW}Imports to remove to break all cycles:{Colors.RESET}")
            for source, target in summary.feedback_edges:
                print(f"  {rel(source)} -> {rel(target)}")
    else:
        print(f"\n{Colors.GREEN}No circular dependencies{Colors.RESET}")
