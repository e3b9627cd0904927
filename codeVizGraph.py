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
"""
Codebase Dependency Visualizer

Scans a JavaScript/TypeScript codebase, builds the file-level import graph,
reports circular dependencies and renders the directory hierarchy with its
import links as a standalone SVG diagram.

USAGE:
    python3 codeVizGraph.py [path] [options]

EXAMPLES:
    # Visualize the current directory (written to tmp/dependency-graph.svg)
    python3 codeVizGraph.py

    # Visualize a project with a tree layout and dark theme
    python3 codeVizGraph.py ./my-app --layout tree --theme dark

    # Only the first two directory levels, vertical orientation
    python3 codeVizGraph.py ./my-app --depth 2 --direction vertical

    # Include hidden entries and node_modules, dist, build
    python3 codeVizGraph.py ./my-app --hidden

    # Leave out tests and export the graph for Gephi
    python3 codeVizGraph.py ./my-app --exclude "*.test.ts" --export graph.gexf

METHOD:
    1. Collect .js/.mjs/.cjs/.jsx/.ts/.tsx files (hidden entries and
       node_modules/.git/.vscode/dist/build skipped unless --hidden)
    2. Extract static imports, re-exports, dynamic import() and require()
    3. Resolve specifiers (relative paths, index files, tsconfig baseUrl/paths)
    4. Detect circular dependencies with a depth-first search
    5. Lay out the directory tree and render links, nodes and legend as SVG

    Output always lands in the tmp/ directory.
"""

import os
import sys
import logging
import argparse
from typing import List, Optional

from vizlib import __version__
from vizlib.analyzer import analyze_and_visualize
from vizlib.console_utils import Colors, print_error, should_use_color
from vizlib.constants import (
    DEFAULT_DIRECTION,
    DEFAULT_LAYOUT,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_THEME,
    DIRECTIONS,
    EXIT_KEYBOARD_INTERRUPT,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    LAYOUT_DESCRIPTIONS,
    LAYOUT_STYLES,
    MESSAGES,
    SUPPORTED_GRAPH_FORMATS,
    THEMES,
    ArgumentError,
    VisualizerError,
)
from vizlib.visualizer import VisualizerOptions


def build_parser() -> argparse.ArgumentParser:
    layouts_help = "\n".join(f"  {name:<11} {LAYOUT_DESCRIPTIONS[name]}" for name in LAYOUT_STYLES)
    parser = argparse.ArgumentParser(
        prog="codeviz",
        description="Visualize module dependencies as a hierarchical SVG diagram",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Layouts:
{layouts_help}

Examples:
  %(prog)s
  %(prog)s ./my-app --layout tree --theme dark
  %(prog)s ./my-app --depth 2 --direction vertical
  %(prog)s ./my-app --exclude "*.test.ts" --export graph.graphml
        """,
    )

    parser.add_argument("path", nargs="?", default=".", help="The path to the directory to analyze (default: .)")
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT_FILE, metavar="FILE", help=f"Output file name, written to tmp/ (default: {DEFAULT_OUTPUT_FILE})")
    parser.add_argument("-d", "--depth", type=int, default=None, metavar="LEVEL", help="Limit the analysis to a specific directory depth (default: unlimited)")
    parser.add_argument("--hidden", action="store_true", help="Include hidden files and folders (e.g. .git, node_modules)")
    parser.add_argument("-l", "--layout", choices=LAYOUT_STYLES, default=DEFAULT_LAYOUT, help=f"Layout style (default: {DEFAULT_LAYOUT})")
    parser.add_argument("--direction", choices=DIRECTIONS, default=DEFAULT_DIRECTION, help=f"Growth direction of the graph (default: {DEFAULT_DIRECTION})")
    parser.add_argument("-m", "--theme", choices=THEMES, default=DEFAULT_THEME, help=f"Color theme of the SVG (default: {DEFAULT_THEME})")
    parser.add_argument(
        "--exclude",
        type=str,
        action="append",
        metavar="PATTERN",
        help="Exclude files matching glob pattern relative to the analyzed directory (can be used multiple times). "
        'Examples: "*.test.ts", "legacy/*", "*/__mocks__/*"',
    )
    parser.add_argument("--export", metavar="FILE", help="Also export the dependency graph (.graphml, .gexf, .json or .dot)")
    parser.add_argument("--no-legend", action="store_true", help="Do not draw the legend")
    parser.add_argument("--no-label-adjust", action="store_true", help="Do not move overlapping labels")
    parser.add_argument("--summary", action="store_true", help="Print dependency graph statistics")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose debug logging")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}", help="Output the current version")
    return parser


def options_from_args(args: argparse.Namespace) -> VisualizerOptions:
    if args.depth is not None and args.depth < 0:
        raise ArgumentError(f"--depth must be a non-negative integer, got {args.depth}")
    if args.export and os.path.splitext(args.export)[1].lower() not in SUPPORTED_GRAPH_FORMATS:
        raise ArgumentError(f"--export must end in one of {', '.join(SUPPORTED_GRAPH_FORMATS)}, got {args.export}")

    return VisualizerOptions(
        output=args.output,
        depth=args.depth,
        hidden=args.hidden,
        layout=args.layout,
        direction=args.direction,
        theme=args.theme,
        exclude=args.exclude or [],
        export=args.export,
        legend=not args.no_legend,
        adjust_labels=not args.no_label_adjust,
        show_summary=args.summary,
    )


def print_banner(path: str, options: VisualizerOptions) -> None:
    print(f"{Colors.GREEN}{Colors.BRIGHT}{MESSAGES['INITIALIZING']}{Colors.RESET}")
    print(f"{Colors.BRIGHT}Target Directory:{Colors.RESET} {path}")
    print(f"{Colors.BRIGHT}Output File:{Colors.RESET} {options.output}")
    print(f"{Colors.BRIGHT}Max Depth:{Colors.RESET} {'Infinite' if options.depth is None else options.depth}")
    print(f"{Colors.BRIGHT}Include Hidden:{Colors.RESET} {'Yes' if options.hidden else 'No'}")
    print(f"{Colors.BRIGHT}Layout:{Colors.RESET} {options.layout} ({options.direction}, theme: {options.theme})")
    print("")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not should_use_color(no_color=args.no_color):
        Colors.disable()

    options = options_from_args(args)
    print_banner(args.path, options)

    analyze_and_visualize(args.path, options)
    return EXIT_SUCCESS


def cli_main() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
    except VisualizerError as e:
        print_error(str(e))
        sys.exit(e.exit_code)
    except Exception as e:  # pylint: disable=broad-exception-caught
        print_error(f"{MESSAGES['ERROR']} {e}", prefix=False)
        sys.exit(EXIT_RUNTIME_ERROR)


if __name__ == "__main__":
    cli_main()
