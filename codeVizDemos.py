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
Demo Generator

Renders a gallery of dependency diagrams: every combination of layout,
direction and theme for each model project, plus depth variations
(1 to 4 and unlimited). A failing combination is reported and counted,
the run always continues.

USAGE:
    python3 codeVizDemos.py MODELS_DIR [options]

EXAMPLES:
    # All sub directories of ./models, every layout, light and dark
    python3 codeVizDemos.py ./models

    # Two models, tree and grid only, written to tmp/gallery
    python3 codeVizDemos.py ./models --models small medium --layouts tree grid --output-dir tmp/gallery
"""

import io
import os
import sys
import logging
import argparse
import contextlib
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from vizlib.analyzer import analyze_and_visualize
from vizlib.console_utils import Colors, print_error, should_use_color
from vizlib.constants import (
    DIRECTION_HORIZONTAL,
    DIRECTIONS,
    EXIT_INVALID_ARGS,
    EXIT_KEYBOARD_INTERRUPT,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    LAYOUT_AUTO,
    LAYOUT_STYLES,
    ArgumentError,
    VisualizerError,
)
from vizlib.file_utils import display_name
from vizlib.visualizer import VisualizerOptions

logger = logging.getLogger(__name__)

DEFAULT_DEMO_OUTPUT_DIR = os.path.join("tmp", "demos")
DEFAULT_DEMO_LAYOUTS = tuple(layout for layout in LAYOUT_STYLES if layout != LAYOUT_AUTO)
DEFAULT_DEMO_THEMES = ("light", "dark")
DEPTH_VARIATIONS: Tuple[Optional[int], ...] = (1, 2, 3, 4, None)


@dataclass
class DemoReport:
    """Counts and failures of one generation run."""

    generated: List[str] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.generated) + len(self.failures)


def make_timestamp(now: Optional[datetime] = None) -> str:
    """Timestamp used in demo file names, e.g. 03-15-2025-1430."""
    return (now or datetime.now()).strftime("%m-%d-%Y-%H%M")


def discover_models(models_dir: str, selected: Optional[Sequence[str]] = None) -> List[str]:
    """Return the model directories to render, sorted by name.

    Args:
        models_dir: Directory holding one sub directory per model project
        selected: Optional model names to restrict the run to

    Returns:
        List of model names

    Raises:
        ArgumentError: If models_dir is missing or a selected model does not exist
    """
    if not os.path.isdir(models_dir):
        raise ArgumentError(f"Models directory not found: {models_dir}")

    available = sorted(entry.name for entry in os.scandir(models_dir) if entry.is_dir() and not entry.name.startswith("."))
    if not selected:
        return available

    missing = [name for name in selected if name not in available]
    if missing:
        raise ArgumentError(f"Unknown model(s): {', '.join(missing)}")
    return list(selected)


def plan_variations(
    model: str, layouts: Sequence[str], directions: Sequence[str], themes: Sequence[str], timestamp: str
) -> List[Tuple[str, VisualizerOptions]]:
    """List (label, options) pairs for one model: layout combinations first, then depth variations."""
    variations: List[Tuple[str, VisualizerOptions]] = []

    for layout in layouts:
        for direction in directions:
            for theme in themes:
                output = f"{model}-{layout}-{direction}-{theme}-{timestamp}.svg"
                options = VisualizerOptions(output=output, layout=layout, direction=direction, theme=theme)
                variations.append((f"{layout} + {direction} + {theme}", options))

    for depth in DEPTH_VARIATIONS:
        depth_name = "infinite" if depth is None else str(depth)
        output = f"{model}-depth{depth_name}-{timestamp}.svg"
        variations.append((f"depth {depth_name}", VisualizerOptions(output=output, depth=depth)))

    return variations


def generate_demos(
    models_dir: str,
    models: Sequence[str],
    output_dir: str,
    layouts: Sequence[str] = DEFAULT_DEMO_LAYOUTS,
    directions: Sequence[str] = (DIRECTION_HORIZONTAL,),
    themes: Sequence[str] = DEFAULT_DEMO_THEMES,
    timestamp: Optional[str] = None,
    quiet: bool = True,
) -> DemoReport:
    """Render all variations of every model into output_dir.

    Args:
        models_dir: Directory holding the model projects
        models: Model names (sub directories of models_dir)
        output_dir: Directory receiving the SVG files
        layouts: Layout styles to render
        directions: Growth directions to render
        themes: Themes to render
        timestamp: Timestamp for the file names (default: now)
        quiet: Suppress the per-run console report

    Returns:
        DemoReport with generated paths and failures
    """
    timestamp = timestamp or make_timestamp()
    report = DemoReport()

    for model in models:
        model_path = os.path.join(models_dir, model)
        print(f"\n{Colors.BLUE}Processing model: {model}{Colors.RESET}")

        for label, options in plan_variations(model, layouts, directions, themes, timestamp):
            options.output_dir = output_dir
            options.show_progress = False
            sink = io.StringIO() if quiet else None
            try:
                with contextlib.redirect_stdout(sink) if sink is not None else contextlib.nullcontext():
                    result = analyze_and_visualize(model_path, options)
            except VisualizerError as e:
                logger.debug("Variation %s of %s failed", label, model, exc_info=True)
                message = display_name(str(e))
                print(f"  {Colors.RED}Failed: {label} - {message}{Colors.RESET}")
                report.failures.append((f"{model}: {label}", message))
                continue
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.warning("Unexpected error rendering %s of %s", label, model, exc_info=True)
                message = f"unexpected error: {display_name(str(e))}"
                print(f"  {Colors.RED}Failed: {label} - {message}{Colors.RESET}")
                report.failures.append((f"{model}: {label}", message))
                continue

            print(f"  {Colors.DIM}{label}{Colors.RESET}")
            report.generated.append(result.output_path)

    return report


def print_report(report: DemoReport, output_dir: str) -> None:
    print(f"\n{Colors.BRIGHT}{'=' * 80}{Colors.RESET}")
    print(f"{Colors.BRIGHT}DEMO GENERATION SUMMARY{Colors.RESET}")
    print(f"{Colors.BRIGHT}{'=' * 80}{Colors.RESET}\n")
    print(f"{Colors.GREEN}Examples generated: {len(report.generated)}{Colors.RESET}")
    if report.failures:
        print(f"{Colors.RED}Failures: {len(report.failures)}{Colors.RESET}")
        for name, message in report.failures:
            print(f"  • {name}: {message}")
    print(f"\nOutput directory: {output_dir}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Generate dependency diagrams for every layout, direction and theme",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ./models
  %(prog)s ./models --models small medium --themes dark
  %(prog)s ./models --layouts tree grid --directions horizontal vertical
        """,
    )
    parser.add_argument("models_dir", help="Directory containing one sub directory per model project")
    parser.add_argument("--models", nargs="+", metavar="NAME", help="Only render these models (default: all)")
    parser.add_argument("--output-dir", default=DEFAULT_DEMO_OUTPUT_DIR, help=f"Output directory (default: {DEFAULT_DEMO_OUTPUT_DIR})")
    parser.add_argument("--layouts", nargs="+", choices=LAYOUT_STYLES, default=list(DEFAULT_DEMO_LAYOUTS), help="Layouts to render")
    parser.add_argument("--directions", nargs="+", choices=DIRECTIONS, default=[DIRECTION_HORIZONTAL], help="Directions to render")
    parser.add_argument("--themes", nargs="+", choices=("auto", "light", "dark"), default=list(DEFAULT_DEMO_THEMES), help="Themes to render")
    parser.add_argument("--show-output", action="store_true", help="Show the console report of every run")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not should_use_color(no_color=args.no_color):
        Colors.disable()

    models = discover_models(args.models_dir, args.models)
    if not models:
        print_error(f"No model directories found in {args.models_dir}")
        return EXIT_INVALID_ARGS

    per_model = len(args.layouts) * len(args.directions) * len(args.themes) + len(DEPTH_VARIATIONS)
    print(f"{Colors.CYAN}Generating chart examples...{Colors.RESET}")
    print(f"{Colors.YELLOW}Models: {', '.join(models)}{Colors.RESET}")
    print(f"{Colors.YELLOW}Total estimated examples: {per_model * len(models)}{Colors.RESET}")

    report = generate_demos(
        args.models_dir,
        models,
        args.output_dir,
        layouts=args.layouts,
        directions=args.directions,
        themes=args.themes,
        quiet=not args.show_output,
    )
    print_report(report, args.output_dir)
    return EXIT_SUCCESS if not report.failures else EXIT_RUNTIME_ERROR


def cli_main() -> None:
    """Console script entry point: run main() and map errors to exit codes."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
    except VisualizerError as e:
        print_error(str(e))
        sys.exit(e.exit_code)
    except Exception as e:  # pylint: disable=broad-exception-caught
        print_error(f"Fatal error: {e}", prefix=False)
        sys.exit(EXIT_RUNTIME_ERROR)


if __name__ == "__main__":
    cli_main()
