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
"""Shared constants for the codeViz tools.

This module centralizes file discovery rules, color palettes, SVG geometry,
layout names, console messages, exit codes and the exception hierarchy used
across the visualizer so every stage agrees on the same defaults.
"""

from typing import Dict, Iterable

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 1
EXIT_RUNTIME_ERROR = 2
EXIT_KEYBOARD_INTERRUPT = 130

# =============================================================================
# File Discovery
# =============================================================================

# Source files analyzed for imports
RELEVANT_EXTENSIONS = frozenset({".js", ".mjs", ".cjs", ".jsx", ".ts", ".tsx"})

# Directory or file names skipped unless hidden entries are requested
DEFAULT_IGNORE = frozenset({"node_modules", ".git", ".vscode", "dist", "build"})

# Probing order when an import specifier has no extension
RESOLUTION_EXTENSIONS = (".ts", ".tsx", ".d.ts", ".js", ".jsx", ".mjs", ".cjs")

# JavaScript extensions that may be written for a TypeScript source (./a.js -> a.ts)
JS_TO_TS_EXTENSIONS: Dict[str, tuple] = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}

TSCONFIG_FILENAME = "tsconfig.json"

FILE_TYPE_MAPPINGS: Dict[str, tuple] = {
    "script": (
        ".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs", ".py", ".rb", ".php", ".java",
        ".c", ".cpp", ".cs", ".go", ".rs", ".sh", ".bash", ".zsh", ".fish", ".ps1",
    ),
    "style": (".css", ".scss", ".sass", ".less", ".styl", ".stylus"),
    "image": (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".ico", ".bmp", ".tiff", ".tif"),
    "multimedia": (".mp4", ".mp3", ".wav", ".ogg", ".webm", ".avi", ".mov", ".mkv", ".flv", ".m4a", ".flac"),
}

# =============================================================================
# Colors
# =============================================================================

# Light to dark gradients, indexed by relative depth
DEPTH_COLOR_PALETTE: Dict[str, tuple] = {
    "blue": ("#f5fbff", "#d6ecff", "#a4cdfe", "#7dabf8", "#6c8eef", "#5469d4", "#3d4eac", "#2f3d89", "#212d63", "#131f41"),
    "cyan": ("#edfdfd", "#c4f1f9", "#7fd3ed", "#4db7e8", "#3a97d4", "#067ab8", "#075996", "#06457a", "#093353", "#042235"),
    "green": ("#efffed", "#cbf4c9", "#85d996", "#33c27f", "#1ea672", "#09825d", "#0e6245", "#0d4b3b", "#0b3733", "#082429"),
    "purple": ("#f8f9fe", "#e6e6fc", "#c7c2ea", "#b0a1e1", "#9c82db", "#8260c3", "#61469b", "#4b3480", "#352465", "#1f184e"),
    "violet": ("#fff8fe", "#fce0f6", "#f0b4e4", "#e28ddc", "#c96ed0", "#a450b5", "#7b3997", "#5b2b80", "#401d6a", "#2d0f55"),
    "red": ("#fff8f5", "#fde2dd", "#fbb5b2", "#fa8389", "#ed5f74", "#cd3d64", "#a41c4e", "#80143f", "#5e1039", "#420828"),
    "orange": ("#fffaee", "#fee3c0", "#f8b886", "#f5925e", "#e56f4a", "#c44c34", "#9e2f28", "#7e1e23", "#5d161b", "#420e11"),
    "yellow": ("#fcf9e9", "#f8e5b9", "#efc078", "#e5993e", "#d97917", "#bb5504", "#983705", "#762b0b", "#571f0d", "#3a1607"),
    "grey": ("#f7fafc", "#e3e8ee", "#c1c9d2", "#a3acb9", "#8792a2", "#697386", "#4f566b", "#3c4257", "#2a2f45", "#1a1f36"),
}

FILE_TYPE_COLOR_MAP: Dict[str, str] = {
    "directory": "blue",
    "script": "green",
    "style": "purple",
    "image": "orange",
    "multimedia": "red",
    "default": "grey",
}

# One color per top-level directory, assigned in order by generate_directory_color_map()
DIRECTORY_COLOR_PALETTE: Dict[str, str] = {
    "async": "#3b82f6",
    "core": "#0ea5e9",
    "data": "#10b981",
    "dom": "#22c55e",
    "forms": "#f59e0b",
    "i18n": "#ea580c",
    "platform": "#a855f7",
    "reactive": "#ec4899",
    "resilience": "#ef4444",
    "services": "#64748b",
    "state": "#6b7280",
    "sync": "#737373",
    "types": "#495057",
    "utils": "#d97706",
    "default": "#8792a2",
}

# =============================================================================
# SVG Geometry
# =============================================================================

SVG_SHAPES: Dict[str, str] = {
    "star": "M0,-8 L2.4,-2.4 L8,0 L2.4,2.4 L0,8 L-2.4,2.4 L-8,0 L-2.4,-2.4 Z",
    "trapezoid": "M-6,-4 L6,-4 L4,4 L-4,4 Z",
    "tag": "M-8,-4 L4,-4 L8,0 L4,4 L-8,4 Z",
    "diamond": "M0,-8 L8,0 L0,8 L-8,0 Z",
}

SVG_ASPECT_RATIO = 16 / 9
SVG_MARGIN: Dict[str, int] = {"top": 120, "right": 350, "bottom": 120, "left": 150}
SVG_DEFAULT_WIDTH = 1800
SVG_LEVEL_HEIGHT = 80
SVG_NODE_RADIUS = 8
SVG_NODE_OFFSET = 12
SVG_CURVE_OFFSET = 120

LEGEND_X = 30
LEGEND_Y = 50
LEGEND_WIDTH = 250
LEGEND_ITEM_HEIGHT = 25
LEGEND_COLOR_BOX_SIZE = 12
LEGEND_SHAPE_SIZE = 16
LEGEND_SPACING = 8

# Space kept around the laid out content when cropping the canvas
CROP_PADDING = 40

# Label overlap separation is skipped above this many nodes
LABEL_ADJUST_NODE_LIMIT = 400

SHAPE_LEGEND: Dict[str, Dict[str, str]] = {
    "directory": {"name": "Directory/Folder", "description": "Contains other files/folders"},
    "script": {"name": "Script Files", "description": "JS, TS, Python, etc."},
    "style": {"name": "Stylesheet", "description": "CSS, SCSS, LESS files"},
    "image": {"name": "Image Files", "description": "PNG, JPG, SVG, etc."},
    "multimedia": {"name": "Media Files", "description": "Audio, Video files"},
    "default": {"name": "Other Files", "description": "Config, Data, etc."},
}

# =============================================================================
# Themes and Styles
# =============================================================================

THEMES = ("auto", "light", "dark")

THEME_VARIABLES: Dict[str, Dict[str, str]] = {
    "light": {
        "--bg-primary": "#f7fafc",
        "--text-primary": "#2a2f45",
        "--link-stroke": "#c1c9d2",
        "--cycle-stroke": "#cd3d64",
        "--dependency-stroke": "#067ab8",
        "--legend-bg": "rgba(255, 255, 255, 0.95)",
        "--legend-border": "#e2e8f0",
    },
    "dark": {
        "--bg-primary": "#1a1f36",
        "--text-primary": "#f7fafc",
        "--link-stroke": "#4f566b",
        "--cycle-stroke": "#ed5f74",
        "--dependency-stroke": "#4db7e8",
        "--legend-bg": "rgba(26, 31, 54, 0.95)",
        "--legend-border": "#4f566b",
    },
}

SVG_BASE_STYLES = """
  svg {
    background-color: var(--bg-primary);
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif;
    font-size: 12px;
  }

  .link {
    fill: none;
    stroke: var(--link-stroke);
    stroke-opacity: 0.6;
    stroke-width: 1px;
  }

  .dependency-link {
    stroke: var(--dependency-stroke);
    stroke-opacity: 0.8;
  }

  .cycle-link {
    stroke: var(--cycle-stroke) !important;
    stroke-width: 2px !important;
    stroke-opacity: 1;
  }

  .node-shape {
    stroke: none;
  }

  .node text {
    fill: var(--text-primary);
    paint-order: stroke;
    stroke: var(--bg-primary);
    stroke-width: 2px;
    stroke-linecap: butt;
    stroke-linejoin: miter;
  }

  .shape-directory,
  .shape-script,
  .shape-style,
  .shape-image,
  .shape-multimedia,
  .shape-default {
    fill: var(--color);
  }

  .legend {
    font-size: 14px;
  }

  .legend-title {
    font-size: 16px;
    font-weight: bold;
    fill: var(--text-primary);
  }

  .legend-background {
    fill: var(--legend-bg);
    stroke: var(--legend-border);
    stroke-width: 1px;
  }

  .legend-text {
    fill: var(--text-primary);
    font-size: 13px;
  }
"""

# =============================================================================
# Layouts
# =============================================================================

LAYOUT_AUTO = "auto"
LAYOUT_CIRCULAR = "circular"
LAYOUT_DIAGONAL = "diagonal"
LAYOUT_LINEAR = "linear"
LAYOUT_HORIZONTAL = "horizontal"
LAYOUT_VERTICAL = "vertical"
LAYOUT_TREE = "tree"
LAYOUT_GRID = "grid"

LAYOUT_STYLES = (
    LAYOUT_AUTO,
    LAYOUT_CIRCULAR,
    LAYOUT_DIAGONAL,
    LAYOUT_LINEAR,
    LAYOUT_HORIZONTAL,
    LAYOUT_VERTICAL,
    LAYOUT_TREE,
    LAYOUT_GRID,
)

LAYOUT_DESCRIPTIONS: Dict[str, str] = {
    LAYOUT_AUTO: "Automatically choose the best layout based on graph size and structure",
    LAYOUT_CIRCULAR: "Arrange nodes in concentric half-circles with depth levels",
    LAYOUT_DIAGONAL: "Stagger nodes diagonally, indenting each level",
    LAYOUT_LINEAR: "Arrange nodes in a straight line progression by depth",
    LAYOUT_HORIZONTAL: "Display nodes from left to right in horizontal bands",
    LAYOUT_VERTICAL: "Display nodes from top to bottom in vertical columns",
    LAYOUT_TREE: "Traditional tree layout with branching structure",
    LAYOUT_GRID: "Organize nodes in a regular grid pattern",
}

# Auto layout thresholds
AUTO_TREE_MAX_NODES = 10
AUTO_HORIZONTAL_ASPECT = 2.0
AUTO_CIRCULAR_MIN_DEPTH = 5

DIRECTION_HORIZONTAL = "horizontal"
DIRECTION_VERTICAL = "vertical"
DIRECTIONS = (DIRECTION_HORIZONTAL, DIRECTION_VERTICAL)

# =============================================================================
# Output Defaults
# =============================================================================

DEFAULT_OUTPUT_DIR = "tmp"
DEFAULT_OUTPUT_FILE = "dependency-graph.svg"
DEFAULT_LAYOUT = LAYOUT_AUTO
DEFAULT_DIRECTION = DIRECTION_HORIZONTAL
DEFAULT_THEME = "auto"

SUPPORTED_GRAPH_FORMATS = (".graphml", ".gexf", ".json", ".dot")

# =============================================================================
# Console Messages
# =============================================================================

MESSAGES: Dict[str, str] = {
    "INITIALIZING": "Codebase Visualizer Initializing...",
    "FINDING_FILES": "Finding source files...",
    "PARSING_FILES": "Parsing files and building dependency graph...",
    "DETECTING_CYCLES": "Detecting circular dependencies...",
    "GENERATING_SVG": "Generating SVG visualization...",
    "SUCCESS": "Success! Visualization saved to",
    "ERROR": "An unexpected error occurred:",
    "NO_FILES_ERROR": 'No source files found in "{root_dir}". Please specify a directory with JavaScript or TypeScript files.',
    "CYCLES_FOUND": "Found {count} circular dependenc(ies):",
    "NO_CYCLES": "No circular dependencies found.",
}


def generate_directory_color_map(directory_names: Iterable[str]) -> Dict[str, str]:
    """Assign a palette key to each directory name.

    Keys are handed out in palette order and wrap around when there are more
    directories than colors. The "default" entry is always present.

    Args:
        directory_names: Directory names in display order

    Returns:
        Mapping of directory name to DIRECTORY_COLOR_PALETTE key
    """
    palette_keys = [key for key in DIRECTORY_COLOR_PALETTE if key != "default"]
    color_map: Dict[str, str] = {}
    for index, name in enumerate(directory_names):
        color_map[name] = palette_keys[index % len(palette_keys)]
    color_map["default"] = "default"
    return color_map


# =============================================================================
# Exception Hierarchy
# =============================================================================


class VisualizerError(Exception):
    """Base exception for all codeViz errors.

    Attributes:
        message: Human-readable error message
        exit_code: Process exit code the CLI should use
    """

    def __init__(self, message: str, exit_code: int = EXIT_RUNTIME_ERROR):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class ValidationError(VisualizerError):
    """Raised when input validation fails (arguments, paths, etc)."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_INVALID_ARGS)


class DirectoryNotFoundError(ValidationError):
    """Raised when the directory to analyze does not exist."""


class NoSourceFilesError(ValidationError):
    """Raised when no JavaScript or TypeScript files were found."""

    def __init__(self, root_dir: str):
        super().__init__(MESSAGES["NO_FILES_ERROR"].format(root_dir=root_dir))
        self.root_dir = root_dir


class ArgumentError(ValidationError):
    """Raised when command-line arguments are invalid."""


class AnalysisError(VisualizerError):
    """Raised when analysis or processing operations fail."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_RUNTIME_ERROR)


class GraphBuildError(AnalysisError):
    """Raised when dependency graph construction fails."""


class RenderError(AnalysisError):
    """Raised when the SVG visualization cannot be produced."""


class ExportError(AnalysisError):
    """Raised when a graph export is requested in an unsupported format."""
