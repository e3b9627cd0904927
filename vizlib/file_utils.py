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
"""File discovery, filtering and path helpers for codeViz.

Functions here walk the target directory, apply the hidden/ignore and depth
rules, classify files by type and derive the top-level directory groups that
drive node coloring.
"""

import os
import math
import fnmatch
import logging
from collections import defaultdict
from typing import DefaultDict, Dict, Iterable, List, Optional, Tuple

from vizlib.constants import (
    DEFAULT_IGNORE,
    DEFAULT_OUTPUT_DIR,
    DEPTH_COLOR_PALETTE,
    DIRECTORY_COLOR_PALETTE,
    FILE_TYPE_COLOR_MAP,
    FILE_TYPE_MAPPINGS,
    RELEVANT_EXTENSIONS,
    NoSourceFilesError,
)

logger = logging.getLogger(__name__)


def find_source_files(directory: str, depth: Optional[int] = None, hidden: bool = False, exclude_patterns: Optional[List[str]] = None) -> List[str]:
    """Recursively collect JavaScript/TypeScript source files.

    The root directory is level 0 and a directory is only read while its level
    is below ``depth``, so ``depth=1`` yields the files directly inside the root.

    Args:
        directory: Directory to scan
        depth: Maximum directory depth to descend into (None = unlimited)
        hidden: Include hidden entries and the default ignore list (node_modules, dist, ...)
        exclude_patterns: Optional glob patterns matched against root-relative paths

    Returns:
        Absolute file paths in walk order (entries visited alphabetically)
    """
    root = os.path.abspath(directory)
    found: List[str] = []

    def recurse(current_dir: str, level: int) -> None:
        if depth is not None and level >= depth:
            return

        try:
            with os.scandir(current_dir) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.warning("Error reading directory %s: %s", current_dir, e)
            return

        for entry in entries:
            if not hidden and (entry.name.startswith(".") or entry.name in DEFAULT_IGNORE):
                continue

            # Symlinks are never followed
            try:
                if entry.is_symlink():
                    logger.debug("Skipping symlink %s", entry.path)
                elif entry.is_dir(follow_symlinks=False):
                    recurse(entry.path, level + 1)
                elif entry.is_file(follow_symlinks=False) and os.path.splitext(entry.name)[1] in RELEVANT_EXTENSIONS:
                    found.append(entry.path)
            except OSError as e:
                logger.debug("Skipping %s: %s", entry.path, e)

    recurse(root, 0)
    logger.debug("Found %s source files under %s", len(found), root)

    if exclude_patterns:
        found, _, unmatched = exclude_files_by_patterns(found, exclude_patterns, root)
        for pattern in unmatched:
            logger.warning("Exclude pattern '%s' matched no files", pattern)

    return found


def exclude_files_by_patterns(files: List[str], exclude_patterns: List[str], root_dir: str) -> Tuple[List[str], int, List[str]]:
    """Exclude files matching any of the provided glob patterns.

    Patterns are matched with fnmatch against the path relative to root_dir,
    so ``*`` also crosses directory separators.

    Args:
        files: File paths
        exclude_patterns: Glob patterns to exclude (e.g., ["*.test.ts", "legacy/*"])
        root_dir: Root directory of the analyzed project

    Returns:
        Tuple of (kept_files, excluded_count, patterns_with_no_matches)
    """
    if not exclude_patterns:
        return list(files), 0, []

    kept: List[str] = []
    pattern_match_counts: Dict[str, int] = {pattern: 0 for pattern in exclude_patterns}

    for path in files:
        rel_path = os.path.relpath(path, root_dir).replace(os.sep, "/")
        excluded = False
        for pattern in exclude_patterns:
            if fnmatch.fnmatch(rel_path, pattern):
                excluded = True
                pattern_match_counts[pattern] += 1
                break

        if not excluded:
            kept.append(path)

    excluded_count = len(files) - len(kept)
    patterns_with_no_matches = [pattern for pattern, count in pattern_match_counts.items() if count == 0]

    logger.info("Excluded %s files using %s patterns", excluded_count, len(exclude_patterns))
    for pattern, count in pattern_match_counts.items():
        logger.debug("Pattern '%s' matched %s files", pattern, count)

    return kept, excluded_count, patterns_with_no_matches


def validate_source_files(files: List[str], root_dir: str) -> None:
    """Raise NoSourceFilesError when nothing was found to analyze."""
    if not files:
        raise NoSourceFilesError(root_dir)


def get_file_type(filename: Optional[str]) -> str:
    """Classify a file by extension.

    Args:
        filename: File name or path; empty for directories

    Returns:
        One of "directory", "script", "style", "image", "multimedia" or "default"
    """
    if not filename:
        return "directory"

    ext = os.path.splitext(filename)[1].lower()
    for file_type, extensions in FILE_TYPE_MAPPINGS.items():
        if ext in extensions:
            return file_type
    return "default"


def display_name(name: str) -> str:
    """Make a path or file name safe for UTF-8 output.

    Undecodable bytes in file names reach Python as surrogate escapes, which
    UTF-8 encoders reject; they are shown as U+FFFD instead.
    """
    return name.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def extract_second_level_directories(paths: Iterable[str], root_dir: str) -> List[str]:
    """Return the directories directly under root_dir that contain analyzed files.

    Order is first appearance in ``paths``.
    """
    seen: Dict[str, None] = {}
    for path in paths:
        parts = _relative_parts(path, root_dir)
        if len(parts) >= 2:
            seen.setdefault(parts[0], None)
    return list(seen)


def group_files_by_directory(paths: Iterable[str], root_dir: str) -> Dict[str, List[str]]:
    """Group files by their top-level directory ("root" for files directly in root_dir)."""
    groups: DefaultDict[str, List[str]] = defaultdict(list)
    for path in paths:
        parts = _relative_parts(path, root_dir)
        groups[parts[0] if len(parts) >= 2 else "root"].append(path)
    return dict(groups)


def get_color_by_depth(
    depth: int,
    max_depth: int,
    file_type: str = "directory",
    path: Optional[str] = None,
    root_dir: Optional[str] = None,
    directory_color_map: Optional[Dict[str, str]] = None,
) -> str:
    """Pick the fill color of a node.

    Nodes inside a mapped top-level directory get that directory's single color.
    Everything else falls back to the file type gradient, darker with depth.

    Args:
        depth: Node depth (root = 0)
        max_depth: Maximum depth of the hierarchy
        file_type: Node file type
        path: Node path (enables directory coloring)
        root_dir: Analyzed root directory
        directory_color_map: Directory name -> DIRECTORY_COLOR_PALETTE key

    Returns:
        Hex color string
    """
    if directory_color_map and path and root_dir:
        parts = _relative_parts(path, root_dir)
        if parts and parts[0] in directory_color_map:
            palette_key = directory_color_map[parts[0]]
            return DIRECTORY_COLOR_PALETTE.get(palette_key, DIRECTORY_COLOR_PALETTE["default"])

    palette = DEPTH_COLOR_PALETTE[FILE_TYPE_COLOR_MAP.get(file_type, "grey")]
    index = min(math.floor(depth / max(max_depth, 1) * (len(palette) - 1)), len(palette) - 1)
    return palette[max(index, 0)]


def resolve_output_path(output: str, output_dir: str = DEFAULT_OUTPUT_DIR) -> str:
    """Place the output file inside output_dir unless it already is."""
    norm_dir = os.path.normpath(output_dir)
    norm_output = os.path.normpath(output)
    if norm_output == norm_dir or norm_output.startswith(norm_dir + os.sep):
        return output
    return os.path.join(output_dir, os.path.basename(output))


def ensure_output_directory(output_path: str) -> str:
    """Create the parent directory of output_path if needed and return it."""
    output_dir = os.path.dirname(output_path) or "."
    os.makedirs(output_dir, exist_ok=True)
    return output_dir


def _relative_parts(path: str, root_dir: str) -> List[str]:
    rel_path = os.path.relpath(path, root_dir)
    if rel_path == os.curdir:
        return []
    return rel_path.split(os.sep)
