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
"""Import extraction and module resolution for JavaScript/TypeScript sources.

Specifiers are pulled out of comment-stripped source text with regular
expressions and resolved to files of the analyzed set using Node/TypeScript
style rules: relative paths with extension probing, ``.js`` to ``.ts``
substitution, directory index files, and tsconfig ``baseUrl``/``paths``.
"""

import os
import re
import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from vizlib.constants import JS_TO_TS_EXTENSIONS, RESOLUTION_EXTENSIONS, TSCONFIG_FILENAME

logger = logging.getLogger(__name__)

# import x from "y" / import {a} from "y" / import type T from "y" / import "y"
_STATIC_IMPORT_RE = re.compile(r"(?<![.\w$])import\s+(?:[^'\";()]*?\bfrom\s*)?(['\"])([^'\"\n]+)\1")
# export * from "y" / export {a} from "y" / export type {T} from "y"
_EXPORT_FROM_RE = re.compile(r"(?<![.\w$])export\s+(?:type\s+)?(?:\*(?:\s+as\s+[\w$]+)?|\{[^}]*\})\s*from\s*(['\"])([^'\"\n]+)\1")
# import("y")
_DYNAMIC_IMPORT_RE = re.compile(r"(?<![.\w$])import\s*\(\s*(['\"`])([^'\"`\n]+)\1\s*\)")
# require("y") and import x = require("y")
_REQUIRE_RE = re.compile(r"(?<![.\w$])require\s*\(\s*(['\"`])([^'\"`\n]+)\1\s*\)")

_IMPORT_PATTERNS = (_STATIC_IMPORT_RE, _EXPORT_FROM_RE, _DYNAMIC_IMPORT_RE, _REQUIRE_RE)

_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")

# A "/" after one of these (or a keyword below) opens a regex literal
_REGEX_PRECEDERS = frozenset("(,=:[!&|?{};+-*%<>~^")
_REGEX_KEYWORDS = frozenset({"return", "typeof", "instanceof", "in", "of", "new", "delete", "void", "throw", "case", "do", "else", "yield", "await"})


@dataclass
class CompilerOptions:
    """Module resolution settings read from tsconfig.json.

    Attributes:
        base_url: Absolute baseUrl directory (None if not configured)
        paths: tsconfig "paths" mapping (pattern -> replacement list)
        paths_base: Directory the "paths" replacements are relative to
        config_path: tsconfig.json that provided the settings
    """

    base_url: Optional[str] = None
    paths: Dict[str, List[str]] = field(default_factory=dict)
    paths_base: Optional[str] = None
    config_path: Optional[str] = None


def strip_comments(source: str) -> str:
    """Remove // and /* */ comments, leaving string and template literals intact.

    Comment characters are replaced by spaces (newlines kept) so offsets and
    line numbers of the remaining code do not move.
    """
    out: List[str] = []
    i = 0
    n = len(source)
    quote: Optional[str] = None

    while i < n:
        ch = source[i]

        if quote:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(source[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
            i += 1
            continue

        if ch in ("'", '"', "`"):
            quote = ch
            out.append(ch)
            i += 1
            continue

        if ch == "/" and i + 1 < n:
            nxt = source[i + 1]
            if nxt == "/":
                end = source.find("\n", i)
                end = n if end == -1 else end
                out.append(" " * (end - i))
                i = end
                continue
            if nxt == "*":
                end = source.find("*/", i + 2)
                end = n if end == -1 else end + 2
                out.append("".join(c if c == "\n" else " " for c in source[i:end]))
                i = end
                continue
            if _regex_allowed(out):
                end = _find_regex_end(source, i)
                if end is not None:
                    out.append(source[i:end])
                    i = end
                    continue

        out.append(ch)
        i += 1

    return "".join(out)


def _regex_allowed(out: List[str]) -> bool:
    """True when a "/" after the already emitted code starts a regex literal, not a division."""
    j = len(out) - 1
    while j >= 0 and not out[j].strip():
        j -= 1
    if j < 0:
        return True

    last = out[j].rstrip()[-1]
    if last in _REGEX_PRECEDERS:
        return True
    if not (last.isalnum() or last in "_$"):
        return False

    word: List[str] = []
    while j >= 0 and len(out[j]) == 1 and (out[j].isalnum() or out[j] in "_$"):
        word.append(out[j])
        j -= 1
    return "".join(reversed(word)) in _REGEX_KEYWORDS


def _find_regex_end(source: str, start: int) -> Optional[int]:
    """Index just past the closing "/" of the regex literal at start, None if it is not one."""
    i = start + 1
    in_class = False
    while i < len(source):
        ch = source[i]
        if ch == "\n":
            return None
        if ch == "\\":
            i += 2
            continue
        if ch == "[":
            in_class = True
        elif ch == "]":
            in_class = False
        elif ch == "/" and not in_class:
            return i + 1
        i += 1
    return None


def extract_module_specifiers(source: str) -> List[str]:
    """Extract module specifiers from JavaScript/TypeScript source.

    Covers static imports (including type-only and side-effect imports),
    re-exports, dynamic ``import()`` with a literal argument and CommonJS
    ``require()``. Template literals with substitutions are ignored.

    Args:
        source: File content

    Returns:
        Unique specifiers in order of appearance
    """
    code = strip_comments(source)
    found: List[Tuple[int, str]] = []
    for pattern in _IMPORT_PATTERNS:
        for match in pattern.finditer(code):
            specifier = match.group(2).strip()
            if specifier and "${" not in specifier:
                found.append((match.start(), specifier))

    found.sort(key=lambda item: item[0])

    ordered: Dict[str, None] = {}
    for _, specifier in found:
        ordered.setdefault(specifier, None)
    return list(ordered)


def find_tsconfig(start_dir: str) -> Optional[str]:
    """Find the nearest tsconfig.json at or above start_dir."""
    current = os.path.abspath(start_dir)
    while True:
        candidate = os.path.join(current, TSCONFIG_FILENAME)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def _read_jsonc(path: str) -> Dict:
    with open(path, "r", encoding="utf-8") as f:
        text = strip_comments(f.read())
    return json.loads(_TRAILING_COMMA_RE.sub(r"\1", text))


def load_tsconfig(root_dir: str) -> CompilerOptions:
    """Load module resolution settings from the nearest tsconfig.json.

    A relative "extends" chain is followed; settings in the extending file
    win. A missing or unreadable config yields default (empty) options.

    Args:
        root_dir: Directory to start searching from

    Returns:
        CompilerOptions
    """
    config_path = find_tsconfig(root_dir)
    if config_path is None:
        logger.debug("No %s found for %s, using default resolution", TSCONFIG_FILENAME, root_dir)
        return CompilerOptions()

    options = CompilerOptions(config_path=config_path)
    seen: Set[str] = set()
    chain: List[Tuple[str, Dict]] = []
    current: Optional[str] = config_path

    while current and current not in seen:
        seen.add(current)
        try:
            data = _read_jsonc(current)
        except (IOError, OSError, ValueError) as e:
            logger.warning("Could not read %s: %s", current, e)
            break
        if not isinstance(data, dict):
            break
        chain.append((current, data))

        extends = data.get("extends")
        if isinstance(extends, str) and extends.startswith("."):
            current = os.path.normpath(os.path.join(os.path.dirname(current), extends))
            if not current.endswith(".json"):
                current += ".json"
        else:
            current = None

    # Apply from the base config outwards so the nearest file wins
    for path, data in reversed(chain):
        compiler = data.get("compilerOptions") or {}
        config_dir = os.path.dirname(path)
        if isinstance(compiler.get("baseUrl"), str):
            options.base_url = os.path.normpath(os.path.join(config_dir, compiler["baseUrl"]))
        if isinstance(compiler.get("paths"), dict):
            options.paths = {str(k): [str(t) for t in v] for k, v in compiler["paths"].items() if isinstance(v, list)}
            options.paths_base = options.base_url or config_dir

    if options.paths and options.paths_base is None:
        options.paths_base = os.path.dirname(config_path)

    logger.debug("Loaded %s (baseUrl=%s, %s path mappings)", config_path, options.base_url, len(options.paths))
    return options


def _match_path_pattern(pattern: str, specifier: str) -> Optional[str]:
    """Return the text matched by ``*`` (or "" for an exact pattern), None on mismatch."""
    if "*" not in pattern:
        return "" if pattern == specifier else None
    prefix, _, suffix = pattern.partition("*")
    if specifier.startswith(prefix) and specifier.endswith(suffix) and len(specifier) >= len(prefix) + len(suffix):
        return specifier[len(prefix) : len(specifier) - len(suffix)]
    return None


def _candidate_bases(specifier: str, importer: str, compiler_options: CompilerOptions) -> List[str]:
    if specifier.startswith("./") or specifier.startswith("../") or specifier in (".", ".."):
        return [os.path.normpath(os.path.join(os.path.dirname(importer), specifier))]

    if os.path.isabs(specifier):
        return [os.path.normpath(specifier)]

    bases: List[str] = []
    if compiler_options.paths and compiler_options.paths_base:
        # Longest prefix first, like the TypeScript compiler
        patterns = sorted(compiler_options.paths, key=lambda p: len(p.partition("*")[0]), reverse=True)
        for pattern in patterns:
            wildcard = _match_path_pattern(pattern, specifier)
            if wildcard is None:
                continue
            for target in compiler_options.paths[pattern]:
                bases.append(os.path.normpath(os.path.join(compiler_options.paths_base, target.replace("*", wildcard))))
            break

    if compiler_options.base_url:
        bases.append(os.path.normpath(os.path.join(compiler_options.base_url, specifier)))

    return bases


def _lookup_candidates(base: str, known_files: Dict[str, str]) -> Optional[str]:
    if base in known_files:
        return known_files[base]

    stem, ext = os.path.splitext(base)
    for ts_ext in JS_TO_TS_EXTENSIONS.get(ext, ()):
        if stem + ts_ext in known_files:
            return known_files[stem + ts_ext]

    for candidate_ext in RESOLUTION_EXTENSIONS:
        if base + candidate_ext in known_files:
            return known_files[base + candidate_ext]

    for candidate_ext in RESOLUTION_EXTENSIONS:
        index_file = os.path.join(base, "index" + candidate_ext)
        if index_file in known_files:
            return known_files[index_file]

    return None


def resolve_module(
    specifier: str,
    importer: str,
    known_files: Dict[str, str],
    compiler_options: Optional[CompilerOptions] = None,
) -> Optional[str]:
    """Resolve an import specifier to a file of the analyzed set.

    Args:
        specifier: Module specifier as written in the source
        importer: Absolute path of the importing file
        known_files: Normalized absolute path -> original path of every analyzed file
        compiler_options: tsconfig resolution settings

    Returns:
        Path of the imported file, or None for packages and unknown targets
    """
    if compiler_options is None:
        compiler_options = CompilerOptions()

    # Query strings and fragments are not part of the file name (e.g. "./style.css?inline")
    specifier = specifier.split("?", 1)[0].split("#", 1)[0]
    if not specifier:
        return None

    for base in _candidate_bases(specifier, importer, compiler_options):
        resolved = _lookup_candidates(base, known_files)
        if resolved is not None:
            return resolved
    return None


def build_import_graph(file_paths: List[str], root_dir: str) -> Dict[str, List[str]]:
    """Parse every file and map it to the analyzed files it imports.

    Only files contained in ``file_paths`` become targets, so the graph is
    closed over the input set. Unreadable files are logged and keep an empty
    import list.

    Args:
        file_paths: Absolute paths of the files to analyze
        root_dir: Root directory (used to locate tsconfig.json)

    Returns:
        Mapping of each file to its resolved imports, unique and in source order
    """
    known_files = {os.path.normpath(os.path.abspath(path)): path for path in file_paths}
    compiler_options = load_tsconfig(root_dir)
    import_graph: Dict[str, List[str]] = {path: [] for path in file_paths}

    for path in file_paths:
        try:
            with open(path, "r", encoding="utf-8", errors="ignore") as f:
                source = f.read()
        except (IOError, OSError) as e:
            logger.warning("Could not read %s: %s", path, e)
            continue

        importer = os.path.normpath(os.path.abspath(path))
        targets: Dict[str, None] = {}
        for specifier in extract_module_specifiers(source):
            resolved = resolve_module(specifier, importer, known_files, compiler_options)
            if resolved is not None:
                targets.setdefault(resolved, None)
            else:
                logger.debug("Unresolved import '%s' in %s", specifier, path)
        import_graph[path] = list(targets)

    total_edges = sum(len(deps) for deps in import_graph.values())
    logger.info("Built import graph with %s files and %s direct dependencies", len(import_graph), total_edges)
    return import_graph
