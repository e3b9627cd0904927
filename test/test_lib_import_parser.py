#!/usr/bin/env python3
"""Tests for vizlib/import_parser.py"""

import os
from typing import Any, Callable, Dict

from vizlib.import_parser import (
    CompilerOptions,
    build_import_graph,
    extract_module_specifiers,
    find_tsconfig,
    load_tsconfig,
    resolve_module,
    strip_comments,
)
from vizlib.file_utils import find_source_files


def known(*paths: str) -> Dict[str, str]:
    return {os.path.normpath(path): path for path in paths}


class TestStripComments:
    """Tests for strip_comments function."""

    def test_line_and_block_comments(self) -> None:
        """Test comments are blanked out."""
        result = strip_comments("a // import './x'\n/* import './y' */b")
        assert "import" not in result
        assert result.startswith("a")
        assert result.endswith("b")

    def test_preserves_length_and_lines(self) -> None:
        """Test offsets and line breaks survive."""
        source = "x /* one\ntwo */ y // z\nw"
        result = strip_comments(source)
        assert len(result) == len(source)
        assert result.count("\n") == source.count("\n")

    def test_strings_are_kept(self) -> None:
        """Test comment markers inside strings are not comments."""
        source = "const url = 'http://example.com'; const s = \"/* not */\";"
        assert strip_comments(source) == source

    def test_regex_literals_are_kept(self) -> None:
        """Test a regex literal is copied through untouched."""
        source = "const re = /\\/*x/g; // tail\n"
        assert strip_comments(source) == "const re = /\\/*x/g;        \n"

    def test_quote_inside_regex_does_not_open_string(self) -> None:
        """Test a quote in a regex literal leaves later comment markers in strings alone."""
        source = "const clean = s => s.replace(/\"/g, '');\nconst pattern = \"lib/*\";\nimport a from './a';\n"
        assert strip_comments(source) == source


class TestExtractModuleSpecifiers:
    """Tests for extract_module_specifiers function."""

    def test_static_imports(self) -> None:
        """Test default, named, namespace, type-only and side-effect imports."""
        source = (
            "import React from 'react';\n"
            "import { a, b } from \"./ab\";\n"
            "import * as ns from './ns';\n"
            "import type { T } from './types';\n"
            "import './polyfill';\n"
            "import Default, { named } from '../both';\n"
        )
        assert extract_module_specifiers(source) == ["react", "./ab", "./ns", "./types", "./polyfill", "../both"]

    def test_multiline_import(self) -> None:
        """Test an import clause spanning lines."""
        source = "import {\n  first,\n  second,\n} from './multi';\n"
        assert extract_module_specifiers(source) == ["./multi"]

    def test_re_exports(self) -> None:
        """Test export-from forms."""
        source = "export * from './all';\nexport * as ns from './ns';\nexport { x as y } from './named';\nexport type { T } from './types';\n"
        assert extract_module_specifiers(source) == ["./all", "./ns", "./named", "./types"]

    def test_local_export_is_ignored(self) -> None:
        """Test an export without 'from' is not an import."""
        assert extract_module_specifiers("export const from = 1;\nexport { a };\n") == []

    def test_dynamic_import_and_require(self) -> None:
        """Test dynamic import() and require() with literal arguments."""
        source = "const lazy = () => import('./lazy');\nconst fs = require('fs');\nconst local = require(`./tpl`);\n"
        assert extract_module_specifiers(source) == ["./lazy", "fs", "./tpl"]

    def test_template_with_substitution_is_ignored(self) -> None:
        """Test computed template literals are skipped."""
        assert extract_module_specifiers("import(`./locale/${lang}`);") == []

    def test_commented_imports_are_ignored(self) -> None:
        """Test imports inside comments are not reported."""
        source = "// import './old';\n/* require('./gone') */\nimport './kept';\n"
        assert extract_module_specifiers(source) == ["./kept"]

    def test_member_access_is_not_an_import(self) -> None:
        """Test obj.require() and obj.import() are not imports."""
        assert extract_module_specifiers("loader.require('./x');\nthis.import('./y');\n") == []

    def test_unique_in_source_order(self) -> None:
        """Test duplicates are reported once at their first position."""
        source = "const b = require('./b');\nimport a from './a';\nimport again from './b';\n"
        assert extract_module_specifiers(source) == ["./b", "./a"]

    def test_regex_literals_do_not_hide_imports(self) -> None:
        """Test quotes and slashes inside regex literals do not swallow later imports."""
        source = (
            "const clean = s => s.replace(/\"/g, '');\n"
            "const pattern = \"lib/*\";\n"
            "const re = /[/\"]/;\n"
            "function f(s) { return /'/.test(s); }\n"
            "import a from './a';\n"
        )
        assert extract_module_specifiers(source) == ["./a"]

    def test_division_is_not_a_regex(self) -> None:
        """Test a slash after an operand is division."""
        source = "const half = total / 2; const s = \"a/*b\";\nimport x from './x';\n"
        assert extract_module_specifiers(source) == ["./x"]


class TestResolveModule:
    """Tests for resolve_module function."""

    def test_relative_with_extension_probing(self, temp_dir: str) -> None:
        """Test extension-less relative imports."""
        importer = os.path.join(temp_dir, "src", "index.js")
        target = os.path.join(temp_dir, "src", "util.ts")
        assert resolve_module("./util", importer, known(importer, target)) == target

    def test_exact_match(self, temp_dir: str) -> None:
        """Test an import naming the file exactly."""
        importer = os.path.join(temp_dir, "a.js")
        target = os.path.join(temp_dir, "lib", "b.js")
        assert resolve_module("./lib/b.js", importer, known(importer, target)) == target

    def test_js_extension_maps_to_ts(self, temp_dir: str) -> None:
        """Test './x.js' resolves to x.ts in TypeScript sources."""
        importer = os.path.join(temp_dir, "a.ts")
        target = os.path.join(temp_dir, "x.ts")
        assert resolve_module("./x.js", importer, known(importer, target)) == target

    def test_directory_index(self, temp_dir: str) -> None:
        """Test a directory import resolves to its index file."""
        importer = os.path.join(temp_dir, "main.js")
        target = os.path.join(temp_dir, "components", "index.jsx")
        assert resolve_module("./components", importer, known(importer, target)) == target

    def test_parent_directory(self, temp_dir: str) -> None:
        """Test '../' imports."""
        importer = os.path.join(temp_dir, "src", "deep", "a.js")
        target = os.path.join(temp_dir, "src", "b.js")
        assert resolve_module("../b", importer, known(importer, target)) == target

    def test_query_string_is_stripped(self, temp_dir: str) -> None:
        """Test '?query' suffixes are ignored."""
        importer = os.path.join(temp_dir, "a.js")
        target = os.path.join(temp_dir, "worker.js")
        assert resolve_module("./worker?worker", importer, known(importer, target)) == target

    def test_package_is_unresolved(self, temp_dir: str) -> None:
        """Test bare package names resolve to nothing without tsconfig."""
        importer = os.path.join(temp_dir, "a.js")
        assert resolve_module("react", importer, known(importer)) is None

    def test_unknown_relative_is_unresolved(self, temp_dir: str) -> None:
        """Test targets outside the analyzed set are not resolved."""
        importer = os.path.join(temp_dir, "a.js")
        assert resolve_module("./missing", importer, known(importer)) is None

    def test_paths_mapping(self, temp_dir: str) -> None:
        """Test tsconfig 'paths' wildcard mapping."""
        importer = os.path.join(temp_dir, "src", "main.ts")
        target = os.path.join(temp_dir, "src", "app", "service.ts")
        options = CompilerOptions(paths={"@app/*": ["src/app/*"]}, paths_base=temp_dir)
        assert resolve_module("@app/service", importer, known(importer, target), options) == target

    def test_longest_prefix_wins(self, temp_dir: str) -> None:
        """Test the most specific paths pattern is used."""
        importer = os.path.join(temp_dir, "main.ts")
        generic = os.path.join(temp_dir, "generic", "ui", "button.ts")
        specific = os.path.join(temp_dir, "ui", "button.ts")
        options = CompilerOptions(paths={"@/*": ["generic/*"], "@/ui/*": ["ui/*"]}, paths_base=temp_dir)
        assert resolve_module("@/ui/button", importer, known(importer, generic, specific), options) == specific

    def test_base_url(self, temp_dir: str) -> None:
        """Test non-relative imports resolved from baseUrl."""
        importer = os.path.join(temp_dir, "src", "main.ts")
        target = os.path.join(temp_dir, "src", "shared", "log.ts")
        options = CompilerOptions(base_url=os.path.join(temp_dir, "src"))
        assert resolve_module("shared/log", importer, known(importer, target), options) == target


class TestTsconfig:
    """Tests for find_tsconfig and load_tsconfig."""

    def test_find_upwards(self, typescript_project: str) -> None:
        """Test the nearest tsconfig.json is found from a sub directory."""
        found = find_tsconfig(os.path.join(typescript_project, "src", "app"))
        assert found == os.path.join(typescript_project, "tsconfig.json")

    def test_load_with_comments_and_trailing_commas(self, typescript_project: str) -> None:
        """Test JSON with comments is accepted."""
        options = load_tsconfig(typescript_project)
        assert options.base_url == typescript_project
        assert options.paths == {"@app/*": ["src/app/*"]}
        assert options.paths_base == typescript_project

    def test_missing_config(self, acyclic_project: str) -> None:
        """Test defaults without a tsconfig."""
        options = load_tsconfig(acyclic_project)
        assert options.base_url is None
        assert options.paths == {}

    def test_extends_chain(self, project_factory: Callable[..., str]) -> None:
        """Test settings are inherited and overridden through 'extends'."""
        root = project_factory(
            {
                "config/base.json": '{"compilerOptions": {"baseUrl": "../src", "paths": {"~/*": ["*"]}}}',
                "tsconfig.json": '{"extends": "./config/base", "compilerOptions": {"paths": {"#/*": ["lib/*"]}}}',
            },
            name="extends",
        )
        options = load_tsconfig(root)
        assert options.base_url == os.path.join(root, "src")
        assert options.paths == {"#/*": ["lib/*"]}

    def test_invalid_config_is_logged(self, project_factory: Callable[..., str], caplog: Any) -> None:
        """Test a broken tsconfig falls back to defaults with a warning."""
        root = project_factory({"tsconfig.json": "{ not json"}, name="broken")
        with caplog.at_level("WARNING"):
            options = load_tsconfig(root)
        assert options.base_url is None
        assert "Could not read" in caplog.text


class TestBuildImportGraph:
    """Tests for build_import_graph function."""

    def test_acyclic_project(self, acyclic_project: str) -> None:
        """Test resolved imports of the sample project."""
        files = find_source_files(acyclic_project)
        graph = build_import_graph(files, acyclic_project)

        def p(rel: str) -> str:
            return os.path.join(acyclic_project, *rel.split("/"))

        assert graph[p("src/index.js")] == [p("src/utils/math.js"), p("src/services/logger.js")]
        assert graph[p("src/services/logger.js")] == [p("src/utils/math.js")]
        assert graph[p("lib/helpers.ts")] == [p("src/utils/math.js")]
        assert graph[p("src/utils/math.js")] == []

    def test_typescript_project(self, typescript_project: str) -> None:
        """Test path aliases, type imports, dynamic imports and re-exports."""
        files = find_source_files(typescript_project)
        graph = build_import_graph(files, typescript_project)

        def p(rel: str) -> str:
            return os.path.join(typescript_project, *rel.split("/"))

        assert graph[p("src/main.ts")] == [p("src/app/service.ts"), p("src/types.d.ts"), p("src/app/index.ts")]
        assert graph[p("src/app/index.ts")] == [p("src/app/service.ts")]

    def test_every_file_has_an_entry(self, hidden_project: str) -> None:
        """Test files without resolvable imports map to an empty list."""
        files = find_source_files(hidden_project)
        assert build_import_graph(files, hidden_project) == {files[0]: []}

    def test_unreadable_file_is_logged(self, temp_dir: str, caplog: Any) -> None:
        """Test a missing file keeps an empty entry."""
        missing = os.path.join(temp_dir, "gone.js")
        with caplog.at_level("WARNING"):
            graph = build_import_graph([missing], temp_dir)
        assert graph == {missing: []}
        assert "Could not read" in caplog.text
