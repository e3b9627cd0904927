#!/usr/bin/env python3
#****************************************************************************************************************************************************
#* BSD 3-Clause License
#*
#* Copyright (c) 2025, Mana Battery
#* All rights reserved.
#*
#* Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
#*
#* 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
#* 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
#*    documentation and/or other materials provided with the distribution.
#* 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
#*    software without specific prior written permission.
#*
#* THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
#* THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
#* CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
#* PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
#* LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
#* EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#****************************************************************************************************************************************************
"""Pytest configuration and shared fixtures for codeViz tests.

Sample projects are generated on disk under a fresh temporary directory:
- acyclic_project: small JavaScript/TypeScript project without cycles
- circular_project: CommonJS modules requiring each other
- typescript_project: tsconfig baseUrl/paths, re-exports, type and dynamic imports
- hidden_project: hidden directories and default-ignored folders

Graph fixtures build NetworkX graphs directly for the analysis functions.
"""

import os
import sys
import tempfile
import shutil
from pathlib import Path
from typing import Callable, Dict, Generator, List, Tuple
import networkx as nx
import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


def write_project(root: str, files: Dict[str, str]) -> str:
    """Write relative path -> content into root and return root."""
    for rel_path, content in files.items():
        full_path = os.path.join(root, *rel_path.split("/"))
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "w", encoding="utf-8") as f:
            f.write(content)
    return root


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests.

    Scope: function (default)
    Use for: File I/O operations that need isolation
    """
    tmpdir = tempfile.mkdtemp(prefix="codeviz_test_")
    yield os.path.realpath(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def project_factory(temp_dir: str) -> Callable[..., str]:
    """Factory writing a project below temp_dir.

    Usage:
        root = project_factory({"src/a.js": "import './b';"}, name="app")
    """

    def factory(files: Dict[str, str], name: str = "project") -> str:
        return write_project(os.path.join(temp_dir, name), files)

    return factory


@pytest.fixture
def acyclic_project(project_factory: Callable[..., str]) -> str:
    """Four files, four imports, no cycles.

    index.js -> utils/math.js, index.js -> services/logger.js,
    services/logger.js -> utils/math.js, lib/helpers.ts -> utils/math.js
    """
    return project_factory(
        {
            "src/index.js": "import { add } from './utils/math.js';\nimport Logger from './services/logger';\n\nconsole.log(add(1, 2), Logger);\n",
            "src/utils/math.js": "export function add(a, b) {\n  return a + b;\n}\n",
            "src/services/logger.js": "const { add } = require('../utils/math');\n\nmodule.exports = class Logger {};\n",
            "lib/helpers.ts": "export * from '../src/utils/math';\n",
            "README.md": "# Sample\n",
        },
        name="acyclic",
    )


@pytest.fixture
def circular_project(project_factory: Callable[..., str]) -> str:
    """index.js requires moduleA.js; moduleA.js and moduleB.js require each other."""
    return project_factory(
        {
            "index.js": "const a = require('./moduleA');\n\na.run();\n",
            "moduleA.js": "const b = require('./moduleB');\n\nmodule.exports = { run: () => b.helper() };\n",
            "moduleB.js": "const a = require('./moduleA');\n\nmodule.exports = { helper: () => a };\n",
        },
        name="circular",
    )


@pytest.fixture
def typescript_project(project_factory: Callable[..., str]) -> str:
    """TypeScript project resolving '@app/*' through tsconfig paths.

    main.ts -> app/service.ts (path alias), types.d.ts (type import), app/index.ts (dynamic import)
    app/index.ts -> app/service.ts (re-export)
    """
    return project_factory(
        {
            "tsconfig.json": (
                "{\n"
                "  // module resolution\n"
                '  "compilerOptions": {\n'
                '    "baseUrl": ".",\n'
                '    "paths": { "@app/*": ["src/app/*"] },\n'
                "  },\n"
                "}\n"
            ),
            "src/main.ts": (
                "import { Service } from '@app/service';\n"
                "import type { Config } from './types';\n"
                "import fs from 'fs';\n"
                "\n"
                "const lazy = () => import('./app');\n"
                "export const service: Service = new Service({} as Config);\n"
            ),
            "src/types.d.ts": "export interface Config {\n  name?: string;\n}\n",
            "src/app/index.ts": "export { Service } from './service';\n",
            "src/app/service.ts": "export class Service {\n  constructor(config: unknown) {}\n}\n",
        },
        name="typescript",
    )


@pytest.fixture
def hidden_project(project_factory: Callable[..., str]) -> str:
    """One regular file plus files in a hidden folder, node_modules and dist."""
    return project_factory(
        {
            "src/app.js": "import pkg from 'pkg';\n",
            ".config/settings.js": "module.exports = {};\n",
            "node_modules/pkg/index.js": "module.exports = {};\n",
            "dist/bundle.js": "(function () {})();\n",
        },
        name="hidden",
    )


@pytest.fixture
def add_undecodable_file() -> Callable[[str], str]:
    """Factory adding a script named b"\\xff.js" (not valid UTF-8) to a directory.

    Skips the test on file systems that reject such names.
    """

    def factory(directory: str) -> str:
        path = os.path.join(os.fsencode(directory), b"\xff.js")
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write("export default 1;\n")
        except (OSError, ValueError):
            pytest.skip("file system rejects non-UTF-8 file names")
        return os.fsdecode(path)

    return factory


@pytest.fixture
def graph_root() -> str:
    """Fake absolute project root used by graph fixtures."""
    return os.path.join(os.sep, "proj")


@pytest.fixture
def simple_dag(graph_root: str) -> Tuple["nx.DiGraph[str]", List[str]]:
    """Acyclic graph: main -> a, main -> b, a -> c, b -> c.

    Returns:
        Tuple of (graph, [main, a, b, c] paths)
    """
    main, a, b, c = [os.path.join(graph_root, "src", name) for name in ("main.js", "a.js", "b.js", "c.js")]
    G: nx.DiGraph[str] = nx.DiGraph()
    G.add_nodes_from([main, a, b, c])
    G.add_edges_from([(main, a), (main, b), (a, c), (b, c)])
    return G, [main, a, b, c]


@pytest.fixture
def cyclic_graph(graph_root: str) -> Tuple["nx.DiGraph[str]", List[str]]:
    """Graph with a three-file cycle a -> b -> c -> a, entry main -> a and self-loop d -> d.

    Returns:
        Tuple of (graph, [main, a, b, c, d] paths)
    """
    main, a, b, c, d = [os.path.join(graph_root, "src", name) for name in ("main.js", "a.js", "b.js", "c.js", "d.js")]
    G: nx.DiGraph[str] = nx.DiGraph()
    G.add_nodes_from([main, a, b, c, d])
    G.add_edges_from([(main, a), (a, b), (b, c), (c, a), (d, d)])
    return G, [main, a, b, c, d]


@pytest.fixture(autouse=True)
def restore_colors() -> Generator[None, None, None]:
    """Undo Colors.disable() calls made by CLI code under test."""
    from vizlib.console_utils import Colors

    saved = {attr: getattr(Colors, attr) for attr in dir(Colors) if not attr.startswith("_") and attr != "disable"}
    yield
    for attr, value in saved.items():
        setattr(Colors, attr, value)
