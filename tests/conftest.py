"""Pytest configuration and fixtures for impactgraph tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest

from impactgraph import ImpactAnalyzer


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def write_project(temp_dir: Path) -> Callable[[Dict[str, str]], Path]:
    """Write a mapping of relative path -> source text under the temp directory."""

    def _write(files: Dict[str, str]) -> Path:
        for relative_path, content in files.items():
            path = temp_dir / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return temp_dir

    return _write


@pytest.fixture
def sample_project(write_project) -> Path:
    """A small TypeScript project.

    utils/format.ts <- services/user.ts <- api/routes.ts <- index.ts
    utils/format.ts <- services/user.test.ts
    """
    return write_project({
        "src/utils/format.ts": (
            "export function formatName(first, last) {\n"
            "  return `${first} ${last}`;\n"
            "}\n"
            "export const SEPARATOR = ' ';\n"
            "export function legacyFormat(name) {\n"
            "  return name;\n"
            "}\n"
        ),
        "src/services/user.ts": (
            "import { formatName } from '../utils/format';\n"
            "import axios from 'axios';\n"
            "\n"
            "export class UserService {\n"
            "  display(u) { return formatName(u.first, u.last); }\n"
            "}\n"
        ),
        "src/services/user.test.ts": (
            "import { formatName, SEPARATOR } from '../utils/format';\n"
            "import { UserService } from './user';\n"
        ),
        "src/api/routes.ts": (
            "import { UserService } from '../services/user.js';\n"
            "export default function routes() {}\n"
        ),
        "src/index.ts": (
            "import routes from './api/routes';\n"
            "import './polyfills';\n"
        ),
        "node_modules/lib/index.js": "export const hidden = 1;\n",
        "README.md": "# sample\n",
    })


@pytest.fixture
def analyzer(sample_project: Path) -> ImpactAnalyzer:
    return ImpactAnalyzer(str(sample_project))


@pytest.fixture
def chain_project(write_project) -> Path:
    """moduleA <- moduleB <- moduleC."""
    return write_project({
        "moduleA.ts": "export function helper(x) {\n  return x;\n}\n",
        "moduleB.ts": "import { helper } from './moduleA';\nexport const b = helper(1);\n",
        "moduleC.ts": "import { b } from './moduleB';\nexport const c = b;\n",
    })
