"""Pytest configuration and fixtures for the tech debt scanner tests."""

import os
import textwrap
from pathlib import Path
from typing import Callable

import pytest

from techdebt_agent.config import AnalysisConfiguration, resolve_configuration


def write_file(root: Path, rel: str, content: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture
def make_config() -> Callable[..., AnalysisConfiguration]:
    """Resolve a configuration, failing the test on a validation error."""

    def _make(directory, **kwargs) -> AnalysisConfiguration:
        return resolve_configuration(str(directory), **kwargs).unwrap()

    return _make


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """A small TypeScript/JavaScript project with known debt."""
    write_file(
        tmp_path,
        "src/main.ts",
        """\
        // TODO: Refactor this function to use proper types
        function processData(data: any): any {
          console.log("Processing data:", data);
          return data;
        }
        """,
    )
    write_file(
        tmp_path,
        "src/legacy.js",
        """\
        var total = 0;
        function add(x) {
          total += x;
          return total;
        }
        """,
    )
    write_file(
        tmp_path,
        "src/clean.ts",
        """\
        export const double = (n: number): number => n * 2;
        """,
    )
    write_file(tmp_path, "node_modules/pkg/index.js", "var leaked = 1; // TODO\n")
    write_file(tmp_path, ".cache/tmp.js", "console.log('hidden');\n")
    write_file(tmp_path, "README.md", "TODO: docs\n")
    return tmp_path


@pytest.fixture
def fail_scandir(monkeypatch):
    """Make ``os.scandir`` raise PermissionError for the given directories."""
    real_scandir = os.scandir

    def _install(*paths):
        blocked = {os.path.abspath(str(p)) for p in paths}

        def fake_scandir(path="."):
            if os.path.abspath(str(path)) in blocked:
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", fake_scandir)

    return _install
