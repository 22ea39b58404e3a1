"""Tests for file discovery."""

import os
from pathlib import Path

from conftest import write_file
from techdebt_agent.discovery import discover_files, entry_error, is_skipped_directory
from techdebt_agent.errors import ErrorCategory


def _rel(files, root):
    return sorted(os.path.relpath(f, root).replace(os.sep, "/") for f in files)


def test_collects_matching_extensions(sample_project: Path, make_config):
    result = discover_files(make_config(sample_project))
    assert result.success
    assert _rel(result.data.files, sample_project) == ["src/clean.ts", "src/legacy.js", "src/main.ts"]
    assert result.data.errors == ()


def test_skip_list_and_hidden_directories(tmp_path: Path, make_config):
    for d in ("node_modules", ".git", "dist", "build", "coverage", ".hidden", "src/.secret"):
        write_file(tmp_path, f"{d}/x.js", "var a = 1;\n")
    write_file(tmp_path, "src/ok.jsx", "const a = 1;\n")
    write_file(tmp_path, "distribution/kept.tsx", "const a = 1;\n")

    files = _rel(discover_files(make_config(tmp_path)).data.files, tmp_path)

    assert files == ["distribution/kept.tsx", "src/ok.jsx"]


def test_extension_match_is_case_sensitive(tmp_path: Path, make_config):
    write_file(tmp_path, "upper.JS", "var a;\n")
    write_file(tmp_path, "lower.js", "var a;\n")
    write_file(tmp_path, "types.d.ts", "declare const a: any;\n")
    write_file(tmp_path, "notes.txt", "TODO\n")
    files = _rel(discover_files(make_config(tmp_path)).data.files, tmp_path)
    assert files == ["lower.js", "types.d.ts"]


def test_hidden_files_are_not_skipped(tmp_path: Path, make_config):
    write_file(tmp_path, ".eslintrc.js", "module.exports = {};\n")
    files = _rel(discover_files(make_config(tmp_path)).data.files, tmp_path)
    assert files == [".eslintrc.js"]


def test_empty_directory(tmp_path: Path, make_config):
    result = discover_files(make_config(tmp_path))
    assert result.success
    assert result.data.files == ()
    assert result.data.errors == ()


def test_depth_first_order(tmp_path: Path, make_config, monkeypatch):
    write_file(tmp_path, "a/x/deep.ts", "x\n")
    write_file(tmp_path, "a/y.ts", "x\n")
    write_file(tmp_path, "b.ts", "x\n")
    write_file(tmp_path, "c/z.ts", "x\n")

    real_scandir = os.scandir

    class SortedScandir:
        def __init__(self, path):
            with real_scandir(path) as it:
                self.entries = sorted(it, key=lambda e: e.name)

        def __enter__(self):
            return iter(self.entries)

        def __exit__(self, *exc):
            return False

    monkeypatch.setattr(os, "scandir", SortedScandir)

    files = discover_files(make_config(tmp_path)).data.files
    rel = [os.path.relpath(f, tmp_path).replace(os.sep, "/") for f in files]
    assert rel == ["a/x/deep.ts", "a/y.ts", "b.ts", "c/z.ts"]


def test_unreadable_subdirectory_is_recoverable(tmp_path: Path, make_config, fail_scandir):
    write_file(tmp_path, "src/ok.ts", "const a = 1;\n")
    write_file(tmp_path, "locked/hidden.ts", "const b = 2;\n")
    fail_scandir(tmp_path / "locked")

    result = discover_files(make_config(tmp_path))

    assert result.success
    assert _rel(result.data.files, tmp_path) == ["src/ok.ts"]
    assert len(result.data.errors) == 1
    err = result.data.errors[0]
    assert err.recoverable
    assert err.category is ErrorCategory.PERMISSION
    assert err.file_path == "locked"
    assert err.message.startswith("Error reading directory locked:")


def test_unreadable_root_is_fatal(tmp_path: Path, make_config, fail_scandir):
    write_file(tmp_path, "a.ts", "const a = 1;\n")
    config = make_config(tmp_path)
    fail_scandir(tmp_path)

    result = discover_files(config)

    assert not result.success
    assert result.error.category is ErrorCategory.FILESYSTEM
    assert not result.error.recoverable


def test_exclude_patterns(tmp_path: Path, make_config):
    write_file(tmp_path, ".techdebt.yml", "exclude: ['generated/', '*.min.js']\n")
    write_file(tmp_path, "generated/api.ts", "x\n")
    write_file(tmp_path, "lib/app.min.js", "x\n")
    write_file(tmp_path, "lib/app.js", "x\n")
    files = _rel(discover_files(make_config(tmp_path)).data.files, tmp_path)
    assert files == ["lib/app.js"]


def test_gitignore_only_when_enabled(tmp_path: Path, make_config):
    write_file(tmp_path, ".gitignore", "tmp/\n")
    write_file(tmp_path, "tmp/scratch.ts", "x\n")
    write_file(tmp_path, "src/app.ts", "x\n")

    assert _rel(discover_files(make_config(tmp_path)).data.files, tmp_path) == ["src/app.ts", "tmp/scratch.ts"]

    write_file(tmp_path, ".techdebt.yml", "respect_gitignore: true\n")
    assert _rel(discover_files(make_config(tmp_path)).data.files, tmp_path) == ["src/app.ts"]


def test_is_skipped_directory():
    skip = ("node_modules", "dist")
    assert is_skipped_directory("node_modules", skip)
    assert is_skipped_directory(".vscode", skip)
    assert not is_skipped_directory("src", skip)
    assert not is_skipped_directory("dist2", skip)


def test_project_skip_list_keeps_builtin_skips(tmp_path: Path, make_config):
    write_file(tmp_path, ".techdebt.yml", "skip_directories: ['vendor']\n")
    write_file(tmp_path, "node_modules/pkg/index.js", "var a;\n")
    write_file(tmp_path, "dist/out.js", "var a;\n")
    write_file(tmp_path, "vendor/lib.js", "var a;\n")
    write_file(tmp_path, "src/app.ts", "var a;\n")

    files = _rel(discover_files(make_config(tmp_path)).data.files, tmp_path)

    assert files == ["src/app.ts"]


def test_unreadable_gitignore_is_recoverable(tmp_path: Path, make_config):
    (tmp_path / ".gitignore").mkdir()
    write_file(tmp_path, ".techdebt.yml", "respect_gitignore: true\n")
    write_file(tmp_path, "src/app.ts", "var a;\n")

    result = discover_files(make_config(tmp_path))

    assert result.success
    assert _rel(result.data.files, tmp_path) == ["src/app.ts"]
    assert len(result.data.errors) == 1
    err = result.data.errors[0]
    assert err.recoverable
    assert err.file_path == ".gitignore"
    assert err.message.startswith("Error reading .gitignore")


def test_undecodable_gitignore_is_recoverable(tmp_path: Path, make_config):
    (tmp_path / ".gitignore").write_bytes(b"\xff\xfe tmp/\n")
    write_file(tmp_path, ".techdebt.yml", "respect_gitignore: true\n")
    write_file(tmp_path, "tmp/a.ts", "var a;\n")

    result = discover_files(make_config(tmp_path))

    assert result.success
    assert _rel(result.data.files, tmp_path) == ["tmp/a.ts"]
    assert result.data.errors[0].category is ErrorCategory.FILESYSTEM


def test_entry_error_wording_and_path():
    err = entry_error("src/broken.ts", OSError(5, "Input/output error"), "entry")
    assert err.message == "Error reading entry src/broken.ts: Input/output error"
    assert err.file_path == "src/broken.ts"
    assert err.category is ErrorCategory.FILESYSTEM
    assert err.recoverable
