from __future__ import annotations
import logging, os
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from pathspec import PathSpec

from .config import AnalysisConfiguration
from .errors import ErrorCategory, Result, TechDebtError, os_error_category

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveryResult:
    files: Tuple[str, ...]
    errors: Tuple[TechDebtError, ...]


def relative_path(path: str, root: str) -> str:
    return os.path.relpath(path, root).replace(os.sep, "/")


def load_gitignore(root: str) -> List[str]:
    path = os.path.join(root, ".gitignore")
    if not os.path.exists(path):
        return []
    with open(path, "r", encoding="utf-8") as f:
        return f.read().splitlines()


def build_ignore_spec(config: AnalysisConfiguration, errors: List[TechDebtError]) -> Optional[PathSpec]:
    """Combine ``exclude`` patterns and, when enabled, the root ``.gitignore``.

    An unreadable ``.gitignore`` is recorded in ``errors`` and its patterns
    are left out.
    """
    lines: List[str] = list(config.exclude)
    if config.respect_gitignore:
        try:
            lines.extend(load_gitignore(config.directory))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Ignoring unreadable .gitignore in %s: %s", config.directory, e)
            category = os_error_category(e) if isinstance(e, OSError) else ErrorCategory.FILESYSTEM
            errors.append(
                TechDebtError(
                    f"Error reading .gitignore: {getattr(e, 'strerror', None) or e}",
                    category,
                    recoverable=True,
                    context={"exception": type(e).__name__},
                    file_path=".gitignore",
                )
            )
    if not lines:
        return None
    return PathSpec.from_lines("gitwildmatch", lines)


def is_skipped_directory(name: str, skip: Tuple[str, ...]) -> bool:
    return name in skip or name.startswith(".")


def _open_directory(path: str) -> Iterator[os.DirEntry]:
    # read eagerly so a failure is raised here, not mid-iteration
    with os.scandir(path) as it:
        return iter(list(it))


def discover_files(config: AnalysisConfiguration) -> Result[DiscoveryResult]:
    """Collect source files under ``config.directory``, depth first.

    Files come back in directory enumeration order at each level, which is
    platform dependent and not sorted. Unreadable subdirectories are skipped
    and reported as recoverable errors; an unreadable root fails the whole
    discovery.
    """
    root = config.directory
    skip = config.skip_directories
    exts = set(config.extensions)

    try:
        stack = [_open_directory(root)]
    except OSError as e:
        logger.error("Cannot read root directory %s: %s", root, e)
        return Result.fail(
            TechDebtError(
                f"Error reading directory {root}: {e.strerror or e}",
                ErrorCategory.FILESYSTEM,
                recoverable=False,
                context={"errno": e.errno},
                file_path=root,
            )
        )

    files: List[str] = []
    errors: List[TechDebtError] = []
    ignore = build_ignore_spec(config, errors)

    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        rel = relative_path(entry.path, root)
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = not is_dir and entry.is_file()
        except OSError as e:
            logger.warning("Skipping unreadable entry %s: %s", entry.path, e)
            errors.append(entry_error(rel, e, "entry"))
            continue

        if is_dir:
            if is_skipped_directory(entry.name, skip):
                continue
            if ignore is not None and ignore.match_file(rel + "/"):
                continue
            try:
                stack.append(_open_directory(entry.path))
            except OSError as e:
                logger.warning("Skipping unreadable directory %s: %s", entry.path, e)
                errors.append(entry_error(rel, e, "directory"))
        elif is_file:
            _, ext = os.path.splitext(entry.name)
            if ext not in exts:
                continue
            if ignore is not None and ignore.match_file(rel):
                continue
            files.append(entry.path)

    logger.debug("Discovered %d files under %s (%d errors)", len(files), root, len(errors))
    return Result.ok(DiscoveryResult(files=tuple(files), errors=tuple(errors)))


def entry_error(rel: str, e: OSError, kind: str) -> TechDebtError:
    """Recoverable error for a directory or entry below the root."""
    return TechDebtError(
        f"Error reading {kind} {rel}: {e.strerror or e}",
        os_error_category(e),
        recoverable=True,
        context={"errno": e.errno},
        file_path=rel,
    )
