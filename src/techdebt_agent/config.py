from __future__ import annotations
import copy, logging, os, yaml
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .errors import ErrorCategory, Result, TechDebtError, validation_error
from .signals import DebtType, Severity

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".techdebt.yml"

SUPPORTED_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs", ".mts", ".cts")

DEFAULT_CONFIG: Dict[str, Any] = {
    "extensions": [".js", ".ts", ".jsx", ".tsx"],
    "min_severity": "low",
    "skip_directories": [
        # version control, dependencies, build output, editor metadata
        ".git", "node_modules", "dist", "build", "out", "coverage", ".next", ".nuxt", ".vscode", ".idea",
    ],
    "thresholds": {
        "max_file_size": 2000,
        "max_line_count": 100,
        "complex_condition_length": 50,
    },
    "exclude": [],
    "respect_gitignore": False,
}


@dataclass(frozen=True)
class Thresholds:
    max_file_size: int = 2000
    max_line_count: int = 100
    complex_condition_length: int = 50


@dataclass(frozen=True)
class AnalysisConfiguration:
    directory: str
    extensions: Tuple[str, ...]
    include_types: Optional[Tuple[DebtType, ...]]  # None means every type
    min_severity: Severity
    skip_directories: Tuple[str, ...]
    thresholds: Thresholds
    exclude: Tuple[str, ...] = ()
    respect_gitignore: bool = False

    def selected_types(self) -> Tuple[DebtType, ...]:
        if self.include_types is None:
            return tuple(DebtType)
        return tuple(t for t in DebtType if t in self.include_types)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "directory": self.directory,
            "extensions": list(self.extensions),
            "includeTypes": [t.value for t in self.include_types] if self.include_types is not None else None,
            "minSeverity": self.min_severity.value,
            "skipDirectories": list(self.skip_directories),
            "thresholds": {
                "maxFileSize": self.thresholds.max_file_size,
                "maxLineCount": self.thresholds.max_line_count,
                "complexConditionLength": self.thresholds.complex_condition_length,
            },
        }


# keys whose lists extend the defaults instead of replacing them
UNION_KEYS = ("skip_directories",)
LIST_KEYS = ("extensions", "skip_directories", "exclude")


def check_layer(layer: Mapping[str, Any], source: str) -> None:
    """Reject values of the wrong shape before they are merged."""
    for key in LIST_KEYS:
        if key not in layer:
            continue
        value = layer[key]
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            raise validation_error(f"'{key}' in {source} must be a list of strings, got {value!r}", key=key)
    if "thresholds" in layer and not isinstance(layer["thresholds"], Mapping):
        raise validation_error(
            f"'thresholds' in {source} must be a mapping, got {layer['thresholds']!r}", key="thresholds"
        )
    if "respect_gitignore" in layer and not isinstance(layer["respect_gitignore"], bool):
        raise validation_error(
            f"'respect_gitignore' in {source} must be true or false, got {layer['respect_gitignore']!r}",
            key="respect_gitignore",
        )


def merge_config(base: Dict[str, Any], user: Mapping[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for k, v in user.items():
        if isinstance(v, Mapping) and isinstance(merged.get(k), dict):
            merged[k].update(v)
        elif k in UNION_KEYS and isinstance(merged.get(k), list):
            merged[k] = merged[k] + [x for x in v if x not in merged[k]]
        else:
            merged[k] = v
    return merged


def load_config(directory: str) -> Dict[str, Any]:
    """Read ``.techdebt.yml`` from the scan root; empty when the file is absent."""
    path = os.path.join(directory, CONFIG_FILENAME)
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            user = yaml.safe_load(f) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise TechDebtError(
            f"Invalid configuration file {path}: {e}",
            ErrorCategory.CONFIGURATION,
            context={"path": path},
        ) from e
    if not isinstance(user, dict):
        raise TechDebtError(
            f"Invalid configuration file {path}: expected a mapping at the top level",
            ErrorCategory.CONFIGURATION,
            context={"path": path},
        )
    logger.debug("Loaded %s with keys %s", path, sorted(user))
    return user


def _parse_severity(value: Any) -> Severity:
    try:
        return Severity(value)
    except ValueError:
        allowed = ", ".join(s.value for s in Severity)
        raise validation_error(f"Invalid severity '{value}'. Expected one of: {allowed}", severity=value) from None


def _parse_types(values: Iterable[Any]) -> Tuple[DebtType, ...]:
    types = []
    for value in values:
        try:
            t = DebtType(value)
        except ValueError:
            allowed = ", ".join(t.value for t in DebtType)
            raise validation_error(f"Invalid debt type '{value}'. Expected one of: {allowed}", type=value) from None
        if t not in types:
            types.append(t)
    return tuple(types)


def _parse_extensions(values: Iterable[Any]) -> Tuple[str, ...]:
    exts = []
    for value in values:
        if value not in SUPPORTED_EXTENSIONS:
            allowed = ", ".join(SUPPORTED_EXTENSIONS)
            raise validation_error(f"Unsupported file extension '{value}'. Expected one of: {allowed}", extension=value)
        if value not in exts:
            exts.append(value)
    return tuple(exts)


def _parse_thresholds(values: Mapping[str, Any]) -> Thresholds:
    known = set(DEFAULT_CONFIG["thresholds"])
    for key, value in values.items():
        if key not in known:
            raise validation_error(f"Unknown threshold '{key}'", threshold=key)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise validation_error(f"Threshold '{key}' must be a positive integer, got {value!r}", threshold=key)
    return Thresholds(**values)


def _check_directory(directory: str) -> None:
    if not os.path.exists(directory):
        raise validation_error(f"Directory does not exist: {directory}", directory=directory)
    if not os.path.isdir(directory):
        raise validation_error(f"Path is not a directory: {directory}", directory=directory)


def resolve_configuration(
    directory: Optional[str] = None,
    include_types: Optional[Iterable[str]] = None,
    severity: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Result[AnalysisConfiguration]:
    """Merge request parameters onto the defaults and validate the result.

    Precedence, lowest first: built-in defaults, ``overrides`` supplied by the
    hosting service, the project's ``.techdebt.yml``, request parameters.
    Bad input fails here, before anything is traversed.
    """
    try:
        min_severity = _parse_severity(severity) if severity is not None else None
        types = _parse_types(include_types) if include_types else None

        directory = os.path.abspath(directory or os.getcwd())
        _check_directory(directory)

        overrides = overrides or {}
        check_layer(overrides, "service defaults")
        project = load_config(directory)
        check_layer(project, CONFIG_FILENAME)

        data = merge_config(DEFAULT_CONFIG, overrides)
        data = merge_config(data, project)

        if min_severity is None:
            min_severity = _parse_severity(data["min_severity"])

        config = AnalysisConfiguration(
            directory=directory,
            extensions=_parse_extensions(data["extensions"]),
            include_types=types,
            min_severity=min_severity,
            skip_directories=tuple(data["skip_directories"]),
            thresholds=_parse_thresholds(data["thresholds"]),
            exclude=tuple(data.get("exclude") or ()),
            respect_gitignore=data.get("respect_gitignore", False),
        )
    except TechDebtError as e:
        return Result.fail(e)
    return Result.ok(config)
