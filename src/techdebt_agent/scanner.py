from __future__ import annotations
import logging, re
from dataclasses import replace
from typing import Callable, Dict, Iterator, List, Optional, Pattern

from .config import AnalysisConfiguration
from .discovery import discover_files, relative_path
from .errors import ErrorCategory, Result, TechDebtError
from .scoring import filter_findings, summarize
from .signals import DebtType, FileAnalysis, Severity, TechDebtFinding, TechDebtReport

logger = logging.getLogger(__name__)

MARKER_RE = re.compile(r"\b(TODO|FIXME|HACK|XXX|BUG)\b", re.I)
ANY_TYPE_RE = re.compile(r"(?::\s*|\bas\s+)any\b")
CONSOLE_RE = re.compile(r"\bconsole\.(log|debug|info|warn|error)\s*\(")
VAR_RE = re.compile(r"\bvar\s+")
DEPRECATED_RE = re.compile(r"@deprecated|\.deprecated\b", re.I)
IF_OPEN_RE = re.compile(r"\bif\s*\(")


class Detector:
    """A presence test for one debt type: fires at most once per file."""

    def __init__(
        self,
        type: DebtType,
        severity: Severity,
        description: str,
        test: Callable[[str, AnalysisConfiguration], bool],
    ):
        self.type = type
        self.severity = severity
        self.description = description
        self.test = test

    def evaluate(self, content: str, config: AnalysisConfiguration) -> Optional[TechDebtFinding]:
        if self.test(content, config):
            return TechDebtFinding(type=self.type, description=self.description, severity=self.severity)
        return None


def _matches(pattern: Pattern[str]) -> Callable[[str, AnalysisConfiguration], bool]:
    return lambda content, _cfg: pattern.search(content) is not None


def if_conditions(content: str) -> Iterator[str]:
    """Yield the text between each ``if (`` and its matching ``)``.

    Conditions left unclosed at end of file are not yielded.
    """
    for m in IF_OPEN_RE.finditer(content):
        depth = 1
        for i in range(m.end(), len(content)):
            ch = content[i]
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    yield content[m.end():i]
                    break


def _has_complex_condition(content: str, config: AnalysisConfiguration) -> bool:
    limit = config.thresholds.complex_condition_length
    return any(len(cond) > limit for cond in if_conditions(content))


DETECTORS: Dict[DebtType, Detector] = {
    d.type: d
    for d in (
        Detector(DebtType.COMMENTS, Severity.MEDIUM, "Contains TODO/FIXME/HACK/XXX comments", _matches(MARKER_RE)),
        Detector(DebtType.TYPING, Severity.HIGH, "Uses 'any' type (TypeScript anti-pattern)", _matches(ANY_TYPE_RE)),
        Detector(DebtType.DEBUGGING, Severity.LOW, "Contains console.log statements", _matches(CONSOLE_RE)),
        Detector(DebtType.MODERNIZATION, Severity.MEDIUM, "Uses 'var' instead of 'let' or 'const'", _matches(VAR_RE)),
        Detector(
            DebtType.DEPRECATION, Severity.HIGH, "Uses deprecated APIs or marked as deprecated", _matches(DEPRECATED_RE)
        ),
        Detector(DebtType.COMPLEXITY, Severity.MEDIUM, "Contains complex conditional statements", _has_complex_condition),
    )
}


def count_lines(content: str) -> int:
    return content.count("\n") + 1


def size_finding(file_size: int, line_count: int, config: AnalysisConfiguration) -> Optional[TechDebtFinding]:
    t = config.thresholds
    if file_size > t.max_file_size and line_count > t.max_line_count:
        return TechDebtFinding(
            type=DebtType.SIZE,
            description=f"Large file ({line_count} lines): consider splitting into smaller modules",
            severity=Severity.MEDIUM,
        )
    return None


def evaluate_content(content: str, file_size: int, config: AnalysisConfiguration) -> List[TechDebtFinding]:
    findings: List[TechDebtFinding] = []
    for debt_type in config.selected_types():
        if debt_type is DebtType.SIZE:
            finding = size_finding(file_size, count_lines(content), config)
        else:
            finding = DETECTORS[debt_type].evaluate(content, config)
        if finding is not None:
            findings.append(finding)
    return findings


def analyze_file(path: str, config: AnalysisConfiguration) -> Result[FileAnalysis]:
    """Run the selected detectors over one file.

    Severity filtering is left to the caller; every finding is returned.
    """
    rel = relative_path(path, config.directory)
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as e:
        return Result.fail(
            TechDebtError(
                f"Error reading file {rel}: {e.strerror or e}",
                ErrorCategory.ANALYSIS,
                recoverable=True,
                context={"errno": e.errno},
                file_path=rel,
            )
        )

    try:
        content = raw.decode("utf-8")
        findings = evaluate_content(content, len(raw), config)
    except Exception as e:
        logger.debug("Analysis of %s failed", rel, exc_info=True)
        return Result.fail(
            TechDebtError(
                f"Error analyzing file {rel}: {type(e).__name__}: {e}",
                ErrorCategory.ANALYSIS,
                recoverable=True,
                context={"exception": type(e).__name__},
                file_path=rel,
            )
        )

    return Result.ok(
        FileAnalysis(
            file_path=rel,
            findings=tuple(findings),
            file_size=len(raw),
            line_count=count_lines(content),
        )
    )


def scan_directory(config: AnalysisConfiguration) -> Result[TechDebtReport]:
    """Discover, analyze and aggregate one directory tree into a report."""
    discovered = discover_files(config)
    if discovered.error is not None:
        return Result.fail(discovered.error)
    found = discovered.unwrap()
    files = found.files
    errors: List[TechDebtError] = list(found.errors)

    logger.info("Scanning %d files under %s", len(files), config.directory)

    analyses: List[FileAnalysis] = []
    for path in files:
        result = analyze_file(path, config)
        err = result.error
        if err is not None:
            if not err.recoverable:
                return Result.fail(err)
            logger.warning("%s", err.message)
            errors.append(err)
            continue

        analysis = result.unwrap()
        kept = filter_findings(analysis.findings, config.min_severity)
        if not kept:
            continue
        analyses.append(replace(analysis, findings=tuple(kept)))

    summary = summarize(len(files), analyses, len(errors))
    logger.info(
        "Found %d findings in %d of %d files (%d errors)",
        summary.total_findings,
        summary.files_with_findings,
        summary.total_files,
        summary.error_count,
    )
    return Result.ok(
        TechDebtReport(
            summary=summary,
            file_analyses=tuple(analyses),
            errors=tuple(errors),
            configuration=config,
        )
    )
