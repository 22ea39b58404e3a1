from __future__ import annotations
from typing import Dict, Iterable, List, Sequence

from .signals import AnalysisSummary, FileAnalysis, Severity, TechDebtFinding


def meets_threshold(severity: Severity, minimum: Severity) -> bool:
    return severity.rank >= minimum.rank


def filter_findings(findings: Iterable[TechDebtFinding], minimum: Severity) -> List[TechDebtFinding]:
    return [f for f in findings if meets_threshold(f.severity, minimum)]


def sort_findings(findings: Iterable[TechDebtFinding]) -> List[TechDebtFinding]:
    # sorted() is stable, so equal severities keep detector order
    return sorted(findings, key=lambda f: f.severity.rank, reverse=True)


def summarize(total_files: int, analyses: Sequence[FileAnalysis], error_count: int) -> AnalysisSummary:
    by_severity: Dict[str, int] = {s.value: 0 for s in sorted(Severity, key=lambda s: s.rank, reverse=True)}
    by_type: Dict[str, int] = {}
    total = 0
    for analysis in analyses:
        for f in analysis.findings:
            total += 1
            by_severity[f.severity.value] += 1
            by_type[f.type.value] = by_type.get(f.type.value, 0) + 1
    return AnalysisSummary(
        total_files=total_files,
        files_with_findings=len(analyses),
        total_findings=total,
        findings_by_severity=by_severity,
        findings_by_type=by_type,
        error_count=error_count,
    )
