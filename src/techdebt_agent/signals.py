from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional, Tuple


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.LOW: 1, Severity.MEDIUM: 2, Severity.HIGH: 3}


class DebtType(str, Enum):
    # declaration order is the detector evaluation order
    COMMENTS = "comments"
    TYPING = "typing"
    DEBUGGING = "debugging"
    MODERNIZATION = "modernization"
    DEPRECATION = "deprecation"
    COMPLEXITY = "complexity"
    SIZE = "size"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TechDebtFinding:
    type: DebtType
    description: str
    severity: Severity
    line_number: Optional[int] = None
    column_number: Optional[int] = None
    code_snippet: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type.value,
            "description": self.description,
            "severity": self.severity.value,
        }
        if self.line_number is not None:
            data["lineNumber"] = self.line_number
        if self.column_number is not None:
            data["columnNumber"] = self.column_number
        if self.code_snippet is not None:
            data["codeSnippet"] = self.code_snippet
        return data


@dataclass(frozen=True)
class FileAnalysis:
    file_path: str  # relative to the scan root, "/"-separated
    findings: Tuple[TechDebtFinding, ...]
    file_size: int
    line_count: int
    analyzed_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filePath": self.file_path,
            "findings": [f.to_dict() for f in self.findings],
            "fileSize": self.file_size,
            "lineCount": self.line_count,
            "analyzedAt": self.analyzed_at.isoformat(),
        }


@dataclass(frozen=True)
class AnalysisSummary:
    total_files: int
    files_with_findings: int
    total_findings: int
    findings_by_severity: Dict[str, int]
    findings_by_type: Dict[str, int]
    error_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalFiles": self.total_files,
            "filesWithFindings": self.files_with_findings,
            "totalFindings": self.total_findings,
            "findingsBySeverity": dict(self.findings_by_severity),
            "findingsByType": dict(self.findings_by_type),
            "errorCount": self.error_count,
        }


@dataclass(frozen=True)
class TechDebtReport:
    summary: AnalysisSummary
    file_analyses: Tuple[FileAnalysis, ...]
    errors: Tuple[Any, ...]  # TechDebtError
    configuration: Any  # AnalysisConfiguration
    generated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "fileAnalyses": [a.to_dict() for a in self.file_analyses],
            "errors": [e.to_dict() for e in self.errors],
            "configuration": self.configuration.to_dict(),
            "generatedAt": self.generated_at.isoformat(),
        }
